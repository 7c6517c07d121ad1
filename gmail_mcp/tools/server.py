"""MCP server exposing the read-only Gmail tools."""

import logging
from typing import Any, Protocol

from mcp.server.fastmcp import FastMCP

from gmail_mcp.tools.get_messages import GetMessages, GetMessagesService, HTMLConverter
from gmail_mcp.tools.preview_attachments import (
    PDFConverter,
    PreviewAttachments,
    PreviewAttachmentsService,
)
from gmail_mcp.tools.search_messages import SearchMessages, SearchMessagesService

logger = logging.getLogger(__name__)

SERVER_NAME = "gmail-mcp"


class GmailToolService(
    SearchMessagesService, GetMessagesService, PreviewAttachmentsService, Protocol
):
    """Everything the tools need from the mail provider."""


class ToolConverter(HTMLConverter, PDFConverter, Protocol):
    """Everything the tools need from the format converter."""


def build_server(
    svc: GmailToolService,
    conv: ToolConverter,
    host: str = "127.0.0.1",
    port: int = 8000,
) -> FastMCP:
    """Create a FastMCP server with search_messages, get_messages and preview_attachments.

    Tool errors propagate as exceptions; FastMCP reports them to the caller
    as failed tool calls.
    """
    server = FastMCP(SERVER_NAME, host=host, port=port)
    search = SearchMessages(svc)
    getter = GetMessages(svc, conv)
    previewer = PreviewAttachments(svc, conv)

    @server.tool(
        name="search_messages",
        description="Search Gmail messages using Gmail search syntax",
    )
    async def search_messages(
        query: str, max_results: int = 0, page_token: str = ""
    ) -> dict[str, Any]:
        result = await search.search_messages(query, max_results, page_token)
        return result.to_dict()

    @server.tool(
        name="get_messages",
        description="Get full message content for specified message IDs",
    )
    async def get_messages(message_ids: list[str]) -> dict[str, Any]:
        messages = await getter.get_messages(message_ids)
        return {"messages": [m.to_dict() for m in messages]}

    @server.tool(
        name="preview_attachments",
        description="Extract text content from attachments (PDFs, text files, etc)",
    )
    async def preview_attachments(
        message_id: str, attachment_ids: list[str]
    ) -> dict[str, Any]:
        previews = await previewer.preview_attachments(message_id, attachment_ids)
        return {"attachments": [p.to_dict() for p in previews]}

    logger.debug("Registered Gmail tools on %s", SERVER_NAME)
    return server

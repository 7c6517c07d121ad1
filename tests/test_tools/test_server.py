"""Tests for the MCP server wiring: tools are listed and called in-process."""

from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from mcp.server.fastmcp import FastMCP

from conftest import b64url
from gmail_mcp.tools.server import SERVER_NAME, build_server


@pytest.fixture
def svc(multipart_message: dict[str, Any]) -> MagicMock:
    svc = MagicMock()
    svc.list_messages = AsyncMock(return_value=(["msg_001"], ""))
    svc.get_message_metadata = AsyncMock(return_value=multipart_message)
    svc.get_message = AsyncMock(return_value=multipart_message)
    svc.get_attachment = AsyncMock(return_value=b64url("%PDF-1.4"))
    return svc


@pytest.fixture
def server(svc: MagicMock) -> FastMCP:
    conv = MagicMock()
    conv.html_to_markdown.return_value = "md"
    conv.pdf_to_text.return_value = "Budget: $10k"
    return build_server(svc, conv)


class TestBuildServer:
    def test_name(self, server: FastMCP) -> None:
        assert server.name == SERVER_NAME

    async def test_registers_three_tools(self, server: FastMCP) -> None:
        tools = await server.list_tools()
        assert sorted(t.name for t in tools) == [
            "get_messages", "preview_attachments", "search_messages",
        ]

    async def test_tool_schemas(self, server: FastMCP) -> None:
        tools = {t.name: t for t in await server.list_tools()}
        assert tools["search_messages"].inputSchema["required"] == ["query"]
        assert set(tools["preview_attachments"].inputSchema["required"]) == {
            "message_id", "attachment_ids",
        }
        assert "Gmail search syntax" in (tools["search_messages"].description or "")


class TestToolCalls:
    async def test_search_messages(self, server: FastMCP, svc: MagicMock) -> None:
        await server.call_tool("search_messages", {"query": "budget", "max_results": 99})
        svc.list_messages.assert_awaited_once_with("budget", "", 50)
        svc.get_message_metadata.assert_awaited_once_with("msg_001")

    async def test_get_messages(self, server: FastMCP, svc: MagicMock) -> None:
        await server.call_tool("get_messages", {"message_ids": ["msg_001"]})
        svc.get_message.assert_awaited_once_with("msg_001")

    async def test_preview_attachments(self, server: FastMCP, svc: MagicMock) -> None:
        await server.call_tool(
            "preview_attachments", {"message_id": "msg_001", "attachment_ids": ["1"]}
        )
        svc.get_attachment.assert_awaited_once_with("msg_001", "ANGjdJ_pdf")

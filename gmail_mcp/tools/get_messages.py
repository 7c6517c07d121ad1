"""get_messages tool: full message content with the body rendered as text."""

import asyncio
import logging
from typing import Any, Protocol

from gmail_mcp.gmail.headers import extract_message_summary
from gmail_mcp.gmail.parts import extract_attachments, extract_message_bodies
from gmail_mcp.tools.types import MessageContent

logger = logging.getLogger(__name__)


class GetMessagesService(Protocol):
    async def get_message(self, message_id: str) -> dict[str, Any]: ...


class HTMLConverter(Protocol):
    def html_to_markdown(self, raw: bytes) -> str: ...


class GetMessages:
    """Fetches messages and picks a readable body for each.

    Plain text is returned verbatim when the message has it; otherwise the
    HTML body is converted to Markdown.  Fetch and conversion failures fail
    the whole call.
    """

    def __init__(self, svc: GetMessagesService, conv: HTMLConverter) -> None:
        self._svc = svc
        self._conv = conv

    async def get_messages(self, message_ids: list[str]) -> list[MessageContent]:
        messages: list[MessageContent] = []
        for message_id in message_ids:
            message = await self._svc.get_message(message_id)
            messages.append(await self._to_content(message))
        return messages

    async def _to_content(self, message: dict[str, Any]) -> MessageContent:
        summary = extract_message_summary(message)
        payload = message.get("payload")
        if not payload:
            return MessageContent(summary=summary)

        text_body, html_body = extract_message_bodies(payload)
        return MessageContent(
            summary=summary,
            body_text=await self._preview_text(text_body, html_body),
            attachments=tuple(extract_attachments(payload)),
        )

    async def _preview_text(self, text_body: str, html_body: str) -> str:
        if text_body:
            return text_body
        if not html_body:
            return ""
        logger.debug("No plain-text body; converting %d chars of HTML", len(html_body))
        return await asyncio.to_thread(self._conv.html_to_markdown, html_body.encode("utf-8"))

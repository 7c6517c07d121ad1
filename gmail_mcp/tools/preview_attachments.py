"""The preview_attachments tool: text extraction from email attachments."""

import asyncio
import logging
from typing import Any, Protocol

from gmail_mcp.format.converter import ConversionError
from gmail_mcp.gmail.parts import decode_base64url, find_part
from gmail_mcp.tools.types import AttachmentPreview

logger = logging.getLogger(__name__)

# Readable as-is even when sent with a generic MIME type.
_TEXT_SUFFIXES = (".txt", ".md", ".csv")


class AttachmentNotFoundError(Exception):
    """Raised when an attachment ID does not resolve to an attachment part."""


class UnsupportedContentError(Exception):
    """Raised when an attachment's type has no text extraction."""


class PreviewAttachmentsService(Protocol):
    async def get_message(self, message_id: str) -> dict[str, Any]: ...

    async def get_attachment(self, message_id: str, attachment_id: str) -> str: ...


class PDFConverter(Protocol):
    def pdf_to_text(self, raw: bytes) -> str: ...


class PreviewAttachments:
    """Downloads attachments and extracts their text.

    Failures to resolve the message, find an attachment, or download it fail
    the whole call.  Decoding and extraction failures are reported on the
    affected preview only, so one bad file never hides its siblings.
    """

    def __init__(self, svc: PreviewAttachmentsService, conv: PDFConverter) -> None:
        self._svc = svc
        self._conv = conv

    async def preview_attachments(
        self, message_id: str, attachment_ids: list[str]
    ) -> list[AttachmentPreview]:
        message = await self._svc.get_message(message_id)
        payload = message.get("payload") or {}

        previews: list[AttachmentPreview] = []
        for attachment_id in attachment_ids:
            part = find_part(payload, attachment_id)
            if part is None or not (part.get("body") or {}).get("attachmentId"):
                raise AttachmentNotFoundError(
                    f"no attachment {attachment_id!r} in message {message_id!r}"
                )

            data = await self._svc.get_attachment(message_id, part["body"]["attachmentId"])
            filename = str(part.get("filename", ""))
            mime_type = str(part.get("mimeType", ""))

            try:
                content = await self._extract_content(data, mime_type, filename)
            except (ValueError, UnsupportedContentError, ConversionError) as exc:
                logger.warning(
                    "Preview of %s/%s (%s) failed: %s", message_id, attachment_id, filename, exc
                )
                previews.append(
                    AttachmentPreview.failed(attachment_id, filename, mime_type, str(exc))
                )
            else:
                previews.append(
                    AttachmentPreview.succeeded(attachment_id, filename, mime_type, content)
                )

        return previews

    async def _extract_content(self, data: str, mime_type: str, filename: str) -> str:
        try:
            raw = decode_base64url(data)
        except ValueError as exc:
            raise ValueError(f"failed to decode attachment: {exc}") from exc

        if mime_type.startswith("text/"):
            return raw.decode("utf-8", errors="replace")
        if mime_type == "application/pdf":
            return await asyncio.to_thread(self._conv.pdf_to_text, raw)
        if filename.lower().endswith(_TEXT_SUFFIXES):
            return raw.decode("utf-8", errors="replace")
        raise UnsupportedContentError(f"unsupported file type: {mime_type}")

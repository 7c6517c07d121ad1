"""Tests for PreviewAttachments: service and converter are mocked."""

from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from conftest import b64url
from gmail_mcp.format.converter import ConversionError
from gmail_mcp.gmail.service import GmailServiceError
from gmail_mcp.tools.preview_attachments import (
    AttachmentNotFoundError,
    PreviewAttachments,
)


# ── Helpers ────────────────────────────────────────────────────────────────────


def _attachment_part(part_id: str, filename: str, mime_type: str) -> dict[str, Any]:
    return {
        "partId": part_id,
        "mimeType": mime_type,
        "filename": filename,
        "body": {"size": 100, "attachmentId": f"att_{part_id}"},
    }


@pytest.fixture
def message() -> dict[str, Any]:
    return {
        "id": "msg_1",
        "threadId": "thread_1",
        "payload": {
            "partId": "",
            "mimeType": "multipart/mixed",
            "body": {"size": 0},
            "parts": [
                {"partId": "0", "mimeType": "text/plain", "body": {"data": b64url("body")}},
                _attachment_part("1", "notes.txt", "text/plain"),
                _attachment_part("2", "report.pdf", "application/pdf"),
                _attachment_part("3", "photo.png", "image/png"),
                _attachment_part("4", "README.MD", "application/octet-stream"),
            ],
        },
    }


def _tool(
    message: dict[str, Any], data: dict[str, str]
) -> tuple[PreviewAttachments, MagicMock, MagicMock]:
    svc = MagicMock()
    svc.get_message = AsyncMock(return_value=message)
    svc.get_attachment = AsyncMock(side_effect=lambda _msg, att_id: data[att_id])
    conv = MagicMock()
    conv.pdf_to_text.return_value = "Quarterly report\n"
    return PreviewAttachments(svc, conv), svc, conv


# ── Success paths ──────────────────────────────────────────────────────────────


class TestPreviewSuccess:
    async def test_text_attachment(self, message: dict[str, Any]) -> None:
        tool, svc, _ = _tool(message, {"att_1": b64url("line one\nline two")})
        [preview] = await tool.preview_attachments("msg_1", ["1"])

        assert preview.id == "1"
        assert preview.filename == "notes.txt"
        assert preview.content == "line one\nline two"
        assert preview.error is None
        svc.get_attachment.assert_awaited_once_with("msg_1", "att_1")

    async def test_pdf_goes_through_converter(self, message: dict[str, Any]) -> None:
        tool, _, conv = _tool(message, {"att_2": b64url("%PDF-1.4")})
        [preview] = await tool.preview_attachments("msg_1", ["2"])

        assert preview.content == "Quarterly report\n"
        conv.pdf_to_text.assert_called_once_with(b"%PDF-1.4")

    async def test_text_suffix_with_generic_mime_type(self, message: dict[str, Any]) -> None:
        tool, _, _ = _tool(message, {"att_4": b64url("# Title", padded=False)})
        [preview] = await tool.preview_attachments("msg_1", ["4"])
        assert preview.content == "# Title"

    async def test_previews_follow_request_order(self, message: dict[str, Any]) -> None:
        tool, _, _ = _tool(
            message, {"att_1": b64url("text"), "att_2": b64url("%PDF")}
        )
        previews = await tool.preview_attachments("msg_1", ["2", "1"])
        assert [p.id for p in previews] == ["2", "1"]

    async def test_empty_request_still_fetches_message(self, message: dict[str, Any]) -> None:
        tool, svc, _ = _tool(message, {})
        assert await tool.preview_attachments("msg_1", []) == []
        svc.get_message.assert_awaited_once_with("msg_1")


# ── Per-attachment failures ────────────────────────────────────────────────────


class TestPreviewItemErrors:
    async def test_unsupported_type(self, message: dict[str, Any]) -> None:
        tool, _, _ = _tool(message, {"att_3": b64url("\x89PNG")})
        [preview] = await tool.preview_attachments("msg_1", ["3"])
        assert preview.content is None
        assert preview.error == "unsupported file type: image/png"

    async def test_undecodable_data(self, message: dict[str, Any]) -> None:
        tool, _, _ = _tool(message, {"att_1": "!!! not base64 !!!"})
        [preview] = await tool.preview_attachments("msg_1", ["1"])
        assert preview.error is not None
        assert preview.error.startswith("failed to decode attachment")

    async def test_pdf_conversion_failure(self, message: dict[str, Any]) -> None:
        tool, _, conv = _tool(message, {"att_2": b64url("%PDF")})
        conv.pdf_to_text.side_effect = ConversionError("pdftotext failed with exit code 1: bad")
        [preview] = await tool.preview_attachments("msg_1", ["2"])
        assert preview.error == "pdftotext failed with exit code 1: bad"

    async def test_partial_success(
        self, message: dict[str, Any], caplog: pytest.LogCaptureFixture
    ) -> None:
        tool, _, _ = _tool(
            message, {"att_1": b64url("hello"), "att_3": b64url("png")}
        )
        previews = await tool.preview_attachments("msg_1", ["1", "3"])

        assert previews[0].content == "hello"
        assert previews[1].error == "unsupported file type: image/png"
        assert [p.to_dict().keys() for p in previews] == [
            {"id", "filename", "mime_type", "content"},
            {"id", "filename", "mime_type", "error"},
        ]
        assert "photo.png" in caplog.text


# ── Whole-call failures ────────────────────────────────────────────────────────


class TestPreviewCallErrors:
    async def test_unknown_attachment_id(self, message: dict[str, Any]) -> None:
        tool, _, _ = _tool(message, {})
        with pytest.raises(AttachmentNotFoundError, match="'9'"):
            await tool.preview_attachments("msg_1", ["9"])

    async def test_body_part_is_not_an_attachment(self, message: dict[str, Any]) -> None:
        tool, _, _ = _tool(message, {})
        with pytest.raises(AttachmentNotFoundError):
            await tool.preview_attachments("msg_1", ["0"])

    async def test_message_fetch_failure(self, message: dict[str, Any]) -> None:
        tool, svc, _ = _tool(message, {})
        svc.get_message.side_effect = GmailServiceError("messages.get failed: 404")
        with pytest.raises(GmailServiceError):
            await tool.preview_attachments("msg_1", ["1"])

    async def test_download_failure(self, message: dict[str, Any]) -> None:
        tool, svc, _ = _tool(message, {})
        svc.get_attachment.side_effect = GmailServiceError("attachments.get failed: 500")
        with pytest.raises(GmailServiceError):
            await tool.preview_attachments("msg_1", ["1"])

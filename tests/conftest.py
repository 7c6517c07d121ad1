"""Shared pytest fixtures."""

import base64
from typing import Any

import pytest


def b64url(text: str, *, padded: bool = True) -> str:
    """Encode text the way the Gmail API does (URL-safe base64)."""
    encoded = base64.urlsafe_b64encode(text.encode("utf-8")).decode("ascii")
    return encoded if padded else encoded.rstrip("=")


@pytest.fixture
def multipart_message() -> dict[str, Any]:
    """A full-format Gmail message: alternative text/html body plus a PDF."""
    return {
        "id": "msg_001",
        "threadId": "thread_001",
        "snippet": "Hi, please review the attached budget figures",
        "payload": {
            "partId": "",
            "mimeType": "multipart/mixed",
            "filename": "",
            "headers": [
                {"name": "From", "value": '"Alice Example" <alice@example.com>'},
                {"name": "To", "value": "bob@example.com, Carol <carol@example.com>"},
                {"name": "Subject", "value": "Q2 budget review"},
                {"name": "Date", "value": "Fri, 27 Feb 2026 09:00:00 +0000"},
            ],
            "body": {"size": 0},
            "parts": [
                {
                    "partId": "0",
                    "mimeType": "multipart/alternative",
                    "filename": "",
                    "body": {"size": 0},
                    "parts": [
                        {
                            "partId": "0.0",
                            "mimeType": "text/plain",
                            "filename": "",
                            "body": {"size": 31, "data": b64url("Please review the budget.\r\n")},
                        },
                        {
                            "partId": "0.1",
                            "mimeType": "text/html",
                            "filename": "",
                            "body": {"size": 40, "data": b64url("<p>Please review the budget.</p>")},
                        },
                    ],
                },
                {
                    "partId": "1",
                    "mimeType": "application/pdf",
                    "filename": "budget.pdf",
                    "body": {"size": 2048, "attachmentId": "ANGjdJ_pdf"},
                },
            ],
        },
    }

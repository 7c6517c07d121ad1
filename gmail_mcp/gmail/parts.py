"""MIME part walking: body selection, attachment discovery, base64url decoding.

Operates on the ``payload`` dict of a Gmail API message::

    {"partId": "", "mimeType": "multipart/mixed", "filename": "",
     "body": {"size": 0}, "parts": [...]}
"""

import base64
import logging
from enum import Enum
from typing import Any

from gmail_mcp.tools.types import Attachment

logger = logging.getLogger(__name__)


class MimeCategory(str, Enum):
    """The MIME families the extractor cares about."""

    PLAIN = "text/plain"
    HTML = "text/html"
    MULTIPART = "multipart"
    OTHER = "other"

    @classmethod
    def from_mime_type(cls, mime_type: str) -> "MimeCategory":
        mime_type = mime_type.strip().lower()
        if mime_type == cls.PLAIN.value:
            return cls.PLAIN
        if mime_type == cls.HTML.value:
            return cls.HTML
        if mime_type.startswith("multipart/"):
            return cls.MULTIPART
        return cls.OTHER


# ── Decoding ───────────────────────────────────────────────────────────────────


def decode_base64url(data: str) -> bytes:
    """Decode URL-safe base64, padded or unpadded.

    Raises:
        ValueError: if the data is neither valid padded nor valid unpadded
            URL-safe base64 (``binascii.Error`` is a subclass).
    """
    # b64decode maps altchars onto "+/" first, so the standard alphabet
    # would otherwise slip through.
    if "+" in data or "/" in data:
        raise ValueError("standard base64 alphabet in URL-safe data")
    try:
        return base64.b64decode(data, altchars=b"-_", validate=True)
    except ValueError:
        if "=" in data:
            raise
        padded = data + "=" * (-len(data) % 4)
        return base64.b64decode(padded, altchars=b"-_", validate=True)


def decode_body_data(data: str) -> str:
    """Decode a body part's data, returning ``data`` itself if it isn't base64.

    One corrupt part must not sink extraction of the rest of the message.
    """
    try:
        return decode_base64url(data).decode("utf-8", errors="replace")
    except ValueError:
        logger.debug("Body part is not valid base64url; using raw data")
        return data


# ── Bodies ─────────────────────────────────────────────────────────────────────


def _body_from_part(part: dict[str, Any]) -> tuple[str, str]:
    """Return (text, html) for a single part; at most one is non-empty."""
    data = (part.get("body") or {}).get("data") or ""
    if not data:
        return "", ""

    category = MimeCategory.from_mime_type(str(part.get("mimeType", "")))
    if category is MimeCategory.PLAIN:
        return decode_body_data(data), ""
    if category is MimeCategory.HTML:
        return "", decode_body_data(data)
    return "", ""


def extract_message_bodies(payload: dict[str, Any]) -> tuple[str, str]:
    """Find the plain-text and HTML bodies of a message.

    The root and its direct children are checked before any nested multipart
    is descended into, so a shallower body always beats a deeper one.  The
    first non-empty candidate of each kind wins.
    """
    text, html = _body_from_part(payload)
    children = payload.get("parts") or []

    for part in children:
        part_text, part_html = _body_from_part(part)
        text = text or part_text
        html = html or part_html

    for part in children:
        if part.get("parts"):
            nested_text, nested_html = extract_message_bodies(part)
            text = text or nested_text
            html = html or nested_html

    return text, html


# ── Attachments ────────────────────────────────────────────────────────────────


def _attachment_from_part(part: dict[str, Any]) -> Attachment | None:
    body = part.get("body") or {}
    attachment_id = body.get("attachmentId") or ""
    if not attachment_id:
        return None
    return Attachment(
        id=str(part.get("partId") or attachment_id),
        filename=str(part.get("filename", "")),
        mime_type=str(part.get("mimeType", "")),
        size=int(body.get("size") or 0),
    )


def extract_attachments(payload: dict[str, Any]) -> list[Attachment]:
    """List attachments depth-first, each part before its own sub-parts."""
    attachments: list[Attachment] = []

    root = _attachment_from_part(payload)
    if root is not None:
        attachments.append(root)

    for part in payload.get("parts") or []:
        attachments.extend(extract_attachments(part))

    return attachments


def find_part(payload: dict[str, Any], attachment_id: str) -> dict[str, Any] | None:
    """Return the part that ``attachment_id`` (as listed by extract_attachments) refers to."""
    body = payload.get("body")
    if body is not None and (payload.get("partId") or body.get("attachmentId")) == attachment_id:
        return payload

    for part in payload.get("parts") or []:
        found = find_part(part, attachment_id)
        if found is not None:
            return found
    return None

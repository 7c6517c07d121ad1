"""Response records returned by the Gmail MCP tools.

Every record is immutable and serialises through ``to_dict()``, which drops
empty optional fields so agents see compact JSON.
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class EmailAddress:
    """A mailbox, e.g. ``Alice <alice@example.com>``.  ``name`` may be empty."""

    email: str
    name: str = ""

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"email": self.email}
        if self.name:
            data["name"] = self.name
        return data


@dataclass(frozen=True)
class MessageSummary:
    """Header-level view of a message.

    ``timestamp`` is the raw Date header; it is passed through, not parsed.
    """

    id: str
    thread_id: str
    sender: EmailAddress = field(default_factory=lambda: EmailAddress(email=""))
    to: tuple[EmailAddress, ...] = ()
    cc: tuple[EmailAddress, ...] = ()
    subject: str = ""
    snippet: str = ""
    timestamp: str = ""

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "thread_id": self.thread_id,
            "timestamp": self.timestamp,
            "from": self.sender.to_dict(),
        }
        if self.to:
            data["to"] = [a.to_dict() for a in self.to]
        if self.cc:
            data["cc"] = [a.to_dict() for a in self.cc]
        data["subject"] = self.subject
        data["snippet"] = self.snippet
        return data


@dataclass(frozen=True)
class Attachment:
    """Attachment metadata.  ``id`` is what preview_attachments expects."""

    id: str
    filename: str
    mime_type: str
    size: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "filename": self.filename,
            "mime_type": self.mime_type,
            "size": self.size,
        }


@dataclass(frozen=True)
class MessageContent:
    summary: MessageSummary
    body_text: str = ""
    attachments: tuple[Attachment, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"summary": self.summary.to_dict()}
        if self.body_text:
            data["body_text"] = self.body_text
        if self.attachments:
            data["attachments"] = [a.to_dict() for a in self.attachments]
        return data


@dataclass(frozen=True)
class AttachmentPreview:
    """Extracted text of one attachment, or the reason extraction failed.

    Exactly one of ``content`` and ``error`` is set.  Prefer the
    ``succeeded`` / ``failed`` constructors.
    """

    id: str
    filename: str
    mime_type: str
    content: str | None = None
    error: str | None = None

    def __post_init__(self) -> None:
        if (self.content is None) == (self.error is None):
            raise ValueError(
                f"AttachmentPreview {self.id!r} needs exactly one of content or error"
            )

    @classmethod
    def succeeded(cls, id: str, filename: str, mime_type: str, content: str) -> "AttachmentPreview":
        return cls(id=id, filename=filename, mime_type=mime_type, content=content)

    @classmethod
    def failed(cls, id: str, filename: str, mime_type: str, error: str) -> "AttachmentPreview":
        return cls(id=id, filename=filename, mime_type=mime_type, error=error)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "filename": self.filename,
            "mime_type": self.mime_type,
        }
        if self.content is not None:
            data["content"] = self.content
        if self.error is not None:
            data["error"] = self.error
        return data


@dataclass(frozen=True)
class SearchResult:
    messages: tuple[MessageSummary, ...] = ()
    next_page_token: str = ""

    @property
    def total_results(self) -> int:
        """Number of summaries in this page (not the mailbox-wide match count)."""
        return len(self.messages)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"messages": [m.to_dict() for m in self.messages]}
        if self.next_page_token:
            data["next_page_token"] = self.next_page_token
        data["total_results"] = self.total_results
        return data

"""Header parsing: addresses and message summaries from Gmail API message dicts."""

from typing import Any

from gmail_mcp.tools.types import EmailAddress, MessageSummary

# Headers requested when fetching message metadata for search results.
SUMMARY_HEADERS = ("From", "To", "Cc", "Subject", "Date")


def parse_email_address(value: str) -> EmailAddress:
    """Parse ``"Name" <addr>`` or a bare ``addr`` into an EmailAddress.

    An unterminated ``<`` yields an empty address rather than an error.
    """
    name = ""
    email = ""

    start = value.find("<")
    if start != -1:
        name = value[:start].strip()
        end = value.find(">", start)
        if end != -1:
            email = value[start + 1:end].strip()
    else:
        email = value.strip()

    return EmailAddress(email=email, name=name.strip('"'))


def parse_email_address_list(value: str) -> list[EmailAddress]:
    """Split a comma-separated header value into addresses, skipping blanks."""
    if not value:
        return []
    return [
        parse_email_address(part.strip())
        for part in value.split(",")
        if part.strip()
    ]


def extract_message_summary(message: dict[str, Any]) -> MessageSummary:
    """Map a Gmail API message (metadata or full format) to a MessageSummary."""
    headers: dict[str, str] = {}
    payload = message.get("payload") or {}
    for header in payload.get("headers") or []:
        # Gmail normally sends canonical casing, but "CC" does turn up.
        headers[str(header.get("name", "")).lower()] = str(header.get("value", ""))

    return MessageSummary(
        id=str(message.get("id", "")),
        thread_id=str(message.get("threadId", "")),
        sender=parse_email_address(headers.get("from", "")),
        to=tuple(parse_email_address_list(headers.get("to", ""))),
        cc=tuple(parse_email_address_list(headers.get("cc", ""))),
        subject=headers.get("subject", ""),
        snippet=str(message.get("snippet", "")),
        timestamp=headers.get("date", ""),
    )

"""Gmail API facade exposing the read-only calls the tools need."""

import asyncio
import logging
from typing import Any

from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from gmail_mcp.gmail.headers import SUMMARY_HEADERS

logger = logging.getLogger(__name__)

# The authenticated user, in Gmail API terms.
_USER_ID = "me"


class GmailServiceError(Exception):
    """Raised when a Gmail API request fails."""


class GmailService:
    """Thin async wrapper around the Gmail v1 REST resource.

    The discovery client is synchronous, so each request is executed in a
    worker thread to keep the MCP event loop responsive.  The resource is
    built lazily on first use and reused afterwards.

    Usage::

        gmail = GmailService(credentials)
        ids, next_token = await gmail.list_messages("is:unread", "", 10)
    """

    def __init__(self, credentials: Credentials, resource: Any = None) -> None:
        self._credentials = credentials
        self._resource = resource

    # ── Public API ─────────────────────────────────────────────────────────────

    async def list_messages(
        self, query: str, page_token: str, max_results: int
    ) -> tuple[list[str], str]:
        """Return (message IDs, next page token) for a Gmail search query.

        The token is empty on the last page.
        """
        params: dict[str, Any] = {"userId": _USER_ID, "q": query, "maxResults": max_results}
        if page_token:
            params["pageToken"] = page_token
        result = await self._execute(
            "messages.list", self._messages().list(**params)
        )
        ids = [str(m["id"]) for m in result.get("messages", []) if m.get("id")]
        return ids, str(result.get("nextPageToken", ""))

    async def get_message_metadata(self, message_id: str) -> dict[str, Any]:
        """Return a message with only the summary headers and snippet."""
        return await self._execute(
            "messages.get",
            self._messages().get(
                userId=_USER_ID,
                id=message_id,
                format="metadata",
                metadataHeaders=list(SUMMARY_HEADERS),
            ),
        )

    async def get_message(self, message_id: str) -> dict[str, Any]:
        """Return a complete message including its MIME part tree."""
        return await self._execute(
            "messages.get",
            self._messages().get(userId=_USER_ID, id=message_id, format="full"),
        )

    async def get_attachment(self, message_id: str, attachment_id: str) -> str:
        """Return an attachment's content as URL-safe base64."""
        result = await self._execute(
            "attachments.get",
            self._messages().attachments().get(
                userId=_USER_ID, messageId=message_id, id=attachment_id
            ),
        )
        return str(result.get("data", ""))

    # ── Internal helpers ───────────────────────────────────────────────────────

    def _messages(self) -> Any:
        if self._resource is None:
            self._resource = build(
                "gmail", "v1", credentials=self._credentials, cache_discovery=False
            )
        return self._resource.users().messages()

    async def _execute(self, name: str, request: Any) -> dict[str, Any]:
        """Run a prepared API request off the event loop.

        Raises GmailServiceError on any HTTP-level failure.
        """
        logger.debug("Gmail API → %s", name)
        try:
            result = await asyncio.to_thread(request.execute)
        except HttpError as exc:
            raise GmailServiceError(f"{name} failed: {exc}") from exc
        return result or {}

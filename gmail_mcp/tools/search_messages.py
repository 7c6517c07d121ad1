"""search_messages tool: Gmail search returning header summaries."""

import logging
from typing import Any, Protocol

from gmail_mcp.gmail.headers import extract_message_summary
from gmail_mcp.tools.types import MessageSummary, SearchResult

logger = logging.getLogger(__name__)

DEFAULT_MAX_RESULTS = 10
MAX_RESULTS_LIMIT = 50


class SearchMessagesService(Protocol):
    async def list_messages(
        self, query: str, page_token: str, max_results: int
    ) -> tuple[list[str], str]: ...

    async def get_message_metadata(self, message_id: str) -> dict[str, Any]: ...


def normalize_max_results(max_results: int) -> int:
    """Default unset (or nonsensical) page sizes to 10 and cap them at 50."""
    if max_results <= 0:
        return DEFAULT_MAX_RESULTS
    return min(max_results, MAX_RESULTS_LIMIT)


class SearchMessages:
    """Runs a Gmail query and summarises each hit from its metadata.

    Any provider failure fails the whole search; there are no partial pages.
    """

    def __init__(self, svc: SearchMessagesService) -> None:
        self._svc = svc

    async def search_messages(
        self, query: str, max_results: int = 0, page_token: str = ""
    ) -> SearchResult:
        ids, next_page_token = await self._svc.list_messages(
            query, page_token, normalize_max_results(max_results)
        )

        summaries: list[MessageSummary] = []
        for message_id in ids:
            message = await self._svc.get_message_metadata(message_id)
            summaries.append(extract_message_summary(message))

        logger.info("search %r: %d message(s)", query, len(summaries))
        return SearchResult(messages=tuple(summaries), next_page_token=next_page_token)

"""Offset/limit pagination shared by every list operation."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from core.exceptions import PaginationError, ProtocolAnomalyError
from core.models import Page

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_PAGE_LIMIT = 100
DEFAULT_MAX_PAGES = 1000

# Called with (offset, limit); returns one page of results.
PageFetcher = Callable[[int, int], Awaitable[Page[T]]]


class Paginator:
    """Collects every page of a list result, one request at a time.

    Usage:
        paginator = Paginator(limit=100)
        incidents = await paginator.collect(
            lambda offset, limit: provider.list_incidents_page(filters, offset, limit),
            label="incidents",
        )

    Any error raised by the fetcher propagates unchanged and the items
    gathered so far are dropped. A source that keeps reporting more data
    past ``max_pages``, or reports more data on an empty page, raises
    :class:`PaginationError`.
    """

    def __init__(self, limit: int = DEFAULT_PAGE_LIMIT, max_pages: int = DEFAULT_MAX_PAGES) -> None:
        if limit <= 0:
            raise ValueError(f"page limit must be positive, got {limit}")
        if max_pages <= 0:
            raise ValueError(f"max_pages must be positive, got {max_pages}")
        self.limit = limit
        self.max_pages = max_pages

    async def collect(self, fetch: PageFetcher[T], label: str = "items", offset: int = 0) -> list[T]:
        items: list[T] = []
        pages = 0

        while True:
            page = await fetch(offset, self.limit)
            pages += 1
            logger.debug(
                "Fetched %s page %d (offset=%d, limit=%d): %d item(s), more=%s",
                label, pages, offset, self.limit, len(page.items), page.more,
            )
            items.extend(page.items)

            if not page.more:
                return items

            if not page.items:
                raise PaginationError(
                    f"{label}: upstream reported more data after an empty page at offset {offset}"
                )
            if pages >= self.max_pages:
                raise PaginationError(
                    f"{label}: upstream still reported more data after {pages} pages"
                )

            offset += self.limit


def expect_single_page(page: Page[T], operation: str) -> list[T]:
    """Return the items of *page*, refusing responses that claim further pages.

    Batch mutations are answered in a single page; anything else means the
    upstream contract has changed.
    """
    if page.more:
        logger.critical("%s: upstream response indicated more data available", operation)
        raise ProtocolAnomalyError(f"{operation}: upstream response indicated more data available")
    return page.items

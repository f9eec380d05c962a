"""Structured progress events emitted by the crawl scheduler."""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, Union

from .results import CrawlStats, LinkResult

LOGGER = logging.getLogger(__name__)


class EventKind(str, Enum):
    page_fetched = "page_fetched"
    page_failed = "page_failed"
    page_enqueued = "page_enqueued"
    link_checked = "link_checked"
    crawl_finished = "crawl_finished"


@dataclass(frozen=True, slots=True)
class CrawlEvent:
    """A single progress notification.

    ``url``/``depth`` identify the page (or, for ``page_enqueued``, the
    newly queued page). ``result`` is set for ``link_checked`` and
    ``page_failed``; ``stats`` for ``crawl_finished``.
    """

    kind: EventKind
    url: str = ""
    depth: int = 0
    status: Optional[int] = None
    result: Optional[LinkResult] = None
    stats: Optional[CrawlStats] = None


EventCallback = Callable[[CrawlEvent], Union[None, Awaitable[Any]]]


async def emit(callback: Optional[EventCallback], event: CrawlEvent) -> None:
    """Deliver *event* to *callback*; coroutine callbacks are awaited."""
    if callback is None:
        return
    outcome = callback(event)
    if inspect.isawaitable(outcome):
        await outcome


def log_event(event: CrawlEvent) -> None:
    """Event callback that reports progress through :mod:`logging`."""
    if event.kind is EventKind.page_fetched:
        LOGGER.info("Fetched %s (depth=%d, status=%s)", event.url, event.depth, event.status)
    elif event.kind is EventKind.page_failed and event.result is not None:
        LOGGER.warning("Failed: %s - %s", event.url, event.result.error)
    elif event.kind is EventKind.link_checked and event.result is not None:
        LOGGER.debug(
            "Checked %s -> %s (%d)",
            event.result.source_url,
            event.result.target_url,
            event.result.status,
        )
    elif event.kind is EventKind.page_enqueued:
        LOGGER.debug("Queued %s (depth=%d)", event.url, event.depth)
    elif event.kind is EventKind.crawl_finished and event.stats is not None:
        LOGGER.info(
            "Crawl complete: %d links, %d visited, %d remaining",
            event.stats.total_links,
            event.stats.visited,
            event.stats.remaining,
        )

"""Link graph auditing for one or more seed pages.

This module provides a clean API for checking the links of web pages. It
supports:

- Link extraction with anchor text, rel tokens and internal/external type
- Redirect chain resolution, one hop at a time
- Breadth-first expansion with URL, depth and domain limits
- A shared rate limit across page fetches and link checks

Example usage:

    from linkaudit import crawl_links, crawl_links_async, scrape_links_async

    # Check every link on one page
    response = crawl_links(["https://example.com"])
    for result in response.results:
        print(result.status, result.target_url, result.redirect_chain)

    # Recursive audit of a site
    response = await crawl_links_async(
        ["https://docs.example.com"],
        recursive=True,
        max_urls=200,
        max_depth=2,
        rate_limit=4,
    )
    print(response.stats)

    # Raw request payload (camelCase keys) with a tagged outcome
    outcome = await scrape_links_async({"urls": ["https://example.com"]})
    if outcome.kind == "error":
        print(outcome.status_code, outcome.message)
"""

from __future__ import annotations

import asyncio
from typing import Any, Iterable, Optional

import httpx

from .config import CrawlSettings
from .errors import LinkAuditError, RequestValidationError
from .events import CrawlEvent, EventCallback, EventKind, log_event
from .links import DiscoveredLink, extract_links
from .markup import MarkupParser, SoupParser
from .rate_limit import RateLimiter
from .redirects import (
    RedirectHop,
    RedirectResolution,
    format_redirect_chain,
    resolve_redirect_chain,
)
from .request import CrawlOutcome, CrawlRejected, CrawlRequest, CrawlSucceeded
from .results import CrawlResponse, CrawlStats, LinkResult, LinkType
from .scheduler import CrawlScheduler, FrontierItem
from .urls import hostname, normalize_url

__all__ = [
    # Result types
    "LinkResult",
    "LinkType",
    "CrawlStats",
    "CrawlResponse",
    # Request boundary
    "CrawlRequest",
    "CrawlOutcome",
    "CrawlSucceeded",
    "CrawlRejected",
    "LinkAuditError",
    "RequestValidationError",
    # Engine
    "CrawlScheduler",
    "FrontierItem",
    "CrawlSettings",
    "RateLimiter",
    "normalize_url",
    "hostname",
    "DiscoveredLink",
    "extract_links",
    "MarkupParser",
    "SoupParser",
    "RedirectHop",
    "RedirectResolution",
    "resolve_redirect_chain",
    "format_redirect_chain",
    # Progress events
    "CrawlEvent",
    "EventKind",
    "EventCallback",
    "log_event",
    # Crawl entry points
    "crawl_links",
    "crawl_links_async",
    "scrape_links_async",
    # MCP Server
    "mcp",
]


# Lazy import for mcp to avoid requiring fastmcp if not used
def __getattr__(name):
    if name == "mcp":
        from .mcp_server import mcp

        return mcp
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


async def crawl_links_async(
    urls: Iterable[str],
    *,
    recursive: bool = False,
    max_urls: int = 100,
    max_depth: int = 2,
    rate_limit: float = 2.0,
    same_domain_only: bool = True,
    settings: Optional[CrawlSettings] = None,
    client: Optional[httpx.AsyncClient] = None,
    on_event: Optional[EventCallback] = None,
    cancel_event: Optional[asyncio.Event] = None,
) -> CrawlResponse:
    """
    Check every link on the seed pages, optionally expanding breadth-first.

    Args:
        urls: Seed URLs (must be absolute; invalid ones are skipped).
        recursive: Queue internal links for crawling.
        max_urls: Maximum number of link results.
        max_depth: Maximum depth of queued pages (seeds are depth 0).
        rate_limit: Requests per second across the whole crawl.
        same_domain_only: Only queue pages on a seed hostname.
        settings: Transport settings (default: from environment).
        client: Optional shared ``httpx.AsyncClient``.
        on_event: Progress callback.
        cancel_event: Set to stop before the next page is fetched.

    Returns:
        CrawlResponse with the link results and crawl stats.

    Raises:
        RequestValidationError: If the parameters are malformed.
    """
    request = CrawlRequest.from_payload(
        {
            "urls": list(urls),
            "recursive": recursive,
            "max_urls": max_urls,
            "max_depth": max_depth,
            "rate_limit": rate_limit,
            "same_domain_only": same_domain_only,
        }
    )
    scheduler = CrawlScheduler(
        request,
        settings=settings,
        client=client,
        on_event=on_event,
    )
    return await scheduler.run(cancel_event=cancel_event)


def crawl_links(
    urls: Iterable[str],
    *,
    recursive: bool = False,
    max_urls: int = 100,
    max_depth: int = 2,
    rate_limit: float = 2.0,
    same_domain_only: bool = True,
    settings: Optional[CrawlSettings] = None,
    on_event: Optional[EventCallback] = None,
) -> CrawlResponse:
    """Synchronous wrapper for crawl_links_async."""
    return asyncio.run(
        crawl_links_async(
            urls,
            recursive=recursive,
            max_urls=max_urls,
            max_depth=max_depth,
            rate_limit=rate_limit,
            same_domain_only=same_domain_only,
            settings=settings,
            on_event=on_event,
        )
    )


async def scrape_links_async(
    payload: Any,
    *,
    settings: Optional[CrawlSettings] = None,
    client: Optional[httpx.AsyncClient] = None,
    on_event: Optional[EventCallback] = None,
    cancel_event: Optional[asyncio.Event] = None,
) -> CrawlOutcome:
    """
    Handle a raw crawl request payload.

    Malformed payloads are rejected before any network activity with a
    ``CrawlRejected`` (``kind="error"``, ``status_code=400``); otherwise the
    crawl runs and a ``CrawlSucceeded`` (``kind="result"``) is returned.
    Per-link failures never reject the request.
    """
    try:
        request = CrawlRequest.from_payload(payload)
    except RequestValidationError as exc:
        return CrawlRejected.from_error(exc)

    scheduler = CrawlScheduler(
        request,
        settings=settings,
        client=client,
        on_event=on_event,
    )
    response = await scheduler.run(cancel_event=cancel_event)
    return CrawlSucceeded(response=response)

"""Breadth-first link crawl scheduler.

One scheduler drives one crawl: a FIFO frontier of pages, the set of URLs
already queued, and the append-only list of link results. Pages are
processed strictly one at a time; every link found on a page is resolved
(redirect chain included) before the next page is dequeued.
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from dataclasses import dataclass
from typing import Deque, FrozenSet, List, Optional, Set, Tuple

import httpx

from .config import CrawlSettings, resolve_settings
from .events import CrawlEvent, EventCallback, EventKind, emit
from .links import DiscoveredLink, extract_links
from .markup import MarkupParser, default_parser
from .rate_limit import RateLimiter
from .redirects import (
    describe_transport_error,
    format_redirect_chain,
    resolve_redirect_chain,
)
from .request import CrawlRequest
from .results import CrawlResponse, CrawlStats, LinkResult, LinkType
from .urls import hostname, normalize_url

LOGGER = logging.getLogger(__name__)

_MARKUP_TYPES = ("html", "xml")


@dataclass(frozen=True, slots=True)
class FrontierItem:
    """A page waiting to be fetched."""

    url: str
    depth: int
    source_url: str


def _is_markup(content_type: Optional[str]) -> bool:
    if not content_type:
        return True
    lowered = content_type.lower()
    return any(kind in lowered for kind in _MARKUP_TYPES)


class CrawlScheduler:
    """Run a single link audit crawl.

    Args:
        request: Validated crawl parameters.
        settings: Transport settings (defaults to :meth:`CrawlSettings.from_env`).
        client: Optional ``httpx.AsyncClient``; when omitted the scheduler
            creates one and closes it when the crawl ends.
        parser: Markup parser capability (defaults to BeautifulSoup/lxml).
        limiter: Rate limiter (defaults to one built from ``request.rate_limit``).
        on_event: Progress callback receiving :class:`CrawlEvent` objects.

    Instances are single-use; concurrent crawls need separate schedulers.
    """

    def __init__(
        self,
        request: CrawlRequest,
        *,
        settings: Optional[CrawlSettings] = None,
        client: Optional[httpx.AsyncClient] = None,
        parser: Optional[MarkupParser] = None,
        limiter: Optional[RateLimiter] = None,
        on_event: Optional[EventCallback] = None,
    ) -> None:
        self.request = request
        self.settings = resolve_settings(settings)
        self.parser = parser or default_parser()
        self.limiter = limiter or RateLimiter(request.rate_limit)
        self.on_event = on_event
        self._client = client

        self.frontier: Deque[FrontierItem] = deque()
        self.visited: Set[str] = set()
        self.results: List[LinkResult] = []
        self.seeds: Tuple[str, ...] = ()
        self.seed_hosts: FrozenSet[str] = frozenset()
        self._started = False

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def run(self, cancel_event: Optional[asyncio.Event] = None) -> CrawlResponse:
        """Crawl until the frontier is empty, the URL cap is hit, or cancelled."""
        if self._started:
            raise RuntimeError("CrawlScheduler is single-use; create one per crawl")
        self._started = True

        self._seed()
        LOGGER.info(
            "Starting link crawl: %d seed(s) (recursive=%s, max_urls=%d, max_depth=%d)",
            len(self.seeds),
            self.request.recursive,
            self.request.max_urls,
            self.request.max_depth,
        )

        owns_client = self._client is None
        client = self._client or self._build_client()
        try:
            while self.frontier and not self._cap_reached():
                if cancel_event is not None and cancel_event.is_set():
                    LOGGER.info("Crawl cancelled with %d page(s) queued", len(self.frontier))
                    break
                item = self.frontier.popleft()
                await self._process_page(client, item)
        finally:
            if owns_client:
                await client.aclose()

        stats = CrawlStats(
            total_links=len(self.results),
            visited=len(self.visited),
            remaining=len(self.frontier),
        )
        await emit(self.on_event, CrawlEvent(kind=EventKind.crawl_finished, stats=stats))
        return CrawlResponse(results=list(self.results), stats=stats)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _build_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            headers=self.settings.client_headers(),
            timeout=self.settings.request_timeout,
            max_redirects=self.settings.max_redirects,
        )

    def _seed(self) -> None:
        seeds: List[str] = []
        for raw in self.request.urls:
            url = normalize_url(raw)
            if url is None:
                LOGGER.warning("Skipping invalid seed URL: %r", raw)
                continue
            if url in self.visited:
                continue
            self.visited.add(url)
            self.frontier.append(FrontierItem(url=url, depth=0, source_url=url))
            seeds.append(url)
        self.seeds = tuple(seeds)
        self.seed_hosts = frozenset(hostname(url) for url in seeds)

    def _cap_reached(self) -> bool:
        return len(self.results) >= self.request.max_urls

    async def _process_page(self, client: httpx.AsyncClient, item: FrontierItem) -> None:
        await self.limiter.wait()
        LOGGER.debug("Fetching %s (depth=%d)", item.url, item.depth)
        try:
            response = await client.get(item.url, follow_redirects=True)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            failure = LinkResult(
                source_url=item.source_url,
                target_url=item.url,
                status=0,
                redirect_chain="",
                type=LinkType.internal,
                depth=item.depth,
                error=describe_transport_error(exc),
            )
            self.results.append(failure)
            await emit(
                self.on_event,
                CrawlEvent(
                    kind=EventKind.page_failed,
                    url=item.url,
                    depth=item.depth,
                    status=0,
                    result=failure,
                ),
            )
            return

        page_url = str(response.url)
        await emit(
            self.on_event,
            CrawlEvent(
                kind=EventKind.page_fetched,
                url=item.url,
                depth=item.depth,
                status=response.status_code,
            ),
        )

        content_type = response.headers.get("content-type")
        if not _is_markup(content_type):
            LOGGER.debug("Not parsing %s (content-type %s)", item.url, content_type)
            return

        for link in extract_links(response.text, page_url, self.seed_hosts, self.parser):
            if self._cap_reached():
                LOGGER.info("Reached URL limit of %d", self.request.max_urls)
                break
            await self._check_link(client, item, link)

    async def _check_link(
        self,
        client: httpx.AsyncClient,
        item: FrontierItem,
        link: DiscoveredLink,
    ) -> None:
        fraction = self.settings.link_check_fraction
        await self.limiter.wait(fraction)
        resolution = await resolve_redirect_chain(
            client,
            link.target_url,
            max_hops=self.settings.max_redirects,
            limiter=self.limiter,
            throttle_hops=self.settings.throttle_redirect_hops,
            hop_fraction=fraction,
        )
        result = LinkResult(
            source_url=item.url,
            target_url=link.target_url,
            status=resolution.final_status,
            redirect_chain=format_redirect_chain(resolution.chain),
            type=LinkType.internal if link.is_internal else LinkType.external,
            anchor_text=link.anchor_text,
            rel=", ".join(link.rel),
            depth=item.depth,
            error=resolution.error,
        )
        self.results.append(result)
        await emit(
            self.on_event,
            CrawlEvent(
                kind=EventKind.link_checked,
                url=item.url,
                depth=item.depth,
                status=result.status,
                result=result,
            ),
        )
        await self._maybe_enqueue(item, link)

    async def _maybe_enqueue(self, item: FrontierItem, link: DiscoveredLink) -> None:
        request = self.request
        if not (request.recursive and link.is_internal and item.depth < request.max_depth):
            return
        target = link.target_url
        if target in self.visited:
            return
        if request.same_domain_only and hostname(target) not in self.seed_hosts:
            return

        # Marked visited at enqueue time so later pages cannot queue it again.
        self.visited.add(target)
        self.frontier.append(FrontierItem(url=target, depth=item.depth + 1, source_url=item.url))
        await emit(
            self.on_event,
            CrawlEvent(kind=EventKind.page_enqueued, url=target, depth=item.depth + 1),
        )

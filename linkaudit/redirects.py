"""Hop-by-hop redirect chain resolution.

Redirects are never followed by the HTTP client; every hop is requested
explicitly so the full chain can be reported::

    https://a.test/b (301) -> https://a.test/c (200)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

import httpx

from .rate_limit import RateLimiter
from .urls import normalize_url

LOGGER = logging.getLogger(__name__)

DEFAULT_MAX_HOPS = 10
TOO_MANY_REDIRECTS = "too many redirects"
REDIRECT_LOOP = "redirect loop"
INVALID_LOCATION = "invalid redirect location"


@dataclass(frozen=True, slots=True)
class RedirectHop:
    """One response observed while resolving a link."""

    url: str
    status: int


@dataclass(slots=True)
class RedirectResolution:
    """Outcome of resolving a link; ``final_status`` is authoritative."""

    final_status: int
    chain: List[RedirectHop] = field(default_factory=list)
    error: Optional[str] = None


def format_redirect_chain(chain: List[RedirectHop]) -> str:
    """Render a chain as ``"url (status) -> url (status)"``."""
    return " -> ".join(f"{hop.url} ({hop.status})" for hop in chain)


def describe_transport_error(exc: Exception) -> str:
    """Human-readable text for a transport failure (some httpx errors are blank)."""
    return str(exc) or exc.__class__.__name__


async def resolve_redirect_chain(
    client: httpx.AsyncClient,
    url: str,
    *,
    max_hops: int = DEFAULT_MAX_HOPS,
    limiter: Optional[RateLimiter] = None,
    throttle_hops: bool = False,
    hop_fraction: float = 0.5,
) -> RedirectResolution:
    """Follow *url* one redirect at a time and record every hop.

    Args:
        client: HTTP client used for every hop.
        url: Absolute URL to resolve.
        max_hops: Ceiling on recorded responses, not on redirects followed.
            Once the chain holds this many hops the resolver gives up with
            ``"too many redirects"``, so a link behind exactly ``max_hops``
            redirects is reported without requesting its final target.
        limiter: Rate limiter consulted between hops when *throttle_hops*.
        throttle_hops: Wait ``hop_fraction`` of the limiter interval before
            each follow-up hop.
        hop_fraction: Fraction of the interval used for hop throttling.

    Returns:
        :class:`RedirectResolution`. Transport failures yield
        ``final_status=0`` with the error text; hops seen before the failure
        are kept. A Location that is not an absolute http(s) URL once
        resolved keeps the redirect status and reports
        ``"invalid redirect location"``.
    """
    chain: List[RedirectHop] = []
    current = url

    while True:
        if len(chain) >= max_hops:
            LOGGER.debug("Redirect ceiling (%d) hit for %s", max_hops, url)
            return RedirectResolution(
                final_status=chain[-1].status if chain else 0,
                chain=chain,
                error=TOO_MANY_REDIRECTS,
            )

        if chain and throttle_hops and limiter is not None:
            await limiter.wait(hop_fraction)

        try:
            status, location = await _request_hop(client, current)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            LOGGER.debug("Transport error resolving %s at %s: %r", url, current, exc)
            return RedirectResolution(
                final_status=0,
                chain=chain,
                error=describe_transport_error(exc),
            )

        chain.append(RedirectHop(url=current, status=status))

        if not (300 <= status < 400) or not location:
            return RedirectResolution(final_status=status, chain=chain)

        next_url = normalize_url(location, current)
        if next_url is None:
            LOGGER.debug("Unusable Location %r for %s at %s", location, url, current)
            return RedirectResolution(
                final_status=status,
                chain=chain,
                error=INVALID_LOCATION,
            )
        if any(hop.url == next_url for hop in chain):
            LOGGER.debug("Redirect loop for %s at %s", url, next_url)
            return RedirectResolution(
                final_status=status,
                chain=chain,
                error=REDIRECT_LOOP,
            )
        current = next_url


async def _request_hop(client: httpx.AsyncClient, url: str):
    """Issue one GET without following redirects; the body is never read."""
    async with client.stream("GET", url, follow_redirects=False) as response:
        return response.status_code, response.headers.get("location")

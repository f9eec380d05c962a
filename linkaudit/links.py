"""Link extraction and internal/external classification."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, Optional, Tuple

from .markup import MarkupParser, default_parser
from .urls import hostname, normalize_url

# Anchor-bearing elements whose href points at another resource.
LINK_SELECTOR = "a[href], area[href]"


@dataclass(frozen=True, slots=True)
class DiscoveredLink:
    """Outbound link found on a fetched page."""

    target_url: str
    anchor_text: str = ""
    rel: Tuple[str, ...] = ()
    is_internal: bool = False


def extract_links(
    markup: str,
    page_url: str,
    internal_hosts: Iterable[str] = (),
    parser: Optional[MarkupParser] = None,
) -> Iterator[DiscoveredLink]:
    """Yield every resolvable link in *markup*, in document order.

    Hrefs are normalized against *page_url*; ones that do not normalize are
    skipped. A link is internal when its hostname equals one of
    *internal_hosts* or the page's own hostname (subdomains are distinct).
    """
    parser = parser or default_parser()
    hosts = {host for host in internal_hosts if host}
    page_host = hostname(page_url)
    if page_host:
        hosts.add(page_host)

    tree = parser.parse(markup)
    for element in parser.select(tree, LINK_SELECTOR):
        target = normalize_url(element.get_attribute("href"), page_url)
        if target is None:
            continue
        yield DiscoveredLink(
            target_url=target,
            anchor_text=_collapse_whitespace(element.text()),
            rel=tuple((element.get_attribute("rel") or "").split()),
            is_internal=hostname(target) in hosts,
        )


def _collapse_whitespace(text: str) -> str:
    return " ".join(text.split())

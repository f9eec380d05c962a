"""Data structures representing link audit output."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class LinkType(str, Enum):
    """Whether a link stays on the audited hosts."""

    internal = "internal"
    external = "external"


@dataclass(frozen=True, slots=True)
class LinkResult:
    """One checked link (or one page that could not be fetched)."""

    source_url: str
    target_url: str
    status: int
    redirect_chain: str
    type: LinkType
    anchor_text: str = ""
    rel: str = ""
    depth: int = 0
    error: Optional[str] = None

    @property
    def is_broken(self) -> bool:
        return self.status == 0 or self.status >= 400

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "sourceUrl": self.source_url,
            "targetUrl": self.target_url,
            "status": self.status,
            "redirectChain": self.redirect_chain,
            "type": self.type.value,
            "anchorText": self.anchor_text,
            "rel": self.rel,
            "depth": self.depth,
        }
        if self.error is not None:
            data["error"] = self.error
        return data


@dataclass(slots=True)
class CrawlStats:
    """Counters reported alongside the results."""

    total_links: int = 0
    visited: int = 0
    remaining: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "totalLinks": self.total_links,
            "visited": self.visited,
            "remaining": self.remaining,
        }


@dataclass(slots=True)
class CrawlResponse:
    """Results of one crawl invocation."""

    results: List[LinkResult] = field(default_factory=list)
    stats: CrawlStats = field(default_factory=CrawlStats)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "results": [result.to_dict() for result in self.results],
            "stats": self.stats.to_dict(),
        }

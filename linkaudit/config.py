"""Crawl settings and environment-driven defaults.

Environment variables are read at call time (inside :meth:`CrawlSettings.from_env`
and :func:`request_defaults_from_env`) so that tests can monkeypatch them and
late ``.env`` loading works.

Environment Variables:
    LINKAUDIT_USER_AGENT: User-Agent header sent with every request
    LINKAUDIT_TIMEOUT: Per-request timeout in seconds (default: 30)
    LINKAUDIT_MAX_REDIRECTS: Redirect hop ceiling (default: 10)
    LINKAUDIT_THROTTLE_REDIRECT_HOPS: "1"/"true" to rate-limit hops inside a chain
    LINKAUDIT_RATE_LIMIT: Default requests per second (default: 2)
    LINKAUDIT_MAX_URLS: Default result cap (default: 100)
    LINKAUDIT_MAX_DEPTH: Default recursion depth (default: 2)
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, TypeVar

LOGGER = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; linkaudit/0.1)"
DEFAULT_TIMEOUT = 30.0
DEFAULT_MAX_REDIRECTS = 10
DEFAULT_RATE_LIMIT = 2.0
DEFAULT_MAX_URLS = 100
DEFAULT_MAX_DEPTH = 2

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})

T = TypeVar("T")


def _env_value(name: str, convert: Callable[[str], T], default: T) -> T:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return convert(raw.strip())
    except ValueError:
        LOGGER.warning("Invalid %s=%r; falling back to %r.", name, raw, default)
        return default


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in _TRUE_VALUES


@dataclass
class CrawlSettings:
    """Transport-level settings shared by page fetches and link checks."""

    user_agent: str = DEFAULT_USER_AGENT
    request_timeout: float = DEFAULT_TIMEOUT
    max_redirects: int = DEFAULT_MAX_REDIRECTS
    throttle_redirect_hops: bool = False
    # Share of the rate-limit interval waited before each link check.
    link_check_fraction: float = 0.5

    @classmethod
    def from_env(cls) -> "CrawlSettings":
        return cls(
            user_agent=os.getenv("LINKAUDIT_USER_AGENT") or DEFAULT_USER_AGENT,
            request_timeout=_env_value("LINKAUDIT_TIMEOUT", float, DEFAULT_TIMEOUT),
            max_redirects=_env_value(
                "LINKAUDIT_MAX_REDIRECTS", int, DEFAULT_MAX_REDIRECTS
            ),
            throttle_redirect_hops=_env_flag("LINKAUDIT_THROTTLE_REDIRECT_HOPS"),
        )

    def client_headers(self) -> Dict[str, str]:
        return {
            "User-Agent": self.user_agent,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        }


def request_defaults_from_env() -> Dict[str, Any]:
    """Defaults for request fields the caller leaves out."""
    return {
        "rate_limit": _env_value("LINKAUDIT_RATE_LIMIT", float, DEFAULT_RATE_LIMIT),
        "max_urls": _env_value("LINKAUDIT_MAX_URLS", int, DEFAULT_MAX_URLS),
        "max_depth": _env_value("LINKAUDIT_MAX_DEPTH", int, DEFAULT_MAX_DEPTH),
    }


def resolve_settings(settings: Optional[CrawlSettings] = None) -> CrawlSettings:
    return settings if settings is not None else CrawlSettings.from_env()

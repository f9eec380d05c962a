"""URL normalization used for link resolution and crawl deduplication."""

from __future__ import annotations

from typing import Optional
from urllib.parse import urldefrag, urljoin, urlsplit

ALLOWED_SCHEMES = frozenset({"http", "https"})


def normalize_url(raw: Optional[str], base: Optional[str] = None) -> Optional[str]:
    """Canonicalize *raw* against *base* for stable deduplication.

    - Joins relative references against the base
    - Drops the fragment
    - Keeps scheme, host, port, path and query exactly as parsed (default
      ports and host case are not rewritten)

    Returns ``None`` when the result is not an absolute http(s) URL. A seed
    (``base=None``) must already be absolute.
    """
    if raw is None:
        return None
    candidate = raw.strip()
    if not candidate:
        return None

    try:
        joined = urljoin(base, candidate) if base else candidate
        defragged, _ = urldefrag(joined)
        parts = urlsplit(defragged)
        # Accessing .port validates it (raises ValueError when out of range).
        parts.port
    except ValueError:
        return None

    if parts.scheme.lower() not in ALLOWED_SCHEMES:
        return None
    if not parts.hostname:
        return None
    return defragged


def hostname(url: str) -> str:
    """Return the hostname of *url* as the URL parser reports it, or ``""``."""
    try:
        return urlsplit(url).hostname or ""
    except ValueError:
        return ""

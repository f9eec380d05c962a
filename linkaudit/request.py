"""Crawl request validation and the tagged response variant.

A request arrives as a plain mapping (JSON body, MCP tool arguments, CLI
namespace). Field names are accepted in camelCase or snake_case::

    {"urls": ["https://example.com"], "recursive": true, "maxUrls": 50,
     "maxDepth": 2, "rateLimit": 2, "sameDomainOnly": true}
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, Literal, Mapping, Optional, Tuple, Union

from .config import request_defaults_from_env
from .errors import RequestValidationError
from .results import CrawlResponse

_MISSING = object()


@dataclass(frozen=True)
class CrawlRequest:
    """Validated crawl parameters."""

    urls: Tuple[str, ...]
    recursive: bool = False
    max_urls: int = 100
    max_depth: int = 2
    rate_limit: float = 2.0
    same_domain_only: bool = True

    @classmethod
    def from_payload(
        cls,
        payload: Any,
        defaults: Optional[Mapping[str, Any]] = None,
    ) -> "CrawlRequest":
        """Validate *payload*; raises :class:`RequestValidationError`."""
        if not isinstance(payload, Mapping):
            raise RequestValidationError("request body must be an object")

        fallback: Dict[str, Any] = dict(request_defaults_from_env())
        if defaults:
            fallback.update(defaults)

        urls = _lookup(payload, "urls")
        if urls is _MISSING or not isinstance(urls, (list, tuple)):
            raise RequestValidationError("urls array required", field="urls", value=urls)
        if not all(isinstance(url, str) for url in urls):
            raise RequestValidationError(
                "urls must contain only strings", field="urls", value=urls
            )

        return cls(
            urls=tuple(urls),
            recursive=_bool_field(payload, "recursive", fallback.get("recursive", False)),
            max_urls=_int_field(payload, "max_urls", fallback.get("max_urls", 100)),
            max_depth=_int_field(payload, "max_depth", fallback.get("max_depth", 2)),
            rate_limit=_rate_field(payload, fallback.get("rate_limit", 2.0)),
            same_domain_only=_bool_field(
                payload, "same_domain_only", fallback.get("same_domain_only", True)
            ),
        )


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def _lookup(payload: Mapping[str, Any], name: str) -> Any:
    camel = _camel(name)
    if camel in payload:
        return payload[camel]
    if name in payload:
        return payload[name]
    return _MISSING


def _bool_field(payload: Mapping[str, Any], name: str, default: bool) -> bool:
    value = _lookup(payload, name)
    if value is _MISSING or value is None:
        return bool(default)
    if not isinstance(value, bool):
        raise RequestValidationError(
            f"{_camel(name)} must be a boolean", field=_camel(name), value=value
        )
    return value


def _int_field(payload: Mapping[str, Any], name: str, default: int) -> int:
    value = _lookup(payload, name)
    if value is _MISSING or value is None:
        return int(default)
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise RequestValidationError(
            f"{_camel(name)} must be a non-negative integer",
            field=_camel(name),
            value=value,
        )
    return value


def _rate_field(payload: Mapping[str, Any], default: float) -> float:
    value = _lookup(payload, "rate_limit")
    if value is _MISSING or value is None:
        value = default
    if (
        isinstance(value, bool)
        or not isinstance(value, (int, float))
        or not math.isfinite(value)
        or value <= 0
    ):
        raise RequestValidationError(
            "rateLimit must be a positive number", field="rateLimit", value=value
        )
    return float(value)


# ---------------------------------------------------------------------------
# Tagged response variant
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CrawlSucceeded:
    """The crawl ran; per-link failures live inside the results."""

    response: CrawlResponse
    kind: Literal["result"] = field(default="result", init=False)

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, **self.response.to_dict()}


@dataclass(frozen=True)
class CrawlRejected:
    """The request was malformed; nothing was crawled."""

    message: str
    field_name: str = ""
    status_code: int = 400
    kind: Literal["error"] = field(default="error", init=False)

    @classmethod
    def from_error(cls, exc: RequestValidationError) -> "CrawlRejected":
        return cls(message=str(exc), field_name=exc.field)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "kind": self.kind,
            "statusCode": self.status_code,
            "message": self.message,
        }
        if self.field_name:
            data["field"] = self.field_name
        return data


CrawlOutcome = Union[CrawlSucceeded, CrawlRejected]

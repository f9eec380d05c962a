"""Exceptions raised by the link audit engine."""

from __future__ import annotations

from typing import Any


class LinkAuditError(Exception):
    """Base class for link audit errors."""


class RequestValidationError(LinkAuditError, ValueError):
    """Raised when a crawl request is malformed; no crawl is performed."""

    def __init__(self, message: str, field: str = "", value: Any = None):
        self.field = field
        self.value = value
        super().__init__(message)

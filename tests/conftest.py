"""Shared fixtures and strict test-accounting guardrails."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Tuple, Union

import httpx
import pytest

from linkaudit.rate_limit import RateLimiter

Route = Union[Tuple[int, Dict[str, str], str], type]


def html_page(*hrefs: str, extra: str = "") -> str:
    """Build a small HTML page linking to *hrefs* in order."""
    anchors = "".join(f'<a href="{href}">link {i}</a>' for i, href in enumerate(hrefs))
    return f"<html><body><main>{anchors}{extra}</main></body></html>"


def ok_html(*hrefs: str) -> Tuple[int, Dict[str, str], str]:
    return 200, {"Content-Type": "text/html; charset=utf-8"}, html_page(*hrefs)


def redirect(location: str, status: int = 301) -> Tuple[int, Dict[str, str], str]:
    return status, {"Location": location}, ""


@dataclass
class MockWeb:
    """Routes requests by absolute URL; unknown URLs answer 404."""

    routes: Dict[str, Route] = field(default_factory=dict)
    calls: List[Tuple[str, str]] = field(default_factory=list)

    def handler(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.calls.append((request.method, url))
        route = self.routes.get(url)
        if route is None:
            return httpx.Response(404, headers={"Content-Type": "text/html"}, text="missing")
        if isinstance(route, type) and issubclass(route, Exception):
            raise route("simulated failure", request=request)
        status, headers, body = route
        return httpx.Response(status, headers=headers, text=body)

    def client(self, **kwargs) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler), **kwargs)

    def requested(self, url: str) -> int:
        return sum(1 for _, called in self.calls if called == url)


class RecordingLimiter(RateLimiter):
    """Limiter that records requested slot fractions and never sleeps."""

    def __init__(self, requests_per_second: float) -> None:
        super().__init__(requests_per_second)
        self.fractions: List[float] = []

    async def wait(self, fraction: float = 1.0) -> float:
        self.fractions.append(fraction)
        return 0.0


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in list(os.environ):
        if name.startswith("LINKAUDIT_"):
            monkeypatch.delenv(name)


@pytest.fixture
def mock_web() -> MockWeb:
    return MockWeb()


@pytest.fixture
def make_limiter() -> Callable[[float], RecordingLimiter]:
    def _make(rps: float = 1000.0) -> RecordingLimiter:
        return RecordingLimiter(rps)

    return _make


# ---------------------------------------------------------------------------
# Strict accounting: no skipped, deselected or xfail tests
# ---------------------------------------------------------------------------


@dataclass
class _TestAccounting:
    deselected: int = 0
    skipped: int = 0
    xfailed: int = 0
    xpassed: int = 0


_ACCOUNTING = _TestAccounting()


def pytest_deselected(items):  # pragma: no cover - pytest hook
    _ACCOUNTING.deselected += len(items)


def pytest_runtest_logreport(report):  # pragma: no cover - pytest hook
    if report.when not in {"setup", "call"}:
        return

    if getattr(report, "wasxfail", False):
        if report.outcome == "skipped":
            _ACCOUNTING.xfailed += 1
        elif report.outcome == "passed":
            _ACCOUNTING.xpassed += 1
        return

    if report.outcome == "skipped":
        _ACCOUNTING.skipped += 1


def pytest_sessionfinish(session, exitstatus):  # pragma: no cover - pytest hook
    violations: List[str] = [
        f"{name}={count}"
        for name, count in (
            ("deselected", _ACCOUNTING.deselected),
            ("skipped", _ACCOUNTING.skipped),
            ("xfailed", _ACCOUNTING.xfailed),
            ("xpassed", _ACCOUNTING.xpassed),
        )
        if count
    ]
    if not violations:
        return

    reporter = session.config.pluginmanager.get_plugin("terminalreporter")
    if reporter:
        reporter.write_sep(
            "=",
            "Strict guard failed: test accounting violations detected "
            f"({', '.join(violations)})",
        )
        reporter.write_line("Hard guard requires zero skipped/deselected/xfail/xpass tests.")

    session.exitstatus = 1

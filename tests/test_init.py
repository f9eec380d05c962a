from __future__ import annotations

import pytest

import linkaudit
from linkaudit.results import CrawlResponse


def test_public_names_resolve() -> None:
    for name in linkaudit.__all__:
        assert getattr(linkaudit, name) is not None


def test_unknown_attribute_raises() -> None:
    with pytest.raises(AttributeError):
        linkaudit.does_not_exist  # noqa: B018


def test_lazy_mcp_server() -> None:
    from linkaudit.mcp_server import mcp

    assert linkaudit.mcp is mcp


def test_crawl_links_runs_async_variant(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict = {}

    async def fake_crawl_links_async(urls, **kwargs):
        captured["urls"] = list(urls)
        captured.update(kwargs)
        return CrawlResponse()

    monkeypatch.setattr(linkaudit, "crawl_links_async", fake_crawl_links_async)

    response = linkaudit.crawl_links(["https://a.test/"], recursive=True, max_depth=1)

    assert isinstance(response, CrawlResponse)
    assert captured["urls"] == ["https://a.test/"]
    assert captured["recursive"] is True
    assert captured["max_depth"] == 1
    assert captured["max_urls"] == 100

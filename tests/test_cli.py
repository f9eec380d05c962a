"""Tests for linkaudit.cli and its helper modules."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

# We need to isolate CLI imports from _load_config side effects
with patch("dotenv.load_dotenv"), patch("shutil.copy"):
    from linkaudit.cli import _build_request, _run_audit_async, main

from linkaudit.cli_config import load_config
from linkaudit.cli_output import (
    format_report_json,
    format_report_markdown,
    response_to_dict,
    status_class,
    summarize,
    write_report,
)
from linkaudit.cli_parsers import parse_audit_args
from linkaudit.errors import RequestValidationError
from linkaudit.results import CrawlResponse, CrawlStats, LinkResult, LinkType


def _result(
    target: str,
    status: int,
    chain: str | None = None,
    link_type: LinkType = LinkType.internal,
    **kwargs,
) -> LinkResult:
    return LinkResult(
        source_url="https://a.test/",
        target_url=target,
        status=status,
        redirect_chain=f"{target} ({status})" if chain is None else chain,
        type=link_type,
        **kwargs,
    )


def _response() -> CrawlResponse:
    return CrawlResponse(
        results=[
            _result("https://a.test/ok", 200, anchor_text="OK"),
            _result(
                "https://a.test/moved",
                200,
                "https://a.test/moved (301) -> https://a.test/new (200)",
            ),
            _result("https://a.test/gone", 404, anchor_text="a | b"),
            _result(
                "https://b.test/",
                0,
                "",
                link_type=LinkType.external,
                error="timed out",
            ),
        ],
        stats=CrawlStats(total_links=4, visited=1, remaining=2),
    )


class TestParseAuditArgs:
    def test_defaults(self):
        args = parse_audit_args(["https://a.test/"])
        assert args.urls == ["https://a.test/"]
        assert args.recursive is False
        assert args.max_urls is None
        assert args.max_depth is None
        assert args.rate_limit is None
        assert args.same_domain_only is True
        assert args.json_output is False
        assert args.broken_only is False
        assert args.fail_on_broken is False
        assert args.output is None

    def test_all_options(self):
        args = parse_audit_args(
            [
                "https://a.test/",
                "https://b.test/",
                "-r",
                "--max-urls",
                "50",
                "--max-depth",
                "0",
                "--rate-limit",
                "0.5",
                "--all-domains",
                "--json",
                "--broken-only",
                "--fail-on-broken",
                "-o",
                "out.json",
                "-v",
            ]
        )
        assert args.urls == ["https://a.test/", "https://b.test/"]
        assert args.recursive is True
        assert args.max_urls == 50
        assert args.max_depth == 0
        assert args.rate_limit == 0.5
        assert args.same_domain_only is False
        assert args.json_output is True
        assert args.output == "out.json"
        assert args.verbose is True

    @pytest.mark.parametrize(
        "argv",
        [
            [],
            ["https://a.test/", "--max-urls", "-1"],
            ["https://a.test/", "--max-depth", "two"],
            ["https://a.test/", "--rate-limit", "0"],
        ],
    )
    def test_invalid_arguments_exit(self, argv):
        with pytest.raises(SystemExit) as exc_info:
            parse_audit_args(argv)
        assert exc_info.value.code == 2


class TestBuildRequest:
    def test_cli_values(self):
        args = parse_audit_args(["https://a.test/", "-r", "--max-urls", "5"])
        request = _build_request(args)
        assert request.urls == ("https://a.test/",)
        assert request.recursive is True
        assert request.max_urls == 5
        assert request.max_depth == 2

    def test_env_defaults(self, monkeypatch):
        monkeypatch.setenv("LINKAUDIT_MAX_DEPTH", "5")
        monkeypatch.setenv("LINKAUDIT_RATE_LIMIT", "3")
        request = _build_request(parse_audit_args(["https://a.test/", "--rate-limit", "7"]))
        assert request.max_depth == 5
        assert request.rate_limit == 7.0


class TestSummaries:
    @pytest.mark.parametrize(
        "status,expected",
        [(0, "unreachable"), (200, "2xx"), (301, "3xx"), (404, "4xx"), (503, "5xx")],
    )
    def test_status_class(self, status, expected):
        assert status_class(status) == expected

    def test_summarize(self):
        summary = summarize(_response().results)
        assert summary == {
            "total": 4,
            "internal": 3,
            "external": 1,
            "broken": 2,
            "redirected": 1,
            "errors": 1,
            "by_status": {"2xx": 2, "4xx": 1, "unreachable": 1},
        }

    def test_summarize_empty(self):
        assert summarize([])["total"] == 0


class TestFormatReport:
    def test_markdown(self):
        text = format_report_markdown(_response())
        assert text.startswith("# Link audit")
        assert "**4 links** (3 internal, 1 external) - 2 broken, 1 redirected" in text
        assert "_Pages visited: 1, still queued: 2_" in text
        assert "Status: 2xx=2, 4xx=1, unreachable=1" in text
        assert "https://a.test/moved (301) -> https://a.test/new (200)" in text
        assert "timed out" in text
        assert "a \\| b" in text
        table_rows = [line for line in text.splitlines() if line.startswith("| ")]
        assert len(table_rows) == 5

    def test_markdown_broken_only(self):
        text = format_report_markdown(_response(), broken_only=True)
        assert "https://a.test/gone" in text
        assert "https://b.test/" in text
        assert "https://a.test/ok" not in text

    def test_markdown_no_broken(self):
        response = CrawlResponse(results=[_result("https://a.test/ok", 200)])
        text = format_report_markdown(response, broken_only=True)
        assert "_No broken links found._" in text

    def test_markdown_empty(self):
        assert "_No links found._" in format_report_markdown(CrawlResponse())

    def test_json(self):
        data = json.loads(format_report_json(_response()))
        assert data["stats"] == {"totalLinks": 4, "visited": 1, "remaining": 2}
        assert data["summary"]["broken"] == 2
        assert data["results"][3]["error"] == "timed out"
        assert "error" not in data["results"][0]

    def test_response_to_dict(self):
        data = response_to_dict(_response())
        assert set(data) == {"results", "stats", "summary"}


class TestWriteReport:
    def test_stdout(self, capsys):
        write_report("Hello", None)
        assert capsys.readouterr().out == "Hello\n"

    def test_file(self, tmp_path: Path):
        target = tmp_path / "nested" / "report.md"
        write_report("Content", str(target))
        assert target.read_text() == "Content"


class TestLoadConfig:
    def _load(self, tmp_path: Path, *, cwd=None, environ=None, copy_file=None, example=None):
        load_env = MagicMock()
        copy_file = copy_file or MagicMock()
        loaded = load_config(
            cwd=cwd or tmp_path,
            load_env=load_env,
            copy_file=copy_file,
            config_env_file=tmp_path / "cfg" / ".env",
            example_file=example or tmp_path / "missing.example",
            environ=environ or {},
        )
        return loaded, load_env, copy_file

    def test_explicit_file_wins(self, tmp_path: Path):
        explicit = tmp_path / "custom.env"
        explicit.write_text("")
        (tmp_path / ".env").write_text("")
        loaded, load_env, _ = self._load(
            tmp_path, environ={"LINKAUDIT_ENV_FILE": str(explicit)}
        )
        assert loaded == explicit
        load_env.assert_called_once_with(explicit)

    def test_local_env(self, tmp_path: Path):
        (tmp_path / ".env").write_text("LINKAUDIT_TIMEOUT=1\n")
        loaded, load_env, _ = self._load(tmp_path)
        assert loaded == tmp_path / ".env"
        load_env.assert_called_once_with(tmp_path / ".env")

    def test_missing_explicit_file_falls_through(self, tmp_path: Path):
        (tmp_path / ".env").write_text("")
        loaded, _, _ = self._load(
            tmp_path, environ={"LINKAUDIT_ENV_FILE": str(tmp_path / "nope.env")}
        )
        assert loaded == tmp_path / ".env"

    def test_user_config(self, tmp_path: Path):
        user_env = tmp_path / "cfg" / ".env"
        user_env.parent.mkdir()
        user_env.write_text("")
        loaded, load_env, copy_file = self._load(tmp_path, cwd=tmp_path / "elsewhere")
        assert loaded == user_env
        load_env.assert_called_once_with(user_env)
        copy_file.assert_not_called()

    def test_example_copied(self, tmp_path: Path):
        example = tmp_path / ".env.example"
        example.write_text("LINKAUDIT_RATE_LIMIT=2\n")
        user_env = tmp_path / "cfg" / ".env"
        loaded, load_env, copy_file = self._load(
            tmp_path, cwd=tmp_path / "elsewhere", example=example
        )
        assert loaded == user_env
        copy_file.assert_called_once_with(example, user_env)
        load_env.assert_called_once_with(user_env)

    def test_nothing_to_load(self, tmp_path: Path):
        loaded, load_env, copy_file = self._load(tmp_path, cwd=tmp_path / "elsewhere")
        assert loaded is None
        load_env.assert_not_called()
        copy_file.assert_not_called()

    def test_copy_error_ignored(self, tmp_path: Path):
        example = tmp_path / ".env.example"
        example.write_text("")
        loaded, load_env, _ = self._load(
            tmp_path,
            cwd=tmp_path / "elsewhere",
            example=example,
            copy_file=MagicMock(side_effect=OSError("read-only")),
        )
        assert loaded is None
        load_env.assert_not_called()


class _FakeScheduler:
    response = CrawlResponse()

    def __init__(self, request, **kwargs):
        self.request = request
        self.kwargs = kwargs

    async def run(self):
        return self.response


class TestRunAuditAsync:
    @pytest.mark.asyncio
    async def test_markdown_to_stdout(self, capsys):
        args = parse_audit_args(["https://a.test/"])
        with patch("linkaudit.cli.CrawlScheduler", _FakeScheduler):
            _FakeScheduler.response = _response()
            result = await _run_audit_async(args)
        assert result == 0
        assert "# Link audit" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_json_to_file(self, tmp_path: Path):
        target = tmp_path / "links.json"
        args = parse_audit_args(["https://a.test/", "--json", "-o", str(target)])
        with patch("linkaudit.cli.CrawlScheduler", _FakeScheduler):
            _FakeScheduler.response = _response()
            result = await _run_audit_async(args)
        assert result == 0
        assert json.loads(target.read_text())["stats"]["totalLinks"] == 4

    @pytest.mark.asyncio
    async def test_fail_on_broken(self, capsys):
        args = parse_audit_args(["https://a.test/", "--fail-on-broken"])
        with patch("linkaudit.cli.CrawlScheduler", _FakeScheduler):
            _FakeScheduler.response = _response()
            assert await _run_audit_async(args) == 1

    @pytest.mark.asyncio
    async def test_fail_on_broken_clean_run(self, capsys):
        args = parse_audit_args(["https://a.test/", "--fail-on-broken"])
        with patch("linkaudit.cli.CrawlScheduler", _FakeScheduler):
            _FakeScheduler.response = CrawlResponse(results=[_result("https://a.test/ok", 200)])
            assert await _run_audit_async(args) == 0


class TestMainEntryPoint:
    def test_main_success(self):
        with patch("linkaudit.cli._run_audit_async", new_callable=AsyncMock) as mock:
            mock.return_value = 0
            assert main(["https://a.test/"]) == 0
            mock.assert_awaited_once()

    def test_main_propagates_exit_code(self):
        with patch("linkaudit.cli._run_audit_async", new_callable=AsyncMock, return_value=1):
            assert main(["https://a.test/", "--fail-on-broken"]) == 1

    def test_main_validation_error(self):
        with patch(
            "linkaudit.cli._run_audit_async",
            new_callable=AsyncMock,
            side_effect=RequestValidationError("urls array required", field="urls"),
        ):
            assert main(["https://a.test/"]) == 2

    def test_main_interrupted(self):
        with patch(
            "linkaudit.cli._run_audit_async",
            new_callable=AsyncMock,
            side_effect=KeyboardInterrupt,
        ):
            assert main(["https://a.test/"]) == 130

    def test_main_error(self):
        with patch(
            "linkaudit.cli._run_audit_async",
            new_callable=AsyncMock,
            side_effect=Exception("error"),
        ):
            assert main(["https://a.test/", "-v"]) == 1

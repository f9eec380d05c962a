"""Output and formatting helpers for audit reports."""

from __future__ import annotations

import json
import logging
from collections import Counter
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from .results import CrawlResponse, LinkResult, LinkType


def format_timestamp() -> str:
    """Get current timestamp in ISO format."""
    return datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")


def status_class(status: int) -> str:
    """Bucket a status code: ``2xx``..``5xx``, or ``unreachable`` for 0."""
    if status <= 0:
        return "unreachable"
    return f"{status // 100}xx"


def summarize(results: Iterable[LinkResult]) -> Dict[str, Any]:
    """Aggregate counts for a health overview of the audited links."""
    results = list(results)
    classes = Counter(status_class(r.status) for r in results)
    return {
        "total": len(results),
        "internal": sum(1 for r in results if r.type is LinkType.internal),
        "external": sum(1 for r in results if r.type is LinkType.external),
        "broken": sum(1 for r in results if r.is_broken),
        "redirected": sum(1 for r in results if " -> " in r.redirect_chain),
        "errors": sum(1 for r in results if r.error),
        "by_status": dict(sorted(classes.items())),
    }


def response_to_dict(response: CrawlResponse) -> Dict[str, Any]:
    data = response.to_dict()
    data["summary"] = summarize(response.results)
    return data


def format_report_json(response: CrawlResponse) -> str:
    return json.dumps(response_to_dict(response), indent=2, ensure_ascii=False)


def _cell(text: Optional[str]) -> str:
    if not text:
        return ""
    return text.replace("|", "\\|").replace("\n", " ")


def format_report_markdown(
    response: CrawlResponse,
    *,
    broken_only: bool = False,
) -> str:
    """Format results as a markdown report.

    Example output:
    # Link audit
    _Generated: 2026-01-01 12:00:00 UTC_

    **12 links** (9 internal, 3 external) - 1 broken, 2 redirected
    ...
    """
    summary = summarize(response.results)
    stats = response.stats
    lines: List[str] = [
        "# Link audit",
        f"_Generated: {format_timestamp()}_",
        "",
        (
            f"**{summary['total']} links** ({summary['internal']} internal, "
            f"{summary['external']} external) - {summary['broken']} broken, "
            f"{summary['redirected']} redirected"
        ),
        f"_Pages visited: {stats.visited}, still queued: {stats.remaining}_",
        "",
    ]

    if summary["by_status"]:
        lines.append(
            "Status: "
            + ", ".join(f"{name}={count}" for name, count in summary["by_status"].items())
        )
        lines.append("")

    rows = [r for r in response.results if r.is_broken] if broken_only else response.results
    if not rows:
        lines.append("_No broken links found._" if broken_only else "_No links found._")
        return "\n".join(lines)

    lines.append("| Status | Type | Depth | Source | Target | Anchor | Rel | Redirects / Error |")
    lines.append("|---|---|---|---|---|---|---|---|")
    for r in rows:
        detail = ""
        if r.error:
            detail = r.error
        elif " -> " in r.redirect_chain:
            detail = r.redirect_chain
        lines.append(
            "| {status} | {type} | {depth} | {source} | {target} | {anchor} | {rel} | {detail} |".format(
                status=r.status,
                type=r.type.value,
                depth=r.depth,
                source=_cell(r.source_url),
                target=_cell(r.target_url),
                anchor=_cell(r.anchor_text),
                rel=_cell(r.rel),
                detail=_cell(detail),
            )
        )
    return "\n".join(lines)


def write_report(text: str, output: Optional[str]) -> None:
    """Print *text*, or write it to *output* when given."""
    if output is None:
        print(text)
        return
    path = Path(output)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)
    logging.info("Wrote %s", path)

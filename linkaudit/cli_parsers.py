"""Argument parser construction for the audit command."""

from __future__ import annotations

import argparse
from typing import List, Optional


def _positive_float(value: str) -> float:
    try:
        number = float(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid number: {value!r}") from exc
    if number <= 0:
        raise argparse.ArgumentTypeError("must be greater than zero")
    return number


def _non_negative_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer: {value!r}") from exc
    if number < 0:
        raise argparse.ArgumentTypeError("must not be negative")
    return number


def _add_audit_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "urls",
        nargs="+",
        help="Seed URL(s) whose links should be checked",
    )
    parser.add_argument(
        "-r",
        "--recursive",
        action="store_true",
        help="Follow internal links breadth-first (BFS strategy)",
    )
    parser.add_argument(
        "--max-urls",
        type=_non_negative_int,
        default=None,
        help="Maximum number of link results (default: LINKAUDIT_MAX_URLS or 100)",
    )
    parser.add_argument(
        "--max-depth",
        type=_non_negative_int,
        default=None,
        help="Maximum crawl depth for recursive audits (default: LINKAUDIT_MAX_DEPTH or 2)",
    )
    parser.add_argument(
        "--rate-limit",
        type=_positive_float,
        default=None,
        help="Requests per second across the crawl (default: LINKAUDIT_RATE_LIMIT or 2)",
    )
    parser.add_argument(
        "--all-domains",
        action="store_false",
        dest="same_domain_only",
        help="Recurse into internal hosts that are not seed hosts",
    )

    output_group = parser.add_argument_group("Output")
    output_group.add_argument(
        "-o",
        "--output",
        type=str,
        default=None,
        help="Write the report to a file instead of stdout",
    )
    output_group.add_argument(
        "--json",
        action="store_true",
        dest="json_output",
        help="Output as JSON (results + stats)",
    )
    output_group.add_argument(
        "--broken-only",
        action="store_true",
        help="Only list broken links (status 0 or >= 400) in the report",
    )
    output_group.add_argument(
        "--fail-on-broken",
        action="store_true",
        help="Exit with status 1 when any broken link is found",
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )


def build_audit_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="linkaudit",
        description="Audit the links of web pages: status, redirect chains, internal/external.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""\
Examples:
  # Check every link on one page
  linkaudit https://example.com

  # Recursive audit with limits
  linkaudit https://docs.example.com --recursive --max-depth 2 --max-urls 200

  # Slow down to one request per second
  linkaudit https://example.com --rate-limit 1

  # JSON report to a file
  linkaudit https://example.com --json -o links.json

  # CI check: fail when broken links exist
  linkaudit https://example.com -r --broken-only --fail-on-broken
""",
    )
    _add_audit_args(parser)
    return parser


def parse_audit_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    return build_audit_parser().parse_args(argv)

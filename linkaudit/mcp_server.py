"""MCP Server for the link auditor.

Provides tools for:
- Checking every link on one or more pages (status, redirect chain, type)
- Recursive breadth-first link audits with URL, depth and rate limits

Supports both STDIO and HTTP transports.

Usage:
    # STDIO (for desktop MCP clients)
    python -m linkaudit.mcp_server

    # HTTP (for remote access)
    python -m linkaudit.mcp_server --transport http --port 8000

    # Or via FastMCP CLI
    fastmcp run linkaudit/mcp_server.py:mcp --transport http --port 8000

Environment Variables:
    LINKAUDIT_USER_AGENT: User-Agent header for all requests
    LINKAUDIT_TIMEOUT: Per-request timeout in seconds (default: 30)
    LINKAUDIT_MAX_REDIRECTS: Redirect hop ceiling (default: 10)
    LINKAUDIT_RATE_LIMIT / LINKAUDIT_MAX_URLS / LINKAUDIT_MAX_DEPTH: request defaults
"""

from __future__ import annotations

import argparse
import json
import logging
from enum import Enum
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv
from fastmcp import FastMCP

from .cli_output import format_report_markdown, response_to_dict
from .config import CrawlSettings, request_defaults_from_env
from .events import log_event
from .request import CrawlRejected

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
    datefmt="%H:%M:%S",
)
LOGGER = logging.getLogger(__name__)

# Load .env before reading environment variables
load_dotenv()

# Create the MCP server
mcp = FastMCP(
    name="Link Auditor",
    instructions="""
    A link auditing server that provides:

    1. scrape_links: Check every link on the given pages. For each link it
       reports the HTTP status after following redirects hop by hop, the
       redirect chain, internal/external type, anchor text and rel tokens.
       With recursive=true it expands internal links breadth-first.

    Output formats:
    - markdown: Summary plus a results table (default)
    - json: Full results, stats and summary counts
    """,
)


class OutputFormat(str, Enum):
    """Output format for audit results."""

    markdown = "markdown"
    json = "json"


def _rejection_payload(outcome: CrawlRejected) -> str:
    return json.dumps(outcome.to_dict(), ensure_ascii=False)


# =============================================================================
# LINK AUDIT TOOL
# =============================================================================


@mcp.tool
async def scrape_links(
    urls: List[str],
    recursive: bool = False,
    max_urls: Optional[int] = None,
    max_depth: Optional[int] = None,
    rate_limit: Optional[float] = None,
    same_domain_only: bool = True,
    output_format: str = "markdown",
    broken_only: bool = False,
):
    """
    Check the links on one or more web pages.

    Args:
        urls: Seed URLs (absolute http/https)
        recursive: Follow internal links breadth-first (default: false)
        max_urls: Maximum number of link results (default: 100)
        max_depth: Maximum depth for recursive crawling (default: 2)
        rate_limit: Requests per second across the crawl (default: 2)
        same_domain_only: Only recurse into seed hostnames (default: true)
        output_format: "markdown" (default) or "json"
        broken_only: Only list broken links in markdown output (default: false)

    Returns:
        The audit report in the requested format. Malformed requests return
        a JSON error object with statusCode 400.

    Examples:
        # All links on a page
        scrape_links(urls=["https://example.com"])

        # Recursive audit, JSON output
        scrape_links(urls=["https://docs.example.com"], recursive=True,
                     max_urls=200, output_format="json")
    """
    from . import scrape_links_async

    # Validate output format
    try:
        fmt = OutputFormat(output_format.lower())
    except ValueError:
        fmt = OutputFormat.markdown

    payload: Dict[str, Any] = {
        "urls": urls,
        "recursive": recursive,
        "same_domain_only": same_domain_only,
    }
    if max_urls is not None:
        payload["max_urls"] = max_urls
    if max_depth is not None:
        payload["max_depth"] = max_depth
    if rate_limit is not None:
        payload["rate_limit"] = rate_limit

    LOGGER.info("Auditing links of %d URL(s)...", len(urls or []))
    outcome = await scrape_links_async(
        payload,
        settings=CrawlSettings.from_env(),
        on_event=log_event,
    )

    if outcome.kind == "error":
        LOGGER.error("Rejected request: %s", outcome.message)
        return _rejection_payload(outcome)

    response = outcome.response
    LOGGER.info(
        "Audit complete: %d links (%d visited, %d remaining)",
        response.stats.total_links,
        response.stats.visited,
        response.stats.remaining,
    )

    if fmt == OutputFormat.json:
        return json.dumps(response_to_dict(response), indent=2, ensure_ascii=False)
    return format_report_markdown(response, broken_only=broken_only)


# =============================================================================
# CLI ENTRY POINT
# =============================================================================


def build_server_parser() -> argparse.ArgumentParser:
    """Argument parser for ``linkaudit-mcp``."""
    parser = argparse.ArgumentParser(
        prog="linkaudit-mcp",
        description="Serve the scrape_links tool over MCP.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""\
Environment Variables:
    LINKAUDIT_USER_AGENT     User-Agent header for all requests
    LINKAUDIT_TIMEOUT        Per-request timeout in seconds (default: 30)
    LINKAUDIT_RATE_LIMIT     Default requests per second (default: 2)

Examples:
    linkaudit-mcp                                  # STDIO for desktop clients
    linkaudit-mcp --transport http --port 9000     # streamable HTTP at /mcp
    linkaudit-mcp --log-level DEBUG                # log every checked link
""",
    )
    parser.add_argument("--transport", choices=["stdio", "http"], default="stdio")
    parser.add_argument("--host", default="127.0.0.1", help="HTTP bind address")
    parser.add_argument("--port", type=int, default=8000, help="HTTP port")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for ``linkaudit-mcp``."""
    args = build_server_parser().parse_args(argv)
    logging.getLogger().setLevel(args.log_level)

    settings = CrawlSettings.from_env()
    defaults = request_defaults_from_env()
    LOGGER.info(
        "Link auditor: user-agent=%r timeout=%.1fs max_redirects=%d rate_limit=%.2f/s",
        settings.user_agent,
        settings.request_timeout,
        settings.max_redirects,
        defaults["rate_limit"],
    )

    if args.transport == "stdio":
        mcp.run(transport="stdio")
        return
    LOGGER.info("Serving MCP over HTTP at http://%s:%d/mcp", args.host, args.port)
    mcp.run(transport="http", host=args.host, port=args.port)


if __name__ == "__main__":
    main()

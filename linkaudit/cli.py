"""Command-line interface for the link auditor."""

from __future__ import annotations

import argparse
import asyncio
import logging
import shutil
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv

from .cli_config import load_config


def _load_config() -> None:
    load_config(
        cwd=Path.cwd(),
        load_env=load_dotenv,
        copy_file=shutil.copy,
    )


_load_config()

from .cli_output import format_report_json, format_report_markdown, write_report
from .cli_parsers import parse_audit_args
from .config import CrawlSettings, request_defaults_from_env
from .errors import RequestValidationError
from .events import log_event
from .request import CrawlRequest
from .results import CrawlResponse
from .scheduler import CrawlScheduler


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.DEBUG if verbose else logging.WARNING)


def _build_request(args: argparse.Namespace) -> CrawlRequest:
    payload: Dict[str, Any] = {
        "urls": list(args.urls),
        "recursive": args.recursive,
        "same_domain_only": args.same_domain_only,
    }
    for name in ("max_urls", "max_depth", "rate_limit"):
        value = getattr(args, name, None)
        if value is not None:
            payload[name] = value
    return CrawlRequest.from_payload(payload, defaults=request_defaults_from_env())


async def _run_audit_async(args: argparse.Namespace) -> int:
    """Main async entry point for an audit."""
    request = _build_request(args)
    scheduler = CrawlScheduler(
        request,
        settings=CrawlSettings.from_env(),
        on_event=log_event,
    )
    response: CrawlResponse = await scheduler.run()

    if args.json_output:
        output = format_report_json(response)
    else:
        output = format_report_markdown(response, broken_only=args.broken_only)
    write_report(output, args.output)

    broken = [r for r in response.results if r.is_broken]
    if broken:
        logging.warning("%d broken link(s) found", len(broken))
    if args.fail_on_broken and broken:
        return 1
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point for the linkaudit command."""
    args = parse_audit_args(argv)
    _setup_logging(args.verbose)

    try:
        return asyncio.run(_run_audit_async(args))
    except RequestValidationError as exc:
        logging.error("Invalid request: %s", exc)
        return 2
    except KeyboardInterrupt:
        logging.info("Interrupted")
        return 130
    except Exception as exc:
        logging.error("Error: %s", exc)
        if args.verbose:
            logging.exception("Full traceback:")
        return 1


if __name__ == "__main__":
    sys.exit(main())

"""Command-line interface for the garment image scraper."""

import asyncio
import json
import sys
from dataclasses import replace
from typing import List, Optional, Tuple

from garment_scraper.browser_config import STEALTH_CONFIG, BrowserConfig
from garment_scraper.config import ScraperConfig, settings
from garment_scraper.exceptions import LaunchError
from garment_scraper.infrastructure.browser_session import BrowserSessionManager
from garment_scraper.logging_config import get_logger, setup_logging
from garment_scraper.models import BatchUpdate, ProxyConfig, ScrapeRequest
from garment_scraper.orchestrator import BatchOrchestrator, duplicate_urls
from garment_scraper.output import format_text, results_to_dict, write_json

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_PRODUCT_FAILED = 1
EXIT_LAUNCH_FAILED = 2


def build_requests(urls: List[str], proxy: Optional[str] = None) -> List[ScrapeRequest]:
    """Build scrape requests for URLs sharing one optional proxy."""
    proxy_config = ProxyConfig.parse(proxy) if proxy else None
    return [ScrapeRequest(url=url, proxy=proxy_config) for url in urls]


def _print_progress(update: BatchUpdate) -> None:
    done = len(update.results)
    print(
        f"Batch {update.batch_index + 1}/{update.total_batches} done "
        f"({done} products scraped)",
        file=sys.stderr,
    )


def build_configs(args) -> Tuple[ScraperConfig, BrowserConfig]:
    """
    Resolve scraper and browser configuration for a scrape run.

    Raises:
        ValueError: If a tunable or browser setting is out of range
            (pydantic's ValidationError is a ValueError)
    """
    config = ScraperConfig.from_file(args.config) if args.config else ScraperConfig.from_env()
    overrides = {}
    if args.batch_size is not None:
        overrides["batch_size"] = args.batch_size
    if args.max_retries is not None:
        overrides["max_retries"] = args.max_retries
    if overrides:
        config = replace(config, **overrides)

    browser_config = BrowserConfig(**{
        **STEALTH_CONFIG.model_dump(),
        "headless": settings.HEADLESS and not args.headed,
        "browser_type": settings.BROWSER_TYPE,
    })
    return config, browser_config


async def _async_scrape(
    args,
    requests: List[ScrapeRequest],
    config: ScraperConfig,
    browser_config: BrowserConfig,
) -> int:
    """Run a scrape cycle for already-validated inputs."""
    orchestrator = BatchOrchestrator(BrowserSessionManager(browser_config), config)

    try:
        results = await orchestrator.scrape_all(requests, on_batch=_print_progress)
    except LaunchError as e:
        logger.error(f"Browser launch failed: {e}")
        print(f"\n❌ Could not start the browser: {e}", file=sys.stderr)
        return EXIT_LAUNCH_FAILED

    if args.output == "json":
        if args.output_file:
            path = write_json(results, args.output_file)
            print(f"Results written to {path}", file=sys.stderr)
        else:
            print(json.dumps(results_to_dict(results), indent=2))
    else:
        print(format_text(results))

    return EXIT_OK if all(result.ok for result in results.values()) else EXIT_PRODUCT_FAILED


def scrape_command(args) -> int:
    """Handle the 'scrape' subcommand."""
    try:
        requests = build_requests(args.urls, args.proxy)
        duplicates = duplicate_urls(requests)
        if duplicates:
            raise ValueError(f"Duplicate product URLs: {', '.join(duplicates)}")
        config, browser_config = build_configs(args)
    except ValueError as e:
        logger.error(f"Invalid scrape arguments: {e}")
        print(f"❌ {e}", file=sys.stderr)
        return EXIT_PRODUCT_FAILED
    return asyncio.run(_async_scrape(args, requests, config, browser_config))


def build_parser():
    """Build the argument parser."""
    import argparse

    parser = argparse.ArgumentParser(
        description="Garment Scraper - Extract per-color product images from product pages"
    )

    # Global flags (before subcommands)
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=settings.LOG_LEVEL.upper() if settings.LOG_LEVEL.upper() in
        ("DEBUG", "INFO", "WARNING", "ERROR") else "INFO",
        help="Set logging verbosity (default: INFO)",
    )
    parser.add_argument(
        "--log-file",
        help="Write logs to file in addition to console",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    scrape_parser = subparsers.add_parser(
        "scrape", help="Scrape every color variant's images from product pages."
    )
    scrape_parser.add_argument(
        "urls", nargs="+", help="Product page URLs (one or more)"
    )
    scrape_parser.add_argument(
        "--proxy",
        help="Proxy for all requests: [scheme://][user[:pass]@]host:port",
    )
    scrape_parser.add_argument(
        "--batch-size",
        type=int,
        help="Products scraped concurrently per batch (default: 3)",
    )
    scrape_parser.add_argument(
        "--max-retries",
        type=int,
        help="Navigation attempts per product (default: 3)",
    )
    scrape_parser.add_argument(
        "--headed",
        action="store_true",
        help="Show the browser window",
    )
    scrape_parser.add_argument(
        "--config",
        help="JSON file with scraper tunables",
    )
    scrape_parser.add_argument(
        "--output",
        "-o",
        choices=["text", "json"],
        default="text",
        help="Output format (default: text)",
    )
    scrape_parser.add_argument(
        "--output-file",
        "-f",
        help="Write output to file (only for json format)",
    )
    scrape_parser.set_defaults(func=scrape_command)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    # Configure logging based on flags
    setup_logging(
        level=args.log_level,
        log_file=getattr(args, 'log_file', None),
    )

    if hasattr(args, "func"):
        return args.func(args)

    parser.print_help()
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())

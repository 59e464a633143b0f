"""Command-line entrypoint for the business contact scraper."""

from __future__ import annotations

import argparse
import asyncio
import logging
from pathlib import Path
from typing import Mapping, Sequence

from .config import ScraperConfig, load_config_from_env, parse_categories
from .pipeline import Pipeline, RunSummary
from .shutdown import ShutdownCoordinator
from .targets import build_tasks

LOGGER = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FATAL = 1
EXIT_CONFIG = 2


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Collect business listings per city and category and harvest contact emails to CSV"
    )
    parser.add_argument("--output", type=Path, default=None, help="CSV file to append records to")
    parser.add_argument("--dedupe-file", type=Path, default=None, help="JSON file holding processed business keys")
    parser.add_argument("--max-pages", type=int, default=None, help="Result pages to read per search")
    parser.add_argument(
        "--site-concurrency",
        type=int,
        default=None,
        help="Maximum number of listings enriched concurrently",
    )
    parser.add_argument("--max-retries", type=int, default=None, help="Retries per HTTP request")
    parser.add_argument(
        "--request-timeout",
        type=float,
        default=None,
        help="Per-request timeout in seconds",
    )
    parser.add_argument(
        "--categories",
        type=str,
        default=None,
        help="Comma-separated business categories to search (defaults to the built-in list)",
    )
    parser.add_argument(
        "--skip-website-crawl",
        action="store_true",
        help="Do not visit business websites; write listings without emails",
    )
    parser.add_argument(
        "--no-phone",
        action="store_true",
        help="Write the reduced schema without the phone column",
    )
    parser.add_argument(
        "--require-api-key",
        action="store_true",
        help="Exit before doing any work when SERPER_API_KEY is missing",
    )
    parser.add_argument("--log-level", type=str, default=None, help="Logging level (default: INFO)")
    return parser


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)


def build_config(args: argparse.Namespace, env: Mapping[str, str] | None = None) -> ScraperConfig:
    config = load_config_from_env(env)

    if args.output is not None:
        config.output_path = args.output
    if args.dedupe_file is not None:
        config.dedupe_path = args.dedupe_file
    if args.max_pages is not None:
        config.max_pages = args.max_pages
    if args.site_concurrency is not None:
        config.rate_limit.site_concurrency = args.site_concurrency
    if args.max_retries is not None:
        config.retry.max_retries = args.max_retries
    if args.request_timeout is not None:
        config.timeout.request_timeout = args.request_timeout
    categories = parse_categories(args.categories)
    if categories:
        config.categories = categories
    if args.skip_website_crawl:
        config.skip_website_crawl = True
    if args.no_phone:
        config.include_phone = False
    if args.require_api_key:
        config.require_api_key = True
    if args.log_level:
        config.log_level = args.log_level.upper()

    config.validate()
    return config


async def run_pipeline(config: ScraperConfig, *, pipeline: Pipeline | None = None) -> RunSummary:
    shutdown = pipeline.shutdown if pipeline is not None else ShutdownCoordinator()
    pipeline = pipeline or Pipeline.from_config(config, shutdown=shutdown)
    tasks = build_tasks(config.state_city_map, config.categories)
    LOGGER.info("Prepared %d tasks", len(tasks))

    shutdown.install()
    try:
        return await pipeline.run(tasks)
    finally:
        shutdown.uninstall()
        await pipeline.aclose()


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)

    try:
        config = build_config(args)
    except ValueError as exc:
        configure_logging()
        LOGGER.error("Invalid configuration: %s", exc)
        return EXIT_CONFIG

    configure_logging(config.log_level)
    if not config.has_api_key:
        LOGGER.warning("SERPER_API_KEY not set; fallback places search is disabled")

    try:
        summary = asyncio.run(run_pipeline(config))
    except Exception:
        LOGGER.exception("Fatal pipeline error")
        return EXIT_FATAL

    if summary.interrupted:
        LOGGER.info("Run interrupted; rerun to resume from the dedupe store")
    return EXIT_OK


__all__ = ["build_arg_parser", "build_config", "configure_logging", "main", "run_pipeline"]


if __name__ == "__main__":  # pragma: no cover - CLI entrypoint
    raise SystemExit(main())

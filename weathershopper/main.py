"""Command-line entry point: run one Weather Shopper purchase and exit pass/fail."""

from __future__ import annotations

import argparse
import asyncio
import sys
from typing import Iterable

from dotenv import load_dotenv
from playwright.async_api import async_playwright

from weathershopper.browser_env import BROWSER_FAMILIES, close_browser, launch_browser
from weathershopper.flow import FlowOrchestrator, FlowResult
from weathershopper.locators import LocatorResolver
from weathershopper.logging_config import configure_logging, get_logger
from weathershopper.monitoring import RunJournal
from weathershopper.session import ShopSession
from weathershopper.settings import ShopperSettings, load_settings

LOGGER = get_logger(__name__)


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments for the application."""

    parser = argparse.ArgumentParser(
        description="Run the Weather Shopper end-to-end purchase flow."
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to a YAML configuration file (default: bundled config.yml).",
    )
    parser.add_argument(
        "--browser",
        type=str.lower,
        choices=sorted(BROWSER_FAMILIES),
        default=None,
        help="Browser family to drive (overrides configuration).",
    )
    parser.add_argument(
        "--url",
        type=str,
        default=None,
        help="Storefront URL (overrides configuration).",
    )
    parser.add_argument(
        "--headless",
        action="store_true",
        help="Run the browser without a window.",
    )
    return parser.parse_args(list(argv) if argv is not None else None)


def resolve_settings(args: argparse.Namespace) -> ShopperSettings:
    settings = load_settings(args.config)
    overrides: dict[str, object] = {}
    if args.browser:
        overrides["browser"] = args.browser
    if args.url:
        overrides["base_url"] = args.url
    if args.headless:
        overrides["headless"] = True
    if not overrides:
        return settings
    return ShopperSettings.model_validate({**settings.model_dump(), **overrides})


def build_journal(settings: ShopperSettings) -> RunJournal:
    journal = settings.journal
    return RunJournal(
        log_path=journal.log_path,
        summary_path=journal.summary_path,
        enabled=journal.enabled,
    )


def exit_code(result: FlowResult) -> int:
    return 0 if result.passed else 1


def report(result: FlowResult) -> None:
    if result.passed:
        LOGGER.info(
            "Weather Shopper run passed: category=%s items=%s total=%s",
            result.category.value if result.category else None,
            [record.display_name for record in result.selections],
            result.cart.total_price if result.cart else None,
        )
        return
    LOGGER.error(
        "Weather Shopper run FAILED entering %s: %s",
        result.failed_stage.name if result.failed_stage else "unknown",
        result.reason,
    )


async def run_flow(settings: ShopperSettings) -> FlowResult:
    resolver = LocatorResolver(
        timeout_ms=settings.timeouts.default_ms,
        attempt_ms=settings.timeouts.attempt_ms,
    )
    async with async_playwright() as playwright:
        browser = await launch_browser(playwright, settings.browser, headless=settings.headless)
        try:
            page = await browser.new_page()
            session = ShopSession(page, resolver, settings.timeouts)
            orchestrator = FlowOrchestrator(session, settings, journal=build_journal(settings))
            return await orchestrator.run()
        finally:
            await close_browser(browser)
            LOGGER.info("Browser closed")


async def _async_main(argv: Iterable[str] | None = None) -> int:
    args = parse_args(argv)
    load_dotenv()
    configure_logging()
    settings = resolve_settings(args)
    LOGGER.info("Starting run: url=%s browser=%s", settings.base_url, settings.browser)

    result = await run_flow(settings)
    report(result)
    return exit_code(result)


def main() -> None:
    try:
        code = asyncio.run(_async_main())
    except KeyboardInterrupt:  # pragma: no cover - interactive safety
        LOGGER.info("Interrupted by user")
        code = 130
    sys.exit(code)


if __name__ == "__main__":
    main()

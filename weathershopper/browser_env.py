"""Centralised helpers for Playwright browser launch and pacing overrides."""

from __future__ import annotations

import os
import shlex
from typing import Any

from playwright.async_api import Browser, Playwright

from weathershopper.logging_config import get_logger

LOGGER = get_logger(__name__)

_FALSE_VALUES = {"0", "false", "no", "off"}

# family -> (playwright browser type, channel)
BROWSER_FAMILIES: dict[str, tuple[str, str | None]] = {
    "chrome": ("chromium", None),
    "firefox": ("firefox", None),
    "edge": ("chromium", "msedge"),
}
DEFAULT_BROWSER = "chrome"


def _as_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    return value.strip().lower() not in _FALSE_VALUES


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return float(raw.strip())
    except ValueError:
        return default


def normalize_browser(name: str | None) -> str:
    """Return the canonical browser family for *name* (blank means the default)."""

    if name is None or not name.strip():
        return DEFAULT_BROWSER
    family = name.strip().lower()
    if family not in BROWSER_FAMILIES:
        raise ValueError(
            f"Browser not supported: {name} (expected one of {', '.join(sorted(BROWSER_FAMILIES))})"
        )
    return family


def headless_enabled(default: bool = False) -> bool:
    """Return True if the browser should run without a window."""

    return _as_bool(os.getenv("WEATHERSHOPPER_HEADLESS"), default)


def slow_mo_ms() -> int | None:
    value = _env_int("WEATHERSHOPPER_SLOW_MO_MS", 0)
    return value if value > 0 else None


def launch_kwargs(browser: str, *, headless: bool | None = None) -> dict[str, Any]:
    """Return kwargs passed to ``<browser_type>.launch``."""

    family = normalize_browser(browser)
    _, channel = BROWSER_FAMILIES[family]

    args: list[str] = []
    if family == "chrome":
        args.extend(
            [
                "--start-maximized",
                "--disable-blink-features=AutomationControlled",
                "--disable-extensions",
                "--no-sandbox",
                "--disable-dev-shm-usage",
            ]
        )
    elif family == "edge":
        args.append("--start-maximized")

    extra_args = os.getenv("WEATHERSHOPPER_BROWSER_ARGS")
    if extra_args:
        args.extend(shlex.split(extra_args))

    kwargs: dict[str, Any] = {
        "headless": headless_enabled() if headless is None else headless,
    }
    if args:
        kwargs["args"] = args
    if channel:
        kwargs["channel"] = channel

    slow_mo = slow_mo_ms()
    if slow_mo:
        kwargs["slow_mo"] = slow_mo
    return kwargs


async def launch_browser(
    playwright: Playwright, browser: str, *, headless: bool | None = None
) -> Browser:
    """Launch the requested browser family."""

    family = normalize_browser(browser)
    type_name, _ = BROWSER_FAMILIES[family]
    kwargs = launch_kwargs(family, headless=headless)
    LOGGER.info(
        "Launching %s (engine=%s headless=%s)", family, type_name, kwargs["headless"]
    )
    browser_type = getattr(playwright, type_name)
    return await browser_type.launch(**kwargs)


async def close_browser(browser: Browser | None) -> None:
    """Close *browser*, logging instead of raising on teardown failures."""

    if browser is None:
        return
    try:
        await browser.close()
    except Exception as exc:
        LOGGER.warning("Failed to close browser: %s", exc)


def pacing_multiplier() -> float:
    return max(_env_float("WEATHERSHOPPER_PACING_MULTIPLIER", 1.0), 0.0)


def apply_pacing(interval_ms: int) -> int:
    """Scale a configured pacing interval by the global multiplier."""

    if interval_ms <= 0:
        return 0
    return int(interval_ms * pacing_multiplier())

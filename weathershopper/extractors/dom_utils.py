"""Helper utilities for safely reading and pacing storefront DOM interactions."""

from __future__ import annotations

import asyncio
import re
import time
from typing import Any, Awaitable, Callable

from playwright.async_api import Error as PlaywrightError

_NON_DIGITS = re.compile(r"[^0-9]")
_SIGNED_NUMBER = re.compile(r"([-−]?)\s*(\d+)")


async def settle(interval_ms: int) -> None:
    """Fixed pause for widget processing that cannot be observed directly."""

    if interval_ms <= 0:
        return
    await asyncio.sleep(interval_ms / 1000)


async def wait_until(
    predicate: Callable[[], Awaitable[bool]],
    timeout_ms: int,
    *,
    interval_ms: int = 100,
) -> bool:
    """Poll *predicate* until it returns True or the deadline passes.

    Browser errors raised by the predicate count as a falsy poll. The predicate
    is always evaluated at least once, even with a zero timeout.
    """

    deadline = time.monotonic() + max(timeout_ms, 0) / 1000
    while True:
        try:
            if await predicate():
                return True
        except PlaywrightError:
            pass
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            return False
        await asyncio.sleep(min(max(interval_ms, 1) / 1000, remaining))


async def wait_for_document_ready(scope: Any, timeout_ms: int) -> bool:
    """Wait for ``document.readyState`` to reach ``complete``."""

    async def _ready() -> bool:
        return (await scope.evaluate("document.readyState")) == "complete"

    return await wait_until(_ready, timeout_ms, interval_ms=200)


async def inner_text_safe(locator: Any, timeout: int = 3000) -> str | None:
    """Return the stripped inner text for *locator* while ignoring DOM failures."""

    if locator is None:
        return None

    try:
        result = await locator.inner_text(timeout=timeout)
    except PlaywrightError:
        return None

    if result is None:
        return None

    return result.strip()


async def input_value_safe(locator: Any, timeout: int = 3000) -> str:
    try:
        value = await locator.input_value(timeout=timeout)
    except PlaywrightError:
        return ""
    return value or ""


async def scroll_into_view(locator: Any) -> None:
    try:
        await locator.scroll_into_view_if_needed()
    except PlaywrightError:
        await locator.evaluate("(el) => el.scrollIntoView(true)")


def parse_price(text: str | None) -> int | None:
    """Strip every non-digit from *text* and parse what is left.

    ``"Price: Rs. 150"`` -> 150, ``"Rupees 350"`` -> 350, ``"Price:"`` -> None.
    """

    if text is None:
        return None
    digits = _NON_DIGITS.sub("", text)
    if not digits:
        return None
    return int(digits)


def format_price(amount: int, prefix: str = "Rs. ") -> str:
    return f"Price: {prefix}{amount}"


def parse_temperature(text: str | None) -> int | None:
    """Return the signed integer magnitude from text like ``"25 ℃"`` or ``"-3°C"``."""

    if not text:
        return None
    match = _SIGNED_NUMBER.search(text)
    if not match:
        return None
    sign, digits = match.groups()
    value = int(digits)
    return -value if sign else value


def mask_card_number(card_number: str | None) -> str:
    if card_number is None:
        return "****"
    cleaned = re.sub(r"\s+", "", card_number)
    if len(cleaned) < 4:
        return "****"
    return "*" * (len(cleaned) - 4) + cleaned[-4:]

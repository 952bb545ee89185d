"""Read-only view over the cart badge and the checkout cart table."""

from __future__ import annotations

from playwright.async_api import Error as PlaywrightError

import weathershopper.selectors as selectors
from weathershopper.errors import TargetNotFound
from weathershopper.extractors.dom_utils import inner_text_safe, parse_price
from weathershopper.logging_config import get_logger
from weathershopper.models import CartLine, CartSnapshot
from weathershopper.session import ShopSession

LOGGER = get_logger(__name__)


class CartLedger:
    """Reads cart state fresh from the page on every call; nothing is cached."""

    def __init__(self, session: ShopSession) -> None:
        self.session = session
        self.resolver = session.resolver

    async def _rows(self) -> tuple:
        try:
            resolution = await self.resolver.resolve_all(selectors.CART_ROWS, self.session.page)
        except TargetNotFound:
            LOGGER.warning("No cart rows rendered")
            return ()
        return resolution.handles

    async def item_count(self) -> int:
        return len(await self._rows())

    async def total_price(self) -> int:
        """Parsed ``#total`` value; empty or malformed text reads as 0."""

        resolution = await self.resolver.try_resolve(selectors.CART_TOTAL, self.session.page)
        text = await inner_text_safe(resolution.handle)
        total = parse_price(text)
        if total is None:
            LOGGER.warning("Cart total unreadable: %r", text)
            return 0
        return total

    async def snapshot(self) -> CartSnapshot:
        return CartSnapshot(item_count=await self.item_count(), total_price=await self.total_price())

    async def verify_count(self, expected: int) -> bool:
        actual = await self.item_count()
        LOGGER.info("Cart items - expected: %d, actual: %d", expected, actual)
        return actual == expected

    async def verify_total_positive(self) -> bool:
        total = await self.total_price()
        valid = total > 0
        LOGGER.info("Total price: %d - valid: %s", total, valid)
        return valid

    async def lines(self) -> list[CartLine]:
        """Name and price of every cart row, skipping rows without both cells."""

        lines: list[CartLine] = []
        for row in await self._rows():
            cells = row.locator(selectors.CART_CELLS)
            try:
                if await cells.count() < 2:
                    continue
            except PlaywrightError:
                continue
            name = await inner_text_safe(cells.nth(0))
            price = parse_price(await inner_text_safe(cells.nth(1)))
            if name and price is not None:
                lines.append(CartLine(name, price))
        return lines

    async def badge_count(self) -> int:
        """Item count shown in the category page badge ("Cart - 2"); 0 when unreadable."""

        resolution = await self.resolver.try_resolve(
            selectors.CART_BADGE,
            self.session.page,
            timeout_ms=self.session.timeouts.optional_ms,
        )
        count = parse_price(await inner_text_safe(resolution.handle))
        return count or 0

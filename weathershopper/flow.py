"""Forward-only purchase flow: home → category → cart → checkout → payment → success."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Awaitable, Callable
from urllib.parse import urlparse

from playwright.async_api import Error as PlaywrightError

import weathershopper.selectors as selectors
from weathershopper.cart import CartLedger
from weathershopper.catalog import CatalogScanner
from weathershopper.errors import (
    CartCountMismatch,
    ConditionUnreadable,
    InvalidCartTotal,
    PageLoadError,
    PaymentVerificationFailure,
    ShopperError,
    UnhandledConditionRange,
)
from weathershopper.extractors.dom_utils import (
    inner_text_safe,
    parse_temperature,
    scroll_into_view,
    settle,
    wait_until,
)
from weathershopper.logging_config import get_logger
from weathershopper.models import (
    CartSnapshot,
    Category,
    FillReport,
    FlowState,
    ProductRecord,
)
from weathershopper.monitoring import RunJournal
from weathershopper.payment import PaymentFormSynthesizer
from weathershopper.session import ShopSession
from weathershopper.settings import ShopperSettings, Thresholds

LOGGER = get_logger(__name__)

_CATEGORY_BUTTONS = {
    Category.MOISTURIZERS: selectors.BUY_MOISTURIZERS,
    Category.SUNSCREENS: selectors.BUY_SUNSCREENS,
}
_CATEGORY_HEADINGS = {
    Category.MOISTURIZERS: selectors.MOISTURIZERS_HEADING,
    Category.SUNSCREENS: selectors.SUNSCREENS_HEADING,
}


def choose_category(temperature: int, thresholds: Thresholds) -> Category:
    """Map a temperature to a catalog; the inclusive band [low, high] is unhandled."""

    if temperature < thresholds.low:
        return Category.MOISTURIZERS
    if temperature > thresholds.high:
        return Category.SUNSCREENS
    raise UnhandledConditionRange(temperature, thresholds.low, thresholds.high)


@dataclass
class FlowResult:
    state: FlowState = FlowState.HOME
    temperature: int | None = None
    category: Category | None = None
    selections: list[ProductRecord] = field(default_factory=list)
    cart: CartSnapshot | None = None
    fill_report: FillReport | None = None
    failed_stage: FlowState | None = None
    reason: str | None = None
    error: Exception | None = field(default=None, repr=False)

    @property
    def passed(self) -> bool:
        return self.state is FlowState.PAYMENT_CONFIRMED


class FlowOrchestrator:
    """Owns the session for one run and sequences every stage."""

    def __init__(
        self,
        session: ShopSession,
        settings: ShopperSettings,
        *,
        journal: RunJournal | None = None,
    ) -> None:
        self.session = session
        self.settings = settings
        self.resolver = session.resolver
        self.journal = journal
        self.scanner = CatalogScanner(session)
        self.ledger = CartLedger(session)
        self.payment = PaymentFormSynthesizer(
            session, timeouts=settings.timeouts, pacing=settings.pacing
        )
        self.state = FlowState.HOME
        self.result = FlowResult()

    def _emit(self, event: str, **fields: object) -> None:
        if self.journal is not None:
            self.journal.emit(event, **fields)

    def _advance(self, target: FlowState) -> None:
        if not self.state.can_advance_to(target):
            raise RuntimeError(f"Illegal flow transition {self.state.name} -> {target.name}")
        self.state = target
        self.result.state = target
        LOGGER.info("Reached %s", target.name, extra={"stage": target.name})
        self._emit("stage_reached", stage=target.name)

    def _fail(self, exc: Exception) -> None:
        pending = self.state.next_stage()
        reason = getattr(exc, "reason", "browser_error")
        self.result.failed_stage = pending
        self.result.reason = str(exc)
        self.result.error = exc
        self.state = FlowState.FAILED
        self.result.state = FlowState.FAILED
        stage_name = pending.name if pending is not None else "unknown"
        LOGGER.error("Run failed entering %s: %s", stage_name, exc, extra={"stage": stage_name})
        self._emit("run_failed", stage=stage_name, reason=reason, detail=str(exc))

    async def run(self) -> FlowResult:
        """Drive the whole purchase; never reports partial success as success."""

        self._emit("run_started", url=self.settings.base_url, browser=self.settings.browser)
        stages: tuple[tuple[str, Callable[[], Awaitable[None]]], ...] = (
            ("home", self._open_home),
            ("category", self._select_category),
            ("products", self._add_products),
            ("cart", self._verify_cart),
            ("checkout", self._open_checkout),
            ("payment", self._pay),
            ("confirmation", self._confirm),
        )
        try:
            for name, step in stages:
                self.session.ensure_default_scope(name)
                await step()
        except (ShopperError, PlaywrightError) as exc:
            self._fail(exc)
            return self.result

        self._emit("run_finished", stage=self.state.name, category=self.result.category.value)
        return self.result

    async def _open_home(self) -> None:
        url = self.settings.base_url
        await self.session.open(url)
        expected_host = urlparse(url).netloc
        if expected_host and urlparse(self.session.url).netloc != expected_host:
            raise PageLoadError(url)
        LOGGER.info("Opened %s (%s)", self.session.url, await self.session.title())

        for spec in _CATEGORY_BUTTONS.values():
            await self.resolver.resolve(spec, self.session.page)

    async def read_temperature(self) -> int:
        handle = await self.resolver.resolve(selectors.TEMPERATURE, self.session.page)
        text = await inner_text_safe(handle)
        temperature = parse_temperature(text)
        if temperature is None:
            raise ConditionUnreadable(text)
        return temperature

    async def _select_category(self) -> None:
        temperature = await self.read_temperature()
        self.result.temperature = temperature
        category = choose_category(temperature, self.settings.thresholds)
        LOGGER.info("Current temperature: %d; buying %s", temperature, category.value)

        button = await self.resolver.resolve(_CATEGORY_BUTTONS[category], self.session.page)
        await button.click()
        await self.session.wait_ready("category")
        await self.resolver.resolve(_CATEGORY_HEADINGS[category], self.session.page)

        self.result.category = category
        self._advance(FlowState.CATEGORY_SELECTED)

    async def _add_products(self) -> None:
        category = self.result.category
        if category is None:
            raise RuntimeError("Products stage entered before a category was selected")

        # Decide every product before clicking any Add button.
        selections = [await self.scanner.find_cheapest(keyword) for keyword in category.attributes]
        for record in selections:
            await scroll_into_view(record.selection_handle)
            await record.selection_handle.click()
            LOGGER.info(
                "Added to cart: %s", record.display_name, extra={"category": category.value}
            )
        self.result.selections = selections

        expected = self.settings.expected_cart_items

        async def _badge_matches() -> bool:
            return await self.ledger.badge_count() == expected

        if not await wait_until(_badge_matches, self.settings.timeouts.optional_ms, interval_ms=250):
            LOGGER.warning("Cart badge does not show %d items yet", expected)
        self._advance(FlowState.PRODUCTS_ADDED)

    async def _verify_cart(self) -> None:
        button = await self.resolver.resolve(selectors.CART_BUTTON, self.session.page)
        await button.click()
        await self.session.wait_ready("cart")
        await self.resolver.resolve(selectors.CART_HEADING, self.session.page)

        expected = self.settings.expected_cart_items
        if not await self.ledger.verify_count(expected):
            raise CartCountMismatch(expected, await self.ledger.item_count())
        if not await self.ledger.verify_total_positive():
            raise InvalidCartTotal(await self.ledger.total_price())

        for index, line in enumerate(await self.ledger.lines(), start=1):
            LOGGER.info("%d. %s - Rs. %d", index, line.name, line.price)
        self.result.cart = await self.ledger.snapshot()
        self._advance(FlowState.CART_VERIFIED)

    async def _open_checkout(self) -> None:
        button = await self.resolver.resolve(selectors.PAY_WITH_CARD, self.session.page)
        await scroll_into_view(button)
        await button.click()
        await self.resolver.resolve(selectors.PAYMENT_FRAME, self.session.page)
        self._advance(FlowState.CHECKOUT_REACHED)

    async def _pay(self) -> None:
        self.result.fill_report = await self.payment.fill(
            self.settings.payment,
            on_filled=lambda report: self._advance(FlowState.PAYMENT_FORM_FILLED),
        )
        self._advance(FlowState.PAYMENT_SUBMITTED)

    async def _confirm(self) -> None:
        await settle(self.settings.timeouts.post_submit_settle_ms)
        heading_present = await self.resolver.is_present(selectors.SUCCESS_HEADING, self.session.page)
        body_present = await self.resolver.is_present(selectors.SUCCESS_BODY, self.session.page)
        if not (heading_present and body_present):
            raise PaymentVerificationFailure(
                heading_present=heading_present, body_present=body_present
            )
        LOGGER.info(
            "Payment confirmed: %s / %s",
            selectors.SUCCESS_HEADING_TEXT,
            selectors.SUCCESS_BODY_TEXT,
        )
        self._advance(FlowState.PAYMENT_CONFIRMED)

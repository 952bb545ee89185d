"""Character-paced entry into the embedded Stripe Checkout form."""

from __future__ import annotations

import re
from typing import Any, Callable

from playwright.async_api import Error as PlaywrightError

import weathershopper.selectors as selectors
from weathershopper.browser_env import apply_pacing
from weathershopper.errors import FieldEntryFailure
from weathershopper.extractors.dom_utils import input_value_safe, mask_card_number, settle, wait_until
from weathershopper.logging_config import get_logger
from weathershopper.models import FillOutcome, FillReport, PaymentFieldDescriptor
from weathershopper.session import ShopSession
from weathershopper.settings import Pacing, PaymentDetails, Timeouts

LOGGER = get_logger(__name__)

SCOPE_OWNER = "payment"


def _strip_spaces(text: str) -> str:
    return re.sub(r"\s+", "", text)


def _digits_only(text: str) -> str:
    return re.sub(r"[^0-9]", "", text)


def build_field_descriptors(pacing: Pacing) -> tuple[PaymentFieldDescriptor, ...]:
    """The five payment inputs in entry order; only the postal code is optional."""

    def _interval(name: str) -> int:
        return apply_pacing(pacing.for_field(name).char_interval_ms)

    return (
        PaymentFieldDescriptor("email", selectors.EMAIL_FIELD, True, _interval("email")),
        PaymentFieldDescriptor(
            "card_number",
            selectors.CARD_NUMBER_FIELD,
            True,
            _interval("card_number"),
            sanitize=_strip_spaces,
            secret=True,
        ),
        PaymentFieldDescriptor(
            "expiry", selectors.EXPIRY_FIELD, True, _interval("expiry"), sanitize=_digits_only
        ),
        PaymentFieldDescriptor("cvc", selectors.CVC_FIELD, True, _interval("cvc"), secret=True),
        PaymentFieldDescriptor(
            "postal_code", selectors.POSTAL_CODE_FIELD, False, _interval("postal_code")
        ),
    )


def _display(descriptor: PaymentFieldDescriptor, value: str) -> str:
    if descriptor.logical_name == "card_number":
        return mask_card_number(value)
    if descriptor.secret:
        return f"*** ({len(value)} digits)"
    return value


class PaymentFormSynthesizer:
    """Fill and submit the cross-origin payment widget one character at a time.

    The widget validates incrementally and rejects bulk assignment, so every
    field is focused, cleared, typed with a fixed inter-character interval,
    given a settle pause and read back before moving on.
    """

    def __init__(self, session: ShopSession, *, timeouts: Timeouts, pacing: Pacing) -> None:
        self.session = session
        self.resolver = session.resolver
        self.timeouts = timeouts
        self.pacing = pacing
        self.fields = build_field_descriptors(pacing)

    async def _type_paced(self, handle: Any, text: str, interval_ms: int) -> None:
        for char in text:
            await handle.press_sequentially(char)
            await settle(interval_ms)

    def _give_up(self, descriptor: PaymentFieldDescriptor, detail: str) -> bool:
        if descriptor.required:
            raise FieldEntryFailure(descriptor.logical_name, detail)
        LOGGER.warning(
            "Optional %s skipped: %s",
            descriptor.logical_name,
            detail,
            extra={"stage": SCOPE_OWNER, "field": descriptor.logical_name},
        )
        return False

    async def _enter(self, scope: Any, descriptor: PaymentFieldDescriptor, value: str) -> bool:
        """Enter *value* into one field; False when an optional field was skipped."""

        timeout = None if descriptor.required else self.timeouts.optional_ms
        resolution = await self.resolver.try_resolve(descriptor.locator, scope, timeout_ms=timeout)
        if not resolution.found:
            return self._give_up(descriptor, f"field {resolution.outcome.value}")

        field = resolution.handle
        field_pacing = self.pacing.for_field(descriptor.logical_name)
        try:
            await field.click()
            await field.fill("")
            await settle(apply_pacing(field_pacing.after_clear_ms))
            await self._type_paced(field, value, descriptor.char_interval_ms)
            await settle(apply_pacing(field_pacing.after_entry_ms))
        except PlaywrightError as exc:
            if descriptor.required:
                raise FieldEntryFailure(descriptor.logical_name, str(exc)) from exc
            return self._give_up(descriptor, str(exc))

        async def _populated() -> bool:
            return bool(await input_value_safe(field))

        if not await wait_until(_populated, self.timeouts.readback_ms):
            return self._give_up(descriptor, "empty after entry")

        LOGGER.info(
            "Entered %s: %s",
            descriptor.logical_name,
            _display(descriptor, value),
            extra={"stage": SCOPE_OWNER, "field": descriptor.logical_name},
        )
        return True

    async def _fill_fields(self, scope: Any, details: PaymentDetails) -> FillReport:
        filled: list[str] = []
        skipped: list[str] = []
        for index, descriptor in enumerate(self.fields):
            if index:
                await settle(apply_pacing(self.pacing.between_fields_ms))
            value = descriptor.prepare(details.value_for(descriptor.logical_name))
            if not value:
                self._give_up(descriptor, "no value configured")
                skipped.append(descriptor.logical_name)
                continue
            if await self._enter(scope, descriptor, value):
                filled.append(descriptor.logical_name)
            else:
                skipped.append(descriptor.logical_name)

        outcome = FillOutcome.PARTIAL if skipped else FillOutcome.COMPLETE
        return FillReport(outcome, tuple(filled), tuple(skipped))

    async def _submit(self, scope: Any) -> None:
        button = await self.resolver.resolve(selectors.SUBMIT_BUTTON, scope)
        await button.click()
        LOGGER.info("Clicked payment submit button", extra={"stage": SCOPE_OWNER})

    async def fill(
        self,
        details: PaymentDetails,
        *,
        on_filled: Callable[[FillReport], None] | None = None,
    ) -> FillReport:
        """Fill every field inside the payment frame, then submit.

        Required-field failures raise :class:`FieldEntryFailure`. The page scope
        is restored before returning or raising.
        """

        async with self.session.frame_scope(selectors.PAYMENT_FRAME, owner=SCOPE_OWNER) as frame:
            report = await self._fill_fields(frame, details)
            LOGGER.info(
                "Payment fields completed: outcome=%s filled=%s skipped=%s",
                report.outcome.value,
                ",".join(report.filled),
                ",".join(report.skipped) or "-",
                extra={"stage": SCOPE_OWNER},
            )
            if on_filled is not None:
                on_filled(report)
            await self._submit(frame)
        return report

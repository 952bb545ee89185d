"""Error taxonomy for the Weather Shopper flow."""

from __future__ import annotations

from typing import Any, Sequence


class ShopperError(RuntimeError):
    """Base class for every failure the flow reports."""

    reason = "shopper_error"


class TargetNotFound(ShopperError):
    """A locator cascade was exhausted without a live match."""

    reason = "target_not_found"

    def __init__(self, spec: Any, attempts: Sequence[Any] = ()) -> None:
        self.spec = spec
        self.attempts = tuple(attempts)
        tried = ", ".join(str(attempt) for attempt in self.attempts) or "no strategies tried"
        super().__init__(f"TARGET_NOT_FOUND: {spec} ({tried})")


class PageLoadError(ShopperError):
    reason = "page_load_error"

    def __init__(self, url: str) -> None:
        self.url = url
        super().__init__(f"PAGE_LOAD_FAILED: {url}")


class StageTimeout(ShopperError):
    reason = "stage_timeout"

    def __init__(self, stage: str, timeout_ms: int) -> None:
        self.stage = stage
        self.timeout_ms = timeout_ms
        super().__init__(f"STAGE_TIMEOUT: {stage} after {timeout_ms}ms")


class ScopeLeakError(ShopperError):
    reason = "scope_leak"

    def __init__(self, stage: str, owner: str | None = None) -> None:
        self.stage = stage
        self.owner = owner
        held = f"the {owner} frame scope" if owner else "a frame scope"
        super().__init__(f"SCOPE_LEAK: {stage} started inside {held}")


class ConditionUnreadable(ShopperError):
    reason = "condition_unreadable"

    def __init__(self, text: str | None) -> None:
        self.text = text
        super().__init__(f"CONDITION_UNREADABLE: {text!r}")


class UnhandledConditionRange(ShopperError):
    reason = "unhandled_condition_range"

    def __init__(self, value: int, low: int, high: int) -> None:
        self.value = value
        self.low = low
        self.high = high
        super().__init__(
            f"UNHANDLED_CONDITION_RANGE: {value} is within [{low}, {high}] (needs <{low} or >{high})"
        )


class NoMatchingProduct(ShopperError):
    reason = "no_matching_product"

    def __init__(self, keyword: str) -> None:
        self.keyword = keyword
        super().__init__(f"NO_MATCHING_PRODUCT: {keyword}")


class CartVerificationError(ShopperError):
    reason = "cart_verification"


class CartCountMismatch(CartVerificationError):
    reason = "cart_count_mismatch"

    def __init__(self, expected: int, actual: int) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(f"CART_COUNT_MISMATCH: expected {expected}, found {actual}")


class InvalidCartTotal(CartVerificationError):
    reason = "invalid_cart_total"

    def __init__(self, total: int) -> None:
        self.total = total
        super().__init__(f"INVALID_CART_TOTAL: {total}")


class FieldEntryFailure(ShopperError):
    reason = "field_entry_failure"

    def __init__(self, field_name: str, detail: str | None = None) -> None:
        self.field_name = field_name
        self.detail = detail
        message = f"FIELD_ENTRY_FAILURE: {field_name}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class PaymentVerificationFailure(ShopperError):
    reason = "payment_verification_failure"

    def __init__(self, *, heading_present: bool, body_present: bool) -> None:
        self.heading_present = heading_present
        self.body_present = body_present
        super().__init__(
            f"PAYMENT_VERIFICATION_FAILURE: heading={heading_present} body={body_present}"
        )

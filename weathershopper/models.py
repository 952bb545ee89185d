"""Value types shared across the Weather Shopper flow."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Callable


@dataclass(frozen=True)
class Strategy:
    """One structural way of finding a logical target."""

    label: str
    selector: str
    unique: bool = False


@dataclass(frozen=True)
class LocatorSpec:
    """Ordered cascade of strategies for the same logical target."""

    name: str
    strategies: tuple[Strategy, ...]

    def __post_init__(self) -> None:
        if not self.strategies:
            raise ValueError(f"LocatorSpec {self.name!r} needs at least one strategy")

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class ProductRecord:
    display_name: str
    unit_price: int
    selection_handle: Any = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class CartSnapshot:
    item_count: int
    total_price: int


@dataclass(frozen=True)
class CartLine:
    name: str
    price: int


class Category(str, enum.Enum):
    MOISTURIZERS = "moisturizers"
    SUNSCREENS = "sunscreens"

    @property
    def attributes(self) -> tuple[str, str]:
        """Keywords whose cheapest match must end up in the cart, in order."""

        return _CATEGORY_ATTRIBUTES[self]


_CATEGORY_ATTRIBUTES: dict[Category, tuple[str, str]] = {
    Category.MOISTURIZERS: ("Aloe", "Almond"),
    Category.SUNSCREENS: ("SPF-50", "SPF-30"),
}


class FlowState(enum.IntEnum):
    """Forward-only stages of a purchase run."""

    HOME = 0
    CATEGORY_SELECTED = 1
    PRODUCTS_ADDED = 2
    CART_VERIFIED = 3
    CHECKOUT_REACHED = 4
    PAYMENT_FORM_FILLED = 5
    PAYMENT_SUBMITTED = 6
    PAYMENT_CONFIRMED = 7
    FAILED = 99

    @property
    def is_terminal(self) -> bool:
        return self in (FlowState.PAYMENT_CONFIRMED, FlowState.FAILED)

    def can_advance_to(self, target: "FlowState") -> bool:
        if self.is_terminal:
            return False
        if target is FlowState.FAILED:
            return True
        return int(target) == int(self) + 1

    def next_stage(self) -> "FlowState | None":
        if self.is_terminal:
            return None
        return FlowState(int(self) + 1)


class FillOutcome(str, enum.Enum):
    COMPLETE = "complete"
    PARTIAL = "partial"


@dataclass(frozen=True)
class FillReport:
    outcome: FillOutcome
    filled: tuple[str, ...] = ()
    skipped: tuple[str, ...] = ()

    @property
    def partial(self) -> bool:
        return self.outcome is FillOutcome.PARTIAL


@dataclass(frozen=True)
class PaymentFieldDescriptor:
    """Static description of one payment form input."""

    logical_name: str
    locator: LocatorSpec
    required: bool = True
    char_interval_ms: int = 100
    sanitize: Callable[[str], str] | None = None
    secret: bool = False

    def prepare(self, value: str | None) -> str:
        text = (value or "").strip()
        if self.sanitize is not None:
            text = self.sanitize(text)
        return text

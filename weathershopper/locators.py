"""Locator cascade resolution over Playwright scopes (pages, frames, elements)."""

from __future__ import annotations

import enum
import time
from dataclasses import dataclass
from typing import Any

from playwright.async_api import Error as PlaywrightError

from weathershopper.errors import TargetNotFound
from weathershopper.extractors.dom_utils import wait_until
from weathershopper.logging_config import get_logger
from weathershopper.models import LocatorSpec, Strategy

LOGGER = get_logger(__name__)

# Strategies reached after the overall deadline still get one short probe.
_PROBE_FLOOR_MS = 250
_POLL_INTERVAL_MS = 100


class ResolutionOutcome(str, enum.Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    TIMEOUT = "timeout"
    AMBIGUOUS = "ambiguous"


@dataclass(frozen=True)
class Attempt:
    strategy: Strategy
    outcome: ResolutionOutcome

    def __str__(self) -> str:
        return f"{self.strategy.label}={self.outcome.value}"


@dataclass(frozen=True)
class Resolution:
    spec: LocatorSpec
    outcome: ResolutionOutcome
    strategy: Strategy | None = None
    handles: tuple[Any, ...] = ()
    attempts: tuple[Attempt, ...] = ()

    @property
    def found(self) -> bool:
        return self.outcome is ResolutionOutcome.FOUND

    @property
    def handle(self) -> Any | None:
        return self.handles[0] if self.handles else None


def _summarise_failure(attempts: list[Attempt]) -> ResolutionOutcome:
    outcomes = {attempt.outcome for attempt in attempts}
    if ResolutionOutcome.TIMEOUT in outcomes:
        return ResolutionOutcome.TIMEOUT
    if ResolutionOutcome.AMBIGUOUS in outcomes:
        return ResolutionOutcome.AMBIGUOUS
    return ResolutionOutcome.NOT_FOUND


async def _count(locator: Any) -> int:
    try:
        return await locator.count()
    except PlaywrightError:
        return 0


async def _first_visible(locator: Any) -> Any | None:
    """Return the first visible match of *locator*, skipping hidden ones."""

    for index in range(await _count(locator)):
        candidate = locator.nth(index)
        try:
            if await candidate.is_visible():
                return candidate
        except PlaywrightError:
            continue
    return None


class LocatorResolver:
    """Resolve a :class:`LocatorSpec` by trying each strategy in declared order."""

    def __init__(self, *, timeout_ms: int = 15000, attempt_ms: int = 5000) -> None:
        self.timeout_ms = timeout_ms
        self.attempt_ms = attempt_ms

    async def _attempt(
        self, strategy: Strategy, scope: Any, timeout_ms: int
    ) -> tuple[ResolutionOutcome, Any, Any]:
        locator = scope.locator(strategy.selector)
        visible: Any = None

        async def _live() -> bool:
            nonlocal visible
            visible = await _first_visible(locator)
            return visible is not None

        if not await wait_until(_live, timeout_ms, interval_ms=_POLL_INTERVAL_MS):
            if await _count(locator) > 0:
                return ResolutionOutcome.TIMEOUT, None, None
            return ResolutionOutcome.NOT_FOUND, None, None

        if strategy.unique and await _count(locator) > 1:
            return ResolutionOutcome.AMBIGUOUS, None, None
        return ResolutionOutcome.FOUND, locator, visible

    async def _cascade(
        self, spec: LocatorSpec, scope: Any, timeout_ms: int | None
    ) -> tuple[Strategy | None, Any, Any, list[Attempt]]:
        budget = self.timeout_ms if timeout_ms is None else timeout_ms
        deadline = time.monotonic() + budget / 1000
        floor_ms = min(_PROBE_FLOOR_MS, self.attempt_ms)
        attempts: list[Attempt] = []

        for index, strategy in enumerate(spec.strategies):
            remaining_ms = int((deadline - time.monotonic()) * 1000)
            sub_timeout = max(min(self.attempt_ms, remaining_ms), floor_ms)
            outcome, locator, handle = await self._attempt(strategy, scope, sub_timeout)
            attempts.append(Attempt(strategy, outcome))
            if outcome is ResolutionOutcome.FOUND:
                if index > 0:
                    LOGGER.info(
                        "Resolved %s via fallback strategy '%s' (%s)",
                        spec.name,
                        strategy.label,
                        ", ".join(str(attempt) for attempt in attempts[:-1]),
                    )
                return strategy, locator, handle, attempts
            LOGGER.debug(
                "Strategy '%s' for %s failed: %s", strategy.label, spec.name, outcome.value
            )
        return None, None, None, attempts

    async def try_resolve(
        self, spec: LocatorSpec, scope: Any, *, timeout_ms: int | None = None
    ) -> Resolution:
        """Run the cascade and report the outcome without raising."""

        strategy, _, handle, attempts = await self._cascade(spec, scope, timeout_ms)
        if strategy is None:
            return Resolution(spec, _summarise_failure(attempts), attempts=tuple(attempts))
        return Resolution(
            spec,
            ResolutionOutcome.FOUND,
            strategy=strategy,
            handles=(handle,),
            attempts=tuple(attempts),
        )

    async def resolve(
        self, spec: LocatorSpec, scope: Any, *, timeout_ms: int | None = None
    ) -> Any:
        """Return the first visible handle for *spec* or raise :class:`TargetNotFound`."""

        resolution = await self.try_resolve(spec, scope, timeout_ms=timeout_ms)
        if not resolution.found:
            raise TargetNotFound(spec, resolution.attempts)
        return resolution.handle

    async def resolve_all(
        self, spec: LocatorSpec, scope: Any, *, timeout_ms: int | None = None
    ) -> Resolution:
        """Return every visible match of the first strategy that yields any."""

        strategy, locator, _, attempts = await self._cascade(spec, scope, timeout_ms)
        if strategy is None:
            raise TargetNotFound(spec, attempts)

        handles: list[Any] = []
        for index in range(await _count(locator)):
            candidate = locator.nth(index)
            try:
                if await candidate.is_visible():
                    handles.append(candidate)
            except PlaywrightError:
                continue
        if not handles:
            raise TargetNotFound(spec, attempts)
        return Resolution(
            spec,
            ResolutionOutcome.FOUND,
            strategy=strategy,
            handles=tuple(handles),
            attempts=tuple(attempts),
        )

    async def probe(self, spec: LocatorSpec, scope: Any) -> Resolution:
        """Run the cascade against the current DOM without waiting; never raises."""

        attempts: list[Attempt] = []
        for strategy in spec.strategies:
            locator = scope.locator(strategy.selector)
            visible = await _first_visible(locator)
            if visible is None:
                attempts.append(Attempt(strategy, ResolutionOutcome.NOT_FOUND))
                continue
            if strategy.unique and await _count(locator) > 1:
                attempts.append(Attempt(strategy, ResolutionOutcome.AMBIGUOUS))
                continue
            attempts.append(Attempt(strategy, ResolutionOutcome.FOUND))
            return Resolution(
                spec,
                ResolutionOutcome.FOUND,
                strategy=strategy,
                handles=(visible,),
                attempts=tuple(attempts),
            )
        return Resolution(spec, _summarise_failure(attempts), attempts=tuple(attempts))

    async def is_present(self, spec: LocatorSpec, scope: Any) -> bool:
        """Non-blocking visibility check for optional elements; never raises."""

        return (await self.probe(spec, scope)).found

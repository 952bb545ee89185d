"""Explicit browser session handle shared by the flow components."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from playwright.async_api import Error as PlaywrightError
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_random_exponential

from weathershopper.errors import PageLoadError, ScopeLeakError, StageTimeout, TargetNotFound
from weathershopper.extractors.dom_utils import wait_for_document_ready
from weathershopper.locators import LocatorResolver
from weathershopper.logging_config import get_logger
from weathershopper.models import LocatorSpec
from weathershopper.settings import Timeouts

LOGGER = get_logger(__name__)


class ShopSession:
    """One page plus the frame scope automation calls are currently evaluated against.

    The scope is either the page itself (the default document) or the content
    frame of an embedded iframe, held only for the duration of
    :meth:`frame_scope`.
    """

    def __init__(self, page: Any, resolver: LocatorResolver, timeouts: Timeouts) -> None:
        self.page = page
        self.resolver = resolver
        self.timeouts = timeouts
        self._scope: Any = page
        self._scope_owner: str | None = None

    @property
    def in_default_scope(self) -> bool:
        return self._scope is self.page

    @property
    def url(self) -> str:
        return self.page.url

    async def title(self) -> str:
        return await self.page.title()

    def ensure_default_scope(self, stage: str) -> None:
        if not self.in_default_scope:
            raise ScopeLeakError(stage, self._scope_owner)

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_random_exponential(multiplier=0.5, max=5),
        retry=retry_if_exception_type(PlaywrightError),
        reraise=True,
    )
    async def _goto(self, url: str) -> None:
        await self.page.goto(url, wait_until="domcontentloaded")

    async def open(self, url: str) -> None:
        try:
            await self._goto(url)
        except PlaywrightError as exc:
            raise PageLoadError(url) from exc
        await self.wait_ready("open")

    async def wait_ready(self, stage: str) -> None:
        timeout = self.timeouts.page_ready_ms
        if not await wait_for_document_ready(self.page, timeout):
            raise StageTimeout(stage, timeout)

    @asynccontextmanager
    async def frame_scope(self, frame_spec: LocatorSpec, *, owner: str) -> AsyncIterator[Any]:
        """Switch into the iframe matched by *frame_spec*; always restore the page scope."""

        self.ensure_default_scope(owner)
        frame_locator = await self.resolver.resolve(frame_spec, self.page)
        handle = await frame_locator.element_handle(timeout=self.timeouts.attempt_ms)
        frame = await handle.content_frame() if handle is not None else None
        if frame is None:
            raise TargetNotFound(frame_spec)

        self._scope = frame
        self._scope_owner = owner
        LOGGER.info("Switched into %s frame", frame_spec.name, extra={"stage": owner})
        try:
            yield frame
        finally:
            self._scope = self.page
            self._scope_owner = None
            LOGGER.info("Restored default page scope", extra={"stage": owner})

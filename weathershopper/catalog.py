"""Product grid scanning and cheapest-match selection."""

from __future__ import annotations

from typing import Any, AsyncIterator, Awaitable, Callable, Iterable

from playwright.async_api import Error as PlaywrightError

import weathershopper.selectors as selectors
from weathershopper.errors import NoMatchingProduct
from weathershopper.extractors.dom_utils import inner_text_safe, parse_price
from weathershopper.locators import LocatorResolver
from weathershopper.logging_config import get_logger
from weathershopper.models import ProductRecord
from weathershopper.session import ShopSession

LOGGER = get_logger(__name__)

NameExtractor = Callable[[LocatorResolver, Any], Awaitable["str | None"]]


async def _name_by_exact_class(resolver: LocatorResolver, container: Any) -> str | None:
    resolution = await resolver.probe(selectors.PRODUCT_NAME_EXACT, container)
    return await inner_text_safe(resolution.handle) or None


async def _name_by_partial_class(resolver: LocatorResolver, container: Any) -> str | None:
    resolution = await resolver.probe(selectors.PRODUCT_NAME_PARTIAL, container)
    return await inner_text_safe(resolution.handle) or None


async def _name_by_first_text(resolver: LocatorResolver, container: Any) -> str | None:
    paragraphs = container.locator(selectors.PRODUCT_PARAGRAPHS)
    try:
        count = await paragraphs.count()
    except PlaywrightError:
        return None
    for index in range(count):
        text = await inner_text_safe(paragraphs.nth(index))
        if text and selectors.PRICE_LABEL not in text:
            return text
    return None


NAME_EXTRACTORS: tuple[tuple[str, NameExtractor], ...] = (
    ("exact-class", _name_by_exact_class),
    ("partial-class", _name_by_partial_class),
    ("first-text", _name_by_first_text),
)


def pick_cheapest(records: Iterable[ProductRecord], keyword: str) -> ProductRecord:
    """Return the lowest-priced record whose name contains *keyword* (case-insensitive).

    Ties keep the record seen first. Raises :class:`NoMatchingProduct` when
    nothing matches.
    """

    needle = (keyword or "").strip().lower()
    if not needle:
        raise ValueError("keyword must not be blank")

    cheapest: ProductRecord | None = None
    for record in records:
        if needle not in record.display_name.lower():
            continue
        if cheapest is None or record.unit_price < cheapest.unit_price:
            cheapest = record

    if cheapest is None:
        raise NoMatchingProduct(keyword)
    return cheapest


class CatalogScanner:
    """Enumerate the product cards of the currently loaded category page."""

    def __init__(self, session: ShopSession) -> None:
        self.session = session
        self.resolver = session.resolver

    async def _containers(self) -> list[Any]:
        resolution = await self.resolver.resolve_all(selectors.PRODUCT_CARDS, self.session.page)
        if resolution.strategy is not None and resolution.strategy.label == "add-buttons":
            LOGGER.info("Using fallback product locator: parents of %d Add buttons", len(resolution.handles))
            return [handle.locator(selectors.PARENT) for handle in resolution.handles]
        return list(resolution.handles)

    async def _extract_name(self, container: Any) -> str | None:
        for label, extractor in NAME_EXTRACTORS:
            name = await extractor(self.resolver, container)
            if name:
                if label != NAME_EXTRACTORS[0][0]:
                    LOGGER.debug("Product name found via '%s'", label)
                return name
        return None

    async def _extract(self, container: Any, index: int) -> ProductRecord | None:
        name = await self._extract_name(container)
        if not name:
            LOGGER.warning("Skipping product card %d: no name found", index)
            return None

        price_resolution = await self.resolver.probe(selectors.PRODUCT_PRICE, container)
        price_text = await inner_text_safe(price_resolution.handle)
        price = parse_price(price_text)
        if price is None:
            LOGGER.warning("Skipping product '%s': unreadable price %r", name, price_text)
            return None

        add_resolution = await self.resolver.probe(selectors.PRODUCT_ADD, container)
        if not add_resolution.found:
            LOGGER.warning("Skipping product '%s': no Add button", name)
            return None

        LOGGER.info("Found product: %s - Rs. %d", name, price)
        return ProductRecord(name, price, add_resolution.handle)

    async def scan(self) -> AsyncIterator[ProductRecord]:
        """Yield one record per parseable product card of the current page load.

        The iterator is single-use; after any navigation a new scan is needed
        because the yielded handles belong to the page that produced them.
        """

        self.session.ensure_default_scope("scan")
        await self.session.wait_ready("scan")
        page_url = self.session.url
        containers = await self._containers()

        for index, container in enumerate(containers):
            if self.session.url != page_url:
                LOGGER.warning("Page navigated away from %s during scan; stopping", page_url)
                return
            record = await self._extract(container, index)
            if record is not None:
                yield record

    async def find_cheapest(self, keyword: str) -> ProductRecord:
        """Scan the page afresh and pick the cheapest product matching *keyword*."""

        records = [record async for record in self.scan()]
        LOGGER.info("Scanned %d products for keyword=%s", len(records), keyword)
        selected = pick_cheapest(records, keyword)
        LOGGER.info(
            "Least expensive %s product: %s - Rs. %d",
            keyword,
            selected.display_name,
            selected.unit_price,
        )
        return selected

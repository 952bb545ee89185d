import asyncio

import pytest
from fakes import FakeScope, FakeStorefront, fast_settings, make_session
from tenacity import wait_none

import weathershopper.selectors as selectors
from weathershopper.errors import PageLoadError, ScopeLeakError, StageTimeout
from weathershopper.session import ShopSession


@pytest.fixture(autouse=True)
def _no_retry_backoff(monkeypatch) -> None:
    monkeypatch.setattr(ShopSession._goto.retry, "wait", wait_none())


def test_open_retries_transient_navigation_errors() -> None:
    page = FakeScope(url="about:blank")
    page.goto_failures = 2
    session = make_session(page)

    asyncio.run(session.open("https://weathershopper.pythonanywhere.com/"))

    assert len(page.visits) == 3
    assert session.url == "https://weathershopper.pythonanywhere.com/"


def test_open_raises_page_load_error_after_three_attempts() -> None:
    page = FakeScope(url="about:blank")
    page.goto_failures = 5
    session = make_session(page)

    with pytest.raises(PageLoadError) as exc:
        asyncio.run(session.open("https://weathershopper.pythonanywhere.com/"))

    assert len(page.visits) == 3
    assert exc.value.url == "https://weathershopper.pythonanywhere.com/"
    assert "PAGE_LOAD_FAILED" in str(exc.value)


def test_wait_ready_raises_stage_timeout_while_loading() -> None:
    page = FakeScope()
    page.ready_state = "loading"
    session = make_session(page)

    with pytest.raises(StageTimeout) as exc:
        asyncio.run(session.wait_ready("cart"))

    assert exc.value.stage == "cart"
    assert exc.value.timeout_ms == fast_settings().timeouts.page_ready_ms


def test_stage_inside_frame_scope_is_a_scope_leak() -> None:
    shop = FakeStorefront("40 ℃")
    shop.show_cart()
    shop.open_payment()
    session = make_session(shop.page)

    async def _leak() -> None:
        async with session.frame_scope(selectors.PAYMENT_FRAME, owner="payment"):
            assert not session.in_default_scope
            session.ensure_default_scope("confirmation")

    with pytest.raises(ScopeLeakError) as exc:
        asyncio.run(_leak())

    assert exc.value.stage == "confirmation"
    assert exc.value.owner == "payment"
    assert session.in_default_scope


def test_nested_frame_scope_is_rejected() -> None:
    shop = FakeStorefront("40 ℃")
    shop.show_cart()
    shop.open_payment()
    session = make_session(shop.page)

    async def _nest() -> None:
        async with session.frame_scope(selectors.PAYMENT_FRAME, owner="payment"):
            async with session.frame_scope(selectors.PAYMENT_FRAME, owner="again"):
                pass

    with pytest.raises(ScopeLeakError) as exc:
        asyncio.run(_nest())

    assert "payment frame scope" in str(exc.value)
    assert session.in_default_scope

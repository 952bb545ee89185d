import asyncio
import logging

import pytest

import weathershopper.main as main_module
from weathershopper.flow import FlowResult
from weathershopper.logging_config import _ContextFormatter, configure_logging
from weathershopper.models import FlowState


@pytest.fixture
def package_logger():
    logger = logging.getLogger("weathershopper")
    previous = logger.level
    yield logger
    logger.setLevel(previous)


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord("weathershopper.flow", logging.INFO, __file__, 1, "Reached %s", ("CART_VERIFIED",), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_formatter_appends_context_fields() -> None:
    formatter = _ContextFormatter("%(levelname)s %(message)s")

    text = formatter.format(_record(stage="CART_VERIFIED", field="cvc", category=None))

    assert text == "INFO Reached CART_VERIFIED | stage=CART_VERIFIED field=cvc"


def test_formatter_without_context_is_plain() -> None:
    formatter = _ContextFormatter("%(levelname)s %(message)s")

    assert formatter.format(_record()) == "INFO Reached CART_VERIFIED"


def test_configure_logging_rereads_environment(monkeypatch, package_logger) -> None:
    monkeypatch.setenv("WEATHERSHOPPER_LOG_LEVEL", "debug")
    configure_logging()
    assert package_logger.level == logging.DEBUG

    monkeypatch.setenv("WEATHERSHOPPER_LOG_LEVEL", "not-a-level")
    configure_logging()
    assert package_logger.level == logging.INFO

    configure_logging(logging.WARNING)
    assert package_logger.level == logging.WARNING


def test_level_from_dotenv_applies_to_run(monkeypatch, package_logger) -> None:
    monkeypatch.delenv("WEATHERSHOPPER_LOG_LEVEL", raising=False)
    configure_logging()
    assert package_logger.level == logging.INFO

    def _fake_load_dotenv() -> bool:
        monkeypatch.setenv("WEATHERSHOPPER_LOG_LEVEL", "DEBUG")
        return True

    async def _fake_run_flow(settings):
        return FlowResult(state=FlowState.PAYMENT_CONFIRMED)

    monkeypatch.setattr(main_module, "load_dotenv", _fake_load_dotenv)
    monkeypatch.setattr(main_module, "run_flow", _fake_run_flow)
    for name in ("WEATHERSHOPPER_BROWSER", "WEATHERSHOPPER_BASE_URL", "WEATHERSHOPPER_HEADLESS"):
        monkeypatch.delenv(name, raising=False)

    code = asyncio.run(main_module._async_main([]))

    assert code == 0
    assert package_logger.level == logging.DEBUG

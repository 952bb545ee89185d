import pytest
from pydantic import ValidationError

from weathershopper.browser_env import apply_pacing, launch_kwargs, normalize_browser, pacing_multiplier
from weathershopper.settings import DEFAULT_CONFIG_PATH, load_settings


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch) -> None:
    for name in (
        "WEATHERSHOPPER_BROWSER",
        "WEATHERSHOPPER_BASE_URL",
        "WEATHERSHOPPER_HEADLESS",
        "WEATHERSHOPPER_SLOW_MO_MS",
        "WEATHERSHOPPER_BROWSER_ARGS",
    ):
        monkeypatch.delenv(name, raising=False)


def test_bundled_config_loads_defaults() -> None:
    settings = load_settings()

    assert DEFAULT_CONFIG_PATH.exists()
    assert settings.base_url == "https://weathershopper.pythonanywhere.com/"
    assert settings.browser == "chrome"
    assert (settings.thresholds.low, settings.thresholds.high) == (19, 34)
    assert settings.expected_cart_items == 2
    assert settings.timeouts.post_submit_settle_ms == 7000
    assert settings.pacing.card_number.after_entry_ms == 1000
    assert settings.payment.card_number == "4242424242424242"


def test_yaml_file_overrides_defaults(tmp_path) -> None:
    config = tmp_path / "shopper.yml"
    config.write_text(
        "browser: Firefox\nthresholds:\n  low: 10\npayment:\n  postal_code: null\n",
        encoding="utf-8",
    )

    settings = load_settings(config)

    assert settings.browser == "firefox"
    assert settings.thresholds.low == 10
    assert settings.thresholds.high == 34
    assert settings.payment.postal_code is None


def test_environment_overrides_file(tmp_path, monkeypatch) -> None:
    config = tmp_path / "shopper.yml"
    config.write_text("browser: chrome\nheadless: false\n", encoding="utf-8")
    monkeypatch.setenv("WEATHERSHOPPER_BROWSER", "edge")
    monkeypatch.setenv("WEATHERSHOPPER_HEADLESS", "1")
    monkeypatch.setenv("WEATHERSHOPPER_BASE_URL", "http://localhost:8000/")

    settings = load_settings(config)

    assert settings.browser == "edge"
    assert settings.headless is True
    assert settings.base_url == "http://localhost:8000/"


def test_unknown_browser_is_rejected(tmp_path) -> None:
    config = tmp_path / "shopper.yml"
    config.write_text("browser: safari\n", encoding="utf-8")

    with pytest.raises(ValidationError) as exc:
        load_settings(config)

    assert "Browser not supported" in str(exc.value)


def test_missing_config_file(tmp_path) -> None:
    with pytest.raises(FileNotFoundError):
        load_settings(tmp_path / "absent.yml")


def test_non_mapping_config_is_rejected(tmp_path) -> None:
    config = tmp_path / "shopper.yml"
    config.write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(RuntimeError):
        load_settings(config)


def test_normalize_browser() -> None:
    assert normalize_browser("  CHROME ") == "chrome"
    assert normalize_browser("") == "chrome"
    with pytest.raises(ValueError):
        normalize_browser("opera")


def test_launch_kwargs_per_family(monkeypatch) -> None:
    chrome = launch_kwargs("chrome", headless=True)
    edge = launch_kwargs("edge", headless=False)
    firefox = launch_kwargs("firefox", headless=True)

    assert "--disable-blink-features=AutomationControlled" in chrome["args"]
    assert "channel" not in chrome
    assert edge["channel"] == "msedge"
    assert edge["headless"] is False
    assert "args" not in firefox

    monkeypatch.setenv("WEATHERSHOPPER_SLOW_MO_MS", "250")
    monkeypatch.setenv("WEATHERSHOPPER_BROWSER_ARGS", "--lang=en-US")
    tuned = launch_kwargs("firefox", headless=True)
    assert tuned["slow_mo"] == 250
    assert tuned["args"] == ["--lang=en-US"]


def test_pacing_multiplier_scales_and_disables(monkeypatch) -> None:
    monkeypatch.delenv("WEATHERSHOPPER_PACING_MULTIPLIER", raising=False)
    assert apply_pacing(800) == 800

    monkeypatch.setenv("WEATHERSHOPPER_PACING_MULTIPLIER", "0.5")
    assert apply_pacing(800) == 400

    monkeypatch.setenv("WEATHERSHOPPER_PACING_MULTIPLIER", "0")
    assert apply_pacing(800) == 0

    monkeypatch.setenv("WEATHERSHOPPER_PACING_MULTIPLIER", "fast")
    assert pacing_multiplier() == 1.0
    assert apply_pacing(0) == 0

"""Run configuration: YAML file, environment overrides and validation."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator

from weathershopper.browser_env import headless_enabled, normalize_browser

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent / "config.yml"


class Thresholds(BaseModel):
    """Temperatures strictly below ``low`` buy moisturizers, strictly above ``high`` sunscreens."""

    low: int = 19
    high: int = 34


class Timeouts(BaseModel):
    default_ms: int = Field(default=15000, gt=0)
    attempt_ms: int = Field(default=5000, gt=0)
    optional_ms: int = Field(default=3000, gt=0)
    page_ready_ms: int = Field(default=15000, gt=0)
    readback_ms: int = Field(default=3000, gt=0)
    post_submit_settle_ms: int = Field(default=7000, ge=0)


class FieldPacing(BaseModel):
    char_interval_ms: int = Field(default=100, ge=0)
    after_clear_ms: int = Field(default=500, ge=0)
    after_entry_ms: int = Field(default=500, ge=0)


class Pacing(BaseModel):
    between_fields_ms: int = Field(default=1000, ge=0)
    email: FieldPacing = FieldPacing(char_interval_ms=50, after_clear_ms=200, after_entry_ms=300)
    card_number: FieldPacing = FieldPacing(char_interval_ms=50, after_clear_ms=800, after_entry_ms=1000)
    expiry: FieldPacing = FieldPacing()
    cvc: FieldPacing = FieldPacing()
    postal_code: FieldPacing = FieldPacing()

    def for_field(self, logical_name: str) -> FieldPacing:
        return getattr(self, logical_name)


class PaymentDetails(BaseModel):
    email: str = "test@weathershopper.com"
    card_number: str = "4242424242424242"
    expiry: str = "1226"
    cvc: str = "123"
    postal_code: str | None = "75500"

    def value_for(self, logical_name: str) -> str | None:
        return getattr(self, logical_name)


class JournalSettings(BaseModel):
    enabled: bool = True
    log_path: str = "logs/runs.jsonl"
    summary_path: str = "logs/summary.json"


class ShopperSettings(BaseModel):
    base_url: str = "https://weathershopper.pythonanywhere.com/"
    browser: str = "chrome"
    headless: bool = False
    expected_cart_items: int = 2
    thresholds: Thresholds = Thresholds()
    timeouts: Timeouts = Timeouts()
    pacing: Pacing = Pacing()
    payment: PaymentDetails = PaymentDetails()
    journal: JournalSettings = JournalSettings()

    @field_validator("browser")
    @classmethod
    def _known_browser(cls, value: str) -> str:
        return normalize_browser(value)


def _load_yaml(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise RuntimeError(f"Configuration root must be a mapping: {path}")
    return data


def _env_overrides() -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    browser = os.getenv("WEATHERSHOPPER_BROWSER")
    if browser and browser.strip():
        overrides["browser"] = browser.strip()
    base_url = os.getenv("WEATHERSHOPPER_BASE_URL")
    if base_url and base_url.strip():
        overrides["base_url"] = base_url.strip()
    if os.getenv("WEATHERSHOPPER_HEADLESS") is not None:
        overrides["headless"] = headless_enabled()
    return overrides


def load_settings(path: str | Path | None = None) -> ShopperSettings:
    """Load settings from *path* (default: the bundled config.yml) plus env overrides."""

    config_path = Path(path) if path else DEFAULT_CONFIG_PATH
    if not config_path.is_absolute():
        config_path = Path.cwd() / config_path
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    data = _load_yaml(config_path)
    data.update(_env_overrides())
    return ShopperSettings.model_validate(data)

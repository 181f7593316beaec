"""Tests for environment-driven settings."""

from __future__ import annotations

import pytest

from orderbot.config import BotSettings, CatalogConfig, WhatsAppConfig

_ENV_VARS = (
    "ORDER_API_URL", "ORDER_API_TIMEOUT", "GEMINI_API_KEY", "GEMINI_MODEL",
    "GEMINI_API_BASE", "GEMINI_TIMEOUT", "WC_API_URL", "WC_CONSUMER_KEY",
    "WC_CONSUMER_SECRET", "CATALOG_TIMEOUT", "CATALOG_CURRENCY",
    "WHATSAPP_APP_SECRET", "WHATSAPP_VERIFY_TOKEN", "WHATSAPP_PHONE_NUMBER_ID",
    "WHATSAPP_ACCESS_TOKEN", "SEND_API_TOKEN", "EVENT_LOG_PATH",
    "EVENT_LOG_MAX_BYTES", "EVENT_LOG_BACKUP_COUNT", "LOG_LEVEL",
)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_defaults(clean_env: pytest.MonkeyPatch) -> None:
    settings = BotSettings.from_env()
    assert settings.order_api_url == ""
    assert settings.order_api_timeout == 10.0
    assert settings.gemini_model == "gemini-2.0-flash"
    assert settings.catalog_currency == "EUR"
    assert settings.catalog.is_configured is False
    assert settings.whatsapp.is_configured is False
    assert settings.event_log_path is None
    assert settings.log_level == "INFO"


def test_overrides(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("ORDER_API_URL", "https://orders.example.com/exec")
    clean_env.setenv("ORDER_API_TIMEOUT", "4.5")
    clean_env.setenv("WC_API_URL", "https://shop.example.com")
    clean_env.setenv("WC_CONSUMER_KEY", "ck")
    clean_env.setenv("WC_CONSUMER_SECRET", "cs")
    clean_env.setenv("LOG_LEVEL", "debug")
    settings = BotSettings.from_env()
    assert settings.order_api_url == "https://orders.example.com/exec"
    assert settings.order_api_timeout == 4.5
    assert settings.catalog.is_configured is True
    assert settings.log_level == "DEBUG"


def test_invalid_number_raises(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("GEMINI_TIMEOUT", "soon")
    with pytest.raises(ValueError):
        BotSettings.from_env()


def test_missing_optional_lists_unconfigured_upstreams(clean_env: pytest.MonkeyPatch) -> None:
    missing = BotSettings.from_env().missing_optional()
    assert "ORDER_API_URL" in missing
    assert "GEMINI_API_KEY" in missing
    assert "WC_API_URL/WC_CONSUMER_KEY/WC_CONSUMER_SECRET" in missing


def test_fully_configured_has_nothing_missing() -> None:
    settings = BotSettings(
        order_api_url="u",
        gemini_api_key="k",
        catalog=CatalogConfig(base_url="b", consumer_key="ck", consumer_secret="cs"),
        whatsapp=WhatsAppConfig(
            app_secret="a", verify_token="v", phone_number_id="p", access_token="t",
        ),
        send_api_token="s",
    )
    assert settings.missing_optional() == []

"""Environment-driven configuration for the bot and its upstreams."""

from __future__ import annotations

import os

from pydantic import BaseModel, ConfigDict, Field


class CatalogConfig(BaseModel):
    """WooCommerce credentials; the catalog is enabled only when all are set."""

    model_config = ConfigDict(frozen=True)

    base_url: str = ""
    consumer_key: str = ""
    consumer_secret: str = ""

    @property
    def is_configured(self) -> bool:
        return bool(self.base_url and self.consumer_key and self.consumer_secret)


class WhatsAppConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    app_secret: str = ""
    verify_token: str = ""
    phone_number_id: str = ""
    access_token: str = ""

    @property
    def is_configured(self) -> bool:
        return bool(
            self.app_secret
            and self.verify_token
            and self.phone_number_id
            and self.access_token
        )


class BotSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    order_api_url: str = ""
    order_api_timeout: float = Field(default=10.0, gt=0)
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.0-flash"
    gemini_api_base: str = "https://generativelanguage.googleapis.com"
    gemini_timeout: float = Field(default=30.0, gt=0)
    catalog: CatalogConfig = Field(default_factory=CatalogConfig)
    catalog_timeout: float = Field(default=10.0, gt=0)
    catalog_currency: str = "EUR"
    whatsapp: WhatsAppConfig = Field(default_factory=WhatsAppConfig)
    send_api_token: str = ""
    event_log_path: str | None = None
    event_log_max_bytes: int = Field(default=10_485_760, gt=0)
    event_log_backup_count: int = Field(default=5, ge=0)
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> BotSettings:
        """Build settings from environment variables.

        Raises:
            ValueError: If a numeric variable is not a number.
        """
        env = os.environ
        return cls(
            order_api_url=env.get("ORDER_API_URL", ""),
            order_api_timeout=float(env.get("ORDER_API_TIMEOUT", "10")),
            gemini_api_key=env.get("GEMINI_API_KEY", ""),
            gemini_model=env.get("GEMINI_MODEL", "gemini-2.0-flash"),
            gemini_api_base=env.get(
                "GEMINI_API_BASE", "https://generativelanguage.googleapis.com",
            ),
            gemini_timeout=float(env.get("GEMINI_TIMEOUT", "30")),
            catalog=CatalogConfig(
                base_url=env.get("WC_API_URL", ""),
                consumer_key=env.get("WC_CONSUMER_KEY", ""),
                consumer_secret=env.get("WC_CONSUMER_SECRET", ""),
            ),
            catalog_timeout=float(env.get("CATALOG_TIMEOUT", "10")),
            catalog_currency=env.get("CATALOG_CURRENCY", "EUR"),
            whatsapp=WhatsAppConfig(
                app_secret=env.get("WHATSAPP_APP_SECRET", ""),
                verify_token=env.get("WHATSAPP_VERIFY_TOKEN", ""),
                phone_number_id=env.get("WHATSAPP_PHONE_NUMBER_ID", ""),
                access_token=env.get("WHATSAPP_ACCESS_TOKEN", ""),
            ),
            send_api_token=env.get("SEND_API_TOKEN", ""),
            event_log_path=env.get("EVENT_LOG_PATH") or None,
            event_log_max_bytes=int(env.get("EVENT_LOG_MAX_BYTES", "10485760")),
            event_log_backup_count=int(env.get("EVENT_LOG_BACKUP_COUNT", "5")),
            log_level=env.get("LOG_LEVEL", "INFO").upper(),
        )

    def missing_optional(self) -> list[str]:
        """Names of upstreams that are not configured and will degrade."""
        missing: list[str] = []
        if not self.order_api_url:
            missing.append("ORDER_API_URL")
        if not self.gemini_api_key:
            missing.append("GEMINI_API_KEY")
        if not self.catalog.is_configured:
            missing.append("WC_API_URL/WC_CONSUMER_KEY/WC_CONSUMER_SECRET")
        if not self.whatsapp.is_configured:
            missing.append("WHATSAPP_*")
        if not self.send_api_token:
            missing.append("SEND_API_TOKEN")
        return missing

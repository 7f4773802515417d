from decimal import Decimal
from functools import lru_cache
import json

from pydantic import AnyHttpUrl
from pydantic_settings import BaseSettings, SettingsConfigDict


def parse_cors_origins(value: str) -> list[str]:
    if not value:
        return []

    parsed: list[str]
    raw = value.strip()
    if raw.startswith("["):
        try:
            items = json.loads(raw)
            parsed = [str(item).strip() for item in items if str(item).strip()]
        except (TypeError, ValueError):
            parsed = []
    else:
        parsed = [origin.strip() for origin in raw.split(",") if origin.strip()]

    # Preserve order and remove duplicates.
    return list(dict.fromkeys(parsed))


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    app_name: str = "SMS Reseller Pricing"
    environment: str = "development"
    api_v1_prefix: str = "/api/v1"
    log_level: str = "INFO"

    # Security
    secret_key: str
    access_token_expire_minutes: int = 30

    # Database
    database_url: str
    db_pool_size: int = 5
    db_max_overflow: int = 5
    db_pool_timeout: int = 15
    db_pool_recycle: int = 1200
    db_pool_pre_ping: bool = True

    # Arkesel (upstream SMS provider)
    arkesel_base_url: AnyHttpUrl = "https://sms.arkesel.com"
    arkesel_api_key: str = ""
    arkesel_timeout_seconds: int = 15
    arkesel_retry_count: int = 2
    arkesel_test_mode: bool = False
    arkesel_balance_path: str = "/sms/api"

    # Pricing
    default_sms_base_cost: Decimal = Decimal("0.01")

    # CORS
    cors_origins: str = "http://localhost:5173,http://localhost:3000"
    auto_create_tables: bool = False


@lru_cache
def get_settings() -> Settings:
    return Settings()

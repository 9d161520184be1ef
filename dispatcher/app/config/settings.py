from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore", populate_by_name=True)

    webhook_url: str = Field(
        "http://localhost:8000/webhooks/test/orders/create",
        validation_alias="WEBHOOK_URL",
    )
    total_jobs: int = Field(80000, ge=0, validation_alias="TOTAL_JOBS")
    rate_per_minute: float = Field(2000, gt=0, validation_alias="RATE_PER_MINUTE")
    concurrency: int = Field(10, ge=1, validation_alias="CONCURRENCY")
    # 0 = send every job at the configured rate
    duration_minutes: float = Field(0, ge=0, validation_alias="DURATION_MINUTES")

    request_timeout_seconds: float = Field(180.0, gt=0, validation_alias="REQUEST_TIMEOUT_SECONDS")
    report_interval_seconds: float = Field(10.0, gt=0, validation_alias="REPORT_INTERVAL_SECONDS")

    max_connections: int = Field(100, ge=1, validation_alias="MAX_CONNECTIONS")
    max_keepalive_connections: int = Field(100, ge=0, validation_alias="MAX_KEEPALIVE_CONNECTIONS")
    keepalive_expiry_seconds: float = Field(90.0, ge=0, validation_alias="KEEPALIVE_EXPIRY_SECONDS")

    webhook_topic: str = Field("orders/create", validation_alias="WEBHOOK_TOPIC")
    webhook_signature: str = Field("test-signature", validation_alias="WEBHOOK_SIGNATURE")
    shop_domain: str = Field("example.myshopify.com", validation_alias="SHOP_DOMAIN")

    catalog_asset_base_url: str = Field(
        "https://samples.example.com/samples",
        validation_alias="CATALOG_ASSET_BASE_URL",
    )
    random_seed: int | None = Field(None, validation_alias="RANDOM_SEED")

    log_level: str = Field("INFO", validation_alias="LOG_LEVEL")
    log_json: bool = Field(False, validation_alias="LOG_JSON")

    @property
    def duration_seconds(self) -> float | None:
        return self.duration_minutes * 60.0 if self.duration_minutes > 0 else None

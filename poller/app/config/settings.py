from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from poller.app.constants import REFERENCE_BACKEND, ErrorBackoffPolicy
from poller.app.domain.models import Account


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore", populate_by_name=True)

    api_base_url: str = Field("http://localhost:8000", validation_alias="ORDER_API_BASE_URL")
    # Comma-separated "username:password" pairs; worker i logs in with account i mod len.
    accounts: str = Field("admin:admin", validation_alias="POLLER_ACCOUNTS")

    worker_count: int = Field(20, ge=1, validation_alias="WORKER_COUNT")
    max_cycles_per_worker: int = Field(500, ge=1, validation_alias="MAX_CYCLES_PER_WORKER")

    initial_backoff_seconds: float = Field(1.0, ge=0, validation_alias="INITIAL_BACKOFF_SECONDS")
    max_backoff_seconds: float = Field(300.0, ge=0, validation_alias="MAX_BACKOFF_SECONDS")
    backoff_multiplier: float = Field(2.0, ge=1, validation_alias="BACKOFF_MULTIPLIER")
    error_backoff_policy: ErrorBackoffPolicy = Field(
        ErrorBackoffPolicy.HOLD,
        validation_alias="ERROR_BACKOFF_POLICY",
    )

    request_timeout_seconds: float = Field(30.0, gt=0, validation_alias="REQUEST_TIMEOUT_SECONDS")
    connect_timeout_seconds: float = Field(10.0, gt=0, validation_alias="CONNECT_TIMEOUT_SECONDS")
    max_connections: int = Field(100, ge=1, validation_alias="MAX_CONNECTIONS")

    login_path: str = Field("/auth/login", validation_alias="LOGIN_PATH")
    next_work_path: str = Field("/work/next", validation_alias="NEXT_WORK_PATH")
    finalize_item_path: str = Field(
        "/work/{parent_id}/items/{item_id}",
        validation_alias="FINALIZE_ITEM_PATH",
    )
    approve_path: str = Field("/work/{parent_id}/approve", validation_alias="APPROVE_PATH")

    reference_backend: str = Field(REFERENCE_BACKEND.PATTERN, validation_alias="REFERENCE_BACKEND")
    reference_map_file: str = Field("", validation_alias="REFERENCE_MAP_FILE")
    reference_pattern: str = Field(r"tmp-img-(.+)\.png$", validation_alias="REFERENCE_PATTERN")
    reference_replacement: str = Field(r"tmp-out-\1.pdf", validation_alias="REFERENCE_REPLACEMENT")

    log_level: str = Field("INFO", validation_alias="LOG_LEVEL")
    log_json: bool = Field(False, validation_alias="LOG_JSON")

    @field_validator("accounts")
    @classmethod
    def _accounts_parse(cls, value: str) -> str:
        parse_accounts(value)
        return value

    @model_validator(mode="after")
    def _backoff_bounds(self) -> "Settings":
        if self.max_backoff_seconds < self.initial_backoff_seconds:
            raise ValueError("MAX_BACKOFF_SECONDS must be >= INITIAL_BACKOFF_SECONDS")
        return self

    @property
    def account_list(self) -> list[Account]:
        return parse_accounts(self.accounts)


def parse_accounts(raw: str) -> list[Account]:
    accounts: list[Account] = []
    for chunk in raw.split(","):
        chunk = chunk.strip()
        if not chunk:
            continue
        username, sep, password = chunk.partition(":")
        if not sep or not username:
            raise ValueError(f"account entry must look like username:password, got {chunk!r}")
        accounts.append(Account(username=username, password=password))
    if not accounts:
        raise ValueError("at least one account is required")
    return accounts

"""Configuration system using pydantic-settings with environment variable loading."""

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

# Sub-settings read their prefixed keys from .env too, not only from the
# process environment. Keys for other prefixes are ignored.
_ENV_FILE: dict = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


class LedgerSettings(BaseSettings):
    """Sui ledger connection and bonding curve contract identifiers."""

    model_config = SettingsConfigDict(env_prefix="SUI_", **_ENV_FILE)

    rpc_url: str = "https://fullnode.testnet.sui.io:443"
    package_id: str = ""
    treasury_provider_id: str = ""
    private_key: SecretStr = SecretStr("")
    gas_budget: int = 100_000_000  # MIST
    request_timeout: float = 30.0


class CurveSettings(BaseSettings):
    """Bonding curve engine behaviour.

    Pricing constants are not settings: they mirror the on-chain contract
    and live in datacurve.curve.pricing.
    """

    model_config = SettingsConfigDict(env_prefix="CURVE_", **_ENV_FILE)

    read_max_attempts: int = 3
    read_retry_delay: float = 1.0  # seconds between "not found" retries
    auto_buy_payment_amount: int = 0  # 0 disables buy-on-good-prediction
    chain_id: int = 102


class StorageSettings(BaseSettings):
    """Tusky blob storage settings."""

    model_config = SettingsConfigDict(env_prefix="TUSKY_", **_ENV_FILE)

    api_key: SecretStr = SecretStr("")
    base_url: str = "https://api.tusky.io"
    datasets_vault_id: str = ""
    use_encryption: bool = False
    request_timeout: float = 60.0


class RecordSettings(BaseSettings):
    """Dataset and curve record persistence."""

    model_config = SettingsConfigDict(env_prefix="RECORDS_", **_ENV_FILE)

    db_path: str = "data/records.db"


class ApiSettings(BaseSettings):
    """HTTP server configuration."""

    model_config = SettingsConfigDict(env_prefix="API_", **_ENV_FILE)

    host: str = "0.0.0.0"
    port: int = 8080
    cors_origins: list[str] = ["http://localhost:3000"]
    max_upload_bytes: int = 50 * 1024 * 1024


class AppSettings(BaseSettings):
    """Root application settings, composing all sub-settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    log_level: str = "INFO"
    log_format: str = "console"  # "json" in production
    ledger: LedgerSettings = Field(default_factory=LedgerSettings)
    curve: CurveSettings = Field(default_factory=CurveSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    records: RecordSettings = Field(default_factory=RecordSettings)
    api: ApiSettings = Field(default_factory=ApiSettings)

"""Runtime configuration read from environment variables."""
import os

from pydantic import BaseModel, Field


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    return float(raw) if raw else default


class Settings(BaseModel):
    """Service settings. Build with Settings.from_env() or directly in tests."""

    database_url: str | None = None
    sql_echo: bool = False

    live_exchange_fetch: bool = False
    binance_api_key: str | None = None
    binance_api_secret: str | None = None
    okx_api_key: str | None = None
    okx_api_secret: str | None = None
    okx_passphrase: str | None = None
    defillama_min_tvl_usd: float = 1_000_000.0

    cron_secret: str | None = None
    alert_eval_secret: str | None = None

    sync_enabled: bool = True
    sync_interval_seconds: float = Field(default=30.0, gt=0)
    adapter_timeout_seconds: float = Field(default=15.0, gt=0)
    cache_max_age_seconds: float = Field(default=60.0, ge=0)
    evaluate_alerts_on_sync: bool = True

    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        """Read settings from the process environment."""
        return cls(
            database_url=os.getenv("DATABASE_URL") or None,
            sql_echo=os.getenv("SQL_ECHO", "0") == "1",
            live_exchange_fetch=_env_bool("ENABLE_LIVE_EXCHANGE_FETCH", False),
            binance_api_key=os.getenv("BINANCE_API_KEY") or None,
            binance_api_secret=os.getenv("BINANCE_API_SECRET") or None,
            okx_api_key=os.getenv("OKX_API_KEY") or None,
            okx_api_secret=os.getenv("OKX_API_SECRET") or None,
            okx_passphrase=os.getenv("OKX_PASSPHRASE") or None,
            defillama_min_tvl_usd=_env_float("DEFILLAMA_MIN_TVL_USD", 1_000_000.0),
            cron_secret=os.getenv("CRON_SECRET") or None,
            alert_eval_secret=os.getenv("ALERT_EVAL_SECRET") or None,
            sync_enabled=_env_bool("APR_SYNC_ENABLED", True),
            sync_interval_seconds=_env_float("APR_SYNC_INTERVAL_SECONDS", 30.0),
            adapter_timeout_seconds=_env_float("ADAPTER_TIMEOUT_SECONDS", 15.0),
            cache_max_age_seconds=_env_float("CACHE_MAX_AGE_SECONDS", 60.0),
            evaluate_alerts_on_sync=_env_bool("EVALUATE_ALERTS_ON_SYNC", True),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )

    @property
    def has_binance_credentials(self) -> bool:
        return bool(self.binance_api_key and self.binance_api_secret)

    @property
    def has_okx_credentials(self) -> bool:
        return bool(self.okx_api_key and self.okx_api_secret and self.okx_passphrase)

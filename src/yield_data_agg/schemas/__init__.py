"""Pydantic schemas for API and runtime use.

Opportunity is the normalized record every adapter produces. Table models
(AprSnapshot, AprHistoryPoint, Alert, Notification) double as response
models where the API returns stored rows.
"""
from datetime import datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from yield_data_agg.db.models import (AlertType, AprHistoryPoint, PlatformType,
                                      RiskLevel)
from yield_data_agg.utils import as_utc, utcnow


class Opportunity(BaseModel):
    """One yield offer from one platform for one asset at a point in time."""

    id: str | None = None
    platform: str
    asset: str  # normalized underlying ticker, e.g. BTC for WBTC
    symbol: str  # listing symbol as the platform reports it
    platform_type: PlatformType
    chain: str
    apr: float
    apy: float | None = None
    lock_period: str | None = None
    min_stake: float | None = None
    risk_level: RiskLevel | None = None
    source: str | None = None
    last_updated: datetime = Field(default_factory=utcnow)

    @field_validator("last_updated")
    @classmethod
    def _last_updated_utc(cls, value: datetime) -> datetime:
        return as_utc(value)


class CachedOpportunity(Opportunity):
    """Opportunity read back from the snapshot store."""

    fetched_at: datetime

    @field_validator("fetched_at")
    @classmethod
    def _fetched_at_utc(cls, value: datetime) -> datetime:
        return as_utc(value)


class AssetSummary(BaseModel):
    symbol: str
    name: str


class AprMeta(BaseModel):
    exchanges: list[str]
    assets: list[str]
    stale_sources: list[str]


class AprOverview(BaseModel):
    """Response for GET /apr."""

    data: list[Opportunity]
    fetched_at: datetime
    meta: AprMeta


DataSource = Literal["cache", "live", "cache-stale", "cache-fallback", "none"]


class CachedAprResponse(BaseModel):
    """Response for cache-first reads (top, by asset)."""

    data: list[CachedOpportunity | Opportunity]
    source: DataSource
    asset: str | None = None


class TrendDirection(str, Enum):
    UP = "up"
    DOWN = "down"
    FLAT = "flat"


class TrendResult(BaseModel):
    delta_abs: float = 0.0
    delta_pct: float = 0.0
    direction: TrendDirection = TrendDirection.FLAT


class TrendResponse(BaseModel):
    """Response for GET /apr/trends."""

    success: bool = True
    asset: str
    platform: str
    latest: float | None
    trend_24h: TrendResult
    trend_7d: TrendResult
    degraded: bool = False


class HistoryResponse(BaseModel):
    """Response for GET /apr/history."""

    success: bool = True
    asset: str
    platform: str
    range: str
    data: list[AprHistoryPoint]
    degraded: bool = False


class SyncResult(BaseModel):
    """Outcome of one fetch -> save -> history -> alerts cycle."""

    success: bool
    message: str
    count: int = 0
    fetched_at: datetime
    snapshots_saved: int = 0
    history_inserted: int = 0
    history_updated: int = 0
    alerts_triggered: int = 0


class EvaluateResponse(BaseModel):
    success: bool = True
    triggered: int


class AlertCreate(BaseModel):
    asset: str = Field(min_length=1)
    platform: str = Field(min_length=1)
    alert_type: AlertType
    threshold: float = Field(ge=0)


class AlertUpdate(BaseModel):
    threshold: float | None = Field(default=None, ge=0)
    alert_type: AlertType | None = None
    is_active: bool | None = None


class UnreadCount(BaseModel):
    count: int


class AffectedCount(BaseModel):
    success: bool = True
    count: int


__all__ = [
    "AffectedCount",
    "AlertCreate",
    "AlertUpdate",
    "AprMeta",
    "AprOverview",
    "AssetSummary",
    "CachedAprResponse",
    "CachedOpportunity",
    "EvaluateResponse",
    "HistoryResponse",
    "Opportunity",
    "SyncResult",
    "TrendDirection",
    "TrendResponse",
    "TrendResult",
    "UnreadCount",
]

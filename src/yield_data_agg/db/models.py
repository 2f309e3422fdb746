"""Database models for the yield data aggregation service.

Snapshots are append-only copies of each sync cycle. History is the
down-sampled series (one point per platform/asset per hour) used for trends.
Alerts and notifications are user state; user accounts live elsewhere, so
user_id is an opaque string.
"""
from datetime import datetime
from enum import Enum

from sqlmodel import Field, SQLModel

from yield_data_agg.utils import utcnow


class PlatformType(str, Enum):
    """Kind of platform offering the yield."""

    EXCHANGE = "exchange"
    DEFI = "defi"


class RiskLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class AlertType(str, Enum):
    """Direction of an APR threshold alert."""

    ABOVE = "above"
    BELOW = "below"


class AprSnapshot(SQLModel, table=True):
    """One opportunity as fetched during one sync cycle. Never mutated."""

    __tablename__ = "apr_snapshots"

    id: int | None = Field(default=None, primary_key=True)
    opportunity_id: str | None = None
    platform: str = Field(index=True)
    asset: str
    symbol: str = Field(index=True)
    platform_type: PlatformType
    chain: str
    apr: float
    apy: float | None = None
    lock_period: str | None = None
    min_stake: float | None = None
    risk_level: RiskLevel | None = None
    source: str | None = None
    last_updated: datetime
    fetched_at: datetime = Field(index=True)


class AprHistoryPoint(SQLModel, table=True):
    """Down-sampled APR sample for one (platform, asset) series."""

    __tablename__ = "apr_history"

    id: int | None = Field(default=None, primary_key=True)
    platform: str = Field(index=True)
    asset: str = Field(index=True)
    symbol: str
    apr: float
    apy: float | None = None
    source: str | None = None
    captured_at: datetime = Field(index=True)


class Alert(SQLModel, table=True):
    """APR threshold alert owned by a user."""

    __tablename__ = "alerts"

    id: int | None = Field(default=None, primary_key=True)
    user_id: str = Field(index=True)
    asset: str
    platform: str
    alert_type: AlertType
    threshold: float
    is_active: bool = Field(default=True, index=True)
    last_triggered: datetime | None = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class Notification(SQLModel, table=True):
    """Message delivered to a user, e.g. when an alert fires."""

    __tablename__ = "notifications"

    id: int | None = Field(default=None, primary_key=True)
    user_id: str = Field(index=True)
    alert_id: int | None = None  # soft reference, alerts may be deleted later
    title: str
    message: str
    type: str = "alert"
    read: bool = False
    created_at: datetime = Field(default_factory=utcnow, index=True)
    updated_at: datetime = Field(default_factory=utcnow)

"""Database package: models and session management."""
from yield_data_agg.db.models import (Alert, AlertType, AprHistoryPoint,
                                      AprSnapshot, Notification, PlatformType,
                                      RiskLevel)
from yield_data_agg.db.sessions import Database, create_db_engine

__all__ = [
    "Alert",
    "AlertType",
    "AprHistoryPoint",
    "AprSnapshot",
    "Database",
    "Notification",
    "PlatformType",
    "RiskLevel",
    "create_db_engine",
]

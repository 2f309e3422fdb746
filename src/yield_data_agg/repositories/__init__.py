"""Repositories over the database session layer."""
from yield_data_agg.repositories.alerts import (AlertRepository,
                                                NotificationRepository)
from yield_data_agg.repositories.snapshots import HISTORY_BUCKET, SnapshotStore

__all__ = [
    "HISTORY_BUCKET",
    "AlertRepository",
    "NotificationRepository",
    "SnapshotStore",
]

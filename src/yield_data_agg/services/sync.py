"""Sync pipeline: fetch -> save snapshots -> append history -> evaluate alerts."""
import asyncio
import logging
from datetime import timedelta

from yield_data_agg.errors import PersistenceUnavailable
from yield_data_agg.repositories import NotificationRepository, SnapshotStore
from yield_data_agg.schemas import SyncResult
from yield_data_agg.services.alerts import AlertEvaluator, build_live_rates
from yield_data_agg.services.registry import AggregationRegistry
from yield_data_agg.utils import utcnow

logger = logging.getLogger(__name__)

NOTIFICATION_RETENTION = timedelta(days=30)


class SyncPipeline:
    """One refresh cycle over the registry and the persistence layer.

    Steps run strictly in order so alert evaluation always sees this cycle's
    live rates rather than a database read. Database work runs in a worker
    thread so the event loop keeps serving requests and timer ticks.
    """

    def __init__(
        self,
        registry: AggregationRegistry,
        store: SnapshotStore,
        evaluator: AlertEvaluator,
        notifications: NotificationRepository,
        *,
        evaluate_alerts: bool = True,
    ) -> None:
        self._registry = registry
        self._store = store
        self._evaluator = evaluator
        self._notifications = notifications
        self._evaluate_alerts = evaluate_alerts

    async def run(self) -> SyncResult:
        fetched_at = utcnow()
        opportunities = await self._registry.fetch_all()
        if not opportunities:
            return SyncResult(
                success=False, message="No APR data fetched", fetched_at=fetched_at
            )

        result = SyncResult(
            success=True,
            message="APR data refreshed successfully",
            count=len(opportunities),
            fetched_at=fetched_at,
        )
        try:
            result.snapshots_saved = await asyncio.to_thread(
                self._store.save_snapshots, opportunities, fetched_at
            )
            result.history_inserted, result.history_updated = await asyncio.to_thread(
                self._store.append_history, opportunities, fetched_at
            )
        except PersistenceUnavailable as exc:
            logger.warning("APR sync: snapshots and history not saved: %s", exc)
            result.message = "APR data fetched; database unavailable"

        if self._evaluate_alerts:
            try:
                fired = await asyncio.to_thread(
                    self._evaluator.evaluate, build_live_rates(opportunities), fetched_at
                )
                result.alerts_triggered = len(fired)
            except PersistenceUnavailable as exc:
                logger.warning("APR sync: alert evaluation skipped: %s", exc)

        try:
            await asyncio.to_thread(
                self._notifications.delete_older_than, fetched_at - NOTIFICATION_RETENTION
            )
        except PersistenceUnavailable as exc:
            logger.warning("APR sync: notification cleanup skipped: %s", exc)
        return result

"""Sync pipeline and scheduler tests."""
import asyncio
import time
from datetime import timedelta

import pytest

from fakes import FakeAdapter, make_opportunity
from yield_data_agg.db import AlertType, Notification
from yield_data_agg.repositories import (AlertRepository,
                                         NotificationRepository, SnapshotStore)
from yield_data_agg.schemas import AlertCreate
from yield_data_agg.services import (AggregationRegistry, AlertEvaluator,
                                     SyncPipeline, SyncScheduler)
from yield_data_agg.utils import utcnow


def _pipeline(database, adapter: FakeAdapter, *, evaluate_alerts=True) -> SyncPipeline:
    alerts = AlertRepository(database)
    return SyncPipeline(
        AggregationRegistry([adapter]),
        SnapshotStore(database),
        AlertEvaluator(alerts),
        NotificationRepository(database),
        evaluate_alerts=evaluate_alerts,
    )


@pytest.mark.asyncio
async def test_pipeline_saves_history_and_fires_alerts(database, alert_repo):
    alert_repo.create(
        "user-1",
        AlertCreate(asset="BTC", platform="OKX", alert_type=AlertType.ABOVE, threshold=5.0),
    )
    adapter = FakeAdapter([make_opportunity("OKX", "BTC", 5.5), make_opportunity("OKX", "SOL", 6.9)])

    result = await _pipeline(database, adapter).run()

    assert result.success
    assert result.count == 2
    assert result.snapshots_saved == 2
    assert (result.history_inserted, result.history_updated) == (2, 0)
    assert result.alerts_triggered == 1


@pytest.mark.asyncio
async def test_pipeline_second_cycle_updates_history(database):
    pipeline = _pipeline(database, FakeAdapter([make_opportunity("OKX", "BTC", 5.5)]))

    await pipeline.run()
    second = await pipeline.run()

    assert (second.history_inserted, second.history_updated) == (0, 1)
    assert len(SnapshotStore(database).get_history("BTC", "OKX")) == 1


@pytest.mark.asyncio
async def test_pipeline_reports_empty_fetch(database):
    result = await _pipeline(database, FakeAdapter([])).run()

    assert not result.success
    assert result.message == "No APR data fetched"


@pytest.mark.asyncio
async def test_pipeline_survives_missing_database(offline_database):
    result = await _pipeline(offline_database, FakeAdapter([make_opportunity()])).run()

    assert result.success
    assert result.snapshots_saved == 0
    assert "database unavailable" in result.message


@pytest.mark.asyncio
async def test_overlapping_runs_execute_pipeline_once(database):
    adapter = FakeAdapter([make_opportunity()], delay=0.05)
    scheduler = SyncScheduler(_pipeline(database, adapter))

    first, second = await asyncio.gather(scheduler.run_once(), scheduler.run_once())

    assert adapter.calls == 1
    assert first is not None and first.success
    assert second is None
    assert not scheduler.is_syncing


@pytest.mark.asyncio
async def test_run_once_swallows_pipeline_errors():
    class BrokenPipeline:
        async def run(self):
            raise RuntimeError("boom")

    scheduler = SyncScheduler(BrokenPipeline())

    assert await scheduler.run_once() is None
    assert not scheduler.is_syncing


@pytest.mark.asyncio
async def test_start_runs_immediately_and_is_idempotent(database):
    adapter = FakeAdapter([make_opportunity()])
    scheduler = SyncScheduler(_pipeline(database, adapter))

    await scheduler.start(60)
    await scheduler.start(60)

    assert scheduler.is_running
    assert adapter.calls == 1
    await scheduler.aclose()
    assert not scheduler.is_running


@pytest.mark.asyncio
async def test_ticks_spawn_cycles_until_stopped(database):
    adapter = FakeAdapter([make_opportunity()])
    scheduler = SyncScheduler(_pipeline(database, adapter))

    await scheduler.start(0.02)
    await asyncio.sleep(0.1)
    scheduler.stop()
    await scheduler.aclose()
    calls = adapter.calls
    await asyncio.sleep(0.05)

    assert calls >= 2
    assert adapter.calls == calls


def test_stop_without_start_is_noop():
    scheduler = SyncScheduler(None)

    scheduler.stop()
    scheduler.stop()

    assert not scheduler.is_running


@pytest.mark.asyncio
async def test_start_rejects_non_positive_interval():
    with pytest.raises(ValueError):
        await SyncScheduler(None).start(0)


@pytest.mark.asyncio
async def test_pipeline_cleans_old_notifications_without_alert_evaluation(
    database, notification_repo
):
    old = utcnow() - timedelta(days=60)
    with database.session() as session:
        session.add(
            Notification(user_id="user-1", title="t", message="m", created_at=old, updated_at=old)
        )
    pipeline = _pipeline(database, FakeAdapter([make_opportunity()]), evaluate_alerts=False)

    await pipeline.run()

    assert notification_repo.list_for_user("user-1") == []


@pytest.mark.asyncio
async def test_database_work_does_not_block_the_event_loop(database):
    class SlowStore(SnapshotStore):
        def save_snapshots(self, opportunities, fetched_at):
            time.sleep(0.3)
            return super().save_snapshots(opportunities, fetched_at)

    pipeline = SyncPipeline(
        AggregationRegistry([FakeAdapter([make_opportunity()])]),
        SlowStore(database),
        AlertEvaluator(AlertRepository(database)),
        NotificationRepository(database),
    )
    beats = 0

    async def heartbeat():
        nonlocal beats
        while True:
            await asyncio.sleep(0.01)
            beats += 1

    ticker = asyncio.create_task(heartbeat())
    result = await pipeline.run()
    ticker.cancel()

    assert result.snapshots_saved == 1
    assert beats >= 10


@pytest.mark.asyncio
async def test_stop_lets_in_flight_cycle_finish(database):
    adapter = FakeAdapter([make_opportunity()])
    scheduler = SyncScheduler(_pipeline(database, adapter))

    await scheduler.start(0.1)
    adapter.delay = 0.3
    await asyncio.sleep(0.15)  # first tick is now inside the slow fetch
    assert scheduler.is_syncing
    scheduler.stop()
    await scheduler.aclose()

    assert adapter.calls == 2
    assert adapter.completed == 2
    assert not scheduler.is_syncing

    await asyncio.sleep(0.25)
    assert adapter.calls == 2

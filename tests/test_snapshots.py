"""Snapshot/history store tests against in-memory SQLite."""
from datetime import datetime, timedelta, timezone

import pytest

from fakes import make_opportunity
from yield_data_agg.db import Database
from yield_data_agg.errors import PersistenceUnavailable
from yield_data_agg.repositories import SnapshotStore
from yield_data_agg.schemas import Opportunity

T0 = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


def test_empty_store_returns_empty_lists(store: SnapshotStore):
    assert store.get_history("BTC", "OKX") == []
    assert store.get_latest_per_platform("BTC") == []
    assert store.get_top_across_snapshots(5) == []


def test_save_snapshots_returns_row_count(store: SnapshotStore):
    rows = [make_opportunity("OKX", "BTC", 1.5), make_opportunity("Binance", "BTC", 1.2)]

    assert store.save_snapshots(rows, T0) == 2
    assert store.save_snapshots([], T0) == 0


def test_save_snapshots_skips_a_bad_row(store: SnapshotStore):
    good = make_opportunity("OKX", "BTC", 1.5)
    bad = Opportunity.model_construct(**(make_opportunity("OKX", "ETH").model_dump() | {"apr": None}))

    assert store.save_snapshots([bad, good], T0) == 1
    assert [row.symbol for row in store.get_top_across_snapshots(10)] == ["BTC"]


def test_latest_per_platform_uses_newest_fetch(store: SnapshotStore):
    store.save_snapshots([make_opportunity("OKX", "BTC", 1.0)], T0)
    store.save_snapshots([make_opportunity("OKX", "BTC", 2.0)], T0 + timedelta(minutes=1))
    store.save_snapshots([make_opportunity("Binance", "BTC", 3.0)], T0)

    rows = store.get_latest_per_platform("btc")

    assert [(row.platform, row.apr) for row in rows] == [("Binance", 3.0), ("OKX", 2.0)]
    assert rows[1].fetched_at == T0 + timedelta(minutes=1)


def test_latest_per_platform_prefers_highest_apr_within_one_fetch(store: SnapshotStore):
    store.save_snapshots(
        [
            make_opportunity("Binance", "USDT", 4.0, lock_period="Flexible"),
            make_opportunity("Binance", "USDT", 6.5, lock_period="30 Days"),
        ],
        T0,
    )

    rows = store.get_latest_per_platform("USDT")

    assert [row.apr for row in rows] == [6.5]


def test_top_across_snapshots(store: SnapshotStore):
    store.save_snapshots(
        [
            make_opportunity("OKX", "BTC", 1.5),
            make_opportunity("OKX", "SOL", 6.9),
            make_opportunity("Kraken", "ATOM", 14.0),
        ],
        T0,
    )
    store.save_snapshots([make_opportunity("OKX", "SOL", 3.0)], T0 + timedelta(minutes=2))

    top = store.get_top_across_snapshots(2)

    assert [(row.symbol, row.apr) for row in top] == [("ATOM", 14.0), ("SOL", 3.0)]


def test_history_keeps_one_point_per_hour(store: SnapshotStore):
    assert store.append_history([make_opportunity("OKX", "BTC", 5.0)], T0) == (1, 0)
    assert store.append_history(
        [make_opportunity("okx", "btc", 5.5)], T0 + timedelta(minutes=30)
    ) == (0, 1)

    points = store.get_history("BTC", "OKX")

    assert len(points) == 1
    assert points[0].apr == 5.5
    assert points[0].captured_at == T0


def test_history_starts_new_point_after_an_hour(store: SnapshotStore):
    store.append_history([make_opportunity("OKX", "BTC", 5.0)], T0)
    store.append_history([make_opportunity("OKX", "BTC", 6.0)], T0 + timedelta(minutes=61))

    points = store.get_history("btc", "okx")

    assert [p.apr for p in points] == [6.0, 5.0]


def test_repeated_cycles_never_exceed_one_point_per_rolling_hour(store: SnapshotStore):
    for minute in range(0, 180, 5):
        store.append_history([make_opportunity("OKX", "BTC", 5.0)], T0 + timedelta(minutes=minute))

    points = sorted(store.get_history("BTC", "OKX"), key=lambda p: p.captured_at)

    for earlier, later in zip(points, points[1:]):
        assert later.captured_at - earlier.captured_at >= timedelta(hours=1)


def test_history_is_keyed_on_normalized_asset(store: SnapshotStore):
    store.append_history([make_opportunity("Aave", "WETH", 1.9, asset="ETH")], T0)

    assert store.get_history("ETH", "Aave")[0].symbol == "WETH"
    assert store.get_history("WETH", "Aave") == []


def test_get_history_filters_and_limits(store: SnapshotStore):
    for hour in range(5):
        store.append_history(
            [make_opportunity("OKX", "BTC", float(hour))], T0 + timedelta(hours=hour)
        )

    recent = store.get_history("BTC", "OKX", since=T0 + timedelta(hours=3))
    capped = store.get_history("BTC", "OKX", limit=2)

    assert [p.apr for p in recent] == [4.0, 3.0]
    assert [p.apr for p in capped] == [4.0, 3.0]


def test_times_round_trip_as_aware_utc(store: SnapshotStore):
    naive = datetime(2024, 5, 1, 11, 30, 0)
    store.save_snapshots([make_opportunity("OKX", "BTC", 1.5, last_updated=naive)], T0)
    store.append_history([make_opportunity("OKX", "BTC", 1.5)], T0)

    snapshot = store.get_latest_per_platform("BTC")[0]
    point = store.get_history("BTC", "OKX")[0]

    assert snapshot.fetched_at == T0
    assert snapshot.last_updated == naive.replace(tzinfo=timezone.utc)
    assert point.captured_at.tzinfo is not None
    assert point.captured_at == T0


def test_save_snapshots_surfaces_database_failures():
    db = Database("sqlite://")  # tables never created

    with pytest.raises(PersistenceUnavailable):
        SnapshotStore(db).save_snapshots([make_opportunity(), make_opportunity("Binance")], T0)
    db.dispose()

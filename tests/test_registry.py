"""Aggregation registry tests: fan-out, dedup, ordering and failure isolation."""
import asyncio
import logging
from datetime import timedelta

import pytest

from fakes import FakeAdapter, make_opportunity
from yield_data_agg.services import AggregationRegistry, deduplicate
from yield_data_agg.utils import utcnow


def test_dedup_keeps_row_with_later_last_updated():
    now = utcnow()
    older = make_opportunity("OKX", "BTC", 1.0, last_updated=now - timedelta(minutes=5))
    newer = make_opportunity("okx", "btc", 2.0, last_updated=now)

    assert deduplicate([older, newer]) == [newer]
    assert deduplicate([newer, older]) == [newer]


def test_dedup_treats_missing_and_flexible_lock_as_same_product():
    now = utcnow()
    flexible = make_opportunity("Binance", "ETH", 2.0, lock_period="Flexible", last_updated=now)
    unset = make_opportunity("Binance", "ETH", 3.0, last_updated=now + timedelta(seconds=1))
    locked = make_opportunity("Binance", "ETH", 4.0, lock_period="30 Days", last_updated=now)

    result = deduplicate([flexible, unset, locked])

    assert [item.apr for item in result] == [3.0, 4.0]


def test_dedup_tie_keeps_first_row():
    now = utcnow()
    first = make_opportunity("OKX", "SOL", 6.0, last_updated=now)
    second = make_opportunity("OKX", "SOL", 7.0, last_updated=now)

    assert deduplicate([first, second]) == [first]


@pytest.mark.asyncio
async def test_fetch_top_sorts_by_apr_descending():
    rows = [
        make_opportunity("OKX", symbol, apr)
        for symbol, apr in zip(["A", "B", "C", "D", "E"], [1, 5, 3, 2, 4])
    ]
    registry = AggregationRegistry([FakeAdapter(rows)])

    top = await registry.fetch_top(3)

    assert [item.apr for item in top] == [5, 4, 3]


@pytest.mark.asyncio
async def test_failing_adapter_contributes_nothing(caplog):
    good = FakeAdapter([make_opportunity("OKX", "BTC", 5.0)], name="good")
    bad = FakeAdapter(name="bad", error=RuntimeError("boom"))
    registry = AggregationRegistry([bad, good])

    with caplog.at_level(logging.WARNING):
        rows = await registry.fetch_all()

    assert [row.platform for row in rows] == ["OKX"]
    assert "bad adapter failed" in caplog.text


@pytest.mark.asyncio
async def test_slow_adapter_times_out():
    slow = FakeAdapter([make_opportunity("Kraken", "ADA", 2.0)], name="slow", delay=1.0)
    fast = FakeAdapter([make_opportunity("OKX", "BTC", 5.0)], name="fast")
    registry = AggregationRegistry([slow, fast], timeout_seconds=0.05)

    rows = await registry.fetch_all()

    assert [row.symbol for row in rows] == ["BTC"]


@pytest.mark.asyncio
async def test_fallback_served_when_every_adapter_is_empty():
    fallback = [make_opportunity("Aave", "USDC", 4.6)]
    registry = AggregationRegistry(
        [FakeAdapter(error=RuntimeError("down")), FakeAdapter([])], fallback=fallback
    )

    assert await registry.fetch_all() == fallback


@pytest.mark.asyncio
async def test_no_fallback_returns_empty_list():
    registry = AggregationRegistry([FakeAdapter([])])

    assert await registry.fetch_all() == []


@pytest.mark.asyncio
async def test_fetch_by_symbol_is_case_insensitive():
    rows = [
        make_opportunity("OKX", "BTC", 1.5),
        make_opportunity("Binance", "BTC", 1.2),
        make_opportunity("OKX", "SOL", 6.9),
    ]
    registry = AggregationRegistry([FakeAdapter(rows)])

    result = await registry.fetch_by_symbol("btc")

    assert sorted(item.platform for item in result) == ["Binance", "OKX"]


@pytest.mark.asyncio
async def test_list_assets_is_distinct_and_sorted():
    rows = [
        make_opportunity("Aave", "WETH", 1.9, asset="ETH"),
        make_opportunity("OKX", "BTC", 1.5),
        make_opportunity("Binance", "BTC", 1.2),
    ]
    registry = AggregationRegistry([FakeAdapter(rows)])

    assets = await registry.list_assets()

    assert [(a.symbol, a.name) for a in assets] == [("BTC", "BTC"), ("WETH", "ETH")]


@pytest.mark.asyncio
async def test_close_closes_every_adapter():
    adapters = [FakeAdapter(), FakeAdapter()]
    registry = AggregationRegistry(adapters)

    await registry.close()

    assert all(adapter.closed for adapter in adapters)


@pytest.mark.asyncio
async def test_cancelled_adapter_contributes_nothing():
    cancelled = FakeAdapter(name="cancelled", error=asyncio.CancelledError())
    good = FakeAdapter([make_opportunity("OKX", "BTC", 5.0)], name="good")
    registry = AggregationRegistry([cancelled, good])

    rows = await registry.fetch_all()

    assert [row.symbol for row in rows] == ["BTC"]


@pytest.mark.asyncio
async def test_fallback_rows_are_deduplicated():
    now = utcnow()
    fallback = [
        make_opportunity("Aave", "USDC", 4.0, last_updated=now - timedelta(minutes=1)),
        make_opportunity("Aave", "USDC", 4.6, last_updated=now),
    ]
    registry = AggregationRegistry([FakeAdapter([])], fallback=fallback)

    assert [row.apr for row in await registry.fetch_all()] == [4.6]

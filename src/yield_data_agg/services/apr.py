"""APR read service: live aggregation with a snapshot-store cache in front."""
import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from datetime import datetime, timedelta

from yield_data_agg.errors import InvalidRequest, PersistenceUnavailable
from yield_data_agg.repositories import SnapshotStore
from yield_data_agg.schemas import (AprMeta, AprOverview, AssetSummary,
                                    CachedAprResponse, CachedOpportunity,
                                    HistoryResponse, Opportunity)
from yield_data_agg.services.registry import AggregationRegistry
from yield_data_agg.utils import utcnow

logger = logging.getLogger(__name__)

STALE_AFTER = timedelta(hours=1)
HISTORY_RANGES: dict[str, timedelta] = {
    "24h": timedelta(hours=24),
    "7d": timedelta(days=7),
}
HISTORY_LIMIT = 500


def build_meta(opportunities: Sequence[Opportunity], now: datetime) -> AprMeta:
    """Platforms, symbols, and platforms with rows older than STALE_AFTER."""
    return AprMeta(
        exchanges=list(dict.fromkeys(item.platform for item in opportunities)),
        assets=list(dict.fromkeys(item.symbol for item in opportunities)),
        stale_sources=list(
            dict.fromkeys(
                item.platform
                for item in opportunities
                if now - item.last_updated > STALE_AFTER
            )
        ),
    )


def _by_apr(items: list[Opportunity]) -> list[Opportunity]:
    return sorted(items, key=lambda item: item.apr, reverse=True)


class AprService:
    """Serves APR reads for the HTTP layer.

    Top and per-asset reads prefer the snapshot store while its newest rows
    are fresh, and fall back to a live registry fetch otherwise.
    """

    def __init__(
        self,
        registry: AggregationRegistry,
        store: SnapshotStore,
        *,
        cache_max_age_seconds: float = 60.0,
    ) -> None:
        self._registry = registry
        self._store = store
        self._max_age = timedelta(seconds=cache_max_age_seconds)

    async def get_overview(self) -> AprOverview:
        data = await self._registry.fetch_all()
        now = utcnow()
        return AprOverview(data=data, fetched_at=now, meta=build_meta(data, now))

    async def list_assets(self) -> list[AssetSummary]:
        return await self._registry.list_assets()

    async def get_top(self, limit: int = 10) -> CachedAprResponse:
        return await self._cache_first(
            lambda: self._store.get_top_across_snapshots(limit),
            lambda: self._registry.fetch_top(limit),
        )

    async def get_by_symbol(self, symbol: str) -> CachedAprResponse:
        if not symbol.strip():
            raise InvalidRequest("Symbol is required")
        normalized = symbol.strip().upper()
        response = await self._cache_first(
            lambda: self._store.get_latest_per_platform(normalized),
            lambda: self._registry.fetch_by_symbol(normalized),
        )
        response.asset = normalized
        response.data = _by_apr(response.data)
        return response

    def _read_cache(self, read: Callable[[], list[CachedOpportunity]]) -> list[CachedOpportunity]:
        try:
            return read()
        except PersistenceUnavailable as exc:
            logger.debug("Snapshot cache unavailable: %s", exc)
            return []

    async def _cache_first(
        self,
        read_cache: Callable[[], list[CachedOpportunity]],
        fetch_live: Callable[[], Awaitable[list[Opportunity]]],
    ) -> CachedAprResponse:
        cached = await asyncio.to_thread(self._read_cache, read_cache)
        if cached:
            newest = max(row.fetched_at for row in cached)
            if utcnow() - newest < self._max_age:
                return CachedAprResponse(data=cached, source="cache")
        try:
            live = await fetch_live()
        except Exception:  # pylint: disable=broad-except
            logger.exception("Live APR fetch failed")
            return CachedAprResponse(data=cached, source="cache-fallback" if cached else "none")
        if live:
            return CachedAprResponse(data=live, source="live")
        if cached:
            return CachedAprResponse(data=cached, source="cache-stale")
        return CachedAprResponse(data=[], source="none")

    def get_history(
        self, asset: str, platform: str, range_: str = "7d", now: datetime | None = None
    ) -> HistoryResponse:
        """History points for one series over the 24h or 7d range, newest first."""
        if range_ not in HISTORY_RANGES:
            raise InvalidRequest(f"range must be one of: {', '.join(HISTORY_RANGES)}")
        since = (now or utcnow()) - HISTORY_RANGES[range_]
        degraded = False
        try:
            points = self._store.get_history(asset, platform, since=since, limit=HISTORY_LIMIT)
        except PersistenceUnavailable:
            points, degraded = [], True
        return HistoryResponse(
            asset=asset.upper(),
            platform=platform,
            range=range_,
            data=points,
            degraded=degraded,
        )

"""Aggregation registry: fan out to every adapter, merge and deduplicate."""
import asyncio
import logging
from collections.abc import Iterable, Sequence

from yield_data_agg.adapters.core import YieldAdapterABC
from yield_data_agg.schemas import AssetSummary, Opportunity

logger = logging.getLogger(__name__)

FLEX_KEY = "flex"


def _lock_key(lock_period: str | None) -> str:
    if lock_period is None:
        return FLEX_KEY
    normalized = lock_period.strip().lower()
    if normalized in ("", FLEX_KEY, "flexible"):
        return FLEX_KEY
    return normalized


def dedup_key(item: Opportunity) -> tuple[str, str, str]:
    """(platform, symbol, lock period) identity of an offer within one fetch."""
    return (item.platform.lower(), item.symbol.upper(), _lock_key(item.lock_period))


def deduplicate(items: Iterable[Opportunity]) -> list[Opportunity]:
    """Collapse rows sharing a dedup key; the more recent last_updated wins.

    Output keeps the position of each key's first appearance.
    """
    merged: dict[tuple[str, str, str], Opportunity] = {}
    for item in items:
        key = dedup_key(item)
        current = merged.get(key)
        if current is None or item.last_updated > current.last_updated:
            merged[key] = item
    return list(merged.values())


class AggregationRegistry:
    """Holds the configured adapters and answers aggregated queries over them."""

    def __init__(
        self,
        adapters: Sequence[YieldAdapterABC],
        *,
        timeout_seconds: float = 15.0,
        fallback: Sequence[Opportunity] | None = None,
    ) -> None:
        """Initialize with the adapters to aggregate.

        Args:
            adapters: Yield sources, queried concurrently on every fetch.
            timeout_seconds: Upper bound for a single adapter call.
            fallback: Rows returned when every adapter comes back empty.
        """
        self._adapters = list(adapters)
        self._timeout = timeout_seconds
        self._fallback = list(fallback or [])

    @property
    def adapters(self) -> list[YieldAdapterABC]:
        return list(self._adapters)

    async def fetch_all(self) -> list[Opportunity]:
        """Opportunities from all adapters; failed or timed-out adapters are omitted."""
        results = await asyncio.gather(
            *(
                asyncio.wait_for(adapter.fetch_opportunities(), self._timeout)
                for adapter in self._adapters
            ),
            return_exceptions=True,
        )
        rows: list[Opportunity] = []
        for adapter, result in zip(self._adapters, results):
            if isinstance(result, BaseException):
                logger.warning("APR aggregation: %s adapter failed: %r", adapter.name, result)
                continue
            rows.extend(result)
        if not rows and self._fallback:
            logger.warning("APR aggregation: no live rows, serving fallback data")
            return deduplicate(self._fallback)
        return deduplicate(rows)

    async def fetch_by_symbol(self, symbol: str) -> list[Opportunity]:
        """Opportunities for one symbol (case insensitive)."""
        wanted = symbol.upper()
        return [item for item in await self.fetch_all() if item.symbol.upper() == wanted]

    async def fetch_top(self, limit: int = 10) -> list[Opportunity]:
        """Top opportunities by apr, highest first. Order among equal aprs is unspecified."""
        items = await self.fetch_all()
        items.sort(key=lambda item: item.apr, reverse=True)
        return items[:limit]

    async def list_assets(self) -> list[AssetSummary]:
        """Distinct listed symbols with their underlying asset, sorted by symbol."""
        names: dict[str, str] = {}
        for item in await self.fetch_all():
            names[item.symbol.upper()] = item.asset
        return [AssetSummary(symbol=s, name=names[s]) for s in sorted(names)]

    async def close(self) -> None:
        """Close every adapter. Call from app lifespan shutdown."""
        for adapter in self._adapters:
            try:
                await adapter.close()
            except Exception as exc:  # pylint: disable=broad-except
                logger.warning("Error closing adapter %s: %s", adapter.name, exc)

"""APR trend calculation over the history series."""
from collections.abc import Sequence
from datetime import datetime, timedelta

from yield_data_agg.db import AprHistoryPoint
from yield_data_agg.errors import PersistenceUnavailable
from yield_data_agg.repositories import SnapshotStore
from yield_data_agg.schemas import TrendDirection, TrendResponse, TrendResult
from yield_data_agg.utils import utcnow

FLAT_EPSILON = 0.0001
LOOKBACK_24H = timedelta(hours=24)
LOOKBACK_7D = timedelta(days=7)
# History is searched this far past the longest lookback for a reference point.
REFERENCE_SLACK = timedelta(days=1)
TREND_HISTORY_LIMIT = 1000


def compute_trend(latest: float, reference: float | None) -> TrendResult:
    """Delta and direction of latest against reference; flat zeros without a reference."""
    if reference is None:
        return TrendResult()
    delta_abs = latest - reference
    delta_pct = (delta_abs / reference) * 100 if reference != 0 else 0.0
    if abs(delta_abs) < FLAT_EPSILON:
        direction = TrendDirection.FLAT
    elif delta_abs > 0:
        direction = TrendDirection.UP
    else:
        direction = TrendDirection.DOWN
    return TrendResult(delta_abs=delta_abs, delta_pct=delta_pct, direction=direction)


def select_reference(
    points_newest_first: Sequence[AprHistoryPoint], target: datetime
) -> AprHistoryPoint | None:
    """First point captured at or before target (closest at-or-before, not nearest)."""
    for point in points_newest_first:
        if point.captured_at <= target:
            return point
    return None


class TrendService:
    """Computes 24h and 7d trends for one (asset, platform) series."""

    def __init__(self, store: SnapshotStore) -> None:
        self._store = store

    def get_trends(
        self, asset: str, platform: str, now: datetime | None = None
    ) -> TrendResponse:
        now = now or utcnow()
        degraded = False
        try:
            points = self._store.get_history(
                asset,
                platform,
                since=now - LOOKBACK_7D - REFERENCE_SLACK,
                limit=TREND_HISTORY_LIMIT,
            )
        except PersistenceUnavailable:
            points, degraded = [], True

        latest = points[0].apr if points else None
        if latest is None:
            trend_24h = trend_7d = TrendResult()
        else:
            ref_24h = select_reference(points, now - LOOKBACK_24H)
            ref_7d = select_reference(points, now - LOOKBACK_7D)
            trend_24h = compute_trend(latest, ref_24h.apr if ref_24h else None)
            trend_7d = compute_trend(latest, ref_7d.apr if ref_7d else None)

        return TrendResponse(
            asset=asset.upper(),
            platform=platform,
            latest=latest,
            trend_24h=trend_24h,
            trend_7d=trend_7d,
            degraded=degraded,
        )

"""Snapshot and history persistence for aggregated APR data."""
import logging
from collections.abc import Iterable, Sequence
from datetime import datetime, timedelta

from sqlalchemy import and_, func
from sqlalchemy.exc import DataError, IntegrityError
from sqlmodel import Session, col, select

from yield_data_agg.db import AprHistoryPoint, AprSnapshot, Database
from yield_data_agg.schemas import CachedOpportunity, Opportunity

logger = logging.getLogger(__name__)

HISTORY_BUCKET = timedelta(hours=1)


def _snapshot_from_opportunity(item: Opportunity, fetched_at: datetime) -> AprSnapshot:
    return AprSnapshot(
        opportunity_id=item.id,
        platform=item.platform,
        asset=item.asset.upper(),
        symbol=item.symbol.upper(),
        platform_type=item.platform_type,
        chain=item.chain,
        apr=item.apr,
        apy=item.apy,
        lock_period=item.lock_period,
        min_stake=item.min_stake,
        risk_level=item.risk_level,
        source=item.source,
        last_updated=item.last_updated,
        fetched_at=fetched_at,
    )


def _cached_from_snapshot(row: AprSnapshot) -> CachedOpportunity:
    return CachedOpportunity(
        id=row.opportunity_id,
        platform=row.platform,
        asset=row.asset,
        symbol=row.symbol,
        platform_type=row.platform_type,
        chain=row.chain,
        apr=row.apr,
        apy=row.apy,
        lock_period=row.lock_period,
        min_stake=row.min_stake,
        risk_level=row.risk_level,
        source=row.source,
        last_updated=row.last_updated,
        fetched_at=row.fetched_at,
    )


def _best_per_key(rows: Iterable[AprSnapshot], key) -> list[AprSnapshot]:  # noqa: ANN001
    """Keep the highest-apr row per key; rows from one fetch can hold several products."""
    best: dict[object, AprSnapshot] = {}
    for row in rows:
        k = key(row)
        if k not in best or row.apr > best[k].apr:
            best[k] = row
    return list(best.values())


class SnapshotStore:
    """Append-only snapshots plus the hourly down-sampled history series."""

    def __init__(self, database: Database) -> None:
        self._db = database

    def save_snapshots(self, opportunities: Sequence[Opportunity], fetched_at: datetime) -> int:
        """Insert one snapshot row per opportunity; a row the database rejects is skipped.

        Returns:
            Number of rows written.
        """
        if not opportunities:
            return 0
        saved = 0
        with self._db.session() as session:
            for item in opportunities:
                try:
                    with session.begin_nested():
                        session.add(_snapshot_from_opportunity(item, fetched_at))
                    saved += 1
                except (IntegrityError, DataError) as exc:
                    logger.warning(
                        "Skipping snapshot %s/%s: %s", item.platform, item.symbol, exc
                    )
        return saved

    def append_history(
        self, opportunities: Sequence[Opportunity], captured_at: datetime
    ) -> tuple[int, int]:
        """Record the latest rate per (platform, asset), at most one point per hour.

        For each opportunity: find the newest point of its series captured within
        the last hour; update it in place if present, otherwise insert a new point.

        Returns:
            (inserted, updated) counts.
        """
        inserted = updated = 0
        if not opportunities:
            return (inserted, updated)
        window_start = captured_at - HISTORY_BUCKET
        with self._db.session() as session:
            for item in opportunities:
                asset = item.asset.upper()
                point = self._latest_in_window(session, item.platform, asset, window_start)
                if point is not None:
                    point.apr = item.apr
                    point.apy = item.apy
                    point.source = item.source
                    point.symbol = item.symbol.upper()
                    session.add(point)
                    updated += 1
                    continue
                session.add(
                    AprHistoryPoint(
                        platform=item.platform,
                        asset=asset,
                        symbol=item.symbol.upper(),
                        apr=item.apr,
                        apy=item.apy,
                        source=item.source,
                        captured_at=captured_at,
                    )
                )
                session.flush()
                inserted += 1
        return (inserted, updated)

    @staticmethod
    def _latest_in_window(
        session: Session, platform: str, asset: str, window_start: datetime
    ) -> AprHistoryPoint | None:
        statement = (
            select(AprHistoryPoint)
            .where(func.lower(AprHistoryPoint.platform) == platform.lower())
            .where(AprHistoryPoint.asset == asset)
            .where(AprHistoryPoint.captured_at > window_start)
            .order_by(col(AprHistoryPoint.captured_at).desc())
            .limit(1)
        )
        return session.exec(statement).first()

    def get_history(
        self,
        asset: str,
        platform: str,
        since: datetime | None = None,
        limit: int = 500,
    ) -> list[AprHistoryPoint]:
        """History points for one series, newest first, capped at limit."""
        statement = (
            select(AprHistoryPoint)
            .where(AprHistoryPoint.asset == asset.upper())
            .where(func.lower(AprHistoryPoint.platform) == platform.lower())
        )
        if since is not None:
            statement = statement.where(AprHistoryPoint.captured_at >= since)
        statement = statement.order_by(col(AprHistoryPoint.captured_at).desc()).limit(limit)
        with self._db.session() as session:
            return list(session.exec(statement).all())

    def get_latest_per_platform(self, symbol: str) -> list[CachedOpportunity]:
        """Most recent snapshot per platform for one symbol, highest apr first."""
        symbol = symbol.upper()
        latest = (
            select(
                AprSnapshot.platform,
                func.max(AprSnapshot.fetched_at).label("latest"),
            )
            .where(AprSnapshot.symbol == symbol)
            .group_by(AprSnapshot.platform)
            .subquery()
        )
        statement = (
            select(AprSnapshot)
            .join(
                latest,
                and_(
                    AprSnapshot.platform == latest.c.platform,
                    AprSnapshot.fetched_at == latest.c.latest,
                ),
            )
            .where(AprSnapshot.symbol == symbol)
        )
        with self._db.session() as session:
            rows = _best_per_key(session.exec(statement).all(), key=lambda r: r.platform)
        rows.sort(key=lambda r: r.apr, reverse=True)
        return [_cached_from_snapshot(r) for r in rows]

    def get_top_across_snapshots(self, limit: int = 10) -> list[CachedOpportunity]:
        """Most recent snapshot per (platform, symbol), sorted by apr descending."""
        latest = (
            select(
                AprSnapshot.platform,
                AprSnapshot.symbol,
                func.max(AprSnapshot.fetched_at).label("latest"),
            )
            .group_by(AprSnapshot.platform, AprSnapshot.symbol)
            .subquery()
        )
        statement = select(AprSnapshot).join(
            latest,
            and_(
                AprSnapshot.platform == latest.c.platform,
                AprSnapshot.symbol == latest.c.symbol,
                AprSnapshot.fetched_at == latest.c.latest,
            ),
        )
        with self._db.session() as session:
            rows = _best_per_key(
                session.exec(statement).all(), key=lambda r: (r.platform, r.symbol)
            )
        rows.sort(key=lambda r: r.apr, reverse=True)
        return [_cached_from_snapshot(r) for r in rows[:limit]]

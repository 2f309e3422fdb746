"""APR read routes: live aggregation, cache-first views, history and trends.

Routes stay thin; AprService and TrendService own fetching, caching and
degradation, and ErrorMapper turns their exceptions into HTTP errors.
"""
import logging
from typing import Annotated

from fastapi import APIRouter, Query

from yield_data_agg.deps import AprServiceDep, TrendServiceDep
from yield_data_agg.errors import ErrorMapper, InvalidRequest
from yield_data_agg.schemas import (AprOverview, AssetSummary,
                                    CachedAprResponse, HistoryResponse,
                                    TrendResponse)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/apr", tags=["apr"])

errors = ErrorMapper(resource_name="Asset", api_name="APR sources")


@router.get("", response_model=AprOverview)
async def get_apr_overview(service: AprServiceDep) -> AprOverview:
    """All live opportunities with platform, asset and staleness metadata."""
    try:
        return await service.get_overview()
    except Exception as exc:
        logger.exception("Failed to aggregate APR data")
        errors.raise_http(exc)


@router.get("/top", response_model=CachedAprResponse)
async def get_top_apr(
    service: AprServiceDep,
    limit: Annotated[int, Query(ge=1, le=100, description="Number of rows")] = 10,
) -> CachedAprResponse:
    """Highest APR opportunities across all platforms, cache first."""
    return await service.get_top(limit)


@router.get("/assets", response_model=list[AssetSummary])
async def list_apr_assets(service: AprServiceDep) -> list[AssetSummary]:
    """Distinct listed symbols, sorted."""
    try:
        return await service.list_assets()
    except Exception as exc:
        logger.exception("Failed to list APR assets")
        errors.raise_http(exc)


@router.get("/asset/{symbol}", response_model=CachedAprResponse)
async def get_apr_for_asset(symbol: str, service: AprServiceDep) -> CachedAprResponse:
    """Latest rate per platform for one asset symbol, highest APR first.

    Args:
        symbol: Listing symbol, case insensitive (e.g. "usdt", "ETH").
    """
    try:
        return await service.get_by_symbol(symbol)
    except InvalidRequest as exc:
        errors.raise_http(exc, key=symbol)


@router.get("/history", response_model=HistoryResponse)
def get_apr_history(
    service: AprServiceDep,
    asset: Annotated[str, Query(min_length=1)],
    platform: Annotated[str, Query(min_length=1)],
    range_: Annotated[str, Query(alias="range", description="24h or 7d")] = "7d",
) -> HistoryResponse:
    """Hourly APR history for one (asset, platform) series, newest first."""
    try:
        return service.get_history(asset, platform, range_)
    except InvalidRequest as exc:
        errors.raise_http(exc)


@router.get("/trends", response_model=TrendResponse)
def get_apr_trends(
    service: TrendServiceDep,
    asset: Annotated[str, Query(min_length=1)],
    platform: Annotated[str, Query(min_length=1)],
) -> TrendResponse:
    """Latest APR with 24h and 7d change for one (asset, platform) series."""
    return service.get_trends(asset, platform)

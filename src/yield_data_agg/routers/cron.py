"""Scheduled refresh trigger for external cron (e.g. a hosting platform's scheduler)."""
import logging

from fastapi import APIRouter, HTTPException

from yield_data_agg.deps import CronAuth, SchedulerDep
from yield_data_agg.schemas import SyncResult

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/cron", tags=["cron"], dependencies=[CronAuth])


@router.api_route("/refresh-apr", methods=["GET", "POST"], response_model=SyncResult)
async def refresh_apr(scheduler: SchedulerDep) -> SyncResult:
    """Run one sync cycle through the scheduler's single-flight guard."""
    if scheduler.is_syncing:
        raise HTTPException(status_code=409, detail="APR sync already in progress")
    result = await scheduler.run_once()
    if result is None:
        if scheduler.is_syncing:
            raise HTTPException(status_code=409, detail="APR sync already in progress")
        raise HTTPException(status_code=500, detail="APR sync failed")
    return result

"""Per-user APR alert routes and manual evaluation."""
import asyncio
import logging

from fastapi import APIRouter

from yield_data_agg.db import Alert
from yield_data_agg.deps import (AlertEvalAuth, AlertEvaluatorDep,
                                 AlertRepositoryDep, CurrentUserId, RegistryDep)
from yield_data_agg.errors import ErrorMapper, PersistenceUnavailable
from yield_data_agg.schemas import (AffectedCount, AlertCreate, AlertUpdate,
                                    EvaluateResponse)
from yield_data_agg.services import build_live_rates

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/alerts", tags=["alerts"])

errors = ErrorMapper(resource_name="Alert", api_name="APR sources")


@router.post("/evaluate", response_model=EvaluateResponse, dependencies=[AlertEvalAuth])
async def evaluate_alerts(
    registry: RegistryDep, evaluator: AlertEvaluatorDep
) -> EvaluateResponse:
    """Fetch live rates now and evaluate every active alert against them."""
    opportunities = await registry.fetch_all()
    try:
        fired = await asyncio.to_thread(evaluator.evaluate, build_live_rates(opportunities))
    except PersistenceUnavailable as exc:
        errors.raise_http(exc)
    return EvaluateResponse(triggered=len(fired))


@router.get("", response_model=list[Alert])
def list_alerts(user_id: CurrentUserId, alerts: AlertRepositoryDep) -> list[Alert]:
    try:
        return alerts.list_for_user(user_id)
    except PersistenceUnavailable as exc:
        errors.raise_http(exc)


@router.post("", response_model=Alert, status_code=201)
def create_alert(
    payload: AlertCreate, user_id: CurrentUserId, alerts: AlertRepositoryDep
) -> Alert:
    try:
        return alerts.create(user_id, payload)
    except PersistenceUnavailable as exc:
        errors.raise_http(exc)


@router.patch("/{alert_id}", response_model=Alert)
def update_alert(
    alert_id: int, payload: AlertUpdate, user_id: CurrentUserId, alerts: AlertRepositoryDep
) -> Alert:
    """Change threshold, direction or active state of one of the caller's alerts."""
    try:
        return alerts.update(user_id, alert_id, payload)
    except (LookupError, PersistenceUnavailable) as exc:
        errors.raise_http(exc, key=alert_id)


@router.delete("/{alert_id}", response_model=AffectedCount)
def delete_alert(
    alert_id: int, user_id: CurrentUserId, alerts: AlertRepositoryDep
) -> AffectedCount:
    try:
        alerts.delete(user_id, alert_id)
    except (LookupError, PersistenceUnavailable) as exc:
        errors.raise_http(exc, key=alert_id)
    return AffectedCount(count=1)

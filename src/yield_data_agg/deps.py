"""FastAPI dependencies: resolve services from the container on app.state.

The container is created once in create_app() and attached to app.state;
these getters are used by Depends() so routes never touch it directly.
"""
import hmac
from typing import Annotated

from fastapi import Depends, Header, HTTPException, Request

from yield_data_agg.config import Settings
from yield_data_agg.repositories import AlertRepository, NotificationRepository
from yield_data_agg.services import (AggregationRegistry, AlertEvaluator,
                                     AprService, SyncScheduler, TrendService)


def get_settings(request: Request) -> Settings:
    return request.app.state.container.settings()


def get_apr_service(request: Request) -> AprService:
    return request.app.state.container.apr_service()


def get_trend_service(request: Request) -> TrendService:
    return request.app.state.container.trend_service()


def get_registry(request: Request) -> AggregationRegistry:
    return request.app.state.container.registry()


def get_scheduler(request: Request) -> SyncScheduler:
    return request.app.state.container.scheduler()


def get_alert_evaluator(request: Request) -> AlertEvaluator:
    return request.app.state.container.alert_evaluator()


def get_alert_repository(request: Request) -> AlertRepository:
    return request.app.state.container.alert_repository()


def get_notification_repository(request: Request) -> NotificationRepository:
    return request.app.state.container.notification_repository()


def get_current_user_id(
    x_user_id: Annotated[str | None, Header()] = None,
) -> str:
    """Caller identity from the X-User-Id header (set by the auth gateway)."""
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=401, detail="Unauthorized")
    return x_user_id.strip()


def _presented_secret(authorization: str | None, x_cron_secret: str | None) -> str | None:
    if authorization and authorization.startswith("Bearer "):
        return authorization.removeprefix("Bearer ").strip()
    return x_cron_secret


def _secret_matches(expected: str, presented: str | None) -> bool:
    return presented is not None and hmac.compare_digest(expected, presented)


def require_cron_secret(
    settings: Annotated[Settings, Depends(get_settings)],
    authorization: Annotated[str | None, Header()] = None,
    x_cron_secret: Annotated[str | None, Header()] = None,
) -> None:
    """Guard for the cron route. Open when CRON_SECRET is not configured."""
    if settings.cron_secret is None:
        return
    if not _secret_matches(settings.cron_secret, _presented_secret(authorization, x_cron_secret)):
        raise HTTPException(status_code=401, detail="Unauthorized")


def require_alert_eval_secret(
    settings: Annotated[Settings, Depends(get_settings)],
    authorization: Annotated[str | None, Header()] = None,
    x_cron_secret: Annotated[str | None, Header()] = None,
) -> None:
    """Guard for manual alert evaluation. Rejects every caller when ALERT_EVAL_SECRET is unset."""
    expected = settings.alert_eval_secret
    if expected is None or not _secret_matches(
        expected, _presented_secret(authorization, x_cron_secret)
    ):
        raise HTTPException(status_code=401, detail="Unauthorized")


# Type aliases for route injection
AprServiceDep = Annotated[AprService, Depends(get_apr_service)]
TrendServiceDep = Annotated[TrendService, Depends(get_trend_service)]
RegistryDep = Annotated[AggregationRegistry, Depends(get_registry)]
SchedulerDep = Annotated[SyncScheduler, Depends(get_scheduler)]
AlertEvaluatorDep = Annotated[AlertEvaluator, Depends(get_alert_evaluator)]
AlertRepositoryDep = Annotated[AlertRepository, Depends(get_alert_repository)]
NotificationRepositoryDep = Annotated[
    NotificationRepository, Depends(get_notification_repository)
]
CurrentUserId = Annotated[str, Depends(get_current_user_id)]
CronAuth = Depends(require_cron_secret)
AlertEvalAuth = Depends(require_alert_eval_secret)

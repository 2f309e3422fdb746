"""Alert evaluation: match live rates against user thresholds."""
import logging
from collections.abc import Iterable, Mapping
from datetime import datetime, timedelta

from sqlalchemy.exc import SQLAlchemyError

from yield_data_agg.db import Alert, AlertType, Notification
from yield_data_agg.errors import PersistenceUnavailable
from yield_data_agg.repositories import AlertRepository
from yield_data_agg.schemas import Opportunity
from yield_data_agg.utils import utcnow

logger = logging.getLogger(__name__)

ALERT_COOLDOWN = timedelta(hours=1)


def rate_key(platform: str, asset: str) -> str:
    """Lookup key for live rates: platform lower-cased, asset upper-cased."""
    return f"{platform.lower()}-{asset.upper()}"


def build_live_rates(opportunities: Iterable[Opportunity]) -> dict[str, float]:
    """Map rate_key -> apr; the first opportunity seen for a key wins."""
    rates: dict[str, float] = {}
    for item in opportunities:
        rates.setdefault(rate_key(item.platform, item.asset), item.apr)
    return rates


def should_trigger(alert: Alert, apr: float) -> bool:
    if alert.alert_type == AlertType.ABOVE:
        return apr >= alert.threshold
    return apr <= alert.threshold


def on_cooldown(alert: Alert, now: datetime) -> bool:
    """True while less than ALERT_COOLDOWN has passed since the last trigger."""
    if alert.last_triggered is None:
        return False
    return now - alert.last_triggered < ALERT_COOLDOWN


def _build_notification(alert: Alert, apr: float, now: datetime) -> Notification:
    direction = "above" if alert.alert_type == AlertType.ABOVE else "below"
    return Notification(
        user_id=alert.user_id,
        alert_id=alert.id,
        title=f"APR {direction} {alert.threshold:g}%",
        message=f"{alert.asset} on {alert.platform} is {apr:.2f}%",
        type="alert",
        read=False,
        created_at=now,
        updated_at=now,
    )


class AlertEvaluator:
    """Evaluates every active alert against a map of live rates.

    Alerts stay armed after firing; the cooldown alone prevents repeats.
    """

    def __init__(self, alerts: AlertRepository) -> None:
        self._alerts = alerts

    def evaluate(
        self, live_rates: Mapping[str, float], now: datetime | None = None
    ) -> list[Notification]:
        """Fire every active alert whose threshold is crossed and not on cooldown.

        Args:
            live_rates: rate_key(platform, asset) -> current apr.
            now: Evaluation time; defaults to the current UTC time.

        Returns:
            Notifications persisted during this run.
        """
        now = now or utcnow()
        fired: list[Notification] = []
        for alert in self._alerts.list_active():
            apr = live_rates.get(rate_key(alert.platform, alert.asset))
            if apr is None or on_cooldown(alert, now) or not should_trigger(alert, apr):
                continue
            try:
                notification = self._alerts.record_trigger(
                    alert, _build_notification(alert, apr, now), now
                )
            except (SQLAlchemyError, PersistenceUnavailable) as exc:
                logger.warning("Failed to record trigger for alert %s: %s", alert.id, exc)
                continue
            logger.info(
                "Alert triggered: %s on %s - %.2f%% %s %s%%",
                alert.asset,
                alert.platform,
                apr,
                alert.alert_type.value,
                alert.threshold,
            )
            fired.append(notification)
        if fired:
            logger.info("Total alerts triggered: %d", len(fired))
        return fired

"""Alert and notification persistence."""
from datetime import datetime

from sqlalchemy import delete, func, update
from sqlmodel import col, select

from yield_data_agg.db import Alert, Database, Notification
from yield_data_agg.schemas import AlertCreate, AlertUpdate
from yield_data_agg.utils import utcnow


class AlertRepository:
    """CRUD over user alerts plus the trigger write used by the evaluator."""

    def __init__(self, database: Database) -> None:
        self._db = database

    def list_active(self) -> list[Alert]:
        with self._db.session() as session:
            return list(session.exec(select(Alert).where(col(Alert.is_active).is_(True))).all())

    def list_for_user(self, user_id: str) -> list[Alert]:
        statement = (
            select(Alert)
            .where(Alert.user_id == user_id)
            .order_by(col(Alert.created_at).desc())
        )
        with self._db.session() as session:
            return list(session.exec(statement).all())

    def create(self, user_id: str, payload: AlertCreate) -> Alert:
        alert = Alert(
            user_id=user_id,
            asset=payload.asset.upper(),
            platform=payload.platform,
            alert_type=payload.alert_type,
            threshold=payload.threshold,
        )
        with self._db.session() as session:
            session.add(alert)
            session.flush()
            session.refresh(alert)
        return alert

    def update(self, user_id: str, alert_id: int, payload: AlertUpdate) -> Alert:
        """Apply the provided fields. Raises LookupError if the user has no such alert."""
        with self._db.session() as session:
            alert = session.get(Alert, alert_id)
            if alert is None or alert.user_id != user_id:
                raise LookupError(alert_id)
            for field, value in payload.model_dump(exclude_none=True).items():
                setattr(alert, field, value)
            alert.updated_at = utcnow()
            session.add(alert)
        return alert

    def delete(self, user_id: str, alert_id: int) -> None:
        with self._db.session() as session:
            alert = session.get(Alert, alert_id)
            if alert is None or alert.user_id != user_id:
                raise LookupError(alert_id)
            session.delete(alert)

    def record_trigger(self, alert: Alert, notification: Notification, now: datetime) -> Notification:
        """Persist the notification and stamp last_triggered in one transaction."""
        with self._db.session() as session:
            session.add(notification)
            session.execute(
                update(Alert)
                .where(col(Alert.id) == alert.id)
                .values(last_triggered=now, updated_at=now)
            )
            session.flush()
            session.refresh(notification)
        alert.last_triggered = now
        alert.updated_at = now
        return notification


class NotificationRepository:
    """Per-user notification reads and read-state changes."""

    def __init__(self, database: Database) -> None:
        self._db = database

    def list_for_user(self, user_id: str, limit: int = 100) -> list[Notification]:
        statement = (
            select(Notification)
            .where(Notification.user_id == user_id)
            .order_by(col(Notification.created_at).desc(), col(Notification.id).desc())
            .limit(limit)
        )
        with self._db.session() as session:
            return list(session.exec(statement).all())

    def unread_count(self, user_id: str) -> int:
        statement = (
            select(func.count())
            .select_from(Notification)
            .where(Notification.user_id == user_id)
            .where(col(Notification.read).is_(False))
        )
        with self._db.session() as session:
            return int(session.exec(statement).one())

    def mark_read(self, user_id: str, notification_id: int) -> Notification:
        with self._db.session() as session:
            notification = session.get(Notification, notification_id)
            if notification is None or notification.user_id != user_id:
                raise LookupError(notification_id)
            notification.read = True
            notification.updated_at = utcnow()
            session.add(notification)
        return notification

    def mark_all_read(self, user_id: str) -> int:
        statement = (
            update(Notification)
            .where(col(Notification.user_id) == user_id)
            .where(col(Notification.read).is_(False))
            .values(read=True, updated_at=utcnow())
        )
        with self._db.session() as session:
            return session.execute(statement).rowcount

    def clear_read(self, user_id: str) -> int:
        statement = (
            delete(Notification)
            .where(col(Notification.user_id) == user_id)
            .where(col(Notification.read).is_(True))
        )
        with self._db.session() as session:
            return session.execute(statement).rowcount

    def delete(self, user_id: str, notification_id: int) -> None:
        with self._db.session() as session:
            notification = session.get(Notification, notification_id)
            if notification is None or notification.user_id != user_id:
                raise LookupError(notification_id)
            session.delete(notification)

    def delete_older_than(self, cutoff: datetime) -> int:
        """Remove notifications created before cutoff, for every user."""
        statement = delete(Notification).where(col(Notification.created_at) < cutoff)
        with self._db.session() as session:
            return session.execute(statement).rowcount

"""Alert evaluator and alert/notification repository tests."""
from datetime import datetime, timedelta, timezone

import pytest

from fakes import make_opportunity
from yield_data_agg.db import AlertType
from yield_data_agg.errors import PersistenceUnavailable
from yield_data_agg.repositories import AlertRepository, NotificationRepository
from yield_data_agg.schemas import AlertCreate, AlertUpdate
from yield_data_agg.services import AlertEvaluator, build_live_rates, rate_key

T0 = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


def _create(repo: AlertRepository, user="user-1", asset="BTC", platform="OKX",
            alert_type=AlertType.ABOVE, threshold=5.0):
    return repo.create(
        user,
        AlertCreate(asset=asset, platform=platform, alert_type=alert_type, threshold=threshold),
    )


def test_rate_key_normalizes_case():
    assert rate_key("OKX", "btc") == "okx-BTC"


def test_build_live_rates_keeps_first_rate_per_key():
    rates = build_live_rates(
        [make_opportunity("OKX", "BTC", 1.5), make_opportunity("okx", "btc", 9.0)]
    )

    assert rates == {"okx-BTC": 1.5}


def test_alert_fires_once_then_respects_cooldown(alert_repo, notification_repo):
    alert = _create(alert_repo)
    evaluator = AlertEvaluator(alert_repo)
    rates = {"okx-BTC": 5.5}

    fired = evaluator.evaluate(rates, now=T0)
    assert len(fired) == 1
    assert fired[0].title == "APR above 5%"
    assert fired[0].message == "BTC on OKX is 5.50%"
    assert alert_repo.list_for_user("user-1")[0].last_triggered == T0

    assert evaluator.evaluate(rates, now=T0 + timedelta(minutes=10)) == []
    assert len(evaluator.evaluate(rates, now=T0 + timedelta(minutes=61))) == 1

    notifications = notification_repo.list_for_user("user-1")
    assert len(notifications) == 2
    assert all(n.alert_id == alert.id for n in notifications)


def test_below_alert_triggers_at_threshold(alert_repo):
    _create(alert_repo, alert_type=AlertType.BELOW, threshold=5.0)
    evaluator = AlertEvaluator(alert_repo)

    assert evaluator.evaluate({"okx-BTC": 5.1}, now=T0) == []
    assert len(evaluator.evaluate({"okx-BTC": 5.0}, now=T0)) == 1


def test_alert_matching_ignores_case(alert_repo):
    _create(alert_repo, asset="btc", platform="okx")

    assert len(AlertEvaluator(alert_repo).evaluate({rate_key("OKX", "BTC"): 6.0}, now=T0)) == 1


def test_inactive_and_unmatched_alerts_are_ignored(alert_repo):
    inactive = _create(alert_repo)
    alert_repo.update("user-1", inactive.id, AlertUpdate(is_active=False))
    _create(alert_repo, platform="Binance")

    assert AlertEvaluator(alert_repo).evaluate({"okx-BTC": 9.0}, now=T0) == []


def test_update_and_delete_are_scoped_to_owner(alert_repo):
    alert = _create(alert_repo)

    with pytest.raises(LookupError):
        alert_repo.update("someone-else", alert.id, AlertUpdate(threshold=1.0))
    with pytest.raises(LookupError):
        alert_repo.delete("someone-else", alert.id)

    updated = alert_repo.update("user-1", alert.id, AlertUpdate(threshold=7.5))
    assert updated.threshold == 7.5
    alert_repo.delete("user-1", alert.id)
    assert alert_repo.list_for_user("user-1") == []


def test_created_alert_asset_is_uppercased(alert_repo):
    assert _create(alert_repo, asset="eth").asset == "ETH"


def test_notification_read_state(alert_repo, notification_repo: NotificationRepository):
    _create(alert_repo)
    evaluator = AlertEvaluator(alert_repo)
    evaluator.evaluate({"okx-BTC": 6.0}, now=T0)
    evaluator.evaluate({"okx-BTC": 6.0}, now=T0 + timedelta(hours=2))
    first, second = notification_repo.list_for_user("user-1")

    assert first.created_at > second.created_at
    assert notification_repo.unread_count("user-1") == 2
    assert notification_repo.mark_read("user-1", first.id).read
    assert notification_repo.unread_count("user-1") == 1
    assert notification_repo.clear_read("user-1") == 1
    assert notification_repo.mark_all_read("user-1") == 1
    assert notification_repo.unread_count("user-1") == 0
    with pytest.raises(LookupError):
        notification_repo.delete("user-2", second.id)
    notification_repo.delete("user-1", second.id)
    assert notification_repo.list_for_user("user-1") == []


def test_delete_older_than(alert_repo, notification_repo: NotificationRepository):
    _create(alert_repo)
    evaluator = AlertEvaluator(alert_repo)
    evaluator.evaluate({"okx-BTC": 6.0}, now=T0)
    evaluator.evaluate({"okx-BTC": 6.0}, now=T0 + timedelta(days=40))

    assert notification_repo.delete_older_than(T0 + timedelta(days=10)) == 1
    assert len(notification_repo.list_for_user("user-1")) == 1


def test_evaluator_requires_database(offline_database):
    with pytest.raises(PersistenceUnavailable):
        AlertEvaluator(AlertRepository(offline_database)).evaluate({"okx-BTC": 6.0})

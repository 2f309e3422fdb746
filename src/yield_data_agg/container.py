"""DI container. Build with init_container(); routes resolve services through deps.py."""
from dependency_injector import containers, providers

from yield_data_agg.adapters import create_adapters, sample_opportunities
from yield_data_agg.config import Settings
from yield_data_agg.db import Database
from yield_data_agg.repositories import (AlertRepository,
                                         NotificationRepository, SnapshotStore)
from yield_data_agg.services import (AggregationRegistry, AlertEvaluator,
                                     AprService, SyncPipeline, SyncScheduler,
                                     TrendService)


class Container(containers.DeclarativeContainer):
    settings = providers.Singleton(Settings.from_env)

    database = providers.Singleton(
        Database,
        settings.provided.database_url,
        echo=settings.provided.sql_echo,
    )

    adapters = providers.Singleton(create_adapters, settings)
    registry = providers.Singleton(
        AggregationRegistry,
        adapters,
        timeout_seconds=settings.provided.adapter_timeout_seconds,
        fallback=providers.Callable(sample_opportunities),
    )

    snapshot_store = providers.Singleton(SnapshotStore, database)
    alert_repository = providers.Singleton(AlertRepository, database)
    notification_repository = providers.Singleton(NotificationRepository, database)

    alert_evaluator = providers.Singleton(AlertEvaluator, alert_repository)
    trend_service = providers.Singleton(TrendService, snapshot_store)
    apr_service = providers.Singleton(
        AprService,
        registry,
        snapshot_store,
        cache_max_age_seconds=settings.provided.cache_max_age_seconds,
    )

    sync_pipeline = providers.Singleton(
        SyncPipeline,
        registry,
        snapshot_store,
        alert_evaluator,
        notification_repository,
        evaluate_alerts=settings.provided.evaluate_alerts_on_sync,
    )
    scheduler = providers.Singleton(SyncScheduler, sync_pipeline)


def init_container(settings: Settings | None = None) -> Container:
    """Create the container, optionally pinned to explicit settings (tests, scripts)."""
    container = Container()
    if settings is not None:
        container.settings.override(providers.Object(settings))
    return container

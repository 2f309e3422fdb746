"""Service layer: aggregation, persistence orchestration, trends, alerts, scheduling."""
from yield_data_agg.services.alerts import (AlertEvaluator, build_live_rates,
                                            rate_key)
from yield_data_agg.services.apr import AprService
from yield_data_agg.services.registry import AggregationRegistry, deduplicate
from yield_data_agg.services.scheduler import SyncScheduler
from yield_data_agg.services.sync import SyncPipeline
from yield_data_agg.services.trends import (TrendService, compute_trend,
                                            select_reference)

__all__ = [
    "AggregationRegistry",
    "AlertEvaluator",
    "AprService",
    "SyncPipeline",
    "SyncScheduler",
    "TrendService",
    "build_live_rates",
    "compute_trend",
    "deduplicate",
    "rate_key",
    "select_reference",
]

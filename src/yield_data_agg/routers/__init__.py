"""API routers for the yield aggregation service.

Includes routes for:
- /apr - Aggregated APR/APY data, history and trends
- /cron - Scheduled refresh trigger
- /alerts - Per-user APR alerts and manual evaluation
- /notifications - Per-user alert notifications
"""
from yield_data_agg.routers.alerts import router as alerts_router
from yield_data_agg.routers.apr import router as apr_router
from yield_data_agg.routers.cron import router as cron_router
from yield_data_agg.routers.notifications import router as notifications_router

__all__ = [
    "apr_router",
    "cron_router",
    "alerts_router",
    "notifications_router",
]

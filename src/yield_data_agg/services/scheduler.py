"""Recurring APR sync with a single-flight guard."""
import asyncio
import logging

from yield_data_agg.schemas import SyncResult
from yield_data_agg.services.sync import SyncPipeline

logger = logging.getLogger(__name__)


class SyncScheduler:
    """Runs the sync pipeline now and then on a fixed interval.

    Each tick is spawned as its own task, so a slow cycle never delays the
    timer; a tick that fires while a cycle is still running is skipped, not
    queued. stop() cancels the timer only, in-flight cycles run to completion.
    """

    def __init__(self, pipeline: SyncPipeline) -> None:
        self._pipeline = pipeline
        self._is_syncing = False
        self._timer: asyncio.Task | None = None
        self._in_flight: set[asyncio.Task] = set()

    @property
    def is_running(self) -> bool:
        """Whether the recurring timer is active."""
        return self._timer is not None and not self._timer.done()

    @property
    def is_syncing(self) -> bool:
        return self._is_syncing

    async def run_once(self) -> SyncResult | None:
        """Run one cycle unless one is already in progress.

        Returns:
            The cycle result, or None when skipped or failed.
        """
        if self._is_syncing:
            logger.info("APR sync already in progress, skipping")
            return None
        self._is_syncing = True
        try:
            result = await self._pipeline.run()
        except Exception:  # pylint: disable=broad-except
            logger.exception("APR sync error")
            return None
        finally:
            self._is_syncing = False
        if result.success:
            logger.info(
                "APR sync completed: %d items at %s", result.count, result.fetched_at.isoformat()
            )
        else:
            logger.warning("APR sync warning: %s", result.message)
        return result

    async def start(self, interval_seconds: float) -> None:
        """Run one cycle immediately, then every interval_seconds. No-op if already running."""
        if self.is_running:
            logger.info("APR sync already initialized")
            return
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        logger.info("Initializing APR sync with %ss interval", interval_seconds)
        self._timer = asyncio.create_task(self._tick_loop(interval_seconds))
        await self.run_once()

    async def _tick_loop(self, interval_seconds: float) -> None:
        while True:
            await asyncio.sleep(interval_seconds)
            task = asyncio.create_task(self.run_once())
            self._in_flight.add(task)
            task.add_done_callback(self._in_flight.discard)

    def stop(self) -> None:
        """Cancel the recurring timer. Safe to call when not started."""
        if self._timer is None:
            return
        self._timer.cancel()
        self._timer = None
        logger.info("APR sync stopped")

    async def aclose(self) -> None:
        """Stop the timer and wait for in-flight cycles (app shutdown)."""
        self.stop()
        if self._in_flight:
            await asyncio.gather(*self._in_flight, return_exceptions=True)

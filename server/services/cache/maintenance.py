"""Background cache maintenance using APScheduler.

Two independent jobs run on an AsyncIOScheduler:
- sweep: purge expired entries at a fixed interval
- warm-up: run registered producers at a longer interval, plus once shortly
  after start so warm-up does not compete with startup work
"""

import asyncio
import inspect
from datetime import datetime, timedelta, timezone
from typing import Any, Awaitable, Callable, Dict, Optional, Union

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.date import DateTrigger
from apscheduler.triggers.interval import IntervalTrigger

from core.logging import get_logger
from .store import CacheStore

logger = get_logger(__name__)

SWEEP_JOB_ID = "cache_sweep"
WARMUP_JOB_ID = "cache_warmup"
WARMUP_INITIAL_JOB_ID = "cache_warmup_initial"

WarmupProducer = Callable[[], Union[Any, Awaitable[Any]]]


class MaintenanceScheduler:
    """Periodic caller of CacheStore's public operations.

    Holds no store lock of its own; producers call back into
    ``CacheStore.set`` which takes its own short critical section.
    """

    def __init__(self, store: CacheStore,
                 sweep_interval: float = 300,        # 5 minutes
                 warmup_interval: float = 3600,      # 1 hour
                 warmup_initial_delay: float = 5.0,  # seconds after start
                 scheduler: Optional[AsyncIOScheduler] = None):
        """Initialize maintenance scheduler.

        Args:
            store: Cache store to sweep
            sweep_interval: Seconds between expired-entry sweeps
            warmup_interval: Seconds between warm-up rounds
            warmup_initial_delay: Seconds between start() and the first warm-up
            scheduler: APScheduler instance (a private one is created if omitted)
        """
        self.store = store
        self.sweep_interval = sweep_interval
        self.warmup_interval = warmup_interval
        self.warmup_initial_delay = warmup_initial_delay
        self.scheduler = scheduler or AsyncIOScheduler(timezone="UTC")
        self._producers: Dict[str, WarmupProducer] = {}
        self._started = False

    @property
    def running(self) -> bool:
        return self._started

    @property
    def producers(self) -> Dict[str, WarmupProducer]:
        return dict(self._producers)

    def register_producer(self, name: str, producer: WarmupProducer) -> None:
        """Register a zero-argument warm-up callback (sync or async).

        Registering a name twice replaces the earlier producer.
        """
        self._producers[name] = producer
        logger.debug("Warm-up producer registered", producer=name)

    def unregister_producer(self, name: str) -> bool:
        return self._producers.pop(name, None) is not None

    def start(self) -> None:
        """Schedule the sweep and warm-up jobs and start the scheduler.

        Must be called from inside a running event loop.
        """
        if self._started:
            logger.warning("Cache maintenance already running")
            return

        self.scheduler.add_job(
            self.run_sweep,
            trigger=IntervalTrigger(seconds=self.sweep_interval),
            id=SWEEP_JOB_ID,
            replace_existing=True,
            coalesce=True,
            max_instances=1,
        )
        self.scheduler.add_job(
            self.run_warmup,
            trigger=IntervalTrigger(seconds=self.warmup_interval),
            id=WARMUP_JOB_ID,
            replace_existing=True,
            coalesce=True,
            max_instances=1,
        )
        self.scheduler.add_job(
            self.run_warmup,
            trigger=DateTrigger(
                run_date=datetime.now(timezone.utc) + timedelta(seconds=self.warmup_initial_delay)
            ),
            id=WARMUP_INITIAL_JOB_ID,
            replace_existing=True,
        )
        self.scheduler.start()
        self._started = True
        logger.info("Cache maintenance started",
                    sweep_interval=self.sweep_interval,
                    warmup_interval=self.warmup_interval,
                    warmup_initial_delay=self.warmup_initial_delay,
                    producers=len(self._producers))

    async def stop(self) -> None:
        """Cancel all maintenance jobs. Safe to call more than once.

        AsyncIOScheduler defers shutdown() to the next loop iteration, so
        stop() yields once to let it complete. A later start() then finds
        the scheduler fully stopped.
        """
        if not self._started:
            return
        self._started = False
        self.scheduler.remove_all_jobs()
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            await asyncio.sleep(0)
        logger.info("Cache maintenance stopped")

    def run_sweep(self) -> int:
        """Purge expired entries now. Returns the number purged."""
        purged = self.store.purge_expired()
        if purged > 0:
            logger.info("Cleaned expired cache entries", count=purged)
        return purged

    async def run_warmup(self) -> Dict[str, bool]:
        """Run every registered producer concurrently.

        A failing producer is logged and does not stop the others.

        Returns:
            Producer name -> whether it completed without raising
        """
        producers = list(self._producers.items())
        if not producers:
            return {}

        outcomes = await asyncio.gather(
            *(self._run_producer(producer) for _, producer in producers),
            return_exceptions=True,
        )

        results: Dict[str, bool] = {}
        for (name, _), outcome in zip(producers, outcomes):
            if isinstance(outcome, BaseException):
                if not isinstance(outcome, Exception):
                    raise outcome
                logger.error("Cache warm-up producer failed",
                             producer=name,
                             error_type=type(outcome).__name__,
                             error=str(outcome))
                results[name] = False
            else:
                results[name] = True

        succeeded = sum(results.values())
        failed = len(results) - succeeded
        if succeeded == 0:
            logger.error("Cache warming failed", failed=failed)
        else:
            logger.info("Cache warming completed", succeeded=succeeded, failed=failed)
        return results

    @staticmethod
    async def _run_producer(producer: WarmupProducer) -> Any:
        result = producer()
        if inspect.isawaitable(result):
            result = await result
        return result

import asyncio
import traceback
from collections import deque
from datetime import datetime
from typing import List, Optional

from apscheduler.events import EVENT_JOB_MAX_INSTANCES
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from webscraper.core.config import ScraperSettings
from webscraper.core.errors import PersistenceError, SessionError
from webscraper.core.logging import log
from webscraper.core.state import SchedulerState
from webscraper.engine.controller import ScrapeCycleController
from webscraper.model.config import ScrapeConfig
from webscraper.model.records import CycleReport
from webscraper.model.validator import ConfigValidator

CYCLE_JOB_ID = "scrape-cycle"


class Scheduler:
    """
    Triggers scrape cycles immediately on start and then on a fixed interval.

    Ticks come from an ``AsyncIOScheduler`` job limited to one running
    instance: a tick arriving while a cycle is still in flight is skipped and
    logged. ``stop`` removes the job only; an in-flight cycle finishes before
    the browser session is released.
    """

    def __init__(self, settings: ScraperSettings, controller: Optional[ScrapeCycleController] = None):
        self.settings = settings
        self.controller = controller or ScrapeCycleController(settings)
        self.state = SchedulerState.STOPPED
        self.config: Optional[ScrapeConfig] = None
        self.skipped_ticks = 0
        self._history = deque(maxlen=settings.history_size)
        self._scheduler: Optional[AsyncIOScheduler] = None
        self._job = None
        self._cycle: Optional[asyncio.Task] = None
        self._stopped: Optional[asyncio.Event] = None

    @property
    def status(self) -> str:
        return self.state.value

    @property
    def is_running(self) -> bool:
        return self.state is SchedulerState.RUNNING

    @property
    def cycle_in_progress(self) -> bool:
        return self._cycle is not None and not self._cycle.done()

    def history(self) -> List[CycleReport]:
        """Reports of the latest cycles, oldest first."""
        return list(self._history)

    def start(self, config: ScrapeConfig) -> bool:
        """Start scheduling; returns False when already started."""
        if self.state is not SchedulerState.STOPPED:
            log(f"Scheduler already {self.status}, start ignored", level="debug")
            return False

        # raises ConfigurationError before anything runs
        ConfigValidator(config).validate()

        self.config = config
        self.state = SchedulerState.RUNNING
        self._stopped = asyncio.Event()

        self._scheduler = AsyncIOScheduler(event_loop=asyncio.get_running_loop())
        self._scheduler.add_listener(self._on_max_instances, EVENT_JOB_MAX_INSTANCES)
        self._job = self._scheduler.add_job(
            self._scheduled_cycle,
            IntervalTrigger(seconds=self.settings.scrape_interval),
            id=CYCLE_JOB_ID,
            next_run_time=datetime.now(),
            max_instances=1,
            coalesce=True,
        )
        self._scheduler.start()
        log(
            f"Running (user: {config.user or '[unknown]'}, interval: {self.settings.scrape_interval} seconds)",
            user=config.user,
            groups=len(config.groups),
            observers=config.observer_count,
        )
        return True

    def trigger(self) -> bool:
        """Run one cycle now unless stopped or another one is still in flight."""
        if self.state is not SchedulerState.RUNNING:
            log(f"Scheduler {self.status}, trigger ignored", level="debug")
            return False
        if self.cycle_in_progress:
            self._skip_tick()
            return False
        self._job.modify(next_run_time=datetime.now())
        return True

    def _skip_tick(self) -> None:
        self.skipped_ticks += 1
        log("Skipping current scrap iteration - previous one in progress", level="warning")

    def _on_max_instances(self, event) -> None:
        if event.job_id == CYCLE_JOB_ID:
            self._skip_tick()

    async def _scheduled_cycle(self) -> None:
        if self.state is not SchedulerState.RUNNING:
            return
        self._cycle = asyncio.get_running_loop().create_task(self._run_cycle())
        await self._cycle

    async def _run_cycle(self) -> CycleReport:
        report = CycleReport(started_at=datetime.now())
        try:
            snapshot = await self.controller.run_cycle(self.config)
            report.groups = len(snapshot.groups)
            report.items = snapshot.item_count
            report.failures = sum(group.failures for group in snapshot.groups)
        except SessionError as e:
            report.error = str(e)
            log(f"Cycle skipped, browser session unavailable: {e}", level="error")
        except PersistenceError as e:
            report.error = str(e)
            log(f"Cycle failed, snapshot not saved: {e}", level="error")
        except Exception as e:
            # keep the schedule alive, the next tick retries
            report.error = f"{type(e).__name__}: {e}"
            log(f"Cycle failed unexpectedly: {traceback.format_exc()}", level="error")
        finally:
            report.finished_at = datetime.now()
            self._history.append(report)

        if report.success:
            log(
                f"Cycle done: {report.items} items, {report.failures} failures in {report.duration_seconds}s",
                **report.to_dict(),
            )
        return report

    async def stop(self) -> None:
        """Stop ticking, let an in-flight cycle finish, release the browser."""
        if self.state is not SchedulerState.RUNNING:
            return
        self.state = SchedulerState.STOPPING

        if self._job is not None:
            self._job.remove()
            self._job = None

        if self.cycle_in_progress:
            log("Waiting for the running cycle to finish", level="info")
            await self._cycle
        self._cycle = None

        try:
            await self.controller.close()
        finally:
            # shutdown cancels pending executor tasks, so it runs after the cycle
            self._scheduler.shutdown(wait=False)
            await asyncio.sleep(0)
            self._scheduler = None
            self.state = SchedulerState.STOPPED
            self._stopped.set()
            log("Stopped")

    async def run_forever(self, config: ScrapeConfig) -> None:
        """Run until ``stop`` is called or the task is cancelled."""
        self.start(config)
        try:
            await self._stopped.wait()
        finally:
            await self.stop()

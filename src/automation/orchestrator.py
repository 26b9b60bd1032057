import asyncio
import logging
import os
import uuid
from collections import deque
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Deque, Dict, List, Optional

from assistant_ai.models import JobRun, JobTrigger
from assistant_ai.timeutil import local_now
from automation.cron import CronSchedule
from automation.jobs import DEFAULT_SCHEDULES, JobFn, ProactiveJobs

logger = logging.getLogger(__name__)

RUN_HISTORY_SIZE = int(os.getenv("AUTOMATION_RUN_HISTORY", "200"))

# Names accepted by trigger() in addition to the registered job names.
TRIGGER_ALIASES = {
    "task_reminder": "urgent_task_sweep",
    "calendar_optimization": "weekly_calendar_optimization",
    "meeting_prep": "meeting_preparation",
}

RunListener = Callable[[JobRun], None]


@dataclass
class ScheduledJob:
    name: str
    schedule: CronSchedule
    run: JobFn
    last_run: Optional[JobRun] = None

    @property
    def cron(self) -> str:
        return self.schedule.expression


class AutomationOrchestrator:
    """
    Runs independent cron jobs on the event loop.

    Every firing goes through ``run_job``, which contains any failure to that
    single run: the error is logged, a failed JobRun is recorded, and the job
    keeps its schedule. Jobs never block each other.
    """

    def __init__(
        self,
        clock: Callable[[], datetime] = local_now,
        sleep: Callable[[float], Any] = asyncio.sleep,
        history_size: int = RUN_HISTORY_SIZE,
    ):
        self.clock = clock
        self._sleep = sleep
        self.jobs: Dict[str, ScheduledJob] = {}
        self.history: Deque[JobRun] = deque(maxlen=history_size)
        self._listeners: List[RunListener] = []
        self._tasks: List[asyncio.Task] = []

    @classmethod
    def with_proactive_jobs(cls, jobs: ProactiveJobs, **kwargs) -> "AutomationOrchestrator":
        orchestrator = cls(**kwargs)
        for name, fn in jobs.registry().items():
            orchestrator.register(name, DEFAULT_SCHEDULES[name], fn)
        return orchestrator

    def register(self, name: str, cron: str, run: JobFn) -> ScheduledJob:
        if name in self.jobs:
            raise ValueError(f"Job already registered: {name}")
        job = ScheduledJob(name=name, schedule=CronSchedule(cron), run=run)
        self.jobs[name] = job
        return job

    def add_listener(self, listener: RunListener) -> None:
        self._listeners.append(listener)

    def resolve(self, name: str) -> Optional[str]:
        name = TRIGGER_ALIASES.get(name, name)
        return name if name in self.jobs else None

    @property
    def running(self) -> bool:
        return any(not t.done() for t in self._tasks)

    async def run_job(self, name: str, trigger: JobTrigger = "schedule", now: Optional[datetime] = None) -> JobRun:
        job = self.jobs[name]
        started = now or self.clock()
        run = JobRun(id=uuid.uuid4().hex, job=name, trigger=trigger, started_at=started)
        self.history.append(run)
        logger.info(f"Running job {name} ({trigger})")

        try:
            outcome = await job.run(started)
        except Exception as e:
            run.status = "failed"
            run.error = str(e) or type(e).__name__
            logger.exception(f"Job {name} failed")
        else:
            run.status = "completed"
            run.dispatched = outcome.dispatched
            run.note = outcome.note
            logger.info(f"Job {name} completed: dispatched={outcome.dispatched} {outcome.note}")

        run.finished_at = self.clock()
        job.last_run = run
        self._notify(run)
        return run

    def _notify(self, run: JobRun) -> None:
        for listener in self._listeners:
            try:
                listener(run)
            except Exception:
                logger.exception(f"Run listener failed for job {run.job}")

    async def run_due(self, now: Optional[datetime] = None) -> List[JobRun]:
        """Run every job whose schedule fires in the minute of ``now``."""
        now = now or self.clock()
        due = [name for name, job in self.jobs.items() if job.schedule.matches(now)]
        return list(await asyncio.gather(*(self.run_job(name, "schedule", now) for name in due)))

    async def trigger(self, name: str, context: Optional[Dict[str, Any]] = None) -> bool:
        resolved = self.resolve(name)
        if resolved is None:
            logger.warning(f"Unknown proactive action type: {name}")
            return False
        logger.info(f"Triggering proactive action: {name} context={context or {}}")
        run = await self.run_job(resolved, "manual")
        return run.status == "completed"

    async def _job_loop(self, job: ScheduledJob) -> None:
        logger.info(f"Scheduler for {job.name} started ({job.cron})")
        last_fire: Optional[datetime] = None
        while True:
            now = self.clock()
            base = max(now, last_fire) if last_fire else now
            fire_at = job.schedule.next_after(base)
            await self._sleep(max((fire_at - now).total_seconds(), 0.0))
            last_fire = fire_at
            await self.run_job(job.name, "schedule")

    def start(self) -> None:
        if self.running:
            return
        self._tasks = [
            asyncio.create_task(self._job_loop(job), name=f"job:{job.name}")
            for job in self.jobs.values()
        ]
        logger.info(f"Automation orchestrator started with {len(self._tasks)} jobs")

    async def stop(self) -> None:
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []
        logger.info("Automation orchestrator stopped")

    def status(self) -> List[Dict[str, Any]]:
        now = self.clock()
        return [
            {
                "name": job.name,
                "cron": job.cron,
                "next_run": job.schedule.next_after(now),
                "last_run": job.last_run,
            }
            for job in self.jobs.values()
        ]

import asyncio
from datetime import datetime, timedelta
from unittest.mock import AsyncMock

import pytest

from assistant_ai.models import SendResult
from automation.jobs import JobOutcome, ProactiveJobs
from automation.orchestrator import AutomationOrchestrator
from integration.calendar_integration import InMemoryCalendar
from storage.task_store import InMemoryTaskStore


@pytest.fixture
def email():
    sender = AsyncMock()
    sender.send.return_value = SendResult(success=True)
    return sender


@pytest.fixture
def orchestrator(clock, email):
    calendar = AsyncMock()
    calendar.list_conflicts.side_effect = RuntimeError("calendar API unavailable")
    calendar.list_upcoming.return_value = []
    tasks = InMemoryTaskStore(clock=clock)
    tasks.create("Overdue filing", due_date=clock() - timedelta(days=2))
    jobs = ProactiveJobs(calendar, tasks, email, clock=clock)
    return AutomationOrchestrator.with_proactive_jobs(jobs, clock=clock)


@pytest.mark.asyncio
async def test_failing_job_does_not_block_other_jobs(orchestrator, email, monday_9am):
    weekly = await orchestrator.run_job("weekly_calendar_optimization")
    assert weekly.status == "failed"
    assert "calendar API unavailable" in weekly.error

    # 09:00 on a weekday: the sweep and the 15-minute prep check are both due.
    runs = await orchestrator.run_due(monday_9am)
    by_job = {r.job: r for r in runs}
    assert set(by_job) == {"urgent_task_sweep", "meeting_preparation"}
    assert by_job["urgent_task_sweep"].status == "completed"
    assert by_job["urgent_task_sweep"].dispatched == 1
    assert email.send.await_count == 1


@pytest.mark.asyncio
async def test_run_history_records_failures_and_notifies_listeners(orchestrator):
    seen = []
    orchestrator.add_listener(seen.append)
    orchestrator.add_listener(lambda run: 1 / 0)

    run = await orchestrator.run_job("weekly_calendar_optimization", trigger="manual")

    assert seen == [run]
    assert list(orchestrator.history) == [run]
    assert run.trigger == "manual"
    assert run.finished_at is not None
    assert orchestrator.jobs["weekly_calendar_optimization"].last_run is run


@pytest.mark.asyncio
async def test_trigger_resolves_aliases_and_rejects_unknown(orchestrator):
    assert await orchestrator.trigger("task_reminder") is True
    assert orchestrator.history[-1].job == "urgent_task_sweep"
    assert await orchestrator.trigger("calendar_optimization") is False
    assert await orchestrator.trigger("order_lunch") is False
    assert len(orchestrator.history) == 2


def test_register_rejects_duplicates(orchestrator):
    with pytest.raises(ValueError):
        orchestrator.register("daily_briefing", "0 8 * * *", AsyncMock())


def test_status_lists_next_fire_times(orchestrator, monday_9am):
    status = {s["name"]: s for s in orchestrator.status()}
    assert len(status) == 5
    assert status["daily_briefing"]["cron"] == "0 8 * * *"
    assert status["daily_briefing"]["next_run"] == monday_9am.replace(day=11, hour=8)
    assert status["daily_briefing"]["last_run"] is None


@pytest.mark.asyncio
async def test_job_loop_keeps_firing_after_a_failure(clock):
    fired = []

    async def flaky(now: datetime) -> JobOutcome:
        fired.append(now)
        raise RuntimeError("boom")

    sleeps = []

    async def fake_sleep(seconds: float) -> None:
        if len(sleeps) == 3:
            raise asyncio.CancelledError
        sleeps.append(seconds)
        clock.advance(seconds)

    orchestrator = AutomationOrchestrator(clock=clock, sleep=fake_sleep)
    job = orchestrator.register("flaky", "* * * * *", flaky)

    with pytest.raises(asyncio.CancelledError):
        await orchestrator._job_loop(job)

    assert sleeps == [60.0, 60.0, 60.0]
    assert len(fired) == 3
    assert [r.status for r in orchestrator.history] == ["failed"] * 3


@pytest.mark.asyncio
async def test_start_and_stop(clock):
    orchestrator = AutomationOrchestrator(clock=clock)

    async def noop(now):
        return JobOutcome()

    orchestrator.register("noop", "0 8 * * *", noop)
    orchestrator.start()
    assert orchestrator.running
    await orchestrator.stop()
    assert not orchestrator.running

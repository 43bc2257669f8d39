"""
Reminder registry.
Owns one recurring daily job per user and runs a single dispatch loop over
a min-heap ordered by next fire instant.
"""

import asyncio
import contextlib
import heapq
import itertools
import logging
from collections.abc import Awaitable, Callable, Mapping
from datetime import datetime, timedelta
from typing import Any

from reminder_engine.reminders.domain.clock_port import ClockPort
from reminder_engine.reminders.domain.policy import (
    ReminderPolicy,
    coerce_policy,
    validate_schedule,
)
from reminder_engine.reminders.domain.scheduled_job import JobHandle, ScheduledJob
from reminder_engine.reminders.domain.trigger_calculator import next_fire_at

FireCallback = Callable[[str, ReminderPolicy, datetime], Awaitable[Any]]

# Compaction only kicks in above this many stale heap entries.
_COMPACT_MIN_STALE = 64


class ReminderRegistry:
    """
    The single owner of live reminder jobs.

    All state is confined to the event loop thread. Every mutation
    (upsert, remove, and the reschedule step of a fire) runs without a
    suspension point, so the loop is the single writer for every user and
    a fire can never observe a half-replaced job.

    Example:
        registry = ReminderRegistry(on_fire, SystemClock())
        await registry.start()

        registry.upsert("user-1", ReminderPolicy(enabled=True, time="20:00"))
        registry.remove("user-1")

        await registry.stop()
    """

    def __init__(
        self,
        on_fire: FireCallback,
        clock: ClockPort,
        misfire_grace: timedelta = timedelta(hours=1),
    ) -> None:
        """
        Initialize the registry.

        Args:
            on_fire: Coroutine run in an isolated task for every fire,
                     called with (user_id, policy snapshot, fired_at).
            clock: Time source for scheduling and the dispatch loop.
            misfire_grace: Fires processed later than this are not evaluated.
        """
        self._on_fire = on_fire
        self._clock = clock
        self._misfire_grace = misfire_grace

        self._jobs: dict[str, ScheduledJob] = {}
        self._heap: list[tuple[datetime, int, JobHandle]] = []
        self._sequence = itertools.count()
        self._stale_entries = 0

        self._workers: dict[str, asyncio.Task[None]] = {}
        self._wakeup = asyncio.Event()
        self._running = False
        self._loop_task: asyncio.Task[None] | None = None

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def upsert(
        self, user_id: str, policy: ReminderPolicy | Mapping[str, Any]
    ) -> ScheduledJob | None:
        """
        Install or replace the job for a user.

        Args:
            user_id: Owner of the job.
            policy: Reminder policy (model or settings mapping).

        Returns:
            The installed job, or None if the policy is disabled.

        Raises:
            ConfigError: If the policy is invalid. Any existing job is kept.
        """
        policy = coerce_policy(policy)
        validate_schedule(policy)

        if not policy.enabled:
            self.remove(user_id)
            return None

        first_fire = next_fire_at(policy.time_of_day, policy.timezone, self._clock.now())

        previous = self._jobs.get(user_id)
        if previous is not None:
            self._cancel(previous)

        job = ScheduledJob(
            user_id=user_id,
            timezone=policy.timezone,
            time_of_day=policy.time_of_day,
            next_fire_at=first_fire,
            handle=JobHandle(user_id),
            policy=policy,
        )
        self._jobs[user_id] = job
        self._push(job.handle, first_fire)
        self._wakeup.set()

        action = "Rescheduled" if previous is not None else "Scheduled"
        logging.info(
            f"{action} reminder for user '{user_id}' at {policy.time_of_day} "
            f"{policy.timezone} (next fire {first_fire.isoformat()})"
        )
        return job

    def remove(self, user_id: str) -> bool:
        """
        Remove the job for a user. Idempotent.

        No fire for this user happens after this returns.

        Returns:
            True if a job was removed.
        """
        job = self._jobs.pop(user_id, None)
        if job is None:
            return False

        self._cancel(job)
        self._wakeup.set()
        logging.info(f"Removed reminder for user '{user_id}'")
        return True

    def contains(self, user_id: str) -> bool:
        """Check whether a live job exists for the user."""
        return user_id in self._jobs

    def get_job(self, user_id: str) -> ScheduledJob | None:
        """Get the live job for a user, if any."""
        return self._jobs.get(user_id)

    def get_jobs(self) -> dict[str, ScheduledJob]:
        """
        Get all live jobs.

        Returns:
            Dictionary mapping user_id to its job.
        """
        return self._jobs.copy()

    def next_deadline(self) -> datetime | None:
        """Earliest pending fire instant, ignoring cancelled entries."""
        self._discard_stale_head()
        return self._heap[0][0] if self._heap else None

    # ------------------------------------------------------------------
    # Firing
    # ------------------------------------------------------------------

    def fire_due(self) -> int:
        """
        Fire every job whose instant has arrived.

        Each fire reschedules the next occurrence before its decision is
        handed to a worker task, so a slow decision never delays tomorrow.

        Returns:
            Number of fires handed to workers.
        """
        now = self._clock.now()
        fired = 0

        while self._heap and self._heap[0][0] <= now:
            scheduled_at, _, handle = heapq.heappop(self._heap)
            if handle.cancelled:
                self._stale_entries -= 1
                continue

            job = self._jobs.get(handle.user_id)
            if job is None or job.handle is not handle:
                continue

            if self._on_job_due(job, scheduled_at, now):
                fired += 1

        return fired

    def _on_job_due(self, job: ScheduledJob, scheduled_at: datetime, now: datetime) -> bool:
        """Reschedule a due job and start its worker. Returns True if a worker started."""
        job.next_fire_at = next_fire_at(job.time_of_day, job.timezone, now)
        self._push(job.handle, job.next_fire_at)

        lateness = now - scheduled_at
        if lateness > self._misfire_grace:
            logging.warning(
                f"Missed reminder for user '{job.user_id}' scheduled at "
                f"{scheduled_at.isoformat()} ({lateness} late), next fire "
                f"{job.next_fire_at.isoformat()}"
            )
            return False

        running = self._workers.get(job.user_id)
        if running is not None and not running.done():
            logging.warning(
                f"Previous reminder for user '{job.user_id}' still running, skipping this fire"
            )
            return False

        job.fire_count += 1
        logging.debug(f"Reminder for user '{job.user_id}' fired at {now.isoformat()}")
        user_id = job.user_id
        task = asyncio.create_task(self._run_worker(user_id, job.policy, now))
        self._workers[user_id] = task
        task.add_done_callback(lambda done: self._forget_worker(user_id, done))
        return True

    def _forget_worker(self, user_id: str, task: asyncio.Task[None]) -> None:
        if self._workers.get(user_id) is task:
            del self._workers[user_id]

    def active_workers(self) -> list[str]:
        """User ids whose fire callback is still running."""
        return list(self._workers)

    async def _run_worker(self, user_id: str, policy: ReminderPolicy, fired_at: datetime) -> None:
        """Run the fire callback; errors are logged and never reach the loop."""
        try:
            await self._on_fire(user_id, policy, fired_at)
        except asyncio.CancelledError:
            logging.debug(f"Reminder worker for user '{user_id}' cancelled")
            raise
        except Exception as e:
            logging.error(f"Reminder worker for user '{user_id}' failed: {e}")

    async def wait_idle(self) -> None:
        """Wait for every in-flight worker to finish."""
        while True:
            pending = [task for task in self._workers.values() if not task.done()]
            if not pending:
                break
            await asyncio.gather(*pending, return_exceptions=True)
        self._workers = {uid: t for uid, t in self._workers.items() if not t.done()}

    # ------------------------------------------------------------------
    # Dispatch loop
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Start the dispatch loop."""
        if self._running:
            logging.warning("ReminderRegistry is already running")
            return

        self._running = True
        self._loop_task = asyncio.create_task(self._run_loop())
        logging.info(f"ReminderRegistry started with {len(self._jobs)} jobs")

    async def stop(self) -> None:
        """Stop the dispatch loop and wait for in-flight workers."""
        if not self._running:
            return

        self._running = False
        self._wakeup.set()

        if self._loop_task and not self._loop_task.done():
            self._loop_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._loop_task
        self._loop_task = None

        await self.wait_idle()
        logging.info("ReminderRegistry stopped")

    def is_running(self) -> bool:
        """Check if the dispatch loop is running."""
        return self._running

    async def _run_loop(self) -> None:
        while self._running:
            self._wakeup.clear()
            await self._clock.wait_until(self.next_deadline(), self._wakeup)

            if not self._running:
                break

            try:
                self.fire_due()
            except Exception as e:
                logging.error(f"Error in reminder dispatch loop: {e}")

    # ------------------------------------------------------------------
    # Heap bookkeeping
    # ------------------------------------------------------------------

    def _push(self, handle: JobHandle, fire_at: datetime) -> None:
        heapq.heappush(self._heap, (fire_at, next(self._sequence), handle))

    def _cancel(self, job: ScheduledJob) -> None:
        # Each live handle has exactly one heap entry.
        job.handle.cancel()
        self._stale_entries += 1
        if self._stale_entries > _COMPACT_MIN_STALE and self._stale_entries * 2 > len(self._heap):
            self._heap = [entry for entry in self._heap if not entry[2].cancelled]
            heapq.heapify(self._heap)
            self._stale_entries = 0

    def _discard_stale_head(self) -> None:
        while self._heap and self._heap[0][2].cancelled:
            heapq.heappop(self._heap)
            self._stale_entries -= 1

# src/taskpad/tasks/task_scheduler.py

from __future__ import annotations

"""
Overdue scheduler.

A small polling loop that:
- reads the current task list,
- asks OverduePolicy which tasks are newly overdue,
- hands the resulting notifications to the permission-gated notifier.

Clock (`now`) and `sleep` are injected so tests can drive the loop without
waiting on the wall clock.
"""

import asyncio
import contextlib
import logging
import threading
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING

from .task_models import Task
from .task_notifications import Notification, OverduePolicy, TaskNotifier

if TYPE_CHECKING:
    from ..core.state import AppState

logger = logging.getLogger(__name__)

NowFn = Callable[[], datetime]
SleepFn = Callable[[float], Awaitable[None]]


def local_now() -> datetime:
    return datetime.now().astimezone()


def run_overdue_check(
    policy: OverduePolicy,
    tasks: list[Task],
    notifier: TaskNotifier,
    now: datetime,
) -> list[Notification]:
    """One check: compute newly overdue notifications and emit them."""
    notifications = policy.check(tasks, now)
    notifier.emit_all(notifications)
    return notifications


async def run_overdue_scheduler(
        get_tasks: Callable[[], list[Task]],
        policy: OverduePolicy,
        notifier: TaskNotifier,
        *,
        interval_seconds: float = 3600.0,
        now: NowFn = local_now,
        sleep: SleepFn = asyncio.sleep,
        lock: threading.RLock | None = None,
) -> None:
    """
    Periodic overdue check.

    - once eagerly on start, if there are tasks
    - then once every interval_seconds
    A failing iteration is logged and the loop keeps going.

    To stop the scheduler, cancel the coroutine/task.
    """
    sleep_s = max(0.001, float(interval_seconds))

    def check_once() -> None:
        # The lock keeps a check from interleaving with a store mutation.
        ctx = lock if lock is not None else contextlib.nullcontext()
        with ctx:
            tasks = get_tasks()
            sent = run_overdue_check(policy, tasks, notifier, now())
        if sent:
            logger.info("Overdue notifications emitted: %d", len(sent))

    try:
        if get_tasks():
            check_once()
    except Exception:
        logger.exception("Initial overdue check failed")

    while True:
        await sleep(sleep_s)
        try:
            check_once()
        except Exception:
            logger.exception("Overdue check failed")


@dataclass(slots=True)
class OverdueBackgroundRunner:
    thread: threading.Thread
    loop: asyncio.AbstractEventLoop
    task: asyncio.Task[None]

    def stop(self) -> None:
        try:
            self.loop.call_soon_threadsafe(self.task.cancel)
        except RuntimeError:
            logger.debug("Overdue checker loop already closed.", exc_info=True)

    def join(self, timeout: float | None = None) -> None:
        self.thread.join(timeout=timeout)


def start_overdue_checker_in_background(state: AppState) -> OverdueBackgroundRunner | None:
    """
    Run the overdue scheduler on its own event loop in a daemon thread.

    The console REPL blocks on input(), so the periodic check cannot share
    its thread. All access to the store goes through state.lock.
    """
    settings = state.settings
    if not getattr(settings, "overdue_check_enabled", True):
        logger.info("Overdue checker disabled, not starting.")
        return None

    interval = float(getattr(settings, "overdue_check_interval_seconds", 3600))
    ready = threading.Event()
    holder: dict[str, object] = {}

    def runner() -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        task = loop.create_task(
            run_overdue_scheduler(
                lambda: state.task_store.tasks,
                state.overdue_policy,
                state.notifier,
                interval_seconds=interval,
                lock=state.lock,
            )
        )
        holder["loop"] = loop
        holder["task"] = task
        ready.set()

        try:
            with contextlib.suppress(asyncio.CancelledError):
                loop.run_until_complete(task)
        finally:
            loop.close()

    t = threading.Thread(target=runner, name="overdue-checker", daemon=True)
    t.start()

    ready.wait(timeout=5.0)
    loop = holder.get("loop")
    task = holder.get("task")
    if not isinstance(loop, asyncio.AbstractEventLoop) or not isinstance(task, asyncio.Task):
        logger.error("Overdue checker thread did not initialize properly.")
        return None

    logger.info("Overdue checker started (interval=%ss).", interval)
    return OverdueBackgroundRunner(thread=t, loop=loop, task=task)

"""In-process task scheduler.

┌──────────────────────────────────────────────────────────────────────────────┐
│  SCHEDULER ARCHITECTURE                                                       │
│                                                                               │
│   start()                                                                     │
│      │                                                                        │
│      ▼                                                                        │
│   ┌─────────────────────────────────────────────────────────┐                │
│   │              Daemon Thread (loop)                       │                │
│   │                                                         │                │
│   │   while not quit.wait(tick_interval):                   │                │
│   │       run_pending()                                     │                │
│   │         ├── lock: sort tasks by next run time           │                │
│   │         │         take the due prefix                   │                │
│   │         └── for each due task:                          │                │
│   │               Thread(target=task.run).start()  ◄─ fire  │                │
│   │                                                 & forget│                │
│   └─────────────────────────────────────────────────────────┘                │
│                                                                               │
│   stop()                                                                      │
│      │                                                                        │
│      ▼                                                                        │
│   quit.set(); loop thread joins; in-flight task runs continue                │
│                                                                               │
│  State machine: Stopped ──start()──► Running ──stop()──► Stopped             │
│  start() while Running and stop() while Stopped raise.                       │
└──────────────────────────────────────────────────────────────────────────────┘

The tick interval (1 second by default) bounds scheduling precision. A slow
callback never delays the loop; its own task is skipped while it runs.
"""

from __future__ import annotations

import threading
import dataclasses
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from .errors import SchedulerAlreadyRunningError, SchedulerNotRunningError, TaskBindError
from .logging import get_logger
from .settings import TaskbeatSettings, get_settings
from .task import Task
from .timestamps import to_iso8601, utc_now

logger = get_logger(__name__)


@dataclass
class SchedulerStats:
    """Statistics for the scheduler."""

    tick_count: int = 0
    tasks_dispatched: int = 0
    tasks_completed: int = 0
    tasks_skipped: int = 0
    tasks_failed: int = 0
    last_tick: datetime | None = None
    last_error: str | None = None


@dataclass
class SchedulerHealth:
    """Health status for the scheduler."""

    healthy: bool
    running: bool
    task_count: int = 0
    tick_interval_seconds: float = 1.0
    last_tick: datetime | None = None
    stats: SchedulerStats = field(default_factory=SchedulerStats)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "healthy": self.healthy,
            "running": self.running,
            "task_count": self.task_count,
            "tick_interval_seconds": self.tick_interval_seconds,
            "last_tick": to_iso8601(self.last_tick),
            "stats": {
                "tick_count": self.stats.tick_count,
                "tasks_dispatched": self.stats.tasks_dispatched,
                "tasks_completed": self.stats.tasks_completed,
                "tasks_skipped": self.stats.tasks_skipped,
                "tasks_failed": self.stats.tasks_failed,
                "last_error": self.stats.last_error,
            },
        }


class Scheduler:
    """Owns a set of tasks and runs them when they are due.

    Example:
        >>> scheduler = Scheduler()
        >>> scheduler.add(at_intervals(30, TimeUnit.SECONDS).do("ping", ping))
        >>> scheduler.add(from_format("every day 11:15").do("report", report))
        >>> scheduler.start()
        >>> # ... later ...
        >>> scheduler.stop()
    """

    def __init__(self, settings: TaskbeatSettings | None = None) -> None:
        settings = settings or get_settings()
        self._interval = settings.tick_interval_seconds

        self._tasks: list[Task] = []
        self._running = False
        self._quit: threading.Event | None = None
        self._thread: threading.Thread | None = None
        self._lock = threading.Lock()

        self._stats = SchedulerStats()
        self._stats_lock = threading.Lock()

    # === Task registry ===

    def add(self, task: Task) -> Scheduler:
        """Add a task to the pool of scheduled tasks.

        Raises:
            TaskBindError: if the task has no callback bound with ``do()``
        """
        if not isinstance(task, Task) or not task.is_bound:
            raise TaskBindError(
                "only tasks bound with do() can be scheduled",
                field="task",
                value=task,
            )
        with self._lock:
            self._tasks.append(task)
        return self

    def clear(self) -> None:
        """Delete all scheduled tasks. Running executions are not interrupted."""
        with self._lock:
            self._tasks = []

    def count(self) -> int:
        """Number of registered tasks."""
        with self._lock:
            return len(self._tasks)

    def __len__(self) -> int:
        return self.count()

    def tasks(self) -> list[Task]:
        """Snapshot of the registered tasks, in current order."""
        with self._lock:
            return list(self._tasks)

    # === Lifecycle ===

    @property
    def is_running(self) -> bool:
        with self._lock:
            return self._running

    def start(self) -> None:
        """Start the dispatch loop in a daemon thread.

        Raises:
            SchedulerAlreadyRunningError: if the scheduler is running
        """
        with self._lock:
            if self._running:
                raise SchedulerAlreadyRunningError()
            self._running = True
            quit = threading.Event()
            self._quit = quit
            self._thread = threading.Thread(
                target=self._loop,
                args=(quit,),
                daemon=True,
                name="taskbeat-scheduler",
            )
            self._thread.start()
            task_count = len(self._tasks)

        logger.info("scheduler_started", tasks=task_count, interval_seconds=self._interval)

    def stop(self) -> None:
        """Signal the dispatch loop to exit.

        Waits up to 5 seconds for the current tick; task executions already
        dispatched keep running to completion.

        Raises:
            SchedulerNotRunningError: if the scheduler is not running
        """
        with self._lock:
            if not self._running:
                raise SchedulerNotRunningError()
            self._running = False
            if self._quit is not None:
                self._quit.set()
            thread, self._thread = self._thread, None

        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=5.0)
            if thread.is_alive():
                logger.warning("scheduler_thread_not_stopped")

        logger.info("scheduler_stopped")

    def _loop(self, quit: threading.Event) -> None:
        while not quit.wait(self._interval):
            try:
                self.run_pending()
            except Exception as e:
                with self._stats_lock:
                    self._stats.last_error = str(e)
                logger.exception("tick_failed")

    # === Tick Processing ===

    def _runnable_tasks(self) -> list[Task]:
        """Sort tasks by next run time and return the due prefix."""
        with self._lock:
            self._tasks.sort(key=lambda task: task.next_scheduled_time().timestamp())
            runnable = []
            for task in self._tasks:
                if not task.should_run():
                    break
                runnable.append(task)
            return runnable

    def run_pending(self) -> list[Task]:
        """Dispatch every due task on its own thread without waiting.

        Returns:
            The tasks dispatched on this tick
        """
        due = self._runnable_tasks()
        with self._stats_lock:
            self._stats.tick_count += 1
            self._stats.last_tick = utc_now()
            self._stats.tasks_dispatched += len(due)

        for task in due:
            logger.debug("task_dispatched", task=task.name)
            threading.Thread(
                target=self._run_task,
                args=(task,),
                daemon=True,
                name=f"taskbeat-{task.name}",
            ).start()
        return due

    def _run_task(self, task: Task) -> None:
        try:
            ran = task.run()
        except Exception as e:
            with self._stats_lock:
                self._stats.tasks_failed += 1
                self._stats.last_error = f"{task.name}: {e}"
            logger.exception("task_failed", task=task.name)
            return

        with self._stats_lock:
            if ran:
                self._stats.tasks_completed += 1
            else:
                self._stats.tasks_skipped += 1

    # === Health & Stats ===

    def get_stats(self) -> SchedulerStats:
        """Snapshot of the current scheduler statistics."""
        with self._stats_lock:
            return dataclasses.replace(self._stats)

    def reset_stats(self) -> None:
        with self._stats_lock:
            self._stats = SchedulerStats()

    def health(self) -> SchedulerHealth:
        """Scheduler health status."""
        with self._lock:
            running = self._running
            alive = self._thread is not None and self._thread.is_alive()
            task_count = len(self._tasks)

        stats = self.get_stats()
        return SchedulerHealth(
            healthy=running and alive,
            running=running,
            task_count=task_count,
            tick_interval_seconds=self._interval,
            last_tick=stats.last_tick,
            stats=stats,
        )

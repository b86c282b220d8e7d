"""
Task Registry
-------------

Tracking of the asyncio tasks an engine starts (channel reader, polling
timer, start retry, flash, message handlers) so shutdown can cancel them
and failures are logged instead of vanishing with the task.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum, auto
from typing import Dict, List, Optional, Any

from qapplet.utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.TASK)


class TaskCategory(Enum):
    """Logical grouping of asynchronous tasks."""
    CHANNEL = auto()    # Parent channel reader
    MESSAGE = auto()    # One inbound message being handled
    POLLING = auto()    # Recurring polling timer, start() retry
    SIGNAL = auto()     # Fire-and-forget sends (flash)
    SYSTEM = auto()


@dataclass(frozen=True)
class TaskInfo:
    """Immutable metadata captured at task creation time."""
    id: int
    category: TaskCategory
    description: str
    created_at: str  # ISO UTC string


@dataclass
class TaskRecord:
    """Internal structure tracking task state."""
    task: asyncio.Task
    info: TaskInfo
    cancelled: bool = False
    finished_with_error: Optional[BaseException] = None
    finished_return: Optional[Any] = None
    settled: bool = False  # done callback ran


class TaskRegistry:
    """
    Registry of tasks owned by one engine.

    Finished records are kept only until the next prune() so a long-running
    applet does not accumulate one record per poll.
    """

    def __init__(self) -> None:
        self._records: Dict[int, TaskRecord] = {}
        self._next_id: int = 1

    def register(self, task: asyncio.Task, category: TaskCategory, description: str) -> int:
        self.prune()

        task_id = self._next_id
        self._next_id += 1

        info = TaskInfo(
            id=task_id,
            category=category,
            description=description,
            created_at=datetime.now(timezone.utc).isoformat(),
        )
        self._records[task_id] = TaskRecord(task=task, info=info)
        log.debug(f"[Task {task_id}] Registered ({category.name}) - {description}")

        task.add_done_callback(self._on_task_done)
        return task_id

    def _on_task_done(self, task: asyncio.Task) -> None:
        record = self._get_record_by_task(task)
        if record is None:
            return
        record.settled = True

        if task.cancelled():
            record.cancelled = True
            log.debug(f"[Task {record.info.id}] Cancelled")
            return

        exc = task.exception()
        if exc:
            record.finished_with_error = exc
            log.error(
                f"[Task {record.info.id}] FAILED: {record.info.description}",
                error=str(exc),
                error_type=type(exc).__name__,
            )
        else:
            record.finished_return = task.result()
            log.debug(f"[Task {record.info.id}] Completed successfully")

    def _get_record_by_task(self, task: asyncio.Task) -> Optional[TaskRecord]:
        for record in self._records.values():
            if record.task is task:
                return record
        return None

    def prune(self) -> None:
        """Forget tasks whose completion has been recorded"""
        for task_id in [k for k, r in self._records.items() if r.settled]:
            del self._records[task_id]

    def active(self, category: Optional[TaskCategory] = None) -> List[TaskRecord]:
        return [
            r for r in self._records.values()
            if not r.task.done() and (category is None or r.info.category is category)
        ]

    def summary(self) -> str:
        total = len(self._records)
        running = len(self.active())
        return f"Tasks: total={total}, running={running}"

    def get_tasks_for_shutdown(
        self,
        exclude: Optional[List[asyncio.Task]] = None
    ) -> List[asyncio.Task]:
        """Return all running tasks that should be cancelled during shutdown."""
        exclude = exclude or []
        tasks = [
            r.task for r in self._records.values()
            if not r.task.done() and r.task not in exclude
        ]
        log.debug(f"Shutdown: {len(tasks)} tasks to cancel")
        return tasks


def create_tracked_task(
    coro,
    *,
    category: TaskCategory,
    description: str,
    registry: TaskRegistry,
) -> asyncio.Task:
    """
    Create and register a task in a single call.
    """
    task = asyncio.get_running_loop().create_task(coro, name=description)
    registry.register(
        task=task,
        category=category,
        description=description,
    )
    return task

from __future__ import annotations

import asyncio

from qapplet.lifecycle.shutdown_protocol import IShutdownHandler
from qapplet.lifecycle.task_registry import TaskRegistry
from qapplet.utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.SHUTDOWN)


class TaskCancellationHandler(IShutdownHandler):
    """
    Cancels and awaits every running task of a registry.

    The task running the shutdown sequence is never cancelled.

    Priority: 100 (runs first)
    """

    def __init__(self, registry: TaskRegistry):
        self.registry = registry

    @property
    def shutdown_priority(self) -> int:
        return 100

    async def shutdown(self) -> None:
        current = asyncio.current_task()
        tasks = self.registry.get_tasks_for_shutdown(exclude=[current] if current else None)

        if not tasks:
            log.debug("No background tasks to cancel")
            return

        log.info(f"Cancelling {len(tasks)} background tasks...")
        for task in tasks:
            task.cancel()

        await asyncio.gather(*tasks, return_exceptions=True)
        log.debug("All background tasks cancelled")

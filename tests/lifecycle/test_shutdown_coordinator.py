"""
Shutdown coordinator: trigger handling and handler ordering.
"""

import asyncio
import inspect
from unittest.mock import AsyncMock, MagicMock

import pytest

from qapplet.lifecycle import ShutdownCoordinator, TaskCategory, TaskRegistry, create_tracked_task
from qapplet.lifecycle.handlers import (
    AppletShutdownHandler,
    ClientShutdownHandler,
    TaskCancellationHandler,
)


class RecordingHandler:
    def __init__(self, name, priority, calls, error=None, delay=0.0):
        self.name = name
        self._priority = priority
        self.calls = calls
        self.error = error
        self.delay = delay

    @property
    def shutdown_priority(self):
        return self._priority

    async def shutdown(self):
        if self.delay:
            await asyncio.sleep(self.delay)
        self.calls.append(self.name)
        if self.error:
            raise self.error


@pytest.mark.asyncio
async def test_handlers_run_by_descending_priority():
    calls = []
    coordinator = ShutdownCoordinator()
    coordinator.register(RecordingHandler("client", 10, calls))
    coordinator.register(RecordingHandler("tasks", 100, calls))
    coordinator.register(RecordingHandler("applet", 50, calls))

    await coordinator.shutdown_all()
    assert calls == ["tasks", "applet", "client"]


@pytest.mark.asyncio
async def test_failing_and_slow_handlers_do_not_stop_the_sequence():
    calls = []
    coordinator = ShutdownCoordinator(timeout_per_handler=0.05)
    coordinator.register(RecordingHandler("broken", 100, calls, error=RuntimeError("boom")))
    coordinator.register(RecordingHandler("slow", 50, calls, delay=1.0))
    coordinator.register(RecordingHandler("last", 10, calls))

    await coordinator.shutdown_all()
    assert calls == ["broken", "last"]


@pytest.mark.asyncio
async def test_shutdown_runs_once():
    calls = []
    coordinator = ShutdownCoordinator()
    coordinator.register(RecordingHandler("only", 1, calls))

    await coordinator.shutdown_all()
    await coordinator.shutdown_all()
    assert calls == ["only"]


@pytest.mark.asyncio
async def test_first_reason_wins():
    coordinator = ShutdownCoordinator()
    assert not coordinator.is_triggered

    coordinator.request_shutdown("SIGTERM")
    coordinator.request_shutdown("Parent channel disconnected")

    await asyncio.wait_for(coordinator.wait_for_shutdown(), timeout=1.0)
    assert coordinator.is_triggered
    assert coordinator.reason == "SIGTERM"


def test_register_rejects_incomplete_handler():
    coordinator = ShutdownCoordinator()
    with pytest.raises(ValueError):
        coordinator.register(object())


def test_get_handler_by_type():
    coordinator = ShutdownCoordinator()
    handler = ClientShutdownHandler(MagicMock())
    coordinator.register(handler)
    assert coordinator.get_handler(ClientShutdownHandler) is handler
    assert coordinator.get_handler(AppletShutdownHandler) is None


@pytest.mark.asyncio
async def test_applet_and_client_handlers():
    applet = MagicMock()
    applet.shutdown = AsyncMock()
    client = MagicMock()
    client.aclose = AsyncMock()

    await AppletShutdownHandler(applet).shutdown()
    await ClientShutdownHandler(client).shutdown()

    applet.shutdown.assert_awaited_once()
    client.aclose.assert_awaited_once()


@pytest.mark.asyncio
async def test_task_cancellation_handler_cancels_registry_tasks():
    registry = TaskRegistry()

    async def forever():
        await asyncio.sleep(3600)

    task = create_tracked_task(forever(), category=TaskCategory.POLLING, description="timer", registry=registry)
    await asyncio.sleep(0)
    assert len(registry.active(TaskCategory.POLLING)) == 1

    await TaskCancellationHandler(registry).shutdown()

    assert task.cancelled()
    assert registry.active() == []


@pytest.mark.asyncio
async def test_registry_records_failures():
    registry = TaskRegistry()

    async def fail():
        raise RuntimeError("broken")

    task = create_tracked_task(fail(), category=TaskCategory.MESSAGE, description="bad message", registry=registry)
    with pytest.raises(RuntimeError):
        await task
    await asyncio.sleep(0)

    record = registry._get_record_by_task(task)
    assert isinstance(record.finished_with_error, RuntimeError)
    assert record.settled


def test_tracked_tasks_always_name_their_registry():
    registry_param = inspect.signature(create_tracked_task).parameters["registry"]
    assert registry_param.default is inspect.Parameter.empty
    assert not hasattr(TaskRegistry, "instance")


@pytest.mark.asyncio
async def test_registries_are_independent():
    first, second = TaskRegistry(), TaskRegistry()

    async def forever():
        await asyncio.sleep(3600)

    task = create_tracked_task(forever(), category=TaskCategory.SYSTEM, description="one", registry=first)
    assert len(first.active()) == 1
    assert second.active() == []

    task.cancel()
    await asyncio.gather(task, return_exceptions=True)

from .applet_shutdown_handler import AppletShutdownHandler
from .client_shutdown_handler import ClientShutdownHandler
from .task_cancellation_handler import TaskCancellationHandler

__all__ = [
    "AppletShutdownHandler",
    "ClientShutdownHandler",
    "TaskCancellationHandler",
]

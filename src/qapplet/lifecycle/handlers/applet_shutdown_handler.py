from __future__ import annotations

from typing import TYPE_CHECKING

from qapplet.lifecycle.shutdown_protocol import IShutdownHandler
from qapplet.utils.logger import get_logger, LogCategory

if TYPE_CHECKING:
    from qapplet.engine.applet import Applet

log = get_logger().for_category(LogCategory.SHUTDOWN)


class AppletShutdownHandler(IShutdownHandler):
    """
    Awaits the applet's shutdown() hook.

    Runs after background tasks are cancelled, so no run() starts while
    the applet is cleaning up, and before the HTTP client closes, so the
    hook can still send or delete signals.

    Priority: 50
    """

    def __init__(self, applet: Applet):
        self.applet = applet

    @property
    def shutdown_priority(self) -> int:
        return 50

    async def shutdown(self) -> None:
        log.info(f"Running {self.applet.__class__.__name__}.shutdown()...")
        await self.applet.shutdown()
        log.debug("Applet shutdown hook complete")

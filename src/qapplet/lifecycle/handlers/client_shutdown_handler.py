from __future__ import annotations

from qapplet.api.signal_client import SignalClient
from qapplet.lifecycle.shutdown_protocol import IShutdownHandler
from qapplet.utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.SHUTDOWN)


class ClientShutdownHandler(IShutdownHandler):
    """
    Closes the pooled HTTP client.

    Priority: 10 (runs last)
    """

    def __init__(self, client: SignalClient):
        self.client = client

    @property
    def shutdown_priority(self) -> int:
        return 10

    async def shutdown(self) -> None:
        await self.client.aclose()
        log.debug("Signal client closed")

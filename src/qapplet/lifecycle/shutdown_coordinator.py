"""
Shutdown coordinator that orchestrates graceful shutdown of an applet process.

Owns the termination triggers (SIGINT, SIGTERM, parent channel disconnect,
explicit exit request) and runs the registered shutdown handlers in
priority order once one of them fires.
"""

import asyncio
import signal
from typing import Dict, List, Optional

from qapplet.utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.SHUTDOWN)


class ShutdownCoordinator:
    """
    Coordinates graceful shutdown of multiple components.

    Example:
        coordinator = ShutdownCoordinator()
        coordinator.register(AppletShutdownHandler(applet))
        coordinator.register(ClientShutdownHandler(client))

        coordinator.setup_signal_handlers(asyncio.get_running_loop())
        await coordinator.wait_for_shutdown()
        await coordinator.shutdown_all()
    """

    def __init__(self, timeout_per_handler: Optional[float] = 5.0):
        """
        Initialize shutdown coordinator.

        Args:
            timeout_per_handler: Timeout for each individual handler in
                seconds, None waits for every handler to finish
        """
        self._handlers: List = []
        self._shutdown_event = asyncio.Event()
        self._timeout_per_handler = timeout_per_handler
        self._shutdown_trigger: Dict[str, Optional[str]] = {"reason": None}
        self._completed = False

    @property
    def reason(self) -> Optional[str]:
        return self._shutdown_trigger["reason"]

    @property
    def is_triggered(self) -> bool:
        return self._shutdown_event.is_set()

    def register(self, handler) -> None:
        """
        Register a shutdown handler.

        Handler must have:
        - shutdown_priority property (int)
        - async shutdown() method
        """
        if not hasattr(handler, "shutdown_priority"):
            raise ValueError(f"Handler {handler} missing shutdown_priority property")
        if not hasattr(handler, "shutdown"):
            raise ValueError(f"Handler {handler} missing shutdown() method")

        self._handlers.append(handler)
        log.debug(f"Registered shutdown handler: {handler.__class__.__name__}")

    def request_shutdown(self, reason: str) -> None:
        """Fire the shutdown trigger (first reason wins)"""
        if self._shutdown_event.is_set():
            return
        self._shutdown_trigger["reason"] = reason
        log.info(f"{reason} → triggering shutdown")
        self._shutdown_event.set()

    def setup_signal_handlers(self, loop: asyncio.AbstractEventLoop) -> None:
        """
        Install OS signal handlers for graceful shutdown (SIGINT, SIGTERM).

        Event loops without add_signal_handler (Windows) get a plain
        signal.signal handler that hops back onto the loop.
        """
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, self.request_shutdown, sig.name)
            except NotImplementedError:
                signal.signal(
                    sig,
                    lambda signum, _frame: loop.call_soon_threadsafe(
                        self.request_shutdown, signal.Signals(signum).name
                    ),
                )

        log.debug("Signal handlers installed (SIGINT, SIGTERM)")

    async def wait_for_shutdown(self) -> None:
        await self._shutdown_event.wait()

    async def shutdown_all(self) -> None:
        """
        Execute graceful shutdown of all handlers in priority order.

        Runs at most once. A failing or timed-out handler is logged and the
        sequence continues with the next one.
        """
        if self._completed:
            return
        self._completed = True

        log.info("🛑 Initiating graceful shutdown sequence...")
        log.info(f"   Reason: {self.reason or 'UNKNOWN'}")

        sorted_handlers = sorted(
            self._handlers, key=lambda h: h.shutdown_priority, reverse=True
        )

        for handler in sorted_handlers:
            handler_name = handler.__class__.__name__
            try:
                log.debug(f"Shutting down {handler_name} (priority={handler.shutdown_priority})...")
                if self._timeout_per_handler is None:
                    await handler.shutdown()
                else:
                    await asyncio.wait_for(handler.shutdown(), timeout=self._timeout_per_handler)
                log.debug(f"✓ {handler_name} shutdown complete")

            except asyncio.TimeoutError:
                log.error(f"⚠️  {handler_name} shutdown timeout ({self._timeout_per_handler}s)")

            except asyncio.CancelledError:
                log.warn(f"{handler_name} shutdown was cancelled")
                raise

            except Exception as e:
                log.error(f"❌ Error shutting down {handler_name}: {e}", exc_info=True)

        log.info("✓ Shutdown sequence complete")

    def get_handler(self, handler_type: type):
        for handler in self._handlers:
            if isinstance(handler, handler_type):
                return handler
        return None

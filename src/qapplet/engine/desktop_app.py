"""
DesktopApp - applet lifecycle engine
----------------------------------

Responsible for:
- processing the root config and calling the applet's apply_config()
- polling: running the applet's run() hook on start, on demand and on a timer
- encoding and sending returned signals, keeping a bounded history
- dispatching control messages from the host process
- graceful shutdown on SIGINT/SIGTERM, parent disconnect or exit()

States: UNCONFIGURED → CONFIGURING → READY, with `paused` and
`polling_busy` flags on the side and SHUTTING_DOWN as terminal state.
"""

from __future__ import annotations

import asyncio
from types import MappingProxyType
from typing import Any, List, Mapping, Optional, Sequence, Union

from qapplet.api.signal_client import SignalClient, SignalResult
from qapplet.engine.applet import Applet
from qapplet.engine.wire_encoder import BLANK_COLOR, encode_signal, fill_points, prepare_points
from qapplet.errors import ConfigurationError, TransportError
from qapplet.lifecycle.handlers import (
    AppletShutdownHandler,
    ClientShutdownHandler,
    TaskCancellationHandler,
)
from qapplet.lifecycle.shutdown_coordinator import ShutdownCoordinator
from qapplet.lifecycle.task_registry import TaskCategory, TaskRegistry, create_tracked_task
from qapplet.managers.config_manager import ConfigManager
from qapplet.models.config import DEFAULT_POLLING_INTERVAL, AppletConfig
from qapplet.models.enums import EngineState, SignalAction
from qapplet.models.geometry import Geometry
from qapplet.models.messages import (
    ConfigureMessage,
    FlashMessage,
    OptionsMessage,
    PauseMessage,
    PollMessage,
    StartMessage,
    UnknownMessage,
    configuration_reply,
    decode_message,
    options_error_reply,
    options_reply,
)
from qapplet.models.signal import Signal
from qapplet.services.parent_channel import ParentChannel
from qapplet.services.signal_log import SIGNAL_LOG_CAPACITY, SignalLog
from qapplet.services.storage import Storage
from qapplet.utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.ENGINE)
poll_log = log.with_category(LogCategory.POLL)
sig_log = log.with_category(LogCategory.SIGNAL)

START_RETRY_DELAY = 1.0  # seconds

_EMPTY: Mapping[str, Any] = MappingProxyType({})


class DesktopApp:
    """
    Lifecycle engine for one applet.

    Example:
        app = DesktopApp(MyApplet())
        await app.initialize()      # config from argv, dev mode auto-start
        await app.run_forever()     # until SIGINT/SIGTERM/disconnect/exit()
    """

    def __init__(
        self,
        applet: Applet,
        *,
        root_config: Optional[Mapping[str, Any]] = None,
        client: Optional[SignalClient] = None,
        channel: Optional[ParentChannel] = None,
        argv: Optional[Sequence[str]] = None,
        config_manager: Optional[ConfigManager] = None,
        polling_interval: Optional[float] = None,
        shutdown_timeout: Optional[float] = 5.0,
        signal_log_capacity: int = SIGNAL_LOG_CAPACITY,
    ):
        """
        Args:
            applet: Object implementing the Applet hooks
            root_config: Startup root config, read from argv when omitted
            client: Transport to the host (default SignalClient())
            channel: Parent process channel (default stdin/stdout)
            argv: Process arguments for config loading (default sys.argv)
            config_manager: Root config loader
            polling_interval: Seconds between timer polls, overrides config
            shutdown_timeout: Per-handler shutdown timeout, None waits forever
            signal_log_capacity: Size of the signal history
        """
        self.applet = applet
        self.client = client or SignalClient()
        self.channel = channel or ParentChannel()
        self.argv = argv
        self._startup_config = root_config
        self.config_manager = config_manager or ConfigManager()
        self._polling_interval = polling_interval

        self.state = EngineState.UNCONFIGURED
        self.applet_config: Optional[AppletConfig] = None
        self.store: Optional[Storage] = None
        self.configured = False
        self.paused = False
        self._runs_in_flight = 0
        self.error_state: Optional[BaseException] = None
        self.signal_log = SignalLog(signal_log_capacity)

        self.tasks = TaskRegistry()
        self._polling_task: Optional[asyncio.Task] = None
        self._start_retry_task: Optional[asyncio.Task] = None

        self.coordinator = ShutdownCoordinator(timeout_per_handler=shutdown_timeout)
        self.coordinator.register(TaskCancellationHandler(self.tasks))
        self.coordinator.register(AppletShutdownHandler(applet))
        self.coordinator.register(ClientShutdownHandler(self.client))

        applet.attach(self)

    # ========================================================================
    # CONFIG ACCESSORS
    # ========================================================================

    @property
    def config(self) -> Mapping[str, Any]:
        """Merged applet config (defaults overridden by user values)"""
        return self.applet_config.config if self.applet_config else _EMPTY

    @property
    def root_config(self) -> Mapping[str, Any]:
        return self.applet_config.root if self.applet_config else _EMPTY

    @property
    def authorization(self) -> Mapping[str, Any]:
        return self.applet_config.authorization if self.applet_config else _EMPTY

    @property
    def geometry(self) -> Geometry:
        return self.applet_config.geometry if self.applet_config else Geometry.default()

    @property
    def extension_id(self) -> Optional[str]:
        return self.applet_config.extension_id if self.applet_config else None

    @property
    def dev_mode(self) -> bool:
        return bool(self.applet_config and self.applet_config.dev_mode)

    @property
    def polling_interval(self) -> float:
        if self._polling_interval is not None:
            return self._polling_interval
        return self.applet_config.polling_interval if self.applet_config else DEFAULT_POLLING_INTERVAL

    @property
    def polling_busy(self) -> bool:
        """True while any run() started by poll() has not finished"""
        return self._runs_in_flight > 0

    @property
    def width(self) -> int:
        return self.geometry.width

    @property
    def height(self) -> int:
        return self.geometry.height

    @property
    def origin_x(self) -> int:
        return self.geometry.origin.x

    @property
    def origin_y(self) -> int:
        return self.geometry.origin.y

    # ========================================================================
    # STARTUP & SHUTDOWN
    # ========================================================================

    async def initialize(
        self,
        *,
        listen: bool = True,
        install_signal_handlers: bool = True,
    ) -> None:
        """
        Install termination triggers, start listening to the parent and
        process the startup config (from the process arguments unless
        one was passed to the constructor).

        Raises whatever process_config() raises: a bad startup config is fatal.
        """
        if install_signal_handlers:
            self.coordinator.setup_signal_handlers(asyncio.get_running_loop())

        if listen:
            create_tracked_task(
                self._listen(),
                category=TaskCategory.CHANNEL,
                description="Parent channel reader",
                registry=self.tasks,
            )

        await self.process_config(self._startup_config)

        if self.dev_mode:
            log.info("Dev mode: starting immediately")
            await self.start()

    async def _listen(self) -> None:
        await self.channel.serve(self._on_channel_message)
        self.coordinator.request_shutdown("Parent channel disconnected")

    async def _on_channel_message(self, raw: str) -> None:
        create_tracked_task(
            self.handle_message(raw),
            category=TaskCategory.MESSAGE,
            description="Handle parent message",
            registry=self.tasks,
        )

    def exit(self, reason: str = "Exit requested") -> None:
        """Trigger shutdown; run_forever() then runs the shutdown sequence"""
        self.coordinator.request_shutdown(reason)

    async def run_forever(self) -> None:
        await self.coordinator.wait_for_shutdown()
        await self.shutdown()

    async def shutdown(self) -> None:
        """Cancel background tasks, await applet.shutdown(), close the client"""
        self.state = EngineState.SHUTTING_DOWN
        await self.coordinator.shutdown_all()

    # ========================================================================
    # CONFIGURATION
    # ========================================================================

    async def process_config(self, config: Optional[Mapping[str, Any]] = None) -> bool:
        """
        Load a root config and apply it.

        Without a config, the root config is read from the process arguments.
        The previous config is replaced wholesale. On failure the error is
        logged and re-raised, and the engine stays unconfigured.
        """
        self.configured = False
        self.state = EngineState.CONFIGURING

        try:
            root = self.config_manager.read_root_config(self.argv) if config is None else config
            applet_config = AppletConfig.from_root(root)
            store = Storage(applet_config.storage_location)

            self.applet_config = applet_config
            self.store = store

            log.info(
                "Config processed",
                extensionId=applet_config.extension_id,
                geometry=f"{applet_config.geometry.width}x{applet_config.geometry.height}"
                         f"@{applet_config.geometry.origin.x},{applet_config.geometry.origin.y}",
            )

            result = await self.applet.apply_config()
            if not result:
                raise ConfigurationError("apply_config() returned a falsy result")

        except Exception as ex:
            log.error("Error while processing config", error=str(ex), error_type=type(ex).__name__)
            raise

        self.configured = True
        self.state = EngineState.READY
        log.debug("Engine ready")
        return True

    # ========================================================================
    # POLLING
    # ========================================================================

    async def start(self) -> None:
        """
        Unpause, poll now and poll again every polling_interval seconds.

        Before the config is applied, retries itself every second instead.
        """
        self.paused = False

        if not self.configured:
            log.info(f"Not configured yet, retrying start in {START_RETRY_DELAY:.0f}s")
            if self._start_retry_task is None or self._start_retry_task.done() \
                    or self._start_retry_task is asyncio.current_task():
                self._start_retry_task = create_tracked_task(
                    self._start_later(),
                    category=TaskCategory.POLLING,
                    description="Retry start()",
                    registry=self.tasks,
                )
            return

        self._arm_polling()
        await self.poll()

    async def _start_later(self) -> None:
        await asyncio.sleep(START_RETRY_DELAY)
        await self.start()

    def _arm_polling(self) -> None:
        if self._polling_task is not None and not self._polling_task.done():
            self._polling_task.cancel()

        interval = self.polling_interval
        log.info(f"Polling every {interval:g}s")
        self._polling_task = create_tracked_task(
            self._polling_loop(interval),
            category=TaskCategory.POLLING,
            description="Polling timer",
            registry=self.tasks,
        )

    async def _polling_loop(self, interval: float) -> None:
        while True:
            await asyncio.sleep(interval)
            await self.poll()

    async def poll(self, force: bool = False) -> Optional[SignalResult]:
        """
        One poll cycle: run the applet and send what it returns.

        Skipped while paused or while another run() is in flight, unless
        forced. Errors from run() become an ERROR signal on the device.
        """
        if self.paused and not force:
            poll_log.debug("Paused, skipping poll")
            return None

        if self.polling_busy and not force:
            poll_log.info("Skipping run because we are still busy")
            return None

        self._runs_in_flight += 1
        holding = True
        try:
            try:
                signal = await self.applet.run()
            except Exception as ex:
                self.error_state = ex
                poll_log.error(f"Error while running applet: {ex}", error_type=type(ex).__name__, exc_info=True)
                await self._signal_run_error(ex)
                return None

            self.error_state = None
            self._runs_in_flight -= 1
            holding = False

            if not signal:
                poll_log.debug("run() returned no signal")
                return None

            try:
                return await self.signal(signal)
            except TransportError as ex:
                poll_log.warn("Poll result not delivered", error=str(ex))
                return None
        finally:
            if holding:
                self._runs_in_flight -= 1

    async def _signal_run_error(self, ex: BaseException) -> None:
        try:
            await self.signal_error([str(ex) or type(ex).__name__])
        except Exception as send_ex:
            poll_log.error("Could not send error signal", error=str(send_ex))

    # ========================================================================
    # SIGNALS
    # ========================================================================

    async def _deliver(self, signal: Signal, record: bool = True) -> SignalResult:
        geometry = self.geometry
        signal.extension_id = self.extension_id
        signal.origin = geometry.origin
        signal.points = prepare_points(signal, geometry)

        result = await self.client.send(encode_signal(signal, geometry))

        if not result.ok:
            sig_log.warn(f"Host rejected signal '{signal.name}'", status=result.status_code)
            return result

        if record:
            signal.id = result.id
            self.signal_log.record(signal, result)

        sig_log.info(
            f"Signal sent: {signal.name}",
            action=signal.action.name,
            id=signal.id,
        )
        return result

    async def signal(self, signal: Signal) -> SignalResult:
        """
        Send a signal and record it in the history.

        Raises:
            TransportError: host not reachable
        """
        return await self._deliver(signal, record=True)

    async def signal_error(self, messages: Union[str, Sequence[str], Mapping[str, Any]]) -> SignalResult:
        return await self.signal(Signal.error(messages))

    async def flash(self) -> bool:
        """
        Flash the applet's zones to black, then restore the latest signal.
        """
        geometry = self.geometry
        blank = Signal(
            fill_points(geometry, BLANK_COLOR),
            action=SignalAction.FLASH,
            is_muted=False,
        )
        await self._deliver(blank, record=False)

        latest = self.signal_log.latest()
        if latest is not None:
            await self._deliver(latest.signal, record=False)
        return True

    async def _flash_safely(self) -> None:
        try:
            await self.flash()
        except TransportError as ex:
            sig_log.warn("Flash not delivered", error=str(ex))

    async def clear_signals(self) -> None:
        """Delete every signal in the history. Failures are logged and skipped."""
        deleted: List[Any] = []
        while len(self.signal_log):
            entry = self.signal_log.pop()
            try:
                await self.client.delete(entry.signal)
                deleted.append(entry.signal.id)
            except Exception as ex:
                sig_log.warn(f"Could not delete signal {entry.signal.id}", error=str(ex))

        sig_log.info("Signal history cleared", deleted=len(deleted))

    # ========================================================================
    # PARENT MESSAGES
    # ========================================================================

    async def handle_message(self, raw: Any) -> None:
        """Decode and dispatch one control message from the host"""
        message = decode_message(raw)

        if isinstance(message, UnknownMessage):
            log.error("Don't know how to handle message", reason=message.reason, raw=str(message.raw)[:200])
            return

        log.debug(f"Received {message.type.name}")

        if isinstance(message, ConfigureMessage):
            if message.error is not None:
                log.error("Rejected CONFIGURE message", error=message.error)
                self.channel.send(configuration_reply(False, message.error))
                return
            try:
                await self.process_config(message.config)
                self.channel.send(configuration_reply(True))
            except Exception as ex:
                self.channel.send(configuration_reply(False, str(ex)))

        elif isinstance(message, FlashMessage):
            create_tracked_task(
                self._flash_safely(),
                category=TaskCategory.SIGNAL,
                description="Flash",
                registry=self.tasks,
            )

        elif isinstance(message, OptionsMessage):
            try:
                options = await self.applet.options(message.field_name, message.search)
                self.channel.send(options_reply(options))
            except Exception as ex:
                log.error("Error while getting options", field=message.field_name, error=str(ex))
                self.channel.send(options_error_reply(str(ex)))

        elif isinstance(message, PauseMessage):
            self.paused = True
            log.info("Paused")

        elif isinstance(message, PollMessage):
            await self.poll(force=True)

        elif isinstance(message, StartMessage):
            if self.paused:
                self.paused = False
                log.info("Resumed")
                await self.poll()
            else:
                await self.start()

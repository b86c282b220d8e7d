"""
Parent channel - message link between the applet process and the host

Inbound: newline-delimited messages on stdin, read by a daemon thread and
handed to the event loop through an asyncio.Queue.
Outbound: one JSON document per line on stdout.
"""

import asyncio
import json
import sys
import threading
from typing import Any, Awaitable, Callable, Optional, TextIO

from qapplet.utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.CHANNEL)

MessageHandler = Callable[[str], Awaitable[None]]

_EOF = object()


class ParentChannel:
    """
    Line-based channel to the parent process.

    Example:
        channel = ParentChannel()
        await channel.serve(handler)    # returns when stdin closes
        channel.send({"status": "success", "data": {...}})
    """

    def __init__(self, input_stream: Optional[TextIO] = None, output_stream: Optional[TextIO] = None):
        self._input = input_stream
        self._output = output_stream
        self._write_lock = threading.Lock()
        self.disconnected = asyncio.Event()

    @property
    def input(self) -> TextIO:
        return self._input or sys.stdin

    @property
    def output(self) -> TextIO:
        return self._output or sys.stdout

    def _reader(self, loop: asyncio.AbstractEventLoop, queue: asyncio.Queue) -> None:
        try:
            for line in iter(self.input.readline, ""):
                loop.call_soon_threadsafe(queue.put_nowait, line)
        except (OSError, ValueError) as e:
            loop.call_soon_threadsafe(log.warn, f"Parent channel read failed: {e}")
        finally:
            try:
                loop.call_soon_threadsafe(queue.put_nowait, _EOF)
            except RuntimeError:
                # Loop already closed
                pass

    async def serve(self, handler: MessageHandler) -> None:
        """
        Feed every non-blank inbound line to handler until the parent
        closes the channel, then set `disconnected`.
        """
        loop = asyncio.get_running_loop()
        queue: asyncio.Queue = asyncio.Queue()
        threading.Thread(
            target=self._reader, args=(loop, queue), name="parent-channel-reader", daemon=True
        ).start()

        log.debug("Listening for parent messages")
        try:
            while True:
                line = await queue.get()
                if line is _EOF:
                    break
                line = line.strip()
                if line:
                    await handler(line)
        finally:
            log.info("Parent channel closed")
            self.disconnected.set()

    def send(self, payload: Any) -> None:
        """Write one reply message as a single JSON line"""
        text = json.dumps(payload, default=str)
        with self._write_lock:
            self.output.write(text + "\n")
            self.output.flush()
        log.debug("Reply sent", payload=text[:200])

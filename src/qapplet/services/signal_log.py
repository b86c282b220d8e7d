"""
Signal log - bounded most-recent-first history of sent signals

Used to replay the last signal after a flash and to delete every sent
signal on clear_signals().
"""

from collections import deque
from dataclasses import dataclass
from typing import Deque, Iterator, Optional, TYPE_CHECKING

from qapplet.models.signal import Signal

if TYPE_CHECKING:
    from qapplet.api.signal_client import SignalResult

SIGNAL_LOG_CAPACITY = 100


@dataclass(frozen=True)
class SignalLogEntry:
    signal: Signal
    result: 'SignalResult'


class SignalLog:
    """Newest entry at index 0; oldest evicted from the back when full"""

    def __init__(self, capacity: int = SIGNAL_LOG_CAPACITY):
        self.capacity = capacity
        self._entries: Deque[SignalLogEntry] = deque(maxlen=capacity)

    def record(self, signal: Signal, result: 'SignalResult') -> SignalLogEntry:
        entry = SignalLogEntry(signal=signal, result=result)
        self._entries.appendleft(entry)
        return entry

    def latest(self) -> Optional[SignalLogEntry]:
        return self._entries[0] if self._entries else None

    def pop(self) -> Optional[SignalLogEntry]:
        """Remove and return the newest entry"""
        return self._entries.popleft() if self._entries else None

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[SignalLogEntry]:
        return iter(list(self._entries))

    def __getitem__(self, index: int) -> SignalLogEntry:
        return self._entries[index]

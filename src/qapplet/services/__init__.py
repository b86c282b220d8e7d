"""
Services package - storage, signal history and the parent channel
"""

from .storage import Storage
from .signal_log import SignalLog, SignalLogEntry, SIGNAL_LOG_CAPACITY
from .parent_channel import ParentChannel

__all__ = [
    'Storage',
    'SignalLog',
    'SignalLogEntry',
    'SIGNAL_LOG_CAPACITY',
    'ParentChannel',
]

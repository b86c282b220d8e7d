"""
Enums for the applet SDK
"""

from enum import Enum, auto


class Effect(Enum):
    """
    Light effects understood by the host.

    Values are the literal wire strings.
    """
    SET_COLOR = "SET_COLOR"
    BLINK = "BLINK"
    BREATHE = "BREATHE"
    COLOR_CYCLE = "COLOR_CYCLE"
    RIPPLE = "RIPPLE"
    INWARD_RIPPLE = "INWARD_RIPPLE"
    BOUNCING_LIGHT = "BOUNCING_LIGHT"
    LASER = "LASER"
    WAVE = "WAVE"


class SignalAction(Enum):
    """What the host should do with a signal"""
    DRAW = "DRAW"     # Regular poll result
    FLASH = "FLASH"   # Transient blank used by the flash routine
    ERROR = "ERROR"   # Error feedback, always drawn full red


class EngineState(Enum):
    """
    Lifecycle engine states

    UNCONFIGURED: constructed, config never processed
    CONFIGURING: process_config() in progress (configured=False)
    READY: config applied, polling allowed
    SHUTTING_DOWN: termination trigger received (terminal)
    """
    UNCONFIGURED = auto()
    CONFIGURING = auto()
    READY = auto()
    SHUTTING_DOWN = auto()


class MessageType(Enum):
    """Inbound control message types sent by the host process"""
    CONFIGURE = "CONFIGURE"
    FLASH = "FLASH"
    OPTIONS = "OPTIONS"
    PAUSE = "PAUSE"
    POLL = "POLL"
    START = "START"


class ReplyStatus(Enum):
    """Status of a reply message sent back to the host"""
    SUCCESS = "success"
    ERROR = "error"


class ReplyType(Enum):
    """Payload tag of a reply message"""
    CONFIGURATION_RESULT = "CONFIGURATION_RESULT"
    OPTIONS = "OPTIONS"


class LogLevel(Enum):
    """Log severity levels"""
    DEBUG = auto()
    INFO = auto()
    WARN = auto()
    ERROR = auto()


class LogCategory(Enum):
    """Log categories for grouping related events"""
    CONFIG = auto()      # Config loading, apply_config
    ENGINE = auto()      # Lifecycle state changes
    POLL = auto()        # Poll cycles, run() hook
    SIGNAL = auto()      # Signal encoding, history log
    CHANNEL = auto()     # Parent process message channel
    TRANSPORT = auto()   # HTTP calls to the host
    STORAGE = auto()     # Local key-value store
    SYSTEM = auto()      # Startup, fatal errors
    SHUTDOWN = auto()    # Shutdown sequence
    TASK = auto()        # Background task tracking

"""
Models package - Data models for the applet SDK
"""

from .enums import Effect, SignalAction, EngineState, MessageType, LogLevel, LogCategory
from .geometry import Geometry, Origin
from .point import Point
from .signal import Signal, SignalLink
from .config import AppletConfig

__all__ = [
    'Effect',
    'SignalAction',
    'EngineState',
    'MessageType',
    'LogLevel',
    'LogCategory',
    'Geometry',
    'Origin',
    'Point',
    'Signal',
    'SignalLink',
    'AppletConfig',
]

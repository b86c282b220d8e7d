"""
qapplet - SDK for Das Keyboard Q desktop applets

An applet is a small program the Q desktop host spawns to light up a group
of keys. Implement the hooks on a BaseApplet subclass and hand it to
run_applet():

    from qapplet import BaseApplet, Effect, Point, Signal, run_applet

    class Hello(BaseApplet):
        async def run(self):
            return Signal([[Point("#00FF00", Effect.BREATHE)]], name="Hello")

    if __name__ == "__main__":
        run_applet(Hello())
"""

from .models import Effect, Geometry, Origin, Point, Signal, SignalAction, SignalLink
from .errors import (
    AppletError,
    ConfigurationError,
    HostUnavailableError,
    InvalidEffectError,
    StorageQuotaError,
    TransportError,
)
from .services import Storage
from .api import SignalClient, SignalResult
from .engine import Applet, BaseApplet, DesktopApp
from .runner import run_applet

__version__ = "0.1.0"

__all__ = [
    'Applet',
    'AppletError',
    'BaseApplet',
    'ConfigurationError',
    'DesktopApp',
    'Effect',
    'Geometry',
    'HostUnavailableError',
    'InvalidEffectError',
    'Origin',
    'Point',
    'Signal',
    'SignalAction',
    'SignalClient',
    'SignalLink',
    'SignalResult',
    'Storage',
    'StorageQuotaError',
    'TransportError',
    'run_applet',
]

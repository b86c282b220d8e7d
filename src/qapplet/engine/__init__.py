"""
Engine package - applet lifecycle engine and wire encoder
"""

from .applet import Applet, BaseApplet
from .desktop_app import DesktopApp
from . import wire_encoder

__all__ = [
    'Applet',
    'BaseApplet',
    'DesktopApp',
    'wire_encoder',
]

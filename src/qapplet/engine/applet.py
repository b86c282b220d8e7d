"""
Applet capability interface

An applet supplies four async hooks. The engine holds a reference to the
applet and calls the hooks; the applet reaches its config, geometry and
store through the engine it is attached to.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol, TYPE_CHECKING, runtime_checkable

if TYPE_CHECKING:
    from qapplet.engine.desktop_app import DesktopApp
    from qapplet.models.geometry import Geometry
    from qapplet.models.signal import Signal
    from qapplet.services.storage import Storage


@runtime_checkable
class Applet(Protocol):
    """Hooks the lifecycle engine requires"""

    def attach(self, app: DesktopApp) -> None:
        ...

    async def run(self) -> Optional[Signal]:
        """One poll cycle. Return a Signal to display, or None."""
        ...

    async def apply_config(self) -> Any:
        """Validate the freshly processed config. Return truthy or raise."""
        ...

    async def options(self, field_name: Optional[str], search: Optional[str] = None) -> Any:
        """Selectable options for a config field"""
        ...

    async def shutdown(self) -> None:
        ...


class BaseApplet:
    """
    Convenience base with default hooks and engine accessors.

    Example:
        class Weather(BaseApplet):
            async def run(self):
                temp = await fetch_temperature(self.config["city"])
                color = "#FF0000" if temp > 30 else "#0000FF"
                return Signal([[Point(color)]], name="Weather", message=f"{temp}°C")
    """

    def __init__(self):
        self.app: Optional[DesktopApp] = None

    def attach(self, app: DesktopApp) -> None:
        self.app = app

    def _require_app(self) -> DesktopApp:
        if self.app is None:
            raise RuntimeError(f"{self.__class__.__name__} is not attached to a DesktopApp")
        return self.app

    # === Hooks ===

    async def run(self) -> Optional[Signal]:
        return None

    async def apply_config(self) -> Any:
        return True

    async def options(self, field_name: Optional[str], search: Optional[str] = None) -> Any:
        return None

    async def shutdown(self) -> None:
        return None

    # === Engine accessors ===

    @property
    def config(self) -> Mapping[str, Any]:
        return self._require_app().config

    @property
    def authorization(self) -> Mapping[str, Any]:
        return self._require_app().authorization

    @property
    def geometry(self) -> Geometry:
        return self._require_app().geometry

    @property
    def extension_id(self) -> Optional[str]:
        return self._require_app().extension_id

    @property
    def store(self) -> Optional[Storage]:
        return self._require_app().store

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

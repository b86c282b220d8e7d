"""Geometry domain models"""

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional


@dataclass(frozen=True)
class Origin:
    """Absolute zone coordinates of the applet's local (0, 0)"""
    x: int = 1
    y: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {"x": self.x, "y": self.y}


@dataclass(frozen=True)
class Geometry:
    """
    Rectangular region of zones an applet may address.

    Local (row, col) indices are offset by origin to get absolute zone ids.
    When the host sends no geometry, the applet owns a single zone at (1, 0).
    """
    width: int = 1
    height: int = 1
    origin: Origin = field(default_factory=Origin)

    def __post_init__(self):
        if self.width < 1 or self.height < 1:
            raise ValueError(f"Geometry must be at least 1x1, got {self.width}x{self.height}")

    @classmethod
    def default(cls) -> 'Geometry':
        return cls()

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> 'Geometry':
        """
        Build from the root config's geometry mapping.

        Missing geometry, or missing fields inside it, fall back to the 1x1
        default at origin (1, 0).
        """
        if not data:
            return cls.default()

        default = cls.default()
        origin_data = data.get("origin") or {}
        origin = Origin(
            x=int(origin_data.get("x", default.origin.x)),
            y=int(origin_data.get("y", default.origin.y)),
        )
        return cls(
            width=int(data.get("width", default.width)),
            height=int(data.get("height", default.height)),
            origin=origin,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"width": self.width, "height": self.height, "origin": self.origin.to_dict()}

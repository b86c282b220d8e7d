"""
Signal model

A signal describes what an applet wants displayed across the zones it owns:
a 2D grid of points plus notification metadata. The engine stamps
extension_id and origin before sending, and the host response assigns id.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from qapplet.models.enums import SignalAction
from qapplet.models.geometry import Origin
from qapplet.models.point import Point
from qapplet.utils.enum_helper import EnumHelper

DEFAULT_SIGNAL_NAME = "Q Desktop Signal"

PointGrid = List[List[Optional[Point]]]


@dataclass(frozen=True)
class SignalLink:
    """Link shown with the signal notification"""
    url: str
    label: str = ""

    @classmethod
    def coerce(cls, value: Union['SignalLink', Mapping[str, Any], None]) -> Optional['SignalLink']:
        if value is None or isinstance(value, SignalLink):
            return value
        return cls(url=value["url"], label=value.get("label", ""))

    def to_dict(self) -> Dict[str, str]:
        return {"url": self.url, "label": self.label}


class Signal:
    """
    A signal to be sent to the host.

    Example:
        Signal(
            [[Point("#FF0000", Effect.BLINK), Point("#00FF00")]],
            name="Build status",
            message="Build failed on main",
            is_muted=False,
        )
    """

    def __init__(
        self,
        points: Optional[Sequence[Sequence[Optional[Point]]]] = None,
        *,
        name: str = DEFAULT_SIGNAL_NAME,
        message: str = "",
        data: Any = None,
        link: Union[SignalLink, Mapping[str, Any], None] = None,
        is_muted: bool = True,
        action: Union[SignalAction, str] = SignalAction.DRAW,
        errors: Optional[Sequence[str]] = None,
    ):
        self.points: PointGrid = [list(row) for row in points] if points is not None else [[]]
        self.name = name
        self.message = message
        self.data = data
        self.link = SignalLink.coerce(link)
        self.is_muted = is_muted
        self.action = EnumHelper.to_enum(SignalAction, action)
        self.errors: List[str] = list(errors or [])

        # Assigned by the engine / transport, never by the caller
        self.extension_id: Optional[str] = None
        self.origin: Optional[Origin] = None
        self.id: Any = None

    @classmethod
    def error(cls, messages: Union[str, Sequence[str], Mapping[str, Any]]) -> 'Signal':
        """
        Build an ERROR signal from one message or a list of messages.

        Also accepts the legacy wrapper {"messages": ...}.
        """
        if isinstance(messages, Mapping) and "messages" in messages:
            messages = messages["messages"]

        if isinstance(messages, str) or not isinstance(messages, Sequence):
            messages = [messages]

        return cls(
            points=[[]],
            errors=[str(m) for m in messages],
            action=SignalAction.ERROR,
        )

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly view, used for logs and replies"""
        return {
            "id": self.id,
            "name": self.name,
            "message": self.message,
            "action": self.action.value,
            "isMuted": self.is_muted,
            "extensionId": self.extension_id,
            "origin": self.origin.to_dict() if self.origin else None,
            "data": self.data,
            "link": self.link.to_dict() if self.link else None,
            "errors": list(self.errors),
            "points": [
                [p.to_dict() if p is not None else None for p in row]
                for row in self.points
            ],
        }

    def __repr__(self) -> str:
        rows = len(self.points)
        cols = max((len(r) for r in self.points), default=0)
        return (
            f"Signal(name={self.name!r}, action={self.action.name}, "
            f"points={rows}x{cols}, errors={self.errors!r}, id={self.id!r})"
        )

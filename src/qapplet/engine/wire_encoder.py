"""
Wire encoder - Signal + Geometry → zone-addressed request body

Steps:
1. Clip the point grid to geometry (rows to height, columns to width)
2. ERROR signals are redrawn as a full solid red grid
3. Every surviving point becomes {zoneId, effect, color}, row-major
4. The ordered list is JSON-encoded into actionValue of the request body
"""

import json
from typing import List, Optional, Sequence

from qapplet.api.schemas import SignalLinkBody, SignalRequest, ZoneAction
from qapplet.models.enums import Effect, SignalAction
from qapplet.models.geometry import Geometry, Origin
from qapplet.models.point import Point
from qapplet.models.signal import PointGrid, Signal

ERROR_COLOR = "#FF0000"
BLANK_COLOR = "#000000"


def clip_points(points: Sequence[Sequence[Optional[Point]]], geometry: Geometry) -> PointGrid:
    """Drop rows beyond height and columns beyond width. Short rows stay short."""
    return [list(row[:geometry.width]) for row in list(points)[:geometry.height]]


def fill_points(geometry: Geometry, color: str, effect: Effect = Effect.SET_COLOR) -> PointGrid:
    """Full height x width grid of one point"""
    point = Point(color, effect)
    return [[point for _ in range(geometry.width)] for _ in range(geometry.height)]


def error_points(geometry: Geometry) -> PointGrid:
    return fill_points(geometry, ERROR_COLOR)


def prepare_points(signal: Signal, geometry: Geometry) -> PointGrid:
    """Points as they will be drawn: clipped, or full red for ERROR"""
    if signal.action is SignalAction.ERROR:
        return error_points(geometry)
    return clip_points(signal.points, geometry)


def to_zone_actions(points: PointGrid, origin: Origin) -> List[ZoneAction]:
    """
    Row-major zone actions with absolute zone ids.

    None entries are holes in a sparse row and produce no action.
    """
    actions: List[ZoneAction] = []
    for y, row in enumerate(points):
        for x, point in enumerate(row):
            if point is None:
                continue
            actions.append(ZoneAction(
                zoneId=f"{origin.x + x},{origin.y + y}",
                effect=point.effect.value,
                color=point.color,
            ))
    return actions


def encode_action_value(actions: List[ZoneAction]) -> str:
    return json.dumps([a.model_dump() for a in actions])


def encode_signal(signal: Signal, geometry: Geometry) -> SignalRequest:
    """
    Build the POST body for a signal.

    The signal's points are not touched here; the engine stores the
    prepared grid back on the signal itself before calling this.
    """
    origin = signal.origin or geometry.origin
    actions = to_zone_actions(prepare_points(signal, geometry), origin)

    return SignalRequest(
        action=signal.action.value,
        actionValue=encode_action_value(actions),
        message=signal.message,
        name=signal.name,
        isMuted=signal.is_muted,
        clientName=signal.extension_id,
        data=signal.data,
        link=SignalLinkBody(**signal.link.to_dict()) if signal.link else None,
        errors=list(signal.errors),
    )

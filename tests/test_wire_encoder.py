import json

import pytest
from pydantic import ValidationError

from qapplet import Effect, Geometry, Origin, Point, Signal, SignalAction
from qapplet.api.schemas import SignalRequest
from qapplet.engine.wire_encoder import (
    clip_points,
    encode_signal,
    fill_points,
    prepare_points,
    to_zone_actions,
)


def zones(request: SignalRequest):
    return json.loads(request.actionValue)


@pytest.fixture
def geometry():
    return Geometry(width=5, height=6, origin=Origin(6, 7))


def test_first_point_lands_on_origin(geometry):
    request = encode_signal(Signal([[Point("#FF0000")]]), geometry)
    assert zones(request) == [{"zoneId": "6,7", "effect": "SET_COLOR", "color": "#FF0000"}]


def test_zone_ids_are_row_major_and_offset(geometry):
    points = [
        [Point("#000001"), Point("#000002")],
        [Point("#000003"), Point("#000004", Effect.BLINK)],
    ]
    actions = zones(encode_signal(Signal(points), geometry))
    assert [a["zoneId"] for a in actions] == ["6,7", "7,7", "6,8", "7,8"]
    assert [a["color"] for a in actions] == ["#000001", "#000002", "#000003", "#000004"]
    assert actions[3]["effect"] == "BLINK"


def test_holes_and_short_rows_emit_no_action(geometry):
    points = [
        [Point("#AAAAAA"), None, Point("#BBBBBB")],
        [],
        [None, Point("#CCCCCC")],
    ]
    actions = to_zone_actions(clip_points(points, geometry), geometry.origin)
    assert [a.zoneId for a in actions] == ["6,7", "8,7", "7,9"]


def test_clipping_drops_rows_and_columns():
    geometry = Geometry(width=2, height=1)
    points = [
        [Point("#1"), Point("#2"), Point("#3")],
        [Point("#4")],
    ]
    clipped = clip_points(points, geometry)
    assert clipped == [[Point("#1"), Point("#2")]]
    assert clip_points(clipped, geometry) == clipped


def test_error_signal_is_full_red_grid():
    geometry = Geometry(width=3, height=2, origin=Origin(0, 0))
    request = encode_signal(Signal.error(["foo"]), geometry)
    actions = zones(request)

    assert request.action == "ERROR"
    assert request.errors == ["foo"]
    assert len(actions) == 6
    assert all(a["color"] == "#FF0000" and a["effect"] == "SET_COLOR" for a in actions)


def test_error_override_ignores_input_points():
    geometry = Geometry(width=2, height=2)
    signal = Signal([[Point("#00FF00", Effect.WAVE)]], action=SignalAction.ERROR)
    assert prepare_points(signal, geometry) == fill_points(geometry, "#FF0000")


def test_signal_origin_takes_precedence_over_geometry(geometry):
    signal = Signal([[Point("#FFFFFF")]])
    signal.origin = Origin(0, 0)
    assert zones(encode_signal(signal, geometry))[0]["zoneId"] == "0,0"


def test_request_carries_metadata(geometry):
    signal = Signal(
        [[Point("#FFFFFF")]],
        name="Build",
        message="Build failed",
        data={"job": 7},
        link={"url": "https://ci.example.com/7", "label": "Open"},
        is_muted=False,
    )
    signal.extension_id = "ci-applet"
    body = encode_signal(signal, geometry).model_dump(mode="json")

    assert body["pid"] == "Q_MATRIX"
    assert body["action"] == "DRAW"
    assert body["name"] == "Build"
    assert body["message"] == "Build failed"
    assert body["isMuted"] is False
    assert body["clientName"] == "ci-applet"
    assert body["data"] == {"job": 7}
    assert body["link"] == {"url": "https://ci.example.com/7", "label": "Open"}


def test_request_schema_rejects_unknown_action():
    with pytest.raises(ValidationError):
        SignalRequest(action="DANCE", actionValue="[]", name="x")

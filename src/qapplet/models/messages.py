"""
Parent channel messages

Inbound messages are decoded once at the channel boundary into one of the
message dataclasses below. Replies are plain dicts ready for json.dumps().
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

from qapplet.models.enums import MessageType, ReplyStatus, ReplyType


@dataclass(frozen=True)
class ConfigureMessage:
    """
    Re-run process_config() with a new root config.

    error is set when the payload could not be decoded; the engine then
    answers with a failed CONFIGURATION_RESULT instead of configuring.
    """
    config: Optional[Dict[str, Any]]
    error: Optional[str] = None
    type: MessageType = field(default=MessageType.CONFIGURE, init=False)


@dataclass(frozen=True)
class FlashMessage:
    """Blink to black and restore the last signal"""
    type: MessageType = field(default=MessageType.FLASH, init=False)


@dataclass(frozen=True)
class OptionsMessage:
    """Ask the applet for selectable options of a config field"""
    field_name: Optional[str]
    search: Optional[str] = None
    type: MessageType = field(default=MessageType.OPTIONS, init=False)


@dataclass(frozen=True)
class PauseMessage:
    type: MessageType = field(default=MessageType.PAUSE, init=False)


@dataclass(frozen=True)
class PollMessage:
    type: MessageType = field(default=MessageType.POLL, init=False)


@dataclass(frozen=True)
class StartMessage:
    type: MessageType = field(default=MessageType.START, init=False)


@dataclass(frozen=True)
class UnknownMessage:
    """Anything that could not be decoded into a known message"""
    raw: Any
    reason: str


InboundMessage = Union[
    ConfigureMessage,
    FlashMessage,
    OptionsMessage,
    PauseMessage,
    PollMessage,
    StartMessage,
    UnknownMessage,
]


def decode_message(raw: Any) -> InboundMessage:
    """
    Decode one raw inbound message.

    raw may be a dict, a JSON string of a dict, or a JSON string of a JSON
    string (the host sometimes double-encodes). Never raises.
    """
    payload = raw
    for _ in range(2):
        if not isinstance(payload, (str, bytes)):
            break
        try:
            payload = json.loads(payload)
        except ValueError as ex:
            return UnknownMessage(raw=raw, reason=f"invalid JSON: {ex}")

    if not isinstance(payload, dict):
        return UnknownMessage(raw=raw, reason="message is not an object")

    type_name = payload.get("type")
    data = payload.get("data")

    try:
        msg_type = MessageType(str(type_name).upper())
    except ValueError:
        return UnknownMessage(raw=raw, reason=f"unknown message type: {type_name}")

    if msg_type is MessageType.CONFIGURE:
        if isinstance(data, str):
            try:
                data = json.loads(data)
            except ValueError as ex:
                return ConfigureMessage(config=None, error=f"Could not parse config as JSON: {ex}")
        if data is not None and not isinstance(data, dict):
            return ConfigureMessage(config=None, error=f"Config must be a JSON object, got {type(data).__name__}")
        return ConfigureMessage(config=data)

    if msg_type is MessageType.OPTIONS:
        data = data or {}
        if not isinstance(data, dict):
            return UnknownMessage(raw=raw, reason="OPTIONS data is not an object")
        return OptionsMessage(field_name=data.get("fieldName"), search=data.get("search"))

    return {
        MessageType.FLASH: FlashMessage,
        MessageType.PAUSE: PauseMessage,
        MessageType.POLL: PollMessage,
        MessageType.START: StartMessage,
    }[msg_type]()


def configuration_reply(success: bool, message: Optional[str] = None) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "type": ReplyType.CONFIGURATION_RESULT.value,
        "result": "true" if success else "false",
    }
    if message is not None:
        data["message"] = message
    status = ReplyStatus.SUCCESS if success else ReplyStatus.ERROR
    return {"status": status.value, "data": data}


def options_reply(options: Any) -> Dict[str, Any]:
    return {
        "status": ReplyStatus.SUCCESS.value,
        "data": {"type": ReplyType.OPTIONS.value, "options": options},
    }


def options_error_reply(message: str) -> Dict[str, Any]:
    return {
        "status": ReplyStatus.ERROR.value,
        "data": {"type": ReplyType.OPTIONS.value, "message": message},
    }

"""Point model - one lit zone in a signal grid"""

from dataclasses import dataclass
from typing import Any, Dict, Union

from qapplet.errors import InvalidEffectError
from qapplet.models.enums import Effect
from qapplet.utils.enum_helper import EnumHelper


@dataclass(frozen=True, init=False)
class Point:
    """
    A single point to be drawn on the device.

    Examples:
        Point("#FF0000")                 # solid red
        Point("#00FF00", Effect.BLINK)   # blinking green
        Point("#0000FF", "breathe")      # effect names are case-insensitive
    """
    color: str
    effect: Effect

    def __init__(self, color: str, effect: Union[Effect, str] = Effect.SET_COLOR):
        try:
            effect = EnumHelper.to_enum(Effect, effect)
        except (ValueError, TypeError) as ex:
            raise InvalidEffectError(str(ex)) from ex
        object.__setattr__(self, "color", color)
        object.__setattr__(self, "effect", effect)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Point':
        return cls(data["color"], data.get("effect", Effect.SET_COLOR))

    def to_dict(self) -> Dict[str, str]:
        return {"color": self.color, "effect": self.effect.value}

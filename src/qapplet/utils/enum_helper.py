"""Enum conversion utilities"""

from enum import Enum
from typing import TypeVar, Type, List, Any

E = TypeVar("E", bound=Enum)


class EnumHelper:
    """
    Utility class for working with Enums:
    - Parse wire strings back to enum members (case-insensitive)
    - Convert enum members to wire strings
    - List all member names
    """

    @staticmethod
    def to_enum(enum_class: Type[E], value: Any) -> E:
        """
        Convert a string (member name, any case) or member to an enum instance.

        Raises:
            ValueError: string names no member
            TypeError: value is neither str nor a member
        """
        if isinstance(value, enum_class):
            return value
        if isinstance(value, str):
            try:
                return enum_class[value.strip().upper()]
            except KeyError:
                raise ValueError(
                    f"Invalid {enum_class.__name__} '{value}'. "
                    f"Available: {EnumHelper.list_names(enum_class)}"
                )
        raise TypeError(f"Expected str or {enum_class.__name__}, got {type(value).__name__}")

    @staticmethod
    def to_name(value: Any) -> str:
        """Convert enum instance to string name"""
        if isinstance(value, Enum):
            return value.name
        return str(value)

    @staticmethod
    def list_names(enum_class: Type[E], lowercase: bool = False) -> List[str]:
        if not issubclass(enum_class, Enum):
            raise TypeError(f"{enum_class} is not an Enum class")

        if lowercase:
            return [member.name.lower() for member in enum_class]
        return [member.name for member in enum_class]

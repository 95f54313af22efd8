"""
String encodings for the values stored in flat records.

Every decoder raises ``ValueError`` on malformed input; the JSON store turns
that into a ``DataLoadError`` for the file being read.
"""

from datetime import date, datetime, time
from enum import Enum
from typing import Optional, Type, TypeVar

E = TypeVar('E', bound=Enum)


def encode_enum(member: Enum) -> str:
    return member.name


def decode_enum(enum_cls: Type[E], name: str) -> E:
    """Look up an enum member by its canonical name."""
    try:
        return enum_cls[name]
    except KeyError:
        raise ValueError(f"Unknown {enum_cls.__name__} value: {name!r}") from None


def encode_datetime(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def decode_datetime(value: Optional[str]) -> Optional[datetime]:
    if value is None:
        return None
    return datetime.fromisoformat(value)


def encode_date(value: date) -> str:
    return value.isoformat()


def decode_date(value: str) -> date:
    return date.fromisoformat(value)


def encode_time(value: time) -> str:
    """Hours and minutes only, e.g. ``09:05``."""
    return value.strftime("%H:%M")


def decode_time(value: str) -> time:
    parts = value.split(":")
    if len(parts) != 2:
        raise ValueError(f"Expected HH:MM, got {value!r}")
    return time(int(parts[0]), int(parts[1]))

"""
Typed registry values.

Registry data is captured as one of four closed cases so that comparisons
never coerce across types: a REG_DWORD of 1 and a REG_SZ of "1" are
different values.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Tuple, Union


@dataclass(frozen=True, slots=True)
class StringValue:
    """REG_SZ / REG_EXPAND_SZ / REG_LINK data (expand strings kept unexpanded)."""
    data: str


@dataclass(frozen=True, slots=True)
class IntValue:
    """REG_DWORD / REG_QWORD data."""
    data: int


@dataclass(frozen=True, slots=True)
class BinaryValue:
    """REG_BINARY data and any type without a more specific case."""
    data: bytes


@dataclass(frozen=True, slots=True)
class StringListValue:
    """REG_MULTI_SZ data."""
    data: Tuple[str, ...]


RegistryValue = Union[StringValue, IntValue, BinaryValue, StringListValue]

VALUE_TYPES = (StringValue, IntValue, BinaryValue, StringListValue)


def is_registry_value(obj: Any) -> bool:
    """Return True if obj is one of the typed value cases."""
    return isinstance(obj, VALUE_TYPES)


def coerce_value(raw: Any) -> RegistryValue:
    """
    Convert a native Python object into a typed registry value.

    Args:
        raw: str, int, bytes/bytearray, list/tuple of str, None, or an
             already-typed value

    Returns:
        Typed registry value (None becomes an empty BinaryValue)

    Raises:
        TypeError: If the object has no registry representation
    """
    if is_registry_value(raw):
        return raw
    # bool is an int subclass but never a registry type
    if isinstance(raw, bool):
        raise TypeError("bool is not a registry value type")
    if isinstance(raw, str):
        return StringValue(raw)
    if isinstance(raw, int):
        return IntValue(raw)
    if isinstance(raw, (bytes, bytearray, memoryview)):
        return BinaryValue(bytes(raw))
    if raw is None:
        return BinaryValue(b"")
    if isinstance(raw, (list, tuple)):
        if all(isinstance(item, str) for item in raw):
            return StringListValue(tuple(raw))
        raise TypeError("multi-string values must contain only strings")
    raise TypeError(f"Unsupported registry value type: {type(raw).__name__}")


def format_value(value: RegistryValue | None, max_length: int = 0) -> str:
    """
    Render a typed value as human-readable text.

    Args:
        value: Typed value or None
        max_length: Truncate to this many characters (0 = no limit)

    Returns:
        Display string ("" for None, hex for binary, "; "-joined multi-strings)
    """
    if value is None:
        return ""
    if isinstance(value, BinaryValue):
        text = value.data.hex()
    elif isinstance(value, StringListValue):
        text = "; ".join(value.data)
    else:
        text = str(value.data)

    if max_length and len(text) > max_length:
        return text[: max(max_length - 3, 0)] + "..."
    return text


def value_type_name(value: RegistryValue | None) -> str:
    """Short type label used in reports."""
    if value is None:
        return ""
    return {
        StringValue: "string",
        IntValue: "int",
        BinaryValue: "binary",
        StringListValue: "multi_string",
    }[type(value)]

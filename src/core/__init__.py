"""Shared model, configuration and logging for the registry baseline tool."""

from .config import AppConfig, load_app_config  # noqa: F401
from .enums import DiscrepancyKind, MatchMode  # noqa: F401
from .values import (  # noqa: F401
    BinaryValue,
    IntValue,
    RegistryValue,
    StringListValue,
    StringValue,
    coerce_value,
)

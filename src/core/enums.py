"""
Core Enumerations

Centralized enum definitions for consistent typing across the codebase.
Using StrEnum (Python 3.11+) for string-based enums that serialize naturally.
"""

from enum import StrEnum


class MatchMode(StrEnum):
    """How a baseline record decides which live values are compared."""

    MATCH_ALL = "MatchAll"            # Every value at baseline time; new names are drift
    MATCH_SPECIFIC = "MatchSpecific"  # Only the watched names; others ignored


class DiscrepancyKind(StrEnum):
    """Classification of a divergence between live state and the baseline."""

    KEY_MISSING = "key_missing"
    VALUE_ADDED = "value_added"
    VALUE_CHANGED = "value_changed"
    VALUE_MISSING = "value_missing"  # MatchSpecific name no longer present
    VALUE_REMOVED = "value_removed"  # MatchAll name gone (strict mode only)


class ReportFormat(StrEnum):
    """Output formats supported by the discrepancy report."""

    TABLE = "table"
    CSV = "csv"
    JSON = "json"
    HTML = "html"

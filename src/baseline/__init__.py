"""
Registry Baseline

Captures persistence-related registry keys as a baseline and reports drift
against it.

Features:
- {SID} placeholder and wildcard key patterns
- MatchAll / MatchSpecific records
- Added, changed, missing and (strict mode) removed value detection
- JSON baseline files
"""

from .collector import BaselineCollector, collect_baseline
from .comparator import BaselineComparator, compare_baseline
from .records import (
    BaselineRecord,
    DiscrepancyRecord,
    MatchAllRecord,
    MatchSpecificRecord,
    make_baseline_record,
)
from .resolver import KeyResolver
from .serialization import load_baseline, records_from_json, records_to_json, save_baseline
from .targets import DEFAULT_TARGETS, WatchTarget, load_targets, targets_to_mapping

__all__ = [
    "BaselineCollector",
    "BaselineComparator",
    "BaselineRecord",
    "DiscrepancyRecord",
    "KeyResolver",
    "MatchAllRecord",
    "MatchSpecificRecord",
    "WatchTarget",
    "DEFAULT_TARGETS",
    "collect_baseline",
    "compare_baseline",
    "load_baseline",
    "load_targets",
    "make_baseline_record",
    "records_from_json",
    "records_to_json",
    "save_baseline",
    "targets_to_mapping",
]

"""
Registry sources

Read-only registry backends walked by the collector and comparator:
- WinRegSource: the live registry of the current Windows host (winreg)
- OfflineHiveSource: hive files mounted under registry paths (regipy)
"""

from __future__ import annotations

from typing import Iterable, Optional

from .base import (
    RegistrySource,
    join_key_path,
    split_key_path,
)
from .hive import OfflineHiveSource, parse_mount_spec
from .live import WinRegSource


def build_source(hive_specs: Optional[Iterable[str]] = None) -> RegistrySource:
    """
    Build the registry source selected on the command line.

    Args:
        hive_specs: ``MOUNT=PATH`` strings; when empty the live registry is used

    Returns:
        OfflineHiveSource for hive mounts, WinRegSource otherwise
    """
    specs = list(hive_specs or [])
    if specs:
        mounts = dict(parse_mount_spec(spec) for spec in specs)
        return OfflineHiveSource(mounts)
    return WinRegSource()


__all__ = [
    "RegistrySource",
    "WinRegSource",
    "OfflineHiveSource",
    "build_source",
    "parse_mount_spec",
    "split_key_path",
    "join_key_path",
]

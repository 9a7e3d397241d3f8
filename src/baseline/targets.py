"""
Watch targets

Registry locations commonly abused for persistence, and the value names
watched at each. An empty value list watches every value present at
baseline time (MatchAll).

Patterns may use:
- {SID} for per-user hives under HKU (replaced by the SID filter)
- * / ? wildcards in any segment (control sets, per-CLSID keys, ...)

Custom targets can be loaded from YAML, either as a mapping

    HKLM\\SOFTWARE\\Microsoft\\Windows\\CurrentVersion\\Run: []
    HKLM\\SOFTWARE\\Microsoft\\Windows NT\\CurrentVersion\\Winlogon: [Shell, Userinit]

or as a list of entries with ``path``, ``values`` and ``note``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from core.exceptions import ConfigurationError
from core.logging import get_logger
from sources.base import split_key_path

LOGGER = get_logger("baseline.targets")


@dataclass
class WatchTarget:
    """A key pattern and the value names watched under it."""
    path: str
    values: List[str] = field(default_factory=list)  # empty = watch all values
    note: Optional[str] = None

    @property
    def watches_all(self) -> bool:
        return not self.values


_RUN = "Microsoft\\Windows\\CurrentVersion\\Run"
_RUN_ONCE = "Microsoft\\Windows\\CurrentVersion\\RunOnce"
_WINLOGON = "Microsoft\\Windows NT\\CurrentVersion\\Winlogon"


# =============================================================================
# Machine-wide autostart - SOFTWARE
# =============================================================================

RUN_KEYS: List[WatchTarget] = [
    WatchTarget(f"HKLM\\SOFTWARE\\{_RUN}", note="Machine Run key"),
    WatchTarget(f"HKLM\\SOFTWARE\\{_RUN_ONCE}", note="Machine RunOnce key"),
    WatchTarget(f"HKLM\\SOFTWARE\\{_RUN_ONCE}Ex"),
    WatchTarget("HKLM\\SOFTWARE\\Microsoft\\Windows\\CurrentVersion\\RunServices"),
    WatchTarget("HKLM\\SOFTWARE\\Microsoft\\Windows\\CurrentVersion\\RunServicesOnce"),
    WatchTarget("HKLM\\SOFTWARE\\Microsoft\\Windows\\CurrentVersion\\Policies\\Explorer\\Run"),
    WatchTarget(f"HKLM\\SOFTWARE\\WOW6432Node\\{_RUN}", note="32-bit Run key on 64-bit Windows"),
    WatchTarget(f"HKLM\\SOFTWARE\\WOW6432Node\\{_RUN_ONCE}"),
]

WINLOGON: List[WatchTarget] = [
    WatchTarget(
        f"HKLM\\SOFTWARE\\{_WINLOGON}",
        values=["Shell", "Userinit", "Taskman", "AppSetup", "System", "VmApplet"],
        note="Logon shell and userinit hijacks",
    ),
    WatchTarget(
        f"HKLM\\SOFTWARE\\{_WINLOGON}\\Notify\\*",
        note="Winlogon notification packages (DllName)",
    ),
    WatchTarget(
        "HKLM\\SOFTWARE\\Microsoft\\Windows NT\\CurrentVersion\\Windows",
        values=["AppInit_DLLs", "LoadAppInit_DLLs", "RequireSignedAppInit_DLLs"],
        note="AppInit_DLLs",
    ),
    WatchTarget(
        "HKLM\\SOFTWARE\\WOW6432Node\\Microsoft\\Windows NT\\CurrentVersion\\Windows",
        values=["AppInit_DLLs", "LoadAppInit_DLLs"],
        note="32-bit AppInit_DLLs",
    ),
]

EXPLORER: List[WatchTarget] = [
    WatchTarget(
        "HKLM\\SOFTWARE\\Microsoft\\Windows\\CurrentVersion\\Explorer\\Browser Helper Objects\\*",
        note="Browser Helper Objects",
    ),
    WatchTarget(
        "HKLM\\SOFTWARE\\WOW6432Node\\Microsoft\\Windows\\CurrentVersion\\Explorer\\Browser Helper Objects\\*",
    ),
    WatchTarget(
        "HKLM\\SOFTWARE\\Microsoft\\Windows NT\\CurrentVersion\\Image File Execution Options\\*",
        values=["Debugger", "GlobalFlag"],
        note="IFEO debugger hijacks",
    ),
]


# =============================================================================
# Boot and services - SYSTEM (every control set)
# =============================================================================

SYSTEM_KEYS: List[WatchTarget] = [
    WatchTarget(
        "HKLM\\SYSTEM\\ControlSet*\\Control\\Session Manager",
        values=["BootExecute", "SetupExecute", "Execute", "S0InitialCommand"],
        note="Native applications run before Win32 starts",
    ),
    WatchTarget(
        "HKLM\\SYSTEM\\ControlSet*\\Control\\Session Manager\\KnownDLLs",
        note="KnownDLLs",
    ),
    WatchTarget(
        "HKLM\\SYSTEM\\ControlSet*\\Services\\*",
        values=["ImagePath", "Start", "Type"],
        note="Service binaries",
    ),
    WatchTarget(
        "HKLM\\SYSTEM\\ControlSet*\\Services\\*\\Parameters",
        values=["ServiceDll"],
        note="svchost-hosted service DLLs",
    ),
]


# =============================================================================
# Per-user hives - HKU\{SID}
# =============================================================================

USER_KEYS: List[WatchTarget] = [
    WatchTarget(f"HKU\\{{SID}}\\Software\\{_RUN}", note="Per-user Run key"),
    WatchTarget(f"HKU\\{{SID}}\\Software\\{_RUN_ONCE}", note="Per-user RunOnce key"),
    WatchTarget("HKU\\{SID}\\Software\\Microsoft\\Windows\\CurrentVersion\\Policies\\Explorer\\Run"),
    WatchTarget(
        f"HKU\\{{SID}}\\Software\\{_WINLOGON}",
        values=["Shell"],
        note="Per-user logon shell",
    ),
    WatchTarget(
        "HKU\\{SID}\\Software\\Microsoft\\Windows NT\\CurrentVersion\\Windows",
        values=["Load", "Run"],
    ),
]


DEFAULT_TARGETS: List[WatchTarget] = [
    *RUN_KEYS,
    *WINLOGON,
    *EXPLORER,
    *SYSTEM_KEYS,
    *USER_KEYS,
]


def get_default_targets() -> List[WatchTarget]:
    return list(DEFAULT_TARGETS)


def targets_to_mapping(targets: List[WatchTarget]) -> Dict[str, List[str]]:
    """
    Convert targets into the ordered {pattern: watch_list} map the collector takes.

    Repeated patterns merge their watch-lists; a pattern that watches all
    values anywhere keeps watching all values.
    """
    mapping: Dict[str, List[str]] = {}
    for target in targets:
        if target.path not in mapping:
            mapping[target.path] = list(target.values)
            continue
        existing = mapping[target.path]
        if not existing or not target.values:
            mapping[target.path] = []
        else:
            existing.extend(v for v in target.values if v not in existing)
    return mapping


def _target_from_entry(entry: Any, index: int) -> WatchTarget:
    if not isinstance(entry, dict) or "path" not in entry:
        raise ConfigurationError(f"Target entry {index} must be a mapping with a 'path'")
    values = entry.get("values") or []
    if not isinstance(values, list):
        raise ConfigurationError(f"Target entry {index}: 'values' must be a list")
    return WatchTarget(path=str(entry["path"]), values=[str(v) for v in values], note=entry.get("note"))


def parse_targets(content: Any) -> List[WatchTarget]:
    """
    Build targets from decoded YAML content.

    Raises:
        ConfigurationError: If the content has the wrong shape or a bad path
    """
    targets: List[WatchTarget] = []
    if isinstance(content, dict):
        for path, values in content.items():
            if values is None:
                values = []
            if not isinstance(values, list):
                raise ConfigurationError(f"Watch-list for {path} must be a list")
            targets.append(WatchTarget(path=str(path), values=[str(v) for v in values]))
    elif isinstance(content, list):
        targets = [_target_from_entry(entry, index) for index, entry in enumerate(content)]
    else:
        raise ConfigurationError("Targets must be a mapping or a list of entries")

    for target in targets:
        try:
            split_key_path(target.path)
        except ValueError as exc:
            raise ConfigurationError(str(exc)) from exc
    return targets


def load_targets(path: Path) -> List[WatchTarget]:
    """
    Load watch targets from a YAML file.

    Raises:
        ConfigurationError: If the file is missing, unreadable or malformed
    """
    try:
        with path.open("r", encoding="utf-8") as handle:
            content = yaml.safe_load(handle)
    except OSError as exc:
        raise ConfigurationError(f"Cannot read targets file {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Targets file {path} is not valid YAML: {exc}") from exc

    targets = parse_targets(content or {})
    LOGGER.debug("Loaded %d watch targets from %s", len(targets), path)
    return targets

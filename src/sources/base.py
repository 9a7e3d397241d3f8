"""
Registry source interface and key path helpers.

A registry source is the read-only view of a registry namespace that the
collector and comparator walk. Paths are backslash separated and always
start with a short root alias (HKLM, HKCU, HKU, HKCR, HKCC).
"""

from __future__ import annotations

from typing import List, Optional, Protocol, Tuple

from core.values import RegistryValue

ROOT_ALIASES = {
    "HKLM": "HKLM",
    "HKEY_LOCAL_MACHINE": "HKLM",
    "HKCU": "HKCU",
    "HKEY_CURRENT_USER": "HKCU",
    "HKU": "HKU",
    "HKEY_USERS": "HKU",
    "HKCR": "HKCR",
    "HKEY_CLASSES_ROOT": "HKCR",
    "HKCC": "HKCC",
    "HKEY_CURRENT_CONFIG": "HKCC",
}

# Name the live API reports for a key's unnamed value
DEFAULT_VALUE_NAME = ""


def split_key_path(path: str) -> Tuple[str, List[str]]:
    """
    Split a key path into its root alias and subkey segments.

    Accepts long root names (HKEY_LOCAL_MACHINE), PowerShell drive forms
    (HKLM:) and forward slashes.

    Args:
        path: Registry key path

    Returns:
        Tuple of (root alias, list of segments)

    Raises:
        ValueError: If the path is empty or the root is unknown
    """
    parts = [p for p in path.replace("/", "\\").split("\\") if p]
    if not parts:
        raise ValueError("Empty registry path")

    root = parts[0].rstrip(":").upper()
    if root not in ROOT_ALIASES:
        raise ValueError(f"Unknown registry root '{parts[0]}' in path: {path}")
    return ROOT_ALIASES[root], parts[1:]


def join_key_path(root: str, segments: List[str]) -> str:
    return "\\".join([root, *segments])


class RegistrySource(Protocol):
    """
    Read-only registry namespace.

    Implementations raise RegistryKeyNotFoundError when asked to enumerate a
    key that does not exist and RegistryAccessError when a key exists but
    cannot be read.
    """

    def key_exists(self, path: str) -> bool:
        """Return True if the exact key path exists."""
        ...

    def subkey_names(self, path: str) -> List[str]:
        """Return the names of the key's direct subkeys, in registry order."""
        ...

    def value_names(self, path: str) -> List[str]:
        """Return the names of the key's values, in registry order."""
        ...

    def read_value(self, path: str, name: str) -> Optional[RegistryValue]:
        """Return the typed value data, or None if the value is absent."""
        ...

"""
Offline registry source backed by regipy.

Hive files exported from an image (or copied from a powered-off host) are
mounted under registry paths, so a baseline taken from a live machine can be
compared against a forensic copy of the same machine:

    source = OfflineHiveSource({
        "HKLM\\SOFTWARE": Path("export/SOFTWARE"),
        "HKLM\\SYSTEM": Path("export/SYSTEM"),
        "HKU\\S-1-5-21-1-2-3-1001": Path("export/Users/alice/NTUSER.DAT"),
    })
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from core.exceptions import (
    RegistryAccessError,
    RegistryKeyNotFoundError,
    RegistrySourceUnavailableError,
)
from core.logging import get_logger
from core.values import BinaryValue, RegistryValue, coerce_value

from .base import DEFAULT_VALUE_NAME, join_key_path, split_key_path

LOGGER = get_logger("sources.hive")

REGIPY_DEFAULT_VALUE_NAME = "(default)"


def _default_hive_factory() -> Callable[[str], Any]:
    try:
        from regipy.registry import RegistryHive  # type: ignore
    except ImportError as exc:
        raise RegistrySourceUnavailableError(
            "hive", "regipy not installed (pip install regipy)"
        ) from exc
    return RegistryHive


def parse_mount_spec(spec: str) -> Tuple[str, Path]:
    """
    Parse a ``MOUNT=PATH`` command-line specification.

    Raises:
        ValueError: If the specification is malformed
    """
    mount, sep, path = spec.partition("=")
    if not sep or not mount.strip() or not path.strip():
        raise ValueError(f"Hive mount must look like MOUNT=PATH, got: {spec!r}")
    root, segments = split_key_path(mount.strip())
    if not segments:
        raise ValueError(f"Cannot mount a hive over a registry root: {mount!r}")
    return join_key_path(root, segments), Path(path.strip())


def _convert_regipy_value(value: Any) -> RegistryValue:
    try:
        return coerce_value(value.value)
    except TypeError:
        LOGGER.debug(
            "Unsupported data for value %s (%s); storing repr",
            value.name, getattr(value, "value_type", "?"),
        )
        return BinaryValue(repr(value.value).encode("utf-8"))


def _value_display_name(value: Any) -> str:
    name = value.name or DEFAULT_VALUE_NAME
    if name.lower() == REGIPY_DEFAULT_VALUE_NAME:
        return DEFAULT_VALUE_NAME
    return name


class OfflineHiveSource:
    """Read-only view of hive files mounted under registry paths."""

    def __init__(
        self,
        mounts: Mapping[str, Path],
        hive_factory: Optional[Callable[[str], Any]] = None,
    ):
        """
        Args:
            mounts: Mapping of mount key path (e.g. "HKLM\\SOFTWARE") to hive file
            hive_factory: Callable opening a hive file; defaults to
                          regipy.registry.RegistryHive

        Raises:
            RegistrySourceUnavailableError: If regipy cannot be imported
            ValueError: If a mount path is invalid
        """
        self._hive_factory = hive_factory or _default_hive_factory()
        self._mounts: Dict[Tuple[str, ...], Path] = {}
        # Folded mount key -> path components in the case they were given
        self._mount_names: Dict[Tuple[str, ...], List[str]] = {}
        self._hives: Dict[Tuple[str, ...], Any] = {}

        for mount, hive_path in mounts.items():
            root, segments = split_key_path(mount)
            if not segments:
                raise ValueError(f"Cannot mount a hive over a registry root: {mount!r}")
            folded = self._fold((root, *segments))
            self._mounts[folded] = Path(hive_path)
            self._mount_names[folded] = [root, *segments]

    @staticmethod
    def _fold(parts) -> Tuple[str, ...]:
        return tuple(p.lower() for p in parts)

    def _locate(self, path: str) -> Tuple[Optional[Tuple[str, ...]], List[str], Tuple[str, ...]]:
        """
        Find the mount that contains path.

        Returns:
            (mount key or None, segments inside the hive, folded full path)
        """
        root, segments = split_key_path(path)
        full = self._fold((root, *segments))
        best: Optional[Tuple[str, ...]] = None
        for mount in self._mounts:
            if full[: len(mount)] == mount and (best is None or len(mount) > len(best)):
                best = mount
        if best is None:
            return None, [], full
        return best, segments[len(best) - 1:], full

    def _virtual_children(self, full: Tuple[str, ...]) -> List[str]:
        """Names of mount-path components directly below a non-hive key."""
        children: List[str] = []
        seen = set()
        for mount, display in self._mount_names.items():
            if len(mount) > len(full) and mount[: len(full)] == full:
                child = display[len(full)]
                if child.lower() not in seen:
                    seen.add(child.lower())
                    children.append(child)
        return children

    def _hive(self, mount: Tuple[str, ...]) -> Any:
        if mount not in self._hives:
            hive_path = self._mounts[mount]
            try:
                self._hives[mount] = self._hive_factory(str(hive_path))
            except Exception as e:
                raise RegistryAccessError(
                    "\\".join(mount), f"cannot open hive {hive_path}: {e}"
                ) from e
            LOGGER.debug("Opened hive %s for %s", hive_path, "\\".join(mount))
        return self._hives[mount]

    def _resolve_control_set(self, hive: Any) -> Optional[str]:
        """Map CurrentControlSet to ControlSet00N using SYSTEM\\Select\\Current."""
        select = self._find_subkey(hive.root, "Select")
        if select is None:
            return None
        for value in select.iter_values(trim_values=False):
            if (value.name or "").lower() == "current" and isinstance(value.value, int):
                return f"ControlSet{value.value:03d}"
        return None

    @staticmethod
    def _find_subkey(key: Any, name: str) -> Any:
        for subkey in key.iter_subkeys():
            if subkey.name.lower() == name.lower():
                return subkey
        return None

    def _get_key(self, path: str) -> Any:
        """
        Return the regipy key object for path.

        Traversal is manual and case-insensitive; regipy's get_key()
        silently redirects WOW6432Node paths.

        Raises:
            RegistryKeyNotFoundError: If the key does not exist
            RegistryAccessError: If the hive cannot be read
        """
        mount, inner, _ = self._locate(path)
        if mount is None:
            raise RegistryKeyNotFoundError(path)

        hive = self._hive(mount)
        try:
            current = hive.root
            for index, part in enumerate(inner):
                if index == 0 and part.lower() == "currentcontrolset":
                    control_set = self._resolve_control_set(hive)
                    if control_set is not None:
                        part = control_set
                found = self._find_subkey(current, part)
                if found is None:
                    raise RegistryKeyNotFoundError(path)
                current = found
        except RegistryKeyNotFoundError:
            raise
        except Exception as e:
            raise RegistryAccessError(path, str(e)) from e
        return current

    def _is_virtual(self, path: str) -> Tuple[bool, Tuple[str, ...]]:
        mount, _, full = self._locate(path)
        if mount is not None:
            return False, full
        return True, full

    def key_exists(self, path: str) -> bool:
        virtual, full = self._is_virtual(path)
        if virtual:
            return len(full) == 1 or bool(self._virtual_children(full))
        try:
            self._get_key(path)
            return True
        except RegistryKeyNotFoundError:
            return False

    def subkey_names(self, path: str) -> List[str]:
        virtual, full = self._is_virtual(path)
        if virtual:
            children = self._virtual_children(full)
            if not children and len(full) > 1:
                raise RegistryKeyNotFoundError(path)
            return children
        key = self._get_key(path)
        try:
            return [subkey.name for subkey in key.iter_subkeys()]
        except Exception as e:
            raise RegistryAccessError(path, str(e)) from e

    def value_names(self, path: str) -> List[str]:
        virtual, full = self._is_virtual(path)
        if virtual:
            if not self.key_exists(path):
                raise RegistryKeyNotFoundError(path)
            return []
        key = self._get_key(path)
        try:
            return [_value_display_name(value) for value in key.iter_values(trim_values=False)]
        except Exception as e:
            raise RegistryAccessError(path, str(e)) from e

    def read_value(self, path: str, name: str) -> Optional[RegistryValue]:
        virtual, _ = self._is_virtual(path)
        if virtual:
            return None
        key = self._get_key(path)
        wanted = name.lower()
        try:
            for value in key.iter_values(trim_values=False):
                if _value_display_name(value).lower() == wanted:
                    return _convert_regipy_value(value)
        except Exception as e:
            raise RegistryAccessError(f"{path}\\{name}", str(e)) from e
        return None

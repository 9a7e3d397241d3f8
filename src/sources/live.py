"""
Live registry source backed by the Windows ``winreg`` module.
"""

from __future__ import annotations

import sys
from contextlib import contextmanager
from typing import Any, Iterator, List, Optional

from core.exceptions import (
    RegistryAccessError,
    RegistryKeyNotFoundError,
    RegistrySourceUnavailableError,
)
from core.logging import get_logger
from core.values import (
    BinaryValue,
    IntValue,
    RegistryValue,
    StringValue,
    coerce_value,
)

from .base import split_key_path

LOGGER = get_logger("sources.live")

_ROOT_HANDLE_NAMES = {
    "HKLM": "HKEY_LOCAL_MACHINE",
    "HKCU": "HKEY_CURRENT_USER",
    "HKU": "HKEY_USERS",
    "HKCR": "HKEY_CLASSES_ROOT",
    "HKCC": "HKEY_CURRENT_CONFIG",
}


def convert_winreg_value(data: Any, value_type: int, api: Any) -> RegistryValue:
    """
    Convert data returned by winreg into a typed registry value.

    Args:
        data: Value data as returned by EnumValue/QueryValueEx
        value_type: winreg REG_* type code
        api: The winreg module (or a stand-in exposing the REG_* constants)

    Returns:
        Typed registry value
    """
    if value_type in (api.REG_SZ, api.REG_EXPAND_SZ):
        return StringValue("" if data is None else str(data))

    if value_type == api.REG_LINK:
        if isinstance(data, (bytes, bytearray)):
            return StringValue(bytes(data).decode("utf-16-le", errors="replace").rstrip("\x00"))
        return StringValue(str(data))

    if value_type == api.REG_DWORD_BIG_ENDIAN and isinstance(data, (bytes, bytearray)):
        return IntValue(int.from_bytes(bytes(data), "big"))

    if value_type in (api.REG_DWORD, api.REG_QWORD) and isinstance(data, int):
        return IntValue(data)

    if value_type == api.REG_MULTI_SZ:
        return coerce_value(list(data or []))

    if isinstance(data, (bytes, bytearray)) or data is None:
        return BinaryValue(bytes(data or b""))

    try:
        return coerce_value(data)
    except TypeError:
        LOGGER.debug("Unexpected data for registry type %s: %r", value_type, data)
        return BinaryValue(repr(data).encode("utf-8"))


class WinRegSource:
    """
    Read-only view of the live registry of the current host.

    Keys are opened with KEY_WOW64_64KEY so a 32-bit interpreter sees the
    native view; WOW6432Node paths are read explicitly.
    """

    def __init__(self, api: Any = None):
        """
        Args:
            api: winreg-compatible module; defaults to the real ``winreg``
                 which only exists on Windows.

        Raises:
            RegistrySourceUnavailableError: If winreg is not importable
        """
        if api is None:
            try:
                import winreg as api  # type: ignore
            except ImportError as exc:
                raise RegistrySourceUnavailableError(
                    "live",
                    f"The live registry requires Windows (running on {sys.platform}). "
                    "Use --hive MOUNT=PATH to read offline hive files instead.",
                ) from exc
        self._api = api
        self._access = api.KEY_READ | getattr(api, "KEY_WOW64_64KEY", 0)

    @contextmanager
    def _open(self, path: str) -> Iterator[Any]:
        root, segments = split_key_path(path)
        root_handle = getattr(self._api, _ROOT_HANDLE_NAMES[root])
        try:
            handle = self._api.OpenKey(root_handle, "\\".join(segments), 0, self._access)
        except FileNotFoundError as exc:
            raise RegistryKeyNotFoundError(path) from exc
        except PermissionError as exc:
            raise RegistryAccessError(path, "permission denied") from exc
        except OSError as exc:
            raise RegistryAccessError(path, str(exc)) from exc
        try:
            yield handle
        finally:
            self._api.CloseKey(handle)

    def key_exists(self, path: str) -> bool:
        try:
            with self._open(path):
                return True
        except RegistryKeyNotFoundError:
            return False
        except RegistryAccessError:
            # The key is there even if we may not read it
            return True

    def subkey_names(self, path: str) -> List[str]:
        names: List[str] = []
        with self._open(path) as handle:
            try:
                subkey_count, _, _ = self._api.QueryInfoKey(handle)
                for index in range(subkey_count):
                    names.append(self._api.EnumKey(handle, index))
            except OSError as exc:
                raise RegistryAccessError(path, str(exc)) from exc
        return names

    def value_names(self, path: str) -> List[str]:
        names: List[str] = []
        with self._open(path) as handle:
            try:
                _, value_count, _ = self._api.QueryInfoKey(handle)
                for index in range(value_count):
                    name, _, _ = self._api.EnumValue(handle, index)
                    names.append(name)
            except OSError as exc:
                raise RegistryAccessError(path, str(exc)) from exc
        return names

    def read_value(self, path: str, name: str) -> Optional[RegistryValue]:
        with self._open(path) as handle:
            try:
                data, value_type = self._api.QueryValueEx(handle, name)
            except FileNotFoundError:
                return None
            except OSError as exc:
                raise RegistryAccessError(f"{path}\\{name}", str(exc)) from exc
        return convert_winreg_value(data, value_type, self._api)

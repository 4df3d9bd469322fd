"""Registry settings store backed by pywin32."""

from __future__ import annotations

import logging
from typing import Any

from ..core.models import RegistryValueKind

logger = logging.getLogger(__name__)

# Registry "file not found" Win32 error codes
_NOT_FOUND = (2, 3)

_HIVE_NAMES = {
    "HKEY_LOCAL_MACHINE": "HKEY_LOCAL_MACHINE",
    "HKLM": "HKEY_LOCAL_MACHINE",
    "HKEY_CURRENT_USER": "HKEY_CURRENT_USER",
    "HKCU": "HKEY_CURRENT_USER",
    "HKEY_CLASSES_ROOT": "HKEY_CLASSES_ROOT",
    "HKCR": "HKEY_CLASSES_ROOT",
    "HKEY_USERS": "HKEY_USERS",
    "HKU": "HKEY_USERS",
    "HKEY_CURRENT_CONFIG": "HKEY_CURRENT_CONFIG",
    "HKCC": "HKEY_CURRENT_CONFIG",
}

_VALUE_TYPES = {
    RegistryValueKind.DWORD: "REG_DWORD",
    RegistryValueKind.QWORD: "REG_QWORD",
    RegistryValueKind.SZ: "REG_SZ",
    RegistryValueKind.EXPAND_SZ: "REG_EXPAND_SZ",
    RegistryValueKind.MULTI_SZ: "REG_MULTI_SZ",
    RegistryValueKind.BINARY: "REG_BINARY",
}


def split_key_path(key_path: str) -> tuple[str, str]:
    """Split ``HKCU\\Software\\X`` into (canonical hive name, subkey)."""
    hive, _, subkey = key_path.replace("/", "\\").partition("\\")
    canonical = _HIVE_NAMES.get(hive.upper())
    if canonical is None:
        raise ValueError(f"Unknown registry hive in {key_path!r}")
    return canonical, subkey.strip("\\")


def _is_not_found(error: Exception) -> bool:
    return getattr(error, "winerror", None) in _NOT_FOUND


class WindowsRegistryStore:
    """``SettingsStore`` over the live registry (64-bit view)."""

    def _hive(self, name: str):
        import win32con

        return getattr(win32con, name)

    def _access(self, write: bool) -> int:
        import win32con

        access = win32con.KEY_ALL_ACCESS if write else win32con.KEY_READ
        return access | win32con.KEY_WOW64_64KEY

    def _open(self, key_path: str, write: bool = False):
        import win32api

        hive, subkey = split_key_path(key_path)
        return win32api.RegOpenKeyEx(self._hive(hive), subkey, 0, self._access(write))

    def get_value(self, key_path: str, value_name: str) -> Any:
        import pywintypes
        import win32api

        try:
            key = self._open(key_path)
        except pywintypes.error as e:
            if _is_not_found(e):
                return None
            raise
        try:
            value, _ = win32api.RegQueryValueEx(key, value_name)
            return value
        except pywintypes.error as e:
            if _is_not_found(e):
                return None
            raise
        finally:
            win32api.RegCloseKey(key)

    def set_value(self, key_path: str, value_name: str, value: Any, value_type: RegistryValueKind) -> None:
        import win32api
        import win32con

        hive, subkey = split_key_path(key_path)
        key, _ = win32api.RegCreateKeyEx(self._hive(hive), subkey, self._access(True), None, 0)
        try:
            reg_type = getattr(win32con, _VALUE_TYPES[RegistryValueKind(value_type)])
            win32api.RegSetValueEx(key, value_name, 0, reg_type, value)
        finally:
            win32api.RegCloseKey(key)
        logger.debug("Set %s\\%s = %r", key_path, value_name, value)

    def key_exists(self, key_path: str) -> bool:
        import pywintypes
        import win32api

        try:
            key = self._open(key_path)
        except pywintypes.error as e:
            if _is_not_found(e):
                return False
            raise
        win32api.RegCloseKey(key)
        return True

    def value_exists(self, key_path: str, value_name: str) -> bool:
        import pywintypes
        import win32api

        try:
            key = self._open(key_path)
        except pywintypes.error as e:
            if _is_not_found(e):
                return False
            raise
        try:
            win32api.RegQueryValueEx(key, value_name)
            return True
        except pywintypes.error as e:
            if _is_not_found(e):
                return False
            raise
        finally:
            win32api.RegCloseKey(key)

    def delete_value(self, key_path: str, value_name: str) -> None:
        import pywintypes
        import win32api

        try:
            key = self._open(key_path, write=True)
        except pywintypes.error as e:
            if _is_not_found(e):
                return
            raise
        try:
            win32api.RegDeleteValue(key, value_name)
            logger.debug("Deleted %s\\%s", key_path, value_name)
        except pywintypes.error as e:
            if not _is_not_found(e):
                raise
        finally:
            win32api.RegCloseKey(key)

    def create_key(self, key_path: str) -> None:
        import win32api

        hive, subkey = split_key_path(key_path)
        key, _ = win32api.RegCreateKeyEx(self._hive(hive), subkey, self._access(True), None, 0)
        win32api.RegCloseKey(key)

    def delete_key(self, key_path: str) -> None:
        import pywintypes
        import win32api

        hive, subkey = split_key_path(key_path)
        parent_path, _, leaf = subkey.rpartition("\\")
        try:
            parent = win32api.RegOpenKeyEx(self._hive(hive), parent_path, 0, self._access(True))
        except pywintypes.error as e:
            if _is_not_found(e):
                return
            raise
        try:
            win32api.RegDeleteTree(parent, leaf)
            logger.debug("Deleted key %s", key_path)
        except pywintypes.error as e:
            if not _is_not_found(e):
                raise
        finally:
            win32api.RegCloseKey(parent)

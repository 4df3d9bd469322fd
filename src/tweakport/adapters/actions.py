"""Cosmetic side effects triggered by some settings."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from ..core.errors import SettingApplyError
from ..core.models import SettingDefinition
from ..core.ports import SettingsStore

logger = logging.getLogger(__name__)

PERSONALIZE_KEY = r"HKEY_CURRENT_USER\Software\Microsoft\Windows\CurrentVersion\Themes\Personalize"
TASKBAND_KEY = r"HKEY_CURRENT_USER\Software\Microsoft\Windows\CurrentVersion\Explorer\Taskband"
START_LAYOUT_KEY = (
    r"HKEY_CURRENT_USER\Software\Microsoft\Windows\CurrentVersion\CloudStore\Store\Cache\DefaultAccount"
)

_WALLPAPER_DIR = Path(os.environ.get("WINDIR", r"C:\Windows")) / "Web" / "Wallpaper" / "Windows"
_LIGHT_WALLPAPER = "img0.jpg"
_DARK_WALLPAPER = "img19.jpg"

_START_BIN = (
    Path(os.environ.get("LOCALAPPDATA", ""))
    / "Packages"
    / "Microsoft.Windows.StartMenuExperienceHost_cw5n1h2txyewy"
    / "LocalState"
    / "start2.bin"
)


class WindowsActionRunner:
    """``ActionRunner`` for wallpaper, taskbar and start menu cleanup."""

    def __init__(self, store: SettingsStore):
        self._store = store
        self._actions = {
            "apply-theme-wallpaper": self._apply_theme_wallpaper,
            "clean-taskbar": self._clean_taskbar,
            "clean-start-menu-10": self._clean_start_menu_10,
            "clean-start-menu-11": self._clean_start_menu_11,
        }

    def run(self, action: str, definition: SettingDefinition) -> None:
        handler = self._actions.get(action)
        if handler is None:
            raise SettingApplyError(f"Unknown action {action!r} for {definition.id}")
        logger.info("Running %s for %s", action, definition.id)
        handler()

    def _apply_theme_wallpaper(self) -> None:
        import win32con
        import win32gui

        light = self._store.get_value(PERSONALIZE_KEY, "AppsUseLightTheme")
        name = _DARK_WALLPAPER if light == 0 else _LIGHT_WALLPAPER
        path = _WALLPAPER_DIR / name
        if not path.exists():
            path = _WALLPAPER_DIR / _LIGHT_WALLPAPER
        win32gui.SystemParametersInfo(
            win32con.SPI_SETDESKWALLPAPER,
            str(path),
            win32con.SPIF_UPDATEINIFILE | win32con.SPIF_SENDWININICHANGE,
        )

    def _clean_taskbar(self) -> None:
        # Pinned items live in the Taskband key; the shell rebuilds it empty
        self._store.delete_value(TASKBAND_KEY, "Favorites")
        self._store.delete_value(TASKBAND_KEY, "FavoritesResolve")

    def _clean_start_menu_10(self) -> None:
        self._store.delete_key(START_LAYOUT_KEY)

    def _clean_start_menu_11(self) -> None:
        if _START_BIN.exists():
            _START_BIN.unlink()
        else:
            logger.info("No start menu layout at %s", _START_BIN)

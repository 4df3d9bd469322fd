"""Core configuration models (structured views)."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class EngineSettings:
    shell_process_name: str = "explorer"
    shell_kill_settle_delay: float = 1.0
    shell_restart_poll_interval: float = 0.25
    shell_restart_max_polls: int = 20
    shell_start_verify_interval: float = 0.5
    shell_start_verify_max_polls: int = 10
    discovery_concurrency: int = 8


@dataclass(frozen=True)
class ImportOptions:
    """Per-run choices made before an import starts.

    ``selected_sections`` holds section keys such as ``Optimize``,
    ``Customize_taskbar`` or ``WindowsApps``; None selects everything.
    """

    process_windows_apps_removal: bool = False
    process_windows_apps_installation: bool = False
    process_external_apps_installation: bool = False
    process_external_apps_removal: bool = False
    apply_theme_wallpaper: bool = False
    apply_clean_taskbar: bool = False
    apply_clean_start_menu: bool = False
    selected_sections: frozenset[str] | None = None

    def includes(self, section_key: str) -> bool:
        if self.selected_sections is None:
            return True
        return section_key in self.selected_sections

    @property
    def wants_action_only_items(self) -> bool:
        return self.apply_theme_wallpaper or self.apply_clean_taskbar or self.apply_clean_start_menu

"""Core ports (interfaces) for tweakport.

These protocols define the boundaries between the export/import engine and
the Windows-specific adapters. They are small and capability-oriented so the
core can be exercised with in-memory fakes.
"""

from __future__ import annotations

from concurrent.futures import Future
from typing import Any, Coroutine, Iterable, Protocol, runtime_checkable

from .models import AppItem, AppKind, PowerPlan, RegistryValueKind, SettingDefinition


@runtime_checkable
class SettingsStore(Protocol):
    """Hierarchical key/value settings store (the registry)."""

    def get_value(self, key_path: str, value_name: str) -> Any:
        """Return the stored value, or None when the key or value is absent."""

    def set_value(
        self, key_path: str, value_name: str, value: Any, value_type: RegistryValueKind
    ) -> None:
        """Write a value, creating the key when needed."""

    def key_exists(self, key_path: str) -> bool:
        """Whether the key exists."""

    def value_exists(self, key_path: str, value_name: str) -> bool:
        """Whether the named value exists under the key."""

    def delete_value(self, key_path: str, value_name: str) -> None:
        """Delete a value. Missing values are not an error."""

    def create_key(self, key_path: str) -> None:
        """Create a key (and its parents)."""

    def delete_key(self, key_path: str) -> None:
        """Delete a key. Missing keys are not an error."""


@runtime_checkable
class HostDescriptor(Protocol):
    """Describes the running OS."""

    def is_windows11(self) -> bool:
        """True on Windows 11."""

    def get_build_number(self) -> int:
        """OS build number."""


@runtime_checkable
class ProcessControl(Protocol):
    """Minimal process lifecycle contract."""

    def is_process_running(self, name: str) -> bool:
        """Whether a process with this name is running."""

    def kill_process(self, name: str) -> None:
        """Terminate every process with this name."""

    def start_process(self, name: str) -> None:
        """Launch the named process."""


@runtime_checkable
class PowerPlanService(Protocol):
    """Power plans and per-plan power settings."""

    def list_plans(self) -> list[PowerPlan]:
        """Installed power plans; the active one has ``is_active`` set."""

    def set_active_plan(self, guid: str) -> None:
        """Activate the plan with this GUID."""

    def read_setting(self, subgroup_guid: str, setting_guid: str) -> tuple[int | None, int | None]:
        """Return (AC, DC) values of a setting in the active plan."""

    def write_setting(
        self,
        subgroup_guid: str,
        setting_guid: str,
        ac_value: int | None = None,
        dc_value: int | None = None,
    ) -> None:
        """Write AC and/or DC values in the active plan. None leaves a mode untouched."""


@runtime_checkable
class AppCatalog(Protocol):
    """Enumerate, select, install and remove app items."""

    def list_items(self, kind: AppKind) -> list[AppItem]:
        """All known items of a kind."""

    def select(self, kind: AppKind, items: Iterable[AppItem]) -> None:
        """Mark exactly these items as selected."""

    async def install(self, kind: AppKind, items: list[AppItem]) -> None:
        """Install items."""

    async def remove(self, kind: AppKind, items: list[AppItem]) -> None:
        """Remove items."""


@runtime_checkable
class ActionRunner(Protocol):
    """Runs named side effects (wallpaper, taskbar cleanup, ...)."""

    def run(self, action: str, definition: SettingDefinition) -> None:
        """Run the named action for a definition."""


@runtime_checkable
class UIFeedback(Protocol):
    """User-visible notifications."""

    def notify(self, title: str, message: str) -> None:
        """Show a notification or status message."""


@runtime_checkable
class BackgroundRunner(Protocol):
    """Runs coroutines without the caller awaiting them."""

    def submit(self, coro: Coroutine[Any, Any, Any], name: str | None = None) -> Future:
        """Schedule the coroutine and return its future immediately."""

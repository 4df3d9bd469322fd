"""Applies configuration sections back to the live system.

Each item is confirmed, resolved to a value and written on its own. A
failing item is recorded and the next one is attempted.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Union

from .applier import SettingApplier
from .catalog import CompatibleSettingsFilter
from .config_model import ImportOptions
from .errors import SettingApplyError
from .handlers import PLAN_GUID_KEY, PLAN_NAME_KEY
from .models import InputType, SettingDefinition, SettingKind
from .schema import ConfigSection, ConfigurationItem

logger = logging.getLogger(__name__)

ConfirmationResult = tuple[bool, bool]
ConfirmationHandler = Callable[
    [str, Any, SettingDefinition],
    Union[ConfirmationResult, Awaitable[ConfirmationResult]],
]


class ItemStatus(str, Enum):
    APPLIED = "applied"
    SKIPPED = "skipped"
    DECLINED = "declined"
    FAILED = "failed"


@dataclass(frozen=True)
class ItemResult:
    setting_id: str | None
    status: ItemStatus
    message: str | None = None


@dataclass
class SectionResult:
    feature_key: str
    items: list[ItemResult] = field(default_factory=list)

    def count(self, status: ItemStatus) -> int:
        return sum(1 for r in self.items if r.status is status)

    @property
    def success(self) -> bool:
        return not any(r.status in (ItemStatus.FAILED, ItemStatus.DECLINED) for r in self.items)


class ApplicationBridge:
    def __init__(self, settings_filter: CompatibleSettingsFilter, applier: SettingApplier):
        self._filter = settings_filter
        self._applier = applier

    async def apply_configuration_section(
        self,
        section: ConfigSection,
        feature_key: str,
        confirmation_handler: ConfirmationHandler | None = None,
    ) -> bool:
        """Apply a section; True when no item failed or was declined."""
        result = await self.apply_section_detailed(section, feature_key, confirmation_handler)
        return result.success

    async def apply_section_detailed(
        self,
        section: ConfigSection,
        feature_key: str,
        confirmation_handler: ConfirmationHandler | None = None,
        on_item_applied: Callable[[str], None] | None = None,
    ) -> SectionResult:
        result = SectionResult(feature_key)
        for item in section.items:
            item_result = await self._apply_item(item, feature_key, confirmation_handler)
            result.items.append(item_result)
            if item_result.status is ItemStatus.APPLIED and on_item_applied is not None:
                on_item_applied(item_result.setting_id)

        logger.info(
            "%s: %d applied, %d skipped, %d declined, %d failed",
            feature_key,
            result.count(ItemStatus.APPLIED),
            result.count(ItemStatus.SKIPPED),
            result.count(ItemStatus.DECLINED),
            result.count(ItemStatus.FAILED),
        )
        return result

    async def _apply_item(
        self,
        item: ConfigurationItem,
        feature_key: str,
        confirmation_handler: ConfirmationHandler | None,
    ) -> ItemResult:
        if not item.id:
            logger.warning("%s: item %r has no Id", feature_key, item.name)
            return ItemResult(None, ItemStatus.FAILED, "Item has no Id")

        definition = self._filter.find_setting(item.id)
        if definition is None:
            logger.info("%s: %s is not available on this system, skipping", feature_key, item.id)
            return ItemResult(item.id, ItemStatus.SKIPPED, "Not available on this system")

        try:
            value = resolve_item_value(item, definition)

            confirmed, auxiliary = True, True
            if confirmation_handler is not None:
                answer = confirmation_handler(item.id, value, definition)
                if inspect.isawaitable(answer):
                    answer = await answer
                confirmed, auxiliary = answer
            if not confirmed:
                logger.info("%s: %s declined", feature_key, item.id)
                return ItemResult(item.id, ItemStatus.DECLINED)

            await asyncio.to_thread(self._applier.apply, definition, value, auxiliary)
        except Exception as e:
            logger.error("%s: failed to apply %s: %s", feature_key, item.id, e)
            return ItemResult(item.id, ItemStatus.FAILED, str(e))

        return ItemResult(item.id, ItemStatus.APPLIED)


def resolve_item_value(item: ConfigurationItem, definition: SettingDefinition) -> Any:
    """Value to hand to the applier for an item.

    Raises:
        SettingApplyError: The item carries no usable state.
    """
    if definition.input_type is InputType.TOGGLE:
        if item.is_selected is None:
            raise SettingApplyError(f"{item.id}: Toggle item without IsSelected")
        return bool(item.is_selected)

    if definition.kind is SettingKind.POWER_PLAN:
        if not item.power_plan_guid and not item.power_plan_name:
            raise SettingApplyError(f"{item.id}: power plan item without PowerPlanGuid or PowerPlanName")
        return {PLAN_GUID_KEY: item.power_plan_guid, PLAN_NAME_KEY: item.power_plan_name}

    if item.custom_state_values is not None:
        return dict(item.custom_state_values)
    if item.power_settings is not None:
        return dict(item.power_settings)
    if item.selected_index is not None:
        return item.selected_index
    raise SettingApplyError(f"{item.id}: Selection item without SelectedIndex or CustomStateValues")


# Items whose auxiliary flag comes from the run options
_AUXILIARY_OPTIONS: dict[str, str] = {
    "theme-mode-windows": "apply_theme_wallpaper",
    "taskbar-clean": "apply_clean_taskbar",
    "start-menu-clean-10": "apply_clean_start_menu",
    "start-menu-clean-11": "apply_clean_start_menu",
}


def build_import_confirmation_handler(options: ImportOptions) -> ConfirmationHandler:
    """Confirm every item without prompting; cosmetic side effects follow ``options``."""

    def _confirm(setting_id: str, value: Any, definition: SettingDefinition) -> ConfirmationResult:
        option = _AUXILIARY_OPTIONS.get(setting_id)
        if option is None:
            return True, True
        return True, bool(getattr(options, option))

    return _confirm

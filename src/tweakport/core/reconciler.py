"""Drops configuration items that cannot apply to the current host."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .catalog import SettingCatalog, is_setting_compatible
from .models import HostInfo
from .schema import (
    EXTERNAL_APPS_SECTION,
    WINDOWS_APPS_SECTION,
    ConfigSection,
    FeatureGroupSection,
    UnifiedConfigurationFile,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IncompatibleItem:
    setting_id: str
    name: str
    feature_id: str

    def describe(self) -> str:
        return f"{self.name} ({self.feature_id})"


class CompatibilityReconciler:
    """Partitions items into kept and dropped against the full catalog.

    An item is dropped only when its id is known and the definition is
    incompatible with the host. Unknown ids are kept.
    """

    def __init__(self, catalog: SettingCatalog):
        self._catalog = catalog

    def _is_dropped(self, setting_id: str | None, host: HostInfo) -> bool:
        if not setting_id:
            return False
        definition = self._catalog.find(setting_id)
        if definition is None:
            return False
        return not is_setting_compatible(definition, host)

    def partition(self, config: UnifiedConfigurationFile, host: HostInfo) -> list[IncompatibleItem]:
        """Every item the filter would remove, in file order."""
        dropped: list[IncompatibleItem] = []
        for group in config.feature_groups().values():
            for feature_id, section in group.features.items():
                for item in section.items:
                    if self._is_dropped(item.id, host):
                        dropped.append(IncompatibleItem(item.id, item.name or item.id, feature_id))
        return dropped

    def detect_incompatible(self, config: UnifiedConfigurationFile, host: HostInfo) -> list[str]:
        return [entry.describe() for entry in self.partition(config, host)]

    def filter(self, config: UnifiedConfigurationFile, host: HostInfo) -> UnifiedConfigurationFile:
        """Return a copy of ``config`` without incompatible items."""
        return config.model_copy(
            update={
                "optimize": self._filter_group(config.optimize, host),
                "customize": self._filter_group(config.customize, host),
                "windows_apps": config.windows_apps.model_copy(deep=True),
                "external_apps": config.external_apps.model_copy(deep=True),
            }
        )

    def _filter_group(self, group: FeatureGroupSection, host: HostInfo) -> FeatureGroupSection:
        features = {}
        for feature_id, section in group.features.items():
            kept = [item.model_copy(deep=True) for item in section.items if not self._is_dropped(item.id, host)]
            features[feature_id] = ConfigSection(is_included=section.is_included, items=kept)
        return FeatureGroupSection(is_included=group.is_included, features=features)


def summarize_sections(config: UnifiedConfigurationFile) -> dict[str, int]:
    """Item counts per selectable section, e.g. ``{"Optimize_power": 3}``."""
    counts: dict[str, int] = {}
    for group_name, group in config.feature_groups().items():
        if not group.is_included:
            continue
        counts[group_name] = group.item_count()
        for feature_id, section in group.features.items():
            if section.is_included:
                counts[f"{group_name}_{feature_id}"] = len(section.items)
    for name, section in ((WINDOWS_APPS_SECTION, config.windows_apps), (EXTERNAL_APPS_SECTION, config.external_apps)):
        if section.is_included:
            counts[name] = len(section.items)
    return counts

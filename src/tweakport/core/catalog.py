"""Setting catalog and the host compatibility filter.

The catalog is built once from static feature modules and passed to every
component that needs it. ``is_setting_compatible`` is the only place that
decides whether a definition applies to a host; the filter, the exporter and
the reconciler all call it.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Iterable, Mapping

from .errors import CatalogError
from .models import FeatureModule, HostInfo, SettingDefinition
from .ports import HostDescriptor

logger = logging.getLogger(__name__)


class FeatureCategory(str, Enum):
    OPTIMIZE = "Optimize"
    CUSTOMIZE = "Customize"


def is_setting_compatible(definition: SettingDefinition, host: HostInfo) -> bool:
    if definition.is_windows10_only and host.is_windows11:
        return False
    if definition.is_windows11_only and not host.is_windows11:
        return False

    build = host.build_number
    if definition.minimum_build_number is not None and build < definition.minimum_build_number:
        return False
    if definition.maximum_build_number is not None and build > definition.maximum_build_number:
        return False

    if definition.supported_build_ranges:
        return any(low <= build <= high for low, high in definition.supported_build_ranges)
    return True


def describe_host(host: HostDescriptor) -> HostInfo:
    return HostInfo(is_windows11=bool(host.is_windows11()), build_number=int(host.get_build_number()))


class SettingCatalog:
    """Immutable registry of feature modules with a global id index."""

    def __init__(
        self,
        modules: Iterable[FeatureModule],
        categories: Mapping[str, FeatureCategory],
    ):
        self._modules: dict[str, FeatureModule] = {}
        self._by_id: dict[str, SettingDefinition] = {}
        self._feature_of: dict[str, str] = {}

        for module in modules:
            if module.id in self._modules:
                raise CatalogError(f"Duplicate feature module id: {module.id}")
            self._modules[module.id] = module
            for definition in module.settings:
                if definition.id in self._by_id:
                    raise CatalogError(
                        f"Duplicate setting id {definition.id!r} in {module.id!r} "
                        f"(already defined in {self._feature_of[definition.id]!r})"
                    )
                self._by_id[definition.id] = definition
                self._feature_of[definition.id] = module.id

        self._categories = dict(categories)

    @property
    def feature_ids(self) -> tuple[str, ...]:
        return tuple(self._modules)

    @property
    def modules(self) -> tuple[FeatureModule, ...]:
        return tuple(self._modules.values())

    def settings_for(self, feature_id: str) -> tuple[SettingDefinition, ...]:
        module = self._modules.get(feature_id)
        return module.settings if module else ()

    def find(self, setting_id: str) -> SettingDefinition | None:
        return self._by_id.get(setting_id)

    def feature_of(self, setting_id: str) -> str | None:
        return self._feature_of.get(setting_id)

    def category_of(self, feature_id: str) -> FeatureCategory | None:
        return self._categories.get(feature_id)

    def features_in(self, category: FeatureCategory) -> tuple[str, ...]:
        return tuple(f for f in self._modules if self._categories.get(f) is category)

    def __len__(self) -> int:
        return len(self._by_id)

    def __contains__(self, setting_id: object) -> bool:
        return setting_id in self._by_id


class CompatibleSettingsFilter:
    """Per-feature view of the catalog restricted to the running host.

    Results are computed on first use and cached; the host does not change
    while the process runs.
    """

    def __init__(self, catalog: SettingCatalog, host: HostDescriptor):
        self._catalog = catalog
        self._host = host
        self._host_info: HostInfo | None = None
        self._filtered: dict[str, list[SettingDefinition]] = {}
        self._filter_enabled = True

    @property
    def catalog(self) -> SettingCatalog:
        return self._catalog

    @property
    def host_info(self) -> HostInfo:
        if self._host_info is None:
            self._host_info = describe_host(self._host)
            logger.info(
                "Host: Windows %s, build %d",
                "11" if self._host_info.is_windows11 else "10",
                self._host_info.build_number,
            )
        return self._host_info

    def set_filter_enabled(self, enabled: bool) -> None:
        """Disable to expose every definition regardless of host."""
        self._filter_enabled = enabled

    def get_filtered_settings(self, feature_id: str) -> list[SettingDefinition]:
        if not self._filter_enabled:
            return list(self._catalog.settings_for(feature_id))

        cached = self._filtered.get(feature_id)
        if cached is not None:
            return list(cached)

        try:
            host = self.host_info
            result = [
                d for d in self._catalog.settings_for(feature_id) if is_setting_compatible(d, host)
            ]
        except Exception as e:
            logger.error("Failed to filter settings for %s: %s", feature_id, e)
            return []

        self._filtered[feature_id] = result
        return list(result)

    def get_all_filtered_settings(self) -> dict[str, list[SettingDefinition]]:
        return {feature_id: self.get_filtered_settings(feature_id) for feature_id in self._catalog.feature_ids}

    def find_setting(self, setting_id: str) -> SettingDefinition | None:
        """Look up a definition that is valid on this host."""
        feature_id = self._catalog.feature_of(setting_id)
        if feature_id is None:
            return None
        for definition in self.get_filtered_settings(feature_id):
            if definition.id == setting_id:
                return definition
        return None

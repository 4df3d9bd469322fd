"""Built-in setting catalog."""

from __future__ import annotations

from ..core.catalog import FeatureCategory, SettingCatalog
from . import explorer, notifications, power, privacy, sound, start_menu, taskbar, theme, updates

FEATURE_MODULES = (
    power.MODULE,
    privacy.MODULE,
    sound.MODULE,
    notifications.MODULE,
    updates.MODULE,
    taskbar.MODULE,
    start_menu.MODULE,
    explorer.MODULE,
    theme.MODULE,
)

FEATURE_CATEGORIES = {
    power.FEATURE_ID: FeatureCategory.OPTIMIZE,
    privacy.FEATURE_ID: FeatureCategory.OPTIMIZE,
    sound.FEATURE_ID: FeatureCategory.OPTIMIZE,
    notifications.FEATURE_ID: FeatureCategory.OPTIMIZE,
    updates.FEATURE_ID: FeatureCategory.OPTIMIZE,
    taskbar.FEATURE_ID: FeatureCategory.CUSTOMIZE,
    start_menu.FEATURE_ID: FeatureCategory.CUSTOMIZE,
    explorer.FEATURE_ID: FeatureCategory.CUSTOMIZE,
    theme.FEATURE_ID: FeatureCategory.CUSTOMIZE,
}


def build_default_catalog() -> SettingCatalog:
    return SettingCatalog(FEATURE_MODULES, FEATURE_CATEGORIES)

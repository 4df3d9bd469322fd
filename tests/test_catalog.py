import pytest

from tweakport.catalog import FEATURE_CATEGORIES, build_default_catalog
from tweakport.core.catalog import (
    CompatibleSettingsFilter,
    FeatureCategory,
    SettingCatalog,
    is_setting_compatible,
)
from tweakport.core.errors import CatalogError
from tweakport.core.models import FeatureModule, HostInfo, InputType, SettingDefinition

from conftest import FakeHost


def _toggle(setting_id, **kwargs):
    return SettingDefinition(id=setting_id, name=setting_id, input_type=InputType.TOGGLE, **kwargs)


WIN10 = HostInfo(is_windows11=False, build_number=19045)
WIN11 = HostInfo(is_windows11=True, build_number=22631)
WIN11_24H2 = HostInfo(is_windows11=True, build_number=26100)


def test_os_version_flags():
    assert not is_setting_compatible(_toggle("a", is_windows10_only=True), WIN11)
    assert is_setting_compatible(_toggle("a", is_windows10_only=True), WIN10)
    assert not is_setting_compatible(_toggle("b", is_windows11_only=True), WIN10)
    assert is_setting_compatible(_toggle("b", is_windows11_only=True), WIN11)


def test_build_bounds_are_inclusive():
    definition = _toggle("a", minimum_build_number=22631, maximum_build_number=26100)
    assert is_setting_compatible(definition, WIN11)
    assert is_setting_compatible(definition, WIN11_24H2)
    assert not is_setting_compatible(definition, HostInfo(True, 22621))
    assert not is_setting_compatible(definition, HostInfo(True, 26200))


def test_build_ranges():
    definition = _toggle("a", supported_build_ranges=((22631, 22635), (26100, 29999)))
    assert is_setting_compatible(definition, WIN11)
    assert not is_setting_compatible(definition, HostInfo(True, 22636))
    assert is_setting_compatible(definition, WIN11_24H2)
    assert not is_setting_compatible(definition, HostInfo(True, 30000))


def test_duplicate_setting_ids_are_rejected():
    modules = [
        FeatureModule("one", "One", (_toggle("dup"),)),
        FeatureModule("two", "Two", (_toggle("dup"),)),
    ]
    with pytest.raises(CatalogError, match="dup"):
        SettingCatalog(modules, {})


def test_duplicate_feature_ids_are_rejected():
    modules = [FeatureModule("one", "One", (_toggle("a"),)), FeatureModule("one", "Again", (_toggle("b"),))]
    with pytest.raises(CatalogError):
        SettingCatalog(modules, {})


def test_default_catalog_builds_with_unique_ids():
    catalog = build_default_catalog()
    assert len(catalog) > 30
    assert set(catalog.feature_ids) == set(FEATURE_CATEGORIES)
    assert catalog.feature_of("taskbar-alignment") == "taskbar"
    assert "power-plan-selection" in catalog
    assert catalog.features_in(FeatureCategory.OPTIMIZE)[0] == "power"


def test_filter_hides_incompatible_settings():
    catalog = build_default_catalog()
    win10 = CompatibleSettingsFilter(catalog, FakeHost(windows11=False, build=19045))
    ids = {d.id for d in win10.get_filtered_settings("taskbar")}
    assert "taskbar-news-interests" in ids
    assert "taskbar-alignment" not in ids
    assert win10.find_setting("taskbar-alignment") is None

    win10.set_filter_enabled(False)
    ids = {d.id for d in win10.get_filtered_settings("taskbar")}
    assert "taskbar-alignment" in ids


def test_filter_unknown_feature_is_empty():
    settings_filter = CompatibleSettingsFilter(build_default_catalog(), FakeHost())
    assert settings_filter.get_filtered_settings("nope") == []
    assert settings_filter.find_setting("nope") is None


def test_filter_returns_empty_when_host_fails():
    class _BrokenHost(FakeHost):
        def get_build_number(self):
            raise OSError("no registry")

    settings_filter = CompatibleSettingsFilter(build_default_catalog(), _BrokenHost())
    assert settings_filter.get_filtered_settings("privacy") == []


def test_filter_caches_per_feature():
    host = FakeHost()
    settings_filter = CompatibleSettingsFilter(build_default_catalog(), host)
    first = settings_filter.get_filtered_settings("privacy")
    host.build = 10
    assert [d.id for d in settings_filter.get_filtered_settings("privacy")] == [d.id for d in first]

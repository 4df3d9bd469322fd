import asyncio

import pytest

from tweakport.core.applier import SettingApplier
from tweakport.core.bridge import (
    ApplicationBridge,
    ItemStatus,
    build_import_confirmation_handler,
    resolve_item_value,
)
from tweakport.core.catalog import CompatibleSettingsFilter, SettingCatalog
from tweakport.core.config_model import ImportOptions
from tweakport.core.errors import SettingApplyError
from tweakport.core.handlers import build_handlers
from tweakport.core.models import FeatureModule, InputType, PowerPlan, RegistrySetting, SettingDefinition, SettingKind
from tweakport.core.schema import ConfigSection, ConfigurationItem

from conftest import FakeActions, FakeHost, FakePower, FakeStore

KEY = r"HKEY_CURRENT_USER\Software\Test"


def _toggle(n):
    return SettingDefinition(
        id=f"s{n}",
        name=f"Setting {n}",
        input_type=InputType.TOGGLE,
        registry_settings=(RegistrySetting(KEY, f"V{n}", enabled_value=1, disabled_value=0),),
    )


PLAN = SettingDefinition(id="plan", name="Plan", input_type=InputType.SELECTION, kind=SettingKind.POWER_PLAN)
WIN11_ONLY = SettingDefinition(
    id="w11",
    name="Windows 11 only",
    input_type=InputType.TOGGLE,
    is_windows11_only=True,
    registry_settings=(RegistrySetting(KEY, "W11", enabled_value=1, disabled_value=0),),
)


def _bridge(store, power=None, host=None):
    catalog = SettingCatalog(
        [FeatureModule("test", "Test", tuple(_toggle(n) for n in range(1, 6)) + (PLAN, WIN11_ONLY))], {}
    )
    actions = FakeActions()
    applier = SettingApplier(build_handlers(store, power or FakePower(), actions), actions)
    return ApplicationBridge(CompatibleSettingsFilter(catalog, host or FakeHost()), applier)


def _section(*items):
    return ConfigSection(is_included=True, items=list(items))


def test_failing_item_does_not_stop_the_section():
    store = FakeStore()
    store.fail_on.add((KEY, "V3"))
    bridge = _bridge(store)
    section = _section(*(ConfigurationItem(id=f"s{n}", is_selected=True) for n in range(1, 6)))

    result = asyncio.run(bridge.apply_section_detailed(section, "test"))

    assert [r.status for r in result.items] == [
        ItemStatus.APPLIED,
        ItemStatus.APPLIED,
        ItemStatus.FAILED,
        ItemStatus.APPLIED,
        ItemStatus.APPLIED,
    ]
    assert store.values[(KEY, "V4")] == 1
    assert store.values[(KEY, "V5")] == 1
    assert not result.success
    assert asyncio.run(bridge.apply_configuration_section(section, "test")) is False


def test_missing_and_unavailable_items():
    store = FakeStore()
    bridge = _bridge(store, host=FakeHost(windows11=False, build=19045))
    section = _section(
        ConfigurationItem(name="no id", is_selected=True),
        ConfigurationItem(id="w11", is_selected=True),
        ConfigurationItem(id="unknown", is_selected=True),
    )

    result = asyncio.run(bridge.apply_section_detailed(section, "test"))

    assert [r.status for r in result.items] == [ItemStatus.FAILED, ItemStatus.SKIPPED, ItemStatus.SKIPPED]
    assert store.writes == []


def test_empty_section_succeeds():
    assert asyncio.run(_bridge(FakeStore()).apply_configuration_section(_section(), "test")) is True


def test_declined_item_is_not_written():
    store = FakeStore()
    bridge = _bridge(store)
    applied = []

    async def _confirm(setting_id, value, definition):
        return setting_id != "s2", True

    result = asyncio.run(
        bridge.apply_section_detailed(
            _section(ConfigurationItem(id="s1", is_selected=True), ConfigurationItem(id="s2", is_selected=True)),
            "test",
            _confirm,
            on_item_applied=applied.append,
        )
    )

    assert result.items[1].status is ItemStatus.DECLINED
    assert (KEY, "V2") not in store.values
    assert applied == ["s1"]
    assert not result.success


def test_power_plan_falls_back_to_name():
    power = FakePower(plans=[PowerPlan("aaaa", "Balanced", True), PowerPlan("local-guid", "Gaming")])
    bridge = _bridge(FakeStore(), power=power)
    item = ConfigurationItem(
        id="plan", input_type=InputType.SELECTION, power_plan_guid="other-guid", power_plan_name="Gaming"
    )

    assert asyncio.run(bridge.apply_configuration_section(_section(item), "power"))
    assert power.activated == ["local-guid"]


def test_power_plan_without_match_fails():
    bridge = _bridge(FakeStore())
    item = ConfigurationItem(id="plan", input_type=InputType.SELECTION, power_plan_guid="x", power_plan_name="y")

    result = asyncio.run(bridge.apply_section_detailed(_section(item), "power"))

    assert result.items[0].status is ItemStatus.FAILED
    assert "No power plan" in result.items[0].message


def test_resolve_item_value():
    selection = SettingDefinition(id="sel", name="Sel", input_type=InputType.SELECTION)
    assert resolve_item_value(ConfigurationItem(id="s1", is_selected=True), _toggle(1)) is True
    assert resolve_item_value(
        ConfigurationItem(id="sel", input_type=InputType.SELECTION, selected_index=2), selection
    ) == 2
    assert resolve_item_value(
        ConfigurationItem(id="sel", input_type=InputType.SELECTION, custom_state_values={"A": 5}), selection
    ) == {"A": 5}
    with pytest.raises(SettingApplyError):
        resolve_item_value(ConfigurationItem(id="sel", input_type=InputType.SELECTION), selection)
    with pytest.raises(SettingApplyError):
        resolve_item_value(ConfigurationItem(id="plan", input_type=InputType.SELECTION), PLAN)


def test_confirmation_handler_follows_options():
    options = ImportOptions(apply_clean_taskbar=True)
    confirm = build_import_confirmation_handler(options)
    definition = _toggle(1)

    assert confirm("taskbar-clean", True, definition) == (True, True)
    assert confirm("theme-mode-windows", 0, definition) == (True, False)
    assert confirm("start-menu-clean-11", True, definition) == (True, False)
    assert confirm("s1", True, definition) == (True, True)

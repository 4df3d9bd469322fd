import pytest

from tweakport.core.applier import SettingApplier
from tweakport.core.errors import PowerPlanNotFoundError, SettingApplyError
from tweakport.core.handlers import build_handlers, match_power_plan
from tweakport.core.models import (
    CUSTOM_STATE_INDEX,
    InputType,
    LinkedLogic,
    PowerCfgSetting,
    PowerModeSupport,
    PowerPlan,
    RegistrySetting,
    RegistryValueKind,
    SelectionMetadata,
    SettingDefinition,
    SettingKind,
)

from conftest import FakeActions, FakePower, FakeProcess, FakeStore

HKCU = r"HKEY_CURRENT_USER\Software\Test"
HKLM = r"HKEY_LOCAL_MACHINE\SOFTWARE\Test"


def _applier(store=None, power=None, process=None):
    actions = FakeActions()
    store = store if store is not None else FakeStore()
    power = power if power is not None else FakePower()
    applier = SettingApplier(build_handlers(store, power, actions), actions, process)
    return applier, store, power, actions


def test_toggle_reads_and_writes_enabled_values():
    definition = SettingDefinition(
        id="t",
        name="T",
        input_type=InputType.TOGGLE,
        registry_settings=(RegistrySetting(HKCU, "Flag", enabled_value=1, disabled_value=0, default_value=1),),
    )
    applier, store, _, _ = _applier()

    assert applier.read(definition).is_enabled  # default applies when absent

    applier.apply(definition, False)
    assert store.values[(HKCU, "Flag")] == 0
    state = applier.read(definition)
    assert not state.is_enabled
    assert state.raw_values["Flag"] == 0


def test_toggle_absence_means_enabled():
    definition = SettingDefinition(
        id="t",
        name="T",
        input_type=InputType.TOGGLE,
        registry_settings=(RegistrySetting(HKCU, "Disable", disabled_value=1),),
    )
    applier, store, _, _ = _applier()
    assert applier.read(definition).is_enabled

    applier.apply(definition, False)
    assert store.values[(HKCU, "Disable")] == 1
    applier.apply(definition, True)
    assert (HKCU, "Disable") not in store.values


def test_linked_toggle_logic():
    locations = (
        RegistrySetting(HKCU, "A", enabled_value=1, disabled_value=0),
        RegistrySetting(HKCU, "B", enabled_value=1, disabled_value=0),
    )
    store = FakeStore({(HKCU, "A"): 1, (HKCU, "B"): 0})
    applier, _, _, _ = _applier(store)

    def _state(logic):
        definition = SettingDefinition(
            id="t", name="T", input_type=InputType.TOGGLE, linked=True, linked_logic=logic, registry_settings=locations
        )
        return applier.read(definition).is_enabled

    assert _state(LinkedLogic.ANY)
    assert not _state(LinkedLogic.ALL)
    assert _state(LinkedLogic.PRIMARY)


def test_linked_write_is_rolled_back_on_failure():
    definition = SettingDefinition(
        id="t",
        name="T",
        input_type=InputType.TOGGLE,
        linked=True,
        registry_settings=(
            RegistrySetting(HKCU, "A", enabled_value=1, disabled_value=0),
            RegistrySetting(HKLM, "B", enabled_value=1, disabled_value=0),
        ),
    )
    store = FakeStore({(HKCU, "A"): 0})
    store.fail_on.add((HKLM, "B"))
    applier, _, _, _ = _applier(store)

    with pytest.raises(OSError):
        applier.apply(definition, True)
    assert store.values[(HKCU, "A")] == 0


def test_key_existence_setting():
    definition = SettingDefinition(
        id="k",
        name="K",
        input_type=InputType.TOGGLE,
        registry_settings=(RegistrySetting(HKCU + r"\Marker", None, enabled_value=True),),
    )
    applier, store, _, _ = _applier()
    assert not applier.read(definition).is_enabled

    applier.apply(definition, True)
    assert store.key_exists(HKCU + r"\Marker")
    state = applier.read(definition)
    assert state.is_enabled
    assert state.raw_values["KeyExists"] is True

    applier.apply(definition, False)
    assert not store.key_exists(HKCU + r"\Marker")


def test_machine_wide_location_wins_for_shared_field():
    definition = SettingDefinition(
        id="s",
        name="S",
        input_type=InputType.SELECTION,
        registry_settings=(RegistrySetting(HKCU, "Mode"), RegistrySetting(HKLM, "Mode")),
        selection=SelectionMetadata(("Zero", "One"), ({"Mode": 0}, {"Mode": 1})),
    )
    store = FakeStore({(HKCU, "Mode"): 0, (HKLM, "Mode"): 1})
    applier, _, _, _ = _applier(store)
    assert applier.read(definition).current_value == 1


def test_bitmask_toggle_patches_one_byte():
    definition = SettingDefinition(
        id="b",
        name="B",
        input_type=InputType.TOGGLE,
        registry_settings=(
            RegistrySetting(
                HKCU,
                "Settings",
                value_type=RegistryValueKind.BINARY,
                binary_byte_index=2,
                bit_mask=0x01,
                enabled_value=True,
                disabled_value=False,
            ),
        ),
    )
    store = FakeStore({(HKCU, "Settings"): bytes([0xAA, 0xBB, 0x02, 0xCC])})
    applier, _, _, _ = _applier(store)
    assert not applier.read(definition).is_enabled

    applier.apply(definition, True)
    assert store.values[(HKCU, "Settings")] == bytes([0xAA, 0xBB, 0x03, 0xCC])
    assert applier.read(definition).is_enabled


def test_bitmask_toggle_on_missing_blob():
    definition = SettingDefinition(
        id="b",
        name="B",
        input_type=InputType.TOGGLE,
        registry_settings=(
            RegistrySetting(
                HKCU,
                "Settings",
                value_type=RegistryValueKind.BINARY,
                binary_byte_index=8,
                bit_mask=0x01,
                enabled_value=True,
                disabled_value=False,
            ),
        ),
    )
    store = FakeStore()
    applier, _, _, _ = _applier(store)
    assert not applier.read(definition).is_enabled

    # Already reads as disabled: nothing to write
    applier.apply(definition, False)
    assert store.values == {}

    with pytest.raises(SettingApplyError, match="cannot patch byte 8"):
        applier.apply(definition, True)


def test_custom_selection_values_round_trip():
    definition = SettingDefinition(
        id="s",
        name="S",
        input_type=InputType.SELECTION,
        registry_settings=(RegistrySetting(HKCU, "A"), RegistrySetting(HKCU, "B")),
        selection=SelectionMetadata(("Off", "On"), ({"A": 0, "B": 0}, {"A": 1, "B": 1})),
    )
    store = FakeStore({(HKCU, "A"): 1, (HKCU, "B"): 0})
    applier, _, _, _ = _applier(store)

    state = applier.read(definition)
    assert state.current_value == CUSTOM_STATE_INDEX
    saved = dict(state.raw_values)

    applier.apply(definition, 1)
    assert applier.read(definition).current_value == 1

    applier.apply(definition, saved)
    assert store.values[(HKCU, "A")] == 1
    assert store.values[(HKCU, "B")] == 0


def test_selection_none_mapping_deletes_value():
    definition = SettingDefinition(
        id="s",
        name="S",
        input_type=InputType.SELECTION,
        registry_settings=(RegistrySetting(HKLM, "NoAutoUpdate"),),
        selection=SelectionMetadata(("Default", "Off"), ({"NoAutoUpdate": None}, {"NoAutoUpdate": 1})),
    )
    store = FakeStore({(HKLM, "NoAutoUpdate"): 1})
    applier, _, _, _ = _applier(store)
    applier.apply(definition, 0)
    assert (HKLM, "NoAutoUpdate") not in store.values
    assert applier.read(definition).current_value == 0


SLEEP = SettingDefinition(
    id="sleep",
    name="Sleep",
    input_type=InputType.SELECTION,
    powercfg_settings=(PowerCfgSetting("sub", "idle", PowerModeSupport.SEPARATE),),
    selection=SelectionMetadata(("Never", "5 min"), ({"PowerCfgValue": 0}, {"PowerCfgValue": 300})),
)


def test_separate_power_modes():
    power = FakePower(settings={("sub", "idle"): (300, 0)})
    applier, _, _, _ = _applier(power=power)

    state = applier.read(SLEEP)
    assert state.current_value == {"ACValue": 300, "DCValue": 0}

    applier.apply(SLEEP, {"ACIndex": 0, "DCIndex": 1})
    assert power.settings[("sub", "idle")] == (0, 300)

    applier.apply(SLEEP, {"ACValue": 120, "DCValue": 60})
    assert power.settings[("sub", "idle")] == (120, 60)


def test_power_plan_matches_guid_then_name():
    plans = [PowerPlan("{AAAA}", "Balanced", True), PowerPlan("bbbb", "Gaming")]
    assert match_power_plan(plans, "aaaa", None).name == "Balanced"
    assert match_power_plan(plans, "missing", "gaming").guid == "bbbb"
    assert match_power_plan(plans, "missing", "nope") is None


def test_power_plan_apply():
    definition = SettingDefinition(
        id="plan",
        name="Plan",
        input_type=InputType.SELECTION,
        kind=SettingKind.POWER_PLAN,
        selection=SelectionMetadata(("A",), ({"ActivePowerPlanGuid": "aaaa"},)),
    )
    power = FakePower(plans=[PowerPlan("aaaa", "Balanced", True), PowerPlan("bbbb", "Gaming")])
    applier, _, _, _ = _applier(power=power)

    applier.apply(definition, {"Guid": "cccc", "Name": "Gaming"})
    assert power.activated == ["bbbb"]

    with pytest.raises(PowerPlanNotFoundError):
        applier.apply(definition, {"Guid": "cccc", "Name": "Unknown"})


def test_action_runs_only_with_auxiliary():
    definition = SettingDefinition(
        id="clean", name="Clean", input_type=InputType.TOGGLE, kind=SettingKind.ACTION, auxiliary_action="clean-it"
    )
    applier, _, _, actions = _applier()

    applier.apply(definition, True, auxiliary=False)
    assert actions.calls == []
    # The option decides, not the value stored in the file
    applier.apply(definition, False)
    assert actions.calls == [("clean-it", "clean")]


def test_restart_is_queued_while_suppressed():
    definition = SettingDefinition(
        id="t",
        name="T",
        input_type=InputType.TOGGLE,
        restart_process="explorer",
        registry_settings=(RegistrySetting(HKCU, "Flag", enabled_value=1, disabled_value=0),),
    )
    process = FakeProcess()
    applier, _, _, _ = _applier(process=process)

    applier.suppress_restarts = True
    applier.apply(definition, True)
    assert applier.pending_restarts == {"explorer"}
    assert process.log == []

    applier.suppress_restarts = False
    applier.apply(definition, True)
    assert process.log == [("kill", "explorer"), ("start", "explorer")]

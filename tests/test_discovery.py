import asyncio

from tweakport.core.applier import SettingApplier
from tweakport.core.discovery import StateDiscoveryService
from tweakport.core.handlers import build_handlers
from tweakport.core.models import InputType, RegistrySetting, SettingDefinition

from conftest import FakeActions, FakePower, FakeStore

KEY = r"HKEY_CURRENT_USER\Software\Test"


def _toggle(setting_id, value_name):
    return SettingDefinition(
        id=setting_id,
        name=setting_id,
        input_type=InputType.TOGGLE,
        registry_settings=(RegistrySetting(KEY, value_name, enabled_value=1, disabled_value=0),),
    )


class _FlakyStore(FakeStore):
    def get_value(self, key_path, value_name):
        if value_name == "Broken":
            raise PermissionError("access denied")
        return super().get_value(key_path, value_name)


def test_one_failing_definition_does_not_fail_the_batch():
    store = _FlakyStore({(KEY, "Good"): 1, (KEY, "Other"): 0})
    actions = FakeActions()
    service = StateDiscoveryService(SettingApplier(build_handlers(store, FakePower(), actions), actions), concurrency=2)
    definitions = [_toggle("good", "Good"), _toggle("broken", "Broken"), _toggle("other", "Other")]

    states = asyncio.run(service.get_setting_states(definitions))

    assert list(states) == ["good", "broken", "other"]
    assert states["good"].success and states["good"].is_enabled
    assert not states["broken"].success
    assert "access denied" in states["broken"].error_message
    assert states["other"].success and not states["other"].is_enabled


def test_discovery_never_writes():
    store = FakeStore({(KEY, "Good"): 1})
    actions = FakeActions()
    service = StateDiscoveryService(SettingApplier(build_handlers(store, FakePower(), actions), actions))

    asyncio.run(service.get_setting_state(_toggle("good", "Good")))

    assert store.writes == []
    assert actions.calls == []


def test_empty_input():
    actions = FakeActions()
    service = StateDiscoveryService(SettingApplier(build_handlers(FakeStore(), FakePower(), actions), actions))
    assert asyncio.run(service.get_setting_states([])) == {}

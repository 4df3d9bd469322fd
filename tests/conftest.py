from __future__ import annotations

from concurrent.futures import Future
from types import SimpleNamespace

import pytest

from tweakport.catalog import build_default_catalog
from tweakport.core.applier import SettingApplier
from tweakport.core.bridge import ApplicationBridge
from tweakport.core.catalog import CompatibleSettingsFilter
from tweakport.core.config_model import EngineSettings
from tweakport.core.controller import ApplyOrchestrator, ImportController
from tweakport.core.discovery import StateDiscoveryService
from tweakport.core.handlers import build_handlers
from tweakport.core.models import PowerPlan
from tweakport.core.ports import (
    ActionRunner,
    AppCatalog,
    BackgroundRunner,
    HostDescriptor,
    PowerPlanService,
    ProcessControl,
    SettingsStore,
    UIFeedback,
)
from tweakport.core.reconciler import CompatibilityReconciler
from tweakport.core.serializer import ConfigurationExporter
from tweakport.core.shell import ShellController


class FakeStore(SettingsStore):
    def __init__(self, values=None, keys=None):
        self.values: dict[tuple[str, str], object] = dict(values or {})
        self.keys: set[str] = set(keys or ())
        self.fail_on: set[tuple[str, str]] = set()
        self.writes: list[tuple[str, str | None, object]] = []

    def get_value(self, key_path, value_name):
        return self.values.get((key_path, value_name))

    def set_value(self, key_path, value_name, value, value_type):
        if (key_path, value_name) in self.fail_on:
            raise OSError(f"access denied: {key_path}\\{value_name}")
        self.keys.add(key_path)
        self.values[(key_path, value_name)] = value
        self.writes.append((key_path, value_name, value))

    def key_exists(self, key_path):
        return key_path in self.keys or any(k == key_path for k, _ in self.values)

    def value_exists(self, key_path, value_name):
        return (key_path, value_name) in self.values

    def delete_value(self, key_path, value_name):
        if (key_path, value_name) in self.fail_on:
            raise OSError(f"access denied: {key_path}\\{value_name}")
        self.values.pop((key_path, value_name), None)
        self.writes.append((key_path, value_name, None))

    def create_key(self, key_path):
        self.keys.add(key_path)
        self.writes.append((key_path, None, True))

    def delete_key(self, key_path):
        self.keys.discard(key_path)
        for key in [k for k in self.values if k[0] == key_path]:
            del self.values[key]
        self.writes.append((key_path, None, None))


class FakeHost(HostDescriptor):
    def __init__(self, windows11=True, build=22631):
        self.windows11 = windows11
        self.build = build

    def is_windows11(self):
        return self.windows11

    def get_build_number(self):
        return self.build


class FakePower(PowerPlanService):
    def __init__(self, plans=None, settings=None):
        self.plans = list(plans or [PowerPlan("381b4222-f694-41f0-9685-ff5bb260df2e", "Balanced", True)])
        self.settings: dict[tuple[str, str], tuple[int | None, int | None]] = dict(settings or {})
        self.activated: list[str] = []
        self.writes: list[tuple[str, str, int | None, int | None]] = []

    def list_plans(self):
        return list(self.plans)

    def set_active_plan(self, guid):
        self.activated.append(guid)
        self.plans = [PowerPlan(p.guid, p.name, p.guid == guid) for p in self.plans]

    def read_setting(self, subgroup_guid, setting_guid):
        return self.settings.get((subgroup_guid, setting_guid), (None, None))

    def write_setting(self, subgroup_guid, setting_guid, ac_value=None, dc_value=None):
        self.writes.append((subgroup_guid, setting_guid, ac_value, dc_value))
        ac, dc = self.settings.get((subgroup_guid, setting_guid), (None, None))
        self.settings[(subgroup_guid, setting_guid)] = (
            ac if ac_value is None else ac_value,
            dc if dc_value is None else dc_value,
        )


class FakeActions(ActionRunner):
    def __init__(self):
        self.calls: list[tuple[str, str]] = []

    def run(self, action, definition):
        self.calls.append((action, definition.id))


class FakeProcess(ProcessControl):
    """Shell stand-in. After a kill it comes back on its own after
    ``restart_after`` polls, or never when that is None."""

    def __init__(self, running=True, restart_after=0, log=None):
        self.running = running
        self.restart_after = restart_after
        self.log = log if log is not None else []
        self._polls_since_kill = 0
        self._killed = False

    def is_process_running(self, name):
        if self._killed and not self.running and self.restart_after is not None:
            self._polls_since_kill += 1
            if self._polls_since_kill > self.restart_after:
                self.running = True
        return self.running

    def kill_process(self, name):
        self.log.append(("kill", name))
        self.running = False
        self._killed = True
        self._polls_since_kill = 0

    def start_process(self, name):
        self.log.append(("start", name))
        self.running = True


class FakeUI(UIFeedback):
    def __init__(self):
        self.calls: list[tuple[str, str]] = []

    def notify(self, title, message):
        self.calls.append((title, message))


class FakeApps(AppCatalog):
    def __init__(self, items=None):
        self.items = list(items or [])
        self.selected = {}
        self.removed = []
        self.installed = []

    def list_items(self, kind):
        return [i for i in self.items if i.kind is kind]

    def select(self, kind, items):
        self.selected[kind] = list(items)

    async def install(self, kind, items):
        self.installed.extend(items)

    async def remove(self, kind, items):
        self.removed.extend(items)


class FakeBackground(BackgroundRunner):
    """Holds submitted coroutines without running them."""

    def __init__(self):
        self.submitted = []

    def submit(self, coro, name=None):
        self.submitted.append((name, coro))
        return Future()

    def close(self):
        for _, coro in self.submitted:
            coro.close()


async def _no_sleep(_seconds):
    return None


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def host():
    return FakeHost()


@pytest.fixture
def power():
    return FakePower()


@pytest.fixture
def make_engine():
    """Factory wiring the core around fakes."""
    backgrounds = []

    def _make(
        store=None,
        host=None,
        power=None,
        process=None,
        apps=None,
        catalog=None,
        settings=None,
    ):
        store = store if store is not None else FakeStore()
        host = host if host is not None else FakeHost()
        power = power if power is not None else FakePower()
        process = process if process is not None else FakeProcess()
        apps = apps if apps is not None else FakeApps()
        catalog = catalog if catalog is not None else build_default_catalog()
        settings = settings or EngineSettings()
        actions = FakeActions()
        ui = FakeUI()
        background = FakeBackground()
        backgrounds.append(background)

        settings_filter = CompatibleSettingsFilter(catalog, host)
        applier = SettingApplier(build_handlers(store, power, actions), actions, process)
        discovery = StateDiscoveryService(applier)
        bridge = ApplicationBridge(settings_filter, applier)
        shell = ShellController(process, settings, sleep=_no_sleep)
        orchestrator = ApplyOrchestrator(
            settings_filter, bridge, applier, discovery, shell, apps=apps, background=background
        )
        reconciler = CompatibilityReconciler(catalog)
        return SimpleNamespace(
            store=store,
            host=host,
            power=power,
            process=process,
            apps=apps,
            actions=actions,
            ui=ui,
            background=background,
            catalog=catalog,
            filter=settings_filter,
            applier=applier,
            discovery=discovery,
            bridge=bridge,
            shell=shell,
            orchestrator=orchestrator,
            reconciler=reconciler,
            exporter=ConfigurationExporter(settings_filter, discovery, apps),
            importer=ImportController(orchestrator, reconciler, settings_filter, ui),
        )

    yield _make
    for background in backgrounds:
        background.close()

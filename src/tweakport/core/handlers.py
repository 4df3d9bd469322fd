"""Read/apply handlers, one per ``SettingKind``.

Discovery calls ``read`` and the application bridge calls ``apply`` on the
handler selected by ``definition.kind``. Handlers are synchronous; callers
run them in worker threads.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Protocol

from .errors import PowerPlanNotFoundError, SettingApplyError
from .models import (
    AC_VALUE_FIELD,
    ACTIVE_PLAN_FIELD,
    ACTIVE_PLAN_GUID_FIELD,
    DC_VALUE_FIELD,
    POWERCFG_FIELD,
    InputType,
    LinkedLogic,
    PowerModeSupport,
    PowerPlan,
    RegistrySetting,
    RegistryValueKind,
    SettingDefinition,
    SettingKind,
    SettingStateResult,
)
from .ports import ActionRunner, PowerPlanService, SettingsStore
from .selection import SelectionResolver, values_equal

logger = logging.getLogger(__name__)

# Keys of a per-mode power setting payload
AC_INDEX_KEY = "ACIndex"
DC_INDEX_KEY = "DCIndex"
PLAN_GUID_KEY = "Guid"
PLAN_NAME_KEY = "Name"


class SettingHandler(Protocol):
    def read(self, definition: SettingDefinition) -> SettingStateResult:
        """Read the live state of a definition. Never writes."""

    def apply(self, definition: SettingDefinition, value: Any) -> None:
        """Write a value. Raises on failure."""


# Registry helpers


def read_location(store: SettingsStore, location: RegistrySetting) -> Any:
    """Raw value of one location, with defaults and binary reductions applied."""
    if location.value_name is None:
        return store.key_exists(location.key_path)

    value = store.get_value(location.key_path, location.value_name)
    if value is None:
        return location.default_value

    if location.binary_byte_index is not None and isinstance(value, (bytes, bytearray)):
        index = location.binary_byte_index
        if index >= len(value):
            return location.default_value
        if location.bit_mask is not None:
            return bool(value[index] & location.bit_mask)
        if location.modify_byte_only:
            return value[index]
    return value


def collect_raw_values(store: SettingsStore, locations: tuple[RegistrySetting, ...]) -> dict[str, Any]:
    """Group raw values by logical field name.

    When several locations share a name the HKEY_LOCAL_MACHINE one wins.
    """
    raw: dict[str, Any] = {}
    from_machine: set[str] = set()
    for location in locations:
        name = location.field_name
        if name in from_machine:
            continue
        if name in raw and not location.is_machine_wide:
            continue
        raw[name] = read_location(store, location)
        if location.is_machine_wide:
            from_machine.add(name)
    return raw


def location_enabled(store: SettingsStore, location: RegistrySetting) -> bool:
    if location.value_name is None:
        exists = store.key_exists(location.key_path)
        return exists == (location.enabled_value is not None)

    value = read_location(store, location)
    if value is None:
        return location.treats_absence_as_enabled
    if location.bit_mask is not None:
        enabled = True if location.enabled_value is None else bool(location.enabled_value)
        return bool(value) == enabled
    if location.enabled_value is not None:
        return values_equal(value, location.enabled_value)
    if location.disabled_value is not None:
        return not values_equal(value, location.disabled_value)
    return bool(value)


def _coerce(location: RegistrySetting, value: Any) -> Any:
    kind = location.value_type
    if kind is RegistryValueKind.BINARY and isinstance(value, str):
        return bytes.fromhex(value)
    if kind in (RegistryValueKind.DWORD, RegistryValueKind.QWORD):
        if isinstance(value, bool):
            return int(value)
        if isinstance(value, str):
            return int(value, 0)
    if kind is RegistryValueKind.MULTI_SZ and isinstance(value, str):
        return [value]
    return value


def write_location(store: SettingsStore, location: RegistrySetting, value: Any) -> None:
    """Write one location. None deletes the value (or the key)."""
    if location.value_name is None:
        if value is None or value is False:
            store.delete_key(location.key_path)
        else:
            store.create_key(location.key_path)
        return

    if location.binary_byte_index is not None and (location.bit_mask is not None or location.modify_byte_only):
        _write_byte(store, location, value)
        return

    if value is None:
        store.delete_value(location.key_path, location.value_name)
        return
    store.set_value(location.key_path, location.value_name, _coerce(location, value), location.value_type)


def _absent_blob_reads_as(location: RegistrySetting, value: Any) -> bool:
    """Whether a missing blob already reads back as ``value``."""
    if value is None:
        return True
    if location.default_value is not None:
        if location.bit_mask is not None:
            return bool(value) == bool(location.default_value)
        return values_equal(value, location.default_value)
    if location.bit_mask is not None:
        enabled = True if location.enabled_value is None else bool(location.enabled_value)
        return (bool(value) == enabled) == location.treats_absence_as_enabled
    return False


def _write_byte(store: SettingsStore, location: RegistrySetting, value: Any) -> None:
    current = store.get_value(location.key_path, location.value_name)
    if current is None and _absent_blob_reads_as(location, value):
        logger.debug("%s\\%s is absent and already reads as %r", location.key_path, location.value_name, value)
        return
    if not isinstance(current, (bytes, bytearray)):
        raise SettingApplyError(
            f"{location.key_path}\\{location.value_name} is not a binary value; cannot patch byte "
            f"{location.binary_byte_index}"
        )
    blob = bytearray(current)
    index = location.binary_byte_index
    if index >= len(blob):
        blob.extend(b"\x00" * (index + 1 - len(blob)))

    if location.bit_mask is not None:
        if value:
            blob[index] |= location.bit_mask
        else:
            blob[index] &= ~location.bit_mask & 0xFF
    else:
        blob[index] = int(value) & 0xFF
    store.set_value(location.key_path, location.value_name, bytes(blob), RegistryValueKind.BINARY)


class _Snapshot:
    """Previous contents of locations touched by a linked write."""

    def __init__(self, store: SettingsStore):
        self._store = store
        self._saved: list[tuple[RegistrySetting, bool, Any]] = []

    def capture(self, location: RegistrySetting) -> None:
        if location.value_name is None:
            self._saved.append((location, self._store.key_exists(location.key_path), None))
        else:
            self._saved.append(
                (location, False, self._store.get_value(location.key_path, location.value_name))
            )

    def restore(self) -> None:
        for location, existed, previous in reversed(self._saved):
            try:
                if location.value_name is None:
                    if existed:
                        self._store.create_key(location.key_path)
                    else:
                        self._store.delete_key(location.key_path)
                elif previous is None:
                    self._store.delete_value(location.key_path, location.value_name)
                else:
                    value_type = location.value_type
                    if isinstance(previous, (bytes, bytearray)):
                        value_type = RegistryValueKind.BINARY
                    self._store.set_value(location.key_path, location.value_name, previous, value_type)
            except Exception as e:
                logger.error("Failed to restore %s\\%s: %s", location.key_path, location.value_name, e)


def write_locations(
    store: SettingsStore,
    writes: list[tuple[RegistrySetting, Any]],
    atomic: bool,
) -> None:
    """Write several locations; when atomic, undo earlier writes if one fails."""
    snapshot = _Snapshot(store) if atomic else None
    try:
        for location, value in writes:
            if snapshot is not None:
                snapshot.capture(location)
            write_location(store, location, value)
    except Exception:
        if snapshot is not None:
            logger.warning("Linked write failed, restoring %d location(s)", len(writes))
            snapshot.restore()
        raise


def writes_for_fields(
    locations: tuple[RegistrySetting, ...], values: Mapping[str, Any]
) -> list[tuple[RegistrySetting, Any]]:
    """Pair every location with the value of its logical field, if given."""
    return [(loc, values[loc.field_name]) for loc in locations if loc.field_name in values]


# Handlers


class RegistryToggleHandler:
    def __init__(self, store: SettingsStore):
        self._store = store

    def read(self, definition: SettingDefinition) -> SettingStateResult:
        locations = definition.registry_settings
        states = [location_enabled(self._store, loc) for loc in locations]
        if definition.linked_logic is LinkedLogic.ALL:
            enabled = all(states)
        elif definition.linked_logic is LinkedLogic.PRIMARY:
            enabled = states[0] if states else False
        else:
            enabled = any(states)
        return SettingStateResult(
            success=True,
            is_enabled=enabled,
            raw_values=collect_raw_values(self._store, locations),
        )

    def apply(self, definition: SettingDefinition, value: Any) -> None:
        if isinstance(value, Mapping):
            writes = writes_for_fields(definition.registry_settings, value)
        else:
            enable = bool(value)
            writes = [
                (loc, loc.enabled_value if enable else loc.disabled_value)
                for loc in definition.registry_settings
            ]
        write_locations(self._store, writes, atomic=definition.linked)


class RegistrySelectionHandler:
    def __init__(self, store: SettingsStore, resolver: SelectionResolver):
        self._store = store
        self._resolver = resolver

    def read(self, definition: SettingDefinition) -> SettingStateResult:
        raw = collect_raw_values(self._store, definition.registry_settings)
        return SettingStateResult(
            success=True,
            current_value=self._resolver.resolve_index(definition, raw),
            raw_values=raw,
        )

    def apply(self, definition: SettingDefinition, value: Any) -> None:
        if isinstance(value, Mapping):
            values = value
        else:
            values = self._resolver.index_to_raw_values(definition, int(value))
            if values is None:
                logger.info("%s: custom state without stored values, nothing to write", definition.id)
                return
        writes = writes_for_fields(definition.registry_settings, values)
        write_locations(self._store, writes, atomic=definition.linked or len(writes) > 1)


class PowerCfgHandler:
    def __init__(self, power: PowerPlanService, resolver: SelectionResolver):
        self._power = power
        self._resolver = resolver

    def read(self, definition: SettingDefinition) -> SettingStateResult:
        primary = definition.powercfg_settings[0]
        ac, dc = self._power.read_setting(primary.subgroup_guid, primary.setting_guid)
        raw = {AC_VALUE_FIELD: ac, DC_VALUE_FIELD: dc, POWERCFG_FIELD: ac}

        if definition.input_type is InputType.TOGGLE:
            states = []
            for setting in definition.powercfg_settings:
                setting_ac = ac
                if setting is not primary:
                    setting_ac, _ = self._power.read_setting(setting.subgroup_guid, setting.setting_guid)
                states.append(setting_ac is not None and setting_ac != setting.disabled_value)
            enabled = all(states) if definition.linked_logic is LinkedLogic.ALL else any(states)
            return SettingStateResult(success=True, is_enabled=enabled, raw_values=raw)

        if primary.mode_support is PowerModeSupport.SEPARATE:
            current = {AC_VALUE_FIELD: ac, DC_VALUE_FIELD: dc}
        else:
            current = self._resolver.resolve_index(definition, raw)
        return SettingStateResult(success=True, current_value=current, raw_values=raw)

    def apply(self, definition: SettingDefinition, value: Any) -> None:
        if definition.input_type is InputType.TOGGLE and not isinstance(value, Mapping):
            enable = bool(value)
            for setting in definition.powercfg_settings:
                target = setting.enabled_value if enable else setting.disabled_value
                self._power.write_setting(setting.subgroup_guid, setting.setting_guid, target, target)
            return

        ac, dc = self._resolve_modes(definition, value)
        for setting in definition.powercfg_settings:
            self._power.write_setting(setting.subgroup_guid, setting.setting_guid, ac, dc)

    def _resolve_modes(self, definition: SettingDefinition, value: Any) -> tuple[Any, Any]:
        if isinstance(value, Mapping):
            if AC_INDEX_KEY in value or DC_INDEX_KEY in value:
                return self._mode_value(definition, value.get(AC_INDEX_KEY)), self._mode_value(
                    definition, value.get(DC_INDEX_KEY)
                )
            if AC_VALUE_FIELD in value or DC_VALUE_FIELD in value:
                return value.get(AC_VALUE_FIELD), value.get(DC_VALUE_FIELD)
            both = value.get(POWERCFG_FIELD)
            return both, both

        both = self._mode_value(definition, value)
        return both, both

    def _mode_value(self, definition: SettingDefinition, index: Any) -> Any:
        if index is None:
            return None
        values = self._resolver.index_to_raw_values(definition, int(index))
        if values is None:
            return None
        if POWERCFG_FIELD not in values:
            raise SettingApplyError(f"{definition.id}: option {index} has no {POWERCFG_FIELD}")
        return values[POWERCFG_FIELD]


def match_power_plan(plans: list[PowerPlan], guid: str | None, name: str | None) -> PowerPlan | None:
    """Find a plan by GUID, falling back to its display name."""
    if guid:
        wanted = guid.strip().strip("{}").casefold()
        for plan in plans:
            if plan.guid.strip().strip("{}").casefold() == wanted:
                return plan
    if name:
        wanted = name.strip().casefold()
        for plan in plans:
            if plan.name.strip().casefold() == wanted:
                return plan
    return None


class PowerPlanHandler:
    def __init__(self, power: PowerPlanService, resolver: SelectionResolver):
        self._power = power
        self._resolver = resolver

    def read(self, definition: SettingDefinition) -> SettingStateResult:
        active = next((p for p in self._power.list_plans() if p.is_active), None)
        if active is None:
            return SettingStateResult.failed("No active power plan")
        raw = {ACTIVE_PLAN_GUID_FIELD: active.guid, ACTIVE_PLAN_FIELD: active.name}
        return SettingStateResult(
            success=True,
            current_value=self._resolver.resolve_index(definition, raw),
            raw_values=raw,
        )

    def apply(self, definition: SettingDefinition, value: Any) -> None:
        if not isinstance(value, Mapping):
            values = self._resolver.index_to_raw_values(definition, int(value))
            if values is None:
                return
            value = {PLAN_GUID_KEY: values.get(ACTIVE_PLAN_GUID_FIELD), PLAN_NAME_KEY: values.get(ACTIVE_PLAN_FIELD)}

        guid = value.get(PLAN_GUID_KEY)
        name = value.get(PLAN_NAME_KEY)
        plan = match_power_plan(self._power.list_plans(), guid, name)
        if plan is None:
            raise PowerPlanNotFoundError(f"No power plan matches GUID {guid!r} or name {name!r}")
        if guid and plan.guid.casefold() != guid.strip("{}").casefold():
            logger.info("Power plan %s not found, matched %r by name", guid, plan.name)
        self._power.set_active_plan(plan.guid)


class ActionHandler:
    """Definitions that only trigger a side effect and hold no state."""

    def __init__(self, actions: ActionRunner):
        self._actions = actions

    def read(self, definition: SettingDefinition) -> SettingStateResult:
        return SettingStateResult(success=True, is_enabled=False, current_value=0)

    def apply(self, definition: SettingDefinition, value: Any) -> None:
        # The run options decide whether an action fires; the file value carries no state
        self._actions.run(definition.auxiliary_action or definition.id, definition)


def build_handlers(
    store: SettingsStore,
    power: PowerPlanService,
    actions: ActionRunner,
    resolver: SelectionResolver | None = None,
) -> dict[SettingKind, SettingHandler]:
    resolver = resolver or SelectionResolver()
    return {
        SettingKind.REGISTRY_TOGGLE: RegistryToggleHandler(store),
        SettingKind.REGISTRY_SELECTION: RegistrySelectionHandler(store, resolver),
        SettingKind.POWERCFG: PowerCfgHandler(power, resolver),
        SettingKind.POWER_PLAN: PowerPlanHandler(power, resolver),
        SettingKind.ACTION: ActionHandler(actions),
    }

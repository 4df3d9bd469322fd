"""Immutable domain types shared by the catalog, discovery and apply code."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from types import MappingProxyType
from typing import Any, Mapping

# Selection index reported when the live values match none of the mappings
CUSTOM_STATE_INDEX = -1

# Logical field names used in raw value maps
KEY_EXISTS_FIELD = "KeyExists"
POWERCFG_FIELD = "PowerCfgValue"
AC_VALUE_FIELD = "ACValue"
DC_VALUE_FIELD = "DCValue"
ACTIVE_PLAN_FIELD = "ActivePowerPlan"
ACTIVE_PLAN_GUID_FIELD = "ActivePowerPlanGuid"

_EMPTY: Mapping[str, Any] = MappingProxyType({})


def _freeze(mapping: Mapping[str, Any] | None) -> Mapping[str, Any]:
    if not mapping:
        return _EMPTY
    if isinstance(mapping, MappingProxyType):
        return mapping
    return MappingProxyType(dict(mapping))


class InputType(str, Enum):
    TOGGLE = "Toggle"
    SELECTION = "Selection"


class RegistryValueKind(str, Enum):
    DWORD = "DWORD"
    QWORD = "QWORD"
    SZ = "SZ"
    EXPAND_SZ = "EXPAND_SZ"
    MULTI_SZ = "MULTI_SZ"
    BINARY = "BINARY"


class LinkedLogic(str, Enum):
    """How the states of several registry locations combine into one toggle."""

    ANY = "any"
    ALL = "all"
    PRIMARY = "primary"


class PowerModeSupport(str, Enum):
    TOGETHER = "together"
    SEPARATE = "separate"


class SettingKind(Enum):
    """Tag that selects the read/apply handler for a definition."""

    REGISTRY_TOGGLE = auto()
    REGISTRY_SELECTION = auto()
    POWERCFG = auto()
    POWER_PLAN = auto()
    ACTION = auto()


class AppKind(str, Enum):
    WINDOWS = "WindowsApps"
    EXTERNAL = "ExternalApps"


@dataclass(frozen=True)
class RegistrySetting:
    """One store location backing a setting.

    A ``value_name`` of None means the key's existence is the value. Writing
    None to a location deletes it.
    """

    key_path: str
    value_name: str | None
    value_type: RegistryValueKind = RegistryValueKind.DWORD
    enabled_value: Any = None
    disabled_value: Any = None
    default_value: Any = None
    absence_means_enabled: bool = False
    binary_byte_index: int | None = None
    bit_mask: int | None = None
    modify_byte_only: bool = False

    @property
    def field_name(self) -> str:
        return self.value_name if self.value_name is not None else KEY_EXISTS_FIELD

    @property
    def hive(self) -> str:
        return self.key_path.split("\\", 1)[0].upper()

    @property
    def is_machine_wide(self) -> bool:
        return self.hive in ("HKEY_LOCAL_MACHINE", "HKLM")

    @property
    def treats_absence_as_enabled(self) -> bool:
        if self.absence_means_enabled:
            return True
        return self.enabled_value is None and self.disabled_value is not None


@dataclass(frozen=True)
class PowerCfgSetting:
    subgroup_guid: str
    setting_guid: str
    mode_support: PowerModeSupport = PowerModeSupport.TOGETHER
    enabled_value: int = 1
    disabled_value: int = 0


@dataclass(frozen=True)
class SelectionMetadata:
    """Ordered options of a Selection setting.

    ``value_mappings[i]`` maps logical field names to the raw values that
    make up option ``i``.
    """

    display_names: tuple[str, ...]
    value_mappings: tuple[Mapping[str, Any], ...]
    supports_custom_state: bool = True

    def __post_init__(self):
        object.__setattr__(self, "display_names", tuple(self.display_names))
        object.__setattr__(
            self, "value_mappings", tuple(_freeze(mapping) for mapping in self.value_mappings)
        )


@dataclass(frozen=True)
class SettingDefinition:
    id: str
    name: str
    input_type: InputType
    description: str = ""
    kind: SettingKind | None = None
    registry_settings: tuple[RegistrySetting, ...] = ()
    linked_logic: LinkedLogic = LinkedLogic.ANY
    linked: bool = False
    powercfg_settings: tuple[PowerCfgSetting, ...] = ()
    selection: SelectionMetadata | None = None
    is_windows10_only: bool = False
    is_windows11_only: bool = False
    minimum_build_number: int | None = None
    maximum_build_number: int | None = None
    supported_build_ranges: tuple[tuple[int, int], ...] = ()
    restart_process: str | None = None
    auxiliary_action: str | None = None
    custom_properties: Mapping[str, Any] = field(default_factory=lambda: _EMPTY)

    def __post_init__(self):
        object.__setattr__(self, "registry_settings", tuple(self.registry_settings))
        object.__setattr__(self, "powercfg_settings", tuple(self.powercfg_settings))
        object.__setattr__(
            self,
            "supported_build_ranges",
            tuple((int(low), int(high)) for low, high in self.supported_build_ranges),
        )
        object.__setattr__(self, "custom_properties", _freeze(self.custom_properties))
        if self.kind is None:
            object.__setattr__(self, "kind", self._infer_kind())

    def _infer_kind(self) -> SettingKind:
        if self.powercfg_settings:
            return SettingKind.POWERCFG
        if self.registry_settings:
            if self.input_type is InputType.SELECTION:
                return SettingKind.REGISTRY_SELECTION
            return SettingKind.REGISTRY_TOGGLE
        return SettingKind.ACTION

    @property
    def has_separate_power_modes(self) -> bool:
        return any(s.mode_support is PowerModeSupport.SEPARATE for s in self.powercfg_settings)


@dataclass(frozen=True)
class FeatureModule:
    """A named group of definitions, e.g. ``privacy`` or ``taskbar``."""

    id: str
    name: str
    settings: tuple[SettingDefinition, ...]

    def __post_init__(self):
        object.__setattr__(self, "settings", tuple(self.settings))


@dataclass(frozen=True)
class HostInfo:
    is_windows11: bool
    build_number: int


@dataclass(frozen=True)
class SettingStateResult:
    success: bool
    is_enabled: bool = False
    current_value: Any = None
    raw_values: Mapping[str, Any] = field(default_factory=lambda: _EMPTY)
    error_message: str | None = None

    def __post_init__(self):
        object.__setattr__(self, "raw_values", _freeze(self.raw_values))

    @classmethod
    def failed(cls, message: str) -> "SettingStateResult":
        return cls(success=False, error_message=message)


@dataclass(frozen=True)
class PowerPlan:
    guid: str
    name: str
    is_active: bool = False


@dataclass(frozen=True)
class AppItem:
    id: str
    name: str
    kind: AppKind
    appx_package_name: str | None = None
    sub_packages: tuple[str, ...] = ()
    capability_name: str | None = None
    optional_feature_name: str | None = None
    winget_package_id: tuple[str, ...] = ()
    is_installed: bool = False
    is_selected: bool = False

"""Power settings."""

from ..core.models import (
    ACTIVE_PLAN_GUID_FIELD,
    POWERCFG_FIELD,
    FeatureModule,
    InputType,
    PowerCfgSetting,
    PowerModeSupport,
    RegistrySetting,
    SelectionMetadata,
    SettingDefinition,
    SettingKind,
)

FEATURE_ID = "power"

BALANCED_GUID = "381b4222-f694-41f0-9685-ff5bb260df2e"
HIGH_PERFORMANCE_GUID = "8c5e7fda-e8bf-4a96-9a85-a6e23a8c635c"
POWER_SAVER_GUID = "a1841308-3541-4fab-bc81-f71556f20b4a"
ULTIMATE_PERFORMANCE_GUID = "e9a42b02-d5df-448d-aa00-03f14749eb61"

SUB_SLEEP = "238c9fa8-0aad-41ed-83f4-97be242c8f20"
STANDBY_IDLE = "29f6c1db-86da-48c5-9fdb-f2b67b1f44da"
HIBERNATE_IDLE = "9d7815a6-7ee4-497e-8888-515a05f02364"
SUB_VIDEO = "7516b95f-f776-4464-8c53-06167f40cc99"
VIDEO_IDLE = "3c0bc021-c8a8-4e07-a973-6b14cbcb2b7e"
SUB_USB = "2a737441-1930-4402-8d77-b2bebba308a3"
USB_SELECTIVE_SUSPEND = "48e6b7a6-50f5-4782-a5d4-53bb8f07e226"

_POWER_KEY = r"HKEY_LOCAL_MACHINE\SYSTEM\CurrentControlSet\Control\Power"
_SESSION_POWER_KEY = r"HKEY_LOCAL_MACHINE\SYSTEM\CurrentControlSet\Control\Session Manager\Power"

_TIMEOUTS = (
    ("Never", 0),
    ("5 minutes", 300),
    ("10 minutes", 600),
    ("15 minutes", 900),
    ("30 minutes", 1800),
    ("1 hour", 3600),
)


def _timeout_options() -> SelectionMetadata:
    return SelectionMetadata(
        display_names=tuple(name for name, _ in _TIMEOUTS),
        value_mappings=tuple({POWERCFG_FIELD: seconds} for _, seconds in _TIMEOUTS),
    )


SETTINGS = (
    SettingDefinition(
        id="power-plan-selection",
        name="Power plan",
        description="Active power plan",
        input_type=InputType.SELECTION,
        kind=SettingKind.POWER_PLAN,
        selection=SelectionMetadata(
            display_names=("Balanced", "High Performance", "Power Saver", "Ultimate Performance"),
            value_mappings=(
                {ACTIVE_PLAN_GUID_FIELD: BALANCED_GUID},
                {ACTIVE_PLAN_GUID_FIELD: HIGH_PERFORMANCE_GUID},
                {ACTIVE_PLAN_GUID_FIELD: POWER_SAVER_GUID},
                {ACTIVE_PLAN_GUID_FIELD: ULTIMATE_PERFORMANCE_GUID},
            ),
        ),
    ),
    SettingDefinition(
        id="power-sleep-after",
        name="Sleep after",
        description="Idle time before the PC sleeps, separately on AC and battery",
        input_type=InputType.SELECTION,
        powercfg_settings=(PowerCfgSetting(SUB_SLEEP, STANDBY_IDLE, PowerModeSupport.SEPARATE),),
        selection=_timeout_options(),
    ),
    SettingDefinition(
        id="power-hibernate-after",
        name="Hibernate after",
        input_type=InputType.SELECTION,
        powercfg_settings=(PowerCfgSetting(SUB_SLEEP, HIBERNATE_IDLE, PowerModeSupport.SEPARATE),),
        selection=_timeout_options(),
    ),
    SettingDefinition(
        id="power-display-off",
        name="Turn off display after",
        input_type=InputType.SELECTION,
        powercfg_settings=(PowerCfgSetting(SUB_VIDEO, VIDEO_IDLE),),
        selection=_timeout_options(),
    ),
    SettingDefinition(
        id="power-usb-selective-suspend",
        name="USB selective suspend",
        input_type=InputType.TOGGLE,
        powercfg_settings=(PowerCfgSetting(SUB_USB, USB_SELECTIVE_SUSPEND),),
    ),
    SettingDefinition(
        id="power-hibernation",
        name="Hibernation",
        input_type=InputType.TOGGLE,
        registry_settings=(
            RegistrySetting(_POWER_KEY, "HibernateEnabled", enabled_value=1, disabled_value=0, default_value=1),
        ),
    ),
    SettingDefinition(
        id="power-fast-startup",
        name="Fast startup",
        input_type=InputType.TOGGLE,
        registry_settings=(
            RegistrySetting(_SESSION_POWER_KEY, "HiberbootEnabled", enabled_value=1, disabled_value=0),
        ),
    ),
)

MODULE = FeatureModule(id=FEATURE_ID, name="Power", settings=SETTINGS)

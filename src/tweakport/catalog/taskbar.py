"""Taskbar settings."""

from ..core.models import (
    FeatureModule,
    InputType,
    LinkedLogic,
    RegistrySetting,
    RegistryValueKind,
    SelectionMetadata,
    SettingDefinition,
    SettingKind,
)

FEATURE_ID = "taskbar"

_ADVANCED_KEY = r"HKEY_CURRENT_USER\Software\Microsoft\Windows\CurrentVersion\Explorer\Advanced"
_DEVELOPER_KEY = _ADVANCED_KEY + r"\TaskbarDeveloperSettings"
_SEARCH_KEY = r"HKEY_CURRENT_USER\Software\Microsoft\Windows\CurrentVersion\Search"
_DSH_POLICY_KEY = r"HKEY_LOCAL_MACHINE\SOFTWARE\Policies\Microsoft\Dsh"
_FEEDS_KEY = r"HKEY_CURRENT_USER\Software\Microsoft\Windows\CurrentVersion\Feeds"
_STUCK_RECTS_KEY = r"HKEY_CURRENT_USER\Software\Microsoft\Windows\CurrentVersion\Explorer\StuckRects3"

SETTINGS = (
    SettingDefinition(
        id="taskbar-alignment",
        name="Taskbar alignment",
        input_type=InputType.SELECTION,
        is_windows11_only=True,
        restart_process="explorer",
        registry_settings=(RegistrySetting(_ADVANCED_KEY, "TaskbarAl", default_value=1),),
        selection=SelectionMetadata(
            display_names=("Left", "Center"),
            value_mappings=({"TaskbarAl": 0}, {"TaskbarAl": 1}),
        ),
    ),
    SettingDefinition(
        id="taskbar-search-mode",
        name="Search on the taskbar",
        input_type=InputType.SELECTION,
        registry_settings=(RegistrySetting(_SEARCH_KEY, "SearchboxTaskbarMode", default_value=2),),
        selection=SelectionMetadata(
            display_names=("Hidden", "Search icon", "Search box"),
            value_mappings=(
                {"SearchboxTaskbarMode": 0},
                {"SearchboxTaskbarMode": 1},
                {"SearchboxTaskbarMode": 2},
            ),
        ),
    ),
    SettingDefinition(
        id="taskbar-task-view",
        name="Task view button",
        input_type=InputType.TOGGLE,
        registry_settings=(
            RegistrySetting(_ADVANCED_KEY, "ShowTaskViewButton", enabled_value=1, disabled_value=0, default_value=1),
        ),
    ),
    SettingDefinition(
        id="taskbar-widgets",
        name="Widgets",
        input_type=InputType.TOGGLE,
        is_windows11_only=True,
        linked=True,
        linked_logic=LinkedLogic.PRIMARY,
        registry_settings=(
            RegistrySetting(_ADVANCED_KEY, "TaskbarDa", enabled_value=1, disabled_value=0, default_value=1),
            RegistrySetting(_DSH_POLICY_KEY, "AllowNewsAndInterests", disabled_value=0),
        ),
    ),
    SettingDefinition(
        id="taskbar-news-interests",
        name="News and interests",
        input_type=InputType.SELECTION,
        is_windows10_only=True,
        minimum_build_number=19041,
        registry_settings=(RegistrySetting(_FEEDS_KEY, "ShellFeedsTaskbarViewMode", default_value=0),),
        selection=SelectionMetadata(
            display_names=("Show icon and text", "Show icon only", "Turn off"),
            value_mappings=(
                {"ShellFeedsTaskbarViewMode": 0},
                {"ShellFeedsTaskbarViewMode": 1},
                {"ShellFeedsTaskbarViewMode": 2},
            ),
        ),
    ),
    SettingDefinition(
        id="taskbar-auto-hide",
        name="Automatically hide the taskbar",
        input_type=InputType.TOGGLE,
        restart_process="explorer",
        registry_settings=(
            RegistrySetting(
                _STUCK_RECTS_KEY,
                "Settings",
                value_type=RegistryValueKind.BINARY,
                binary_byte_index=8,
                bit_mask=0x01,
                enabled_value=True,
                disabled_value=False,
            ),
        ),
    ),
    SettingDefinition(
        id="taskbar-end-task",
        name="End task in taskbar context menu",
        input_type=InputType.TOGGLE,
        is_windows11_only=True,
        supported_build_ranges=((22631, 22635), (26100, 29999)),
        registry_settings=(
            RegistrySetting(_DEVELOPER_KEY, "TaskbarEndTask", enabled_value=1, disabled_value=0),
        ),
    ),
    SettingDefinition(
        id="taskbar-clean",
        name="Clean taskbar",
        description="Unpin every item from the taskbar",
        input_type=InputType.TOGGLE,
        kind=SettingKind.ACTION,
        auxiliary_action="clean-taskbar",
    ),
)

MODULE = FeatureModule(id=FEATURE_ID, name="Taskbar", settings=SETTINGS)

"""File Explorer settings."""

from ..core.models import FeatureModule, InputType, RegistrySetting, SelectionMetadata, SettingDefinition

FEATURE_ID = "explorer"

_ADVANCED_KEY = r"HKEY_CURRENT_USER\Software\Microsoft\Windows\CurrentVersion\Explorer\Advanced"
# Presence of this key brings back the Windows 10 context menu
_CLASSIC_MENU_KEY = (
    r"HKEY_CURRENT_USER\Software\Classes\CLSID\{86ca1aa0-34aa-4e8b-a509-50c905bae2a2}\InprocServer32"
)

SETTINGS = (
    SettingDefinition(
        id="explorer-file-extensions",
        name="Show file extensions",
        input_type=InputType.TOGGLE,
        registry_settings=(
            RegistrySetting(_ADVANCED_KEY, "HideFileExt", enabled_value=0, disabled_value=1, default_value=1),
        ),
    ),
    SettingDefinition(
        id="explorer-hidden-files",
        name="Show hidden files",
        input_type=InputType.TOGGLE,
        registry_settings=(
            RegistrySetting(_ADVANCED_KEY, "Hidden", enabled_value=1, disabled_value=2, default_value=2),
        ),
    ),
    SettingDefinition(
        id="explorer-launch-to",
        name="Open File Explorer to",
        input_type=InputType.SELECTION,
        registry_settings=(RegistrySetting(_ADVANCED_KEY, "LaunchTo", default_value=2),),
        selection=SelectionMetadata(
            display_names=("This PC", "Home", "Downloads"),
            value_mappings=({"LaunchTo": 1}, {"LaunchTo": 2}, {"LaunchTo": 3}),
        ),
    ),
    SettingDefinition(
        id="explorer-classic-context-menu",
        name="Classic context menu",
        input_type=InputType.TOGGLE,
        is_windows11_only=True,
        restart_process="explorer",
        registry_settings=(RegistrySetting(_CLASSIC_MENU_KEY, None, enabled_value=True),),
    ),
    SettingDefinition(
        id="explorer-compact-mode",
        name="Compact view",
        input_type=InputType.TOGGLE,
        is_windows11_only=True,
        registry_settings=(
            RegistrySetting(_ADVANCED_KEY, "UseCompactMode", enabled_value=1, disabled_value=0, default_value=0),
        ),
    ),
)

MODULE = FeatureModule(id=FEATURE_ID, name="File Explorer", settings=SETTINGS)

"""Start menu settings."""

from ..core.models import (
    FeatureModule,
    InputType,
    RegistrySetting,
    SelectionMetadata,
    SettingDefinition,
    SettingKind,
)

FEATURE_ID = "start-menu"

_ADVANCED_KEY = r"HKEY_CURRENT_USER\Software\Microsoft\Windows\CurrentVersion\Explorer\Advanced"
_EXPLORER_POLICY_KEY = r"HKEY_CURRENT_USER\Software\Policies\Microsoft\Windows\Explorer"

SETTINGS = (
    SettingDefinition(
        id="start-menu-layout",
        name="Start layout",
        input_type=InputType.SELECTION,
        is_windows11_only=True,
        minimum_build_number=22621,
        registry_settings=(RegistrySetting(_ADVANCED_KEY, "Start_Layout", default_value=0),),
        selection=SelectionMetadata(
            display_names=("Default", "More pins", "More recommendations"),
            value_mappings=({"Start_Layout": 0}, {"Start_Layout": 1}, {"Start_Layout": 2}),
        ),
    ),
    SettingDefinition(
        id="start-menu-recommendations",
        name="Show recommendations",
        input_type=InputType.TOGGLE,
        is_windows11_only=True,
        registry_settings=(
            RegistrySetting(
                _ADVANCED_KEY, "Start_IrisRecommendations", enabled_value=1, disabled_value=0, default_value=1
            ),
        ),
    ),
    SettingDefinition(
        id="start-menu-recently-added",
        name="Show recently added apps",
        input_type=InputType.TOGGLE,
        registry_settings=(RegistrySetting(_EXPLORER_POLICY_KEY, "HideRecentlyAddedApps", disabled_value=1),),
    ),
    SettingDefinition(
        id="start-menu-recent-items",
        name="Show recently opened items",
        input_type=InputType.TOGGLE,
        registry_settings=(
            RegistrySetting(_ADVANCED_KEY, "Start_TrackDocs", enabled_value=1, disabled_value=0, default_value=1),
        ),
    ),
    SettingDefinition(
        id="start-menu-clean-10",
        name="Clean Start menu",
        description="Remove every tile from the Start menu",
        input_type=InputType.TOGGLE,
        kind=SettingKind.ACTION,
        is_windows10_only=True,
        auxiliary_action="clean-start-menu-10",
    ),
    SettingDefinition(
        id="start-menu-clean-11",
        name="Clean Start menu",
        description="Unpin every app from the Start menu",
        input_type=InputType.TOGGLE,
        kind=SettingKind.ACTION,
        is_windows11_only=True,
        auxiliary_action="clean-start-menu-11",
    ),
)

MODULE = FeatureModule(id=FEATURE_ID, name="Start Menu", settings=SETTINGS)

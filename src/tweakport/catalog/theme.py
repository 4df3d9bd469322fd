"""Windows theme settings."""

from ..core.models import FeatureModule, InputType, RegistrySetting, SelectionMetadata, SettingDefinition

FEATURE_ID = "windows-theme"

_PERSONALIZE_KEY = r"HKEY_CURRENT_USER\Software\Microsoft\Windows\CurrentVersion\Themes\Personalize"
_DWM_KEY = r"HKEY_CURRENT_USER\Software\Microsoft\Windows\DWM"

SETTINGS = (
    SettingDefinition(
        id="theme-mode-windows",
        name="Choose your mode",
        input_type=InputType.SELECTION,
        linked=True,
        auxiliary_action="apply-theme-wallpaper",
        registry_settings=(
            RegistrySetting(_PERSONALIZE_KEY, "AppsUseLightTheme", default_value=1),
            RegistrySetting(_PERSONALIZE_KEY, "SystemUsesLightTheme", default_value=1),
        ),
        selection=SelectionMetadata(
            display_names=("Light", "Dark"),
            value_mappings=(
                {"AppsUseLightTheme": 1, "SystemUsesLightTheme": 1},
                {"AppsUseLightTheme": 0, "SystemUsesLightTheme": 0},
            ),
        ),
    ),
    SettingDefinition(
        id="theme-transparency",
        name="Transparency effects",
        input_type=InputType.TOGGLE,
        registry_settings=(
            RegistrySetting(_PERSONALIZE_KEY, "EnableTransparency", enabled_value=1, disabled_value=0, default_value=1),
        ),
    ),
    SettingDefinition(
        id="theme-accent-on-taskbar",
        name="Show accent color on Start and taskbar",
        input_type=InputType.TOGGLE,
        registry_settings=(
            RegistrySetting(_PERSONALIZE_KEY, "ColorPrevalence", enabled_value=1, disabled_value=0, default_value=0),
        ),
    ),
    SettingDefinition(
        id="theme-accent-on-title-bars",
        name="Show accent color on title bars",
        input_type=InputType.TOGGLE,
        registry_settings=(
            RegistrySetting(_DWM_KEY, "ColorPrevalence", enabled_value=1, disabled_value=0, default_value=0),
        ),
    ),
)

MODULE = FeatureModule(id=FEATURE_ID, name="Windows Theme", settings=SETTINGS)

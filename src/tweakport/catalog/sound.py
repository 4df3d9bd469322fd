"""Sound settings."""

from ..core.models import FeatureModule, InputType, RegistrySetting, SelectionMetadata, SettingDefinition

FEATURE_ID = "sound"

_BOOT_ANIMATION_KEY = (
    r"HKEY_LOCAL_MACHINE\SOFTWARE\Microsoft\Windows\CurrentVersion\Authentication\LogonUI\BootAnimation"
)
_EDITION_OVERRIDES_KEY = (
    r"HKEY_LOCAL_MACHINE\SOFTWARE\Microsoft\Windows\CurrentVersion\Authentication\LogonUI\EditionOverrides"
)
_AUDIO_KEY = r"HKEY_CURRENT_USER\Software\Microsoft\Multimedia\Audio"
_NARRATOR_KEY = r"HKEY_CURRENT_USER\Software\Microsoft\Narrator\NoRoam"

SETTINGS = (
    SettingDefinition(
        id="sound-startup",
        name="Startup sound",
        input_type=InputType.TOGGLE,
        linked=True,
        registry_settings=(
            RegistrySetting(_BOOT_ANIMATION_KEY, "DisableStartupSound", disabled_value=1),
            RegistrySetting(_EDITION_OVERRIDES_KEY, "UserSetting_DisableStartupSound", disabled_value=1),
        ),
    ),
    SettingDefinition(
        id="sound-communication-ducking",
        name="Communications activity",
        description="What Windows does with other sounds during calls",
        input_type=InputType.SELECTION,
        registry_settings=(RegistrySetting(_AUDIO_KEY, "UserDuckingPreference", default_value=1),),
        selection=SelectionMetadata(
            display_names=(
                "Mute all other sounds",
                "Reduce other sounds by 80%",
                "Reduce other sounds by 50%",
                "Do nothing",
            ),
            value_mappings=(
                {"UserDuckingPreference": 0},
                {"UserDuckingPreference": 1},
                {"UserDuckingPreference": 2},
                {"UserDuckingPreference": 3},
            ),
        ),
    ),
    SettingDefinition(
        id="sound-narrator-audio-ducking",
        name="Lower other audio when Narrator speaks",
        input_type=InputType.TOGGLE,
        registry_settings=(
            RegistrySetting(_NARRATOR_KEY, "DuckAudio", enabled_value=1, disabled_value=0, default_value=1),
        ),
    ),
)

MODULE = FeatureModule(id=FEATURE_ID, name="Sound", settings=SETTINGS)

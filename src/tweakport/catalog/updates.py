"""Windows Update settings."""

from ..core.models import FeatureModule, InputType, RegistrySetting, SelectionMetadata, SettingDefinition

FEATURE_ID = "updates"

_AU_KEY = r"HKEY_LOCAL_MACHINE\SOFTWARE\Policies\Microsoft\Windows\WindowsUpdate\AU"
_WU_POLICY_KEY = r"HKEY_LOCAL_MACHINE\SOFTWARE\Policies\Microsoft\Windows\WindowsUpdate"
_DELIVERY_KEY = r"HKEY_LOCAL_MACHINE\SOFTWARE\Policies\Microsoft\Windows\DeliveryOptimization"
_UX_KEY = r"HKEY_LOCAL_MACHINE\SOFTWARE\Microsoft\WindowsUpdate\UX\Settings"

SETTINGS = (
    SettingDefinition(
        id="updates-policy-mode",
        name="Update policy",
        description="How Windows Update downloads and installs updates",
        input_type=InputType.SELECTION,
        registry_settings=(
            RegistrySetting(_AU_KEY, "NoAutoUpdate"),
            RegistrySetting(_AU_KEY, "AUOptions"),
        ),
        selection=SelectionMetadata(
            display_names=(
                "Automatic (Windows default)",
                "Notify before download",
                "Download, notify before install",
                "Paused",
            ),
            value_mappings=(
                {"NoAutoUpdate": None, "AUOptions": None},
                {"NoAutoUpdate": 0, "AUOptions": 2},
                {"NoAutoUpdate": 0, "AUOptions": 3},
                {"NoAutoUpdate": 1, "AUOptions": None},
            ),
        ),
    ),
    SettingDefinition(
        id="updates-exclude-drivers",
        name="Exclude drivers from quality updates",
        input_type=InputType.TOGGLE,
        registry_settings=(RegistrySetting(_WU_POLICY_KEY, "ExcludeWUDriversInQualityUpdate", enabled_value=1),),
    ),
    SettingDefinition(
        id="updates-delivery-optimization",
        name="Delivery Optimization",
        description="Download updates from other PCs",
        input_type=InputType.SELECTION,
        registry_settings=(RegistrySetting(_DELIVERY_KEY, "DODownloadMode", default_value=1),),
        selection=SelectionMetadata(
            display_names=("Off", "Local network only", "Local network and internet"),
            value_mappings=(
                {"DODownloadMode": 0},
                {"DODownloadMode": 1},
                {"DODownloadMode": 3},
            ),
        ),
    ),
    SettingDefinition(
        id="updates-restart-notifications",
        name="Restart notifications",
        input_type=InputType.TOGGLE,
        registry_settings=(
            RegistrySetting(_UX_KEY, "RestartNotificationsAllowed2", enabled_value=1, disabled_value=0),
        ),
    ),
)

MODULE = FeatureModule(id=FEATURE_ID, name="Windows Update", settings=SETTINGS)

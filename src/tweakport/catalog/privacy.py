"""Privacy settings."""

from ..core.models import (
    FeatureModule,
    InputType,
    LinkedLogic,
    RegistrySetting,
    RegistryValueKind,
    SelectionMetadata,
    SettingDefinition,
)

FEATURE_ID = "privacy"

_ADVERTISING_KEY = r"HKEY_CURRENT_USER\Software\Microsoft\Windows\CurrentVersion\AdvertisingInfo"
_SYSTEM_POLICY_KEY = r"HKEY_LOCAL_MACHINE\SOFTWARE\Policies\Microsoft\Windows\System"
_PRIVACY_KEY = r"HKEY_CURRENT_USER\Software\Microsoft\Windows\CurrentVersion\Privacy"
_DATA_COLLECTION_KEY = r"HKEY_LOCAL_MACHINE\SOFTWARE\Policies\Microsoft\Windows\DataCollection"
_LOCATION_KEY = (
    r"HKEY_LOCAL_MACHINE\SOFTWARE\Microsoft\Windows\CurrentVersion\CapabilityAccessManager\ConsentStore\location"
)
_WINDOWS_AI_KEY = r"HKEY_CURRENT_USER\Software\Policies\Microsoft\Windows\WindowsAI"

SETTINGS = (
    SettingDefinition(
        id="privacy-advertising-id",
        name="Advertising ID",
        input_type=InputType.TOGGLE,
        registry_settings=(
            RegistrySetting(_ADVERTISING_KEY, "Enabled", enabled_value=1, disabled_value=0, default_value=1),
        ),
    ),
    SettingDefinition(
        id="privacy-activity-history",
        name="Activity history",
        description="Store and upload activity history",
        input_type=InputType.TOGGLE,
        linked=True,
        linked_logic=LinkedLogic.ALL,
        registry_settings=(
            RegistrySetting(_SYSTEM_POLICY_KEY, "PublishUserActivities", enabled_value=1, disabled_value=0),
            RegistrySetting(_SYSTEM_POLICY_KEY, "UploadUserActivities", enabled_value=1, disabled_value=0),
        ),
    ),
    SettingDefinition(
        id="privacy-tailored-experiences",
        name="Tailored experiences",
        input_type=InputType.TOGGLE,
        registry_settings=(
            RegistrySetting(
                _PRIVACY_KEY,
                "TailoredExperiencesWithDiagnosticDataEnabled",
                enabled_value=1,
                disabled_value=0,
            ),
        ),
    ),
    SettingDefinition(
        id="privacy-diagnostic-data",
        name="Diagnostic data",
        input_type=InputType.SELECTION,
        registry_settings=(RegistrySetting(_DATA_COLLECTION_KEY, "AllowTelemetry", default_value=3),),
        selection=SelectionMetadata(
            display_names=("Security only", "Required", "Optional"),
            value_mappings=(
                {"AllowTelemetry": 0},
                {"AllowTelemetry": 1},
                {"AllowTelemetry": 3},
            ),
        ),
    ),
    SettingDefinition(
        id="privacy-location",
        name="Location access",
        input_type=InputType.TOGGLE,
        registry_settings=(
            RegistrySetting(
                _LOCATION_KEY,
                "Value",
                value_type=RegistryValueKind.SZ,
                enabled_value="Allow",
                disabled_value="Deny",
            ),
        ),
    ),
    SettingDefinition(
        id="privacy-recall-snapshots",
        name="Recall snapshots",
        input_type=InputType.TOGGLE,
        is_windows11_only=True,
        minimum_build_number=26100,
        registry_settings=(RegistrySetting(_WINDOWS_AI_KEY, "DisableAIDataAnalysis", disabled_value=1),),
    ),
)

MODULE = FeatureModule(id=FEATURE_ID, name="Privacy", settings=SETTINGS)

"""Notification settings."""

from ..core.models import FeatureModule, InputType, LinkedLogic, RegistrySetting, SettingDefinition

FEATURE_ID = "notifications"

_PUSH_KEY = r"HKEY_CURRENT_USER\Software\Microsoft\Windows\CurrentVersion\PushNotifications"
_NOTIFICATION_SETTINGS_KEY = r"HKEY_CURRENT_USER\Software\Microsoft\Windows\CurrentVersion\Notifications\Settings"
_CONTENT_DELIVERY_KEY = r"HKEY_CURRENT_USER\Software\Microsoft\Windows\CurrentVersion\ContentDeliveryManager"

SETTINGS = (
    SettingDefinition(
        id="notifications-toasts",
        name="App notifications",
        input_type=InputType.TOGGLE,
        registry_settings=(
            RegistrySetting(_PUSH_KEY, "ToastEnabled", enabled_value=1, disabled_value=0, default_value=1),
        ),
    ),
    SettingDefinition(
        id="notifications-lock-screen",
        name="Notifications on the lock screen",
        input_type=InputType.TOGGLE,
        registry_settings=(
            RegistrySetting(
                _NOTIFICATION_SETTINGS_KEY,
                "NOC_GLOBAL_SETTING_ALLOW_TOASTS_ABOVE_LOCK",
                enabled_value=1,
                disabled_value=0,
                default_value=1,
            ),
        ),
    ),
    SettingDefinition(
        id="notifications-tips-suggestions",
        name="Tips and suggestions",
        input_type=InputType.TOGGLE,
        linked=True,
        linked_logic=LinkedLogic.ANY,
        registry_settings=(
            RegistrySetting(_CONTENT_DELIVERY_KEY, "SubscribedContent-338389Enabled", enabled_value=1, disabled_value=0),
            RegistrySetting(_CONTENT_DELIVERY_KEY, "SoftLandingEnabled", enabled_value=1, disabled_value=0),
        ),
    ),
)

MODULE = FeatureModule(id=FEATURE_ID, name="Notifications", settings=SETTINGS)

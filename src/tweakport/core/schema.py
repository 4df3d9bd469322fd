"""On-disk configuration file schema.

JSON keys are PascalCase; Python attributes are snake_case. Items omit
fields that are None, so each item carries only the state fields that
belong to its input type.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_serializer, model_validator

from .models import InputType

CURRENT_SCHEMA_VERSION = "2.0"

# Section names as they appear in the file
OPTIMIZE_SECTION = "Optimize"
CUSTOMIZE_SECTION = "Customize"
WINDOWS_APPS_SECTION = "WindowsApps"
EXTERNAL_APPS_SECTION = "ExternalApps"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class _FileModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class ConfigurationItem(_FileModel):
    id: str | None = Field(default=None, alias="Id")
    name: str = Field(default="", alias="Name")
    input_type: InputType = Field(default=InputType.TOGGLE, alias="InputType")

    # Toggle
    is_selected: bool | None = Field(default=None, alias="IsSelected")

    # Selection
    selected_index: int | None = Field(default=None, alias="SelectedIndex")
    custom_state_values: dict[str, Any] | None = Field(default=None, alias="CustomStateValues")
    power_settings: dict[str, Any] | None = Field(default=None, alias="PowerSettings")
    power_plan_guid: str | None = Field(default=None, alias="PowerPlanGuid")
    power_plan_name: str | None = Field(default=None, alias="PowerPlanName")

    # App identity
    appx_package_name: str | None = Field(default=None, alias="AppxPackageName")
    sub_packages: list[str] | None = Field(default=None, alias="SubPackages")
    capability_name: str | None = Field(default=None, alias="CapabilityName")
    optional_feature_name: str | None = Field(default=None, alias="OptionalFeatureName")
    winget_package_id: str | None = Field(default=None, alias="WinGetPackageId")

    @field_validator("input_type", mode="before")
    @classmethod
    def _accept_numeric_input_type(cls, v: Any) -> Any:
        # Older writers stored the enum ordinal
        if v == 0 and not isinstance(v, bool):
            return InputType.TOGGLE
        if v == 1 and not isinstance(v, bool):
            return InputType.SELECTION
        return v

    @model_validator(mode="after")
    def _check_state_matches_input_type(self) -> "ConfigurationItem":
        selection_state = (
            self.selected_index is not None
            or self.custom_state_values is not None
            or self.power_settings is not None
            or self.power_plan_guid is not None
        )
        if self.input_type is InputType.TOGGLE and selection_state:
            raise ValueError(f"Toggle item {self.id!r} carries Selection state")
        if self.input_type is InputType.SELECTION and self.is_selected is not None:
            raise ValueError(f"Selection item {self.id!r} carries IsSelected")
        return self

    @model_serializer(mode="wrap")
    def _drop_unset_fields(self, handler):
        data = handler(self)
        return {key: value for key, value in data.items() if value is not None}

    @property
    def has_app_identity(self) -> bool:
        return bool(
            self.appx_package_name
            or self.capability_name
            or self.optional_feature_name
            or self.winget_package_id
        )


class ConfigSection(_FileModel):
    is_included: bool = Field(default=False, alias="IsIncluded")
    items: list[ConfigurationItem] = Field(default_factory=list, alias="Items")


class FeatureGroupSection(_FileModel):
    is_included: bool = Field(default=False, alias="IsIncluded")
    features: dict[str, ConfigSection] = Field(default_factory=dict, alias="Features")

    def item_count(self) -> int:
        return sum(len(section.items) for section in self.features.values())


class UnifiedConfigurationFile(_FileModel):
    version: str = Field(default=CURRENT_SCHEMA_VERSION, alias="Version")
    created_at: datetime = Field(default_factory=_utcnow, alias="CreatedAt")
    optimize: FeatureGroupSection = Field(default_factory=FeatureGroupSection, alias=OPTIMIZE_SECTION)
    customize: FeatureGroupSection = Field(default_factory=FeatureGroupSection, alias=CUSTOMIZE_SECTION)
    windows_apps: ConfigSection = Field(default_factory=ConfigSection, alias=WINDOWS_APPS_SECTION)
    external_apps: ConfigSection = Field(default_factory=ConfigSection, alias=EXTERNAL_APPS_SECTION)

    def feature_groups(self) -> dict[str, FeatureGroupSection]:
        return {OPTIMIZE_SECTION: self.optimize, CUSTOMIZE_SECTION: self.customize}

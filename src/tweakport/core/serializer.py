"""Export to and import from the unified configuration file."""

from __future__ import annotations

import asyncio
import json
import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, Mapping

from pydantic import ValidationError

from .catalog import CompatibleSettingsFilter, FeatureCategory
from .discovery import StateDiscoveryService
from .errors import ConfigLoadError, ConfigVersionError
from .handlers import AC_INDEX_KEY, DC_INDEX_KEY
from .models import (
    AC_VALUE_FIELD,
    ACTIVE_PLAN_FIELD,
    ACTIVE_PLAN_GUID_FIELD,
    CUSTOM_STATE_INDEX,
    DC_VALUE_FIELD,
    POWERCFG_FIELD,
    AppItem,
    AppKind,
    InputType,
    SettingDefinition,
    SettingKind,
    SettingStateResult,
)
from .ports import AppCatalog
from .schema import (
    CURRENT_SCHEMA_VERSION,
    ConfigSection,
    ConfigurationItem,
    UnifiedConfigurationFile,
)
from .selection import SelectionResolver

logger = logging.getLogger(__name__)

CONFIG_FILE_EXTENSION = ".tweakport"
BACKUP_PREFIX = "UserBackup_"


def to_json_value(value: Any) -> Any:
    """Make a raw store value JSON-safe. Binary blobs become hex strings."""
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).hex()
    if isinstance(value, (list, tuple)):
        return [to_json_value(v) for v in value]
    if isinstance(value, Mapping):
        return {k: to_json_value(v) for k, v in value.items()}
    return value


class ConfigurationExporter:
    """Builds a ``UnifiedConfigurationFile`` from the live system."""

    def __init__(
        self,
        settings_filter: CompatibleSettingsFilter,
        discovery: StateDiscoveryService,
        apps: AppCatalog | None = None,
        resolver: SelectionResolver | None = None,
    ):
        self._filter = settings_filter
        self._discovery = discovery
        self._apps = apps
        self._resolver = resolver or SelectionResolver()

    async def create_unified_configuration(self, backup: bool = False) -> UnifiedConfigurationFile:
        """Snapshot every compatible setting.

        In backup mode the Windows apps section lists installed apps rather
        than selected ones and external apps are left out.
        """
        config = UnifiedConfigurationFile()
        catalog = self._filter.catalog

        for feature_id, definitions in self._filter.get_all_filtered_settings().items():
            if not definitions:
                continue

            category = catalog.category_of(feature_id)
            if category is None:
                logger.warning("Feature %s is neither Optimize nor Customize, skipping", feature_id)
                continue

            try:
                states = await self._discovery.get_setting_states(definitions)
                items = [
                    item
                    for item in (self.project_item(d, states.get(d.id)) for d in definitions)
                    if item is not None
                ]
            except Exception as e:
                logger.error("Failed to export %s: %s", feature_id, e)
                items = []

            group = config.optimize if category is FeatureCategory.OPTIMIZE else config.customize
            group.features[feature_id] = ConfigSection(is_included=True, items=items)
            group.is_included = True
            logger.debug("Exported %d item(s) from %s", len(items), feature_id)

        if self._apps is not None:
            config.windows_apps = await self._export_apps(AppKind.WINDOWS, installed=backup)
            if not backup:
                config.external_apps = await self._export_apps(AppKind.EXTERNAL, installed=False)

        logger.info(
            "Created configuration: %d Optimize, %d Customize, %d Windows app(s), %d external app(s)",
            config.optimize.item_count(),
            config.customize.item_count(),
            len(config.windows_apps.items),
            len(config.external_apps.items),
        )
        return config

    async def select_apps(self, app_ids: Iterable[str] = (), include_all: bool = False) -> int:
        """Mark apps for the next export, by id (case-insensitive) or all installed ones.

        Returns the number of apps selected. Unknown ids are logged and ignored.
        """
        if self._apps is None:
            logger.warning("No app catalog; nothing to select")
            return 0

        wanted = {app_id.casefold() for app_id in app_ids}
        found: set[str] = set()
        total = 0
        for kind in AppKind:
            items = await asyncio.to_thread(self._apps.list_items, kind)
            chosen = [a for a in items if (include_all and a.is_installed) or a.id.casefold() in wanted]
            found.update(a.id.casefold() for a in chosen)
            self._apps.select(kind, chosen)
            total += len(chosen)

        for missing in sorted(wanted - found):
            logger.warning("App %s is not installed, not exported", missing)
        return total

    def project_item(
        self, definition: SettingDefinition, state: SettingStateResult | None
    ) -> ConfigurationItem | None:
        """Project a definition and its live state into a file item.

        Returns None when the state could not be read and for actions, which
        hold no state of their own.
        """
        if definition.kind is SettingKind.ACTION:
            return None
        if state is None or not state.success:
            logger.warning(
                "Skipping %s: %s", definition.id, state.error_message if state else "no state"
            )
            return None

        item = ConfigurationItem(id=definition.id, name=definition.name, input_type=definition.input_type)
        if definition.input_type is InputType.TOGGLE:
            item.is_selected = bool(state.is_enabled)
            return item

        raw = state.raw_values
        if definition.kind is SettingKind.POWER_PLAN:
            item.power_plan_guid = raw.get(ACTIVE_PLAN_GUID_FIELD)
            item.power_plan_name = raw.get(ACTIVE_PLAN_FIELD)
        elif isinstance(state.current_value, Mapping):
            item.power_settings = self._power_settings(definition, state.current_value)
        elif state.current_value == CUSTOM_STATE_INDEX or state.current_value is None:
            item.custom_state_values = to_json_value(dict(raw))
        else:
            item.selected_index = int(state.current_value)
        return item

    def _power_settings(self, definition: SettingDefinition, modes: Mapping[str, Any]) -> dict[str, Any]:
        ac = modes.get(AC_VALUE_FIELD)
        dc = modes.get(DC_VALUE_FIELD)
        ac_index = self._resolver.resolve_index(definition, {POWERCFG_FIELD: ac})
        dc_index = self._resolver.resolve_index(definition, {POWERCFG_FIELD: dc})
        if CUSTOM_STATE_INDEX in (ac_index, dc_index):
            return {AC_VALUE_FIELD: ac, DC_VALUE_FIELD: dc}
        return {AC_INDEX_KEY: ac_index, DC_INDEX_KEY: dc_index}

    async def _export_apps(self, kind: AppKind, installed: bool) -> ConfigSection:
        try:
            apps = await asyncio.to_thread(self._apps.list_items, kind)
        except Exception as e:
            logger.error("Failed to list %s: %s", kind.value, e)
            return ConfigSection()

        wanted = [a for a in apps if (a.is_installed if installed else a.is_selected)]
        items = [project_app(a) for a in wanted]
        return ConfigSection(is_included=bool(items), items=items)


def project_app(app: AppItem) -> ConfigurationItem:
    item = ConfigurationItem(id=app.id, name=app.name, input_type=InputType.TOGGLE, is_selected=True)
    if app.kind is AppKind.EXTERNAL:
        if app.winget_package_id:
            item.winget_package_id = app.winget_package_id[0]
        return item

    if app.appx_package_name:
        item.appx_package_name = app.appx_package_name
        if app.sub_packages:
            item.sub_packages = list(app.sub_packages)
    elif app.capability_name:
        item.capability_name = app.capability_name
    elif app.optional_feature_name:
        item.optional_feature_name = app.optional_feature_name
    return item


# Reading and writing files


def parse_configuration(text: str) -> UnifiedConfigurationFile:
    """Parse file contents.

    The version is checked before anything else is validated.

    Raises:
        ConfigVersionError: ``Version`` is not the current schema version.
        ConfigLoadError: The text is not valid JSON or does not match the schema.
    """
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as e:
        raise ConfigLoadError(f"Configuration file is not valid JSON: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigLoadError("Configuration file must contain a JSON object")

    version = raw.get("Version")
    if version != CURRENT_SCHEMA_VERSION:
        raise ConfigVersionError(version, CURRENT_SCHEMA_VERSION)

    try:
        return UnifiedConfigurationFile.model_validate(raw)
    except ValidationError as e:
        raise ConfigLoadError(f"Configuration file is invalid: {e}") from e


def load_configuration(path: str | os.PathLike) -> UnifiedConfigurationFile:
    try:
        # utf-8-sig: files written by other tools may carry a BOM
        text = Path(path).read_text(encoding="utf-8-sig")
    except OSError as e:
        raise ConfigLoadError(f"Cannot read {path}: {e}") from e
    config = parse_configuration(text)
    logger.info("Loaded configuration %s (created %s)", path, config.created_at)
    return config


def dump_configuration(config: UnifiedConfigurationFile) -> str:
    return json.dumps(config.model_dump(mode="json", by_alias=True), indent=2, ensure_ascii=False)


def save_configuration(config: UnifiedConfigurationFile, path: str | os.PathLike) -> Path:
    target = Path(path)
    if not target.suffix:
        target = target.with_suffix(CONFIG_FILE_EXTENSION)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(dump_configuration(config), encoding="utf-8")
    logger.info("Saved configuration to %s", target)
    return target


def backup_file_name(now: datetime | None = None) -> str:
    now = now or datetime.now()
    return f"{BACKUP_PREFIX}{now:%Y%m%d_%H%M%S}{CONFIG_FILE_EXTENSION}"


async def create_user_backup(
    exporter: ConfigurationExporter,
    directory: str | os.PathLike,
    now: datetime | None = None,
) -> Path:
    config = await exporter.create_unified_configuration(backup=True)
    return save_configuration(config, Path(directory) / backup_file_name(now))


def find_latest_backup(directory: str | os.PathLike) -> Path | None:
    folder = Path(directory)
    if not folder.is_dir():
        return None
    # Timestamped names sort chronologically
    backups = sorted(folder.glob(f"{BACKUP_PREFIX}*{CONFIG_FILE_EXTENSION}"))
    return backups[-1] if backups else None


def created_at_local(config: UnifiedConfigurationFile) -> datetime:
    created = config.created_at
    if created.tzinfo is None:
        created = created.replace(tzinfo=timezone.utc)
    return created.astimezone()

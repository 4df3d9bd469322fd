"""Core orchestration for tweakport imports.

Keeps the load -> reconcile -> apply -> install pipeline in one place,
decoupled from the Windows-specific implementations via ports.
"""

from __future__ import annotations

import asyncio
import logging
import os
from concurrent.futures import Future
from dataclasses import dataclass, field, replace
from typing import Callable, Iterable, Mapping, Optional

from .app_matching import find_matching_app, match_apps
from .applier import SettingApplier
from .bridge import (
    ApplicationBridge,
    ConfirmationHandler,
    SectionResult,
    build_import_confirmation_handler,
)
from .catalog import CompatibleSettingsFilter
from .config_model import ImportOptions
from .discovery import StateDiscoveryService
from .errors import ConfigLoadError, ConfigVersionError
from .models import CUSTOM_STATE_INDEX, AppItem, AppKind, InputType
from .ports import AppCatalog, BackgroundRunner, UIFeedback
from .reconciler import CompatibilityReconciler, summarize_sections
from .schema import (
    CUSTOMIZE_SECTION,
    EXTERNAL_APPS_SECTION,
    OPTIMIZE_SECTION,
    WINDOWS_APPS_SECTION,
    ConfigSection,
    ConfigurationItem,
    UnifiedConfigurationFile,
)
from .serializer import load_configuration, to_json_value
from .shell import ShellController
from .state_machine import ImportEvent, ImportPhase, ImportStateMachine

logger = logging.getLogger(__name__)

TASKBAR_CLEAN_ID = "taskbar-clean"
START_MENU_CLEAN_10_ID = "start-menu-clean-10"
START_MENU_CLEAN_11_ID = "start-menu-clean-11"
THEME_MODE_ID = "theme-mode-windows"

SectionSelector = Callable[[Mapping[str, int]], Optional[Iterable[str]]]


@dataclass
class ImportResult:
    success: bool
    message: str = ""
    cancelled: bool = False
    incompatible: list[str] = field(default_factory=list)
    section_results: dict[str, SectionResult] = field(default_factory=dict)
    failed_sections: dict[str, str] = field(default_factory=dict)
    phases: list[ImportPhase] = field(default_factory=list)
    install_future: Future | None = None


def _section_selected(options: ImportOptions, group: str, feature_id: str) -> bool:
    if options.selected_sections is None:
        return True
    return group in options.selected_sections or f"{group}_{feature_id}" in options.selected_sections


class ApplyOrchestrator:
    """Runs one import in a fixed order.

    App removal, Optimize, shell pause (only when Customize items will be
    applied), Customize, shell resume. App installation is handed to the
    background runner afterwards and not awaited.
    """

    def __init__(
        self,
        settings_filter: CompatibleSettingsFilter,
        bridge: ApplicationBridge,
        applier: SettingApplier,
        discovery: StateDiscoveryService,
        shell: ShellController,
        apps: AppCatalog | None = None,
        background: BackgroundRunner | None = None,
    ):
        self._filter = settings_filter
        self._bridge = bridge
        self._applier = applier
        self._discovery = discovery
        self._shell = shell
        self._apps = apps
        self._background = background

    async def run(
        self,
        config: UnifiedConfigurationFile,
        options: ImportOptions,
        confirmation_handler: ConfirmationHandler | None = None,
    ) -> ImportResult:
        handler = confirmation_handler or build_import_confirmation_handler(options)
        machine = ImportStateMachine()
        result = ImportResult(success=False)

        self._applier.suppress_restarts = True
        self._applier.pending_restarts.clear()
        try:
            await self._remove_apps(config, options, machine, result)

            optimize = self._plan_group(config, OPTIMIZE_SECTION, options)
            if optimize:
                machine.transition(ImportEvent.APPLY_OPTIMIZE)
                await self._apply_sections(OPTIMIZE_SECTION, optimize, handler, result)

            customize = self._plan_group(config, CUSTOMIZE_SECTION, options)
            if options.wants_action_only_items:
                await self._add_action_only_items(customize, options)

            if self._has_applicable_items(customize):
                try:
                    await self._shell.pause()
                    machine.transition(ImportEvent.PAUSE_SHELL)
                    machine.transition(ImportEvent.APPLY_CUSTOMIZE)
                    await self._apply_sections(CUSTOMIZE_SECTION, customize, handler, result)
                finally:
                    machine.transition(ImportEvent.RESUME_SHELL)
                    if not await self._shell.resume():
                        result.failed_sections["Shell"] = f"{self._shell.process_name} did not restart"
            elif customize:
                # Nothing here exists on this host; record the skips without touching the shell
                await self._apply_sections(CUSTOMIZE_SECTION, customize, handler, result)

            await self._restart_pending()
            machine.transition(ImportEvent.FINISH)
        except Exception:
            machine.transition(ImportEvent.ERROR)
            raise
        finally:
            self._applier.suppress_restarts = False
            result.phases = list(machine.history)

        result.install_future = self._schedule_installation(config, options)
        result.success = not result.failed_sections and all(
            r.success for r in result.section_results.values()
        )
        return result

    def _has_applicable_items(self, sections: dict[str, ConfigSection]) -> bool:
        return any(
            item.id and self._filter.find_setting(item.id) is not None
            for section in sections.values()
            for item in section.items
        )

    def _plan_group(
        self, config: UnifiedConfigurationFile, group_name: str, options: ImportOptions
    ) -> dict[str, ConfigSection]:
        group = config.feature_groups()[group_name]
        if not group.is_included:
            return {}

        catalog = self._filter.catalog
        plan: dict[str, ConfigSection] = {}
        for feature_id, section in group.features.items():
            if not section.is_included or not _section_selected(options, group_name, feature_id):
                continue
            if not catalog.settings_for(feature_id):
                logger.info("Ignoring unknown feature %s in %s", feature_id, group_name)
                continue
            plan[feature_id] = section
        return plan

    async def _apply_sections(
        self,
        group_name: str,
        sections: dict[str, ConfigSection],
        handler: ConfirmationHandler,
        result: ImportResult,
    ) -> None:
        for feature_id, section in sections.items():
            key = f"{group_name}_{feature_id}"
            try:
                result.section_results[key] = await self._bridge.apply_section_detailed(
                    section, feature_id, handler
                )
            except Exception as e:
                logger.error("Section %s failed: %s", key, e)
                result.failed_sections[key] = str(e)

    async def _remove_apps(
        self,
        config: UnifiedConfigurationFile,
        options: ImportOptions,
        machine: ImportStateMachine,
        result: ImportResult,
    ) -> None:
        jobs = []
        if options.process_windows_apps_removal and options.includes(WINDOWS_APPS_SECTION):
            jobs.append((AppKind.WINDOWS, config.windows_apps))
        if options.process_external_apps_removal and options.includes(EXTERNAL_APPS_SECTION):
            jobs.append((AppKind.EXTERNAL, config.external_apps))
        jobs = [(kind, section) for kind, section in jobs if section.is_included and section.items]
        if not jobs:
            return

        machine.transition(ImportEvent.REMOVE_APPS)
        for kind, section in jobs:
            key = f"{kind.value}_Removal"
            if self._apps is None:
                result.failed_sections[key] = "App catalog unavailable"
                continue
            try:
                matched = match_apps(section.items, await asyncio.to_thread(self._apps.list_items, kind))
                self._apps.select(kind, matched)
                if matched:
                    logger.info("Removing %d %s item(s)", len(matched), kind.value)
                    await self._apps.remove(kind, matched)
            except Exception as e:
                logger.error("App removal (%s) failed: %s", kind.value, e)
                result.failed_sections[key] = str(e)

    async def _add_action_only_items(self, customize: dict[str, ConfigSection], options: ImportOptions) -> None:
        present = {item.id for section in customize.values() for item in section.items}
        host = self._filter.host_info
        wanted: list[str] = []
        if options.apply_clean_taskbar:
            wanted.append(TASKBAR_CLEAN_ID)
        if options.apply_clean_start_menu:
            wanted.append(START_MENU_CLEAN_11_ID if host.is_windows11 else START_MENU_CLEAN_10_ID)
        if options.apply_theme_wallpaper:
            wanted.append(THEME_MODE_ID)

        for setting_id in wanted:
            if setting_id in present:
                continue
            definition = self._filter.find_setting(setting_id)
            if definition is None:
                logger.info("Action %s is not available on this system", setting_id)
                continue

            item = ConfigurationItem(id=definition.id, name=definition.name, input_type=definition.input_type)
            if definition.input_type is InputType.TOGGLE:
                item.is_selected = True
            else:
                # Keep the current value; only the side effect is wanted
                state = await self._discovery.get_setting_state(definition)
                if not state.success:
                    logger.warning("Cannot read %s, skipping action", setting_id)
                    continue
                if state.current_value == CUSTOM_STATE_INDEX:
                    item.custom_state_values = to_json_value(dict(state.raw_values))
                else:
                    item.selected_index = int(state.current_value)

            feature_id = self._filter.catalog.feature_of(definition.id)
            section = customize.get(feature_id)
            if section is None:
                customize[feature_id] = ConfigSection(is_included=True, items=[item])
            else:
                customize[feature_id] = section.model_copy(update={"items": [*section.items, item]})

    async def _restart_pending(self) -> None:
        pending = self._applier.pending_restarts - {self._shell.process_name}
        self._applier.pending_restarts.clear()
        for name in sorted(pending):
            try:
                await self._shell.restart(name)
            except Exception as e:
                logger.warning("Failed to restart %s: %s", name, e)

    def _schedule_installation(self, config: UnifiedConfigurationFile, options: ImportOptions) -> Future | None:
        jobs = []
        if options.process_windows_apps_installation and options.includes(WINDOWS_APPS_SECTION):
            jobs.append((AppKind.WINDOWS, config.windows_apps))
        if options.process_external_apps_installation and options.includes(EXTERNAL_APPS_SECTION):
            jobs.append((AppKind.EXTERNAL, config.external_apps))
        jobs = [(kind, section) for kind, section in jobs if section.is_included and section.items]
        if not jobs:
            return None
        if self._apps is None or self._background is None:
            logger.warning("App installation requested but no app catalog or background runner")
            return None
        return self._background.submit(self._install_apps(jobs), name="app installation")

    async def _install_apps(self, jobs: list[tuple[AppKind, ConfigSection]]) -> None:
        for kind, section in jobs:
            try:
                known = await asyncio.to_thread(self._apps.list_items, kind)
                matched = match_apps(section.items, known)
                if kind is AppKind.EXTERNAL:
                    # Package ids are installable even when the local list does not know them
                    matched_ids = {app.id for app in matched}
                    for item in section.items:
                        if item.winget_package_id and find_matching_app(item, known) is None:
                            app = AppItem(
                                id=item.id or item.winget_package_id,
                                name=item.name,
                                kind=kind,
                                winget_package_id=(item.winget_package_id,),
                            )
                            if app.id not in matched_ids:
                                matched.append(app)
                missing = [app for app in matched if not app.is_installed]
                if not missing:
                    continue
                self._apps.select(kind, missing)
                logger.info("Installing %d %s item(s)", len(missing), kind.value)
                await self._apps.install(kind, missing)
            except Exception as e:
                logger.error("App installation (%s) failed: %s", kind.value, e)


class ImportController:
    """Top-level import entry point.

    Unexpected errors stop here: they are logged with a traceback and the
    user sees a generic message. Settings already written stay written.
    """

    def __init__(
        self,
        orchestrator: ApplyOrchestrator,
        reconciler: CompatibilityReconciler,
        settings_filter: CompatibleSettingsFilter,
        ui: UIFeedback,
        section_selector: SectionSelector | None = None,
    ):
        self._orchestrator = orchestrator
        self._reconciler = reconciler
        self._filter = settings_filter
        self._ui = ui
        self._section_selector = section_selector

    async def import_file(self, path: str | os.PathLike, options: ImportOptions) -> ImportResult:
        try:
            config = load_configuration(path)
        except ConfigVersionError as e:
            logger.warning("Rejected %s: version %s", path, e.version)
            self._ui.notify("Incompatible configuration file", str(e))
            return ImportResult(success=False, message=str(e))
        except ConfigLoadError as e:
            logger.error("Failed to load %s: %s", path, e)
            self._ui.notify("Import failed", str(e))
            return ImportResult(success=False, message=str(e))

        return await self.import_configuration(config, options)

    async def import_configuration(self, config: UnifiedConfigurationFile, options: ImportOptions) -> ImportResult:
        try:
            host = self._filter.host_info
            incompatible = self._reconciler.detect_incompatible(config, host)
            if incompatible:
                logger.info("Removed %d setting(s) not supported on this system", len(incompatible))
                logger.debug("Incompatible: %s", ", ".join(incompatible))
                config = self._reconciler.filter(config, host)

            if self._section_selector is not None:
                selected = self._section_selector(summarize_sections(config))
                if selected is None:
                    logger.info("Import cancelled at section selection")
                    return ImportResult(success=False, cancelled=True, incompatible=incompatible)
                options = replace(options, selected_sections=frozenset(selected))

            result = await self._orchestrator.run(config, options)
            result.incompatible = incompatible
        except Exception as e:
            logger.exception("Import failed")
            self._ui.notify("Import failed", "An unexpected error occurred. Some settings may have been applied.")
            return ImportResult(success=False, message=str(e))

        if result.success:
            result.message = "Configuration imported successfully."
            self._ui.notify("Import complete", result.message)
        else:
            failed = sorted(
                [key for key, r in result.section_results.items() if not r.success]
                + list(result.failed_sections)
            )
            result.message = f"Configuration imported with errors in: {', '.join(failed)}"
            self._ui.notify("Import finished with errors", result.message)
        return result

#!/usr/bin/env python3
"""tweakport: export, check and import Windows tweak configurations"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .adapters.config_env import load_engine_settings
from .adapters.host import WindowsHostDescriptor
from .adapters.ui_feedback import ConsoleFeedback
from .async_bridge import get_async_bridge
from .catalog import build_default_catalog
from .config import config
from .core.applier import SettingApplier
from .core.bridge import ApplicationBridge, ItemStatus
from .core.catalog import CompatibleSettingsFilter, SettingCatalog, describe_host
from .core.config_model import EngineSettings, ImportOptions
from .core.controller import ApplyOrchestrator, ImportController, ImportResult
from .core.discovery import StateDiscoveryService
from .core.errors import ConfigLoadError, ConfigVersionError
from .core.handlers import build_handlers
from .core.ports import (
    ActionRunner,
    AppCatalog,
    BackgroundRunner,
    HostDescriptor,
    PowerPlanService,
    ProcessControl,
    SettingsStore,
    UIFeedback,
)
from .core.reconciler import CompatibilityReconciler, summarize_sections
from .core.serializer import (
    ConfigurationExporter,
    create_user_backup,
    created_at_local,
    find_latest_backup,
    load_configuration,
    save_configuration,
)
from .core.shell import ShellController
from .log_config import setup_logging
from .platform_utils import IS_WINDOWS, print_platform_info

logger = logging.getLogger("tweakport.cli")


class Tweakport:
    """Wires the Windows adapters into the engine.

    Every collaborator can be passed in; anything left out gets the
    Windows implementation.
    """

    def __init__(
        self,
        store: SettingsStore | None = None,
        host: HostDescriptor | None = None,
        process_control: ProcessControl | None = None,
        power: PowerPlanService | None = None,
        apps: AppCatalog | None = None,
        actions: ActionRunner | None = None,
        ui: UIFeedback | None = None,
        settings: EngineSettings | None = None,
        catalog: SettingCatalog | None = None,
        background: BackgroundRunner | None = None,
    ):
        if store is None:
            from .adapters.registry_store import WindowsRegistryStore

            store = WindowsRegistryStore()
        if process_control is None:
            from .adapters.process_control import PsutilProcessControl

            process_control = PsutilProcessControl()
        if power is None:
            from .adapters.power import PowerCfgService

            power = PowerCfgService()
        if apps is None:
            from .adapters.apps import PowerShellAppCatalog

            apps = PowerShellAppCatalog()
        if actions is None:
            from .adapters.actions import WindowsActionRunner

            actions = WindowsActionRunner(store)

        self.settings = settings or load_engine_settings()
        self.catalog = catalog or build_default_catalog()
        self.ui = ui or ConsoleFeedback()
        self.filter = CompatibleSettingsFilter(self.catalog, host or WindowsHostDescriptor())

        self.applier = SettingApplier(build_handlers(store, power, actions), actions, process_control)
        self.discovery = StateDiscoveryService(self.applier, self.settings.discovery_concurrency)
        self.exporter = ConfigurationExporter(self.filter, self.discovery, apps)
        self.reconciler = CompatibilityReconciler(self.catalog)
        self.bridge = ApplicationBridge(self.filter, self.applier)
        self.orchestrator = ApplyOrchestrator(
            self.filter,
            self.bridge,
            self.applier,
            self.discovery,
            ShellController(process_control, self.settings),
            apps=apps,
            background=background,
        )
        self.importer = ImportController(self.orchestrator, self.reconciler, self.filter, self.ui)


def _require_windows() -> bool:
    if not IS_WINDOWS:
        print("This command only runs on Windows.", file=sys.stderr)
        return False
    return True


def _print_result(result: ImportResult) -> None:
    for key, section in result.section_results.items():
        failed = [r for r in section.items if r.status in (ItemStatus.FAILED, ItemStatus.DECLINED)]
        print(f"  {key}: {len(section.items) - len(failed)}/{len(section.items)} ok")
        for item in failed:
            print(f"    ✗ {item.setting_id}: {item.message or item.status.value}")
    for key, message in result.failed_sections.items():
        print(f"  {key}: {message}")
    if result.incompatible:
        print(f"  {len(result.incompatible)} setting(s) skipped as incompatible with this system")


def cmd_export(args: argparse.Namespace, app: Tweakport) -> int:
    bridge = get_async_bridge()
    if args.app or args.all_apps:
        count = bridge.run_sync(app.exporter.select_apps(args.app or (), include_all=args.all_apps))
        print(f"Including {count} app(s)")
    configuration = bridge.run_sync(app.exporter.create_unified_configuration())
    path = save_configuration(configuration, args.path)
    print(f"✓ Exported to {path}")
    return 0


def cmd_backup(args: argparse.Namespace, app: Tweakport) -> int:
    bridge = get_async_bridge()
    path = bridge.run_sync(create_user_backup(app.exporter, args.dir or config.BACKUP_DIR))
    print(f"✓ Backup written to {path}")
    return 0


def _run_import(app: Tweakport, path: Path, options: ImportOptions) -> int:
    bridge = get_async_bridge()
    result = bridge.run_sync(app.importer.import_file(path, options))
    _print_result(result)

    if result.install_future is not None:
        print("⏳ Installing apps in the background...")
        bridge.wait_idle()
    return 0 if result.success else 1


def cmd_import(args: argparse.Namespace, app: Tweakport) -> int:
    options = ImportOptions(
        process_windows_apps_removal=args.remove_apps,
        process_external_apps_removal=args.remove_external_apps,
        process_windows_apps_installation=args.install_apps,
        process_external_apps_installation=args.install_apps,
        apply_theme_wallpaper=args.theme_wallpaper,
        apply_clean_taskbar=args.clean_taskbar,
        apply_clean_start_menu=args.clean_start_menu,
        selected_sections=frozenset(args.section) if args.section else None,
    )
    return _run_import(app, Path(args.path), options)


def cmd_restore(args: argparse.Namespace, app: Tweakport) -> int:
    latest = find_latest_backup(args.dir or config.BACKUP_DIR)
    if latest is None:
        print("No backup found.", file=sys.stderr)
        return 1
    print(f"Restoring {latest.name}")
    return _run_import(app, latest, ImportOptions())


def cmd_check(args: argparse.Namespace, host: HostDescriptor) -> int:
    try:
        configuration = load_configuration(args.path)
    except ConfigVersionError as e:
        print(f"✗ {e}", file=sys.stderr)
        return 2
    except ConfigLoadError as e:
        print(f"✗ {e}", file=sys.stderr)
        return 1

    host_info = describe_host(host)
    reconciler = CompatibilityReconciler(build_default_catalog())
    incompatible = reconciler.detect_incompatible(configuration, host_info)
    filtered = reconciler.filter(configuration, host_info)

    print(f"Created: {created_at_local(configuration):%Y-%m-%d %H:%M}")
    for section, count in summarize_sections(filtered).items():
        print(f"  {section}: {count}")
    if incompatible:
        print(f"Not applicable on build {host_info.build_number}:")
        for entry in incompatible:
            print(f"  - {entry}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="tweakport", description=__doc__)
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("export", help="Export the current settings")
    p.add_argument("path")
    p.add_argument("--app", action="append", help="Include this installed app by id (repeatable)")
    p.add_argument("--all-apps", action="store_true", help="Include every installed app")

    p = sub.add_parser("import", help="Import and apply a configuration file")
    p.add_argument("path")
    p.add_argument("--section", action="append", help="Only apply this section (repeatable), e.g. Optimize_power")
    p.add_argument("--remove-apps", action="store_true", help="Remove the Windows apps listed in the file")
    p.add_argument("--remove-external-apps", action="store_true", help="Uninstall the external apps listed in the file")
    p.add_argument("--install-apps", action="store_true", help="Install the apps listed in the file")
    p.add_argument("--theme-wallpaper", action="store_true", help="Apply the default wallpaper for the theme")
    p.add_argument("--clean-taskbar", action="store_true", help="Unpin everything from the taskbar")
    p.add_argument("--clean-start-menu", action="store_true", help="Unpin everything from the Start menu")

    p = sub.add_parser("check", help="Validate a file and list settings that do not apply here")
    p.add_argument("path")
    p.add_argument("--build", type=int, help="Check against this build instead of the running one")
    p.add_argument("--windows11", action="store_true", help="With --build: treat the host as Windows 11")

    p = sub.add_parser("backup", help="Write a timestamped backup of the current settings")
    p.add_argument("--dir", type=Path)

    p = sub.add_parser("restore", help="Import the most recent backup")
    p.add_argument("--dir", type=Path)

    sub.add_parser("info", help="Show platform information")
    return parser


class _FixedHost:
    def __init__(self, build: int, windows11: bool):
        self._build = build
        self._windows11 = windows11

    def is_windows11(self) -> bool:
        return self._windows11

    def get_build_number(self) -> int:
        return self._build


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    setup_logging(
        level="DEBUG" if args.verbose else config.LOG_LEVEL,
        log_dir=config.LOG_DIR,
        max_size_mb=config.LOG_MAX_SIZE_MB,
        backup_count=config.LOG_BACKUP_COUNT,
    )

    if args.command == "info":
        print_platform_info()
        return 0

    if args.command == "check":
        host = _FixedHost(args.build, args.windows11) if args.build is not None else WindowsHostDescriptor()
        return cmd_check(args, host)

    if not _require_windows():
        return 1

    config.create_dirs()
    app = Tweakport(background=get_async_bridge())
    commands = {
        "export": cmd_export,
        "import": cmd_import,
        "backup": cmd_backup,
        "restore": cmd_restore,
    }
    try:
        return commands[args.command](args, app)
    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        return 130


if __name__ == "__main__":
    sys.exit(main())

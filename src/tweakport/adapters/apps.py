"""App catalog adapter over PowerShell (Appx packages) and winget."""

from __future__ import annotations

import asyncio
import json
import logging
import subprocess
import tempfile
from dataclasses import replace
from pathlib import Path
from typing import Iterable

from ..core.models import AppItem, AppKind

logger = logging.getLogger(__name__)

_LIST_APPX = "Get-AppxPackage | Select-Object Name, PackageFullName | ConvertTo-Json -Compress"


def _run(args: list[str], timeout: float = 60.0) -> subprocess.CompletedProcess[str] | None:
    try:
        return subprocess.run(args, capture_output=True, text=True, timeout=timeout)
    except Exception:
        return None


def _powershell(command: str) -> list[str]:
    return ["powershell", "-NoProfile", "-NonInteractive", "-Command", command]


def parse_appx_list(output: str) -> list[AppItem]:
    if not output.strip():
        return []
    data = json.loads(output)
    if isinstance(data, dict):
        data = [data]
    return [
        AppItem(
            id=entry["Name"],
            name=entry["Name"],
            kind=AppKind.WINDOWS,
            appx_package_name=entry["Name"],
            is_installed=True,
        )
        for entry in data
        if entry.get("Name")
    ]


def parse_winget_export(data: dict) -> list[AppItem]:
    items = []
    for source in data.get("Sources", []):
        for package in source.get("Packages", []):
            package_id = package.get("PackageIdentifier")
            if package_id:
                items.append(
                    AppItem(
                        id=package_id,
                        name=package_id,
                        kind=AppKind.EXTERNAL,
                        winget_package_id=(package_id,),
                        is_installed=True,
                    )
                )
    return items


class PowerShellAppCatalog:
    """Lists installed apps; remembers selections made during a run."""

    def __init__(self):
        self._selected: dict[AppKind, set[str]] = {kind: set() for kind in AppKind}

    def list_items(self, kind: AppKind) -> list[AppItem]:
        items = self._list_appx() if kind is AppKind.WINDOWS else self._list_winget()
        selected = self._selected[kind]
        return [replace(item, is_selected=item.id in selected) for item in items]

    def _list_appx(self) -> list[AppItem]:
        result = _run(_powershell(_LIST_APPX))
        if not result or result.returncode != 0:
            logger.warning("Could not list Appx packages")
            return []
        return parse_appx_list(result.stdout)

    def _list_winget(self) -> list[AppItem]:
        with tempfile.TemporaryDirectory() as tmp:
            target = Path(tmp) / "winget.json"
            result = _run(["winget", "export", "-o", str(target), "--accept-source-agreements"])
            if not result or not target.exists():
                logger.warning("Could not list winget packages")
                return []
            return parse_winget_export(json.loads(target.read_text(encoding="utf-8-sig")))

    def select(self, kind: AppKind, items: Iterable[AppItem]) -> None:
        self._selected[kind] = {item.id for item in items}

    async def install(self, kind: AppKind, items: list[AppItem]) -> None:
        if kind is AppKind.WINDOWS:
            logger.warning("Reinstalling Appx packages is not supported; skipped %d item(s)", len(items))
            return
        for item in items:
            package_id = item.winget_package_id[0] if item.winget_package_id else item.id
            result = await asyncio.to_thread(
                _run,
                ["winget", "install", "--id", package_id, "-e", "--silent",
                 "--accept-package-agreements", "--accept-source-agreements"],
                1800.0,
            )
            if not result or result.returncode != 0:
                logger.error("winget install %s failed", package_id)
            else:
                logger.info("Installed %s", package_id)

    async def remove(self, kind: AppKind, items: list[AppItem]) -> None:
        for item in items:
            if kind is AppKind.WINDOWS:
                name = (item.appx_package_name or item.id).replace("'", "''")
                args = _powershell(f"Get-AppxPackage -Name '{name}' | Remove-AppxPackage")
            else:
                package_id = item.winget_package_id[0] if item.winget_package_id else item.id
                args = ["winget", "uninstall", "--id", package_id, "-e", "--silent"]
            result = await asyncio.to_thread(_run, args, 600.0)
            if not result or result.returncode != 0:
                logger.error("Failed to remove %s", item.id)
            else:
                logger.info("Removed %s", item.id)

"""Power plan adapter over the powercfg command line tool."""

from __future__ import annotations

import logging
import re
import subprocess

from ..core.errors import SettingApplyError
from ..core.models import PowerPlan

logger = logging.getLogger(__name__)

_PLAN_LINE = re.compile(
    r"GUID:\s*(?P<guid>[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12})"
    r"\s*\((?P<name>[^)]*)\)(?P<active>\s*\*)?"
)
_AC_INDEX = re.compile(r"Current AC Power Setting Index:\s*0x([0-9a-fA-F]+)")
_DC_INDEX = re.compile(r"Current DC Power Setting Index:\s*0x([0-9a-fA-F]+)")


def _run(args: list[str], timeout: float = 10.0) -> subprocess.CompletedProcess[str] | None:
    try:
        return subprocess.run(args, capture_output=True, text=True, timeout=timeout)
    except Exception:
        return None


def _check(args: list[str]) -> str:
    result = _run(args)
    if result is None:
        raise SettingApplyError(f"Failed to run {' '.join(args)}")
    if result.returncode != 0:
        raise SettingApplyError(f"{' '.join(args)} exited with {result.returncode}: {result.stderr.strip()}")
    return result.stdout


def parse_plan_list(output: str) -> list[PowerPlan]:
    plans = []
    for match in _PLAN_LINE.finditer(output):
        plans.append(
            PowerPlan(
                guid=match.group("guid").lower(),
                name=match.group("name").strip(),
                is_active=bool(match.group("active")),
            )
        )
    return plans


def parse_setting_query(output: str) -> tuple[int | None, int | None]:
    ac = _AC_INDEX.search(output)
    dc = _DC_INDEX.search(output)
    return (int(ac.group(1), 16) if ac else None, int(dc.group(1), 16) if dc else None)


class PowerCfgService:
    def list_plans(self) -> list[PowerPlan]:
        result = _run(["powercfg", "/list"])
        if not result or not result.stdout:
            return []
        return parse_plan_list(result.stdout)

    def set_active_plan(self, guid: str) -> None:
        _check(["powercfg", "/setactive", guid])
        logger.info("Activated power plan %s", guid)

    def read_setting(self, subgroup_guid: str, setting_guid: str) -> tuple[int | None, int | None]:
        result = _run(["powercfg", "/query", "SCHEME_CURRENT", subgroup_guid, setting_guid])
        if not result or result.returncode != 0:
            return None, None
        return parse_setting_query(result.stdout)

    def write_setting(
        self,
        subgroup_guid: str,
        setting_guid: str,
        ac_value: int | None = None,
        dc_value: int | None = None,
    ) -> None:
        if ac_value is not None:
            _check(["powercfg", "/setacvalueindex", "SCHEME_CURRENT", subgroup_guid, setting_guid, str(int(ac_value))])
        if dc_value is not None:
            _check(["powercfg", "/setdcvalueindex", "SCHEME_CURRENT", subgroup_guid, setting_guid, str(int(dc_value))])
        # Re-activating the current scheme makes the new indices take effect
        _check(["powercfg", "/setactive", "SCHEME_CURRENT"])

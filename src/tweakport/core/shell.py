"""Pause and resume the desktop shell around Customize writes."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

from .config_model import EngineSettings
from .ports import ProcessControl

logger = logging.getLogger(__name__)


class ShellController:
    """Stops the shell process and brings it back with bounded polling.

    Windows usually restarts the shell on its own after it is killed, so
    ``resume`` first waits for that. If the process does not come back
    within the poll budget it is started directly and verified with a
    second bounded poll.
    """

    def __init__(
        self,
        process_control: ProcessControl,
        settings: EngineSettings,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self._process_control = process_control
        self._settings = settings
        self._sleep = sleep

    @property
    def process_name(self) -> str:
        return self._settings.shell_process_name

    async def _is_running(self) -> bool:
        return await asyncio.to_thread(self._process_control.is_process_running, self.process_name)

    async def pause(self) -> bool:
        """Kill the shell. Returns False if it was not running."""
        if not await self._is_running():
            logger.info("%s is not running, nothing to pause", self.process_name)
            return False
        logger.info("Stopping %s", self.process_name)
        await asyncio.to_thread(self._process_control.kill_process, self.process_name)
        await self._sleep(self._settings.shell_kill_settle_delay)
        return True

    async def resume(self) -> bool:
        """Make sure the shell is running again. Returns False if it never came back."""
        settings = self._settings

        for _ in range(settings.shell_restart_max_polls):
            if await self._is_running():
                logger.info("%s restarted on its own", self.process_name)
                return True
            await self._sleep(settings.shell_restart_poll_interval)

        logger.info("%s did not restart, starting it", self.process_name)
        await asyncio.to_thread(self._process_control.start_process, self.process_name)

        for _ in range(settings.shell_start_verify_max_polls):
            await self._sleep(settings.shell_start_verify_interval)
            if await self._is_running():
                return True

        logger.warning("%s is still not running after a manual start", self.process_name)
        return False

    async def restart(self, name: str) -> None:
        """Kill and start an arbitrary process."""
        if await asyncio.to_thread(self._process_control.is_process_running, name):
            await asyncio.to_thread(self._process_control.kill_process, name)
        await asyncio.to_thread(self._process_control.start_process, name)

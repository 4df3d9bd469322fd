"""Live state discovery for catalog definitions."""

from __future__ import annotations

import asyncio
import logging
from typing import Iterable

from .applier import SettingApplier
from .models import SettingDefinition, SettingStateResult

logger = logging.getLogger(__name__)


class StateDiscoveryService:
    """Reads the current state of definitions without writing anything.

    Reads for different definitions run concurrently in worker threads,
    at most ``concurrency`` at a time. One definition failing produces an
    unsuccessful result for that definition only.
    """

    def __init__(self, applier: SettingApplier, concurrency: int = 8):
        self._applier = applier
        self._concurrency = max(1, concurrency)

    async def get_setting_states(
        self, definitions: Iterable[SettingDefinition]
    ) -> dict[str, SettingStateResult]:
        definitions = list(definitions)
        if not definitions:
            return {}

        semaphore = asyncio.Semaphore(self._concurrency)

        async def _read(definition: SettingDefinition) -> SettingStateResult:
            async with semaphore:
                try:
                    return await asyncio.to_thread(self._applier.read, definition)
                except Exception as e:
                    logger.warning("Failed to read state of %s: %s", definition.id, e)
                    return SettingStateResult.failed(str(e))

        results = await asyncio.gather(*(_read(d) for d in definitions))
        return {d.id: r for d, r in zip(definitions, results)}

    async def get_setting_state(self, definition: SettingDefinition) -> SettingStateResult:
        states = await self.get_setting_states([definition])
        return states[definition.id]

"""Single entry point for reading and writing one setting."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from .errors import SettingApplyError
from .handlers import SettingHandler
from .models import SettingDefinition, SettingKind, SettingStateResult
from .ports import ActionRunner, ProcessControl

logger = logging.getLogger(__name__)


class SettingApplier:
    """Dispatches reads and writes to the handler tagged by ``definition.kind``.

    Settings that need a process restart restart it right away, unless
    ``suppress_restarts`` is set; then the process name is queued in
    ``pending_restarts`` for the caller to handle once.
    """

    def __init__(
        self,
        handlers: Mapping[SettingKind, SettingHandler],
        actions: ActionRunner,
        process_control: ProcessControl | None = None,
    ):
        self._handlers = dict(handlers)
        self._actions = actions
        self._process_control = process_control
        self.suppress_restarts = False
        self.pending_restarts: set[str] = set()

    def _handler(self, definition: SettingDefinition) -> SettingHandler:
        handler = self._handlers.get(definition.kind)
        if handler is None:
            raise SettingApplyError(f"No handler for {definition.kind} ({definition.id})")
        return handler

    def read(self, definition: SettingDefinition) -> SettingStateResult:
        return self._handler(definition).read(definition)

    def apply(self, definition: SettingDefinition, value: Any, auxiliary: bool = True) -> None:
        handler = self._handler(definition)

        if definition.kind is SettingKind.ACTION:
            if not auxiliary:
                logger.info("Skipping %s: option disabled for this run", definition.id)
                return
            handler.apply(definition, value)
            return

        handler.apply(definition, value)
        logger.debug("Applied %s = %r", definition.id, value)

        if auxiliary and definition.auxiliary_action:
            self._actions.run(definition.auxiliary_action, definition)

        if definition.restart_process:
            self._restart(definition.restart_process)

    def _restart(self, name: str) -> None:
        if self.suppress_restarts:
            self.pending_restarts.add(name)
            return
        if self._process_control is None:
            logger.warning("Cannot restart %s: no process control available", name)
            return
        if self._process_control.is_process_running(name):
            self._process_control.kill_process(name)
        self._process_control.start_process(name)

"""Phase state machine for one import run."""

from __future__ import annotations

from enum import Enum, auto
import logging


class ImportPhase(Enum):
    IDLE = auto()
    REMOVING_APPS = auto()
    APPLYING_OPTIMIZE = auto()
    SHELL_PAUSED = auto()
    APPLYING_CUSTOMIZE = auto()
    RESUMING_SHELL = auto()
    DONE = auto()
    ERROR = auto()


class ImportEvent(Enum):
    REMOVE_APPS = auto()
    APPLY_OPTIMIZE = auto()
    PAUSE_SHELL = auto()
    APPLY_CUSTOMIZE = auto()
    RESUME_SHELL = auto()
    FINISH = auto()
    ERROR = auto()
    RESET = auto()


_TRANSITIONS = {
    ImportPhase.IDLE: {
        ImportEvent.REMOVE_APPS: ImportPhase.REMOVING_APPS,
        ImportEvent.APPLY_OPTIMIZE: ImportPhase.APPLYING_OPTIMIZE,
        ImportEvent.PAUSE_SHELL: ImportPhase.SHELL_PAUSED,
        ImportEvent.FINISH: ImportPhase.DONE,
        ImportEvent.ERROR: ImportPhase.ERROR,
    },
    ImportPhase.REMOVING_APPS: {
        ImportEvent.APPLY_OPTIMIZE: ImportPhase.APPLYING_OPTIMIZE,
        ImportEvent.PAUSE_SHELL: ImportPhase.SHELL_PAUSED,
        ImportEvent.FINISH: ImportPhase.DONE,
        ImportEvent.ERROR: ImportPhase.ERROR,
    },
    ImportPhase.APPLYING_OPTIMIZE: {
        ImportEvent.PAUSE_SHELL: ImportPhase.SHELL_PAUSED,
        ImportEvent.FINISH: ImportPhase.DONE,
        ImportEvent.ERROR: ImportPhase.ERROR,
    },
    ImportPhase.SHELL_PAUSED: {
        ImportEvent.APPLY_CUSTOMIZE: ImportPhase.APPLYING_CUSTOMIZE,
        ImportEvent.RESUME_SHELL: ImportPhase.RESUMING_SHELL,
        ImportEvent.ERROR: ImportPhase.ERROR,
    },
    ImportPhase.APPLYING_CUSTOMIZE: {
        ImportEvent.RESUME_SHELL: ImportPhase.RESUMING_SHELL,
        ImportEvent.ERROR: ImportPhase.ERROR,
    },
    ImportPhase.RESUMING_SHELL: {
        ImportEvent.FINISH: ImportPhase.DONE,
        ImportEvent.ERROR: ImportPhase.ERROR,
    },
    ImportPhase.DONE: {
        ImportEvent.RESET: ImportPhase.IDLE,
    },
    ImportPhase.ERROR: {
        ImportEvent.RESUME_SHELL: ImportPhase.RESUMING_SHELL,
        ImportEvent.RESET: ImportPhase.IDLE,
    },
}


class ImportStateMachine:
    def __init__(self):
        self.state = ImportPhase.IDLE
        self.history: list[ImportPhase] = [self.state]

    def can(self, event: ImportEvent) -> bool:
        return event in _TRANSITIONS.get(self.state, {})

    def transition(self, event: ImportEvent) -> ImportPhase:
        next_state = _TRANSITIONS.get(self.state, {}).get(event, self.state)
        if next_state == self.state and event not in _TRANSITIONS.get(self.state, {}):
            logging.getLogger(__name__).warning(
                "Invalid import phase transition: %s --%s--> %s", self.state, event, next_state
            )
            return self.state
        self.state = next_state
        self.history.append(next_state)
        return self.state

"""UI feedback adapter."""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


class ConsoleFeedback:
    """Prints notifications to the terminal and mirrors them to the log."""

    def __init__(self, quiet: bool = False):
        self._quiet = quiet

    def notify(self, title: str, message: str) -> None:
        logger.info("%s: %s", title, message)
        if not self._quiet:
            print(f"{title}: {message}")

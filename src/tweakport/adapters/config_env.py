"""Env configuration adapter producing a structured EngineSettings."""

from __future__ import annotations

from ..config import config as env_config
from ..core.config_model import EngineSettings


def load_engine_settings() -> EngineSettings:
    return EngineSettings(
        shell_process_name=env_config.SHELL_PROCESS_NAME,
        shell_kill_settle_delay=env_config.SHELL_KILL_SETTLE_DELAY,
        shell_restart_poll_interval=env_config.SHELL_RESTART_POLL_INTERVAL,
        shell_restart_max_polls=env_config.SHELL_RESTART_MAX_POLLS,
        shell_start_verify_interval=env_config.SHELL_START_VERIFY_INTERVAL,
        shell_start_verify_max_polls=env_config.SHELL_START_VERIFY_MAX_POLLS,
        discovery_concurrency=env_config.DISCOVERY_CONCURRENCY,
    )

"""Configuration for tweakport"""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


def _local_app_data() -> Path:
    base = os.getenv("LOCALAPPDATA")
    if base:
        return Path(base) / "tweakport"
    return Path.home() / ".local" / "share" / "tweakport"


class Config:
    """Environment-backed configuration"""

    # Paths
    APP_DATA_DIR = _local_app_data()
    LOG_DIR = Path(os.getenv("LOG_DIR", str(APP_DATA_DIR / "Logs")))
    BACKUP_DIR = Path(os.getenv("BACKUP_DIR", str(APP_DATA_DIR / "Backup")))

    # Logging
    DEBUG = os.getenv("DEBUG", "false").lower() == "true"
    LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG" if DEBUG else "INFO")
    LOG_MAX_SIZE_MB = int(os.getenv("LOG_MAX_SIZE_MB", "10"))
    LOG_BACKUP_COUNT = int(os.getenv("LOG_BACKUP_COUNT", "5"))

    # Shell pause/resume around Customize settings
    SHELL_PROCESS_NAME = os.getenv("SHELL_PROCESS_NAME", "explorer")
    SHELL_KILL_SETTLE_DELAY = float(os.getenv("SHELL_KILL_SETTLE_DELAY", "1.0"))
    SHELL_RESTART_POLL_INTERVAL = float(os.getenv("SHELL_RESTART_POLL_INTERVAL", "0.25"))
    SHELL_RESTART_MAX_POLLS = int(os.getenv("SHELL_RESTART_MAX_POLLS", "20"))
    SHELL_START_VERIFY_INTERVAL = float(os.getenv("SHELL_START_VERIFY_INTERVAL", "0.5"))
    SHELL_START_VERIFY_MAX_POLLS = int(os.getenv("SHELL_START_VERIFY_MAX_POLLS", "10"))

    # Discovery
    DISCOVERY_CONCURRENCY = int(os.getenv("DISCOVERY_CONCURRENCY", "8"))

    @classmethod
    def create_dirs(cls):
        cls.LOG_DIR.mkdir(parents=True, exist_ok=True)
        cls.BACKUP_DIR.mkdir(parents=True, exist_ok=True)


config = Config()

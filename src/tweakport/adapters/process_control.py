"""Process control adapter using psutil."""

from __future__ import annotations

import logging
import subprocess

import psutil

from ..platform_utils import IS_WINDOWS

logger = logging.getLogger(__name__)


def _image_name(name: str) -> str:
    name = name.strip()
    if IS_WINDOWS and not name.lower().endswith(".exe"):
        return f"{name}.exe"
    return name


def _matching(name: str) -> list[psutil.Process]:
    wanted = _image_name(name).lower()
    found = []
    for proc in psutil.process_iter(["name"]):
        proc_name = (proc.info.get("name") or "").lower()
        if proc_name == wanted:
            found.append(proc)
    return found


class PsutilProcessControl:
    def __init__(self, kill_timeout: float = 5.0):
        self._kill_timeout = kill_timeout

    def is_process_running(self, name: str) -> bool:
        return bool(_matching(name))

    def kill_process(self, name: str) -> None:
        procs = _matching(name)
        for proc in procs:
            try:
                proc.kill()
            except psutil.NoSuchProcess:
                continue
            except psutil.AccessDenied:
                logger.warning("Access denied killing %s (pid %d)", name, proc.pid)
        _, alive = psutil.wait_procs(procs, timeout=self._kill_timeout)
        if alive:
            logger.warning("%d %s process(es) survived kill", len(alive), name)

    def start_process(self, name: str) -> None:
        # Detached so the shell outlives us
        flags = 0
        if IS_WINDOWS:
            flags = subprocess.DETACHED_PROCESS | subprocess.CREATE_NEW_PROCESS_GROUP
        subprocess.Popen(
            [_image_name(name)],
            creationflags=flags,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            close_fds=True,
        )
        logger.info("Started %s", name)

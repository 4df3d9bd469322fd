"""Persistent background event loop for tweakport.

The CLI is synchronous, while discovery and the apply pipeline are
coroutines. This module keeps one asyncio loop alive in a daemon thread so
that:

- the CLI can run a pipeline to completion with ``run_sync``;
- the import pipeline can hand app installation off with ``submit`` and
  return to the caller without waiting on it.

    +------------------+         +----------------------+
    | CLI THREAD       |         | LOOP THREAD          |
    |                  |         |                      |
    | run_sync(import) |-------->| ApplyOrchestrator    |
    |                  |<--------|   returns result     |
    |                  |         |   submit(install) -+ |
    | exit code        |         |   install runs    <+ |
    +------------------+         +----------------------+
"""

from __future__ import annotations

import asyncio
import atexit
import logging
import threading
from concurrent.futures import Future
from typing import Any, Coroutine

logger = logging.getLogger(__name__)


class AsyncBridge:
    """Runs coroutines on a dedicated loop thread.

    Example:
        bridge = AsyncBridge()
        bridge.start()
        result = bridge.run_sync(exporter.create_unified_configuration())
        bridge.stop()
    """

    def __init__(self):
        self._loop: asyncio.AbstractEventLoop | None = None
        self._thread: threading.Thread | None = None
        self._started = threading.Event()
        self._lock = threading.Lock()

    def _run_loop(self):
        self._loop = asyncio.new_event_loop()
        asyncio.set_event_loop(self._loop)
        self._started.set()

        try:
            self._loop.run_forever()
        finally:
            pending = asyncio.all_tasks(self._loop)
            for task in pending:
                task.cancel()
            if pending:
                self._loop.run_until_complete(asyncio.gather(*pending, return_exceptions=True))
            self._loop.close()
            self._loop = None

    def start(self) -> None:
        """Start the loop thread. No-op if already running."""
        with self._lock:
            if self._thread is not None and self._thread.is_alive():
                return

            self._started.clear()
            self._thread = threading.Thread(
                target=self._run_loop,
                name="tweakport-loop",
                daemon=True,
            )
            self._thread.start()

            self._started.wait(timeout=5.0)
            if not self._started.is_set():
                raise RuntimeError("Failed to start async bridge event loop")

    def stop(self, timeout: float = 5.0) -> None:
        """Stop the loop and join its thread. Pending background work is cancelled."""
        with self._lock:
            if self._loop is not None:
                self._loop.call_soon_threadsafe(self._loop.stop)

            if self._thread is not None:
                self._thread.join(timeout=timeout)
                self._thread = None

            self._started.clear()

    def submit(self, coro: Coroutine[Any, Any, Any], name: str | None = None) -> Future:
        """Schedule a coroutine on the loop and return immediately.

        Failures of the coroutine are logged when it finishes; callers that
        never look at the returned future still get the error in the log.
        """
        if self._loop is None:
            raise RuntimeError("AsyncBridge not started. Call start() first.")

        future = asyncio.run_coroutine_threadsafe(coro, self._loop)
        label = name or getattr(coro, "__qualname__", "background task")
        future.add_done_callback(lambda f: _log_outcome(label, f))
        return future

    @property
    def is_running(self) -> bool:
        return (
            self._thread is not None
            and self._thread.is_alive()
            and self._loop is not None
            and self._loop.is_running()
        )

    def run_sync(self, coro: Coroutine[Any, Any, Any], timeout: float | None = None) -> Any:
        """Submit a coroutine and block the calling thread until it returns.

        Raises:
            RuntimeError: If the bridge is not started.
            TimeoutError: If timeout expires.
        """
        if self._loop is None:
            raise RuntimeError("AsyncBridge not started. Call start() first.")
        return asyncio.run_coroutine_threadsafe(coro, self._loop).result(timeout=timeout)

    def wait_idle(self, timeout: float | None = None) -> None:
        """Block until every task currently scheduled on the loop has finished."""
        if self._loop is None:
            return

        async def _drain():
            current = asyncio.current_task()
            others = [t for t in asyncio.all_tasks() if t is not current]
            if others:
                await asyncio.wait(others)

        asyncio.run_coroutine_threadsafe(_drain(), self._loop).result(timeout=timeout)


def _log_outcome(label: str, future: Future) -> None:
    if future.cancelled():
        logger.info("%s cancelled", label)
        return
    error = future.exception()
    if error is not None:
        logger.error("%s failed: %s", label, error, exc_info=error)


# Module-level singleton
_bridge_instance: AsyncBridge | None = None
_bridge_lock = threading.Lock()


def get_async_bridge() -> AsyncBridge:
    """Return the shared bridge, starting it on first use."""
    global _bridge_instance

    with _bridge_lock:
        if _bridge_instance is None:
            _bridge_instance = AsyncBridge()
            _bridge_instance.start()
            atexit.register(_cleanup_bridge)
        elif not _bridge_instance.is_running:
            _bridge_instance.start()

        return _bridge_instance


def _cleanup_bridge():
    global _bridge_instance
    if _bridge_instance is not None:
        _bridge_instance.stop()
        _bridge_instance = None


def reset_async_bridge():
    """Stop and drop the shared bridge (for testing)."""
    global _bridge_instance

    with _bridge_lock:
        if _bridge_instance is not None:
            _bridge_instance.stop()
            _bridge_instance = None

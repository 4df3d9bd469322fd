"""Host descriptor for the running Windows installation."""

from __future__ import annotations

from ..platform_utils import WINDOWS11_MIN_BUILD, get_windows_build


class WindowsHostDescriptor:
    def __init__(self, build_number: int | None = None):
        self._build = build_number

    def get_build_number(self) -> int:
        if self._build is None:
            self._build = get_windows_build()
        return self._build

    def is_windows11(self) -> bool:
        # Windows 11 still reports major version 10; the build tells them apart
        return self.get_build_number() >= WINDOWS11_MIN_BUILD

"""Platform detection for tweakport"""

import platform
import sys

# Platform detection
IS_WINDOWS = sys.platform == "win32"
IS_LINUX = sys.platform.startswith("linux")
IS_MACOS = sys.platform == "darwin"

# First Windows 11 build
WINDOWS11_MIN_BUILD = 22000


def get_windows_build() -> int:
    """Return the Windows build number, or 0 on other platforms."""
    if not IS_WINDOWS:
        return 0
    return sys.getwindowsversion().build


def get_platform_info() -> dict:
    """Get detailed platform information."""
    build = get_windows_build()
    return {
        "system": platform.system(),
        "release": platform.release(),
        "version": platform.version(),
        "machine": platform.machine(),
        "python_version": platform.python_version(),
        "is_windows": IS_WINDOWS,
        "windows_build": build,
        "is_windows11": build >= WINDOWS11_MIN_BUILD,
    }


def print_platform_info():
    """Print platform information for debugging."""
    info = get_platform_info()
    print(f"Platform: {info['system']} {info['release']}")
    print(f"Python: {info['python_version']}")
    if IS_WINDOWS:
        edition = "Windows 11" if info["is_windows11"] else "Windows 10"
        print(f"Build: {info['windows_build']} ({edition})")

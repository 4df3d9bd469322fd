"""Exceptions raised by the tweakport core."""

from __future__ import annotations


class TweakportError(Exception):
    """Base class for tweakport errors."""


class CatalogError(TweakportError):
    """The setting catalog is malformed (duplicate ids, unknown feature)."""


class ConfigLoadError(TweakportError):
    """A configuration file could not be read or parsed."""


class ConfigVersionError(ConfigLoadError):
    """A configuration file was written with an unsupported schema version."""

    def __init__(self, version: str | None, expected: str):
        self.version = version
        self.expected = expected
        super().__init__(
            f"This configuration file version ({version}) is not compatible with "
            f"this version of tweakport, which reads version {expected} files."
        )


class SettingApplyError(TweakportError):
    """A single setting could not be written."""


class PowerPlanNotFoundError(SettingApplyError):
    """No local power plan matches the requested GUID or name."""

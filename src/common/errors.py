"""Operational failures that abort a validation run.

Validation findings are never raised; they are collected by
``validation.errors.ErrorCollector``. Everything here means the run could not
produce a trustworthy report at all.
"""


class NuGetCheckError(Exception):
    """Base exception for operational failures."""


class ConfigError(NuGetCheckError):
    """Configuration file missing or unreadable."""


class ManifestParseError(NuGetCheckError):
    """Manifest missing, malformed, or carrying invalid entries."""


class VersionParseError(NuGetCheckError, ValueError):
    """Version or version range string could not be parsed."""


class RegistryError(NuGetCheckError):
    """Base exception for package source failures."""


class RegistryConnectionError(RegistryError):
    """Package source unreachable, timed out, or failing server-side."""


class RegistryProtocolError(RegistryError):
    """Package source replied with a payload that could not be understood."""

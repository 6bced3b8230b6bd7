"""NuGet registry package.

This package provides NuGet package source support:
- client.py: exact id/version resolution via the V3 API (primary) and V2 API (fallback)
- manifest.py: reading locked package lists from packages.config and PackageReference files
"""

from .client import NuGetRegistry  # noqa: F401
from .manifest import ManifestEntry, load_manifest  # noqa: F401

__all__ = [
    "NuGetRegistry",
    "ManifestEntry",
    "load_manifest",
]

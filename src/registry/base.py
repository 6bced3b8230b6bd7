"""Registry-facing data models and the narrow ``Registry`` capability."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Protocol

from versioning.models import NuGetVersion, VersionRange


@dataclass(frozen=True)
class DependencyRef:
    """A dependency declared by a package: target id plus the accepted range (None = any)."""
    id: str
    version_range: Optional[VersionRange] = None


@dataclass
class DependencyGroup:
    """Dependencies declared for one target framework (None = framework-agnostic)."""
    target_framework: Optional[str]
    dependencies: List[DependencyRef] = field(default_factory=list)


@dataclass
class PackageMetadata:
    """Package metadata returned by a registry for a single id/version."""
    id: str
    version: NuGetVersion
    dependency_groups: List[DependencyGroup] = field(default_factory=list)

    def dependencies(self) -> List[DependencyRef]:
        """Flatten every dependency group into one ordered list."""
        return [dep for group in self.dependency_groups for dep in group.dependencies]


class Registry(Protocol):
    """Anything that can look up a package id/version in a package source."""

    def resolve(self, package_id: str, version: NuGetVersion) -> Optional[PackageMetadata]:
        """Return metadata, or None when the source has no such package/version.

        Transport and protocol failures raise ``common.errors.RegistryError``.
        """
        ...

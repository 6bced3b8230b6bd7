"""Package catalog: every manifest package plus the metadata the registry returned for it."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Optional, Set

from common.logging_utils import extra_context, is_debug_enabled, Timer
from registry.base import PackageMetadata, Registry
from registry.nuget.manifest import ManifestEntry
from versioning.models import NuGetVersion

logger = logging.getLogger(__name__)


def package_key(package_id: str) -> str:
    """Lookup key for a package id; NuGet ids are case-insensitive."""
    return package_id.casefold()


@dataclass(frozen=True)
class CatalogEntry:
    id: str
    version: NuGetVersion
    metadata: Optional[PackageMetadata]

    @property
    def found(self) -> bool:
        return self.metadata is not None

    def __str__(self) -> str:
        return f"{self.id}[{self.version}]"


class PackageCatalog:
    """Flat, deduplicated view of the manifest keyed by package id."""

    def __init__(self, entries: Iterable[CatalogEntry] = ()):
        self._entries: Dict[str, CatalogEntry] = {}
        for entry in entries:
            self._add(entry)

    def _add(self, entry: CatalogEntry) -> bool:
        key = package_key(entry.id)
        existing = self._entries.get(key)
        if existing is not None:
            logger.warning(
                "Duplicate manifest entry %s ignored, keeping %s", entry, existing
            )
            return False
        self._entries[key] = entry
        return True

    @classmethod
    def build(cls, manifest: Iterable[ManifestEntry], registry: Registry) -> "PackageCatalog":
        """Resolve each manifest entry against the registry, sequentially and in order.

        Not-found packages are kept with ``metadata=None``. Registry errors propagate.
        """
        catalog = cls()
        with Timer() as t:
            for item in manifest:
                if package_key(item.id) in catalog:
                    catalog._add(CatalogEntry(item.id, item.version, None))
                    continue
                logger.info("Loading package: %s[%s]", item.id, item.version)
                metadata = registry.resolve(item.id, item.version)
                catalog._add(CatalogEntry(item.id, item.version, metadata))
        logger.info("Finish loading packages.")
        if is_debug_enabled(logger):
            logger.debug(
                "Package catalog built",
                extra=extra_context(
                    event="catalog_built",
                    component="catalog",
                    count=len(catalog),
                    not_found=len(catalog.not_found()),
                    duration_ms=t.duration_ms(),
                ),
            )
        return catalog

    def get(self, package_id: str) -> Optional[CatalogEntry]:
        return self._entries.get(package_key(package_id))

    def __contains__(self, package_id: object) -> bool:
        return isinstance(package_id, str) and package_key(package_id) in self._entries

    def __iter__(self) -> Iterator[CatalogEntry]:
        return iter(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)

    def not_found(self) -> List[CatalogEntry]:
        return [e for e in self._entries.values() if e.metadata is None]

    def dependency_targets(self) -> Set[str]:
        """Keys of every id declared as a dependency by any resolved entry."""
        targets: Set[str] = set()
        for entry in self._entries.values():
            if entry.metadata is None:
                continue
            for dep in entry.metadata.dependencies():
                targets.add(package_key(dep.id))
        return targets

    def select_roots(self, root_ids: Iterable[str] = ()) -> List[CatalogEntry]:
        """Entries that are top-level: explicitly named, or nobody depends on them.

        Returned in manifest order.
        """
        wanted = {package_key(r) for r in root_ids}
        depended_on = self.dependency_targets()
        return [
            entry for key, entry in self._entries.items()
            if key in wanted or key not in depended_on
        ]

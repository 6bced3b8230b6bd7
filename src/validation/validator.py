"""Tree validation: classify every problem in a built dependency tree by depth.

Depth 1 is a top-level package, depth 2 its direct dependencies, anything
deeper is only reachable transitively.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable

from common.logging_utils import extra_context, is_debug_enabled
from registry.base import Registry
from registry.nuget.manifest import load_manifest
from validation.catalog import PackageCatalog
from validation.errors import ErrorCollector, ErrorKind
from validation.tree import PackageNode, PackageTree, TreeBuilder

logger = logging.getLogger(__name__)

DIRECT_DEPTH = 2


def check_not_found(catalog: PackageCatalog, collector: ErrorCollector) -> None:
    """Report every manifest package the registry does not know."""
    for entry in catalog.not_found():
        collector.add(
            ErrorKind.PACKAGE_NOT_FOUND,
            f"{entry.id}[{entry.version}] not found in the package source",
        )


class TreeValidator:
    """Walks a PackageTree and records findings in an ErrorCollector."""

    def __init__(self, collector: ErrorCollector):
        self.collector = collector

    def validate(self, tree: PackageTree) -> None:
        for top in tree.top_level():
            self.validate_node(tree, top, DIRECT_DEPTH)

    def validate_node(self, tree: PackageTree, node: PackageNode, depth: int) -> None:
        """Check the children of ``node``, which sit at ``depth``, then everything below."""
        stack = [(node, depth)]
        while stack:
            parent, level = stack.pop()
            children = tree.children(parent)
            for child in children:
                self._check(parent, child, level)
            stack.extend((c, level + 1) for c in reversed(children))

    def _check(self, parent: PackageNode, child: PackageNode, depth: int) -> None:
        if depth == DIRECT_DEPTH:
            expected = "" if child.expected_range is None else str(child.expected_range)
            if not child.is_resolved:
                self.collector.add(
                    ErrorKind.MISSING_DEPENDENCY,
                    f"{parent.label} is missing dependency: {child.id} {expected}".rstrip(),
                )
            elif child.expected_range is not None and not child.expected_range.satisfies(child.resolved_version):
                self.collector.add(
                    ErrorKind.INCOMPATIBLE,
                    f"{parent.label} has an incompatible dependency: {child.label}, "
                    f"expected version: {expected}",
                )
        elif depth > DIRECT_DEPTH and child.is_resolved:
            self.collector.add(
                ErrorKind.REDUNDANT,
                f"{child.label} is not a direct dependency of any root package, possibly redundant",
            )


@dataclass
class ValidationResult:
    catalog: PackageCatalog
    tree: PackageTree
    errors: ErrorCollector


def validate_catalog(catalog: PackageCatalog, root_ids: Iterable[str] = ()) -> ValidationResult:
    """Build the dependency tree for ``catalog`` and collect every finding."""
    collector = ErrorCollector()
    check_not_found(catalog, collector)
    tree = TreeBuilder(catalog).build(root_ids)
    TreeValidator(collector).validate(tree)
    if is_debug_enabled(logger):
        logger.debug(
            "Validation finished",
            extra=extra_context(
                event="validation_finished",
                component="validator",
                findings=len(collector),
            ),
        )
    return ValidationResult(catalog, tree, collector)


def validate_manifest(manifest_path: str, registry: Registry, root_ids: Iterable[str] = ()) -> ValidationResult:
    """Load a manifest, resolve it against ``registry`` and validate the closure.

    Raises:
        ManifestParseError: manifest unreadable or malformed.
        RegistryError: package source unreachable or replying with garbage.
    """
    manifest = load_manifest(manifest_path)
    catalog = PackageCatalog.build(manifest, registry)
    return validate_catalog(catalog, root_ids)

"""Dependency tree construction.

Nodes live in a flat arena (``PackageTree.nodes``) and refer to each other by
index, so parent walks are index chases. Index 0 is the synthetic root that
owns the top-level packages.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Optional

from constants import Constants
from common.logging_utils import extra_context, is_debug_enabled
from registry.base import PackageMetadata
from validation.catalog import PackageCatalog, package_key
from versioning.models import NuGetVersion, VersionRange

logger = logging.getLogger(__name__)

ROOT_INDEX = 0


@dataclass
class PackageNode:
    index: int
    id: Optional[str]
    resolved_version: Optional[NuGetVersion] = None
    expected_range: Optional[VersionRange] = None
    metadata: Optional[PackageMetadata] = None
    parent: Optional[int] = None
    children: List[int] = field(default_factory=list)

    @property
    def is_root(self) -> bool:
        return self.parent is None

    @property
    def is_top_level(self) -> bool:
        """A root package: direct child of the synthetic root."""
        return self.parent == ROOT_INDEX

    @property
    def is_resolved(self) -> bool:
        """False for a dependency that is declared but absent from the manifest."""
        return self.resolved_version is not None

    @property
    def key(self) -> Optional[str]:
        return package_key(self.id) if self.id is not None else None

    @property
    def label(self) -> str:
        version = "" if self.resolved_version is None else str(self.resolved_version)
        return f"{self.id}[{version}]"


class PackageTree:
    """Arena of PackageNodes rooted at a synthetic, versionless root."""

    def __init__(self) -> None:
        self.nodes: List[PackageNode] = [PackageNode(ROOT_INDEX, None)]

    @property
    def root(self) -> PackageNode:
        return self.nodes[ROOT_INDEX]

    def __len__(self) -> int:
        return len(self.nodes)

    def add_child(
        self,
        parent: PackageNode,
        package_id: str,
        version: Optional[NuGetVersion],
        expected_range: Optional[VersionRange] = None,
        metadata: Optional[PackageMetadata] = None,
    ) -> PackageNode:
        node = PackageNode(
            index=len(self.nodes),
            id=package_id,
            resolved_version=version,
            expected_range=expected_range,
            metadata=metadata,
            parent=parent.index,
        )
        self.nodes.append(node)
        parent.children.append(node.index)
        return node

    def discard_children(self, node: PackageNode) -> None:
        """Detach every child of ``node``, reclaiming arena slots when they are the newest nodes."""
        first = node.children[0] if node.children else None
        if first is not None and first + len(node.children) == len(self.nodes):
            del self.nodes[first:]
        node.children.clear()

    def children(self, node: PackageNode) -> List[PackageNode]:
        return [self.nodes[i] for i in node.children]

    def parent(self, node: PackageNode) -> Optional[PackageNode]:
        return None if node.parent is None else self.nodes[node.parent]

    def lineage(self, node: PackageNode) -> Iterator[PackageNode]:
        """Yield ``node`` and then each ancestor up to and including the root."""
        current: Optional[PackageNode] = node
        while current is not None:
            yield current
            current = self.parent(current)

    def top_level(self) -> List[PackageNode]:
        return self.children(self.root)

    def has_child(self, node: PackageNode, key: str) -> bool:
        return any(self.nodes[i].key == key for i in node.children)

    def walk(self) -> Iterator[tuple]:
        """Depth-first pre-order over ``(node, depth)``; top-level packages are depth 1."""
        stack = [(n, 1) for n in reversed(self.top_level())]
        while stack:
            node, depth = stack.pop()
            yield node, depth
            stack.extend((c, depth + 1) for c in reversed(self.children(node)))

    def trace_lines(self) -> List[str]:
        """Indented text rendering, one line per node."""
        return [Constants.TREE_INDENT * (depth - 1) + node.label for node, depth in self.walk()]


class TreeBuilder:
    """Expand top-level packages into a dependency tree using catalog lookups."""

    def __init__(self, catalog: PackageCatalog):
        self.catalog = catalog

    def build(self, root_ids: Iterable[str] = ()) -> PackageTree:
        tree = PackageTree()
        for entry in self.catalog.select_roots(root_ids):
            tree.add_child(tree.root, entry.id, entry.version, None, entry.metadata)

        pending = list(reversed(tree.top_level()))
        while pending:
            node = pending.pop()
            pending.extend(reversed(self.expand(tree, node)))

        if is_debug_enabled(logger):
            logger.debug(
                "Dependency tree built",
                extra=extra_context(
                    event="tree_built",
                    component="tree",
                    roots=len(tree.top_level()),
                    nodes=len(tree) - 1,
                ),
            )
        return tree

    def is_circular(self, tree: PackageTree, node: PackageNode, key: str) -> bool:
        """True if ``node`` or one of its ancestors is the package ``key``."""
        return any(n.key == key for n in tree.lineage(node))

    def is_already_introduced(self, tree: PackageTree, node: PackageNode, key: str) -> bool:
        """True if ``key`` is already a direct child at any ancestor level above ``node``."""
        return any(tree.has_child(a, key) for a in tree.lineage(node) if a is not node)

    def expand(self, tree: PackageTree, node: PackageNode) -> List[PackageNode]:
        """Attach ``node``'s declared dependencies as children.

        Returns the resolved children still to be expanded.
        """
        if node.metadata is None:
            return []

        for dep in node.metadata.dependencies():
            key = package_key(dep.id)
            if self.is_circular(tree, node, key):
                continue
            if self.is_already_introduced(tree, node, key):
                continue
            if tree.has_child(node, key):
                # same id declared again, e.g. under another target framework
                continue
            entry = self.catalog.get(dep.id)
            if entry is None:
                tree.add_child(node, dep.id, None, dep.version_range)
            else:
                tree.add_child(node, entry.id, entry.version, dep.version_range, entry.metadata)

        children = tree.children(node)
        prunable = not node.is_root and not node.is_top_level
        if prunable and children and not any(c.is_resolved for c in children):
            tree.discard_children(node)
            return []
        return [c for c in children if c.is_resolved]

"""Dependency closure validation: catalog, tree building, tree validation and findings."""

from .catalog import CatalogEntry, PackageCatalog  # noqa: F401
from .errors import ErrorCollector, ErrorKind, ValidationError  # noqa: F401
from .tree import PackageNode, PackageTree, TreeBuilder  # noqa: F401
from .validator import (  # noqa: F401
    TreeValidator,
    ValidationResult,
    check_not_found,
    validate_catalog,
    validate_manifest,
)

__all__ = [
    "CatalogEntry",
    "PackageCatalog",
    "ErrorCollector",
    "ErrorKind",
    "ValidationError",
    "PackageNode",
    "PackageTree",
    "TreeBuilder",
    "TreeValidator",
    "ValidationResult",
    "check_not_found",
    "validate_catalog",
    "validate_manifest",
]

"""NuGet manifest reader: packages.config and PackageReference project files."""
from __future__ import annotations

import logging
import os
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import List, Optional

from constants import Constants
from common.errors import ManifestParseError, VersionParseError
from versioning.models import NuGetVersion
from versioning.parser import parse_version

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ManifestEntry:
    """One locked package reference."""
    id: str
    version: NuGetVersion


def _strip_namespaces(root: ET.Element) -> None:
    for elem in root.iter():
        if '}' in elem.tag:
            elem.tag = elem.tag.split('}')[1]


def _parse_entry_version(path: str, package_id: str, raw: Optional[str]) -> NuGetVersion:
    try:
        return parse_version(raw)
    except VersionParseError as exc:
        raise ManifestParseError(f"{path}: package '{package_id}' has an invalid version: {exc}") from exc


def _read_packages_config(path: str, root: ET.Element) -> List[ManifestEntry]:
    """Read ``<package id=".." version=".."/>`` elements."""
    entries: List[ManifestEntry] = []
    for package in root.iter("package"):
        package_id = (package.get("id") or "").strip()
        raw_version = package.get("version")
        if not package_id:
            raise ManifestParseError(f"{path}: <package> element without an 'id' attribute")
        if not raw_version:
            raise ManifestParseError(f"{path}: package '{package_id}' has no 'version' attribute")
        entries.append(ManifestEntry(package_id, _parse_entry_version(path, package_id, raw_version)))
    return entries


def _read_package_references(path: str, root: ET.Element) -> List[ManifestEntry]:
    """Read ``<PackageReference Include=".." Version=".."/>`` elements.

    The version may also be a nested ``<Version>`` element. References without
    any version (e.g. centrally managed) are skipped.
    """
    entries: List[ManifestEntry] = []
    for package_ref in root.iter("PackageReference"):
        package_id = (package_ref.get("Include") or package_ref.get("Update") or "").strip()
        if not package_id:
            raise ManifestParseError(f"{path}: <PackageReference> without an 'Include' attribute")
        raw_version = package_ref.get("Version")
        if raw_version is None:
            version_elem = package_ref.find("Version")
            raw_version = version_elem.text if version_elem is not None else None
        if not raw_version or not raw_version.strip():
            logger.warning("%s: PackageReference %s has no version, skipping", path, package_id)
            continue
        entries.append(ManifestEntry(package_id, _parse_entry_version(path, package_id, raw_version)))
    return entries


def load_manifest(path: str) -> List[ManifestEntry]:
    """Load the locked package list from a manifest file.

    Args:
        path: packages.config, or an MSBuild project/props file using PackageReference.

    Returns:
        Entries in document order.

    Raises:
        ManifestParseError: missing file, malformed XML or invalid entries.
    """
    if not os.path.isfile(path):
        raise ManifestParseError(f"Manifest not found: {path}")
    try:
        tree = ET.parse(path)
    except ET.ParseError as exc:
        raise ManifestParseError(f"Couldn't parse manifest {path}: {exc}") from exc
    except OSError as exc:
        raise ManifestParseError(f"Couldn't read manifest {path}: {exc}") from exc

    root = tree.getroot()
    _strip_namespaces(root)

    if path.lower().endswith(Constants.PROJECT_FILE_SUFFIXES):
        entries = _read_package_references(path, root)
    else:
        entries = _read_packages_config(path, root)
    logger.debug("Manifest %s lists %d packages", path, len(entries))
    return entries

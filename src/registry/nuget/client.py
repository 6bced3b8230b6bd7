"""NuGet registry client: resolve package id/version metadata via V3 API (primary) and V2 API (fallback)."""
from __future__ import annotations

import logging
import urllib.parse
from typing import Any, Dict, Iterator, List, Optional
from xml.etree import ElementTree as ET

from constants import Constants
from common.errors import RegistryProtocolError, VersionParseError
from common.http_client import get_json, robust_get
from common.logging_utils import extra_context, is_debug_enabled, safe_url
from registry.base import DependencyGroup, DependencyRef, PackageMetadata
from versioning.models import NuGetVersion
from versioning.parser import parse_range, parse_version

logger = logging.getLogger(__name__)

ATOM_NS = "{http://www.w3.org/2005/Atom}"
METADATA_NS = "{http://schemas.microsoft.com/ado/2007/08/dataservices/metadata}"
DATA_NS = "{http://schemas.microsoft.com/ado/2007/08/dataservices}"
HEADERS_XML = {"Accept": "application/atom+xml,application/xml"}


def _find_registration_base(service_index: Dict[str, Any]) -> Optional[str]:
    """Get the registration base URL from a V3 service index.

    Args:
        service_index: Service index dictionary

    Returns:
        Registration base URL (with trailing slash) or None
    """
    resources = service_index.get("resources", [])
    for wanted in Constants.REGISTRATION_TYPES:
        for resource in resources:
            if resource.get("@type") == wanted and resource.get("@id"):
                base_url = resource["@id"]
                return base_url if base_url.endswith("/") else base_url + "/"
    return None


def _parse_dependency_groups(raw_groups: Any) -> List[DependencyGroup]:
    """Convert V3 ``dependencyGroups`` JSON into DependencyGroup models."""
    groups: List[DependencyGroup] = []
    if not isinstance(raw_groups, list):
        return groups
    for raw_group in raw_groups:
        if not isinstance(raw_group, dict):
            continue
        refs = []
        for dep in raw_group.get("dependencies") or []:
            dep_id = dep.get("id") if isinstance(dep, dict) else None
            if not dep_id:
                continue
            refs.append(DependencyRef(dep_id, parse_range(dep.get("range"))))
        groups.append(DependencyGroup(raw_group.get("targetFramework"), refs))
    return groups


def _parse_v2_dependencies(text: Optional[str]) -> List[DependencyGroup]:
    """Parse the V2 ``Dependencies`` property: ``id:range:framework|id:range:framework``.

    Dependencies are grouped by framework in first-seen order.
    """
    groups: Dict[Optional[str], DependencyGroup] = {}
    for item in (text or "").split("|"):
        if not item.strip():
            continue
        fields = item.split(":")
        dep_id = fields[0].strip()
        version_spec = fields[1] if len(fields) > 1 else ""
        framework = fields[2].strip() if len(fields) > 2 and fields[2].strip() else None
        group = groups.setdefault(framework, DependencyGroup(framework))
        if dep_id:
            group.dependencies.append(DependencyRef(dep_id, parse_range(version_spec)))
    return list(groups.values())


def _page_may_contain(page: Dict[str, Any], version: NuGetVersion) -> bool:
    """Check a registration page's lower/upper bounds; unknown bounds mean "maybe"."""
    try:
        lower = parse_version(page["lower"])
        upper = parse_version(page["upper"])
    except (KeyError, TypeError, VersionParseError):
        return True
    return lower <= version <= upper


class NuGetRegistry:
    """Resolve exact package versions against a NuGet package source.

    ``source`` is either a V3 service index URL (ending in ``index.json``) or a
    feed base URL, in which case ``/v3/index.json`` is tried first and
    ``/api/v2`` is used as fallback.
    """

    def __init__(self, source: str):
        self.source = source.rstrip("/")
        if self.source.lower().endswith("index.json"):
            self.v3_index_url = self.source
            self.v2_base_url: Optional[str] = None
        else:
            self.v3_index_url = f"{self.source}{Constants.V3_INDEX_PATH}"
            self.v2_base_url = f"{self.source}{Constants.V2_API_PATH}"
        self._registration_base: Optional[str] = None
        self._index_loaded = False

    def _get_registration_base(self) -> Optional[str]:
        """Fetch the service index once and remember the registration endpoint."""
        if not self._index_loaded:
            self._index_loaded = True
            status_code, index = get_json(self.v3_index_url)
            if status_code == 200 and isinstance(index, dict):
                self._registration_base = _find_registration_base(index)
            if self._registration_base is None:
                logger.info("NuGet V3 registration endpoint unavailable at %s", safe_url(self.v3_index_url))
        return self._registration_base

    def resolve(self, package_id: str, version: NuGetVersion) -> Optional[PackageMetadata]:
        """Return metadata for ``package_id`` at ``version``, or None if the source lacks it.

        Raises:
            RegistryConnectionError: source unreachable.
            RegistryProtocolError: source replied with unusable data.
        """
        registration_base = self._get_registration_base()
        try:
            if registration_base:
                metadata = self._resolve_v3(registration_base, package_id, version)
                api_version = "v3"
            elif self.v2_base_url:
                metadata = self._resolve_v2(package_id, version)
                api_version = "v2"
            else:
                raise RegistryProtocolError(
                    f"No usable NuGet endpoint found at {safe_url(self.source)}"
                )
        except VersionParseError as exc:
            raise RegistryProtocolError(
                f"Invalid dependency data for {package_id}[{version}]: {exc}"
            ) from exc

        if metadata is None:
            logger.warning(
                "Package not found in NuGet registry",
                extra=extra_context(
                    event="http_response",
                    outcome="not_found",
                    target=f"{package_id}[{version}]",
                    package_manager="nuget",
                ),
            )
        elif is_debug_enabled(logger):
            logger.debug(
                "NuGet package metadata fetched",
                extra=extra_context(
                    event="package_found",
                    component="client",
                    action="resolve",
                    outcome="success",
                    api_version=api_version,
                    package_manager="nuget",
                    target=f"{package_id}[{version}]",
                    dependency_count=len(metadata.dependencies()),
                ),
            )
        return metadata

    def _iter_v3_leaves(self, reg_data: Dict[str, Any], version: NuGetVersion) -> Iterator[Dict[str, Any]]:
        """Yield registration leaves, fetching non-inlined pages on demand."""
        for page in reg_data.get("items", []):
            if not isinstance(page, dict) or not _page_may_contain(page, version):
                continue
            leaves = page.get("items")
            if leaves is None and page.get("@id"):
                status_code, page_data = get_json(page["@id"])
                if status_code != 200 or not isinstance(page_data, dict):
                    raise RegistryProtocolError(
                        f"Registration page unavailable: {safe_url(page['@id'])} (HTTP {status_code})"
                    )
                leaves = page_data.get("items", [])
            for leaf in leaves or []:
                if isinstance(leaf, dict):
                    yield leaf

    def _resolve_v3(self, registration_base: str, package_id: str, version: NuGetVersion) -> Optional[PackageMetadata]:
        encoded_id = urllib.parse.quote(package_id.lower(), safe="")
        registration_url = f"{registration_base}{encoded_id}/index.json"
        status_code, reg_data = get_json(registration_url)
        if status_code == 404:
            return None
        if status_code != 200 or not isinstance(reg_data, dict):
            raise RegistryProtocolError(
                f"Unexpected registration reply for {package_id}: HTTP {status_code}"
            )

        for leaf in self._iter_v3_leaves(reg_data, version):
            catalog_entry = leaf.get("catalogEntry", {})
            if isinstance(catalog_entry, str):
                entry_url = catalog_entry
                status_code, catalog_entry = get_json(entry_url)
                if status_code != 200 or not isinstance(catalog_entry, dict):
                    raise RegistryProtocolError(
                        f"Catalog entry unavailable: {safe_url(entry_url)} (HTTP {status_code})"
                    )
            leaf_version = catalog_entry.get("version")
            if not leaf_version:
                continue
            try:
                if parse_version(leaf_version) != version:
                    continue
            except VersionParseError:
                logger.debug("Skipping unparsable registry version %s for %s", leaf_version, package_id)
                continue
            return PackageMetadata(
                id=catalog_entry.get("id") or package_id,
                version=version,
                dependency_groups=_parse_dependency_groups(catalog_entry.get("dependencyGroups")),
            )
        return None

    def _resolve_v2(self, package_id: str, version: NuGetVersion) -> Optional[PackageMetadata]:
        quoted_id = urllib.parse.quote(package_id, safe="")
        quoted_version = urllib.parse.quote(str(version), safe="")
        url = f"{self.v2_base_url}/Packages(Id='{quoted_id}',Version='{quoted_version}')"
        status_code, _, text = robust_get(url, headers=HEADERS_XML)
        if status_code == 404:
            return None
        if status_code != 200:
            raise RegistryProtocolError(f"Unexpected V2 reply for {package_id}: HTTP {status_code}")

        try:
            root = ET.fromstring(text)
        except ET.ParseError as exc:
            raise RegistryProtocolError(f"Invalid V2 XML for {package_id}: {exc}") from exc

        entry = root if root.tag == f"{ATOM_NS}entry" else root.find(f".//{ATOM_NS}entry")
        if entry is None:
            return None
        props = entry.find(f".//{METADATA_NS}properties")
        dependencies_text = None
        found_id = package_id
        if props is not None:
            deps_elem = props.find(f"{DATA_NS}Dependencies")
            if deps_elem is not None:
                dependencies_text = deps_elem.text
            id_elem = props.find(f"{DATA_NS}Id")
            if id_elem is not None and id_elem.text:
                found_id = id_elem.text
        return PackageMetadata(
            id=found_id,
            version=version,
            dependency_groups=_parse_v2_dependencies(dependencies_text),
        )

"""Parsing for NuGet version strings and interval-notation version ranges."""

import re
from typing import Optional

from common.errors import VersionParseError
from .models import NuGetVersion, VersionRange

_VERSION_RE = re.compile(
    r"^(?P<release>\d+(?:\.\d+){0,3})"
    r"(?:-(?P<pre>[0-9A-Za-z\-]+(?:\.[0-9A-Za-z\-]+)*))?"
    r"(?:\+(?P<meta>[0-9A-Za-z\-]+(?:\.[0-9A-Za-z\-]+)*))?$"
)


def _normalize_label(part: str) -> str:
    """Drop leading zeros from numeric prerelease identifiers (``01`` -> ``1``)."""
    if part.isdigit():
        return str(int(part))
    return part


def parse_version(text: str) -> NuGetVersion:
    """Parse a NuGet version such as ``1.2``, ``1.2.3.4`` or ``2.0.0-rc.1+build5``.

    Raises:
        VersionParseError: if ``text`` is not a valid version.
    """
    if text is None:
        raise VersionParseError("Version string is missing")
    s = text.strip()
    m = _VERSION_RE.match(s)
    if not m:
        raise VersionParseError(f"'{text}' is not a valid version string")
    release = tuple(int(p) for p in m.group("release").split("."))
    pre = m.group("pre")
    prerelease = tuple(_normalize_label(p) for p in pre.split(".")) if pre else ()
    try:
        return NuGetVersion(release, prerelease, m.group("meta"), text=s)
    except ValueError as exc:
        raise VersionParseError(f"'{text}' is not a valid version string: {exc}") from exc


def parse_range(text: Optional[str]) -> Optional[VersionRange]:
    """Parse a NuGet version range.

    Supported forms: ``1.0`` (minimum, inclusive), ``[1.0]`` (exact),
    ``(1.0,)``, ``(,1.0]``, ``[1.0,2.0)`` and the other bracket combinations.
    Empty or missing text and the unbounded ``(, )`` mean "no constraint" and
    yield None.

    Raises:
        VersionParseError: if ``text`` is not a valid range.
    """
    if text is None:
        return None
    s = text.strip()
    if not s:
        return None

    if s[0] not in "[(":
        return VersionRange(min_version=parse_version(s), is_min_inclusive=True)

    if len(s) < 3:
        raise VersionParseError(f"'{text}' is not a valid version range")
    if s[-1] not in "])":
        raise VersionParseError(f"'{text}' is not a valid version range")

    min_inclusive = s[0] == "["
    max_inclusive = s[-1] == "]"
    parts = s[1:-1].split(",")
    if len(parts) > 2:
        raise VersionParseError(f"'{text}' is not a valid version range")
    if all(not p.strip() for p in parts):
        # (, ) is how feeds spell "any version"
        if len(parts) == 2:
            return None
        raise VersionParseError(f"'{text}' is not a valid version range")

    if len(parts) == 1:
        # [1.0] is the only legal single-value bracket form
        if not (min_inclusive and max_inclusive):
            raise VersionParseError(f"'{text}' is not a valid version range")
        exact = parse_version(parts[0])
        return VersionRange(exact, exact, True, True)

    low, high = (p.strip() for p in parts)
    min_version = parse_version(low) if low else None
    max_version = parse_version(high) if high else None
    if min_version is not None and max_version is not None:
        if max_version < min_version or (
            max_version == min_version and not (min_inclusive and max_inclusive)
        ):
            raise VersionParseError(f"'{text}' is an empty version range")
    return VersionRange(min_version, max_version, min_inclusive, max_inclusive)

"""Data models for NuGet versions and version ranges."""

from __future__ import annotations

import functools
from dataclasses import dataclass
from typing import Optional, Tuple

import semantic_version


@functools.total_ordering
class NuGetVersion:
    """A NuGet package version: up to four numeric parts plus an optional prerelease label.

    Missing numeric parts compare as zero, so ``1.0`` equals ``1.0.0.0``.
    Prerelease labels follow SemVer 2.0 precedence, compared case-insensitively.
    Build metadata is kept for display only.
    """

    __slots__ = ("release", "prerelease", "metadata", "_text", "_label")

    def __init__(
        self,
        release: Tuple[int, ...],
        prerelease: Tuple[str, ...] = (),
        metadata: Optional[str] = None,
        text: Optional[str] = None,
    ) -> None:
        padded = tuple(release) + (0,) * (4 - len(release))
        self.release: Tuple[int, int, int, int] = padded[:4]  # type: ignore[assignment]
        self.prerelease = tuple(prerelease)
        self.metadata = metadata
        self._text = text or self._render(release)
        # semantic_version only orders the prerelease part; numeric parts use the tuple
        self._label = semantic_version.Version(
            major=0,
            minor=0,
            patch=0,
            prerelease=tuple(p.lower() for p in self.prerelease),
        )

    def _render(self, release: Tuple[int, ...]) -> str:
        text = ".".join(str(p) for p in release)
        if self.prerelease:
            text += "-" + ".".join(self.prerelease)
        if self.metadata:
            text += "+" + self.metadata
        return text

    def _key(self):
        return (self.release, not self.prerelease, self._label)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NuGetVersion):
            return NotImplemented
        return self._key() == other._key()

    def __lt__(self, other: "NuGetVersion") -> bool:
        if not isinstance(other, NuGetVersion):
            return NotImplemented
        return self._key() < other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __str__(self) -> str:
        return self._text

    def __repr__(self) -> str:
        return f"NuGetVersion({self._text!r})"


@dataclass(frozen=True)
class VersionRange:
    """NuGet version range in interval notation, e.g. ``[1.0,2.0)``.

    A range with only an inclusive minimum is the plain ``1.0`` form, meaning
    "1.0 or higher".
    """

    min_version: Optional[NuGetVersion] = None
    max_version: Optional[NuGetVersion] = None
    is_min_inclusive: bool = False
    is_max_inclusive: bool = False

    def satisfies(self, version: NuGetVersion) -> bool:
        """Return True if ``version`` falls inside the range."""
        if self.min_version is not None:
            if self.is_min_inclusive:
                if version < self.min_version:
                    return False
            elif version <= self.min_version:
                return False
        if self.max_version is not None:
            if self.is_max_inclusive:
                if version > self.max_version:
                    return False
            elif version >= self.max_version:
                return False
        return True

    def __str__(self) -> str:
        if (
            self.min_version is not None
            and self.is_min_inclusive
            and self.max_version is None
            and not self.is_max_inclusive
        ):
            return str(self.min_version)
        if (
            self.min_version is not None
            and self.min_version == self.max_version
            and self.is_min_inclusive
            and self.is_max_inclusive
        ):
            return f"[{self.min_version}]"
        low = "" if self.min_version is None else str(self.min_version)
        high = "" if self.max_version is None else str(self.max_version)
        opening = "[" if self.is_min_inclusive else "("
        closing = "]" if self.is_max_inclusive else ")"
        return f"{opening}{low}, {high}{closing}"

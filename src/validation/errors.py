"""Validation findings and their collector."""

from dataclasses import dataclass
from enum import Enum
from typing import List, Set, Tuple


class ErrorKind(Enum):
    """Kinds of validation findings, in report order."""

    PACKAGE_NOT_FOUND = "package_not_found"
    MISSING_DEPENDENCY = "missing_dependency"
    INCOMPATIBLE = "incompatible"
    REDUNDANT = "redundant"


REPORT_ORDER = [
    ErrorKind.PACKAGE_NOT_FOUND,
    ErrorKind.MISSING_DEPENDENCY,
    ErrorKind.INCOMPATIBLE,
    ErrorKind.REDUNDANT,
]


@dataclass(frozen=True)
class ValidationError:
    kind: ErrorKind
    message: str


class ErrorCollector:
    """Accumulates findings, keeping each distinct (kind, message) once."""

    def __init__(self) -> None:
        self._errors: List[ValidationError] = []
        self._seen: Set[ValidationError] = set()

    def add(self, kind: ErrorKind, message: str) -> None:
        error = ValidationError(kind, message)
        if error in self._seen:
            return
        self._seen.add(error)
        self._errors.append(error)

    def __len__(self) -> int:
        return len(self._errors)

    def has(self, kind: ErrorKind) -> bool:
        return any(e.kind == kind for e in self._errors)

    def grouped(self) -> List[Tuple[ErrorKind, List[str]]]:
        """Return ``[(kind, messages)]`` in report order with messages sorted ascending."""
        return [
            (kind, sorted(e.message for e in self._errors if e.kind == kind))
            for kind in REPORT_ORDER
        ]

    def ordered(self) -> List[ValidationError]:
        """All findings flattened in report order."""
        return [ValidationError(kind, msg) for kind, msgs in self.grouped() for msg in msgs]

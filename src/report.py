"""Console report and file export of validation findings."""
from __future__ import annotations

import csv
import json
import logging
from typing import List, Optional, TextIO, Tuple

from rich.console import Console
from rich.text import Text

from constants import ExportFormats
from validation.errors import ErrorKind, ValidationError

logger = logging.getLogger(__name__)

# severity channel per kind: (name, rich style)
CHANNELS = {
    ErrorKind.PACKAGE_NOT_FOUND: ("warning", "yellow"),
    ErrorKind.MISSING_DEPENDENCY: ("info", "cyan"),
    ErrorKind.INCOMPATIBLE: ("error", "red"),
    ErrorKind.REDUNDANT: ("muted", "bright_black"),
}


def render(grouped: List[Tuple[ErrorKind, List[str]]], console: Console) -> None:
    """Print grouped findings to ``console``; each group ends with a blank line."""
    for kind, messages in grouped:
        _, style = CHANNELS[kind]
        for message in messages:
            console.print(Text(message, style=style), soft_wrap=True)
        console.print()


def print_report(grouped: List[Tuple[ErrorKind, List[str]]], stream: Optional[TextIO] = None) -> None:
    # rich decides on color from the stream and NO_COLOR
    render(grouped, Console(file=stream, highlight=False))


def export_json(errors: List[ValidationError], path: str) -> None:
    """Exports the findings to a JSON file.

    Args:
        errors (list): Findings in report order.
        path (str): File path to export the JSON.
    """
    data = [
        {"kind": e.kind.value, "severity": CHANNELS[e.kind][0], "message": e.message}
        for e in errors
    ]
    with open(path, "w", encoding="utf-8") as file:
        json.dump(data, file, ensure_ascii=False, indent=4)
    logger.info("JSON file has been successfully exported at: %s", path)


def export_csv(errors: List[ValidationError], path: str) -> None:
    """Exports the findings to a CSV file.

    Args:
        errors (list): Findings in report order.
        path (str): File path to export the CSV.
    """
    rows = [["Kind", "Severity", "Message"]]
    rows.extend([e.kind.value, CHANNELS[e.kind][0], e.message] for e in errors)
    with open(path, "w", newline="", encoding="utf-8") as file:
        csv.writer(file).writerows(rows)
    logger.info("CSV file has been successfully exported at: %s", path)


def infer_format(path: str, explicit: Optional[str] = None) -> str:
    """Pick the export format: explicit choice, else the file extension, else JSON."""
    if explicit:
        return explicit.lower()
    if path.lower().endswith(".csv"):
        return ExportFormats.CSV.value
    return ExportFormats.JSON.value


def export(errors: List[ValidationError], path: str, fmt: Optional[str] = None) -> None:
    if infer_format(path, fmt) == ExportFormats.CSV.value:
        export_csv(errors, path)
    else:
        export_json(errors, path)

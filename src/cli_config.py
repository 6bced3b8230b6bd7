"""Run configuration: CLI flags over environment over config file over defaults."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional

import yaml

from constants import Constants
from common.errors import ConfigError

logger = logging.getLogger(__name__)


@dataclass
class Settings:
    source: str = Constants.DEFAULT_SOURCE
    manifest: str = Constants.DEFAULT_MANIFEST
    roots: List[str] = field(default_factory=list)


def split_roots(values: Any) -> List[str]:
    """Normalize root ids given as a list and/or comma-separated strings."""
    if values is None:
        return []
    if isinstance(values, str):
        values = [values]
    roots: List[str] = []
    for value in values:
        for part in str(value).split(","):
            part = part.strip()
            if part and part not in roots:
                roots.append(part)
    return roots


def load_config_file(path: str) -> Dict[str, Any]:
    """Load settings from a YAML (or JSON) file.

    Keys may sit at the top level or under a ``nugetcheck:`` section.

    Raises:
        ConfigError: missing file, unparsable content, or a non-mapping document.
    """
    if not os.path.isfile(path):
        raise ConfigError(f"Config file not found: {path}")
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"Failed to load config {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    section = data.get(Constants.CONFIG_SECTION, data)
    if not isinstance(section, dict):
        raise ConfigError(f"'{Constants.CONFIG_SECTION}' section in {path} must be a mapping")
    return section


def _first(*values: Optional[str]) -> Optional[str]:
    for value in values:
        if value is not None and str(value).strip():
            return str(value).strip()
    return None


def resolve_settings(args, environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Merge every configuration source into Settings.

    Roots are taken from the highest-precedence source that names any.
    """
    env = os.environ if environ is None else environ
    config_path = getattr(args, "CONFIG", None)
    file_cfg = load_config_file(config_path) if config_path else {}
    if config_path:
        logger.info("Loaded config from: %s", config_path)

    settings = Settings()
    settings.source = _first(
        getattr(args, "SOURCE", None),
        env.get(Constants.ENV_SOURCE),
        file_cfg.get("source"),
    ) or settings.source
    settings.manifest = _first(
        getattr(args, "MANIFEST", None),
        env.get(Constants.ENV_MANIFEST),
        file_cfg.get("manifest"),
    ) or settings.manifest

    candidates: Iterable[Any] = (
        getattr(args, "ROOTS", None),
        env.get(Constants.ENV_ROOTS),
        file_cfg.get("roots"),
    )
    for candidate in candidates:
        roots = split_roots(candidate)
        if roots:
            settings.roots = roots
            break

    logger.debug("Settings resolved: source=%s manifest=%s roots=%s",
                 settings.source, settings.manifest, settings.roots)
    return settings

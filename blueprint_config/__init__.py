"""
blueprint_config -- single public entrypoint for application configuration.

Responsibility:
    Provides the ONLY way to obtain settings at runtime through
    ``get_active_settings()`` and the default blueprint catalog through
    ``load_default_catalog()``.  No other component may read configuration
    files or environment variables.

Architecture position:
    Configuration.  Sits above ``blueprint_kernel`` and below
    ``blueprint_services``.  The kernel MUST NEVER import from
    ``blueprint_config``; ``bridges`` translates parsed templates into kernel
    drafts.

Failure modes:
    - ``FileNotFoundError`` -- settings or catalog file missing.
    - ``yaml.YAMLError`` -- malformed YAML.
    - ``KeyError`` / ``ValueError`` -- structural problems in the YAML.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import replace
from pathlib import Path

from blueprint_config.loader import (
    load_yaml_file,
    parse_bool,
    parse_catalog,
    parse_settings,
)
from blueprint_config.schema import AppSettings, BlueprintTemplate, TemplateField

__all__ = [
    "AppSettings",
    "BlueprintTemplate",
    "TemplateField",
    "DEFAULT_SETTINGS_PATH",
    "DEFAULT_CATALOG_PATH",
    "get_active_settings",
    "load_default_catalog",
]

_logger = logging.getLogger("blueprint_kernel.config")

_CONFIG_DIR = Path(__file__).parent
DEFAULT_SETTINGS_PATH = _CONFIG_DIR / "settings.yaml"
DEFAULT_CATALOG_PATH = _CONFIG_DIR / "catalog" / "default_blueprints.yaml"

# Environment variable -> settings attribute
ENV_OVERRIDES: dict[str, str] = {
    "BLUEPRINT_DATABASE_URL": "database_url",
    "BLUEPRINT_STORAGE_KEY": "storage_key",
    "BLUEPRINT_LOG_LEVEL": "log_level",
    "BLUEPRINT_ECHO_SQL": "echo_sql",
}


def get_active_settings(
    config_path: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> AppSettings:
    """The ONLY public settings entrypoint.

    Loads the ``settings`` mapping from YAML, then applies ``BLUEPRINT_*``
    environment overrides.

    Args:
        config_path: Override path to the settings file.
            Defaults to blueprint_config/settings.yaml.
        environ: Environment mapping; defaults to ``os.environ``.

    Returns:
        Frozen ``AppSettings``.
    """
    path = config_path or DEFAULT_SETTINGS_PATH
    env = os.environ if environ is None else environ

    data = load_yaml_file(path)
    settings = parse_settings(data["settings"], path.parent)

    overrides: dict[str, object] = {}
    for var, attr in ENV_OVERRIDES.items():
        if var in env:
            raw = env[var]
            if attr == "echo_sql":
                overrides[attr] = parse_bool(raw)
            elif attr == "log_level":
                overrides[attr] = raw.upper()
            else:
                overrides[attr] = raw
    if overrides:
        settings = replace(settings, **overrides)

    _logger.info(
        "BLUEPRINT_CONFIG_TRACE",
        extra={
            "settings_path": str(path),
            "storage_key": settings.storage_key,
            "log_level": settings.log_level,
            "overrides": sorted(overrides),
        },
    )
    return settings


def load_default_catalog(path: Path | None = None) -> tuple[BlueprintTemplate, ...]:
    """Parse the default blueprint catalog (six templates in the shipped file)."""
    return parse_catalog(load_yaml_file(path or DEFAULT_CATALOG_PATH))

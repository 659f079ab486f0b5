"""
Configuration schema.

Human-authored YAML is parsed into these frozen types by the loader:

  AppSettings        = runtime settings (database, storage key, log level)
  BlueprintTemplate  = one entry of the default blueprint catalog
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class AppSettings:
    """Runtime settings for one application instance."""

    database_url: str
    storage_key: str
    log_level: str
    catalog_path: Path
    echo_sql: bool = False


@dataclass(frozen=True)
class TemplateField:
    """A field of a catalog template, as written in YAML."""

    id: str
    type: str  # text, date, signature, checkbox
    label: str
    x: float
    y: float
    required: bool = False


@dataclass(frozen=True)
class BlueprintTemplate:
    """A catalog template seeded into a fresh store."""

    key: str  # employment, client, nda, ...
    name: str
    description: str
    fields: tuple[TemplateField, ...]

"""
Configuration Loader (``blueprint_config.loader``).

Responsibility
--------------
Loads YAML files and parses them into typed ``blueprint_config.schema``
dataclass instances.  Callers use the entry points in
``blueprint_config/__init__.py``; nothing else reads these files.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys in parsed dict  -> ``KeyError`` propagates.
* Wrong value types  -> ``ValueError``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from blueprint_config.schema import AppSettings, BlueprintTemplate, TemplateField


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path, encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def parse_bool(value: Any) -> bool:
    """Parse a boolean from YAML or an environment string."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("1", "true", "yes", "on"):
            return True
        if lowered in ("0", "false", "no", "off", ""):
            return False
    raise ValueError(f"Cannot parse boolean from {value!r}")


def parse_settings(data: dict[str, Any], base_dir: Path) -> AppSettings:
    """
    Parse ``AppSettings`` from the ``settings`` mapping.

    ``catalog_path`` is resolved relative to ``base_dir`` when not absolute.
    """
    catalog = Path(data["catalog_path"])
    if not catalog.is_absolute():
        catalog = base_dir / catalog
    return AppSettings(
        database_url=str(data["database_url"]),
        storage_key=str(data["storage_key"]),
        log_level=str(data.get("log_level", "INFO")).upper(),
        catalog_path=catalog,
        echo_sql=parse_bool(data.get("echo_sql", False)),
    )


def parse_template_field(data: dict[str, Any]) -> TemplateField:
    position = data.get("position", {})
    return TemplateField(
        id=data["id"],
        type=data["type"],
        label=data["label"],
        x=float(position.get("x", 0)),
        y=float(position.get("y", 0)),
        required=parse_bool(data.get("required", False)),
    )


def parse_template(data: dict[str, Any]) -> BlueprintTemplate:
    """
    Parse a ``BlueprintTemplate`` from a dict.

    Raises:
        KeyError: if ``key``, ``name`` or a field's ``id``/``type``/``label``
            is missing.
        ValueError: if the template declares no fields.
    """
    fields = tuple(parse_template_field(f) for f in data.get("fields", []))
    if not fields:
        raise ValueError(f"Template {data.get('key')!r} declares no fields")
    return BlueprintTemplate(
        key=data["key"],
        name=data["name"],
        description=data.get("description", ""),
        fields=fields,
    )


def parse_catalog(data: dict[str, Any]) -> tuple[BlueprintTemplate, ...]:
    """Parse every entry of the ``templates`` list, rejecting duplicate keys."""
    templates = tuple(parse_template(t) for t in data.get("templates", []))
    keys = [t.key for t in templates]
    duplicates = sorted({k for k in keys if keys.count(k) > 1})
    if duplicates:
        raise ValueError(f"Duplicate template keys: {', '.join(duplicates)}")
    return templates

"""
Tests for blueprint_config: settings loading, environment overrides and the
default blueprint catalog.
"""

from pathlib import Path

import pytest
import yaml

from blueprint_config import (
    DEFAULT_CATALOG_PATH,
    get_active_settings,
    load_default_catalog,
)
from blueprint_config.bridges import template_to_draft, templates_to_drafts
from blueprint_config.loader import parse_bool, parse_catalog, parse_template
from blueprint_kernel.domain.field_types import FieldType
from blueprint_kernel.exceptions import UnknownFieldTypeError


def _write_settings(tmp_path: Path, **overrides) -> Path:
    settings = {
        "database_url": "sqlite:///custom.db",
        "storage_key": "custom-key",
        "log_level": "debug",
        "catalog_path": "templates.yaml",
    }
    settings.update(overrides)
    path = tmp_path / "settings.yaml"
    path.write_text(yaml.safe_dump({"settings": settings}), encoding="utf-8")
    return path


class TestActiveSettings:
    def test_shipped_defaults(self):
        settings = get_active_settings(environ={})
        assert settings.database_url == "sqlite:///blueprints.db"
        assert settings.storage_key == "contract-management-storage"
        assert settings.log_level == "INFO"
        assert settings.echo_sql is False
        assert settings.catalog_path == DEFAULT_CATALOG_PATH

    def test_custom_file_resolves_catalog_relative_to_it(self, tmp_path):
        settings = get_active_settings(_write_settings(tmp_path), environ={})
        assert settings.storage_key == "custom-key"
        assert settings.log_level == "DEBUG"
        assert settings.catalog_path == tmp_path / "templates.yaml"

    def test_environment_overrides(self, tmp_path):
        settings = get_active_settings(
            _write_settings(tmp_path),
            environ={
                "BLUEPRINT_DATABASE_URL": "sqlite://",
                "BLUEPRINT_STORAGE_KEY": "env-key",
                "BLUEPRINT_LOG_LEVEL": "warning",
                "BLUEPRINT_ECHO_SQL": "yes",
            },
        )
        assert settings.database_url == "sqlite://"
        assert settings.storage_key == "env-key"
        assert settings.log_level == "WARNING"
        assert settings.echo_sql is True

    def test_unrelated_environment_ignored(self):
        settings = get_active_settings(environ={"DATABASE_URL": "postgresql://x"})
        assert settings.database_url == "sqlite:///blueprints.db"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            get_active_settings(tmp_path / "nope.yaml", environ={})

    def test_missing_required_key(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text(yaml.safe_dump({"settings": {"storage_key": "k"}}), encoding="utf-8")
        with pytest.raises(KeyError):
            get_active_settings(path, environ={})


class TestParseBool:
    @pytest.mark.parametrize("raw", [True, "1", "true", "YES", " on "])
    def test_truthy(self, raw):
        assert parse_bool(raw) is True

    @pytest.mark.parametrize("raw", [False, "0", "false", "No", ""])
    def test_falsy(self, raw):
        assert parse_bool(raw) is False

    @pytest.mark.parametrize("raw", ["maybe", 2, None])
    def test_rejected(self, raw):
        with pytest.raises(ValueError):
            parse_bool(raw)


class TestDefaultCatalog:
    @pytest.fixture(scope="class")
    def catalog(self):
        return load_default_catalog()

    def test_six_templates(self, catalog):
        assert [t.key for t in catalog] == [
            "employment", "client", "nda", "freelancer", "rental", "sales",
        ]

    @pytest.mark.parametrize(
        "key,field_count",
        [("employment", 7), ("client", 8), ("nda", 8), ("freelancer", 9), ("rental", 10), ("sales", 9)],
    )
    def test_field_counts(self, catalog, key, field_count):
        template = next(t for t in catalog if t.key == key)
        assert len(template.fields) == field_count

    def test_field_ids_unique_within_each_template(self, catalog):
        for template in catalog:
            ids = [f.id for f in template.fields]
            assert len(ids) == len(set(ids)), template.key

    def test_every_field_kind_known(self, catalog):
        kinds = {f.type for t in catalog for f in t.fields}
        assert kinds <= {t.value for t in FieldType}

    def test_nda_template_layout(self, catalog):
        nda = next(t for t in catalog if t.key == "nda")
        agree = next(f for f in nda.fields if f.id == "nda_agree")
        assert agree.type == "checkbox"
        assert agree.required is True
        assert (agree.x, agree.y) == (30, 320)


class TestCatalogParsing:
    def test_template_without_fields_rejected(self):
        with pytest.raises(ValueError):
            parse_template({"key": "empty", "name": "Empty", "fields": []})

    def test_duplicate_keys_rejected(self):
        template = {
            "key": "dup",
            "name": "Dup",
            "fields": [{"id": "a", "type": "text", "label": "A"}],
        }
        with pytest.raises(ValueError, match="dup"):
            parse_catalog({"templates": [template, template]})

    def test_field_defaults(self):
        template = parse_template({
            "key": "t",
            "name": "T",
            "fields": [{"id": "a", "type": "date", "label": "When"}],
        })
        field = template.fields[0]
        assert (field.x, field.y, field.required) == (0, 0, False)
        assert template.description == ""


class TestBridges:
    def test_catalog_becomes_drafts(self):
        drafts = templates_to_drafts(load_default_catalog())
        assert len(drafts) == 6
        employment = drafts[0]
        assert employment.name == "Employee Contract"
        assert employment.fields[0].type is FieldType.TEXT
        assert employment.fields[0].position.x == 30

    def test_unknown_kind_surfaces_kernel_error(self):
        template = parse_template({
            "key": "t",
            "name": "T",
            "fields": [{"id": "a", "type": "dropdown", "label": "Pick"}],
        })
        with pytest.raises(UnknownFieldTypeError):
            template_to_draft(template)

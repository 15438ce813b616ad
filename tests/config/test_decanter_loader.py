"""Tests for YAML decanter definitions (decanter_config)."""

from datetime import date, datetime
from textwrap import dedent

import pytest
import yaml

from decanter_config import load_config, load_schemas
from decanter_config.loader import compute_checksum, parse_schema, parse_settings
from decanter_config.schema import DecanterSettings
from decanter_kernel.domain.specs import AssociationKind
from decanter_kernel.exceptions import (
    ConfigurationError,
    SchemaAlreadyRegisteredError,
    UnhandledKeysError,
    UnregisteredTypeError,
)

TRIP_YAML = dedent(
    """
    settings:
      strict: true
      max_depth: 8
    schemas:
      - name: trip
        inputs:
          - name: start_date
            type: date
            required: true
          - {name: name}
        has_many:
          - {name: destination}
        contexts:
          admin:
            inputs:
              - {name: approved_at, type: datetime, parse_format: "%Y-%m-%d %H:%M"}
            has_many:
              - {name: destination}
      - name: destination
        inputs:
          - name: arrives_on
            type: date
            options:
              parse_format: "%Y-%m-%d"
        contexts:
          admin:
            inputs:
              - {name: city}
    """
)


@pytest.fixture
def trip_yaml(tmp_path):
    path = tmp_path / "decanters.yaml"
    path.write_text(TRIP_YAML)
    return path


class TestParseSettings:
    def test_defaults(self):
        assert parse_settings(None) == DecanterSettings()
        assert parse_settings({}).strict is False

    def test_values(self):
        settings = parse_settings({"strict": True, "max_depth": 4})
        assert settings == DecanterSettings(strict=True, max_depth=4)

    @pytest.mark.parametrize(
        "data",
        [
            {"max_depth": 0},
            {"max_depth": "deep"},
            {"max_depth": "8"},
            {"max_depth": True},
            {"strict": "false"},
            {"strict": 1},
            ["x"],
        ],
    )
    def test_invalid(self, data):
        with pytest.raises(ConfigurationError):
            parse_settings(data)

    def test_quoted_false_is_rejected_from_yaml(self):
        with pytest.raises(ConfigurationError, match="settings.strict"):
            parse_settings(yaml.safe_load('strict: "false"'))


class TestParseSchema:
    def test_inputs_and_options(self):
        schema = parse_schema({
            "name": "trip",
            "inputs": [
                {"name": "start_date", "type": "date", "parse_format": "%Y", "required": True},
            ],
        })
        spec = schema.input_for("start_date")
        assert spec.type == "date"
        assert spec.options == {"parse_format": "%Y", "required": True}
        assert spec.required

    def test_associations(self):
        schema = parse_schema({
            "name": "trip",
            "has_one": [{"name": "home", "key": "home_params", "schema": "address"}],
            "has_many": [{"name": "destination"}],
        })
        home = schema.has_one_for("home_params")
        assert home.schema == "address" and home.kind == AssociationKind.HAS_ONE
        assert schema.has_many_for("destination_attributes").name == "destination"

    def test_contexts(self):
        schema = parse_schema({
            "name": "trip",
            "contexts": {"admin": {"inputs": [{"name": "approved_at"}]}},
        })
        assert schema.input_for("approved_at") is None
        assert schema.input_for("approved_at", "admin").context == "admin"

    def test_item_context_key(self):
        schema = parse_schema({
            "name": "trip",
            "inputs": [{"name": "note", "context": "audit"}],
        })
        assert schema.input_for("note", "audit") is not None

    @pytest.mark.parametrize(
        "data",
        [
            {},
            {"name": "trip", "inputs": {"name": "x"}},
            {"name": "trip", "inputs": [{"type": "date"}]},
            {"name": "trip", "fields": []},
            {"name": "trip", "contexts": ["admin"]},
        ],
    )
    def test_invalid_definitions(self, data):
        with pytest.raises(ConfigurationError):
            parse_schema(data)

    def test_unknown_type(self):
        with pytest.raises(UnregisteredTypeError):
            parse_schema({"name": "trip", "inputs": [{"name": "x", "type": "money"}]})


class TestLoadSchemas:
    def test_load_file(self, trip_yaml):
        config = load_schemas(trip_yaml)
        assert config.schemas.names() == ["destination", "trip"]
        assert config.settings == DecanterSettings(strict=True, max_depth=8)
        assert config.source == str(trip_yaml)
        assert config.checksum == compute_checksum(yaml.safe_load(TRIP_YAML))

    def test_decanter_from_config(self, trip_yaml):
        engine = load_schemas(trip_yaml).decanter_for("trip")
        result = engine.decant({
            "start_date": "01/15/2015",
            "destination_attributes": [{"arrives_on": "2015-02-01"}],
            "extra": "kept",
        })
        assert result == {
            "start_date": date(2015, 1, 15),
            "destination_attributes": [{"arrives_on": date(2015, 2, 1)}],
            "extra": "kept",
        }

    def test_settings_apply_to_engine(self, trip_yaml):
        engine = load_schemas(trip_yaml).decanter_for("trip")
        assert engine.strict is True and engine.max_depth == 8
        with pytest.raises(UnhandledKeysError):
            engine.decant({"approved_at": "2015-01-15 09:00", "name": "x"}, "admin")

    def test_admin_context(self, trip_yaml):
        engine = load_schemas(trip_yaml).decanter_for("trip")
        result = engine.decant(
            {
                "approved_at": "2015-01-15 09:00",
                "destination_attributes": [{"city": "Oslo"}],
            },
            "admin",
        )
        assert result == {
            "approved_at": datetime(2015, 1, 15, 9, 0),
            "destination_attributes": [{"city": "Oslo"}],
        }

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_schemas(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("schemas: [unclosed")
        with pytest.raises(yaml.YAMLError):
            load_schemas(path)

    def test_non_mapping_document(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigurationError):
            load_schemas(path)

    def test_empty_document(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        config = load_schemas(path)
        assert len(config.schemas) == 0

    def test_duplicate_schema_names(self):
        with pytest.raises(SchemaAlreadyRegisteredError):
            load_config({"schemas": [{"name": "a"}, {"name": "a"}]})

    def test_schemas_must_be_list(self):
        with pytest.raises(ConfigurationError):
            load_config({"schemas": {"name": "a"}})


class TestChecksum:
    def test_deterministic_and_order_independent(self):
        assert compute_checksum({"a": 1, "b": 2}) == compute_checksum({"b": 2, "a": 1})
        assert compute_checksum({"a": 1}) != compute_checksum({"a": 2})

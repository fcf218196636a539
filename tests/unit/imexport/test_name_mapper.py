"""
Unit tests for the name mapper and bidirectional mappings.

Tests for:
- BidiMapping lookups in both directions
- Identity mappings
- Loading mapping files (valid, malformed, missing)
- Generating clean mapping files
- Validating mappings against table managers
"""

import json

import pytest

from imexport.core.exceptions import (
    CriticalIOError,
    InvalidArgumentError,
    InvalidStateError,
    MalformedMappingError,
)
from imexport.core.types import ErrorKind, WarningKind
from imexport.mapping.bidi import BidiMapping
from imexport.mapping.name_mapper import NameMapper


class TestBidiMapping:
    """Tests for BidiMapping."""

    def test_both_directions(self):
        mapping = BidiMapping({"First Name": "firstName", "Age": "age"})

        assert mapping.column_to_field("First Name") == "firstName"
        assert mapping.field_to_column("age") == "Age"
        assert mapping.column_to_field("Unknown") is None
        assert mapping.field_to_column("unknown") is None

    def test_duplicate_field_rejected(self):
        with pytest.raises(ValueError):
            BidiMapping({"A": "field", "B": "field"})

    def test_inverse(self):
        mapping = BidiMapping({"Col": "field"})

        assert mapping.inverse().to_dict() == {"field": "Col"}

    def test_identity(self):
        mapping = BidiMapping.identity(["a", "b"])

        assert mapping.items() == [("a", "a"), ("b", "b")]
        assert len(mapping) == 2
        assert "a" in mapping


class TestIdentityMapping:
    """Tests for NameMapper.identity_mapping."""

    def test_every_field_maps_to_itself(self, person_manager):
        mapping = NameMapper.identity_mapping(person_manager)

        assert mapping.to_dict() == {
            "firstName": "firstName",
            "lastName": "lastName",
            "age": "age",
        }


class TestLoadMapping:
    """Tests for NameMapper.load_mapping."""

    def test_valid_file(self, registry, tmp_path):
        path = tmp_path / "person.json"
        path.write_text(json.dumps({"First Name": "firstName", "Surname": "lastName"}), encoding="utf-8")

        mapping = NameMapper(registry).load_mapping(path)

        assert mapping.column_to_field("Surname") == "lastName"
        assert mapping.field_to_column("firstName") == "First Name"

    def test_accepts_string_path(self, registry, tmp_path):
        path = tmp_path / "person.json"
        path.write_text('{"a": "b"}', encoding="utf-8")

        assert NameMapper(registry).load_mapping(str(path)).to_dict() == {"a": "b"}

    @pytest.mark.parametrize("content", [
        "not json at all",
        "[\"firstName\"]",
        "{\"First Name\": 1}",
        "{\"First Name\": {\"nested\": \"x\"}}",
        "{\"A\": \"field\", \"B\": \"field\"}",
        "{\"A\": \"one\", \"A\": \"two\"}",
        "",
    ])
    def test_malformed_file(self, registry, tmp_path, content):
        path = tmp_path / "broken.json"
        path.write_text(content, encoding="utf-8")

        with pytest.raises(MalformedMappingError) as exc_info:
            NameMapper(registry).load_mapping(path)

        report = exc_info.value.report
        assert report.kind == ErrorKind.MAPPING_NO_VALID_JSON_FILE
        assert str(path) in report.message
        assert exc_info.value.recoverable is True

    def test_missing_file_is_critical(self, registry, tmp_path, caplog):
        path = tmp_path / "missing.json"

        with pytest.raises(CriticalIOError) as exc_info:
            NameMapper(registry).load_mapping(path)

        assert exc_info.value.recoverable is False
        assert exc_info.value.path == str(path)
        assert any(record.levelname == "CRITICAL" for record in caplog.records)


class TestGenerateCleanMappingFile:
    """Tests for NameMapper.generate_clean_mapping_file."""

    def test_round_trip(self, registry, tmp_path):
        mapper = NameMapper(registry)
        path = tmp_path / "person.json"

        mapper.generate_clean_mapping_file(path, "person")
        mapping = mapper.load_mapping(path)

        assert mapping.fields() == ["firstName", "lastName", "age"]
        for field_name in mapping.fields():
            assert mapping.field_to_column(field_name) == field_name

    def test_pretty_printed(self, registry, tmp_path):
        path = tmp_path / "address.json"

        NameMapper(registry, indent=4).generate_clean_mapping_file(path, "Address")

        lines = path.read_text(encoding="utf-8").splitlines()
        assert lines[0] == "{"
        assert lines[1] == '    "street": "street",'

    def test_unknown_table(self, registry, tmp_path):
        with pytest.raises(InvalidArgumentError):
            NameMapper(registry).generate_clean_mapping_file(tmp_path / "x.json", "Nope")

    def test_empty_registry(self, empty_registry, tmp_path):
        with pytest.raises(InvalidStateError):
            NameMapper(empty_registry).generate_clean_mapping_file(tmp_path / "x.json", "Person")

    def test_io_error_propagates(self, registry, tmp_path):
        path = tmp_path / "no_such_dir" / "person.json"

        with pytest.raises(OSError):
            NameMapper(registry).generate_clean_mapping_file(path, "Person")


class TestResolveAndValidate:
    """Tests for resolve_mapping and validate_mapping."""

    def test_resolve_without_path_is_identity(self, registry, person_manager):
        mapping = NameMapper(registry).resolve_mapping(person_manager)

        assert mapping == NameMapper.identity_mapping(person_manager)

    def test_resolve_with_path_loads(self, registry, person_manager, tmp_path):
        path = tmp_path / "p.json"
        path.write_text('{"Name": "firstName"}', encoding="utf-8")

        mapping = NameMapper(registry).resolve_mapping(person_manager, path)

        assert mapping.to_dict() == {"Name": "firstName"}

    def test_complete_mapping_has_no_warnings(self, person_manager):
        mapping = NameMapper.identity_mapping(person_manager)

        assert NameMapper.validate_mapping(mapping, person_manager) == []

    def test_warnings(self, person_manager):
        mapping = BidiMapping({"Name": "firstName", "Nick": "nickname", "Surname": "lastName"})

        warnings = NameMapper.validate_mapping(mapping, person_manager)

        assert [(w.kind, w.args[0]) for w in warnings] == [
            (WarningKind.UNKNOWN_MAPPED_FIELD, "nickname"),
            (WarningKind.FIELD_NOT_MAPPED, "age"),
        ]
        assert "Person" in warnings[0].message

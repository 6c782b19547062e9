"""Tests for the record table allow-list."""

from __future__ import annotations

import pytest

from keeper.core.errors import InvalidArgumentError
from keeper.core.tables import CONVENTION_COLUMNS, SHAPES, RecordKind, resolve_shape


class TestResolveShape:
    @pytest.mark.parametrize("name", ["TextData", "textdata", "TEXTDATA"])
    def test_case_insensitive(self, name):
        assert resolve_shape(name).kind is RecordKind.TEXT

    def test_record_kind(self):
        assert resolve_shape(RecordKind.CARD).table == "CardData"

    def test_empty(self):
        with pytest.raises(InvalidArgumentError, match="table must be specified"):
            resolve_shape("")

    @pytest.mark.parametrize("name", ["Users", "schema_migrations", "TextData; --"])
    def test_outside_allow_list(self, name):
        with pytest.raises(InvalidArgumentError) as exc_info:
            resolve_shape(name)
        assert exc_info.value.field == "table"


class TestRecordShape:
    def test_every_kind_has_a_shape(self):
        assert set(SHAPES) == set(RecordKind)

    def test_columns_follow_convention(self):
        for shape in SHAPES.values():
            assert CONVENTION_COLUMNS.issubset(shape.columns)
            assert CONVENTION_COLUMNS.isdisjoint(shape.fields)
            assert set(shape.required).issubset(shape.fields)

    def test_catalog_name_is_lower_case(self):
        assert resolve_shape("BinaryData").catalog_name == "binarydata"

    def test_check_fields_accepts_none(self):
        resolve_shape("Credentials").check_fields({"login": "bob", "meta_info": None})

    def test_check_fields_rejects_system_column(self):
        with pytest.raises(InvalidArgumentError, match="updated_at"):
            resolve_shape("Credentials").check_fields({"updated_at": "2024-01-01"})

    def test_check_fields_rejects_bytes(self):
        with pytest.raises(InvalidArgumentError, match="bytes"):
            resolve_shape("BinaryData").check_fields({"data": b"\x00"})

    def test_check_required(self):
        with pytest.raises(InvalidArgumentError, match="login, password"):
            resolve_shape("Credentials").check_required({"meta_info": "m"})

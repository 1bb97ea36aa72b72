"""Unit tests for the document value boundary."""

from __future__ import annotations

import json
from decimal import Decimal
from uuid import UUID

import pytest
from bson import Decimal128
from bson.binary import UUID_SUBTYPE, Binary

from bagdb import TranslationError, exclude_field, parse_document, serialize_document
from bagdb.documents import coerce_document, from_native, to_native


class TestParse:
    def test_parse_object(self) -> None:
        assert parse_document('{"id": 1, "key": "value"}') == {"id": 1, "key": "value"}

    def test_parse_keeps_key_order(self) -> None:
        assert list(parse_document('{"b": 1, "a": 2}')) == ["b", "a"]

    @pytest.mark.parametrize("text", ["", "{", "[]", "null", "1"])
    def test_parse_rejects_non_objects(self, text) -> None:
        with pytest.raises(TranslationError):
            parse_document(text)


class TestSerialize:
    def test_serialize_is_plain_json_for_plain_documents(self) -> None:
        document = {"id": 1, "tags": ["a"], "nested": {"ok": True}}

        assert json.loads(serialize_document(document)) == document

    def test_serialize_then_parse(self) -> None:
        document = {"id": 1, "price": Decimal("2.50")}

        parsed = parse_document(serialize_document(document))

        assert from_native(parsed) == document


class TestNativeConversion:
    def test_to_native_copies(self) -> None:
        document = {"a": {"b": [1, 2]}}

        native = to_native(document)
        native["a"]["b"].append(3)

        assert document == {"a": {"b": [1, 2]}}

    def test_to_native_converts_python_types(self) -> None:
        uid = UUID("12345678-1234-5678-1234-567812345678")

        native = to_native({"d": Decimal("1.1"), "u": uid, "t": (1, 2)})

        assert native["d"] == Decimal128("1.1")
        assert isinstance(native["u"], Binary)
        assert native["u"].subtype == UUID_SUBTYPE
        assert native["t"] == [1, 2]

    def test_from_native_restores_python_types(self) -> None:
        uid = UUID("12345678-1234-5678-1234-567812345678")
        document = {"d": Decimal("1.1"), "u": uid, "nested": [{"u": uid}]}

        assert from_native(to_native(document)) == document

    def test_plain_binary_is_left_alone(self) -> None:
        blob = Binary(b"\x00\x01")

        assert from_native({"b": blob}) == {"b": blob}


class TestHelpers:
    def test_exclude_field(self) -> None:
        document = {"_id": 1, "a": 2}

        assert exclude_field(document, "_id") == {"a": 2}
        assert exclude_field(document, "missing") == document
        assert document == {"_id": 1, "a": 2}

    def test_coerce_document(self) -> None:
        assert coerce_document({"a": 1}) == {"a": 1}
        assert coerce_document('{"a": 1}') == {"a": 1}
        with pytest.raises(TranslationError):
            coerce_document(42)  # type: ignore[arg-type]

"""
Tests for codec.py and keys.py.
"""

from datetime import datetime, timedelta, timezone

import pytest

from snapsync.codec import (
    Parsed,
    Unparseable,
    canonical_bytes,
    format_timestamp,
    parse_object,
    strip_reserved,
)
from snapsync.errors import InvalidKeyError
from snapsync.keys import endpoint_key, normalize_key, resolve_path


class TestParseObject:
    """Parsing classifies documents instead of raising."""

    def test_object_is_parsed(self):
        result = parse_object(b'{"a": 1}')
        assert result == Parsed({"a": 1})

    @pytest.mark.parametrize("raw", [
        b"not json", b"[1]", b"1", b"null", b'"s"', b"", b"{", b"\xff\xfe",
        b'{"a": NaN}', b'{"a": 1e999}', b'{"a": "\\udc00"}', b"[" * 100000 + b"]" * 100000,
    ])
    def test_everything_else_is_unparseable(self, raw):
        result = parse_object(raw)
        assert isinstance(result, Unparseable)
        assert result.raw == raw


class TestCanonicalBytes:
    """Canonical serialization is order and whitespace independent."""

    def test_key_order_irrelevant(self):
        assert canonical_bytes({"b": 1, "a": 2}) == canonical_bytes({"a": 2, "b": 1})

    def test_compact_and_sorted(self):
        assert canonical_bytes({"b": [1, {"d": 1, "c": 2}], "a": None}) == b'{"a":null,"b":[1,{"c":2,"d":1}]}'

    def test_empty_mapping(self):
        assert canonical_bytes({}) == b"{}"

    def test_strip_reserved_copies(self):
        original = {"a": 1, "roLastUpdated": "x"}
        assert strip_reserved(original) == {"a": 1}
        assert "roLastUpdated" in original


class TestFormatTimestamp:
    def test_utc_fixed_precision(self):
        assert format_timestamp(datetime(2024, 1, 1, tzinfo=timezone.utc)) == "2024-01-01T00:00:00.000000Z"

    def test_converts_offsets_to_utc(self):
        plus_two = timezone(timedelta(hours=2))
        assert format_timestamp(datetime(2024, 1, 1, 2, 30, tzinfo=plus_two)) == "2024-01-01T00:30:00.000000Z"


class TestKeys:
    """Key normalization keeps snapshots under the store root."""

    def test_plain_key(self):
        assert normalize_key("users-7.json") == "users-7.json"

    def test_leading_slash_and_backslashes(self):
        assert normalize_key("/groups\\9.json") == "groups/9.json"

    @pytest.mark.parametrize("key", ["", "  ", "..", "a/..", "a/./b", "a/"])
    def test_rejected(self, key):
        with pytest.raises(InvalidKeyError):
            normalize_key(key)

    def test_non_string_rejected(self):
        with pytest.raises(InvalidKeyError):
            normalize_key(7)

    def test_resolve_path(self, tmp_path):
        assert resolve_path(tmp_path, "groups/9.json") == tmp_path / "groups" / "9.json"

    def test_endpoint_key(self):
        assert endpoint_key("users", "7") == "users-7.json"
        assert endpoint_key("badges", 123) == "badges-123.json"


class TestNumbers:
    def test_int_and_float_canonical_forms_differ(self):
        assert canonical_bytes({"v": 1}) != canonical_bytes({"v": 1.0})

    def test_canonical_refuses_nan(self):
        with pytest.raises(ValueError):
            canonical_bytes({"v": float("nan")})

"""Tests for digest, signing and canonical serialization helpers."""

import hashlib
import hmac

import pytest

from nohumanallowed.services.crypto_utils import (
    HashlibDigest,
    canonical_json,
    format_number,
    hmac_sign,
    metadata_fingerprint,
    safe_compare,
)


class TestHashlibDigest:
    def test_sha256_hex(self):
        assert HashlibDigest().sha256_hex("abc") == hashlib.sha256(b"abc").hexdigest()

    def test_hmac_sha256_hex(self):
        expected = hmac.new(b"key", b"msg", hashlib.sha256).hexdigest()
        assert HashlibDigest().hmac_sha256_hex("key", "msg") == expected


class TestHmacSign:
    def test_truncated_to_128_bits(self):
        signature = hmac_sign("payload", "secret")
        assert len(signature) == 32
        assert signature == hmac.new(b"secret", b"payload", hashlib.sha256).hexdigest()[:32]

    def test_custom_length(self):
        assert len(hmac_sign("payload", "secret", length=16)) == 16


class TestSafeCompare:
    def test_equal(self):
        assert safe_compare("a" * 32, "a" * 32) is True

    def test_different(self):
        assert safe_compare("a" * 32, "a" * 31 + "b") is False

    def test_length_mismatch(self):
        assert safe_compare("abc", "abcd") is False

    @pytest.mark.parametrize("value", [None, 123, b"abc"])
    def test_non_strings_never_match(self, value):
        assert safe_compare(value, "abc") is False

    def test_non_ascii(self):
        """Test that non-ASCII input is compared rather than raising."""
        assert safe_compare("é", "é") is True
        assert safe_compare("é", "e") is False


class TestCanonicalJson:
    """Tests for deterministic metadata serialization."""

    def test_key_order_independent(self):
        assert canonical_json({"b": 1, "a": 2}) == canonical_json({"a": 2, "b": 1})
        assert canonical_json({"b": 1, "a": 2}) == '{"a":2,"b":1}'

    def test_nested_objects_are_sorted(self):
        value = {"z": {"y": [3, {"b": True, "a": None}], "x": "s"}}
        assert canonical_json(value) == '{"z":{"x":"s","y":[3,{"a":null,"b":true}]}}'

    def test_arrays_keep_order(self):
        assert canonical_json([3, 1, 2]) != canonical_json([1, 2, 3])
        assert canonical_json((1, 2)) == "[1,2]"

    def test_primitives(self):
        assert canonical_json(None) == "null"
        assert canonical_json(False) == "false"
        assert canonical_json(1.5) == "1.5"
        assert canonical_json(2.0) == "2"
        assert canonical_json(float("nan")) == "null"
        assert canonical_json('quote"d') == '"quote\\"d"'

    def test_unicode_is_not_escaped(self):
        assert canonical_json({"name": "Zoë"}) == '{"name":"Zoë"}'

    def test_non_string_keys_are_stringified(self):
        assert canonical_json({2: "b", 1: "a"}) == '{"1":"a","2":"b"}'

    def test_unsupported_type(self):
        with pytest.raises(TypeError):
            canonical_json({"when": object()})


class TestFormatNumber:
    @pytest.mark.parametrize(
        "value, expected",
        [(7, "7"), (7.0, "7"), (1700000060.0, "1700000060"), (1.25, "1.25"), (-3, "-3")],
    )
    def test_format(self, value, expected):
        assert format_number(value) == expected


class TestMetadataFingerprint:
    def test_absent_metadata(self):
        assert metadata_fingerprint(None) == ""

    def test_empty_metadata_is_not_absent(self):
        assert metadata_fingerprint({}) == hashlib.sha256(b"{}").hexdigest()[:16]

    def test_fingerprint_is_16_hex_chars(self):
        fingerprint = metadata_fingerprint({"a": 1})
        assert fingerprint == hashlib.sha256(b'{"a":1}').hexdigest()[:16]

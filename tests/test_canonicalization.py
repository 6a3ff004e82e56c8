"""
Canonical encoding tests.

The signature covers these bytes, so every property here is a wire
compatibility property.
"""

import unittest

from lbc_client.canonicalization import INT64_MAX, INT64_MIN, canonicalize, canonicalize_str
from lbc_client.errors import EncodingError


class TestCanonicalForm(unittest.TestCase):
    """Shape of the encoded output."""

    def test_member_order_preserved(self):
        """Members keep the order the value presents them in; no sorting."""
        self.assertEqual(canonicalize({"type": "x", "id": "1", "a": 2}), b'{"type":"x","id":"1","a":2}')

    def test_no_whitespace(self):
        canonical = canonicalize_str({"key": "value", "nested": {"inner": [1, 2]}})

        self.assertNotIn(" ", canonical)
        self.assertNotIn("\n", canonical)
        self.assertEqual(canonical, '{"key":"value","nested":{"inner":[1,2]}}')

    def test_null_is_explicit(self):
        self.assertEqual(canonicalize({"parent_promise_id": None}), b'{"parent_promise_id":null}')

    def test_utf8_not_ascii_escaped(self):
        self.assertEqual(canonicalize({"name": "Zoë"}), '{"name":"Zoë"}'.encode('utf-8'))

    def test_html_characters_escaped(self):
        """<, > and & are escaped the way the remote serializer does it."""
        self.assertEqual(
            canonicalize({"text": "<a & b>"}),
            b'{"text":"\\u003ca \\u0026 b\\u003e"}'
        )

    def test_line_separators_escaped(self):
        self.assertEqual(canonicalize("a\u2028b\u2029c"), b'"a\\u2028b\\u2029c"')

    def test_control_characters_escaped(self):
        self.assertEqual(canonicalize("a\nb"), b'"a\\nb"')

    def test_repeatable(self):
        value = {"type": "promise", "id": "promise:1", "due": 1893456000, "parent_promise_id": None}

        self.assertEqual(canonicalize(value), canonicalize(dict(value)))

    def test_int64_bounds_accepted(self):
        self.assertEqual(canonicalize([INT64_MIN, INT64_MAX]), f"[{INT64_MIN},{INT64_MAX}]".encode())

    def test_to_dict_objects_encoded(self):
        class Thing:
            def to_dict(self):
                return {"b": 1, "a": 2}

        self.assertEqual(canonicalize({"thing": Thing()}), b'{"thing":{"b":1,"a":2}}')


class TestCanonicalRejects(unittest.TestCase):
    """Values with no canonical form raise EncodingError."""

    def test_float_rejected(self):
        with self.assertRaises(EncodingError):
            canonicalize({"due": 1.5})

    def test_out_of_range_int_rejected(self):
        with self.assertRaises(EncodingError):
            canonicalize(INT64_MAX + 1)
        with self.assertRaises(EncodingError):
            canonicalize(INT64_MIN - 1)

    def test_non_string_key_rejected(self):
        with self.assertRaises(EncodingError):
            canonicalize({1: "x"})

    def test_unsupported_type_rejected(self):
        with self.assertRaises(EncodingError):
            canonicalize({"ids": {"a", "b"}})

    def test_lone_surrogate_rejected(self):
        with self.assertRaises(EncodingError):
            canonicalize("\ud800")


if __name__ == "__main__":
    unittest.main()

"""
Query path resolution and value decoding tests.
"""

import base64
import unittest

from lbc_client.errors import DecodeError
from lbc_client.query import (
    QueryClient,
    QueryView,
    ValueKind,
    decode_value,
    interpret_bytes,
    resolve_path,
)
from lbc_client.rpc import RpcClient

from fakes import FakeResponse, FakeSession, abci_response


def b64(raw: bytes) -> str:
    return base64.b64encode(raw).decode('ascii')


class TestResolvePath(unittest.TestCase):

    def test_alias(self):
        for alias in ("promise", "commitment", "commiter", "beneficiary"):
            with self.subTest(alias=alias):
                self.assertEqual(resolve_path(alias=alias), "/list/" + alias)

    def test_explicit_path_wins(self):
        self.assertEqual(resolve_path(path="/custom", alias="promise"), "/custom")

    def test_unknown_alias(self):
        with self.assertRaises(ValueError):
            resolve_path(alias="invoice")

    def test_nothing_given(self):
        with self.assertRaises(ValueError):
            resolve_path()


class TestDecodeValue(unittest.TestCase):
    """JSON first, then printable text, then base64 for binary."""

    def test_empty(self):
        self.assertEqual(decode_value("").kind, ValueKind.EMPTY)
        self.assertEqual(decode_value(None).kind, ValueKind.EMPTY)
        self.assertEqual(decode_value("").render(), "")

    def test_json(self):
        value = decode_value(b64(b'[{"id":"promise:1","due":1893456000}]'))

        self.assertEqual(value.kind, ValueKind.JSON)
        self.assertEqual(value.content, [{"id": "promise:1", "due": 1893456000}])

    def test_json_render_indented(self):
        rendered = decode_value(b64(b'{"a":1}')).render()
        self.assertEqual(rendered, '{\n  "a": 1\n}')

    def test_text(self):
        value = decode_value(b64(b"not found\n"))

        self.assertEqual(value.kind, ValueKind.TEXT)
        self.assertEqual(value.render(), "not found\n")

    def test_binary_with_control_bytes(self):
        raw = b"abc\x00def"
        value = decode_value(b64(raw))

        self.assertEqual(value.kind, ValueKind.BINARY)
        self.assertEqual(value.content, b64(raw))

    def test_binary_non_utf8(self):
        value = interpret_bytes(b"\xff\xfe\x00")

        self.assertEqual(value.kind, ValueKind.BINARY)
        self.assertEqual(base64.b64decode(value.content), b"\xff\xfe\x00")

    def test_invalid_base64(self):
        with self.assertRaises(DecodeError) as ctx:
            decode_value("!!not base64!!")
        self.assertEqual(ctx.exception.value, "!!not base64!!")


class TestQueryView(unittest.TestCase):

    def test_from_response(self):
        view = QueryView.from_response(abci_response(b'["x"]', height="17"))

        self.assertTrue(view.ok)
        self.assertEqual(view.height, "17")
        self.assertEqual(view.value, b'["x"]')
        self.assertEqual(view.decoded.content, ["x"])
        self.assertEqual(view.key, "")

    def test_nonzero_code(self):
        view = QueryView.from_response(abci_response(code=6, log="unknown path"))

        self.assertFalse(view.ok)
        self.assertEqual(view.log, "unknown path")
        self.assertEqual(view.decoded.kind, ValueKind.EMPTY)


class TestQueryClient(unittest.TestCase):

    def test_single_request_with_resolved_path(self):
        session = FakeSession(FakeResponse(abci_response(b"[]")))
        client = QueryClient(RpcClient("http://node:26657", session=session))

        view = client.query(alias="commiter")

        self.assertEqual(len(session.calls), 1)
        self.assertEqual(session.calls[0][2]["params"]["path"], '"/list/commiter"')
        self.assertEqual(view.decoded.content, [])

    def test_explicit_path_overrides_alias(self):
        session = FakeSession(FakeResponse(abci_response(b"[]")))
        client = QueryClient(RpcClient("http://node:26657", session=session))

        client.query(path="/get/promise", alias="commiter")

        self.assertEqual(session.calls[0][2]["params"]["path"], '"/get/promise"')

    def test_bad_alias_sends_nothing(self):
        session = FakeSession()
        client = QueryClient(RpcClient("http://node:26657", session=session))

        with self.assertRaises(ValueError):
            client.query(alias="bogus")
        self.assertEqual(session.calls, [])


if __name__ == "__main__":
    unittest.main()

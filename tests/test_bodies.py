"""
Transaction body tests: due-date parsing, wire order, validation.
"""

import base64
import unittest
import uuid

from lbc_client.bodies import (
    BeneficiaryTxBody,
    CommiterTxBody,
    CommitmentTxBody,
    PromiseTxBody,
    body_from_dict,
    create_beneficiary,
    create_commiter,
    create_commitment,
    create_promise,
    new_id,
    parse_when,
)
from lbc_client.canonicalization import canonicalize
from lbc_client.keys import KeyPair

JAN_1_2030 = 1893456000


class TestParseWhen(unittest.TestCase):
    """Due dates in both accepted notations."""

    def test_bare_date_is_midnight_utc(self):
        self.assertEqual(parse_when("2030-01-01"), JAN_1_2030)

    def test_rfc3339_utc(self):
        self.assertEqual(parse_when("2030-01-01T00:00:00Z"), JAN_1_2030)
        self.assertEqual(parse_when("2030-01-01T12:00:00Z"), JAN_1_2030 + 12 * 3600)

    def test_rfc3339_offset(self):
        self.assertEqual(parse_when("2030-01-01T02:00:00+02:00"), JAN_1_2030)
        self.assertEqual(parse_when("2029-12-31T19:00:00-05:00"), JAN_1_2030)

    def test_fraction_truncated(self):
        self.assertEqual(parse_when("2030-01-01T00:00:00.999Z"), JAN_1_2030)
        self.assertEqual(parse_when("2030-01-01T00:00:00.123456789Z"), JAN_1_2030)

    def test_range_extremes_with_offset(self):
        """Dates whose UTC instant falls outside years 1..9999 still convert."""
        self.assertEqual(parse_when("0001-01-01T00:00:00Z"), -62135596800)
        self.assertEqual(parse_when("0001-01-01T00:00:00+01:00"), -62135600400)
        self.assertEqual(parse_when("9999-12-31T23:59:59Z"), 253402300799)
        self.assertEqual(parse_when("9999-12-31T23:59:59-01:00"), 253402304399)

    def test_pre_epoch_fraction_floors(self):
        self.assertEqual(parse_when("1969-12-31T23:59:59.5Z"), -1)

    def test_empty_rejected(self):
        with self.assertRaises(ValueError) as ctx:
            parse_when("")
        self.assertIn("missing datetime", str(ctx.exception))

    def test_malformed_rejected(self):
        for text in ("01/01/2030", "2030-13-01", "2030-01-01T25:00:00Z", "2030-01-01T00:00:00", "soon"):
            with self.subTest(text=text):
                with self.assertRaises(ValueError):
                    parse_when(text)


class TestWireOrder(unittest.TestCase):
    """`type` first, then each body's fixed member order."""

    def test_commiter(self):
        body = create_commiter("Alice", KeyPair.generate().public_key)
        self.assertEqual(list(body.to_dict()), ["type", "id", "name", "commiter_pubkey"])

    def test_beneficiary(self):
        self.assertEqual(list(create_beneficiary("Library").to_dict()), ["type", "id", "name"])

    def test_promise(self):
        body = create_promise("Return the books", JAN_1_2030, "beneficiary:1")
        self.assertEqual(
            list(body.to_dict()),
            ["type", "id", "text", "due", "beneficiary_id", "parent_promise_id"]
        )

    def test_commitment(self):
        promise = create_promise("Return the books", JAN_1_2030, "beneficiary:1")
        body = create_commitment(promise, "commiter:abc", JAN_1_2030)
        self.assertEqual(list(body.to_dict()), ["type", "id", "promise_id", "commiter_id", "due"])

    def test_absent_parent_is_explicit_null(self):
        body = create_promise("Return the books", JAN_1_2030, "beneficiary:1", parent_promise_id="")

        self.assertIsNone(body.parent_promise_id)
        self.assertIn(b'"parent_promise_id":null', canonicalize(body.to_dict()))

    def test_parent_kept(self):
        body = create_promise("Sub-task", JAN_1_2030, "beneficiary:1", parent_promise_id="promise:root")
        self.assertEqual(body.to_dict()["parent_promise_id"], "promise:root")


class TestIdentity(unittest.TestCase):
    """Commiter ids are derived from the key; other ids are fresh UUIDs."""

    def test_commiter_id_from_key(self):
        pub = KeyPair.generate().public_key
        body = create_commiter("Alice", pub)

        self.assertEqual(body.id, "commiter:" + base64.b64encode(pub).decode())
        self.assertEqual(body.commiter_pubkey, base64.b64encode(pub).decode())

    def test_commiter_id_must_match_key(self):
        pub = base64.b64encode(KeyPair.generate().public_key).decode()

        with self.assertRaises(ValueError):
            CommiterTxBody(id="commiter:someone-else", name="Alice", commiter_pubkey=pub)

    def test_commiter_key_must_be_32_bytes(self):
        short = base64.b64encode(b"\x01" * 16).decode()

        with self.assertRaises(ValueError):
            CommiterTxBody(id="commiter:" + short, name="Alice", commiter_pubkey=short)

    def test_new_id_format(self):
        prefix, _, rest = new_id("promise").partition(":")

        self.assertEqual(prefix, "promise")
        self.assertEqual(uuid.UUID(rest).version, 4)

    def test_new_ids_unique(self):
        ids = {new_id("beneficiary") for _ in range(100)}
        self.assertEqual(len(ids), 100)


class TestValidation(unittest.TestCase):

    def test_empty_text_rejected(self):
        with self.assertRaises(ValueError):
            PromiseTxBody(id="promise:1", text="", due=JAN_1_2030, beneficiary_id="beneficiary:1")

    def test_empty_beneficiary_rejected(self):
        with self.assertRaises(ValueError):
            PromiseTxBody(id="promise:1", text="x", due=JAN_1_2030, beneficiary_id="")

    def test_due_must_be_integer(self):
        for due in ("2030-01-01", 1.5, True):
            with self.subTest(due=due):
                with self.assertRaises(ValueError):
                    CommitmentTxBody(id="c:1", promise_id="p:1", commiter_id="commiter:x", due=due)

    def test_due_out_of_range(self):
        with self.assertRaises(ValueError):
            CommitmentTxBody(id="c:1", promise_id="p:1", commiter_id="commiter:x", due=2 ** 63)

    def test_empty_name_rejected(self):
        with self.assertRaises(ValueError):
            create_beneficiary("")


class TestFromDict(unittest.TestCase):
    """Rebuilding typed bodies from decoded JSON."""

    def test_dispatch_on_type(self):
        promise = create_promise("Return the books", JAN_1_2030, "beneficiary:1")

        self.assertEqual(body_from_dict(promise.to_dict()), promise)
        self.assertIsInstance(body_from_dict({"type": "beneficiary", "id": "b:1", "name": "L"}), BeneficiaryTxBody)

    def test_unknown_type(self):
        with self.assertRaises(ValueError):
            body_from_dict({"type": "invoice", "id": "i:1"})

    def test_type_mismatch(self):
        with self.assertRaises(ValueError):
            BeneficiaryTxBody.from_dict({"type": "promise", "id": "b:1", "name": "L"})

    def test_missing_field(self):
        data = create_promise("x", JAN_1_2030, "beneficiary:1").to_dict()
        del data["parent_promise_id"]

        with self.assertRaises(ValueError) as ctx:
            PromiseTxBody.from_dict(data)
        self.assertIn("parent_promise_id", str(ctx.exception))


if __name__ == "__main__":
    unittest.main()

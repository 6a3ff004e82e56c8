#!/usr/bin/env python3
"""
LBC Example - Offline Promise+Commitment Flow

Builds, signs and verifies a composite Promise+Commitment transaction the
way the client does before broadcasting it, without contacting a node.
Prints the JSON-RPC frame that would be posted.

Run with: python examples/promise_flow_example.py
"""

import json
import tempfile

from lbc_client import (
    KeyManager,
    SignedEnvelope,
    canonicalize,
    parse_when,
    sign_body,
    verify_ed25519,
)
from lbc_client.bodies import create_beneficiary, create_commitment, create_promise
from lbc_client.envelope import compose
from lbc_client.rpc import build_broadcast_request


def print_section(title: str) -> None:
    print()
    print("=" * 60)
    print(title)
    print("=" * 60)


def main():
    with tempfile.TemporaryDirectory() as config_dir:
        print_section("1. Identity")
        pair = KeyManager(config_dir).ensure_keypair()
        print(f"commiter id: {pair.commiter_id}")

        print_section("2. Bodies")
        beneficiary = create_beneficiary("City Library")
        promise = create_promise(
            text="Return the books",
            due=parse_when("2030-01-01"),
            beneficiary_id=beneficiary.id,
        )
        commitment = create_commitment(promise, pair.commiter_id, parse_when("2030-01-01T12:00:00Z"))
        print(json.dumps(compose(promise, commitment).to_dict(), indent=2))

        print_section("3. Sign")
        envelope = sign_body(compose(promise, commitment), pair)
        wire = envelope.to_bytes()
        print(f"signature: {envelope.signature}")
        print(f"tx hash:   {envelope.tx_hash}")
        print(f"size:      {len(wire)} bytes")

        print_section("4. Verify as the ledger would")
        parsed = json.loads(wire)
        ok = verify_ed25519(parsed["signature"], canonicalize(parsed["body"]), pair.public_key)
        print(f"signature over re-encoded body: {'VALID' if ok else 'INVALID'}")
        print(f"round trip equal: {SignedEnvelope.from_bytes(wire) == envelope}")

        print_section("5. JSON-RPC frame")
        print(json.dumps(build_broadcast_request(wire, "example-1"), indent=2))


if __name__ == "__main__":
    main()

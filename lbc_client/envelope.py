"""
LBC Signing Envelope

Wraps one typed body, or the Promise+Commitment composite, into a signed
unit:

    simple:     {"body": <typed body>, "signature": <base64>}
    composite:  {"body": {"promise": <Promise>, "commitment": <Commitment>},
                 "signature": <base64>}

The body is canonicalized exactly once. Those bytes are signed, and the
transmitted envelope is assembled around the very same bytes, so the `body`
member on the wire is byte-identical to what the signature covers.
"""

import base64
import json
from dataclasses import dataclass, field
from typing import Any, Dict, Union

from .bodies import (
    BeneficiaryTxBody,
    CommiterTxBody,
    CommitmentTxBody,
    PromiseTxBody,
    body_from_dict,
)
from .canonicalization import canonicalize
from .hashing import tx_hash
from .keys import KeyPair, verify_ed25519

COMPOSITE_TYPE = "promise+commitment"


@dataclass(frozen=True)
class CompositeBody:
    """
    A Promise bound to the Commitment that originates it.

    Signed and submitted as one unit so the ledger accepts both or neither.
    """
    promise: PromiseTxBody
    commitment: CommitmentTxBody

    def __post_init__(self):
        if not isinstance(self.promise, PromiseTxBody):
            raise ValueError("composite body requires exactly one promise")
        if not isinstance(self.commitment, CommitmentTxBody):
            raise ValueError("composite body requires exactly one commitment")
        if self.commitment.promise_id != self.promise.id:
            raise ValueError(
                f"commitment references promise {self.commitment.promise_id!r}, "
                f"not {self.promise.id!r}"
            )

    @property
    def body_type(self) -> str:
        return COMPOSITE_TYPE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "promise": self.promise.to_dict(),
            "commitment": self.commitment.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CompositeBody':
        if not isinstance(data, dict) or set(data) != {"promise", "commitment"}:
            raise ValueError("composite body must have exactly 'promise' and 'commitment'")
        if data["promise"] is None or data["commitment"] is None:
            raise ValueError("composite body members must not be null")
        return cls(
            promise=PromiseTxBody.from_dict(data["promise"]),
            commitment=CommitmentTxBody.from_dict(data["commitment"]),
        )


Body = Union[CommiterTxBody, BeneficiaryTxBody, PromiseTxBody, CommitmentTxBody, CompositeBody]


def body_type_of(body: Body) -> str:
    if isinstance(body, CompositeBody):
        return body.body_type
    return body.TYPE.value


def encode_body(body: Body) -> bytes:
    """The one canonical encoding of a body, used for signing and transmission."""
    return canonicalize(body.to_dict())


@dataclass(frozen=True)
class SignedEnvelope:
    """A body, its canonical bytes, and the base64 Ed25519 signature over them."""
    body: Body
    signature: str
    signed_bytes: bytes = field(repr=False)

    @property
    def body_type(self) -> str:
        return body_type_of(self.body)

    def to_bytes(self) -> bytes:
        """Serialize the envelope for transmission around the signed body bytes."""
        return b'{"body":' + self.signed_bytes + b',"signature":' + canonicalize(self.signature) + b'}'

    def to_dict(self) -> Dict[str, Any]:
        return {"body": self.body.to_dict(), "signature": self.signature}

    @property
    def tx_hash(self) -> str:
        return tx_hash(self.to_bytes())

    def verify(self, public_key: bytes) -> bool:
        """Check the signature against the body bytes carried by this envelope."""
        return verify_ed25519(self.signature, self.signed_bytes, public_key)

    @classmethod
    def from_bytes(cls, raw: Union[bytes, str]) -> 'SignedEnvelope':
        """
        Parse a transmitted envelope.

        The body is rebuilt as a typed value and re-encoded canonically, which
        must reproduce the bytes the sender signed.

        Raises:
            ValueError: if the envelope or its body is malformed
        """
        try:
            data = json.loads(raw)
        except (TypeError, ValueError) as e:
            raise ValueError(f"envelope is not valid JSON: {e}") from e
        if not isinstance(data, dict) or set(data) != {"body", "signature"}:
            raise ValueError("envelope must have exactly 'body' and 'signature'")
        if not isinstance(data["signature"], str):
            raise ValueError("signature must be a base64 string")

        raw_body = data["body"]
        if isinstance(raw_body, dict) and "type" in raw_body:
            body = body_from_dict(raw_body)
        else:
            body = CompositeBody.from_dict(raw_body)
        return cls(body=body, signature=data["signature"], signed_bytes=encode_body(body))


def sign_body(body: Body, keypair: KeyPair) -> SignedEnvelope:
    """
    Canonicalize a body, sign those bytes, and wrap both in an envelope.

    Raises:
        EncodingError: if the body cannot be canonically encoded
    """
    signed_bytes = encode_body(body)
    signature = base64.b64encode(keypair.sign(signed_bytes)).decode('ascii')
    return SignedEnvelope(body=body, signature=signature, signed_bytes=signed_bytes)


def compose(promise: PromiseTxBody, commitment: CommitmentTxBody) -> CompositeBody:
    return CompositeBody(promise=promise, commitment=commitment)

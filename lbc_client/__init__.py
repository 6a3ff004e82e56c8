"""
LBC Client

Version: 0.3.0
License: Apache 2.0

Submits signed domain transactions (identity registration, beneficiaries,
promises and commitments) to a remote ledger over JSON-RPC, and queries the
ledger's key/value store.

Write path:
    KeyManager -> typed body -> canonical bytes -> Ed25519 signature
    -> envelope -> base64 -> broadcast_tx_commit -> classification

Read path:
    alias/path -> abci_query -> JSON | text | base64 view

Usage:
    from lbc_client import ClientConfig, CreatePromiseArgs, LbcClient

    with LbcClient(ClientConfig.from_env()) as client:
        client.register_commiter("Alice")
        ben = client.create_beneficiary("City Library")
        client.create_promise_and_commit(CreatePromiseArgs(
            text="Return the books",
            due="2030-01-01",
            beneficiary_id=ben.ids["beneficiary_id"],
            commitment_due="2030-01-01",
        ))
        view = client.query(alias="promise")
        print(view.decoded.render())
"""

__version__ = "0.3.0"
__license__ = "Apache-2.0"

# Errors
from .errors import (
    ErrorKind,
    LbcClientError,
    KeyIOError,
    EncodingError,
    TransportError,
    Timeout,
    EmptyResultError,
    ValidationRejected,
    ExecutionRejected,
    DecodeError,
)

# Canonicalization and hashing
from .canonicalization import canonicalize, canonicalize_str
from .hashing import tx_hash

# Keys
from .keys import KeyManager, KeyPair, commiter_id_for, verify_ed25519

# Bodies
from .bodies import (
    BodyType,
    CommiterTxBody,
    BeneficiaryTxBody,
    PromiseTxBody,
    CommitmentTxBody,
    body_from_dict,
    parse_when,
    new_id,
)

# Envelope
from .envelope import CompositeBody, SignedEnvelope, sign_body, encode_body

# Transport and classification
from .classifier import BroadcastResult, StageResult, classify_broadcast, classify_query
from .rpc import RpcClient

# Queries
from .query import ALIASES, QueryClient, QueryView, DecodedValue, ValueKind, resolve_path, decode_value

# Client
from .config import ClientConfig
from .client import LbcClient, CreatePromiseArgs, SubmissionReceipt


__all__ = [
    "__version__",

    # Errors
    "ErrorKind",
    "LbcClientError",
    "KeyIOError",
    "EncodingError",
    "TransportError",
    "Timeout",
    "EmptyResultError",
    "ValidationRejected",
    "ExecutionRejected",
    "DecodeError",

    # Canonicalization
    "canonicalize",
    "canonicalize_str",
    "tx_hash",

    # Keys
    "KeyManager",
    "KeyPair",
    "commiter_id_for",
    "verify_ed25519",

    # Bodies
    "BodyType",
    "CommiterTxBody",
    "BeneficiaryTxBody",
    "PromiseTxBody",
    "CommitmentTxBody",
    "body_from_dict",
    "parse_when",
    "new_id",

    # Envelope
    "CompositeBody",
    "SignedEnvelope",
    "sign_body",
    "encode_body",

    # Transport
    "BroadcastResult",
    "StageResult",
    "classify_broadcast",
    "classify_query",
    "RpcClient",

    # Queries
    "ALIASES",
    "QueryClient",
    "QueryView",
    "DecodedValue",
    "ValueKind",
    "resolve_path",
    "decode_value",

    # Client
    "ClientConfig",
    "LbcClient",
    "CreatePromiseArgs",
    "SubmissionReceipt",
]

"""
LBC High-level Client

Composes the key manager, body model, signing envelope and transport into
the operations a user runs: register an identity, create a beneficiary,
create a promise together with its commitment, and query the ledger.

Every write goes through one path: build body -> sign -> serialize ->
broadcast -> classify.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Optional, Union

from . import bodies
from .classifier import BroadcastResult
from .config import ClientConfig
from .envelope import Body, SignedEnvelope, compose, sign_body
from .errors import LbcClientError
from .hashing import hashes_match
from .keys import KeyManager, KeyPair
from .logging_config import request_context, tx_log
from .query import QueryClient, QueryView
from .rpc import RpcClient

logger = logging.getLogger(__name__)


@dataclass
class CreatePromiseArgs:
    """Inputs for a promise+commitment submission. Dates as YYYY-MM-DD or RFC 3339."""
    text: str
    due: str
    beneficiary_id: str
    commitment_due: str
    parent_promise_id: Optional[str] = None


@dataclass(frozen=True)
class SubmissionReceipt:
    """What was submitted and how the ledger answered."""
    envelope: SignedEnvelope
    result: BroadcastResult
    ids: Dict[str, str] = field(default_factory=dict)

    @property
    def tx_hash(self) -> str:
        return self.envelope.tx_hash


class LbcClient:
    """
    Client for one ledger endpoint and one local keypair.

    Components may be injected for testing; otherwise they are built from
    the config.
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        rpc: Optional[RpcClient] = None,
        keys: Optional[KeyManager] = None
    ):
        self.config = config or ClientConfig()
        self.rpc = rpc or RpcClient(
            self.config.rpc_url,
            timeout=self.config.timeout,
            retries=self.config.retries,
        )
        self.keys = keys or KeyManager.from_config(self.config)
        self.queries = QueryClient(self.rpc)

    def close(self) -> None:
        self.rpc.close()

    def __enter__(self) -> 'LbcClient':
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    # ----------------------------------------------------------
    # Write path
    # ----------------------------------------------------------

    def register_commiter(self, name: str) -> SubmissionReceipt:
        """Register the local keypair as an identity named `name`."""
        pair = self.keys.ensure_keypair()
        body = bodies.create_commiter(name, pair.public_key)
        return self._submit(body, pair, {"commiter_id": body.id})

    def create_beneficiary(self, name: str) -> SubmissionReceipt:
        pair = self.keys.ensure_keypair()
        body = bodies.create_beneficiary(name)
        return self._submit(body, pair, {"beneficiary_id": body.id})

    def create_promise_and_commit(self, args: CreatePromiseArgs) -> SubmissionReceipt:
        """
        Create a promise and the local identity's commitment to it, atomically.

        Raises:
            ValueError: missing text/beneficiary or unparseable dates
        """
        if not args.text:
            raise ValueError("--text is required")
        if not args.beneficiary_id:
            raise ValueError("--beneficiary-id is required")
        try:
            promise_due = bodies.parse_when(args.due)
        except ValueError as e:
            raise ValueError(f"promise --due: {e}") from e
        try:
            commitment_due = bodies.parse_when(args.commitment_due)
        except ValueError as e:
            raise ValueError(f"commitment --commitment-due: {e}") from e

        pair = self.keys.ensure_keypair()
        promise = bodies.create_promise(
            text=args.text,
            due=promise_due,
            beneficiary_id=args.beneficiary_id,
            parent_promise_id=args.parent_promise_id,
        )
        commitment = bodies.create_commitment(promise, pair.commiter_id, commitment_due)
        return self._submit(
            compose(promise, commitment),
            pair,
            {"promise_id": promise.id, "commitment_id": commitment.id},
        )

    def _submit(self, body: Body, pair: KeyPair, ids: Dict[str, str]) -> SubmissionReceipt:
        envelope = sign_body(body, pair)
        tx_bytes = envelope.to_bytes()
        local_hash = envelope.tx_hash

        with request_context() as request_id:
            tx_log.tx_submitted(envelope.body_type, local_hash, len(tx_bytes))
            try:
                result = self.rpc.broadcast_tx_commit(tx_bytes, request_id=request_id)
            except LbcClientError as e:
                tx_log.tx_rejected(local_hash, e.kind.value, e.message)
                raise

            if result.hash and not hashes_match(local_hash, result.hash):
                logger.warning("remote tx hash %s differs from local %s", result.hash, local_hash)
            tx_log.tx_committed(local_hash, result.height)
        return SubmissionReceipt(envelope=envelope, result=result, ids=ids)

    # ----------------------------------------------------------
    # Read path
    # ----------------------------------------------------------

    def query(
        self,
        path: Optional[str] = None,
        alias: Optional[str] = None,
        data: Optional[bytes] = None,
        height: Optional[Union[int, str]] = None
    ) -> QueryView:
        return self.queries.query(path=path, alias=alias, data=data, height=height)

    def whoami(self) -> str:
        """The identity id derived from the local keypair."""
        return self.keys.ensure_keypair().commiter_id

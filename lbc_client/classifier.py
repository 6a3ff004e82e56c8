"""
LBC Response Classifier

Interprets raw JSON-RPC response bodies. The write path is classified in a
fixed order, and the order is part of the contract:

1. `error` object present          -> TransportError (wins over any result)
2. no `result` object              -> EmptyResultError
3. result.check_tx.code != 0       -> ValidationRejected
4. result.deliver_tx.code != 0     -> ExecutionRejected
5. otherwise                       -> success (BroadcastResult)

The read path uses steps 1 and 2 only.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

from .errors import (
    EmptyResultError,
    ExecutionRejected,
    TransportError,
    ValidationRejected,
)

Payload = Union[bytes, str, Dict[str, Any]]


@dataclass(frozen=True)
class StageResult:
    """Outcome of one remote processing stage (check_tx or deliver_tx)."""
    code: int = 0
    log: str = ""
    codespace: str = ""
    gas_wanted: Optional[str] = None
    gas_used: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.code == 0

    @classmethod
    def from_dict(cls, data: Any) -> 'StageResult':
        # A stage the remote did not report counts as code 0.
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise EmptyResultError(f"malformed stage result: {data!r}")
        return cls(
            code=result_code(data.get("code")),
            log=_as_text(data.get("log")),
            codespace=_as_text(data.get("codespace")),
            gas_wanted=_opt_text(data.get("gas_wanted")),
            gas_used=_opt_text(data.get("gas_used")),
        )


@dataclass(frozen=True)
class BroadcastResult:
    """Successful broadcast_tx_commit outcome."""
    check_tx: StageResult = field(default_factory=StageResult)
    deliver_tx: StageResult = field(default_factory=StageResult)
    hash: Optional[str] = None
    height: Optional[str] = None


def result_code(value: Any) -> int:
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise EmptyResultError(f"malformed result code: {value!r}")
    return value


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _opt_text(value: Any) -> Optional[str]:
    return None if value is None else _as_text(value)


def parse_payload(payload: Payload) -> Optional[Dict[str, Any]]:
    """Decode a response body to a JSON object, or None if it is not one."""
    if isinstance(payload, dict):
        return payload
    try:
        data = json.loads(payload)
    except (TypeError, ValueError):
        return None
    return data if isinstance(data, dict) else None


def check_rpc_error(data: Dict[str, Any]) -> None:
    """Raise TransportError if the response carries a JSON-RPC error object."""
    error = data.get("error")
    if error is not None:
        raise TransportError.from_rpc_error(error)


def classify_broadcast(payload: Payload) -> BroadcastResult:
    """
    Classify a broadcast_tx_commit response.

    Raises:
        TransportError: RPC-level error object present
        EmptyResultError: response unparseable or without a result object
        ValidationRejected: check_tx.code != 0
        ExecutionRejected: deliver_tx.code != 0
    """
    data = parse_payload(payload)
    if data is None:
        raise EmptyResultError("empty result: response is not a JSON object")

    check_rpc_error(data)

    result = data.get("result")
    if not isinstance(result, dict):
        raise EmptyResultError("empty result")

    check_tx = StageResult.from_dict(result.get("check_tx"))
    if not check_tx.ok:
        raise ValidationRejected(check_tx.code, check_tx.log, check_tx.codespace)

    # Newer remote versions report the execution stage as tx_result.
    deliver_raw = result.get("deliver_tx")
    if deliver_raw is None:
        deliver_raw = result.get("tx_result")
    deliver_tx = StageResult.from_dict(deliver_raw)
    if not deliver_tx.ok:
        raise ExecutionRejected(deliver_tx.code, deliver_tx.log, deliver_tx.codespace)

    return BroadcastResult(
        check_tx=check_tx,
        deliver_tx=deliver_tx,
        hash=_opt_text(result.get("hash")),
        height=_opt_text(result.get("height")),
    )


def classify_query(payload: Payload) -> Dict[str, Any]:
    """
    Classify an abci_query response, returning the full decoded JSON.

    Raises:
        TransportError: RPC-level error object present
        EmptyResultError: response unparseable or without result.response
    """
    data = parse_payload(payload)
    if data is None:
        raise EmptyResultError("decode json: response is not a JSON object")

    check_rpc_error(data)

    result = data.get("result")
    if not isinstance(result, dict) or not isinstance(result.get("response"), dict):
        raise EmptyResultError("empty result")
    return data

"""
Test doubles for the HTTP transport.

FakeSession stands in for requests.Session: it records every call and
replays a scripted sequence of responses or exceptions.
"""

import base64
import json
from typing import Any, Dict, List, Optional, Tuple


class FakeResponse:
    """Minimal requests.Response lookalike."""

    def __init__(
        self,
        payload: Any = None,
        status_code: int = 200,
        content: Optional[bytes] = None,
        reason: str = "OK"
    ):
        if content is None:
            content = json.dumps(payload).encode('utf-8') if payload is not None else b""
        self.content = content
        self.status_code = status_code
        self.reason = reason

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    @property
    def text(self) -> str:
        return self.content.decode('utf-8', 'replace')


class FakeSession:
    """Scripted requests.Session replacement."""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls: List[Tuple[str, str, Dict[str, Any]]] = []
        self.closed = False

    def _next(self, method: str, url: str, **kwargs):
        self.calls.append((method, url, kwargs))
        if not self.outcomes:
            raise AssertionError(f"unexpected {method} {url}")
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    def post(self, url, **kwargs):
        return self._next("POST", url, **kwargs)

    def get(self, url, **kwargs):
        return self._next("GET", url, **kwargs)

    def close(self):
        self.closed = True

    def posted_envelope(self, index: int = 0) -> Dict[str, Any]:
        """Decode the envelope carried by the index-th broadcast call."""
        _, _, kwargs = self.calls[index]
        return json.loads(base64.b64decode(kwargs["json"]["params"]["tx"]))

    def posted_tx_bytes(self, index: int = 0) -> bytes:
        _, _, kwargs = self.calls[index]
        return base64.b64decode(kwargs["json"]["params"]["tx"])


def commit_response(
    check_code: int = 0,
    deliver_code: int = 0,
    check_log: str = "",
    deliver_log: str = "",
    tx_hash: Optional[str] = None,
    height: str = "42"
) -> Dict[str, Any]:
    """A broadcast_tx_commit JSON-RPC response."""
    result = {
        "check_tx": {"code": check_code, "log": check_log},
        "deliver_tx": {"code": deliver_code, "log": deliver_log},
        "height": height,
    }
    if tx_hash is not None:
        result["hash"] = tx_hash
    return {"jsonrpc": "2.0", "id": "x", "result": result}


def abci_response(value: bytes = b"", code: int = 0, log: str = "", height: str = "42") -> Dict[str, Any]:
    """An abci_query JSON-RPC response carrying raw value bytes."""
    return {
        "jsonrpc": "2.0",
        "id": -1,
        "result": {
            "response": {
                "code": code,
                "log": log,
                "info": "",
                "index": "0",
                "key": None,
                "value": base64.b64encode(value).decode('ascii') if value else None,
                "proofOps": None,
                "height": height,
                "codespace": "",
            }
        }
    }


def rpc_error(code: int = -32603, message: str = "Internal error", data: str = "boom") -> Dict[str, Any]:
    return {"jsonrpc": "2.0", "id": "x", "error": {"code": code, "message": message, "data": data}}

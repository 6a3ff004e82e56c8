"""
LBC JSON-RPC Transport

Frames signed envelopes as broadcast_tx_commit calls and issues abci_query
reads against a single configured endpoint over HTTP.

Every request carries an explicit timeout. A request that could not be
delivered at all (connection refused, connect timeout) is retried up to
`retries` more times; a request that was sent but not answered in time is
not, because the transaction may already sit in the remote mempool.
"""

import base64
import json
import logging
from typing import Any, Callable, Dict, Optional, Union

import requests

from .classifier import BroadcastResult, classify_broadcast, classify_query, parse_payload
from .config import DEFAULT_RETRIES, DEFAULT_TIMEOUT
from .errors import Timeout, TransportError
from .logging_config import get_request_id, request_context, set_request_id, tx_log

logger = logging.getLogger(__name__)

JSONRPC_VERSION = "2.0"
BROADCAST_METHOD = "broadcast_tx_commit"
QUERY_ENDPOINT = "abci_query"


def build_request(method: str, params: Dict[str, Any], request_id: str) -> Dict[str, Any]:
    """Build a JSON-RPC 2.0 request object."""
    return {
        "jsonrpc": JSONRPC_VERSION,
        "id": request_id,
        "method": method,
        "params": params,
    }


def build_broadcast_request(tx_bytes: bytes, request_id: str) -> Dict[str, Any]:
    """Frame serialized envelope bytes as a broadcast_tx_commit request."""
    return build_request(
        BROADCAST_METHOD,
        {"tx": base64.b64encode(tx_bytes).decode('ascii')},
        request_id,
    )


def quote_path(path: str) -> str:
    """
    Wrap a query path in literal double quotes.

    The remote expects the `path` argument as a quoted string literal,
    e.g. "/list/promise" is sent as "\"/list/promise\"" before URL encoding.
    """
    return json.dumps(path, ensure_ascii=False)


def build_query_params(
    path: str,
    data: Optional[bytes] = None,
    height: Optional[Union[int, str]] = None
) -> Dict[str, str]:
    """Query-string parameters for abci_query. Empty data/height are omitted."""
    params = {"path": quote_path(path)}
    if data:
        params["data"] = base64.b64encode(data).decode('ascii')
    if height is not None and height != "":
        params["height"] = str(height)
    return params


class RpcClient:
    """Blocking JSON-RPC client for one endpoint."""

    def __init__(
        self,
        endpoint: str,
        timeout: float = DEFAULT_TIMEOUT,
        retries: int = DEFAULT_RETRIES,
        session: Optional[requests.Session] = None
    ):
        if not endpoint:
            raise ValueError("RPC endpoint must not be empty")
        if retries < 0:
            raise ValueError("retries must not be negative")
        self.endpoint = endpoint
        self.timeout = timeout
        self.retries = retries
        self._session = session or requests.Session()

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> 'RpcClient':
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def broadcast_tx_commit(self, tx_bytes: bytes, request_id: Optional[str] = None) -> BroadcastResult:
        """
        Submit serialized envelope bytes and wait for inclusion.

        The first attempt is framed with request_id (generated if omitted);
        each retry gets a fresh id.

        Raises:
            Timeout, TransportError, EmptyResultError,
            ValidationRejected, ExecutionRejected
        """
        def send() -> requests.Response:
            frame = build_broadcast_request(tx_bytes, get_request_id())
            return self._session.post(self.endpoint, json=frame, timeout=self.timeout)

        with request_context(request_id):
            resp = self._send(BROADCAST_METHOD, send)
        return classify_broadcast(resp.content)

    def abci_query(
        self,
        path: str,
        data: Optional[bytes] = None,
        height: Optional[Union[int, str]] = None
    ) -> Dict[str, Any]:
        """
        Issue an abci_query read and return the full JSON response.

        Raises:
            Timeout, TransportError, EmptyResultError
        """
        url = self.endpoint.rstrip("/") + "/" + QUERY_ENDPOINT
        params = build_query_params(path, data, height)

        def send() -> requests.Response:
            return self._session.get(url, params=params, timeout=self.timeout)

        with request_context():
            tx_log.query_issued(path, params.get("height"))
            resp = self._send(QUERY_ENDPOINT, send)
        return classify_query(resp.content)

    def _send(self, method: str, send: Callable[[], requests.Response]) -> requests.Response:
        attempt = 0
        while True:
            attempt += 1
            if attempt > 1:
                set_request_id()
            try:
                resp = send()
            except requests.exceptions.ConnectTimeout as e:
                # Never connected, so nothing was delivered.
                if attempt <= self.retries:
                    tx_log.rpc_retry(method, attempt + 1, str(e))
                    continue
                raise Timeout(f"{method}: connect timed out after {self.timeout}s", timeout=self.timeout) from e
            except requests.exceptions.Timeout as e:
                raise Timeout(f"{method}: no response within {self.timeout}s", timeout=self.timeout) from e
            except requests.exceptions.ConnectionError as e:
                if attempt <= self.retries:
                    tx_log.rpc_retry(method, attempt + 1, str(e))
                    continue
                raise TransportError(f"{method}: connection failed: {e}") from e
            except requests.exceptions.RequestException as e:
                raise TransportError(f"{method}: request failed: {e}") from e

            logger.debug("%s answered HTTP %s (%d bytes)", method, resp.status_code, len(resp.content))
            if not resp.ok and parse_payload(resp.content) is None:
                raise TransportError(
                    f"{method}: HTTP {resp.status_code} {resp.reason}",
                    code=resp.status_code,
                    rpc_message=resp.reason,
                    data=resp.text,
                )
            return resp

"""
Logging configuration for the LBC client.

Provides structured JSON logging for submission audit trails and debugging.
Handlers write to stderr; stdout is reserved for command output.
"""

import json
import logging
import sys
import time
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Dict, Iterator, List, Optional

# JSON-RPC id of the call in flight, stamped on every line logged during it
request_id_var: ContextVar[str] = ContextVar('request_id', default='')

# LogRecord attribute carrying TxLogger event fields
EVENT_ATTR = "lbc_event"

TEXT_FORMAT = '%(asctime)s %(levelname)-7s %(name)s: %(message)s'


class StructuredFormatter(logging.Formatter):
    """
    One JSON object per record.

    Lifecycle events from TxLogger contribute their fields at the top level
    next to the standard ones.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": time.strftime('%Y-%m-%dT%H:%M:%SZ', time.gmtime(record.created)),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        rid = request_id_var.get()
        if rid:
            entry["request_id"] = rid
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        entry.update(getattr(record, EVENT_ATTR, None) or {})

        return json.dumps(entry, default=str)


class TxLogger:
    """
    Specialized logger for transaction lifecycle events.

    Records key lifecycle, submissions, their classification, and queries.
    """

    def __init__(self, name: str = "lbc_client.audit"):
        self._logger = logging.getLogger(name)

    def _log(self, level: int, event_type: str, message: str, **fields) -> None:
        if not self._logger.isEnabledFor(level):
            return
        event = {"event_type": event_type, **fields}
        rid = request_id_var.get()
        if rid:
            event["request_id"] = rid
        self._logger.log(level, "%s: %s", event_type, message, extra={EVENT_ATTR: event})

    def keypair_generated(self, path: str, public_key_b64: str) -> None:
        self._log(
            logging.INFO,
            "KEYPAIR_GENERATED",
            path=path,
            public_key=mask_key(public_key_b64),
            message=f"Generated new ed25519 keypair in {path}"
        )

    def keypair_loaded(self, path: str, public_key_b64: str) -> None:
        self._log(
            logging.DEBUG,
            "KEYPAIR_LOADED",
            path=path,
            public_key=mask_key(public_key_b64),
            message=f"Loaded keypair from {path}"
        )

    def tx_submitted(self, body_type: str, tx_hash: str, size: int) -> None:
        """Log a transaction leaving for the remote endpoint."""
        self._log(
            logging.INFO,
            "TX_SUBMITTED",
            body_type=body_type,
            tx_hash=tx_hash,
            size=size,
            message=f"Submitting {body_type} tx {tx_hash}"
        )

    def tx_committed(self, tx_hash: str, height: Optional[str] = None) -> None:
        self._log(
            logging.INFO,
            "TX_COMMITTED",
            tx_hash=tx_hash,
            height=height,
            message=f"Tx {tx_hash} committed at height {height}"
        )

    def tx_rejected(self, tx_hash: str, kind: str, reason: str) -> None:
        """Log a classified submission failure."""
        self._log(
            logging.WARNING,
            "TX_REJECTED",
            tx_hash=tx_hash,
            kind=kind,
            reason=reason,
            message=f"Tx {tx_hash} rejected ({kind}): {reason}"
        )

    def rpc_retry(self, method: str, attempt: int, reason: str) -> None:
        self._log(
            logging.WARNING,
            "RPC_RETRY",
            method=method,
            attempt=attempt,
            reason=reason,
            message=f"Retrying {method} (attempt {attempt}): {reason}"
        )

    def query_issued(self, path: str, height: Optional[str] = None) -> None:
        self._log(
            logging.DEBUG,
            "QUERY_ISSUED",
            path=path,
            height=height,
            message=f"abci_query {path}"
        )


def mask_key(value: str, visible_chars: int = 6) -> str:
    """Mask a key string, showing only the first N characters."""
    if len(value) <= visible_chars:
        return '*' * len(value)
    return value[:visible_chars] + '...'


def configure_logging(
    level: str = "WARNING",
    json_format: bool = False,
    log_file: Optional[str] = None
) -> None:
    """
    Replace the root logger's handlers with a stderr handler and, if
    log_file is given, a file handler.

    Args:
        level: DEBUG, INFO, WARNING, ERROR or CRITICAL
        json_format: one JSON object per line instead of plain text
        log_file: also append log output to this path

    Raises:
        ValueError: unknown level name
    """
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        raise ValueError(f"unknown log level: {level!r}")

    formatter = StructuredFormatter() if json_format else logging.Formatter(TEXT_FORMAT)
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    root = logging.getLogger()
    for old in list(root.handlers):
        root.removeHandler(old)
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)
    root.setLevel(numeric)


def set_request_id(request_id: Optional[str] = None) -> str:
    """Bind a JSON-RPC request id to the current context, generating one if omitted."""
    rid = request_id or str(uuid.uuid4())
    request_id_var.set(rid)
    return rid


def get_request_id() -> str:
    return request_id_var.get()


@contextmanager
def request_context(request_id: Optional[str] = None) -> Iterator[str]:
    """
    Scope a request id to one call. The previous id is restored on exit,
    so nothing leaks into the next call.
    """
    token = request_id_var.set(request_id or str(uuid.uuid4()))
    try:
        yield request_id_var.get()
    finally:
        request_id_var.reset(token)


# Global transaction logger instance
tx_log = TxLogger()

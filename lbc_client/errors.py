"""
LBC Client Error Taxonomy

Every failure the client can report is an LbcClientError carrying a
machine-readable ErrorKind. The write path distinguishes three tiers of
remote failure:

    transport   -> TransportError / Timeout (never reached the state machine)
    pre-check   -> ValidationRejected        (rejected by check_tx)
    execution   -> ExecutionRejected         (accepted, then failed deliver_tx)

Collapsing these tiers loses the ability to tell "never left the local
validity check" apart from "ran but failed a business rule".
"""

from enum import Enum
from typing import Any, Optional


class ErrorKind(str, Enum):
    """Classification attached to every client error."""
    KEY_IO = "KEY_IO"
    ENCODING = "ENCODING"
    TRANSPORT = "TRANSPORT"
    TIMEOUT = "TIMEOUT"
    EMPTY_RESULT = "EMPTY_RESULT"
    CHECK_TX = "CHECK_TX"
    DELIVER_TX = "DELIVER_TX"
    DECODE = "DECODE"


class LbcClientError(Exception):
    """Base class for all classified client errors."""

    kind: ErrorKind = ErrorKind.TRANSPORT

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def describe(self) -> str:
        """Single-line description suitable for the error stream."""
        return f"{self.kind.value}: {self.message}"


class KeyIOError(LbcClientError):
    """Key material could not be read, generated or persisted."""

    kind = ErrorKind.KEY_IO

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class EncodingError(LbcClientError):
    """A value could not be canonically encoded. Indicates a programming defect."""

    kind = ErrorKind.ENCODING


class TransportError(LbcClientError):
    """
    Network failure or JSON-RPC protocol-level error object.

    For RPC error objects, code/rpc_message/data are carried verbatim.
    """

    kind = ErrorKind.TRANSPORT

    def __init__(
        self,
        message: str,
        code: Optional[int] = None,
        rpc_message: Optional[str] = None,
        data: Any = None
    ):
        super().__init__(message)
        self.code = code
        self.rpc_message = rpc_message
        self.data = data

    @classmethod
    def from_rpc_error(cls, error: Any) -> 'TransportError':
        """Build from the `error` member of a JSON-RPC response."""
        if not isinstance(error, dict):
            return cls(f"RPC error: {error!r}", data=error)
        code = error.get("code")
        rpc_message = error.get("message")
        data = error.get("data")
        return cls(
            f"RPC error: {code} {rpc_message} ({data})",
            code=code,
            rpc_message=rpc_message,
            data=data
        )


class Timeout(TransportError):
    """The remote endpoint did not answer within the configured timeout."""

    kind = ErrorKind.TIMEOUT

    def __init__(self, message: str, timeout: Optional[float] = None):
        super().__init__(message)
        self.timeout = timeout


class EmptyResultError(LbcClientError):
    """The response carried neither an error nor a usable result object."""

    kind = ErrorKind.EMPTY_RESULT


class _Rejected(LbcClientError):
    """Application-level rejection by the remote state machine."""

    stage = ""

    def __init__(self, code: int, log: str = "", codespace: str = ""):
        super().__init__(f"{self.stage} failed: {log}")
        self.code = code
        self.log = log
        self.codespace = codespace


class ValidationRejected(_Rejected):
    """Rejected before processing (check_tx.code != 0)."""

    kind = ErrorKind.CHECK_TX
    stage = "CheckTx"


class ExecutionRejected(_Rejected):
    """Passed pre-validation, rejected during execution (deliver_tx.code != 0)."""

    kind = ErrorKind.DELIVER_TX
    stage = "DeliverTx"


class DecodeError(LbcClientError):
    """A query response value was not valid base64."""

    kind = ErrorKind.DECODE

    def __init__(self, message: str, value: str = ""):
        super().__init__(message)
        self.value = value

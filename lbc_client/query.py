"""
LBC Query Client

Read path against the ledger's key/value store. Resolves entity aliases to
query paths, performs a single abci_query and presents the polymorphic
response value through one view: structured JSON, printable text, or a
base64 re-presentation of binary content.
"""

import base64
import binascii
import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Union

from .classifier import result_code
from .errors import DecodeError
from .rpc import RpcClient

ALIASES = ("promise", "commitment", "commiter", "beneficiary")
LIST_PREFIX = "/list/"

_ALLOWED_CONTROL = {"\t", "\n", "\r"}


def resolve_path(path: Optional[str] = None, alias: Optional[str] = None) -> str:
    """
    Resolve the query path. An explicit path always wins over an alias.

    Raises:
        ValueError: unknown alias, or neither path nor alias given
    """
    if path:
        return path
    if alias:
        if alias not in ALIASES:
            raise ValueError(f"unknown alias for --list: {alias!r} (expected one of {', '.join(ALIASES)})")
        return LIST_PREFIX + alias
    raise ValueError("Either --path or --list is required")


class ValueKind(str, Enum):
    """How a query value was interpreted."""
    EMPTY = "EMPTY"
    JSON = "JSON"
    TEXT = "TEXT"
    BINARY = "BINARY"


@dataclass(frozen=True)
class DecodedValue:
    """
    A decoded query value.

    content is the parsed JSON value for JSON, the string for TEXT, the
    base64 string for BINARY, and None for EMPTY.
    """
    kind: ValueKind
    content: Any = None

    def render(self) -> str:
        if self.kind == ValueKind.EMPTY:
            return ""
        if self.kind == ValueKind.JSON:
            return json.dumps(self.content, indent=2, ensure_ascii=False)
        return self.content


def _is_printable(text: str) -> bool:
    return not any(ord(c) < 0x20 and c not in _ALLOWED_CONTROL for c in text)


def interpret_bytes(raw: bytes) -> DecodedValue:
    """Interpret raw value bytes: JSON first, then text, then base64."""
    if not raw:
        return DecodedValue(ValueKind.EMPTY)
    try:
        text = raw.decode('utf-8')
    except UnicodeDecodeError:
        return DecodedValue(ValueKind.BINARY, base64.b64encode(raw).decode('ascii'))
    try:
        return DecodedValue(ValueKind.JSON, json.loads(text))
    except ValueError:
        pass
    if not _is_printable(text):
        return DecodedValue(ValueKind.BINARY, base64.b64encode(raw).decode('ascii'))
    return DecodedValue(ValueKind.TEXT, text)


def decode_value(value_b64: Optional[str]) -> DecodedValue:
    """
    Decode a base64 query value.

    Raises:
        DecodeError: if the value is not valid base64
    """
    if not value_b64:
        return DecodedValue(ValueKind.EMPTY)
    try:
        raw = base64.b64decode(value_b64, validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodeError(f"cannot base64-decode value: {e}", value=value_b64) from e
    return interpret_bytes(raw)


def _text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


@dataclass(frozen=True)
class QueryView:
    """Unified view of an abci_query response."""
    code: int = 0
    log: str = ""
    info: str = ""
    index: str = ""
    key: str = ""
    value_b64: str = ""
    height: str = ""
    codespace: str = ""
    proof_ops: Any = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    @property
    def ok(self) -> bool:
        return self.code == 0

    @property
    def value(self) -> bytes:
        """Raw value bytes. Raises DecodeError on invalid base64."""
        if not self.value_b64:
            return b""
        try:
            return base64.b64decode(self.value_b64, validate=True)
        except (binascii.Error, ValueError) as e:
            raise DecodeError(f"cannot base64-decode value: {e}", value=self.value_b64) from e

    @property
    def decoded(self) -> DecodedValue:
        return decode_value(self.value_b64)

    @classmethod
    def from_response(cls, data: Dict[str, Any]) -> 'QueryView':
        """Build from a classified abci_query response."""
        r = data["result"]["response"]
        return cls(
            code=result_code(r.get("code")),
            log=_text(r.get("log")),
            info=_text(r.get("info")),
            index=_text(r.get("index")),
            key=_text(r.get("key")),
            value_b64=_text(r.get("value")),
            height=_text(r.get("height")),
            codespace=_text(r.get("codespace")),
            proof_ops=r.get("proofOps"),
            raw=data,
        )


class QueryClient:
    """Resolves, issues and decodes ledger queries."""

    def __init__(self, rpc: RpcClient):
        self._rpc = rpc

    def query(
        self,
        path: Optional[str] = None,
        alias: Optional[str] = None,
        data: Optional[bytes] = None,
        height: Optional[Union[int, str]] = None
    ) -> QueryView:
        """
        Perform exactly one abci_query.

        Raises:
            ValueError, Timeout, TransportError, EmptyResultError
        """
        resolved = resolve_path(path, alias)
        return QueryView.from_response(self._rpc.abci_query(resolved, data, height))

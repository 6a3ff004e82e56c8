"""
LBC Transaction Bodies

Typed business records submitted to the ledger. Each body serializes to a
JSON object whose first member is the `type` discriminator and whose
remaining members follow a fixed wire order. Optional references encode as
explicit null, never as an omitted key, so a verifier reconstructing the
body gets byte-identical input.
"""

import base64
import binascii
import re
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, ClassVar, Dict, Optional, Tuple, Type

from .canonicalization import INT64_MAX, INT64_MIN
from .keys import PUBLIC_KEY_SIZE, commiter_id_for


class BodyType(str, Enum):
    """Discriminator values carried in the `type` member."""
    COMMITER = "commiter"
    BENEFICIARY = "beneficiary"
    PROMISE = "promise"
    COMMITMENT = "commitment"


# RFC 3339 date-time with mandatory offset; fractional seconds optional.
RFC3339_PATTERN = re.compile(
    r'^(\d{4}-\d{2}-\d{2})[Tt](\d{2}:\d{2}:\d{2})(?:\.(\d+))?([Zz]|[+-]\d{2}:\d{2})$'
)
DATE_PATTERN = re.compile(r'^\d{4}-\d{2}-\d{2}$')
_FORMATS_HINT = "use YYYY-MM-DD or RFC 3339"

UNIX_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _epoch_seconds(dt: datetime) -> int:
    # Stays in range for years 1 and 9999 at any offset.
    return (dt - UNIX_EPOCH) // timedelta(seconds=1)


def parse_when(text: str) -> int:
    """
    Parse a due date into seconds since the Unix epoch.

    Accepts RFC 3339 (e.g. "2030-01-01T12:00:00Z", "2030-01-01T12:00:00+02:00")
    or a bare date "YYYY-MM-DD", which is taken as midnight UTC.

    Raises:
        ValueError: on empty or unparseable input
    """
    if not text:
        raise ValueError("missing datetime")

    m = RFC3339_PATTERN.match(text)
    if m:
        date_part, time_part, fraction, offset = m.groups()
        if offset in ("Z", "z"):
            offset = "+00:00"
        micro = f".{fraction[:6].ljust(6, '0')}" if fraction else ""
        try:
            dt = datetime.fromisoformat(f"{date_part}T{time_part}{micro}{offset}")
        except ValueError as e:
            raise ValueError(f"cannot parse time: {text!r}: {e} ({_FORMATS_HINT})") from e
        return _epoch_seconds(dt)

    if DATE_PATTERN.match(text):
        try:
            d = datetime.strptime(text, "%Y-%m-%d").replace(tzinfo=timezone.utc)
        except ValueError as e:
            raise ValueError(f"cannot parse time: {text!r}: {e} ({_FORMATS_HINT})") from e
        return _epoch_seconds(d)

    raise ValueError(f"cannot parse time: {text!r} ({_FORMATS_HINT})")


def new_id(prefix: str) -> str:
    """Generate a globally unique id of the form "<prefix>:<uuid4>"."""
    return f"{prefix}:{uuid.uuid4()}"


def _require_text(name: str, value: Any) -> None:
    if not isinstance(value, str) or not value:
        raise ValueError(f"{name} must be a non-empty string")


def _require_timestamp(name: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an integer timestamp")
    if not INT64_MIN <= value <= INT64_MAX:
        raise ValueError(f"{name} out of 64-bit range: {value}")


def _check_fields(cls: Type, data: Dict[str, Any]) -> None:
    if not isinstance(data, dict):
        raise ValueError(f"{cls.__name__} must be built from an object")
    if data.get("type") != cls.TYPE.value:
        raise ValueError(f"expected type {cls.TYPE.value!r}, got {data.get('type')!r}")
    missing = [f for f in cls.WIRE_FIELDS if f not in data]
    if missing:
        raise ValueError(f"Missing required fields: {missing}")


@dataclass(frozen=True)
class CommiterTxBody:
    """Identity registration. The id is derived from the public key."""
    TYPE: ClassVar[BodyType] = BodyType.COMMITER
    WIRE_FIELDS: ClassVar[Tuple[str, ...]] = ("id", "name", "commiter_pubkey")

    id: str
    name: str
    commiter_pubkey: str

    def __post_init__(self):
        _require_text("name", self.name)
        _require_text("commiter_pubkey", self.commiter_pubkey)
        try:
            raw = base64.b64decode(self.commiter_pubkey, validate=True)
        except (binascii.Error, ValueError):
            raise ValueError("commiter_pubkey must be base64")
        if len(raw) != PUBLIC_KEY_SIZE:
            raise ValueError(f"commiter_pubkey must encode {PUBLIC_KEY_SIZE} bytes")
        if self.id != commiter_id_for(raw):
            raise ValueError("commiter id must be derived from commiter_pubkey")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.TYPE.value,
            "id": self.id,
            "name": self.name,
            "commiter_pubkey": self.commiter_pubkey,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CommiterTxBody':
        _check_fields(cls, data)
        return cls(id=data["id"], name=data["name"], commiter_pubkey=data["commiter_pubkey"])


@dataclass(frozen=True)
class BeneficiaryTxBody:
    """A party promises are made to. Not tied to any keypair."""
    TYPE: ClassVar[BodyType] = BodyType.BENEFICIARY
    WIRE_FIELDS: ClassVar[Tuple[str, ...]] = ("id", "name")

    id: str
    name: str

    def __post_init__(self):
        _require_text("id", self.id)
        _require_text("name", self.name)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.TYPE.value,
            "id": self.id,
            "name": self.name,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'BeneficiaryTxBody':
        _check_fields(cls, data)
        return cls(id=data["id"], name=data["name"])


@dataclass(frozen=True)
class PromiseTxBody:
    """
    A promise to a beneficiary, optionally nested under a parent promise.

    Parent references form a forest; cycles are not checked client-side.
    """
    TYPE: ClassVar[BodyType] = BodyType.PROMISE
    WIRE_FIELDS: ClassVar[Tuple[str, ...]] = (
        "id", "text", "due", "beneficiary_id", "parent_promise_id"
    )

    id: str
    text: str
    due: int
    beneficiary_id: str
    parent_promise_id: Optional[str] = None

    def __post_init__(self):
        _require_text("id", self.id)
        _require_text("text", self.text)
        _require_timestamp("due", self.due)
        _require_text("beneficiary_id", self.beneficiary_id)
        if self.parent_promise_id is not None:
            _require_text("parent_promise_id", self.parent_promise_id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.TYPE.value,
            "id": self.id,
            "text": self.text,
            "due": self.due,
            "beneficiary_id": self.beneficiary_id,
            "parent_promise_id": self.parent_promise_id,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PromiseTxBody':
        _check_fields(cls, data)
        return cls(
            id=data["id"],
            text=data["text"],
            due=data["due"],
            beneficiary_id=data["beneficiary_id"],
            parent_promise_id=data["parent_promise_id"],
        )


@dataclass(frozen=True)
class CommitmentTxBody:
    """A commiter's commitment to fulfil exactly one promise."""
    TYPE: ClassVar[BodyType] = BodyType.COMMITMENT
    WIRE_FIELDS: ClassVar[Tuple[str, ...]] = ("id", "promise_id", "commiter_id", "due")

    id: str
    promise_id: str
    commiter_id: str
    due: int

    def __post_init__(self):
        _require_text("id", self.id)
        _require_text("promise_id", self.promise_id)
        _require_text("commiter_id", self.commiter_id)
        _require_timestamp("due", self.due)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.TYPE.value,
            "id": self.id,
            "promise_id": self.promise_id,
            "commiter_id": self.commiter_id,
            "due": self.due,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CommitmentTxBody':
        _check_fields(cls, data)
        return cls(
            id=data["id"],
            promise_id=data["promise_id"],
            commiter_id=data["commiter_id"],
            due=data["due"],
        )


BODY_TYPES: Dict[str, Type] = {
    cls.TYPE.value: cls
    for cls in (CommiterTxBody, BeneficiaryTxBody, PromiseTxBody, CommitmentTxBody)
}


def body_from_dict(data: Dict[str, Any]):
    """Rebuild a typed body by dispatching on its `type` member."""
    if not isinstance(data, dict):
        raise ValueError("body must be an object")
    cls = BODY_TYPES.get(data.get("type"))
    if cls is None:
        raise ValueError(f"unknown body type: {data.get('type')!r}")
    return cls.from_dict(data)


# ============================================================
# Factories
# ============================================================

def create_commiter(name: str, public_key: bytes) -> CommiterTxBody:
    """Build an identity registration for a public key."""
    pub_b64 = base64.b64encode(public_key).decode('ascii')
    return CommiterTxBody(id=commiter_id_for(public_key), name=name, commiter_pubkey=pub_b64)


def create_beneficiary(name: str) -> BeneficiaryTxBody:
    return BeneficiaryTxBody(id=new_id("beneficiary"), name=name)


def create_promise(
    text: str,
    due: int,
    beneficiary_id: str,
    parent_promise_id: Optional[str] = None
) -> PromiseTxBody:
    """Build a promise with a fresh id. An empty parent id means no parent."""
    return PromiseTxBody(
        id=new_id("promise"),
        text=text,
        due=due,
        beneficiary_id=beneficiary_id,
        parent_promise_id=parent_promise_id or None,
    )


def create_commitment(promise: PromiseTxBody, commiter_id: str, due: int) -> CommitmentTxBody:
    return CommitmentTxBody(
        id=new_id("commitment"),
        promise_id=promise.id,
        commiter_id=commiter_id,
        due=due,
    )

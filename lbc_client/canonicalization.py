"""
LBC Canonical JSON Encoding

The signature on every transaction is taken over these exact bytes, and the
remote verifier re-serializes the body before checking it. Both sides must
therefore agree on one representation:

- Compact form, no whitespace between tokens
- UTF-8, no BOM
- Object members in the order the value presents them. Typed bodies always
  present their wire order, so no key sorting is applied.
- HTML-sensitive characters and the JS line separators escaped the way the
  remote serializer escapes them
- Integers only, within the signed 64-bit range; floats are rejected
"""

import json
from typing import Any, Dict, List, Mapping, Union

from .errors import EncodingError

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1

# Applied to the serialized text. None of these characters is a JSON
# structural token, so each occurrence is inside a string literal.
_REMOTE_ESCAPES = (
    ("&", "\\u0026"),
    ("<", "\\u003c"),
    (">", "\\u003e"),
    ("\u2028", "\\u2028"),
    ("\u2029", "\\u2029"),
)


def canonicalize(obj: Any) -> bytes:
    """
    Convert an object to canonical JSON bytes.

    Raises:
        EncodingError: if the value holds a type with no canonical form
    """
    canonical = _canonicalize_value(obj)
    try:
        text = json.dumps(canonical, separators=(',', ':'), ensure_ascii=False)
        for raw, escaped in _REMOTE_ESCAPES:
            text = text.replace(raw, escaped)
        return text.encode('utf-8')
    except (TypeError, ValueError, UnicodeEncodeError) as e:
        raise EncodingError(f"cannot encode value: {e}") from e


def canonicalize_str(obj: Any) -> str:
    """Return canonical JSON as string."""
    return canonicalize(obj).decode('utf-8')


def _canonicalize_value(value: Any) -> Any:
    """Recursively validate a value, returning it in encodable form."""
    if value is None:
        return None
    elif isinstance(value, bool):
        return value
    elif isinstance(value, int):
        if not INT64_MIN <= value <= INT64_MAX:
            raise EncodingError(f"integer out of 64-bit range: {value}")
        return value
    elif isinstance(value, float):
        raise EncodingError("floats have no canonical form; use integers")
    elif isinstance(value, str):
        return value
    elif isinstance(value, Mapping):
        return _canonicalize_object(value)
    elif isinstance(value, (list, tuple)):
        return _canonicalize_array(value)
    elif hasattr(value, "to_dict"):
        return _canonicalize_object(value.to_dict())
    else:
        raise EncodingError(f"Cannot canonicalize type: {type(value).__name__}")


def _canonicalize_object(obj: Mapping) -> Dict[str, Any]:
    """Canonicalize an object, keeping member order."""
    out = {}
    for k, v in obj.items():
        if not isinstance(k, str):
            raise EncodingError(f"object keys must be strings, got {type(k).__name__}")
        out[k] = _canonicalize_value(v)
    return out


def _canonicalize_array(arr: Union[List, tuple]) -> List:
    return [_canonicalize_value(item) for item in arr]

"""
LBC Transaction Hashing

The remote ledger identifies a transaction by the SHA-256 of the raw tx
bytes, rendered as upper-case hexadecimal.
"""

import hashlib
from typing import Optional, Union


def tx_hash(tx_bytes: Union[bytes, str]) -> str:
    """
    Compute the ledger transaction hash of serialized envelope bytes.

    Returns:
        Upper-case hex SHA-256 digest, e.g. "9F86D08..."
    """
    if isinstance(tx_bytes, str):
        tx_bytes = tx_bytes.encode('utf-8')
    return hashlib.sha256(tx_bytes).hexdigest().upper()


def hashes_match(local_hash: str, remote_hash: Optional[str]) -> bool:
    """Compare a locally computed tx hash with the one the remote reported."""
    if not remote_hash:
        return False
    return local_hash.upper() == remote_hash.upper()

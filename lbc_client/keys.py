"""
Key management module for the LBC client.

Owns the load-or-generate lifecycle of the local Ed25519 signing keypair.
Files use the common raw Ed25519 layout, so other ledger clients can share them:

    <config_dir>/ed25519.key   64 raw bytes (seed || public key), mode 0600
    <config_dir>/ed25519.pub   32 raw bytes, mode 0644
"""

import base64
import errno
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple, Union

from nacl.exceptions import BadSignatureError, CryptoError
from nacl.signing import SigningKey, VerifyKey

from .config import ClientConfig, key_paths_for
from .errors import KeyIOError
from .logging_config import tx_log

logger = logging.getLogger(__name__)

SEED_SIZE = 32
PUBLIC_KEY_SIZE = 32
PRIVATE_KEY_SIZE = SEED_SIZE + PUBLIC_KEY_SIZE

COMMITER_ID_PREFIX = "commiter:"


def commiter_id_for(public_key: bytes) -> str:
    """
    Derive the identity id for a public key.

    A pure function of the key: any process holding the same keypair
    computes the same id.
    """
    return COMMITER_ID_PREFIX + base64.b64encode(public_key).decode('ascii')


@dataclass(frozen=True)
class KeyPair:
    """Ed25519 key pair."""
    public_key: bytes
    private_key: bytes = field(repr=False)
    algorithm: str = "Ed25519"

    @property
    def public_key_b64(self) -> str:
        return base64.b64encode(self.public_key).decode('ascii')

    @property
    def commiter_id(self) -> str:
        return commiter_id_for(self.public_key)

    def sign(self, data: bytes) -> bytes:
        """Sign data, returning the detached 64-byte signature."""
        return SigningKey(self.private_key[:SEED_SIZE]).sign(data).signature

    @classmethod
    def generate(cls) -> 'KeyPair':
        """Generate a fresh keypair from the OS CSPRNG."""
        return cls.from_seed(bytes(SigningKey.generate()))

    @classmethod
    def from_seed(cls, seed: bytes) -> 'KeyPair':
        sk = SigningKey(seed)
        public = bytes(sk.verify_key)
        return cls(public_key=public, private_key=bytes(sk) + public)


class KeyManager:
    """
    File-based keypair store rooted at an explicit configuration directory.

    The first call to ensure_keypair() generates and persists a keypair;
    later calls load and return the persisted pair unchanged. A keypair that
    could not be persisted is never returned, since it would be unrecoverable
    once the process exits.
    """

    def __init__(self, config_dir: Union[str, Path], key_paths: Optional[Tuple[Path, Path]] = None):
        self._config_dir = Path(config_dir)
        self._private_path, self._public_path = key_paths or key_paths_for(self._config_dir)

    @classmethod
    def from_config(cls, config: ClientConfig) -> 'KeyManager':
        return cls(config.config_dir, key_paths=config.key_paths)

    @property
    def private_key_path(self) -> Path:
        return self._private_path

    @property
    def public_key_path(self) -> Path:
        return self._public_path

    def ensure_keypair(self) -> KeyPair:
        """
        Load the persisted keypair, generating it on first use.

        Raises:
            KeyIOError: on any filesystem failure or malformed key material
        """
        if not self._private_path.exists():
            try:
                return self._generate()
            except FileExistsError:
                # Another process created the key between exists() and open().
                logger.debug("key file appeared during generation, loading it")
        return self._load()

    def _generate(self) -> KeyPair:
        pair = KeyPair.generate()
        try:
            self._config_dir.mkdir(mode=0o700, parents=True, exist_ok=True)
            self._write(self._private_path, pair.private_key, 0o600, exclusive=True)
        except FileExistsError:
            raise
        except OSError as e:
            raise KeyIOError(f"cannot persist private key: {e}", path=str(self._private_path)) from e

        try:
            self._write(self._public_path, pair.public_key, 0o644, exclusive=False)
        except OSError as e:
            # Without its public half the private key would fail every later load.
            self._discard(self._private_path)
            raise KeyIOError(f"cannot persist public key: {e}", path=str(self._public_path)) from e

        tx_log.keypair_generated(str(self._config_dir), pair.public_key_b64)
        return pair

    def _write(self, path: Path, data: bytes, mode: int, exclusive: bool) -> None:
        flags = os.O_WRONLY | os.O_CREAT | (os.O_EXCL if exclusive else os.O_TRUNC)
        fd = os.open(path, flags, mode)
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
        except BaseException:
            self._discard(path)
            raise

    @staticmethod
    def _discard(path: Path) -> None:
        try:
            os.unlink(path)
        except OSError as e:
            if e.errno != errno.ENOENT:
                logger.error("could not remove partial key file %s: %s", path, e)

    def _load(self) -> KeyPair:
        private = self._read(self._private_path)
        public = self._read(self._public_path)

        if len(private) not in (SEED_SIZE, PRIVATE_KEY_SIZE):
            raise KeyIOError(
                f"private key must be {SEED_SIZE} or {PRIVATE_KEY_SIZE} bytes, got {len(private)}",
                path=str(self._private_path)
            )
        if len(public) != PUBLIC_KEY_SIZE:
            raise KeyIOError(
                f"public key must be {PUBLIC_KEY_SIZE} bytes, got {len(public)}",
                path=str(self._public_path)
            )

        try:
            pair = KeyPair.from_seed(private[:SEED_SIZE])
        except CryptoError as e:
            raise KeyIOError(f"invalid private key: {e}", path=str(self._private_path)) from e

        if len(private) == PRIVATE_KEY_SIZE and private[SEED_SIZE:] != pair.public_key:
            raise KeyIOError("private key file is internally inconsistent", path=str(self._private_path))
        if public != pair.public_key:
            raise KeyIOError("public key does not match private key", path=str(self._public_path))

        tx_log.keypair_loaded(str(self._config_dir), pair.public_key_b64)
        return pair

    @staticmethod
    def _read(path: Path) -> bytes:
        try:
            with open(path, "rb") as f:
                return f.read()
        except OSError as e:
            raise KeyIOError(f"cannot read key file {path}: {e}", path=str(path)) from e


def verify_ed25519(signature_b64: str, payload: bytes, public_key: bytes) -> bool:
    """
    Verify an Ed25519 signature.

    Args:
        signature_b64: Base64-encoded signature
        payload: The signed data
        public_key: Raw 32-byte public key

    Returns:
        True if signature is valid, False otherwise
    """
    try:
        vk = VerifyKey(public_key)
        vk.verify(payload, base64.b64decode(signature_b64, validate=True))
        return True
    except (BadSignatureError, CryptoError, ValueError, TypeError):
        return False

"""
Configuration module for the LBC client.

Environment variables are read once into a ClientConfig value which is then
handed to each component explicitly. Nothing below the CLI reads the process
environment on its own.
"""

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Optional, Tuple, Union

# ============================================================
# Environment Defaults
# ============================================================

DEFAULT_RPC_URL = "http://localhost:26657"
DEFAULT_CONFIG_DIR = "./config"
DEFAULT_TIMEOUT = 30.0
DEFAULT_RETRIES = 1
DEFAULT_LOG_LEVEL = "WARNING"

PRIVATE_KEY_FILE = "ed25519.key"
PUBLIC_KEY_FILE = "ed25519.pub"

_TRUE_VALUES = ("1", "true", "yes")


def key_paths_for(config_dir: Union[str, Path]) -> Tuple[Path, Path]:
    """Locations of the private and public key files under a config directory."""
    base = Path(config_dir)
    return base / PRIVATE_KEY_FILE, base / PUBLIC_KEY_FILE


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {raw!r}")
    return value


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")
    if value < 0:
        raise ValueError(f"{name} must not be negative, got {raw!r}")
    return value


@dataclass(frozen=True)
class ClientConfig:
    """Resolved client settings."""
    rpc_url: str = DEFAULT_RPC_URL
    config_dir: str = DEFAULT_CONFIG_DIR
    timeout: float = DEFAULT_TIMEOUT
    retries: int = DEFAULT_RETRIES
    log_level: str = DEFAULT_LOG_LEVEL
    log_json: bool = False
    log_file: Optional[str] = None

    def __post_init__(self):
        if not self.rpc_url:
            raise ValueError("rpc_url must not be empty")
        if self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout}")
        if self.retries < 0:
            raise ValueError(f"retries must not be negative, got {self.retries}")

    @classmethod
    def from_env(cls, **overrides: Any) -> 'ClientConfig':
        """
        Build a config from LBC_* environment variables.

        Keyword overrides (typically CLI flags) win over the environment;
        overrides whose value is None are ignored.
        """
        cfg = cls(
            rpc_url=os.getenv("LBC_RPC_URL", DEFAULT_RPC_URL),
            config_dir=os.getenv("LBC_CONFIG_DIR", DEFAULT_CONFIG_DIR),
            timeout=_env_float("LBC_TIMEOUT", DEFAULT_TIMEOUT),
            retries=_env_int("LBC_RETRIES", DEFAULT_RETRIES),
            log_level="DEBUG" if is_debug() else os.getenv("LBC_LOG_LEVEL", DEFAULT_LOG_LEVEL),
            log_json=os.getenv("LBC_LOG_JSON", "").lower() in _TRUE_VALUES,
            log_file=os.getenv("LBC_LOG_FILE") or None,
        )
        known = {f.name for f in fields(cls)}
        unknown = set(overrides) - known
        if unknown:
            raise TypeError(f"unknown config fields: {sorted(unknown)}")
        applied = {k: v for k, v in overrides.items() if v is not None}
        return replace(cfg, **applied) if applied else cfg

    @property
    def key_paths(self) -> Tuple[Path, Path]:
        """(private_key_path, public_key_path) inside config_dir."""
        return key_paths_for(self.config_dir)


# ============================================================
# Feature Flags
# ============================================================

def is_debug() -> bool:
    """Check if debug mode is enabled."""
    return os.getenv("LBC_DEBUG", "").lower() in _TRUE_VALUES

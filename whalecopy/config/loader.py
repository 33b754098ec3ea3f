"""YAML config loader, environment secrets and dotted-key lookup."""

import hashlib
import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from whalecopy.config.schema import EngineConfig

logger = logging.getLogger(__name__)

SIGNATURE_TYPES = {0: "EOA", 1: "POLY_PROXY", 2: "POLY_GNOSIS_SAFE"}


@dataclass(frozen=True)
class Secrets:
    private_key: str = ""
    proxy_address: str = ""
    signature_type: int = 0
    auth_token: str = ""

    def __repr__(self) -> str:
        return (
            f"Secrets(private_key={'set' if self.private_key else 'unset'}, "
            f"proxy_address={self.proxy_address!r}, "
            f"signature_type={self.signature_type}, "
            f"auth_token={'set' if self.auth_token else 'unset'})"
        )


def load_config(path: str | Path | None = None) -> EngineConfig:
    """Load and validate config from a YAML file.

    A missing path or an empty document yields the defaults.
    """
    if path is None:
        return EngineConfig()
    path = Path(path)
    if not path.exists():
        logger.warning("Config file %s not found, using defaults", path)
        return EngineConfig()
    with open(path) as f:
        raw = yaml.safe_load(f) or {}
    return EngineConfig(**raw)


def load_secrets(environ: Mapping[str, str] | None = None) -> Secrets:
    """Read signing and auth secrets from the environment. Never from YAML."""
    env = os.environ if environ is None else environ
    raw_sig = env.get("SIGNATURE_TYPE", "0").strip() or "0"
    try:
        sig = int(raw_sig)
    except ValueError:
        sig = -1
    if sig not in SIGNATURE_TYPES:
        logger.warning("Unknown SIGNATURE_TYPE %r, using 0 (EOA)", raw_sig)
        sig = 0
    return Secrets(
        private_key=env.get("PRIVATE_KEY", "").strip(),
        proxy_address=env.get("PROXY_ADDRESS", "").strip(),
        signature_type=sig,
        auth_token=env.get("WS_AUTH_TOKEN", "").strip(),
    )


def config_hash(config: EngineConfig) -> str:
    """Compute a deterministic SHA256 hash of the config."""
    data = config.model_dump_json(indent=None)
    return hashlib.sha256(data.encode()).hexdigest()[:16]


def get_config_value(config: EngineConfig, dotted_key: str) -> Any:
    """Get a config value by dotted key path. E.g. 'breaker.threshold_usd'."""
    obj: Any = config
    for part in dotted_key.split("."):
        if isinstance(obj, list):
            obj = obj[int(part)]
        elif isinstance(obj, dict):
            obj = obj[part]
        elif hasattr(obj, part):
            obj = getattr(obj, part)
        else:
            raise KeyError(f"Config key not found: {dotted_key}")
    return obj

"""Builds the CLOB client: public read-only, or signing with derived API creds."""

import logging
from dataclasses import dataclass
from typing import Any

from py_clob_client.client import ClobClient

from whalecopy.config.loader import SIGNATURE_TYPES, Secrets
from whalecopy.config.schema import ExchangeConfig

logger = logging.getLogger(__name__)


class CredentialError(Exception):
    """Raised when a signing client could not be initialised."""


@dataclass(frozen=True)
class ClientBundle:
    client: Any
    wallet_address: str  # funder whose balance backs the orders
    signer_address: str
    can_sign: bool


def _normalise_key(key: str) -> str:
    return key if key.startswith("0x") else "0x" + key


def build_public_client(config: ExchangeConfig, secrets: Secrets) -> ClientBundle:
    """Market-data-only client. Used without a key, e.g. in dry-run mode."""
    client = ClobClient(config.clob_host, chain_id=config.chain_id)
    return ClientBundle(
        client=client,
        wallet_address=secrets.proxy_address,
        signer_address="",
        can_sign=False,
    )


def build_signing_client(config: ExchangeConfig, secrets: Secrets) -> ClientBundle:
    """Create a client with L2 API credentials derived from the signing key."""
    if not secrets.private_key:
        raise CredentialError("PRIVATE_KEY not set")
    try:
        client = ClobClient(
            config.clob_host,
            key=_normalise_key(secrets.private_key),
            chain_id=config.chain_id,
            signature_type=secrets.signature_type,
            funder=secrets.proxy_address or None,
        )
        signer = client.get_address()
        logger.info("Wallet: %s", signer)

        creds = client.create_or_derive_api_creds()
        client.set_api_creds(creds)
        logger.info("API credentials derived successfully")
    except Exception as e:
        raise CredentialError(f"CLOB client init failed: {e}") from e

    wallet = secrets.proxy_address or signer
    logger.info(
        "Proxy/Funder: %s (signature type %s)",
        wallet, SIGNATURE_TYPES[secrets.signature_type],
    )
    return ClientBundle(
        client=client, wallet_address=wallet, signer_address=signer, can_sign=True
    )

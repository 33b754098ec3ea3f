"""Stablecoin balance reader over raw Polygon JSON-RPC (ERC-20 balanceOf)."""

import logging
import re

import httpx

logger = logging.getLogger(__name__)

BALANCE_OF_SELECTOR = "0x70a08231"
_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")


class BalanceFetchError(Exception):
    """Raised when no RPC endpoint returned a usable balance."""


def balance_of_calldata(address: str) -> str:
    """ABI-encode `balanceOf(address)` for an eth_call."""
    if not _ADDRESS_RE.match(address):
        raise ValueError(f"Invalid address: {address!r}")
    return BALANCE_OF_SELECTOR + address[2:].lower().rjust(64, "0")


class BalanceOracle:
    def __init__(
        self,
        rpc_urls: list[str],
        token_address: str,
        decimals: int = 6,
        timeout: float = 10.0,
    ):
        if not rpc_urls:
            raise ValueError("At least one RPC URL is required")
        self.rpc_urls = list(rpc_urls)
        self.token_address = token_address
        self.decimals = decimals
        self.timeout = timeout

    async def get_balance(self, address: str) -> float:
        """Return the token balance of `address` in whole units.

        Tries each RPC endpoint in order and returns the first good answer.
        """
        payload = {
            "jsonrpc": "2.0",
            "id": 1,
            "method": "eth_call",
            "params": [
                {"to": self.token_address, "data": balance_of_calldata(address)},
                "latest",
            ],
        }
        errors: list[str] = []
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            for url in self.rpc_urls:
                try:
                    resp = await client.post(url, json=payload)
                    resp.raise_for_status()
                    return self._parse(resp.json())
                except (httpx.HTTPError, ValueError, KeyError, TypeError) as e:
                    logger.warning("Balance RPC %s failed: %s", url, e)
                    errors.append(f"{url}: {e}")
        raise BalanceFetchError("All RPC endpoints failed: " + "; ".join(errors))

    def _parse(self, data: dict) -> float:
        if "error" in data:
            raise ValueError(f"RPC error {data['error']}")
        result = data["result"]
        raw = int(result, 16) if result not in ("0x", "") else 0
        return raw / 10**self.decimals

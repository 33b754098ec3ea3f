"""Tests for the USDC.e balance oracle with mocked JSON-RPC."""

import httpx
import pytest
import respx

from whalecopy.ingest.balance_oracle import (
    BalanceFetchError,
    BalanceOracle,
    balance_of_calldata,
)

PRIMARY = "https://rpc-primary.example.com"
FALLBACK = "https://rpc-fallback.example.com"
USDC = "0x2791Bca1f2de4661ED88A30C99A7a9449Aa84174"
ADDRESS = "0xAbCdEf0123456789abcdef0123456789ABCDEF01"


def rpc_result(base_units: int) -> dict:
    return {"jsonrpc": "2.0", "id": 1, "result": "0x" + format(base_units, "x").rjust(64, "0")}


@pytest.fixture
def oracle() -> BalanceOracle:
    return BalanceOracle([PRIMARY, FALLBACK], USDC)


class TestCalldata:
    def test_encodes_balance_of(self):
        data = balance_of_calldata(ADDRESS)
        assert data.startswith("0x70a08231")
        assert len(data) == 10 + 64
        assert data.endswith(ADDRESS[2:].lower())

    def test_rejects_bad_address(self):
        with pytest.raises(ValueError):
            balance_of_calldata("0x1234")


class TestGetBalance:
    @pytest.mark.asyncio
    async def test_primary_success(self, oracle):
        with respx.mock:
            route = respx.post(PRIMARY).mock(return_value=httpx.Response(200, json=rpc_result(1_500_000)))
            balance = await oracle.get_balance(ADDRESS)
        assert balance == 1.5
        assert route.call_count == 1

    @pytest.mark.asyncio
    async def test_sends_eth_call(self, oracle):
        with respx.mock:
            route = respx.post(PRIMARY).mock(return_value=httpx.Response(200, json=rpc_result(0)))
            await oracle.get_balance(ADDRESS)
            body = route.calls.last.request.read()
        assert b'"eth_call"' in body
        assert USDC.encode() in body

    @pytest.mark.asyncio
    async def test_falls_back_on_http_error(self, oracle):
        with respx.mock:
            respx.post(PRIMARY).mock(return_value=httpx.Response(503))
            fallback = respx.post(FALLBACK).mock(return_value=httpx.Response(200, json=rpc_result(42_000_000)))
            balance = await oracle.get_balance(ADDRESS)
        assert balance == 42.0
        assert fallback.call_count == 1

    @pytest.mark.asyncio
    async def test_falls_back_on_connect_error(self, oracle):
        with respx.mock:
            respx.post(PRIMARY).mock(side_effect=httpx.ConnectError("refused"))
            respx.post(FALLBACK).mock(return_value=httpx.Response(200, json=rpc_result(2_500_000)))
            assert await oracle.get_balance(ADDRESS) == 2.5

    @pytest.mark.asyncio
    async def test_falls_back_on_rpc_error(self, oracle):
        with respx.mock:
            respx.post(PRIMARY).mock(
                return_value=httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "error": {"code": -32000}})
            )
            respx.post(FALLBACK).mock(return_value=httpx.Response(200, json=rpc_result(1)))
            assert await oracle.get_balance(ADDRESS) == 0.000001

    @pytest.mark.asyncio
    async def test_empty_result_is_zero(self, oracle):
        with respx.mock:
            respx.post(PRIMARY).mock(return_value=httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "result": "0x"}))
            assert await oracle.get_balance(ADDRESS) == 0.0

    @pytest.mark.asyncio
    async def test_all_endpoints_fail(self, oracle):
        with respx.mock:
            respx.post(PRIMARY).mock(return_value=httpx.Response(500))
            respx.post(FALLBACK).mock(side_effect=httpx.ReadTimeout("slow"))
            with pytest.raises(BalanceFetchError, match="All RPC endpoints failed"):
                await oracle.get_balance(ADDRESS)

    def test_requires_rpc_url(self):
        with pytest.raises(ValueError):
            BalanceOracle([], USDC)

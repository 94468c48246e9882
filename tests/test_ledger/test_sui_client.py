"""Tests for SuiLedgerClient -- JSON-RPC traffic is served by httpx.MockTransport."""

import base64
import hashlib
import json
from collections.abc import Callable
from typing import Any

import httpx
import pytest
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PublicKey

from datacurve.config import LedgerSettings
from datacurve.exceptions import ConfigurationMissing, LedgerError, LedgerObjectNotFound
from datacurve.ledger.sui_client import SuiLedgerClient
from datacurve.ledger.types import MoveCall

SEED = bytes(range(32))
TX_BYTES = base64.b64encode(b"unsigned-transaction").decode()


def _settings(private_key: str = "") -> LedgerSettings:
    return LedgerSettings(
        rpc_url="http://sui.test",
        package_id="0xpkg",
        treasury_provider_id="0xtreasury",
        private_key=private_key,
        gas_budget=5_000_000,
    )


def _rpc(handlers: dict[str, Callable[[list], dict[str, Any]]], seen: list[dict]) -> httpx.MockTransport:
    """Build a transport answering JSON-RPC methods from ``handlers``."""

    def handle(request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content)
        seen.append(payload)
        result = handlers[payload["method"]](payload["params"])
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": payload["id"], **result})

    return httpx.MockTransport(handle)


def _curve_object(params: list) -> dict[str, Any]:
    return {
        "result": {
            "data": {
                "objectId": params[0],
                "content": {
                    "dataType": "moveObject",
                    "type": "0xpkg::bonding_curve_module::BondingCurve",
                    "fields": {"curve_id": "7", "total_supply_for_pricing": "1000"},
                },
            }
        }
    }


class TestReadObject:
    @pytest.mark.asyncio()
    async def test_reads_move_object(self) -> None:
        seen: list[dict] = []
        client = SuiLedgerClient(_settings(), _rpc({"sui_getObject": _curve_object}, seen))
        await client.connect()
        try:
            obj = await client.read_object("0xcurve")
        finally:
            await client.close()

        assert obj.object_id == "0xcurve"
        assert obj.fields == {"curve_id": "7", "total_supply_for_pricing": "1000"}
        assert seen[0]["method"] == "sui_getObject"
        assert seen[0]["params"] == ["0xcurve", {"showContent": True, "showType": True}]

    @pytest.mark.asyncio()
    @pytest.mark.parametrize("code", ["notExists", "deleted"])
    async def test_missing_object(self, code: str) -> None:
        def missing(params: list) -> dict[str, Any]:
            return {"result": {"error": {"code": code, "object_id": params[0]}}}

        client = SuiLedgerClient(_settings(), _rpc({"sui_getObject": missing}, []))
        await client.connect()
        try:
            with pytest.raises(LedgerObjectNotFound):
                await client.read_object("0xcurve")
        finally:
            await client.close()

    @pytest.mark.asyncio()
    async def test_package_object_is_not_a_curve(self) -> None:
        def package(params: list) -> dict[str, Any]:
            return {"result": {"data": {"objectId": params[0], "content": {"dataType": "package"}}}}

        client = SuiLedgerClient(_settings(), _rpc({"sui_getObject": package}, []))
        await client.connect()
        try:
            with pytest.raises(LedgerError) as exc_info:
                await client.read_object("0xpkg")
        finally:
            await client.close()

        assert not isinstance(exc_info.value, LedgerObjectNotFound)

    @pytest.mark.asyncio()
    async def test_rpc_error(self) -> None:
        def failing(params: list) -> dict[str, Any]:
            return {"error": {"code": -32602, "message": "Invalid params"}}

        client = SuiLedgerClient(_settings(), _rpc({"sui_getObject": failing}, []))
        await client.connect()
        try:
            with pytest.raises(LedgerError, match="Invalid params"):
                await client.read_object("bad")
        finally:
            await client.close()

    @pytest.mark.asyncio()
    async def test_http_error(self) -> None:
        transport = httpx.MockTransport(lambda request: httpx.Response(500, text="boom"))
        client = SuiLedgerClient(_settings(), transport)
        await client.connect()
        try:
            with pytest.raises(LedgerError, match="sui_getObject request failed"):
                await client.read_object("0xcurve")
        finally:
            await client.close()

    @pytest.mark.asyncio()
    async def test_requires_connect(self) -> None:
        client = SuiLedgerClient(_settings())
        with pytest.raises(RuntimeError, match="not connected"):
            await client.read_object("0xcurve")


class TestSubmitMoveCall:
    CALL = MoveCall(
        package_id="0xpkg",
        module="bonding_curve_module",
        function="buy",
        arguments=["0xtreasury", "0xcurve", "7"],
    )

    @pytest.mark.asyncio()
    async def test_build_sign_execute(self) -> None:
        seen: list[dict] = []

        def execute(params: list) -> dict[str, Any]:
            return {
                "result": {
                    "digest": "DIGEST1",
                    "effects": {"status": {"status": "success"}},
                    "events": [
                        {
                            "type": "0xpkg::bonding_curve_module::TokenPurchased",
                            "parsedJson": {"curve_id": "7", "tokens_minted": "70000"},
                        }
                    ],
                }
            }

        transport = _rpc(
            {
                "unsafe_moveCall": lambda params: {"result": {"txBytes": TX_BYTES}},
                "sui_executeTransactionBlock": execute,
            },
            seen,
        )
        client = SuiLedgerClient(_settings("0x" + SEED.hex()), transport)
        await client.connect()
        try:
            result = await client.submit_move_call(self.CALL)
        finally:
            await client.close()

        assert result.succeeded
        assert result.digest == "DIGEST1"
        assert result.events[0].parsed_json == {"curve_id": "7", "tokens_minted": "70000"}

        build, execute_call = seen
        assert build["method"] == "unsafe_moveCall"
        assert build["params"] == [
            client.sender,
            "0xpkg",
            "bonding_curve_module",
            "buy",
            [],
            ["0xtreasury", "0xcurve", "7"],
            None,
            "5000000",
            None,
        ]

        assert execute_call["method"] == "sui_executeTransactionBlock"
        tx_bytes, signatures, options, request_type = execute_call["params"]
        assert tx_bytes == TX_BYTES
        assert options == {"showEffects": True, "showEvents": True}
        assert request_type == "WaitForLocalExecution"

        serialized = base64.b64decode(signatures[0])
        digest = hashlib.blake2b(
            b"\x00\x00\x00" + base64.b64decode(TX_BYTES), digest_size=32
        ).digest()
        Ed25519PublicKey.from_public_bytes(serialized[65:]).verify(serialized[1:65], digest)

    @pytest.mark.asyncio()
    async def test_failure_status_is_returned(self) -> None:
        transport = _rpc(
            {
                "unsafe_moveCall": lambda params: {"result": {"txBytes": TX_BYTES}},
                "sui_executeTransactionBlock": lambda params: {
                    "result": {
                        "digest": "DIGEST2",
                        "effects": {"status": {"status": "failure", "error": "MoveAbort(..., 1)"}},
                    }
                },
            },
            [],
        )
        client = SuiLedgerClient(_settings("0x" + SEED.hex()), transport)
        await client.connect()
        try:
            result = await client.submit_move_call(self.CALL)
        finally:
            await client.close()

        assert not result.succeeded
        assert result.error == "MoveAbort(..., 1)"
        assert result.events == []

    @pytest.mark.asyncio()
    async def test_missing_tx_bytes(self) -> None:
        transport = _rpc({"unsafe_moveCall": lambda params: {"result": {}}}, [])
        client = SuiLedgerClient(_settings("0x" + SEED.hex()), transport)
        await client.connect()
        try:
            with pytest.raises(LedgerError, match="no transaction bytes"):
                await client.submit_move_call(self.CALL)
        finally:
            await client.close()

    @pytest.mark.asyncio()
    async def test_requires_private_key(self) -> None:
        seen: list[dict] = []
        client = SuiLedgerClient(_settings(), _rpc({}, seen))

        assert client.configured_for_submission is False
        assert client.sender is None
        await client.connect()
        try:
            with pytest.raises(ConfigurationMissing):
                await client.submit_move_call(self.CALL)
        finally:
            await client.close()

        assert seen == []

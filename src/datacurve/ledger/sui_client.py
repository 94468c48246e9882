"""Sui ledger client implementation over JSON-RPC via httpx.

Reads objects with sui_getObject, builds Move call transactions with
unsafe_moveCall, signs them locally, and executes them with
sui_executeTransactionBlock waiting for local execution so that the
returned effects and events are final.
"""

import base64
from typing import Any

import httpx

from datacurve.config import LedgerSettings
from datacurve.exceptions import ConfigurationMissing, LedgerError, LedgerObjectNotFound
from datacurve.ledger.client import LedgerClient
from datacurve.ledger.signer import SuiSigner
from datacurve.ledger.types import LedgerEvent, LedgerObject, MoveCall, TransactionResult
from datacurve.logging import get_logger

logger = get_logger(__name__)

#: sui_getObject error codes meaning "the object is not visible".
_NOT_FOUND_CODES = frozenset({"notExists", "deleted", "dynamicFieldNotFound"})


class SuiLedgerClient(LedgerClient):
    """Concrete Sui ledger client."""

    def __init__(
        self,
        settings: LedgerSettings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._request_id = 0

        private_key = settings.private_key.get_secret_value()
        self._signer: SuiSigner | None = (
            SuiSigner.from_encoded(private_key) if private_key else None
        )

    @property
    def http(self) -> httpx.AsyncClient:
        """Access the underlying httpx client.

        Raises RuntimeError if not connected.
        """
        if self._client is None:
            raise RuntimeError("Ledger client not connected. Call connect() first.")
        return self._client

    @property
    def configured_for_submission(self) -> bool:
        return self._signer is not None

    @property
    def sender(self) -> str | None:
        return self._signer.address if self._signer else None

    async def connect(self) -> None:
        if self._client is not None:
            return
        self._client = httpx.AsyncClient(
            timeout=self._settings.request_timeout,
            transport=self._transport,
        )
        logger.info(
            "sui_client_connected",
            rpc_url=self._settings.rpc_url,
            sender=self.sender,
        )

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            logger.info("sui_client_closed")

    async def read_object(self, object_id: str) -> LedgerObject:
        result = await self._call(
            "sui_getObject",
            [object_id, {"showContent": True, "showType": True}],
        )

        error = result.get("error")
        if error:
            code = error.get("code", "")
            if code in _NOT_FOUND_CODES:
                raise LedgerObjectNotFound(f"Object {object_id} not found ({code})")
            raise LedgerError(f"sui_getObject failed for {object_id}: {error}")

        data = result.get("data") or {}
        content = data.get("content") or {}
        if content.get("dataType") != "moveObject":
            raise LedgerError(f"Object {object_id} is not a Move object")

        return LedgerObject(
            object_id=data.get("objectId", object_id),
            type=content.get("type", ""),
            fields=content.get("fields", {}),
        )

    async def submit_move_call(self, call: MoveCall) -> TransactionResult:
        if self._signer is None:
            raise ConfigurationMissing("SUI_PRIVATE_KEY is required to submit transactions")

        logger.info("submitting_move_call", target=call.target, arguments=call.arguments)

        built = await self._call(
            "unsafe_moveCall",
            [
                self._signer.address,
                call.package_id,
                call.module,
                call.function,
                call.type_arguments,
                call.arguments,
                None,  # let the node pick a gas coin
                str(self._settings.gas_budget),
                None,
            ],
        )
        tx_bytes = built.get("txBytes")
        if not tx_bytes:
            raise LedgerError(f"unsafe_moveCall returned no transaction bytes for {call.target}")

        signature = self._signer.sign_transaction(base64.b64decode(tx_bytes))

        executed = await self._call(
            "sui_executeTransactionBlock",
            [
                tx_bytes,
                [signature],
                {"showEffects": True, "showEvents": True},
                "WaitForLocalExecution",
            ],
        )

        effects = executed.get("effects") or {}
        status = effects.get("status") or {}
        result = TransactionResult(
            digest=executed.get("digest", ""),
            status=status.get("status", "failure"),
            error=status.get("error"),
            events=[
                LedgerEvent(type=e.get("type", ""), parsed_json=e.get("parsedJson") or {})
                for e in executed.get("events") or []
            ],
            effects=effects,
        )
        logger.info(
            "move_call_executed",
            target=call.target,
            digest=result.digest,
            status=result.status,
            event_count=len(result.events),
        )
        return result

    async def _call(self, method: str, params: list) -> dict[str, Any]:
        """Make a JSON-RPC call and return its result object."""
        self._request_id += 1
        payload = {
            "jsonrpc": "2.0",
            "id": self._request_id,
            "method": method,
            "params": params,
        }

        try:
            response = await self.http.post(self._settings.rpc_url, json=payload)
            response.raise_for_status()
            body = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise LedgerError(f"{method} request failed: {e}") from e

        if body.get("error"):
            error = body["error"]
            raise LedgerError(
                f"{method} RPC error {error.get('code')}: {error.get('message')}"
            )

        return body.get("result") or {}

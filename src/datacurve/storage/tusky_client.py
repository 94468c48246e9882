"""Tusky blob store implementation over its REST API via httpx.

Uploads use the TUS resumable protocol in a single PATCH since dataset
files are bounded by the API upload limit.
"""

import base64
from typing import Any

import httpx

from datacurve.config import StorageSettings
from datacurve.exceptions import ConfigurationMissing, StorageError
from datacurve.logging import get_logger
from datacurve.storage.client import BlobStore, StoredFile

logger = get_logger(__name__)

DATASETS_VAULT_NAME = "Datasets Vault"
_TUS_VERSION = "1.0.0"


def _tus_metadata(**values: str) -> str:
    return ",".join(
        f"{key} {base64.b64encode(value.encode()).decode('ascii')}"
        for key, value in values.items()
    )


class TuskyBlobStore(BlobStore):
    """Concrete Tusky client."""

    def __init__(
        self,
        settings: StorageSettings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def http(self) -> httpx.AsyncClient:
        """Access the underlying httpx client.

        Raises ConfigurationMissing when no API key is set and RuntimeError
        if not connected.
        """
        if not self._settings.api_key.get_secret_value():
            raise ConfigurationMissing("TUSKY_API_KEY is not set")
        if self._client is None:
            raise RuntimeError("Blob store not connected. Call connect() first.")
        return self._client

    async def connect(self) -> None:
        if self._client is not None:
            return
        api_key = self._settings.api_key.get_secret_value()
        if not api_key:
            logger.warning("tusky_api_key_missing", note="Dataset uploads will fail.")
        self._client = httpx.AsyncClient(
            base_url=self._settings.base_url,
            headers={"Api-Key": api_key},
            timeout=self._settings.request_timeout,
            transport=self._transport,
        )
        logger.info("tusky_client_connected", base_url=self._settings.base_url)

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            logger.info("tusky_client_closed")

    async def ensure_vault(self, known_vault_id: str | None = None) -> str:
        for vault_id in (self._settings.datasets_vault_id, known_vault_id):
            if not vault_id:
                continue
            vault = await self._request("GET", f"/vaults/{vault_id}")
            self._check_vault(vault)
            logger.debug("tusky_vault_found", vault_id=vault_id)
            return vault_id

        if self._settings.use_encryption:
            raise StorageError(
                "Encrypted vaults need client-side keys, which this service does not manage"
            )

        vault = await self._request(
            "POST",
            "/vaults",
            json={"name": DATASETS_VAULT_NAME, "encrypted": False},
        )
        vault_id = vault["id"]
        logger.info("tusky_vault_created", vault_id=vault_id)
        return vault_id

    async def upload(self, vault_id: str, filename: str, content: bytes, mime_type: str) -> str:
        logger.info("tusky_upload_started", vault_id=vault_id, filename=filename, size=len(content))
        try:
            created = await self.http.post(
                "/uploads",
                headers={
                    "Tus-Resumable": _TUS_VERSION,
                    "Upload-Length": str(len(content)),
                    "Upload-Metadata": _tus_metadata(
                        vaultId=vault_id, filename=filename, filetype=mime_type
                    ),
                },
            )
            created.raise_for_status()
            location = created.headers.get("Location")
            if not location:
                raise StorageError("Tusky upload creation returned no Location header")

            patched = await self.http.patch(
                location,
                content=content,
                headers={
                    "Tus-Resumable": _TUS_VERSION,
                    "Upload-Offset": "0",
                    "Content-Type": "application/offset+octet-stream",
                },
            )
            patched.raise_for_status()
        except httpx.HTTPError as e:
            raise StorageError(f"Tusky upload failed: {e}") from e

        upload_id = location.rstrip("/").rsplit("/", 1)[-1]
        logger.info("tusky_upload_complete", upload_id=upload_id)
        return upload_id

    async def get_file(self, file_id: str) -> StoredFile:
        data = await self._request("GET", f"/files/{file_id}")
        return StoredFile(
            file_id=data.get("id", file_id),
            blob_id=data.get("blobId"),
            blob_object_id=data.get("blobObjectId"),
            size=data.get("size"),
        )

    async def download(self, file_id: str) -> bytes:
        try:
            response = await self.http.get(f"/files/{file_id}/data")
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise StorageError(f"Tusky download of {file_id} failed: {e}") from e
        logger.info("tusky_file_downloaded", file_id=file_id, size=len(response.content))
        return response.content

    def _check_vault(self, vault: dict[str, Any]) -> None:
        if vault.get("encrypted"):
            raise StorageError(
                f"Vault {vault.get('id')} is encrypted; client-side decryption is not supported"
            )

    async def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        try:
            response = await self.http.request(method, path, **kwargs)
            response.raise_for_status()
            return response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise StorageError(f"Tusky {method} {path} failed: {e}") from e

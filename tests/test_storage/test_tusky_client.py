"""Tests for TuskyBlobStore against a mocked Tusky REST API."""

import base64
import json
from collections.abc import Callable

import httpx
import pytest

from datacurve.config import StorageSettings
from datacurve.exceptions import ConfigurationMissing, StorageError
from datacurve.storage.tusky_client import TuskyBlobStore


def _settings(**overrides: object) -> StorageSettings:
    values: dict[str, object] = {"api_key": "secret", "base_url": "http://tusky.test"}
    values.update(overrides)
    return StorageSettings(**values)


def _store(
    handler: Callable[[httpx.Request], httpx.Response], **overrides: object
) -> TuskyBlobStore:
    return TuskyBlobStore(_settings(**overrides), httpx.MockTransport(handler))


class TestEnsureVault:
    @pytest.mark.asyncio()
    async def test_configured_vault_is_used(self) -> None:
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json={"id": "vault-1", "encrypted": False})

        store = _store(handler, datasets_vault_id="vault-1")
        await store.connect()
        try:
            vault_id = await store.ensure_vault("vault-old")
        finally:
            await store.close()

        assert vault_id == "vault-1"
        assert len(requests) == 1
        assert requests[0].method == "GET"
        assert requests[0].url.path == "/vaults/vault-1"
        assert requests[0].headers["Api-Key"] == "secret"

    @pytest.mark.asyncio()
    async def test_known_vault_is_used(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/vaults/vault-old"
            return httpx.Response(200, json={"id": "vault-old", "encrypted": False})

        store = _store(handler)
        await store.connect()
        try:
            assert await store.ensure_vault("vault-old") == "vault-old"
        finally:
            await store.close()

    @pytest.mark.asyncio()
    async def test_creates_unencrypted_vault(self) -> None:
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(201, json={"id": "vault-new"})

        store = _store(handler)
        await store.connect()
        try:
            vault_id = await store.ensure_vault()
        finally:
            await store.close()

        assert vault_id == "vault-new"
        assert requests[0].method == "POST"
        assert requests[0].url.path == "/vaults"
        assert json.loads(requests[0].read()) == {"name": "Datasets Vault", "encrypted": False}

    @pytest.mark.asyncio()
    async def test_encrypted_vault_rejected(self) -> None:
        store = _store(
            lambda request: httpx.Response(200, json={"id": "vault-1", "encrypted": True}),
            datasets_vault_id="vault-1",
        )
        await store.connect()
        try:
            with pytest.raises(StorageError, match="encrypted"):
                await store.ensure_vault()
        finally:
            await store.close()

    @pytest.mark.asyncio()
    async def test_encryption_requested_without_vault(self) -> None:
        store = _store(lambda request: httpx.Response(500), use_encryption=True)
        await store.connect()
        try:
            with pytest.raises(StorageError):
                await store.ensure_vault()
        finally:
            await store.close()

    @pytest.mark.asyncio()
    async def test_missing_api_key(self) -> None:
        store = _store(lambda request: httpx.Response(200, json={}), api_key="")
        await store.connect()
        try:
            with pytest.raises(ConfigurationMissing, match="TUSKY_API_KEY"):
                await store.ensure_vault()
        finally:
            await store.close()


class TestUpload:
    @pytest.mark.asyncio()
    async def test_tus_create_then_patch(self) -> None:
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            if request.method == "POST":
                return httpx.Response(
                    201, headers={"Location": "http://tusky.test/uploads/upload-42"}
                )
            return httpx.Response(204, headers={"Upload-Offset": "11"})

        store = _store(handler)
        await store.connect()
        try:
            file_id = await store.upload("vault-1", "iris.csv", b"a,b\n1,2\n3,4", "text/csv")
        finally:
            await store.close()

        assert file_id == "upload-42"

        create, patch = requests
        assert create.url.path == "/uploads"
        assert create.headers["Tus-Resumable"] == "1.0.0"
        assert create.headers["Upload-Length"] == "11"
        metadata = dict(item.split(" ") for item in create.headers["Upload-Metadata"].split(","))
        assert base64.b64decode(metadata["vaultId"]) == b"vault-1"
        assert base64.b64decode(metadata["filename"]) == b"iris.csv"
        assert base64.b64decode(metadata["filetype"]) == b"text/csv"

        assert patch.method == "PATCH"
        assert patch.url.path == "/uploads/upload-42"
        assert patch.headers["Upload-Offset"] == "0"
        assert patch.headers["Content-Type"] == "application/offset+octet-stream"
        assert patch.read() == b"a,b\n1,2\n3,4"

    @pytest.mark.asyncio()
    async def test_missing_location(self) -> None:
        store = _store(lambda request: httpx.Response(201))
        await store.connect()
        try:
            with pytest.raises(StorageError, match="Location"):
                await store.upload("vault-1", "x.csv", b"x", "text/csv")
        finally:
            await store.close()

    @pytest.mark.asyncio()
    async def test_http_failure(self) -> None:
        store = _store(lambda request: httpx.Response(413))
        await store.connect()
        try:
            with pytest.raises(StorageError, match="upload failed"):
                await store.upload("vault-1", "x.csv", b"x", "text/csv")
        finally:
            await store.close()


class TestFiles:
    @pytest.mark.asyncio()
    async def test_get_file(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/files/file-1"
            return httpx.Response(
                200,
                json={"id": "file-1", "blobId": "blob-a", "blobObjectId": "0xblob", "size": 11},
            )

        store = _store(handler)
        await store.connect()
        try:
            stored = await store.get_file("file-1")
        finally:
            await store.close()

        assert stored.file_id == "file-1"
        assert stored.blob_id == "blob-a"
        assert stored.blob_object_id == "0xblob"
        assert stored.size == 11

    @pytest.mark.asyncio()
    async def test_get_file_before_blob_is_certified(self) -> None:
        store = _store(lambda request: httpx.Response(200, json={"id": "file-1"}))
        await store.connect()
        try:
            stored = await store.get_file("file-1")
        finally:
            await store.close()

        assert stored.blob_id is None
        assert stored.blob_object_id is None

    @pytest.mark.asyncio()
    async def test_download(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/files/file-1/data"
            return httpx.Response(200, content=b"x1,label\n1,a\n")

        store = _store(handler)
        await store.connect()
        try:
            assert await store.download("file-1") == b"x1,label\n1,a\n"
        finally:
            await store.close()

    @pytest.mark.asyncio()
    async def test_download_not_found(self) -> None:
        store = _store(lambda request: httpx.Response(404))
        await store.connect()
        try:
            with pytest.raises(StorageError):
                await store.download("missing")
        finally:
            await store.close()

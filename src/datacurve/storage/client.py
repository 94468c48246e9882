"""Abstract blob store interface for dataset files."""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class StoredFile:
    """Metadata of a file held by the blob store."""

    file_id: str
    blob_id: str | None
    blob_object_id: str | None
    size: int | None = None


class BlobStore(ABC):
    """Abstract base class for remote dataset storage."""

    @abstractmethod
    async def connect(self) -> None:
        ...

    @abstractmethod
    async def close(self) -> None:
        ...

    @abstractmethod
    async def ensure_vault(self, known_vault_id: str | None = None) -> str:
        """Return a usable vault id, creating a vault if none is known.

        Args:
            known_vault_id: Vault id recorded by a previous run, tried after
                any vault id from configuration.
        """
        ...

    @abstractmethod
    async def upload(self, vault_id: str, filename: str, content: bytes, mime_type: str) -> str:
        """Upload a file into a vault and return its file id."""
        ...

    @abstractmethod
    async def get_file(self, file_id: str) -> StoredFile:
        ...

    @abstractmethod
    async def download(self, file_id: str) -> bytes:
        ...

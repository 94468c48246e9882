"""Blob storage layer -- Tusky REST integration via httpx."""

from datacurve.storage.client import BlobStore, StoredFile
from datacurve.storage.tusky_client import TuskyBlobStore

__all__ = ["BlobStore", "StoredFile", "TuskyBlobStore"]

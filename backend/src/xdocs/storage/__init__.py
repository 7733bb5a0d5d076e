"""Blob storage for document bytes."""

from .blob_store import BlobStoragePort, LocalBlobStore

__all__ = ["BlobStoragePort", "LocalBlobStore"]

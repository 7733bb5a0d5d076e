"""Blob Store - file-system storage for document bytes.

Documents keep their bytes in a directory tree rooted at STORAGE_ROOT with
one directory per document:

    <STORAGE_ROOT>/<document_id>/<sanitized filename>

The store does no deduplication, hashing or integrity checks. A missing file
on read is reported as not-found even when the document row still exists,
since row and blob deletion are not atomic.
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path, PurePosixPath
from typing import Union

from ..errors import NotFoundError, StorageError

logger = logging.getLogger(__name__)


class BlobStoragePort(ABC):
    """Port interface for blob storage operations.

    Relative paths are produced by the document store and are already
    sanitized; implementations must still refuse paths escaping the root.
    """

    @abstractmethod
    def write(self, rel_path: str, data: bytes) -> int:
        """Store bytes at rel_path, creating parent directories.

        Returns:
            int: Number of bytes written

        Raises:
            StorageError: If the file cannot be written
        """

    @abstractmethod
    def read(self, rel_path: str) -> bytes:
        """Return the full content stored at rel_path.

        Raises:
            NotFoundError: If no file exists at rel_path
            StorageError: If the file exists but cannot be read
        """

    @abstractmethod
    def delete(self, rel_path: str) -> bool:
        """Remove the file at rel_path.

        Returns:
            bool: True if a file was removed, False if it was already gone
                or could not be removed
        """


class LocalBlobStore(BlobStoragePort):
    """Blob store backed by the local file system."""

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root)

    def ensure_root(self) -> None:
        self.root.mkdir(parents=True, exist_ok=True)

    def _resolve(self, rel_path: str) -> Path:
        parts = PurePosixPath(rel_path).parts
        if not parts or PurePosixPath(rel_path).is_absolute() or ".." in parts:
            raise StorageError(f"invalid storage path: {rel_path!r}")
        return self.root.joinpath(*parts)

    def write(self, rel_path: str, data: bytes) -> int:
        target = self._resolve(rel_path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
        except OSError as e:
            logger.error(
                "Blob write failed",
                extra={"storage_path": rel_path, "error": str(e)},
            )
            raise StorageError("failed to store file") from e
        return len(data)

    def read(self, rel_path: str) -> bytes:
        target = self._resolve(rel_path)
        try:
            return target.read_bytes()
        except FileNotFoundError:
            raise NotFoundError("file not found")
        except OSError as e:
            logger.error(
                "Blob read failed",
                extra={"storage_path": rel_path, "error": str(e)},
            )
            raise StorageError("failed to read file") from e

    def delete(self, rel_path: str) -> bool:
        try:
            target = self._resolve(rel_path)
            target.unlink()
        except FileNotFoundError:
            return False
        except (OSError, StorageError) as e:
            logger.warning(
                "Blob delete failed, file left behind",
                extra={"storage_path": rel_path, "error": str(e)},
            )
            return False

        # Drop the per-document directory once it is empty
        try:
            target.parent.rmdir()
        except OSError:
            pass
        return True

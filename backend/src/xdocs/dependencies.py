"""Process-wide context handed to request handlers.

Handlers never reach for module globals for storage or time; they declare
these dependencies, which tests replace through app.dependency_overrides.
"""

from datetime import datetime
from typing import Annotated, Callable

from fastapi import Depends

from .config import Settings, get_settings
from .models.base import utcnow
from .storage.blob_store import BlobStoragePort, LocalBlobStore

Clock = Callable[[], datetime]


def get_blob_store(settings: Settings = Depends(get_settings)) -> BlobStoragePort:
    """Blob store rooted at STORAGE_ROOT."""
    return LocalBlobStore(settings.STORAGE_ROOT)


def get_clock() -> Clock:
    """Source of "now" (timezone-aware UTC) for expiry decisions."""
    return utcnow


BlobStore = Annotated[BlobStoragePort, Depends(get_blob_store)]
ClockDep = Annotated[Clock, Depends(get_clock)]
AppSettings = Annotated[Settings, Depends(get_settings)]

"""SQLAlchemy models for xdocs"""

from .base import Base
from .user import User
from .document import Document
from .download_request import DownloadRequest

__all__ = ["Base", "User", "Document", "DownloadRequest"]

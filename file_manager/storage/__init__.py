# file_manager/storage/__init__.py
"""
Storage drivers (one per disk) and the registry that builds them from settings.
"""

from .base import StorageDriver, SupportsTemporaryUrls, UnableToRetrieveMetadata, UnknownDisk  # noqa: F401
from .local import LocalDriver  # noqa: F401
from .s3 import S3Driver  # noqa: F401

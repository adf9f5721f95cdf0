# file_manager/storage/base.py
from __future__ import annotations
"""
Storage driver contract.

Every disk declared in FILE_MANAGER_DISKS is served by one driver. Entities only
talk to drivers through this surface, so adding a backend means implementing
StorageDriver (and SupportsTemporaryUrls when the backend can sign urls).
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional, Protocol, runtime_checkable


class UnableToRetrieveMetadata(Exception):
    """A driver could not answer a metadata question about an existing object."""

    def __init__(self, path: str, kind: str, reason: str = ""):
        self.path = path
        self.kind = kind
        self.reason = reason
        msg = f"Unable to retrieve the {kind} for file at location: {path}."
        if reason:
            msg += f" {reason}"
        super().__init__(msg)

    @classmethod
    def mime_type(cls, path: str, reason: str = "") -> "UnableToRetrieveMetadata":
        return cls(path, "mime_type", reason)


class UnknownDisk(KeyError):
    def __init__(self, disk: str):
        self.disk = disk
        super().__init__(disk)

    def __str__(self) -> str:
        return f"Disk [{self.disk}] does not have a configured driver."


class StorageDriver(ABC):
    """
    Abstract Base Class for a disk.

    Paths are logical, slash separated and relative to the disk root.
    """

    @abstractmethod
    def exists(self, path: str) -> bool:
        pass

    @abstractmethod
    def is_directory(self, path: str) -> bool:
        pass

    @abstractmethod
    def size(self, path: str) -> int:
        """Size in bytes."""
        pass

    @abstractmethod
    def mime_type(self, path: str) -> Optional[str]:
        """
        Mime type of the object. May raise UnableToRetrieveMetadata or return None
        when the backend cannot tell.
        """
        pass

    @abstractmethod
    def last_modified(self, path: str) -> int:
        """Unix timestamp (seconds)."""
        pass

    @abstractmethod
    def path(self, path: str) -> str:
        """Backend-resolved absolute location of `path`."""
        pass

    @abstractmethod
    def url(self, path: str) -> str:
        pass

    @abstractmethod
    def directories(self, path: str = "") -> List[str]:
        """Direct child directories of `path`, as disk paths."""
        pass

    @abstractmethod
    def files(self, path: str = "") -> List[str]:
        """Direct child files of `path`, as disk paths."""
        pass

    @abstractmethod
    def read(self, path: str) -> bytes:
        pass


@runtime_checkable
class SupportsTemporaryUrls(Protocol):
    def temporary_url(self, path: str, expires_at: datetime) -> str:
        ...


def join_path(parent: str, name: str) -> str:
    parent = (parent or "").strip("/")
    return f"{parent}/{name}" if parent else name

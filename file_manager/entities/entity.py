# file_manager/entities/entity.py
from __future__ import annotations
"""
Entity — a file or directory on a disk, projected into a flat record.

The record is computed on the first to_dict() call and kept for the lifetime of
the instance. Entities are built per lookup (one per request) and must not be
shared across concurrent requests.
"""

import hashlib
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import PurePosixPath
from typing import TYPE_CHECKING, Any, Dict, Optional, Union

from ..config import EntityOptions
from ..storage.base import StorageDriver, SupportsTemporaryUrls, UnableToRetrieveMetadata
from ..utils import (
    add_duration,
    classify_mime,
    diff_for_humans,
    format_size,
    from_timestamp,
    to_datetime_string,
)

if TYPE_CHECKING:
    from ..manager import FileManager

log = logging.getLogger(__name__)

DEFAULT_MIME = "application/octet-stream"


class Entity(ABC):
    def __init__(
        self,
        manager: "FileManager",
        path: str,
        disk: str,
        options: Optional[EntityOptions] = None,
    ):
        self.manager = manager
        self.path = path
        self.disk = disk
        self.options = options or manager.options
        self._data: Optional[Dict[str, Any]] = None

    @classmethod
    def create(cls, manager: "FileManager", path: str, disk: str):
        return cls(manager, path, disk)

    def _fs(self) -> StorageDriver:
        return self.manager.filesystem()

    def to_dict(self) -> Dict[str, Any]:
        if self._data is not None:
            return self._data

        if self._fs().exists(self.path):
            self._data = {
                "id": self.id(),
                "disk": self.disk,
                "name": self.name(),
                "path": self.path,
                "size": self.size(),
                "extension": self.extension(),
                "mime": self.mime(),
                "url": self.url(),
                "lastModifiedAt": self.last_modified_at(),
                "type": self.type(),
                "exists": True,
                "meta": self.meta() if self.options.file_analysis_enabled else {},
            }
        else:
            self._data = {
                "id": self.id(),
                "disk": self.disk,
                "path": self.path,
                "exists": False,
            }
        return self._data

    def id(self) -> str:
        return hashlib.sha1(self._fs().path(self.path).encode("utf-8")).hexdigest()

    def name(self) -> str:
        return PurePosixPath(self.path).name

    def size(self) -> Union[int, str]:
        value = self._fs().size(self.path)
        if not self.options.human_readable_size:
            return value
        return format_size(value)

    def extension(self) -> str:
        name = self.name()
        return name.rsplit(".", 1)[1] if "." in name else ""

    def mime(self) -> str:
        try:
            mime = self._fs().mime_type(self.path)
            if not mime:
                raise UnableToRetrieveMetadata.mime_type(self.path)
            return mime
        except UnableToRetrieveMetadata as e:
            log.warning("mime lookup failed on disk %s: %s", self.disk, e, exc_info=e)
            return DEFAULT_MIME

    def url(self) -> str:
        fs = self._fs()

        # a registered resolver overrides everything below
        if self.manager.has_url_resolver():
            resolver = self.manager.get_url_resolver()
            return resolver(self.manager.request(), self.path, self.disk, fs)

        if isinstance(fs, SupportsTemporaryUrls) and self.options.url_signing_enabled:
            return fs.temporary_url(self.path, self.signed_expiration_time())

        return fs.url(self.path)

    def signed_expiration_time(self) -> datetime:
        return add_duration(
            datetime.now(timezone.utc),
            self.options.url_signing_unit,
            self.options.url_signing_value,
        )

    def last_modified_at(self) -> str:
        moment = self.last_modified_at_timestamp()
        if not self.options.human_readable_datetime:
            return to_datetime_string(moment, self.options.display_timezone)
        return diff_for_humans(moment)

    def last_modified_at_timestamp(self) -> datetime:
        return from_timestamp(self._fs().last_modified(self.path))

    def type(self) -> str:
        return classify_mime(self.mime())

    @abstractmethod
    def meta(self) -> Dict[str, Any]:
        """Deep inspection, only called when file analysis is enabled."""
        ...

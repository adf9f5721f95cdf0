# file_manager/manager.py
from __future__ import annotations
from typing import Any, Callable, List, Optional

from .config import EntityOptions, settings
from .entities import Directory, Entity, File
from .request_context import current_request
from .storage.base import StorageDriver
from .storage.registry import get_driver

# (request, path, disk, driver) -> url
UrlResolver = Callable[[Any, str, str, StorageDriver], str]


class FileManager:
    """
    One disk, seen through its driver.

    Holds what entities need besides the path: the driver, the presentation options,
    an optional url resolver override and the request being served.
    """

    def __init__(
        self,
        disk: str,
        driver: StorageDriver,
        options: Optional[EntityOptions] = None,
        url_resolver: Optional[UrlResolver] = None,
        request: Any = None,
    ):
        self.disk = disk
        self._driver = driver
        self.options = options or EntityOptions.from_settings(settings)
        self._url_resolver = url_resolver
        self._request = request

    @classmethod
    def for_disk(
        cls,
        disk: Optional[str] = None,
        *,
        url_resolver: Optional[UrlResolver] = None,
        request: Any = None,
    ) -> "FileManager":
        name = disk or settings.default_disk
        return cls(name, get_driver(name), url_resolver=url_resolver, request=request)

    def filesystem(self) -> StorageDriver:
        return self._driver

    # --- url resolver override ---

    def resolve_url_using(self, resolver: Optional[UrlResolver]) -> "FileManager":
        self._url_resolver = resolver
        return self

    def has_url_resolver(self) -> bool:
        return self._url_resolver is not None

    def get_url_resolver(self) -> Optional[UrlResolver]:
        return self._url_resolver

    def request(self) -> Any:
        return self._request if self._request is not None else current_request()

    # --- entities ---

    def entity(self, path: str) -> Entity:
        if self._driver.is_directory(path):
            return Directory.create(self, path, self.disk)
        return File.create(self, path, self.disk)

    def directories(self, path: str = "") -> List[Directory]:
        return [Directory.create(self, p, self.disk) for p in self._driver.directories(path)]

    def files(self, path: str = "") -> List[File]:
        return [File.create(self, p, self.disk) for p in self._driver.files(path)]

# file_manager/storage/local.py
from __future__ import annotations
import mimetypes
from pathlib import Path
from typing import List, Optional
from urllib.parse import quote

from .base import StorageDriver, UnableToRetrieveMetadata, join_path


def guess_mime_from_path(p: Path) -> Optional[str]:
    mt, _ = mimetypes.guess_type(str(p))
    return mt


class LocalDriver(StorageDriver):
    """Disk backed by a directory on the local filesystem."""

    def __init__(self, root: str, base_url: Optional[str] = None):
        self.root = Path(root).expanduser().resolve()
        self.base_url = (base_url or "").rstrip("/")

    def _abs(self, path: str) -> Path:
        rel = Path(str(path or "").replace("\\", "/").strip("/"))
        if rel.is_absolute() or ".." in rel.parts:
            raise ValueError(f"path escapes the disk root: {path!r}")
        return self.root / rel

    def exists(self, path: str) -> bool:
        return self._abs(path).exists()

    def is_directory(self, path: str) -> bool:
        return self._abs(path).is_dir()

    def size(self, path: str) -> int:
        return int(self._abs(path).stat().st_size)

    def mime_type(self, path: str) -> Optional[str]:
        p = self._abs(path)
        if p.is_dir():
            return "directory"
        mime = guess_mime_from_path(p)
        if mime is None:
            raise UnableToRetrieveMetadata.mime_type(path, "Unknown extension.")
        return mime

    def last_modified(self, path: str) -> int:
        return int(self._abs(path).stat().st_mtime)

    def path(self, path: str) -> str:
        return str(self._abs(path))

    def url(self, path: str) -> str:
        return f"{self.base_url}/{quote(str(path).strip('/'))}"

    def directories(self, path: str = "") -> List[str]:
        p = self._abs(path)
        if not p.is_dir():
            return []
        return sorted(join_path(path, x.name) for x in p.iterdir() if x.is_dir())

    def files(self, path: str = "") -> List[str]:
        p = self._abs(path)
        if not p.is_dir():
            return []
        return sorted(join_path(path, x.name) for x in p.iterdir() if x.is_file())

    def read(self, path: str) -> bytes:
        return self._abs(path).read_bytes()

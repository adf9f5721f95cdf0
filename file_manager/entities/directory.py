# file_manager/entities/directory.py
from __future__ import annotations
from typing import Any, Dict

from .entity import Entity


class Directory(Entity):
    def meta(self) -> Dict[str, Any]:
        """Number of direct children."""
        fs = self._fs()
        return {
            "directories": len(fs.directories(self.path)),
            "files": len(fs.files(self.path)),
        }

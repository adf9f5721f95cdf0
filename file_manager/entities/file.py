# file_manager/entities/file.py
from __future__ import annotations
from typing import Any, Dict

from ..analysis.analyzer import FileAnalyzer
from .entity import Entity


class File(Entity):
    def meta(self) -> Dict[str, Any]:
        return FileAnalyzer(self._fs(), self.path, self.mime()).analyze()

# file_manager/analysis/analyzer.py
from __future__ import annotations
import logging
from io import BytesIO
from typing import Any, Dict

from PIL import Image, UnidentifiedImageError

from ..storage.base import StorageDriver

log = logging.getLogger(__name__)


class FileAnalyzer:
    """
    Reads a file through its driver and extracts format specific details.

    Only images are inspected for now; other types yield an empty mapping.
    """

    def __init__(self, driver: StorageDriver, path: str, mime: str):
        self.driver = driver
        self.path = path
        self.mime = mime

    def analyze(self) -> Dict[str, Any]:
        if self.mime.startswith("image/"):
            return self.image()
        return {}

    def image(self) -> Dict[str, Any]:
        data = self.driver.read(self.path)
        try:
            with Image.open(BytesIO(data)) as img:
                return {
                    "width": img.width,
                    "height": img.height,
                    "format": img.format,
                    "mode": img.mode,
                }
        except UnidentifiedImageError:
            log.warning("could not decode image %s (%s)", self.path, self.mime)
            return {}

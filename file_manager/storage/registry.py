# file_manager/storage/registry.py
from __future__ import annotations
from typing import Optional

from ..config import DiskConfig, settings
from .base import StorageDriver, UnknownDisk
from .local import LocalDriver
from .s3 import S3Driver


def build_driver(config: DiskConfig) -> StorageDriver:
    if config.driver == "s3":
        if not config.bucket:
            raise ValueError("s3 disks need a bucket")
        return S3Driver(
            bucket=config.bucket,
            prefix=config.prefix,
            region=config.region,
            endpoint=config.endpoint,
            base_url=config.url,
            aws_profile=config.aws_profile,
        )
    if not config.root:
        raise ValueError("local disks need a root")
    return LocalDriver(root=config.root, base_url=config.url)


def get_driver(disk: Optional[str] = None) -> StorageDriver:
    """Resolve the driver of `disk` (default disk when omitted) from settings."""
    name = disk or settings.default_disk
    config = settings.disks.get(name)
    if config is None:
        raise UnknownDisk(name)
    return build_driver(config)


def available_disks() -> list[str]:
    return sorted(settings.disks.keys())

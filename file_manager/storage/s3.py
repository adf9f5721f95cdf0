# file_manager/storage/s3.py
from __future__ import annotations
import os
from datetime import datetime, timezone
from typing import Any, List, Optional
from urllib.parse import quote

import boto3
from botocore.exceptions import ClientError

from .base import StorageDriver, UnableToRetrieveMetadata

_NOT_FOUND = {"404", "NoSuchKey", "NotFound"}


class S3Driver(StorageDriver):
    """
    Disk backed by an S3 (or S3-compatible) bucket.

    Directories are key prefixes; a "directory" exists as soon as one key lives under it.
    """

    def __init__(
        self,
        bucket: str,
        prefix: str = "",
        region: Optional[str] = None,
        endpoint: Optional[str] = None,
        base_url: Optional[str] = None,
        aws_profile: Optional[str] = None,
        client: Any = None,
    ):
        self.bucket = bucket
        self.prefix = (prefix or "").strip("/")
        self.region = region
        self.endpoint = endpoint.rstrip("/") if endpoint else None
        self.base_url = base_url.rstrip("/") if base_url else None
        self.aws_profile = aws_profile
        self._client = client

    def _get_s3_client(self):
        if self._client is None:
            profile_name = self.aws_profile or os.getenv("AWS_PROFILE")
            session = boto3.Session(profile_name=profile_name)
            self._client = session.client("s3", region_name=self.region, endpoint_url=self.endpoint)
        return self._client

    def _key(self, path: str) -> str:
        rel = str(path or "").strip("/")
        if self.prefix and rel:
            return f"{self.prefix}/{rel}"
        return self.prefix or rel

    def _dir_prefix(self, path: str) -> str:
        key = self._key(path)
        return f"{key}/" if key else ""

    def _head(self, path: str) -> dict:
        return self._get_s3_client().head_object(Bucket=self.bucket, Key=self._key(path))

    def _strip_prefix(self, key: str) -> str:
        key = key.rstrip("/")
        if self.prefix and key.startswith(self.prefix + "/"):
            return key[len(self.prefix) + 1:]
        return key

    def _is_root(self, path: str) -> bool:
        return not str(path or "").strip("/")

    def _head_or_none(self, path: str) -> Optional[dict]:
        """head_object of `path`, None when no object has that exact key."""
        if self._is_root(path):
            return None
        try:
            return self._head(path)
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") not in _NOT_FOUND:
                raise
        return None

    def _objects_under(self, path: str):
        paginator = self._get_s3_client().get_paginator("list_objects_v2")
        for page in paginator.paginate(Bucket=self.bucket, Prefix=self._dir_prefix(path)):
            for obj in page.get("Contents", []) or []:
                yield obj

    def exists(self, path: str) -> bool:
        if self._head_or_none(path) is not None:
            return True
        return self.is_directory(path)

    def is_directory(self, path: str) -> bool:
        if self._is_root(path):
            return True
        res = self._get_s3_client().list_objects_v2(
            Bucket=self.bucket, Prefix=self._dir_prefix(path), MaxKeys=1
        )
        return int(res.get("KeyCount", 0)) > 0

    def size(self, path: str) -> int:
        head = self._head_or_none(path)
        if head is not None:
            return int(head.get("ContentLength", 0))
        # prefix: total of every key below it
        return sum(int(obj.get("Size", 0)) for obj in self._objects_under(path))

    def mime_type(self, path: str) -> Optional[str]:
        try:
            head = self._head_or_none(path)
        except ClientError as e:
            raise UnableToRetrieveMetadata.mime_type(path, str(e)) from e
        if head is not None:
            return head.get("ContentType") or None
        if self.is_directory(path):
            return "directory"
        raise UnableToRetrieveMetadata.mime_type(path, "No such key.")

    def last_modified(self, path: str) -> int:
        head = self._head_or_none(path)
        if head is not None:
            modified: datetime = head["LastModified"]
            return int(modified.timestamp())
        # prefix: newest key below it
        newest = max((obj["LastModified"] for obj in self._objects_under(path)), default=None)
        return int(newest.timestamp()) if newest is not None else 0

    def path(self, path: str) -> str:
        return f"s3://{self.bucket}/{self._key(path)}"

    def url(self, path: str) -> str:
        key = quote(self._key(path))
        if self.base_url:
            return f"{self.base_url}/{key}"
        if self.endpoint:
            return f"{self.endpoint}/{self.bucket}/{key}"
        if self.region:
            return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{key}"
        return f"https://{self.bucket}.s3.amazonaws.com/{key}"

    def temporary_url(self, path: str, expires_at: datetime) -> str:
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        expiration = int((expires_at - datetime.now(timezone.utc)).total_seconds())
        return self._get_s3_client().generate_presigned_url(
            "get_object",
            Params={"Bucket": self.bucket, "Key": self._key(path)},
            ExpiresIn=max(expiration, 1),
        )

    def _list(self, path: str):
        paginator = self._get_s3_client().get_paginator("list_objects_v2")
        return paginator.paginate(Bucket=self.bucket, Prefix=self._dir_prefix(path), Delimiter="/")

    def directories(self, path: str = "") -> List[str]:
        out: List[str] = []
        for page in self._list(path):
            for cp in page.get("CommonPrefixes", []) or []:
                out.append(self._strip_prefix(cp["Prefix"]))
        return sorted(out)

    def files(self, path: str = "") -> List[str]:
        own = self._dir_prefix(path)
        out: List[str] = []
        for page in self._list(path):
            for obj in page.get("Contents", []) or []:
                # skip "folder/" placeholder objects
                if obj["Key"] == own or obj["Key"].endswith("/"):
                    continue
                out.append(self._strip_prefix(obj["Key"]))
        return sorted(out)

    def read(self, path: str) -> bytes:
        obj = self._get_s3_client().get_object(Bucket=self.bucket, Key=self._key(path))
        return obj["Body"].read()

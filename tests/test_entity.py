import hashlib
import os
from datetime import datetime, timedelta, timezone
from io import BytesIO
from typing import Dict, List, Optional
from unittest import TestCase
from unittest.mock import patch

from PIL import Image

# Minimal env so pydantic Settings can load during imports
os.environ.setdefault("JWT_SECRET", "test-secret")

from file_manager.config import EntityOptions  # noqa: E402
from file_manager.entities import Directory, Entity, File  # noqa: E402
from file_manager.manager import FileManager  # noqa: E402
from file_manager.storage.base import StorageDriver, UnableToRetrieveMetadata, join_path  # noqa: E402

FULL_KEYS = {
    "id", "disk", "name", "path", "size", "extension", "mime",
    "url", "lastModifiedAt", "type", "exists", "meta",
}


class _MemoryDriver(StorageDriver):
    """In-memory disk: objects maps path -> {size, mime, mtime, data}."""

    def __init__(self, objects: Optional[Dict[str, dict]] = None, dirs: Optional[List[str]] = None):
        self.objects = objects or {}
        self.dirs = set(dirs or [])

    def exists(self, path):
        return path in self.objects or path in self.dirs

    def is_directory(self, path):
        return path in self.dirs

    def size(self, path):
        value = self.objects.get(path, {}).get("size", 0)
        if isinstance(value, Exception):
            raise value
        return value

    def mime_type(self, path):
        mime = self.objects.get(path, {}).get("mime")
        if isinstance(mime, Exception):
            raise mime
        return mime

    def last_modified(self, path):
        return self.objects.get(path, {}).get("mtime", 0)

    def path(self, path):
        return "/srv/disk/" + path

    def url(self, path):
        return "https://files.test/" + path

    def _children(self, path):
        prefix = f"{path}/" if path else ""
        return [p for p in list(self.objects) + list(self.dirs) if p.startswith(prefix) and "/" not in p[len(prefix):]]

    def directories(self, path=""):
        return sorted(p for p in self._children(path) if p in self.dirs)

    def files(self, path=""):
        return sorted(p for p in self._children(path) if p in self.objects)

    def read(self, path):
        return self.objects[path]["data"]


class _SigningDriver(_MemoryDriver):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.signed_calls = []

    def temporary_url(self, path, expires_at):
        self.signed_calls.append((path, expires_at))
        return "https://signed.test/" + path


def _png_bytes(width: int, height: int) -> bytes:
    out = BytesIO()
    Image.new("RGB", (width, height), color=(10, 20, 30)).save(out, format="PNG")
    return out.getvalue()


def _manager(driver, **options) -> FileManager:
    return FileManager("public", driver, options=EntityOptions(**options))


class EntityRecordTests(TestCase):
    def setUp(self):
        self.driver = _MemoryDriver(
            {
                "docs/report.pdf": {"size": 1536, "mime": "application/pdf", "mtime": 1700000000},
                "docs/archive.tar.gz": {"size": 10, "mime": "application/gzip", "mtime": 1700000000},
            },
            dirs=["docs"],
        )
        self.manager = _manager(self.driver)

    def test_missing_record_has_only_identity_keys(self):
        record = File.create(self.manager, "docs/nope.txt", "public").to_dict()
        self.assertEqual(set(record), {"id", "disk", "path", "exists"})
        self.assertFalse(record["exists"])
        self.assertEqual(record["path"], "docs/nope.txt")
        self.assertEqual(record["disk"], "public")

    def test_existing_record_has_all_fields(self):
        record = File.create(self.manager, "docs/report.pdf", "public").to_dict()
        self.assertEqual(set(record), FULL_KEYS)
        self.assertTrue(record["exists"])
        self.assertEqual(record["name"], "report.pdf")
        self.assertEqual(record["extension"], "pdf")
        self.assertEqual(record["mime"], "application/pdf")
        self.assertEqual(record["type"], "pdf")
        self.assertEqual(record["size"], "1.5 KB")
        self.assertEqual(record["url"], "https://files.test/docs/report.pdf")
        self.assertEqual(record["meta"], {})

    def test_record_is_memoized(self):
        entity = File.create(self.manager, "docs/report.pdf", "public")
        first = entity.to_dict()
        del self.driver.objects["docs/report.pdf"]
        second = entity.to_dict()
        self.assertIs(first, second)
        self.assertTrue(second["exists"])

    def test_id_is_sha1_of_resolved_path(self):
        a = File.create(self.manager, "docs/report.pdf", "public")
        b = File.create(self.manager, "docs/report.pdf", "public")
        expected = hashlib.sha1(b"/srv/disk/docs/report.pdf").hexdigest()
        self.assertEqual(a.id(), expected)
        self.assertEqual(a.id(), a.id())
        self.assertEqual(a.id(), b.id())
        self.assertEqual(a.id(), File.create(self.manager, "docs/report.pdf", "public").to_dict()["id"])

    def test_name_and_extension(self):
        entity = File.create(self.manager, "docs/archive.tar.gz", "public")
        self.assertEqual(entity.name(), "archive.tar.gz")
        self.assertEqual(entity.extension(), "gz")
        self.assertEqual(File.create(self.manager, "docs/README", "public").extension(), "")
        self.assertEqual(Directory.create(self.manager, "docs/", "public").name(), "docs")

    def test_create_returns_the_called_variant(self):
        self.assertIsInstance(Directory.create(self.manager, "docs", "public"), Directory)
        self.assertIsInstance(File.create(self.manager, "docs/report.pdf", "public"), File)

    def test_manager_picks_variant_from_driver(self):
        self.assertIsInstance(self.manager.entity("docs"), Directory)
        self.assertIsInstance(self.manager.entity("docs/report.pdf"), File)
        self.assertEqual([f.path for f in self.manager.files("docs")], ["docs/archive.tar.gz", "docs/report.pdf"])
        self.assertEqual([d.path for d in self.manager.directories("")], ["docs"])

    def test_entity_is_abstract(self):
        with self.assertRaises(TypeError):
            Entity(self.manager, "docs/report.pdf", "public")

    def test_other_driver_failures_propagate(self):
        self.driver.objects["ghost.bin"] = {"size": OSError("stat failed"), "mime": "text/plain"}
        with self.assertRaises(OSError):
            File.create(self.manager, "ghost.bin", "public").to_dict()


class SizeTests(TestCase):
    def _size(self, value, human):
        driver = _MemoryDriver({"f.bin": {"size": value, "mime": "application/octet-stream"}})
        return File.create(_manager(driver, human_readable_size=human), "f.bin", "public").size()

    def test_raw_bytes_when_not_human_readable(self):
        self.assertEqual(self._size(500, False), 500)

    def test_human_readable_units(self):
        self.assertEqual(self._size(500, True), "500 B")
        self.assertEqual(self._size(1536, True), "1.5 KB")
        self.assertEqual(self._size(1073741824, True), "1 GB")


class MimeAndTypeTests(TestCase):
    def _file(self, mime):
        driver = _MemoryDriver({"f": {"size": 1, "mime": mime}})
        return File.create(_manager(driver), "f", "public")

    def test_type_classification(self):
        self.assertEqual(self._file("image/png").type(), "image")
        self.assertEqual(self._file("video/mp4").type(), "video")
        self.assertEqual(self._file("audio/mpeg").type(), "audio")
        self.assertEqual(self._file("text/plain").type(), "text")
        self.assertEqual(self._file("application/vnd.ms-excel").type(), "vnd.ms-excel")
        self.assertEqual(self._file("font/ttf").type(), "unknown")

    def test_metadata_failure_defaults_to_octet_stream(self):
        entity = self._file(UnableToRetrieveMetadata.mime_type("f"))
        with self.assertLogs("file_manager.entities.entity", level="WARNING"):
            self.assertEqual(entity.mime(), "application/octet-stream")

    def test_missing_mime_defaults_to_octet_stream(self):
        with self.assertLogs("file_manager.entities.entity", level="WARNING"):
            self.assertEqual(self._file(None).mime(), "application/octet-stream")

    def test_unrelated_errors_are_not_swallowed(self):
        with self.assertRaises(RuntimeError):
            self._file(RuntimeError("boom")).mime()


class UrlTests(TestCase):
    def setUp(self):
        self.objects = {"a/b.txt": {"size": 1, "mime": "text/plain"}}

    def test_resolver_overrides_everything(self):
        driver = _SigningDriver(self.objects)
        calls = []

        def resolver(request, path, disk, fs):
            calls.append((request, path, disk, fs))
            return "custom://" + path

        manager = FileManager(
            "s3", driver, options=EntityOptions(url_signing_enabled=True), url_resolver=resolver, request="REQ"
        )
        self.assertEqual(File.create(manager, "a/b.txt", "s3").url(), "custom://a/b.txt")
        self.assertEqual(calls, [("REQ", "a/b.txt", "s3", driver)])
        self.assertEqual(driver.signed_calls, [])

    def test_resolve_url_using_is_fluent(self):
        manager = _manager(_MemoryDriver(self.objects))
        self.assertFalse(manager.has_url_resolver())
        self.assertIs(manager.resolve_url_using(lambda *a: "x"), manager)
        self.assertTrue(manager.has_url_resolver())
        self.assertEqual(File.create(manager, "a/b.txt", "public").url(), "x")

    def test_signed_url_when_supported_and_enabled(self):
        driver = _SigningDriver(self.objects)
        manager = _manager(driver, url_signing_enabled=True, url_signing_unit="minutes", url_signing_value=30)
        before = datetime.now(timezone.utc)
        url = File.create(manager, "a/b.txt", "public").url()
        self.assertEqual(url, "https://signed.test/a/b.txt")
        (path, expires_at), = driver.signed_calls
        self.assertEqual(path, "a/b.txt")
        self.assertGreaterEqual(expires_at, before + timedelta(minutes=30))
        self.assertLess(expires_at, before + timedelta(minutes=31))

    def test_signed_url_with_singular_unit(self):
        driver = _SigningDriver(self.objects)
        manager = _manager(driver, url_signing_enabled=True, url_signing_unit="minute", url_signing_value=30)
        before = datetime.now(timezone.utc)
        self.assertEqual(File.create(manager, "a/b.txt", "public").url(), "https://signed.test/a/b.txt")
        (_, expires_at), = driver.signed_calls
        self.assertGreaterEqual(expires_at, before + timedelta(minutes=30))

    def test_public_url_when_signing_disabled(self):
        driver = _SigningDriver(self.objects)
        url = File.create(_manager(driver, url_signing_enabled=False), "a/b.txt", "public").url()
        self.assertEqual(url, "https://files.test/a/b.txt")
        self.assertEqual(driver.signed_calls, [])

    def test_public_url_when_driver_cannot_sign(self):
        driver = _MemoryDriver(self.objects)
        url = File.create(_manager(driver, url_signing_enabled=True), "a/b.txt", "public").url()
        self.assertEqual(url, "https://files.test/a/b.txt")

    def test_signed_expiration_honours_unit(self):
        entity = File.create(
            _manager(_MemoryDriver(self.objects), url_signing_unit="hours", url_signing_value=2), "a/b.txt", "public"
        )
        delta = entity.signed_expiration_time() - datetime.now(timezone.utc)
        self.assertGreater(delta, timedelta(hours=1, minutes=59))
        self.assertLessEqual(delta, timedelta(hours=2))


class LastModifiedTests(TestCase):
    def test_absolute_datetime(self):
        ts = int(datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc).timestamp())
        driver = _MemoryDriver({"f": {"mtime": ts}})
        entity = File.create(_manager(driver, human_readable_datetime=False), "f", "public")
        self.assertEqual(entity.last_modified_at(), "2024-01-02 03:04:05")
        self.assertEqual(entity.last_modified_at_timestamp(), datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc))

    def test_display_timezone(self):
        ts = int(datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc).timestamp())
        driver = _MemoryDriver({"f": {"mtime": ts}})
        manager = _manager(driver, human_readable_datetime=False, display_timezone="Asia/Ho_Chi_Minh")
        self.assertEqual(File.create(manager, "f", "public").last_modified_at(), "2024-01-02 10:04:05")

    def test_relative_datetime(self):
        ts = int((datetime.now(timezone.utc) - timedelta(hours=3)).timestamp())
        driver = _MemoryDriver({"f": {"mtime": ts}})
        entity = File.create(_manager(driver, human_readable_datetime=True), "f", "public")
        self.assertEqual(entity.last_modified_at(), "3 hours ago")


class MetaTests(TestCase):
    def setUp(self):
        self.driver = _MemoryDriver(
            {
                "img/cat.png": {"size": 1, "mime": "image/png", "data": _png_bytes(4, 3)},
                "img/notes.txt": {"size": 1, "mime": "text/plain", "data": b"hi"},
            },
            dirs=["img", "img/thumbs"],
        )

    def test_meta_skipped_when_analysis_disabled(self):
        manager = _manager(self.driver, file_analysis_enabled=False)
        with patch.object(File, "meta", side_effect=AssertionError("must not analyze")), \
                patch.object(Directory, "meta", side_effect=AssertionError("must not analyze")):
            self.assertEqual(File.create(manager, "img/cat.png", "public").to_dict()["meta"], {})
            self.assertEqual(Directory.create(manager, "img", "public").to_dict()["meta"], {})

    def test_image_meta(self):
        manager = _manager(self.driver, file_analysis_enabled=True)
        meta = File.create(manager, "img/cat.png", "public").to_dict()["meta"]
        self.assertEqual(meta["width"], 4)
        self.assertEqual(meta["height"], 3)
        self.assertEqual(meta["format"], "PNG")

    def test_non_image_meta_is_empty(self):
        manager = _manager(self.driver, file_analysis_enabled=True)
        self.assertEqual(File.create(manager, "img/notes.txt", "public").to_dict()["meta"], {})

    def test_undecodable_image_meta_is_empty(self):
        self.driver.objects["img/cat.png"]["data"] = b"not a png"
        manager = _manager(self.driver, file_analysis_enabled=True)
        with self.assertLogs("file_manager.analysis.analyzer", level="WARNING"):
            self.assertEqual(File.create(manager, "img/cat.png", "public").meta(), {})

    def test_directory_meta_counts_children(self):
        manager = _manager(self.driver, file_analysis_enabled=True)
        meta = Directory.create(manager, "img", "public").to_dict()["meta"]
        self.assertEqual(meta, {"directories": 1, "files": 2})


class JoinPathTests(TestCase):
    def test_join(self):
        self.assertEqual(join_path("", "a"), "a")
        self.assertEqual(join_path("x/", "a"), "x/a")

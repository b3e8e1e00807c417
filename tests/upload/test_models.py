"""
Model Tests

File sources, entry transitions, stored file records and previews.
"""

from datetime import datetime, timezone

import pytest

from conftest import make_entry, make_source
from upload.constants import DEFAULT_MIME_TYPE, EntryStatus
from upload.models.file_record import UploadedFileRecord
from upload.models.upload_entry import FileSource
from upload.utils.format_utils import format_limit_mb, format_size
from upload.utils.preview_utils import create_preview


class TestFileSource:
    def test_from_path_guesses_mime_type(self, tmp_path):
        path = tmp_path / "report.pdf"
        path.write_bytes(b"%PDF-1.4 test")

        source = FileSource.from_path(path)

        assert source.name == "report.pdf"
        assert source.size == len(b"%PDF-1.4 test")
        assert source.mime_type == "application/pdf"
        with source.open() as stream:
            assert stream.read() == b"%PDF-1.4 test"

    def test_from_path_unknown_extension(self, tmp_path):
        path = tmp_path / "blob.zzunknown"
        path.write_bytes(b"data")

        assert FileSource.from_path(path).mime_type == DEFAULT_MIME_TYPE

    def test_from_path_explicit_type(self, tmp_path):
        path = tmp_path / "photo"
        path.write_bytes(b"data")

        assert FileSource.from_path(path, "image/png").mime_type == "image/png"

    def test_from_bytes(self):
        source = FileSource.from_bytes("a.png", b"12345", "image/png")

        assert source.size == 5
        assert source.is_image is True
        assert source.open().read() == b"12345"

    def test_requires_payload(self):
        with pytest.raises(ValueError):
            FileSource(name="empty", size=0, mime_type="image/png")


class TestUploadEntry:
    def test_lifecycle(self):
        entry = make_entry()
        assert entry.is_pending

        entry.mark_uploading()
        assert entry.is_uploading
        assert entry.attempts == 1

        entry.update_progress(40)
        entry.mark_failed("Network error")
        assert entry.status == EntryStatus.ERROR
        assert entry.error == "Network error"
        assert entry.progress == 40
        assert entry.can_retry

        entry.reset_for_retry()
        assert entry.is_pending
        assert entry.error is None
        assert entry.progress == 0

        entry.mark_uploading()
        entry.mark_completed("https://bucket/uploads/1-photo.png", "uploads/1-photo.png")
        assert entry.is_completed
        assert entry.progress == 100
        assert entry.url == "https://bucket/uploads/1-photo.png"
        assert entry.attempts == 2
        assert not entry.can_retry

    def test_progress_is_clamped(self):
        entry = make_entry()

        entry.update_progress(150)
        assert entry.progress == 100
        entry.update_progress(-5)
        assert entry.progress == 0

    def test_entries_with_same_content_are_distinct(self):
        first = make_entry("same.png")
        second = make_entry("same.png")

        assert first.entry_id != second.entry_id
        assert first != second

    def test_to_dict(self):
        data = make_entry("a.png").to_dict()

        assert data["name"] == "a.png"
        assert data["status"] == "pending"
        assert data["preview"] is None


class TestUploadedFileRecord:
    def test_from_dict_parses_server_json(self):
        record = UploadedFileRecord.from_dict(
            {
                "_id": "65f0c0ffee",
                "name": "scan.pdf",
                "url": "https://bucket/uploads/1-scan.pdf",
                "size": 2048,
                "type": "application/pdf",
                "uploadedAt": "2024-03-12T10:15:30.000Z",
            },
        )

        assert record.identifier == "65f0c0ffee"
        assert record.mime_type == "application/pdf"
        assert record.uploaded_at == datetime(2024, 3, 12, 10, 15, 30, tzinfo=timezone.utc)

    def test_from_dict_rejects_numeric_timestamp(self):
        with pytest.raises(ValueError):
            UploadedFileRecord.from_dict(
                {
                    "_id": "1",
                    "name": "a.png",
                    "url": "https://bucket/a.png",
                    "size": 10,
                    "type": "image/png",
                    "uploadedAt": 1700000000000,
                },
            )

    def test_from_dict_missing_field(self):
        with pytest.raises(KeyError):
            UploadedFileRecord.from_dict({"name": "x"})

    def test_to_dict_uses_wire_names(self):
        record = UploadedFileRecord("id1", "a.png", "https://x/a.png", 3, "image/png")

        data = record.to_dict()

        assert data["_id"] == "id1"
        assert data["type"] == "image/png"
        assert data["uploadedAt"] is None


class TestPreviewHandle:
    def test_release_deletes_file_once(self):
        handle = create_preview(make_source("cat.png"))
        assert handle.path.exists()

        assert handle.release() is True
        assert not handle.path.exists()
        assert handle.released

        # Second release is a no-op
        assert handle.release() is False

    def test_entry_release_is_idempotent(self):
        entry = make_entry()
        entry.preview = create_preview(entry.source)

        entry.release_preview()
        entry.release_preview()

        assert entry.preview.released

    def test_release_tolerates_missing_file(self):
        handle = create_preview(make_source("cat.png"))
        handle.path.unlink()

        assert handle.release() is True

    def test_preview_in_custom_directory(self, tmp_path):
        handle = create_preview(make_source("cat.png"), directory=tmp_path)

        assert handle.path.parent == tmp_path
        assert handle.path.suffix == ".png"
        handle.release()


class TestFormatUtils:
    def test_format_size(self):
        assert format_size(512) == "512.00 B"
        assert format_size(1.5 * 1024 * 1024) == "1.50 MB"

    def test_format_limit_mb(self):
        assert format_limit_mb(10 * 1024 * 1024) == "10MB"

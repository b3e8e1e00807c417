"""
Validation Tests

Tests cover:
1. Batch partitioning (every file accepted or rejected, never both)
2. Size limit and MIME allow-list with user-facing messages
3. Preview creation for images only
"""

import random

import pytest

from conftest import MB, make_source
from upload.constants import (
    ACCEPTED_MIME_TYPES,
    MAX_FILE_SIZE_BYTES,
    EntryStatus,
    RejectionReason,
)
from upload.utils.validation_utils import check_file, validate_files


@pytest.fixture(autouse=True)
def release_previews():
    """Collect reports and release any previews after each test"""
    reports = []
    yield reports
    for report in reports:
        for entry in report.accepted:
            entry.release_preview()


class TestCheckFile:
    """Single-file checks"""

    def test_accepts_supported_file_under_limit(self):
        assert check_file(make_source("a.pdf", 1024, "application/pdf")) == (None, None)

    def test_accepts_file_exactly_at_limit(self):
        source = make_source("edge.png", MAX_FILE_SIZE_BYTES, "image/png")
        reason, _ = check_file(source)
        assert reason is None

    def test_rejects_file_over_limit(self):
        source = make_source("big.pdf", MAX_FILE_SIZE_BYTES + 1, "application/pdf")

        reason, message = check_file(source)

        assert reason is RejectionReason.TOO_LARGE
        assert message == "big.pdf is too large. Maximum size is 10MB."

    def test_rejects_unsupported_type(self):
        reason, message = check_file(make_source("notes.txt", 10, "text/plain"))

        assert reason is RejectionReason.UNSUPPORTED_TYPE
        assert message == "notes.txt is not a supported file type."

    def test_size_checked_before_type(self):
        source = make_source("huge.txt", MAX_FILE_SIZE_BYTES + 1, "text/plain")
        reason, _ = check_file(source)
        assert reason is RejectionReason.TOO_LARGE

    def test_custom_limits(self):
        source = make_source("a.png", 2048, "image/png")

        assert check_file(source, max_size=1024)[0] is RejectionReason.TOO_LARGE
        assert (
            check_file(source, accepted_types=["application/pdf"])[0]
            is RejectionReason.UNSUPPORTED_TYPE
        )


class TestValidateFiles:
    """Batch validation"""

    def test_partition_is_total_and_disjoint(self, release_previews):
        rng = random.Random(1234)
        types = list(ACCEPTED_MIME_TYPES) + ["text/plain", "video/mp4"]
        batch = [
            make_source(
                f"file_{i}",
                rng.choice([10, MAX_FILE_SIZE_BYTES, MAX_FILE_SIZE_BYTES + 1]),
                rng.choice(types),
            )
            for i in range(40)
        ]

        report = validate_files(batch, create_previews=False)
        release_previews.append(report)

        accepted_ids = {id(entry.source) for entry in report.accepted}
        rejected_ids = {id(rejected.source) for rejected in report.rejected}

        assert accepted_ids.isdisjoint(rejected_ids)
        assert accepted_ids | rejected_ids == {id(source) for source in batch}
        assert len(report.accepted) + len(report.rejected) == len(batch)
        assert report.total == len(batch)

    def test_accepted_entries_are_pending_with_unique_ids(self, release_previews):
        batch = [make_source("a.png"), make_source("a.png")]

        report = validate_files(batch)
        release_previews.append(report)

        assert [entry.status for entry in report.accepted] == [
            EntryStatus.PENDING,
            EntryStatus.PENDING,
        ]
        first, second = report.accepted
        assert first.entry_id != second.entry_id

    def test_jpeg_accepted_and_large_pdf_rejected(self, release_previews):
        jpeg = make_source("holiday.jpg", 5 * MB, "image/jpeg")
        pdf = make_source("scan.pdf", 15 * MB, "application/pdf")

        report = validate_files([jpeg, pdf])
        release_previews.append(report)

        assert [entry.source for entry in report.accepted] == [jpeg]
        assert len(report.rejected) == 1
        assert report.rejected[0].source is pdf
        assert report.rejected[0].reason is RejectionReason.TOO_LARGE
        assert "too large" in report.rejected[0].message
        assert report.all_accepted is False

    def test_images_get_previews(self, release_previews):
        report = validate_files(
            [
                make_source("cat.gif", 100, "image/gif"),
                make_source("doc.pdf", 100, "application/pdf"),
            ],
        )
        release_previews.append(report)

        image_entry, pdf_entry = report.accepted
        assert image_entry.preview is not None
        assert image_entry.preview.path.exists()
        assert image_entry.preview.path.read_bytes() == b"x" * 100
        assert pdf_entry.preview is None

    def test_previews_can_be_disabled(self, release_previews):
        report = validate_files([make_source("cat.png")], create_previews=False)
        release_previews.append(report)

        assert report.accepted[0].preview is None

    def test_rejected_images_get_no_preview(self):
        report = validate_files(
            [make_source("big.png", MAX_FILE_SIZE_BYTES + 1, "image/png")],
        )

        assert report.accepted == []
        assert len(report.rejected) == 1

    def test_empty_batch(self):
        report = validate_files([])

        assert report.accepted == []
        assert report.rejected == []
        assert report.all_accepted is True

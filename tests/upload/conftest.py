"""
Upload Test Configuration and Fixtures

Fixtures shared across upload tests.
Fresh mocks per test, automatic cleanup after each test (held uploads are
always released so no worker thread outlives its test).

To use pytest:
    pip install -e ".[test]"
    pytest tests/upload/
"""

import time

import pytest

from upload.controllers.queue_manager import UploadQueueManager
from upload.controllers.upload_controller import UploadController
from upload.implementations.mock_uploader import MockUploader
from upload.models.upload_entry import FileSource, UploadEntry

MB = 1024 * 1024


# =============================================================================
# FILE HELPERS
# =============================================================================


def make_source(
    name: str = "photo.png",
    size: int = 1024,
    mime_type: str = "image/png",
) -> FileSource:
    """In-memory file of the given size"""
    return FileSource.from_bytes(name, b"x" * size, mime_type)


def make_entry(name: str = "photo.png", mime_type: str = "image/png") -> UploadEntry:
    """Pending entry without a preview"""
    return UploadEntry(source=make_source(name, mime_type=mime_type))


def wait_until(predicate, timeout: float = 5.0) -> bool:
    """Poll predicate until true or timeout (worker threads finish async)"""
    deadline = time.time() + timeout
    while time.time() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


@pytest.fixture
def png_sources():
    """Three valid 1 MB PNGs"""
    return [make_source(f"image_{i}.png", size=MB) for i in range(1, 4)]


# =============================================================================
# UPLOADER FIXTURES
# =============================================================================


@pytest.fixture
def mock_uploader():
    """Fast mock: uploads finish immediately"""
    return MockUploader()


@pytest.fixture
def held_uploader():
    """
    Mock whose uploads block until released.

    Usage:
        def test_slots(held_uploader):
            ...
            held_uploader.release_uploads("a.png")
    """
    uploader = MockUploader(hold_uploads=True, hold_timeout=5.0)
    yield uploader
    # Never leave worker threads blocked after a test
    uploader.hold_uploads = False
    uploader.release_uploads()


# =============================================================================
# QUEUE FIXTURES
# =============================================================================


@pytest.fixture
def queue_manager(held_uploader):
    """Queue with two slots over the held mock"""
    manager = UploadQueueManager(held_uploader, max_concurrent=2)
    yield manager
    held_uploader.hold_uploads = False
    held_uploader.release_uploads()
    manager.shutdown(timeout=5.0)


@pytest.fixture
def upload_controller(mock_uploader):
    """Controller over the fast mock"""
    controller = UploadController(uploader=mock_uploader, max_concurrent=2)
    yield controller
    controller.shutdown(timeout=5.0)

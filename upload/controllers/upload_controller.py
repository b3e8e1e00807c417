"""
Upload Controller

High-level coordinator for the uploader.
Wires validation, the upload queue and the uploaded-files listing together.

This is the one object an application or the CLI talks to:
- add_files() validates a batch and queues the accepted files
- start_upload() starts the queue
- retry() / remove() act on individual entries
- file_list shows what is already stored, refreshed after every success
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from upload.constants import (
    ACCEPTED_MIME_TYPES,
    DEFAULT_PAGE_SIZE,
    MAX_CONCURRENT_UPLOADS,
    MAX_FILE_SIZE_BYTES,
    REMOVE_COMPLETED_ENTRIES,
)
from upload.controllers.file_list_controller import FileListController
from upload.controllers.queue_manager import EntryCallback, UploadQueueManager
from upload.factory import create_uploader
from upload.interfaces.uploader_interface import UploaderInterface
from upload.models.upload_entry import FileSource, UploadEntry, ValidationReport
from upload.utils.validation_utils import validate_files


class UploadController:
    """
    High-level file upload controller.

    This class:
    - Validates batches (size limit, MIME allow-list)
    - Queues accepted files and uploads them with bounded concurrency
    - Refreshes the uploaded files listing after each success
    - Exposes retry/remove for individual entries

    Usage:
        controller = UploadController()

        report = controller.add_files([FileSource.from_path("cat.png")])
        for rejected in report.rejected:
            print(rejected.message)

        controller.start_upload()
        controller.wait_until_idle()
    """

    def __init__(
        self,
        uploader: Optional[UploaderInterface] = None,
        max_concurrent: int = MAX_CONCURRENT_UPLOADS,
        max_file_size: int = MAX_FILE_SIZE_BYTES,
        accepted_types: Iterable[str] = ACCEPTED_MIME_TYPES,
        remove_completed: bool = REMOVE_COMPLETED_ENTRIES,
        page_size: int = DEFAULT_PAGE_SIZE,
        auto_start: bool = False,
        on_entry_update: Optional[EntryCallback] = None,
    ):
        """
        Initialize upload controller.

        Args:
            uploader: UploaderInterface implementation, or None to auto-create
            max_concurrent: Upload slots
            max_file_size: Per-file size limit in bytes
            accepted_types: Allowed MIME types
            remove_completed: Drop entries from the queue view on success
            page_size: Uploaded files shown per page
            auto_start: Start uploading as soon as files are added
            on_entry_update: Listener for entry state changes (UI hook)

        Example:
            # Normal usage - auto-creates from .env
            controller = UploadController()

            # Custom uploader (testing)
            controller = UploadController(uploader=MockUploader())
        """
        self.logger = logging.getLogger(__name__)

        # Create or use provided uploader
        self.uploader = uploader or create_uploader()
        self.max_file_size = max_file_size
        self.accepted_types = tuple(accepted_types)
        self.auto_start = auto_start

        self.file_list = FileListController(self.uploader, page_size=page_size)
        self.queue = UploadQueueManager(
            self.uploader,
            max_concurrent=max_concurrent,
            remove_completed=remove_completed,
            on_entry_update=on_entry_update,
            on_upload_complete=self._on_upload_complete,
        )

        if not self.uploader.is_available():
            self.logger.warning(
                "Uploader initialized but not available. "
                "Check UPLOAD_API_BASE_URL and network connection.",
            )

        self.logger.info("Upload Controller initialized")

    # =========================================================================
    # QUEUE OPERATIONS
    # =========================================================================

    def add_files(self, sources: Iterable[FileSource]) -> ValidationReport:
        """
        Validate a batch and queue the accepted files.

        Rejected files are reported in the returned report (and logged);
        they never affect the rest of the batch.

        Returns:
            ValidationReport with accepted entries and rejections

        Example:
            report = controller.add_files(sources)
            print(f"{len(report.accepted)} queued, {len(report.rejected)} rejected")
        """
        report = validate_files(
            sources,
            max_size=self.max_file_size,
            accepted_types=self.accepted_types,
        )

        for rejected in report.rejected:
            self.logger.warning(rejected.message)

        if report.accepted:
            self.queue.enqueue(report.accepted)
            if self.auto_start:
                self.queue.drain()

        return report

    def start_upload(self) -> int:
        """
        Start uploading queued files.

        Returns:
            Number of uploads started now (the rest follow as slots free up)
        """
        if not self.queue.pending_count:
            self.logger.error("No files to upload")
            return 0

        return self.queue.drain()

    def retry(self, entry_id: str) -> UploadEntry:
        """Retry a failed entry (see UploadQueueManager.retry)"""
        return self.queue.retry(entry_id)

    def remove(self, entry_id: str) -> bool:
        """Remove an entry in any state (see UploadQueueManager.remove)"""
        return self.queue.remove(entry_id)

    def retry_failed(self) -> int:
        """
        Retry every entry currently in error state.

        Returns:
            Number of entries re-queued
        """
        failed = [entry for entry in self.queue.entries if entry.is_failed]
        for entry in failed:
            self.queue.retry(entry.entry_id)
        return len(failed)

    @property
    def entries(self) -> List[UploadEntry]:
        return self.queue.entries

    def wait_until_idle(self, timeout: Optional[float] = None) -> bool:
        return self.queue.wait_until_idle(timeout)

    # =========================================================================
    # LISTING
    # =========================================================================

    def refresh_files(self) -> bool:
        """Re-fetch the current page of uploaded files"""
        return self.file_list.refresh()

    def _on_upload_complete(self, entry: UploadEntry) -> None:
        self.logger.info(f"{entry.name} uploaded successfully")
        self.file_list.refresh()

    # =========================================================================
    # STATUS
    # =========================================================================

    def is_ready(self) -> bool:
        """
        Check if uploader is ready to upload.

        Returns:
            True if the file service is configured
        """
        return self.uploader.is_available()

    def get_status(self) -> Dict[str, Any]:
        """
        Get current controller status.

        Example:
            status = controller.get_status()
            print(f"Ready: {status['ready']}")
            print(f"Active uploads: {status['queue']['active']}")
        """
        return {
            "ready": self.is_ready(),
            "uploader_type": type(self.uploader).__name__,
            "queue": self.queue.get_status(),
            "listing": self.file_list.get_status(),
        }

    def shutdown(self, timeout: Optional[float] = None) -> None:
        """
        Stop the queue and release every preview.

        Args:
            timeout: Seconds to wait for in-flight workers, or None to not wait
        """
        self.queue.shutdown(timeout=timeout)
        self.logger.info("Upload Controller shutdown")

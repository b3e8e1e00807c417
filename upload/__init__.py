"""
Upload Module

Browser-style file uploader client: validate a batch of files, upload them
with bounded concurrency, and browse the paged list of stored files.

Public API:
    - UploadController: High-level upload coordinator
    - UploadQueueManager: Bounded-concurrency upload queue
    - FileSource / UploadEntry: Files and their upload lifecycle
    - validate_files: Batch validation
    - create_uploader: Factory function

Usage:
    from upload import FileSource, UploadController

    controller = UploadController()
    controller.add_files([FileSource.from_path("/path/to/photo.png")])
    controller.start_upload()
    controller.wait_until_idle()
"""

from upload.constants import EntryStatus, RejectionReason, UploadStatus
from upload.controllers.file_list_controller import FileListController
from upload.controllers.queue_manager import (
    EntryNotFoundError,
    InvalidEntryStateError,
    QueueError,
    UploadQueueManager,
)
from upload.controllers.upload_controller import UploadController
from upload.factory import create_uploader
from upload.interfaces.uploader_interface import (
    ListingFetchError,
    TransferError,
    UploaderError,
    UploaderInterface,
    UploadResult,
)
from upload.models import (
    FilePage,
    FileSource,
    RejectedFile,
    UploadedFileRecord,
    UploadEntry,
    ValidationReport,
)
from upload.utils.validation_utils import validate_files

# Public API
__all__ = [
    "EntryNotFoundError",
    "EntryStatus",
    "FileListController",
    "FilePage",
    "FileSource",
    "InvalidEntryStateError",
    "ListingFetchError",
    "QueueError",
    "RejectedFile",
    "RejectionReason",
    "TransferError",
    "UploadController",
    "UploadEntry",
    "UploadQueueManager",
    "UploadResult",
    "UploadStatus",
    "UploadedFileRecord",
    "UploaderError",
    "UploaderInterface",
    "ValidationReport",
    "create_uploader",
    "validate_files",
]

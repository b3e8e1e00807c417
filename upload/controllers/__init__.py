"""
Controllers Package

Upload queue, upload task, listing and the high-level coordinator.
"""

from upload.controllers.file_list_controller import FileListController
from upload.controllers.queue_manager import (
    EntryNotFoundError,
    InvalidEntryStateError,
    QueueError,
    UploadQueueManager,
)
from upload.controllers.upload_controller import UploadController
from upload.controllers.upload_task import UploadTask

__all__ = [
    "EntryNotFoundError",
    "FileListController",
    "InvalidEntryStateError",
    "QueueError",
    "UploadController",
    "UploadQueueManager",
    "UploadTask",
]

"""
Upload Task

Wraps a single file transfer for one queue entry.
The task performs exactly one attempt; retrying is the queue's job and only
happens when the caller asks for it.
"""

import logging
import time
from typing import Optional

from upload.constants import DEFAULT_UPLOAD_ERROR, UploadStatus
from upload.interfaces.uploader_interface import (
    ProgressCallback,
    UploaderInterface,
    UploadResult,
)
from upload.models.upload_entry import UploadEntry


class UploadTask:
    """
    One transfer of one entry's payload.

    Split in two steps so the queue can keep its bookkeeping atomic:
    - run(): blocking network call, executed on a worker thread
    - apply(): status transition, executed under the queue lock

    Usage:
        task = UploadTask(entry, uploader)
        result = task.run()
        task.apply(result)
    """

    def __init__(
        self,
        entry: UploadEntry,
        uploader: UploaderInterface,
        progress_callback: Optional[ProgressCallback] = None,
    ):
        self.logger = logging.getLogger(__name__)
        self.entry = entry
        self.uploader = uploader
        self.progress_callback = progress_callback

    @property
    def entry_id(self) -> str:
        return self.entry.entry_id

    def run(self) -> UploadResult:
        """
        Perform the transfer.

        Never raises: anything the uploader throws becomes a failed result.

        Returns:
            UploadResult from the uploader
        """
        start_time = time.time()
        source = self.entry.source

        try:
            result = self.uploader.upload_file(
                source,
                progress_callback=self.progress_callback,
            )
        except Exception as e:
            self.logger.error(
                f"Unexpected upload error for {source.name}: {e}",
                exc_info=True,
            )
            return UploadResult(
                success=False,
                status=UploadStatus.FAILED,
                error_message=f"Unexpected upload error: {e}",
                upload_duration=time.time() - start_time,
                file_size=source.size,
            )

        if result.success and not result.url:
            return UploadResult(
                success=False,
                status=UploadStatus.INVALID_RESPONSE,
                error_message="Upload succeeded but no file url was returned",
                upload_duration=result.upload_duration,
                file_size=source.size,
            )

        return result

    def apply(self, result: UploadResult) -> None:
        """
        Record the outcome on the entry.

        Success: completed, progress 100, locator set.
        Failure: error with cause, progress left at its last value.
        """
        if result.success:
            self.entry.mark_completed(result.url, result.key)
            self.logger.info(f"✅ {self.entry.name} uploaded: {result.url}")
        else:
            error = result.error_message or DEFAULT_UPLOAD_ERROR
            self.entry.mark_failed(error)
            self.logger.error(
                f"❌ Failed to upload {self.entry.name}: {error} "
                f"(status: {result.status.value})",
            )

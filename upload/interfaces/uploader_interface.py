"""
Uploader Interface

Abstract interface for file service clients.
Follows Dependency Inversion Principle - the queue depends on this abstraction,
not on a concrete HTTP client.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Optional

from upload.constants import UploadStatus
from upload.models.file_record import FilePage
from upload.models.upload_entry import FileSource

# Receives an upload percentage (0-100)
ProgressCallback = Callable[[int], None]


@dataclass
class UploadResult:
    """
    Result of an upload operation.

    Attributes:
        success: True if the file service stored the file
        url: Public locator of the stored file (if successful)
        key: Object key the file was stored under (if successful)
        status: Upload status code
        error_message: Error description (if failed)
        upload_duration: Time taken to upload in seconds
        file_size: Size of uploaded file in bytes
    """

    success: bool
    url: Optional[str] = None
    key: Optional[str] = None
    status: UploadStatus = UploadStatus.SUCCESS
    error_message: Optional[str] = None
    upload_duration: float = 0.0
    file_size: int = 0


class UploaderInterface(ABC):
    """
    Abstract base class for file service clients.

    Any implementation (HTTP, in-memory mock, ...) must implement these
    methods.
    """

    @abstractmethod
    def upload_file(
        self,
        source: FileSource,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> UploadResult:
        """
        Transfer one file to the file service.

        Performs exactly one attempt. Transfer failures are reported in the
        returned result, not raised.

        Args:
            source: File to upload
            progress_callback: Called with best-effort progress percentages

        Returns:
            UploadResult with success status and locator

        Example:
            result = uploader.upload_file(FileSource.from_path("cat.png"))
            if result.success:
                print(result.url)
        """

    @abstractmethod
    def list_files(self, page: int, limit: int) -> FilePage:
        """
        Fetch one page of uploaded file records, newest first.

        Args:
            page: 1-based page number
            limit: Records per page

        Returns:
            FilePage with records and totals

        Raises:
            ListingFetchError: If the listing cannot be fetched
        """

    @abstractmethod
    def is_available(self) -> bool:
        """
        Check if the uploader is configured and ready.

        Returns:
            True if uploads can be attempted
        """


class UploaderError(Exception):
    """
    Exception raised for file service errors.

    Carries an UploadStatus so callers can tell failures apart.
    """

    def __init__(self, message: str, status: UploadStatus = UploadStatus.FAILED):
        super().__init__(message)
        self.status = status


class TransferError(UploaderError):
    """
    A single file transfer failed.

    Examples:
    - Network error or timeout
    - Non-2xx response
    - Malformed response body
    """


class ListingFetchError(UploaderError):
    """Fetching a page of uploaded files failed"""

"""
HTTP Uploader Implementation

Concrete implementation of UploaderInterface for the file service HTTP API:
- POST /upload   multipart form, field "file"
- GET  /files    ?page=P&limit=L, newest first
"""

import logging
import time
from typing import Any, Optional

import requests

from config.settings import FILES_ENDPOINT_PATH, UPLOAD_ENDPOINT_PATH
from upload.constants import (
    DEFAULT_UPLOAD_ERROR,
    HTTP_TIMEOUT,
    UPLOAD_FORM_FIELD,
    UploadStatus,
)
from upload.interfaces.uploader_interface import (
    ListingFetchError,
    ProgressCallback,
    TransferError,
    UploaderInterface,
    UploadResult,
)
from upload.models.file_record import FilePage, UploadedFileRecord
from upload.models.upload_entry import FileSource


def _is_success(response: requests.Response) -> bool:
    """Only 2xx counts; redirects and errors are failures"""
    return 200 <= response.status_code < 300


class HttpUploader(UploaderInterface):
    """
    File service client using requests.

    Features:
    - One multipart request per upload (no internal retry)
    - Structured error mapping (network, timeout, HTTP status, bad body)
    - Paged listing of stored file records
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = HTTP_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize HTTP uploader.

        Args:
            base_url: File service root, e.g. "http://localhost:3000/api"
            timeout: Per-request timeout in seconds
            session: Pre-built requests session (tests inject a mock)

        Example:
            uploader = HttpUploader("http://localhost:3000/api")
        """
        self.logger = logging.getLogger(__name__)

        if not base_url:
            raise ValueError("HttpUploader requires a base_url")

        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

        self.logger.info(f"HTTP Uploader initialized ({self.base_url})")

    @property
    def upload_url(self) -> str:
        return f"{self.base_url}{UPLOAD_ENDPOINT_PATH}"

    @property
    def files_url(self) -> str:
        return f"{self.base_url}{FILES_ENDPOINT_PATH}"

    def upload_file(
        self,
        source: FileSource,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> UploadResult:
        """
        Upload a file with a single multipart POST.

        Progress is best effort: requests sends the body in one go, so only
        the start (0) and successful end (100) are reported.
        """
        start_time = time.time()

        try:
            self.logger.info(
                f"Starting upload: {source.name} ({source.size} bytes)",
            )
            if progress_callback:
                progress_callback(0)

            with source.open() as stream:
                response = self._post_file(source, stream)

            url, key = self._parse_upload_response(response)

            if progress_callback:
                progress_callback(100)

            upload_duration = time.time() - start_time
            self.logger.info(
                f"✅ Upload successful: {source.name} -> {url} "
                f"({upload_duration:.1f}s)",
            )

            return UploadResult(
                success=True,
                url=url,
                key=key,
                status=UploadStatus.SUCCESS,
                upload_duration=upload_duration,
                file_size=source.size,
            )

        except TransferError as e:
            upload_duration = time.time() - start_time
            self.logger.error(f"Upload failed: {source.name}: {e}")
            return UploadResult(
                success=False,
                status=e.status,
                error_message=str(e),
                upload_duration=upload_duration,
                file_size=source.size,
            )

        except OSError as e:
            # Payload could not be read from disk
            upload_duration = time.time() - start_time
            error_msg = f"Cannot read {source.name}: {e}"
            self.logger.error(error_msg)
            return UploadResult(
                success=False,
                status=UploadStatus.FAILED,
                error_message=error_msg,
                upload_duration=upload_duration,
                file_size=source.size,
            )

    def _post_file(self, source: FileSource, stream) -> requests.Response:
        """
        Send the multipart request.

        Raises:
            TransferError: On timeout or connection problems
        """
        files = {UPLOAD_FORM_FIELD: (source.name, stream, source.mime_type)}
        try:
            return self.session.post(
                self.upload_url,
                files=files,
                timeout=self.timeout,
            )
        except requests.Timeout as e:
            raise TransferError(
                f"Upload timed out after {self.timeout}s",
                status=UploadStatus.TIMEOUT,
            ) from e
        except requests.RequestException as e:
            raise TransferError(
                f"Network error: {e}",
                status=UploadStatus.NETWORK_ERROR,
            ) from e

    def _parse_upload_response(self, response: requests.Response):
        """
        Extract (url, key) from a POST /upload response.

        Raises:
            TransferError: On non-2xx status or malformed body
        """
        body = self._json_or_none(response)

        if not _is_success(response):
            message = DEFAULT_UPLOAD_ERROR
            if isinstance(body, dict) and body.get("error"):
                message = str(body["error"])
            raise TransferError(
                f"{message} (HTTP {response.status_code})",
                status=UploadStatus.HTTP_ERROR,
            )

        if not isinstance(body, dict):
            raise TransferError(
                "Malformed response: expected a JSON object",
                status=UploadStatus.INVALID_RESPONSE,
            )

        if body.get("success") is False:
            raise TransferError(
                str(body.get("error") or DEFAULT_UPLOAD_ERROR),
                status=UploadStatus.FAILED,
            )

        url = body.get("url")
        if not isinstance(url, str) or not url:
            raise TransferError(
                "Malformed response: missing file url",
                status=UploadStatus.INVALID_RESPONSE,
            )

        key = body.get("key")
        return url, key if isinstance(key, str) else None

    def list_files(self, page: int, limit: int) -> FilePage:
        """Fetch one page of uploaded file records"""
        try:
            response = self.session.get(
                self.files_url,
                params={"page": page, "limit": limit},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise ListingFetchError(
                f"Failed to fetch uploaded files: {e}",
                status=UploadStatus.NETWORK_ERROR,
            ) from e

        if not _is_success(response):
            raise ListingFetchError(
                f"Failed to fetch uploaded files (HTTP {response.status_code})",
                status=UploadStatus.HTTP_ERROR,
            )

        body = self._json_or_none(response)
        try:
            return FilePage(
                files=[UploadedFileRecord.from_dict(item) for item in body["files"]],
                total=int(body["total"]),
                page=int(body.get("page", page)),
                total_pages=int(body["totalPages"]),
            )
        except (TypeError, KeyError, ValueError) as e:
            raise ListingFetchError(
                f"Malformed listing response: {e}",
                status=UploadStatus.INVALID_RESPONSE,
            ) from e

    def _json_or_none(self, response: requests.Response) -> Optional[Any]:
        try:
            return response.json()
        except ValueError:
            self.logger.debug(
                f"Response body is not JSON (HTTP {response.status_code})",
            )
            return None

    def is_available(self) -> bool:
        """HTTP uploader is ready once it has a base URL"""
        return bool(self.base_url)

    def close(self) -> None:
        """Close the underlying HTTP session"""
        self.session.close()

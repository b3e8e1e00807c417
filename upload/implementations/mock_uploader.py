"""
Mock Uploader Implementation

Simulated file service for testing without a network.
Keeps stored file records in memory and serves them with the same
skip/limit pagination as the real GET /files endpoint.
"""

import logging
import math
import random
import threading
import time
from datetime import datetime, timedelta
from typing import List, Optional
from uuid import uuid4

from config.settings import MOCK_BUCKET_URL, MOCK_UPLOAD_SPEED_BPS
from upload.constants import UploadStatus
from upload.interfaces.uploader_interface import (
    ListingFetchError,
    ProgressCallback,
    TransferError,
    UploaderInterface,
    UploadResult,
)
from upload.models.file_record import FilePage, UploadedFileRecord
from upload.models.upload_entry import FileSource


class MockUploader(UploaderInterface):
    """
    Mock file service client for testing.

    This simulates upload timing and behavior without actually uploading.
    Useful for:
    - Unit tests (hold uploads in flight, then release them one by one)
    - Development without a running file service
    - Exercising error paths (fail_rate, fail_names, fail_listing)
    """

    def __init__(
        self,
        simulate_timing: bool = False,
        fail_rate: float = 0.0,
        fail_names: Optional[set] = None,
        hold_uploads: bool = False,
        hold_timeout: float = 10.0,
        bucket_url: str = MOCK_BUCKET_URL,
    ):
        """
        Initialize mock uploader.

        Args:
            simulate_timing: If True, sleep as if transferring at ~5 MB/s
            fail_rate: Probability of upload failure (0.0 to 1.0)
            fail_names: File names whose uploads always fail
            hold_uploads: If True, uploads block until release_uploads()
            hold_timeout: Seconds a held upload waits before timing out
            bucket_url: Public URL prefix for stored objects

        Example:
            # Fast mock for unit tests
            uploader = MockUploader()

            # Deterministic concurrency tests
            uploader = MockUploader(hold_uploads=True)
            ...
            uploader.release_uploads("a.png")
        """
        self.logger = logging.getLogger(__name__)
        self.simulate_timing = simulate_timing
        self.fail_rate = fail_rate
        self.fail_names = set(fail_names or ())
        self.hold_uploads = hold_uploads
        self.hold_timeout = hold_timeout
        self.bucket_url = bucket_url.rstrip("/")

        # Listing failure switch for stale-listing tests
        self.fail_listing = False

        # Server-side state
        self._records: List[UploadedFileRecord] = []

        # In-flight tracking (uploads run on caller threads)
        self._condition = threading.Condition()
        self._in_flight: List[dict] = []
        self.started_names: List[str] = []
        self.max_in_flight = 0

        # Track upload history for testing
        self.upload_history: list[dict] = []
        self.list_calls: list[tuple] = []

        self.logger.info(
            f"Mock Uploader initialized "
            f"(timing: {simulate_timing}, fail_rate: {fail_rate}, "
            f"hold: {hold_uploads})",
        )

    # =========================================================================
    # UPLOADER INTERFACE
    # =========================================================================

    def upload_file(
        self,
        source: FileSource,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> UploadResult:
        """Simulate POST /upload"""
        start_time = time.time()
        slot = {"name": source.name, "released": threading.Event()}

        with self._condition:
            self._in_flight.append(slot)
            self.started_names.append(source.name)
            self.max_in_flight = max(self.max_in_flight, len(self._in_flight))
            self._condition.notify_all()

        try:
            self.logger.info(
                f"[MOCK] Starting upload: {source.name} ({source.size} bytes)",
            )
            if progress_callback:
                progress_callback(0)

            if self.hold_uploads and not slot["released"].wait(self.hold_timeout):
                raise TransferError(
                    f"Held upload not released within {self.hold_timeout}s",
                    status=UploadStatus.TIMEOUT,
                )

            if self.simulate_timing:
                self._simulate_transfer(source, progress_callback)

            if source.name in self.fail_names or random.random() < self.fail_rate:
                raise TransferError(
                    "Simulated upload failure",
                    status=UploadStatus.NETWORK_ERROR,
                )

            record, key = self._store(source)
            upload_duration = time.time() - start_time

            self.upload_history.append(
                {
                    "name": source.name,
                    "size": source.size,
                    "mime_type": source.mime_type,
                    "url": record.url,
                    "timestamp": time.time(),
                },
            )

            self.logger.info(
                f"[MOCK] ✅ Upload successful: {record.url} "
                f"({upload_duration:.1f}s)",
            )

            return UploadResult(
                success=True,
                url=record.url,
                key=key,
                status=UploadStatus.SUCCESS,
                upload_duration=upload_duration,
                file_size=source.size,
            )

        except TransferError as e:
            self.logger.error(f"[MOCK] Upload failed: {source.name}: {e}")
            return UploadResult(
                success=False,
                status=e.status,
                error_message=str(e),
                upload_duration=time.time() - start_time,
                file_size=source.size,
            )

        finally:
            with self._condition:
                self._in_flight.remove(slot)
                self._condition.notify_all()

    def _simulate_transfer(
        self,
        source: FileSource,
        progress_callback: Optional[ProgressCallback],
    ) -> None:
        """Sleep in steps proportional to file size, reporting progress"""
        upload_seconds = source.size / MOCK_UPLOAD_SPEED_BPS
        steps = 4
        for step in range(1, steps + 1):
            time.sleep(upload_seconds / steps)
            if progress_callback and step < steps:
                progress_callback(step * 100 // steps)

    def _store(self, source: FileSource):
        """Persist a record the way the file service does"""
        key = f"uploads/{int(time.time() * 1000)}-{source.name}"
        record = UploadedFileRecord(
            identifier=uuid4().hex[:24],
            name=source.name,
            url=f"{self.bucket_url}/{key}",
            size=source.size,
            mime_type=source.mime_type,
            uploaded_at=datetime.now(),
        )
        with self._condition:
            self._records.append(record)
        return record, key

    def list_files(self, page: int, limit: int) -> FilePage:
        """Simulate GET /files: newest first, skip/limit pagination"""
        self.list_calls.append((page, limit))

        if self.fail_listing:
            raise ListingFetchError(
                "Simulated listing failure",
                status=UploadStatus.NETWORK_ERROR,
            )
        if page < 1 or limit < 1:
            raise ListingFetchError(
                f"Invalid page request (page={page}, limit={limit})",
                status=UploadStatus.HTTP_ERROR,
            )

        with self._condition:
            ordered = sorted(
                enumerate(self._records),
                key=lambda pair: (pair[1].uploaded_at, pair[0]),
                reverse=True,
            )

        total = len(ordered)
        skip = (page - 1) * limit
        files = [record for _, record in ordered[skip:skip + limit]]

        return FilePage(
            files=files,
            total=total,
            page=page,
            total_pages=math.ceil(total / limit),
        )

    def is_available(self) -> bool:
        """Mock uploader is always available"""
        return True

    # =========================================================================
    # TESTING HELPER METHODS
    # =========================================================================

    def release_uploads(self, name: Optional[str] = None) -> int:
        """
        Let held uploads finish.

        Args:
            name: Release only in-flight uploads of this file, or all if None

        Returns:
            Number of uploads released
        """
        released = 0
        with self._condition:
            for slot in self._in_flight:
                if name is not None and slot["name"] != name:
                    continue
                if not slot["released"].is_set():
                    slot["released"].set()
                    released += 1
        return released

    def wait_for_in_flight(self, count: int, timeout: float = 5.0) -> bool:
        """
        Block until exactly count uploads are in flight.

        Returns:
            True if reached, False on timeout
        """
        with self._condition:
            return self._condition.wait_for(
                lambda: len(self._in_flight) == count,
                timeout=timeout,
            )

    def wait_for_started(self, count: int, timeout: float = 5.0) -> bool:
        """Block until at least count uploads have started"""
        with self._condition:
            return self._condition.wait_for(
                lambda: len(self.started_names) >= count,
                timeout=timeout,
            )

    def get_in_flight_names(self) -> List[str]:
        with self._condition:
            return [slot["name"] for slot in self._in_flight]

    def add_fake_record(
        self,
        name: str,
        size: int = 1024,
        mime_type: str = "application/pdf",
        uploaded_at: Optional[datetime] = None,
    ) -> UploadedFileRecord:
        """Pre-load a stored file record (for listing tests)"""
        key = f"uploads/{uuid4().hex[:8]}-{name}"
        record = UploadedFileRecord(
            identifier=uuid4().hex[:24],
            name=name,
            url=f"{self.bucket_url}/{key}",
            size=size,
            mime_type=mime_type,
            uploaded_at=uploaded_at or datetime.now(),
        )
        with self._condition:
            self._records.append(record)
        return record

    def add_fake_records(self, count: int, prefix: str = "file") -> None:
        """Pre-load count records with strictly increasing upload times"""
        base = datetime.now() - timedelta(minutes=count)
        for index in range(count):
            self.add_fake_record(
                f"{prefix}_{index:03d}.pdf",
                uploaded_at=base + timedelta(minutes=index),
            )

    def get_upload_history(self) -> list[dict]:
        return self.upload_history.copy()

    def get_records(self) -> List[UploadedFileRecord]:
        with self._condition:
            return list(self._records)

    def clear_history(self) -> None:
        """Clear upload history"""
        self.upload_history.clear()
        self.started_names.clear()
        self.logger.debug("[MOCK] Upload history cleared")

    def was_uploaded(self, name: str) -> bool:
        return any(record["name"] == name for record in self.upload_history)

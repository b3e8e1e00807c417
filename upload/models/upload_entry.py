"""
Upload Entry Models

Data classes representing files moving through the upload queue.
"""

import io
import mimetypes
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, BinaryIO, List, Optional, Union
from uuid import uuid4

from upload.constants import (
    DEFAULT_MIME_TYPE,
    PREVIEWABLE_MIME_PREFIX,
    EntryStatus,
    RejectionReason,
)

if TYPE_CHECKING:
    from upload.utils.preview_utils import PreviewHandle


@dataclass
class FileSource:
    """
    A candidate file: name, size, MIME type and its payload.

    The payload is either in-memory bytes or a path on disk.
    """

    name: str
    size: int
    mime_type: str
    data: Optional[bytes] = None
    path: Optional[Path] = None

    def __post_init__(self):
        """Ensure path is a Path object and a payload exists"""
        if self.path is not None and not isinstance(self.path, Path):
            self.path = Path(self.path)
        if self.data is None and self.path is None:
            raise ValueError(f"FileSource {self.name!r} has no data or path")

    @classmethod
    def from_path(
        cls,
        path: Union[str, Path],
        mime_type: Optional[str] = None,
    ) -> "FileSource":
        """
        Describe a file on disk.

        Args:
            path: File to upload
            mime_type: Override the type guessed from the filename

        Example:
            source = FileSource.from_path("/tmp/report.pdf")
            # source.mime_type == "application/pdf"
        """
        path = Path(path)
        if mime_type is None:
            mime_type, _ = mimetypes.guess_type(path.name)
        return cls(
            name=path.name,
            size=path.stat().st_size,
            mime_type=mime_type or DEFAULT_MIME_TYPE,
            path=path,
        )

    @classmethod
    def from_bytes(cls, name: str, data: bytes, mime_type: str) -> "FileSource":
        """Describe in-memory content"""
        return cls(name=name, size=len(data), mime_type=mime_type, data=data)

    @property
    def is_image(self) -> bool:
        return self.mime_type.startswith(PREVIEWABLE_MIME_PREFIX)

    def open(self) -> BinaryIO:
        """Open a fresh binary stream over the payload"""
        if self.data is not None:
            return io.BytesIO(self.data)
        return open(self.path, "rb")

    def read_bytes(self) -> bytes:
        if self.data is not None:
            return self.data
        return self.path.read_bytes()


@dataclass
class UploadEntry:
    """
    One file's upload lifecycle record.

    Lifecycle:
        pending → uploading → completed
                      ↓
                    error → (retry) → pending
    """

    source: FileSource

    # Identity: compared by value, never by object reference
    entry_id: str = field(default_factory=lambda: uuid4().hex)

    # Upload tracking
    status: EntryStatus = EntryStatus.PENDING
    progress: int = 0  # 0-100, best effort
    url: Optional[str] = None  # Locator, set iff completed
    key: Optional[str] = None  # Object key reported by the server
    error: Optional[str] = None  # Set iff error
    attempts: int = 0

    # Local preview for images (owned by the entry)
    preview: Optional["PreviewHandle"] = None

    # Timestamps
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)

    @property
    def name(self) -> str:
        return self.source.name

    @property
    def is_pending(self) -> bool:
        return self.status == EntryStatus.PENDING

    @property
    def is_uploading(self) -> bool:
        return self.status == EntryStatus.UPLOADING

    @property
    def is_completed(self) -> bool:
        return self.status == EntryStatus.COMPLETED

    @property
    def is_failed(self) -> bool:
        return self.status == EntryStatus.ERROR

    @property
    def can_retry(self) -> bool:
        """Only failed entries can be retried"""
        return self.is_failed

    def mark_uploading(self) -> None:
        """Mark entry as admitted to a slot"""
        self.status = EntryStatus.UPLOADING
        self.attempts += 1
        self.updated_at = datetime.now()

    def mark_completed(self, url: str, key: Optional[str] = None) -> None:
        """Mark entry as stored at url"""
        self.status = EntryStatus.COMPLETED
        self.progress = 100
        self.url = url
        self.key = key
        self.error = None
        self.updated_at = datetime.now()

    def mark_failed(self, error: str) -> None:
        """Mark entry as failed, keeping last known progress"""
        self.status = EntryStatus.ERROR
        self.error = error
        self.updated_at = datetime.now()

    def reset_for_retry(self) -> None:
        """Put a failed entry back into pending state"""
        self.status = EntryStatus.PENDING
        self.progress = 0
        self.error = None
        self.updated_at = datetime.now()

    def update_progress(self, percent: int) -> None:
        self.progress = max(0, min(100, int(percent)))
        self.updated_at = datetime.now()

    def release_preview(self) -> None:
        """Release the owned preview handle, if any (safe to call twice)"""
        if self.preview is not None:
            self.preview.release()

    def to_dict(self) -> dict:
        """Convert to dictionary for display or logging"""
        return {
            "entry_id": self.entry_id,
            "name": self.source.name,
            "size": self.source.size,
            "mime_type": self.source.mime_type,
            "status": self.status.value,
            "progress": self.progress,
            "url": self.url,
            "key": self.key,
            "error": self.error,
            "attempts": self.attempts,
            "preview": str(self.preview.path) if self.preview else None,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }


@dataclass
class RejectedFile:
    """A file refused by validation, with the reason shown to the user"""

    source: FileSource
    reason: RejectionReason
    message: str


@dataclass
class ValidationReport:
    """Result of validating a batch: accepted entries and rejected files"""

    accepted: List[UploadEntry] = field(default_factory=list)
    rejected: List[RejectedFile] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.accepted) + len(self.rejected)

    @property
    def all_accepted(self) -> bool:
        return not self.rejected

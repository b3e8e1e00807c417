"""
Upload Constants

Enums and fixed values for the upload module.
Tunable limits live in config/settings.py and are re-exported here so
upload code has a single import point.
"""

from enum import Enum

from config.settings import (
    DEFAULT_PAGE_SIZE,
    HTTP_TIMEOUT,
    MAX_CONCURRENT_UPLOADS,
    MAX_FILE_SIZE_BYTES,
    REMOVE_COMPLETED_ENTRIES,
)

# =============================================================================
# ACCEPTED FILES
# =============================================================================

# Fixed allow-list: images, PDFs and Word documents
ACCEPTED_MIME_TYPES = (
    "image/jpeg",
    "image/png",
    "image/gif",
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
)

# MIME prefix that gets a local preview
PREVIEWABLE_MIME_PREFIX = "image/"

# Used when a file's type cannot be determined
DEFAULT_MIME_TYPE = "application/octet-stream"

# =============================================================================
# WIRE FORMAT
# =============================================================================

# Multipart form field carrying the file
UPLOAD_FORM_FIELD = "file"

# Fallback message when the server gives no error text
DEFAULT_UPLOAD_ERROR = "Upload failed"

# =============================================================================
# STATUS ENUMS
# =============================================================================


class EntryStatus(Enum):
    """Lifecycle of a single queued file"""

    PENDING = "pending"  # Waiting for a slot
    UPLOADING = "uploading"  # Transfer in flight
    COMPLETED = "completed"  # Stored, locator known
    ERROR = "error"  # Transfer failed, can be retried


class UploadStatus(Enum):
    """Upload operation status codes"""

    SUCCESS = "success"
    FAILED = "failed"
    TIMEOUT = "timeout"
    NETWORK_ERROR = "network_error"
    HTTP_ERROR = "http_error"
    INVALID_RESPONSE = "invalid_response"


class RejectionReason(Enum):
    """Why the validator refused a file"""

    TOO_LARGE = "too large"
    UNSUPPORTED_TYPE = "unsupported type"


__all__ = [
    "ACCEPTED_MIME_TYPES",
    "DEFAULT_MIME_TYPE",
    "DEFAULT_PAGE_SIZE",
    "DEFAULT_UPLOAD_ERROR",
    "HTTP_TIMEOUT",
    "MAX_CONCURRENT_UPLOADS",
    "MAX_FILE_SIZE_BYTES",
    "PREVIEWABLE_MIME_PREFIX",
    "REMOVE_COMPLETED_ENTRIES",
    "UPLOAD_FORM_FIELD",
    "EntryStatus",
    "RejectionReason",
    "UploadStatus",
]

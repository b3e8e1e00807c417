"""
Upload data models.
"""

from upload.models.file_record import FilePage, UploadedFileRecord
from upload.models.upload_entry import (
    FileSource,
    RejectedFile,
    UploadEntry,
    ValidationReport,
)

__all__ = [
    "FilePage",
    "FileSource",
    "RejectedFile",
    "UploadEntry",
    "UploadedFileRecord",
    "ValidationReport",
]

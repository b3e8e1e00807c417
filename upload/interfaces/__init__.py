"""
Interfaces Package

Abstract interfaces for file service clients.
"""

from upload.interfaces.uploader_interface import (
    ListingFetchError,
    ProgressCallback,
    TransferError,
    UploaderError,
    UploaderInterface,
    UploadResult,
)

__all__ = [
    "ListingFetchError",
    "ProgressCallback",
    "TransferError",
    "UploaderInterface",
    "UploadResult",
    "UploaderError",
]

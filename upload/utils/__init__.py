"""
Upload utilities: validation, previews and display formatting.
"""

from upload.utils.format_utils import format_limit_mb, format_size
from upload.utils.preview_utils import PreviewHandle, create_preview
from upload.utils.validation_utils import check_file, validate_files

__all__ = [
    "PreviewHandle",
    "check_file",
    "create_preview",
    "format_limit_mb",
    "format_size",
    "validate_files",
]

"""
Validation Utilities

Client-side checks run on a batch of candidate files before anything is
queued or sent over the network.
"""

import logging
from typing import Iterable, Optional, Tuple

from upload.constants import (
    ACCEPTED_MIME_TYPES,
    MAX_FILE_SIZE_BYTES,
    RejectionReason,
)
from upload.models.upload_entry import (
    FileSource,
    RejectedFile,
    UploadEntry,
    ValidationReport,
)
from upload.utils.format_utils import format_limit_mb
from upload.utils.preview_utils import PreviewHandle, create_preview


logger = logging.getLogger(__name__)


def check_file(
    source: FileSource,
    max_size: int = MAX_FILE_SIZE_BYTES,
    accepted_types: Iterable[str] = ACCEPTED_MIME_TYPES,
) -> Tuple[Optional[RejectionReason], Optional[str]]:
    """
    Check a single file against the size limit and MIME allow-list.

    Size is checked first, so an oversized file of an unsupported type is
    reported as too large.

    Returns:
        (None, None) if accepted, otherwise (reason, user-facing message)

    Example:
        reason, message = check_file(source)
        if reason is RejectionReason.TOO_LARGE:
            print(message)  # "big.pdf is too large. Maximum size is 10MB."
    """
    if source.size > max_size:
        return (
            RejectionReason.TOO_LARGE,
            f"{source.name} is too large. "
            f"Maximum size is {format_limit_mb(max_size)}.",
        )

    if source.mime_type not in set(accepted_types):
        return (
            RejectionReason.UNSUPPORTED_TYPE,
            f"{source.name} is not a supported file type.",
        )

    return None, None


def validate_files(
    sources: Iterable[FileSource],
    max_size: int = MAX_FILE_SIZE_BYTES,
    accepted_types: Iterable[str] = ACCEPTED_MIME_TYPES,
    create_previews: bool = True,
) -> ValidationReport:
    """
    Partition a batch into accepted entries and rejected files.

    Every file lands in exactly one of the two lists. A rejection never
    affects the other files in the batch. Accepted images get a local
    preview handle owned by their entry.

    Args:
        sources: Candidate files
        max_size: Maximum size in bytes (inclusive)
        accepted_types: Allowed MIME types
        create_previews: If False, skip preview creation for images

    Returns:
        ValidationReport with pending entries and rejections
    """
    accepted_types = tuple(accepted_types)
    report = ValidationReport()

    for source in sources:
        reason, message = check_file(source, max_size, accepted_types)

        if reason is not None:
            logger.warning(f"Rejected {source.name}: {reason.value}")
            report.rejected.append(
                RejectedFile(source=source, reason=reason, message=message),
            )
            continue

        entry = UploadEntry(source=source)
        if create_previews and source.is_image:
            entry.preview = _try_create_preview(source)
        report.accepted.append(entry)

    logger.debug(
        f"Validated {report.total} file(s): "
        f"{len(report.accepted)} accepted, {len(report.rejected)} rejected",
    )
    return report


def _try_create_preview(source: FileSource) -> Optional[PreviewHandle]:
    """A missing preview is cosmetic; the file is still accepted"""
    try:
        return create_preview(source)
    except OSError as e:
        logger.warning(f"Could not create preview for {source.name}: {e}")
        return None

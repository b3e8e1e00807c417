"""
Preview Utilities

Ephemeral local previews for image files.
A preview is a temporary copy of the image on disk; no network is involved.
The entry that owns a preview releases it when the entry is removed.
"""

import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Optional

from upload.models.upload_entry import FileSource


logger = logging.getLogger(__name__)


class PreviewHandle:
    """
    Handle to a temporary preview file.

    release() is idempotent: releasing twice is a no-op, not an error.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._lock = threading.Lock()
        self._released = False

    @property
    def released(self) -> bool:
        return self._released

    def release(self) -> bool:
        """
        Delete the preview file.

        Returns:
            True if this call released it, False if already released
        """
        with self._lock:
            if self._released:
                return False
            self._released = True

        try:
            self.path.unlink()
        except FileNotFoundError:
            logger.debug(f"Preview already gone: {self.path}")
        except OSError as e:
            logger.warning(f"Could not delete preview {self.path}: {e}")

        logger.debug(f"Preview released: {self.path}")
        return True

    def __repr__(self) -> str:
        state = "released" if self._released else "active"
        return f"PreviewHandle({self.path}, {state})"


def create_preview(
    source: FileSource,
    directory: Optional[Path] = None,
) -> PreviewHandle:
    """
    Write a temporary preview copy of an image.

    Args:
        source: Image to preview
        directory: Where to write the preview (system temp dir by default)

    Returns:
        PreviewHandle owning the temporary file

    Raises:
        OSError: If the payload cannot be read or the copy cannot be written

    Example:
        handle = create_preview(FileSource.from_path("cat.png"))
        show(handle.path)
        handle.release()
    """
    suffix = Path(source.name).suffix
    fd, temp_path = tempfile.mkstemp(
        prefix="preview_",
        suffix=suffix,
        dir=str(directory) if directory else None,
    )
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(source.read_bytes())
    except OSError:
        Path(temp_path).unlink(missing_ok=True)
        raise

    logger.debug(f"Preview created for {source.name}: {temp_path}")
    return PreviewHandle(Path(temp_path))

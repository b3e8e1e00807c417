"""
File List Controller

Paged view of files already stored by the file service.
Owns the current page and re-fetches on page change or after an upload.
"""

import logging
import threading
from typing import Any, Dict, List

from upload.constants import DEFAULT_PAGE_SIZE
from upload.interfaces.uploader_interface import (
    ListingFetchError,
    UploaderInterface,
)
from upload.models.file_record import FilePage, UploadedFileRecord


class FileListController:
    """
    Uploaded files listing with pagination.

    A failed fetch leaves the displayed page untouched (stale but
    consistent); the page number only moves when a fetch succeeds.

    Usage:
        listing = FileListController(uploader)
        listing.refresh()
        for record in listing.files:
            print(record.name, record.url)
        listing.next_page()
    """

    def __init__(
        self,
        uploader: UploaderInterface,
        page_size: int = DEFAULT_PAGE_SIZE,
    ):
        if page_size < 1:
            raise ValueError(f"page_size must be >= 1, got {page_size}")

        self.logger = logging.getLogger(__name__)
        self.uploader = uploader
        self.page_size = page_size

        self._lock = threading.Lock()
        self._page = FilePage(page=1, total_pages=1)
        self._loaded = False
        self.loading = False
        self.last_error: str = ""

    # =========================================================================
    # DISPLAYED STATE
    # =========================================================================

    @property
    def page(self) -> int:
        return self._page.page

    @property
    def files(self) -> List[UploadedFileRecord]:
        return list(self._page.files)

    @property
    def total(self) -> int:
        return self._page.total

    @property
    def total_pages(self) -> int:
        # An empty listing still shows "page 1 of 1"
        return max(1, self._page.total_pages)

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    # =========================================================================
    # NAVIGATION
    # =========================================================================

    def refresh(self) -> bool:
        """
        Re-fetch the current page.

        Returns:
            True if the listing was updated, False if the fetch failed
        """
        return self._fetch(self.page)

    def go_to_page(self, page: int) -> bool:
        """
        Fetch a page, clamped to 1..total_pages.

        Before the first successful fetch the page count is unknown, so only
        the lower bound applies.

        Returns:
            True if the listing was updated
        """
        target = max(1, page)
        if self._loaded:
            target = min(target, self.total_pages)
        return self._fetch(target)

    def next_page(self) -> bool:
        if not self.has_next:
            return False
        return self.go_to_page(self.page + 1)

    def previous_page(self) -> bool:
        if not self.has_previous:
            return False
        return self.go_to_page(self.page - 1)

    def _fetch(self, page: int) -> bool:
        with self._lock:
            self.loading = True
            try:
                result = self.uploader.list_files(page, self.page_size)
            except ListingFetchError as e:
                self.last_error = str(e)
                self.logger.error(f"Failed to fetch uploaded files: {e}")
                return False
            finally:
                self.loading = False

            self._page = result
            self._loaded = True
            self.last_error = ""

        self.logger.debug(
            f"Listing page {result.page}/{max(1, result.total_pages)} "
            f"({len(result.files)} of {result.total} files)",
        )
        return True

    def get_status(self) -> Dict[str, Any]:
        return {
            "page": self.page,
            "page_size": self.page_size,
            "total": self.total,
            "total_pages": self.total_pages,
            "shown": len(self._page.files),
            "loading": self.loading,
            "last_error": self.last_error or None,
        }

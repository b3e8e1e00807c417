"""
Upload Factory

Factory pattern for creating uploader implementations.
Automatically configures from environment variables.
"""

import logging
from typing import Literal, Optional

from config.settings import HTTP_TIMEOUT, UPLOAD_API_BASE_URL, UPLOADER_MODE
from upload.implementations.http_uploader import HttpUploader
from upload.implementations.mock_uploader import MockUploader
from upload.interfaces.uploader_interface import UploaderInterface

# Type alias
UploaderMode = Literal["auto", "http", "mock"]


class UploaderFactory:
    """
    Factory for creating uploader implementations.

    Reads configuration from environment variables:
    - UPLOAD_API_BASE_URL: Root URL of the file service
    - UPLOAD_HTTP_TIMEOUT: Per-request timeout in seconds
    - UPLOADER_MODE: "auto", "http" or "mock"

    Usage:
        # Auto-detect from environment
        uploader = UploaderFactory.create_uploader()

        # Force mock for testing
        uploader = UploaderFactory.create_uploader(mode="mock")
    """

    _logger = logging.getLogger(__name__)

    @classmethod
    def create_uploader(
        cls,
        mode: UploaderMode = "auto",
        base_url: Optional[str] = None,
        timeout: float = HTTP_TIMEOUT,
    ) -> UploaderInterface:
        """
        Create an uploader instance.

        Args:
            mode: "auto" (from env), "http" (force real), "mock" (force sim)
            base_url: Override UPLOAD_API_BASE_URL
            timeout: Per-request timeout for the HTTP uploader

        Returns:
            UploaderInterface implementation

        Raises:
            RuntimeError: If mode="http" but no base URL is configured
            ValueError: If mode is unknown
        """
        if mode == "mock":
            cls._logger.info("Creating Mock Uploader (forced)")
            return MockUploader()

        if mode == "http":
            try:
                uploader = cls._create_http_uploader(base_url, timeout)
            except ValueError as e:
                raise RuntimeError(
                    f"HTTP uploader requested but not available: {e}"
                ) from e
            cls._logger.info("Creating HTTP Uploader (forced)")
            return uploader

        if mode != "auto":
            raise ValueError(f"Unknown uploader mode: {mode}")

        # mode == "auto" - try HTTP first, fall back to mock
        try:
            uploader = cls._create_http_uploader(base_url, timeout)
            cls._logger.info("Creating HTTP Uploader (auto-detected)")
            return uploader
        except ValueError as e:
            cls._logger.warning(
                f"HTTP uploader not available ({e}), using Mock Uploader"
            )
            return MockUploader()

    @classmethod
    def _create_http_uploader(
        cls,
        base_url: Optional[str],
        timeout: float,
    ) -> HttpUploader:
        """
        Create HTTP uploader from argument or environment configuration.

        Raises:
            ValueError: If no base URL is configured
        """
        target_url = base_url or UPLOAD_API_BASE_URL
        if not target_url:
            raise ValueError(
                "UPLOAD_API_BASE_URL not set in environment. "
                "Add to .env file: UPLOAD_API_BASE_URL=http://localhost:3000/api"
            )
        return HttpUploader(target_url, timeout=timeout)

    @classmethod
    def is_http_available(cls) -> bool:
        """Check if an HTTP uploader can be created from the environment"""
        return bool(UPLOAD_API_BASE_URL)


# Convenience function for quick creation
def create_uploader(
    force_mock: bool = False,
    base_url: Optional[str] = None,
) -> UploaderInterface:
    """
    Quick uploader creation with simple mock override.

    Uses UPLOADER_MODE from the environment unless force_mock is set.

    Example:
        # Normal usage
        uploader = create_uploader()

        # Testing
        uploader = create_uploader(force_mock=True)
    """
    mode = "mock" if force_mock else UPLOADER_MODE
    return UploaderFactory.create_uploader(mode=mode, base_url=base_url)

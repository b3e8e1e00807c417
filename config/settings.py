"""
Central Configuration File

ALL configuration values live here. This is the single source of truth.

Guidelines:
- Deployment-specific values (API URL, limits) can be overridden from .env
- Import these settings in modules: from config.settings import MAX_FILE_SIZE_BYTES
- Components take these as constructor defaults, never as hidden global state
"""

import os

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# =============================================================================
# FILE SERVICE CONFIGURATION
# =============================================================================

# Base URL of the file service exposing POST /upload and GET /files
# Empty means "not configured" - the factory falls back to the mock uploader
UPLOAD_API_BASE_URL = os.getenv("UPLOAD_API_BASE_URL", "")

# Endpoint paths (relative to UPLOAD_API_BASE_URL)
UPLOAD_ENDPOINT_PATH = "/upload"
FILES_ENDPOINT_PATH = "/files"

# HTTP request timeout (seconds) for a single upload or listing call
HTTP_TIMEOUT = float(os.getenv("UPLOAD_HTTP_TIMEOUT", "30"))

# Uploader selection: "auto", "http" or "mock"
UPLOADER_MODE = os.getenv("UPLOADER_MODE", "auto")

# =============================================================================
# UPLOAD QUEUE CONFIGURATION
# =============================================================================

# Maximum simultaneous uploads (slots)
MAX_CONCURRENT_UPLOADS = int(os.getenv("UPLOAD_MAX_CONCURRENT", "2"))

# Per-file size limit, enforced before any network call
MAX_FILE_SIZE_BYTES = int(
    os.getenv("UPLOAD_MAX_FILE_SIZE", str(10 * 1024 * 1024)),
)  # 10 MB

# Drop completed entries from the visible queue once they succeed
REMOVE_COMPLETED_ENTRIES = _env_bool("UPLOAD_REMOVE_COMPLETED", True)

# =============================================================================
# LISTING CONFIGURATION
# =============================================================================

# Uploaded files shown per page
DEFAULT_PAGE_SIZE = int(os.getenv("UPLOAD_PAGE_SIZE", "5"))

# =============================================================================
# MOCK UPLOADER CONFIGURATION
# =============================================================================

# Public URL prefix used by the mock object store
MOCK_BUCKET_URL = os.getenv(
    "MOCK_BUCKET_URL",
    "https://mock-bucket.s3.us-east-1.amazonaws.com",
)

# Simulated transfer speed (bytes per second) when timing simulation is on
MOCK_UPLOAD_SPEED_BPS = 5 * 1024 * 1024  # 5 MB/s

# =============================================================================
# LOGGING CONFIGURATION
# =============================================================================

LOG_DIR = os.getenv("UPLOAD_LOG_DIR", "/var/log/file-uploader")
LOG_FILE = "uploader.log"
LOG_BACKUP_COUNT = 7  # Days of rotated logs to keep

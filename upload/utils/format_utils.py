"""
Format Utilities

Helpers for displaying files and entries.
"""


def format_size(size_bytes: float) -> str:
    """
    Format byte size as human-readable string.

    Args:
        size_bytes: Size in bytes

    Returns:
        Formatted string (e.g., "1.50 MB")

    Example:
        print(format_size(1_572_864))  # "1.50 MB"
    """
    for unit in ["B", "KB", "MB", "GB", "TB"]:
        if size_bytes < 1024.0:
            return f"{size_bytes:.2f} {unit}"
        size_bytes /= 1024.0
    return f"{size_bytes:.2f} PB"


def format_limit_mb(size_bytes: int) -> str:
    """Format a size limit as whole megabytes, e.g. "10MB" """
    return f"{size_bytes // (1024 * 1024)}MB"

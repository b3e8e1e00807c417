#!/usr/bin/env python3
"""
File Uploader - Command Line

Upload files to the file service and browse what is already stored.

Usage:
    python uploader_cli.py upload photo.png report.pdf   # Validate, queue, upload
    python uploader_cli.py list --page 2                 # Show stored files
    python uploader_cli.py --mock upload photo.png       # No network, in-memory

Behavior:
    - Files over the size limit or of unsupported types are rejected up front
    - At most --concurrency uploads run at the same time
    - Failed uploads are reported; --retry re-runs them once
    - Exit status is 1 if any file was rejected or failed
"""

import argparse
import logging
import logging.handlers
import sys
from pathlib import Path
from typing import List, Optional

from config.settings import (
    DEFAULT_PAGE_SIZE,
    LOG_BACKUP_COUNT,
    LOG_DIR,
    LOG_FILE,
    MAX_CONCURRENT_UPLOADS,
    REMOVE_COMPLETED_ENTRIES,
)
from upload import FileSource, UploadController, create_uploader
from upload.controllers.file_list_controller import FileListController
from upload.factory import UploaderFactory
from upload.utils.format_utils import format_size


def setup_logging(verbose: bool = False) -> None:
    """
    Setup logging with rotation.

    Logs to both console and file with rotation:
    - Daily rotation
    - Keep LOG_BACKUP_COUNT days of logs
    """
    level = logging.DEBUG if verbose else logging.INFO

    logger = logging.getLogger()
    logger.setLevel(level)

    # Console handler (stderr keeps stdout for results)
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter("%(message)s | %(name)s"))
    logger.addHandler(console_handler)

    file_format = logging.Formatter(
        "%(asctime)s - %(levelname)s - %(message)s | %(name)s",
    )

    log_file = Path(LOG_DIR) / LOG_FILE
    try:
        file_handler = logging.handlers.TimedRotatingFileHandler(
            str(log_file),
            when="midnight",
            interval=1,
            backupCount=LOG_BACKUP_COUNT,
            encoding="utf-8",
        )
    except (PermissionError, FileNotFoundError):
        # Fallback to local logs directory if LOG_DIR not writable
        logs_dir = Path("logs")
        logs_dir.mkdir(exist_ok=True)

        fallback_log = logs_dir / LOG_FILE
        logger.debug(f"Cannot write to {log_file}, using fallback: {fallback_log}")

        file_handler = logging.handlers.TimedRotatingFileHandler(
            str(fallback_log),
            when="midnight",
            interval=1,
            backupCount=LOG_BACKUP_COUNT,
            encoding="utf-8",
        )

    file_handler.setLevel(level)
    file_handler.setFormatter(file_format)
    logger.addHandler(file_handler)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Upload files and browse stored uploads",
    )
    parser.add_argument(
        "--mock",
        action="store_true",
        help="Use the in-memory mock file service",
    )
    parser.add_argument(
        "--base-url",
        help="File service root URL (default: UPLOAD_API_BASE_URL)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    upload_parser = subparsers.add_parser("upload", help="Upload files")
    upload_parser.add_argument("paths", nargs="+", type=Path, help="Files to upload")
    upload_parser.add_argument(
        "--concurrency",
        type=int,
        default=MAX_CONCURRENT_UPLOADS,
        help=f"Simultaneous uploads (default: {MAX_CONCURRENT_UPLOADS})",
    )
    upload_parser.add_argument(
        "--keep-completed",
        action="store_true",
        default=not REMOVE_COMPLETED_ENTRIES,
        help="Keep completed files in the queue summary",
    )
    upload_parser.add_argument(
        "--retry",
        action="store_true",
        help="Retry failed uploads once",
    )
    upload_parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Give up waiting after this many seconds",
    )

    list_parser = subparsers.add_parser("list", help="List uploaded files")
    list_parser.add_argument("--page", type=int, default=1)
    list_parser.add_argument("--limit", type=int, default=DEFAULT_PAGE_SIZE)

    return parser


def print_listing(listing: FileListController) -> None:
    """Print the current page of uploaded files"""
    print(f"Uploaded files (page {listing.page} of {listing.total_pages}, "
          f"{listing.total} total)")
    for record in listing.files:
        print(f"  {record.name:40s} {format_size(record.size):>10s}  {record.url}")


def collect_sources(paths: List[Path]) -> List[FileSource]:
    """Turn CLI paths into file sources, skipping missing files"""
    logger = logging.getLogger(__name__)
    sources = []
    for path in paths:
        if not path.is_file():
            logger.error(f"Not a file: {path}")
            continue
        sources.append(FileSource.from_path(path))
    return sources


def run_upload(args, controller: UploadController) -> int:
    """Validate, upload, wait and report; returns the exit status"""
    sources = collect_sources(args.paths)
    failures = len(args.paths) - len(sources)

    report = controller.add_files(sources)
    for rejected in report.rejected:
        print(f"REJECTED  {rejected.message}")
    failures += len(report.rejected)

    if report.accepted:
        controller.start_upload()
        if not controller.wait_until_idle(args.timeout):
            print("Timed out waiting for uploads")
            return 1

        if args.retry and controller.retry_failed():
            controller.wait_until_idle(args.timeout)

    for entry in report.accepted:
        if entry.is_completed:
            print(f"UPLOADED  {entry.name} -> {entry.url}")
        elif entry.is_failed:
            print(f"FAILED    {entry.name}: {entry.error}")
            failures += 1

    controller.refresh_files()
    print_listing(controller.file_list)

    return 1 if failures else 0


def run_list(args, controller: UploadController) -> int:
    listing = FileListController(controller.uploader, page_size=args.limit)
    if not listing.go_to_page(args.page):
        print(f"Failed to fetch uploaded files: {listing.last_error}")
        return 1
    print_listing(listing)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the CLI.

    Sets up logging and runs the selected command.
    """
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    try:
        if args.mock:
            uploader = UploaderFactory.create_uploader(mode="mock")
        else:
            uploader = create_uploader(base_url=args.base_url)

        controller = UploadController(
            uploader=uploader,
            max_concurrent=getattr(args, "concurrency", MAX_CONCURRENT_UPLOADS),
            remove_completed=not getattr(args, "keep_completed", False),
        )

        try:
            if args.command == "upload":
                return run_upload(args, controller)
            return run_list(args, controller)
        finally:
            controller.shutdown()

    except Exception as e:
        logger.critical(f"Fatal error in main: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())

"""
Upload Task Tests

One attempt per task; results and exceptions both end as entry state.
"""

from unittest.mock import MagicMock

from conftest import make_entry
from upload.constants import DEFAULT_UPLOAD_ERROR, EntryStatus, UploadStatus
from upload.controllers.upload_task import UploadTask
from upload.interfaces.uploader_interface import UploaderInterface, UploadResult


def make_uploader(result=None, error=None):
    uploader = MagicMock(spec=UploaderInterface)
    if error is not None:
        uploader.upload_file.side_effect = error
    else:
        uploader.upload_file.return_value = result
    return uploader


class TestUploadTask:
    def test_success_marks_completed(self):
        entry = make_entry("a.png")
        entry.mark_uploading()
        uploader = make_uploader(
            UploadResult(success=True, url="https://bucket/a.png", key="uploads/a.png"),
        )
        task = UploadTask(entry, uploader)

        task.apply(task.run())

        assert entry.status == EntryStatus.COMPLETED
        assert entry.url == "https://bucket/a.png"
        assert entry.key == "uploads/a.png"
        assert entry.progress == 100
        uploader.upload_file.assert_called_once()

    def test_failure_keeps_progress(self):
        entry = make_entry()
        entry.mark_uploading()
        entry.update_progress(60)
        task = UploadTask(
            entry,
            make_uploader(
                UploadResult(
                    success=False,
                    status=UploadStatus.NETWORK_ERROR,
                    error_message="Network error: refused",
                ),
            ),
        )

        task.apply(task.run())

        assert entry.status == EntryStatus.ERROR
        assert entry.error == "Network error: refused"
        assert entry.progress == 60
        assert entry.url is None

    def test_failure_without_message_gets_default(self):
        entry = make_entry()
        entry.mark_uploading()
        task = UploadTask(entry, make_uploader(UploadResult(success=False)))

        task.apply(task.run())

        assert entry.error == DEFAULT_UPLOAD_ERROR

    def test_uploader_exception_becomes_failed_result(self):
        entry = make_entry()
        task = UploadTask(entry, make_uploader(error=RuntimeError("boom")))

        result = task.run()

        assert result.success is False
        assert result.status == UploadStatus.FAILED
        assert "boom" in result.error_message

    def test_success_without_url_is_invalid(self):
        entry = make_entry()
        task = UploadTask(entry, make_uploader(UploadResult(success=True)))

        result = task.run()

        assert result.success is False
        assert result.status == UploadStatus.INVALID_RESPONSE

    def test_progress_callback_is_passed_through(self):
        entry = make_entry()
        uploader = make_uploader(UploadResult(success=True, url="u"))
        callback = MagicMock()

        UploadTask(entry, uploader, progress_callback=callback).run()

        _, kwargs = uploader.upload_file.call_args
        assert kwargs["progress_callback"] is callback

    def test_run_does_not_touch_entry(self):
        entry = make_entry()
        entry.mark_uploading()
        task = UploadTask(entry, make_uploader(UploadResult(success=True, url="u")))

        task.run()

        assert entry.status == EntryStatus.UPLOADING

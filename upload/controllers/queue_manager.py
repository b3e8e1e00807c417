"""
Upload Queue Manager

Bounded-concurrency scheduler for file uploads.

Locking:
- Uploads run on worker threads, but all queue bookkeeping (enqueue, drain,
  retry, remove, task completion) happens inside one critical section
- A finished task frees its slot and pulls the next entry without any other
  operation slipping in between
- Listener callbacks run after the lock is released, so they may call back
  into the manager

State:
- FIFO queue of pending entry ids
- Visible set of entries (what the user sees, in insertion order)
- Active count, always 0 <= active <= max_concurrent
"""

import itertools
import logging
import threading
from collections import deque
from typing import Callable, Deque, Dict, Iterable, List, Optional, Set

from upload.constants import MAX_CONCURRENT_UPLOADS, REMOVE_COMPLETED_ENTRIES
from upload.controllers.upload_task import UploadTask
from upload.interfaces.uploader_interface import UploaderInterface, UploadResult
from upload.models.upload_entry import UploadEntry

# Receives the entry whose state changed
EntryCallback = Callable[[UploadEntry], None]


class QueueError(Exception):
    """Invalid queue operation"""


class EntryNotFoundError(QueueError, KeyError):
    """No visible entry has this id"""

    def __str__(self) -> str:
        return Exception.__str__(self)


class InvalidEntryStateError(QueueError):
    """Operation not allowed in the entry's current state"""


class UploadQueueManager:
    """
    Upload queue with a fixed number of slots.

    This class:
    - Holds pending entries in FIFO order
    - Starts at most max_concurrent uploads at a time
    - Pulls the next entry as soon as a slot frees up
    - Supports explicit retry of failed entries and removal of any entry

    Usage:
        manager = UploadQueueManager(uploader, max_concurrent=2)
        manager.enqueue(report.accepted)
        manager.drain()              # Returns immediately
        manager.wait_until_idle()    # Optional: block until all are done
    """

    def __init__(
        self,
        uploader: UploaderInterface,
        max_concurrent: int = MAX_CONCURRENT_UPLOADS,
        remove_completed: bool = REMOVE_COMPLETED_ENTRIES,
        on_entry_update: Optional[EntryCallback] = None,
        on_upload_complete: Optional[EntryCallback] = None,
    ):
        """
        Initialize queue manager.

        Args:
            uploader: Client used by upload tasks
            max_concurrent: Number of upload slots (>= 1)
            remove_completed: Drop entries from the visible set on success
            on_entry_update: Called when an entry changes state or progress
            on_upload_complete: Called when an entry uploads successfully

        Raises:
            ValueError: If max_concurrent < 1
        """
        if max_concurrent < 1:
            raise ValueError(f"max_concurrent must be >= 1, got {max_concurrent}")

        self.logger = logging.getLogger(__name__)
        self.uploader = uploader
        self.max_concurrent = max_concurrent
        self.remove_completed = remove_completed
        self.on_entry_update = on_entry_update
        self.on_upload_complete = on_upload_complete

        # All state below is guarded by _condition
        self._condition = threading.Condition()
        self._queue: Deque[str] = deque()
        self._entries: Dict[str, UploadEntry] = {}
        self._in_flight: Set[str] = set()
        self._active_count = 0
        self._closed = False

        self._worker_ids = itertools.count(1)
        self._workers: List[threading.Thread] = []

        self.logger.info(
            f"Upload Queue initialized (slots: {max_concurrent}, "
            f"remove_completed: {remove_completed})",
        )

    # =========================================================================
    # QUEUE OPERATIONS
    # =========================================================================

    def enqueue(self, entries: Iterable[UploadEntry]) -> int:
        """
        Append pending entries to the queue tail.

        Does not start uploads; call drain() for that.

        Returns:
            Number of entries added

        Raises:
            InvalidEntryStateError: If an entry is not pending
        """
        added: List[UploadEntry] = []

        with self._condition:
            for entry in entries:
                if entry.entry_id in self._entries:
                    self.logger.warning(
                        f"Entry already queued, ignoring: {entry.name}",
                    )
                    continue
                if not entry.is_pending:
                    raise InvalidEntryStateError(
                        f"Only pending entries can be enqueued "
                        f"({entry.name} is {entry.status.value})",
                    )
                self._entries[entry.entry_id] = entry
                self._queue.append(entry.entry_id)
                added.append(entry)

            queue_size = len(self._queue)

        if added:
            self.logger.info(
                f"Added {len(added)} file(s) to upload queue "
                f"(queue size: {queue_size})",
            )
        for entry in added:
            self._notify(self.on_entry_update, entry)

        return len(added)

    def drain(self) -> int:
        """
        Start uploads while a slot is free and the queue is non-empty.

        Calling this at capacity or with an empty queue is a no-op.

        Returns:
            Number of uploads started
        """
        with self._condition:
            started = self._drain_locked()

        for entry in started:
            self._notify(self.on_entry_update, entry)

        return len(started)

    def retry(self, entry_id: str) -> UploadEntry:
        """
        Re-queue a failed entry at the tail and drain.

        The entry is not re-validated.

        Returns:
            The retried entry

        Raises:
            EntryNotFoundError: If no visible entry has this id
            InvalidEntryStateError: If the entry is not in error state
        """
        with self._condition:
            entry = self._get_or_raise(entry_id)
            if not entry.can_retry:
                raise InvalidEntryStateError(
                    f"Only failed entries can be retried "
                    f"({entry.name} is {entry.status.value})",
                )

            entry.reset_for_retry()
            self._queue.append(entry_id)
            self.logger.info(f"Retrying upload of {entry.name}...")

        # Listeners see pending before the entry can be admitted again
        self._notify(self.on_entry_update, entry)
        self.drain()

        return entry

    def remove(self, entry_id: str) -> bool:
        """
        Remove an entry from the visible set, in any state.

        Pending entries are dropped from the queue and never start.
        In-flight entries are soft-cancelled: the transfer runs to the end and
        frees its slot, but the entry does not come back.
        The entry's preview is released.

        Returns:
            True if removed, False if no visible entry has this id
        """
        with self._condition:
            entry = self._entries.pop(entry_id, None)
            if entry is None:
                return False

            if entry_id in self._queue:
                self._queue.remove(entry_id)

            in_flight = entry_id in self._in_flight
            self._condition.notify_all()

        entry.release_preview()

        if in_flight:
            self.logger.info(
                f"Removed {entry.name} from queue "
                f"(upload in flight, result will be ignored)",
            )
        else:
            self.logger.info(f"Removed {entry.name} from queue")

        return True

    def clear(self) -> int:
        """
        Remove every visible entry.

        Returns:
            Number of entries removed
        """
        with self._condition:
            entry_ids = list(self._entries)

        return sum(1 for entry_id in entry_ids if self.remove(entry_id))

    # =========================================================================
    # SCHEDULING INTERNALS (caller holds the lock)
    # =========================================================================

    def _drain_locked(self) -> List[UploadEntry]:
        """Admit queue-head entries into free slots"""
        started: List[UploadEntry] = []

        if self._closed:
            return started

        while self._active_count < self.max_concurrent and self._queue:
            entry_id = self._queue.popleft()
            entry = self._entries.get(entry_id)

            if entry is None or entry_id in self._in_flight:
                # Removed or already running; never upload twice at once
                continue

            entry.mark_uploading()
            self._active_count += 1
            self._in_flight.add(entry_id)
            self._start_worker(entry)
            started.append(entry)

        if started:
            self.logger.debug(
                f"Started {len(started)} upload(s) "
                f"(active: {self._active_count}/{self.max_concurrent}, "
                f"queued: {len(self._queue)})",
            )

        return started

    def _start_worker(self, entry: UploadEntry) -> None:
        """Run one upload task on a background thread"""
        entry_id = entry.entry_id
        task = UploadTask(
            entry,
            self.uploader,
            progress_callback=lambda percent: self._on_progress(entry_id, percent),
        )

        worker = threading.Thread(
            target=self._run_task,
            args=(task,),
            daemon=True,  # Dies when main program exits
            name=f"UploadQueue-Worker-{next(self._worker_ids)}",
        )
        self._workers = [w for w in self._workers if w.is_alive()]
        self._workers.append(worker)
        worker.start()

    def _run_task(self, task: UploadTask) -> None:
        """Worker thread body: network call, then bookkeeping"""
        result = task.run()
        self._finish_task(task, result)

    def _finish_task(self, task: UploadTask, result: UploadResult) -> None:
        """
        Apply a task's result, free its slot and pull the next entry.

        Decrement and drain happen in the same critical section.
        """
        entry = task.entry

        with self._condition:
            self._active_count -= 1
            self._in_flight.discard(task.entry_id)

            visible = self._entries.get(task.entry_id) is entry
            if visible:
                task.apply(result)
                if result.success and self.remove_completed:
                    del self._entries[task.entry_id]
            else:
                self.logger.info(
                    f"Upload of removed entry {entry.name} finished "
                    f"(success: {result.success}), ignoring result",
                )

            started = self._drain_locked()
            self._condition.notify_all()

        if visible:
            if result.success and self.remove_completed:
                entry.release_preview()
            self._notify(self.on_entry_update, entry)
            if result.success:
                self._notify(self.on_upload_complete, entry)

        for started_entry in started:
            self._notify(self.on_entry_update, started_entry)

    def _on_progress(self, entry_id: str, percent: int) -> None:
        with self._condition:
            entry = self._entries.get(entry_id)
            if entry is None or not entry.is_uploading:
                return
            entry.update_progress(percent)

        self._notify(self.on_entry_update, entry)

    def _get_or_raise(self, entry_id: str) -> UploadEntry:
        entry = self._entries.get(entry_id)
        if entry is None:
            raise EntryNotFoundError(f"No queued entry with id {entry_id}")
        return entry

    def _notify(
        self,
        callback: Optional[EntryCallback],
        entry: UploadEntry,
    ) -> None:
        """Invoke a listener; a failing listener never breaks the queue"""
        if callback is None:
            return
        try:
            callback(entry)
        except Exception as e:
            self.logger.error(f"Error in queue listener: {e}", exc_info=True)

    # =========================================================================
    # STATUS
    # =========================================================================

    @property
    def active_count(self) -> int:
        with self._condition:
            return self._active_count

    @property
    def pending_count(self) -> int:
        with self._condition:
            return len(self._queue)

    @property
    def entries(self) -> List[UploadEntry]:
        """Visible entries in insertion order"""
        with self._condition:
            return list(self._entries.values())

    def get_entry(self, entry_id: str) -> Optional[UploadEntry]:
        with self._condition:
            return self._entries.get(entry_id)

    def get_pending_ids(self) -> List[str]:
        """Queued entry ids, head first"""
        with self._condition:
            return list(self._queue)

    def is_busy(self) -> bool:
        """True if uploads are running or entries are waiting"""
        with self._condition:
            return self._active_count > 0 or bool(self._queue)

    def wait_until_idle(self, timeout: Optional[float] = None) -> bool:
        """
        Block until no upload is running and nothing is queued.

        Entries enqueued without a drain() keep the queue busy.

        Args:
            timeout: Maximum time to wait in seconds, or None for no limit

        Returns:
            True if the queue became idle, False if timeout occurred
        """
        with self._condition:
            return self._condition.wait_for(
                lambda: self._active_count == 0 and not self._queue,
                timeout=timeout,
            )

    def get_status(self) -> Dict[str, object]:
        """
        Get detailed queue status.

        Example:
            status = manager.get_status()
            print(f"Active: {status['active']}/{status['max_concurrent']}")
        """
        with self._condition:
            counts: Dict[str, int] = {}
            for entry in self._entries.values():
                counts[entry.status.value] = counts.get(entry.status.value, 0) + 1

            return {
                "active": self._active_count,
                "max_concurrent": self.max_concurrent,
                "queued": len(self._queue),
                "visible": len(self._entries),
                "by_status": counts,
                "closed": self._closed,
            }

    def shutdown(self, timeout: Optional[float] = None) -> None:
        """
        Stop admitting uploads and drop every entry.

        In-flight transfers are soft-cancelled. With a timeout, waits for
        worker threads to finish.
        """
        self.logger.info("Stopping upload queue")

        with self._condition:
            self._closed = True
            self._queue.clear()

        self.clear()

        if timeout is not None:
            for worker in list(self._workers):
                worker.join(timeout=timeout)

        self.logger.info("Upload queue stopped")

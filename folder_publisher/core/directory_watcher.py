"""
Polling-based directory watcher.

This module detects added, modified and deleted files by periodically scanning
a directory tree and comparing file modification times against the state
recorded by the previous scan. Detected changes are dispatched synchronously
to the registered DirectoryListener instances.
"""

import os
import time
import threading
from pathlib import Path
from typing import Dict, List, Optional

from folder_publisher.services.logger_service import LoggerService
from folder_publisher.core.extension_filter import ExtensionFilter
from folder_publisher.core.file_events import DirectoryListener, FileEvent, FileEventType


DEFAULT_INTERVAL_MS = 2000
MILLIS_IN_SECOND = 1000


class DirectoryWatcher:
    """
    Watches a directory tree for changes to files with a given extension.

    A single background thread runs the scan, dispatch and sleep cycle.
    The watch state (path -> modification time) is only touched from that
    thread, or from the caller of poll() when the thread is not running.
    """

    def __init__(self, directory_path: str, extension: str, logger_service: LoggerService,
                 interval: Optional[float] = None):
        """
        Initialize DirectoryWatcher.

        Args:
            directory_path: Path to the directory to watch
            extension: Extension of the files to watch, including its dot (".xml")
            logger_service: LoggerService instance for logging
            interval: Optional polling interval in seconds

        Raises:
            ValueError: If the directory doesn't exist or is not a directory
        """
        self.logger = logger_service
        self.base_directory = Path(directory_path).resolve()

        if not self.base_directory.is_dir():
            self.logger.log_error(f'Path "{directory_path}" is not a directory.')
            raise ValueError(f"Source directory does not exist: {directory_path}")

        self.extension_filter = ExtensionFilter(extension, self.base_directory, logger_service)
        self.interval_ms = DEFAULT_INTERVAL_MS
        if interval is not None:
            self.set_interval(interval)

        self._listeners: List[DirectoryListener] = []
        self._file_modification_times: Dict[str, float] = {}
        self._watching = False
        self._watch_thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()

        self.stats = {
            'polling_cycles': 0,
            'files_added': 0,
            'files_modified': 0,
            'files_deleted': 0,
            'listener_errors': 0,
            'polling_errors': 0,
            'last_poll_time': 0.0,
            'last_poll_duration': 0.0
        }

    @property
    def directory(self) -> str:
        """Absolute path of the watched directory."""
        return str(self.base_directory)

    @property
    def interval(self) -> float:
        """Polling interval in seconds."""
        return self.interval_ms / MILLIS_IN_SECOND

    def set_interval(self, interval: float) -> None:
        """
        Set the polling interval.

        Args:
            interval: Interval in seconds, never less than two seconds
        """
        self.interval_ms = max(int(interval * MILLIS_IN_SECOND), DEFAULT_INTERVAL_MS)

    def add_listener(self, listener: DirectoryListener) -> None:
        """
        Register a listener. Listeners must be added before start().

        Args:
            listener: DirectoryListener notified of every event
        """
        self._listeners.append(listener)

    @property
    def listeners(self) -> List[DirectoryListener]:
        return list(self._listeners)

    @property
    def watched_files(self) -> Dict[str, float]:
        """Snapshot of the watch state (path -> modification time)."""
        return dict(self._file_modification_times)

    def start(self) -> None:
        """
        Start watching on a dedicated thread.

        Raises:
            RuntimeError: If watching is already active or the directory is gone
        """
        if self._watching:
            raise RuntimeError("Watching is already active")

        if not self.is_stopped():
            raise RuntimeError("Previous watch thread has not finished its poll yet")

        if not self.base_directory.is_dir():
            raise RuntimeError(f"Source directory no longer exists: {self.base_directory}")

        # Each run owns its stop event so a lingering thread never sees it cleared
        self._stop_event = threading.Event()
        self._watching = True

        self._watch_thread = threading.Thread(
            target=self._watch_loop,
            args=(self._stop_event,),
            name="DirectoryWatcher",
            daemon=True
        )
        self._watch_thread.start()

        self.logger.log_info(f'Started watching "{self.base_directory}" for '
                             f'"{self.extension_filter.extension}" files (interval: {self.interval_ms} ms)')

    def halt(self, timeout: Optional[float] = None) -> None:
        """
        Stop watching.

        The current scan and dispatch always complete; the stop request is
        observed at the sleep boundary.

        Args:
            timeout: Seconds to wait for the watch thread (default: two intervals)
        """
        thread = self._watch_thread
        if not self._watching and self.is_stopped():
            return

        self._stop_event.set()
        self._watching = False

        if thread is None or thread is threading.current_thread():
            return

        thread.join(timeout=timeout if timeout is not None else self.interval * 2)

        if thread.is_alive():
            self.logger.log_error("Watch thread did not stop gracefully within timeout")
            return

        self._watch_thread = None
        self.logger.log_info("Directory watching stopped")

    def is_stopped(self) -> bool:
        """
        Check that no watch thread is left running.

        After a halt() that timed out, the thread may still be finishing its
        scan and dispatch; this stays False until it has exited.
        """
        return self._watch_thread is None or not self._watch_thread.is_alive()

    def is_watching(self) -> bool:
        """
        Check if watching is currently active.

        Returns:
            bool: True if the watch thread is running
        """
        if not self._watching:
            return False

        return self._watch_thread is not None and self._watch_thread.is_alive()

    def get_watch_stats(self) -> dict:
        """
        Get watching statistics.

        Returns:
            dict: Statistics about polling and detected changes
        """
        stats = self.stats.copy()
        stats.update({
            'is_watching': self.is_watching(),
            'directory': self.directory,
            'interval_ms': self.interval_ms,
            'watched_files': len(self._file_modification_times),
            'listeners': len(self._listeners)
        })
        return stats

    def _watch_loop(self, stop_event: threading.Event) -> None:
        """Scan, dispatch and sleep until halted."""
        self.logger.log_debug(f'Starting to watch directory "{self.base_directory}"')

        while not stop_event.is_set():
            try:
                self.poll()
            except Exception as e:
                self.stats['polling_errors'] += 1
                self.logger.log_error("Error while polling directory", e)

            self.logger.log_debug(f"Sleeping for {self.interval_ms} ms.")
            stop_event.wait(self.interval_ms / MILLIS_IN_SECOND)

        self.logger.log_debug("Stopped watching.")

    def poll(self) -> List[FileEvent]:
        """
        Run one full scan of the watched directory.

        Every detected change is dispatched to the listeners as soon as it is
        found. Modifications and deletions of known files in a directory are
        reported before additions.

        Returns:
            List[FileEvent]: The events dispatched during this poll, in order

        Raises:
            OSError: If the watched directory itself cannot be listed
        """
        poll_start = time.time()
        events: List[FileEvent] = []

        self.scan_directory(str(self.base_directory), events)

        poll_end = time.time()
        self.stats['polling_cycles'] += 1
        self.stats['last_poll_time'] = poll_end
        self.stats['last_poll_duration'] = poll_end - poll_start
        return events

    def scan_directory(self, directory: str, events: List[FileEvent]) -> None:
        """
        Scan a directory for changes, recursing into non-hidden subdirectories.

        Args:
            directory: Absolute path of the directory to scan
            events: List collecting the events dispatched by this scan
        """
        self.logger.log_debug(f'Scanning directory "{directory}"')
        children = self._list_children(directory)
        prefix = os.path.join(directory, "")

        # Can't delete while iterating, keep track instead
        pending_deletions: List[str] = []

        for name in list(self._file_modification_times):
            if not name.startswith(prefix):
                continue

            first, separator, _ = name[len(prefix):].partition(os.sep)
            entry = children.get(os.path.join(directory, first))

            if separator:
                # Deeper file, handled by the recursive scan while its directory is listed
                if entry is None or first.startswith(".") or not self._is_directory(entry):
                    pending_deletions.append(name)
                continue

            modification_time = None
            if entry is not None and not self._is_directory(entry):
                modification_time = self._get_modification_time(entry)

            if modification_time is None:
                pending_deletions.append(name)
            elif modification_time == self._file_modification_times[name]:
                self.logger.log_debug(f'File "{name}" has not changed.')
            else:
                self.logger.log_debug(f'File "{name}" changed.')
                self._file_modification_times[name] = modification_time
                self._notify_listeners(FileEvent.modified(name), events)

        for name in pending_deletions:
            self.logger.log_debug(f'File "{name}" deleted.')
            del self._file_modification_times[name]
            self._notify_listeners(FileEvent.deleted(name), events)
        pending_deletions.clear()

        for name, entry in children.items():
            if self._is_directory(entry):
                if not entry.name.startswith("."):
                    self.scan_directory(name, events)
                continue

            if name not in self._file_modification_times:
                modification_time = self._get_modification_time(entry)
                if modification_time is None:
                    continue  # File disappeared between listing and stat

                self.logger.log_debug(f'File "{name}" added.')
                self._file_modification_times[name] = modification_time
                self._notify_listeners(FileEvent.added(name), events)

    def _list_children(self, directory: str) -> Dict[str, os.DirEntry]:
        """List the entries of a directory accepted by the extension filter."""
        try:
            with os.scandir(directory) as iterator:
                return {entry.path: entry for entry in iterator if self.extension_filter.accept(entry)}
        except OSError as e:
            if directory == str(self.base_directory):
                raise
            self.logger.log_warning(f'Unable to list directory "{directory}": {e}')
            return {}

    @staticmethod
    def _is_directory(entry: os.DirEntry) -> bool:
        try:
            return entry.is_dir()
        except OSError:
            return False

    @staticmethod
    def _get_modification_time(entry: os.DirEntry) -> Optional[float]:
        try:
            return entry.stat().st_mtime
        except OSError:
            return None

    def _notify_listeners(self, event: FileEvent, events: List[FileEvent]) -> None:
        """
        Deliver an event to every listener in registration order.

        A failing listener is logged and does not prevent delivery to the
        remaining listeners or stop the poll.
        """
        events.append(event)

        if event.event_type is FileEventType.ADDED:
            self.stats['files_added'] += 1
        elif event.event_type is FileEventType.MODIFIED:
            self.stats['files_modified'] += 1
        else:
            self.stats['files_deleted'] += 1

        for listener in self._listeners:
            try:
                listener.on_event(event)
            except Exception as e:
                self.stats['listener_errors'] += 1
                self.logger.log_error(
                    f'Listener {type(listener).__name__} failed on {event.event_type.value} '
                    f'event for "{event.path}"', e
                )

    def __enter__(self):
        """Context manager entry."""
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.halt()

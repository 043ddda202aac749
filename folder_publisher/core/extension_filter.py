"""
Extension filter deciding which directory entries are in scope for watching.
"""

import os
from pathlib import Path
from typing import Set, Union

from folder_publisher.services.logger_service import LoggerService


class ExtensionFilter:
    """
    Accepts directories and files whose name ends with the configured extension.

    Rejected files are reported once per relative path for the lifetime of
    the filter, so an ignored file does not produce a warning on every poll.
    """

    def __init__(self, extension: str, base_directory: Union[str, Path], logger_service: LoggerService):
        """
        Initialize ExtensionFilter.

        Args:
            extension: File extension including its leading dot (e.g. ".xml")
            base_directory: Watched root, used to report relative paths
            logger_service: LoggerService instance for logging
        """
        self.extension = extension.lower()
        self.base_directory = str(base_directory)
        self.logger = logger_service
        self._skipped: Set[str] = set()

    @property
    def rejected_paths(self) -> Set[str]:
        """Relative paths of files rejected so far."""
        return set(self._skipped)

    def accept(self, entry: os.DirEntry) -> bool:
        """
        Check whether a directory entry should be watched.

        Args:
            entry: Entry produced by os.scandir()

        Returns:
            bool: True for directories and files with the configured extension
        """
        try:
            if entry.is_dir():
                return True
        except OSError:
            # Entry vanished or is unreadable, judge it by name only
            pass

        if entry.name.lower().endswith(self.extension):
            return True

        relative_path = os.path.relpath(entry.path, self.base_directory)
        if relative_path not in self._skipped:
            self._skipped.add(relative_path)
            self.logger.log_warning(
                f'Found file "{relative_path}", it has no "{self.extension}" extension, skipping.'
            )

        return False

"""
File Manager module for moving processed files into the target tree.
"""

import os
import shutil
from pathlib import Path
from typing import Optional

from folder_publisher.services.logger_service import LoggerService


class FileManager:
    """
    Moves files from the source tree into the target tree.

    The path of a file relative to the source folder is preserved under the
    target folder. An existing file at the destination is replaced.
    """

    def __init__(self, source_folder: str, target_folder: str, logger_service: LoggerService):
        """
        Initialize FileManager with folder paths.

        Args:
            source_folder: Path to the source folder being watched
            target_folder: Path to the folder receiving processed files
            logger_service: LoggerService instance for logging

        Raises:
            ValueError: If either folder is not an existing directory
        """
        self.logger = logger_service
        self.source_folder = Path(source_folder).resolve()
        self.target_folder = Path(target_folder).resolve()

        for label, folder, original in (("Source", self.source_folder, source_folder),
                                        ("Target", self.target_folder, target_folder)):
            if not folder.is_dir():
                self.logger.log_error(f'Path "{original}" is not a directory.')
                raise ValueError(f"{label} directory does not exist: {original}")

    def get_relative_path(self, file_path: str) -> Optional[str]:
        """
        Get the relative path of a file from the source folder.

        Args:
            file_path: Absolute path to the file

        Symbolic links below the source folder are not followed, so a file
        reached through a linked subfolder keeps that subfolder in its path.

        Returns:
            str: Relative path from source folder, or None if not under source
        """
        for candidate in (Path(os.path.abspath(file_path)), Path(file_path).resolve()):
            try:
                return str(candidate.relative_to(self.source_folder))
            except ValueError:
                continue
        return None

    def get_target_path(self, file_path: str) -> Path:
        """
        Calculate the destination of a file under the target folder.

        Args:
            file_path: Path of a file in the source tree

        Returns:
            Path: Mirrored path under the target folder
        """
        relative_path = self.get_relative_path(file_path)
        if relative_path is None:
            self.logger.log_warning(f"File {file_path} is not under source folder "
                                    f"{self.source_folder}, using filename only")
            return self.target_folder / Path(file_path).name

        return self.target_folder / relative_path

    def move_to_target(self, file_path: str) -> bool:
        """
        Move a file to its mirrored location under the target folder.

        Args:
            file_path: Absolute path to the file to move

        Returns:
            bool: True if the file was moved, False if it was left in place
        """
        source_path = Path(file_path)
        target_path = self.get_target_path(file_path)
        self.logger.log_debug(f'Moving "{source_path}" to "{target_path}"')

        if target_path.exists():
            self.logger.log_warning(f'File "{target_path}" already exists in target directory, overriding.')
            try:
                target_path.unlink()
            except OSError as e:
                self.logger.log_error(f'Unable to delete existing file "{target_path}"', e)
                return False

        elif not target_path.parent.exists():
            try:
                target_path.parent.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                self.logger.log_error(f'Unable to create target directory structure "{target_path.parent}"', e)
                return False

        try:
            shutil.move(str(source_path), str(target_path))
        except OSError as e:
            self.logger.log_error(f'Unable to move file from "{source_path}" to "{target_path}"', e)
            return False

        return True

"""
File Processor module for publishing watched files to the queue.

This module contains the listener that reads added or modified files, builds
a message from their content, submits it to the queue sink and, once the
message has been sent, moves the file into the target tree.
"""

import time
from dataclasses import dataclass
from typing import Dict, Optional

from folder_publisher.services.logger_service import LoggerService
from folder_publisher.core.file_events import DirectoryListener, FileEvent, FileEventType
from folder_publisher.core.file_manager import FileManager
from folder_publisher.core.message import Message, parse_message
from folder_publisher.core.queue_sink import QueueSink, QueueSendError


@dataclass
class ProcessingResult:
    """Result of file processing operation."""
    success: bool
    file_path: str
    sent: bool = False
    moved: bool = False
    error_message: Optional[str] = None
    processing_time: float = 0.0


class FileProcessor(DirectoryListener):
    """
    Publishes file content to a queue sink and relocates the published files.

    Read and send failures leave the file where it is; it will only be picked
    up again when its modification time changes. Nothing is retried.
    """

    def __init__(self, queue_sink: QueueSink, file_manager: FileManager,
                 logger_service: LoggerService, headers_enabled: bool = False):
        """
        Initialize FileProcessor with required services.

        Args:
            queue_sink: QueueSink receiving the messages
            file_manager: FileManager used to move sent files to the target folder
            logger_service: LoggerService instance for application logging
            headers_enabled: Parse a leading "Name: Value" header block from each file
        """
        self.queue_sink = queue_sink
        self.file_manager = file_manager
        self.logger = logger_service
        self.headers_enabled = headers_enabled

        self.stats = {
            'total_processed': 0,
            'sent': 0,
            'moved': 0,
            'read_failures': 0,
            'send_failures': 0,
            'move_failures': 0
        }

    def on_event(self, event: FileEvent) -> None:
        if event.event_type in (FileEventType.ADDED, FileEventType.MODIFIED):
            self.process_file(event.path)
        elif event.event_type is FileEventType.DELETED:
            self.logger.log_debug(f'File "{event.path}" removed from source folder')

    def process_file(self, file_path: str) -> ProcessingResult:
        """
        Send a file to the queue and move it to the target folder.

        Args:
            file_path: Absolute path to the file to process

        Returns:
            ProcessingResult: Result of the processing operation
        """
        start_time = time.time()
        self.stats['total_processed'] += 1
        relative_path = self.file_manager.get_relative_path(file_path) or file_path

        def result(success: bool, sent: bool = False, moved: bool = False,
                   error_message: Optional[str] = None) -> ProcessingResult:
            return ProcessingResult(
                success=success,
                file_path=file_path,
                sent=sent,
                moved=moved,
                error_message=error_message,
                processing_time=time.time() - start_time
            )

        self.logger.log_info(f'Processing file "{relative_path}"')

        try:
            content = self._read_file_content(file_path)
        except (OSError, UnicodeDecodeError) as e:
            self.stats['read_failures'] += 1
            self.logger.log_error(f'Unable to read file "{file_path}", leaving at existing location', e)
            return result(False, error_message=f"Unable to read file: {e}")

        try:
            message = self.build_message(content)
            self.queue_sink.send_message(message.body, message.headers)
        except QueueSendError as e:
            self.stats['send_failures'] += 1
            self.logger.log_error(
                f'Unable to send message to the queue, leaving file "{relative_path}" at existing location', e
            )
            return result(False, error_message=f"Unable to send message: {e}")
        except Exception as e:
            self.stats['send_failures'] += 1
            self.logger.log_error(f'Unexpected error publishing file "{relative_path}"', e)
            return result(False, error_message=f"Unexpected error: {e}")

        self.stats['sent'] += 1
        self.logger.log_info(f'Message published to queue from file "{relative_path}"')

        try:
            moved = self.file_manager.move_to_target(file_path)
        except Exception as e:
            self.logger.log_error(f'Unexpected error moving file "{relative_path}"', e)
            moved = False

        if not moved:
            self.stats['move_failures'] += 1
            return result(False, sent=True, error_message="Message sent but file could not be moved")

        self.stats['moved'] += 1
        return result(True, sent=True, moved=True)

    def build_message(self, content: str) -> Message:
        """
        Build the queue message for a file's content.

        Args:
            content: Full file content

        Returns:
            Message: Parsed headers and body when headers are enabled,
            otherwise the whole content as body
        """
        if self.headers_enabled:
            return parse_message(content)
        return Message(body=content)

    def _read_file_content(self, file_path: str) -> str:
        """
        Read the content of a file.

        Args:
            file_path: Path to the file to read

        Returns:
            str: Content of the file
        """
        try:
            with open(file_path, 'r', encoding='utf-8', newline='') as file:
                return file.read()
        except UnicodeDecodeError:
            with open(file_path, 'r', encoding='latin-1', newline='') as file:
                return file.read()

    def get_processing_stats(self) -> Dict[str, int]:
        """
        Get processing statistics.

        Returns:
            Dictionary containing processing statistics
        """
        return self.stats.copy()

# Core watching and publishing components
from .file_events import DirectoryListener, FileEvent, FileEventType
from .extension_filter import ExtensionFilter
from .directory_watcher import DirectoryWatcher
from .message import Message, parse_message
from .queue_sink import QueueSink, QueueSinkError, QueueConnectionError, QueueSendError, SSLSettings
from .file_manager import FileManager
from .file_processor import FileProcessor, ProcessingResult

__all__ = [
    'DirectoryListener', 'FileEvent', 'FileEventType', 'ExtensionFilter', 'DirectoryWatcher',
    'Message', 'parse_message', 'QueueSink', 'QueueSinkError', 'QueueConnectionError',
    'QueueSendError', 'SSLSettings', 'FileManager', 'FileProcessor', 'ProcessingResult'
]

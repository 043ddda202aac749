"""
File event types and the listener interface used by the directory watcher.

Every change the watcher detects is delivered as a FileEvent to each
registered DirectoryListener through a single handler method.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum


class FileEventType(Enum):
    """Kind of change detected for a watched file."""
    ADDED = "added"
    MODIFIED = "modified"
    DELETED = "deleted"


@dataclass(frozen=True)
class FileEvent:
    """A single change detected for a file during a poll."""
    event_type: FileEventType
    path: str

    @classmethod
    def added(cls, path: str) -> 'FileEvent':
        return cls(FileEventType.ADDED, path)

    @classmethod
    def modified(cls, path: str) -> 'FileEvent':
        return cls(FileEventType.MODIFIED, path)

    @classmethod
    def deleted(cls, path: str) -> 'FileEvent':
        return cls(FileEventType.DELETED, path)


class DirectoryListener(ABC):
    """
    Interface for components interested in directory changes.

    Listeners are registered with DirectoryWatcher.add_listener() and are
    called synchronously on the watch thread, in registration order.
    Implementations are expected to contain their own errors.
    """

    @abstractmethod
    def on_event(self, event: FileEvent) -> None:
        """
        Handle a detected file change.

        Args:
            event: The added, modified or deleted file event
        """
        pass

    def get_listener_name(self) -> str:
        """
        Get the name of this listener implementation.

        Returns:
            str: Name of the listener (defaults to class name)
        """
        return self.__class__.__name__

"""
Queue Sink module defining the contract for message queue endpoints.

This module contains the abstract interface used by the file processor to
publish messages, the SSL settings passed to secure transports, and the
errors raised by sink implementations.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Optional


class QueueSinkError(Exception):
    """Base class for queue sink failures."""


class QueueConnectionError(QueueSinkError):
    """Raised when the sink cannot authenticate or reach the broker."""


class QueueSendError(QueueSinkError):
    """Raised when the transport rejects or cannot deliver a message."""


@dataclass
class SSLSettings:
    """Credentials for a secure transport. All four values are required together."""
    client_key: str
    ca_file: str
    server_key: str
    password: str

    def missing_fields(self) -> list:
        """Return the names of the settings that are empty."""
        return [name for name, value in (
            ('client_key', self.client_key),
            ('ca_file', self.ca_file),
            ('server_key', self.server_key),
            ('password', self.password)
        ) if not value]


class QueueSink(ABC):
    """
    Abstract interface for message queue endpoints.

    Concrete broker bindings implement this interface so the rest of the
    application only depends on connect, send_message and close.
    """

    @abstractmethod
    def connect(self) -> None:
        """
        Open the connection to the broker.

        Raises:
            QueueConnectionError: On authentication or network failure
        """
        pass

    @abstractmethod
    def send_message(self, body: str, headers: Optional[Dict[str, str]] = None) -> None:
        """
        Publish a text message to the queue.

        Args:
            body: Message body
            headers: Optional message headers

        Raises:
            QueueSendError: If the message cannot be delivered
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """
        Close the connection. Must not raise; failures are only logged.
        """
        pass

    @abstractmethod
    def is_connected(self) -> bool:
        """
        Check whether the sink currently holds an open connection.

        Returns:
            bool: True if connected
        """
        pass

    def get_sink_name(self) -> str:
        """
        Get the name of this sink implementation.

        Returns:
            str: Name of the sink (defaults to class name)
        """
        return self.__class__.__name__

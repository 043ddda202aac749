"""
STOMP binding of the QueueSink interface.

Publishes text messages to a queue on a STOMP broker (ActiveMQ, Artemis,
RabbitMQ with the STOMP plugin, ...) using the stomp.py client. Server
addresses use the "tcp://host:port" or "ssl://host:port" form.
"""

from typing import Dict, Optional, Tuple
from urllib.parse import urlsplit

import stomp
from stomp.exception import StompException

from folder_publisher.services.logger_service import LoggerService
from folder_publisher.core.queue_sink import (
    QueueSink, QueueConnectionError, QueueSendError, SSLSettings
)


DEFAULT_STOMP_PORT = 61613
SUPPORTED_SCHEMES = ('tcp', 'ssl')


def is_ssl_url(server_url: str) -> bool:
    """Check whether a server address denotes a secure transport."""
    return server_url.lower().startswith('ssl:')


def parse_server_url(server_url: str) -> Tuple[str, int]:
    """
    Split a broker address into host and port.

    Args:
        server_url: Address such as "tcp://broker:61613"

    Returns:
        (host, port) tuple

    Raises:
        ValueError: If the scheme is unsupported or the host is missing
    """
    parts = urlsplit(server_url)
    if parts.scheme.lower() not in SUPPORTED_SCHEMES:
        raise ValueError(f"Unsupported server URL scheme in '{server_url}', "
                         f"expected one of: {', '.join(s + '://' for s in SUPPORTED_SCHEMES)}")
    if not parts.hostname:
        raise ValueError(f"Server URL has no host: '{server_url}'")

    return parts.hostname, parts.port or DEFAULT_STOMP_PORT


class StompQueueSink(QueueSink):
    """Publishes messages to a single STOMP queue."""

    def __init__(self, server_url: str, user: str, password: str, queue_name: str,
                 logger_service: LoggerService, ssl_settings: Optional[SSLSettings] = None):
        """
        Initialize StompQueueSink.

        Args:
            server_url: Broker address ("tcp://host:port" or "ssl://host:port")
            user: Broker user name
            password: Broker password
            queue_name: Queue name, or a full destination starting with "/"
            logger_service: LoggerService instance for logging
            ssl_settings: Credentials required when server_url is an ssl:// address

        Raises:
            ValueError: If the address is invalid or SSL settings are incomplete
        """
        self.server_url = server_url
        self.user = user
        self.password = password
        self.queue_name = queue_name
        self.logger = logger_service
        self.ssl_settings = ssl_settings
        self.host, self.port = parse_server_url(server_url)

        if is_ssl_url(server_url):
            if ssl_settings is None:
                raise ValueError("SSL settings are required for an ssl:// server URL")
            missing = ssl_settings.missing_fields()
            if missing:
                raise ValueError(f"Missing SSL settings: {', '.join(missing)}")

        self._connection: Optional[stomp.Connection] = None

    @property
    def destination(self) -> str:
        """STOMP destination messages are sent to."""
        if self.queue_name.startswith('/'):
            return self.queue_name
        return f"/queue/{self.queue_name}"

    def connect(self) -> None:
        self.logger.log_info(f'Connecting to "{self.server_url}/{self.queue_name}" as "{self.user}" ...')

        connection = stomp.Connection([(self.host, self.port)])
        if is_ssl_url(self.server_url):
            # server_key holds the certificate presented along with the client key
            connection.set_ssl(
                for_hosts=[(self.host, self.port)],
                key_file=self.ssl_settings.client_key,
                cert_file=self.ssl_settings.server_key,
                ca_certs=self.ssl_settings.ca_file,
                password=self.ssl_settings.password
            )

        try:
            connection.connect(username=self.user, passcode=self.password, wait=True)
        except (StompException, OSError) as e:
            raise QueueConnectionError(
                f"Unable to connect to {self.server_url}: {str(e) or type(e).__name__}"
            ) from e

        self._connection = connection
        self.logger.log_info(f"Connected to {self.server_url}")

    def send_message(self, body: str, headers: Optional[Dict[str, str]] = None) -> None:
        if not self.is_connected():
            raise QueueSendError(f"Not connected to {self.server_url}")

        message_headers = {'persistent': 'true'}
        if headers:
            message_headers.update(headers)

        try:
            self._connection.send(destination=self.destination, body=body, headers=message_headers)
        except (StompException, OSError) as e:
            raise QueueSendError(
                f"Unable to send message to {self.destination}: {str(e) or type(e).__name__}"
            ) from e

    def close(self) -> None:
        if self._connection is None:
            return

        try:
            self.logger.log_info("Closing queue connection")
            if self._connection.is_connected():
                self._connection.disconnect()
        except Exception as e:
            self.logger.log_error("Unable to close queue connection", e)
        finally:
            self._connection = None

    def is_connected(self) -> bool:
        return self._connection is not None and self._connection.is_connected()

"""Configuration management for the folder queue publisher application."""

import math
import os
from typing import Dict, List, Optional
from dataclasses import dataclass
from dotenv import load_dotenv

from folder_publisher.core.queue_sink import SSLSettings


DEFAULT_EXTENSION = ".xml"
DEFAULT_POLLING_INTERVAL = 5.0
TRUE_VALUES = ("true", "1", "yes", "on")
INVALID_INTERVAL_MESSAGE = "POLLING_INTERVAL must be a positive number of seconds, got: {}"


class ConfigurationValidationError(Exception):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, critical_errors: List[str], warning_errors: List[str]):
        super().__init__(message)
        self.critical_errors = critical_errors
        self.warning_errors = warning_errors
        self.has_critical_errors = len(critical_errors) > 0
        self.has_warnings = len(warning_errors) > 0


def normalize_extension(extension: Optional[str]) -> str:
    """Lower-case an extension and make sure it starts with a dot."""
    extension = (extension or "").strip().lower()
    if not extension:
        return DEFAULT_EXTENSION
    if not extension.startswith("."):
        extension = "." + extension
    return extension


@dataclass
class AppConfig:
    """Configuration data model for the application."""
    server_url: str
    user: str
    password: str
    queue_name: str
    source_folder: str
    target_folder: str
    extension: str = DEFAULT_EXTENSION
    headers_enabled: bool = False
    polling_interval: float = DEFAULT_POLLING_INTERVAL
    ssl_client_key: Optional[str] = None
    ssl_ca: Optional[str] = None
    ssl_server_key: Optional[str] = None
    ssl_password: Optional[str] = None

    @property
    def is_ssl(self) -> bool:
        """True when the server address denotes a secure transport."""
        return self.server_url.lower().startswith("ssl:")

    def _ssl_values(self) -> Dict[str, Optional[str]]:
        return {
            "SSL_CLIENT_KEY": self.ssl_client_key,
            "SSL_CA": self.ssl_ca,
            "SSL_SERVER_KEY": self.ssl_server_key,
            "SSL_PASSWORD": self.ssl_password
        }

    @property
    def ssl_settings(self) -> Optional[SSLSettings]:
        """SSL credentials for the queue connection, None for plain transports."""
        if not self.is_ssl:
            return None
        return SSLSettings(
            client_key=self.ssl_client_key or "",
            ca_file=self.ssl_ca or "",
            server_key=self.ssl_server_key or "",
            password=self.ssl_password or ""
        )

    def validate(self) -> List[str]:
        """Validate configuration and return list of validation errors."""
        errors = []

        for name, value in (("QUEUE_SERVER_URL", self.server_url), ("QUEUE_USER", self.user),
                            ("QUEUE_PASSWORD", self.password), ("QUEUE_NAME", self.queue_name)):
            if not value:
                errors.append(f"{name} is required but not provided")

        for name, folder in (("SOURCE_FOLDER", self.source_folder), ("TARGET_FOLDER", self.target_folder)):
            if not folder:
                errors.append(f"{name} is required but not provided")
            elif not os.path.exists(folder):
                errors.append(f"{name} path does not exist: {folder}")
            elif not os.path.isdir(folder):
                errors.append(f"{name} is not a directory: {folder}")

        if not math.isfinite(self.polling_interval) or self.polling_interval <= 0:
            errors.append(INVALID_INTERVAL_MESSAGE.format(self.polling_interval))

        ssl_values = self._ssl_values()
        has_any_ssl_option = any(ssl_values.values())
        if self.is_ssl or has_any_ssl_option:
            missing = [name for name, value in ssl_values.items() if not value]
            if missing:
                errors.append(f"Missing SSL option(s): {', '.join(missing)} "
                              f"(all SSL options are required together)")

        return errors

    def get_warnings(self) -> List[str]:
        """Return non-fatal configuration issues."""
        warnings = []
        if not self.is_ssl and any(self._ssl_values().values()):
            warnings.append('Ignoring SSL options, server url does not start with "ssl://"')
        return warnings


class ConfigManager:
    """Manages application configuration from environment variables and command line overrides."""

    REQUIRED_ENV_VARS = [
        'QUEUE_SERVER_URL', 'QUEUE_USER', 'QUEUE_PASSWORD', 'QUEUE_NAME',
        'SOURCE_FOLDER', 'TARGET_FOLDER'
    ]
    OPTIONAL_ENV_VARS = [
        'FILE_EXTENSION', 'ENABLE_HEADERS', 'POLLING_INTERVAL',
        'SSL_CLIENT_KEY', 'SSL_CA', 'SSL_SERVER_KEY', 'SSL_PASSWORD'
    ]
    PATH_ENV_VARS = ['SOURCE_FOLDER', 'TARGET_FOLDER', 'SSL_CLIENT_KEY', 'SSL_CA', 'SSL_SERVER_KEY']

    def __init__(self, env_file: Optional[str] = '.env'):
        """Initialize ConfigManager with optional .env file path."""
        self.env_file = env_file
        self._config: Optional[AppConfig] = None
        self.warnings: List[str] = []
        self._parse_errors: List[str] = []

    def load_config(self, overrides: Optional[Dict[str, Optional[str]]] = None) -> Dict[str, str]:
        """
        Load configuration from environment variables and .env file.

        Args:
            overrides: Values keyed by environment variable name that take
                precedence over the environment (None values are ignored)

        Returns:
            Dict[str, str]: Raw configuration values
        """
        if self.env_file and os.path.exists(self.env_file):
            load_dotenv(self.env_file)

        config = {}
        for var in self.REQUIRED_ENV_VARS + self.OPTIONAL_ENV_VARS:
            value = os.getenv(var)
            if overrides and overrides.get(var) is not None:
                value = str(overrides[var])

            if value and var in self.PATH_ENV_VARS:
                # Expand user home directory (~) and environment variables
                value = os.path.expanduser(os.path.expandvars(value))

            config[var] = value or ""

        return config

    def build_app_config(self, config: Dict[str, str]) -> AppConfig:
        """
        Create an AppConfig from a raw configuration dictionary.

        Values that cannot be converted are recorded and reported by
        validate_config() using the text as it was given.
        """
        self._parse_errors = []
        interval_value = (config.get('POLLING_INTERVAL') or '').strip()
        polling_interval = DEFAULT_POLLING_INTERVAL
        if interval_value:
            try:
                polling_interval = float(interval_value)
            except ValueError:
                self._parse_errors.append(INVALID_INTERVAL_MESSAGE.format(interval_value))
            else:
                if not math.isfinite(polling_interval) or polling_interval <= 0:
                    self._parse_errors.append(INVALID_INTERVAL_MESSAGE.format(interval_value))
                    polling_interval = DEFAULT_POLLING_INTERVAL

        return AppConfig(
            server_url=config.get('QUEUE_SERVER_URL', ''),
            user=config.get('QUEUE_USER', ''),
            password=config.get('QUEUE_PASSWORD', ''),
            queue_name=config.get('QUEUE_NAME', ''),
            source_folder=config.get('SOURCE_FOLDER', ''),
            target_folder=config.get('TARGET_FOLDER', ''),
            extension=normalize_extension(config.get('FILE_EXTENSION')),
            headers_enabled=config.get('ENABLE_HEADERS', '').lower() in TRUE_VALUES,
            polling_interval=polling_interval,
            ssl_client_key=config.get('SSL_CLIENT_KEY') or None,
            ssl_ca=config.get('SSL_CA') or None,
            ssl_server_key=config.get('SSL_SERVER_KEY') or None,
            ssl_password=config.get('SSL_PASSWORD') or None
        )

    def validate_config(self, config: Dict[str, str]) -> bool:
        """Validate configuration dictionary and return True if valid."""
        try:
            app_config = self.build_app_config(config)

            errors = self._parse_errors + app_config.validate()
            if errors:
                critical_errors = []
                warning_errors = []

                for error in errors:
                    if any(keyword in error.lower() for keyword in
                           ['required', 'missing', 'not provided', 'does not exist', 'not a directory']):
                        critical_errors.append(error)
                    else:
                        warning_errors.append(error)

                error_message = "Configuration validation failed:"
                if critical_errors:
                    error_message += "\n\nCritical errors (must be fixed):"
                    error_message += "\n" + "\n".join(f"- {error}" for error in critical_errors)
                if warning_errors:
                    error_message += "\n\nWarnings (should be reviewed):"
                    error_message += "\n" + "\n".join(f"- {error}" for error in warning_errors)

                raise ConfigurationValidationError(error_message, critical_errors, warning_errors)

            self.warnings = app_config.get_warnings()
            self._config = app_config
            return True

        except ConfigurationValidationError:
            raise
        except Exception as e:
            raise ConfigurationValidationError(
                f"Unexpected error during configuration validation: {str(e)}",
                [str(e)],
                []
            ) from e

    def get_config(self) -> AppConfig:
        """Get the validated configuration."""
        if not self._config:
            raise RuntimeError("Configuration not loaded. Call load_config() and validate_config() first.")
        return self._config

    def initialize(self, overrides: Optional[Dict[str, Optional[str]]] = None) -> AppConfig:
        """Load and validate configuration in one step."""
        config_dict = self.load_config(overrides)
        self.validate_config(config_dict)
        return self._config

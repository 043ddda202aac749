"""
Main Application Orchestrator for Folder Queue Publisher.

This module contains the main application class that coordinates all components,
handles the startup sequence, graceful shutdown, and fatal startup errors.
"""

import signal
import time
from pathlib import Path
from typing import Callable, Dict, Optional

from folder_publisher.config.config_manager import ConfigManager, AppConfig, ConfigurationValidationError
from folder_publisher.services.logger_service import LoggerService
from folder_publisher.core.directory_watcher import DirectoryWatcher
from folder_publisher.core.file_manager import FileManager
from folder_publisher.core.file_processor import FileProcessor
from folder_publisher.core.queue_sink import QueueSink, QueueConnectionError
from folder_publisher.core.stomp_queue import StompQueueSink


QueueSinkFactory = Callable[[AppConfig, LoggerService], QueueSink]


def create_queue_sink(config: AppConfig, logger_service: LoggerService) -> QueueSink:
    """Create the STOMP queue sink described by the configuration."""
    return StompQueueSink(
        server_url=config.server_url,
        user=config.user,
        password=config.password,
        queue_name=config.queue_name,
        logger_service=logger_service,
        ssl_settings=config.ssl_settings
    )


class FolderQueuePublisherApp:
    """
    Main application orchestrator that coordinates all components.

    Connects to the queue, wires the file processor to the directory watcher,
    and keeps the process alive until a shutdown is requested.
    """

    def __init__(self, env_file: Optional[str] = '.env', log_file: Optional[str] = None,
                 cli_overrides: Optional[Dict[str, Optional[str]]] = None,
                 queue_sink_factory: Optional[QueueSinkFactory] = None):
        """
        Initialize the application.

        Args:
            env_file: Path to .env file for configuration (default: '.env')
            log_file: Optional path to log file (default: None for console only)
            cli_overrides: Command line values keyed by environment variable name
            queue_sink_factory: Builds the queue sink (default: STOMP sink)
        """
        self.env_file = env_file
        self.log_file = log_file
        self.cli_overrides = cli_overrides or {}
        self.queue_sink_factory = queue_sink_factory or create_queue_sink

        # Component instances
        self.config_manager: Optional[ConfigManager] = None
        self.logger_service: Optional[LoggerService] = None
        self.queue_sink: Optional[QueueSink] = None
        self.file_manager: Optional[FileManager] = None
        self.file_processor: Optional[FileProcessor] = None
        self.directory_watcher: Optional[DirectoryWatcher] = None

        # Application state
        self.config: Optional[AppConfig] = None
        self.is_running = False
        self.shutdown_requested = False
        self.health_check_failed = False

        self._setup_signal_handlers()

    def _setup_signal_handlers(self) -> None:
        """Setup signal handlers for graceful shutdown."""
        signal.signal(signal.SIGINT, self._signal_handler)
        signal.signal(signal.SIGTERM, self._signal_handler)

    def _signal_handler(self, signum, frame):
        """Handle shutdown signals gracefully."""
        print(f"\nReceived signal {signum}. Initiating graceful shutdown...")
        self.shutdown_requested = True

    def initialize(self) -> bool:
        """
        Initialize all application components in proper sequence.

        Returns:
            bool: True if initialization successful, False otherwise
        """
        try:
            # Step 1: Load and validate configuration
            print("Loading configuration...")
            self.config_manager = ConfigManager(self.env_file)
            self.config = self.config_manager.initialize(self.cli_overrides)

            # Step 2: Initialize logging service
            self.logger_service = LoggerService.setup_logger(log_file_path=self.log_file)
            for warning in self.config_manager.warnings:
                self.logger_service.log_warning(warning)

            # Step 3: Connect to the queue
            self.queue_sink = self.queue_sink_factory(self.config, self.logger_service)
            self.queue_sink.connect()

            # Step 4: Initialize file manager and processor
            self.file_manager = FileManager(
                source_folder=self.config.source_folder,
                target_folder=self.config.target_folder,
                logger_service=self.logger_service
            )
            self.file_processor = FileProcessor(
                queue_sink=self.queue_sink,
                file_manager=self.file_manager,
                logger_service=self.logger_service,
                headers_enabled=self.config.headers_enabled
            )

            # Step 5: Initialize directory watcher
            self.directory_watcher = DirectoryWatcher(
                directory_path=self.config.source_folder,
                extension=self.config.extension,
                logger_service=self.logger_service,
                interval=self.config.polling_interval
            )
            self.directory_watcher.add_listener(self.file_processor)

            self.logger_service.log_info(f'Watching directory "{self.directory_watcher.directory}" '
                                         f'for {self.config.extension} files')
            self.logger_service.log_info(f'Moving processed files to "{self.file_manager.target_folder}"')
            return True

        except ConfigurationValidationError as e:
            print(f"ERROR: {e}")
            return False

        except QueueConnectionError as e:
            self.logger_service.log_error("Unable to connect to queue server", e)
            self._cleanup_on_failure()
            return False

        except Exception as e:
            error_msg = f"Failed to initialize application: {str(e)}"
            print(f"ERROR: {error_msg}")
            if self.logger_service:
                self.logger_service.log_error(error_msg, e)
            self._cleanup_on_failure()
            return False

    def _cleanup_on_failure(self) -> None:
        """Release partially initialized components on initialization failure."""
        if self.queue_sink:
            self.queue_sink.close()

    def _validate_initialization(self) -> bool:
        """Validate that all required components are initialized."""
        required_components = [
            self.config_manager, self.logger_service, self.queue_sink,
            self.file_manager, self.file_processor, self.directory_watcher, self.config
        ]
        return all(component is not None for component in required_components)

    def start(self) -> None:
        """
        Start watching and run the main loop until shutdown.

        Raises:
            RuntimeError: If application is not properly initialized or watching fails
        """
        if not self._validate_initialization():
            raise RuntimeError("Application not properly initialized. Call initialize() first.")

        try:
            self.directory_watcher.start()
            self.is_running = True
            print("Application is running. Press Ctrl+C to stop.")
        except Exception as e:
            error_msg = f"Failed to start directory watching: {str(e)}"
            self.logger_service.log_error(error_msg, e)
            raise RuntimeError(error_msg) from e

        self._run_main_loop()

    def _run_main_loop(self, health_check_interval: float = 30.0, stats_report_interval: float = 300.0) -> None:
        """
        Keep the process alive, checking health and reporting statistics periodically.
        """
        last_health_check = time.time()
        last_stats_report = time.time()

        try:
            while self.is_running and not self.shutdown_requested:
                current_time = time.time()

                if current_time - last_health_check >= health_check_interval:
                    if not self._perform_health_check():
                        self.health_check_failed = True
                        break
                    last_health_check = current_time

                if current_time - last_stats_report >= stats_report_interval:
                    self._report_statistics()
                    last_stats_report = current_time

                time.sleep(1.0)

        except KeyboardInterrupt:
            print("\nShutdown requested by user.")
        finally:
            self.shutdown()

    def _perform_health_check(self) -> bool:
        """
        Check that the watcher is alive and the source folder is still reachable.

        Returns:
            bool: True if all components are healthy, False otherwise
        """
        if not self.directory_watcher.is_watching():
            self.logger_service.log_error("Directory watching stopped unexpectedly")
            return False

        if not Path(self.config.source_folder).is_dir():
            self.logger_service.log_error(f"Source folder no longer exists: {self.config.source_folder}")
            return False

        if not self.queue_sink.is_connected():
            self.logger_service.log_error("Queue connection lost")
            return False

        return True

    def _report_statistics(self) -> None:
        """Report processing and watching statistics."""
        processing_stats = self.file_processor.get_processing_stats()
        watch_stats = self.directory_watcher.get_watch_stats()

        self.logger_service.log_info(
            f"Application Statistics - "
            f"Polls: {watch_stats['polling_cycles']}, "
            f"Watched files: {watch_stats['watched_files']}, "
            f"Processed: {processing_stats['total_processed']}, "
            f"Sent: {processing_stats['sent']}, "
            f"Moved: {processing_stats['moved']}, "
            f"Read failures: {processing_stats['read_failures']}, "
            f"Send failures: {processing_stats['send_failures']}, "
            f"Move failures: {processing_stats['move_failures']}"
        )

    def shutdown(self) -> None:
        """
        Perform graceful shutdown of all application components.
        """
        print("Shutting down application...")

        if self.directory_watcher:
            self.directory_watcher.halt()

        if self.directory_watcher and not self.directory_watcher.is_stopped():
            # A listener may still be inside send_message on the watch thread
            self.logger_service.log_warning("Watch thread is still running, leaving queue connection open")
        elif self.queue_sink:
            self.queue_sink.close()

        # Reset signal handlers to default
        signal.signal(signal.SIGINT, signal.SIG_DFL)
        signal.signal(signal.SIGTERM, signal.SIG_DFL)

        if self.logger_service:
            self.logger_service.log_info("Done.")

        self.is_running = False

    def run(self) -> int:
        """
        Complete application lifecycle: initialize, start, and handle shutdown.

        Returns:
            int: Exit code (0 for success, 1 for error)
        """
        try:
            if not self.initialize():
                return 1

            self.start()
            return 1 if self.health_check_failed else 0

        except Exception as e:
            error_msg = f"Application failed: {str(e)}"
            print(f"FATAL ERROR: {error_msg}")
            if self.logger_service:
                self.logger_service.log_error(error_msg, e)
            return 1

        finally:
            if self.is_running:
                self.shutdown()


def create_app(env_file: Optional[str] = '.env', log_file: Optional[str] = None,
               cli_overrides: Optional[Dict[str, Optional[str]]] = None,
               queue_sink_factory: Optional[QueueSinkFactory] = None) -> FolderQueuePublisherApp:
    """
    Factory function to create a configured application instance.

    Args:
        env_file: Path to .env file for configuration
        log_file: Optional path to log file
        cli_overrides: Command line values keyed by environment variable name
        queue_sink_factory: Optional factory building the queue sink

    Returns:
        FolderQueuePublisherApp: Configured application instance
    """
    return FolderQueuePublisherApp(env_file=env_file, log_file=log_file,
                                   cli_overrides=cli_overrides, queue_sink_factory=queue_sink_factory)

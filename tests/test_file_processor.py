"""
Unit tests for the FileProcessor class.

Tests cover publishing file content to the queue sink, header parsing,
moving published files, and leaving files in place when reading or
sending fails.
"""

import tempfile
from pathlib import Path
from unittest.mock import Mock

import pytest

from folder_publisher.core.file_events import FileEvent
from folder_publisher.core.file_manager import FileManager
from folder_publisher.core.file_processor import FileProcessor, ProcessingResult
from folder_publisher.core.queue_sink import QueueSink, QueueSendError
from folder_publisher.services.logger_service import LoggerService


class TestFileProcessor:
    """Test cases for FileProcessor class."""

    @pytest.fixture
    def temp_dirs(self):
        """Create temporary source and target directories."""
        with tempfile.TemporaryDirectory() as temp_dir:
            temp_path = Path(temp_dir).resolve()
            source_dir = temp_path / "source"
            target_dir = temp_path / "target"
            source_dir.mkdir()
            target_dir.mkdir()

            yield {'source': source_dir, 'target': target_dir}

    @pytest.fixture
    def mock_services(self, temp_dirs):
        """Create the queue sink mock and a real file manager."""
        logger_service = Mock(spec=LoggerService)
        queue_sink = Mock(spec=QueueSink)
        file_manager = FileManager(str(temp_dirs['source']), str(temp_dirs['target']), logger_service)

        return {
            'queue_sink': queue_sink,
            'file_manager': file_manager,
            'logger_service': logger_service
        }

    @pytest.fixture
    def file_processor(self, mock_services):
        """Create FileProcessor instance with headers disabled."""
        return FileProcessor(
            queue_sink=mock_services['queue_sink'],
            file_manager=mock_services['file_manager'],
            logger_service=mock_services['logger_service']
        )

    def test_process_file_success(self, file_processor, mock_services, temp_dirs):
        """Test the whole content is sent and the file is moved to the target folder."""
        test_file = temp_dirs['source'] / "order.xml"
        content = b"X: 1\n\n<order id=\"1\"/>\n"
        test_file.write_bytes(content)

        result = file_processor.process_file(str(test_file))

        assert result.success is True
        assert result.sent is True
        assert result.moved is True
        assert result.error_message is None
        mock_services['queue_sink'].send_message.assert_called_once_with(content.decode(), {})
        assert not test_file.exists()
        assert (temp_dirs['target'] / "order.xml").read_bytes() == content

    def test_process_file_with_headers(self, mock_services, temp_dirs):
        """Test the header block is sent as message headers when enabled."""
        processor = FileProcessor(
            queue_sink=mock_services['queue_sink'],
            file_manager=mock_services['file_manager'],
            logger_service=mock_services['logger_service'],
            headers_enabled=True
        )
        test_file = temp_dirs['source'] / "order.xml"
        test_file.write_text("X: 1\nY: 2\n\nbody line 1\nbody line2\n")

        result = processor.process_file(str(test_file))

        assert result.success is True
        mock_services['queue_sink'].send_message.assert_called_once_with(
            "body line 1\nbody line2\n", {"X": "1", "Y": "2"}
        )

    def test_process_nested_file_keeps_structure(self, file_processor, temp_dirs):
        """Test files in subfolders are moved to the mirrored target path."""
        nested = temp_dirs['source'] / "a" / "b"
        nested.mkdir(parents=True)
        test_file = nested / "deep.xml"
        test_file.write_text("<deep/>")

        result = file_processor.process_file(str(test_file))

        assert result.success is True
        assert (temp_dirs['target'] / "a" / "b" / "deep.xml").read_text() == "<deep/>"

    def test_process_file_overwrites_existing_target(self, file_processor, temp_dirs):
        """Test a file already at the target path is replaced."""
        test_file = temp_dirs['source'] / "order.xml"
        test_file.write_text("<new/>")
        (temp_dirs['target'] / "order.xml").write_text("<old/>")

        result = file_processor.process_file(str(test_file))

        assert result.success is True
        assert (temp_dirs['target'] / "order.xml").read_text() == "<new/>"

    def test_send_failure_leaves_file_untouched(self, file_processor, mock_services, temp_dirs):
        """Test the file stays at its original location when sending fails."""
        test_file = temp_dirs['source'] / "order.xml"
        test_file.write_text("<order/>")
        mtime = test_file.stat().st_mtime
        mock_services['queue_sink'].send_message.side_effect = QueueSendError("broker down")

        result = file_processor.process_file(str(test_file))

        assert result.success is False
        assert result.sent is False
        assert "broker down" in result.error_message
        assert test_file.read_text() == "<order/>"
        assert test_file.stat().st_mtime == mtime
        assert not (temp_dirs['target'] / "order.xml").exists()
        assert file_processor.get_processing_stats()['send_failures'] == 1
        mock_services['logger_service'].log_error.assert_called_once()

    def test_unexpected_sink_error_is_contained(self, file_processor, mock_services, temp_dirs):
        """Test an unexpected sink exception does not escape the processor."""
        test_file = temp_dirs['source'] / "order.xml"
        test_file.write_text("<order/>")
        mock_services['queue_sink'].send_message.side_effect = RuntimeError("unexpected")

        result = file_processor.process_file(str(test_file))

        assert result.success is False
        assert test_file.exists()

    def test_read_failure_skips_send(self, file_processor, mock_services, temp_dirs):
        """Test a file that cannot be read is not sent."""
        missing = temp_dirs['source'] / "gone.xml"

        result = file_processor.process_file(str(missing))

        assert result.success is False
        assert "Unable to read file" in result.error_message
        mock_services['queue_sink'].send_message.assert_not_called()
        assert file_processor.get_processing_stats()['read_failures'] == 1

    def test_latin1_content_is_sent(self, file_processor, mock_services, temp_dirs):
        """Test files that are not valid UTF-8 are read as Latin-1."""
        test_file = temp_dirs['source'] / "legacy.xml"
        test_file.write_bytes("<name>café</name>".encode("latin-1"))

        result = file_processor.process_file(str(test_file))

        assert result.success is True
        mock_services['queue_sink'].send_message.assert_called_once_with("<name>café</name>", {})

    def test_move_failure_reported_after_send(self, mock_services, temp_dirs):
        """Test a failed move is reported while the message counts as sent."""
        file_manager = Mock(spec=FileManager)
        file_manager.get_relative_path.return_value = "order.xml"
        file_manager.move_to_target.return_value = False
        processor = FileProcessor(mock_services['queue_sink'], file_manager, mock_services['logger_service'])
        test_file = temp_dirs['source'] / "order.xml"
        test_file.write_text("<order/>")

        result = processor.process_file(str(test_file))

        assert result.success is False
        assert result.sent is True
        assert result.moved is False
        mock_services['queue_sink'].send_message.assert_called_once()
        stats = processor.get_processing_stats()
        assert stats['sent'] == 1
        assert stats['move_failures'] == 1

    def test_added_and_modified_events_are_processed(self, file_processor, mock_services, temp_dirs):
        """Test added and modified events both publish the file."""
        first = temp_dirs['source'] / "first.xml"
        second = temp_dirs['source'] / "second.xml"
        first.write_text("<first/>")
        second.write_text("<second/>")

        file_processor.on_event(FileEvent.added(str(first)))
        file_processor.on_event(FileEvent.modified(str(second)))

        assert mock_services['queue_sink'].send_message.call_count == 2
        assert (temp_dirs['target'] / "first.xml").exists()
        assert (temp_dirs['target'] / "second.xml").exists()

    def test_deleted_event_is_ignored(self, file_processor, mock_services, temp_dirs):
        """Test deleted events cause no queue or filesystem activity."""
        file_processor.on_event(FileEvent.deleted(str(temp_dirs['source'] / "gone.xml")))

        mock_services['queue_sink'].send_message.assert_not_called()
        assert file_processor.get_processing_stats()['total_processed'] == 0

    def test_processing_result_defaults(self):
        result = ProcessingResult(success=True, file_path="/tmp/a.xml")

        assert result.sent is False
        assert result.moved is False
        assert result.error_message is None

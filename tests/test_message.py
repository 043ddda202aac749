"""Unit tests for header block parsing."""

import pytest

from folder_publisher.core.message import Message, parse_message, parse_header_line


class TestParseHeaderLine:
    """Test cases for single header line recognition."""

    @pytest.mark.parametrize("line, expected", [
        ("X: 1", ("X", "1")),
        ("Content-Type:text/xml", ("Content-Type", "text/xml")),
        ("  Name  :  spaced value  ", ("Name", "spaced value")),
    ])
    def test_valid_header_lines(self, line, expected):
        assert parse_header_line(line) == expected

    @pytest.mark.parametrize("line", [
        "not a header",
        "Time: 12:00",
        ": value",
        "Name:",
        "Name:   ",
        "<?xml version=\"1.0\"?>",
    ])
    def test_invalid_header_lines(self, line):
        assert parse_header_line(line) is None


class TestParseMessage:
    """Test cases for splitting file content into headers and body."""

    def test_headers_and_body(self):
        """Test headers end at the blank line, which is not part of the body."""
        message = parse_message("X: 1\nY: 2\n\nbody line 1\nbody line2\n")

        assert message.headers == {"X": "1", "Y": "2"}
        assert message.body == "body line 1\nbody line2\n"

    def test_no_header_block(self):
        """Test content without headers is returned unchanged as the body."""
        message = parse_message("not a header\nbody")

        assert message.headers == {}
        assert message.body == "not a header\nbody"

    def test_non_header_line_starts_body(self):
        """Test a non-header line ends the block and is kept as first body line."""
        message = parse_message("X: 1\n<root>\n</root>\n")

        assert message.headers == {"X": "1"}
        assert message.body == "<root>\n</root>\n"

    def test_later_header_lines_after_body_start_are_body(self):
        """Test header-like lines after the block are part of the body."""
        message = parse_message("X: 1\n\nY: 2\n")

        assert message.headers == {"X": "1"}
        assert message.body == "Y: 2\n"

    def test_duplicate_header_last_wins(self):
        """Test a repeated header name keeps the later value."""
        message = parse_message("X: 1\nX: 2\n\nbody\n")

        assert message.headers == {"X": "2"}

    def test_only_headers(self):
        """Test content made only of headers has an empty body."""
        message = parse_message("X: 1\nY: 2\n")

        assert message.headers == {"X": "1", "Y": "2"}
        assert message.body == ""

    def test_leading_blank_line(self):
        """Test a leading blank line ends an empty header block and is consumed."""
        message = parse_message("\nX: 1\n")

        assert message.headers == {}
        assert message.body == "X: 1\n"

    def test_empty_content(self):
        message = parse_message("")

        assert message == Message(body="", headers={})

    def test_crlf_line_endings(self):
        """Test Windows line endings are handled and kept in the body."""
        message = parse_message("X: 1\r\n\r\nbody\r\n")

        assert message.headers == {"X": "1"}
        assert message.body == "body\r\n"

    def test_header_order_is_irrelevant(self):
        assert parse_message("A: 1\nB: 2\n\n").headers == parse_message("B: 2\nA: 1\n\n").headers


class TestMessage:
    def test_headers_default_to_empty_dict(self):
        assert Message(body="x").headers == {}
        assert Message(body="x", headers=None).headers == {}

"""
Queue message model and header block parsing.

A file may start with a block of "Name: Value" lines. The block ends at the
first blank line, which is dropped, or at the first line that is not a header,
which becomes the first line of the body.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional


HEADER_SEPARATOR = ":"


@dataclass
class Message:
    """Message body and headers submitted to a queue sink."""
    body: str
    headers: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        """Initialize headers as empty dict if None."""
        if self.headers is None:
            self.headers = {}


def parse_header_line(line: str) -> Optional[tuple]:
    """
    Split a header line into its name and value.

    Args:
        line: A single line without its terminator

    Returns:
        (name, value) tuple, or None if the line is not a header line
    """
    if line.count(HEADER_SEPARATOR) != 1:
        return None

    name, value = line.split(HEADER_SEPARATOR)
    name = name.strip()
    value = value.strip()
    if not name or not value:
        return None

    return name, value


def parse_message(content: str) -> Message:
    """
    Parse file content into headers and body.

    Duplicate header names keep the last value seen.

    Args:
        content: Full file content

    Returns:
        Message: Parsed headers and the remaining body
    """
    lines = content.splitlines(keepends=True)
    headers: Dict[str, str] = {}
    body_start = len(lines)

    for index, line in enumerate(lines):
        stripped = line.rstrip("\r\n")
        if not stripped.strip():
            body_start = index + 1
            break

        header = parse_header_line(stripped)
        if header is None:
            body_start = index
            break

        name, value = header
        headers[name] = value

    return Message(body="".join(lines[body_start:]), headers=headers)

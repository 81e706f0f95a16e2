"""File helpers whose failures map onto the client's error codes."""

from __future__ import annotations

import os
from typing import Union

from redcap_client.errors import ErrorCode, RedcapClientError


def _is_readable(path: str) -> bool:
    return os.access(path, os.R_OK)


def check_input_file(filename: str) -> None:
    """Raise ``INPUT_FILE_NOT_FOUND`` / ``INPUT_FILE_UNREADABLE`` as appropriate."""
    if not os.path.isfile(filename):
        raise RedcapClientError(
            f'The input file "{filename}" could not be found.',
            ErrorCode.INPUT_FILE_NOT_FOUND,
        )
    if not _is_readable(filename):
        raise RedcapClientError(
            f'The input file "{filename}" was unreadable.',
            ErrorCode.INPUT_FILE_UNREADABLE,
        )


def file_to_string(filename: str) -> str:
    """Return the contents of a text file."""
    check_input_file(filename)
    try:
        with open(filename, "r", encoding="utf-8") as f:
            return f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise RedcapClientError(
            f'An error occurred in input file "{filename}": {e}',
            ErrorCode.INPUT_FILE_ERROR,
            cause=e,
        ) from e


def write_string_to_file(content: Union[str, bytes], filename: str, append: bool = False) -> int:
    """Write (or append) content to a file and return the number of bytes written."""
    data = content.encode("utf-8") if isinstance(content, str) else content
    mode = "ab" if append else "wb"
    try:
        with open(filename, mode) as f:
            return f.write(data)
    except OSError as e:
        raise RedcapClientError(
            f'An error occurred in output file "{filename}": {e}',
            ErrorCode.OUTPUT_FILE_ERROR,
            cause=e,
        ) from e


def append_string_to_file(content: Union[str, bytes], filename: str) -> int:
    return write_string_to_file(content, filename, append=True)

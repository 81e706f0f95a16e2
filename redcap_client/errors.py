"""Error taxonomy for the REDCap client.

Every failure is raised as a single ``RedcapClientError`` carrying an
immutable ``ErrorRecord``. The ``code`` distinguishes argument problems,
transport/HTTP problems and errors reported by REDCap itself.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Optional


class ErrorCode(IntEnum):
    """Kinds of error raised by the client."""

    INVALID_ARGUMENT = 1
    TOO_MANY_ARGUMENTS = 2
    INVALID_URL = 3
    CA_CERTIFICATE_FILE_NOT_FOUND = 4
    CA_CERTIFICATE_FILE_UNREADABLE = 5
    CONNECTION_ERROR = 6
    REDCAP_API_ERROR = 7
    JSON_ERROR = 8
    OUTPUT_FILE_ERROR = 9
    INPUT_FILE_NOT_FOUND = 10
    INPUT_FILE_UNREADABLE = 11
    INPUT_FILE_ERROR = 12


@dataclass(frozen=True)
class ErrorRecord:
    """Structured description of one failure."""

    code: ErrorCode
    message: str
    transport_error_number: Optional[int] = None
    http_status_code: Optional[int] = None
    cause: Optional[BaseException] = None


class RedcapClientError(Exception):
    """The exception raised for every client failure.

    Example:
        try:
            info = project.export_project_info()
        except RedcapClientError as e:
            if e.code == ErrorCode.CONNECTION_ERROR:
                print(f"transport error {e.transport_error_number}: {e.message}")
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode,
        *,
        transport_error_number: Optional[int] = None,
        http_status_code: Optional[int] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.record = ErrorRecord(
            code=code,
            message=message,
            transport_error_number=transport_error_number,
            http_status_code=http_status_code,
            cause=cause,
        )

    @property
    def code(self) -> ErrorCode:
        return self.record.code

    @property
    def message(self) -> str:
        return self.record.message

    @property
    def transport_error_number(self) -> Optional[int]:
        return self.record.transport_error_number

    @property
    def http_status_code(self) -> Optional[int]:
        return self.record.http_status_code

    @property
    def cause(self) -> Optional[BaseException]:
        return self.record.cause

    def __repr__(self) -> str:
        return f"RedcapClientError(code={self.code.name}, message={self.message!r})"


def invalid_argument(message: str) -> RedcapClientError:
    """Shorthand used by the validators."""
    return RedcapClientError(message, ErrorCode.INVALID_ARGUMENT)

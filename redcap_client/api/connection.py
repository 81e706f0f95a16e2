"""Connection to the API of a REDCap instance.

All network I/O of the client goes through ``ApiConnection``. It is a
low-level interface, mainly used by ``RedCapProject``, but can be used
directly to reach API functionality the project class does not wrap.
"""

from __future__ import annotations

import dataclasses
import os
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union
from urllib.parse import urlencode

import structlog

from redcap_client.api.classifier import classify_http_status
from redcap_client.api.transport import (
    BAD_CONTENT_ENCODING,
    RequestsTransport,
    Transport,
    TransportError,
    TransportResponse,
)
from redcap_client.errors import ErrorCode, RedcapClientError
from redcap_client.fileutil import check_input_file
from redcap_client.validation import (
    validate_api_url,
    validate_ca_certificate_file,
    validate_positive_int,
    validate_ssl_verify,
)

logger = structlog.get_logger(__name__)

DEFAULT_TIMEOUT_IN_SECONDS = 1200  # 20 minutes
DEFAULT_CONNECTION_TIMEOUT_IN_SECONDS = 20


@dataclass(frozen=True)
class ConnectionConfig:
    """Transport settings shared by every call made on a connection."""

    url: str
    ssl_verify: bool = True
    ca_certificate_file: Optional[str] = None
    timeout_in_seconds: int = DEFAULT_TIMEOUT_IN_SECONDS
    connection_timeout_in_seconds: int = DEFAULT_CONNECTION_TIMEOUT_IN_SECONDS

    @property
    def verify(self) -> Union[bool, str]:
        if self.ssl_verify and self.ca_certificate_file:
            return self.ca_certificate_file
        return self.ssl_verify

    @property
    def timeout(self) -> tuple[float, float]:
        """``(connect, total)`` tuple; the transport also uses the second value as the per-read timeout."""
        return (self.connection_timeout_in_seconds, self.timeout_in_seconds)


@dataclass(frozen=True)
class CallInfo:
    """Diagnostics for one call; a new snapshot replaces the previous one."""

    url: str
    http_code: int = 0
    content_type: Optional[str] = None
    redirect_url: Optional[str] = None
    total_time: float = 0.0
    size_download: int = 0
    transport_error_number: Optional[int] = None
    transport_error_message: Optional[str] = None


def encode_parameters(params: Mapping[str, Any]) -> list[tuple[str, str]]:
    """Flatten request parameters into form fields.

    Lists become ``name[0]``, ``name[1]``... booleans become ``true`` /
    ``false`` and ``None`` values are left out.
    """
    fields: list[tuple[str, str]] = []
    for name, value in params.items():
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            for index, item in enumerate(value):
                fields.append((f"{name}[{index}]", _encode_scalar(item)))
        else:
            fields.append((name, _encode_scalar(value)))
    return fields


def _encode_scalar(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _connection_error(errno: int, message: str, cause: Optional[BaseException] = None) -> RedcapClientError:
    if not message:
        message = f"A connection error (number {errno}) occurred."
    return RedcapClientError(
        message,
        ErrorCode.CONNECTION_ERROR,
        transport_error_number=errno,
        cause=cause,
    )


def _decode(resp: TransportResponse) -> str:
    try:
        return resp.text
    except (UnicodeDecodeError, LookupError) as e:
        raise RedcapClientError(
            f"The REDCap API response could not be decoded as {resp.encoding}: {e}",
            ErrorCode.CONNECTION_ERROR,
            transport_error_number=BAD_CONTENT_ENCODING,
            http_status_code=resp.status_code,
            cause=e,
        ) from e


def _is_readable(path: str) -> bool:
    return os.access(path, os.R_OK)


class ApiConnection:
    """A connection to a REDCap API URL.

    Not safe to share between concurrent operations, since the most recent
    ``CallInfo`` belongs to the connection; use ``clone()`` to get an
    independent connection with the same settings.
    """

    def __init__(
        self,
        url: str,
        ssl_verify: bool = True,
        ca_certificate_file: Optional[str] = None,
        timeout_in_seconds: int = DEFAULT_TIMEOUT_IN_SECONDS,
        connection_timeout_in_seconds: int = DEFAULT_CONNECTION_TIMEOUT_IN_SECONDS,
        transport: Optional[Transport] = None,
    ):
        """Create a connection; no network I/O is done here.

        Args:
            url: URL of the REDCap API, e.g. ``https://redcap.example.edu/api/``.
            ssl_verify: Verify the server's TLS certificate. Setting this to
                False is not secure.
            ca_certificate_file: CA bundle used for verification.
            timeout_in_seconds: Timeout for receiving the response.
            connection_timeout_in_seconds: Timeout for establishing the connection.
            transport: Transport to send requests with; defaults to requests.

        Raises:
            RedcapClientError: ``INVALID_ARGUMENT`` for bad arguments, or
                ``CA_CERTIFICATE_FILE_NOT_FOUND`` /
                ``CA_CERTIFICATE_FILE_UNREADABLE``.
        """
        self.config = ConnectionConfig(
            url=validate_api_url(url),
            ssl_verify=validate_ssl_verify(ssl_verify),
            ca_certificate_file=validate_ca_certificate_file(ca_certificate_file),
            timeout_in_seconds=validate_positive_int(timeout_in_seconds, "timeout_in_seconds"),
            connection_timeout_in_seconds=validate_positive_int(
                connection_timeout_in_seconds, "connection_timeout_in_seconds"
            ),
        )
        self._check_ca_certificate_file()
        self._transport = transport or RequestsTransport()
        self._last_call_info: Optional[CallInfo] = None

    @classmethod
    def from_config(cls, config: ConnectionConfig, transport: Optional[Transport] = None) -> "ApiConnection":
        return cls(
            config.url,
            ssl_verify=config.ssl_verify,
            ca_certificate_file=config.ca_certificate_file,
            timeout_in_seconds=config.timeout_in_seconds,
            connection_timeout_in_seconds=config.connection_timeout_in_seconds,
            transport=transport,
        )

    def _check_ca_certificate_file(self) -> None:
        ca_file = self.config.ca_certificate_file
        if not (self.config.ssl_verify and ca_file):
            return
        if not os.path.isfile(ca_file):
            raise RedcapClientError(
                f'The cert file "{ca_file}" does not exist.',
                ErrorCode.CA_CERTIFICATE_FILE_NOT_FOUND,
            )
        if not _is_readable(ca_file):
            raise RedcapClientError(
                f'The cert file "{ca_file}" exists, but cannot be read.',
                ErrorCode.CA_CERTIFICATE_FILE_UNREADABLE,
            )

    @property
    def url(self) -> str:
        return self.config.url

    @property
    def timeout_in_seconds(self) -> int:
        return self.config.timeout_in_seconds

    @timeout_in_seconds.setter
    def timeout_in_seconds(self, value: int) -> None:
        value = validate_positive_int(value, "timeout_in_seconds")
        self.config = dataclasses.replace(self.config, timeout_in_seconds=value)

    @property
    def connection_timeout_in_seconds(self) -> int:
        return self.config.connection_timeout_in_seconds

    @connection_timeout_in_seconds.setter
    def connection_timeout_in_seconds(self, value: int) -> None:
        value = validate_positive_int(value, "connection_timeout_in_seconds")
        self.config = dataclasses.replace(self.config, connection_timeout_in_seconds=value)

    def clone(self) -> "ApiConnection":
        """Independent connection sharing only the (immutable) settings."""
        return ApiConnection.from_config(self.config, transport=self._transport.clone())

    # ------------------------------------------------------------------
    # Calls
    # ------------------------------------------------------------------

    def call(self, data: str) -> str:
        """Post an already url-encoded request body and return the response text.

        Raises:
            RedcapClientError: ``INVALID_ARGUMENT`` if ``data`` is not a
                string, ``CONNECTION_ERROR`` on transport failure, or
                ``INVALID_URL`` for HTTP 301/404.
        """
        if not isinstance(data, str):
            raise RedcapClientError(
                f"Data passed to call() has type {type(data).__name__}, but should be a string.",
                ErrorCode.INVALID_ARGUMENT,
            )
        return _decode(self._execute(data))

    def call_with_array(self, params: Mapping[str, Any]) -> str:
        """Form-encode ``params`` and post them."""
        return self.call(urlencode(encode_parameters(params)))

    def call_for_content(self, params: Mapping[str, Any]) -> bytes:
        """Like ``call_with_array`` but return the raw response bytes."""
        return self._execute(urlencode(encode_parameters(params))).content

    def call_with_file(self, params: Mapping[str, Any], filename: str) -> str:
        """Post ``params`` with the given file attached as multipart ``file``."""
        check_input_file(filename)
        try:
            handle = open(filename, "rb")
        except OSError as e:
            raise RedcapClientError(
                f'An error occurred in input file "{filename}": {e}',
                ErrorCode.INPUT_FILE_ERROR,
                cause=e,
            ) from e
        with handle:
            files = {"file": (os.path.basename(filename), handle)}
            return _decode(self._execute(encode_parameters(params), files=files))

    def _execute(self, data, files=None) -> TransportResponse:
        url = self.config.url
        try:
            resp = self._transport.post(
                url,
                data,
                files=files,
                timeout=self.config.timeout,
                verify=self.config.verify,
            )
        except TransportError as e:
            self._last_call_info = CallInfo(
                url=url,
                transport_error_number=e.errno,
                transport_error_message=e.message,
            )
            logger.warning("api_call_failed", url=url, errno=e.errno, error=e.message)
            raise _connection_error(e.errno, e.message, cause=e) from e

        self._last_call_info = CallInfo(
            url=resp.url,
            http_code=resp.status_code,
            content_type=resp.content_type,
            redirect_url=resp.redirect_url,
            total_time=resp.total_time,
            size_download=len(resp.content),
        )
        logger.debug(
            "api_call",
            url=url,
            http_code=resp.status_code,
            total_time=round(resp.total_time, 3),
            bytes=len(resp.content),
        )
        classify_http_status(resp.status_code, url, resp.redirect_url)
        return resp

    def get_call_info(self) -> Optional[CallInfo]:
        """Return diagnostics for the most recent call (None before any call).

        Raises:
            RedcapClientError: ``CONNECTION_ERROR`` if the most recent call
                failed in the transport.
        """
        info = self._last_call_info
        if info is not None and info.transport_error_number is not None:
            raise _connection_error(info.transport_error_number, info.transport_error_message or "")
        return info

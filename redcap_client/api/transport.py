"""HTTP transport used by ``ApiConnection``.

``Transport`` is the seam between the connection and the network. In
production it is satisfied by ``RequestsTransport``; tests substitute a fake
that returns canned responses or raises ``TransportError``.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import IO, Mapping, Optional, Protocol, Sequence, Union

import requests
import structlog
import urllib3

logger = structlog.get_logger(__name__)

# Numeric transport error numbers (same numbering as libcurl)
UNSUPPORTED_PROTOCOL = 1
URL_MALFORMAT = 3
COULDNT_RESOLVE_HOST = 6
COULDNT_CONNECT = 7
OPERATION_TIMEDOUT = 28
TOO_MANY_REDIRECTS = 47
RECV_ERROR = 56
PEER_FAILED_VERIFICATION = 60
BAD_CONTENT_ENCODING = 61

# largest read between two checks of the call deadline
CHUNK_SIZE = 1024

Verify = Union[bool, str]
Files = Mapping[str, tuple[str, IO[bytes]]]


class TransportError(Exception):
    """Raised by a transport when no HTTP response could be obtained."""

    def __init__(self, errno: int, message: str):
        super().__init__(message)
        self.errno = errno
        self.message = message


@dataclass
class TransportResponse:
    status_code: int
    content: bytes
    url: str
    content_type: Optional[str] = None
    redirect_url: Optional[str] = None
    total_time: float = 0.0
    headers: Mapping[str, str] = field(default_factory=dict)
    encoding: str = "utf-8"

    @property
    def text(self) -> str:
        """Body decoded with the declared charset; raises ``UnicodeDecodeError`` if it does not match."""
        return self.content.decode(self.encoding)


class Transport(Protocol):
    """Minimal interface for posting one request."""

    def post(
        self,
        url: str,
        data: Union[str, Sequence[tuple[str, str]]],
        *,
        files: Optional[Files] = None,
        timeout: tuple[float, float],
        verify: Verify,
    ) -> TransportResponse:
        """Send one POST; raise ``TransportError`` if no response arrives."""
        ...

    def clone(self) -> "Transport":
        """Return an independent transport with the same behavior."""
        ...


class RequestsTransport:
    """``Transport`` backed by a ``requests.Session``.

    Redirects are never followed: a 301 is returned to the connection,
    which reports it instead of re-sending the token to another host.

    The read part of ``timeout`` limits the whole call, not only the wait
    between two packets: the body is streamed and the call fails with
    ``OPERATION_TIMEDOUT`` once that many seconds have passed since the
    request started.
    """

    def __init__(self, session: Optional[requests.Session] = None):
        self.session = session or requests.Session()
        self.session.headers.update({"Accept": "text/xml"})

    def post(
        self,
        url: str,
        data: Union[str, Sequence[tuple[str, str]]],
        *,
        files: Optional[Files] = None,
        timeout: tuple[float, float],
        verify: Verify,
    ) -> TransportResponse:
        headers = {}
        if isinstance(data, str) and files is None:
            headers["Content-Type"] = "application/x-www-form-urlencoded"
        start = time.monotonic()
        try:
            resp = self.session.post(
                url,
                data=data,
                files=files,
                headers=headers,
                timeout=timeout,
                verify=verify,
                allow_redirects=False,
                stream=True,
            )
            try:
                content = _read_body(resp, start + timeout[1], timeout[1])
            finally:
                resp.close()
        except requests.RequestException as e:
            errno = transport_errno_for(e)
            logger.debug("transport_error", url=url, errno=errno, error=str(e))
            raise TransportError(errno, str(e)) from e
        except TransportError as e:
            logger.debug("transport_error", url=url, errno=e.errno, error=e.message)
            raise

        content_type = resp.headers.get("Content-Type")
        return TransportResponse(
            status_code=resp.status_code,
            content=content,
            url=resp.url or url,
            content_type=content_type,
            redirect_url=resp.headers.get("Location"),
            total_time=time.monotonic() - start,
            headers=dict(resp.headers),
            encoding=charset_of(content_type) or "utf-8",
        )

    def clone(self) -> "RequestsTransport":
        session = requests.Session()
        session.headers.update(self.session.headers)
        return RequestsTransport(session)


def _read_body(resp: requests.Response, deadline: float, total_timeout: float) -> bytes:
    """Read the streamed body, failing once ``deadline`` has passed.

    ``read1`` returns as soon as any bytes arrive, so a server that sends a
    byte at a time cannot hold the call open past the deadline.
    """
    chunks = []
    received = 0
    while True:
        if time.monotonic() > deadline:
            raise TransportError(
                OPERATION_TIMEDOUT,
                f"Operation timed out after {total_timeout} seconds with {received} bytes received",
            )
        try:
            chunk = resp.raw.read1(CHUNK_SIZE, decode_content=True)
        except urllib3.exceptions.ReadTimeoutError as e:
            raise TransportError(OPERATION_TIMEDOUT, str(e)) from e
        except urllib3.exceptions.DecodeError as e:
            raise TransportError(BAD_CONTENT_ENCODING, str(e)) from e
        except (urllib3.exceptions.HTTPError, OSError) as e:
            raise TransportError(RECV_ERROR, str(e)) from e
        if not chunk:
            return b"".join(chunks)
        chunks.append(chunk)
        received += len(chunk)


def charset_of(content_type: Optional[str]) -> Optional[str]:
    """Return the charset declared in a Content-Type header, if any."""
    if not content_type:
        return None
    for part in content_type.split(";")[1:]:
        key, _, value = part.strip().partition("=")
        if key.strip().lower() == "charset":
            return value.strip().strip("\"'") or None
    return None


def transport_errno_for(exc: requests.RequestException) -> int:
    """Map a requests exception onto a numeric transport error number."""
    if isinstance(exc, (requests.exceptions.MissingSchema, requests.exceptions.InvalidURL)):
        return URL_MALFORMAT
    if isinstance(exc, requests.exceptions.InvalidSchema):
        return UNSUPPORTED_PROTOCOL
    if isinstance(exc, requests.exceptions.SSLError):
        return PEER_FAILED_VERIFICATION
    if isinstance(exc, requests.exceptions.Timeout):
        return OPERATION_TIMEDOUT
    if isinstance(exc, requests.exceptions.TooManyRedirects):
        return TOO_MANY_REDIRECTS
    if isinstance(exc, requests.exceptions.ConnectionError):
        text = str(exc)
        # a read timeout while streaming the body surfaces as ConnectionError
        if "Read timed out" in text:
            return OPERATION_TIMEDOUT
        if "NameResolutionError" in text or "Name or service not known" in text or "getaddrinfo" in text:
            return COULDNT_RESOLVE_HOST
        return COULDNT_CONNECT
    return RECV_ERROR

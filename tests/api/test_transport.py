import gzip
import threading
import time
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest
import requests
import responses

from redcap_client.api.transport import (
    COULDNT_CONNECT,
    COULDNT_RESOLVE_HOST,
    OPERATION_TIMEDOUT,
    PEER_FAILED_VERIFICATION,
    RECV_ERROR,
    UNSUPPORTED_PROTOCOL,
    URL_MALFORMAT,
    RequestsTransport,
    TransportError,
    TransportResponse,
    charset_of,
    transport_errno_for,
)

API_URL = "https://redcap.example.edu/api/"


@pytest.mark.parametrize(
    "exc, errno",
    [
        (requests.exceptions.MissingSchema("No scheme supplied"), URL_MALFORMAT),
        (requests.exceptions.InvalidURL("bad"), URL_MALFORMAT),
        (requests.exceptions.InvalidSchema("No connection adapters"), UNSUPPORTED_PROTOCOL),
        (requests.exceptions.SSLError("certificate verify failed"), PEER_FAILED_VERIFICATION),
        (requests.exceptions.ConnectTimeout("timed out"), OPERATION_TIMEDOUT),
        (requests.exceptions.ReadTimeout("timed out"), OPERATION_TIMEDOUT),
        (requests.exceptions.ConnectionError("NameResolutionError: failed to resolve"), COULDNT_RESOLVE_HOST),
        (requests.exceptions.ConnectionError("Connection refused"), COULDNT_CONNECT),
        (requests.exceptions.ConnectionError("Read timed out. (read timeout=1)"), OPERATION_TIMEDOUT),
        (requests.exceptions.ChunkedEncodingError("broken"), RECV_ERROR),
    ],
)
def test_transport_errno_for(exc, errno):
    assert transport_errno_for(exc) == errno


@responses.activate
def test_post_returns_response():
    responses.add(responses.POST, API_URL, body="13.1.0", status=200, content_type="text/html")
    transport = RequestsTransport()

    resp = transport.post(API_URL, "content=version", timeout=(20, 1200), verify=True)

    assert resp.status_code == 200
    assert resp.text == "13.1.0"
    assert resp.content_type.startswith("text/html")
    request = responses.calls[0].request
    assert request.headers["Content-Type"] == "application/x-www-form-urlencoded"
    assert request.headers["Accept"] == "text/xml"


@responses.activate
def test_redirects_are_not_followed():
    responses.add(responses.POST, API_URL, status=301, headers={"Location": "https://other.example.edu/api/"})
    transport = RequestsTransport()

    resp = transport.post(API_URL, "content=version", timeout=(20, 1200), verify=True)

    assert resp.status_code == 301
    assert resp.redirect_url == "https://other.example.edu/api/"
    assert len(responses.calls) == 1


def test_malformed_url_raises_transport_error():
    transport = RequestsTransport()

    with pytest.raises(TransportError) as exc_info:
        transport.post("redcap.example.edu/api/", "content=version", timeout=(20, 1200), verify=True)
    assert exc_info.value.errno == URL_MALFORMAT


def test_clone_has_its_own_session():
    transport = RequestsTransport()
    clone = transport.clone()

    assert clone.session is not transport.session
    assert clone.session.headers["Accept"] == "text/xml"


class _DripHandler(BaseHTTPRequestHandler):
    """Sends a small body one byte at a time, slower than the call deadline."""

    body = b"13.1.0"
    delay = 0.4

    def do_POST(self):
        self.rfile.read(int(self.headers.get("Content-Length", 0)))
        self.send_response(200)
        self.send_header("Content-Type", "text/html")
        self.send_header("Content-Length", str(len(self.body)))
        self.end_headers()
        try:
            for i in range(len(self.body)):
                self.wfile.write(self.body[i : i + 1])
                self.wfile.flush()
                time.sleep(self.delay)
        except (BrokenPipeError, ConnectionResetError):
            pass

    def log_message(self, format, *args):
        pass


@pytest.fixture
def drip_server():
    server = ThreadingHTTPServer(("127.0.0.1", 0), _DripHandler)
    server.daemon_threads = True
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield f"http://127.0.0.1:{server.server_address[1]}/api/"
    server.shutdown()
    server.server_close()


def test_slow_body_fails_once_total_timeout_passes(drip_server):
    transport = RequestsTransport()

    start = time.monotonic()
    with pytest.raises(TransportError) as exc_info:
        transport.post(drip_server, "content=version", timeout=(5, 1), verify=True)

    assert exc_info.value.errno == OPERATION_TIMEDOUT
    assert "timed out after 1 seconds" in exc_info.value.message
    assert time.monotonic() - start < 2.0


def test_body_within_total_timeout_is_returned(drip_server):
    transport = RequestsTransport()

    resp = transport.post(drip_server, "content=version", timeout=(5, 10), verify=True)

    assert resp.content == b"13.1.0"


@pytest.mark.parametrize(
    "content_type, charset",
    [
        ("text/html; charset=ISO-8859-1", "ISO-8859-1"),
        ('application/json; charset="utf-8"', "utf-8"),
        ("text/html", None),
        (None, None),
    ],
)
def test_charset_of(content_type, charset):
    assert charset_of(content_type) == charset


@responses.activate
def test_declared_charset_is_used_for_text():
    responses.add(
        responses.POST,
        API_URL,
        body="café".encode("latin-1"),
        status=200,
        content_type="text/html; charset=ISO-8859-1",
    )
    transport = RequestsTransport()

    resp = transport.post(API_URL, "content=version", timeout=(20, 1200), verify=True)

    assert resp.encoding == "ISO-8859-1"
    assert resp.text == "café"


@responses.activate
def test_text_defaults_to_utf8_without_charset():
    responses.add(responses.POST, API_URL, body="café".encode("utf-8"), status=200, content_type="text/html")
    transport = RequestsTransport()

    resp = transport.post(API_URL, "content=version", timeout=(20, 1200), verify=True)

    assert resp.encoding == "utf-8"
    assert resp.text == "café"


def test_text_does_not_replace_undecodable_bytes():
    resp = TransportResponse(status_code=200, content=b"\xff\xfe", url=API_URL, encoding="utf-8")

    with pytest.raises(UnicodeDecodeError):
        resp.text


@responses.activate
def test_gzip_body_is_decoded():
    responses.add(
        responses.POST,
        API_URL,
        body=gzip.compress(b"13.1.0"),
        status=200,
        content_type="text/html",
        headers={"Content-Encoding": "gzip"},
    )
    transport = RequestsTransport()

    resp = transport.post(API_URL, "content=version", timeout=(20, 1200), verify=True)

    assert resp.text == "13.1.0"

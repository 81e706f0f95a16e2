"""Shared fixtures: a fake transport standing in for the network."""

from __future__ import annotations

from urllib.parse import parse_qsl

import pytest

from redcap_client.api.transport import TransportError, TransportResponse

API_URL = "https://redcap.example.edu/api/"


class FakeTransport:
    """Returns queued responses (or raises queued errors) in order."""

    def __init__(self):
        self.queue = []
        self.requests = []

    def respond(self, body="", status_code=200, content_type="application/json", redirect_url=None, encoding="utf-8"):
        content = body.encode("utf-8") if isinstance(body, str) else body
        self.queue.append(
            TransportResponse(
                status_code=status_code,
                content=content,
                url=API_URL,
                content_type=content_type,
                redirect_url=redirect_url,
                total_time=0.01,
                encoding=encoding,
            )
        )
        return self

    def fail(self, errno, message):
        self.queue.append(TransportError(errno, message))
        return self

    def post(self, url, data, *, files=None, timeout, verify):
        self.requests.append({"url": url, "data": data, "files": files, "timeout": timeout, "verify": verify})
        item = self.queue.pop(0)
        if isinstance(item, TransportError):
            raise item
        return item

    def clone(self):
        return self

    def sent_params(self, index=-1) -> dict:
        """Form fields of a recorded request as a dict."""
        data = self.requests[index]["data"]
        pairs = parse_qsl(data, keep_blank_values=True) if isinstance(data, str) else data
        return dict(pairs)


@pytest.fixture
def fake_transport():
    return FakeTransport()

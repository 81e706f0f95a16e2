"""Classification of HTTP and application-level failures."""

from __future__ import annotations

import json
from typing import Any, Optional, Union

import structlog

from redcap_client.errors import ErrorCode, RedcapClientError

logger = structlog.get_logger(__name__)

JSON_ERROR_EXCERPT_LENGTH = 1000


def classify_http_status(status_code: int, url: str, redirect_url: Optional[str] = None) -> None:
    """Raise ``INVALID_URL`` for statuses that mean the configured URL is wrong.

    REDCap reports its own errors with a success status, so only the
    redirect and not-found cases are treated as failures here.
    """
    if status_code == 301:
        if redirect_url:
            message = f"The page for the specified URL ({url}) has moved to {redirect_url}. Please update your URL."
        else:
            message = f"The page for the specified URL ({url}) has moved permanently. Please update your URL."
        raise RedcapClientError(
            message,
            ErrorCode.INVALID_URL,
            http_status_code=status_code,
        )
    if status_code == 404:
        raise RedcapClientError(
            f"The specified URL ({url}) appears to be incorrect. Nothing was found at this URL.",
            ErrorCode.INVALID_URL,
            http_status_code=status_code,
        )


def extract_api_error(body: Union[str, bytes, None]) -> Optional[str]:
    """Return the message of a ``{"error": "..."}`` envelope, else None.

    The whole trimmed body must be that single object; an ``error`` key
    nested anywhere else is ordinary data.
    """
    if not body:
        return None
    if isinstance(body, bytes):
        # Binary file content cannot be an error envelope
        try:
            body = body.decode("utf-8")
        except UnicodeDecodeError:
            return None
    trimmed = body.strip()
    if not (trimmed.startswith("{") and trimmed.endswith("}")):
        return None
    try:
        decoded = json.loads(trimmed)
    except ValueError:
        return None
    if isinstance(decoded, dict) and list(decoded) == ["error"] and isinstance(decoded["error"], str):
        return decoded["error"]
    return None


def raise_for_api_error(body: Union[str, bytes, None]) -> None:
    message = extract_api_error(body)
    if message is not None:
        logger.warning("redcap_api_error", error=message)
        raise RedcapClientError(message, ErrorCode.REDCAP_API_ERROR)


def decode_json(body: Optional[str]) -> Any:
    """Decode a JSON export; an empty body means no data."""
    if body is None or body.strip() == "":
        return []
    try:
        return json.loads(body)
    except ValueError as e:
        raise RedcapClientError(
            f'JSON error "{e}" in REDCap API output.'
            f"\nThe first {JSON_ERROR_EXCERPT_LENGTH:,} characters of output returned from REDCap are:\n"
            f"{body[:JSON_ERROR_EXCERPT_LENGTH]}",
            ErrorCode.JSON_ERROR,
            cause=e,
        ) from e

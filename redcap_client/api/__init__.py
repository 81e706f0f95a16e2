"""API module for redcap-client.

Provides the REDCap API connection, project and instance classes, and the
batch planning helpers used for large exports.
"""

from redcap_client.api.batching import plan_batches, stitch_batch_results, strip_header
from redcap_client.api.classifier import decode_json, extract_api_error, raise_for_api_error
from redcap_client.api.connection import (
    ApiConnection,
    CallInfo,
    ConnectionConfig,
    DEFAULT_CONNECTION_TIMEOUT_IN_SECONDS,
    DEFAULT_TIMEOUT_IN_SECONDS,
)
from redcap_client.api.project import RedCapProject
from redcap_client.api.redcap import RedCap
from redcap_client.api.transport import (
    RequestsTransport,
    Transport,
    TransportError,
    TransportResponse,
)

__all__ = [
    "RedCap",
    "RedCapProject",
    "ApiConnection",
    "ConnectionConfig",
    "CallInfo",
    "DEFAULT_TIMEOUT_IN_SECONDS",
    "DEFAULT_CONNECTION_TIMEOUT_IN_SECONDS",
    "Transport",
    "RequestsTransport",
    "TransportError",
    "TransportResponse",
    "plan_batches",
    "strip_header",
    "stitch_batch_results",
    "decode_json",
    "extract_api_error",
    "raise_for_api_error",
]

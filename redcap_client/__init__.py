"""redcap-client: a Python client for the REDCap API."""

from redcap_client.api import (
    ApiConnection,
    CallInfo,
    RedCap,
    RedCapProject,
    plan_batches,
    stitch_batch_results,
)
from redcap_client.errors import ErrorCode, ErrorRecord, RedcapClientError
from redcap_client.validation import Format

__version__ = "1.0.0"

__all__ = [
    "RedCap",
    "RedCapProject",
    "ApiConnection",
    "CallInfo",
    "plan_batches",
    "stitch_batch_results",
    "ErrorCode",
    "ErrorRecord",
    "RedcapClientError",
    "Format",
]

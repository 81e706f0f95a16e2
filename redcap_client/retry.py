import logging
from typing import Any, Callable, Optional

import structlog
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_random_exponential,
)

from redcap_client.errors import ErrorCode, RedcapClientError

logger = structlog.get_logger(__name__)

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_BASE_DELAY = 2.0
MAX_DELAY = 60


def is_transient(exc: BaseException) -> bool:
    """Only transport failures are retried; REDCap and argument errors are not."""
    return isinstance(exc, RedcapClientError) and exc.code == ErrorCode.CONNECTION_ERROR


def run_with_retry(
    func: Callable,
    *args,
    max_attempts: Optional[int] = None,
    base_delay: Optional[float] = None,
    **kwargs,
) -> Any:
    """Run a callable, retrying connection errors with random exponential backoff.

    Lazy iterators (e.g. ``export_records_in_batches``) should have each
    batch retried, not the call that creates the iterator.
    """
    attempts = max_attempts if max_attempts is not None else DEFAULT_MAX_ATTEMPTS
    delay = base_delay if base_delay is not None else DEFAULT_BASE_DELAY

    @retry(
        retry=retry_if_exception(is_transient),
        stop=stop_after_attempt(attempts),
        wait=wait_random_exponential(multiplier=delay, max=MAX_DELAY),
        reraise=True,
        before_sleep=before_sleep_log(logging.getLogger(__name__), logging.WARNING),
    )
    def _wrapped():
        return func(*args, **kwargs)

    return _wrapped()


def classify_exception(exc: BaseException) -> str:
    """Return 'transient' or 'permanent' for logging."""
    return "transient" if is_transient(exc) else "permanent"

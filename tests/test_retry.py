import pytest

from redcap_client.errors import ErrorCode, RedcapClientError, invalid_argument
from redcap_client.retry import classify_exception, is_transient, run_with_retry


def _connection_error():
    return RedcapClientError("Connection refused", ErrorCode.CONNECTION_ERROR, transport_error_number=7)


def test_run_with_retry_connection_error_succeeds():
    attempts = {"n": 0}

    def flakey():
        attempts["n"] += 1
        if attempts["n"] < 3:
            raise _connection_error()
        return "ok"

    result = run_with_retry(flakey, max_attempts=3, base_delay=0)

    assert result == "ok"
    assert attempts["n"] == 3


def test_run_with_retry_gives_up_after_max_attempts():
    attempts = {"n": 0}

    def down():
        attempts["n"] += 1
        raise _connection_error()

    with pytest.raises(RedcapClientError) as exc_info:
        run_with_retry(down, max_attempts=2, base_delay=0)

    assert exc_info.value.code == ErrorCode.CONNECTION_ERROR
    assert attempts["n"] == 2


def test_api_errors_are_not_retried():
    attempts = {"n": 0}

    def rejected():
        attempts["n"] += 1
        raise RedcapClientError("Invalid token", ErrorCode.REDCAP_API_ERROR)

    with pytest.raises(RedcapClientError):
        run_with_retry(rejected, max_attempts=5, base_delay=0)
    assert attempts["n"] == 1


def test_arguments_are_passed_through():
    assert run_with_retry(lambda a, b=0: a + b, 1, b=2, base_delay=0) == 3


def test_classify_exception():
    assert is_transient(_connection_error())
    assert classify_exception(_connection_error()) == "transient"
    assert classify_exception(invalid_argument("bad")) == "permanent"
    assert classify_exception(ValueError("x")) == "permanent"

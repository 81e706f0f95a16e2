import pytest

from redcap_client.api.classifier import (
    classify_http_status,
    decode_json,
    extract_api_error,
    raise_for_api_error,
)
from redcap_client.errors import ErrorCode, RedcapClientError


def test_error_envelope_raises_redcap_api_error():
    with pytest.raises(RedcapClientError) as exc_info:
        raise_for_api_error('  {"error":"Export non-existent file."}\n')

    assert exc_info.value.code == ErrorCode.REDCAP_API_ERROR
    assert exc_info.value.message == "Export non-existent file."


def test_nested_error_key_is_data():
    assert extract_api_error('{"data":{"error":"x"}}') is None
    raise_for_api_error('{"data":{"error":"x"}}')


@pytest.mark.parametrize(
    "body",
    [
        "",
        None,
        "[]",
        '[{"error":"x"}]',
        '{"error":"x","count":1}',
        '{"error": 5}',
        "{not json}",
        "record_id,error\n1,x\n",
        b"\x89PNG\r\n\x1a\n\xff\xfe",
    ],
)
def test_bodies_that_are_not_error_envelopes(body):
    assert extract_api_error(body) is None


def test_error_envelope_in_bytes():
    assert extract_api_error(b'{"error":"There is no file to download for this record"}') == (
        "There is no file to download for this record"
    )


def test_classify_http_status_passes_ok_statuses():
    classify_http_status(200, "https://x/api/")
    classify_http_status(400, "https://x/api/")


def test_classify_http_status_404():
    with pytest.raises(RedcapClientError) as exc_info:
        classify_http_status(404, "https://x/api/")
    assert exc_info.value.message == (
        "The specified URL (https://x/api/) appears to be incorrect. Nothing was found at this URL."
    )
    assert exc_info.value.http_status_code == 404


def test_decode_json_empty_body():
    assert decode_json("") == []
    assert decode_json("  \n") == []


def test_decode_json_invalid_body_includes_excerpt():
    body = "<html>" + "x" * 2000
    with pytest.raises(RedcapClientError) as exc_info:
        decode_json(body)

    err = exc_info.value
    assert err.code == ErrorCode.JSON_ERROR
    assert "The first 1,000 characters" in err.message
    assert body[:1000] in err.message
    assert body[:1001] not in err.message
    assert isinstance(err.cause, ValueError)


def test_301_without_location_does_not_name_a_target():
    with pytest.raises(RedcapClientError) as exc_info:
        classify_http_status(301, "https://redcap.example.edu/api/", None)

    err = exc_info.value
    assert err.code == ErrorCode.INVALID_URL
    assert err.http_status_code == 301
    assert "has moved permanently" in err.message
    assert "None" not in err.message

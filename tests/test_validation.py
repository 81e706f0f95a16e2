"""Tests for argument validation."""

import pytest

from redcap_client.errors import ErrorCode, RedcapClientError
from redcap_client.validation import (
    NON_ODM_FORMATS,
    Format,
    validate_api_token,
    validate_api_url,
    validate_bool,
    validate_ca_certificate_file,
    validate_choice,
    validate_format,
    validate_positive_int,
    validate_project_token,
    validate_record_id,
    validate_report_id,
    validate_ssl_verify,
    validate_string_list,
    validate_super_token,
)


def _code(exc_info):
    return exc_info.value.code


class TestApiToken:
    """Tests for token validation."""

    def test_hex_token_of_32_characters_is_accepted(self):
        token = "0123456789abcdefABCDEF0123456789"
        assert validate_api_token(token) == token

    def test_token_of_31_characters_is_rejected(self):
        with pytest.raises(RedcapClientError, match="length of 31") as exc_info:
            validate_api_token("0" * 31)
        assert _code(exc_info) == ErrorCode.INVALID_ARGUMENT

    def test_token_with_non_hex_character_is_rejected(self):
        with pytest.raises(RedcapClientError, match="only contain numbers") as exc_info:
            validate_api_token("G" + "0" * 31)
        assert _code(exc_info) == ErrorCode.INVALID_ARGUMENT

    def test_none_and_wrong_type_have_distinct_messages(self):
        with pytest.raises(RedcapClientError, match="null or blank"):
            validate_api_token(None)
        with pytest.raises(RedcapClientError, match="should be a string"):
            validate_api_token(12345)

    def test_super_token_length(self):
        assert validate_super_token("A" * 64) == "A" * 64
        with pytest.raises(RedcapClientError):
            validate_super_token("A" * 32)

    def test_project_token_rejects_super_token(self):
        with pytest.raises(RedcapClientError, match="length of 32"):
            validate_project_token("A" * 64)


class TestFormat:
    """Tests for format normalization."""

    def test_format_is_trimmed_and_lower_cased(self):
        assert validate_format(" JSON ") is Format.JSON

    def test_none_means_php(self):
        fmt = validate_format(None)
        assert fmt is Format.PHP
        assert fmt.wire == "json"

    def test_invalid_format_is_rejected(self):
        with pytest.raises(RedcapClientError, match='Invalid format "invalid"') as exc_info:
            validate_format("invalid")
        assert _code(exc_info) == ErrorCode.INVALID_ARGUMENT

    def test_odm_not_allowed_where_excluded(self):
        with pytest.raises(RedcapClientError):
            validate_format("odm", NON_ODM_FORMATS)

    def test_non_string_format_is_rejected(self):
        with pytest.raises(RedcapClientError, match="should be a string"):
            validate_format(1)


class TestPositiveInt:
    """Tests for batch size style arguments."""

    @pytest.mark.parametrize(
        "value, message",
        [
            (0, "is zero"),
            (-5, "is negative"),
            (None, "No value specified"),
            ("10", "should be an integer"),
            (2.5, "should be an integer"),
            (True, "should be an integer"),
        ],
    )
    def test_rejected_values(self, value, message):
        with pytest.raises(RedcapClientError, match=message) as exc_info:
            validate_positive_int(value, "batch_size")
        assert _code(exc_info) == ErrorCode.INVALID_ARGUMENT

    def test_positive_value_is_returned(self):
        assert validate_positive_int(3, "batch_size") == 3


class TestOtherValidators:
    """Tests for the remaining validators."""

    def test_bool_is_not_coerced(self):
        assert validate_bool(False, "flag") is False
        with pytest.raises(RedcapClientError, match="boolean"):
            validate_bool(1, "flag")
        with pytest.raises(RedcapClientError):
            validate_bool("true", "flag")

    def test_bool_flags_have_no_unset_state(self):
        with pytest.raises(RedcapClientError, match="NoneType"):
            validate_bool(None, "export_checkbox_label")

    def test_choice(self):
        assert validate_choice(None, "type", ("flat", "eav"), default="flat") == "flat"
        assert validate_choice("eav", "type", ("flat", "eav")) == "eav"
        with pytest.raises(RedcapClientError, match="Valid values are 'flat', 'eav'"):
            validate_choice("wide", "type", ("flat", "eav"))

    def test_string_list_converts_ints(self):
        assert validate_string_list([1001, "1002"], "record_ids") == ["1001", "1002"]
        assert validate_string_list(None, "record_ids") is None

    def test_string_list_rejects_plain_string(self):
        with pytest.raises(RedcapClientError, match="should be a list"):
            validate_string_list("1001", "record_ids")

    def test_string_list_rejects_nested_values(self):
        with pytest.raises(RedcapClientError, match="only strings and integers"):
            validate_string_list([["1001"]], "record_ids")

    def test_report_id(self):
        assert validate_report_id(42) == "42"
        assert validate_report_id("42") == "42"
        with pytest.raises(RedcapClientError, match="non-numeric"):
            validate_report_id("4x")
        with pytest.raises(RedcapClientError, match="negative"):
            validate_report_id(-1)
        with pytest.raises(RedcapClientError, match="No report ID"):
            validate_report_id(None)

    def test_record_id(self):
        assert validate_record_id(7) == "7"
        with pytest.raises(RedcapClientError, match="record_id"):
            validate_record_id("  ")

    def test_api_url(self):
        assert validate_api_url("https://x/api/") == "https://x/api/"
        with pytest.raises(RedcapClientError, match="null or blank"):
            validate_api_url(" ")
        with pytest.raises(RedcapClientError, match="should be a string"):
            validate_api_url(["https://x/api/"])

    def test_ssl_verify_defaults_to_true(self):
        assert validate_ssl_verify(None) is True
        with pytest.raises(RedcapClientError):
            validate_ssl_verify("yes")

    def test_ca_certificate_file_accepts_paths(self, tmp_path):
        assert validate_ca_certificate_file(tmp_path / "ca.pem") == str(tmp_path / "ca.pem")
        assert validate_ca_certificate_file("  ") is None
        with pytest.raises(RedcapClientError):
            validate_ca_certificate_file(5)

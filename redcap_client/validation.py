"""Argument validation performed before any request is sent.

Each ``validate_*`` function takes the raw value supplied by the caller and
either returns the typed, normalized value or raises a
``RedcapClientError`` with code ``INVALID_ARGUMENT``. Nothing in this
module touches the network.
"""

from __future__ import annotations

import os
import string
from enum import Enum
from typing import Any, Iterable, Optional, Sequence

from redcap_client.errors import invalid_argument

_HEX_DIGITS = frozenset(string.hexdigits)

PROJECT_TOKEN_LENGTH = 32
SUPER_TOKEN_LENGTH = 64


class Format(str, Enum):
    """Data formats accepted by the API.

    ``PHP`` is not a wire format: it is sent as JSON and the response is
    decoded into Python lists and dicts for the caller.
    """

    PHP = "php"
    JSON = "json"
    CSV = "csv"
    XML = "xml"
    ODM = "odm"

    @property
    def wire(self) -> str:
        return "json" if self is Format.PHP else self.value


ALL_FORMATS = (Format.PHP, Format.CSV, Format.JSON, Format.XML, Format.ODM)
NON_ODM_FORMATS = (Format.PHP, Format.CSV, Format.JSON, Format.XML)


def _type_name(value: Any) -> str:
    return type(value).__name__


def validate_api_url(raw: Any) -> str:
    if raw is None:
        raise invalid_argument("The REDCap API URL specified was null or blank.")
    if not isinstance(raw, str):
        raise invalid_argument(
            f"The REDCap API URL provided ({raw}) should be a string, but has type: {_type_name(raw)}"
        )
    if raw.strip() == "":
        raise invalid_argument("The REDCap API URL specified was null or blank.")
    return raw


def validate_api_token(raw: Any, allowed_lengths: Sequence[int] = (PROJECT_TOKEN_LENGTH, SUPER_TOKEN_LENGTH)) -> str:
    """Validate an API token (32 hex characters, or 64 for a super token)."""
    if raw is None:
        raise invalid_argument("The REDCap API token specified was null or blank.")
    if not isinstance(raw, str):
        raise invalid_argument(
            f"The REDCap API token provided should be a string, but has type: {_type_name(raw)}"
        )
    if raw == "" or not set(raw) <= _HEX_DIGITS:
        raise invalid_argument(
            "The REDCap API token has an invalid format."
            " It should only contain numbers and the letters A, B, C, D, E and F."
        )
    if len(raw) not in allowed_lengths:
        expected = " or ".join(str(n) for n in allowed_lengths)
        raise invalid_argument(
            f"The REDCap API token has an invalid format. It has a length of {len(raw)}"
            f" characters, but should have a length of {expected}."
        )
    return raw


def validate_project_token(raw: Any) -> str:
    return validate_api_token(raw, allowed_lengths=(PROJECT_TOKEN_LENGTH,))


def validate_super_token(raw: Any) -> str:
    return validate_api_token(raw, allowed_lengths=(SUPER_TOKEN_LENGTH,))


def validate_format(raw: Any, legal_formats: Iterable[Format] = ALL_FORMATS) -> Format:
    """Normalize a format name; ``None`` means ``php``."""
    legal = tuple(legal_formats)
    if raw is None:
        raw = Format.PHP.value
    if isinstance(raw, Format):
        raw = raw.value
    if not isinstance(raw, str):
        raise invalid_argument(
            f'The format specified has type "{_type_name(raw)}", but it should be a string.'
        )
    normalized = raw.strip().lower()
    for fmt in legal:
        if fmt.value == normalized:
            return fmt
    names = '", "'.join(f.value for f in legal)
    raise invalid_argument(
        f'Invalid format "{normalized}" specified. The format should be one of the following: "{names}".'
    )


def validate_positive_int(raw: Any, name: str) -> int:
    """Validate a strictly positive integer such as a batch size."""
    if raw is None:
        raise invalid_argument(f"No value specified for required argument '{name}'.")
    # bool is a subclass of int and must not pass as a number
    if isinstance(raw, bool) or not isinstance(raw, int):
        raise invalid_argument(
            f"Argument '{name}' has type '{_type_name(raw)}', but should be an integer."
        )
    if raw == 0:
        raise invalid_argument(f"Argument '{name}' is zero, but should be a positive integer.")
    if raw < 0:
        raise invalid_argument(f"Argument '{name}' is negative ({raw}), but should be a positive integer.")
    return raw


def validate_bool(raw: Any, name: str) -> bool:
    """Accept only real booleans; truthy values of other types are rejected."""
    if not isinstance(raw, bool):
        raise invalid_argument(
            f"Invalid type for {name}. It should be a boolean (True/False), but has type: {_type_name(raw)}."
        )
    return raw


def validate_choice(raw: Any, name: str, choices: Sequence[str], default: Optional[str] = None) -> Optional[str]:
    if raw is None:
        return default
    if not isinstance(raw, str):
        raise invalid_argument(
            f"Invalid type for {name}. It should be a string, but has type: {_type_name(raw)}."
        )
    if raw not in choices:
        valid = ", ".join(f"'{c}'" for c in choices)
        raise invalid_argument(f'Invalid value "{raw}" specified for {name}. Valid values are {valid}.')
    return raw


def validate_string_list(raw: Any, name: str) -> Optional[list[str]]:
    """Validate an optional list of names or ids; ints are converted to str."""
    if raw is None:
        return None
    if isinstance(raw, (str, bytes)) or not isinstance(raw, (list, tuple)):
        raise invalid_argument(
            f"Argument '{name}' has the wrong type ({_type_name(raw)}); it should be a list."
        )
    values = []
    for item in raw:
        if isinstance(item, bool) or not isinstance(item, (str, int)):
            raise invalid_argument(
                f"Argument '{name}' contains a value of type '{_type_name(item)}';"
                " only strings and integers are allowed."
            )
        values.append(str(item))
    return values


def validate_record_ids(raw: Any) -> Optional[list[str]]:
    return validate_string_list(raw, "record_ids")


def validate_optional_string(raw: Any, name: str) -> Optional[str]:
    if raw is None:
        return None
    if not isinstance(raw, str):
        raise invalid_argument(
            f"Invalid type for {name}. It should be a string, but has type: {_type_name(raw)}."
        )
    return raw


def validate_required_string(raw: Any, name: str) -> str:
    if raw is None or (isinstance(raw, str) and raw.strip() == ""):
        raise invalid_argument(f"No value specified for required argument '{name}'.")
    return validate_optional_string(raw, name)


def validate_record_id(raw: Any) -> str:
    if isinstance(raw, int) and not isinstance(raw, bool):
        return str(raw)
    return validate_required_string(raw, "record_id")


def validate_report_id(raw: Any) -> str:
    if raw is None:
        raise invalid_argument("No report ID specified for export.")
    if isinstance(raw, bool) or not isinstance(raw, (str, int)):
        raise invalid_argument(
            f"Report ID has type '{_type_name(raw)}', but should be a string or integer."
        )
    if isinstance(raw, str) and not raw.isdigit():
        raise invalid_argument(f'Report ID "{raw}" is non-numeric string.')
    if isinstance(raw, int) and raw < 0:
        raise invalid_argument(f'Report ID "{raw}" is a negative integer.')
    return str(raw)


def validate_ssl_verify(raw: Any) -> bool:
    if raw is None:
        return True
    if not isinstance(raw, bool):
        raise invalid_argument(
            f"The value for ssl_verify must be a boolean (True/False), but has type: {_type_name(raw)}"
        )
    return raw


def validate_ca_certificate_file(raw: Any) -> Optional[str]:
    if raw is None:
        return None
    if isinstance(raw, os.PathLike):
        raw = os.fspath(raw)
    if not isinstance(raw, str):
        raise invalid_argument(
            f"The value for ca_certificate_file must be a string, but has type: {_type_name(raw)}"
        )
    return raw if raw.strip() != "" else None

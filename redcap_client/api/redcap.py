"""Entry point for a REDCap instance: project creation and project access."""

from __future__ import annotations

from typing import Any, Optional, Union

import structlog

from redcap_client.api.classifier import raise_for_api_error
from redcap_client.api.connection import ApiConnection
from redcap_client.api.project import RedCapProject, process_import_data
from redcap_client.api.transport import Transport
from redcap_client.errors import invalid_argument
from redcap_client.validation import (
    NON_ODM_FORMATS,
    Format,
    validate_format,
    validate_optional_string,
    validate_project_token,
    validate_super_token,
)

logger = structlog.get_logger(__name__)


class RedCap:
    """A REDCap instance, optionally accessed with a 64-character super token.

    Projects returned by this class each get a clone of the instance's
    connection, so they can be used independently of one another.
    """

    def __init__(
        self,
        api_url: Optional[str] = None,
        super_token: Optional[str] = None,
        ssl_verify: bool = True,
        ca_certificate_file: Optional[str] = None,
        connection: Optional[ApiConnection] = None,
        transport: Optional[Transport] = None,
    ):
        self.super_token = None if super_token is None else validate_super_token(super_token)
        if connection is not None:
            if not isinstance(connection, ApiConnection):
                raise invalid_argument(
                    f"The connection argument has type {type(connection).__name__},"
                    " but should be an ApiConnection."
                )
            self.connection = connection
        else:
            self.connection = ApiConnection(
                api_url,
                ssl_verify=ssl_verify,
                ca_certificate_file=ca_certificate_file,
                transport=transport,
            )

    def create_project(
        self,
        project_data: Any,
        format: Union[str, Format] = "php",
        odm: Optional[str] = None,
    ) -> RedCapProject:
        """Create a project and return it.

        Args:
            project_data: for 'php' a dict of project attributes (at least
                ``project_title`` and ``purpose``); otherwise a string in
                the given format.
            format: 'php', 'csv', 'json' or 'xml'.
            odm: optional CDISC ODM XML with the metadata for the new project.

        Raises:
            RedcapClientError: ``INVALID_ARGUMENT`` when no super token is set.
        """
        if self.super_token is None:
            raise invalid_argument("The super token is not set, so a project cannot be created.")
        fmt = validate_format(format, NON_ODM_FORMATS)
        if fmt is Format.PHP:
            if not isinstance(project_data, dict):
                raise invalid_argument(
                    f"Argument 'project_data' has type '{type(project_data).__name__}', but should be a dict."
                )
            project_data = [project_data]
        params = {
            "token": self.super_token,
            "content": "project",
            "format": fmt.wire,
            "returnFormat": "json",
            "data": process_import_data(project_data, "project_data", fmt),
            "odm": validate_optional_string(odm, "odm"),
        }
        body = self.connection.call_with_array(params)
        raise_for_api_error(body)
        api_token = validate_project_token(body.strip())
        logger.info("project_created")
        return self.get_project(api_token)

    def get_project(self, api_token: str) -> RedCapProject:
        """Return the project that the given 32-character token belongs to."""
        return RedCapProject(api_token=api_token, connection=self.connection.clone())

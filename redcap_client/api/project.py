"""REDCap project class used to retrieve data from, and modify, a REDCap project."""

from __future__ import annotations

import json
from typing import Any, Iterator, Mapping, Optional, Union

import structlog

from redcap_client.api.batching import plan_batches, unique_in_order
from redcap_client.api.classifier import decode_json, raise_for_api_error
from redcap_client.api.connection import ApiConnection, CallInfo
from redcap_client.api.transport import Transport
from redcap_client.errors import ErrorCode, RedcapClientError, invalid_argument
from redcap_client.validation import (
    ALL_FORMATS,
    NON_ODM_FORMATS,
    Format,
    validate_api_token,
    validate_bool,
    validate_choice,
    validate_format,
    validate_optional_string,
    validate_positive_int,
    validate_record_id,
    validate_record_ids,
    validate_report_id,
    validate_required_string,
    validate_string_list,
)

logger = structlog.get_logger(__name__)

RECORD_TYPES = ("flat", "eav")
RAW_OR_LABEL = ("raw", "label")
OVERWRITE_BEHAVIORS = ("normal", "overwrite")
RETURN_CONTENTS = ("count", "ids", "auto_ids")
DATE_FORMATS = ("YMD", "MDY", "DMY")

# Argument names accepted by export_records_ap(), including the API's
# camelCase spellings, mapped to export_records() parameters.
EXPORT_RECORDS_ARGUMENTS = {
    "format": "format",
    "type": "type",
    "record_ids": "record_ids",
    "recordIds": "record_ids",
    "fields": "fields",
    "forms": "forms",
    "events": "events",
    "raw_or_label": "raw_or_label",
    "rawOrLabel": "raw_or_label",
    "raw_or_label_headers": "raw_or_label_headers",
    "rawOrLabelHeaders": "raw_or_label_headers",
    "export_checkbox_label": "export_checkbox_label",
    "exportCheckboxLabel": "export_checkbox_label",
    "export_survey_fields": "export_survey_fields",
    "exportSurveyFields": "export_survey_fields",
    "export_data_access_groups": "export_data_access_groups",
    "exportDataAccessGroups": "export_data_access_groups",
    "filter_logic": "filter_logic",
    "filterLogic": "filter_logic",
}

IMPORT_RECORDS_ARGUMENTS = frozenset({"format", "type", "overwrite_behavior", "return_content", "date_format"})


def process_import_data(data: Any, name: str, fmt: Format) -> str:
    """Turn import data into the string sent to the API.

    For the php format the data must be a list or dict and is JSON-encoded;
    for every other format it must already be a string.
    """
    if data is None:
        raise invalid_argument(f"No value specified for required argument '{name}'.")
    if fmt is Format.PHP:
        if not isinstance(data, (list, dict)):
            raise invalid_argument(
                f"Argument '{name}' has type '{type(data).__name__}', but should be a list or dict."
            )
        try:
            return json.dumps(data)
        except (TypeError, ValueError) as e:
            raise RedcapClientError(
                f"JSON error \"{e}\" while processing argument '{name}'.",
                ErrorCode.JSON_ERROR,
                cause=e,
            ) from e
    if not isinstance(data, str):
        raise invalid_argument(
            f"Argument '{name}' has type '{type(data).__name__}', but should be a string."
        )
    return data


class RedCapProject:
    """A REDCap project reached with a project API token.

    Example:
        project = RedCapProject("https://redcap.example.edu/api/", token)
        records = project.export_records(filter_logic="[age] >= 60")
        csv_text = project.export_records(format="csv")
    """

    def __init__(
        self,
        api_url: Optional[str] = None,
        api_token: Optional[str] = None,
        ssl_verify: bool = True,
        ca_certificate_file: Optional[str] = None,
        connection: Optional[ApiConnection] = None,
        transport: Optional[Transport] = None,
    ):
        """Create a project.

        Args:
            api_url: URL of the REDCap API (ignored when ``connection`` is given).
            api_token: 32-character API token for the project.
            ssl_verify: Verify the server's TLS certificate.
            ca_certificate_file: CA bundle used for verification.
            connection: Existing connection to use instead of creating one.
            transport: Transport for a newly created connection.

        Raises:
            RedcapClientError: if any argument is invalid.
        """
        self.api_token = validate_api_token(api_token)
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

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _params(self, content: str, fmt: Optional[Format] = None, **extra: Any) -> dict[str, Any]:
        params: dict[str, Any] = {"token": self.api_token, "content": content}
        if fmt is not None:
            params["format"] = fmt.wire
        params["returnFormat"] = "json"
        params.update(extra)
        return params

    def _call(self, params: Mapping[str, Any]) -> str:
        logger.debug("redcap_request", content=params.get("content"), action=params.get("action"))
        body = self.connection.call_with_array(params)
        raise_for_api_error(body)
        return body

    def _export(self, params: Mapping[str, Any], fmt: Format) -> Any:
        body = self._call(params)
        if fmt is Format.PHP:
            return decode_json(body)
        return body

    # ------------------------------------------------------------------
    # Project information
    # ------------------------------------------------------------------

    def export_project_info(self, format: Union[str, Format] = "php") -> Any:
        """Export project information such as the project id, title and creation time."""
        fmt = validate_format(format, NON_ODM_FORMATS)
        return self._export(self._params("project", fmt), fmt)

    def import_project_info(self, project_info: Any, format: Union[str, Format] = "php") -> Any:
        """Update project settings such as the title; returns the number of values changed."""
        fmt = validate_format(format, NON_ODM_FORMATS)
        if fmt is Format.PHP and not isinstance(project_info, dict):
            raise invalid_argument(
                f"Argument 'project_info' has type '{type(project_info).__name__}', but should be a dict."
            )
        params = self._params("project_settings", fmt, data=process_import_data(project_info, "project_info", fmt))
        return self._export(params, fmt)

    def export_redcap_version(self) -> str:
        """Return the version number of the REDCap instance, e.g. ``13.1.0``."""
        return self._call({"token": self.api_token, "content": "version"}).strip()

    def export_project_xml(
        self,
        return_metadata_only: bool = False,
        record_ids: Optional[list] = None,
        fields: Optional[list] = None,
        events: Optional[list] = None,
        filter_logic: Optional[str] = None,
        export_survey_fields: bool = False,
        export_data_access_groups: bool = False,
        export_files: bool = False,
    ) -> str:
        """Export the project (metadata and optionally data) as CDISC ODM XML."""
        params = self._params(
            "project_xml",
            Format.XML,
            returnMetadataOnly=validate_bool(return_metadata_only, "return_metadata_only"),
            records=validate_record_ids(record_ids),
            fields=validate_string_list(fields, "fields"),
            events=validate_string_list(events, "events"),
            filterLogic=validate_optional_string(filter_logic, "filter_logic"),
            exportSurveyFields=validate_bool(export_survey_fields, "export_survey_fields"),
            exportDataAccessGroups=validate_bool(export_data_access_groups, "export_data_access_groups"),
            exportFiles=validate_bool(export_files, "export_files"),
        )
        return self._call(params)

    # ------------------------------------------------------------------
    # Metadata, arms, events, instruments
    # ------------------------------------------------------------------

    def export_metadata(
        self,
        format: Union[str, Format] = "php",
        fields: Optional[list] = None,
        forms: Optional[list] = None,
    ) -> Any:
        """Export the data dictionary (one entry per field)."""
        fmt = validate_format(format, NON_ODM_FORMATS)
        params = self._params(
            "metadata",
            fmt,
            fields=validate_string_list(fields, "fields"),
            forms=validate_string_list(forms, "forms"),
        )
        return self._export(params, fmt)

    def import_metadata(self, metadata: Any, format: Union[str, Format] = "php") -> Any:
        """Import a data dictionary; returns the number of fields imported."""
        fmt = validate_format(format, NON_ODM_FORMATS)
        params = self._params("metadata", fmt, data=process_import_data(metadata, "metadata", fmt))
        return self._export(params, fmt)

    def export_arms(self, format: Union[str, Format] = "php", arm_numbers: Optional[list] = None) -> Any:
        fmt = validate_format(format, NON_ODM_FORMATS)
        params = self._params("arm", fmt, arms=validate_string_list(arm_numbers, "arm_numbers"))
        return self._export(params, fmt)

    def import_arms(self, arms: Any, format: Union[str, Format] = "php", override: bool = False) -> Any:
        """Import arms; with ``override=True`` all existing arms are deleted first."""
        fmt = validate_format(format, NON_ODM_FORMATS)
        override = validate_bool(override, "override")
        params = self._params(
            "arm",
            fmt,
            action="import",
            override=int(override),
            data=process_import_data(arms, "arms", fmt),
        )
        return self._export(params, fmt)

    def delete_arms(self, arm_numbers: list) -> Any:
        """Delete the given arms; returns the number of arms deleted."""
        arms = validate_string_list(arm_numbers, "arm_numbers")
        if not arms:
            raise invalid_argument("No arm numbers specified for deletion.")
        return decode_json(self._call(self._params("arm", action="delete", arms=arms)))

    def export_events(self, format: Union[str, Format] = "php", arm_numbers: Optional[list] = None) -> Any:
        fmt = validate_format(format, NON_ODM_FORMATS)
        params = self._params("event", fmt, arms=validate_string_list(arm_numbers, "arm_numbers"))
        return self._export(params, fmt)

    def export_instruments(self, format: Union[str, Format] = "php") -> Any:
        """Export the instruments (data entry forms).

        For the php format a dict mapping instrument name to label is returned.
        """
        fmt = validate_format(format, NON_ODM_FORMATS)
        result = self._export(self._params("instrument", fmt), fmt)
        if fmt is Format.PHP:
            return {instr["instrument_name"]: instr["instrument_label"] for instr in result}
        return result

    def export_instrument_event_mappings(
        self,
        format: Union[str, Format] = "php",
        arm_numbers: Optional[list] = None,
    ) -> Any:
        fmt = validate_format(format, NON_ODM_FORMATS)
        params = self._params("formEventMapping", fmt, arms=validate_string_list(arm_numbers, "arm_numbers"))
        return self._export(params, fmt)

    # ------------------------------------------------------------------
    # Records
    # ------------------------------------------------------------------

    def _record_export_params(
        self,
        format: Union[str, Format] = "php",
        type: str = "flat",
        record_ids: Optional[list] = None,
        fields: Optional[list] = None,
        forms: Optional[list] = None,
        events: Optional[list] = None,
        raw_or_label: str = "raw",
        raw_or_label_headers: str = "raw",
        export_checkbox_label: bool = False,
        export_survey_fields: bool = False,
        export_data_access_groups: bool = False,
        filter_logic: Optional[str] = None,
    ) -> tuple[Format, dict[str, Any]]:
        fmt = validate_format(format, ALL_FORMATS)
        params = self._params(
            "record",
            fmt,
            type=validate_choice(type, "type", RECORD_TYPES, default="flat"),
            records=validate_record_ids(record_ids),
            fields=validate_string_list(fields, "fields"),
            forms=validate_string_list(forms, "forms"),
            events=validate_string_list(events, "events"),
            rawOrLabel=validate_choice(raw_or_label, "raw_or_label", RAW_OR_LABEL),
            rawOrLabelHeaders=validate_choice(raw_or_label_headers, "raw_or_label_headers", RAW_OR_LABEL),
            exportCheckboxLabel=validate_bool(export_checkbox_label, "export_checkbox_label"),
            exportSurveyFields=validate_bool(export_survey_fields, "export_survey_fields"),
            exportDataAccessGroups=validate_bool(export_data_access_groups, "export_data_access_groups"),
            filterLogic=validate_optional_string(filter_logic, "filter_logic"),
        )
        return fmt, params

    def export_records(
        self,
        format: Union[str, Format] = "php",
        type: str = "flat",
        record_ids: Optional[list] = None,
        fields: Optional[list] = None,
        forms: Optional[list] = None,
        events: Optional[list] = None,
        raw_or_label: str = "raw",
        raw_or_label_headers: str = "raw",
        export_checkbox_label: bool = False,
        export_survey_fields: bool = False,
        export_data_access_groups: bool = False,
        filter_logic: Optional[str] = None,
    ) -> Any:
        """Export records.

        Args:
            format: 'php' (list of dicts, the default), 'csv', 'json', 'xml'
                or 'odm'. Every format except php returns a string.
            type: 'flat' (one record per row) or 'eav' (one value per row).
            record_ids: ids of the records to export; all records if None.
            fields: field names to export.
            forms: form names whose fields are exported.
            events: event names for which fields are exported.
            raw_or_label: export 'raw' coded values or their 'label'.
            raw_or_label_headers: CSV header style, 'raw' or 'label'.
            export_checkbox_label: export checkbox labels instead of Checked/Unchecked.
            export_survey_fields: include survey identifier and timestamp fields.
            export_data_access_groups: include the data access group field.
            filter_logic: logic restricting the records, e.g. "[last_name] = 'Smith'".

        Returns:
            The records in the requested format.
        """
        fmt, params = self._record_export_params(
            format=format,
            type=type,
            record_ids=record_ids,
            fields=fields,
            forms=forms,
            events=events,
            raw_or_label=raw_or_label,
            raw_or_label_headers=raw_or_label_headers,
            export_checkbox_label=export_checkbox_label,
            export_survey_fields=export_survey_fields,
            export_data_access_groups=export_data_access_groups,
            filter_logic=filter_logic,
        )
        return self._export(params, fmt)

    def export_records_ap(self, arguments: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> Any:
        """Export records with named arguments given as a mapping or as keywords.

        Example:
            project.export_records_ap({"format": "csv", "filterLogic": "[last_name] = 'Smith'"})
            project.export_records_ap(record_ids=["1001", "1002"])
        """
        if arguments is not None and kwargs:
            raise RedcapClientError(
                "Arguments must be passed either as a mapping or as keyword arguments, not both.",
                ErrorCode.TOO_MANY_ARGUMENTS,
            )
        if arguments is not None and not isinstance(arguments, Mapping):
            raise invalid_argument(
                f"The arguments have type {type(arguments).__name__}, but should be a mapping."
            )
        return self.export_records(**_translate_export_arguments(arguments or kwargs))

    def export_reports(
        self,
        report_id: Union[str, int],
        format: Union[str, Format] = "php",
        raw_or_label: str = "raw",
        raw_or_label_headers: str = "raw",
        export_checkbox_label: bool = False,
    ) -> Any:
        """Export the records of a report defined in the project."""
        report_id = validate_report_id(report_id)
        fmt = validate_format(format, NON_ODM_FORMATS)
        params = self._params(
            "report",
            fmt,
            report_id=report_id,
            rawOrLabel=validate_choice(raw_or_label, "raw_or_label", RAW_OR_LABEL),
            rawOrLabelHeaders=validate_choice(raw_or_label_headers, "raw_or_label_headers", RAW_OR_LABEL),
            exportCheckboxLabel=validate_bool(export_checkbox_label, "export_checkbox_label"),
        )
        return self._export(params, fmt)

    def get_record_id_field_name(self) -> str:
        """Return the name of the record id field (the first field of the project)."""
        metadata = self.export_metadata()
        if not metadata:
            raise RedcapClientError(
                "The project has no metadata, so its record id field cannot be determined.",
                ErrorCode.REDCAP_API_ERROR,
            )
        return metadata[0]["field_name"]

    def export_record_ids(self, filter_logic: Optional[str] = None) -> list[str]:
        """Return the ids of all records (matching ``filter_logic``), in project order."""
        filter_logic = validate_optional_string(filter_logic, "filter_logic")
        id_field = self.get_record_id_field_name()
        records = self.export_records(fields=[id_field], filter_logic=filter_logic)
        return unique_in_order(str(record[id_field]) for record in records)

    def get_record_id_batches(
        self,
        batch_size: Optional[int] = None,
        filter_logic: Optional[str] = None,
    ) -> Iterator[list[str]]:
        """Return a lazy iterator over batches of record ids.

        Use each batch as ``record_ids`` of an export. When ``filter_logic``
        is used it must be passed again for every batch export, because
        the batches only fix the set of ids.

        Raises:
            RedcapClientError: ``INVALID_ARGUMENT`` for an invalid batch
                size, before any request is made.
        """
        batch_size = validate_positive_int(batch_size, "batch_size")
        filter_logic = validate_optional_string(filter_logic, "filter_logic")
        record_ids = self.export_record_ids(filter_logic)
        return plan_batches(record_ids, batch_size)

    def export_records_in_batches(
        self,
        batch_size: int,
        filter_logic: Optional[str] = None,
        **export_args: Any,
    ) -> Iterator[Any]:
        """Export records one batch at a time.

        All arguments are validated before the record ids are fetched.
        Returns a lazy iterator yielding one ``export_records`` result per
        batch. Any error stops the iteration. Combine the results with
        ``stitch_batch_results``.
        """
        batch_size = validate_positive_int(batch_size, "batch_size")
        arguments = _translate_export_arguments(export_args)
        if "record_ids" in arguments or "filter_logic" in arguments:
            raise invalid_argument("record_ids and filter_logic cannot be passed as export arguments.")
        fmt, params = self._record_export_params(filter_logic=filter_logic, **arguments)
        batches = self.get_record_id_batches(batch_size, params["filterLogic"])
        return self._export_batches(batches, fmt, params)

    def _export_batches(
        self,
        batches: Iterator[list[str]],
        fmt: Format,
        params: dict[str, Any],
    ) -> Iterator[Any]:
        for index, batch in enumerate(batches):
            logger.info("exporting_batch", batch_index=index, batch_size=len(batch))
            yield self._export({**params, "records": batch}, fmt)

    def _record_import_params(
        self,
        format: Union[str, Format] = "php",
        type: str = "flat",
        overwrite_behavior: str = "normal",
        return_content: str = "count",
        date_format: str = "YMD",
    ) -> tuple[Format, dict[str, Any]]:
        fmt = validate_format(format, ALL_FORMATS)
        params = self._params(
            "record",
            fmt,
            type=validate_choice(type, "type", RECORD_TYPES, default="flat"),
            overwriteBehavior=validate_choice(
                overwrite_behavior, "overwrite_behavior", OVERWRITE_BEHAVIORS, default="normal"
            ),
            returnContent=validate_choice(return_content, "return_content", RETURN_CONTENTS, default="count"),
            dateFormat=validate_choice(date_format, "date_format", DATE_FORMATS, default="YMD"),
        )
        return fmt, params

    def _import(self, params: dict[str, Any], fmt: Format, records: Any) -> Any:
        result = self._export({**params, "data": process_import_data(records, "records", fmt)}, fmt)
        logger.info("records_imported", format=fmt.value, result=result if fmt is Format.PHP else None)
        return result

    def import_records(
        self,
        records: Any,
        format: Union[str, Format] = "php",
        type: str = "flat",
        overwrite_behavior: str = "normal",
        return_content: str = "count",
        date_format: str = "YMD",
    ) -> Any:
        """Import records into the project.

        Args:
            records: for 'php' a list of dicts mapping field name to value;
                a string in the given format otherwise.
            format: 'php', 'csv', 'json', 'xml' or 'odm'.
            type: 'flat' or 'eav'.
            overwrite_behavior: 'normal' ignores blank values, 'overwrite'
                stores them.
            return_content: 'count', 'ids' or 'auto_ids'.
            date_format: 'YMD', 'MDY' or 'DMY'.
        """
        fmt, params = self._record_import_params(
            format=format,
            type=type,
            overwrite_behavior=overwrite_behavior,
            return_content=return_content,
            date_format=date_format,
        )
        return self._import(params, fmt, records)

    def import_records_in_batches(self, records: list, batch_size: int, **import_args: Any) -> list[Any]:
        """Import a list of record dicts in batches of at most ``batch_size`` records.

        Rows belonging to the same record (e.g. one per event) are kept in
        the same batch. All arguments and the records themselves are
        checked before the first request. Returns the per-batch import
        results; stops at the first failing batch.
        """
        batch_size = validate_positive_int(batch_size, "batch_size")
        unknown = set(import_args) - IMPORT_RECORDS_ARGUMENTS
        if unknown:
            raise invalid_argument(f'Unrecognized argument name "{sorted(unknown)[0]}".')
        fmt, params = self._record_import_params(**import_args)
        if fmt is not Format.PHP:
            raise invalid_argument("Batched imports are only supported for the php format.")
        if not isinstance(records, list):
            raise invalid_argument(
                f"Argument 'records' has type '{type(records).__name__}', but should be a list."
            )
        if not all(isinstance(row, dict) for row in records):
            raise invalid_argument("Every record must be a dict.")
        process_import_data(records, "records", fmt)

        id_field = self.get_record_id_field_name()
        rows_by_id: dict[str, list] = {}
        for row in records:
            if id_field not in row:
                raise invalid_argument(f"Every record must contain the record id field '{id_field}'.")
            rows_by_id.setdefault(str(row[id_field]), []).append(row)

        results = []
        for batch in plan_batches(list(rows_by_id), batch_size):
            rows = [row for record_id in batch for row in rows_by_id[record_id]]
            results.append(self._import(params, fmt, rows))
        return results

    def delete_records(self, record_ids: list) -> Any:
        """Delete records; returns the number of records deleted."""
        ids = validate_record_ids(record_ids)
        if not ids:
            raise invalid_argument("No record ids specified for deletion.")
        result = decode_json(self._call(self._params("record", action="delete", records=ids)))
        logger.info("records_deleted", count=result)
        return result

    # ------------------------------------------------------------------
    # Surveys
    # ------------------------------------------------------------------

    def _survey_params(self, content: str, record_id, form, event, repeat_instance) -> dict[str, Any]:
        if repeat_instance is not None:
            repeat_instance = validate_positive_int(repeat_instance, "repeat_instance")
        return self._params(
            content,
            record=validate_record_id(record_id),
            instrument=validate_required_string(form, "form"),
            event=validate_optional_string(event, "event"),
            repeat_instance=repeat_instance,
        )

    def export_survey_link(
        self,
        record_id: Union[str, int],
        form: str,
        event: Optional[str] = None,
        repeat_instance: Optional[int] = None,
    ) -> str:
        """Return the survey link of a record for a survey-enabled form."""
        params = self._survey_params("surveyLink", record_id, form, event, repeat_instance)
        return self._call(params).strip()

    def export_survey_queue_link(self, record_id: Union[str, int]) -> str:
        params = self._params("surveyQueueLink", record=validate_record_id(record_id))
        return self._call(params).strip()

    def export_survey_return_code(
        self,
        record_id: Union[str, int],
        form: str,
        event: Optional[str] = None,
        repeat_instance: Optional[int] = None,
    ) -> str:
        params = self._survey_params("surveyReturnCode", record_id, form, event, repeat_instance)
        return self._call(params).strip()

    def export_survey_participants(
        self,
        form: str,
        format: Union[str, Format] = "php",
        event: Optional[str] = None,
    ) -> Any:
        """Export the participant list of a survey (email, identifier, links, response status)."""
        fmt = validate_format(format, NON_ODM_FORMATS)
        params = self._params(
            "participantList",
            fmt,
            instrument=validate_required_string(form, "form"),
            event=validate_optional_string(event, "event"),
        )
        return self._export(params, fmt)

    # ------------------------------------------------------------------
    # Files
    # ------------------------------------------------------------------

    def _file_params(self, action: str, record_id, field, event, repeat_instance) -> dict[str, Any]:
        if repeat_instance is not None:
            repeat_instance = validate_positive_int(repeat_instance, "repeat_instance")
        return self._params(
            "file",
            action=action,
            record=validate_record_id(record_id),
            field=validate_required_string(field, "field"),
            event=validate_optional_string(event, "event"),
            repeat_instance=repeat_instance,
        )

    def import_file(
        self,
        filename: str,
        record_id: Union[str, int],
        field: str,
        event: Optional[str] = None,
        repeat_instance: Optional[int] = None,
    ) -> None:
        """Upload a local file into a file-upload field of a record.

        Raises:
            RedcapClientError: ``INPUT_FILE_NOT_FOUND`` or
                ``INPUT_FILE_UNREADABLE`` before any request is made, or
                ``REDCAP_API_ERROR`` if REDCap rejects the upload.
        """
        filename = validate_required_string(filename, "filename")
        params = self._file_params("import", record_id, field, event, repeat_instance)
        body = self.connection.call_with_file(params, filename)
        raise_for_api_error(body)
        logger.info("file_imported", record=params["record"], field=params["field"])

    def export_file(
        self,
        record_id: Union[str, int],
        field: str,
        event: Optional[str] = None,
        repeat_instance: Optional[int] = None,
    ) -> bytes:
        """Return the contents of the file stored in a record's field."""
        params = self._file_params("export", record_id, field, event, repeat_instance)
        content = self.connection.call_for_content(params)
        raise_for_api_error(content)
        return content

    def delete_file(
        self,
        record_id: Union[str, int],
        field: str,
        event: Optional[str] = None,
        repeat_instance: Optional[int] = None,
    ) -> None:
        params = self._file_params("delete", record_id, field, event, repeat_instance)
        self._call(params)
        logger.info("file_deleted", record=params["record"], field=params["field"])

    # ------------------------------------------------------------------
    # Connection
    # ------------------------------------------------------------------

    def get_call_info(self) -> Optional[CallInfo]:
        return self.connection.get_call_info()

    @property
    def timeout_in_seconds(self) -> int:
        return self.connection.timeout_in_seconds

    @timeout_in_seconds.setter
    def timeout_in_seconds(self, value: int) -> None:
        self.connection.timeout_in_seconds = value

    @property
    def connection_timeout_in_seconds(self) -> int:
        return self.connection.connection_timeout_in_seconds

    @connection_timeout_in_seconds.setter
    def connection_timeout_in_seconds(self, value: int) -> None:
        self.connection.connection_timeout_in_seconds = value


def _translate_export_arguments(arguments: Mapping[str, Any]) -> dict[str, Any]:
    translated = {}
    for name, value in arguments.items():
        if name not in EXPORT_RECORDS_ARGUMENTS:
            raise invalid_argument(f'Unrecognized argument name "{name}".')
        translated[EXPORT_RECORDS_ARGUMENTS[name]] = value
    return translated

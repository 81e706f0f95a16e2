"""Command-line interface for redcap-client.

Provides commands for inspecting a project and exporting or importing its
records and files. Connection details come from the environment, ``.env``
or the YAML file named by ``CONFIG_YAML``.
"""

import json
from typing import Optional

import click
import structlog
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from redcap_client.api import RedCapProject, stitch_batch_results
from redcap_client.config import Settings, get_settings
from redcap_client.errors import RedcapClientError
from redcap_client.fileutil import file_to_string, write_string_to_file
from redcap_client.logging_config import configure_logging
from redcap_client.retry import run_with_retry
from redcap_client.validation import Format, validate_format

console = Console()
logger = structlog.get_logger(__name__)

FORMAT_CHOICES = click.Choice([f.value for f in Format], case_sensitive=False)


def _build_project(settings: Settings) -> RedCapProject:
    project = RedCapProject(
        settings.REDCAP_API_URL,
        settings.REDCAP_API_TOKEN,
        ssl_verify=settings.REDCAP_SSL_VERIFY,
        ca_certificate_file=settings.REDCAP_CA_CERTIFICATE_FILE,
    )
    project.timeout_in_seconds = settings.REDCAP_TIMEOUT_SECONDS
    project.connection_timeout_in_seconds = settings.REDCAP_CONNECTION_TIMEOUT_SECONDS
    return project


def _with_retry(settings: Settings, func, *args, **kwargs):
    return run_with_retry(
        func,
        *args,
        max_attempts=settings.RETRY_MAX_ATTEMPTS,
        base_delay=settings.RETRY_DELAY_SECONDS,
        **kwargs,
    )


def _report_error(e: Exception, event: str) -> None:
    if isinstance(e, RedcapClientError):
        console.print(f"[red]Error ({e.code.name}): {escape(e.message)}[/red]")
    else:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
    logger.exception(event, error=str(e))


def _echo(text: str) -> None:
    click.echo(text, nl=not text.endswith("\n"))


def _render(result) -> str:
    if isinstance(result, (list, dict)):
        return json.dumps(result, indent=2)
    return str(result)


@click.group()
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose logging",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """REDCap API command-line interface."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose

    try:
        settings = get_settings()
    except ValidationError as e:
        console.print(f"[red]Invalid configuration: {escape(str(e))}[/red]")
        ctx.exit(1)
    ctx.obj["settings"] = settings
    configure_logging("DEBUG" if verbose else settings.LOG_LEVEL, settings.LOG_JSON)


@cli.command()
@click.pass_context
def info(ctx: click.Context) -> None:
    """Show project information."""
    settings = ctx.obj["settings"]
    try:
        project = _build_project(settings)
        project_info = _with_retry(settings, project.export_project_info)

        table = Table(title="Project Information")
        table.add_column("Attribute", style="cyan")
        table.add_column("Value")
        for name, value in project_info.items():
            table.add_row(name, escape("" if value is None else str(value)))
        console.print(table)

    except Exception as e:
        _report_error(e, "cli_info_error")
        ctx.exit(1)


@cli.command()
@click.pass_context
def version(ctx: click.Context) -> None:
    """Show the REDCap version of the server."""
    settings = ctx.obj["settings"]
    try:
        project = _build_project(settings)
        console.print(f"REDCap version [green]{escape(_with_retry(settings, project.export_redcap_version))}[/green]")
    except Exception as e:
        _report_error(e, "cli_version_error")
        ctx.exit(1)


@cli.command()
@click.option("--format", "fmt", type=FORMAT_CHOICES, default="php", help="Output format")
@click.pass_context
def metadata(ctx: click.Context, fmt: str) -> None:
    """Show the project's data dictionary."""
    settings = ctx.obj["settings"]
    try:
        project = _build_project(settings)
        result = _with_retry(settings, project.export_metadata, format=fmt)

        if validate_format(fmt) is not Format.PHP:
            _echo(result)
            return

        table = Table(title="Metadata")
        table.add_column("Field", style="cyan")
        table.add_column("Form")
        table.add_column("Type")
        table.add_column("Label")
        for field in result:
            label = field.get("field_label", "")
            table.add_row(
                field.get("field_name", ""),
                field.get("form_name", ""),
                field.get("field_type", ""),
                escape(label[:50] + "..." if len(label) > 50 else label),
            )
        console.print(table)

    except Exception as e:
        _report_error(e, "cli_metadata_error")
        ctx.exit(1)


@cli.command("export-records")
@click.option("--format", "fmt", type=FORMAT_CHOICES, default="csv", help="Export format")
@click.option("--batch-size", type=int, help="Export in batches of this many records")
@click.option("--filter-logic", help="REDCap logic restricting the exported records")
@click.option("--field", "fields", multiple=True, help="Field to export (repeatable)")
@click.option("--output", "-o", type=click.Path(dir_okay=False), help="Write to this file instead of stdout")
@click.pass_context
def export_records(
    ctx: click.Context,
    fmt: str,
    batch_size: Optional[int],
    filter_logic: Optional[str],
    fields: tuple,
    output: Optional[str],
) -> None:
    """Export records, optionally in batches."""
    settings = ctx.obj["settings"]
    try:
        project = _build_project(settings)
        export_args = {"format": fmt, "fields": list(fields) or None, "filter_logic": filter_logic}

        if batch_size is None:
            result = _with_retry(settings, project.export_records, **export_args)
        else:
            batches = _with_retry(settings, project.get_record_id_batches, batch_size, filter_logic)
            results = []
            for index, batch in enumerate(batches):
                logger.info("cli_exporting_batch", batch_index=index, batch_size=len(batch))
                results.append(_with_retry(settings, project.export_records, record_ids=batch, **export_args))
            result = stitch_batch_results(results, fmt)

        text = _render(result)
        if output:
            size = write_string_to_file(text, output)
            console.print(f"[green]✓ Wrote {size} bytes to {escape(output)}[/green]")
        else:
            _echo(text)

    except Exception as e:
        _report_error(e, "cli_export_records_error")
        ctx.exit(1)


@cli.command("export-file")
@click.argument("record_id")
@click.argument("field")
@click.option("--event", help="Unique event name (longitudinal projects)")
@click.option("--repeat-instance", type=int, help="Instance of a repeating form or event")
@click.option("--output", "-o", required=True, type=click.Path(dir_okay=False), help="File to write")
@click.pass_context
def export_file(
    ctx: click.Context,
    record_id: str,
    field: str,
    event: Optional[str],
    repeat_instance: Optional[int],
    output: str,
) -> None:
    """Download the file stored in a record's file field."""
    settings = ctx.obj["settings"]
    try:
        project = _build_project(settings)
        content = _with_retry(
            settings, project.export_file, record_id, field, event=event, repeat_instance=repeat_instance
        )
        size = write_string_to_file(content, output)
        console.print(f"[green]✓ Wrote {size} bytes to {escape(output)}[/green]")
    except Exception as e:
        _report_error(e, "cli_export_file_error")
        ctx.exit(1)


@cli.command("import-records")
@click.argument("input_file", type=click.Path(dir_okay=False))
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["csv", "json", "xml", "odm"], case_sensitive=False),
    default="csv",
    help="Format of the input file",
)
@click.option("--overwrite", is_flag=True, help="Overwrite existing values with blanks")
@click.pass_context
def import_records(ctx: click.Context, input_file: str, fmt: str, overwrite: bool) -> None:
    """Import records from a file."""
    settings = ctx.obj["settings"]
    try:
        project = _build_project(settings)
        data = file_to_string(input_file)
        # Not retried: a timed-out import may already have been applied
        result = project.import_records(
            data,
            format=fmt,
            overwrite_behavior="overwrite" if overwrite else "normal",
        )
        console.print(f"[green]✓ Import complete:[/green] {escape(_render(result))}")
    except Exception as e:
        _report_error(e, "cli_import_records_error")
        ctx.exit(1)


def main() -> None:
    """Entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()

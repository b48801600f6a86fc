"""Command Line Interface for record-xml.

This module provides a CLI using Typer for inspecting, normalizing and
verifying record XML documents (golden-file fixtures).
"""

from pathlib import Path
from typing import Any, List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from record_xml.adapters.xml.field_schema import FIELD_SCHEMA, Cardinality
from record_xml.adapters.xml.record_codec import XmlRecordCodec
from record_xml.domain.ports import CodecError
from record_xml.domain.record import ChannelFactory, Record
from record_xml.domain.services import verify_round_trip
from record_xml.infrastructure.logging_config import setup_logging
from record_xml.infrastructure.settings import settings

# Initialize Typer app and Rich console
app = typer.Typer(
    name="recordxml",
    help="Inspect, normalize and verify record XML documents",
    add_completion=False
)
console = Console()

_PREVIEW_LENGTH = 40


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
) -> None:
    """Configure logging for every command."""
    setup_logging(use_json=settings.log_json, log_level="DEBUG" if verbose else settings.log_level)


def _preview(value: Any) -> str:
    if isinstance(value, (bytes, bytearray)):
        text = bytes(value[:_PREVIEW_LENGTH]).decode("latin-1").encode("unicode_escape").decode("ascii")
        suffix = "..." if len(value) > _PREVIEW_LENGTH else ""
        return escape(f"{len(value)} bytes: {text}{suffix}")
    text = str(value)
    return escape(text if len(text) <= _PREVIEW_LENGTH else text[:_PREVIEW_LENGTH] + "...")


def _record_table(title: str, record: Record) -> Table:
    table = Table(title=title, show_header=True)
    table.add_column("Field", style="cyan")
    table.add_column("Value")

    for field in FIELD_SCHEMA:
        if field.cardinality is Cardinality.KEYED_MULTI:
            continue
        value = field.read(record)
        if value is None or value == [] or (field.is_primitive and value == field.default):
            continue
        if isinstance(value, ChannelFactory):
            try:
                value = record.data
            except OSError as e:
                table.add_row(field.element_name, f"[red]unreadable: {e}[/red]")
                continue
        table.add_row(field.element_name, _preview(value))

    for key, values in record.parameters.items():
        table.add_row(f"meta:{key}", ", ".join(_preview(v) for v in values))
    for name, view in record.alternate_views.items():
        table.add_row(f"view:{name}", _preview(view))

    return table


def _codec() -> XmlRecordCodec:
    return XmlRecordCodec(settings.codec_config)


@app.command()
def inspect(
    input_file: Path = typer.Argument(..., help="Record XML document", exists=True, dir_okay=False),
) -> None:
    """Show the records held in a document."""
    codec = _codec()
    text = input_file.read_bytes()

    try:
        primary, children = codec.from_xml(text)
        initial = codec.setup_from_xml(text)
    except CodecError as e:
        console.print(f"[red]✗[/red] {e}")
        raise typer.Exit(code=1)

    if initial is not None:
        console.print(_record_table("setup", initial))
    console.print(_record_table("answers", primary))
    for index, extracted in enumerate(primary.extracted_records, start=1):
        console.print(_record_table(f"extract{index}", extracted))
    for index, child in enumerate(children, start=1):
        console.print(_record_table(f"att{index}", child))

    console.print(
        f"[bold]{len(primary.extracted_records)}[/bold] extracted record(s), "
        f"[bold]{len(children)}[/bold] child record(s)"
    )


@app.command()
def normalize(
    input_file: Path = typer.Argument(..., help="Record XML document", exists=True, dir_okay=False),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write to this file instead of stdout"),
) -> None:
    """Decode a document and re-encode it in canonical form."""
    codec = _codec()
    text = input_file.read_bytes()

    try:
        primary, children = codec.from_xml(text)
        initial = codec.setup_from_xml(text) or Record()
    except CodecError as e:
        console.print(f"[red]✗[/red] {e}")
        raise typer.Exit(code=1)

    if output is None:
        typer.echo(codec.to_xml(primary, children, initial), nl=False)
        return

    codec.write_file(output, primary, children, initial)
    console.print(f"[green]✓[/green] Wrote {output}")


@app.command()
def verify(
    input_files: List[Path] = typer.Argument(..., help="Record XML documents", exists=True, dir_okay=False),
) -> None:
    """Check that documents survive a decode/encode/decode cycle unchanged."""
    codec = _codec()
    failures = 0

    for input_file in input_files:
        result = verify_round_trip(codec, input_file.read_bytes())
        if result.is_success():
            console.print(f"[green]✓[/green] {input_file}")
            continue

        failures += 1
        console.print(f"[red]✗[/red] {input_file}: {result.error}")
        for difference in result.error_details.get("differences", []):
            console.print(f"    [dim]{difference}[/dim]")

    if failures:
        console.print(f"\n[red]{failures} of {len(input_files)} document(s) failed[/red]")
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()

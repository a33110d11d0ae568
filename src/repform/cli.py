import logging
from pathlib import Path
from typing import Any

import orjson
import typer
import yaml
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table
from rich.text import Text

from repform.config import Layout, load_layout, sample_layout
from repform.errors import FormatError
from repform.form import Form
from repform.reader import build_matcher, read, records_to_arrow, records_to_json, records_to_jsonl
from repform.renderer import Renderer
from repform.sinks import ListSink

app = typer.Typer(help="Render fixed-width reports from picture layouts and read them back.")
console = Console()
SUPPORTED_FORMATS = {"json", "jsonl", "arrow"}


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log page breaks and skips."),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _read_text(path: Path) -> str:
    if not path.is_file():
        raise typer.BadParameter(f"Input file not found: {path}")
    return path.read_text()


def _load_layout(layout: Path) -> Layout:
    if not layout.is_file():
        raise typer.BadParameter(f"Layout file not found: {layout}")
    try:
        return load_layout(layout)
    except FormatError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _compile(layout: Layout, renderer: Renderer | None = None) -> Form:
    try:
        return layout.compile(renderer)
    except FormatError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _load_records(path: Path) -> list[dict[str, Any]]:
    text = _read_text(path)
    try:
        if path.suffix.lower() == ".jsonl":
            return [orjson.loads(line) for line in text.splitlines() if line.strip()]
        payload = orjson.loads(text)
    except orjson.JSONDecodeError as exc:
        raise typer.BadParameter(f"Invalid JSON in {path}: {exc}") from exc
    if isinstance(payload, dict):
        return [payload]
    if not isinstance(payload, list):
        raise typer.BadParameter(f"{path} must hold a JSON object or array of objects")
    return payload


@app.command()
def render(
    layout: Path = typer.Argument(..., help="Layout file (.yaml/.yml/.json)."),
    records: Path = typer.Argument(..., help="Records as a JSON array or JSONL file."),
    output: Path | None = typer.Option(
        None, "--output", "-o", help="Optional path to write the report."
    ),
    page_length: int | None = typer.Option(
        None, "--page-length", help="Override the layout's page length."
    ),
    finish: bool = typer.Option(
        True, "--finish/--no-finish", help="Pad the last page and print its bottom."
    ),
    form_feed: bool | None = typer.Option(
        None, "--form-feed/--no-form-feed", help="Start each new page with a form feed."
    ),
) -> None:
    """Render records through a layout."""
    loaded = _load_layout(layout)
    if page_length is not None:
        if page_length < 1:
            raise typer.BadParameter("--page-length must be positive")
        loaded.render.page_length = page_length
    if form_feed is not None:
        loaded.render.form_feed = form_feed
    rows = _load_records(records)

    renderer = loaded.renderer()
    form = _compile(loaded, renderer)
    sink = ListSink()
    try:
        renderer.render_all(form, rows, sink, finish=finish)
    except FormatError as exc:
        raise typer.BadParameter(str(exc)) from exc

    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(sink.text())
        console.print(f"[bold green]Wrote[/] {len(sink.lines)} lines to {output}")
    else:
        typer.echo(sink.text(), nl=False)


@app.command("read")
def read_cmd(
    layout: Path = typer.Argument(..., help="Layout the text was rendered with."),
    text: Path = typer.Argument(..., help="Rendered report to read back."),
    output: Path | None = typer.Option(
        None, "--output", "-o", help="Optional path to write recovered records."
    ),
    format: str = typer.Option("json", "--format", "-f", help="Output format: json | jsonl | arrow."),
) -> None:
    """Recover variable values from a rendered report."""
    fmt = format.lower()
    if fmt not in SUPPORTED_FORMATS:
        raise typer.BadParameter(f"Unsupported format '{format}'. Choose from {SUPPORTED_FORMATS}.")
    if fmt == "arrow" and output is None:
        raise typer.BadParameter("Arrow output needs --output")

    form = _compile(_load_layout(layout))
    content = _read_text(text).replace("\f", "")
    try:
        recovered = list(read(build_matcher(form), content))
    except FormatError as exc:
        raise typer.BadParameter(str(exc)) from exc

    if output is None:
        typer.echo(orjson.dumps(recovered, option=orjson.OPT_INDENT_2).decode())
        return
    if fmt == "arrow":
        records_to_arrow(recovered, output)
    elif fmt == "jsonl":
        records_to_jsonl(recovered, output)
    else:
        records_to_json(recovered, output)
    console.print(f"[bold green]Wrote[/] {len(recovered)} records to {output}")


@app.command()
def inspect(
    layout: Path = typer.Argument(..., help="Layout file to compile and describe."),
) -> None:
    """Show the compiled picture lines and fields of every band."""
    loaded = _load_layout(layout)
    form = _compile(loaded)
    table = Table(title=f"{loaded.name} (page length {loaded.render.page_length})")
    table.add_column("band")
    table.add_column("picture")
    table.add_column("fields")
    table.add_column("flags")
    bands = [("detail", form), *((band.value, sub) for band, sub in form.bands.items())]
    for band_name, band_form in bands:
        for line in band_form.lines:
            fields = ", ".join(
                f"{name}={field.source}({field.width})" for field, name in line.bindings()
            )
            flags = "repeat" if line.repeat_until_blank else "suppress" if line.suppress_if_blank else ""
            table.add_row(band_name, Text(line.source), Text(fields), flags)
    console.print(table)


@app.command("sample-layout")
def sample_layout_cmd(
    output: Path = typer.Argument(..., help="Where to write the starter layout (.yaml or .json)."),
) -> None:
    """Write a starter layout to edit."""
    payload = sample_layout()
    output.parent.mkdir(parents=True, exist_ok=True)
    if output.suffix.lower() in {".yml", ".yaml"}:
        output.write_text(yaml.safe_dump(payload, sort_keys=False))
    else:
        output.write_bytes(orjson.dumps(payload, option=orjson.OPT_INDENT_2))
    console.print(f"[bold green]Wrote sample layout[/] to {output}")


if __name__ == "__main__":
    app()

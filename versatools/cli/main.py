"""
Command-line interface for VersaTools.
"""

from __future__ import annotations

import json
import mimetypes
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .. import __version__
from ..dispatcher import METADATA_HEADER, Dispatcher
from ..errors import NoToolsAvailableError
from ..router import route
from ..tools import build_registry
from ..tools.common.interfaces import ToolInput, UploadedFile

console = Console()


def _load_upload(path: Path) -> UploadedFile:
    content_type, _ = mimetypes.guess_type(path.name)
    return UploadedFile(
        filename=path.name,
        content_type=content_type or "application/octet-stream",
        data=path.read_bytes(),
    )


def _parse_field(raw: str) -> tuple[str, str]:
    name, sep, value = raw.partition("=")
    if not sep or not name:
        raise click.BadParameter(f"expected NAME=VALUE, got {raw!r}", param_hint="--field")
    return name, value


@click.group()
@click.version_option(version=__version__)
def cli():
    """
    VersaTools CLI - run the PDF, image, file and text tools locally.
    """
    pass


@cli.command(name="list")
@click.option('--ai-only', is_flag=True, help='Only show tools exposed to the agent')
def list_tools(ai_only):
    """
    Display the registered tools.

    Example:

        versatools list
    """
    registry = build_registry()
    tools = registry.list_ai_exposed() if ai_only else registry.list_all()

    table = Table(title="Registered Tools")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Name", style="green")
    table.add_column("Category", style="magenta")
    table.add_column("Agent", justify="center")
    table.add_column("Description")

    for tool in tools:
        table.add_row(tool.id, tool.name, tool.category.value, "✓" if tool.ai_exposed else "", tool.description)

    console.print()
    console.print(table)
    console.print()


@cli.command(name="route")
@click.argument('prompt')
def route_prompt(prompt):
    """
    Show which tool a free-text prompt would be routed to.

    Example:

        versatools route "merge these pdf files"
    """
    registry = build_registry()
    try:
        tool_id = route(prompt, registry.list_ai_exposed())
    except NoToolsAvailableError as e:
        console.print(f"[bold red]✗ Error:[/bold red] {escape(str(e))}")
        sys.exit(1)
    click.echo(tool_id)


@cli.command(name="run")
@click.argument('tool_id')
@click.argument('files', nargs=-1, type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option('--options', 'options', default=None, help='Tool options as a JSON object')
@click.option('--field', 'fields', multiple=True, help='Extra text field as NAME=VALUE (repeatable)')
@click.option(
    '--output', '-o',
    default=None,
    help='Output path (defaults to the file name reported by the tool)',
    type=click.Path(dir_okay=False, path_type=Path)
)
def run_tool(tool_id, files, options, fields, output):
    """
    Run a tool on local files.

    Examples:

        versatools run pdf-merger a.pdf b.pdf

        versatools run pdf-splitter report.pdf --options '{"ranges": "1-3,5"}'

        versatools run text-translator --field text="hello" -o result.json
    """
    tool_input = ToolInput()
    for path in files:
        tool_input.add("files", _load_upload(path))
    for raw in fields:
        tool_input.add(*_parse_field(raw))

    dispatcher = Dispatcher(build_registry())
    response = dispatcher.execute(tool_id, tool_input, options)

    if not response.ok:
        payload = response.payload or {}
        kind = escape(str(payload.get("error", "ERROR")))
        message = escape(str(payload.get("message", "")))
        console.print(f"[bold red]✗ {kind}:[/bold red] {message}")
        for detail in payload.get("details", []):
            console.print(f"  • {escape(str(detail['field']))}: {escape(str(detail['message']))}")
        sys.exit(1)

    metadata = response.headers.get(METADATA_HEADER, "{}")
    target = output or Path(_metadata_filename(metadata) or f"{tool_id}.out")
    written = 0
    with target.open("wb") as handle:
        for chunk in response.body or ():
            handle.write(chunk)
            written += len(chunk)

    console.print(f"[bold green]✓ Wrote {written} bytes[/bold green] to {target}")
    console.print(metadata, style="dim", markup=False)


def _metadata_filename(raw: str) -> str | None:
    try:
        name = json.loads(raw).get("fileName")
    except ValueError:
        return None
    return Path(name).name if isinstance(name, str) and name else None


if __name__ == '__main__':
    cli()

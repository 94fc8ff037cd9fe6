"""
Command-line interface for pdfinspectx.
"""

import os
import sys

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from pdfinspectx import __version__
from pdfinspectx.config import InspectorConfig
from pdfinspectx.core.report import summary, text_report
from pdfinspectx.core.utils import format_file_size
from pdfinspectx.exceptions import PDFInspectError
from pdfinspectx.tools import registry
from pdfinspectx.tools.common.interfaces import InspectionContext

console = Console()


def _context(input_pdf, max_bytes=None, max_objects=None, output=None):
    settings = InspectorConfig.from_env().with_overrides(max_bytes=max_bytes, max_objects=max_objects)
    return InspectionContext(input_path=input_pdf, output_path=output, settings=settings)


def _fail(error):
    console.print(f"\n[bold red]✗ Error:[/bold red] {escape(str(error))}")
    sys.exit(1)


def _diagnostic_table(title, items, style):
    table = Table(title=title)
    table.add_column("Code", style=style)
    table.add_column("Message")
    table.add_column("Detail", style="dim")
    for item in items:
        table.add_row(item.code, escape(item.msg), escape(item.detail))
    return table


budget_options = [
    click.option('--max-bytes', type=int, default=None, help='Refuse inputs larger than this many bytes'),
    click.option('--max-objects', type=int, default=None, help='Stop after this many objects'),
]


def with_budget(func):
    for option in reversed(budget_options):
        func = option(func)
    return func


@click.group()
@click.version_option(version=__version__)
def cli():
    """
    pdfinspectx - Inspect and validate the internal structure of PDF files.
    """
    pass


@cli.command(name="inspect")
@click.argument('input_pdf', type=click.Path(exists=True, dir_okay=False))
@click.option('--text', 'as_text', is_flag=True, help='Print the plain text report instead of tables')
@with_budget
def inspect_command(input_pdf, as_text, max_bytes, max_objects):
    """
    Parse and analyse a PDF and print a structural summary.

    Example:

        pdfinspectx inspect input.pdf
    """
    try:
        context = _context(input_pdf, max_bytes, max_objects)
        document = registry.run("inspect", context)
    except (PDFInspectError, OSError) as e:
        _fail(e)

    if as_text:
        click.echo(text_report(document), nl=False)
        return

    data = summary(document)
    info_table = Table(title="PDF Structure", show_header=False)
    info_table.add_column("Property", style="cyan")
    info_table.add_column("Value", style="green")
    info_table.add_row("File", os.path.basename(input_pdf))
    info_table.add_row("Version", str(data['version']))
    info_table.add_row("Size", format_file_size(data['file_size']))
    info_table.add_row("Objects", str(data['total_objects']))
    info_table.add_row("Pages", str(data['pages']))
    info_table.add_row("Fonts", str(data['fonts']))
    info_table.add_row("Images", str(data['images']))
    info_table.add_row("Streams", str(data['streams']))
    info_table.add_row("References", f"{data['references']} ({data['invalid_references']} dangling)")
    info_table.add_row("Circular chains", str(data['circular_refs']))
    info_table.add_row("Hierarchy depth", str(data['max_depth']))
    console.print(info_table)

    type_table = Table(title="Object Types")
    type_table.add_column("Type", style="cyan")
    type_table.add_column("Count", justify="right")
    for type_tag, count in sorted(document.stats.type_counts.items()):
        type_table.add_row(type_tag, str(count))
    console.print(type_table)

    status = "[bold green]✓ Valid[/bold green]" if data['is_valid'] else "[bold red]✗ Invalid[/bold red]"
    console.print(f"\n{status}  errors: {data['errors']}  warnings: {data['warnings']}\n")


@cli.command(name="validate")
@click.argument('input_pdf', type=click.Path(exists=True, dir_okay=False))
@click.option('--quiet', '-q', is_flag=True, help='Only set the exit status')
@with_budget
def validate_command(input_pdf, quiet, max_bytes, max_objects):
    """
    Validate a PDF's structure; exits with status 1 when it is invalid.

    Example:

        pdfinspectx validate input.pdf
    """
    try:
        validation = registry.run("validate", _context(input_pdf, max_bytes, max_objects))
    except (PDFInspectError, OSError) as e:
        _fail(e)

    if not quiet:
        sections = Table(title="Sections", show_header=False)
        sections.add_column("Section", style="cyan")
        sections.add_column("Status")
        for name, ok in validation.sections.items():
            sections.add_row(name, "[green]ok[/green]" if ok else "[red]invalid[/red]")
        console.print(sections)
        if validation.errors:
            console.print(_diagnostic_table("Errors", validation.errors, "red"))
        if validation.warnings:
            console.print(_diagnostic_table("Warnings", validation.warnings, "yellow"))

    if validation.is_valid:
        if not quiet:
            console.print("\n[bold green]✓ PDF structure is valid[/bold green]\n")
        return
    if not quiet:
        console.print(f"\n[bold red]✗ PDF structure is invalid ({len(validation.errors)} errors)[/bold red]\n")
    sys.exit(1)


@cli.command(name="export")
@click.argument('input_pdf', type=click.Path(exists=True, dir_okay=False))
@click.option(
    '--output', '-o',
    required=True,
    help='Destination JSON file',
    type=click.Path(dir_okay=False)
)
@click.option('--indent', default=2, type=int, help='JSON indentation')
@with_budget
def export_command(input_pdf, output, indent, max_bytes, max_objects):
    """
    Export the full structural snapshot as JSON.

    Example:

        pdfinspectx export input.pdf -o structure.json
    """
    try:
        context = _context(input_pdf, max_bytes, max_objects, output=output)
        context.config["indent"] = indent
        registry.run("export", context)
    except (PDFInspectError, OSError) as e:
        _fail(e)
    console.print(f"[bold green]✓ Exported structure to[/bold green] {os.path.abspath(output)}")


@cli.command(name="crosscheck")
@click.argument('input_pdf', type=click.Path(exists=True, dir_okay=False))
def crosscheck_command(input_pdf):
    """
    Compare the scanner's findings with pypdf's reader.

    Example:

        pdfinspectx crosscheck input.pdf
    """
    try:
        result = registry.run("crosscheck", _context(input_pdf))
    except (PDFInspectError, OSError) as e:
        _fail(e)

    if result.reference_error is not None:
        console.print(f"[bold yellow]! pypdf could not read the file:[/bold yellow] {escape(result.reference_error)}")
        sys.exit(1)

    table = Table(title="Scanner vs pypdf")
    table.add_column("Field", style="cyan")
    table.add_column("Scanner")
    table.add_column("pypdf")
    for key in ("version", "pages", "root", "size"):
        style = "red" if key in result.mismatches else "green"
        table.add_row(key, f"[{style}]{escape(str(result.scanner.get(key)))}[/{style}]", escape(str(result.reference.get(key))))
    console.print(table)
    if not result.agrees:
        console.print(f"\n[bold red]✗ Mismatch on: {', '.join(result.mismatches)}[/bold red]\n")
        sys.exit(1)
    console.print("\n[bold green]✓ Scanner agrees with pypdf[/bold green]\n")


@cli.command(name="tools")
def list_tools():
    """
    List the registered inspection tools.
    """
    table = Table(title="Registered Tools")
    table.add_column("Name", style="cyan")
    table.add_column("Description")
    for name in registry.names():
        tool_class = registry.get(name)
        table.add_row(name, getattr(tool_class, "description", ""))
    console.print(table)


def main():
    cli()


if __name__ == '__main__':
    main()

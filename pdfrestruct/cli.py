"""
Command-line interface for pdfrestruct.
"""

import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from pdfrestruct import __version__
from pdfrestruct.backends.pypdf_backend import PypdfBackend
from pdfrestruct.config import (
    DEFAULT_BOOKMARK_PATTERN,
    DEFAULT_MERGE_FILENAME,
    DEFAULT_PAGE_PATTERN,
    DEFAULT_RANGE_PATTERN,
    DEFAULT_SIZE_PATTERN,
)
from pdfrestruct.engine import (
    MergeRequest,
    RestructuringEngine,
    SplitByBookmarkRequest,
    SplitByPageRequest,
    SplitByRangeRequest,
    SplitBySizeRequest,
)
from pdfrestruct.exceptions import PDFRestructError
from pdfrestruct.sink import DirectorySink
from pdfrestruct.types import InputDocument, PageSizePolicy

console = Console()

_POLICY_CHOICES = [policy.value for policy in PageSizePolicy]


def format_file_size(size_bytes):
    """
    Format file size in human-readable format.

    Args:
        size_bytes: File size in bytes

    Returns:
        Formatted string (e.g., "1.5 MB", "500.0 KB")
    """
    size = float(size_bytes)
    for unit in ['B', 'KB', 'MB', 'GB']:
        if size < 1024.0:
            return f"{size:.1f} {unit}"
        size /= 1024.0
    return f"{size:.1f} TB"


def _load(path):
    source = Path(path)
    return InputDocument(content=source.read_bytes(), filename=source.name)


def _fail(error):
    if isinstance(error, PDFRestructError):
        console.print(
            f"\n[bold red]✗ Error {escape('[' + error.code + ']')}:[/bold red] {escape(error.message)}"
        )
    else:
        console.print(f"\n[bold red]✗ Error:[/bold red] {escape(str(error))}")
    sys.exit(1)


def _run(description, operation):
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    ) as progress:
        progress.add_task(description, total=None)
        return operation()


def _report_split(result, output_dir):
    console.print(
        f"\n[bold green]✓ Successfully split {result.original_pages} pages "
        f"into {result.total_files} file(s)[/bold green]"
    )
    console.print(f"[dim]Output directory: {Path(output_dir).resolve()}[/dim]")

    table = Table(title="Created files")
    table.add_column("#", style="cyan", justify="right")
    table.add_column("File", style="green")
    table.add_column("Size", style="magenta", justify="right")
    for number, path in enumerate(result.split_documents, start=1):
        table.add_row(str(number), path.name, format_file_size(path.stat().st_size))
    console.print(table)
    console.print()


@click.group()
@click.version_option(version=__version__)
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
def cli(verbose):
    """
    pdfrestruct - Merge PDF files and split them by pages, ranges, bookmarks or size.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


@cli.command(name="info")
@click.argument('input_pdf', type=click.Path(exists=True, dir_okay=False))
def show_info(input_pdf):
    """
    Display information about a PDF file.

    Example:

        pdfrestruct info input.pdf
    """
    try:
        document = _load(input_pdf)
        with PypdfBackend().decode(document.content) as source:
            outline = source.outline() or []
            table = Table(title=f"PDF Information: {document.filename}")
            table.add_column("Property", style="cyan", no_wrap=True)
            table.add_column("Value", style="green")

            table.add_row("File Path", str(Path(input_pdf).resolve()))
            table.add_row("File Size", format_file_size(len(document.content)))
            table.add_row("Number of Pages", str(source.page_count))
            if source.page_count:
                geometry = source.page_geometry(0)
                table.add_row(
                    "First Page Size", f"{geometry.width:g} x {geometry.height:g} pt"
                )
            table.add_row("Top-level Bookmarks", str(len(outline)))
            table.add_row(
                "All Bookmarks", str(sum(len(node.walk()) for node in outline))
            )
            entries = [(node.title, node.resolve_page_index()) for node in outline]

        console.print()
        console.print(table)
        if entries:
            console.print("\n[bold]Bookmarks:[/bold]")
            for title, page in entries:
                location = f"page {page + 1}" if page is not None else "unresolved"
                console.print(f"  • {escape(title)} [dim]({location})[/dim]")
        console.print()

    except Exception as e:
        _fail(e)


@cli.command(name="merge")
@click.argument('input_pdfs', nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
@click.option(
    '--output-dir', '-o',
    default='./output',
    help='Output directory',
    type=click.Path(file_okay=False)
)
@click.option(
    '--output-name', '-n',
    default=DEFAULT_MERGE_FILENAME,
    help='Filename of the merged PDF',
    type=str
)
@click.option(
    '--bookmarks/--no-bookmarks',
    default=None,
    help='Copy source bookmarks into the merged PDF'
)
@click.option(
    '--page-size',
    type=click.Choice(_POLICY_CHOICES, case_sensitive=False),
    default=None,
    help='Page size standardization policy'
)
def merge(input_pdfs, output_dir, output_name, bookmarks, page_size):
    """
    Merge several PDF files into one, in the given order.

    Examples:

        pdfrestruct merge a.pdf b.pdf

        pdfrestruct merge a.pdf b.pdf --bookmarks --page-size A4 -n book.pdf
    """
    try:
        request = MergeRequest(
            documents=[_load(path) for path in input_pdfs],
            output_filename=output_name,
            preserve_bookmarks=bookmarks,
            page_size_policy=page_size,
        )
        result = _run(
            f"Merging {len(input_pdfs)} files...",
            lambda: RestructuringEngine().merge(request, DirectorySink(output_dir)),
        )

        console.print(
            f"\n[bold green]✓ Merged {result.source_document_count} files "
            f"into {result.total_pages} pages[/bold green]"
        )
        console.print(
            f"[dim]{result.merged_document} ({format_file_size(result.file_size_bytes)})[/dim]"
        )
        console.print()

    except Exception as e:
        _fail(e)


@cli.command(name="split-pages")
@click.argument('input_pdf', type=click.Path(exists=True, dir_okay=False))
@click.option(
    '--pages-per-file', '-s',
    default=1,
    help='Number of pages per output file',
    type=int
)
@click.option(
    '--output-dir', '-o',
    default='./output',
    help='Output directory',
    type=click.Path(file_okay=False)
)
@click.option(
    '--pattern', '-p',
    default=DEFAULT_PAGE_PATTERN,
    help='Output filename pattern ({index} is replaced)',
    type=str
)
def split_pages(input_pdf, pages_per_file, output_dir, pattern):
    """
    Split PDF into files of N consecutive pages.

    Examples:

        pdfrestruct split-pages input.pdf

        pdfrestruct split-pages input.pdf -s 5 -p 'chunk-{index}.pdf'
    """
    try:
        request = SplitByPageRequest(
            document=_load(input_pdf),
            pages_per_file=pages_per_file,
            output_pattern=pattern,
        )
        result = _run(
            "Splitting pages...",
            lambda: RestructuringEngine().split_by_page(request, DirectorySink(output_dir)),
        )
        _report_split(result, output_dir)

    except Exception as e:
        _fail(e)


@cli.command(name="split-ranges")
@click.argument('input_pdf', type=click.Path(exists=True, dir_okay=False))
@click.option(
    '--ranges', '-r',
    required=True,
    help="Page ranges (e.g., '1-5,6-10,11')",
    type=str
)
@click.option(
    '--output-dir', '-o',
    default='./output',
    help='Output directory',
    type=click.Path(file_okay=False)
)
@click.option(
    '--pattern', '-p',
    default=DEFAULT_RANGE_PATTERN,
    help='Output filename pattern ({index}, {start}, {end} are replaced)',
    type=str
)
def split_ranges(input_pdf, ranges, output_dir, pattern):
    """
    Split PDF into specified page ranges.

    Examples:

        pdfrestruct split-ranges input.pdf -r '1-5,6-10'

        pdfrestruct split-ranges input.pdf -r '1-3,7' -p 'pages-{start}-{end}.pdf'
    """
    try:
        request = SplitByRangeRequest(
            document=_load(input_pdf),
            page_ranges=ranges,
            output_pattern=pattern,
        )
        result = _run(
            "Splitting ranges...",
            lambda: RestructuringEngine().split_by_range(request, DirectorySink(output_dir)),
        )
        _report_split(result, output_dir)

    except Exception as e:
        _fail(e)


@cli.command(name="split-bookmarks")
@click.argument('input_pdf', type=click.Path(exists=True, dir_okay=False))
@click.option(
    '--output-dir', '-o',
    default='./output',
    help='Output directory',
    type=click.Path(file_okay=False)
)
@click.option(
    '--pattern', '-p',
    default=DEFAULT_BOOKMARK_PATTERN,
    help='Output filename pattern ({bookmark} and {index} are replaced)',
    type=str
)
def split_bookmarks(input_pdf, output_dir, pattern):
    """
    Split PDF into one file per top-level bookmark.

    Example:

        pdfrestruct split-bookmarks input.pdf -o chapters
    """
    try:
        request = SplitByBookmarkRequest(document=_load(input_pdf), output_pattern=pattern)
        result = _run(
            "Splitting by bookmarks...",
            lambda: RestructuringEngine().split_by_bookmark(request, DirectorySink(output_dir)),
        )
        _report_split(result, output_dir)

    except Exception as e:
        _fail(e)


@cli.command(name="split-size")
@click.argument('input_pdf', type=click.Path(exists=True, dir_okay=False))
@click.option(
    '--max-size', '-m',
    required=True,
    help='Maximum size of each output file in MB (1-100)',
    type=int
)
@click.option(
    '--output-dir', '-o',
    default='./output',
    help='Output directory',
    type=click.Path(file_okay=False)
)
@click.option(
    '--pattern', '-p',
    default=DEFAULT_SIZE_PATTERN,
    help='Output filename pattern ({index} is replaced)',
    type=str
)
def split_size(input_pdf, max_size, output_dir, pattern):
    """
    Split PDF into files no larger than the given size.

    Example:

        pdfrestruct split-size input.pdf --max-size 10
    """
    try:
        request = SplitBySizeRequest(
            document=_load(input_pdf),
            max_file_size_mb=max_size,
            output_pattern=pattern,
        )
        result = _run(
            f"Splitting into parts of at most {max_size} MB...",
            lambda: RestructuringEngine().split_by_size(request, DirectorySink(output_dir)),
        )
        _report_split(result, output_dir)

    except Exception as e:
        _fail(e)


if __name__ == '__main__':
    cli()

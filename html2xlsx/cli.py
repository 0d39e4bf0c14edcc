"""
Converts HTML files into rich-text cells of an Excel workbook.
Each file fills one cell; successive files go to the rows below.
"""

from __future__ import annotations

import logging
from pathlib import Path

import click
from openpyxl import Workbook
from openpyxl.utils.cell import column_index_from_string, coordinate_from_string
from openpyxl.utils.exceptions import CellCoordinatesException

from .config import ConfigError, build_config
from .converter import HtmlToExcelConverter
from .exceptions import ConversionError
from .filesystem import get_max_file_size, read_markup, resolve_input_path, save_workbook

__all__ = ["cli"]

logger = logging.getLogger(__name__)


def parse_cell_reference(reference: str) -> tuple[int, int]:
    """Return ``(row, column)`` for an A1-style reference such as ``B3``.

    Raises:
        ValueError: If `reference` is not a single-cell coordinate.
    """
    try:
        column_letter, row = coordinate_from_string(reference.strip().upper())
    except CellCoordinatesException as error:
        raise ValueError(str(error)) from error
    return row, column_index_from_string(column_letter)


@click.command()
@click.version_option(package_name="html2xlsx-richtext")
@click.argument("files", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
@click.option(
    "-o",
    "--output",
    required=True,
    type=click.Path(dir_okay=False, writable=True),
    help="Workbook to write (.xlsx)",
)
@click.option("--sheet", help="Title of the worksheet")
@click.option(
    "--cell", "start_cell", default="A1", show_default=True, help="Cell of the first file"
)
@click.option("--max-cell-length", type=int, help="Maximum characters per cell")
@click.option("--truncate-suffix", help="Marker appended to truncated text")
@click.option("--no-images", is_flag=True, help="Do not download <img> pictures")
@click.option("--no-font-cache", is_flag=True, help="Build a new font for every run")
@click.option("--no-style-cache", is_flag=True, help="Build a new style for every background")
@click.option("-v", "--verbose", is_flag=True, help="Log conversion details")
def cli(
    files: tuple[str, ...],
    output: str,
    sheet: str | None = None,
    start_cell: str = "A1",
    max_cell_length: int | None = None,
    truncate_suffix: str | None = None,
    no_images: bool = False,
    no_font_cache: bool = False,
    no_style_cache: bool = False,
    verbose: bool = False,
):
    """
    Convert HTML files into rich-text cells of a new workbook.

    Args:
        files: HTML files to convert, written to successive rows.
        output: Path of the workbook to create or replace.
        sheet: Title given to the worksheet.
        start_cell: Cell receiving the first file.
        max_cell_length: Override for the per-cell character limit.
        truncate_suffix: Override for the truncation marker.
        no_images: Disable image downloads.
        no_font_cache: Disable font interning.
        no_style_cache: Disable background style interning.
        verbose: Enable debug logging.

    Raises:
        click.BadParameter: If paths, the start cell, the sheet title, or
            configuration values are invalid.
        click.ClickException: If input limits are exceeded or a file cannot be
            read or written.

    Examples:
        html2xlsx notes.html summary.htm -o report.xlsx --cell B2
    """
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    base_dir = Path.cwd().resolve()
    try:
        filepaths = [resolve_input_path(raw_path, base_dir) for raw_path in files]
    except ValueError as error:
        raise click.BadParameter(str(error), param_hint="FILES") from error

    output_path = Path(output).expanduser().resolve()
    if output_path.suffix.lower() != ".xlsx":
        error_message = f"{output_path} must use the .xlsx extension."
        raise click.BadParameter(error_message, param_hint="--output")

    try:
        row, column = parse_cell_reference(start_cell)
    except ValueError as error:
        error_message = f"Invalid cell reference: {start_cell}"
        raise click.BadParameter(error_message, param_hint="--cell") from error

    try:
        config = build_config(
            filepaths[0].parent,
            max_cell_length=max_cell_length,
            truncate_suffix=truncate_suffix,
            enable_image_download=False if no_images else None,
            enable_font_cache=False if no_font_cache else None,
            enable_style_cache=False if no_style_cache else None,
        )
    except ConfigError as error:
        raise click.BadParameter(str(error)) from error

    try:
        max_file_size = get_max_file_size(default=config.max_file_size)
    except ValueError as error:
        raise click.ClickException(str(error)) from error

    workbook = Workbook()
    worksheet = workbook.active
    if sheet:
        try:
            worksheet.title = sheet
        except ValueError as error:
            raise click.BadParameter(str(error), param_hint="--sheet") from error

    with HtmlToExcelConverter(workbook, config) as converter:
        for offset, filepath in enumerate(filepaths):
            try:
                markup = read_markup(filepath, max_file_size)
            except IOError as error:
                raise click.ClickException(str(error)) from error

            cell = worksheet.cell(row=row + offset, column=column)
            try:
                result = converter.apply_html_to_cell(cell, markup)
            except ConversionError as error:
                raise click.ClickException(str(error)) from error
            logger.debug("Converted %s into %s", filepath, cell.coordinate)
            if result.truncated:
                click.echo(f"Warning: {filepath.name} was truncated in {cell.coordinate}", err=True)

    try:
        save_workbook(workbook, output_path)
    except IOError as error:
        raise click.ClickException(str(error)) from error

    click.echo(f"Wrote {len(filepaths)} cell(s) to {output_path}")


if __name__ == "__main__":
    cli()

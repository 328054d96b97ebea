"""
Prints the styled runs of a Markdown file.
By default only the visible text is printed; `--format json` prints every
line with its line style and inline runs.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

import click
from .config import OUTPUT_FORMATS, ConfigError, build_config
from .document import ParseFileError, parse_file, plain_text, to_dicts
from .filesystem import (
    collect_file_stat,
    enforce_file_size,
    get_max_file_size,
    get_max_line_length,
    normalize_filepath,
)

__all__ = ["cli"]


@click.command()
@click.version_option(package_name="markdown-runs")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(OUTPUT_FORMATS, case_sensitive=False),
    help="Output format (text or json)",
)
@click.option(
    "--include-consumed/--skip-consumed",
    default=None,
    help="Keep lines that only carried block syntax",
)
@click.option(
    "--fenced-code/--no-fenced-code",
    default=None,
    help="Recognise fenced code blocks",
)
@click.option("--verbose", "-v", is_flag=True, help="Log parsing decisions to stderr")
@click.argument("filepath", type=click.Path(exists=True, dir_okay=False))
def cli(
    filepath: str,
    output_format: str | None = None,
    include_consumed: bool | None = None,
    fenced_code: bool | None = None,
    verbose: bool = False,
):
    """
    Entry point for printing the styled runs of a Markdown file.

    Args:
        filepath: Path to the Markdown file to process.
        output_format: Override for the output format.
        include_consumed: Keep setext underlines and code fences in the output.
        fenced_code: Toggle fenced code block recognition.
        verbose: Emit debug logging on stderr.

    Returns:
        None.

    Raises:
        click.BadParameter: If the path is invalid or the configuration holds
            unsupported values.
        click.ClickException: If parsing fails due to limits or unreadable
            content, or if filesystem safety checks fail.

    Examples:
        markdown-runs README.md --format json
    """
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    base_dir = Path.cwd().resolve()
    try:
        filepath = normalize_filepath(filepath, base_dir)
    except ValueError as error:
        raise click.BadParameter(str(error)) from error
    try:
        config = build_config(
            filepath.parent,
            output_format=output_format,
            include_consumed=include_consumed,
            fenced_code=fenced_code,
        )
    except ConfigError as error:
        raise click.BadParameter(str(error)) from error

    try:
        max_file_size = get_max_file_size(default=config.max_file_size)
        max_line_length = get_max_line_length(default=config.max_line_length)
    except ValueError as error:
        raise click.ClickException(str(error)) from error

    try:
        enforce_file_size(collect_file_stat(filepath), max_file_size, filepath)
    except IOError as error:
        raise click.ClickException(str(error)) from error

    try:
        lines = parse_file(filepath, max_line_length, config)
    except ParseFileError as error:
        raise click.ClickException(str(error)) from error

    if config.output_format == "json":
        click.echo(json.dumps(to_dicts(lines), indent=2, ensure_ascii=False))
    else:
        click.echo(plain_text(lines), nl=False)


if __name__ == "__main__":
    cli()

"""Document-level orchestration: classify lines, then tokenize each one."""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum
from pathlib import Path

from .config import ConfigError, RunsConfig, validate_config
from .dialect import MARKDOWN, Dialect
from .exceptions import LineTooLongError, ParseError
from .filesystem import safe_read
from .lines import classify
from .models import StyledLine, StyledRun
from .tokenizer import styled_runs


def _ensure_line_length_override(max_line_length: int | None) -> None:
    if max_line_length is not None and max_line_length <= 0:
        raise ConfigError("`max_line_length` override must be a positive integer")


def _enforce_line_lengths(lines: list[str], max_line_length: int) -> None:
    for line_number, line in enumerate(lines, start=1):
        if len(line.rstrip("\r\n")) > max_line_length:
            raise LineTooLongError(line_number, max_line_length)


def parse_document(
    content: str,
    max_line_length: int | None = None,
    config: RunsConfig | None = None,
    dialect: Dialect = MARKDOWN,
) -> list[StyledLine]:
    """Turn Markdown text into styled lines.

    Lines are classified first; lines whose style is not verbatim are then
    tokenized with the dialect's character rules.

    Args:
        content: The markdown content to parse.
        max_line_length: Optional override for the maximum allowed line length
            (excluding line endings).
        config: Configuration controlling parsing behavior. Defaults to a new
            `RunsConfig` when omitted.
        dialect: Rules and styles to apply.

    Returns:
        list[StyledLine]: One entry per content line, in document order.
            Consumed marker lines are included only when
            `config.include_consumed` is set.

    Raises:
        ConfigError: If the configuration fails validation or the
            `max_line_length` override is not positive.
        LineTooLongError: If a line exceeds the maximum line length.

    Examples:
        parse_document("Title\\n===\\nSome *emphasis*\\n")
    """
    config = config or RunsConfig()
    validate_config(config)
    _ensure_line_length_override(max_line_length)
    effective_max_line_length = (
        config.max_line_length if max_line_length is None else max_line_length
    )

    lines = content.splitlines()
    _enforce_line_lengths(lines, effective_max_line_length)

    classified = classify(
        lines,
        dialect.line_rules,
        dialect.default_style,
        fence_style=dialect.fence_style if config.fenced_code else None,
    )

    styled: list[StyledLine] = []
    for line in classified:
        if line.consumed and not config.include_consumed:
            continue
        if not line.text:
            runs: tuple[StyledRun, ...] = ()
        elif dialect.should_tokenize(line.style):
            runs = tuple(styled_runs(dialect.tokenizer.tokenize(line.text)))
        else:
            runs = (StyledRun(line.text),)
        styled.append(StyledLine(line.style, line.line_number, runs, line.consumed))
    return styled


class ParseFileError(Exception):
    """Raised when parsing a Markdown file fails."""


def parse_file(
    filepath: Path,
    max_line_length: int | None = None,
    config: RunsConfig | None = None,
    dialect: Dialect = MARKDOWN,
) -> list[StyledLine]:
    """Read and parse a Markdown file.

    Args:
        filepath: Path to the markdown file to parse.
        max_line_length: Optional override for the maximum allowed line length.
        config: Configuration controlling parsing behavior.
        dialect: Rules and styles to apply.

    Returns:
        list[StyledLine]: Parsed lines, as returned by `parse_document`.

    Raises:
        ParseFileError: If configuration is invalid, a limit is exceeded, or
            the file cannot be read or decoded.

    Examples:
        lines = parse_file(Path("README.md"), 120, config)
    """
    config = config or RunsConfig()
    try:
        validate_config(config)
        _ensure_line_length_override(max_line_length)
    except ConfigError as error:
        raise ParseFileError(str(error)) from error

    try:
        with safe_read(filepath) as file:
            content = file.read()
    except UnicodeDecodeError as error:
        raise ParseFileError(f"Invalid UTF-8 sequence in {filepath}: {error}") from error
    except IOError as error:
        raise ParseFileError(str(error)) from error

    try:
        return parse_document(content, max_line_length, config, dialect)
    except LineTooLongError as error:
        error_message = (
            f"{filepath} contains a line at line {error.line_number} "
            f"exceeding the maximum allowed length of {error.max_line_length} characters."
        )
        raise ParseFileError(error_message) from error
    except ParseError as error:
        raise ParseFileError(f"{filepath}: {error}") from error


def plain_text(lines: Iterable[StyledLine]) -> str:
    """Join the visible text of styled lines, one per output line."""
    return "".join(f"{line.text}\n" for line in lines)


def _style_name(style: object) -> object:
    if isinstance(style, Enum):
        return style.name.lower()
    return style


def to_dicts(lines: Iterable[StyledLine]) -> list[dict[str, object]]:
    """Convert styled lines into JSON-ready dictionaries.

    Enum styles are reported by lower-cased member name; other styles are
    passed through as they are.
    """
    return [
        {
            "line": line.line_number + 1,
            "style": _style_name(line.style),
            "consumed": line.consumed,
            "text": line.text,
            "runs": [
                {
                    "text": run.text,
                    "styles": [_style_name(style) for style in run.styles],
                    "metadata": run.metadata,
                }
                for run in line.runs
            ],
        }
        for line in lines
    ]

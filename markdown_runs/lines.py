"""Line classification: block-level styles for each input line."""

from __future__ import annotations

import logging
from collections.abc import Hashable, Iterable
from dataclasses import replace

from .constants import CLOSING_FENCE_MAX_INDENT, CODE_FENCE_PATTERN
from .exceptions import RuleError
from .models import ChangeApplication, ClassifiedLine, ParserContext, ParserState, RemovalZone
from .rules import LineRule

logger = logging.getLogger(__name__)

_WHITESPACE = " \t"


def _leading_whitespace_columns(line: str) -> int:
    """Compute the column width of leading whitespace.

    Tabs advance to the next multiple of four columns to match Markdown
    indentation rules.

    Examples:
        _leading_whitespace_columns("    text")  # 4
        _leading_whitespace_columns("\\ttext")  # 4
    """
    columns = 0
    for character in line:
        if character == " ":
            columns += 1
        elif character == "\t":
            columns += 4 - (columns % 4)
        else:
            break
    return columns


def _try_open_fence(ctx: ParserContext, line: str) -> bool:
    """Detect the start of a fenced code block and record it in `ctx`."""
    if ctx.state is not ParserState.NORMAL:
        return False

    fence_match = CODE_FENCE_PATTERN.match(line)
    if not fence_match:
        return False

    indent_columns = _leading_whitespace_columns(fence_match.group("indent") or "")
    if indent_columns > CLOSING_FENCE_MAX_INDENT:
        return False

    fence_sequence = fence_match.group("fence")
    if fence_sequence[0] == "`" and "`" in fence_match.group("info"):
        # Backtick fences cannot carry backticks in their info string.
        return False

    ctx.state = ParserState.IN_FENCED_CODE
    ctx.fence_char = fence_sequence[0]
    ctx.fence_length = len(fence_sequence)
    ctx.fence_indent_columns = indent_columns
    return True


def _try_close_fence(ctx: ParserContext, line: str) -> bool:
    """Close the active fenced code block when `line` is a matching fence.

    Examples:
        ctx = ParserContext(state=ParserState.IN_FENCED_CODE, fence_char="`", fence_length=3)
        _try_close_fence(ctx, "```")  # True
    """
    if ctx.state is not ParserState.IN_FENCED_CODE or ctx.fence_char is None:
        return False

    stripped_line = line.lstrip(_WHITESPACE)
    if not stripped_line or stripped_line[0] != ctx.fence_char:
        return False

    fence_run_length = len(stripped_line) - len(stripped_line.lstrip(ctx.fence_char))
    if fence_run_length < ctx.fence_length:
        return False
    if stripped_line[fence_run_length:].strip():
        return False
    if _leading_whitespace_columns(line) > CLOSING_FENCE_MAX_INDENT:
        return False

    ctx.state = ParserState.NORMAL
    ctx.fence_char = None
    ctx.fence_length = 0
    ctx.fence_indent_columns = 0
    return True


def _match(rule: LineRule, text: str) -> str | None:
    """Return the text left once `rule` matched, or None when it does not."""
    token = rule.token
    zone = rule.removal_zone

    if zone is RemovalZone.ENTIRE_LINE:
        # Non-overlapping removal leaves nothing only if the line tiles the token.
        return "" if text and not text.replace(token, "") else None

    if zone is RemovalZone.TRAILING:
        closing = token.strip(_WHITESPACE) or token
        return text[: -len(closing)] if text.endswith(closing) else None

    if not text.startswith(token):
        return None
    if zone is RemovalZone.NONE:
        return text
    remainder = text[len(token) :]
    if zone is RemovalZone.BOTH:
        closing = token.strip(_WHITESPACE)
        trimmed = remainder.rstrip(_WHITESPACE)
        if closing and trimmed.endswith(closing):
            remainder = trimmed[: -len(closing)]
    return remainder


def _classify_line(
    line: str,
    line_number: int,
    rules: tuple[LineRule, ...],
    default_style: Hashable,
    classified: list[ClassifiedLine],
) -> ClassifiedLine:
    if not line.strip():
        return ClassifiedLine("", default_style, line_number)

    for rule in rules:
        candidate = line.strip(_WHITESPACE) if rule.should_trim else line
        remainder = _match(rule, candidate)
        if remainder is None:
            continue

        if rule.applies_to is ChangeApplication.PREVIOUS:
            if not classified:
                # Nothing to restyle on the first line.
                continue
            classified[-1] = replace(classified[-1], style=rule.style)
            logger.debug(
                "Line %d restyles line %d as %r",
                line_number,
                classified[-1].line_number,
                rule.style,
            )
            return ClassifiedLine("", default_style, line_number, consumed=True)

        if rule.should_trim:
            remainder = remainder.strip(_WHITESPACE)
        return ClassifiedLine(remainder, rule.style, line_number)

    return ClassifiedLine(line.strip(_WHITESPACE), default_style, line_number)


def validate_line_rules(rules: Iterable[LineRule]) -> tuple[LineRule, ...]:
    """Check a line rule list before it is used for classifying.

    Raises:
        RuleError: If an entry is not a `LineRule`.
    """
    rules = tuple(rules)
    for position, rule in enumerate(rules):
        if not isinstance(rule, LineRule):
            raise RuleError(f"Line rule {position} must be a LineRule, got {type(rule).__name__}")
    return rules


def classify(
    lines: Iterable[str],
    rules: Iterable[LineRule],
    default_style: Hashable,
    *,
    fence_style: Hashable | None = None,
) -> list[ClassifiedLine]:
    """Assign a line style to every input line.

    Rules are tried in order and the first match wins. A rule applying to
    the previous line restyles the line just before it (setext headings) and
    leaves the current line empty and consumed. Blank lines and unmatched
    lines get `default_style`. There are no error conditions.

    Args:
        lines: Document lines, with or without line endings.
        rules: Line rules in priority order.
        default_style: Style for lines no rule matches.
        fence_style: When set, lines inside fenced code blocks get this style
            verbatim and the fences themselves are consumed.

    Returns:
        list[ClassifiedLine]: One classified line per input line.

    Raises:
        RuleError: If `rules` contains anything but `LineRule`.

    Examples:
        classify(["Title", "==="], LINE_RULES, LineStyle.BODY)
    """
    rules = validate_line_rules(rules)
    classified: list[ClassifiedLine] = []
    ctx = ParserContext()

    for line_number, raw_line in enumerate(lines):
        line = raw_line.rstrip("\r\n")

        if fence_style is not None:
            if ctx.state is ParserState.IN_FENCED_CODE:
                indent = ctx.fence_indent_columns
                if _try_close_fence(ctx, line):
                    classified.append(ClassifiedLine("", fence_style, line_number, consumed=True))
                else:
                    content = line[min(indent, len(line) - len(line.lstrip(" "))) :]
                    classified.append(ClassifiedLine(content, fence_style, line_number))
                continue
            if _try_open_fence(ctx, line):
                classified.append(ClassifiedLine("", fence_style, line_number, consumed=True))
                continue

        classified.append(_classify_line(line, line_number, rules, default_style, classified))

    return classified

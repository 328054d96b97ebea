"""Data models for markdown-runs."""

from __future__ import annotations

from collections.abc import Hashable
from dataclasses import dataclass
from enum import Enum, auto


class RemovalZone(Enum):
    """Where a line rule's token is matched and stripped.

    Attributes:
        LEADING: Prefix match; the prefix is removed.
        TRAILING: Suffix match; the suffix is removed.
        BOTH: Prefix match; a trailing copy of the token is removed too.
        ENTIRE_LINE: The whole line repeats the token; the text is emptied.
        NONE: Prefix match; the text is left untouched.
    """

    LEADING = auto()
    TRAILING = auto()
    BOTH = auto()
    ENTIRE_LINE = auto()
    NONE = auto()


class ChangeApplication(Enum):
    """Which line receives the style of a matched line rule."""

    CURRENT = auto()
    PREVIOUS = auto()


class SpacingConstraint(Enum):
    """Whitespace allowed around a delimiter run.

    Attributes:
        NONE: No constraint.
        BOTH_SIDES_FORBIDDEN: Neither neighbour may be whitespace.
        ONE_SIDE_FORBIDDEN: The run may not be isolated by whitespace.
        LEADING_FORBIDDEN: The character after the run may not be whitespace.
        TRAILING_FORBIDDEN: The character before the run may not be whitespace.
    """

    NONE = auto()
    BOTH_SIDES_FORBIDDEN = auto()
    ONE_SIDE_FORBIDDEN = auto()
    LEADING_FORBIDDEN = auto()
    TRAILING_FORBIDDEN = auto()


class Cancel(Enum):
    """How a resolved span shields its content from other tags.

    Attributes:
        NONE: Content is rescanned by every later rule.
        ALL_REMAINING: Content is not interpreted by any further tag.
        CURRENT_RULE_SET: Content ignores further tags of the same rule only.
    """

    NONE = auto()
    ALL_REMAINING = auto()
    CURRENT_RULE_SET = auto()


class TokenType(Enum):
    STRING = auto()
    OPEN_TAG = auto()
    INTERMEDIATE_TAG = auto()
    CLOSE_TAG = auto()
    REPEATING_TAG = auto()
    METADATA = auto()
    PROCESSED = auto()
    ESCAPE = auto()


class ParserState(Enum):
    """Parser states used while classifying lines.

    Attributes:
        NORMAL: Default state for regular text.
        IN_FENCED_CODE: Inside a fenced code block.
    """

    NORMAL = auto()
    IN_FENCED_CODE = auto()


@dataclass
class ParserContext:
    """Encapsulate fence state while walking Markdown lines.

    Attributes:
        state: Current parser state.
        fence_char: Fence character that opened a fenced code block, if any.
        fence_length: Number of fence characters that opened the block.
        fence_indent_columns: Indentation width preceding the opening fence.
    """

    state: ParserState = ParserState.NORMAL
    fence_char: str | None = None
    fence_length: int = 0
    fence_indent_columns: int = 0


@dataclass(frozen=True)
class ClassifiedLine:
    """A single input line after line classification.

    Attributes:
        text: Line text with the matched rule token stripped.
        style: Caller-defined line style.
        line_number: Zero-based index of the line in the input.
        consumed: True when the line only carried block syntax (for example
            a setext underline or a code fence) and has no content of its own.
    """

    text: str
    style: Hashable
    line_number: int
    consumed: bool = False


@dataclass(frozen=True)
class Token:
    """A piece of inline text produced by the tokenizer.

    Attributes:
        type: Kind of token.
        raw_text: Text exactly as it was scanned (escape characters removed).
        metadata_text: Destination attached by a bracketed rule, if any.
        styles: Caller-defined styles, in the order they were applied.
        repeat_count: Remaining tag count of a repeating delimiter run.
        skip: True when later rules must not rescan the token.
    """

    type: TokenType
    raw_text: str
    metadata_text: str | None = None
    styles: tuple[Hashable, ...] = ()
    repeat_count: int = 0
    skip: bool = False

    @property
    def rendered_text(self) -> str:
        """Text contributed to the final output."""
        if self.type is TokenType.REPEATING_TAG:
            return self.raw_text if self.repeat_count > 0 else ""
        if self.type in (TokenType.METADATA, TokenType.PROCESSED):
            return ""
        return self.raw_text


@dataclass(frozen=True)
class StyledRun:
    """Rendered text sharing one set of styles and metadata."""

    text: str
    styles: tuple[Hashable, ...] = ()
    metadata: str | None = None


@dataclass(frozen=True)
class StyledLine:
    """A classified line with its inline runs resolved.

    Attributes:
        style: Line style assigned by the classifier.
        line_number: Zero-based index of the line in the source document.
        runs: Styled runs making up the line's visible text.
        consumed: True for lines kept only as block markers.
    """

    style: Hashable
    line_number: int
    runs: tuple[StyledRun, ...] = ()
    consumed: bool = False

    @property
    def text(self) -> str:
        return "".join(run.text for run in self.runs)

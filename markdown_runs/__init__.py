"""
markdown-runs: Turn Markdown text into styled lines and inline runs.

This package can be used both as a CLI tool and as a library.

CLI Usage:
    markdown-runs README.md --format json

Library Usage:
    from markdown_runs import MARKDOWN, parse_document, render_text

    lines = parse_document("Title\\n=====\\nSome *emphasis* here\\n")
    lines[0].style  # LineStyle.H1
    tokens = MARKDOWN.tokenizer.tokenize("a [link](https://example.com)")
    render_text(tokens)  # "a link"
"""

from .cursor import CharacterCursor, split_graphemes
from .dialect import CHARACTER_RULES, LINE_RULES, MARKDOWN, CharacterStyle, Dialect, LineStyle
from .document import ParseFileError, parse_document, parse_file, plain_text, to_dicts
from .exceptions import EmptyTagError, LineTooLongError, ParseError, RuleError, StyleTableError
from .lines import classify
from .models import (
    Cancel,
    ChangeApplication,
    ClassifiedLine,
    RemovalZone,
    SpacingConstraint,
    StyledLine,
    StyledRun,
    Token,
    TokenType,
)
from .rules import CharacterRule, LineRule
from .tokenizer import (
    Tokenizer,
    apply_styles,
    render_text,
    scan,
    styled_runs,
    tokenize,
    validate_spacing,
)

__version__ = "0.1.0"

__all__ = [
    # Core functionality
    "classify",
    "tokenize",
    "Tokenizer",
    "scan",
    "apply_styles",
    "validate_spacing",
    "parse_document",
    "parse_file",
    # Rules
    "LineRule",
    "CharacterRule",
    "RemovalZone",
    "ChangeApplication",
    "SpacingConstraint",
    "Cancel",
    # Data models
    "ClassifiedLine",
    "Token",
    "TokenType",
    "StyledRun",
    "StyledLine",
    # Markdown dialect
    "Dialect",
    "MARKDOWN",
    "LINE_RULES",
    "CHARACTER_RULES",
    "LineStyle",
    "CharacterStyle",
    # Utilities
    "CharacterCursor",
    "split_graphemes",
    "styled_runs",
    "render_text",
    "plain_text",
    "to_dicts",
    # Exceptions
    "RuleError",
    "EmptyTagError",
    "StyleTableError",
    "ParseError",
    "LineTooLongError",
    "ParseFileError",
    # Version
    "__version__",
]

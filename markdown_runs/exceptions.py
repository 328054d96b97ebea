"""Package-specific exception types."""

from __future__ import annotations


class RuleError(ValueError):
    """Base class for invalid rule configuration.

    Raised while rules or rule sets are being built, never while scanning
    text. Malformed markdown degrades to literal text instead of raising.
    """


class EmptyTagError(RuleError):
    """Raised when a rule is built with an empty tag or token.

    Args:
        rule_kind: Name of the rule class being built.
        field_name: Name of the empty field.
    """

    def __init__(self, rule_kind: str, field_name: str):
        self.rule_kind = rule_kind
        self.field_name = field_name
        super().__init__(f"{rule_kind} `{field_name}` must not be empty")


class StyleTableError(RuleError):
    """Raised when a style table or its repeat bounds are inconsistent."""


class ParseError(ValueError):
    """Base class for parsing-related errors.

    Represents limits imposed by the caller on markdown input.
    """


class LineTooLongError(ParseError):
    """Raised when a line exceeds the configured maximum length.

    Args:
        line_number: One-based index of the offending line.
        max_line_length: Maximum allowed line length in characters.
    """

    def __init__(self, line_number: int, max_line_length: int):
        self.line_number = line_number
        self.max_line_length = max_line_length
        super().__init__(self._build_message())

    def _build_message(self) -> str:
        return (
            f"Line {self.line_number} exceeds maximum allowed length "
            f"of {self.max_line_length} characters"
        )

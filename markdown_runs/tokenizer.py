"""Inline tokenizer: character rule scanning and style resolution.

Each character rule runs as one pipeline stage. A stage rescans the plain
string tokens left by the previous stage and then resolves the rule's tags
across the whole token sequence. Tokens that earlier rules already typed are
passed through, so earlier rules take priority over later ones.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import replace

from .cursor import CharacterCursor, split_graphemes
from .exceptions import RuleError
from .models import Cancel, SpacingConstraint, StyledRun, Token, TokenType
from .rules import CharacterRule

logger = logging.getLogger(__name__)


class _TokenBuffer:
    """Collect tokens, folding consecutive literal text into one string token."""

    __slots__ = ("tokens", "_pending")

    def __init__(self) -> None:
        self.tokens: list[Token] = []
        self._pending: list[str] = []

    def literal(self, text: str) -> None:
        if text:
            self._pending.append(text)

    def emit(self, token: Token) -> None:
        self.flush()
        self.tokens.append(token)

    def flush(self) -> None:
        if self._pending:
            self.tokens.append(Token(TokenType.STRING, "".join(self._pending)))
            self._pending.clear()

    def finish(self) -> list[Token]:
        self.flush()
        return self.tokens


def _width(tag: str) -> int:
    return len(split_graphemes(tag))


def validate_spacing(
    previous: str | None, following: str | None, constraint: SpacingConstraint
) -> bool:
    """Check the characters around a delimiter run against a constraint.

    Args:
        previous: Character before the run, or None at the start of the text.
        following: Character after the run, or None at the end of the text.
        constraint: Spacing constraint of the rule being scanned.

    Returns:
        bool: True when the run may become a tag.

    Examples:
        validate_spacing("a", "b", SpacingConstraint.ONE_SIDE_FORBIDDEN)  # True
        validate_spacing(" ", " ", SpacingConstraint.ONE_SIDE_FORBIDDEN)  # False
    """
    space_before = previous is not None and previous.isspace()
    space_after = following is not None and following.isspace()

    if constraint is SpacingConstraint.BOTH_SIDES_FORBIDDEN:
        if previous is None and following is None:
            return False
        return not (space_before or space_after)
    if constraint is SpacingConstraint.ONE_SIDE_FORBIDDEN:
        open_before = previous is None or space_before
        open_after = following is None or space_after
        return not ((open_before and space_after) or (space_before and open_after))
    if constraint is SpacingConstraint.LEADING_FORBIDDEN:
        return not space_after
    if constraint is SpacingConstraint.TRAILING_FORBIDDEN:
        return not space_before
    return True


def _escapes_tag(cursor: CharacterCursor, rule: CharacterRule) -> bool:
    return (
        rule.escape_character is not None
        and cursor.current == rule.escape_character
        and cursor.peek_next() in rule.tag_characters
    )


def _emit_escape(cursor: CharacterCursor, buffer: _TokenBuffer) -> None:
    cursor.advance()
    buffer.emit(Token(TokenType.ESCAPE, cursor.advance()))


def scan(text: str, rule: CharacterRule) -> list[Token]:
    """Split text into tokens for a single character rule.

    Never fails on malformed input: rejected delimiter runs are kept as literal
    text. Bracketed tags are emitted one by one and only paired later by
    `apply_styles`, so a span may cross tokens left by earlier rules.

    Args:
        text: Text to scan.
        rule: Rule whose tags and escape character are recognised.

    Returns:
        list[Token]: String, escape and tag tokens in text order. Empty text
            yields an empty list.

    Examples:
        scan("*word*", emphasis_rule)  # [REPEATING_TAG, STRING, REPEATING_TAG]
    """
    cursor = CharacterCursor(text)
    buffer = _TokenBuffer()
    if rule.is_repeating:
        _scan_repeating(cursor, rule, buffer)
    else:
        _scan_bracketed(cursor, rule, buffer)
    return buffer.finish()


def _scan_repeating(cursor: CharacterCursor, rule: CharacterRule, buffer: _TokenBuffer) -> None:
    width = _width(rule.open_tag)
    while not cursor.at_end():
        if _escapes_tag(cursor, rule):
            _emit_escape(cursor, buffer)
            continue
        if not cursor.startswith(rule.open_tag):
            buffer.literal(cursor.advance())
            continue

        previous = cursor.peek_previous()
        count = cursor.count_repeats(rule.open_tag)
        run = cursor.advance(count * width)
        following = cursor.current

        # Runs outside the repeat bounds are rejected whole.
        if rule.min_tag_repeat <= count <= rule.max_tag_repeat and validate_spacing(
            previous, following, rule.spacing
        ):
            logger.debug("Found repeating tag %r with tag count %d", run, count)
            buffer.emit(Token(TokenType.REPEATING_TAG, run, repeat_count=count))
        else:
            logger.debug("Keeping delimiter run %r as literal text", run)
            buffer.literal(run)


def _marker_at(cursor: CharacterCursor, rule: CharacterRule) -> tuple[TokenType, str] | None:
    if rule.intermediate_tag is not None and cursor.startswith(rule.intermediate_tag):
        return TokenType.INTERMEDIATE_TAG, rule.intermediate_tag
    if cursor.startswith(rule.closing_tag):
        return TokenType.CLOSE_TAG, rule.closing_tag
    return None


def _scan_bracketed(cursor: CharacterCursor, rule: CharacterRule, buffer: _TokenBuffer) -> None:
    open_width = _width(rule.open_tag)
    while not cursor.at_end():
        if _escapes_tag(cursor, rule):
            _emit_escape(cursor, buffer)
            continue
        if cursor.startswith(rule.open_tag) and validate_spacing(
            cursor.peek_previous(), cursor.peek(open_width), rule.spacing
        ):
            buffer.emit(Token(TokenType.OPEN_TAG, cursor.advance(open_width)))
            continue

        marker = _marker_at(cursor, rule)
        if marker is None:
            buffer.literal(cursor.advance())
            continue
        token_type, tag = marker
        buffer.emit(Token(token_type, cursor.advance(_width(tag))))


def apply_styles(tokens: Sequence[Token], rule: CharacterRule) -> list[Token]:
    """Resolve a rule's tags across a token sequence.

    The input is left untouched; resolved tokens are returned in a new list.

    Args:
        tokens: Tokens produced by scanning with `rule`, possibly interleaved
            with tokens from earlier rules.
        rule: Rule whose tags are paired.

    Returns:
        list[Token]: Tokens with styles applied and consumed tags marked
            `PROCESSED`. Unpaired repeating runs stay as they are and render
            literally; unpaired bracketed tags turn back into string text.
    """
    resolved = list(tokens)
    if rule.is_repeating:
        _resolve_repeating(resolved, rule)
        return resolved
    _resolve_bracketed(resolved, rule)
    return _merge_strings(resolved)


def _is_rule_run(token: Token, rule: CharacterRule) -> bool:
    return (
        token.type is TokenType.REPEATING_TAG
        and token.repeat_count > 0
        and token.raw_text == rule.open_tag * token.repeat_count
    )


def _resolve_repeating(tokens: list[Token], rule: CharacterRule) -> None:
    settled: set[int] = set()
    for index in range(len(tokens)):
        opening = tokens[index]
        if index in settled or not _is_rule_run(opening, rule):
            continue

        # Earliest closing run wins, not the longest span.
        closing = next(
            (
                candidate
                for candidate in range(index + 1, len(tokens))
                if candidate not in settled
                and _is_rule_run(tokens[candidate], rule)
                and tokens[candidate].raw_text == opening.raw_text
            ),
            None,
        )
        if closing is None:
            logger.debug("No closing run for %r; keeping it literal", opening.raw_text)
            continue

        styles = rule.styles_for(opening.repeat_count)
        logger.debug(
            "Pairing %r at tokens %d..%d with styles %r", opening.raw_text, index, closing, styles
        )
        for inner in range(index + 1, closing):
            token = tokens[inner]
            if rule.cancels is not Cancel.NONE and _is_rule_run(token, rule):
                settled.add(inner)
            tokens[inner] = replace(
                token,
                styles=token.styles + styles,
                skip=token.skip or rule.cancels is Cancel.ALL_REMAINING,
            )
        for marker in (index, closing):
            tokens[marker] = replace(tokens[marker], type=TokenType.PROCESSED, repeat_count=0)
            settled.add(marker)


_MARKER_TYPES = (TokenType.OPEN_TAG, TokenType.INTERMEDIATE_TAG, TokenType.CLOSE_TAG)
_METADATA_SOURCES = (
    TokenType.STRING,
    TokenType.ESCAPE,
    TokenType.OPEN_TAG,
    TokenType.INTERMEDIATE_TAG,
)


def _find_marker(
    tokens: list[Token],
    start: int,
    token_types: frozenset[TokenType],
    tag: str,
    blocked_by: str | None = None,
) -> int | None:
    for index in range(start, len(tokens)):
        token = tokens[index]
        if token.type in token_types and token.raw_text == tag:
            return index
        if (
            blocked_by is not None
            and token.type is TokenType.OPEN_TAG
            and token.raw_text == blocked_by
        ):
            return None
    return None


def _resolve_bracketed(tokens: list[Token], rule: CharacterRule) -> None:
    closers = frozenset({TokenType.CLOSE_TAG})
    if rule.closing_tag == rule.open_tag:
        closers = closers | {TokenType.OPEN_TAG}
    if rule.intermediate_tag is None:
        boundary_types, boundary_tag = closers, rule.closing_tag
    else:
        boundary_types = frozenset({TokenType.INTERMEDIATE_TAG})
        boundary_tag = rule.intermediate_tag

    for index in range(len(tokens)):
        opening = tokens[index]
        if opening.type is not TokenType.OPEN_TAG or opening.raw_text != rule.open_tag:
            continue

        # A later opener before the boundary takes over; this one stays literal.
        middle = _find_marker(tokens, index + 1, boundary_types, boundary_tag, rule.open_tag)
        closing = middle
        metadata = None
        if middle is not None and rule.intermediate_tag is not None:
            closing = _find_marker(tokens, middle + 1, closers, rule.closing_tag)
        if middle is None or closing is None:
            logger.debug("Open tag %r at token %d has no matching close", rule.open_tag, index)
            continue

        if rule.intermediate_tag is not None:
            parts = []
            for inner in range(middle + 1, closing):
                token = tokens[inner]
                if token.type in _METADATA_SOURCES:
                    parts.append(token.rendered_text)
                    tokens[inner] = replace(token, type=TokenType.METADATA)
            metadata = "".join(parts)

        styles = rule.styles_for(1)
        logger.debug("Resolved %r span with metadata %r", rule.open_tag, metadata)
        for inner in range(index + 1, middle):
            token = tokens[inner]
            tokens[inner] = replace(
                token,
                styles=token.styles + styles,
                metadata_text=token.metadata_text if metadata is None else metadata,
                skip=token.skip or rule.cancels is Cancel.ALL_REMAINING,
            )
        for marker in {index, middle, closing}:
            tokens[marker] = replace(tokens[marker], type=TokenType.PROCESSED)

    tags = {rule.open_tag, rule.intermediate_tag, rule.closing_tag}
    for index, token in enumerate(tokens):
        if token.type in _MARKER_TYPES and token.raw_text in tags:
            tokens[index] = replace(token, type=TokenType.STRING)


def _merge_strings(tokens: list[Token]) -> list[Token]:
    """Fold neighbouring string tokens that carry identical attributes."""
    merged: list[Token] = []
    for token in tokens:
        previous = merged[-1] if merged else None
        if (
            previous is not None
            and token.type is TokenType.STRING
            and previous.type is TokenType.STRING
            and previous.styles == token.styles
            and previous.metadata_text == token.metadata_text
            and previous.skip == token.skip
        ):
            merged[-1] = replace(previous, raw_text=previous.raw_text + token.raw_text)
        else:
            merged.append(token)
    return merged


def validate_character_rules(rules: Iterable[CharacterRule]) -> tuple[CharacterRule, ...]:
    """Check a rule list before it is used for tokenizing.

    Raises:
        RuleError: If an entry is not a `CharacterRule`.
    """
    rules = tuple(rules)
    for position, rule in enumerate(rules):
        if not isinstance(rule, CharacterRule):
            raise RuleError(
                f"Character rule {position} must be a CharacterRule, got {type(rule).__name__}"
            )
    return rules


def _inherit(tokens: list[Token], parent: Token) -> list[Token]:
    if not parent.styles and parent.metadata_text is None:
        return tokens
    return [
        replace(
            token,
            styles=parent.styles + token.styles,
            metadata_text=parent.metadata_text,
        )
        for token in tokens
    ]


class Tokenizer:
    """Apply an ordered list of character rules to text.

    The rule list is validated once here and shared read-only by every call,
    so one instance may serve many threads.

    Args:
        rules: Character rules in priority order.

    Raises:
        RuleError: If the rule list contains anything but `CharacterRule`.

    Examples:
        tokenizer = Tokenizer(CHARACTER_RULES)
        tokens = tokenizer.tokenize("Some **bold** text")
    """

    __slots__ = ("rules",)

    def __init__(self, rules: Iterable[CharacterRule]) -> None:
        self.rules = validate_character_rules(rules)

    def tokenize(self, text: str) -> list[Token]:
        tokens = [Token(TokenType.STRING, text)]
        for rule in self.rules:
            staged: list[Token] = []
            for token in tokens:
                if token.type is TokenType.STRING and not token.skip:
                    staged.extend(_inherit(scan(token.raw_text, rule), token))
                else:
                    staged.append(token)
            tokens = apply_styles(staged, rule)
        return tokens


def tokenize(text: str, rules: Iterable[CharacterRule]) -> list[Token]:
    """Tokenize text with a one-off rule list.

    Returns:
        list[Token]: Resolved tokens. With no rules, a single string token
            holding `text` unchanged.
    """
    return Tokenizer(rules).tokenize(text)


def styled_runs(tokens: Iterable[Token]) -> list[StyledRun]:
    """Collapse tokens into visible runs.

    Tokens that render nothing are dropped; neighbours with the same styles
    and metadata are merged.
    """
    runs: list[StyledRun] = []
    for token in tokens:
        text = token.rendered_text
        if not text:
            continue
        if runs and runs[-1].styles == token.styles and runs[-1].metadata == token.metadata_text:
            runs[-1] = replace(runs[-1], text=runs[-1].text + text)
        else:
            runs.append(StyledRun(text, token.styles, token.metadata_text))
    return runs


def render_text(tokens: Iterable[Token]) -> str:
    """Return the visible text of a token sequence."""
    return "".join(token.rendered_text for token in tokens)

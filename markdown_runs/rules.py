"""Line and character rule definitions.

Rules are immutable configuration. They validate themselves when they are
built, so a rule that exists is always safe to scan with.
"""

from __future__ import annotations

from collections.abc import Hashable, Mapping
from dataclasses import dataclass, field
from functools import cached_property

from .cursor import split_graphemes
from .exceptions import EmptyTagError, RuleError, StyleTableError
from .models import Cancel, ChangeApplication, RemovalZone, SpacingConstraint


@dataclass(frozen=True)
class LineRule:
    """Match a block-level token on a single line.

    Attributes:
        token: Text to look for; must not be empty.
        style: Caller-defined style assigned when the rule matches.
        removal_zone: Where the token is matched and what gets stripped.
        applies_to: Whether the style lands on this line or the one before.
        should_trim: Trim surrounding whitespace before and after matching.

    Examples:
        LineRule("# ", LineStyle.H1, removal_zone=RemovalZone.BOTH)
        LineRule("=", LineStyle.H1, RemovalZone.ENTIRE_LINE, ChangeApplication.PREVIOUS)
    """

    token: str
    style: Hashable
    removal_zone: RemovalZone = RemovalZone.LEADING
    applies_to: ChangeApplication = ChangeApplication.CURRENT
    should_trim: bool = True

    def __post_init__(self) -> None:
        if not self.token:
            raise EmptyTagError("LineRule", "token")
        if not isinstance(self.removal_zone, RemovalZone):
            raise RuleError(f"Unsupported removal zone: {self.removal_zone!r}")
        if not isinstance(self.applies_to, ChangeApplication):
            raise RuleError(f"Unsupported change application: {self.applies_to!r}")


@dataclass(frozen=True, eq=False)
class CharacterRule:
    """Describe one inline delimiter.

    Without a closing tag the rule is a repeating delimiter (``*``, ``_``):
    the number of consecutive open tags selects the style set and runs pair
    by identical count. With a closing tag the rule is bracketed (links,
    images): open, optional intermediate, then close.

    Attributes:
        open_tag: Tag starting the span; must not be empty.
        intermediate_tag: Tag separating content from metadata, if any.
        closing_tag: Tag ending a bracketed span.
        escape_character: Single character that makes the next tag literal.
        styles: Styles applied per tag count (bracketed rules use key 1).
        max_tag_repeat: Longest run of open tags turned into a tag.
        min_tag_repeat: Shortest run of open tags turned into a tag.
        spacing: Whitespace allowed around delimiter runs.
        cancels: How a resolved span shields its content.

    Raises:
        EmptyTagError: If a tag is empty.
        StyleTableError: If repeat bounds or style keys are inconsistent.
        RuleError: If the tags or escape character cannot work together.
    """

    open_tag: str
    intermediate_tag: str | None = None
    closing_tag: str | None = None
    escape_character: str | None = None
    styles: Mapping[int, tuple[Hashable, ...]] = field(default_factory=dict)
    max_tag_repeat: int = 1
    min_tag_repeat: int = 1
    spacing: SpacingConstraint = SpacingConstraint.ONE_SIDE_FORBIDDEN
    cancels: Cancel = Cancel.NONE

    def __post_init__(self) -> None:
        if not self.open_tag:
            raise EmptyTagError("CharacterRule", "open_tag")
        if self.intermediate_tag == "":
            raise EmptyTagError("CharacterRule", "intermediate_tag")
        if self.closing_tag == "":
            raise EmptyTagError("CharacterRule", "closing_tag")
        if self.intermediate_tag is not None and self.closing_tag is None:
            raise RuleError("`intermediate_tag` requires a `closing_tag`")

        if self.escape_character is not None:
            if len(split_graphemes(self.escape_character)) != 1:
                raise RuleError("`escape_character` must be a single character")
            if self.escape_character in self.tag_characters:
                raise RuleError("`escape_character` must not be part of a tag")

        _ensure_repeat_bounds(self.min_tag_repeat, self.max_tag_repeat)
        if self.closing_tag is not None and self.max_tag_repeat != 1:
            raise StyleTableError("bracketed rules only support `max_tag_repeat = 1`")

        table = {}
        for count, styles in dict(self.styles).items():
            if isinstance(count, bool) or not isinstance(count, int):
                raise StyleTableError(f"style table key {count!r} must be an integer")
            if not self.min_tag_repeat <= count <= self.max_tag_repeat:
                raise StyleTableError(
                    f"style table key {count} is outside "
                    f"{self.min_tag_repeat}..{self.max_tag_repeat}"
                )
            table[count] = tuple(styles)
        object.__setattr__(self, "styles", table)

    @property
    def is_repeating(self) -> bool:
        return self.closing_tag is None

    @cached_property
    def tag_characters(self) -> frozenset[str]:
        """Characters that can be part of one of the rule's tags."""
        tags = (self.open_tag, self.intermediate_tag or "", self.closing_tag or "")
        return frozenset(character for tag in tags for character in split_graphemes(tag))

    def styles_for(self, count: int) -> tuple[Hashable, ...]:
        return self.styles.get(count, ())


def _ensure_repeat_bounds(minimum: object, maximum: object) -> None:
    for name, value in (("min_tag_repeat", minimum), ("max_tag_repeat", maximum)):
        if isinstance(value, bool) or not isinstance(value, int):
            raise StyleTableError(f"`{name}` must be an integer")
        if value < 1:
            raise StyleTableError(f"`{name}` must be a positive integer")
    if minimum > maximum:
        raise StyleTableError("`max_tag_repeat` must be >= `min_tag_repeat`")

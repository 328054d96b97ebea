"""Markdown dialects: bundled line rules, character rules and styles.

The tokenizer and classifier never interpret styles; a dialect supplies them.
`MARKDOWN` covers headings (ATX and setext), blockquotes, unordered lists,
indented and fenced code, images, links, inline code and emphasis.
"""

from __future__ import annotations

from collections.abc import Hashable, Iterable
from dataclasses import dataclass, field
from enum import Enum, auto

from .lines import validate_line_rules
from .models import Cancel, ChangeApplication, RemovalZone, SpacingConstraint
from .rules import CharacterRule, LineRule
from .tokenizer import Tokenizer


class LineStyle(Enum):
    H1 = auto()
    H2 = auto()
    H3 = auto()
    H4 = auto()
    H5 = auto()
    H6 = auto()
    BODY = auto()
    BLOCKQUOTE = auto()
    CODEBLOCK = auto()
    FENCED_CODE = auto()
    UNORDERED_LIST = auto()


class CharacterStyle(Enum):
    BOLD = auto()
    ITALIC = auto()
    CODE = auto()
    LINK = auto()
    IMAGE = auto()


ESCAPE = "\\"

_EMPHASIS_STYLES = {
    1: (CharacterStyle.ITALIC,),
    2: (CharacterStyle.BOLD,),
    3: (CharacterStyle.BOLD, CharacterStyle.ITALIC),
}

LINE_RULES = (
    LineRule("=", LineStyle.H1, RemovalZone.ENTIRE_LINE, ChangeApplication.PREVIOUS),
    LineRule("-", LineStyle.H2, RemovalZone.ENTIRE_LINE, ChangeApplication.PREVIOUS),
    LineRule("    ", LineStyle.CODEBLOCK, RemovalZone.LEADING, should_trim=False),
    LineRule("\t", LineStyle.CODEBLOCK, RemovalZone.LEADING, should_trim=False),
    LineRule(">", LineStyle.BLOCKQUOTE),
    LineRule("- ", LineStyle.UNORDERED_LIST),
    LineRule("* ", LineStyle.UNORDERED_LIST),
    LineRule("###### ", LineStyle.H6, RemovalZone.BOTH),
    LineRule("##### ", LineStyle.H5, RemovalZone.BOTH),
    LineRule("#### ", LineStyle.H4, RemovalZone.BOTH),
    LineRule("### ", LineStyle.H3, RemovalZone.BOTH),
    LineRule("## ", LineStyle.H2, RemovalZone.BOTH),
    LineRule("# ", LineStyle.H1, RemovalZone.BOTH),
)

CHARACTER_RULES = (
    CharacterRule(
        "![",
        intermediate_tag="](",
        closing_tag=")",
        escape_character=ESCAPE,
        styles={1: (CharacterStyle.IMAGE,)},
        spacing=SpacingConstraint.NONE,
    ),
    CharacterRule(
        "[",
        intermediate_tag="](",
        closing_tag=")",
        escape_character=ESCAPE,
        styles={1: (CharacterStyle.LINK,)},
        spacing=SpacingConstraint.NONE,
    ),
    CharacterRule(
        "`",
        escape_character=ESCAPE,
        styles={1: (CharacterStyle.CODE,)},
        cancels=Cancel.ALL_REMAINING,
    ),
    CharacterRule("*", escape_character=ESCAPE, styles=_EMPHASIS_STYLES, max_tag_repeat=3),
    CharacterRule("_", escape_character=ESCAPE, styles=_EMPHASIS_STYLES, max_tag_repeat=3),
)


@dataclass(frozen=True)
class Dialect:
    """Immutable rule configuration shared by every parse.

    Rule lists are checked when the dialect is built, so a broken rule set
    fails here rather than in the middle of a document.

    Attributes:
        line_rules: Line rules in priority order.
        character_rules: Character rules in priority order.
        default_style: Line style for lines no rule matches.
        verbatim_styles: Line styles whose text is never tokenized.
        fence_style: Line style for fenced code, or None to ignore fences. It is
            always treated as verbatim.

    Raises:
        RuleError: If a rule list contains the wrong kind of rule.
    """

    line_rules: tuple[LineRule, ...]
    character_rules: tuple[CharacterRule, ...]
    default_style: Hashable
    verbatim_styles: frozenset[Hashable] = frozenset()
    fence_style: Hashable | None = None
    tokenizer: Tokenizer = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "line_rules", validate_line_rules(self.line_rules))
        verbatim = frozenset(self.verbatim_styles)
        if self.fence_style is not None:
            verbatim |= {self.fence_style}
        object.__setattr__(self, "verbatim_styles", verbatim)
        tokenizer = Tokenizer(self.character_rules)
        object.__setattr__(self, "character_rules", tokenizer.rules)
        object.__setattr__(self, "tokenizer", tokenizer)

    def should_tokenize(self, style: Hashable) -> bool:
        return style not in self.verbatim_styles

    def with_rules(
        self,
        line_rules: Iterable[LineRule] | None = None,
        character_rules: Iterable[CharacterRule] | None = None,
    ) -> Dialect:
        """Return a copy of the dialect with some rule lists swapped out."""
        return Dialect(
            line_rules=self.line_rules if line_rules is None else tuple(line_rules),
            character_rules=(
                self.character_rules if character_rules is None else tuple(character_rules)
            ),
            default_style=self.default_style,
            verbatim_styles=self.verbatim_styles,
            fence_style=self.fence_style,
        )


MARKDOWN = Dialect(
    line_rules=LINE_RULES,
    character_rules=CHARACTER_RULES,
    default_style=LineStyle.BODY,
    verbatim_styles=frozenset({LineStyle.CODEBLOCK, LineStyle.FENCED_CODE}),
    fence_style=LineStyle.FENCED_CODE,
)

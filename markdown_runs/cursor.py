"""Grapheme-aware character cursor used by the inline scanner."""

from __future__ import annotations

import unicodedata

ZERO_WIDTH_JOINER = "\u200d"

# Code points that always extend the preceding character.
_EXTENDERS = frozenset({ZERO_WIDTH_JOINER, "\ufe0e", "\ufe0f"})
_EMOJI_MODIFIERS = range(0x1F3FB, 0x1F400)


def _extends_cluster(character: str) -> bool:
    if character in _EXTENDERS or ord(character) in _EMOJI_MODIFIERS:
        return True
    return unicodedata.category(character) in ("Mn", "Me", "Mc")


def split_graphemes(text: str) -> list[str]:
    """Split text into user-perceived characters.

    A cluster is a base code point followed by any combining marks, variation
    selectors or emoji modifiers, and any code point joined to it with a
    zero-width joiner.

    Args:
        text: Text to split.

    Returns:
        list[str]: Clusters in order; joining them reproduces `text`.

    Examples:
        split_graphemes("e\\u0301*")  # ["é", "*"]
    """
    clusters: list[str] = []
    joined = False
    for character in text:
        if clusters and (joined or _extends_cluster(character)):
            clusters[-1] += character
        else:
            clusters.append(character)
        joined = character == ZERO_WIDTH_JOINER
    return clusters


class CharacterCursor:
    """Explicit cursor over the characters of a string.

    Positions count grapheme clusters, not code points. Lookups outside the
    text return None so callers can treat them as boundaries.
    """

    __slots__ = ("characters", "position", "end")

    def __init__(self, text: str | list[str], position: int = 0) -> None:
        self.characters = split_graphemes(text) if isinstance(text, str) else text
        self.position = position
        self.end = len(self.characters)

    @property
    def current(self) -> str | None:
        return self.peek()

    def at_end(self) -> bool:
        return self.position >= self.end

    def peek(self, offset: int = 0) -> str | None:
        """Look at a character relative to the cursor without moving."""
        target = self.position + offset
        if 0 <= target < self.end:
            return self.characters[target]
        return None

    def peek_previous(self) -> str | None:
        return self.peek(-1)

    def peek_next(self) -> str | None:
        return self.peek(1)

    def advance(self, count: int = 1) -> str:
        """Move forward and return the characters moved over."""
        start = self.position
        self.position = min(self.position + count, self.end)
        return "".join(self.characters[start : self.position])

    def startswith(self, tag: str, offset: int = 0) -> bool:
        """Check whether `tag` begins at the cursor (plus `offset`)."""
        tag_characters = split_graphemes(tag)
        start = self.position + offset
        if not tag_characters or start < 0:
            return False
        return self.characters[start : start + len(tag_characters)] == tag_characters

    def count_repeats(self, tag: str) -> int:
        """Count consecutive copies of `tag` starting at the cursor."""
        width = len(split_graphemes(tag))
        count = 0
        while self.startswith(tag, count * width):
            count += 1
        return count

    def fork(self) -> CharacterCursor:
        """Create an independent cursor at the current position."""
        return CharacterCursor(self.characters, self.position)

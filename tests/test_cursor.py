from markdown_runs.cursor import CharacterCursor, split_graphemes


def test_split_graphemes_keeps_combining_marks_together():
    assert split_graphemes("e\u0301a") == ["e\u0301", "a"]


def test_split_graphemes_keeps_emoji_sequences_together():
    family = "\U0001F468\u200d\U0001F469\u200d\U0001F467"
    thumbs = "\U0001F44D\U0001F3FD"

    assert split_graphemes(f"{family}x{thumbs}") == [family, "x", thumbs]


def test_split_graphemes_empty_text():
    assert split_graphemes("") == []


def test_peek_outside_text_returns_none():
    cursor = CharacterCursor("ab")

    assert cursor.current == "a"
    assert cursor.peek_previous() is None
    assert cursor.peek_next() == "b"
    assert cursor.peek(2) is None


def test_advance_returns_characters_and_stops_at_end():
    cursor = CharacterCursor("abc")

    assert cursor.advance(2) == "ab"
    assert cursor.peek_previous() == "b"
    assert cursor.advance(5) == "c"
    assert cursor.at_end()
    assert cursor.current is None
    assert cursor.advance() == ""


def test_startswith_and_count_repeats():
    cursor = CharacterCursor("***x")

    assert cursor.startswith("**")
    assert cursor.startswith("x", offset=3)
    assert not cursor.startswith("")
    assert cursor.count_repeats("*") == 3
    assert cursor.count_repeats("**") == 1


def test_cursor_positions_count_graphemes():
    cursor = CharacterCursor("e\u0301*")

    assert cursor.advance() == "e\u0301"
    assert cursor.current == "*"


def test_fork_is_independent():
    cursor = CharacterCursor("abc")
    cursor.advance()
    probe = cursor.fork()
    probe.advance(2)

    assert cursor.position == 1
    assert probe.at_end()

from markdown_runs.models import (
    ParserContext,
    ParserState,
    StyledLine,
    StyledRun,
    Token,
    TokenType,
)


def test_parser_state_members():
    assert list(ParserState) == [ParserState.NORMAL, ParserState.IN_FENCED_CODE]


def test_parser_context_defaults():
    ctx = ParserContext()

    assert ctx.state is ParserState.NORMAL
    assert ctx.fence_char is None
    assert ctx.fence_length == 0
    assert ctx.fence_indent_columns == 0


def test_token_defaults():
    token = Token(TokenType.STRING, "text")

    assert token.metadata_text is None
    assert token.styles == ()
    assert token.repeat_count == 0
    assert token.skip is False


def test_rendered_text_by_token_type():
    assert Token(TokenType.STRING, "text").rendered_text == "text"
    assert Token(TokenType.ESCAPE, "*").rendered_text == "*"
    assert Token(TokenType.OPEN_TAG, "[").rendered_text == "["
    assert Token(TokenType.METADATA, "https://example.com").rendered_text == ""
    assert Token(TokenType.PROCESSED, "**").rendered_text == ""


def test_repeating_tag_renders_only_while_unresolved():
    assert Token(TokenType.REPEATING_TAG, "**", repeat_count=2).rendered_text == "**"
    assert Token(TokenType.REPEATING_TAG, "**", repeat_count=0).rendered_text == ""


def test_styled_line_text_joins_runs():
    line = StyledLine(
        "body",
        3,
        (StyledRun("plain "), StyledRun("bold", ("bold",)), StyledRun(" tail")),
    )

    assert line.text == "plain bold tail"
    assert line.consumed is False

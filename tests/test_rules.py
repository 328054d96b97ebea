import pytest

from markdown_runs.exceptions import EmptyTagError, RuleError, StyleTableError
from markdown_runs.models import Cancel, RemovalZone, SpacingConstraint
from markdown_runs.rules import CharacterRule, LineRule


def test_line_rule_defaults():
    rule = LineRule("> ", "quote")

    assert rule.removal_zone is RemovalZone.LEADING
    assert rule.should_trim is True


def test_line_rule_rejects_empty_token():
    with pytest.raises(EmptyTagError) as excinfo:
        LineRule("", "body")

    assert excinfo.value.rule_kind == "LineRule"
    assert excinfo.value.field_name == "token"


def test_line_rule_rejects_unknown_zone():
    with pytest.raises(RuleError):
        LineRule("#", "heading", removal_zone="leading")


def test_character_rule_defaults():
    rule = CharacterRule("*")

    assert rule.is_repeating is True
    assert rule.max_tag_repeat == 1
    assert rule.min_tag_repeat == 1
    assert rule.spacing is SpacingConstraint.ONE_SIDE_FORBIDDEN
    assert rule.cancels is Cancel.NONE
    assert rule.styles == {}


@pytest.mark.parametrize(
    "kwargs, field_name",
    [
        ({"open_tag": ""}, "open_tag"),
        ({"open_tag": "[", "intermediate_tag": "", "closing_tag": ")"}, "intermediate_tag"),
        ({"open_tag": "[", "closing_tag": ""}, "closing_tag"),
    ],
)
def test_character_rule_rejects_empty_tags(kwargs, field_name):
    with pytest.raises(EmptyTagError) as excinfo:
        CharacterRule(**kwargs)

    assert excinfo.value.field_name == field_name


def test_intermediate_tag_requires_closing_tag():
    with pytest.raises(RuleError, match="closing_tag"):
        CharacterRule("[", intermediate_tag="](")


def test_escape_character_must_be_single_character():
    with pytest.raises(RuleError, match="single character"):
        CharacterRule("*", escape_character="\\\\")


def test_escape_character_must_not_be_a_tag_character():
    with pytest.raises(RuleError, match="part of a tag"):
        CharacterRule("[", intermediate_tag="](", closing_tag=")", escape_character="(")


@pytest.mark.parametrize(
    "kwargs",
    [
        {"max_tag_repeat": 0},
        {"min_tag_repeat": 0},
        {"min_tag_repeat": 3, "max_tag_repeat": 2},
        {"max_tag_repeat": True},
        {"max_tag_repeat": 2, "styles": {3: ("bold",)}},
        {"max_tag_repeat": 2, "min_tag_repeat": 2, "styles": {1: ("italic",)}},
        {"styles": {"1": ("italic",)}},
    ],
)
def test_inconsistent_style_tables_are_rejected(kwargs):
    with pytest.raises(StyleTableError):
        CharacterRule("*", **kwargs)


def test_bracketed_rule_only_supports_single_tags():
    with pytest.raises(StyleTableError):
        CharacterRule("[", closing_tag="]", max_tag_repeat=2)


def test_rule_errors_are_value_errors():
    assert issubclass(RuleError, ValueError)
    assert issubclass(EmptyTagError, RuleError)
    assert issubclass(StyleTableError, RuleError)


def test_styles_are_normalized_to_tuples():
    rule = CharacterRule("*", styles={1: ["italic"], 2: ("bold",)}, max_tag_repeat=2)

    assert rule.styles == {1: ("italic",), 2: ("bold",)}
    assert rule.styles_for(1) == ("italic",)
    assert rule.styles_for(2) == ("bold",)


def test_styles_for_missing_count_is_empty():
    rule = CharacterRule("*", styles={1: ("italic",)}, max_tag_repeat=3)

    assert rule.styles_for(2) == ()


def test_tag_characters_cover_every_tag():
    rule = CharacterRule("![", intermediate_tag="](", closing_tag=")")

    assert rule.is_repeating is False
    assert rule.tag_characters == frozenset("![]()")

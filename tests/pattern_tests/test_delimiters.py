"""Tests for delimiter pairing of coded tokens."""

import pytest

from hl7annotate.core.pattern import CODED_TOKEN_PATTERN, CodedToken, DelimiterPair, search_coded_token


def test_html_quote_entity_delimiters() -> None:
    """An entity-quoted token opens and closes with '&quot;'."""
    match = CODED_TOKEN_PATTERN.search("&quot;2124^2RHZ / 4RH^99DCT&quot;")

    assert match is not None
    assert match.group(1) == "&quot;"
    assert match.group(CODED_TOKEN_PATTERN.groups) == "&quot;"


def test_angle_bracket_delimiters() -> None:
    """An element-text token opens with '>' and closes with '<'."""
    match = CODED_TOKEN_PATTERN.search(">2124^2RHZ / 4RH^99DCT<")

    assert match is not None
    assert match.group(1) == ">"
    assert match.group(CODED_TOKEN_PATTERN.groups) == "<"


def test_closing_delimiter_is_the_last_group() -> None:
    """The named 'close' group is also the last capturing group."""
    match = CODED_TOKEN_PATTERN.search('"1107^NONE^99DCT"')

    assert match is not None
    assert match.group(CODED_TOKEN_PATTERN.groups) == match.group("close") == '"'


@pytest.mark.parametrize(
    ("text", "expected_pair"),
    [
        ('"1107^NONE^99DCT"', DelimiterPair.QUOTE),
        ("&quot;1107^NONE^99DCT&quot;", DelimiterPair.HTML_ENTITY_QUOTE),
        (">1107^NONE^99DCT<", DelimiterPair.ANGLE_BRACKET),
    ],
)
def test_token_reports_its_delimiter_pair(text: str, expected_pair: DelimiterPair) -> None:
    """The token exposes the variant and its partner delimiters."""
    token = search_coded_token(text)

    assert token is not None
    assert token.delimiters is expected_pair
    assert token.opening == expected_pair.opening
    assert token.closing == expected_pair.closing
    assert token.matched_text == text


@pytest.mark.parametrize(
    "text",
    [
        '"1107^NONE^99DCT<',
        '>1107^NONE^99DCT"',
        '&quot;1107^NONE^99DCT"',
        '"1107^NONE^99DCT&quot;',
        ">1107^NONE^99DCT>",
        "<1107^NONE^99DCT<",
    ],
)
def test_mismatched_delimiters_do_not_match(text: str) -> None:
    """A token is only matched when the closing delimiter partners the opening one."""
    assert search_coded_token(text) is None


def test_from_opening_rejects_unknown_delimiter() -> None:
    with pytest.raises(ValueError, match="Unrecognized opening delimiter"):
        DelimiterPair.from_opening("'")


def test_token_value_and_span() -> None:
    """The token's bare value and span cover exactly the matched text."""
    text = 'xd:onValue="1107^NONE^99DCT"/>'
    token = search_coded_token(text)

    assert token == CodedToken(
        delimiters=DelimiterPair.QUOTE,
        code="1107",
        text="NONE",
        coding_system="99DCT",
        span=(11, 28),
    )
    assert token.value == "1107^NONE^99DCT"
    assert text[slice(*token.span)] == token.matched_text

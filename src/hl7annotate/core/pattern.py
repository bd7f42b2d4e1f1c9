"""
Coded-token pattern for HL7 coded values embedded in InfoPath XSL markup.

InfoPath writes the same coded value in three different framings:

- plain attribute quoting: ``xd:onValue="2124^2RHZ / 4RH^99DCT"``
- entity-escaped quoting inside XPath predicates: ``value=&quot;2124^2RHZ / 4RH^99DCT&quot;``
- element text content: ``<span>2124^2RHZ / 4RH^99DCT</span>``

A token only matches when the opening delimiter and its partner closing
delimiter frame it exactly. Inside a framing only ``^`` and that framing's own
closing delimiter end a component, so ``"1234^AGE >5 YEARS^99DCT"`` is a token.
A token followed by further ``^`` segments already
carries a concept-name annotation and is rejected by a negative lookahead, so
no partial match is ever produced for it.

Usage example:
    >>> token = search_coded_token('xd:onValue="1107^NONE^99DCT"')
    >>> token.code, token.text, token.coding_system
    ('1107', 'NONE', '99DCT')
    >>> token.delimiters
    <DelimiterPair.QUOTE: ('"', '"')>
"""

from collections.abc import Callable, Iterator
from dataclasses import dataclass
from enum import Enum
from typing import Final

import regex

__all__ = [
    "ANNOTATED_TOKEN_PATTERN",
    "CODED_TOKEN_PATTERN",
    "COMPONENT_SEPARATOR",
    "AnnotatedToken",
    "CodedToken",
    "CodedValue",
    "DelimiterPair",
    "count_coded_tokens",
    "find_annotated_tokens",
    "find_coded_tokens",
    "parse_coded_value",
    "search_coded_token",
]

COMPONENT_SEPARATOR: Final[str] = "^"


class DelimiterPair(Enum):
    """The recognized framings of a coded value, as (opening, closing) pairs."""

    QUOTE = ('"', '"')
    HTML_ENTITY_QUOTE = ("&quot;", "&quot;")
    ANGLE_BRACKET = (">", "<")

    @property
    def opening(self) -> str:
        """Return the opening delimiter."""
        return self.value[0]

    @property
    def closing(self) -> str:
        """Return the closing delimiter that partners the opening one."""
        return self.value[1]

    @classmethod
    def from_opening(cls, opening: str) -> "DelimiterPair":
        """Return the pair whose opening delimiter is `opening`."""
        for pair in cls:
            if pair.opening == opening:
                return pair
        msg = f"Unrecognized opening delimiter: {opening!r}"
        raise ValueError(msg)


# A text or coding-system component: no separator and no closing delimiter of
# its own framing. The other framings' characters are ordinary text.
_FIELDS: Final[dict[DelimiterPair, str]] = {
    DelimiterPair.QUOTE: r'[^\^"]+',
    DelimiterPair.HTML_ENTITY_QUOTE: r"(?:(?!&quot;)[^\^])+",
    DelimiterPair.ANGLE_BRACKET: r"[^\^<]+",
}


def _triple(field: str) -> str:
    return rf"(?P<code>\d+)\^(?P<text>{field})\^(?P<system>{field})"


def _delimited(body: Callable[[str], str]) -> str:
    """Frame `body(field)` with every delimiter pair, one alternative per pair."""
    alternatives = [f"(?P<open>{regex.escape(pair.opening)}){body(_FIELDS[pair])}(?P<close>{regex.escape(pair.closing)})" for pair in DelimiterPair]
    return "|".join(alternatives)


# Duplicate group names share a number, so `close` is always the last group.
CODED_TOKEN_PATTERN: Final = regex.compile(_delimited(lambda field: rf"{_triple(field)}(?!\^)"))

ANNOTATED_TOKEN_PATTERN: Final = regex.compile(
    _delimited(lambda field: rf"(?P<value>{_triple(field)}(?:\^{field})+)"),
)


@dataclass(frozen=True)
class CodedToken:
    """
    A coded value found in a document, not yet carrying a concept-name annotation.

    Attributes:
        delimiters: The delimiter pair framing the value.
        code: The concept code (digits only).
        text: The display text recorded alongside the code.
        coding_system: The coding-system tag, e.g. ``99DCT``.
        span: (start, end) offsets of the whole match, delimiters included.

    """

    delimiters: DelimiterPair
    code: str
    text: str
    coding_system: str
    span: tuple[int, int]

    @classmethod
    def from_match(cls, match: "regex.Match[str]") -> "CodedToken":
        """Build a token from a CODED_TOKEN_PATTERN match."""
        return cls(
            delimiters=DelimiterPair.from_opening(match.group("open")),
            code=match.group("code"),
            text=match.group("text"),
            coding_system=match.group("system"),
            span=match.span(),
        )

    @property
    def opening(self) -> str:
        return self.delimiters.opening

    @property
    def closing(self) -> str:
        return self.delimiters.closing

    @property
    def value(self) -> str:
        """Return the bare ``code^text^system`` value."""
        return COMPONENT_SEPARATOR.join((self.code, self.text, self.coding_system))

    @property
    def matched_text(self) -> str:
        """Return the matched text, delimiters included."""
        return f"{self.opening}{self.value}{self.closing}"


@dataclass(frozen=True)
class AnnotatedToken:
    """A delimited coded value that already carries extra ``^`` segments."""

    delimiters: DelimiterPair
    value: "CodedValue"
    span: tuple[int, int]


@dataclass(frozen=True)
class CodedValue:
    """A parsed bare coded value, ``code^text^system`` plus any trailing segments."""

    code: str
    text: str
    coding_system: str
    annotation: tuple[str, ...] = ()

    @property
    def is_annotated(self) -> bool:
        return bool(self.annotation)

    @property
    def concept_name(self) -> str | None:
        """Return the appended display name, which precedes the trailing coding system."""
        if len(self.annotation) < 2:  # noqa: PLR2004
            return None
        return self.annotation[-2]


def parse_coded_value(value: str) -> CodedValue | None:
    """
    Parse a bare coded value into its components.

    Returns:
        The parsed value, or None if `value` does not start with a
        well-formed ``code^text^system`` triple.

    """
    parts = value.split(COMPONENT_SEPARATOR)
    if len(parts) < 3 or not parts[0].isdigit() or not all(parts):  # noqa: PLR2004
        return None
    code, text, coding_system, *annotation = parts
    return CodedValue(code=code, text=text, coding_system=coding_system, annotation=tuple(annotation))


def find_coded_tokens(text: str, pos: int = 0, endpos: int | None = None) -> Iterator[CodedToken]:
    """
    Lazily yield the unannotated coded tokens of `text`, left to right.

    Matches never overlap: scanning resumes after the closing delimiter of the
    previous match. Each call starts a fresh scan.
    """
    for match in CODED_TOKEN_PATTERN.finditer(text, pos, endpos):
        yield CodedToken.from_match(match)


def search_coded_token(text: str, pos: int = 0) -> CodedToken | None:
    """Return the first unannotated coded token at or after `pos`, if any."""
    match = CODED_TOKEN_PATTERN.search(text, pos)
    return CodedToken.from_match(match) if match else None


def count_coded_tokens(text: str) -> int:
    return sum(1 for _ in CODED_TOKEN_PATTERN.finditer(text))


def find_annotated_tokens(text: str) -> Iterator[AnnotatedToken]:
    """Yield the delimited coded tokens that already carry a concept-name annotation."""
    for match in ANNOTATED_TOKEN_PATTERN.finditer(text):
        value = parse_coded_value(match.group("value"))
        if value is None:
            continue
        yield AnnotatedToken(
            delimiters=DelimiterPair.from_opening(match.group("open")),
            value=value,
            span=match.span(),
        )

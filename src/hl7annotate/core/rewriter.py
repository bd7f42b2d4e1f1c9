"""Rewrite loop that appends concept-name annotations to coded tokens."""

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Final
from xml.sax.saxutils import escape

from .pattern import COMPONENT_SEPARATOR, CodedToken, DelimiterPair, find_coded_tokens

__all__ = [
    "AnnotationResult",
    "ConceptTextResolver",
    "Edit",
    "TokenResolution",
    "annotate_text",
    "apply_plan",
    "build_annotation",
    "escape_name",
    "is_embeddable",
    "plan_annotations",
    "resolve_token",
]

logger = logging.getLogger(__name__)

ConceptTextResolver = Callable[[str, str | None], str | None]
"""Resolve a concept code (and optional locale) to display text, or None when unknown."""

# Entities escaped on top of '&', '<' and '>' for each framing.
_EXTRA_ENTITIES: Final[dict[DelimiterPair, dict[str, str]]] = {
    DelimiterPair.QUOTE: {'"': "&quot;"},
    DelimiterPair.HTML_ENTITY_QUOTE: {},
    DelimiterPair.ANGLE_BRACKET: {},
}


@dataclass(frozen=True)
class Edit:
    """A single replacement of `span` in the original text."""

    span: tuple[int, int]
    replacement: str
    token: CodedToken


@dataclass(frozen=True)
class TokenResolution:
    """
    The outcome of naming one token.

    `replacement` is set only when `name` was found and can be inserted; a
    name without a replacement could not be embedded in the token.
    """

    token: CodedToken
    name: str | None = None
    replacement: str | None = None


@dataclass
class AnnotationResult:
    """
    The outcome of scanning one document.

    Attributes:
        edits: The rewrite plan, in ascending span order.
        unresolved: Tokens whose code the resolver could not name.
        unembeddable: Tokens whose resolved name cannot be inserted safely.

    """

    edits: list[Edit] = field(default_factory=list)
    unresolved: list[CodedToken] = field(default_factory=list)
    unembeddable: list[CodedToken] = field(default_factory=list)

    @property
    def tokens_found(self) -> int:
        return len(self.edits) + len(self.unresolved) + len(self.unembeddable)


def is_embeddable(name: str, delimiters: DelimiterPair = DelimiterPair.QUOTE) -> bool:
    """
    Check that `name` can be appended inside a token framed by `delimiters`.

    A separator would add a component to the value. An XPath string literal
    written with ``&quot;`` cannot hold a double quote in any escaped form.
    """
    if COMPONENT_SEPARATOR in name:
        return False
    return not (delimiters is DelimiterPair.HTML_ENTITY_QUOTE and '"' in name)


def escape_name(name: str, delimiters: DelimiterPair) -> str:
    """Escape `name` as XML character data for a token framed by `delimiters`."""
    return escape(name, _EXTRA_ENTITIES[delimiters])


def build_annotation(token: CodedToken, name: str) -> str:
    """Return the replacement for `token` with `^name^system` appended before its closing delimiter."""
    annotated_value = COMPONENT_SEPARATOR.join((token.value, escape_name(name, token.delimiters), token.coding_system))
    return f"{token.opening}{annotated_value}{token.closing}"


def resolve_token(token: CodedToken, resolve: ConceptTextResolver, locale: str | None = None) -> TokenResolution:
    """Ask `resolve` for the name of `token` and build its replacement when the name fits."""
    name = resolve(token.code, locale)
    if not name:
        logger.debug("No concept name for code %s at %s; leaving token unchanged.", token.code, token.span)
        return TokenResolution(token=token)
    if not is_embeddable(name, token.delimiters):
        logger.warning("Concept name %r for code %s cannot be embedded in a %s token; leaving token unchanged.", name, token.code, token.delimiters.name)
        return TokenResolution(token=token, name=name)
    return TokenResolution(token=token, name=name, replacement=build_annotation(token, name))


def plan_annotations(text: str, resolve: ConceptTextResolver, locale: str | None = None) -> AnnotationResult:
    """
    Scan `text` once and plan an annotation for every unannotated coded token.

    The resolver is called once per matched token. A code it cannot name is
    left untouched and recorded, and the scan carries on. Exceptions raised by
    the resolver propagate to the caller.
    """
    result = AnnotationResult()
    for token in find_coded_tokens(text):
        resolution = resolve_token(token, resolve, locale)
        if resolution.replacement is not None:
            result.edits.append(Edit(span=token.span, replacement=resolution.replacement, token=token))
        elif resolution.name:
            result.unembeddable.append(token)
        else:
            result.unresolved.append(token)
    return result


def apply_plan(text: str, edits: Sequence[Edit]) -> str:
    """Splice `edits` into `text`, working backwards so earlier offsets stay valid."""
    for edit in sorted(edits, key=lambda e: e.span[0], reverse=True):
        start, end = edit.span
        text = text[:start] + edit.replacement + text[end:]
    return text


def annotate_text(text: str, resolve: ConceptTextResolver, locale: str | None = None) -> str:
    """Return `text` with a concept-name annotation appended to every resolvable coded token."""
    return apply_plan(text, plan_annotations(text, resolve, locale).edits)

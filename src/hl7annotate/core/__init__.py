"""
Matching and rewriting of HL7 coded tokens.

This package is pure text in, text out: it never touches the filesystem.
"""

from .pattern import (
    CODED_TOKEN_PATTERN,
    CodedToken,
    CodedValue,
    DelimiterPair,
    find_annotated_tokens,
    find_coded_tokens,
    parse_coded_value,
    search_coded_token,
)
from .rewriter import AnnotationResult, Edit, annotate_text, apply_plan, plan_annotations

__all__ = [
    "CODED_TOKEN_PATTERN",
    "AnnotationResult",
    "CodedToken",
    "CodedValue",
    "DelimiterPair",
    "Edit",
    "annotate_text",
    "apply_plan",
    "find_annotated_tokens",
    "find_coded_tokens",
    "parse_coded_value",
    "plan_annotations",
    "search_coded_token",
]

"""Defines shared data structures and types for HL7Annotate."""

import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from hl7annotate.core.pattern import CodedToken
from hl7annotate.match_state import SkipReason, TokenLifecycle

DEFAULT_INCLUDE: list[str] = ["**/*.xsl"]


@dataclass
class Output:
    """Defines the output behavior for an annotation task."""

    in_place: bool = True
    path: str | None = None

    def __post_init__(self) -> None:
        """Validate attributes."""
        if self.in_place and self.path is not None:
            msg = "The 'path' attribute cannot be used when 'in_place' is True."
            raise ValueError(msg)
        if not self.in_place and self.path is None:
            msg = "The 'path' attribute is required when 'in_place' is False."
            raise ValueError(msg)


@dataclass
class Source:
    """Defines the XSL files an annotation task works on, relative to the project root."""

    include: list[str] = field(default_factory=lambda: list(DEFAULT_INCLUDE))
    exclude: list[str] = field(default_factory=list)


@dataclass
class TokenMatch:
    """
    A coded token found in a source file, tracked through the annotation pipeline.

    Attributes:
        token: The matched coded token, including its span in the file.
        source_file: The path to the file from which the token was extracted.
        task_name: The name of the task this match belongs to.
        concept_name: The resolved display name. None if not (yet) resolved.
        replacement: The planned replacement text for the token's span.
        lifecycle: The current state of this match in the pipeline.
        skip_reason: If lifecycle is UNRESOLVED, provides the structured reason why.

    """

    token: CodedToken
    source_file: Path
    task_name: str
    concept_name: str | None = None
    replacement: str | None = None
    match_id: str = field(default_factory=lambda: str(uuid.uuid4()), init=False, repr=False)

    lifecycle: TokenLifecycle = TokenLifecycle.CAPTURED
    skip_reason: SkipReason | None = None

    def __hash__(self) -> int:
        """Return the hash of the match instance."""
        return hash(self.match_id)

    def __eq__(self, other: object) -> bool:
        """Check equality against another object."""
        if not isinstance(other, TokenMatch):
            return NotImplemented
        return self.match_id == other.match_id

    @property
    def span(self) -> tuple[int, int]:
        return self.token.span

    @property
    def is_annotated(self) -> bool:
        """Check if an annotation is planned or written for this match."""
        return self.lifecycle in {TokenLifecycle.ANNOTATED, TokenLifecycle.WRITTEN, TokenLifecycle.DRY_RUN_SIMULATED}

    @property
    def is_unresolved(self) -> bool:
        return self.lifecycle == TokenLifecycle.UNRESOLVED

    def to_dict(self) -> dict[str, Any]:
        """Convert the dataclass instance to a JSON-serializable dictionary."""
        result: dict[str, Any] = {
            "match_id": self.match_id,
            "code": self.token.code,
            "text": self.token.text,
            "coding_system": self.token.coding_system,
            "delimiters": self.token.delimiters.name,
            "source_file": str(self.source_file),
            "span": self.span,
            "task_name": self.task_name,
            "concept_name": self.concept_name,
            "lifecycle": self.lifecycle.value,
        }

        if self.skip_reason is not None:
            result["skip_reason"] = {
                "category": self.skip_reason.category,
                "code": self.skip_reason.code,
                "message": self.skip_reason.message,
            }

        return result


class AnnotationTask(BaseModel):
    """A single task defining which XSL files to annotate and how to name concepts."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str
    source: Source = Field(default_factory=Source)
    resolver: str = "dictionary"
    locale: str | None = None
    enabled: bool = True
    output: Output = Field(default_factory=Output)
    encoding: str = "utf-8"

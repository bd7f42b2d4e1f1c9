"""
Token lifecycle state management for HL7Annotate.

Architecture:
    TokenLifecycle (Enum) → Represents WHERE the token is in the pipeline
    SkipReason (Dataclass) → Represents WHY a token was left unchanged (if applicable)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Literal


class TokenLifecycle(str, Enum):
    """
    Represents the lifecycle state of a TokenMatch in the annotation pipeline.

    State Transition Flow:
        CAPTURED → [ANNOTATED/UNRESOLVED] → [WRITTEN/DRY_RUN_SIMULATED]

    """

    CAPTURED = "captured"
    """Token was found by the coded-token scan but not yet resolved."""

    ANNOTATED = "annotated"
    """A concept name was resolved and an annotation is planned."""

    UNRESOLVED = "unresolved"
    """The token will be left unchanged; see the skip reason."""

    WRITTEN = "written"
    """The annotation was written back to disk."""

    DRY_RUN_SIMULATED = "dry_run_simulated"
    """The annotation was planned in dry-run mode and not written."""


@dataclass(frozen=True)
class SkipReason:
    """
    Represents why a token was left unchanged.

    Attributes:
        category: The high-level category of the skip reason.
        code: A machine-readable identifier for the specific reason.
        message: A human-readable explanation (optional, for logging/debugging).

    """

    category: Literal["resolution", "safety", "mode"]
    code: str
    message: str | None = None

    def __str__(self) -> str:
        """Return a human-readable representation of the skip reason."""
        if self.message:
            return f"{self.category}:{self.code} ({self.message})"
        return f"{self.category}:{self.code}"


SKIP_UNRESOLVED = SkipReason(
    category="resolution",
    code="not_found",
    message="No concept name found for the code",
)
"""Skip reason when the resolver has no name for a code."""

SKIP_UNEMBEDDABLE = SkipReason(
    category="safety",
    code="unembeddable",
    message="Concept name cannot be embedded in the token",
)
"""Skip reason when the resolved name would break the token once inserted."""

SKIP_RESOLVER_ERROR = SkipReason(
    category="resolution",
    code="resolver_error",
    message="The resolver failed while naming this file's concepts",
)
"""Skip reason for every token of a file whose resolution raised an exception."""

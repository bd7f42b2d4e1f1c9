"""Defines the data models used throughout HL7Annotate."""

from dataclasses import dataclass, field
from pathlib import Path

from hl7annotate.config import AnnotatorConfig
from hl7annotate.resolvers.base import BaseConceptResolver
from hl7annotate.types import AnnotationTask, TokenMatch


@dataclass
class ExecutionContext:
    """A data class to hold the context for a single execution run."""

    task: AnnotationTask
    config: AnnotatorConfig
    project_root: Path = field(default_factory=Path.cwd)
    is_dry_run: bool = False
    is_debug: bool = False
    resolver: BaseConceptResolver | None = None
    files_to_process: list[Path] = field(default_factory=list)
    all_matches: list[TokenMatch] = field(default_factory=list)
    already_annotated: dict[Path, int] = field(default_factory=dict)
    written_files: list[Path] = field(default_factory=list)
    failed_files: list[Path] = field(default_factory=list)

    def matches_for(self, file_path: Path) -> list[TokenMatch]:
        """Return the matches captured from `file_path`, in document order."""
        return [m for m in self.all_matches if m.source_file == file_path]

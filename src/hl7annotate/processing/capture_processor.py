"""XSL file discovery and coded-token capture processor."""

import logging
from collections.abc import Iterable
from pathlib import Path

from hl7annotate.core.pattern import find_annotated_tokens, find_coded_tokens
from hl7annotate.models import ExecutionContext
from hl7annotate.types import AnnotationTask, TokenMatch

from .base import Processor
from .file_utils import read_source

__all__ = [
    "CaptureProcessor",
    "_count_annotated_tokens",
    "_exclude_files",
    "_extract_matches_from_content",
    "_find_files",
    "_get_included_files",
    "_is_hidden",
]

logger = logging.getLogger(__name__)


def _is_hidden(path: Path, base_path: Path) -> bool:
    """Check whether any component of `path` below `base_path` is a dot-file or dot-directory."""
    try:
        parts = path.relative_to(base_path).parts
    except ValueError:
        parts = path.parts
    return any(part.startswith(".") for part in parts)


def _get_included_files(task: AnnotationTask, base_path: Path) -> set[Path]:
    """Resolve included files from glob patterns and literal paths."""
    included_files: set[Path] = set()
    for pattern in task.source.include:
        if any(char in pattern for char in "*?[]"):
            glob_method = base_path.rglob if "**" in pattern else base_path.glob
            included_files.update(path for path in glob_method(pattern) if path.is_file())
        else:
            file_path = Path(pattern) if Path(pattern).is_absolute() else base_path / pattern
            if file_path.is_file():
                included_files.add(file_path)
    return included_files


def _exclude_files(included_files: set[Path], task: AnnotationTask, base_path: Path) -> set[Path]:
    """Exclude dot-files, files matching the task's exclude patterns, and files in the output directory."""
    candidate_files = {path for path in included_files if not _is_hidden(path, base_path)}

    explicitly_excluded = {path for pattern in task.source.exclude for path in base_path.rglob(pattern)}
    candidate_files -= explicitly_excluded

    if not task.output.in_place and task.output.path:
        output_dir = Path(task.output.path)
        output_dir_abs = (output_dir if output_dir.is_absolute() else base_path / output_dir).resolve()
        candidate_files = {f for f in candidate_files if not f.resolve().is_relative_to(output_dir_abs)}

    return candidate_files


def _find_files(task: AnnotationTask, base_path: Path) -> Iterable[Path]:
    """Find all files to be processed by a task."""
    included_files = _get_included_files(task, base_path)
    return sorted(_exclude_files(included_files, task, base_path))


def _extract_matches_from_content(content: str, file_path: Path, task: AnnotationTask) -> list[TokenMatch]:
    """Extract the unannotated coded tokens of a file's content."""
    return [TokenMatch(token=token, source_file=file_path, task_name=task.name) for token in find_coded_tokens(content)]


def _count_annotated_tokens(content: str) -> int:
    return sum(1 for _ in find_annotated_tokens(content))


class CaptureProcessor(Processor):
    """Phase 1: Find XSL files and capture every unannotated coded token within them."""

    def process(self, context: ExecutionContext) -> None:
        """Find files and capture all coded tokens within them."""
        base_path = context.project_root
        logger.debug("Using project root for file search: %s", base_path)

        context.files_to_process = list(_find_files(context.task, base_path))
        logger.info("Task '%s': Found %d files to process.", context.task.name, len(context.files_to_process))

        for file_path in context.files_to_process:
            try:
                content = read_source(file_path, context.task.encoding)
            except (OSError, UnicodeDecodeError):
                logger.exception("Could not read file %s", file_path)
                context.failed_files.append(file_path)
                continue

            file_matches = _extract_matches_from_content(content, file_path, context.task)
            context.all_matches.extend(file_matches)
            annotated = _count_annotated_tokens(content)
            if annotated:
                context.already_annotated[file_path] = annotated
            logger.debug("%s: %d coded token(s) to annotate, %d already annotated.", file_path, len(file_matches), annotated)

        logger.info("Task '%s': Captured %d coded tokens.", context.task.name, len(context.all_matches))

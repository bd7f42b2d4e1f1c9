"""Write-back processor applying planned annotations to XSL files."""

import logging
from pathlib import Path

from hl7annotate.core.rewriter import Edit, apply_plan
from hl7annotate.match_state import TokenLifecycle
from hl7annotate.models import ExecutionContext
from hl7annotate.types import AnnotationTask, TokenMatch

from .base import Processor
from .file_utils import read_source, write_source

__all__ = [
    "StaleContentError",
    "WriteBackProcessor",
    "_build_edits",
    "_get_output_path",
    "_orchestrate_file_write",
]

logger = logging.getLogger(__name__)


class StaleContentError(Exception):
    """Raised when a file no longer holds the token text captured earlier in the run."""


def _get_output_path(file_path: Path, task: AnnotationTask, project_root: Path) -> Path | None:
    """Calculate the output path for a given source file, mirroring its location below the project root."""
    if task.output.in_place:
        return file_path
    if not task.output.path:
        return None
    output_dir = Path(task.output.path)
    if not output_dir.is_absolute():
        output_dir = project_root / output_dir
    try:
        relative = file_path.relative_to(project_root)
    except ValueError:
        relative = Path(file_path.name)
    return output_dir / relative


def _build_edits(content: str, matches: list[TokenMatch]) -> list[Edit]:
    """
    Turn annotated matches into rewrite edits.

    Raises:
        StaleContentError: If a token is no longer at its captured span.

    """
    edits = []
    for match in matches:
        start, end = match.span
        if content[start:end] != match.token.matched_text:
            msg = f"Token {match.token.matched_text!r} is no longer at offset {start}."
            raise StaleContentError(msg)
        if match.replacement is not None:
            edits.append(Edit(span=match.span, replacement=match.replacement, token=match.token))
    return edits


def _orchestrate_file_write(file_path: Path, file_matches: list[TokenMatch], context: ExecutionContext) -> bool:
    """Orchestrate reading, modifying, and writing for a single file. Returns True when the file was written."""
    task = context.task
    try:
        annotated = [m for m in file_matches if m.lifecycle == TokenLifecycle.ANNOTATED]
        output_path = _get_output_path(file_path, task, context.project_root)
        if output_path is None:
            logger.warning("Output path not defined for non-in-place task. Skipping write-back for %s.", file_path)
            return False
        if not annotated and output_path == file_path:
            return False

        logger.info("Processing %s: %d annotations to apply.", file_path, len(annotated))
        content = read_source(file_path, task.encoding)
        modified_content = apply_plan(content, _build_edits(content, annotated))
        write_source(output_path, modified_content, task.encoding)
        logger.info("Successfully wrote annotated content to %s", output_path)
    except StaleContentError:
        logger.exception("File %s changed during the run; leaving it unchanged.", file_path)
    except (OSError, UnicodeError):
        logger.exception("Could not read or write file %s", file_path)
    else:
        for match in annotated:
            match.lifecycle = TokenLifecycle.WRITTEN
        return True
    return False


class WriteBackProcessor(Processor):
    """Phase 3: Write all annotated content back to files."""

    def process(self, context: ExecutionContext) -> None:
        """Write annotated content back to the filesystem, or simulate it in dry-run mode."""
        if context.is_dry_run:
            logger.debug("[DRY RUN] Skipping file write-back.")
            for match in context.all_matches:
                if match.lifecycle == TokenLifecycle.ANNOTATED:
                    match.lifecycle = TokenLifecycle.DRY_RUN_SIMULATED
            return

        files = [f for f in context.files_to_process if f not in context.failed_files]
        logger.info("Writing back annotations for %d files.", len(files))
        for file_path in files:
            if _orchestrate_file_write(file_path, context.matches_for(file_path), context):
                context.written_files.append(file_path)
            else:
                logger.debug("No changes written for %s.", file_path)

"""Manages the overall HL7Annotate annotation workflow."""

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from .config import AnnotatorConfig
from .models import ExecutionContext
from .processing import CaptureProcessor, Processor, ResolutionProcessor, WriteBackProcessor
from .reporters.dry_run_reporter import DryRunReporter
from .reporters.summary_reporter import SummaryReporter
from .resolvers.base import BaseConceptResolver
from .types import AnnotationTask, TokenMatch

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = logging.getLogger(__name__)


def run_task(
    task: AnnotationTask,
    config: AnnotatorConfig,
    project_root: Path,
    *,
    dry_run: bool = False,
    debug: bool = False,
    resolver: BaseConceptResolver | None = None,
) -> list[TokenMatch]:
    """
    Run a single annotation task through the processor pipeline.

    Args:
        task: The annotation task to execute.
        config: The global application configuration.
        project_root: The directory the task's source globs are relative to.
        dry_run: If True, plans annotations but leaves files untouched.
        debug: If True, enables debug logging and behaviors.
        resolver: A ready resolver to use instead of building one from the configuration.

    Returns:
        A list containing all processed TokenMatch objects.

    """
    context = ExecutionContext(
        task=task,
        config=config,
        project_root=project_root,
        is_dry_run=dry_run,
        is_debug=debug,
        resolver=resolver,
    )

    logger.info("Running task '%s'%s.", task.name, " (dry run)" if dry_run else "")

    pipeline: Sequence[Processor] = [
        CaptureProcessor(),
        ResolutionProcessor(),
        WriteBackProcessor(),
    ]

    for processor in pipeline:
        logger.debug("Executing processor: %s", processor.__class__.__name__)
        processor.process(context)

    reporter = DryRunReporter() if context.is_dry_run else SummaryReporter()
    reporter.generate(context)

    return context.all_matches

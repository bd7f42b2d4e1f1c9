"""A reporter for generating concise execution summaries."""

import logging

from hl7annotate.match_state import TokenLifecycle
from hl7annotate.models import ExecutionContext

logger = logging.getLogger(__name__)


class SummaryReporter:
    """Generates a concise summary of an annotation task execution and logs it."""

    def generate(self, context: ExecutionContext) -> None:
        """Log a summary of the execution to the console."""
        logger.info("--- Task Execution Summary for '%s' ---", context.task.name)
        logger.info("Files scanned: %d", len(context.files_to_process))
        logger.info("Coded tokens found: %d", len(context.all_matches))

        written = [m for m in context.all_matches if m.lifecycle == TokenLifecycle.WRITTEN]
        unresolved = [m for m in context.all_matches if m.lifecycle == TokenLifecycle.UNRESOLVED]
        logger.info("  - Annotated: %d", len(written))
        logger.info("  - Left unchanged: %d", len(unresolved))
        logger.info("  - Already annotated: %d", sum(context.already_annotated.values()))

        logger.info("Files written: %d", len(context.written_files))
        if context.failed_files:
            logger.warning("Files with errors: %d", len(context.failed_files))
            for file_path in context.failed_files:
                logger.warning("  - %s", file_path)

        logger.info("-------------------------------------------------")

"""A reporter for generating dry-run execution summaries."""

import logging
from collections import defaultdict

from hl7annotate import paths
from hl7annotate.match_state import TokenLifecycle
from hl7annotate.models import ExecutionContext
from hl7annotate.types import TokenMatch

logger = logging.getLogger(__name__)


class DryRunReporter:
    """Generates a detailed Markdown report for a dry-run execution."""

    def generate(self, context: ExecutionContext) -> None:
        """
        Create a Markdown file with a summary of the dry run.

        Args:
            context: The execution context containing all run information.

        """
        report_path = None
        try:
            report_dir = paths.get_report_dir(context.project_root)
            paths.ensure_dir_exists(report_dir)
            report_path = report_dir / f"{context.task.name}_dry_run.md"
            logger.info("Generating dry-run report at: %s", report_path)

            report_content = self._build_report_content(context)

            with report_path.open("w", encoding="utf-8") as f:
                f.write(report_content)
            logger.info("Successfully wrote dry-run report to %s", report_path)
        except FileNotFoundError:
            logger.exception("Could not generate dry-run report because the project root could not be determined.")
        except OSError:
            logger.exception("Failed to write dry-run report to %s", report_path)

    def _build_report_content(self, context: ExecutionContext) -> str:
        """Construct the full Markdown content for the report."""
        parts = [
            self._build_header(context),
            self._build_file_summary(context),
            self._build_lifecycle_tracking(context),
        ]
        return "\n".join(parts)

    def _build_header(self, context: ExecutionContext) -> str:
        """Build the main header and overview section of the report."""
        return (
            f"# Dry Run Report for Task: `{context.task.name}`\n\n"
            "This report simulates the execution of the task without modifying any files.\n\n"
            "## Task Overview\n\n"
            f"- **Resolver:** `{context.task.resolver}`\n"
            f"- **Locale:** `{context.task.locale or 'default'}`\n"
            f"- **Files to Process:** {len(context.files_to_process)}\n"
            f"- **Coded Tokens Found:** {len(context.all_matches)}\n"
            f"- **Already Annotated:** {sum(context.already_annotated.values())}\n"
        )

    def _build_file_summary(self, context: ExecutionContext) -> str:
        """Build the file details section."""
        if not context.files_to_process:
            return "## File Details\n\nNo files found to process.\n"

        file_list_items = "\n".join(f"- `{file}`" for file in context.files_to_process)
        return f"## File Details\n\n**Files Scanned:**\n{file_list_items}\n"

    def _build_lifecycle_tracking(self, context: ExecutionContext) -> str:
        """Build the token lifecycle tracking section."""
        would_annotate = [m for m in context.all_matches if m.lifecycle == TokenLifecycle.DRY_RUN_SIMULATED]
        unchanged = [m for m in context.all_matches if m.lifecycle == TokenLifecycle.UNRESOLVED]
        return "## Token Lifecycle Tracking\n\n" + self._format_match_section("Would be Annotated", would_annotate) + self._format_match_section("Left Unchanged", unchanged)

    def _format_match_section(self, title: str, matches: list[TokenMatch]) -> str:
        """Format a single section of the lifecycle tracking."""
        if not matches:
            return f"### {title} (0 items)\n\nNo tokens in this category.\n\n"

        header = f"### {title} ({len(matches)} items)\n\n"
        matches_by_file = defaultdict(list)
        for match in matches:
            matches_by_file[match.source_file].append(match)

        content = ""
        for file, file_matches in matches_by_file.items():
            content += f"**File:** `{file}`\n\n"
            content += "| Token | Details |\n"
            content += "|---|---|\n"
            for match in file_matches:
                content += self._format_match_row(match)
            content += "\n"
        return header + content

    def _format_match_row(self, match: TokenMatch) -> str:
        """Format a single match as a table row."""
        details = f"Lifecycle: `{match.lifecycle.value}`"
        if match.skip_reason:
            details += f"<br>Skip Reason: `{match.skip_reason.code}`"
        if match.concept_name:
            details += f"<br>Concept Name: `{self._escape_markdown(match.concept_name)}`"
        return f"| `{self._escape_markdown(match.token.matched_text)}` | {details} |\n"

    def _escape_markdown(self, text: str) -> str:
        """Escapes characters that have special meaning in Markdown."""
        return text.replace("|", "\\|").replace("\n", " ")

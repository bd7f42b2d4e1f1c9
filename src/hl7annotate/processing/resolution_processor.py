"""Concept-name resolution processor."""

import logging
from collections import defaultdict
from pathlib import Path

from hl7annotate.config import ResolverSettings
from hl7annotate.core.rewriter import resolve_token
from hl7annotate.match_state import SKIP_RESOLVER_ERROR, SKIP_UNEMBEDDABLE, SKIP_UNRESOLVED, TokenLifecycle
from hl7annotate.models import ExecutionContext
from hl7annotate.resolvers import create_resolver
from hl7annotate.resolvers.base import BaseConceptResolver
from hl7annotate.types import TokenMatch

from .base import Processor

__all__ = ["ResolutionProcessor", "_resolve_file_matches", "_resolve_settings_path"]

logger = logging.getLogger(__name__)


def _resolve_settings_path(settings: ResolverSettings, project_root: Path) -> ResolverSettings:
    """Anchor a relative dictionary path at the project root."""
    if not settings.path or Path(settings.path).is_absolute():
        return settings
    return settings.model_copy(update={"path": str(project_root / settings.path)})


def _resolve_file_matches(matches: list[TokenMatch], resolver: BaseConceptResolver, locale: str | None) -> None:
    """Resolve and plan the annotation of each match of a single file."""
    for match in matches:
        resolution = resolve_token(match.token, resolver.resolve, locale)
        match.concept_name = resolution.name or None
        if resolution.replacement is not None:
            match.replacement = resolution.replacement
            match.lifecycle = TokenLifecycle.ANNOTATED
            continue
        match.lifecycle = TokenLifecycle.UNRESOLVED
        match.skip_reason = SKIP_UNEMBEDDABLE if resolution.name else SKIP_UNRESOLVED
        if resolution.name:
            logger.debug("Skipped token %s in %s: %s", match.token.matched_text, match.source_file, match.skip_reason)


class ResolutionProcessor(Processor):
    """Phase 2: Resolve a concept name for every captured token."""

    def process(self, context: ExecutionContext) -> None:
        """Resolve names file by file; a resolver failure only affects the file being processed."""
        if not context.all_matches:
            logger.debug("Task '%s': No coded tokens to resolve.", context.task.name)
            return

        if context.resolver is None:
            settings = _resolve_settings_path(context.config.get_resolver_settings(context.task.resolver), context.project_root)
            context.resolver = create_resolver(context.task.resolver, settings)
            logger.debug("Using '%s' resolver for task '%s'.", context.task.resolver, context.task.name)

        matches_by_file: dict[Path, list[TokenMatch]] = defaultdict(list)
        for match in context.all_matches:
            matches_by_file[match.source_file].append(match)

        for file_path, file_matches in matches_by_file.items():
            try:
                _resolve_file_matches(file_matches, context.resolver, context.task.locale)
            except Exception:
                logger.exception("Concept resolution failed for %s. The file will be left unchanged.", file_path)
                for match in file_matches:
                    match.replacement = None
                    match.lifecycle = TokenLifecycle.UNRESOLVED
                    match.skip_reason = SKIP_RESOLVER_ERROR
                context.failed_files.append(file_path)

        resolved = sum(1 for m in context.all_matches if m.lifecycle == TokenLifecycle.ANNOTATED)
        logger.info("Task '%s': Resolved concept names for %d of %d tokens.", context.task.name, resolved, len(context.all_matches))

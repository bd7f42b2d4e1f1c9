"""A mock concept resolver for testing purposes."""

import logging

from hl7annotate.config import ResolverSettings

from .base import BaseConceptResolver

logger = logging.getLogger(__name__)


class MockResolverError(Exception):
    """Custom exception for mock resolver errors."""


class MockConceptResolver(BaseConceptResolver):
    """
    A mock resolver that names every concept '[MOCK] <code>'.

    It can also be configured to leave some codes unresolved, or to raise an
    exception for testing error handling.
    """

    def __init__(
        self,
        settings: ResolverSettings | None = None,
        *,
        unknown_codes: set[str] | None = None,
        return_error: bool = False,
    ) -> None:
        """
        Initialize the Mock Resolver.

        Args:
            settings: Resolver-specific configurations (ignored).
            unknown_codes: Codes for which resolve() returns None.
            return_error: If True, the resolve method will raise an exception.

        """
        super().__init__(settings)
        self.unknown_codes = unknown_codes or set()
        self.return_error = return_error
        self.calls: list[tuple[str, str | None]] = []

    def resolve(self, code: str, locale: str | None = None) -> str | None:
        """
        Return '[MOCK] <code>' for every known code.

        Raises:
            MockResolverError: If `return_error` was set to True during initialization.

        """
        self.calls.append((code, locale))
        if self.return_error:
            msg = "Mock resolver was configured to fail."
            raise MockResolverError(msg)
        if code in self.unknown_codes:
            return None
        logger.debug("MockConceptResolver resolved code %s for locale '%s'.", code, locale)
        return f"[MOCK] {code}"

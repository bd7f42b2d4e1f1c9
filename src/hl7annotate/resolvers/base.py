"""Defines the base class for all concept resolvers."""

from abc import ABC, abstractmethod

from hl7annotate.config import ResolverSettings


class ResolverError(Exception):
    """Raised when a resolver cannot be set up or its backing data is unusable."""


class BaseConceptResolver(ABC):
    """Abstract base class for all concept resolver implementations."""

    def __init__(self, settings: ResolverSettings | None = None) -> None:
        """
        Initialize the resolver with resolver-specific settings.

        Args:
            settings: A Pydantic model containing resolver-specific configurations.

        """
        self.settings = settings or ResolverSettings()

    @abstractmethod
    def resolve(self, code: str, locale: str | None = None) -> str | None:
        """
        Look up the display name of a concept.

        Args:
            code: The concept code taken from a coded token.
            locale: The preferred locale, e.g. 'en_GB'. Falls back to the
                resolver's default locale when None.

        Returns:
            The concept's display name, or None if the code is unknown.

        """
        raise NotImplementedError

    def __call__(self, code: str, locale: str | None = None) -> str | None:
        """Allow a resolver to be passed wherever a resolve callable is expected."""
        return self.resolve(code, locale)

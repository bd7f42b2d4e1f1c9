"""
Concept resolver implementations.

Each resolver adheres to the `BaseConceptResolver` interface and can be
selected by name from a task's configuration.
"""

from hl7annotate.config import ResolverSettings

from .base import BaseConceptResolver, ResolverError
from .dictionary_resolver import DictionaryConceptResolver
from .mock_resolver import MockConceptResolver

# Central mapping from resolver name to resolver class.
RESOLVER_MAPPING: dict[str, type[BaseConceptResolver]] = {
    "dictionary": DictionaryConceptResolver,
    "mock": MockConceptResolver,
}


def create_resolver(name: str, settings: ResolverSettings | None = None) -> BaseConceptResolver:
    """
    Instantiate the resolver registered under `name`.

    Raises:
        ResolverError: If no resolver is registered under `name`.

    """
    resolver_class = RESOLVER_MAPPING.get(name)
    if resolver_class is None:
        msg = f"Unknown concept resolver '{name}'. Available resolvers: {', '.join(sorted(RESOLVER_MAPPING))}"
        raise ResolverError(msg)
    return resolver_class(settings)


__all__ = [
    "RESOLVER_MAPPING",
    "BaseConceptResolver",
    "DictionaryConceptResolver",
    "MockConceptResolver",
    "ResolverError",
    "create_resolver",
]

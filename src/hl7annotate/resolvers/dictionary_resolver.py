"""A concept resolver backed by a YAML or JSON concept dictionary file."""

import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from hl7annotate.config import ResolverSettings

from .base import BaseConceptResolver, ResolverError

logger = logging.getLogger(__name__)

ConceptNames = dict[str, dict[str, str]]
"""Concept code -> locale -> display name. The empty-string locale holds unlocalized names."""

_UNLOCALIZED = ""


def _load_dictionary_file(path: Path) -> Any:  # noqa: ANN401
    """Parse a dictionary file as JSON or YAML, chosen by its extension."""
    content = path.read_text("utf-8")
    if path.suffix.lower() == ".json":
        return json.loads(content)
    return yaml.safe_load(content)


def _normalize_concepts(data: Any) -> ConceptNames:  # noqa: ANN401
    """
    Normalize raw dictionary data into ConceptNames.

    Accepts either a bare mapping or one nested under a 'concepts' key. Each
    value is a plain name or a mapping of locale to name.
    """
    if isinstance(data, Mapping) and isinstance(data.get("concepts"), Mapping):
        data = data["concepts"]
    if not isinstance(data, Mapping):
        msg = "Concept dictionary must be a mapping of concept codes to names."
        raise ResolverError(msg)

    concepts: ConceptNames = {}
    for code, entry in data.items():
        if isinstance(entry, Mapping):
            names = {str(locale): str(name) for locale, name in entry.items() if name is not None}
        elif entry is not None:
            names = {_UNLOCALIZED: str(entry)}
        else:
            continue
        if names:
            concepts[str(code)] = names
    return concepts


def _locale_candidates(*locales: str | None) -> list[str]:
    """Expand locales into lookup order, e.g. 'en_GB' -> ['en_GB', 'en']."""
    candidates: list[str] = []
    for locale in locales:
        if not locale:
            continue
        for candidate in (locale, locale.replace("-", "_").split("_")[0]):
            if candidate not in candidates:
                candidates.append(candidate)
    return candidates


class DictionaryConceptResolver(BaseConceptResolver):
    """Resolves concept names from an in-memory dictionary loaded once at startup."""

    def __init__(self, settings: ResolverSettings | None = None, *, concepts: Mapping[str, Any] | None = None) -> None:
        """
        Initialize the resolver.

        Args:
            settings: Resolver settings; `path` points at the dictionary file
                unless `concepts` is given.
            concepts: Raw concept data, used instead of reading `settings.path`.

        Raises:
            ResolverError: If no dictionary is available or it cannot be parsed.

        """
        super().__init__(settings)
        if concepts is None:
            concepts = self._read_dictionary()
        self.concepts = _normalize_concepts(concepts)
        logger.debug("Loaded %d concept(s) into the dictionary resolver.", len(self.concepts))

    def _read_dictionary(self) -> Any:  # noqa: ANN401
        if not self.settings.path:
            msg = "The dictionary resolver requires a 'path' to a concept dictionary file."
            raise ResolverError(msg)
        path = Path(self.settings.path)
        try:
            return _load_dictionary_file(path)
        except OSError as e:
            msg = f"Could not read concept dictionary {path}: {e}"
            raise ResolverError(msg) from e
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            msg = f"Could not parse concept dictionary {path}: {e}"
            raise ResolverError(msg) from e

    def resolve(self, code: str, locale: str | None = None) -> str | None:
        """Return the name for `code` in the best matching locale, or None if the code is unknown."""
        names = self.concepts.get(code)
        if not names:
            return None
        for candidate in _locale_candidates(locale, self.settings.default_locale):
            if candidate in names:
                return names[candidate]
        if _UNLOCALIZED in names:
            return names[_UNLOCALIZED]
        # Any name beats no name.
        return next(iter(names.values()))

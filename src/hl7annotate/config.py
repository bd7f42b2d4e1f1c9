"""Handles the parsing and validation of the HL7Annotate configuration file."""

import copy
import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .types import AnnotationTask, Output, Source

logger = logging.getLogger(__name__)


class ResolverSettings(BaseModel):
    """Settings for a specific concept resolver."""

    path: str | None = None
    default_locale: str | None = "en"
    extra: dict[str, Any] | None = None


def _deep_merge(source: dict[str, Any], destination: dict[str, Any]) -> dict[str, Any]:
    """
    Non-destructively merge two dictionaries.

    Source values overwrite destination values.
    Nested dictionaries are merged recursively.
    """
    merged = copy.deepcopy(destination)
    for key, value in source.items():
        if isinstance(value, dict) and key in merged and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(value, merged[key])
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def _resolve_shortcut_chain(current_config: dict[str, Any], shortcuts: dict[str, Any]) -> list[dict[str, Any]]:
    """Resolve the full inheritance chain of shortcuts."""
    alias_chain = []
    visited_aliases = set()
    current_alias = current_config.get("extends")

    while isinstance(current_alias, str) and current_alias not in visited_aliases and current_alias in shortcuts:
        visited_aliases.add(current_alias)
        shortcut_config = shortcuts[current_alias]
        alias_chain.append(shortcut_config)
        current_alias = shortcut_config.get("extends")

    return alias_chain


def _apply_shortcuts(task_config: dict[str, Any], shortcuts: dict[str, Any]) -> dict[str, Any]:
    """Apply shortcuts to a task configuration iteratively using an 'extends' key."""
    alias_chain = _resolve_shortcut_chain(task_config, shortcuts)

    final_config = copy.deepcopy(shortcuts.get(".defaults", {}))

    # Base of the chain first, the task itself last
    for alias_config in reversed(alias_chain):
        final_config = _deep_merge(alias_config, final_config)
    final_config = _deep_merge(task_config, final_config)

    final_config.pop("extends", None)
    return final_config


def _normalize_source(source_val: Any) -> Source:  # noqa: ANN401
    """Accept a single glob, a list of globs, or an include/exclude mapping."""
    if isinstance(source_val, str):
        return Source(include=[source_val])
    if isinstance(source_val, list):
        return Source(include=[str(item) for item in source_val])
    if isinstance(source_val, dict):
        include = source_val.get("include")
        if isinstance(include, str):
            include = [include]
        exclude = source_val.get("exclude") or []
        if isinstance(exclude, str):
            exclude = [exclude]
        return Source(include=include, exclude=exclude) if include else Source(exclude=exclude)
    return Source()


def _normalize_output(output_val: Any) -> Output:  # noqa: ANN401
    """Accept an output directory string or an in_place/path mapping."""
    if isinstance(output_val, str):
        return Output(in_place=False, path=output_val)
    if isinstance(output_val, dict):
        return Output(**output_val)
    return Output()


def _create_tasks_from_config(tasks_data: list[dict[str, Any]], shortcuts: dict[str, Any]) -> list[AnnotationTask]:
    """Build a list of AnnotationTask objects from a list of dictionaries."""
    resolved_shortcuts = {}
    for name, shortcut_data in shortcuts.items():
        if name != ".defaults":
            resolved_shortcuts[name] = _apply_shortcuts(shortcut_data, shortcuts)
        else:
            resolved_shortcuts[name] = shortcut_data

    tasks = []
    for task_data in tasks_data:
        config = _apply_shortcuts(task_data, resolved_shortcuts)
        config["source"] = _normalize_source(config.get("source"))
        config["output"] = _normalize_output(config.get("output"))
        tasks.append(AnnotationTask(**config))
    return tasks


def _build_resolvers_from_dict(resolvers_data: dict[str, Any]) -> dict[str, ResolverSettings]:
    """Build a dictionary of ResolverSettings objects from a dictionary."""
    return {name: ResolverSettings(**(r_config if isinstance(r_config, dict) else {})) for name, r_config in resolvers_data.items()}


class AnnotatorConfig(BaseModel):
    """The root configuration for HL7Annotate."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    resolvers: dict[str, ResolverSettings] = Field(default_factory=dict)
    shortcuts: dict[str, Any] = Field(default_factory=dict)
    tasks: list[AnnotationTask] = Field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AnnotatorConfig":
        """Create an AnnotatorConfig object from a dictionary."""
        resolvers = _build_resolvers_from_dict(data.get("resolvers") or {})
        shortcuts = data.get("shortcuts") or {}
        tasks = _create_tasks_from_config(data.get("tasks") or [], shortcuts)

        try:
            return cls(resolvers=resolvers, shortcuts=shortcuts, tasks=tasks)
        except ValidationError as e:
            msg = f"Invalid or missing configuration: {e}"
            raise ValueError(msg) from e

    def get_resolver_settings(self, name: str) -> ResolverSettings:
        """Return the settings for resolver `name`, or defaults if it is not configured."""
        return self.resolvers.get(name) or ResolverSettings()


class StrictSingleQuoteLoader(yaml.SafeLoader):
    """
    A custom YAML loader that enforces the use of single quotes for all strings.

    XSL fragments and HL7 tokens are full of double quotes, so double-quoted
    YAML scalars are rejected to keep escaping unambiguous.
    """


def _construct_scalar(loader: StrictSingleQuoteLoader, node: yaml.ScalarNode) -> Any:  # noqa: ANN401
    """Construct a scalar node, but first check its style."""
    if node.style == '"':
        line = node.start_mark.line + 1
        col = node.start_mark.column + 1
        msg = f"Double-quoted string found at line {line}, column {col}. Please use single quotes (') instead."
        raise yaml.YAMLError(msg)
    return loader.construct_scalar(node)


StrictSingleQuoteLoader.add_constructor("tag:yaml.org,2002:str", _construct_scalar)


def load_config(config_path: str) -> AnnotatorConfig:
    """
    Load, parse, and validate the YAML configuration file.

    Args:
        config_path: The path to the main.yaml file.

    Returns:
        An AnnotatorConfig object representing the validated configuration.

    Raises:
        FileNotFoundError: If the config file does not exist.
        yaml.YAMLError: If there is a syntax error in the YAML file.
        ValueError: If the configuration is invalid.

    """
    path = Path(config_path)
    if not path.is_file():
        msg = f"Configuration file not found at: {config_path}"
        raise FileNotFoundError(msg)

    def _raise_type_error(msg: str) -> None:
        raise TypeError(msg)

    try:
        with path.open(encoding="utf-8") as f:
            data = yaml.load(f, Loader=StrictSingleQuoteLoader)  # noqa: S506

        if not isinstance(data, dict):
            _raise_type_error("Config file must be a YAML mapping (dictionary).")

        config = AnnotatorConfig.from_dict(data)
    except yaml.YAMLError as e:
        msg = f"Error parsing YAML config file: {e}"
        raise yaml.YAMLError(msg) from e
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        msg = f"Invalid or missing configuration: {e}"
        raise ValueError(msg) from e
    else:
        logger.debug("Loaded %d task(s) and %d resolver(s) from %s", len(config.tasks), len(config.resolvers), path)
        return config

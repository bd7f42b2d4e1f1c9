"""Shared fixtures: fixture trees, filtered copies and tree comparison."""

import shutil
from collections.abc import Callable
from pathlib import Path

import pytest

from hl7annotate import paths
from hl7annotate.resolvers import DictionaryConceptResolver

FIXTURES_DIR = Path(__file__).parent / "fixtures"

# Files the tests start from. Never modified by the tests.
ORIGINAL_DIR = FIXTURES_DIR / "original"

# Files as they should look after annotation. Never modified by the tests.
EXPECTED_DIR = FIXTURES_DIR / "expected"

FIXTURE_CONCEPTS = {
    "2124": {"en": "2RHZ / 4RH", "fr": "2RHZ / 4RH (fr)"},
    "1107": {"en": "NONE", "fr": "AUCUN"},
    "1065": "YES",
}


def _ignore_dot_files(_directory: str, names: list[str]) -> set[str]:
    return {name for name in names if name.startswith(".")}


def filtered_copy(source: Path, destination: Path) -> Path:
    """Copy `source` to `destination`, leaving out dot-files and dot-directories."""
    shutil.copytree(source, destination, ignore=_ignore_dot_files)
    return destination


def tree_contents(root: Path) -> dict[str, bytes]:
    """Map each non-hidden file below `root` to its bytes, keyed by relative POSIX path."""
    contents = {}
    for path in sorted(root.rglob("*")):
        relative = path.relative_to(root)
        if path.is_file() and not any(part.startswith(".") for part in relative.parts):
            contents[relative.as_posix()] = path.read_bytes()
    return contents


def assert_same_tree(expected: Path, actual: Path) -> None:
    """Assert both trees hold the same files with identical bytes."""
    expected_contents = tree_contents(expected)
    actual_contents = tree_contents(actual)
    assert sorted(actual_contents) == sorted(expected_contents)
    for name, data in expected_contents.items():
        assert actual_contents[name] == data, f"{name} differs from the expected file"


@pytest.fixture(autouse=True)
def clear_project_root_cache() -> None:
    """Clear the project root cache so each test sees its own directories."""
    paths.find_project_root.cache_clear()


@pytest.fixture
def actual_dir(tmp_path: Path) -> Path:
    """A fresh working copy of the original fixture tree."""
    return filtered_copy(ORIGINAL_DIR, tmp_path / "actual")


@pytest.fixture
def fixture_resolver() -> DictionaryConceptResolver:
    return DictionaryConceptResolver(concepts=FIXTURE_CONCEPTS)


@pytest.fixture
def make_project(tmp_path: Path) -> Callable[[str], Path]:
    """Return a factory that writes a main.yaml and returns the project root."""

    def _make(config_yaml: str) -> Path:
        config_dir = paths.get_config_dir(tmp_path)
        config_dir.mkdir(parents=True, exist_ok=True)
        (config_dir / paths.CONFIG_FILE_NAMES[0]).write_text(config_yaml, encoding="utf-8")
        return tmp_path

    return _make

"""
Locations inside an HL7Annotate project.

A project is the folder that holds the extracted InfoPath form packages (each
a directory of ``view*.xsl`` files next to its ``manifest.xsf``) together with
a ``.hl7annotate`` folder::

    .hl7annotate/
        configs/main.yaml   tasks and resolver settings
        logs/               debug log of the last run
        reports/            dry-run reports

The tool can be started from any folder inside the project; the root is found
by walking up to the first ancestor that has a configuration file.
"""

from functools import lru_cache
from pathlib import Path
from typing import Final

CONFIG_FILE_NAMES: Final[list[str]] = ["main.yaml", "main.yml"]
ANCHOR_SUBDIR: Final[Path] = Path(".hl7annotate")


def _existing_config_file(config_dir: Path) -> Path | None:
    """Return the first of CONFIG_FILE_NAMES present in `config_dir`."""
    for name in CONFIG_FILE_NAMES:
        candidate = config_dir / name
        if candidate.is_file():
            return candidate
    return None


@lru_cache(maxsize=1)
def find_project_root(start_path: Path | None = None) -> Path:
    """
    Return the project folder that `start_path` (or the CWD) belongs to.

    Raises:
        FileNotFoundError: If neither the start folder nor any of its
            ancestors has a ``.hl7annotate/configs/main.yaml``.

    """
    start = (start_path or Path.cwd()).resolve()
    for candidate in (start, *start.parents):
        if _existing_config_file(get_config_dir(candidate)) is not None:
            return candidate

    expected = ANCHOR_SUBDIR / "configs" / CONFIG_FILE_NAMES[0]
    msg = f"No HL7Annotate project found at or above {start} (looked for {expected}). Run 'hl7annotate init' in the folder that holds your form packages."
    raise FileNotFoundError(msg)


def get_config_dir(root_path: Path) -> Path:
    return root_path / ANCHOR_SUBDIR / "configs"


def get_config_file_path(root_path: Path | None = None) -> Path:
    """Return the configuration file of the project containing `root_path`."""
    config_file = _existing_config_file(get_config_dir(find_project_root(root_path)))
    if config_file is None:
        msg = "The project's configuration file was removed while HL7Annotate was starting up."
        raise FileNotFoundError(msg)
    return config_file


def get_log_dir(root_path: Path | None = None) -> Path:
    """Return the folder that receives the debug log."""
    return find_project_root(root_path) / ANCHOR_SUBDIR / "logs"


def get_report_dir(root_path: Path | None = None) -> Path:
    """Return the folder that receives dry-run reports."""
    return find_project_root(root_path) / ANCHOR_SUBDIR / "reports"


def ensure_dir_exists(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)

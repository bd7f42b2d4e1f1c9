"""Shared file I/O for the processors."""

import logging
from pathlib import Path

__all__ = ["read_source", "write_source"]

logger = logging.getLogger(__name__)


def read_source(file_path: Path, encoding: str = "utf-8") -> str:
    """Read a file without newline translation, so spans and line endings survive a rewrite."""
    with file_path.open(encoding=encoding, newline="") as f:
        return f.read()


def write_source(output_path: Path, content: str, encoding: str = "utf-8") -> None:
    """Write content exactly as given, creating parent directories as needed."""
    if output_path.parent.is_file():
        logger.warning("Output directory path %s exists as a file. Deleting it to create directory.", output_path.parent)
        output_path.parent.unlink()
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with output_path.open("w", encoding=encoding, newline="") as f:
        f.write(content)

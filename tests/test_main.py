"""Tests for the main CLI entry point."""

import unittest
from argparse import Namespace
from collections.abc import Iterator
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from hl7annotate.__main__ import _init_project, _load_config, _parse_args, _run_tasks, main
from hl7annotate.config import AnnotatorConfig
from hl7annotate.paths import get_config_dir
from hl7annotate.types import AnnotationTask


class TestParseArgs(unittest.TestCase):
    """Test suite for CLI argument parsing."""

    def test_parse_args_run_defaults(self) -> None:
        """1. Default Args: 'run' defaults to the current directory with all flags False."""
        args = _parse_args(["run"])
        assert isinstance(args, Namespace)
        assert args.command == "run"
        assert args.path == "."
        assert args.debug is False
        assert args.dry_run is False

    def test_parse_args_run_flags(self) -> None:
        """2. Flags: Correctly parses --dry-run, --debug and a path."""
        args = _parse_args(["run", "--dry-run", "--debug", "forms"])
        assert args.dry_run is True
        assert args.debug is True
        assert args.path == "forms"

    def test_parse_args_debug_before_command(self) -> None:
        """3. Debug Flag: --debug before the subcommand is kept."""
        args = _parse_args(["--debug", "run"])
        assert args.debug is True

    def test_parse_args_init(self) -> None:
        """4. Init: Parses the init command and its path."""
        args = _parse_args(["init", "project"])
        assert args.command == "init"
        assert args.path == "project"
        assert args.debug is False

    @patch("sys.argv", ["hl7annotate"])
    def test_parse_args_no_arguments(self) -> None:
        """5. No Args: Prints help and exits with an error code."""
        with pytest.raises(SystemExit) as exc_info:
            _parse_args()
        assert exc_info.value.code == 1

    def test_parse_args_version_flag(self) -> None:
        """6. Version Flag: --version triggers SystemExit with version output."""
        with pytest.raises(SystemExit) as exc_info:
            _parse_args(["--version"])
        assert exc_info.value.code == 0


class TestLoadConfig(unittest.TestCase):
    """Test suite for configuration loading."""

    @patch("hl7annotate.__main__.paths.get_config_file_path")
    @patch("hl7annotate.__main__.load_config")
    def test_load_config_success(self, mock_load_config: MagicMock, mock_get_path: MagicMock) -> None:
        """1. Success: Successfully loads configuration from the default path."""
        mock_config_path = Path("/project/.hl7annotate/configs/main.yaml")
        mock_get_path.return_value = mock_config_path
        mock_config = AnnotatorConfig()
        mock_load_config.return_value = mock_config

        with self.assertLogs("hl7annotate.__main__", level="INFO") as cm:
            result = _load_config()

        assert result is mock_config
        mock_get_path.assert_called_once()
        mock_load_config.assert_called_once_with(str(mock_config_path))
        assert any("Loading configuration from:" in log for log in cm.output)

    @patch("hl7annotate.__main__.paths.get_config_file_path")
    def test_load_config_file_not_found(self, mock_get_path: MagicMock) -> None:
        """2. FileNotFoundError: Returns None and logs exception when no project is found."""
        mock_get_path.side_effect = FileNotFoundError("Cannot find project root")

        with self.assertLogs("hl7annotate.__main__", level="ERROR") as cm:
            result = _load_config()

        assert result is None
        assert any("Could not find a valid configuration file" in log for log in cm.output)

    @patch("hl7annotate.__main__.paths.get_config_file_path")
    @patch("hl7annotate.__main__.load_config")
    def test_load_config_unexpected_exception(self, mock_load_config: MagicMock, mock_get_path: MagicMock) -> None:
        """3. Unexpected Error: Returns None and logs exception on invalid configuration."""
        mock_get_path.return_value = Path("/project/.hl7annotate/configs/main.yaml")
        mock_load_config.side_effect = ValueError("Invalid or missing configuration")

        with self.assertLogs("hl7annotate.__main__", level="ERROR") as cm:
            result = _load_config()

        assert result is None
        assert any("An unexpected error occurred while loading the configuration" in log for log in cm.output)


class TestRunTasks(unittest.TestCase):
    """Test suite for task iteration."""

    @patch("hl7annotate.__main__.run_task")
    def test_disabled_tasks_are_skipped(self, mock_run_task: MagicMock) -> None:
        """1. Enabled: Only enabled tasks are run, with the given flags."""
        enabled = AnnotationTask(name="enabled")
        disabled = AnnotationTask(name="disabled", enabled=False)
        config = AnnotatorConfig(tasks=[enabled, disabled])

        with self.assertLogs("hl7annotate.__main__", level="INFO") as cm:
            _run_tasks(config, Path("/project"), dry_run=True, debug=False)

        mock_run_task.assert_called_once_with(enabled, config, Path("/project"), dry_run=True, debug=False)
        assert any("Skipping disabled task: 'disabled'" in log for log in cm.output)


@pytest.fixture
def no_logging_setup() -> Iterator[MagicMock]:
    with patch("hl7annotate.__main__.setup_logging") as mock_setup:
        yield mock_setup


def test_init_creates_project_files(tmp_path: Path) -> None:
    _init_project(tmp_path)

    assert (get_config_dir(tmp_path) / "main.yaml").is_file()
    assert (tmp_path / ".hl7annotate" / "concepts.yaml").is_file()


def test_init_keeps_existing_config(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    config_file = get_config_dir(tmp_path) / "main.yaml"
    config_file.parent.mkdir(parents=True)
    config_file.write_text("tasks: []\n", encoding="utf-8")

    _init_project(tmp_path)

    assert config_file.read_text(encoding="utf-8") == "tasks: []\n"
    assert "Configuration file already exists" in caplog.text


@pytest.mark.usefixtures("no_logging_setup")
def test_main_init_then_run_annotates_forms(tmp_path: Path) -> None:
    form = tmp_path / "forms" / "view1.xsl"
    form.parent.mkdir()
    form.write_text('<input xd:onValue="1107^NONE^99DCT"/>\n<input xd:onValue="9999^OTHER^99DCT"/>\n', encoding="utf-8")

    main(["init", str(tmp_path)])
    main(["run", str(tmp_path)])

    assert form.read_text(encoding="utf-8") == '<input xd:onValue="1107^NONE^99DCT^NONE^99DCT"/>\n<input xd:onValue="9999^OTHER^99DCT"/>\n'


@pytest.mark.usefixtures("no_logging_setup")
def test_main_dry_run_leaves_forms_untouched(tmp_path: Path) -> None:
    form = tmp_path / "view1.xsl"
    form.write_text('"1107^NONE^99DCT"', encoding="utf-8")

    main(["init", str(tmp_path)])
    main(["run", "--dry-run", str(tmp_path)])

    assert form.read_text(encoding="utf-8") == '"1107^NONE^99DCT"'
    assert (tmp_path / ".hl7annotate" / "reports" / "Annotate form templates_dry_run.md").is_file()


@pytest.mark.usefixtures("no_logging_setup")
def test_main_without_config_exits(tmp_path: Path) -> None:
    with pytest.raises(SystemExit) as exc_info:
        main(["run", str(tmp_path)])
    assert exc_info.value.code == 1


@pytest.mark.usefixtures("no_logging_setup")
def test_main_rejects_missing_directory(tmp_path: Path) -> None:
    with pytest.raises(SystemExit) as exc_info:
        main(["run", str(tmp_path / "missing")])
    assert exc_info.value.code == 1


@pytest.mark.usefixtures("no_logging_setup")
def test_main_exits_on_unexpected_error(tmp_path: Path) -> None:
    main(["init", str(tmp_path)])

    with patch("hl7annotate.__main__.run_task", side_effect=RuntimeError("boom")), pytest.raises(SystemExit) as exc_info:
        main(["run", str(tmp_path)])
    assert exc_info.value.code == 1


def test_main_passes_debug_to_logging(tmp_path: Path, no_logging_setup: MagicMock) -> None:
    main(["init", "--debug", str(tmp_path)])

    no_logging_setup.assert_called_once()
    assert no_logging_setup.call_args.kwargs["debug"] is True
    assert no_logging_setup.call_args.kwargs["project_root"] == tmp_path.resolve()

"""Main entry point for the HL7Annotate command-line interface."""

import argparse
import logging
import sys
from pathlib import Path

from . import __version__, paths
from .config import AnnotatorConfig, load_config
from .logging_utils import setup_logging
from .templates import DEFAULT_CONCEPTS_YAML, DEFAULT_CONFIG_YAML
from .workflow import run_task

logger = logging.getLogger(__name__)


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """
    Parse command-line arguments for the HL7Annotate CLI.

    Returns:
        argparse.Namespace: An object containing the parsed command-line arguments.

    """
    parser = argparse.ArgumentParser(description="Append concept names to HL7 coded values in InfoPath XSL files.")
    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"HL7Annotate {__version__}",
        help="Show the version number and exit.",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug level logging.",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    init_parser = subparsers.add_parser("init", help="Initialize a new HL7Annotate project.")
    init_parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="The directory to initialize the project in (default: current directory).",
    )
    init_parser.add_argument("--debug", action="store_true", default=argparse.SUPPRESS, help="Enable debug level logging.")

    run_parser = subparsers.add_parser("run", help="Run annotation tasks.")
    run_parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="The directory to run HL7Annotate in (default: current directory).",
    )
    run_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Report what would be annotated without modifying any files.",
    )
    run_parser.add_argument("--debug", action="store_true", default=argparse.SUPPRESS, help="Enable debug level logging.")

    args_list = sys.argv[1:] if argv is None else argv
    if not args_list:
        parser.print_help(sys.stderr)
        sys.exit(1)

    return parser.parse_args(args_list)


def _init_project(target_path: Path) -> None:
    """Initialize a new HL7Annotate project structure."""
    path = target_path.resolve()
    logger.info("Initializing HL7Annotate project in: %s", path)

    config_dir = paths.get_config_dir(path)
    config_file = config_dir / paths.CONFIG_FILE_NAMES[0]
    concepts_file = path / paths.ANCHOR_SUBDIR / "concepts.yaml"

    if config_file.exists():
        logger.warning("Configuration file already exists at: %s", config_file)
        return

    try:
        paths.ensure_dir_exists(config_dir)
        config_file.write_text(DEFAULT_CONFIG_YAML, encoding="utf-8")
        logger.info("Created default configuration at: %s", config_file)
        if not concepts_file.exists():
            concepts_file.write_text(DEFAULT_CONCEPTS_YAML, encoding="utf-8")
            logger.info("Created sample concept dictionary at: %s", concepts_file)
        logger.info("Project initialized successfully!")
    except OSError:
        logger.exception("Failed to initialize project")
        sys.exit(1)


def _load_config(root_path: Path | None = None) -> AnnotatorConfig | None:
    """
    Load configuration from the fixed file path relative to root_path.

    Returns:
        An optional AnnotatorConfig object if loading is successful, otherwise None.

    """
    try:
        config_path = paths.get_config_file_path(root_path)
        logger.info("Loading configuration from: %s", config_path)
        return load_config(str(config_path))
    except FileNotFoundError:
        logger.exception("Could not find a valid configuration file.")
        return None
    except Exception:
        logger.exception("An unexpected error occurred while loading the configuration.")
        return None


def _run_tasks(config: AnnotatorConfig, project_root: Path, *, dry_run: bool, debug: bool) -> None:
    """
    Iterate over and execute all enabled annotation tasks.

    Args:
        config: The application's configuration object.
        project_root: The root path of the project.
        dry_run: A flag indicating whether to perform a dry run.
        debug: A flag indicating whether to run in debug mode.

    """
    for task in config.tasks:
        if task.enabled:
            logger.info("Running Task: '%s'", task.name)
            logger.debug("Starting task '%s' with config: %s", task.name, task.model_dump_json(indent=2))
            run_task(task, config, project_root, dry_run=dry_run, debug=debug)
        else:
            logger.info("Skipping disabled task: '%s'", task.name)


def _validate_directory(path: Path) -> None:
    """Exit with an error unless `path` is an existing directory."""
    if not path.exists():
        logger.error("Path does not exist: %s", path)
        sys.exit(1)
    if not path.is_dir():
        logger.error("Path is not a directory: %s", path)
        sys.exit(1)


def main(argv: list[str] | None = None) -> None:
    """
    Run the main entry point for the HL7Annotate command-line interface.

    Orchestrates the entire process:
    1. Parses command-line arguments.
    2. Loads the configuration.
    3. Runs all enabled tasks.
    """
    try:
        args = _parse_args(argv)
        target_path = Path(getattr(args, "path", ".")).resolve()
        _validate_directory(target_path)
        setup_logging(version=__version__, debug=args.debug, project_root=target_path)

        if args.command == "init":
            _init_project(target_path)
            return

        config = _load_config(target_path)
        if config is None:
            logger.critical("Failed to load configuration. Aborting.")
            sys.exit(1)

        _run_tasks(
            config,
            paths.find_project_root(target_path),
            dry_run=getattr(args, "dry_run", False),
            debug=args.debug,
        )
    except SystemExit:
        raise
    except Exception:
        logger.exception("An unexpected error occurred")
        logger.critical("An unrecoverable error occurred. Please check the logs for details.")
        sys.exit(1)

    logger.info("All tasks completed.")


if __name__ == "__main__":
    main()

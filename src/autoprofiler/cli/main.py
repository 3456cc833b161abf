"""
Command-line interface for the autoprofiler application.

This module provides the main CLI entry point: it loads the configuration,
applies command-line overrides, finds the flow definitions, runs the
automation and exports the results.
"""

import argparse
import dataclasses
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..automation import AutomationRunner
from ..config import (
    DEFAULT_FLOW_FILENAMES,
    find_flows_file,
    get_config,
    load_flows_file,
    set_config_path,
    validate_automation_config,
)
from ..models.config import AppConfig, AutomationConfig
from ..storage import ResultsExporter
from ..utils import run_timestamp
from ..validation import (
    AutomationError,
    ValidationError,
    handle_cli_error,
    validate_positive_integer,
    validate_url,
)

# --- Logging Setup ---
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)-5.5s] %(name)s:%(filename)s:%(lineno)d\t %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    stream=sys.stdout,
)
logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="autoprofiler",
        description="Run scripted interaction flows against a page and average its render samples.",
    )
    parser.add_argument(
        "--page",
        type=str,
        help="URL of the page under test. Defaults to automation.browser.url from config.",
    )
    parser.add_argument(
        "--average-of",
        type=str,
        help="Number of independent repetitions to run and average (1-100).",
    )
    parser.add_argument(
        "--include-mount",
        action="store_true",
        default=None,
        help="Record the initial mount render under the 'Mount' key.",
    )
    parser.add_argument(
        "--output",
        choices=["json", "chart"],
        help="Output type: results bundle only, or results plus HTML charts.",
    )
    parser.add_argument(
        "--flows",
        type=Path,
        help=f"Flow definition file. Defaults to [paths].flows_config or one of {list(DEFAULT_FLOW_FILENAMES)} in the current directory.",
    )
    parser.add_argument(
        "--headless",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Run the browser headless (default from config).",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to the main config.toml file.",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        help="Directory where run outputs are written. Defaults to automation.general.output_dir.",
    )
    parser.add_argument(
        "--charts-from",
        type=Path,
        metavar="RUN_DIR",
        help="Re-render the charts of an earlier run directory from its sample table, without running any flows.",
    )
    return parser


def load_app_config(config_path: Optional[Path]) -> AppConfig:
    """
    Load the application configuration for a CLI run.

    An explicit ``--config`` must exist. Without one, the default config file
    is used when present and built-in defaults otherwise.
    """
    if config_path is not None:
        set_config_path(config_path)
        return get_config()

    try:
        return get_config()
    except FileNotFoundError:
        logger.info("No configuration file found, using built-in defaults")
        return AppConfig(automation=validate_automation_config({}, Path.cwd()))


def apply_overrides(settings: AutomationConfig, args: argparse.Namespace) -> AutomationConfig:
    """
    Return ``settings`` with the command-line arguments applied.

    Raises:
        ValidationError: If an argument value is invalid
    """
    overrides: Dict[str, Any] = {}
    if args.average_of is not None:
        overrides["average_of"] = validate_positive_integer(
            args.average_of, min_value=1, max_value=100, field_name="--average-of argument"
        )
    if args.include_mount is not None:
        overrides["include_mount"] = args.include_mount
    if args.output is not None:
        overrides["output"] = args.output
    if args.output_dir is not None:
        overrides["output_dir"] = args.output_dir

    browser_overrides: Dict[str, Any] = {}
    if args.page is not None:
        browser_overrides["url"] = validate_url(args.page, field_name="--page argument")
    if args.headless is not None:
        browser_overrides["headless"] = args.headless
    if browser_overrides:
        overrides["browser"] = dataclasses.replace(settings.browser, **browser_overrides)

    return dataclasses.replace(settings, **overrides)


def resolve_flows_file(flows_arg: Optional[Path], app_config: AppConfig) -> Path:
    """
    Pick the flow definition file: argument, then config, then the current directory.

    Raises:
        FileNotFoundError: If no flow definition file can be found
    """
    if flows_arg is not None:
        return flows_arg
    if app_config.flows_file is not None:
        return app_config.flows_file

    found = find_flows_file(Path.cwd())
    if found is None:
        raise FileNotFoundError(
            f"No flow definition file found. Create one of {list(DEFAULT_FLOW_FILENAMES)} "
            f"at the root of your repo or pass --flows."
        )
    return found


def render_existing_run(run_dir: Path) -> None:
    """
    Re-render the charts of a run directory written by an earlier export.

    Raises:
        SystemExit: If the directory holds no readable sample table.
    """
    try:
        written = ResultsExporter.for_existing_run(run_dir).render_charts()
    except (FileNotFoundError, ValueError) as e:
        handle_cli_error(error=e, context="chart rendering", exit_code=1, logger=logger)

    logger.info(f"Rendered {len(written)} chart(s) in: {run_dir}")


def main_cli(argv: Optional[List[str]] = None) -> None:
    """
    Main command-line interface for the autoprofiler application.

    Exits with status 0 when the run and the export succeed, 1 otherwise.

    Raises:
        SystemExit: On configuration errors, validation failures, or run problems.
    """
    args = build_parser().parse_args(argv)
    logger.info("Starting autoprofiler")

    if args.charts_from is not None:
        render_existing_run(args.charts_from)
        return

    try:
        app_config = load_app_config(args.config)
        settings = apply_overrides(app_config.automation, args)
    except (FileNotFoundError, ValidationError, ValueError) as e:
        handle_cli_error(
            error=e,
            context="configuration loading",
            exit_code=1,
            include_traceback=True,
            logger=logger,
        )

    try:
        flows_path = resolve_flows_file(args.flows, app_config)
        flows = load_flows_file(flows_path)
        logger.info(f"Loaded {len(flows)} flow(s) from {flows_path}")
    except (FileNotFoundError, ValidationError, ValueError) as e:
        handle_cli_error(
            error=e,
            context="flow definition loading",
            exit_code=1,
            logger=logger,
        )

    current_run_output_dir = Path(settings.output_dir) / f"run_{run_timestamp()}"
    logger.info(f"Results will be saved in: {current_run_output_dir}")

    try:
        runner = AutomationRunner(settings, flows)
        results = runner.run()
    except KeyboardInterrupt:
        logger.warning("Automation interrupted by user.")
        sys.exit(1)
    except (AutomationError, ValidationError) as e:
        handle_cli_error(error=e, context="automation run", exit_code=1, logger=logger)
    except Exception as e:
        handle_cli_error(
            error=e,
            context=f"automation run ({type(e).__name__})",
            exit_code=1,
            logger=logger,
        )

    try:
        exporter = ResultsExporter(
            current_run_output_dir,
            settings.storage,
            run_info={
                "Page": settings.browser.url,
                "Repetitions": settings.average_of,
                "Include mount": settings.include_mount,
                "Flows file": flows_path,
            },
        )
        exporter.export(results, settings.output)
    except Exception as e:
        handle_cli_error(error=e, context="results export", exit_code=1, logger=logger)

    if runner.exhausted_flows:
        logger.info(
            f"Flows skipped after exhausting retries: {', '.join(runner.exhausted_flows)}"
        )
    logger.info("Automation completed.")


if __name__ == "__main__":
    main_cli()

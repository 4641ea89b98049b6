import json
import logging
from pathlib import Path
from typing import Optional

import click

from lockwatch.__version__ import __version__
from lockwatch.config import COLOR_CHOICES, DEFAULT_CONFIG_FILE, OutputFormat, load_config
from lockwatch.core.errors import LockwatchError, ReportError
from lockwatch.core.lockfile import Lockfile
from lockwatch.core.model import Report
from lockwatch.presenter import Presenter

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


def configure_logging(log_file: Optional[str]) -> None:
    """Logs go to a file at DEBUG, or to stderr at WARNING; stdout is for the report."""
    if log_file:
        logging.basicConfig(filename=log_file, level=logging.DEBUG, filemode="w", format=LOG_FORMAT)
    else:
        logging.basicConfig(level=logging.WARNING, format=LOG_FORMAT)


def load_report(source) -> Report:
    try:
        data = json.load(source)
    except json.JSONDecodeError as e:
        raise ReportError(f"Report is not valid JSON: {e}") from e

    return Report.from_dict(data)


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--lockfile",
    "lockfile_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default="Cargo.lock",
    show_default=True,
    help="Lockfile the report was produced from.",
)
@click.option(
    "--report",
    "report_file",
    type=click.File("r"),
    required=True,
    help="Audit report as JSON ('-' reads stdin).",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help=f"Output configuration file (default: {DEFAULT_CONFIG_FILE} if present).",
)
@click.option("--json", "as_json", is_flag=True, default=False, help="Print the report as JSON.")
@click.option("-q", "--quiet", is_flag=True, default=False, help="Skip the scanning status line.")
@click.option("--no-tree", is_flag=True, default=False, help="Do not draw dependency trees.")
@click.option("--color", type=click.Choice(COLOR_CHOICES), default=None, help="When to use colors.")
@click.option("--log-file", type=click.Path(dir_okay=False), default=None, help="Write debug logs to this file.")
@click.version_option(version=__version__, prog_name="lockwatch")
def cli(
    lockfile_path: Path,
    report_file,
    config_path: Optional[Path],
    as_json: bool,
    quiet: bool,
    no_tree: bool,
    color: Optional[str],
    log_file: Optional[str],
) -> None:
    """Print the results of a dependency vulnerability audit."""
    configure_logging(log_file)

    try:
        config = load_config(config_path).merge(
            format=OutputFormat.JSON if as_json else None,
            quiet=quiet or None,
            show_tree=False if no_tree else None,
            color=color,
        )

        lockfile = Lockfile.load(lockfile_path)
        presenter = Presenter(config)
        presenter.before_scan(lockfile_path, lockfile)

        report = load_report(report_file)
        presenter.present_report(report, lockfile)

    except LockwatchError as e:
        logging.debug("Fatal error while presenting report:", exc_info=True)
        raise click.ClickException(str(e)) from e

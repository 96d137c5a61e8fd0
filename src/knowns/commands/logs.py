"""
Log commands: inspect the Knowns CLI log file.
"""

from datetime import datetime
from pathlib import Path
from typing import List, Optional

import typer
from rich.syntax import Syntax

from knowns.constants import LOG_APP_NAME, LOG_FILE_NAME, LOG_LINES_TO_SHOW
from knowns.logging import get_logger, setup_logging
from knowns.logging.config import LogConfig, get_log_directory, get_log_file_path
from knowns.logging.utils import format_size
from knowns.utils.console import console, create_table, error, info, warning

app = typer.Typer(help="Inspect Knowns logs")


def tail_log(log_file: Path, lines: int, level: Optional[str] = None) -> List[str]:
    """Last `lines` entries of the log, optionally only those at one level"""
    with open(log_file, "r", encoding="utf-8", errors="replace") as f:
        entries = f.readlines()

    if level:
        marker = f" {level.upper()} ["
        entries = [line for line in entries if marker in line]
    return entries[-lines:] if lines > 0 else []


@app.command("show")
def show_logs(
    lines: int = typer.Option(
        LOG_LINES_TO_SHOW, "--lines", "-n", help="Number of lines to show"
    ),
    level: Optional[str] = typer.Option(
        None, "--level", help="Filter by log level (DEBUG, INFO, WARNING, ERROR)"
    ),
) -> None:
    """Show recent log entries"""
    setup_logging()
    logger = get_logger("knowns.commands.logs")

    log_file = get_log_file_path()
    if not log_file.exists():
        warning(f"No log file found. Run some {LOG_APP_NAME} commands to generate logs.")
        return

    try:
        display_lines = tail_log(log_file, lines, level)
    except OSError as e:
        logger.error(f"Failed to read log file {log_file}: {e}")
        error(f"Failed to show logs: {e}")
        raise typer.Exit(1)

    if not display_lines:
        info("No log entries found matching the criteria.")
        return

    console.print(Syntax("".join(display_lines), "log", theme="monokai"))


@app.command("info")
def log_info() -> None:
    """Show log configuration and file information"""
    setup_logging()

    config = LogConfig()
    log_file = get_log_file_path(config)
    log_dir = get_log_directory()

    table = create_table(f"{LOG_APP_NAME} Log Information", ["Setting", "Value"])
    table.add_row("Log Directory", str(log_dir))
    table.add_row("Log File", str(log_file))
    table.add_row("Log Level", config.default_level.value)
    table.add_row("Retention Days", str(config.log_retention_days))

    if log_file.exists():
        stat = log_file.stat()
        table.add_row("Current Size", format_size(stat.st_size))
        table.add_row(
            "Last Modified",
            datetime.fromtimestamp(stat.st_mtime).strftime("%Y-%m-%d %H:%M:%S"),
        )
    else:
        table.add_row("Current Size", "File not found")

    rotated = list(log_dir.glob(f"{LOG_FILE_NAME}.log.*"))
    table.add_row("Rotated Files", str(len(rotated)))
    console.print(table)

"""
Utility modules for docmake
"""

import shlex
import subprocess
import sys
import logging
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Sequence

from ..exceptions import CommandError, DocmakeError


class ColoredFormatter(logging.Formatter):
    """Colored log formatter for terminal output"""

    COLORS = {
        'DEBUG': '\033[36m',    # Cyan
        'INFO': '\033[32m',     # Green
        'WARNING': '\033[33m',  # Yellow
        'ERROR': '\033[31m',    # Red
        'CRITICAL': '\033[35m', # Magenta
        'SUCCESS': '\033[92m',  # Bright Green
        'RESET': '\033[0m'
    }

    def format(self, record):
        if hasattr(record, 'raw') and record.raw:
            return record.getMessage()

        if sys.stdout.isatty():
            color = self.COLORS.get(record.levelname, self.COLORS['RESET'])
            reset = self.COLORS['RESET']

            record.levelname = f"{color}{record.levelname}{reset}"
            record.msg = f"{color}{record.msg}{reset}"

        return super().format(record)


class ConsoleHandler(logging.StreamHandler):
    """StreamHandler that writes to whatever sys.stdout is when a record is emitted"""

    def __init__(self):
        super().__init__(sys.stdout)

    @property
    def stream(self):
        return sys.stdout

    @stream.setter
    def stream(self, value):
        pass


class Logger:
    """docmake logger"""

    SUCCESS = 25  # Between INFO and WARNING

    def __init__(self, verbose: bool = False, log_file: Optional[str] = None):
        """
        Initialize logger

        Args:
            verbose: Enable verbose output
            log_file: Optional log file path
        """
        self.verbose = verbose

        logging.addLevelName(self.SUCCESS, "SUCCESS")

        self.logger = logging.getLogger("docmake")
        self.logger.setLevel(logging.DEBUG if verbose else logging.INFO)
        self.logger.propagate = False

        # Re-initialising replaces the previous handlers
        self.logger.handlers.clear()

        console_handler = ConsoleHandler()
        console_handler.setLevel(logging.DEBUG if verbose else logging.INFO)

        if verbose:
            fmt = "%(asctime)s [%(levelname)s] %(message)s"
        else:
            fmt = "[%(levelname)s] %(message)s"

        console_formatter = ColoredFormatter(fmt, datefmt="%H:%M:%S")
        console_handler.setFormatter(console_formatter)
        self.logger.addHandler(console_handler)

        if log_file:
            file_handler = logging.FileHandler(log_file)
            file_handler.setLevel(logging.DEBUG)
            file_formatter = logging.Formatter(
                "%(asctime)s [%(levelname)s] %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S"
            )
            file_handler.setFormatter(file_formatter)
            self.logger.addHandler(file_handler)

    def debug(self, msg: str):
        """Log debug message"""
        self.logger.debug(msg)

    def info(self, msg: str):
        """Log info message"""
        self.logger.info(msg)

    def warning(self, msg: str):
        """Log warning message"""
        self.logger.warning(msg)

    def error(self, msg: str):
        """Log error message"""
        self.logger.error(msg)

    def success(self, msg: str):
        """Log success message"""
        self.logger.log(self.SUCCESS, msg)

    def raw(self, msg: str):
        """Log raw message without formatting"""
        record = self.logger.makeRecord(
            self.logger.name, logging.INFO, "", 0, msg, (), None
        )
        record.raw = True
        self.logger.handle(record)


def format_command(cmd: Sequence) -> str:
    """Render a command list the way a user would type it in a shell"""
    return shlex.join(str(c) for c in cmd)


def run_command(cmd: Sequence,
                logger: Any,
                dry_run: bool = False,
                cwd: Optional[Path] = None,
                env: Optional[Dict[str, str]] = None,
                capture_output: bool = False) -> subprocess.CompletedProcess:
    """
    Run a command with logging

    A non-zero exit is returned to the caller, not raised. In a dry run the
    command is only logged.

    Args:
        cmd: Command and arguments
        logger: Logger instance
        dry_run: Log the command instead of running it
        cwd: Working directory
        env: Environment variables
        capture_output: Capture stdout/stderr

    Returns:
        CompletedProcess instance
    """
    cmd = [str(c) for c in cmd]
    cmd_str = format_command(cmd)

    if dry_run:
        logger.info(f"[DRY RUN] Would run: {cmd_str}")
        return subprocess.CompletedProcess(cmd, 0, "", "")

    logger.debug(f"Running: {cmd_str}")
    if cwd is not None:
        logger.debug(f"  in: {cwd}")

    try:
        result = subprocess.run(
            cmd,
            cwd=cwd,
            env=env,
            check=False,
            capture_output=capture_output,
            text=True
        )
    except FileNotFoundError as e:
        raise CommandError(f"Could not execute {cmd[0]}: {e}") from e

    if result.returncode != 0:
        logger.error(f"Command failed with return code {result.returncode}: {cmd_str}")
        if capture_output and result.stderr:
            logger.error(f"stderr: {result.stderr}")
    elif capture_output and result.stdout:
        logger.debug(f"Output: {result.stdout}")

    return result


def exit_code(returncode: Optional[int]) -> int:
    """
    Shell-style exit status for a child's return code

    A child killed by signal N has returncode -N and maps to 128 + N.
    """
    if not returncode:
        return 0
    if returncode < 0:
        return 128 - returncode
    return returncode


def run_cli(func: Callable[[], int], logger: Any) -> int:
    """
    Run an entry point body and turn expected failures into an exit code

    Errors docmake knows about are logged without a traceback. A failing
    external command hands back its own return code.
    """
    try:
        return exit_code(func())
    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        return 130
    except CommandError as e:
        logger.error(str(e))
        return exit_code(e.returncode) or 1
    except DocmakeError as e:
        logger.error(str(e))
        return 1


__all__ = ["Logger", "ColoredFormatter", "ConsoleHandler", "exit_code", "format_command", "run_command", "run_cli"]

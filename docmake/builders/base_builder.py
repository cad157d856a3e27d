"""
Base builder class that all builders inherit from
"""

import os
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Optional, Any

from ..exceptions import ProjectError
from ..utils import run_command


class BaseBuilder(ABC):
    """Abstract base class for all builders"""

    def __init__(self,
                 source_dir: Path,
                 logger: Any,
                 dry_run: bool = False):
        """
        Initialize base builder

        Args:
            source_dir: Source checkout the builder is run from
            logger: Logger instance
            dry_run: If True, don't actually run commands or touch the filesystem
        """
        self.source_dir = Path(source_dir)
        self.logger = logger
        self.dry_run = dry_run

        if not self.source_dir.is_dir():
            raise ProjectError(f"Source directory not found: {self.source_dir}")

        self.env = os.environ.copy()

    def run_command(self,
                    cmd: List[str],
                    cwd: Optional[Path] = None,
                    env: Optional[Dict] = None,
                    capture_output: bool = False) -> subprocess.CompletedProcess:
        """
        Run a command with logging

        Args:
            cmd: Command and arguments
            cwd: Working directory
            env: Environment variables
            capture_output: Capture stdout/stderr

        Returns:
            CompletedProcess instance
        """
        if cwd is None:
            cwd = self.source_dir
        if env is None:
            env = self.env

        return run_command(cmd, self.logger, dry_run=self.dry_run, cwd=cwd, env=env,
                           capture_output=capture_output)

    def link_into(self, target: Path, link_dir: Optional[Path] = None) -> bool:
        """
        Symlink ``target`` into ``link_dir`` under its own basename

        Args:
            target: Directory the link points to
            link_dir: Directory holding the link (default: source directory)

        Returns:
            True if a link was created (or would be, in a dry run)
        """
        if link_dir is None:
            link_dir = self.source_dir
        link_path = Path(link_dir) / Path(target).name

        if self.dry_run:
            self.logger.info(f"[DRY RUN] Will symlink {target} to {link_path}")
            return True

        if link_path.is_symlink() or link_path.exists():
            self.logger.info(f"{link_path.name} already exists. Not linking.")
            return False

        try:
            os.symlink(target, link_path)
        except OSError as e:
            raise ProjectError(f"Could not link {link_path} -> {target}: {e.strerror or e}") from e
        self.logger.info(f"Linked {link_path} -> {target}")
        return True

    @abstractmethod
    def configure(self) -> int:
        """Configure the build"""
        pass

    @abstractmethod
    def install(self) -> int:
        """Build and install"""
        pass

    @abstractmethod
    def test(self) -> int:
        """Build and run the tests"""
        pass

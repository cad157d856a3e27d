"""
Thin wrappers around other command-line tools

``cmpnc4`` compares two netCDF-4 files, ``rgi`` is a case-insensitive
ripgrep, and ``makebench`` times the build+install step of the tree docmake
would use for the same flags.
"""

import argparse
import shutil
import statistics
import sys
import time
from pathlib import Path
from typing import Any, List, Optional, Sequence

from ..config import ConfigLoader
from ..exceptions import CommandError, LocationError
from ..main import add_layout_arguments, join_value_flags, resolve_jobs, resolve_layout
from ..utils import Logger, run_cli, run_command

NCCMP_FLAGS = "-dmfgBq"


def cmpnc4_command(first: str, second: str, extra_args: Sequence[str] = ()) -> List[str]:
    """nccmp: data, metadata, force, global attributes, buffered reads, quiet"""
    return ["nccmp", NCCMP_FLAGS, *extra_args, first, second]


def rgi_command(pattern: str, extra_args: Sequence[str] = ()) -> List[str]:
    return ["rg", "-i", "-e", pattern, *extra_args]


class BuildBenchmark:
    """Times repeated ``cmake --build ... --target install`` runs"""

    def __init__(self,
                 build_dir: Path,
                 jobs: int,
                 logger: Any,
                 cmake: str = "cmake",
                 dry_run: bool = False):
        self.build_dir = Path(build_dir)
        self.jobs = jobs
        self.logger = logger
        self.dry_run = dry_run
        self.cmake = cmake

    def command(self) -> List[str]:
        return [self.cmake, "--build", str(self.build_dir), "--target", "install", "-j", str(self.jobs)]

    def run(self, repeat: int = 1) -> List[float]:
        """
        Run the build ``repeat`` times

        Returns:
            Wall time of each run in seconds (empty for a dry run)
        """
        if self.dry_run:
            run_command(self.command(), self.logger, dry_run=True)
            return []

        if not self.build_dir.is_dir():
            raise LocationError(f"Build directory {self.build_dir} does not exist. Run docmake first.")

        timings = []
        for index in range(repeat):
            start = time.perf_counter()
            result = run_command(self.command(), self.logger)
            elapsed = time.perf_counter() - start
            if result.returncode != 0:
                raise CommandError(f"Build failed on run {index + 1}", result.returncode)
            self.logger.info(f"Run {index + 1}/{repeat}: {elapsed:.2f}s")
            timings.append(elapsed)

        self.logger.success(f"Mean build time over {repeat} run(s): {statistics.mean(timings):.2f}s")
        return timings


def cmpnc4_main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="cmpnc4", description="Compare two netCDF-4 files with nccmp")
    parser.add_argument("first")
    parser.add_argument("second")
    parser.add_argument("--dry-run", dest="dry_run", action="store_true",
                        help="print the nccmp command instead of running it")
    parser.add_argument("extra", nargs=argparse.REMAINDER, help="further nccmp options")
    args = parser.parse_args(argv)

    logger = Logger()
    return run_cli(lambda: run_command(cmpnc4_command(args.first, args.second, args.extra), logger,
                                       dry_run=args.dry_run).returncode, logger)


def rgi_main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="rgi", description="Case-insensitive ripgrep")
    parser.add_argument("pattern")
    parser.add_argument("--dry-run", dest="dry_run", action="store_true",
                        help="print the rg command instead of running it")
    parser.add_argument("extra", nargs=argparse.REMAINDER, help="further rg options and paths")
    args = parser.parse_args(argv)

    logger = Logger()
    return run_cli(lambda: run_command(rgi_command(args.pattern, args.extra), logger,
                                       dry_run=args.dry_run).returncode, logger)


def makebench_main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="makebench",
        description="Time the build+install step of the tree docmake uses for these flags"
    )
    add_layout_arguments(parser)
    parser.add_argument("--repeat", type=int, default=1, help="number of timed builds (default: 1)")
    args = parser.parse_args(join_value_flags(sys.argv[1:] if argv is None else argv))
    if args.repeat < 1:
        parser.error("--repeat must be at least 1")

    logger = Logger(verbose=args.verbose, log_file=args.log_file)

    def bench() -> int:
        config = ConfigLoader()
        layout, _, _ = resolve_layout(args, config, config.cwd)
        cmake = config.cmake_executable()
        if not args.dry_run:
            cmake = shutil.which(cmake)
            if not cmake:
                raise CommandError(f"{config.cmake_executable()} not found in PATH")
        benchmark = BuildBenchmark(layout.build_dir, resolve_jobs(args, config), logger,
                                   cmake=cmake, dry_run=args.dry_run)
        benchmark.run(args.repeat)
        return 0

    return run_cli(bench, logger)


__all__ = [
    "BuildBenchmark",
    "cmpnc4_command",
    "rgi_command",
    "cmpnc4_main",
    "rgi_main",
    "makebench_main",
]

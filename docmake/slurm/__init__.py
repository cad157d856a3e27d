"""
Slurm helpers

``dropin`` attaches an interactive shell to a running job using all of the
job's tasks, and ``sq`` lists the current user's jobs.
"""

import argparse
import getpass
import os
import re
from typing import Any, List, Optional, Sequence

from ..exceptions import CommandError, SlurmError
from ..utils import Logger, run_cli, run_command

NUM_TASKS_RE = re.compile(r"\bNumTasks=(\d+)")

SQUEUE_FORMAT = "%.10i %.9P %.32j %.8u %.8T %.10M %.10l %.6D %R"


def parse_num_tasks(scontrol_output: str) -> int:
    """Pull ``NumTasks`` out of ``scontrol show job`` output"""
    match = NUM_TASKS_RE.search(scontrol_output)
    if not match:
        raise SlurmError("Could not find NumTasks in the scontrol output")
    return int(match.group(1))


class SlurmClient:
    """Thin wrapper around the Slurm command-line tools"""

    def __init__(self, logger: Any, dry_run: bool = False):
        self.logger = logger
        self.dry_run = dry_run

    def job_num_tasks(self, job_id: str) -> int:
        """Number of tasks allocated to ``job_id``"""
        # Read-only query, so it runs even in a dry run
        result = run_command(["scontrol", "show", "job", job_id], self.logger, capture_output=True)
        if result.returncode != 0:
            raise CommandError(f"scontrol could not find job {job_id}", result.returncode)
        return parse_num_tasks(result.stdout)

    def dropin_command(self, job_id: str, num_tasks: int, shell: str = "bash") -> List[str]:
        return ["srun", "-n", str(num_tasks), "--pty", f"--jobid={job_id}", shell]

    def dropin(self, job_id: str, shell: str = "bash") -> int:
        """Open an interactive shell inside ``job_id``"""
        num_tasks = self.job_num_tasks(job_id)
        self.logger.debug(f"Job {job_id} has {num_tasks} tasks")
        return run_command(self.dropin_command(job_id, num_tasks, shell), self.logger,
                           dry_run=self.dry_run).returncode

    def squeue_command(self, user: str, extra_args: Sequence[str] = ()) -> List[str]:
        return ["squeue", "-u", user, "-o", SQUEUE_FORMAT, *extra_args]

    def sq(self, user: Optional[str] = None, extra_args: Sequence[str] = ()) -> int:
        """List ``user``'s jobs"""
        if user is None:
            user = os.environ.get("USER") or getpass.getuser()
        return run_command(self.squeue_command(user, extra_args), self.logger,
                           dry_run=self.dry_run).returncode


def dropin_main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="dropin",
                                     description="Open an interactive shell inside a running Slurm job")
    parser.add_argument("job_id", help="Slurm job id")
    parser.add_argument("--shell", default="bash", help="shell to start (default: bash)")
    parser.add_argument("-n", "--dry-run", dest="dry_run", action="store_true",
                        help="print the srun command instead of running it")
    parser.add_argument("--verbose", "-v", action="store_true", help="enable verbose output")
    args = parser.parse_args(argv)

    logger = Logger(verbose=args.verbose)
    client = SlurmClient(logger, dry_run=args.dry_run)
    return run_cli(lambda: client.dropin(args.job_id, shell=args.shell), logger)


def sq_main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="sq", description="List your Slurm jobs")
    parser.add_argument("-u", "--user", help="user whose jobs are listed (default: $USER)")
    parser.add_argument("--dry-run", dest="dry_run", action="store_true",
                        help="print the squeue command instead of running it")
    args, extra = parser.parse_known_args(argv)

    logger = Logger()
    client = SlurmClient(logger, dry_run=args.dry_run)
    return run_cli(lambda: client.sq(args.user, extra), logger)


__all__ = ["SlurmClient", "parse_num_tasks", "dropin_main", "sq_main"]

"""
CMake builder implementation
"""

import shutil
from pathlib import Path
from typing import List, Sequence, Any

from .base_builder import BaseBuilder
from ..exceptions import CommandError, ProjectError
from ..layout import BuildLayout
from ..utils import format_command

PROJECT_FILE = "CMakeLists.txt"
PROFILE_FILE = "cmake_profile.json"


def check_project(source_dir: Path) -> Path:
    """
    Make sure ``source_dir`` holds a CMake project

    Returns:
        Path of the project file
    """
    project_file = Path(source_dir) / PROJECT_FILE
    if not project_file.is_file():
        raise ProjectError(f"No {PROJECT_FILE} file found in the current directory")
    if "project" not in project_file.read_text(errors="replace"):
        raise ProjectError(f"No project found in the {PROJECT_FILE} file. "
                           "Are you sure this is a CMake project?")
    return project_file


class CMakeBuilder(BaseBuilder):
    """Configures, builds and installs a CMake project into an out-of-tree layout"""

    def __init__(self,
                 source_dir: Path,
                 layout: BuildLayout,
                 logger: Any,
                 build_type: str = "Release",
                 ninja: bool = True,
                 jobs: int = 10,
                 cmake_options: Sequence[str] = (),
                 cmake: str = "cmake",
                 profile: bool = False,
                 link_build: bool = True,
                 link_install: bool = True,
                 dry_run: bool = False):
        super().__init__(source_dir, logger, dry_run=dry_run)
        check_project(self.source_dir)

        self.layout = layout
        self.build_dir = Path(layout.build_dir)
        self.install_dir = Path(layout.install_dir)
        self.build_type = build_type
        self.ninja = ninja
        self.jobs = jobs
        self.cmake_options = list(cmake_options)
        self.profile = profile
        self.link_build = link_build
        self.link_install = link_install

        if self.dry_run:
            self.cmake = cmake
        else:
            self.cmake = shutil.which(cmake)
            if not self.cmake:
                raise CommandError(f"{cmake} not found in PATH")

    @property
    def profile_file(self) -> Path:
        return self.build_dir / PROFILE_FILE

    def configure_command(self) -> List[str]:
        """Generator invocation for the configure step"""
        cmd = [
            self.cmake,
            "-B", str(self.build_dir),
            "-S", ".",
            f"-DCMAKE_BUILD_TYPE={self.build_type}",
            "--install-prefix", str(self.install_dir),
        ]
        if self.ninja:
            cmd.extend(["-G", "Ninja"])
        cmd.extend(self.cmake_options)
        if self.profile:
            cmd.extend([
                "--profiling-format=google-trace",
                f"--profiling-output={self.profile_file}",
            ])
        return cmd

    def build_command(self, target: str) -> List[str]:
        """Build tool invocation for ``target``"""
        return [self.cmake, "--build", str(self.build_dir), "--target", target, "-j", str(self.jobs)]

    def configure(self) -> int:
        """Configure using CMake"""
        if self.profile:
            self.logger.info(f"Profiling enabled: output will be at {self.profile_file}")
        return self.run_command(self.configure_command()).returncode

    def install(self) -> int:
        """Build the install target"""
        return self.run_command(self.build_command("install")).returncode

    def test(self) -> int:
        """Build the tests target"""
        return self.run_command(self.build_command("tests")).returncode

    def install_hint(self) -> str:
        return format_command(self.build_command("install"))

    def execute(self, only_cmake: bool = False, runtests: bool = False) -> int:
        """
        Run the full configure / build+install / test sequence

        Stops at the first failing step.

        Returns:
            Exit code of the last step run
        """
        if self.link_build:
            self.link_into(self.build_dir)

        returncode = self.configure()
        if returncode != 0:
            return returncode

        if only_cmake:
            if not self.dry_run:
                self.logger.raw("")
                self.logger.raw("To install, run:")
                self.logger.raw(self.install_hint())
            return 0

        if self.link_install:
            self.link_into(self.install_dir)

        returncode = self.install()
        if returncode != 0:
            return returncode

        if runtests:
            returncode = self.test()
            if returncode != 0:
                return returncode

        if not self.dry_run:
            self.logger.success(f"Installed {self.source_dir.name} into {self.install_dir}")
        return 0

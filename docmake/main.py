#!/usr/bin/env python3
"""
Main entry point for docmake

Configures, builds and installs a CMake project with its build and install
trees kept out of the source checkout and symlinked back into it.
"""

import argparse
import os
import shlex
import sys
from pathlib import Path
from typing import List, Mapping, Optional, Sequence

from .builders import CMakeBuilder
from .config import (BUILD_LOCATION_VAR, INSTALL_LOCATION_VAR, NUM_JOBS_VAR,
                     ConfigLoader, parse_jobs)
from .layout import compose_layout
from .platform import PlatformDetector, resolve_os_tag
from .utils import Logger, run_cli

MIT_OPTIONS = ["-DBUILD_MIT_OCEAN=ON", "-DMIT_CONFIG_ID=c90_llc90_02"]
NO_F2PY_OPTIONS = ["-DUSE_F2PY:BOOL=OFF"]

EPILOG = """
If the custom build and install directories are not given, the default build
and install directories are:
  $CMAKE_BUILD_LOCATION/$current_basename/build-$build_type
  $CMAKE_INSTALL_LOCATION/$current_basename/install-$build_type
where $current_basename is the name of the directory docmake is called from
and $build_type is the build type (Debug, Aggressive, VectTrap, or Release).
If the Ninja generator is used (default), both directories get "-Ninja"
appended, and with an OS tag they also get "-<tag>" appended.

If the extra option is given, the directories are:
  $CMAKE_BUILD_LOCATION/$current_basename/build-<extra_name>-$build_type
  $CMAKE_INSTALL_LOCATION/$current_basename/install-<extra_name>-$build_type

If a custom build and/or install directory is given, the directories are:
  $CMAKE_BUILD_LOCATION/$current_basename/<custom_build_dir>-$build_type
  $CMAKE_INSTALL_LOCATION/$current_basename/<custom_install_dir>-$build_type
("-$build_type" is left off when the custom name already contains it).

NOTE: CMAKE_BUILD_LOCATION and CMAKE_INSTALL_LOCATION must be set to the
desired build and install locations. These are currently set to:

  CMAKE_BUILD_LOCATION: {build_location}
  CMAKE_INSTALL_LOCATION: {install_location}

If either is set to the string 'pwd', that location becomes the parent of the
current directory, so the tree lands inside the source checkout and is not
symlinked. DOCMAKE_NUM_JOBS sets the default job count.
"""


VALUE_FLAGS = ("--cmake-options", "--extra", "--builddir", "--installdir")


def join_value_flags(argv: Sequence[str], flags: Sequence[str] = VALUE_FLAGS) -> List[str]:
    """
    Glue each ``--flag value`` pair for ``flags`` into ``--flag=value``

    argparse takes a separate word starting with ``-`` for an option, so
    ``--cmake-options -DVAR=A`` would otherwise be a usage error.
    """
    joined: List[str] = []
    words = iter(argv)
    for word in words:
        if word == "--":
            joined.append(word)
            joined.extend(words)
            break
        if word in flags:
            value = next(words, None)
            if value is not None:
                word = f"{word}={value}"
        joined.append(word)
    return joined


def add_layout_arguments(parser: argparse.ArgumentParser) -> None:
    """Options that decide where the build and install trees go"""
    parser.add_argument("--debug", dest="build_type", action="store_const", const="Debug",
                        help="build type is Debug")
    parser.add_argument("--aggressive", dest="build_type", action="store_const", const="Aggressive",
                        help="build type is Aggressive")
    parser.add_argument("--vecttrap", dest="build_type", action="store_const", const="VectTrap",
                        help="build type is VectTrap")
    parser.set_defaults(build_type="Release")

    parser.add_argument("--ninja", dest="generator", action="store_const", const="ninja",
                        help="use Ninja as the build system (default)")
    parser.add_argument("--gnumake", dest="generator", action="store_const", const="gnumake",
                        help="use GNU Make as the build system")

    parser.add_argument("--extra", metavar="EXTRA_NAME",
                        help="use build-<extra_name>-<build_type> and install-<extra_name>-<build_type>")
    parser.add_argument("--builddir", metavar="CUSTOM_BUILD_DIR",
                        help="custom build directory (relative to $CMAKE_BUILD_LOCATION/$current_basename)")
    parser.add_argument("--installdir", metavar="CUSTOM_INSTALL_DIR",
                        help="custom install directory (relative to $CMAKE_INSTALL_LOCATION/$current_basename)")

    parser.add_argument("--os-tag", dest="os_tag", nargs="?", const="auto", metavar="TAG",
                        help="append an OS-version tag to both directories (auto-detected if TAG is omitted)")
    parser.add_argument("--no-os-tag", dest="os_tag", action="store_const", const="",
                        help="do not append an OS-version tag, even if the config file asks for one")

    parser.add_argument("--jobs", metavar="NUMBER_OF_JOBS",
                        help=f"number of jobs to run in parallel (default: ${NUM_JOBS_VAR} or 10)")
    parser.add_argument("-n", "--dryrun", "--dry-run", dest="dry_run", action="store_true",
                        help="print the commands instead of running them")
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="enable verbose output")
    parser.add_argument("--log-file", type=Path,
                        help="also write a full debug log to this file")


def build_parser(environ: Optional[Mapping[str, str]] = None) -> argparse.ArgumentParser:
    """Command-line parser for docmake"""
    environ = os.environ if environ is None else environ
    parser = argparse.ArgumentParser(
        prog="docmake",
        description="Configure, build and install a CMake project out of tree",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=EPILOG.format(
            build_location=environ.get(BUILD_LOCATION_VAR, ""),
            install_location=environ.get(INSTALL_LOCATION_VAR, ""),
        )
    )

    add_layout_arguments(parser)

    parser.add_argument("--only-cmake", action="store_true",
                        help="only run the cmake configure step")
    parser.add_argument("--runtests", action="store_true",
                        help="run the tests after the build and install")
    parser.add_argument("--cmake-options", metavar="ADDITIONAL_CMAKE_OPTIONS", action="append", default=[],
                        help='pass in additional CMake options, e.g. "-DVAR1=A -DVAR2=B" (repeatable)')
    parser.add_argument("--mit", action="store_true",
                        help="build for MIT ocean")
    parser.add_argument("--no-f2py", dest="f2py", action="store_false",
                        help="do not build f2py")
    parser.add_argument("--profile", action="store_true",
                        help="enable CMake profiling (google-trace format), saved to <build_dir>/cmake_profile.json")
    return parser


def resolve_layout(args: argparse.Namespace,
                   config: ConfigLoader,
                   cwd: Path,
                   detector: Optional[PlatformDetector] = None):
    """
    Validate the locations and compose the layout for ``args``

    Returns:
        Tuple of (layout, build location, install location)
    """
    build_location = config.build_location()
    install_location = config.install_location()

    generator = args.generator or config.generator()
    requested_tag = config.os_tag() if args.os_tag is None else (args.os_tag or None)

    layout = compose_layout(
        basename=Path(cwd).name,
        build_root=build_location.path,
        install_root=install_location.path,
        build_type=args.build_type,
        ninja=generator == "ninja",
        extra=args.extra,
        custom_build_dir=args.builddir,
        custom_install_dir=args.installdir,
        os_tag=resolve_os_tag(requested_tag, detector),
    )
    return layout, build_location, install_location


def resolve_jobs(args: argparse.Namespace, config: ConfigLoader) -> int:
    if args.jobs is not None:
        return parse_jobs(args.jobs)
    return config.num_jobs()


class DocMake:
    """Resolves docmake's options into a layout and runs the CMake steps"""

    def __init__(self,
                 args: argparse.Namespace,
                 config: ConfigLoader,
                 logger: Logger,
                 cwd: Optional[Path] = None,
                 detector: Optional[PlatformDetector] = None):
        self.args = args
        self.config = config
        self.logger = logger
        self.cwd = Path(cwd) if cwd is not None else config.cwd
        self.detector = detector

    def cmake_options(self) -> List[str]:
        """Configure options beyond the ones docmake always passes"""
        options = self.config.cmake_options()
        for value in self.args.cmake_options:
            options.extend(shlex.split(value))
        if self.args.mit:
            options.extend(MIT_OPTIONS)
        if not self.args.f2py:
            options.extend(NO_F2PY_OPTIONS)
        return options

    def builder(self) -> CMakeBuilder:
        layout, build_location, install_location = resolve_layout(
            self.args, self.config, self.cwd, self.detector)

        self.logger.debug(f"Build directory: {layout.build_dir}")
        self.logger.debug(f"Install directory: {layout.install_dir}")

        return CMakeBuilder(
            source_dir=self.cwd,
            layout=layout,
            logger=self.logger,
            build_type=self.args.build_type,
            ninja=(self.args.generator or self.config.generator()) == "ninja",
            jobs=resolve_jobs(self.args, self.config),
            cmake_options=self.cmake_options(),
            cmake=self.config.cmake_executable(),
            profile=self.args.profile,
            link_build=not build_location.in_pwd,
            link_install=not install_location.in_pwd,
            dry_run=self.args.dry_run,
        )

    def run(self) -> int:
        return self.builder().execute(only_cmake=self.args.only_cmake, runtests=self.args.runtests)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Command-line interface"""
    parser = build_parser()
    args = parser.parse_args(join_value_flags(sys.argv[1:] if argv is None else argv))

    logger = Logger(verbose=args.verbose, log_file=args.log_file)
    return run_cli(lambda: DocMake(args, ConfigLoader(), logger).run(), logger)


if __name__ == "__main__":
    sys.exit(main())

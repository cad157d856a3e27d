"""
Build and install directory layout

Everything here is a pure function of its arguments: no environment lookups,
no filesystem access.
"""

from dataclasses import dataclass
from pathlib import PurePath
from typing import Optional


@dataclass(frozen=True)
class BuildLayout:
    """Where a configured tree is built and installed"""
    build_dir: PurePath
    install_dir: PurePath


def _directory(root: PurePath,
               basename: str,
               prefix: str,
               build_type: str,
               extra: Optional[str],
               custom: Optional[str]) -> str:
    if custom:
        path = f"{root}/{basename}/{custom}"
        if build_type not in custom:
            path += f"-{build_type}"
        return path
    if extra:
        return f"{root}/{basename}/{prefix}-{extra}-{build_type}"
    return f"{root}/{basename}/{prefix}-{build_type}"


def compose_layout(basename: str,
                   build_root: PurePath,
                   install_root: PurePath,
                   build_type: str = "Release",
                   ninja: bool = True,
                   extra: Optional[str] = None,
                   custom_build_dir: Optional[str] = None,
                   custom_install_dir: Optional[str] = None,
                   os_tag: Optional[str] = None) -> BuildLayout:
    """
    Compose the build and install directories for a source checkout

    Args:
        basename: Name of the source checkout directory
        build_root: Root holding all build trees
        install_root: Root holding all install trees
        build_type: CMake build type
        ninja: Whether the Ninja generator is used
        extra: Extra name segment for the default directories
        custom_build_dir: Build directory segment replacing ``build-...``
        custom_install_dir: Install directory segment replacing ``install-...``
        os_tag: OS generation tag appended to both directories

    Returns:
        The composed layout
    """
    build_dir = _directory(build_root, basename, "build", build_type, extra, custom_build_dir)
    install_dir = _directory(install_root, basename, "install", build_type, extra, custom_install_dir)

    if ninja:
        build_dir += "-Ninja"
        install_dir += "-Ninja"

    if os_tag:
        build_dir += f"-{os_tag}"
        install_dir += f"-{os_tag}"

    return BuildLayout(PurePath(build_dir), PurePath(install_dir))


__all__ = ["BuildLayout", "compose_layout"]

"""Holds exceptions used by docmake"""

from typing import Optional


class DocmakeError(Exception):
    """Base class for every failure docmake reports to the user"""


class LocationError(DocmakeError):
    """Raised when a build or install location variable is unset or invalid"""


class ProjectError(DocmakeError):
    """Raised when the working directory is not a CMake project"""


class ConfigError(DocmakeError):
    """Raised when the defaults file cannot be used"""


class SlurmError(DocmakeError):
    """Raised when a Slurm query does not return what we need"""


class CommandError(DocmakeError):
    """Raised when an external tool is missing or exits non-zero"""
    def __init__(self, message: str, returncode: Optional[int] = None):
        super().__init__(message)
        self.returncode = returncode

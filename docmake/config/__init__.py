"""
Configuration management for docmake

Build and install roots always come from the environment. Everything else
has a built-in default that a YAML file can override, and the command line
overrides both.
"""

import os
import shlex
from pathlib import Path
from typing import Any, Dict, List, Mapping, NamedTuple, Optional

import yaml

from ..exceptions import ConfigError, LocationError

BUILD_LOCATION_VAR = "CMAKE_BUILD_LOCATION"
INSTALL_LOCATION_VAR = "CMAKE_INSTALL_LOCATION"
NUM_JOBS_VAR = "DOCMAKE_NUM_JOBS"
CONFIG_FILE_VAR = "DOCMAKE_CONFIG"

# Location value meaning "next to the source checkout"
PWD_SENTINEL = "pwd"

GENERATORS = ("ninja", "gnumake")

DEFAULTS: Dict[str, Any] = {
    "jobs": 10,
    "generator": "ninja",
    "os_tag": None,
    "cmake": "cmake",
    "cmake_options": [],
}


class Location(NamedTuple):
    """A resolved build or install root"""
    path: Path
    in_pwd: bool


def resolve_location(var: str, environ: Mapping[str, str], cwd: Path) -> Location:
    """
    Resolve one of the location environment variables

    Args:
        var: Variable name
        environ: Environment to read from
        cwd: Current working directory, used for the ``pwd`` sentinel

    Returns:
        The resolved root and whether it came from the ``pwd`` sentinel
    """
    value = environ.get(var, "")
    if not value:
        raise LocationError(f"{var} environment variable is not set")

    if value == PWD_SENTINEL:
        location = Location(Path(cwd).parent, True)
    else:
        location = Location(Path(os.path.abspath(os.path.expanduser(value))), False)

    if not location.path.is_dir():
        raise LocationError(f"{var} is not a directory")
    return location


def default_config_file(environ: Mapping[str, str]) -> Path:
    """Path of the YAML defaults file"""
    if environ.get(CONFIG_FILE_VAR):
        return Path(environ[CONFIG_FILE_VAR]).expanduser()
    return Path("~/.config/docmake/config.yaml").expanduser()


class ConfigLoader:
    """Loads and manages docmake configuration"""

    def __init__(self,
                 config_file: Optional[Path] = None,
                 environ: Optional[Mapping[str, str]] = None,
                 cwd: Optional[Path] = None):
        """
        Initialize configuration loader

        Args:
            config_file: YAML defaults file (default: $DOCMAKE_CONFIG or ~/.config/docmake/config.yaml)
            environ: Environment mapping (default: os.environ)
            cwd: Working directory (default: current directory)
        """
        self.environ = os.environ if environ is None else environ
        self.cwd = Path(cwd) if cwd is not None else Path.cwd()
        if config_file is None:
            config_file = default_config_file(self.environ)
        self.config_file = Path(config_file)
        self.file_config = self._load_file()

    def _load_file(self) -> Dict[str, Any]:
        """Load the YAML defaults file, if there is one"""
        if not self.config_file.is_file():
            return {}

        try:
            with open(self.config_file, 'r') as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Could not parse {self.config_file}: {e}") from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError(f"{self.config_file} must contain a mapping of options")

        unknown = sorted(set(data) - set(DEFAULTS))
        if unknown:
            raise ConfigError(f"Unknown option(s) in {self.config_file}: {', '.join(unknown)}")
        return data

    def get_option(self, key: str, default: Any = None) -> Any:
        """
        Get an option from the defaults file, falling back to the built-in default

        Args:
            key: Option key
            default: Value used when neither the file nor the built-ins define it

        Returns:
            Option value
        """
        if key in self.file_config:
            return self.file_config[key]
        return DEFAULTS.get(key, default)

    def build_location(self) -> Location:
        """Resolved CMAKE_BUILD_LOCATION"""
        return resolve_location(BUILD_LOCATION_VAR, self.environ, self.cwd)

    def install_location(self) -> Location:
        """Resolved CMAKE_INSTALL_LOCATION"""
        return resolve_location(INSTALL_LOCATION_VAR, self.environ, self.cwd)

    def num_jobs(self) -> int:
        """Job count from DOCMAKE_NUM_JOBS, the defaults file, or the built-in 10"""
        if self.environ.get(NUM_JOBS_VAR):
            return parse_jobs(self.environ[NUM_JOBS_VAR], source=NUM_JOBS_VAR)
        return parse_jobs(self.get_option("jobs"), source=f"'jobs' in {self.config_file}")

    def generator(self) -> str:
        generator = str(self.get_option("generator")).lower()
        if generator not in GENERATORS:
            raise ConfigError(f"Unknown generator '{generator}' in {self.config_file}. "
                              f"Supported: {', '.join(GENERATORS)}")
        return generator

    def os_tag(self) -> Optional[str]:
        """Configured OS tag: None, 'auto', or a literal tag"""
        tag = self.get_option("os_tag")
        if tag is None or tag is False:
            return None
        return str(tag)

    def cmake_executable(self) -> str:
        return str(self.get_option("cmake"))

    def cmake_options(self) -> List[str]:
        """Options passed to every configure step"""
        options = self.get_option("cmake_options")
        if isinstance(options, str):
            return shlex.split(options)
        if not isinstance(options, list):
            raise ConfigError(f"'cmake_options' in {self.config_file} must be a list or a string")
        return [str(o) for o in options]


def parse_jobs(value: Any, source: str = "--jobs") -> int:
    """Validate a job count"""
    try:
        jobs = int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{source} must be a positive integer, got '{value}'") from None
    if jobs < 1:
        raise ConfigError(f"{source} must be a positive integer, got '{value}'")
    return jobs


__all__ = [
    "ConfigLoader",
    "Location",
    "resolve_location",
    "default_config_file",
    "parse_jobs",
    "BUILD_LOCATION_VAR",
    "INSTALL_LOCATION_VAR",
    "NUM_JOBS_VAR",
    "CONFIG_FILE_VAR",
    "PWD_SENTINEL",
]

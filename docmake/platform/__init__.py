"""
Platform detection

Shared HPC systems often run several OS generations side by side (e.g. SLES 12
and SLES 15 nodes on the same filesystem), so build trees can be tagged with
the OS they were configured on.
"""

import platform
from pathlib import Path
from typing import Dict, Optional

OS_RELEASE_FILE = Path("/etc/os-release")


class PlatformDetector:
    """Detects and provides information about the current platform"""

    def __init__(self, os_release_file: Path = OS_RELEASE_FILE):
        self.os_release_file = Path(os_release_file)

    def os_tag(self) -> str:
        """
        Short tag naming the OS generation, e.g. ``SLES15`` or ``RHEL8``

        Falls back to the kernel name and major release when /etc/os-release
        is missing or incomplete.
        """
        os_release = self._read_os_release()
        distro = os_release.get("ID", "")
        version = os_release.get("VERSION_ID", "")
        if distro and version:
            return f"{distro.upper()}{_major(version)}"
        return f"{platform.system()}{_major(platform.release())}"

    def _read_os_release(self) -> Dict[str, str]:
        """Parse the KEY=value lines of the os-release file"""
        values: Dict[str, str] = {}
        try:
            content = self.os_release_file.read_text()
        except OSError:
            return values

        for line in content.splitlines():
            line = line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, value = line.split("=", 1)
            values[key.strip()] = value.strip().strip('"\'')
        return values


def _major(version: str) -> str:
    """Leading numeric component of a version string"""
    head = version.split(".", 1)[0]
    digits = ""
    for char in head:
        if not char.isdigit():
            break
        digits += char
    return digits


def resolve_os_tag(requested: Optional[str], detector: Optional[PlatformDetector] = None) -> Optional[str]:
    """Turn an ``os_tag`` setting (None, 'auto' or a literal) into a tag"""
    if not requested:
        return None
    if requested == "auto":
        return (detector or PlatformDetector()).os_tag()
    return requested


__all__ = ["PlatformDetector", "resolve_os_tag", "OS_RELEASE_FILE"]

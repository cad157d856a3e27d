import platform

import pytest

from docmake.platform import PlatformDetector, resolve_os_tag

SLES_OS_RELEASE = """\
NAME="SLES"
VERSION="15-SP4"
VERSION_ID="15.4"
PRETTY_NAME="SUSE Linux Enterprise Server 15 SP4"
ID="sles"
ID_LIKE="suse"
"""


@pytest.fixture
def os_release(tmp_path):
    path = tmp_path / "os-release"
    path.write_text(SLES_OS_RELEASE)
    return path


def test_os_tag_from_os_release(os_release):
    assert PlatformDetector(os_release).os_tag() == "SLES15"


def test_os_tag_ignores_comments_and_quoting(tmp_path):
    path = tmp_path / "os-release"
    path.write_text("# Red Hat\nID='rhel'\n\nVERSION_ID=8.10\nnot a key value line\n")

    assert PlatformDetector(path).os_tag() == "RHEL8"


def test_os_tag_falls_back_to_kernel(tmp_path, monkeypatch):
    monkeypatch.setattr(platform, "system", lambda: "Linux")
    monkeypatch.setattr(platform, "release", lambda: "5.14.21-150400.24.100-default")

    assert PlatformDetector(tmp_path / "missing").os_tag() == "Linux5"


def test_os_tag_falls_back_when_version_is_missing(tmp_path, monkeypatch):
    path = tmp_path / "os-release"
    path.write_text("ID=arch\n")
    monkeypatch.setattr(platform, "system", lambda: "Linux")
    monkeypatch.setattr(platform, "release", lambda: "6.9.1-arch1-1")

    assert PlatformDetector(path).os_tag() == "Linux6"


@pytest.mark.parametrize("requested", [None, ""])
def test_resolve_os_tag_disabled(requested):
    assert resolve_os_tag(requested) is None


def test_resolve_os_tag_literal_is_kept():
    assert resolve_os_tag("milan") == "milan"


def test_resolve_os_tag_auto_uses_detector(os_release):
    assert resolve_os_tag("auto", PlatformDetector(os_release)) == "SLES15"

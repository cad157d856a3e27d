import shutil
import subprocess
import sys
from pathlib import Path
from types import SimpleNamespace

import pytest

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from docmake.utils import Logger


class FakeRun:
    """Records commands instead of running them.

    ``results`` is consumed in order; once empty every command succeeds.
    """

    def __init__(self):
        self.calls = []
        self.kwargs = []
        self.results = []

    def __call__(self, cmd, **kwargs):
        self.calls.append(list(cmd))
        self.kwargs.append(kwargs)
        returncode, stdout = self.results.pop(0) if self.results else (0, "")
        return subprocess.CompletedProcess(cmd, returncode, stdout, "")


@pytest.fixture
def fake_run(monkeypatch):
    fake = FakeRun()
    monkeypatch.setattr(subprocess, "run", fake)
    monkeypatch.setattr(shutil, "which", lambda name: f"/usr/bin/{name}")
    return fake


@pytest.fixture
def logger():
    return Logger()


@pytest.fixture
def workspace(tmp_path, monkeypatch):
    """A GEOSgcm checkout plus build/install roots, with the environment pointing at them"""
    build_root = tmp_path / "nobackup" / "build"
    install_root = tmp_path / "nobackup" / "install"
    build_root.mkdir(parents=True)
    install_root.mkdir(parents=True)

    source = tmp_path / "home" / "GEOSgcm"
    source.mkdir(parents=True)
    (source / "CMakeLists.txt").write_text(
        "cmake_minimum_required (VERSION 3.24)\n"
        "project (GEOSgcm VERSION 11.6.0 LANGUAGES Fortran CXX C)\n"
    )

    monkeypatch.setenv("CMAKE_BUILD_LOCATION", str(build_root))
    monkeypatch.setenv("CMAKE_INSTALL_LOCATION", str(install_root))
    monkeypatch.delenv("DOCMAKE_NUM_JOBS", raising=False)
    monkeypatch.setenv("DOCMAKE_CONFIG", str(tmp_path / "no-such-config.yaml"))
    monkeypatch.chdir(source)

    return SimpleNamespace(
        source=source,
        build_root=build_root,
        install_root=install_root,
        config_file=tmp_path / "no-such-config.yaml",
    )

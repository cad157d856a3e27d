import os
import shutil
from pathlib import Path

import pytest

from docmake.builders import CMakeBuilder, check_project
from docmake.exceptions import CommandError, ProjectError
from docmake.layout import compose_layout


@pytest.fixture
def layout(workspace):
    return compose_layout("GEOSgcm", workspace.build_root, workspace.install_root)


def _builder(workspace, layout, logger, **kwargs):
    return CMakeBuilder(source_dir=workspace.source, layout=layout, logger=logger, **kwargs)


def test_check_project_requires_cmakelists(tmp_path):
    with pytest.raises(ProjectError, match="No CMakeLists.txt file found in the current directory"):
        check_project(tmp_path)


def test_check_project_requires_project_command(tmp_path):
    (tmp_path / "CMakeLists.txt").write_text("add_subdirectory(src)\n")

    with pytest.raises(ProjectError, match="Are you sure this is a CMake project?"):
        check_project(tmp_path)


def test_configure_command_for_ninja(workspace, layout, logger, fake_run):
    builder = _builder(workspace, layout, logger, cmake_options=["-DBASELIBS=/opt/baselibs"])

    assert builder.configure_command() == [
        "/usr/bin/cmake",
        "-B", str(layout.build_dir),
        "-S", ".",
        "-DCMAKE_BUILD_TYPE=Release",
        "--install-prefix", str(layout.install_dir),
        "-G", "Ninja",
        "-DBASELIBS=/opt/baselibs",
    ]


def test_configure_command_for_gnumake_with_profiling(workspace, logger, fake_run):
    layout = compose_layout("GEOSgcm", workspace.build_root, workspace.install_root,
                            build_type="Debug", ninja=False)
    builder = _builder(workspace, layout, logger, build_type="Debug", ninja=False, profile=True)

    cmd = builder.configure_command()

    assert "-G" not in cmd
    assert "-DCMAKE_BUILD_TYPE=Debug" in cmd
    assert cmd[-2:] == [
        "--profiling-format=google-trace",
        f"--profiling-output={layout.build_dir}/cmake_profile.json",
    ]


def test_build_command_passes_job_count(workspace, layout, logger, fake_run):
    builder = _builder(workspace, layout, logger, jobs=32)

    assert builder.build_command("install") == [
        "/usr/bin/cmake", "--build", str(layout.build_dir), "--target", "install", "-j", "32"
    ]


def test_missing_cmake_is_an_error(workspace, layout, logger, monkeypatch):
    monkeypatch.setattr(shutil, "which", lambda name: None)

    with pytest.raises(CommandError, match="cmake not found in PATH"):
        _builder(workspace, layout, logger)


def test_dry_run_has_no_side_effects(workspace, layout, logger, fake_run, monkeypatch, capsys):
    monkeypatch.setattr(shutil, "which", lambda name: None)
    builder = _builder(workspace, layout, logger, dry_run=True, profile=True)
    before = sorted(p.name for p in workspace.source.iterdir())

    assert builder.execute(runtests=True) == 0

    out = capsys.readouterr().out
    assert fake_run.calls == []
    assert sorted(p.name for p in workspace.source.iterdir()) == before
    assert not Path(layout.build_dir).exists()
    assert f"[DRY RUN] Would run: cmake -B {layout.build_dir} -S ." in out
    assert f"Will symlink {layout.build_dir} to {workspace.source / layout.build_dir.name}" in out
    assert f"Will symlink {layout.install_dir} to {workspace.source / layout.install_dir.name}" in out
    assert "--target tests" in out
    assert "Profiling enabled" in out


def test_execute_runs_steps_and_links_trees(workspace, layout, logger, fake_run):
    builder = _builder(workspace, layout, logger, jobs=6)

    assert builder.execute(runtests=True) == 0

    assert [call[1:4] for call in fake_run.calls] == [
        ["-B", str(layout.build_dir), "-S"],
        ["--build", str(layout.build_dir), "--target"],
        ["--build", str(layout.build_dir), "--target"],
    ]
    assert fake_run.calls[1][-3:] == ["install", "-j", "6"]
    assert fake_run.calls[2][-3:] == ["tests", "-j", "6"]
    assert all(kwargs["cwd"] == workspace.source for kwargs in fake_run.kwargs)

    build_link = workspace.source / "build-Release-Ninja"
    install_link = workspace.source / "install-Release-Ninja"
    assert build_link.is_symlink() and build_link.readlink() == layout.build_dir
    assert install_link.is_symlink() and install_link.readlink() == layout.install_dir


def test_failed_configure_stops_the_sequence(workspace, layout, logger, fake_run):
    fake_run.results = [(2, "")]
    builder = _builder(workspace, layout, logger)

    assert builder.execute() == 2

    assert len(fake_run.calls) == 1
    assert not (workspace.source / "install-Release-Ninja").is_symlink()


def test_failed_install_skips_tests(workspace, layout, logger, fake_run):
    fake_run.results = [(0, ""), (1, "")]
    builder = _builder(workspace, layout, logger)

    assert builder.execute(runtests=True) == 1
    assert len(fake_run.calls) == 2


def test_only_cmake_prints_install_hint(workspace, layout, logger, fake_run, capsys):
    builder = _builder(workspace, layout, logger, jobs=12)

    assert builder.execute(only_cmake=True) == 0

    out = capsys.readouterr().out
    assert len(fake_run.calls) == 1
    assert "To install, run:" in out
    assert f"/usr/bin/cmake --build {layout.build_dir} --target install -j 12" in out
    assert not (workspace.source / "install-Release-Ninja").is_symlink()


def test_existing_link_is_left_alone(workspace, layout, logger, fake_run, tmp_path, capsys):
    elsewhere = tmp_path / "elsewhere"
    elsewhere.mkdir()
    (workspace.source / "build-Release-Ninja").symlink_to(elsewhere)
    builder = _builder(workspace, layout, logger)

    builder.execute()

    assert (workspace.source / "build-Release-Ninja").readlink() == elsewhere
    assert "build-Release-Ninja already exists. Not linking." in capsys.readouterr().out


def test_links_can_be_disabled(workspace, layout, logger, fake_run):
    builder = _builder(workspace, layout, logger, link_build=False, link_install=False)

    builder.execute()

    assert not any(p.is_symlink() for p in workspace.source.iterdir())


def test_symlink_failure_is_reported(workspace, layout, logger, fake_run, monkeypatch):
    def read_only(target, link_path):
        raise PermissionError(13, "Permission denied", str(link_path))

    monkeypatch.setattr(os, "symlink", read_only)
    builder = _builder(workspace, layout, logger)

    with pytest.raises(ProjectError, match="Could not link .*build-Release-Ninja.*Permission denied"):
        builder.execute()
    assert fake_run.calls == []

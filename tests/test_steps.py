from __future__ import annotations

from pathlib import Path

import pytest
from conftest import FakeRun

from casting.steps import (
    COMMIT_MESSAGE,
    GitOutcome,
    Severity,
    StepRunner,
    detect_package_manager,
    initialize_git,
    install_dependencies,
)


def test_runner_classifies_failures(tmp_path: Path):
    runner = StepRunner(FakeRun({("false",): 3}))
    result = runner(["false"], tmp_path, severity=Severity.FATAL)
    assert not result.ok
    assert result.fatal
    assert result.returncode == 3
    assert result.detail == "simulated failure"

    tolerated = runner(["false"], tmp_path, severity=Severity.TOLERATED)
    assert not tolerated.ok
    assert not tolerated.fatal


def test_runner_reports_missing_executable(tmp_path: Path):
    runner = StepRunner(FakeRun({("pnpm",): FileNotFoundError("pnpm")}))
    result = runner(["pnpm", "install"], tmp_path, severity=Severity.FATAL)
    assert result.fatal
    assert result.returncode is None


def test_install_inherits_terminal(tmp_path: Path):
    fake = FakeRun()
    result = install_dependencies(StepRunner(fake), tmp_path, "npm")
    assert result.ok
    assert fake.calls == [(["npm", "install"], tmp_path, False)]


@pytest.mark.parametrize(
    "lockfile, expected",
    [("pnpm-lock.yaml", "pnpm"), ("yarn.lock", "yarn"), ("package-lock.json", "npm")],
)
def test_detect_package_manager_prefers_lockfile(tmp_path: Path, lockfile, expected):
    (tmp_path / lockfile).write_text("", encoding="utf-8")
    assert detect_package_manager(tmp_path, which=lambda name: "/usr/bin/" + name) == expected


def test_detect_package_manager_probes_path(tmp_path: Path):
    available = {"yarn", "npm"}
    detected = detect_package_manager(tmp_path, which=lambda name: name if name in available else None)
    assert detected == "yarn"


def test_detect_package_manager_falls_back_to_npm(tmp_path: Path):
    assert detect_package_manager(tmp_path, which=lambda name: None) == "npm"


def test_initialize_git_commits(tmp_path: Path):
    fake = FakeRun()
    assert initialize_git(StepRunner(fake), tmp_path) is GitOutcome.COMMITTED
    assert fake.commands == [
        ["git", "init"],
        ["git", "add", "."],
        ["git", "commit", "-m", COMMIT_MESSAGE],
    ]


def test_initialize_git_tolerates_commit_failure(tmp_path: Path):
    fake = FakeRun({("git", "commit"): 128})
    assert initialize_git(StepRunner(fake), tmp_path) is GitOutcome.COMMIT_SKIPPED


def test_initialize_git_stops_when_git_is_missing(tmp_path: Path):
    fake = FakeRun({("git",): FileNotFoundError("git")})
    assert initialize_git(StepRunner(fake), tmp_path) is GitOutcome.FAILED
    assert fake.commands == [["git", "init"]]


def test_runner_starts_resolved_executable(tmp_path: Path):
    fake = FakeRun()
    runner = StepRunner(fake, which=lambda name: f"C:\\nodejs\\{name}.cmd")
    result = install_dependencies(runner, tmp_path, "npm")
    assert fake.commands == [["C:\\nodejs\\npm.cmd", "install"]]
    assert result.command == ("npm", "install")


def test_runner_keeps_name_when_lookup_fails(tmp_path: Path):
    fake = FakeRun()
    StepRunner(fake, which=lambda name: None)(["git", "init"], tmp_path, severity=Severity.TOLERATED)
    assert fake.commands == [["git", "init"]]

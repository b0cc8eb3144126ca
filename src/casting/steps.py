"""External commands run inside a freshly generated project."""

from __future__ import annotations

import logging
import shutil
import subprocess
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

__all__ = [
    "COMMIT_MESSAGE",
    "GitOutcome",
    "PACKAGE_MANAGERS",
    "Severity",
    "StepResult",
    "StepRunner",
    "detect_package_manager",
    "initialize_git",
    "install_dependencies",
]

LOGGER = logging.getLogger(__name__)

COMMIT_MESSAGE = "chore: initial commit"
DEFAULT_PACKAGE_MANAGER = "npm"

# preference order, each with the lockfile it writes
PACKAGE_MANAGERS: tuple[tuple[str, str], ...] = (
    ("pnpm", "pnpm-lock.yaml"),
    ("yarn", "yarn.lock"),
    ("npm", "package-lock.json"),
)


class Severity(str, Enum):
    """How the orchestrator treats a failed step."""

    FATAL = "fatal"
    TOLERATED = "tolerated"


@dataclass(frozen=True, slots=True)
class StepResult:
    """Outcome of a single external command."""

    command: tuple[str, ...]
    ok: bool
    severity: Severity
    returncode: int | None = None
    detail: str = ""

    @property
    def fatal(self) -> bool:
        return not self.ok and self.severity is Severity.FATAL


Runner = Callable[..., subprocess.CompletedProcess]


class StepRunner:
    """Run commands and classify their failures.

    ``run`` defaults to :func:`subprocess.run`; tests pass a fake with the
    same signature. The executable is looked up with ``which`` first so
    wrapper scripts such as ``npm.cmd`` on Windows can be started.
    """

    def __init__(
        self,
        run: Runner | None = None,
        *,
        which: Callable[[str], str | None] | None = None,
    ) -> None:
        self._run = run or subprocess.run
        self._which = which or shutil.which

    def __call__(
        self,
        command: Sequence[str],
        cwd: Path,
        *,
        severity: Severity,
        capture: bool = True,
    ) -> StepResult:
        argv = tuple(command)
        executable = self._which(argv[0]) or argv[0]
        LOGGER.debug("running %s in %s", " ".join(argv), cwd)
        try:
            completed = self._run(
                [executable, *argv[1:]],
                cwd=cwd,
                capture_output=capture,
                text=True,
                check=False,
            )
        except OSError as exc:
            LOGGER.debug("could not start %s: %s", argv[0], exc)
            return StepResult(argv, ok=False, severity=severity, detail=str(exc))

        detail = ""
        if capture and completed.returncode != 0:
            detail = (completed.stderr or completed.stdout or "").strip()
        return StepResult(
            argv,
            ok=completed.returncode == 0,
            severity=severity,
            returncode=completed.returncode,
            detail=detail,
        )


def detect_package_manager(
    project_dir: Path,
    *,
    which: Callable[[str], str | None] = shutil.which,
) -> str:
    """Pick the installer for ``project_dir``.

    A lockfile shipped with the template wins, then the first package manager
    available on ``PATH``, then ``npm``.
    """

    for executable, lockfile in PACKAGE_MANAGERS:
        if (project_dir / lockfile).exists():
            LOGGER.debug("found %s, using %s", lockfile, executable)
            return executable
    for executable, _ in PACKAGE_MANAGERS:
        if which(executable):
            LOGGER.debug("found %s on PATH", executable)
            return executable
    return DEFAULT_PACKAGE_MANAGER


def install_dependencies(runner: StepRunner, project_dir: Path, package_manager: str) -> StepResult:
    """Run ``<package_manager> install`` with the terminal attached."""

    return runner(
        [package_manager, "install"],
        project_dir,
        severity=Severity.FATAL,
        capture=False,
    )


class GitOutcome(str, Enum):
    COMMITTED = "committed"
    COMMIT_SKIPPED = "commit_skipped"
    FAILED = "failed"


def initialize_git(runner: StepRunner, project_dir: Path) -> GitOutcome:
    """Create a repository with an initial commit, tolerating every failure."""

    for command in (["git", "init"], ["git", "add", "."]):
        result = runner(command, project_dir, severity=Severity.TOLERATED)
        if not result.ok:
            LOGGER.debug("%s failed: %s", " ".join(command), result.detail)
            return GitOutcome.FAILED

    commit = runner(["git", "commit", "-m", COMMIT_MESSAGE], project_dir, severity=Severity.TOLERATED)
    if not commit.ok:
        LOGGER.debug("git commit failed: %s", commit.detail)
        return GitOutcome.COMMIT_SKIPPED
    return GitOutcome.COMMITTED

"""Project scaffolding pipeline."""

from __future__ import annotations

import logging
import shutil
import sys
from dataclasses import dataclass
from pathlib import Path

from .config import ScaffoldOptions
from .errors import AbortedError, InstallError
from .fetch import TemplateFetcher
from .manifest import rewrite_manifest
from .prompts import Cancelled, Prompter
from .steps import GitOutcome, StepRunner, detect_package_manager, initialize_git, install_dependencies

__all__ = ["ProjectScaffolder", "ScaffoldResult", "prepare_target"]

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ScaffoldResult:
    """Summary of a completed run."""

    target: Path
    spec: str
    package_manager: str
    installed: bool
    git: GitOutcome | None


def _is_empty(path: Path) -> bool:
    if not path.exists() and not path.is_symlink():
        return True
    if not path.is_dir():
        return False
    return next(path.iterdir(), None) is None


def prepare_target(options: ScaffoldOptions, prompter: Prompter) -> Path:
    """Ensure the target directory is absent or empty.

    A non-empty target is removed only after the user confirms, unless
    ``options.force`` is set. Declining or cancelling raises
    :class:`AbortedError` and leaves the directory untouched.
    """

    target = options.target_dir
    if _is_empty(target):
        return target

    if not options.force:
        outcome = prompter.confirm(
            f"Directory {options.project_name} already exists and is not empty. Overwrite?",
            default=False,
        )
        if isinstance(outcome, Cancelled):
            print("Aborted.")
            raise AbortedError("overwrite prompt cancelled", reported=True)
        if not outcome.value:
            print("Aborting.")
            raise AbortedError("overwrite declined", reported=True)

    LOGGER.debug("removing existing %s", target)
    if target.is_symlink() or not target.is_dir():
        target.unlink()
    else:
        shutil.rmtree(target)
    return target


class ProjectScaffolder:
    """Generate a project from a remote template repository."""

    def __init__(
        self,
        fetcher: TemplateFetcher | None = None,
        runner: StepRunner | None = None,
        prompter: Prompter | None = None,
    ) -> None:
        self.fetcher = fetcher or TemplateFetcher()
        self.runner = runner or StepRunner()
        self.prompter = prompter or Prompter()

    def create(self, options: ScaffoldOptions) -> ScaffoldResult:
        """Run every stage for ``options`` and print the next steps."""

        target = prepare_target(options, self.prompter)

        print(f"\nCreating project {options.project_name}...\n")
        spec = self.fetcher.clone(options.repo, options.template, target)

        rewrite_manifest(target, name=options.project_name, slug=options.slug)

        package_manager = options.package_manager or detect_package_manager(target)
        if options.install:
            self._install(target, package_manager)
        else:
            print("Skipping dependency install.")

        git_outcome: GitOutcome | None = None
        if options.git:
            git_outcome = self._init_git(target)
        else:
            print("Skipping git initialization (--no-git).")

        self._print_summary(options, package_manager)
        return ScaffoldResult(
            target=target,
            spec=spec,
            package_manager=package_manager,
            installed=options.install,
            git=git_outcome,
        )

    def _install(self, target: Path, package_manager: str) -> None:
        print(f"Installing dependencies with {package_manager}...")
        result = install_dependencies(self.runner, target, package_manager)
        if result.fatal:
            print(
                f"{package_manager} install failed. You can run it manually inside the new project.",
                file=sys.stderr,
            )
            raise InstallError(f"{package_manager} install failed", reported=True)
        print("Dependencies installed.")

    def _init_git(self, target: Path) -> GitOutcome:
        outcome = initialize_git(self.runner, target)
        if outcome is GitOutcome.COMMITTED:
            print("Initialized git repository and made initial commit.")
        elif outcome is GitOutcome.COMMIT_SKIPPED:
            print("Initialized git repository (commit skipped - git user may not be configured).")
        else:
            print("Git init failed (git may be missing). Continuing without git.")
        return outcome

    @staticmethod
    def _print_summary(options: ScaffoldOptions, package_manager: str) -> None:
        steps = [f"cd {options.project_name}"]
        if not options.install:
            steps.append(f"{package_manager} install  (if you skipped installation)")
        steps.append(f"{package_manager} run dev  (or your start script)")

        print("\nDone!")
        print("\nNext steps:")
        for number, step in enumerate(steps, start=1):
            print(f"  {number}) {step}")
        print()

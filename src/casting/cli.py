"""Command line interface for casting."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Sequence

from pydantic import ValidationError

from . import __version__
from .config import DEFAULT_PROJECT_NAME, DEFAULTS, ScaffoldOptions
from .errors import AbortedError, ScaffoldError
from .prompts import Cancelled, Prompter
from .scaffold import ProjectScaffolder

LOGGER = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="casting",
        description="Scaffold a new project from a remote template repository",
    )
    parser.add_argument("project_name", nargs="?", metavar="project-name", help="Name of the project directory")
    parser.add_argument(
        "--template",
        default=None,
        help=f'Template subdirectory or path within the repo (use "." for repo root, default: {DEFAULTS["template"]})',
    )
    parser.add_argument(
        "--repo",
        default=None,
        help=(
            "Repository to use, e.g. owner/repo, github:owner/repo or owner/repo#branch "
            f"(default: {DEFAULTS['repo']})"
        ),
    )
    parser.add_argument(
        "--install",
        action="store_true",
        default=None,
        help="Install dependencies after scaffolding",
    )
    parser.add_argument(
        "--no-git",
        dest="git",
        action="store_false",
        default=None,
        help="Do not initialize a git repository",
    )
    parser.add_argument(
        "--package-manager",
        default=None,
        help="Installer executable (default: detected from lockfiles and PATH)",
    )
    parser.add_argument(
        "-f",
        "--force",
        action="store_true",
        default=None,
        help="Overwrite a non-empty target directory without asking",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug details to stderr")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def _validate_name(value: str) -> bool | str:
    return True if value.strip() else "Please enter a project name"


def resolve_project_name(supplied: str | None, prompter: Prompter) -> str | None:
    """Return the trimmed project name, prompting when none was supplied.

    ``None`` means the prompt was cancelled.
    """

    if supplied is not None and supplied.strip():
        return supplied.strip()
    outcome = prompter.text("Project name:", default=DEFAULT_PROJECT_NAME, validate=_validate_name)
    if isinstance(outcome, Cancelled):
        return None
    return outcome.value.strip()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def main(
    argv: Sequence[str] | None = None,
    *,
    scaffolder: ProjectScaffolder | None = None,
) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    scaffolder = scaffolder or ProjectScaffolder()
    try:
        project_name = resolve_project_name(args.project_name, scaffolder.prompter)
        if project_name is None:
            print("Aborted.")
            raise AbortedError("project name prompt cancelled", reported=True)
        options = ScaffoldOptions.from_args(args, project_name)
        scaffolder.create(options)
    except ScaffoldError as exc:
        if not exc.reported:
            print(f"Error: {exc}", file=sys.stderr)
        return 1
    except ValidationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nAborted.")
        return 1
    except Exception as exc:  # noqa: BLE001
        LOGGER.debug("unexpected failure", exc_info=True)
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())

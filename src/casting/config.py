"""Configuration helpers shared by the project scaffolder and CLI."""

from __future__ import annotations

import argparse
import os
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .naming import slugify

__all__ = ["DEFAULT_PROJECT_NAME", "DEFAULT_REPO", "DEFAULTS", "ScaffoldOptions"]


DEFAULT_REPO = "wrappedcbdc/convexity-n-layer-template"
DEFAULT_PROJECT_NAME = "my-convexity-app"

DEFAULTS: Mapping[str, Any] = MappingProxyType(
    {
        "template": "template",
        "repo": DEFAULT_REPO,
        "install": False,
        "git": True,
        "force": False,
        "package_manager": None,
    }
)


class ScaffoldOptions(BaseModel):
    """Resolved parameters for a single scaffolding run.

    Attributes
    ----------
    project_name:
        The name chosen by the user. Leading and trailing whitespace is
        removed; the value doubles as the target directory name.
    template:
        Subpath inside the template repository. ``"."`` selects the
        repository root.
    repo:
        Repository descriptor such as ``owner/name``, ``github:owner/name`` or
        ``owner/name#branch``.
    install:
        Whether dependencies are installed after the template is fetched.
    git:
        Whether a git repository is initialised in the new project.
    force:
        Overwrite a non-empty target directory without asking.
    package_manager:
        Installer executable. ``None`` detects one from the generated project
        and ``PATH``.
    cwd:
        Directory the target is resolved against.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    project_name: str = Field(..., description="Name of the project and its directory.")
    template: str = Field(DEFAULTS["template"], description="Template subpath within the repository.")
    repo: str = Field(DEFAULTS["repo"], description="Template repository descriptor.")
    install: bool = Field(DEFAULTS["install"], description="Install dependencies after scaffolding.")
    git: bool = Field(DEFAULTS["git"], description="Initialise a git repository.")
    force: bool = Field(DEFAULTS["force"], description="Overwrite without confirmation.")
    package_manager: str | None = Field(DEFAULTS["package_manager"], description="Installer executable override.")
    cwd: Path = Field(default_factory=Path.cwd, description="Directory the project is created in.")

    @field_validator("project_name")
    @classmethod
    def _strip_project_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("project name must not be empty")
        return value

    @field_validator("template", "repo")
    @classmethod
    def _strip_location(cls, value: str) -> str:
        return value.strip()

    @property
    def slug(self) -> str:
        """Manifest friendly form of :attr:`project_name`."""

        return slugify(self.project_name)

    @property
    def target_dir(self) -> Path:
        """Absolute path of the directory the project is generated into."""

        # abspath leaves symlinks unresolved
        return Path(os.path.abspath(Path(self.cwd) / self.project_name))

    @classmethod
    def from_args(cls, args: argparse.Namespace, project_name: str, **overrides: Any) -> "ScaffoldOptions":
        """Merge parsed command line flags over :data:`DEFAULTS`.

        Flags that were not given on the command line are ``None`` on the
        namespace and fall back to the default table.
        """

        values: dict[str, Any] = dict(DEFAULTS)
        for key in DEFAULTS:
            supplied = getattr(args, key, None)
            if supplied is not None:
                values[key] = supplied
        values.update(overrides)
        return cls(project_name=project_name, **values)

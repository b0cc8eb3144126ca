"""Scaffold new projects from remote template repositories.

The package downloads a snapshot of a template repository subtree, fills in
the project name in the generated ``package.json`` and optionally installs
dependencies and initialises git. Every stage is usable programmatically as
well as through the ``casting`` command.
"""

from __future__ import annotations

__version__ = "1.0.0"

from .config import DEFAULTS, ScaffoldOptions
from .errors import AbortedError, FetchError, InstallError, ScaffoldError
from .fetch import RepoDescriptor, TemplateFetcher, build_fetch_spec
from .manifest import rewrite_manifest
from .naming import slugify
from .scaffold import ProjectScaffolder

__all__ = [
    "AbortedError",
    "DEFAULTS",
    "FetchError",
    "InstallError",
    "ProjectScaffolder",
    "RepoDescriptor",
    "ScaffoldError",
    "ScaffoldOptions",
    "TemplateFetcher",
    "build_fetch_spec",
    "rewrite_manifest",
    "slugify",
]

"""Placeholder substitution for the generated package manifest."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from pathlib import Path

__all__ = [
    "MANIFEST_NAME",
    "NAME_PLACEHOLDER",
    "SLUG_PLACEHOLDER",
    "TEMPLATE_NAME",
    "replace_placeholders",
    "rewrite_manifest",
]

LOGGER = logging.getLogger(__name__)

MANIFEST_NAME = "package.json"
NAME_PLACEHOLDER = "__PROJECT_NAME__"
SLUG_PLACEHOLDER = "__PROJECT_SLUG__"
# package name shipped by the default template repository
TEMPLATE_NAME = "convexity-n-layer-template"


def replace_placeholders(
    text: str,
    *,
    name: str,
    slug: str,
    template_names: Iterable[str] = (TEMPLATE_NAME,),
) -> str:
    """Return ``text`` with every placeholder literally replaced.

    ``template_names`` lists extra literals standing for the project name.
    All tokens are substituted in a single pass, so replacement values are
    never rewritten again.
    """

    replacements = {literal: name for literal in template_names if literal}
    replacements[NAME_PLACEHOLDER] = name
    replacements[SLUG_PLACEHOLDER] = slug
    # longest first so overlapping literals prefer the most specific token
    tokens = sorted(replacements, key=len, reverse=True)
    pattern = re.compile("|".join(re.escape(token) for token in tokens))
    return pattern.sub(lambda match: replacements[match.group(0)], text)


def rewrite_manifest(
    project_dir: str | Path,
    *,
    name: str,
    slug: str,
    template_names: Iterable[str] = (TEMPLATE_NAME,),
    encoding: str = "utf-8",
) -> bool:
    """Substitute placeholders in ``package.json`` inside ``project_dir``.

    A missing manifest is skipped silently. Returns ``True`` when the file
    content changed.
    """

    manifest = Path(project_dir) / MANIFEST_NAME
    if not manifest.is_file():
        LOGGER.debug("no %s in %s, skipping placeholder substitution", MANIFEST_NAME, project_dir)
        return False

    original = manifest.read_text(encoding=encoding)
    rewritten = replace_placeholders(original, name=name, slug=slug, template_names=template_names)
    manifest.write_text(rewritten, encoding=encoding)
    return rewritten != original

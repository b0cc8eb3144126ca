"""String normalisation utilities used throughout the project."""

from __future__ import annotations

import re

__all__ = ["slugify"]


_WHITESPACE = re.compile(r"\s+")
_INVALID_SLUG_CHARACTERS = re.compile(r"[^a-z0-9\-_.]")
_MULTIPLE_HYPHENS = re.compile(r"-+")


def slugify(value: str) -> str:
    """Create a package manifest friendly slug from ``value``.

    The name is trimmed and lowercased, whitespace runs become a single hyphen
    and every character outside ``[a-z0-9-_.]`` is replaced by a hyphen.
    Repeated hyphens are collapsed and leading or trailing hyphens removed, so
    ``"My Cool App!!"`` becomes ``"my-cool-app"``.
    """

    text = str(value).strip().lower()
    text = _WHITESPACE.sub("-", text)
    text = _INVALID_SLUG_CHARACTERS.sub("-", text)
    text = _MULTIPLE_HYPHENS.sub("-", text)
    return text.strip("-")

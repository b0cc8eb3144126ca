"""Download snapshots of template repositories.

A fetch spec names a hosted repository, an optional subdirectory and an
optional ref, e.g. ``github:owner/repo/template#main``. The matching archive
is downloaded from the hosting service, the subdirectory is extracted into the
target directory and no history is kept.
"""

from __future__ import annotations

import logging
import re
import shutil
import sys
import tarfile
import tempfile
import urllib.error
import urllib.parse
import urllib.request
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from .errors import FetchError

__all__ = [
    "FALLBACK_PREFIX",
    "RepoDescriptor",
    "TemplateFetcher",
    "build_fetch_spec",
    "download_archive",
    "extract_archive",
    "strip_host_qualifier",
]

LOGGER = logging.getLogger(__name__)

FALLBACK_PREFIX = "github:"

SITES = {
    "github": "github.com",
    "gitlab": "gitlab.com",
    "bitbucket": "bitbucket.org",
}

_DESCRIPTOR_PATTERN = re.compile(
    r"""^
    (?:
        (?:https://)?(?P<host>[^:/\s]+\.[^:/\s]+)/   # https://github.com/
        | git@(?P<ssh_host>[^:/\s]+)[:/]              # git@github.com:
        | (?P<prefix>[a-z]+):                         # github:
    )?
    (?P<user>[^/\s#]+)/(?P<name>[^/\s#]+)
    (?P<subdir>(?:/[^/\s#]+)+)?
    /?
    (?:\#(?P<ref>.+))?
    $""",
    re.VERBOSE,
)

Downloader = Callable[[str, Path], None]


@dataclass(frozen=True, slots=True)
class RepoDescriptor:
    """Parsed form of a fetch spec."""

    site: str
    user: str
    name: str
    subdir: str = ""
    ref: str = "HEAD"

    @classmethod
    def parse(cls, spec: str) -> "RepoDescriptor":
        """Parse ``spec`` or raise :class:`FetchError` when it is malformed."""

        match = _DESCRIPTOR_PATTERN.match(spec.strip())
        if match is None:
            raise FetchError(f"could not parse repository '{spec}'", spec=spec)

        host = match.group("host") or match.group("ssh_host")
        prefix = match.group("prefix")
        if host:
            site = host.lower()
        elif prefix:
            if prefix not in SITES:
                raise FetchError(f"unsupported host '{prefix}' in '{spec}'", spec=spec)
            site = SITES[prefix]
        else:
            site = SITES["github"]

        if site not in SITES.values():
            raise FetchError(f"unsupported host '{site}' in '{spec}'", spec=spec)

        name = match.group("name").removesuffix(".git")
        subdir = (match.group("subdir") or "").strip("/")
        return cls(
            site=site,
            user=match.group("user"),
            name=name,
            subdir=subdir,
            ref=match.group("ref") or "HEAD",
        )

    @property
    def archive_url(self) -> str:
        """URL of the gzipped tarball for :attr:`ref`."""

        ref = urllib.parse.quote(self.ref, safe="")
        if self.site == "gitlab.com":
            return f"https://gitlab.com/{self.user}/{self.name}/repository/archive.tar.gz?ref={ref}"
        if self.site == "bitbucket.org":
            return f"https://bitbucket.org/{self.user}/{self.name}/get/{ref}.tar.gz"
        return f"https://github.com/{self.user}/{self.name}/archive/{ref}.tar.gz"


def build_fetch_spec(repo: str, template: str) -> str:
    """Combine a repository descriptor with a template subpath.

    ``"."`` selects the repository root and returns ``repo`` unchanged. A
    ``#ref`` suffix on ``repo`` stays at the end of the combined spec.
    """

    if template == ".":
        return repo
    base, hash_sign, ref = repo.partition("#")
    spec = f"{base.rstrip('/')}/{template.lstrip('/')}"
    return f"{spec}{hash_sign}{ref}"


def strip_host_qualifier(repo: str) -> str | None:
    """Return ``repo`` without :data:`FALLBACK_PREFIX`, or ``None`` if absent."""

    if repo.startswith(FALLBACK_PREFIX):
        return repo[len(FALLBACK_PREFIX):]
    return None


def download_archive(url: str, destination: Path) -> None:
    """Stream ``url`` into ``destination`` without any caching."""

    request = urllib.request.Request(url, headers={"User-Agent": "casting"})
    with urllib.request.urlopen(request) as response, destination.open("wb") as handle:
        shutil.copyfileobj(response, handle)


def _member_parts(member: tarfile.TarInfo) -> tuple[str, ...]:
    path = PurePosixPath(member.name)
    if path.is_absolute() or ".." in path.parts:
        raise tarfile.TarError(f"archive member '{member.name}' escapes the target directory")
    # archives wrap everything in a single "<name>-<ref>/" directory
    return path.parts[1:]


def extract_archive(archive_path: Path, target: Path, subdir: str = "") -> int:
    """Extract the ``subdir`` portion of ``archive_path`` into ``target``.

    Existing files are overwritten. Returns the number of files written.
    Raises :class:`tarfile.TarError` for members with absolute paths or
    ``..`` segments.
    """

    prefix = tuple(part for part in subdir.split("/") if part)
    target.mkdir(parents=True, exist_ok=True)
    written = 0

    with tarfile.open(archive_path, mode="r:*") as archive:
        for member in archive:
            parts = _member_parts(member)
            if parts[: len(prefix)] != prefix:
                continue
            relative = parts[len(prefix):]
            if not relative:
                continue

            destination = target.joinpath(*relative)
            if member.isdir():
                destination.mkdir(parents=True, exist_ok=True)
                continue
            if not member.isfile():
                LOGGER.debug("skipping non-regular archive member %s", member.name)
                continue

            source = archive.extractfile(member)
            if source is None:
                continue
            destination.parent.mkdir(parents=True, exist_ok=True)
            with source, destination.open("wb") as handle:
                shutil.copyfileobj(source, handle)
            if member.mode & 0o111:
                destination.chmod(0o755)
            written += 1

    return written


class TemplateFetcher:
    """Materialise template snapshots in a target directory."""

    def __init__(self, downloader: Downloader | None = None) -> None:
        self._download = downloader or download_archive

    def fetch(self, spec: str, target: Path) -> int:
        """Download ``spec`` into ``target``, returning the number of files written."""

        descriptor = RepoDescriptor.parse(spec)
        url = descriptor.archive_url
        LOGGER.debug("downloading %s from %s", spec, url)

        with tempfile.TemporaryDirectory(prefix="casting-") as scratch:
            archive_path = Path(scratch) / "archive.tar.gz"
            try:
                self._download(url, archive_path)
            except urllib.error.HTTPError as exc:
                raise FetchError(f"could not download {url}: HTTP {exc.code}", spec=spec) from exc
            except (urllib.error.URLError, OSError) as exc:
                raise FetchError(f"could not download {url}: {exc}", spec=spec) from exc

            try:
                written = extract_archive(archive_path, target, descriptor.subdir)
            except tarfile.TarError as exc:
                raise FetchError(f"could not read archive for {spec}: {exc}", spec=spec) from exc

        if not written:
            location = descriptor.subdir or "repository root"
            raise FetchError(f"could not find '{location}' in {descriptor.user}/{descriptor.name}", spec=spec)

        LOGGER.debug("extracted %d files into %s", written, target)
        return written

    def clone(self, repo: str, template: str, target: Path) -> str:
        """Fetch ``template`` from ``repo``, retrying once without the host qualifier.

        Returns the fetch spec that succeeded. Failures are reported on stderr
        and re-raised as :class:`FetchError` with ``reported`` set.
        """

        repo = repo.strip().rstrip("/")
        spec = build_fetch_spec(repo, template)
        try:
            self.fetch(spec, target)
            return spec
        except FetchError as exc:
            fallback = strip_host_qualifier(repo)
            if fallback is None:
                _report_failure(spec)
                raise FetchError(str(exc), spec=spec, reported=True) from exc
            LOGGER.debug("fetch of %s failed: %s", spec, exc)

        fallback_spec = build_fetch_spec(fallback, template)
        print(f'Failed to clone from "{spec}". Retrying with "{fallback_spec}"...', file=sys.stderr)
        try:
            self.fetch(fallback_spec, target)
        except FetchError as exc:
            _report_failure(fallback_spec)
            raise FetchError(str(exc), spec=fallback_spec, reported=True) from exc
        return fallback_spec


def _report_failure(spec: str) -> None:
    print(f'Failed to clone template from "{spec}".', file=sys.stderr)
    print(
        "Make sure the repo and template path are correct and the repo is public (or accessible).",
        file=sys.stderr,
    )

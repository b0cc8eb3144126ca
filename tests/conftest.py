from __future__ import annotations

import io
import subprocess
import sys
import tarfile
from pathlib import Path
from typing import Callable, Iterable, Mapping

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


def write_archive(
    path: Path,
    files: Mapping[str, str],
    *,
    top: str = "convexity-n-layer-template-HEAD",
    executable: Iterable[str] = (),
) -> Path:
    """Write a gzipped tarball laid out like a hosted repository archive."""

    executable = set(executable)
    with tarfile.open(path, mode="w:gz") as archive:
        root = tarfile.TarInfo(top)
        root.type = tarfile.DIRTYPE
        root.mode = 0o755
        archive.addfile(root)
        for name, content in files.items():
            data = content.encode("utf-8")
            info = tarfile.TarInfo(f"{top}/{name}")
            info.size = len(data)
            info.mode = 0o755 if name in executable else 0o644
            archive.addfile(info, io.BytesIO(data))
    return path


class FakeDownloader:
    """Serve a prepared archive, failing for URLs listed in ``failing``."""

    def __init__(self, archive: Path, failing: Iterable[str] = ()) -> None:
        self.archive = archive
        self.failing = set(failing)
        self.urls: list[str] = []

    def __call__(self, url: str, destination: Path) -> None:
        self.urls.append(url)
        if url in self.failing or "*" in self.failing:
            raise OSError(f"404 for {url}")
        destination.write_bytes(self.archive.read_bytes())


class FakeRun:
    """Stand-in for :func:`subprocess.run` recording every invocation.

    ``results`` maps an argv prefix to a return code, or to an exception that
    is raised instead of returning.
    """

    def __init__(self, results: Mapping[tuple[str, ...], int | BaseException] | None = None) -> None:
        self.results = dict(results or {})
        self.calls: list[tuple[list[str], Path, bool]] = []

    def __call__(self, argv, *, cwd, capture_output, text, check):
        self.calls.append((list(argv), Path(cwd), capture_output))
        outcome: int | BaseException = 0
        for prefix, result in self.results.items():
            if tuple(argv[: len(prefix)]) == prefix:
                outcome = result
        if isinstance(outcome, BaseException):
            raise outcome
        stderr = "" if outcome == 0 else "simulated failure"
        return subprocess.CompletedProcess(argv, outcome, stdout="", stderr=stderr)

    @property
    def commands(self) -> list[list[str]]:
        return [argv for argv, _, _ in self.calls]


def scripted_input(*answers: str | type[BaseException]) -> Callable[[str], str]:
    """Return an ``input`` replacement that replays ``answers`` in order."""

    queue = list(answers)
    prompts: list[str] = []

    def _input(message: str) -> str:
        prompts.append(message)
        answer = queue.pop(0)
        if isinstance(answer, type) and issubclass(answer, BaseException):
            raise answer()
        return answer

    _input.prompts = prompts  # type: ignore[attr-defined]
    return _input


@pytest.fixture(autouse=True)
def unresolved_executables(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep command names as written so fakes see plain argv."""

    monkeypatch.setattr("casting.steps.shutil.which", lambda name, *args, **kwargs: None)


@pytest.fixture()
def template_archive(tmp_path: Path) -> Path:
    return write_archive(
        tmp_path / "archive.tar.gz",
        {
            "README.md": "# root readme\n",
            "template/package.json": (
                '{\n  "name": "__PROJECT_SLUG__",\n'
                '  "description": "__PROJECT_NAME__ built from convexity-n-layer-template"\n}\n'
            ),
            "template/src/index.js": "console.log('hello');\n",
            "template/bin/start.sh": "#!/bin/sh\nnode src/index.js\n",
        },
        executable=["template/bin/start.sh"],
    )


@pytest.fixture()
def workspace(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    directory = tmp_path / "workspace"
    directory.mkdir()
    monkeypatch.chdir(directory)
    return directory

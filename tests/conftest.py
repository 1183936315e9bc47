"""Shared test fixtures for buildstash."""

from __future__ import annotations

import hashlib
import json
import shutil
import subprocess
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any

import pytest

from buildstash.core.loader import load_artifacts_config
from buildstash.core.repository import LocalRepository
from buildstash.models.config import ArtifactsConfig


# ---------------------------------------------------------------------------
# Test doubles
# ---------------------------------------------------------------------------


class FakeHasher:
    """``ContentHasher`` that reads the filesystem instead of the git index.

    Every regular file under the requested directories counts as tracked.
    The listing mirrors ``git ls-files -s``: mode, content digest and path.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, ...]] = []

    def list_tracked(self, root: Path, directories: Sequence[str]) -> bytes:
        self.calls.append(tuple(directories))
        entries: dict[str, str] = {}
        for directory in directories:
            for path in (root / directory).rglob("*"):
                if path.is_file():
                    rel = path.relative_to(root).as_posix()
                    entries[rel] = hashlib.sha1(path.read_bytes()).hexdigest()
        # git lists index entries in path order, whatever the argument order
        lines = [f"100644 {entries[rel]} 0\t{rel}" for rel in sorted(entries)]
        return ("\n".join(lines) + "\n").encode()

    def hash_stream(self, root: Path, data: bytes) -> str:
        return hashlib.sha1(data).hexdigest() + "\n"


class RecordingRunner:
    """``CommandRunner`` that records commands and runs a Python action instead.

    Parameters
    ----------
    actions:
        Map of command string to a callable ``(cwd) -> exit status``.
        Unknown commands succeed without side effects.
    """

    def __init__(self, actions: dict[str, Callable[[Path], int]] | None = None) -> None:
        self.actions = actions or {}
        self.commands: list[tuple[str, Path]] = []

    def run(self, command: str, cwd: Path) -> int:
        self.commands.append((command, cwd))
        action = self.actions.get(command)
        return action(cwd) if action else 0


def write_output(relative: str, files: dict[str, str]) -> Callable[[Path], int]:
    """Build-command action that writes ``files`` under ``cwd / relative``."""

    def _action(cwd: Path) -> int:
        out = cwd / relative
        for name, content in files.items():
            target = out / name
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content)
        return 0

    return _action


# ---------------------------------------------------------------------------
# Project layout
# ---------------------------------------------------------------------------


def make_artifacts_document(**overrides: Any) -> dict[str, Any]:
    """A two-unit, one-asset document using a local repository under the project."""
    document: dict[str, Any] = {
        "application": "shop",
        "root_directory": "__DIR__",
        "repository": {"adapter": "local", "options": {"root": "repo"}},
        "artifacts": [
            {
                "name": "api",
                "directories": ["api"],
                "command": "build api",
                "output_directory": "out/api",
                "deploy_location": "deploy/api",
                "artifact_prefix": "shop-api",
            },
            {
                "name": "web",
                "directories": ["web", "shared"],
                "command": "build web",
                "output_directory": "out/web",
                "deploy_location": "deploy/web",
                "artifact_prefix": "shop-web",
            },
        ],
        "assets": [
            {
                "name": "fonts",
                "filename": "fonts.tar.gz",
                "deploy_location": "public/fonts",
            },
        ],
    }
    document.update(overrides)
    return document


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """A project tree with ``api``, ``web`` and ``shared`` sources and an artifacts file."""
    root = tmp_path / "project"
    (root / "api").mkdir(parents=True)
    (root / "api" / "main.py").write_text("print('api')\n")
    (root / "web").mkdir()
    (root / "web" / "index.html").write_text("<h1>shop</h1>\n")
    (root / "shared").mkdir()
    (root / "shared" / "style.css").write_text("body {}\n")
    (root / "artifacts.json").write_text(json.dumps(make_artifacts_document(), indent=2))
    return root


@pytest.fixture
def artifacts_file(project_dir: Path) -> Path:
    return project_dir / "artifacts.json"


@pytest.fixture
def config(artifacts_file: Path) -> ArtifactsConfig:
    """The loaded configuration for ``project_dir``."""
    return load_artifacts_config(artifacts_file)


@pytest.fixture
def fake_hasher() -> FakeHasher:
    return FakeHasher()


@pytest.fixture
def repository(project_dir: Path) -> LocalRepository:
    """Local repository matching the artifacts document (``{project}/repo``)."""
    return LocalRepository(project_dir / "repo")


@pytest.fixture
def runner() -> RecordingRunner:
    """Runner whose build commands write each unit's output under ``out/``."""
    return RecordingRunner(
        {
            "build api": write_output("out/api", {"server.txt": "api build\n"}),
            "build web": write_output(
                "out/web", {"index.html": "<h1>built</h1>\n", "assets/app.js": "app();\n"}
            ),
        }
    )


# ---------------------------------------------------------------------------
# Git
# ---------------------------------------------------------------------------


def git(cwd: Path, *args: str) -> None:
    subprocess.run(["git", *args], cwd=cwd, check=True, capture_output=True)


@pytest.fixture
def git_project(project_dir: Path) -> Path:
    """``project_dir`` as a git repository with every source file staged."""
    if shutil.which("git") is None:
        pytest.skip("git not installed")
    git(project_dir, "init", "-q")
    git(project_dir, "add", "api", "web", "shared")
    return project_dir


@pytest.fixture
def write_document(project_dir: Path) -> Callable[..., Path]:
    """Factory fixture: rewrite ``artifacts.json`` with overridden top-level keys."""

    def _write(**overrides: Any) -> Path:
        path = project_dir / "artifacts.json"
        path.write_text(json.dumps(make_artifacts_document(**overrides), indent=2))
        return path

    return _write

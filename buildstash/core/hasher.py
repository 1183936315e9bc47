"""Fingerprints for unit source directories, from git-tracked content.

The fingerprint is the git object hash of the ``git ls-files -s`` listing
for the unit's directories. That listing holds mode, blob id and path for
every tracked entry, so the result depends only on tracked content and
relative paths — never on mtimes, ownership or untracked files.

The two git calls sit behind the ``ContentHasher`` protocol so tests can
substitute a fake without spawning processes.
"""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Sequence
from pathlib import Path
from typing import Protocol, runtime_checkable

from buildstash.core.errors import ConfigInvalidError, ExternalToolError, NotFoundError

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Protocol
# ---------------------------------------------------------------------------


@runtime_checkable
class ContentHasher(Protocol):
    """Capability that lists tracked content and hashes a byte stream."""

    def list_tracked(self, root: Path, directories: Sequence[str]) -> bytes:
        """Return the canonical listing of tracked entries under ``directories``."""
        ...

    def hash_stream(self, root: Path, data: bytes) -> str:
        """Return the hex content hash of ``data``."""
        ...


# ---------------------------------------------------------------------------
# Git implementation
# ---------------------------------------------------------------------------


class GitContentHasher:
    """``ContentHasher`` backed by the git binary.

    Parameters
    ----------
    git_binary:
        Name or path of the git executable.
    """

    def __init__(self, git_binary: str = "git") -> None:
        self.git_binary = git_binary

    def _run(self, args: list[str], cwd: Path, stdin: bytes | None = None) -> bytes:
        cmd = [self.git_binary, *args]
        display = " ".join(cmd)
        logger.debug("Running command: (%s) %s", cwd, display)
        try:
            result = subprocess.run(
                cmd,
                cwd=cwd,
                input=stdin,
                capture_output=True,
                check=False,
            )
        except OSError as exc:
            raise ExternalToolError(display, -1, str(exc)) from exc
        if result.returncode:
            raise ExternalToolError(
                display, result.returncode, result.stderr.decode("utf-8", "replace")
            )
        return result.stdout

    def list_tracked(self, root: Path, directories: Sequence[str]) -> bytes:
        return self._run(["ls-files", "-s", "--", *directories], cwd=root)

    def hash_stream(self, root: Path, data: bytes) -> str:
        out = self._run(["hash-object", "--stdin"], cwd=root, stdin=data)
        return out.decode("utf-8").strip()


# ---------------------------------------------------------------------------
# Fingerprint
# ---------------------------------------------------------------------------


def validate_directories(root: Path, directories: Sequence[str]) -> None:
    """Check that ``root`` and every directory under it exist."""
    if not directories:
        raise ConfigInvalidError("at least one directory is required to fingerprint")
    if not root.exists():
        raise NotFoundError(f"{root} directory does not exist")
    for directory in directories:
        full_path = root / directory
        if not full_path.exists():
            raise NotFoundError(f"{full_path} directory does not exist")


def fingerprint(
    root: Path | str,
    directories: Sequence[str],
    hasher: ContentHasher | None = None,
) -> str:
    """Return the content fingerprint of ``directories`` relative to ``root``.

    The listing comes back in index (path-sorted) order, so the order of
    ``directories`` does not change the result. Output is trimmed of
    trailing whitespace.
    """
    root_path = Path(root)
    validate_directories(root_path, directories)
    hasher = hasher or GitContentHasher()

    listing = hasher.list_tracked(root_path, directories)
    digest = hasher.hash_stream(root_path, listing).strip()
    logger.debug(
        "Fingerprint for %s in %s: %s", ", ".join(directories), root_path, digest
    )
    return digest

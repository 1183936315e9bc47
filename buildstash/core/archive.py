"""tar.gz archive codec for build output trees.

``pack`` writes directory entries and regular files (with their mode bits)
from a source tree into a gzip-compressed tar. ``unpack`` consumes the
archive sequentially and recreates the tree. Symlinks and special files
are skipped in both directions.

Files are extracted into a hidden ``.part`` sibling and renamed into
place, so a failure never leaves a half-written file under its real name.
"""

from __future__ import annotations

import logging
import os
import shutil
import tarfile
from pathlib import Path

from buildstash.core.errors import ArchiveError

logger = logging.getLogger(__name__)

_MODE_MASK = 0o777


def _norm_rel(path: str) -> str:
    path = path.replace("\\", "/")
    if path.startswith("./"):
        path = path[2:]
    return path.lstrip("/")


def _iter_tree(root: Path) -> tuple[list[str], list[str]]:
    """Return sorted relative directory and regular-file paths under ``root``."""
    dirs: list[str] = []
    files: list[str] = []

    for cur_root, cur_dirs, cur_files in os.walk(root):
        cur_dirs.sort()
        cur_files.sort()
        rel_root = os.path.relpath(cur_root, root)
        rel_root = "" if rel_root == "." else _norm_rel(rel_root)

        # os.walk does not descend into symlinked dirs, but still lists them
        for d in list(cur_dirs):
            if os.path.islink(os.path.join(cur_root, d)):
                cur_dirs.remove(d)
                continue
            dirs.append(_norm_rel(os.path.join(rel_root, d)))

        for f in cur_files:
            full = os.path.join(cur_root, f)
            if os.path.islink(full) or not os.path.isfile(full):
                logger.debug("Skipping non-regular file %s", full)
                continue
            files.append(_norm_rel(os.path.join(rel_root, f)))

    return dirs, files


def pack(source_dir: Path | str, archive_path: Path | str) -> None:
    """Write every directory and regular file under ``source_dir`` to ``archive_path``.

    Raises ``ArchiveError`` if the source is not a directory or any read or
    write fails.
    """
    source = Path(source_dir)
    if not source.is_dir():
        raise ArchiveError(f"cannot pack {source}: directory does not exist")

    dirs, files = _iter_tree(source)
    try:
        with tarfile.open(archive_path, "w:gz") as tar:
            for rel in dirs:
                st = os.stat(source / rel)
                info = tarfile.TarInfo(rel)
                info.type = tarfile.DIRTYPE
                info.mode = st.st_mode & _MODE_MASK
                info.mtime = int(st.st_mtime)
                tar.addfile(info)

            for rel in files:
                full = source / rel
                st = os.stat(full)
                info = tarfile.TarInfo(rel)
                info.type = tarfile.REGTYPE
                info.size = st.st_size
                info.mode = st.st_mode & _MODE_MASK
                info.mtime = int(st.st_mtime)
                with open(full, "rb") as fh:
                    tar.addfile(info, fileobj=fh)
    except (OSError, tarfile.TarError) as exc:
        raise ArchiveError(f"Failed to pack {source} into {archive_path}: {exc}") from exc

    logger.info(
        "Packed %s (%d dirs, %d files) into %s", source, len(dirs), len(files), archive_path
    )


def _member_target(dest_root: Path, name: str) -> Path:
    """Map an archive member name to a path that must stay inside ``dest_root``."""
    if os.path.isabs(name) or name.startswith(("/", "\\")):
        raise ArchiveError(f"refusing absolute archive member: {name}")
    target = (dest_root / _norm_rel(name)).resolve()
    if target != dest_root and not target.is_relative_to(dest_root):
        raise ArchiveError(f"refusing archive member outside destination: {name}")
    return target


def _write_member(tar: tarfile.TarFile, member: tarfile.TarInfo, target: Path) -> None:
    source = tar.extractfile(member)
    if source is None:
        raise ArchiveError(f"archive member {member.name} is not readable")

    target.parent.mkdir(parents=True, exist_ok=True)
    part = target.with_name(f".{target.name}.part")
    try:
        with source, open(part, "wb") as out:
            shutil.copyfileobj(source, out)
        os.chmod(part, member.mode & _MODE_MASK)
        os.replace(part, target)
    finally:
        if part.exists():
            part.unlink()


def unpack(archive_path: Path | str, dest_dir: Path | str) -> None:
    """Extract ``archive_path`` into ``dest_dir``, creating it if needed.

    Entries are processed in archive order. Directory modes are applied
    after all files are written so read-only directories can be populated.
    Raises ``ArchiveError`` for any failure; the whole operation fails.
    """
    dest = Path(dest_dir)
    dir_modes: list[tuple[Path, int]] = []
    extracted = 0

    try:
        dest.mkdir(parents=True, exist_ok=True)
        dest_root = dest.resolve()
        with tarfile.open(archive_path, "r:gz") as tar:
            for member in tar:
                target = _member_target(dest_root, member.name)
                if member.isdir():
                    target.mkdir(parents=True, exist_ok=True)
                    dir_modes.append((target, member.mode & _MODE_MASK))
                elif member.isreg():
                    _write_member(tar, member, target)
                    extracted += 1
                else:
                    logger.debug("Skipping non-regular archive member %s", member.name)

        for path, mode in reversed(dir_modes):
            os.chmod(path, mode)
    except (OSError, EOFError, tarfile.TarError) as exc:
        raise ArchiveError(f"Failed to unpack {archive_path} into {dest}: {exc}") from exc

    logger.info("Unpacked %d file(s) from %s into %s", extracted, archive_path, dest)

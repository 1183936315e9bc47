"""Artifact identifiers: ``{artifact_prefix}-{fingerprint}.tar.gz``."""

from __future__ import annotations

from pathlib import Path

from buildstash.core.hasher import ContentHasher, fingerprint
from buildstash.models.config import ARCHIVE_EXTENSION, ArtifactsConfig, UnitConfig


def format_artifact_name(prefix: str, digest: str) -> str:
    """Join a prefix and a fingerprint into a repository blob name."""
    return f"{prefix}-{digest}.{ARCHIVE_EXTENSION}"


def unit_artifact_name(
    unit: UnitConfig, root: Path, hasher: ContentHasher | None = None
) -> str:
    """Fingerprint ``unit``'s directories under ``root`` and name its artifact."""
    return format_artifact_name(
        unit.artifact_prefix, fingerprint(root, unit.directories, hasher)
    )


def artifact_name(
    unit_name: str, config: ArtifactsConfig, hasher: ContentHasher | None = None
) -> str:
    """Look up ``unit_name`` in ``config`` and return its artifact identifier.

    Raises ``NotFoundError`` for an unknown unit; fingerprint errors
    propagate unchanged.
    """
    unit = config.get_unit(unit_name)
    return unit_artifact_name(unit, config.project_root, hasher)

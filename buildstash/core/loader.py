"""Load and validate the artifacts configuration document.

The document is JSON, validated through the frozen models in
``buildstash.models.config``. The project root is resolved once here and
is absolute on every returned config.
"""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import ValidationError

from buildstash.core.errors import ConfigInvalidError
from buildstash.models.config import DIR_PLACEHOLDER, ArtifactsConfig

logger = logging.getLogger(__name__)


def resolve_project_root(root_directory: Path, config_path: Path) -> Path:
    """Resolve the configured root to an absolute path.

    ``__DIR__`` means the directory holding the configuration file; any
    other relative path is taken relative to the working directory.
    """
    if str(root_directory) == DIR_PLACEHOLDER:
        return config_path.resolve().parent
    return root_directory.resolve()


def parse_artifacts_config(text: str | bytes, config_path: Path) -> ArtifactsConfig:
    """Validate a JSON document and resolve its project root."""
    try:
        config = ArtifactsConfig.model_validate_json(text)
    except ValidationError as exc:
        raise ConfigInvalidError(
            f"Invalid artifacts configuration {config_path}:\n{exc}"
        ) from exc

    root = resolve_project_root(config.root_directory, config_path)
    return config.model_copy(update={"root_directory": root})


def load_artifacts_config(path: Path | str) -> ArtifactsConfig:
    """Read ``path`` and return a validated ``ArtifactsConfig``.

    Raises ``ConfigInvalidError`` if the file cannot be read or is not a
    valid configuration document.
    """
    config_path = Path(path)
    try:
        text = config_path.read_bytes()
    except OSError as exc:
        raise ConfigInvalidError(
            f"Cannot read artifacts configuration {config_path}: {exc}"
        ) from exc

    config = parse_artifacts_config(text, config_path)
    logger.debug(
        "Loaded %d artifact(s) and %d asset(s) from %s (root %s)",
        len(config.artifacts),
        len(config.assets),
        config_path,
        config.project_root,
    )
    return config

"""Runtime settings — env-driven, overridable from the CLI.

Centralized settings using pydantic-settings. Reads from a .env file and
BUILDSTASH_* environment variables. The artifacts configuration document
itself (units, assets, repository) is loaded separately by
``buildstash.core.loader``.
"""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class BuildstashSettings(BaseSettings):
    """Process settings with environment variable overrides.

    Examples
    --------
    Override via environment::

        export BUILDSTASH_ARTIFACTS_FILE=deploy/artifacts.json
        export BUILDSTASH_LOG_LEVEL=DEBUG
        export BUILDSTASH_FORCE_LOCAL=true

    Or via .env file::

        BUILDSTASH_GIT_BINARY=/usr/local/bin/git
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="BUILDSTASH_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    artifacts_file: Path = Path("artifacts.json")
    log_level: str = "WARNING"

    # Tooling
    git_binary: str = "git"

    # Temporary archives; None means the platform default temp directory
    temp_dir: Path | None = None

    # Always use the local repository backend, whatever the document says
    force_local: bool = False

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level: {value}")
        return level

"""Configuration document models — units, assets and the repository backend.

Loaded from ``artifacts.json`` by :func:`buildstash.core.loader.load_artifacts_config`.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from buildstash.core.errors import NotFoundError

# Placeholder for "the directory containing the configuration file".
DIR_PLACEHOLDER = "__DIR__"

ARCHIVE_EXTENSION = "tar.gz"


class UnitConfig(BaseModel):
    """A buildable unit: source directories, build command and deploy target.

    The fingerprint covers the tracked entries under ``directories`` in
    path order, independent of how the list is ordered.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    directories: list[str]
    command: str = ""
    output_directory: str = ""
    deploy_location: str = ""
    artifact_prefix: str

    @field_validator("directories")
    @classmethod
    def _directories_ordered_set(cls, value: list[str]) -> list[str]:
        if not value:
            raise ValueError("at least one directory is required")
        if len(set(value)) != len(value):
            raise ValueError("directories must not contain duplicates")
        return value


class AssetConfig(BaseModel):
    """A pre-built blob deployed verbatim — no fingerprint involved."""

    model_config = ConfigDict(frozen=True)

    name: str
    filename: str
    deploy_location: str


class RepositoryOptions(BaseModel):
    """Backend options. Which fields are required depends on the adapter."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    root: str = ""
    region: str = ""
    bucket_name: str = Field(default="", alias="bucket-name")
    path_prefix: str = Field(default="", alias="path-prefix")
    profile: str = ""


class RepositoryConfig(BaseModel):
    """Repository backend selection: an adapter tag plus its options."""

    model_config = ConfigDict(frozen=True)

    adapter: str = "local"
    options: RepositoryOptions = RepositoryOptions()

    @field_validator("adapter")
    @classmethod
    def _normalize_adapter(cls, value: str) -> str:
        return value.strip().lower()


class ArtifactsConfig(BaseModel):
    """The whole configuration document for one application."""

    model_config = ConfigDict(frozen=True)

    application: str = ""
    root_directory: Path = Path(DIR_PLACEHOLDER)
    repository: RepositoryConfig = RepositoryConfig()
    artifacts: list[UnitConfig] = []
    assets: list[AssetConfig] = []

    @model_validator(mode="after")
    def _unique_names(self) -> ArtifactsConfig:
        for kind, items in (("artifact", self.artifacts), ("asset", self.assets)):
            seen: set[str] = set()
            for item in items:
                key = item.name.lower()
                if key in seen:
                    raise ValueError(f"duplicate {kind} name: {item.name}")
                seen.add(key)
        return self

    @property
    def project_root(self) -> Path:
        return self.root_directory

    def get_unit(self, name: str) -> UnitConfig:
        """Return the unit with exactly this name.

        Raises ``NotFoundError`` if no unit matches.
        """
        for unit in self.artifacts:
            if unit.name == name:
                return unit
        raise NotFoundError(f"config for {name} not found in artifacts configuration")

    def get_asset(self, name: str) -> AssetConfig:
        """Return the asset with exactly this name."""
        for asset in self.assets:
            if asset.name == name:
                return asset
        raise NotFoundError(f"asset {name} not found in artifacts configuration")

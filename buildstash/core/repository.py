"""Repository backends holding immutable, named artifact blobs.

Every backend exposes exactly three operations — ``store``, ``exists`` and
``retrieve`` — over a flat namespace of blob names. Backends are chosen by
the ``repository.adapter`` tag through ``_ADAPTER_FACTORIES``; adding a
backend means registering a factory there.

Layouts
-------
- local: ``{root}/{name}``
- s3:    ``s3://{bucket}/{prefix}/{name}`` (bare ``{name}`` without prefix)
"""

from __future__ import annotations

import logging
import shutil
from abc import ABC, abstractmethod
from collections.abc import Callable
from pathlib import Path
from typing import Any

import boto3
from boto3.exceptions import S3UploadFailedError
from botocore.exceptions import BotoCoreError, ClientError, ProfileNotFound

from buildstash.core.errors import (
    ArchiveError,
    BackendError,
    ConfigInvalidError,
    NotFoundError,
)
from buildstash.models.config import ArtifactsConfig, RepositoryConfig

logger = logging.getLogger(__name__)

# Error codes S3 returns for a key that does not exist.
_S3_NOT_FOUND_CODES = frozenset({"404", "NoSuchKey", "NotFound"})


class RepositoryAdapter(ABC):
    """Uniform store / exists / retrieve over one repository backend."""

    @abstractmethod
    def store(self, source_path: Path, name: str) -> None:
        """Copy the blob at ``source_path`` into the repository as ``name``.

        Overwrites an existing entry with the same name.
        """

    @abstractmethod
    def exists(self, name: str) -> bool:
        """Return whether ``name`` is present, without fetching content."""

    @abstractmethod
    def retrieve(self, name: str, destination_path: Path) -> None:
        """Copy entry ``name`` to ``destination_path``.

        Raises ``NotFoundError`` if the entry is absent.
        """


# ---------------------------------------------------------------------------
# Local filesystem
# ---------------------------------------------------------------------------


class LocalRepository(RepositoryAdapter):
    """Entries are plain files directly under ``root``.

    Parameters
    ----------
    root:
        Repository directory. Created on first store.
    """

    def __init__(self, root: Path | str) -> None:
        if not str(root).strip():
            raise ConfigInvalidError("local repository root not specified")
        self.root = Path(root)

    def _entry_path(self, name: str) -> Path:
        return self.root / name

    def store(self, source_path: Path, name: str) -> None:
        dest = self._entry_path(name)
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(source_path, dest)
        except OSError as exc:
            raise ArchiveError(
                f"Failed to copy {source_path} to repository as {name}: {exc}"
            ) from exc
        logger.info("Stored %s in local repository %s", name, self.root)

    def exists(self, name: str) -> bool:
        return self._entry_path(name).is_file()

    def retrieve(self, name: str, destination_path: Path) -> None:
        source = self._entry_path(name)
        if not source.is_file():
            raise NotFoundError(f"artifact {name} not found in repository {self.root}")
        destination_path = Path(destination_path)
        try:
            destination_path.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(source, destination_path)
        except OSError as exc:
            raise ArchiveError(
                f"Failed to copy {name} from repository to {destination_path}: {exc}"
            ) from exc
        logger.debug("Retrieved %s to %s", name, destination_path)


# ---------------------------------------------------------------------------
# S3
# ---------------------------------------------------------------------------


class S3Repository(RepositoryAdapter):
    """Entries are objects in an S3 bucket, optionally under a key prefix.

    Parameters
    ----------
    bucket:
        Bucket name. Required.
    region:
        AWS region. Required.
    prefix:
        Optional key prefix; surrounding slashes are ignored.
    profile:
        Optional shared-credentials profile name.
    client:
        Pre-built S3 client. When omitted one is created from a boto3
        session for ``region`` and ``profile``.
    """

    def __init__(
        self,
        bucket: str,
        region: str,
        prefix: str = "",
        profile: str | None = None,
        *,
        client: Any | None = None,
    ) -> None:
        if not region:
            raise ConfigInvalidError("S3 region not specified")
        if not bucket:
            raise ConfigInvalidError("S3 bucket name not specified")
        self.bucket = bucket
        self.region = region
        self.prefix = prefix.strip("/")
        self._client = client if client is not None else self._make_client(region, profile)

    @staticmethod
    def _make_client(region: str, profile: str | None) -> Any:
        try:
            session = boto3.Session(
                profile_name=profile or None, region_name=region
            )
            return session.client("s3")
        except ProfileNotFound as exc:
            raise ConfigInvalidError(f"AWS profile not found: {profile}") from exc
        except BotoCoreError as exc:
            raise ConfigInvalidError(f"Failed to load AWS configuration: {exc}") from exc

    def key(self, name: str) -> str:
        """Object key for blob ``name``."""
        if not self.prefix:
            return name
        return f"{self.prefix}/{name}"

    def _uri(self, name: str) -> str:
        return f"s3://{self.bucket}/{self.key(name)}"

    def store(self, source_path: Path, name: str) -> None:
        try:
            self._client.upload_file(str(source_path), self.bucket, self.key(name))
        except (S3UploadFailedError, ClientError, BotoCoreError) as exc:
            raise BackendError(f"Failed to upload {name} to {self._uri(name)}: {exc}") from exc
        except OSError as exc:
            raise ArchiveError(f"Failed to read {source_path} for upload: {exc}") from exc
        logger.info("Stored %s", self._uri(name))

    def exists(self, name: str) -> bool:
        try:
            self._client.head_object(Bucket=self.bucket, Key=self.key(name))
        except ClientError as exc:
            if _client_error_code(exc) in _S3_NOT_FOUND_CODES:
                return False
            raise BackendError(
                f"Failed to check if {self._uri(name)} exists: {exc}"
            ) from exc
        except BotoCoreError as exc:
            raise BackendError(
                f"Failed to check if {self._uri(name)} exists: {exc}"
            ) from exc
        return True

    def retrieve(self, name: str, destination_path: Path) -> None:
        destination_path = Path(destination_path)
        try:
            destination_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ArchiveError(
                f"Failed to create destination directory for {destination_path}: {exc}"
            ) from exc

        try:
            self._client.download_file(self.bucket, self.key(name), str(destination_path))
        except ClientError as exc:
            if _client_error_code(exc) in _S3_NOT_FOUND_CODES:
                raise NotFoundError(f"artifact {self._uri(name)} not found") from exc
            raise BackendError(f"Failed to download {self._uri(name)}: {exc}") from exc
        except BotoCoreError as exc:
            raise BackendError(f"Failed to download {self._uri(name)}: {exc}") from exc
        logger.debug("Retrieved %s to %s", self._uri(name), destination_path)


def _client_error_code(exc: ClientError) -> str:
    return str(exc.response.get("Error", {}).get("Code", ""))


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


def _make_local(repo: RepositoryConfig, project_root: Path) -> RepositoryAdapter:
    root = repo.options.root
    if not root:
        raise ConfigInvalidError("local repository root not specified")
    return LocalRepository(project_root / root)


def _make_s3(repo: RepositoryConfig, project_root: Path) -> RepositoryAdapter:
    opts = repo.options
    return S3Repository(
        bucket=opts.bucket_name,
        region=opts.region,
        prefix=opts.path_prefix,
        profile=opts.profile or None,
    )


_ADAPTER_FACTORIES: dict[str, Callable[[RepositoryConfig, Path], RepositoryAdapter]] = {
    "local": _make_local,
    "s3": _make_s3,
}


def register_adapter(
    tag: str, factory: Callable[[RepositoryConfig, Path], RepositoryAdapter]
) -> None:
    """Register a backend factory under ``tag`` (case-insensitive)."""
    _ADAPTER_FACTORIES[tag.strip().lower()] = factory


def create_repository(config: ArtifactsConfig, force_local: bool = False) -> RepositoryAdapter:
    """Build the repository backend described by ``config``.

    ``force_local`` selects the local backend regardless of the adapter
    tag. A relative local root is resolved against the project root.
    Missing required options raise ``ConfigInvalidError`` immediately.
    """
    tag = "local" if force_local else config.repository.adapter
    factory = _ADAPTER_FACTORIES.get(tag)
    if factory is None:
        raise ConfigInvalidError(f"unknown repository adapter type: {config.repository.adapter}")
    adapter = factory(config.repository, config.project_root)
    logger.debug("Using %s repository backend", tag)
    return adapter

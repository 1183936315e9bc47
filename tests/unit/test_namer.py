"""Tests for artifact names."""

from __future__ import annotations

import re

import pytest

from buildstash.core.errors import NotFoundError
from buildstash.core.hasher import fingerprint
from buildstash.core.namer import artifact_name, format_artifact_name, unit_artifact_name


class TestArtifactNames:
    def test_format(self):
        assert format_artifact_name("shop-api", "abc123") == "shop-api-abc123.tar.gz"

    def test_unit_name_uses_prefix_and_fingerprint(self, config, fake_hasher):
        digest = fingerprint(config.project_root, ["api"], fake_hasher)
        name = unit_artifact_name(config.get_unit("api"), config.project_root, fake_hasher)
        assert name == f"shop-api-{digest}.tar.gz"

    def test_lookup_by_unit_name(self, config, fake_hasher):
        name = artifact_name("web", config, fake_hasher)
        assert re.fullmatch(r"shop-web-[0-9a-f]{40}\.tar\.gz", name)

    def test_same_source_same_name(self, config, fake_hasher):
        assert artifact_name("api", config, fake_hasher) == artifact_name(
            "api", config, fake_hasher
        )

    def test_source_change_changes_name(self, config, project_dir, fake_hasher):
        before = artifact_name("api", config, fake_hasher)
        (project_dir / "api" / "main.py").write_text("print('v2')\n")
        assert artifact_name("api", config, fake_hasher) != before

    def test_unknown_unit(self, config, fake_hasher):
        with pytest.raises(NotFoundError):
            artifact_name("billing", config, fake_hasher)

    def test_missing_directory_propagates(self, config, project_dir, fake_hasher):
        (project_dir / "shared" / "style.css").unlink()
        (project_dir / "shared").rmdir()
        with pytest.raises(NotFoundError, match="directory does not exist"):
            artifact_name("web", config, fake_hasher)

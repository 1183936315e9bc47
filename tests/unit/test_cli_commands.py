"""Tests for the CLI — command registration, global options and exit codes.

Exercised through typer.testing.CliRunner against a real project tree.
"""

from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

from buildstash.cli.app import app
from buildstash.core.archive import pack
from buildstash.core.hasher import fingerprint
from buildstash.core.repository import LocalRepository

runner = CliRunner(env={"COLUMNS": "200"})

SHELL_UNITS = [
    {
        "name": "api",
        "directories": ["api"],
        "command": "mkdir -p out/api && echo 'api build' > out/api/server.txt",
        "output_directory": "out/api",
        "deploy_location": "deploy/api",
        "artifact_prefix": "shop-api",
    },
    {
        "name": "web",
        "directories": ["web", "shared"],
        "command": "mkdir -p out/web && echo '<h1>built</h1>' > out/web/index.html",
        "output_directory": "out/web",
        "deploy_location": "deploy/web",
        "artifact_prefix": "shop-web",
    },
]


def invoke(artifacts_file: Path, *args: str):
    return runner.invoke(app, ["--artifacts", str(artifacts_file), *args])


def _publish_fonts(project_dir: Path, tmp_path: Path) -> None:
    src = tmp_path / "fonts-src"
    src.mkdir()
    (src / "inter.woff2").write_text("font")
    pack(src, tmp_path / "fonts.tar.gz")
    LocalRepository(project_dir / "repo").store(tmp_path / "fonts.tar.gz", "fonts.tar.gz")


@pytest.fixture
def shell_project(git_project: Path, write_document) -> Path:
    """Git project whose units build with real shell commands."""
    return write_document(artifacts=SHELL_UNITS)


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------


class TestCliApp:
    def test_no_args_shows_help(self):
        result = runner.invoke(app, [])
        assert result.exit_code in (0, 2)
        assert "Usage" in result.output or "usage" in result.output.lower()

    @pytest.mark.parametrize(
        "command",
        [
            "hash",
            "artifact-names",
            "hash-application",
            "should-build",
            "do-builds",
            "do-deploys",
            "deploy-assets",
            "do-cleanup",
        ],
    )
    def test_command_registered(self, command: str):
        result = runner.invoke(app, [command, "--help"])
        assert result.exit_code == 0

    def test_unknown_log_level(self, artifacts_file: Path):
        result = runner.invoke(
            app, ["--artifacts", str(artifacts_file), "--log-level", "chatty", "do-cleanup"]
        )
        assert result.exit_code == 2


# ---------------------------------------------------------------------------
# Configuration errors
# ---------------------------------------------------------------------------


class TestConfigErrors:
    def test_missing_artifacts_file(self, tmp_path: Path):
        result = invoke(tmp_path / "absent.json", "do-cleanup")
        assert result.exit_code == 1
        assert "Cannot read artifacts configuration" in result.output

    def test_s3_without_region(self, project_dir: Path, tmp_path: Path, write_document):
        path = write_document(
            repository={"adapter": "s3", "options": {"bucket-name": "builds", "root": "repo"}}
        )
        _publish_fonts(project_dir, tmp_path)
        result = invoke(path, "deploy-assets")
        assert result.exit_code == 1
        assert "S3 region not specified" in result.output

    def test_local_flag_overrides_adapter(self, project_dir: Path, tmp_path: Path, write_document):
        path = write_document(
            repository={"adapter": "s3", "options": {"bucket-name": "builds", "root": "repo"}}
        )
        _publish_fonts(project_dir, tmp_path)
        result = runner.invoke(app, ["--artifacts", str(path), "--local", "deploy-assets"])
        assert result.exit_code == 0, result.output
        assert (project_dir / "public" / "fonts" / "inter.woff2").read_text() == "font"


# ---------------------------------------------------------------------------
# Listing
# ---------------------------------------------------------------------------


class TestListingCommands:
    def test_hash(self, git_project: Path):
        result = runner.invoke(app, ["hash", str(git_project), "web", "shared"])
        assert result.exit_code == 0, result.output
        assert result.output.strip() == fingerprint(git_project, ["web", "shared"])

    def test_hash_dir_placeholder_means_cwd(
        self, git_project: Path, monkeypatch: pytest.MonkeyPatch
    ):
        monkeypatch.chdir(git_project)
        result = runner.invoke(app, ["hash", "__DIR__", "api"])
        assert result.exit_code == 0, result.output
        assert result.output.strip() == fingerprint(git_project, ["api"])

    def test_hash_missing_directory(self, git_project: Path):
        result = runner.invoke(app, ["hash", str(git_project), "nope"])
        assert result.exit_code == 1
        assert "directory does not exist" in result.output

    def test_artifact_names_filter(self, git_project: Path):
        result = invoke(git_project / "artifacts.json", "artifact-names", "-f", "API")
        assert result.exit_code == 0, result.output
        digest = fingerprint(git_project, ["api"])
        assert f"shop-api-{digest}.tar.gz" in result.output
        assert "shop-web-" not in result.output

    def test_hash_application(self, git_project: Path):
        result = invoke(git_project / "artifacts.json", "hash-application")
        assert result.exit_code == 0, result.output
        assert fingerprint(git_project, ["api"]) in result.output
        assert fingerprint(git_project, ["web", "shared"]) in result.output

    def test_unknown_filter_prints_nothing_found(self, artifacts_file: Path):
        result = invoke(artifacts_file, "artifact-names", "-f", "billing")
        assert result.exit_code == 0
        assert "No artifacts found" in result.output


# ---------------------------------------------------------------------------
# Build and deploy
# ---------------------------------------------------------------------------


class TestBuildCommands:
    def test_should_build_on_empty_repository(self, shell_project: Path):
        result = invoke(shell_project, "should-build")
        assert result.exit_code == 0, result.output
        assert "YES" in result.output
        assert "NO" not in result.output

    def test_build_then_skip(self, shell_project: Path, git_project: Path):
        first = invoke(shell_project, "do-builds")
        assert first.exit_code == 0, first.output
        assert "Doing build for api - YES" in first.output
        assert "Saved shop-api-" in first.output
        assert len(list((git_project / "repo").glob("*.tar.gz"))) == 2

        second = invoke(shell_project, "do-builds")
        assert second.exit_code == 0, second.output
        assert "Doing build for api - NO" in second.output
        assert "Beginning build" not in second.output

    def test_force(self, shell_project: Path):
        invoke(shell_project, "do-builds")
        result = invoke(shell_project, "do-builds", "--force", "-f", "web")
        assert result.exit_code == 0, result.output
        assert "Beginning build for web application" in result.output
        assert "Doing build for api" not in result.output

    def test_failed_build_exits_non_zero(self, git_project: Path, write_document):
        units = [dict(SHELL_UNITS[0], command="exit 3"), SHELL_UNITS[1]]
        path = write_document(artifacts=units)
        result = invoke(path, "do-builds")
        assert result.exit_code == 1
        assert "command exited with status 3" in result.output
        assert "Saved shop-web-" in result.output

    def test_deploy_after_build(self, shell_project: Path, git_project: Path):
        invoke(shell_project, "do-builds")
        result = invoke(shell_project, "do-deploys")
        assert result.exit_code == 0, result.output
        assert "Downloaded" in result.output
        assert (git_project / "deploy" / "api" / "server.txt").read_text() == "api build\n"
        assert (git_project / "deploy" / "web" / "index.html").exists()

    def test_deploy_without_artifact(self, shell_project: Path):
        result = invoke(shell_project, "do-deploys")
        assert result.exit_code == 1
        assert "not found in repository" in result.output


class TestAssetCommands:
    def test_deploy_assets(self, artifacts_file: Path, project_dir: Path, tmp_path: Path):
        _publish_fonts(project_dir, tmp_path)
        result = invoke(artifacts_file, "deploy-assets")
        assert result.exit_code == 0, result.output
        assert (project_dir / "public" / "fonts" / "inter.woff2").exists()

    def test_deploy_missing_asset(self, artifacts_file: Path):
        result = invoke(artifacts_file, "deploy-assets")
        assert result.exit_code == 1
        assert "fonts.tar.gz not found" in result.output

    def test_cleanup(self, artifacts_file: Path, project_dir: Path):
        fonts = project_dir / "public" / "fonts"
        fonts.mkdir(parents=True)
        (fonts / "old.woff2").write_text("old")
        result = invoke(artifacts_file, "do-cleanup")
        assert result.exit_code == 0, result.output
        assert "Successfully cleaned up" in result.output
        assert fonts.is_dir()
        assert list(fonts.iterdir()) == []

    def test_cleanup_missing_directory(self, artifacts_file: Path):
        result = invoke(artifacts_file, "do-cleanup")
        assert result.exit_code == 0
        assert "Directory does not exist" in result.output

    def test_cleanup_exclude_everything(self, artifacts_file: Path):
        result = invoke(artifacts_file, "do-cleanup", "-e", "FONTS")
        assert result.exit_code == 0
        assert "No assets found" in result.output

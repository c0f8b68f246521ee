"""Tests for sketchctl CLI config commands."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from sketchctl.cli.main import cli
from sketchctl.core.config import Config


@pytest.fixture
def runner() -> CliRunner:
    """Create a CLI test runner."""
    return CliRunner()


@pytest.fixture
def config_file(tmp_path: Path, monkeypatch) -> Path:
    for name in ("SKETCH_URL", "SKETCH_PROFILE"):
        monkeypatch.delenv(name, raising=False)
    path = tmp_path / "config.yaml"
    with patch("sketchctl.cli.config_cmd.CONFIG_FILE", path):
        yield path


def _seed(path: Path) -> None:
    cfg = Config()
    cfg.add_profile("default", "https://sketch.example.org")
    cfg.add_profile("dev", "https://sketch-dev.example.org", verify_ssl=False)
    cfg.save(path)


class TestConfigInit:
    """Tests for config init command."""

    def test_init_new(self, runner: CliRunner, config_file: Path):
        result = runner.invoke(
            cli, ["config", "init", "--url", "https://sketch.example.org/", "--prefix", "uploads"]
        )

        assert result.exit_code == 0, result.output
        cfg = Config.load(config_file)
        assert cfg.default_profile == "default"
        assert cfg.get_profile().url == "https://sketch.example.org"
        assert cfg.get_profile().default_prefix == "uploads"

    def test_init_existing_profile_without_force(self, runner: CliRunner, config_file: Path):
        _seed(config_file)

        result = runner.invoke(cli, ["config", "init", "--url", "https://other.example.org"])

        assert result.exit_code == 1
        assert Config.load(config_file).get_profile().url == "https://sketch.example.org"

    def test_init_with_force(self, runner: CliRunner, config_file: Path):
        _seed(config_file)

        result = runner.invoke(
            cli, ["config", "init", "--url", "https://other.example.org", "--force"]
        )

        assert result.exit_code == 0
        cfg = Config.load(config_file)
        assert cfg.get_profile().url == "https://other.example.org"
        assert cfg.has_profile("dev")

    def test_init_invalid_url(self, runner: CliRunner, config_file: Path):
        result = runner.invoke(cli, ["config", "init", "--url", "ftp://nope"])

        assert result.exit_code == 1
        assert not config_file.exists()


class TestConfigShow:
    """Tests for config show command."""

    def test_show_json(self, runner: CliRunner, config_file: Path):
        _seed(config_file)

        result = runner.invoke(cli, ["config", "show", "-o", "json"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["profiles"] == ["default", "dev"]
        assert data["profile_details"]["dev"]["verify_ssl"] is False

    def test_show_table(self, runner: CliRunner, config_file: Path):
        _seed(config_file)

        result = runner.invoke(cli, ["config", "show"])

        assert result.exit_code == 0
        assert "Profile: default (default)" in result.output
        assert "sketch-dev.example.org" in result.output

    def test_show_empty(self, runner: CliRunner, config_file: Path):
        result = runner.invoke(cli, ["config", "show"])
        assert result.exit_code == 1


class TestProfiles:
    """Tests for profile management commands."""

    def test_use_context(self, runner: CliRunner, config_file: Path):
        _seed(config_file)

        result = runner.invoke(cli, ["config", "use-context", "dev"])

        assert result.exit_code == 0
        assert Config.load(config_file).default_profile == "dev"

    def test_use_context_missing(self, runner: CliRunner, config_file: Path):
        _seed(config_file)

        result = runner.invoke(cli, ["config", "use-context", "prod"])

        assert result.exit_code == 1
        assert "Available profiles" in result.output

    def test_add_profile(self, runner: CliRunner, config_file: Path):
        _seed(config_file)

        result = runner.invoke(
            cli,
            [
                "config",
                "add-profile",
                "prod",
                "--url",
                "https://sketch-prod.example.org",
                "--max-concurrent",
                "5",
                "--no-verify-ssl",
            ],
        )

        assert result.exit_code == 0, result.output
        profile = Config.load(config_file).get_profile("prod")
        assert profile.max_concurrent == 5
        assert profile.verify_ssl is False

    def test_add_profile_bad_concurrency(self, runner: CliRunner, config_file: Path):
        _seed(config_file)

        result = runner.invoke(
            cli,
            ["config", "add-profile", "prod", "--url", "https://p.example.org", "--max-concurrent", "0"],
        )

        assert result.exit_code == 1
        assert not Config.load(config_file).has_profile("prod")

    def test_add_existing_profile(self, runner: CliRunner, config_file: Path):
        _seed(config_file)
        result = runner.invoke(cli, ["config", "add-profile", "dev", "--url", "https://x.example.org"])
        assert result.exit_code == 1

    def test_remove_profile(self, runner: CliRunner, config_file: Path):
        _seed(config_file)

        result = runner.invoke(cli, ["config", "remove-profile", "dev", "--yes"])

        assert result.exit_code == 0
        assert not Config.load(config_file).has_profile("dev")

    def test_remove_default_profile_refused(self, runner: CliRunner, config_file: Path):
        _seed(config_file)

        result = runner.invoke(cli, ["config", "remove-profile", "default", "--yes"])

        assert result.exit_code == 1
        assert Config.load(config_file).has_profile("default")

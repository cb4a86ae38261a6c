"""Tests for the command-line entry point."""

import sys
from collections.abc import Iterator
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from click.testing import CliRunner
from loguru import logger

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from registry_tag_cleanup import __main__ as main_module
from registry_tag_cleanup.__main__ import cli
from registry_tag_cleanup.settings import Settings


@pytest.fixture(autouse=True)
def _restore_logger() -> Iterator[None]:
    yield
    # The command points loguru at the runner's stderr, which is closed afterwards
    logger.remove()
    logger.add(sys.stderr)


@pytest.fixture
def orchestrator_cls(monkeypatch: pytest.MonkeyPatch) -> MagicMock:
    mock_cls = MagicMock()
    mock_cls.return_value.run.return_value = 0
    monkeypatch.setattr(main_module, "CleanupOrchestrator", mock_cls)
    return mock_cls


def _settings_passed(orchestrator_cls: MagicMock) -> Settings:
    settings = orchestrator_cls.call_args[0][0]
    assert isinstance(settings, Settings)
    return settings


class TestCli:
    def test_help(self) -> None:
        result = CliRunner().invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "--min-version" in result.output
        assert "--settings-file" in result.output

    def test_options_build_settings(
        self, orchestrator_cls: MagicMock, tmp_path: Path
    ) -> None:
        result = CliRunner().invoke(
            cli,
            [
                "-r", "repo",
                "-u", "registry.example.com",
                "-s", "-SNAPSHOT, -dev",
                "-m", "2.0.0",
                "-e", "latest,stable",
                "-f", str(tmp_path / "settings"),
                "-y",
            ],
        )

        assert result.exit_code == 0
        settings = _settings_passed(orchestrator_cls)
        assert settings.repository == "repo"
        assert settings.registry_url == "registry.example.com"
        assert settings.delete_suffixes == ("-SNAPSHOT", "-dev")
        assert settings.min_version == "2.0.0"
        assert settings.excluded_tags == ("latest", "stable")
        assert settings.auto_confirm is True
        assert settings.interactive is False

    def test_cli_overrides_settings_file(
        self, orchestrator_cls: MagicMock, tmp_path: Path
    ) -> None:
        settings_file = tmp_path / "settings"
        settings_file.write_text(
            "REPOSITORY=file-repo\nMIN_VERSION=1.0.0\nAUTO_CONFIRM=true\n"
        )

        result = CliRunner().invoke(
            cli, ["--repository", "cli-repo", "--settings-file", str(settings_file)]
        )

        assert result.exit_code == 0
        settings = _settings_passed(orchestrator_cls)
        assert settings.repository == "cli-repo"
        assert settings.min_version == "1.0.0"
        # An unset --yes flag does not override the file
        assert settings.auto_confirm is True

    def test_exit_code_from_run(self, orchestrator_cls: MagicMock, tmp_path: Path) -> None:
        orchestrator_cls.return_value.run.return_value = 1
        result = CliRunner().invoke(cli, ["-f", str(tmp_path / "settings")])
        assert result.exit_code == 1

    def test_invalid_settings(self, orchestrator_cls: MagicMock, tmp_path: Path) -> None:
        settings_file = tmp_path / "settings"
        settings_file.write_text("REQUEST_TIMEOUT=never\n")

        result = CliRunner().invoke(cli, ["-f", str(settings_file)])

        assert result.exit_code == 1
        orchestrator_cls.assert_not_called()

    def test_settings_directory_is_skipped(
        self,
        orchestrator_cls: MagicMock,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.chdir(tmp_path)
        (tmp_path / "settings").mkdir()

        result = CliRunner().invoke(
            cli, ["-r", "repo", "-u", "registry.example.com", "-s", "-dev"]
        )

        assert result.exit_code == 0
        settings = _settings_passed(orchestrator_cls)
        assert settings.repository == "repo"
        assert settings.delete_suffixes == ("-dev",)

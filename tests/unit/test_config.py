"""Unit tests for environment settings."""

from pathlib import Path

import pytest

from projectboard.config import Settings
from projectboard.seed import SEED_ADMIN_EMAIL


class TestSettings:
    """Test cases for Settings.from_env."""

    def test_defaults(self):
        settings = Settings.from_env({})

        assert settings.log_level == "INFO"
        assert settings.log_file is None
        assert settings.auto_login_email == SEED_ADMIN_EMAIL
        assert settings.seed is True

    def test_reads_values(self, tmp_path):
        settings = Settings.from_env({
            "PROJECTBOARD_LOG_LEVEL": " debug ",
            "PROJECTBOARD_LOG_FILE": str(tmp_path / "board.log"),
            "PROJECTBOARD_AUTO_LOGIN": "bob@company.com",
            "PROJECTBOARD_SEED": "1",
        })

        assert settings.log_level == "DEBUG"
        assert settings.log_file == tmp_path / "board.log"
        assert settings.auto_login_email == "bob@company.com"

    def test_empty_auto_login_disables_it(self):
        assert Settings.from_env({"PROJECTBOARD_AUTO_LOGIN": "  "}).auto_login_email is None

    @pytest.mark.parametrize("value", ["0", "false", "No", "OFF"])
    def test_seed_disabled(self, value):
        assert Settings.from_env({"PROJECTBOARD_SEED": value}).seed is False

    def test_reads_process_environment(self, monkeypatch):
        monkeypatch.setenv("PROJECTBOARD_LOG_FILE", "~/board.log")

        settings = Settings.from_env()

        assert settings.log_file == Path("~/board.log").expanduser()

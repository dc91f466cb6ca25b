"""
Tests for user_interface module.
"""

from unittest.mock import patch

import pytest

from gameserver_setup.user_interface import ProgressReporter, SettingsCollector


class TestSettingsCollector:
    """Test SettingsCollector class."""

    def test_collect_defaults(self, sample_profile):
        with patch("builtins.input", return_value=""):
            values = SettingsCollector.collect(sample_profile["settings"])

        assert values == {
            "server_port": "7777",
            "max_players": "4",
            "save_dir": "C:\\Saves",
            "backup_dir": "C:\\Backups",
            "backup_retention": "7",
            "backup_time": "04:00",
        }

    def test_collect_custom_values(self, sample_profile):
        answers = ["80", "15777", "16", "D:\\Saves", "", "30", "02:00"]
        with patch("builtins.input", side_effect=answers):
            values = SettingsCollector.collect(sample_profile["settings"])

        # 80 is below the minimum and is asked again
        assert values["server_port"] == "15777"
        assert values["max_players"] == "16"
        assert values["save_dir"] == "D:\\Saves"
        assert values["backup_dir"] == "C:\\Backups"
        assert values["backup_time"] == "02:00"

    def test_collect_fills_install_dir_in_defaults(self):
        settings = {
            "save_dir": {
                "prompt": "Saved data directory",
                "default": "{install_dir}\\ConanSandbox\\Saved",
            },
            "admin_password": {"prompt": "Admin password"},
        }
        with patch("builtins.input", return_value=""):
            values = SettingsCollector.collect(settings, {"install_dir": "D:\\Conan"})

        assert values == {
            "save_dir": "D:\\Conan\\ConanSandbox\\Saved",
            "admin_password": "",
        }

    def test_get_install_directory(self):
        with patch("builtins.input", return_value=""):
            assert SettingsCollector.get_install_directory("C:\\Servers") == "C:\\Servers"

    def test_confirm_setup(self, capsys):
        with patch("gameserver_setup.user_interface.prompt_yes_no", return_value=True):
            assert SettingsCollector.confirm_setup(
                "Test Server", "C:\\Servers", {"max_players": "8"}
            ) is True

        captured = capsys.readouterr()
        assert "CONFIGURATION SUMMARY" in captured.out
        assert "Install Directory: C:\\Servers" in captured.out
        assert "Max Players: 8" in captured.out

    def test_confirm_setup_declined(self):
        with patch("gameserver_setup.user_interface.prompt_yes_no", return_value=False):
            assert SettingsCollector.confirm_setup("Test", "C:\\", {}) is False


class TestProgressReporter:
    """Test ProgressReporter class."""

    def test_steps(self, capsys):
        progress = ProgressReporter(3)
        progress.start_step("First")
        progress.step_success("done")
        progress.start_step("Second")

        captured = capsys.readouterr()
        assert "[1/3] First" in captured.out
        assert "[2/3] Second" in captured.out
        assert progress.completed == ["done"]

    def test_finish(self, capsys):
        ProgressReporter(1).finish(success=True)
        assert "Setup completed successfully!" in capsys.readouterr().out

        ProgressReporter(1).finish(success=False)
        assert "Setup completed with issues" in capsys.readouterr().out

"""
Pytest configuration and shared fixtures for gameserver-setup tests.
"""

import tempfile
from pathlib import Path
from typing import Dict, Generator
from unittest.mock import MagicMock, patch

import pytest

from gameserver_setup.error_log import ErrorLog


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def error_log(temp_dir: Path) -> Generator[ErrorLog, None, None]:
    """Error log writing into the temp directory."""
    log = ErrorLog(temp_dir / "logs" / "error.log")
    yield log
    log.close()


@pytest.fixture
def server_tree(temp_dir: Path) -> Path:
    """Create a fake server installation below temp_dir/games."""
    root = temp_dir / "games"
    install_dir = root / "ConanExiles" / "server"
    install_dir.mkdir(parents=True)
    (install_dir / "ConanSandboxServer.exe").write_bytes(b"MZ")
    (root / "Other").mkdir()
    (root / "Other" / "readme.txt").write_text("not a server")
    return root


@pytest.fixture
def sample_profile() -> Dict:
    """Return a sample server profile for testing."""
    return {
        "name": "Test Server",
        "app_id": "123456",
        "executable": "TestServer.exe",
        "default_install_dir": "C:\\GameServers\\Test",
        "launch_args": "-log -Port={server_port}",
        "settings": {
            "server_port": {
                "prompt": "Game port",
                "default": 7777,
                "type": "int",
                "min": 1024,
                "max": 65535,
            },
            "max_players": {"prompt": "Maximum players", "default": 4, "type": "int"},
            "save_dir": {"prompt": "Save directory", "default": "C:\\Saves"},
            "backup_dir": {"prompt": "Backup directory", "default": "C:\\Backups"},
            "backup_retention": {"prompt": "Backups to keep", "default": 7, "type": "int"},
            "backup_time": {"prompt": "Backup time", "default": "04:00"},
        },
        "config_files": [
            {
                "path": "Config/Game.ini",
                "sections": {"/Script/Engine.GameSession": {"MaxPlayers": "{max_players}"}},
            }
        ],
        "firewall": [
            {"name": "Test UDP", "protocol": "UDP", "port": "{server_port}"},
            {"name": "Test TCP", "protocol": "tcp", "port": "{server_port}"},
        ],
        "service": {"name": "TestServer", "display_name": "Test Dedicated Server"},
        "backup": {"task_name": "TestServerBackup", "script": "backup-server.ps1"},
        "packages": {"runtimes": ["vcredist140"], "tools": ["steamcmd", "nssm"]},
        "prerequisites": {"hotfixes": {17763: ["KB5005112"], 20348: []}},
    }


@pytest.fixture
def sample_values() -> Dict[str, str]:
    return {
        "server_port": "7777",
        "max_players": "8",
        "save_dir": "C:\\Saves",
        "backup_dir": "C:\\Backups",
        "backup_retention": "7",
        "backup_time": "03:30",
    }


@pytest.fixture
def templates_dir(temp_dir: Path, sample_profile: Dict) -> Path:
    """Create a temporary templates directory with a profile and backup script."""
    import yaml

    templates_dir = temp_dir / "templates"
    templates_dir.mkdir()

    (templates_dir / "server-profile.yaml").write_text(
        yaml.safe_dump(sample_profile, sort_keys=False), encoding="utf-8"
    )
    (templates_dir / "backup-server.ps1").write_text(
        "# {name}\n$SaveDir = '{save_dir}'\n$BackupDir = '{backup_dir}'\n"
        "$Retention = {backup_retention}\n"
        "Get-ChildItem | Sort-Object { $_.LastWriteTime }\n",
        encoding="utf-8",
    )
    return templates_dir


@pytest.fixture
def loader(templates_dir: Path):
    from gameserver_setup.template_loader import TemplateLoader

    return TemplateLoader(templates_dir / "server-profile.yaml", templates_dir)


@pytest.fixture
def mock_subprocess():
    """Mock subprocess.run for testing system commands."""
    with patch("subprocess.run") as mock_run:
        # Default successful response
        mock_run.return_value = MagicMock(
            returncode=0, stdout="success output", stderr=""
        )
        yield mock_run


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "windows: marks tests that only make sense on Windows hosts"
    )

"""
SteamCMD wrapper used to install and update the dedicated server.
"""

import shutil
import subprocess
from pathlib import Path
from typing import List, Optional

from .utils import print_error, print_info, run_command


class SteamCMD:
    """Builds and runs SteamCMD app_update commands."""

    def __init__(self, app_id: str, executable: Optional[str] = None):
        self.app_id = str(app_id)
        self.executable = executable

    def find_executable(self) -> Optional[str]:
        """Locate steamcmd, preferring an explicit path."""
        if self.executable:
            return self.executable
        return shutil.which("steamcmd")

    def build_update_command(self, install_dir: Path) -> List[str]:
        """Build the anonymous app_update command for ``install_dir``."""
        return [
            self.find_executable() or "steamcmd",
            "+force_install_dir",
            str(install_dir),
            "+login",
            "anonymous",
            "+app_update",
            self.app_id,
            "validate",
            "+quit",
        ]

    def update_app(self, install_dir: Path) -> None:
        """
        Install or update the server into ``install_dir``.

        The exit status is not inspected; returning counts as success.
        """
        command = self.build_update_command(install_dir)
        print_info(f"Running SteamCMD for app {self.app_id} in {install_dir}")
        print_info("This can take a while on the first run...")

        try:
            run_command(command, check=False, capture=False)
        except FileNotFoundError:
            print_error("SteamCMD executable not found. Is steamcmd installed?")
            raise
        except subprocess.SubprocessError as e:
            print_error(f"SteamCMD failed to run: {e}")
            raise

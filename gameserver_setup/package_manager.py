"""
Chocolatey package management for gameserver-setup.
"""

import os
import subprocess
from typing import List

from .constants import (
    CHOCOLATEY_BIN_DIR,
    CHOCOLATEY_INSTALL_SCRIPT,
    COMMAND_TIMEOUT,
    PACKAGE_INSTALL_TIMEOUT,
)
from .utils import (
    command_exists,
    print_error,
    print_info,
    print_success,
    run_command,
    run_powershell_command,
)


class PackageManager:
    """Installs Chocolatey and the packages the server depends on."""

    def ensure_chocolatey(self) -> bool:
        """Install Chocolatey if it is not on PATH."""
        if command_exists("choco"):
            print_success("Chocolatey already installed")
            return True

        print_info("Installing Chocolatey package manager...")
        try:
            result = run_powershell_command(
                CHOCOLATEY_INSTALL_SCRIPT, timeout=PACKAGE_INSTALL_TIMEOUT
            )
        except (FileNotFoundError, subprocess.TimeoutExpired) as e:
            print_error(f"Chocolatey installation error: {e}")
            return False

        if result.returncode != 0:
            print_error("Chocolatey installation failed")
            if result.stderr:
                print_error(result.stderr.strip())
            return False

        # The installer only updates PATH for new sessions
        if CHOCOLATEY_BIN_DIR not in os.environ.get("PATH", ""):
            os.environ["PATH"] = os.environ.get("PATH", "") + os.pathsep + CHOCOLATEY_BIN_DIR

        if command_exists("choco"):
            print_success("Chocolatey installed successfully")
            return True

        print_error("Chocolatey installation verification failed")
        return False

    def is_installed(self, package: str) -> bool:
        """Check whether a Chocolatey package is installed locally."""
        try:
            result = run_command(
                ["choco", "list", "--local-only", "--exact", "--limit-output", package],
                check=False,
                timeout=COMMAND_TIMEOUT,
            )
        except (FileNotFoundError, subprocess.TimeoutExpired):
            return False

        # --limit-output prints "name|version" per package
        for line in result.stdout.splitlines():
            if line.split("|")[0].strip().lower() == package.lower():
                return True
        return False

    def ensure_installed(self, package: str) -> bool:
        """Install a package unless it is already present."""
        if self.is_installed(package):
            print_success(f"{package} already installed")
            return True

        print_info(f"Installing {package}...")
        try:
            result = run_command(
                ["choco", "install", package, "-y", "--no-progress"],
                check=False,
                timeout=PACKAGE_INSTALL_TIMEOUT,
            )
        except FileNotFoundError:
            print_error("Chocolatey is not installed")
            return False
        except subprocess.TimeoutExpired:
            print_error(f"Installing {package} timed out")
            return False

        if result.returncode != 0:
            print_error(f"Failed to install {package}")
            return False

        print_success(f"Installed {package}")
        return True

    def ensure_all(self, packages: List[str]) -> List[str]:
        """
        Ensure every package is installed.

        Returns:
            List of packages that could not be installed
        """
        return [package for package in packages if not self.ensure_installed(package)]

    def refresh_path(self) -> None:
        """Pick up PATH changes made by package installers."""
        try:
            result = run_powershell_command(
                "[Environment]::GetEnvironmentVariable('Path','Machine')",
                timeout=COMMAND_TIMEOUT,
            )
        except (FileNotFoundError, subprocess.TimeoutExpired):
            return

        machine_path = result.stdout.strip()
        if result.returncode == 0 and machine_path:
            os.environ["PATH"] = machine_path + os.pathsep + os.environ.get("PATH", "")

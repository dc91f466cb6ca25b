"""
System validation utilities for gameserver-setup.
"""

import subprocess
from typing import List, Optional, Tuple

from .constants import COMMAND_TIMEOUT, MIN_SUPPORTED_BUILD, SERVER_BUILDS
from .utils import (
    is_admin,
    print_error,
    print_info,
    print_success,
    print_warning,
    prompt_yes_no,
    run_powershell_command,
)


class SystemValidator:
    """Handles system prerequisite validation."""

    def __init__(self):
        self.os_caption: str = ""
        self.os_build: int = 0
        self.is_server: bool = False
        self.admin: bool = False

    def validate_all(self) -> bool:
        """Run admin and OS checks. Returns True if setup may continue."""
        print_info("Checking system prerequisites...")

        self.admin = self._check_admin()
        if not self.admin:
            return False

        return self._check_os_version()

    def _check_admin(self) -> bool:
        """Check that the script runs elevated."""
        if is_admin():
            print_success("Administrator privileges confirmed")
            return True

        print_error("This script must be run as administrator")
        print_info("Right-click PowerShell and select 'Run as administrator'")
        return False

    def detect_os(self) -> Optional[Tuple[str, int]]:
        """
        Detect the Windows edition and build number.

        Returns:
            Tuple of (caption, build) or None if detection failed
        """
        try:
            result = run_powershell_command(
                "$os = Get-CimInstance -ClassName Win32_OperatingSystem; "
                "$os.Caption; $os.BuildNumber",
                timeout=COMMAND_TIMEOUT,
            )
        except (FileNotFoundError, subprocess.TimeoutExpired) as e:
            print_warning(f"Failed to determine OS version: {e}")
            return None

        lines = [line.strip() for line in result.stdout.splitlines() if line.strip()]
        if result.returncode != 0 or len(lines) < 2:
            print_warning("Failed to determine OS version")
            return None

        try:
            return lines[0], int(lines[1])
        except ValueError:
            print_warning(f"Unexpected OS build number: {lines[1]}")
            return None

    def _check_os_version(self) -> bool:
        """Check for a supported Windows Server release."""
        detected = self.detect_os()
        if detected is None:
            return prompt_yes_no("Could not detect the OS. Continue anyway?", default=False)

        self.os_caption, self.os_build = detected
        self.is_server = "Server" in self.os_caption
        release = SERVER_BUILDS.get(self.os_build)

        if self.is_server and release:
            print_success(f"Detected OS: {self.os_caption} (build {self.os_build})")
            return True

        if not self.is_server:
            print_warning(f"Detected non-server system: {self.os_caption}")
        elif self.os_build < MIN_SUPPORTED_BUILD:
            print_error(f"Unsupported Windows Server build: {self.os_build}")
            print_info(f"Build {MIN_SUPPORTED_BUILD} (Windows Server 2016) or newer is required")
            return False
        else:
            print_warning(f"Unrecognised Windows Server build: {self.os_build}")

        return prompt_yes_no("Continue anyway?", default=False)

    def get_missing_hotfixes(self, required: List[str]) -> List[str]:
        """Return the required hotfix IDs that are not installed."""
        missing = []
        for hotfix_id in required:
            result = run_powershell_command(
                f"Get-HotFix -Id {hotfix_id} -ErrorAction SilentlyContinue",
                timeout=COMMAND_TIMEOUT,
            )
            if hotfix_id.lower() in result.stdout.lower():
                print_success(f"Hotfix {hotfix_id} installed")
            else:
                print_warning(f"Hotfix {hotfix_id} is missing")
                missing.append(hotfix_id)
        return missing

    def install_hotfixes(self, hotfixes: List[str]) -> bool:
        """Install hotfixes through PSWindowsUpdate. Reboots are left to the operator."""
        module_check = run_powershell_command(
            "Get-Module -ListAvailable -Name PSWindowsUpdate", timeout=COMMAND_TIMEOUT
        )
        if "PSWindowsUpdate" not in module_check.stdout:
            print_info("Installing PSWindowsUpdate module...")
            run_powershell_command(
                "Install-PackageProvider -Name NuGet -MinimumVersion 2.8.5.201 -Force; "
                "Set-PSRepository -Name 'PSGallery' -InstallationPolicy Trusted; "
                "Install-Module -Name PSWindowsUpdate -Force"
            )

        kb_list = ",".join(f"'{hotfix}'" for hotfix in hotfixes)
        print_info(f"Installing updates: {', '.join(hotfixes)} (this may take a while)...")
        result = run_powershell_command(
            "Import-Module PSWindowsUpdate; "
            f"Install-WindowsUpdate -KBArticleID {kb_list} -AcceptAll -IgnoreReboot"
        )

        if result.returncode != 0:
            print_error("Windows Update did not complete")
            if result.stderr:
                print_error(result.stderr.strip())
            return False

        print_success("Updates installed")
        print_warning("A reboot is required before the server is started")
        return True

    def ensure_hotfixes(self, required: List[str]) -> bool:
        """Check hotfixes and offer to install missing ones."""
        if not required:
            print_info("No prerequisite hotfixes required for this build")
            return True

        missing = self.get_missing_hotfixes(required)
        if not missing:
            return True

        if prompt_yes_no("Install missing updates now?", default=True):
            return self.install_hotfixes(missing)

        print_warning("Continuing without required updates")
        return prompt_yes_no("Continue setup anyway?", default=False)

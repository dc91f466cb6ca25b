"""
Firewall, service and scheduled task registration for gameserver-setup.

Each helper checks whether its object already exists before creating it, so
setup can be re-run safely.
"""

import subprocess
from pathlib import Path
from typing import Tuple

from .constants import COMMAND_TIMEOUT
from .utils import print_error, print_info, print_success, run_command


class FirewallManager:
    """Registers inbound firewall rules through netsh."""

    def rule_exists(self, name: str) -> bool:
        try:
            result = run_command(
                ["netsh", "advfirewall", "firewall", "show", "rule", f"name={name}"],
                check=False,
                timeout=COMMAND_TIMEOUT,
            )
        except (FileNotFoundError, subprocess.TimeoutExpired):
            return False
        return result.returncode == 0

    def ensure_rule(self, name: str, protocol: str, port: str) -> bool:
        """Allow inbound traffic on ``port`` unless the rule already exists."""
        if self.rule_exists(name):
            print_success(f"Firewall rule already present: {name}")
            return True

        try:
            result = run_command(
                [
                    "netsh",
                    "advfirewall",
                    "firewall",
                    "add",
                    "rule",
                    f"name={name}",
                    "dir=in",
                    "action=allow",
                    f"protocol={protocol.upper()}",
                    f"localport={port}",
                ],
                check=False,
                timeout=COMMAND_TIMEOUT,
            )
        except (FileNotFoundError, subprocess.TimeoutExpired) as e:
            print_error(f"Could not create firewall rule {name}: {e}")
            return False

        if result.returncode != 0:
            print_error(f"Could not create firewall rule {name}: {result.stdout.strip()}")
            return False

        print_success(f"Created firewall rule: {name} ({protocol.upper()} {port})")
        return True


class ServiceRegistrar:
    """Registers the server as an auto-starting Windows service with NSSM."""

    def __init__(self, nssm: str = "nssm"):
        self.nssm = nssm

    def _nssm(self, *args: str) -> subprocess.CompletedProcess:
        return run_command([self.nssm, *args], check=False, timeout=COMMAND_TIMEOUT)

    def exists(self, name: str) -> bool:
        try:
            return self._nssm("status", name).returncode == 0
        except (FileNotFoundError, subprocess.TimeoutExpired):
            return False

    def ensure_service(
        self,
        name: str,
        display_name: str,
        executable: Path,
        arguments: str,
        app_directory: Path,
    ) -> Tuple[bool, str]:
        """
        Install the service if missing and apply its settings.

        Returns:
            Tuple of (success, message)
        """
        try:
            if self.exists(name):
                print_info(f"Service {name} already registered, updating settings")
            else:
                result = self._nssm("install", name, str(executable))
                if result.returncode != 0:
                    return False, f"nssm install failed: {result.stdout.strip()}"

            settings = [
                ("Application", str(executable)),
                ("AppParameters", arguments),
                ("AppDirectory", str(app_directory)),
                ("DisplayName", display_name),
                ("Start", "SERVICE_AUTO_START"),
            ]
            for key, value in settings:
                result = self._nssm("set", name, key, value)
                if result.returncode != 0:
                    return False, f"nssm set {key} failed: {result.stdout.strip()}"

        except FileNotFoundError:
            return False, "NSSM is not installed"
        except subprocess.TimeoutExpired:
            return False, "NSSM did not respond"

        return True, f"Service {name} registered (automatic start)"

    def start(self, name: str) -> bool:
        try:
            return self._nssm("start", name).returncode == 0
        except (FileNotFoundError, subprocess.TimeoutExpired):
            return False

    def stop(self, name: str) -> bool:
        try:
            return self._nssm("stop", name).returncode == 0
        except (FileNotFoundError, subprocess.TimeoutExpired):
            return False


class TaskScheduler:
    """Registers the scheduled backup job with schtasks."""

    def task_exists(self, name: str) -> bool:
        try:
            result = run_command(
                ["schtasks", "/query", "/tn", name],
                check=False,
                timeout=COMMAND_TIMEOUT,
            )
        except (FileNotFoundError, subprocess.TimeoutExpired):
            return False
        return result.returncode == 0

    def ensure_backup_task(self, name: str, script: Path, start_time: str) -> bool:
        """Run ``script`` daily at ``start_time`` (HH:MM) as SYSTEM."""
        if self.task_exists(name):
            print_success(f"Scheduled task already present: {name}")
            return True

        action = f'powershell.exe -NoProfile -ExecutionPolicy Bypass -File "{script}"'
        try:
            result = run_command(
                [
                    "schtasks",
                    "/create",
                    "/tn",
                    name,
                    "/tr",
                    action,
                    "/sc",
                    "DAILY",
                    "/st",
                    start_time,
                    "/ru",
                    "SYSTEM",
                    "/rl",
                    "HIGHEST",
                    "/f",
                ],
                check=False,
                timeout=COMMAND_TIMEOUT,
            )
        except (FileNotFoundError, subprocess.TimeoutExpired) as e:
            print_error(f"Could not create scheduled task {name}: {e}")
            return False

        if result.returncode != 0:
            print_error(f"Could not create scheduled task {name}: {result.stderr.strip()}")
            return False

        print_success(f"Scheduled daily backup at {start_time}: {name}")
        return True

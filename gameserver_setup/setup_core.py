"""
Core setup module for gameserver-setup.

Runs the provisioning steps in order and hosts the update flow.
"""

import os
import sys
from pathlib import Path
from typing import Dict, List, Optional

from .config_writer import ConfigWriter
from .constants import TARGET_EXECUTABLE
from .error_log import ErrorLog
from .package_manager import PackageManager
from .resolver import InstallResolver, UpdateResult, find_target
from .steamcmd import SteamCMD
from .system_validators import SystemValidator
from .template_loader import TemplateLoader
from .user_interface import ProgressReporter, SettingsCollector
from .utils import (
    Colors,
    print_error,
    print_header,
    print_info,
    print_success,
    print_warning,
    prompt_yes_no,
    replace_placeholders,
)
from .windows_services import FirewallManager, ServiceRegistrar, TaskScheduler

SUMMARY_FILENAME = "gameserver-setup.ini"


class GameServerSetup:
    """Main setup orchestrator with modular architecture."""

    def __init__(
        self,
        profile_path: Optional[Path] = None,
        error_log: Optional[ErrorLog] = None,
        debug: bool = False,
    ):
        # Core components
        self.template_loader = TemplateLoader(profile_path)
        self.system_validator = SystemValidator()
        self.package_manager = PackageManager()
        self.config_writer = ConfigWriter(self.template_loader)
        self.firewall = FirewallManager()
        self.service_registrar = ServiceRegistrar()
        self.task_scheduler = TaskScheduler()
        self.error_log = error_log or ErrorLog()
        self.debug = debug

        # Progress tracking
        self.progress = ProgressReporter(7)  # Total setup steps

        # Configuration state
        self.install_dir: Path = Path()
        self.values: Dict[str, str] = {}
        self.service_registered: bool = False
        self.issues: List[str] = []

    # ------------------------------------------------------------------
    # Profile accessors
    # ------------------------------------------------------------------

    @property
    def profile(self) -> Dict:
        return self.template_loader.get_profile()

    @property
    def server_name(self) -> str:
        return self.profile.get("name", "Game Server")

    @property
    def executable(self) -> str:
        return self.profile.get("executable", TARGET_EXECUTABLE)

    @property
    def service_name(self) -> str:
        return self.profile["service"]["name"]

    def _steamcmd(self) -> SteamCMD:
        return SteamCMD(self.profile["app_id"])

    # ------------------------------------------------------------------
    # Setup flow
    # ------------------------------------------------------------------

    def run(self) -> None:
        """Run the complete setup process with error handling."""
        try:
            self._print_welcome()
            self._run_setup_steps()
            self._print_completion_message()

        except KeyboardInterrupt:
            print_error("\nSetup cancelled by user.")
            sys.exit(1)
        except Exception as e:
            print_error(f"Setup failed: {e}")
            self.error_log.error(f"Setup failed: {e}")
            if self._should_show_debug_info():
                import traceback

                traceback.print_exc()
            sys.exit(1)

    def _print_welcome(self) -> None:
        print_header("GAME SERVER SETUP")
        print(f"Welcome! This script sets up {self.server_name} on Windows Server.")
        print("You can stop at any yes/no prompt and re-run the script later.")
        print()

    def _run_setup_steps(self) -> None:
        """Execute all setup steps in order."""
        # Step 1: Validate system and profile
        self.progress.start_step("System Validation")
        if not self._validate_system():
            sys.exit(1)
        self.progress.step_success("System validation complete")

        # Step 2: Package manager
        self.progress.start_step("Package Manager")
        if not prompt_yes_no("Install Chocolatey and required packages?", default=True):
            print_info("Setup cancelled by user.")
            sys.exit(0)
        if not self.package_manager.ensure_chocolatey():
            sys.exit(1)
        self.progress.step_success("Chocolatey ready")

        # Step 3: Updates, runtimes and tools
        self.progress.start_step("Prerequisites & Tools")
        if not self._install_prerequisites():
            sys.exit(1)
        self.progress.step_success("Prerequisites installed")

        # Step 4: Download the server
        self.progress.start_step("Server Installation")
        if not self._install_server():
            sys.exit(1)
        self.progress.step_success(f"Server installed in {self.install_dir}")

        # Step 5: Collect settings and write config files
        self.progress.start_step("Server Configuration")
        if not self._configure_server():
            sys.exit(1)
        self.progress.step_success("Configuration files written")

        # Step 6: Firewall
        self.progress.start_step("Firewall Rules")
        if self._configure_firewall():
            self.progress.step_success("Firewall rules registered")
        else:
            self._step_failed("Some firewall rules could not be created")

        # Step 7: Service and backups
        self.progress.start_step("Service & Backup Registration")
        if not self._register_service_and_backup():
            sys.exit(1)
        self.progress.step_success("Service and backup task registered")

    def _validate_system(self) -> bool:
        """Validate system prerequisites and the server profile."""
        if not self.system_validator.validate_all():
            print_error(
                "System validation failed. Please fix the issues above and try again."
            )
            return False

        try:
            issues = self.template_loader.validate_profile()
        except (FileNotFoundError, RuntimeError) as e:
            print_error(f"Failed to load server profile: {e}")
            return False

        if issues:
            print_error("Server profile validation failed:")
            for issue in issues:
                print_error(f"  - {issue}")
            return False

        print_success(f"Server profile loaded: {self.server_name}")
        return True

    def _install_prerequisites(self) -> bool:
        """Check hotfixes and install runtime and tool packages."""
        hotfixes = self.template_loader.get_required_hotfixes(
            self.system_validator.os_build
        )
        if not self.system_validator.ensure_hotfixes(hotfixes):
            return False

        packages = self.template_loader.get_packages()
        failed = self.package_manager.ensure_all(
            packages["runtimes"] + packages["tools"]
        )
        self.package_manager.refresh_path()

        if failed:
            print_error("Failed to install some packages:")
            for package in failed:
                print_error(f"  - {package}")
            print_info("Install them manually with: choco install <package> -y")
            return False
        return True

    def _install_server(self) -> bool:
        """Download the server with SteamCMD."""
        default_dir = self.profile.get("default_install_dir", "")
        self.install_dir = Path(SettingsCollector.get_install_directory(default_dir))

        try:
            self.install_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            print_error(f"Failed to create {self.install_dir}: {e}")
            return False

        self._steamcmd().update_app(self.install_dir)

        found = find_target(self.install_dir, self.executable)
        if found is None:
            message = f"{self.executable} not found under {self.install_dir}"
            self.error_log.error(message)
            print_error(message)
            print_info("Check the SteamCMD output above and run setup again.")
            return False

        # Some servers keep the executable in a sub-folder
        self.install_dir = found.parent
        return True

    def _configure_server(self) -> bool:
        """Collect settings and write the profile's config files."""
        self.values = SettingsCollector.collect(
            self.template_loader.get_settings(), {"install_dir": str(self.install_dir)}
        )

        if not SettingsCollector.confirm_setup(
            self.server_name, str(self.install_dir), self.values
        ):
            print_info("Setup cancelled by user.")
            sys.exit(0)

        results = self.config_writer.write_profile_configs(self.install_dir, self.values)
        failed_files = [name for name, success in results.items() if not success]
        if failed_files:
            print_error("Failed to write some configuration files:")
            for filename in failed_files:
                print_error(f"  - {filename}")
            return False
        return True

    def _configure_firewall(self) -> bool:
        """Open the profile's ports."""
        success = True
        for rule in self.template_loader.get_firewall_rules():
            port = replace_placeholders(str(rule["port"]), self.values)
            if not self.firewall.ensure_rule(rule["name"], rule["protocol"], port):
                success = False
        return success

    def _register_service_and_backup(self) -> bool:
        """Register the Windows service, the backup script and its task."""
        service = self.profile["service"]
        arguments = replace_placeholders(self.profile.get("launch_args", ""), self.values)

        if not prompt_yes_no(
            f"Register {self.server_name} as a Windows service?", default=True
        ):
            self.progress.step_warning("Service registration skipped")
        else:
            success, message = self.service_registrar.ensure_service(
                service["name"],
                service.get("display_name", service["name"]),
                self.install_dir / self.executable,
                arguments,
                self.install_dir,
            )
            if not success:
                print_error(message)
                return False
            print_success(message)
            self.service_registered = True

        backup = self.profile["backup"]
        script_path = self.install_dir / backup["script"]
        if not self.config_writer.write_backup_script(script_path, self.values):
            return False

        if not self.task_scheduler.ensure_backup_task(
            backup["task_name"], script_path, self.values.get("backup_time", "04:00")
        ):
            return False

        self.config_writer.write_setup_summary(
            self.install_dir / SUMMARY_FILENAME, self.values, self.progress.completed
        )

        if self.service_registered and prompt_yes_no("Start the server now?", default=True):
            if self.service_registrar.start(service["name"]):
                print_success(f"{service['name']} started")
            else:
                self._step_failed(
                    f"Could not start {service['name']}; check: nssm status {service['name']}"
                )

        return True

    def _step_failed(self, message: str) -> None:
        """Report a problem that does not stop the setup."""
        self.progress.step_error(message)
        self.issues.append(message)

    def _print_completion_message(self) -> None:
        """Print final completion message with summary."""
        self.progress.finish(success=not self.issues)

        print_header("SETUP COMPLETE!")
        if self.issues:
            print(f"{self.server_name} was configured, but some steps need attention:")
            for issue in self.issues:
                print(f"  • {issue}")
        else:
            print(f"{self.server_name} has been configured successfully!")
        print()

        print(f"{Colors.BOLD}Configuration Summary:{Colors.ENDC}")
        print(f"  • Install Directory: {self.install_dir}")
        print(f"  • Service: {self.service_name}")
        print(f"  • Settings: {self.install_dir / SUMMARY_FILENAME}")

        print(f"\n{Colors.BOLD}Useful Commands:{Colors.ENDC}")
        print(f"  • Status: nssm status {self.service_name}")
        print(f"  • Restart: nssm restart {self.service_name}")
        print("  • Update server: gameserver-setup update")

    # ------------------------------------------------------------------
    # Update flow
    # ------------------------------------------------------------------

    def update(self) -> UpdateResult:
        """Locate the installed server and update it with SteamCMD.

        A registered service is stopped for the update and started again
        afterwards, whether or not the update went through.
        """
        print_header(f"UPDATE {self.server_name.upper()}")

        service_name = self.service_name
        was_registered = self.service_registrar.exists(service_name)
        if was_registered:
            print_info(f"Stopping service {service_name}...")
            self.service_registrar.stop(service_name)

        resolver = InstallResolver(
            self.executable, self._steamcmd().update_app, error_log=self.error_log
        )
        try:
            result = resolver.resolve_and_update()
        finally:
            if was_registered:
                self._restart_service(service_name)

        return result

    def _restart_service(self, service_name: str) -> None:
        if self.service_registrar.start(service_name):
            print_success(f"Service {service_name} restarted")
        else:
            print_warning(
                f"Could not restart {service_name}; check: nssm status {service_name}"
            )

    def run_update(self) -> None:
        """Run the update flow with error handling."""
        try:
            result = self.update()
        except KeyboardInterrupt:
            print_error("\nUpdate cancelled by user.")
            sys.exit(1)
        except Exception as e:
            print_error(f"Update failed: {e}")
            self.error_log.error(f"Update failed: {e}")
            if self._should_show_debug_info():
                import traceback

                traceback.print_exc()
            sys.exit(1)

        if not result.success:
            print_info(f"Failures were logged to {self.error_log.path}")
            sys.exit(1)

    def _should_show_debug_info(self) -> bool:
        """Determine if debug information should be shown on errors."""
        return self.debug or os.environ.get("DEBUG", "").lower() in ["1", "true", "yes"]

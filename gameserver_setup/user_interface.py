"""
User interface utilities for gameserver-setup.
"""

from typing import Any, Dict, Optional

from .utils import (
    Colors,
    print_error,
    print_header,
    print_success,
    print_warning,
    prompt,
    prompt_int,
    prompt_path,
    prompt_yes_no,
    replace_placeholders,
)


class SettingsCollector:
    """Collects server settings with validation and helpful prompts."""

    @staticmethod
    def collect(
        settings: Dict[str, Dict[str, Any]], context: Optional[Dict[str, str]] = None
    ) -> Dict[str, str]:
        """
        Prompt for every profile setting.

        Args:
            settings: Setting definitions keyed by placeholder name
            context: Values such as ``install_dir`` that defaults may refer to

        Returns:
            Dictionary of placeholder name to answer
        """
        print_header("SERVER CONFIGURATION")
        print("Press Enter to accept the default shown in brackets.\n")

        values = {}
        for setting_id, setting in settings.items():
            values[setting_id] = SettingsCollector._ask(setting, context or {})
        return values

    @staticmethod
    def _ask(setting: Dict[str, Any], context: Dict[str, str]) -> str:
        question = setting["prompt"]
        default = replace_placeholders(str(setting.get("default", "")), context)

        if setting.get("type") == "int":
            return str(
                prompt_int(
                    question,
                    int(default),
                    minimum=setting.get("min"),
                    maximum=setting.get("max"),
                )
            )
        return prompt(question, default).strip()

    @staticmethod
    def get_install_directory(default: str) -> str:
        """Ask where the server should be installed."""
        print_header("INSTALL LOCATION")
        print("SteamCMD will download the server into this directory.")
        print("It will be created if it doesn't exist.\n")
        return prompt_path("Server install directory", default)

    @staticmethod
    def confirm_setup(server_name: str, install_dir: str, values: Dict[str, str]) -> bool:
        """
        Show final configuration confirmation.

        Returns:
            True if user confirms, False otherwise
        """
        print_header("CONFIGURATION SUMMARY")

        print(f"{Colors.BOLD}{server_name}{Colors.ENDC}")
        print(f"  Install Directory: {install_dir}")
        for key, value in values.items():
            label = key.replace("_", " ").title()
            print(f"  {label}: {value}")

        print(f"\n{Colors.BOLD}What happens next:{Colors.ENDC}")
        print("  1. Write server configuration files")
        print("  2. Open firewall ports")
        print("  3. Register the server as a Windows service")
        print("  4. Schedule daily backups")

        return prompt_yes_no("\nProceed with setup?", default=True)


class ProgressReporter:
    """Handles progress reporting and user feedback during setup."""

    def __init__(self, total_steps: int):
        self.total_steps = total_steps
        self.current_step = 0
        self.completed = []

    def start_step(self, step_name: str) -> None:
        """Start a new step with progress indication."""
        self.current_step += 1
        progress = f"[{self.current_step}/{self.total_steps}]"
        print(f"\n{Colors.BOLD}{Colors.CYAN}{progress} {step_name}{Colors.ENDC}")

    def step_success(self, message: str) -> None:
        self.completed.append(message)
        print_success(message)

    def step_warning(self, message: str) -> None:
        print_warning(message)

    def step_error(self, message: str) -> None:
        print_error(message)

    def finish(self, success: bool = True) -> None:
        """Report overall completion."""
        if success:
            print(
                f"\n{Colors.BOLD}{Colors.GREEN}✓ Setup completed successfully!{Colors.ENDC}"
            )
        else:
            print(
                f"\n{Colors.BOLD}{Colors.RED}✗ Setup completed with issues{Colors.ENDC}"
            )

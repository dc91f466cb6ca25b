"""
Utility functions for gameserver-setup.
"""

import ctypes
import os
import shutil
import subprocess
from typing import Dict, List, Optional

# ============================================================================
# COLOR DEFINITIONS
# ============================================================================


class Colors:
    """ANSI color codes for terminal output."""

    HEADER = "\033[95m"
    BLUE = "\033[94m"
    CYAN = "\033[96m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    RED = "\033[91m"
    ENDC = "\033[0m"
    BOLD = "\033[1m"
    UNDERLINE = "\033[4m"
    DIM = "\033[2m"


# ============================================================================
# USER INTERFACE FUNCTIONS
# ============================================================================


def print_header(text: str) -> None:
    """Print a formatted header."""
    print(f"\n{Colors.BOLD}{Colors.CYAN}{text}{Colors.ENDC}")
    print("=" * len(text))


def print_success(text: str) -> None:
    print(f"{Colors.GREEN}✓ {text}{Colors.ENDC}")


def print_warning(text: str) -> None:
    print(f"{Colors.YELLOW}⚠ {text}{Colors.ENDC}")


def print_error(text: str) -> None:
    print(f"{Colors.RED}✗ {text}{Colors.ENDC}")


def print_info(text: str) -> None:
    print(f"{Colors.CYAN}ℹ {text}{Colors.ENDC}")


def prompt(question: str, default: str = "") -> str:
    """Prompt user for input with optional default."""
    if default:
        return input(f"{question} [{default}]: ") or default
    return input(f"{question}: ")


def prompt_path(question: str, default: str = "") -> str:
    """Prompt for a path until a non-empty answer is given."""
    while True:
        answer = prompt(question, default).strip().strip('"')
        if answer:
            return answer
        print_error("Please enter a path.")


def prompt_int(
    question: str,
    default: int,
    minimum: Optional[int] = None,
    maximum: Optional[int] = None,
) -> int:
    """Prompt for an integer, re-asking until it is within bounds."""
    while True:
        answer = prompt(question, str(default)).strip()
        try:
            value = int(answer)
        except ValueError:
            print_error(f"'{answer}' is not a number.")
            continue

        if minimum is not None and value < minimum:
            print_error(f"Value must be at least {minimum}.")
        elif maximum is not None and value > maximum:
            print_error(f"Value must be at most {maximum}.")
        else:
            return value


def prompt_yes_no(question: str, default: bool = False) -> bool:
    """Prompt user for yes/no answer."""
    default_str = "Y/n" if default else "y/N"
    while True:
        answer = input(f"{question} [{default_str}]: ").lower().strip()
        if not answer:
            return default
        if answer in ["y", "yes", "true", "1"]:
            return True
        elif answer in ["n", "no", "false", "0"]:
            return False
        else:
            print_error("Please answer yes or no.")


# ============================================================================
# SYSTEM UTILITIES
# ============================================================================


def run_command(
    command: List[str],
    check: bool = True,
    capture: bool = True,
    timeout: Optional[int] = None,
) -> subprocess.CompletedProcess:
    """Run a system command.

    With ``capture=False`` the command's output goes straight to the console,
    which suits long-running installers the operator should watch.
    """
    if capture:
        return subprocess.run(
            command, capture_output=True, text=True, check=check, timeout=timeout
        )
    return subprocess.run(command, check=check, timeout=timeout)


def run_powershell_command(
    script: str, check: bool = False, timeout: Optional[int] = None
) -> subprocess.CompletedProcess:
    """Run a PowerShell snippet and capture its output."""
    return run_command(
        [
            "powershell",
            "-NoProfile",
            "-NonInteractive",
            "-ExecutionPolicy",
            "Bypass",
            "-Command",
            script,
        ],
        check=check,
        timeout=timeout,
    )


def command_exists(command: str) -> bool:
    """Check whether an executable is reachable through PATH."""
    return shutil.which(command) is not None


def is_admin() -> bool:
    """Check whether the process runs with administrator rights."""
    try:
        return bool(ctypes.windll.shell32.IsUserAnAdmin())
    except AttributeError:
        # Not on Windows
        return hasattr(os, "geteuid") and os.geteuid() == 0


def replace_placeholders(text: str, replacements: Dict[str, str]) -> str:
    """Replace placeholders in text with values from replacements dict."""
    result = text
    for placeholder, value in replacements.items():
        result = result.replace(f"{{{placeholder}}}", str(value))
    return result

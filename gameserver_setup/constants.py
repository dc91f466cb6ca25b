"""
Constants and shared configuration for gameserver-setup.
"""

from pathlib import Path
from typing import Dict

# Package directories
PACKAGE_DIR = Path(__file__).parent.resolve()
TEMPLATES_DIR = PACKAGE_DIR / "templates"
DEFAULT_PROFILE = TEMPLATES_DIR / "server-profile.yaml"
BACKUP_SCRIPT_TEMPLATE = "backup-server.ps1"

# Server executable searched for when resolving the install directory
TARGET_EXECUTABLE = "ConanSandboxServer.exe"

# Resolver retry budget
MAX_UPDATE_ATTEMPTS = 3

# Error log lives at <home>/<ERROR_LOG_SUBDIR>/<ERROR_LOG_FILENAME>
ERROR_LOG_SUBDIR = ".gameserver-setup"
ERROR_LOG_FILENAME = "error.log"
ERROR_LOG_FORMAT = "%(asctime)s - %(levelname)s: %(message)s"
ERROR_LOG_DATEFMT = "%Y-%m-%dT%H:%M:%S"

# Chocolatey bootstrap
CHOCOLATEY_BIN_DIR = r"C:\ProgramData\chocolatey\bin"
CHOCOLATEY_INSTALL_SCRIPT = (
    "[System.Net.ServicePointManager]::SecurityProtocol = "
    "[System.Net.ServicePointManager]::SecurityProtocol -bor 3072; "
    "iex ((New-Object System.Net.WebClient).DownloadString("
    "'https://community.chocolatey.org/install.ps1'))"
)

# Windows Server releases keyed by OS build number
SERVER_BUILDS: Dict[int, str] = {
    14393: "Windows Server 2016",
    17763: "Windows Server 2019",
    20348: "Windows Server 2022",
    26100: "Windows Server 2025",
}

# Minimum build supported by SteamCMD-hosted dedicated servers
MIN_SUPPORTED_BUILD = 14393

# Timeouts (seconds)
PACKAGE_INSTALL_TIMEOUT = 1800
COMMAND_TIMEOUT = 120

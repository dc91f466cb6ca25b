"""
Game Server Setup - Windows Server provisioning and update components

This package contains the modular components for the game server setup script.
"""

__version__ = "1.0.0"

from .resolver import InstallResolver, ResolverState, UpdateResult
from .setup_core import GameServerSetup
from .steamcmd import SteamCMD
from .template_loader import TemplateLoader

__all__ = [
    "GameServerSetup",
    "InstallResolver",
    "ResolverState",
    "UpdateResult",
    "SteamCMD",
    "TemplateLoader",
]

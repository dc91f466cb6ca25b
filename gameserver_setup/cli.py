"""
Command line entry point for gameserver-setup.

Usage:
    gameserver-setup [setup]            Provision the server interactively
    gameserver-setup update             Locate the server and update it
    gameserver-setup --profile my.yaml  Use a custom server profile
"""

import argparse
from pathlib import Path
from typing import List, Optional

from . import __version__
from .setup_core import GameServerSetup


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gameserver-setup",
        description="Provision and update a dedicated game server on Windows Server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  gameserver-setup                    # Full interactive setup
  gameserver-setup update             # Update an existing installation
  gameserver-setup --debug update     # Show tracebacks on failure
        """,
    )
    parser.add_argument(
        "command",
        nargs="?",
        choices=["setup", "update"],
        default="setup",
        help="What to do (default: setup)",
    )
    parser.add_argument(
        "--profile",
        type=Path,
        help="Path to a server profile YAML file",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Show tracebacks on unexpected errors",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    setup = GameServerSetup(profile_path=args.profile, debug=args.debug)
    if args.command == "update":
        setup.run_update()
    else:
        setup.run()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

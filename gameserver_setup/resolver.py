"""
Install directory resolution and server update with a bounded retry budget.

The operator is asked for a search root, the tree below it is walked for the
server executable, and the directory holding the first match is handed to the
update command. A miss is logged and the operator is asked again, up to
``MAX_UPDATE_ATTEMPTS`` times.
"""

import os
from enum import Enum
from pathlib import Path
from typing import Callable, NamedTuple, Optional

from .constants import MAX_UPDATE_ATTEMPTS
from .error_log import ErrorLog
from .utils import print_error, print_info, print_success, print_warning, prompt_path


class ResolverState(Enum):
    SEARCHING = "searching"
    FOUND = "found"
    EXHAUSTED_RETRIES = "exhausted_retries"


class AttemptState(NamedTuple):
    """Per-iteration loop state."""

    attempt: int
    last_error: Optional[str] = None


class UpdateResult(NamedTuple):
    """Outcome of one resolve-and-update run.

    ``last_error`` is the most recent miss, if any attempt missed.
    """

    state: ResolverState
    install_dir: Optional[Path]
    attempts: int
    last_error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.state is ResolverState.FOUND


def next_state(
    attempt: int, found: Optional[Path], max_attempts: int = MAX_UPDATE_ATTEMPTS
) -> ResolverState:
    """Map an attempt count and search result to the next resolver state."""
    if found is not None:
        return ResolverState.FOUND
    if attempt >= max_attempts:
        return ResolverState.EXHAUSTED_RETRIES
    return ResolverState.SEARCHING


def find_target(root: Path, target_name: str) -> Optional[Path]:
    """
    Return the first file named ``target_name`` below ``root``.

    Matches follow ``os.walk`` order, which depends on the filesystem.
    Unreadable directories are skipped silently, so a permission problem
    looks the same as a missing file.
    """
    wanted = os.path.normcase(target_name)
    for dirpath, _dirnames, filenames in os.walk(root):
        for filename in filenames:
            if os.path.normcase(filename) == wanted:
                return Path(dirpath) / filename
    return None


def prompt_search_root() -> str:
    """Ask the operator where the server is installed."""
    return prompt_path("Enter the folder to search for the server installation")


class InstallResolver:
    """Finds the server install directory and runs the update against it."""

    def __init__(
        self,
        target_name: str,
        update: Callable[[Path], object],
        error_log: Optional[ErrorLog] = None,
        ask_root: Callable[[], str] = prompt_search_root,
        search: Callable[[Path, str], Optional[Path]] = find_target,
        max_attempts: int = MAX_UPDATE_ATTEMPTS,
    ):
        self.target_name = target_name
        self.update = update
        self.error_log = error_log or ErrorLog()
        self.ask_root = ask_root
        self.search = search
        self.max_attempts = max_attempts

    def resolve_and_update(self) -> UpdateResult:
        """
        Run the prompt/search/update loop.

        Returns:
            UpdateResult with state FOUND on success or EXHAUSTED_RETRIES once
            the attempt budget is spent.
        """
        state = AttemptState(attempt=0)

        while True:
            state = AttemptState(attempt=state.attempt + 1, last_error=state.last_error)
            root = Path(self.ask_root())
            print_info(f"Searching {root} for {self.target_name}...")

            found = self.search(root, self.target_name)
            status = next_state(state.attempt, found, self.max_attempts)

            if status is ResolverState.FOUND:
                install_dir = found.parent
                print_info(f"Server found in: {install_dir}")
                self.update(install_dir)
                print_success("Server update finished.")
                return UpdateResult(status, install_dir, state.attempt, state.last_error)

            message = f"{self.target_name} not found under {root}"
            state = AttemptState(attempt=state.attempt, last_error=message)
            self.error_log.error(message)
            print_error(message)

            if status is ResolverState.EXHAUSTED_RETRIES:
                print_error(
                    f"Maximum attempts ({self.max_attempts}) reached. "
                    "Re-run the update once the server location is known."
                )
                return UpdateResult(status, None, state.attempt, state.last_error)

            print_warning(
                f"Attempt {state.attempt}/{self.max_attempts} failed, please try again."
            )

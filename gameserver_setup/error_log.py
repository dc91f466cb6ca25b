"""
Append-only error log for gameserver-setup.
"""

import itertools
import logging
from pathlib import Path
from typing import Optional

from .constants import (
    ERROR_LOG_DATEFMT,
    ERROR_LOG_FILENAME,
    ERROR_LOG_FORMAT,
    ERROR_LOG_SUBDIR,
)


def default_log_path() -> Path:
    """Return the per-user error log location."""
    return Path.home() / ERROR_LOG_SUBDIR / ERROR_LOG_FILENAME


class ErrorLog:
    """Writes timestamped error lines to a file that is only ever appended to."""

    _ids = itertools.count(1)

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path else default_log_path()
        self._logger: Optional[logging.Logger] = None
        self._handler: Optional[logging.FileHandler] = None
        self._name = f"gameserver_setup.error_log.{next(self._ids)}"

    def _get_logger(self) -> logging.Logger:
        if self._logger is not None:
            return self._logger

        self.path.parent.mkdir(parents=True, exist_ok=True)

        # One logger per instance
        logger = logging.getLogger(self._name)
        logger.setLevel(logging.ERROR)
        logger.propagate = False

        handler = logging.FileHandler(self.path, mode="a", encoding="utf-8")
        handler.setFormatter(
            logging.Formatter(ERROR_LOG_FORMAT, datefmt=ERROR_LOG_DATEFMT)
        )
        logger.addHandler(handler)

        self._logger = logger
        self._handler = handler
        return logger

    def error(self, message: str) -> None:
        """Append one error line."""
        self._get_logger().error(message)
        self._handler.flush()

    def close(self) -> None:
        """Release the file handle."""
        if self._handler is None:
            return
        self._logger.removeHandler(self._handler)
        self._handler.close()
        self._handler = None
        self._logger = None

"""Logging handler creating the directory of its file.

``logging.conf`` points the file handler to the working directory of the
bot, which may not have a ``logs`` directory yet.
"""

import pathlib
from logging.handlers import RotatingFileHandler
from typing import Any


class AutoDirRotatingFileHandler(RotatingFileHandler):
    """Rotating file handler that creates directories automatically."""

    def __init__(
        self,
        filename: str | pathlib.Path,
        *args: Any,
        **kwargs: Any,
    ) -> None:
        """Create the parent directories, then open the file.

        Args:
            filename: Path to the log file.
            *args: Mode, size and backup count of the rotation.
            **kwargs: Other arguments of ``RotatingFileHandler``.
        """
        pathlib.Path(filename).parent.mkdir(parents=True, exist_ok=True)
        super().__init__(filename, *args, **kwargs)

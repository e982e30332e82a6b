"""Module holding metadata."""

import logging
from importlib.metadata import PackageNotFoundError, metadata

logger = logging.getLogger(__name__)

__project__ = "gamecord"
__issues__ = "https://github.com/gamecord/gamecord/issues"

try:
    _METADATA = metadata(__project__)
except PackageNotFoundError:
    logger.warning("Cannot load package metadata, please reinstall !")
    __author__ = "Unknown"
    __email__ = "Unknown"
    __version__ = "Unknown"
    __summary__ = "Unknown"
else:
    __author__ = str(_METADATA["Author"])
    __email__ = str(_METADATA["Author-email"])
    __version__ = str(_METADATA["Version"])
    __summary__ = str(_METADATA["Summary"])

__copyright__ = f"{__author__} <{__email__}>"

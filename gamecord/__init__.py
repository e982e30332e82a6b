"""Init module of gamecord."""

from .bot import Gamecord
from .cli import entrypoint
from .info import (
    __author__,
    __copyright__,
    __email__,
    __issues__,
    __project__,
    __summary__,
    __version__,
)

__all__ = [
    "Gamecord",
    "__author__",
    "__copyright__",
    "__email__",
    "__issues__",
    "__project__",
    "__summary__",
    "__version__",
    "entrypoint",
]

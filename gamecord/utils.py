"""Utility functions shared by the games."""

from collections.abc import Sequence
from typing import TypeVar

T = TypeVar("T")

NUMBER_EMOJIS = (
    "1️⃣",
    "2️⃣",
    "3️⃣",
    "4️⃣",
    "5️⃣",
    "6️⃣",
    "7️⃣",
    "8️⃣",
    "9️⃣",
    "🔟",
)

# Platform limit of buttons in a single row
MAX_ROW_SIZE = 5


def chunk(items: Sequence[T], size: int = MAX_ROW_SIZE) -> list[list[T]]:
    """Split items into rows of at most ``size`` elements.

    Examples:
        >>> chunk([1, 2, 3, 4, 5, 6, 7])
        [[1, 2, 3, 4, 5], [6, 7]]
    """
    return [list(items[i : i + size]) for i in range(0, len(items), size)]

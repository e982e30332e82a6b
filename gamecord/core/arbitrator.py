"""Turn arbitration for sessions receiving concurrent input."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager

logger = logging.getLogger(__name__)


class TurnToken:
    """Proof that the holder currently owns the board."""

    __slots__ = ("number",)

    def __init__(self, number: int) -> None:
        self.number = number

    def __repr__(self) -> str:
        return f"<TurnToken number={self.number!r}>"


class TurnArbitrator:
    """Drop-on-contention guard around board mutations.

    Unlike :class:`asyncio.Lock` it never makes a caller wait. The platform
    delivers button clicks concurrently, so a click arriving while another
    turn is being applied is discarded instead of being replayed later on a
    board the player has not seen.
    """

    def __init__(self) -> None:
        self._current: TurnToken | None = None
        self._count = 0

    @property
    def busy(self) -> bool:
        """Whether a turn is being applied."""
        return self._current is not None

    @property
    def turns(self) -> int:
        """Number of turns entered since creation."""
        return self._count

    def try_enter(self) -> TurnToken | None:
        """Take the turn token if nobody holds it.

        Returns:
            The token, or None if another turn is in progress.
        """
        if self._current is not None:
            return None
        self._count += 1
        self._current = TurnToken(self._count)
        return self._current

    def leave(self, token: TurnToken) -> None:
        """Give back the turn token.

        Args:
            token: The token returned by :meth:`try_enter`.

        Raises:
            RuntimeError: If the token is not the active one.
        """
        if token is not self._current:
            error_message = f"{token!r} is not the active turn token"
            raise RuntimeError(error_message)
        self._current = None

    @contextmanager
    def turn(self) -> Iterator[TurnToken | None]:
        """Hold the token for the duration of a ``with`` block.

        Yields:
            The token, or None when the turn must be dropped.
        """
        token = self.try_enter()
        if token is None:
            logger.debug("Turn dropped, another turn is in progress")
            yield None
            return
        try:
            yield token
        finally:
            self.leave(token)

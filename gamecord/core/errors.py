"""Exceptions raised and published by game sessions.

Every failure that happens once a session is running is caught where it
occurs and published on the session lifecycle bus instead of unwinding
through :meth:`GameSession.start`. Only misuse of the API
(:class:`InvalidActionError`) and bad options (:class:`ConfigurationError`)
are raised directly to the caller.
"""

from typing import Any


class GameError(Exception):
    """Base exception for all game-related errors."""


class InvalidActionError(GameError):
    """Exception raised when an invalid game action is attempted."""


class ConfigurationError(GameError):
    """Exception raised when game options fail validation."""


class TransportError(GameError):
    """Exception raised when a platform call fails during a session.

    Attributes:
        operation: Name of the transport operation that failed.
    """

    def __init__(self, message: str, *, operation: str = "unknown") -> None:
        """Initialize the error.

        Args:
            message: Human-readable description of the failure.
            operation: Name of the transport operation that failed.
        """
        super().__init__(message)
        self.operation = operation

    @classmethod
    def wrap(cls, operation: str, error: BaseException) -> "TransportError":
        """Create a transport error describing a failed platform call.

        The original exception is attached as ``__cause__`` so the
        traceback of the platform call is kept.

        Args:
            operation: Name of the transport operation that failed.
            error: The exception raised by the platform.

        Returns:
            A new error of the class this method is called on.
        """
        wrapped = cls(
            f"Transport operation {operation!r} failed: {error!r}",
            operation=operation,
        )
        wrapped.__cause__ = error
        return wrapped


class FatalTransportError(TransportError):
    """Exception raised when the first game view cannot be shown."""


class UpstreamDataError(GameError):
    """Exception raised when remote game data cannot be retrieved.

    Attributes:
        payload: The decoded remote answer, if any.
    """

    def __init__(self, message: str, payload: Any = None) -> None:
        """Initialize the error.

        Args:
            message: Human-readable description of the failure.
            payload: The decoded remote answer, if any.
        """
        super().__init__(message)
        self.payload = payload

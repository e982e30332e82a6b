"""Option values and option decoding shared by every game.

Most textual options of a game accept either a static value or a function
computing the value from the session when the view is rendered. Both are
stored as :class:`Dynamic` objects and resolved with :meth:`Dynamic.resolve`.
"""

import inspect
import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import (
    Any,
    Generic,
    TypeGuard,
    TypeVar,
    cast,
    get_args,
    get_origin,
)

import msgspec

from gamecord.core.errors import ConfigurationError
from gamecord.core.view import Embed

logger = logging.getLogger(__name__)

T = TypeVar("T")
V = TypeVar("V")


class Serializable(ABC, Generic[V]):
    """Abstract base class for option values decoded with a hook."""

    _decodable_flag = True

    @abstractmethod
    def encode(self) -> V:
        """Convert the object to its serializable form."""

    @classmethod
    @abstractmethod
    def decode(cls: type[T], args: tuple[Any, ...], obj: Any) -> T:
        """Reconstruct an object from its serialized form."""

    @staticmethod
    def decodable(typ: type[Any]) -> TypeGuard["type[Serializable[Any]]"]:
        """Check whether a class is a Serializable subclass."""
        return hasattr(typ, "_decodable_flag")


class Dynamic(Serializable[V]):
    """Option holding either a static value or a function computing it.

    Computed values may be plain or coroutine functions, they receive the
    arguments given to :meth:`resolve`.
    """

    __slots__ = ("_compute", "_value")

    def __init__(
        self,
        value: V | None = None,
        *,
        compute: Callable[..., V | Awaitable[V]] | None = None,
    ) -> None:
        """Initialize the option.

        Args:
            value: The static value.
            compute: Function computing the value, takes precedence.
        """
        self._value = value
        self._compute = compute

    @classmethod
    def computed(cls, compute: Callable[..., Any]) -> "Dynamic[Any]":
        """Create an option computed at render time."""
        return cls(compute=compute)

    def __str__(self) -> str:
        """Return a readable string representation."""
        if self._compute is not None:
            return f"<{self.__class__.__name__} computed={self._compute!r}>"
        return f"<{self.__class__.__name__} {self._value!r}>"

    __repr__ = __str__

    @property
    def is_computed(self) -> bool:
        """Whether the value comes from a function."""
        return self._compute is not None

    @property
    def is_set(self) -> bool:
        """Whether the option holds a function or a value."""
        return self._compute is not None or self._value is not None

    @property
    def value(self) -> V | None:
        """The static value, None for computed options."""
        return self._value

    async def resolve(self, *args: Any) -> V | None:
        """Return the value, calling the function with ``args`` if needed."""
        if self._compute is None:
            return self._value
        result = self._compute(*args)
        if inspect.isawaitable(result):
            result = await result
        return cast("V", result)

    def encode(self) -> V:
        """Serialize the static value.

        Raises:
            TypeError: If the option is computed.
        """
        if self._compute is not None or self._value is None:
            error_message = f"Cannot encode {self}"
            raise TypeError(error_message)
        return self._value

    @classmethod
    def decode(cls, args: tuple[Any, ...], obj: Any) -> Any:  # noqa: ARG003
        """Build the option from a function or a raw value."""
        if isinstance(obj, cls):
            return obj
        if callable(obj):
            return cls(compute=obj)
        return cls(cls.coerce(obj))

    @classmethod
    @abstractmethod
    def coerce(cls, obj: Any) -> Any:
        """Validate a raw static value."""


class Text(Dynamic[str]):
    """Message option, a string or a function returning one."""

    @classmethod
    def coerce(cls, obj: Any) -> str:
        """Validate a static message.

        Raises:
            TypeError: If the value is not a string.
        """
        if not isinstance(obj, str):
            error_message = f"Expected a string or a function, got {obj!r}"
            raise TypeError(error_message)
        return obj


class EmbedTemplate(Dynamic[Embed]):
    """Embed option, partial embed attributes or a function building one.

    A static template is merged over the embed built by the game, a
    computed template replaces it.
    """

    @classmethod
    def coerce(cls, obj: Any) -> Embed | None:
        """Validate static embed attributes.

        Raises:
            TypeError: If the value cannot be converted to an embed.
        """
        if obj is None or isinstance(obj, Embed):
            return obj
        try:
            return msgspec.convert(obj, type=Embed, from_attributes=True)
        except msgspec.ValidationError as err:
            error_message = f"Invalid embed {obj!r}: {err}"
            raise TypeError(error_message) from err


def text(value: str | Callable[..., Any]) -> Text:
    """Shortcut building a :class:`Text` from a value or a function."""
    return Text.decode((), value)  # type: ignore[no-any-return]


def embed(
    value: Embed | dict[str, Any] | Callable[..., Any] | None = None,
) -> EmbedTemplate:
    """Shortcut building an :class:`EmbedTemplate`."""
    return EmbedTemplate.decode((), value)  # type: ignore[no-any-return]


def _dec_hook(target_type: type[T], value: Any) -> T:
    """Decode raw option values into option objects.

    Args:
        target_type: The type into which the value should be decoded.
        value: The raw value to decode.

    Returns:
        The decoded Python object.

    Raises:
        TypeError: If the type is unsupported for decoding.
    """
    origin = get_origin(target_type) or target_type
    args = get_args(target_type)
    if isinstance(origin, type) and Serializable.decodable(origin):
        return cast("T", origin.decode(args, value))
    msg = f"Invalid type {target_type!r} for {value!r}"
    raise TypeError(msg)


def parse_options(options: Any, target_type: type[T]) -> T:
    """Validate the options given to a game.

    Args:
        options: A mapping, an object with matching attributes, an
            instance of ``target_type`` or None for the defaults.
        target_type: The options structure of the game.

    Returns:
        The validated options.

    Raises:
        ConfigurationError: If an option is missing, unknown or invalid.
    """
    if isinstance(options, target_type):
        return options
    try:
        return msgspec.convert(  # type: ignore[no-any-return,unused-ignore]
            {} if options is None else options,
            type=target_type,
            dec_hook=_dec_hook,
            from_attributes=True,
        )
    except (msgspec.ValidationError, TypeError, ValueError) as err:
        logger.warning("Invalid options for %s: %s", target_type.__name__, err)
        error_message = f"Invalid options for {target_type.__name__}: {err}"
        raise ConfigurationError(error_message) from err

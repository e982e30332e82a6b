"""Configuration of the gamecord bot.

This module contains the configuration structures of the bot, the YAML
loading and saving helpers and the logging setup. Game options found in the
configuration are plain mappings, they are validated by each game when a
session is created.
"""

import logging
import logging.config
import os
import pathlib
from typing import Annotated, Any, TypeVar, cast, get_origin

import msgspec

T = TypeVar("T")

HERE = pathlib.Path(__file__).parent.resolve()
RESOURCES = HERE / "resources"
DEFAULT_CONFIG_PATH = pathlib.Path("config.yml")
EXAMPLE_CONFIG_PATH = RESOURCES / "config.example.yml"


class MGame(msgspec.Struct, forbid_unknown_fields=True):
    """Configuration of a single game command.

    Attributes:
        enabled: Whether the slash command of the game is registered.
        cooldown: Seconds a member waits between two games.
        options: Default options given to every session of the game.
    """

    enabled: bool = True
    cooldown: Annotated[float, msgspec.Meta(ge=0)] = 0.0
    options: dict[str, Any] = msgspec.field(default_factory=dict)


class MConfig(msgspec.Struct, dict=True):
    """Main configuration structure for the bot."""

    group: str = "game"
    use_logging_file: bool = False
    owner_is_admin: bool = True
    admins: list[int] = msgspec.field(default_factory=list)
    message_content: bool = True
    versus_timeout: Annotated[float, msgspec.Meta(gt=0)] = 60.0
    games: dict[str, MGame] = msgspec.field(default_factory=dict)
    token: str | msgspec.UnsetType | None = msgspec.UNSET
    _resources: pathlib.Path | msgspec.UnsetType | None = msgspec.field(
        name="resources", default=msgspec.UNSET
    )
    _working_directory: pathlib.Path | msgspec.UnsetType | None = (
        msgspec.field(name="working_directory", default=msgspec.UNSET)
    )

    def game(self, name: str) -> MGame:
        """Return the configuration of a game, defaults if missing."""
        return self.games.get(name) or MGame()

    def game_options(
        self, name: str, **overrides: Any
    ) -> dict[str, Any]:
        """Return the default options of a game merged with overrides.

        Examples:
            >>> config = MConfig(games={"flood": MGame(options={"size": 8})})
            >>> config.game_options("flood", timeout=30.0)
            {'size': 8, 'timeout': 30.0}
        """
        return {**self.game(name).options, **overrides}

    def verified_token(self) -> str:
        """Return the bot token after validating it.

        Raises:
            TypeError: If no token is set.
            ValueError: If the token format is invalid.
        """
        if self.token is None or self.token is msgspec.UNSET:
            msg = "Token was not provided"
            raise TypeError(msg)
        if "." not in self.token:
            msg = "Wrong token format"
            raise ValueError(msg)
        return self.token

    def attach_default_working_directory(
        self, path: pathlib.Path | str
    ) -> None:
        """Attach a fallback working directory path for this config."""
        self._cwd = pathlib.Path(path)

    @property
    def working_directory(self) -> pathlib.Path:
        """Return the working directory, falling back to the current path."""
        if (
            self._working_directory is None
            or self._working_directory is msgspec.UNSET
        ):
            if hasattr(self, "_cwd"):
                return self._cwd.resolve()
            return pathlib.Path.cwd().resolve()
        return self._working_directory.resolve()

    @property
    def resources(self) -> pathlib.Path:
        """Return the resources path, defaulting to embedded resources."""
        if self._resources is None or self._resources is msgspec.UNSET:
            return RESOURCES
        if self._resources.is_absolute():
            return self._resources
        return self.working_directory / self._resources

    def configure_logging(self) -> None:
        """Configure logging from the resources when enabled.

        Raises:
            FileNotFoundError: If the logging file is missing.
        """
        if not self.use_logging_file:
            return
        logging_file = self.resources / "logging.conf"
        if not logging_file.is_file():
            msg = f"Cannot find logging file: {logging_file!r}"
            raise FileNotFoundError(msg)
        logging.config.fileConfig(
            logging_file,
            disable_existing_loggers=False,
            defaults={"data": self.working_directory.as_posix()},
        )

    def __str__(self) -> str:
        """Return a human-readable representation of the config."""
        return f"<Config {str(self.working_directory)!r}>"

    __repr__ = __str__


def _dec_hook(target_type: type[T], value: Any) -> T:
    """Decode YAML values into the types msgspec does not handle.

    Raises:
        TypeError: If the type is unsupported for decoding.
    """
    origin = get_origin(target_type) or target_type
    if isinstance(origin, type) and issubclass(origin, pathlib.Path):
        return cast("T", pathlib.Path(value))
    msg = f"Invalid type {target_type!r} for {value!r}"
    raise TypeError(msg)


def _enc_hook(value: Any) -> Any:
    """Encode objects msgspec does not handle into YAML values.

    Raises:
        TypeError: If the object cannot be encoded.
    """
    if isinstance(value, pathlib.Path):
        return str(value)
    msg = f"Invalid object {value!r}"
    raise TypeError(msg)


def load_yaml(data: bytes | str, target_type: type[T]) -> T:
    """Load an object from YAML data.

    Args:
        data: YAML-formatted bytes or string.
        target_type: The type into which the data should be decoded.

    Returns:
        An instance of target_type loaded from YAML.
    """
    return msgspec.yaml.decode(  # type: ignore[no-any-return,unused-ignore]
        data,
        type=target_type,
        dec_hook=_dec_hook,
    )


def dump_yaml(value: Any) -> bytes:
    """Serialize an object into YAML bytes."""
    return msgspec.yaml.encode(value, enc_hook=_enc_hook)


def load_config_from_buffer(
    data: bytes | str,
    token: str | None = None,
    *,
    env: bool = False,
) -> MConfig:
    """Load configuration from YAML data in memory.

    Args:
        data: YAML bytes or string containing the configuration.
        token: Optional bot token override.
        env: If True, load token from DISCORD_TOKEN environment variable.

    Returns:
        Loaded MConfig instance.
    """
    config = load_yaml(data, MConfig)
    if env:
        potential_token = os.environ.get("DISCORD_TOKEN")
        if potential_token is not None:
            config.token = potential_token
    if token is not None:
        config.token = token
    return config


def load_config_from_path(
    path: str | pathlib.Path,
    token: str | None = None,
    *,
    env: bool = False,
) -> MConfig:
    """Load configuration from a YAML file path.

    The directory of the file becomes the default working directory.
    """
    path = pathlib.Path(path)
    data = path.read_bytes()
    config = load_config_from_buffer(data, token=token, env=env)
    config.attach_default_working_directory(path.parent)
    return config

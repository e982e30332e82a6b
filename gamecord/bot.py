"""Main program for Gamecord.

This module defines the `Gamecord` Discord bot class. The bot owns the
configuration, checks the options of the enabled games before connecting,
loads the game cog and the slash commands and syncs them once ready.
"""

import logging
import shutil
from getpass import getpass
from pathlib import Path
from typing import TYPE_CHECKING

import discord
import discord.app_commands
import discord.ext.commands

from gamecord.config import (
    DEFAULT_CONFIG_PATH,
    EXAMPLE_CONFIG_PATH,
    RESOURCES,
    MConfig,
    dump_yaml,
    load_config_from_buffer,
    load_config_from_path,
)
from gamecord.core import ConfigurationError, Player
from gamecord.core.options import parse_options
from gamecord.games import GAMES, VERSUS_GAMES

if TYPE_CHECKING:
    from gamecord.client.cog import GameCog

logger = logging.getLogger(__name__)

EXTENSIONS = ("gamecord.client", "gamecord.commands")

# Stands for the invited member when checking the options of versus games
PLACEHOLDER_OPPONENT = Player(id=0, name="opponent")


class Gamecord(discord.ext.commands.Bot):
    """Discord bot playing mini-games in the conversations."""

    owner: discord.User | None
    game: "GameCog"

    def __init__(self, config: MConfig) -> None:
        """Initialize the Gamecord instance.

        Args:
            config: Loaded bot configuration.
        """
        intents = discord.Intents.default()
        intents.message_content = config.message_content
        discord.VoiceClient.warn_nacl = False
        super().__init__(
            command_prefix=".",
            description="Discord bot for playing mini-games",
            activity=discord.Game(name=f"/{config.group}"),
            intents=intents,
        )
        self.owner = None
        self.app_commands: list[discord.app_commands.AppCommand] = []
        self.config = config
        self.config.configure_logging()

    def __repr__(self) -> str:
        return f"<{self.__class__.__qualname__} config={self.config}>"

    @classmethod
    def from_config(
        cls,
        path: str | Path = DEFAULT_CONFIG_PATH,
        *,
        token: str | None = None,
        env: bool = False,
    ) -> "Gamecord":
        """Create an instance from a configuration file."""
        return cls(load_config_from_path(path, token=token, env=env))

    @classmethod
    def generate(
        cls,
        destination: Path | str,
        *,
        token: str | None = None,
        env: bool = False,
        interactive: bool = False,
    ) -> "Gamecord":
        """Write a ready to edit bot directory and load it.

        The directory receives ``config.yml``, a copy of the resources
        (logging configuration and word list) and a ``.gitignore``
        ignoring everything since the configuration holds the token.

        Args:
            destination: Directory of the bot, created if missing.
            token: Bot token override.
            env: If True, load the token from the environment.
            interactive: If True, prompt for a token until one is valid.

        Returns:
            The bot using the generated configuration.
        """
        destination = Path(destination).resolve()
        destination.mkdir(parents=True, exist_ok=True)
        config = load_config_from_buffer(
            EXAMPLE_CONFIG_PATH.read_bytes(), token=token, env=env
        )
        config.attach_default_working_directory(destination)
        if interactive:
            prompt_token(config)
        shutil.copytree(RESOURCES, destination / "resources", dirs_exist_ok=True)
        config._resources = Path("resources")  # noqa: SLF001
        (destination / "config.yml").write_bytes(dump_yaml(config))
        (destination / ".gitignore").write_bytes(b"*\n")
        logger.info("Bot generated in %s", destination)
        return cls(config)

    def enabled_games(self) -> list[str]:
        """Check the options of the enabled games.

        Games are only validated here, sessions validate them again with
        the options of their command.

        Returns:
            Names of the enabled games.

        Raises:
            ConfigurationError: If a game is unknown or has invalid options.
        """
        for name in self.config.games:
            if name not in GAMES:
                error_message = f"Unknown game in configuration: {name!r}"
                raise ConfigurationError(error_message)
        enabled = []
        for name, game_class in GAMES.items():
            if not self.config.game(name).enabled:
                continue
            options = self.config.game_options(name)
            if name in VERSUS_GAMES:
                options["versus"] = {
                    **options.get("versus", {}),
                    "opponent": PLACEHOLDER_OPPONENT,
                }
            parse_options(options, game_class.options_type)
            enabled.append(name)
        return enabled

    def is_super_admin(
        self,
        user: discord.User | discord.Member,
    ) -> bool:
        """Check whether a user bypasses cooldowns and permissions.

        Args:
            user: The Discord user or member to check.

        Returns:
            True if the user is a configured admin or, when
            ``owner_is_admin`` is set, the owner of the application.
        """
        if user.id in self.config.admins:
            return True
        if not self.config.owner_is_admin:
            return False
        owners = {self.owner_id, *(self.owner_ids or ())}
        if self.owner is not None:
            owners.add(self.owner.id)
        return user.id in owners

    async def setup_hook(self) -> None:
        """Check the games then load the extensions."""
        games = self.enabled_games()
        logger.info("Enabled games: %s", ", ".join(games) or "none")
        for extension in EXTENSIONS:
            await self.load_extension(extension)

    def auto_run(self) -> None:
        """Start the bot using the verified token."""
        self.run(token=self.config.verified_token(), log_handler=None)

    async def on_ready(self) -> None:
        """Sync the commands and log where the bot is.

        This may trigger multiple times if the bot reconnects.
        """
        logger.info("Syncing commands...")
        await self.tree.sync()
        self.app_commands = await self.tree.fetch_commands()
        app_info = await self.application_info()
        self.owner = app_info.owner
        logger.info("Owner is %s (%s)", self.owner.display_name, self.owner.id)
        async for guild in self.fetch_guilds():
            logger.info("Guild %s (%s)", guild, guild.id)
        logger.info(
            "Logged in as %s (%s)",
            self.user,
            getattr(self.user, "id", "unknown"),
        )


def prompt_token(config: MConfig) -> None:
    """Ask for a token until the configuration holds a valid one."""
    while True:
        try:
            config.verified_token()
        except (ValueError, TypeError) as err:
            logger.debug("Invalid token: %s", err)
            config.token = getpass("Token: ")
        else:
            return

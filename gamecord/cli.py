"""Module for command line interface."""

import argparse
import logging
import sys
from collections.abc import Callable, Sequence
from typing import NoReturn

from gamecord.bot import Gamecord
from gamecord.config import DEFAULT_CONFIG_PATH, load_config_from_path
from gamecord.core import ConfigurationError
from gamecord.games import GAMES, VERSUS_GAMES
from gamecord.info import __issues__, __project__, __summary__, __version__

logger = logging.getLogger(__name__)


class HelpArgumentParser(argparse.ArgumentParser):
    """Parser for show usage on error."""

    def error(self, message: str) -> NoReturn:  # pragma: no cover
        """Handle error from argparse.ArgumentParser."""
        self.print_help(sys.stderr)
        self.exit(2, f"{self.prog}: error: {message}\n")


def get_parser() -> argparse.ArgumentParser:
    """Prepare ArgumentParser."""
    parser = HelpArgumentParser(
        prog=__project__,
        description=__summary__,
        formatter_class=argparse.RawTextHelpFormatter,
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s, version {__version__}",
    )
    subparsers = parser.add_subparsers(
        help="desired action to perform",
        dest="action",
        required=True,
    )

    common = HelpArgumentParser(add_help=False)
    common.add_argument(
        "-v",
        "--verbose",
        help="verbose mode, enable INFO and DEBUG messages.",
        action="store_true",
    )
    token = HelpArgumentParser(add_help=False)
    token.add_argument(
        "-t",
        "--token",
        help="run using a token and the default configuration.",
    )
    token.add_argument(
        "-e",
        "--env",
        help="load token from DISCORD_TOKEN environnement variable.",
        action="store_true",
    )
    config = HelpArgumentParser(add_help=False)
    config.add_argument(
        "-c",
        "--config",
        help=f"path to configuration, default to {DEFAULT_CONFIG_PATH}.",
        default=DEFAULT_CONFIG_PATH,
    )

    subparsers.add_parser(
        "run", parents=[common, token, config], help="start the bot."
    )
    generate_parser = subparsers.add_parser(
        "generate",
        parents=[common, token],
        help="generate a bot directory with its configuration.",
    )
    generate_parser.add_argument(
        "-i",
        "--interactive",
        help="ask for the token until a valid one is given.",
        action="store_true",
    )
    generate_parser.add_argument("destination", nargs="?", default=".")
    subparsers.add_parser(
        "check",
        parents=[common, config],
        help="validate the options of the enabled games.",
    )
    subparsers.add_parser(
        "games", parents=[common], help="list the available games."
    )
    return parser


def setup_logging(*, verbose: bool | None = None) -> None:
    """Do setup logging."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s",
    )
    logging.captureWarnings(capture=True)


def run(namespace: argparse.Namespace) -> None:
    """Start the bot until it is stopped."""
    bot = Gamecord.from_config(
        namespace.config, token=namespace.token, env=namespace.env
    )
    bot.auto_run()


def generate(namespace: argparse.Namespace) -> None:
    """Write a bot directory."""
    Gamecord.generate(
        destination=namespace.destination,
        token=namespace.token,
        env=namespace.env,
        interactive=namespace.interactive,
    )


def check(namespace: argparse.Namespace) -> None:
    """Print the enabled games of a configuration, exit 1 if invalid."""
    bot = Gamecord(load_config_from_path(namespace.config))
    try:
        games = bot.enabled_games()
    except ConfigurationError as err:
        print(f"Invalid configuration: {err}", file=sys.stderr)  # noqa: T201
        sys.exit(1)
    print(f"Enabled games: {', '.join(games)}")  # noqa: T201


def list_games(namespace: argparse.Namespace) -> None:  # noqa: ARG001
    """Print the name and mode of every game."""
    for name, game_class in GAMES.items():
        mode = "versus" if name in VERSUS_GAMES else "solo"
        print(f"{name:<12} {mode:<7} {game_class.title}")  # noqa: T201


ACTIONS: dict[str, Callable[[argparse.Namespace], None]] = {
    "run": run,
    "generate": generate,
    "check": check,
    "games": list_games,
}


def entrypoint(argv: Sequence[str] | None = None) -> None:
    """Entrypoint for command line interface."""
    args = list(sys.argv[1:] if argv is None else argv)
    try:
        parser = get_parser()
        namespace = parser.parse_args(args)
        setup_logging(verbose=namespace.verbose)
        ACTIONS[namespace.action](namespace)
    except Exception as err:  # NoQA: BLE001  # pragma: no cover
        setup_logging(verbose=True)
        logger.critical(
            "Unexpected error (%s, version %s)",
            __project__,
            __version__,
            exc_info=err,
        )
        logger.critical("Please, report this error to %s.", __issues__)
        sys.exit(1)

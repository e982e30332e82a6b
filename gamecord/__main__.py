"""Run the command line interface with ``python -m gamecord``."""

from gamecord.cli import entrypoint

if __name__ == "__main__":
    entrypoint()

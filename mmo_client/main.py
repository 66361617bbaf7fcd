"""
Main entry point for the game client.
"""

import argparse
import asyncio
from pathlib import Path
from typing import List, Optional

from .client import GameClient
from .config import ClientConfig, reload_config
from .logging_config import get_logger, setup_logging

logger = get_logger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Mini MMORPG client")
    parser.add_argument("--config", type=Path, default=None, help="Path to client_config.yml")
    parser.add_argument("--server-url", default=None, help="WebSocket server URL")
    parser.add_argument("--username", default=None, help="Username to join with")
    parser.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING or ERROR")
    return parser.parse_args(argv)


def load_config(args: argparse.Namespace) -> ClientConfig:
    """Load the configuration file, then apply command line overrides."""
    config = reload_config(args.config)

    if args.server_url:
        config.server.url = args.server_url
    if args.username:
        config.game.username = args.username
    if args.log_level:
        config.debug.log_level = args.log_level

    return config


async def main(config: ClientConfig) -> None:
    """Run one client session until the window is closed."""
    client = GameClient(config)
    await client.run()


def run(argv: Optional[List[str]] = None) -> None:
    """Console script entry point."""
    args = parse_args(argv)
    config = load_config(args)
    setup_logging(config.debug.log_level)

    try:
        asyncio.run(main(config))
    except KeyboardInterrupt:
        logger.info("Interrupted, exiting")


if __name__ == "__main__":
    run()

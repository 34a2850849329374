#!/usr/bin/env python3
"""
Dockmon command line client.

Lists the containers a Dockmon server exposes and follows the logs of one of
them in the terminal.
"""

import argparse
import asyncio
import getpass
import logging
import os
import sys
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

import httpx

from .buffer import LogBuffer, classify_level, format_timestamp
from .client import DockmonClient
from .colors import Colors
from .errors import AuthError, DockmonError
from .models import LogEvent


class BaseCommand(ABC):
    """Base class for all CLI commands."""

    def __init__(self, args: argparse.Namespace):
        """
        Initialize the command.

        Args:
            args: Parsed command line arguments
        """
        self.args = args
        self.logger = logging.getLogger(self.__class__.__name__)
        self.client = DockmonClient(args.server)

    @abstractmethod
    async def execute(self) -> int:
        """
        Run the command.

        Returns:
            Exit code (0 for success, non-zero for failure)
        """

    @staticmethod
    @abstractmethod
    def add_arguments(parser: argparse.ArgumentParser) -> None:
        """
        Add command-specific arguments to the parser.

        Args:
            parser: Argument parser to add arguments to
        """

    def run(self) -> int:
        return asyncio.run(self._login_and_execute())

    async def _login_and_execute(self) -> int:
        password = self.args.password or os.getenv("DOCKMON_PASSWORD") or getpass.getpass("Password: ")
        self.logger.debug(f"Logging in to {self.args.server} as {self.args.username}")
        await self.client.login(self.args.username, password)
        return await self.execute()


class ListCommand(BaseCommand):
    """Print the containers the server lets us monitor."""

    @staticmethod
    def add_arguments(parser: argparse.ArgumentParser) -> None:
        parser.add_argument("--all", "-a", action="store_true", help="Include stopped containers")

    async def execute(self) -> int:
        data = await self.client.list_containers(include_all=self.args.all)
        print(Colors.dim(
            f"Filter: {data['filter']} | States: {data['stateFilter']} | "
            f"{data['filtered']}/{data['total']} containers"
        ))
        for container in data["containers"]:
            print(f"{Colors.bold(container['name']):<40} {Colors.state(container['state']):<20} "
                  f"{container['image']}  {container['status']}")
        return 0


class FollowCommand(BaseCommand):
    """Stream one container's logs to the terminal."""

    @staticmethod
    def add_arguments(parser: argparse.ArgumentParser) -> None:
        parser.add_argument("container", help="Exact container name")
        parser.add_argument("--search", "-s", default="", help="Only print lines containing this text")
        parser.add_argument("--export", "-o", help="Write received lines to this file or directory on exit")

    def __init__(self, args: argparse.Namespace):
        super().__init__(args)
        self.buffer = LogBuffer(args.container)
        self.connected = False

    def on_event(self, event: LogEvent) -> None:
        if event.kind == "connected":
            self.connected = True
            print(Colors.success(f"Streaming logs of {event.container_name}"))
        elif event.kind == "disconnected":
            print(Colors.warning("Log stream ended"))
        elif event.kind == "error" and self.connected:
            print(Colors.error(event.message or "Unknown error"))

        if not self.buffer.append(event):
            return
        text = event.data or ""
        if self.args.search and self.args.search.lower() not in text.lower():
            return
        print(f"{Colors.dim(format_timestamp(event.timestamp))} {Colors.level(text, classify_level(text))}")

    async def execute(self) -> int:
        try:
            await self.client.follow(self.args.container, self.on_event)
        finally:
            self.export()
        return 0

    def export(self) -> Optional[Path]:
        if not self.args.export or len(self.buffer) == 0:
            return None
        path = Path(self.args.export)
        if path.is_dir():
            path = path / self.buffer.export_filename()
        path.write_text(self.buffer.export_text() + "\n", encoding="utf-8")
        print(Colors.info(f"Exported {len(self.buffer)} lines to {path}"))
        return path


COMMANDS = {
    "list": (ListCommand, "List monitorable containers"),
    "follow": (FollowCommand, "Follow a container's logs"),
}


def create_parser() -> argparse.ArgumentParser:
    """Create the main argument parser."""
    parser = argparse.ArgumentParser(
        description="Dockmon client - live Docker container logs in the terminal",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  dockmon list                      # List monitorable containers
  dockmon list --all                # Include stopped containers
  dockmon follow web-1              # Follow the logs of web-1
  dockmon follow web-1 -s error     # Only print lines containing 'error'
  dockmon follow web-1 -o ./logs    # Save received lines on exit
        """
    )
    parser.add_argument("--server", default=os.getenv("DOCKMON_SERVER", "http://localhost:3001"),
                        help="Dockmon server URL")
    parser.add_argument("--username", "-u", default=os.getenv("DOCKMON_USERNAME", "admin"), help="Login name")
    parser.add_argument("--password", "-p", help="Password (default: $DOCKMON_PASSWORD or prompt)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose output")

    subparsers = parser.add_subparsers(dest="command", help="Available commands", required=True)
    for name, (command_class, help_text) in COMMANDS.items():
        command_class.add_arguments(subparsers.add_parser(name, help=help_text))

    return parser


def main(argv=None) -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    logger = logging.getLogger(__name__)

    command_class, _ = COMMANDS[args.command]
    try:
        return command_class(args).run()
    except KeyboardInterrupt:
        print("\n" + Colors.warning("Stopped by user"))
        return 130
    except AuthError as e:
        print(Colors.error(e.message))
        return 2
    except DockmonError as e:
        print(Colors.error(e.message))
        return 1
    except httpx.HTTPError as e:
        print(Colors.error(f"Request to {args.server} failed: {e}"))
        return 1
    except Exception as e:
        logger.error(f"Unexpected error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())

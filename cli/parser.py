"""Argument parser for the CardGen CLI."""

import argparse
import logging

from core.constants import VERSION, __author__, __copyright__

logger = logging.getLogger(__name__)

USAGE = "Usage: card-gen input-filename output-filename"


class CardGenArgumentParser(argparse.ArgumentParser):
    """Argument parser that reports bad arguments with the usage line and exit status 0."""

    def error(self, message: str):
        logger.debug(f"Argument error: {message}")
        print(USAGE)
        self.exit(0)


def build_arg_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser for CLI."""
    parser = CardGenArgumentParser(
        prog="card-gen",
        description="Render a card image from a JSON card specification"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {VERSION}\n{__copyright__}\nAuthor: {__author__}"
    )

    # Input and output; the count is checked by the runner so a wrong count
    # prints the usage line instead of failing
    parser.add_argument(
        "paths",
        nargs="*",
        metavar="PATH",
        help="Card specification JSON file, then output image file"
    )

    # Resources
    resource_group = parser.add_argument_group("resources")
    resource_group.add_argument(
        "-c", "--config",
        help="Path to config.json (default: platform configuration directory)"
    )
    resource_group.add_argument(
        "--font-dir",
        action="append",
        default=[],
        metavar="DIR",
        help="Directory searched for fonts referenced by [font] tags (repeatable)"
    )
    resource_group.add_argument(
        "--color",
        action="append",
        default=[],
        metavar="NAME=HEX",
        help="Define a named color for [fill-color] and [outline-color] tags (repeatable)"
    )

    # Logging
    log_group = parser.add_argument_group("logging")
    log_group.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log debug details to the console"
    )
    log_group.add_argument(
        "--log-file",
        action="store_true",
        help="Also write a log file to the CardGen log directory"
    )

    return parser

#!/usr/bin/env python3
"""
CardGen - Card Image Generator

Renders a single card image from a JSON document listing text and image
elements. Text uses an inline markup for fonts, styles and colors.
"""

import logging
import sys
from pathlib import Path


def main(argv=None) -> int:
    """Main entry point for CardGen."""
    from cli import build_arg_parser, run_cli
    from core import ConfigManager, setup_logging

    parser = build_arg_parser()
    args = parser.parse_args(argv)

    config = ConfigManager(Path(args.config) if args.config else None)
    log_level = logging.DEBUG if args.verbose else config.get_log_level()
    setup_logging(log_level, log_to_file=args.log_file or config.get_log_to_file())

    return run_cli(args, config)


if __name__ == "__main__":
    sys.exit(main())

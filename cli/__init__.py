"""Command-line interface for CardGen."""

from .parser import build_arg_parser, USAGE
from .runner import run_cli

__all__ = ["build_arg_parser", "run_cli", "USAGE"]

"""CLI runner for CardGen."""

import logging
from pathlib import Path
from typing import List, Optional, Tuple

from core import ConfigManager
from core.layout import CardRenderer, DocumentError, RenderContext, load_card_json
from .parser import USAGE

logger = logging.getLogger(__name__)


def parse_color_definition(definition: str) -> Tuple[str, str]:
    """
    Split a NAME=HEX color definition.

    Raises:
        ValueError: If there is no '=' or the name is empty
    """
    name, sep, value = definition.partition("=")
    name = name.strip()
    if not sep or not name:
        raise ValueError(f"Invalid color definition {definition!r}, expected NAME=HEX")
    return name, value.strip()


def build_context(config: ConfigManager, font_dirs: List[str], colors: List[str]) -> RenderContext:
    """Create a render context from the config file and command-line overrides."""
    context = RenderContext()
    config.apply_to_context(context)
    for font_dir in font_dirs:
        context.fonts.add_search_dir(Path(font_dir).expanduser())
    for definition in colors:
        name, value = parse_color_definition(definition)
        context.colors.add_color(name, context.colors.resolve(value))
    return context


def run_cli(args, config: Optional[ConfigManager] = None) -> int:
    """
    Render one card from parsed command-line arguments.

    Every outcome returns 0; problems are reported on stdout.
    """
    if len(args.paths) != 2:
        print(USAGE)
        return 0

    input_path, output_path = Path(args.paths[0]), Path(args.paths[1])
    if config is None:
        config = ConfigManager(Path(args.config) if args.config else None)

    try:
        context = build_context(config, args.font_dir, args.color)
    except ValueError as e:
        print(f"Error: {e}")
        return 0

    try:
        card = load_card_json(input_path, config.get_default_character_size())
    except DocumentError as e:
        print(f"Error: {e}")
        return 0
    except OSError as e:
        logger.debug(f"Failed to read {input_path}: {e}")
        print(f"Could not open card specification file \"{input_path}\".")
        return 0

    try:
        if not CardRenderer(card, context).render(output_path):
            print(f"Failed to save card image to \"{output_path}\".")
    except Exception as e:
        logger.debug("Card rendering failed", exc_info=True)
        print(f"Error: {e}")
    return 0

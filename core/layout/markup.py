"""
Markup parser for rich text.

The markup is a small inline formatting language:

- ``/`` toggles italic, ``*`` bold, ``_`` underline, ``~`` strikethrough
- ``[command argument]`` is a tag, e.g. ``[fill-color red]`` or ``[font fonts/a.ttf]``
- ``\\`` escapes the next metacharacter so it is drawn literally
- a newline starts a new line that inherits the current format

Parsing happens in two steps: ``tokenize`` turns the source into tokens, and
``FormatBuilder`` folds the tokens into lines of formatted chunks.
"""

import logging
import math
from dataclasses import dataclass, replace
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, List, Optional

from .context import RenderContext, default_context
from .errors import MarkupError
from .models import Alignment, Chunk, Format, Line, Style

logger = logging.getLogger(__name__)

TOGGLES: Dict[str, Style] = {
    "/": Style.ITALIC,
    "*": Style.BOLD,
    "_": Style.UNDERLINED,
    "~": Style.STRIKE_THROUGH,
}

TAG_OPEN = "["
TAG_CLOSE = "]"
ESCAPE = "\\"
NEWLINE = "\n"

# Characters that may follow the escape character
ESCAPABLE = frozenset(TOGGLES) | {TAG_OPEN, ESCAPE}


class TokenType(Enum):
    """Kinds of markup tokens"""
    TOGGLE = "toggle"     # Style flag toggle
    TAG = "tag"           # [command argument]
    ESCAPED = "escaped"   # Metacharacter taken literally
    NEWLINE = "newline"   # Line break
    TEXT = "text"         # Run of ordinary characters


@dataclass(frozen=True)
class Token:
    """A single markup token"""
    type: TokenType
    text: str = ""                # Literal text for TEXT/ESCAPED tokens
    style: Style = Style.REGULAR  # Flag for TOGGLE tokens
    command: str = ""             # Tag command
    argument: str = ""            # Tag argument (may be empty)
    position: int = 0             # Index of the token in the source


def tokenize(source: str) -> List[Token]:
    """
    Split markup source into tokens.

    Consecutive ordinary characters are merged into one TEXT token.

    Raises:
        MarkupError: On an unterminated tag or an invalid escape sequence
    """
    tokens: List[Token] = []
    text_start: Optional[int] = None
    i = 0
    n = len(source)

    def flush_text(end: int) -> None:
        nonlocal text_start
        if text_start is not None:
            tokens.append(Token(TokenType.TEXT, text=source[text_start:end], position=text_start))
            text_start = None

    while i < n:
        ch = source[i]
        if ch in TOGGLES:
            flush_text(i)
            tokens.append(Token(TokenType.TOGGLE, style=TOGGLES[ch], position=i))
            i += 1
        elif ch == TAG_OPEN:
            flush_text(i)
            tag_end = source.find(TAG_CLOSE, i + 1)
            if tag_end == -1:
                raise MarkupError("Missing ']' in tag.")
            command, _, argument = source[i + 1:tag_end].partition(" ")
            tokens.append(Token(TokenType.TAG, command=command, argument=argument, position=i))
            i = tag_end + 1
        elif ch == ESCAPE:
            flush_text(i)
            if i + 1 >= n:
                raise MarkupError("Expected formatting control character after '\\'.")
            escaped = source[i + 1]
            if escaped not in ESCAPABLE:
                raise MarkupError(f"Cannot escape non-control character '{escaped}'.")
            tokens.append(Token(TokenType.ESCAPED, text=escaped, position=i))
            i += 2
        elif ch == NEWLINE:
            flush_text(i)
            tokens.append(Token(TokenType.NEWLINE, position=i))
            i += 1
        else:
            if text_start is None:
                text_start = i
            i += 1

    flush_text(n)
    return tokens


class FormatBuilder:
    """
    Folds markup tokens into lines of chunks.

    The builder keeps a current format. A format change while the last chunk
    already holds text starts a new chunk; otherwise the empty last chunk simply
    takes the new format, so runs of toggles without text between them collapse.
    """

    def __init__(self, context: Optional[RenderContext] = None, base_dir: Optional[Path] = None):
        self.context = context or default_context()
        self.base_dir = base_dir
        self.current = Format()
        self.lines: List[Line] = [Line([Chunk(self.current)])]
        self._tag_handlers: Dict[str, Callable[[str], None]] = {
            "fill-color": self._tag_fill_color,
            "outline-color": self._tag_outline_color,
            "outline-thickness": self._tag_outline_thickness,
            "font": self._tag_font,
            "align": self._tag_align,
        }

    @property
    def chunk(self) -> Chunk:
        return self.lines[-1].chunks[-1]

    def feed(self, token: Token) -> None:
        """Apply a single token to the builder state."""
        if token.type == TokenType.TOGGLE:
            self.set_format(replace(self.current, style=self.current.style ^ token.style))
        elif token.type == TokenType.TAG:
            self.tag(token.command, token.argument)
        elif token.type == TokenType.NEWLINE:
            self.new_line()
        else:  # TEXT or ESCAPED
            self.chunk.text += token.text

    def set_format(self, fmt: Format) -> None:
        """Make fmt current, starting a new chunk if the last one has text."""
        self.current = fmt
        if self.chunk.text:
            self.lines[-1].chunks.append(Chunk(fmt))
        else:
            self.chunk.format = fmt

    def new_line(self) -> None:
        self.lines.append(Line([Chunk(self.current)]))

    def tag(self, command: str, argument: str) -> None:
        handler = self._tag_handlers.get(command)
        if handler is None:
            logger.warning(f"Ignoring unknown tag command {command!r}")
            return
        handler(argument)

    def _tag_fill_color(self, argument: str) -> None:
        self.set_format(replace(self.current, fill_color=self.context.colors.resolve(argument)))

    def _tag_outline_color(self, argument: str) -> None:
        self.set_format(replace(self.current, outline_color=self.context.colors.resolve(argument)))

    def _tag_outline_thickness(self, argument: str) -> None:
        try:
            thickness = float(argument)
        except ValueError:
            raise MarkupError(f"Invalid outline thickness: {argument}.") from None
        if not math.isfinite(thickness) or thickness < 0:
            raise MarkupError(f"Invalid outline thickness: {argument}.")
        self.set_format(replace(self.current, outline_thickness=thickness))

    def _tag_font(self, argument: str) -> None:
        font = self.context.fonts.load(argument, self.base_dir)
        self.set_format(replace(self.current, font=font))

    def _tag_align(self, argument: str) -> None:
        try:
            self.lines[-1].alignment = Alignment(argument)
        except ValueError:
            raise MarkupError(f"Invalid alignment: {argument}.") from None


def parse_markup(
    source: str,
    context: Optional[RenderContext] = None,
    base_dir: Optional[Path] = None,
) -> List[Line]:
    """
    Parse markup into lines of formatted chunks.

    Args:
        source: Markup source
        context: Colors and fonts to resolve tags against (default: process-wide)
        base_dir: Directory relative font paths are resolved against

    Returns:
        At least one line; every line has at least one (possibly empty) chunk
    """
    builder = FormatBuilder(context, base_dir)
    for token in tokenize(source):
        builder.feed(token)
    return builder.lines


def plain_text(lines: List[Line]) -> str:
    """Text of the lines with all formatting removed."""
    return NEWLINE.join(line.text for line in lines)

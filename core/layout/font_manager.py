"""
Font management for the card layout module.

Fonts are referenced from markup by file path. Each distinct path is loaded
once into a FontFace and cached for the lifetime of the manager; a face hands
out Pillow fonts per character size.
"""

import io
import logging
from pathlib import Path
from typing import Callable, Dict, List, Optional
from PIL import ImageFont

from core.constants import DEFAULT_CHARACTER_SIZE, FONT_EXTENSIONS
from .errors import ResourceError

logger = logging.getLogger(__name__)


class FontFace:
    """
    A loaded font resource, independent of character size.

    Pillow fonts are bound to a pixel size, so the face keeps the raw font data
    and creates (and caches) one ImageFont.FreeTypeFont per requested size.
    """

    def __init__(self, name: str, loader: Callable[[int], ImageFont.FreeTypeFont]):
        """
        Args:
            name: Identifier of the face (the path it was loaded from)
            loader: Callable building a Pillow font for a pixel size
        """
        self.name = name
        self._loader = loader
        self._sizes: Dict[int, ImageFont.FreeTypeFont] = {}

    @classmethod
    def from_file(cls, path: Path, name: Optional[str] = None) -> "FontFace":
        """Load a TrueType/OpenType face from disk. Raises OSError on failure."""
        data = Path(path).read_bytes()

        def loader(size: int) -> ImageFont.FreeTypeFont:
            return ImageFont.truetype(io.BytesIO(data), size, layout_engine=ImageFont.Layout.BASIC)

        face = cls(name or str(path), loader)
        # Fail now rather than at layout time if the data is not a font
        face.get(DEFAULT_CHARACTER_SIZE)
        return face

    @classmethod
    def builtin(cls, name: str = "default") -> "FontFace":
        """Pillow's bundled default font, usable without any font files."""
        return cls(name, lambda size: ImageFont.load_default(size=size))

    def get(self, size: int) -> ImageFont.FreeTypeFont:
        """Get the Pillow font for a character size."""
        size = max(1, int(size))
        font = self._sizes.get(size)
        if font is None:
            font = self._loader(size)
            self._sizes[size] = font
        return font

    def line_spacing(self, size: int) -> float:
        """Distance between consecutive baselines at the given size."""
        ascent, descent = self.get(size).getmetrics()
        return float(ascent + descent)

    def __repr__(self) -> str:
        return f"FontFace({self.name!r})"


class FontManager:
    """
    Caches font faces by the path used to reference them.

    Lookup order for a path that is not yet cached:
    - the path as given
    - relative to the base directory passed by the caller (the card document's)
    - a file with the same name inside any registered search directory
    """

    def __init__(self, search_dirs: Optional[List[Path]] = None):
        """
        Initialize the font manager.

        Args:
            search_dirs: Additional directories to scan for fonts
        """
        self.search_dirs: List[Path] = [Path(d) for d in (search_dirs or [])]
        self._fonts: Dict[str, FontFace] = {}

    def add_search_dir(self, directory: Path) -> None:
        directory = Path(directory)
        if directory not in self.search_dirs:
            self.search_dirs.append(directory)
            logger.debug(f"Added font search directory: {directory}")

    def register(self, path: str, face: FontFace) -> None:
        """Make a face available under a path without touching the filesystem."""
        self._fonts[path] = face

    def is_cached(self, path: str) -> bool:
        return path in self._fonts

    def load(self, path: str, base_dir: Optional[Path] = None) -> FontFace:
        """
        Load or reuse the face referenced by a path.

        Raises:
            ResourceError: If no loadable font file can be found
        """
        face = self._fonts.get(path)
        if face is not None:
            return face

        for candidate in self._candidates(path, base_dir):
            try:
                face = FontFace.from_file(candidate, name=path)
            except OSError as e:
                logger.debug(f"Failed to load font {candidate}: {e}")
                continue
            logger.info(f"Loaded font {path!r} from {candidate}")
            self._fonts[path] = face
            return face

        raise ResourceError(f"Could not load font from \"{path}\".")

    def _candidates(self, path: str, base_dir: Optional[Path]) -> List[Path]:
        """Existing files that may hold the referenced font, in priority order."""
        candidates: List[Path] = []
        if not path:
            return candidates

        given = Path(path).expanduser()
        if given.is_file():
            candidates.append(given)
        if base_dir is not None and not given.is_absolute():
            relative = Path(base_dir) / given
            if relative.is_file() and relative not in candidates:
                candidates.append(relative)

        name = given.name
        for font_dir in self.search_dirs:
            if not font_dir.exists():
                continue
            logger.debug(f"Scanning font directory: {font_dir}")
            for font_file in font_dir.rglob(name):
                if font_file.suffix in FONT_EXTENSIONS and font_file not in candidates:
                    candidates.append(font_file)
        return candidates

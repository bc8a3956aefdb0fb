"""Constants and default values for CardGen."""

# Application metadata
APP_NAME = "CardGen"
VERSION = "0.3.0"
__version__ = VERSION
__author__ = "CardGen Contributors"
__license__ = "MIT"
__copyright__ = "Copyright 2025 CardGen Contributors"

# Rich text defaults
DEFAULT_CHARACTER_SIZE = 30
MIN_CHARACTER_SIZE = 1

# Horizontal shear applied to italic runs (about 12 degrees)
ITALIC_SHEAR = 0.208

# Divisors for synthetic decoration thickness, relative to character size
BOLD_STROKE_DIVISOR = 32
DECORATION_DIVISOR = 14

# Element defaults
DEFAULT_POSITION = (0.0, 0.0)
DEFAULT_ORIGIN = (0.0, 0.0)
DEFAULT_IMAGE_SIZE = (1.0, 1.0)

# Named colors available before any user additions (ARGB)
BUILTIN_COLORS = {
    "default": 0xFFFFFFFF,
    "black": 0xFF000000,
    "blue": 0xFF0000FF,
    "cyan": 0xFF00FFFF,
    "green": 0xFF00FF00,
    "magenta": 0xFFFF00FF,
    "red": 0xFFFF0000,
    "white": 0xFFFFFFFF,
    "yellow": 0xFFFFFF00,
}

# Font file extensions considered when searching font directories
FONT_EXTENSIONS = (".ttf", ".otf", ".ttc", ".TTF", ".OTF", ".TTC")

"""Exception types raised while parsing markup, loading resources and reading cards."""


class CardGenError(Exception):
    """Base class for all card generation failures"""
    pass


class MarkupError(CardGenError, ValueError):
    """Raised when rich text markup cannot be parsed or laid out"""
    pass


class ResourceError(CardGenError, OSError):
    """Raised when a font or image cannot be loaded"""
    pass


class DocumentError(CardGenError, ValueError):
    """Raised when a card document has the wrong shape"""
    pass

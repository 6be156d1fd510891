"""Exceptions raised by the ToC preprocessor."""


class TocError(Exception):
    """Base class for all preprocessor errors."""

    pass


class ConfigurationError(TocError):
    """Raised when the marker or max level configuration is invalid."""

    pass


class SerializationError(TocError):
    """Raised when a chapter or book cannot be reconstructed."""

    pass

"""mdBook preprocessor that replaces a marker with a table of contents."""

from mdbook_toc._version import __version__
from mdbook_toc.config import TocConfig, load_config
from mdbook_toc.errors import ConfigurationError, SerializationError, TocError
from mdbook_toc.preprocessor import TocPreprocessor
from mdbook_toc.toc import TocGenerator, TocResult, add_toc

__all__ = [
    "__version__",
    "TocConfig",
    "load_config",
    "TocError",
    "ConfigurationError",
    "SerializationError",
    "TocPreprocessor",
    "TocGenerator",
    "TocResult",
    "add_toc",
]

"""ToC preprocessor configuration.

Values come from the `[preprocessor.toc]` table of the book's book.toml,
either handed over by mdBook in the preprocessor context or read directly.
Configuration hierarchy (highest priority first):
1. Command-line flags
2. Book config ([preprocessor.toc])
3. Defaults
"""

from __future__ import annotations

import tomllib
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from mdbook_toc.errors import ConfigurationError

DEFAULT_MARKER = "<!-- toc -->\n"
DEFAULT_MAX_LEVEL = 4
BOOK_CONFIG_FILE = "book.toml"


@dataclass
class TocConfig:
    """ToC generation settings."""

    marker: str = DEFAULT_MARKER
    max_level: int = DEFAULT_MAX_LEVEL  # Deepest heading level listed

    def __post_init__(self) -> None:
        if not isinstance(self.marker, str):
            raise ConfigurationError(
                f"Marker must be a string, got {type(self.marker).__name__}: {self.marker!r}"
            )
        if not self.marker:
            raise ConfigurationError("Marker must not be empty")
        if isinstance(self.max_level, bool) or not isinstance(self.max_level, int):
            raise ConfigurationError(
                f"Max level must be an integer, got {type(self.max_level).__name__}: "
                f"{self.max_level!r}"
            )
        if self.max_level < 1:
            raise ConfigurationError(f"Max level must be at least 1, got {self.max_level}")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> TocConfig:
        """Build a config from a `[preprocessor.toc]` table.

        Accepts `max-level` (book.toml spelling) and `max_level`. Unknown keys
        such as `command` or `renderer` belong to mdBook and are ignored.

        Raises:
            ConfigurationError: If the table or one of its values is malformed.
        """
        if data is None:
            return cls()
        if not isinstance(data, Mapping):
            raise ConfigurationError(
                f"[preprocessor.toc] must be a table, got {type(data).__name__}"
            )

        max_level = data.get("max-level", data.get("max_level", DEFAULT_MAX_LEVEL))
        return cls(marker=data.get("marker", DEFAULT_MARKER), max_level=max_level)


def load_config(book_root: Path) -> TocConfig:
    """Load configuration from book.toml if it exists.

    Args:
        book_root: Directory containing book.toml.

    Returns:
        TocConfig with values from the config file or defaults.

    Raises:
        ConfigurationError: If book.toml cannot be parsed or has bad values.
    """
    config_path = book_root / BOOK_CONFIG_FILE

    if not config_path.exists():
        return TocConfig()

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(f"Invalid {config_path}: {e}") from e

    preprocessors = data.get("preprocessor", {})
    if not isinstance(preprocessors, dict):
        raise ConfigurationError(f"[preprocessor] in {config_path} must be a table")

    return TocConfig.from_mapping(preprocessors.get("toc"))

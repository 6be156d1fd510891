"""Version information for mdbook-toc.

The version is statically defined here and should match pyproject.toml.
MDBOOK_VERSION is the mdBook release whose preprocessor protocol this
package was written against; a different caller version only triggers a
warning.
"""

__version__ = "0.1.0"

MDBOOK_VERSION = "0.4.40"


def get_version() -> str:
    """Get the version string.

    Returns:
        Version string like "0.1.0"
    """
    return __version__


def get_version_info() -> dict[str, str]:
    """Get the package version and the targeted mdBook version."""
    return {
        "version": __version__,
        "mdbook_version": MDBOOK_VERSION,
    }


def get_full_version_string() -> str:
    """Get a human-readable version string.

    Returns:
        String like "mdbook-toc 0.1.0 (mdbook 0.4.40)"
    """
    info = get_version_info()
    return f"mdbook-toc {info['version']} (mdbook {info['mdbook_version']})"

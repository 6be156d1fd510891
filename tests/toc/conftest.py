"""Pytest fixtures for ToC engine tests."""

import pytest


@pytest.fixture
def simple_doc() -> str:
    """A chapter with the default marker and two nested headings."""
    return """# Chapter

<!-- toc -->

# Header 1

## Header 1.1
"""


@pytest.fixture
def doc_with_deep_nesting() -> str:
    """A chapter with headings at every level from 1 to 6."""
    return """# Chapter

<!-- toc -->

# Header 1

## Header 1.1

### Header 1.1.1

#### Header 1.1.1.1

##### Header 1.1.1.1.1

###### Header 1.1.1.1.1.1
"""


@pytest.fixture
def doc_without_marker() -> str:
    """A chapter that never mentions the marker."""
    return """# Chapter

Some introductory text.

## Section

[[_TOC_]] is only mentioned inline here.
"""


@pytest.fixture
def empty_doc() -> str:
    """An empty document."""
    return ""

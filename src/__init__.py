"""
mdprep - Build-time markdown preprocessing

Rewrites markdown documents before a static site generator renders them:
file inclusion, YAML tables and clean relative links.
"""

__version__ = "1.0.0"

from .lib import (
    MarkdownParser,
    ContentIncluder,
    TableRenderer,
    LinkNormalizer,
    DocumentProcessor,
    LOG,
    state_connectToLogger,
)

__all__ = [
    "MarkdownParser",
    "ContentIncluder",
    "TableRenderer",
    "LinkNormalizer",
    "DocumentProcessor",
    "LOG",
    "state_connectToLogger",
    "__version__",
]

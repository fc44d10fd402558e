"""
mdprep - Build-time markdown preprocessing

Expands ::include{} and ::yaml-table{} directives and rewrites links to
markdown documents into clean relative URLs before a site is rendered.
"""

__version__ = "1.0.0"

from .markdown import MarkdownParser
from .writer import MarkdownWriter
from .includer import ContentIncluder
from .table import TableRenderer
from .links import LinkNormalizer, ContentRootError, LinkRewriteError
from .processor import DocumentProcessor, DocumentResult
from .log import LOG, WARN, state_connectToLogger

__all__ = [
    "MarkdownParser",
    "MarkdownWriter",
    "ContentIncluder",
    "TableRenderer",
    "LinkNormalizer",
    "ContentRootError",
    "LinkRewriteError",
    "DocumentProcessor",
    "DocumentResult",
    "LOG",
    "WARN",
    "state_connectToLogger",
    "__version__",
]

"""
Rewrite links to markdown documents into clean directory-style URLs

Documents link to each other by file name ([text](other-file.md)) so that
the sources read correctly on a forge. The site serves every document at a
trailing-slash URL (/guides/divergence/), which the browser treats as a
directory. This module turns such links into relative URLs that resolve
correctly under that routing:

    index document:      other-file.md          -> other-file/
    non-index document:  other-file.md          -> ../other-file/
    any document:        /guides/divergence.md  -> ../(xN)guides/divergence/
                         foo/index.md           -> foo/ (relative as above)

URLs stay relative so the site works under any base path. Inline links and
reference definitions are rewritten; external URLs and anchors are not.
"""

import os
import posixpath
from pathlib import Path, PurePosixPath
from typing import Tuple

from ..models.context import DocumentContext, PipelineConfig
from ..models.tree import Node
from .log import LOG
from .tree import nodes_walk


LINK_NODE_TYPES = ("link", "definition")


class ContentRootError(Exception):
    """Raised when a document does not live under the content root"""
    pass


class LinkRewriteError(Exception):
    """Raised when a rewritten link would no longer be relative"""
    pass


def documentContext_derive(config: PipelineConfig, source_path: Path) -> DocumentContext:
    """
    Locate a document relative to the content root

    Args:
        config: Pipeline configuration holding the content root
        source_path: Path of the document being processed

    Returns:
        DocumentContext with relative path, index flag and depth

    Raises:
        ContentRootError: If source_path is not inside the content root
    """
    root = Path(os.path.abspath(config.content_root))
    source = Path(os.path.abspath(source_path))

    try:
        relative = PurePosixPath(source.relative_to(root).as_posix())
    except ValueError:
        raise ContentRootError(
            f"Document {source} is not under content root {root}"
        ) from None

    if relative == PurePosixPath("."):
        raise ContentRootError(f"Document path {source} is the content root itself")

    return DocumentContext(
        source_path=source,
        relative_path=relative,
        is_index=relative.name == config.index_name,
        depth=len(relative.parent.parts),
    )


def url_split(url: str) -> Tuple[str, str]:
    """
    Split a URL at the first '#' or '?'

    Example:
        >>> url_split("foo.md?x=1#y")
        ('foo.md', '?x=1#y')
    """
    cut = len(url)
    for delimiter in ("#", "?"):
        position = url.find(delimiter)
        if position != -1:
            cut = min(cut, position)
    return url[:cut], url[cut:]


def url_rewrite(url: str, context: DocumentContext, config: PipelineConfig) -> str:
    """
    Clean, depth-correct URL for one link

    Args:
        url: Link target as written in the document
        context: Facts about the document the link appears in
        config: Pipeline configuration (document suffix, external prefixes)

    Returns:
        The rewritten URL, or url unchanged when it is external, an anchor,
        or does not point at a document

    Raises:
        LinkRewriteError: If normalization produced an absolute path
    """
    if not url or url.startswith(config.external_prefixes) or url.startswith("#"):
        return url

    path_part, suffix = url_split(url)
    if not path_part.endswith(config.document_suffix):
        return url

    path_part = path_part[: -len(config.document_suffix)]

    if path_part.startswith("/"):
        # Non-index documents are served one level deeper (trailing slash)
        effective_depth = context.depth if context.is_index else context.depth + 1
        result = "../" * effective_depth + path_part.lstrip("/")
    elif context.is_index:
        result = path_part
    else:
        result = "../" + path_part

    result = posixpath.normpath(result)
    if result.startswith("/"):
        raise LinkRewriteError(f"Link {url!r} normalized to absolute path {result!r}")

    segments = result.split("/")
    if segments[-1] == "index":
        segments = segments[:-1] or ["."]
    result = "/".join(segments)

    if not result.endswith("/"):
        result += "/"

    return result + suffix


class LinkNormalizer:
    """
    Rewrites document links of one tree in place

    Nodes are never added or removed, so rewriting happens during the walk.

    Attributes:
        config: Pipeline configuration
        rewritten: Number of URLs changed by the last run
    """

    def __init__(self, config: PipelineConfig) -> None:
        self.config = config
        self.rewritten = 0

    def run(self, tree: Node, source_path: Path) -> Node:
        """
        Rewrite link and definition URLs for the document at source_path

        Raises:
            ContentRootError: If source_path is outside the content root
        """
        context = documentContext_derive(self.config, source_path)
        LOG(
            f"{context.relative_path}: depth={context.depth} index={context.is_index}",
            level=3,
        )

        self.rewritten = 0
        for node, _, _ in nodes_walk(tree):
            if node.type not in LINK_NODE_TYPES or not isinstance(node.url, str):
                continue
            url = url_rewrite(node.url, context, self.config)
            if url != node.url:
                LOG(f"{node.url} -> {url}", level=3)
                node.url = url
                self.rewritten += 1

        LOG(f"{context.relative_path}: rewrote {self.rewritten} link(s)", level=2)
        return tree

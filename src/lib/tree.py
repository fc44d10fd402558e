"""
Tree traversal and deferred mutation

Passes that replace nodes never splice while walking. They collect
Replacement requests during a read-only walk and hand them to
replacements_apply() afterwards.
"""

from typing import Iterator, List, Optional, Tuple

from ..models.tree import Node, Replacement


def nodes_walk(root: Node) -> Iterator[Tuple[Node, Optional[int], Optional[Node]]]:
    """
    Pre-order walk over a tree

    Yields:
        (node, index, parent) for every node; the root itself is yielded
        with index and parent set to None.

    Example:
        >>> root = Node("root", children=[Node("paragraph")])
        >>> [(n.type, i) for n, i, _ in nodes_walk(root)]
        [('root', None), ('paragraph', 0)]
    """
    yield root, None, None

    stack: List[Tuple[Node, int]] = [(root, 0)]
    while stack:
        parent, position = stack.pop()
        if position >= len(parent.children):
            continue
        child = parent.children[position]
        stack.append((parent, position + 1))
        yield child, position, parent
        if child.children:
            stack.append((child, 0))


def replacements_apply(requests: List[Replacement]) -> None:
    """
    Apply replacement requests collected during a pre-order walk

    Requests are processed in reverse collection order, i.e. from the last
    position in the document to the first. Within one parent this replaces
    higher indices first, so the indices of earlier requests stay valid.

    Args:
        requests: Replacements in the order they were collected
    """
    for request in reversed(requests):
        request.parent.children[request.index:request.index + 1] = request.nodes

"""
Document tree models

Type-safe structures for the markdown document tree and for the deferred
mutations applied to it by the directive passes.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class Node:
    """
    A node in the markdown document tree (mdast vocabulary)

    Every node has a ``type``; container nodes own ``children`` in document
    order. The remaining fields are only meaningful for some node kinds.

    Attributes:
        type: Node kind ("root", "paragraph", "leafDirective", "link", ...)
        children: Child nodes, in document order
        value: Literal content for text, code, inlineCode and html nodes
        url: Target of link, image and definition nodes
        name: Directive name for leafDirective nodes (e.g., "include")
        attributes: Directive attributes (e.g., {"file": "intro.md"})
        line: 1-based source line the node starts on, when known
        data: Kind-specific extras (heading depth, list ordering, table
              alignment, link title, definition label, ...)

    Example:
        For source '::include{file="a.md"}' on line 3:
        Node(type="leafDirective", name="include",
             attributes={"file": "a.md"}, line=3)
    """
    type: str
    children: List['Node'] = field(default_factory=list)
    value: Optional[str] = None
    url: Optional[str] = None
    name: Optional[str] = None
    attributes: Dict[str, str] = field(default_factory=dict)
    line: Optional[int] = None
    data: Dict[str, Any] = field(default_factory=dict)


@dataclass
class Replacement:
    """
    Deferred instruction to replace one child of a parent node

    Collected during a read-only traversal and applied afterwards by
    replacements_apply(), so that traversal never sees a mutated tree.

    Attributes:
        parent: Node whose children list is spliced
        index: Position of the child being replaced (at collection time)
        nodes: Nodes inserted in its place (may be empty)
    """
    parent: Node
    index: int
    nodes: List[Node]

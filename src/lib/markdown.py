"""
Markdown parser producing the document tree

Wraps markdown-it-py (CommonMark plus GFM tables and strikethrough) and maps
its syntax tree onto the mdast-style Node vocabulary the passes work on.

A block rule adds leaf directives, one per line:

    ::include{file="intro.md" start="<!-- BEGIN -->"}
    ::yaml-table[Commands]{file="commands.yml"}

Attribute forms understood inside the braces:
    key="value"   key='value'   key=value   key   #id   .class

Example:
    >>> root = MarkdownParser().parse('::include{file="a.md"}')
    >>> root.children[0].type, root.children[0].name
    ('leafDirective', 'include')
"""

import re
from typing import Any, Dict, List, Optional

from markdown_it import MarkdownIt
from markdown_it.common.utils import normalizeReference
from markdown_it.rules_block import StateBlock
from markdown_it.tree import SyntaxTreeNode

from ..models.tree import Node


DIRECTIVE_LINE = re.compile(
    r'^::([A-Za-z][\w-]*)'                          # name
    r'(?:\[([^\]\n]*)\])?'                           # [label]
    r'(?:\{((?:"[^"\n]*"|\'[^\'\n]*\'|[^}"\'\n])*)\})?'  # {attributes}
    r'[ \t]*$'
)

DIRECTIVE_ATTRIBUTE = re.compile(
    r'#([\w-]+)'
    r'|\.([\w-]+)'
    r'|([A-Za-z_:][\w:.-]*)(?:\s*=\s*(?:"([^"]*)"|\'([^\']*)\'|([^\s"\'=<>`]+)))?'
)

# Label of a reference definition on its first source line
DEFINITION_LABEL = re.compile(r'\[((?:\\.|[^\\\[\]])+)\]:')

# Reference definitions keyed by normalized label: {"href": ..., "title": ...}
References = Dict[str, Dict[str, str]]

# markdown-it node types that map one-to-one onto a container Node
CONTAINER_TYPES = {
    "paragraph": "paragraph",
    "blockquote": "blockquote",
    "list_item": "listItem",
    "em": "emphasis",
    "strong": "strong",
    "s": "delete",
    "tr": "tableRow",
    "th": "tableCell",
    "td": "tableCell",
}


def attributes_parse(source: str) -> Dict[str, str]:
    """
    Parse the inside of a directive's {...} attribute block

    Args:
        source: Attribute text without the surrounding braces

    Returns:
        Attribute mapping; repeated ``.class`` shorthands are joined with
        spaces, a bare key maps to an empty string.

    Example:
        >>> attributes_parse('file="a b.md" #intro .wide end=x')
        {'file': 'a b.md', 'id': 'intro', 'class': 'wide', 'end': 'x'}
    """
    attributes: Dict[str, str] = {}
    for match in DIRECTIVE_ATTRIBUTE.finditer(source):
        ident, klass, key, double, single, bare = match.groups()
        if ident is not None:
            attributes["id"] = ident
        elif klass is not None:
            existing = attributes.get("class")
            attributes["class"] = f"{existing} {klass}" if existing else klass
        else:
            value = next((v for v in (double, single, bare) if v is not None), "")
            attributes[key] = value
    return attributes


def leafDirective_rule(state: StateBlock, startLine: int, endLine: int, silent: bool) -> bool:
    """markdown-it block rule recognising ``::name[label]{attrs}`` lines"""
    # Indented four or more: code block
    if state.sCount[startLine] - state.blkIndent >= 4:
        return False

    start = state.bMarks[startLine] + state.tShift[startLine]
    end = state.eMarks[startLine]
    match = DIRECTIVE_LINE.match(state.src[start:end])
    if not match:
        return False
    if silent:
        return True

    name, label, attribute_source = match.groups()
    token = state.push("leaf_directive", "", 0)
    token.map = [startLine, startLine + 1]
    token.markup = "::"
    token.meta = {
        "name": name,
        "label": label,
        "attributes": attributes_parse(attribute_source or ""),
    }
    state.line = startLine + 1
    return True


def directive_plugin(md: MarkdownIt) -> None:
    """Register leaf directive syntax on a MarkdownIt instance"""
    md.block.ruler.before(
        "table", "leaf_directive", leafDirective_rule, {"alt": ["paragraph"]}
    )


class MarkdownParser:
    """
    Markdown text -> Node tree

    Stateless from the caller's point of view: every call parses with a
    fresh environment, so one instance can be shared by all passes.
    """

    def __init__(self) -> None:
        self.md = (
            MarkdownIt("commonmark")
            .enable(["table", "strikethrough"])
            .use(directive_plugin)
        )

    def parse(self, text: str, references: Optional[References] = None) -> Node:
        """
        Parse a complete document

        Reference definitions, which markdown-it resolves into links and
        keeps out of the token stream, are restored as ``definition`` nodes
        at the root in source order.

        Args:
            text: Markdown source
            references: Definitions made elsewhere (for instance in included
                        files), keyed by normalized label. Reference links
                        the text leaves undefined resolve against them; the
                        text's own definitions take precedence.

        Returns:
            Node of type "root"
        """
        env: Dict[str, Any] = {}
        tokens = self.md.parse(text, env)

        seeded = {
            identifier: reference
            for identifier, reference in (references or {}).items()
            if identifier not in env.get("references", {})
        }
        if seeded:
            env = {"references": dict(seeded)}
            tokens = self.md.parse(text, env)

        syntax_root = SyntaxTreeNode(tokens)

        children: List[Node] = []
        for child in syntax_root.children:
            children.extend(self.node_convert(child))

        definitions = self.definitions_collect(env, text, seeded)
        return Node(type="root", children=self.definitions_merge(children, definitions))

    def fragment_parse(self, text: str, references: Optional[References] = None) -> List[Node]:
        """Parse markdown into its list of block-level nodes"""
        return self.parse(text, references).children

    def definitions_collect(
        self, env: Dict[str, Any], text: str, seeded: References
    ) -> List[Node]:
        """
        Definition nodes for the references the text itself defines

        ``identifier`` is markdown-it's normalized key; ``label`` is the
        label as written in the source, so output keeps the author's casing.
        """
        lines = re.split(r'\r\n?|\n', text)
        definitions = []
        for identifier, reference in env.get("references", {}).items():
            if identifier in seeded:
                continue
            line_map = reference.get("map")
            label = identifier
            if line_map and line_map[0] < len(lines):
                match = DEFINITION_LABEL.search(lines[line_map[0]])
                if match and normalizeReference(match.group(1)) == identifier:
                    label = match.group(1)
            definitions.append(Node(
                type="definition",
                url=reference.get("href", ""),
                line=line_map[0] + 1 if line_map else None,
                data={
                    "identifier": identifier,
                    "label": label,
                    "title": reference.get("title") or None,
                },
            ))
        return definitions

    def definitions_merge(self, children: List[Node], definitions: List[Node]) -> List[Node]:
        """Place definition nodes among root children by source line"""
        pending = sorted(
            definitions,
            key=lambda node: node.line if node.line is not None else float("inf"),
        )
        merged: List[Node] = []
        for child in children:
            while (
                pending
                and pending[0].line is not None
                and child.line is not None
                and pending[0].line <= child.line
            ):
                merged.append(pending.pop(0))
            merged.append(child)
        merged.extend(pending)
        return merged

    def children_convert(self, syntax_node: SyntaxTreeNode) -> List[Node]:
        children: List[Node] = []
        for child in syntax_node.children:
            children.extend(self.node_convert(child))
        return children

    def node_convert(self, syntax_node: SyntaxTreeNode) -> List[Node]:
        """
        Convert one markdown-it syntax node

        Returns a list because ``inline`` wrappers and table sections
        (thead/tbody) dissolve into their children.
        """
        kind = syntax_node.type
        line = syntax_node.map[0] + 1 if syntax_node.map else None

        if kind in ("inline", "thead", "tbody"):
            return self.children_convert(syntax_node)

        if kind in CONTAINER_TYPES:
            node = Node(
                type=CONTAINER_TYPES[kind],
                children=self.children_convert(syntax_node),
                line=line,
            )
            if kind == "paragraph" and syntax_node.hidden:
                node.data["hidden"] = True
            if kind in ("th", "td"):
                node.data["header"] = kind == "th"
            return [node]

        if kind == "heading":
            return [Node(
                type="heading",
                children=self.children_convert(syntax_node),
                line=line,
                data={"depth": int(syntax_node.tag[1:])},
            )]

        if kind in ("bullet_list", "ordered_list"):
            items = self.children_convert(syntax_node)
            # Tight lists hide their paragraphs; a list without any is tight
            tight = all(
                child.data.get("hidden")
                for item in items
                for child in item.children
                if child.type == "paragraph"
            )
            data: Dict[str, Any] = {"ordered": kind == "ordered_list", "spread": not tight}
            if kind == "ordered_list":
                start = syntax_node.attrGet("start")
                data["start"] = int(start) if start is not None else 1
            return [Node(type="list", children=items, line=line, data=data)]

        if kind == "table":
            rows = self.children_convert(syntax_node)
            return [Node(
                type="table",
                children=rows,
                line=line,
                data={"align": self.alignment_read(syntax_node)},
            )]

        if kind in ("fence", "code_block"):
            lang = syntax_node.info.strip() if kind == "fence" else ""
            return [Node(
                type="code",
                value=syntax_node.content.rstrip("\n"),
                line=line,
                data={"lang": lang or None},
            )]

        if kind == "hr":
            return [Node(type="thematicBreak", line=line)]

        if kind in ("html_block", "html_inline"):
            return [Node(type="html", value=syntax_node.content.rstrip("\n"), line=line)]

        if kind == "text":
            return [Node(type="text", value=syntax_node.content)]

        if kind == "softbreak":
            return [Node(type="text", value="\n")]

        if kind == "hardbreak":
            return [Node(type="break")]

        if kind == "code_inline":
            return [Node(type="inlineCode", value=syntax_node.content)]

        if kind == "link":
            return [Node(
                type="link",
                url=str(syntax_node.attrGet("href") or ""),
                children=self.children_convert(syntax_node),
                data={"title": syntax_node.attrGet("title")},
            )]

        if kind == "image":
            return [Node(
                type="image",
                url=str(syntax_node.attrGet("src") or ""),
                data={"alt": syntax_node.content, "title": syntax_node.attrGet("title")},
            )]

        if kind == "leaf_directive":
            meta = syntax_node.meta
            return [Node(
                type="leafDirective",
                name=meta["name"],
                attributes=dict(meta["attributes"]),
                line=line,
                data={"label": meta.get("label")},
            )]

        # Unknown token kinds (plugins) are kept as raw text
        return [Node(type="text", value=syntax_node.content, line=line)]

    def alignment_read(self, table: SyntaxTreeNode) -> List[Optional[str]]:
        """Column alignments from the header cells' text-align style"""
        for section in table.children:
            if section.type != "thead":
                continue
            for row in section.children:
                alignments: List[Optional[str]] = []
                for cell in row.children:
                    style = str(cell.attrGet("style") or "")
                    match = re.search(r'text-align:\s*(\w+)', style)
                    alignments.append(match.group(1) if match else None)
                return alignments
        return []

"""
Serialize a document tree back to markdown text

Output is normalized markdown (ATX headings, '-' bullets, fenced code,
'*' emphasis), not a byte-for-byte copy of the input. Parsing the output
again yields an equivalent tree.
"""

import re
from typing import List

from ..models.tree import Node


# Characters that would otherwise start markdown syntax inside plain text
TEXT_ESCAPE = re.compile(r'([\\`*_\[\]<~])')

# '&' that would otherwise be read as an entity or numeric reference
ENTITY_START = re.compile(r'&(?=(?:[A-Za-z][A-Za-z0-9]*|#[0-9]{1,7}|#[xX][0-9a-fA-F]{1,6});)')

# Paragraph lines that would otherwise open another block
BLOCK_STARTS = [
    re.compile(r'^( {0,3})([#>+-])(?=\s|$)', re.MULTILINE),          # heading, quote, bullet
    re.compile(r'^( {0,3}\d{1,9})([.)])(?=\s|$)', re.MULTILINE),     # ordered item
    re.compile(r'^( {0,3})([=-])(?=[=-]*[ \t]*$)', re.MULTILINE),   # setext underline, rule
    re.compile(r'^( {0,3})(:)(?=:)', re.MULTILINE),                 # leaf directive
]


def text_escape(text: str) -> str:
    text = TEXT_ESCAPE.sub(r'\\\1', text)
    return ENTITY_START.sub(r'\\&', text)


def paragraph_escape(text: str) -> str:
    """Escape the first character of lines that would not parse as paragraph text"""
    for pattern in BLOCK_STARTS:
        text = pattern.sub(r'\1\\\2', text)
    return text


class MarkdownWriter:
    """
    Node tree -> markdown text

    Example:
        >>> root = Node("root", children=[
        ...     Node("heading", data={"depth": 2}, children=[Node("text", value="Hi")])])
        >>> MarkdownWriter().write(root)
        '## Hi\\n'
    """

    def write(self, root: Node) -> str:
        text = self.blocks_write(root.children)
        return text + "\n" if text else ""

    def blocks_write(self, nodes: List[Node], tight: bool = False) -> str:
        separator = "\n" if tight else "\n\n"
        return separator.join(self.block_write(node) for node in nodes)

    def block_write(self, node: Node) -> str:
        kind = node.type

        if kind == "paragraph":
            return paragraph_escape(self.inlines_write(node.children))

        if kind == "heading":
            return "#" * node.data.get("depth", 1) + " " + self.inlines_write(node.children)

        if kind == "blockquote":
            inner = self.blocks_write(node.children)
            return "\n".join(("> " + line).rstrip() for line in inner.split("\n"))

        if kind == "list":
            return self.list_write(node)

        if kind == "code":
            return self.code_write(node)

        if kind == "thematicBreak":
            return "---"

        if kind == "html":
            return node.value or ""

        if kind == "table":
            return self.table_write(node)

        if kind == "leafDirective":
            return self.directive_write(node)

        if kind == "definition":
            return self.definition_write(node)

        # Inline content at block level
        return self.inline_write(node)

    def definition_write(self, node: Node) -> str:
        url = node.url or ""
        if " " in url:
            url = f"<{url}>"
        line = f"[{node.data.get('label', '')}]: {url}"
        title = node.data.get("title")
        if title:
            escaped = title.replace('"', '\\"')
            return f'{line} "{escaped}"'
        return line

    def list_write(self, node: Node) -> str:
        ordered = node.data.get("ordered", False)
        number = node.data.get("start", 1)
        tight = not node.data.get("spread", False)

        items = []
        for item in node.children:
            marker = f"{number}. " if ordered else "- "
            body = self.blocks_write(item.children, tight=tight)
            indent = " " * len(marker)
            lines = body.split("\n")
            rendered = [marker + lines[0]] + [
                (indent + line) if line else "" for line in lines[1:]
            ]
            items.append("\n".join(rendered))
            number += 1

        return ("\n" if tight else "\n\n").join(items)

    def code_write(self, node: Node) -> str:
        value = node.value or ""
        fence = "```"
        while fence in value:
            fence += "`"
        lang = node.data.get("lang") or ""
        return f"{fence}{lang}\n{value}\n{fence}"

    def table_write(self, node: Node) -> str:
        if not node.children:
            return ""

        align = list(node.data.get("align") or [])
        width = len(node.children[0].children)
        align += [None] * (width - len(align))
        delimiters = {
            "left": ":---",
            "center": ":---:",
            "right": "---:",
        }

        rows = []
        for row in node.children:
            cells = [self.inlines_write(cell.children).replace("|", "\\|") for cell in row.children]
            rows.append("| " + " | ".join(cells) + " |")

        separator = "| " + " | ".join(delimiters.get(a, "---") for a in align[:width]) + " |"
        return "\n".join([rows[0], separator] + rows[1:])

    def directive_write(self, node: Node) -> str:
        label = node.data.get("label")
        text = f"::{node.name}"
        if label is not None:
            text += f"[{label}]"
        if node.attributes:
            pairs = []
            for key, value in node.attributes.items():
                quote = "'" if '"' in value else '"'
                pairs.append(f"{key}={quote}{value}{quote}")
            text += "{" + " ".join(pairs) + "}"
        return text

    def inlines_write(self, nodes: List[Node]) -> str:
        return "".join(self.inline_write(node) for node in nodes)

    def inline_write(self, node: Node) -> str:
        kind = node.type

        if kind == "text":
            return text_escape(node.value or "")

        if kind == "emphasis":
            return "*" + self.inlines_write(node.children) + "*"

        if kind == "strong":
            return "**" + self.inlines_write(node.children) + "**"

        if kind == "delete":
            return "~~" + self.inlines_write(node.children) + "~~"

        if kind == "inlineCode":
            value = node.value or ""
            ticks = "`"
            while ticks in value:
                ticks += "`"
            padding = " " if value.startswith("`") or value.endswith("`") else ""
            return f"{ticks}{padding}{value}{padding}{ticks}"

        if kind == "break":
            return "\\\n"

        if kind == "link":
            return "[" + self.inlines_write(node.children) + "](" + self.destination_write(node) + ")"

        if kind == "image":
            return "![" + text_escape(node.data.get("alt") or "") + "](" + self.destination_write(node) + ")"

        if kind == "html":
            return node.value or ""

        return self.inlines_write(node.children)

    def destination_write(self, node: Node) -> str:
        url = node.url or ""
        if " " in url or "(" in url or ")" in url:
            url = f"<{url}>"
        title = node.data.get("title")
        if title:
            escaped = title.replace('"', '\\"')
            return f'{url} "{escaped}"'
        return url

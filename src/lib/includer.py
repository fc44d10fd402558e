"""
::include{} - splice markdown from another file into the document

Usage in markdown:
    ::include{file="../path/to/file.md" start="<!-- BEGIN MARKDOWN-->"}

Attributes:
    file: Path to the included file, relative to the base path
    start: Optional marker; only content after its first occurrence is kept
    end: Optional marker; only content before its first occurrence is kept

Included content is parsed and inserted as-is. Include directives inside
it are not expanded again.

Reference links resolve across the expanded document: a link in the
including file may use a definition from an included one, and the other
way round. references_collect() gathers those definitions before the
document is parsed for good.
"""

from typing import List, Optional

from ..models.context import PipelineConfig
from ..models.directives import DirectiveSpec
from ..models.tree import Node
from .directives import DirectiveError, DirectivePass
from .markdown import MarkdownParser, References
from .tree import nodes_walk


INCLUDE_SPEC = DirectiveSpec(
    name="include",
    description="Include markdown from another file, optionally between two markers",
    required=["file"],
    optional=["start", "end"],
    examples=[
        '::include{file="intro.md"}',
        '::include{file="../README.md" start="<!-- BEGIN -->" end="<!-- END -->"}',
    ],
)


def content_slice(content: str, start: Optional[str] = None, end: Optional[str] = None) -> str:
    """
    Cut content down to the text between two markers, then trim it

    A marker that is not given, or not found, leaves that side uncut.
    The end marker is searched for after the start marker has been applied.

    Example:
        >>> content_slice("A<!--S-->B<!--E-->C", "<!--S-->", "<!--E-->")
        'B'
        >>> content_slice("  keep all  ", "<!--missing-->")
        'keep all'
    """
    if start:
        position = content.find(start)
        if position != -1:
            content = content[position + len(start):]

    if end:
        position = content.find(end)
        if position != -1:
            content = content[:position]

    return content.strip()


class ContentIncluder(DirectivePass):
    """
    Expands ::include{} directives into the included file's blocks

    Args:
        config: Pipeline configuration
        parser: Markdown parser for included content
        references: Definitions included content may refer to
    """

    spec = INCLUDE_SPEC
    resource_label = "Include"

    def __init__(
        self,
        config: PipelineConfig,
        parser: Optional[MarkdownParser] = None,
        references: Optional[References] = None,
    ) -> None:
        super().__init__(config, parser)
        self.references = references

    def expand(self, node: Node) -> List[Node]:
        path = self.file_resolve(node)
        content = content_slice(
            self.file_read(path),
            node.attributes.get("start"),
            node.attributes.get("end"),
        )
        return self.parser.fragment_parse(content, self.references)

    def references_collect(self, tree: Node) -> References:
        """
        Reference definitions of a tree and of the content it includes

        Nothing is replaced and nothing is reported: an include that cannot
        be expanded contributes no definitions, and run() records the
        diagnostic later. The first definition of a label wins.

        Returns:
            Mapping of normalized label to ``{"href", "title"}``
        """
        references: References = {}
        for node, _, _ in nodes_walk(tree):
            if node.type == "definition":
                self.reference_add(references, node)
                continue
            if node.type != "leafDirective" or node.name != self.spec.name:
                continue
            if self.spec.missing_find(node.attributes):
                continue
            try:
                fragment = self.expand(node)
            except DirectiveError:
                continue
            for child in fragment:
                for included, _, _ in nodes_walk(child):
                    if included.type == "definition":
                        self.reference_add(references, included)
        return references

    def reference_add(self, references: References, definition: Node) -> None:
        identifier = definition.data.get("identifier")
        if identifier and identifier not in references:
            references[identifier] = {
                "href": definition.url or "",
                "title": definition.data.get("title") or "",
            }

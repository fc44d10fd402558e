"""
Per-document preprocessing: parse, expand directives, rewrite links, write

Pass order:
    1. ::include{}      (ContentIncluder)
    2. ::yaml-table{}   (TableRenderer)
    3. link rewriting   (LinkNormalizer)

Directives are expanded before links are rewritten, so links inside
included content are made relative to the including document.

Reference definitions brought in by includes are gathered first and the
document is parsed against them, so ``[text][label]`` resolves whichever
file defines the label.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, List, Optional

from ..models.context import PipelineConfig
from ..models.directives import Diagnostic
from ..models.tree import Node
from .includer import ContentIncluder
from .links import LinkNormalizer
from .log import LOG
from .markdown import MarkdownParser, References
from .table import TableRenderer
from .writer import MarkdownWriter


@dataclass
class DocumentResult:
    """
    Outcome of preprocessing one document

    Attributes:
        source_path: Document that was processed
        text: Rewritten markdown
        tree: Rewritten document tree
        diagnostics: Directives left unexpanded, in pass order
    """
    source_path: Path
    text: str
    tree: Node
    diagnostics: List[Diagnostic] = field(default_factory=list)


class DocumentProcessor:
    """
    Runs the full pass sequence over single documents

    Args:
        config: Pipeline configuration shared by every document of the run
        parser: Markdown parser (defaults to the markdown-it based parser)
        decoder: Structured-data decoder for ::yaml-table{} (defaults to YAML)
    """

    def __init__(
        self,
        config: PipelineConfig,
        parser: Optional[MarkdownParser] = None,
        decoder: Optional[Callable[[str], Any]] = None,
    ) -> None:
        self.config = config
        self.parser = parser if parser is not None else MarkdownParser()
        self.decoder = decoder
        self.writer = MarkdownWriter()

    def tree_process(
        self, tree: Node, source_path: Path, references: Optional[References] = None
    ) -> List[Diagnostic]:
        """
        Run every pass over an already parsed tree

        Args:
            tree: Document root; mutated
            source_path: Location of the document (for link depth)
            references: Definitions included content may refer to

        Returns:
            Diagnostics for directives left unexpanded

        Raises:
            ContentRootError: If source_path is outside the content root
        """
        includer = ContentIncluder(self.config, self.parser, references)
        renderer = TableRenderer(self.config, self.parser, self.decoder)
        normalizer = LinkNormalizer(self.config)

        includer.run(tree)
        renderer.run(tree)
        normalizer.run(tree, source_path)

        return includer.diagnostics + renderer.diagnostics

    def text_process(self, text: str, source_path: Path) -> DocumentResult:
        """Preprocess markdown text as if it were read from source_path"""
        tree = self.parser.parse(text)
        references = ContentIncluder(self.config, self.parser).references_collect(tree)
        if references:
            tree = self.parser.parse(text, references)
        diagnostics = self.tree_process(tree, source_path, references)
        return DocumentResult(
            source_path=source_path,
            text=self.writer.write(tree),
            tree=tree,
            diagnostics=diagnostics,
        )

    def document_process(self, source_path: Path) -> DocumentResult:
        """Read and preprocess the document at source_path"""
        LOG(f"Processing {source_path}", level=2)
        text = Path(source_path).read_text(encoding=self.config.encoding)
        return self.text_process(text, Path(source_path))

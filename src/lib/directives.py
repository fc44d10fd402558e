"""
Base machinery for leaf directive expansion passes

A pass walks the tree once, read-only, asking expand() for the nodes that
should replace each matching directive. The replacements are applied after
the walk. Any failure is contained to its directive: the directive stays in
the tree verbatim and a Diagnostic is recorded and logged.
"""

import os
from pathlib import Path
from typing import List, Optional

from ..models.context import PipelineConfig
from ..models.directives import DirectiveSpec, Diagnostic
from ..models.tree import Node, Replacement
from .log import LOG, WARN
from .markdown import MarkdownParser
from .tree import nodes_walk, replacements_apply


class DirectiveError(Exception):
    """
    Raised by expand() to leave a directive unexpanded

    Attributes:
        path: Resolved file the failure relates to, if any
    """

    def __init__(self, message: str, path: Optional[Path] = None) -> None:
        super().__init__(message)
        self.path = path


class DirectivePass:
    """
    Expand every leaf directive named ``spec.name`` in a tree

    Subclasses set ``spec`` and ``resource_label`` and implement expand().

    Attributes:
        config: Pipeline configuration (base path, encoding)
        parser: Markdown parser used for generated fragments
        diagnostics: Directives left unexpanded during this pass's runs
    """

    spec: DirectiveSpec
    resource_label: str = "Directive"

    def __init__(self, config: PipelineConfig, parser: Optional[MarkdownParser] = None) -> None:
        self.config = config
        self.parser = parser if parser is not None else MarkdownParser()
        self.diagnostics: List[Diagnostic] = []

    def run(self, tree: Node) -> Node:
        """
        Expand matching directives in place

        Args:
            tree: Document root; mutated

        Returns:
            The same tree, for chaining
        """
        requests: List[Replacement] = []

        for node, index, parent in nodes_walk(tree):
            if parent is None or index is None:
                continue
            if node.type != "leafDirective" or node.name != self.spec.name:
                continue
            nodes = self.directive_expand(node)
            if nodes is not None:
                requests.append(Replacement(parent=parent, index=index, nodes=nodes))

        replacements_apply(requests)
        LOG(f"::{self.spec.name}: expanded {len(requests)} directive(s)", level=2)
        return tree

    def directive_expand(self, node: Node) -> Optional[List[Node]]:
        """Replacement nodes for one directive, or None to leave it in place"""
        missing = self.spec.missing_find(node.attributes)
        if missing:
            self.diagnostic_add(node, f'directive missing "{missing[0]}" attribute')
            return None

        try:
            return self.expand(node)
        except DirectiveError as e:
            self.diagnostic_add(node, str(e), e.path)
            return None

    def expand(self, node: Node) -> List[Node]:
        raise NotImplementedError

    def file_resolve(self, node: Node) -> Path:
        """
        Resolve a directive's ``file`` attribute against the base path

        Absolute attribute values are used as they are.

        Raises:
            DirectiveError: If the resolved file does not exist
        """
        resolved = Path(os.path.normpath(self.config.base_path / node.attributes["file"]))
        if not resolved.is_file():
            raise DirectiveError(f"{self.resource_label} file not found: {resolved}", resolved)
        return resolved

    def file_read(self, path: Path) -> str:
        try:
            return path.read_text(encoding=self.config.encoding)
        except (OSError, UnicodeDecodeError) as e:
            raise DirectiveError(f"Failed to read {self.resource_label} file: {path}: {e}", path) from e

    def diagnostic_add(self, node: Node, message: str, path: Optional[Path] = None) -> None:
        diagnostic = Diagnostic(
            directive=self.spec.name, message=message, path=path, line=node.line
        )
        self.diagnostics.append(diagnostic)
        WARN(str(diagnostic))

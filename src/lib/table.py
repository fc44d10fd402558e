"""
::yaml-table{} - render a YAML file as a markdown table

Usage in markdown:
    ::yaml-table{file="git-command-table.yml"}

The YAML file must hold a non-empty list of mappings. Each mapping becomes
a row; the keys of the first mapping become the column headers, in the
order they are written.
"""

from typing import Any, Callable, List, Optional

from ..models.context import PipelineConfig
from ..models.directives import DirectiveSpec
from ..models.tree import Node
from .decoder import DecodeError, yaml_decode
from .directives import DirectiveError, DirectivePass
from .markdown import MarkdownParser


YAML_TABLE_SPEC = DirectiveSpec(
    name="yaml-table",
    description="Render a YAML list of records as a table",
    required=["file"],
    examples=['::yaml-table{file="git-command-table.yml"}'],
)


def value_stringify(value: Any) -> str:
    """
    Text of a decoded YAML value as it should read in a table cell

    Example:
        >>> [value_stringify(v) for v in (None, True, 2.0, 1.5, ["a", "b"])]
        ['', 'true', '2', '1.5', 'a,b']
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (list, tuple)):
        return ",".join(value_stringify(item) for item in value)
    return str(value)


def cell_format(value: Any) -> str:
    """
    Table cell text: trimmed, pipes escaped, newlines flattened

    Example:
        >>> cell_format(" x|y\\nz ")
        'x\\\\|y z'
    """
    text = value_stringify(value).strip()
    text = text.replace("|", "\\|")
    return text.replace("\n", " ")


def table_build(records: List[dict]) -> str:
    """
    Markdown table text for a list of records

    Columns come from the first record only; a key missing from a later
    record yields an empty cell, extra keys are ignored.

    Example:
        >>> print(table_build([{"a": 1, "b": 2}, {"a": 3, "b": "x|y"}]))
        | a | b |
        | --- | --- |
        | 1 | 2 |
        | 3 | x\\|y |
    """
    headers = list(records[0].keys())

    header_row = "| " + " | ".join(str(header) for header in headers) + " |"
    separator_row = "| " + " | ".join("---" for _ in headers) + " |"

    rows = [header_row, separator_row]
    for record in records:
        cells = [cell_format(record.get(header)) for header in headers]
        rows.append("| " + " | ".join(cells) + " |")

    return "\n".join(rows)


class TableRenderer(DirectivePass):
    """
    Expands ::yaml-table{} directives into a parsed table

    Args:
        config: Pipeline configuration
        parser: Markdown parser for the generated table text
        decoder: Structured-data decoder; must raise DecodeError on bad input
    """

    spec = YAML_TABLE_SPEC
    resource_label = "YAML"

    def __init__(
        self,
        config: PipelineConfig,
        parser: Optional[MarkdownParser] = None,
        decoder: Optional[Callable[[str], Any]] = None,
    ) -> None:
        super().__init__(config, parser)
        self.decoder = decoder if decoder is not None else yaml_decode

    def expand(self, node: Node) -> List[Node]:
        path = self.file_resolve(node)
        content = self.file_read(path)

        try:
            data = self.decoder(content)
        except DecodeError as e:
            raise DirectiveError(f"Failed to parse YAML file: {path}: {e}", path) from e

        if not isinstance(data, list) or not data:
            raise DirectiveError(f"YAML file should contain a non-empty list: {path}", path)
        if not all(isinstance(record, dict) for record in data):
            raise DirectiveError(f"YAML list entries should be mappings: {path}", path)
        if not data[0]:
            raise DirectiveError(f"First YAML record has no keys to use as columns: {path}", path)

        return self.parser.fragment_parse(table_build(data))

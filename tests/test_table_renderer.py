"""
::yaml-table{} rendering tests

Tests cell formatting, table assembly from records and the handling of
files that do not hold a usable list of records.
"""

import tempfile
from pathlib import Path

import pytest

from mdprep.lib.decoder import DecodeError, yaml_decode
from mdprep.lib.markdown import MarkdownParser
from mdprep.lib.table import TableRenderer, cell_format, table_build, value_stringify
from mdprep.models.context import PipelineConfig


def text_of(node):
    """Concatenated text of a node and its descendants"""
    if node.type in ("text", "inlineCode"):
        return node.value or ""
    return "".join(text_of(child) for child in node.children)


def row_texts(row):
    return [text_of(cell) for cell in row.children]


@pytest.fixture
def docs():
    """Temporary content root"""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


def render(root: Path, yaml_text: str, decoder=None):
    """Run the renderer over a document holding one yaml-table directive"""
    (root / "table.yml").write_text(yaml_text)
    tree = MarkdownParser().parse('::yaml-table{file="table.yml"}')
    renderer = TableRenderer(PipelineConfig(base_path=root, content_root=root), decoder=decoder)
    renderer.run(tree)
    return tree, renderer


class TestCellFormatting:
    """Test conversion of decoded values to cell text"""

    def test_scalars(self):
        assert value_stringify(None) == ""
        assert value_stringify(True) == "true"
        assert value_stringify(False) == "false"
        assert value_stringify(7) == "7"
        assert value_stringify(2.0) == "2"
        assert value_stringify(2.5) == "2.5"
        assert value_stringify("text") == "text"

    def test_sequence(self):
        assert value_stringify(["a", 1, None]) == "a,1,"

    def test_pipe_escaped(self):
        assert cell_format("x|y") == "x\\|y"

    def test_newlines_flattened(self):
        """Multi-line values become one physical line"""
        assert cell_format("line one\nline two\n") == "line one line two"

    def test_trimmed(self):
        assert cell_format("  padded  ") == "padded"


class TestTableBuild:
    """Test table markdown assembly"""

    def test_records_to_table(self):
        text = table_build([{"a": 1, "b": 2}, {"a": 3, "b": "x|y"}])
        assert text.split("\n") == [
            "| a | b |",
            "| --- | --- |",
            "| 1 | 2 |",
            "| 3 | x\\|y |",
        ]

    def test_first_record_defines_columns(self):
        """Missing keys give empty cells, extra keys are ignored"""
        text = table_build([{"a": 1, "b": 2}, {"b": 3, "c": 4}])
        assert text.split("\n")[0] == "| a | b |"
        assert text.split("\n")[3] == "|  | 3 |"

    def test_key_order_preserved(self):
        text = table_build([{"zeta": 1, "alpha": 2}])
        assert text.split("\n")[0] == "| zeta | alpha |"


class TestTableRendering:
    """Test directive replacement"""

    def test_renders_table(self, docs):
        tree, renderer = render(docs, "- a: 1\n  b: 2\n- a: 3\n  b: 'x|y'\n")

        assert renderer.diagnostics == []
        assert len(tree.children) == 1
        table = tree.children[0]
        assert table.type == "table"
        assert [row_texts(row) for row in table.children] == [
            ["a", "b"],
            ["1", "2"],
            ["3", "x|y"],
        ]

    def test_multiline_value(self, docs):
        yaml_text = (
            "- command: jj new\n"
            "  description: |\n"
            "    Create a change\n"
            "    on top of the current one\n"
        )
        tree, _ = render(docs, yaml_text)

        assert row_texts(tree.children[0].children[1]) == [
            "jj new",
            "Create a change on top of the current one",
        ]

    def test_null_values(self, docs):
        tree, _ = render(docs, "- a: ~\n  b: value\n")
        assert row_texts(tree.children[0].children[1]) == ["", "value"]

    def test_injected_decoder(self, docs):
        """Any decoder returning records can be used"""
        tree, renderer = render(docs, "ignored", decoder=lambda text: [{"k": "v"}])

        assert renderer.diagnostics == []
        assert [row_texts(row) for row in tree.children[0].children] == [["k"], ["v"]]


class TestTableFailures:
    """Test that unusable data leaves the directive in place"""

    @pytest.mark.parametrize(
        "yaml_text",
        [
            "[]\n",
            "a: 1\nb: 2\n",
            "just a string\n",
            "",
            "- 1\n- 2\n",
            "- {}\n",
        ],
    )
    def test_unusable_data(self, docs, yaml_text):
        tree, renderer = render(docs, yaml_text)

        assert tree.children[0].type == "leafDirective"
        assert len(renderer.diagnostics) == 1
        assert renderer.diagnostics[0].directive == "yaml-table"

    def test_invalid_yaml(self, docs):
        tree, renderer = render(docs, "- a: [1, 2\n")

        assert tree.children[0].type == "leafDirective"
        assert "Failed to parse YAML" in renderer.diagnostics[0].message

    @pytest.mark.parametrize("yaml_text", ["- when: 2024-13-45\n", "- count: !!int abc\n"])
    def test_unconstructable_scalar(self, docs, yaml_text):
        """A value YAML parses but cannot construct is a decode failure"""
        tree, renderer = render(docs, yaml_text)

        assert tree.children[0].type == "leafDirective"
        assert len(renderer.diagnostics) == 1
        assert "Failed to parse YAML" in renderer.diagnostics[0].message

    def test_decoder_error(self, docs):
        def failing(text):
            raise DecodeError("not today")

        tree, renderer = render(docs, "- a: 1\n", decoder=failing)

        assert tree.children[0].type == "leafDirective"
        assert "not today" in renderer.diagnostics[0].message

    def test_missing_file(self, docs):
        tree = MarkdownParser().parse('::yaml-table{file="missing.yml"}')
        renderer = TableRenderer(PipelineConfig(base_path=docs, content_root=docs))
        renderer.run(tree)

        assert tree.children[0].type == "leafDirective"
        assert "not found" in renderer.diagnostics[0].message


class TestYamlDecode:
    """Test the default decoder"""

    def test_mapping_order(self):
        data = yaml_decode("- z: 1\n  a: 2\n")
        assert list(data[0].keys()) == ["z", "a"]

    def test_error_wrapped(self):
        with pytest.raises(DecodeError):
            yaml_decode("key: [unclosed\n")

    def test_bad_date_wrapped(self):
        with pytest.raises(DecodeError):
            yaml_decode("when: 2024-13-45\n")

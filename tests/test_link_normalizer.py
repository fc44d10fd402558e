"""
Link rewriting tests

Tests the conversion of links to markdown documents into relative,
trailing-slash URLs for index and non-index documents at various depths.
"""

from pathlib import Path

import pytest

from mdprep.lib.links import (
    ContentRootError,
    LinkNormalizer,
    documentContext_derive,
    url_rewrite,
    url_split,
)
from mdprep.lib.markdown import MarkdownParser
from mdprep.models.context import PipelineConfig


ROOT = Path("/site/docs")
CONFIG = PipelineConfig(base_path=ROOT, content_root=ROOT)


def rewrite(url: str, document: str) -> str:
    """Rewrite url as it appears in the document at ROOT/document"""
    context = documentContext_derive(CONFIG, ROOT / document)
    return url_rewrite(url, context, CONFIG)


class TestDocumentContext:
    """Test per-document facts"""

    def test_root_index(self):
        context = documentContext_derive(CONFIG, ROOT / "index.md")
        assert context.is_index is True
        assert context.depth == 0
        assert str(context.relative_path) == "index.md"

    def test_nested_page(self):
        context = documentContext_derive(CONFIG, ROOT / "guides" / "divergence.md")
        assert context.is_index is False
        assert context.depth == 1

    def test_deeply_nested_index(self):
        context = documentContext_derive(CONFIG, ROOT / "a" / "b" / "index.md")
        assert context.is_index is True
        assert context.depth == 2

    def test_outside_content_root(self):
        """A document outside the root fails loudly"""
        with pytest.raises(ContentRootError):
            documentContext_derive(CONFIG, Path("/elsewhere/page.md"))

    def test_sibling_prefix_is_outside(self):
        """/site/docs-old is not under /site/docs"""
        with pytest.raises(ContentRootError):
            documentContext_derive(CONFIG, Path("/site/docs-old/page.md"))

    def test_custom_index_name(self):
        config = PipelineConfig(base_path=ROOT, content_root=ROOT, index_name="README.md")
        assert documentContext_derive(config, ROOT / "README.md").is_index is True
        assert documentContext_derive(config, ROOT / "index.md").is_index is False


class TestUrlSplit:
    """Test path/suffix separation"""

    @pytest.mark.parametrize(
        "url, expected",
        [
            ("foo.md", ("foo.md", "")),
            ("foo.md#y", ("foo.md", "#y")),
            ("foo.md?x=1#y", ("foo.md", "?x=1#y")),
            ("foo.md#y?x=1", ("foo.md", "#y?x=1")),
        ],
    )
    def test_split(self, url, expected):
        assert url_split(url) == expected


class TestRelativeLinks:
    """Test links written relative to the current document"""

    def test_index_document(self):
        assert rewrite("foo.md", "index.md") == "foo/"

    def test_non_index_document(self):
        assert rewrite("foo.md", "tutorial.md") == "../foo/"

    def test_nested_non_index(self):
        assert rewrite("other.md", "guides/divergence.md") == "../other/"

    def test_nested_index(self):
        assert rewrite("other.md", "guides/index.md") == "other/"

    def test_parent_directory(self):
        assert rewrite("../config.md", "guides/divergence.md") == "../../config/"

    def test_dot_slash_collapsed(self):
        assert rewrite("./foo.md", "index.md") == "foo/"

    def test_suffix_preserved(self):
        assert rewrite("foo.md?x=1#y", "index.md") == "foo/?x=1#y"
        assert rewrite("foo.md#section", "tutorial.md") == "../foo/#section"

    def test_index_target(self):
        assert rewrite("foo/index.md", "index.md") == "foo/"
        assert rewrite("foo/index.md", "tutorial.md") == "../foo/"

    def test_index_target_in_parent(self):
        assert rewrite("../index.md", "guides/index.md") == "../"

    def test_self_index(self):
        """An index document linking to itself stays in its directory"""
        assert rewrite("index.md", "index.md") == "./"


class TestRootRelativeLinks:
    """Test links written from the content root (/...)"""

    def test_from_nested_non_index(self):
        """Depth 1 non-index document uses two parent segments"""
        assert rewrite("/guides/divergence.md", "guides/other.md") == "../../guides/divergence/"

    def test_from_nested_index(self):
        assert rewrite("/config.md", "guides/index.md") == "../config/"

    def test_from_root_index(self):
        assert rewrite("/config.md", "index.md") == "config/"

    def test_from_root_non_index(self):
        assert rewrite("/config.md", "faq.md") == "../config/"

    def test_root_index_target(self):
        assert rewrite("/index.md", "guides/other.md") == "../../"


class TestUntouchedLinks:
    """Test links that are never rewritten"""

    @pytest.mark.parametrize(
        "url",
        [
            "#section",
            "https://x.com/a.md",
            "http://x.com/a.md",
            "image.png",
            "notes.md.txt",
            "folder.md/file",
            "page#anchor.md",
            "",
        ],
    )
    def test_unchanged(self, url):
        assert rewrite(url, "tutorial.md") == url

    @pytest.mark.parametrize(
        "url, document",
        [
            ("foo.md", "index.md"),
            ("foo.md", "tutorial.md"),
            ("/guides/divergence.md", "guides/other.md"),
            ("foo/index.md?x=1#y", "guides/other.md"),
        ],
    )
    def test_idempotent(self, url, document):
        """Rewriting a rewritten URL changes nothing"""
        once = rewrite(url, document)
        assert rewrite(once, document) == once


class TestLinkNormalizerPass:
    """Test rewriting over a parsed document"""

    def test_links_and_definitions(self):
        source = (
            "See [the tutorial](tutorial.md), [the site](https://example.com/) "
            "and [below](#below).\n"
            "\n"
            "[ref]: /guides/divergence.md\n"
        )
        tree = MarkdownParser().parse(source)

        normalizer = LinkNormalizer(CONFIG)
        normalizer.run(tree, ROOT / "guides" / "other.md")

        links = [child for child in tree.children[0].children if child.type == "link"]
        assert [link.url for link in links] == ["../tutorial/", "https://example.com/", "#below"]

        definition = [child for child in tree.children if child.type == "definition"][0]
        assert definition.url == "../../guides/divergence/"
        assert normalizer.rewritten == 2

    def test_images_untouched(self):
        tree = MarkdownParser().parse("![diagram](diagram.md)")
        LinkNormalizer(CONFIG).run(tree, ROOT / "tutorial.md")
        assert tree.children[0].children[0].url == "diagram.md"

    def test_outside_root_raises(self):
        tree = MarkdownParser().parse("[a](a.md)")
        with pytest.raises(ContentRootError):
            LinkNormalizer(CONFIG).run(tree, Path("/tmp/a.md"))

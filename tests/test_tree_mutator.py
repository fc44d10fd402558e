"""
Tree mutator tests

Tests the pre-order walk and the deferred replacement protocol used by the
directive passes.
"""

import pytest

from mdprep.models.tree import Node, Replacement
from mdprep.lib.tree import nodes_walk, replacements_apply


def leaf(label):
    return Node(type="text", value=label)


class TestNodesWalk:
    """Test pre-order traversal"""

    def test_root_only(self):
        """A childless root yields only itself"""
        root = Node(type="root")
        assert list(nodes_walk(root)) == [(root, None, None)]

    def test_preorder_with_indices(self):
        """Children are visited depth-first, each with its index and parent"""
        inner = Node(type="paragraph", children=[leaf("b"), leaf("c")])
        root = Node(type="root", children=[leaf("a"), inner, leaf("d")])

        visited = [(node.value or node.type, index) for node, index, _ in nodes_walk(root)]

        assert visited == [
            ("root", None),
            ("a", 0),
            ("paragraph", 1),
            ("b", 0),
            ("c", 1),
            ("d", 2),
        ]

    def test_parent_reported(self):
        """Parent of a nested node is its container"""
        inner = Node(type="paragraph", children=[leaf("b")])
        root = Node(type="root", children=[inner])

        parents = {node.value: parent for node, _, parent in nodes_walk(root) if node.value}
        assert parents["b"] is inner


class TestReplacementsApply:
    """Test applying collected replacements"""

    def test_single_replacement(self):
        """One child replaced by several nodes"""
        root = Node(type="root", children=[leaf("a"), leaf("x"), leaf("c")])
        replacements_apply([Replacement(parent=root, index=1, nodes=[leaf("b1"), leaf("b2")])])

        assert [child.value for child in root.children] == ["a", "b1", "b2", "c"]

    def test_replacement_with_nothing(self):
        """Empty replacement removes the child"""
        root = Node(type="root", children=[leaf("a"), leaf("x"), leaf("c")])
        replacements_apply([Replacement(parent=root, index=1, nodes=[])])

        assert [child.value for child in root.children] == ["a", "c"]

    def test_siblings_in_collection_order(self):
        """Two requests under one parent keep each other's indices valid"""
        root = Node(type="root", children=[leaf("x"), leaf("mid"), leaf("y")])
        requests = [
            Replacement(parent=root, index=0, nodes=[leaf("x1"), leaf("x2"), leaf("x3")]),
            Replacement(parent=root, index=2, nodes=[leaf("y1"), leaf("y2")]),
        ]
        replacements_apply(requests)

        assert [child.value for child in root.children] == ["x1", "x2", "x3", "mid", "y1", "y2"]

    def test_nested_parents(self):
        """Requests collected during a walk apply across different parents"""
        inner = Node(type="blockquote", children=[leaf("q")])
        root = Node(type="root", children=[leaf("a"), inner, leaf("b")])

        requests = []
        for node, index, parent in nodes_walk(root):
            if node.value in ("a", "q", "b"):
                requests.append(Replacement(parent=parent, index=index, nodes=[leaf(node.value * 2)]))
        replacements_apply(requests)

        assert [child.value for child in root.children if child.value] == ["aa", "bb"]
        assert inner.children[0].value == "qq"

    @pytest.mark.parametrize("count", [0, 1])
    def test_no_requests(self, count):
        """Nothing to apply leaves the tree alone"""
        root = Node(type="root", children=[leaf("a")] * count)
        replacements_apply([])
        assert len(root.children) == count

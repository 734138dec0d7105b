"""
Test suite for import path helpers and import consolidation.

Author: xwest
"""

import unittest
import sys
import os

# Add the project root to the Python path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, project_root)

from dp.lexer import Position, tokenize
from dp.parser import parse, NodeKind
from dp.formatter import (
    unquote_import_path, import_path_namespaces, import_path_group,
    split_commented_nodes, merge_imports,
)


def parse_source(source):
    return parse(tokenize(Position.location("test.dp"), source))


class TestImportPaths(unittest.TestCase):
    """Test cases for import path helpers."""

    def test_unquote(self):
        self.assertEqual(unquote_import_path('"a/b"'), ("a/b", True))

    def test_unquote_stops_at_backslash(self):
        self.assertEqual(unquote_import_path('"ab\\c"'), ("ab", False))

    def test_unquote_requires_quotes(self):
        with self.assertRaises(ValueError):
            unquote_import_path("a/b")

    def test_namespaces(self):
        self.assertEqual(import_path_namespaces("example.org/Foo-Bar/baz"), [
            "::example_org::foo_bar::baz",
            "example_org::foo_bar::baz",
            "foo_bar::baz",
            "baz",
        ])

    def test_namespaces_of_malformed_paths(self):
        self.assertEqual(import_path_namespaces("/abs"), [])
        self.assertEqual(import_path_namespaces("dir/"), [])
        self.assertEqual(import_path_namespaces("a//b"), [])

    def test_groups(self):
        self.assertEqual(import_path_group('"fmt"'), 1)
        self.assertEqual(import_path_group('"a/b.c"'), 1)
        self.assertEqual(import_path_group('"example.org/x"'), 2)
        self.assertEqual(import_path_group('"internal/x"'), 3)
        self.assertEqual(import_path_group('"internal"'), 3)
        self.assertEqual(import_path_group(""), 1)


class TestCommentGrouping(unittest.TestCase):
    """Test cases for attaching comments to file-level nodes."""

    def test_head_comments(self):
        groups = split_commented_nodes(parse_source("// a\n// b\nx = 1\n"), True)
        self.assertEqual(len(groups), 1)
        self.assertEqual([c.source for c in groups[0].head], ["// a", "// b"])
        self.assertEqual(groups[0].node.kind, NodeKind.CONSTANT_DEF)

    def test_gap_detaches_comments(self):
        groups = split_commented_nodes(parse_source("// a\n\nx = 1\n"), True)
        self.assertEqual(len(groups), 2)
        self.assertIsNone(groups[0].node)
        self.assertEqual(groups[1].head, [])

    def test_constant_tail(self):
        groups = split_commented_nodes(parse_source("x = 1 // t\ny = 2\n"), True)
        self.assertEqual(len(groups), 2)
        self.assertEqual([c.source for c in groups[0].tail], ["// t"])
        self.assertEqual(groups[1].head, [])

    def test_trailing_comments_without_node(self):
        groups = split_commented_nodes(parse_source("x = 1\n\n// end\n"), True)
        self.assertEqual(len(groups), 2)
        self.assertIsNone(groups[1].node)


class TestMergeImports(unittest.TestCase):
    """Test cases for collecting a file's imports."""

    def _merge(self, source):
        return merge_imports(split_commented_nodes(parse_source(source), True))

    def test_no_imports(self):
        index, block = self._merge("x = 1\n")
        self.assertEqual(index, -1)
        self.assertTrue(block.is_empty())

    def test_block_goes_before_first_definition(self):
        index, block = self._merge('x = 1\n\nf() {\n\timport "a"\n}\n')
        self.assertEqual(index, 0)
        self.assertEqual([e.path for e in block.entries], ['"a"'])

    def test_block_not_after_first_definition(self):
        index, _ = self._merge('x = 1\n\nimport "a"\n')
        self.assertEqual(index, 0)

    def test_block_at_first_import_list(self):
        index, _ = self._merge('// c\n\nimport "a"\n\nx = 1\n')
        self.assertEqual(index, 1)

    def test_type_body_imports(self):
        _, block = self._merge('T {\n\timport "a" (B)\n\tx int\n}\n')
        self.assertEqual(len(block.entries), 1)
        self.assertEqual([n.name for n in block.entries[0].names], ["B"])

    def test_ambiguous_namespace_is_not_resolved(self):
        _, block = self._merge('import {\n\t"a/x"\n\t"b/x"\n\t(x::Y)\n}\n')
        self.assertEqual([e.path for e in block.entries], ["", '"a/x"', '"b/x"'])
        self.assertEqual([n.name for n in block.entries[0].names], ["x::Y"])

    def test_resolved_names_merge_into_path(self):
        _, block = self._merge('import {\n\t"a/x" (B)\n\t(x::A)\n}\n')
        self.assertEqual(len(block.entries), 1)
        self.assertEqual([n.name for n in block.entries[0].names], ["A", "B"])

    def test_tail_comment_keeps_entries_apart(self):
        _, block = self._merge('import {\n\t"a" (X) // one\n\t"a" (Y)\n}\n')
        self.assertEqual(len(block.entries), 2)
        tails = sorted(e.tail.source if e.tail else "" for e in block.entries)
        self.assertEqual(tails, ["", "// one"])

    def test_leftover_comments_go_last(self):
        _, block = self._merge('import {\n\t"a"\n\n\t// stray\n}\n')
        self.assertIsNone(block.entries[-1].path)
        self.assertEqual([c.source for c in block.entries[-1].head], ["// stray"])

    def test_input_tree_is_not_modified(self):
        nodes = parse_source('import {\n\t"a" (X)\n\t"a" (Y)\n}\n')
        before = [n.dump() for n in nodes]
        merge_imports(split_commented_nodes(nodes, True))
        self.assertEqual([n.dump() for n in nodes], before)


if __name__ == '__main__':
    unittest.main()

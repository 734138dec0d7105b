"""
Test suite for the dp formatter.

Tests cover:
- Top-level spacing and constant runs
- Function signatures, bodies and return trimming
- Column alignment and trailing comment alignment
- Expression spacing and parenthesization
- Import consolidation
- The output writer

Author: xwest
"""

import unittest
import sys
import os

# Add the project root to the Python path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, project_root)

from dp import format_source
from dp.formatter import Formatter, Writer, format_file


def fmt(source):
    return format_source(source, "test.dp").decode("utf-8")


class FormatterTestCase(unittest.TestCase):

    def assertFormats(self, source, expected):
        output = fmt(source)
        self.assertEqual(output, expected)
        # Formatted output is a fixpoint.
        self.assertEqual(fmt(output), output)

    def assertStable(self, source):
        self.assertFormats(source, source)


class TestFileLayout(FormatterTestCase):
    """Test cases for top-level layout."""

    def test_empty(self):
        self.assertEqual(format_source(""), b"")
        self.assertEqual(format_file([]), b"")
        self.assertEqual(Formatter().format([]), b"")

    def test_only_blank_lines(self):
        self.assertEqual(format_source("\n\n\n"), b"")

    def test_constant_runs(self):
        self.assertFormats("x=1\ny=2\n\npub z=3\n", "x = 1\ny = 2\n\npub z = 3\n")

    def test_constant_visibility_change_gets_a_gap(self):
        self.assertFormats("x = 1\npub y = 2\n", "x = 1\n\npub y = 2\n")

    def test_constant_trailing_comment(self):
        self.assertStable("x = 1 // one\n")

    def test_head_comment(self):
        self.assertFormats("// about f\nf() {}\n", "// about f\nf() () {}\n")

    def test_functions_are_separated(self):
        self.assertFormats("f() {}\ng() {}\n", "f() () {}\n\ng() () {}\n")

    def test_output_is_bytes(self):
        self.assertIsInstance(format_source("x = 1"), bytes)


class TestFunctions(FormatterTestCase):
    """Test cases for function definitions."""

    def test_trailing_return_is_trimmed(self):
        self.assertFormats("f() {\n\tx()\n\treturn\n}\n", "f() () {\n\tx()\n}\n")

    def test_body_of_only_return(self):
        self.assertFormats("f() {\n\treturn\n}\n", "f() () {}\n")

    def test_return_kept_with_results(self):
        self.assertStable("f() int {\n\treturn\n}\n")

    def test_parameters_share_types(self):
        self.assertFormats("f(a int, b int, c string) {}\n", "f(a, b int, c string) () {}\n")

    def test_result_list(self):
        self.assertFormats("f()(int,bool){}\n", "f() (int, bool) {}\n")

    def test_method(self):
        self.assertFormats("(r *T) m() {}\n", "(r *T) m() () {}\n")

    def test_multi_line_parameters(self):
        self.assertFormats(
            "f(\n\ta int, // first\n\tbb string,\n) {}\n",
            "f(\n\ta  int, // first\n\tbb string,\n) () {}\n",
        )


class TestTypes(FormatterTestCase):
    """Test cases for type definitions."""

    def test_empty_type(self):
        self.assertStable("T {}\n")

    def test_field_columns(self):
        self.assertFormats(
            "T {\n\ta int\n\tlonger *T visible\n}\n",
            "T {\n\ta      int\n\tlonger *T visible\n}\n",
        )

    def test_type_level_access_is_pushed_to_fields(self):
        self.assertFormats(
            "pub T mutable {\n\tx int\n}\n",
            "pub T {\n\tx int mutable\n}\n",
        )


class TestBlocks(FormatterTestCase):
    """Test cases for statement blocks."""

    def test_declaration_columns(self):
        self.assertFormats(
            "f() {\n\tx: int\n\tlonger: string\n}\n",
            "f() () {\n\tx      : int\n\tlonger : string\n}\n",
        )

    def test_trailing_comments_align(self):
        self.assertFormats(
            "f() {\n\tx := 1 // a\n\tlonger := 22 // b\n}\n",
            "f() () {\n\tx      := 1  // a\n\tlonger := 22 // b\n}\n",
        )

    def test_blank_lines_collapse(self):
        self.assertFormats("f() {\n\ta()\n\n\n\tb()\n}\n", "f() () {\n\ta()\n\n\tb()\n}\n")

    def test_one_statement_per_line(self):
        self.assertFormats("f() {\n\tg(); h()\n}\n", "f() () {\n\tg()\n\th()\n}\n")

    def test_if_else(self):
        self.assertStable("f() () {\n\tif x {\n\t\ty()\n\t} else {\n\t\tz()\n\t}\n}\n")

    def test_nested_block(self):
        self.assertStable("f() () {\n\t{\n\t\tbreak\n\t}\n}\n")

    def test_for(self):
        self.assertStable("f() () {\n\tfor i < n {\n\t\tcontinue\n\t}\n}\n")

    def test_multi_line_call(self):
        self.assertStable("f() () {\n\tg(\n\t\t1,\n\t\t2,\n\t)\n}\n")

    def test_assign_index_is_tight(self):
        self.assertFormats("f() {\n\ta[i + 1] = 2\n}\n", "f() () {\n\ta[i+1] = 2\n}\n")

    def test_empty_blocks_stay_on_one_line(self):
        self.assertFormats(
            "f() {\n\t{\n\t}\n\tfor {\n\t}\n\tif x {\n\t}\n}\n",
            "f() () {\n\t{}\n\tfor {}\n\tif x {}\n}\n",
        )

    def test_statements_on_one_source_line_align_by_output(self):
        self.assertFormats(
            "f() {\n\txx := 1; g(); y := 2\n}\n",
            "f() () {\n\txx := 1\n\tg()\n\ty := 2\n}\n",
        )
        self.assertFormats(
            "f() {\n\ta := 1; bbb := 2\n}\n",
            "f() () {\n\ta   := 1\n\tbbb := 2\n}\n",
        )

    def test_leading_brace_in_tests_and_statements(self):
        self.assertStable("f() () {\n\tfor ({} == a) {\n\t\tbreak\n\t}\n}\n")
        self.assertStable("f() () {\n\tif ({} == a) {\n\t\tbreak\n\t}\n}\n")
        self.assertStable("f() () {\n\tif ({}) {\n\t\tbreak\n\t}\n}\n")
        self.assertStable("f() () {\n\t({} == a)\n}\n")
        self.assertStable("f() () {\n\tif a == {} {\n\t\tbreak\n\t}\n}\n")

    def test_deeply_nested_blocks(self):
        depth = 25
        source = "f() () {\n"
        source += "".join("\t" * i + "if a {\n" for i in range(1, depth + 1))
        source += "\t" * (depth + 1) + "g()\n"
        source += "".join("\t" * i + "}\n" for i in range(depth, 0, -1))
        source += "}\n"
        self.assertStable(source)

    def test_deeply_nested_calls(self):
        depth = 25
        lines = ["f() () {", "\tg0("]
        lines.extend("\t" * (i + 1) + "g%d(" % i for i in range(1, depth))
        lines.append("\t" * (depth + 1) + "1,")
        lines.extend("\t" * (i + 1) + ")," for i in range(depth - 1, 0, -1))
        lines.extend(["\t)", "}", ""])
        self.assertStable("\n".join(lines))

    def test_nested_imports_are_hoisted(self):
        self.assertFormats("f() {\n\timport \"a\"\n}\n", "import {\n\t\"a\"\n}\n\nf() () {}\n")

    def test_else_with_only_imports_is_dropped(self):
        self.assertFormats(
            "f() {\n\tif x {\n\t\ty()\n\t} else {\n\t\timport \"a\"\n\t}\n}\n",
            "import {\n\t\"a\"\n}\n\nf() () {\n\tif x {\n\t\ty()\n\t}\n}\n",
        )


class TestExpressions(FormatterTestCase):
    """Test cases for expression spacing and parentheses."""

    def _return(self, expr):
        return fmt("f() int {\n\treturn " + expr + "\n}\n").split("\n")[1].strip()

    def test_highest_tier_is_tight(self):
        self.assertEqual(self._return("a+b*c"), "return a + b*c")
        self.assertEqual(self._return("a*b + c"), "return a*b + c")
        self.assertEqual(self._return("a<<2 | b"), "return a<<2 | b")

    def test_redundant_parentheses_are_dropped(self):
        self.assertEqual(self._return("a + (b*c)"), "return a + b*c")

    def test_lower_tier_operand_keeps_parentheses(self):
        self.assertEqual(self._return("a * (b + c)"), "return a * (b + c)")
        self.assertEqual(self._return("(a + b) * c"), "return (a + b) * c")

    def test_right_operand_of_same_tier_keeps_parentheses(self):
        self.assertEqual(self._return("a - (b - c)"), "return a - (b - c)")
        self.assertEqual(self._return("(a - b) - c"), "return a - b - c")

    def test_binary_spacing(self):
        self.assertEqual(self._return("a+b"), "return a + b")
        self.assertEqual(self._return("x&&y"), "return x && y")

    def test_prefix_operators(self):
        self.assertEqual(self._return("-a + ^b"), "return -a + ^b")
        self.assertEqual(self._return("a &^ ^b"), "return a &^ ^b")
        self.assertEqual(self._return("clone *p"), "return clone *p")

    def test_address_after_tight_and(self):
        self.assertEqual(self._return("x + a&(&b)"), "return x + a& &b")

    def test_leading_paren_is_guarded(self):
        self.assertStable("f() () {\n\tx := ((a + b) * c)\n}\n")
        self.assertStable("f() () {\n\tx = ((a + b) * c)\n}\n")

    def test_leading_brace_is_guarded(self):
        self.assertStable("f() () {\n\tx = ({})\n}\n")
        self.assertStable("f() int {\n\treturn ({})\n}\n")

    def test_literals(self):
        self.assertEqual(self._return("nil, true, 'c', \"s\", 12"), "return nil, true, 'c', \"s\", 12")

    def test_stable_expressions(self):
        for expr in ("a - (b - c)", "(a + b) * c", "a*b + c", "x + a& &b", "a &^ ^b"):
            source = "f() int {\n\treturn " + expr + "\n}\n"
            self.assertStable(source)


class TestImportBlock(FormatterTestCase):
    """Test cases for the consolidated import block."""

    def test_merge_and_sort(self):
        self.assertFormats(
            'import {\n\t"b/y" (Z, A)\n\t"a/x"\n}\n\nf() {\n\timport "a/x" (Q)\n}\n',
            'import {\n\t"a/x" (Q)\n\t"b/y" (A, Z)\n}\n\nf() () {}\n',
        )

    def test_path_groups(self):
        self.assertFormats(
            'import "internal/x", "example.org/y", "fmt"\n',
            'import {\n\t"fmt"\n\n\t"example.org/y"\n\n\t"internal/x"\n}\n',
        )

    def test_duplicates_merge(self):
        self.assertFormats('import "a", "a"\n', 'import {\n\t"a"\n}\n')

    def test_namespace_resolution(self):
        self.assertFormats(
            'import {\n\t"example.org/foo-bar"\n\t(foo_bar::X)\n}\n',
            'import {\n\t"example.org/foo-bar" (X)\n}\n',
        )

    def test_unresolved_names_stay_pathless(self):
        self.assertStable('import {\n\t(nope::X)\n}\n')

    def test_head_comment_printed_once(self):
        self.assertFormats(
            '// c\nimport "a"\n\nx = 1\n',
            '// c\nimport {\n\t"a"\n}\n\nx = 1\n',
        )

    def test_import_tail_comment(self):
        self.assertStable('import {\n\t"a" // why\n}\n')

    def test_commented_names(self):
        self.assertFormats(
            'import {\n\t"os" (\n\t\t// Files\n\t\tOpen, // opening\n\t\tClose,\n\t)\n}\n',
            'import {\n\t"os" (\n\t\tClose,\n\t\t// Files\n\t\tOpen, // opening\n\t)\n}\n',
        )


class TestWriter(unittest.TestCase):
    """Test cases for the output buffer."""

    def test_current_line(self):
        w = Writer()
        w.write("ab\ncd")
        w.write("e")
        self.assertEqual(w.current_line(), "cde")
        self.assertEqual(w.current_line_len(), 3)

    def test_fork_starts_on_the_same_line(self):
        w = Writer()
        w.write("x\n\tabc")
        fork = w.fork()
        fork.write("d")
        self.assertEqual(fork.current_line(), "\tabcd")
        self.assertEqual(fork.getvalue(), "d")
        self.assertEqual(w.getvalue(), "x\n\tabc")

    def test_line_numbers_carry_into_forks(self):
        w = Writer()
        self.assertEqual(w.line_number(), 0)
        w.write("a\nb\n")
        w.write("c")
        self.assertEqual(w.line_number(), 2)
        fork = w.fork()
        fork.write("\n")
        self.assertEqual(fork.line_number(), 3)
        self.assertEqual(w.line_number(), 2)

    def test_last_char(self):
        w = Writer()
        self.assertEqual(w.last_char(), "")
        w.write("a&")
        w.write("")
        self.assertEqual(w.last_char(), "&")
        self.assertEqual(Writer("x&").last_char(), "&")

    def test_pad_and_indent(self):
        w = Writer()
        w.indent(2)
        w.pad(3)
        w.pad(-1)
        w.indent(0)
        self.assertEqual(w.getvalue(), "\t\t   ")


if __name__ == '__main__':
    unittest.main()

"""
dp Canonical Formatter

Renders file-level nodes as canonical source text. Formatting an
already formatted file gives the same bytes back.

Layout rules:
- One blank line between top-level groups, except between adjacent
  constant definitions of the same visibility
- Inside blocks and lists a source gap of two or more lines becomes one
  blank line; smaller gaps become a single newline
- Variable declarations, parameters and fields on consecutive lines are
  aligned into columns; trailing comments on consecutive lines share a
  start column
- All imports end up in one sorted import block

Aligned constructs are rendered twice: first into a throwaway writer to
settle the shared widths, then for real. Nested blocks and value lists
are rendered once, and both passes of the enclosing construct reuse
their text.

Author: xwest
"""

import logging
from typing import Callable, Dict, List, Optional, Sequence

from ..parser.ast_nodes import (
    Node, NodeKind, FieldAccess, UnaryOp, is_comment,
    MAX_BINARY_PRECEDENCE, ULTIMATE_PRECEDENCE,
)
from ..parser.visit import (
    visit_assign_list_child, visit_block_child, visit_expr, visit_expr_list_child,
    visit_field_list_child, visit_file_child, visit_param_list_child, visit_type_list_child,
)
from .writer import Writer
from .imports import ImportBlock, ImportEntry, merge_imports, split_commented_nodes
from .namespace import import_path_group

logger = logging.getLogger(__name__)

# A shared, growable width
Cell = List[int]
Columns = Callable[[Node], List[str]]


def use_multiple_lines(start_line: int, nodes: Sequence[Node]) -> bool:
    return any(node.end_pos.line > start_line or is_comment(node) for node in nodes)


def without_imports(nodes: Sequence[Node]) -> List[Node]:
    """Imports are hoisted into the import block and not rendered in place."""
    return [node for node in nodes if node.kind is not NodeKind.IMPORT]


def trim_function_body(node) -> List[Node]:
    """Drop trailing value-less returns of a function without results."""
    body = without_imports(node.body)
    if node.results:
        return body

    i = len(body) - 1
    while i >= 0:
        stmt = body[i]
        if stmt.kind is NodeKind.RETURN:
            if stmt.values:
                break
            del body[i]
        elif stmt.kind is not NodeKind.COMMENT:
            break
        i -= 1

    return body


def renders_on_one_line(node: Node) -> bool:
    if node.kind is NodeKind.VARIABLE_DEF:
        return not use_multiple_lines(node.pos.line, node.values)
    return True


def get_column_widths(nodes: Sequence[Node], columns: Columns) -> List[Optional[List[Cell]]]:
    """
    Compute the column widths of each aligned row.

    A row shares its cells (all but the last column) with the row written
    on the output line right above it. Statements sharing a source line
    end up on separate output lines and a trailing comment stays with
    the row before it. A source gap of two or more lines ends the run.
    """
    rows: List[Optional[List[Cell]]] = []
    above: List[Cell] = []
    prev = None

    for node in nodes:
        if prev is not None:
            step = node.pos.line - prev.end_pos.line
            if step == 0 and is_comment(node):
                rows.append(None)
                prev = node
                continue
            if step > 1:
                above = []
        prev = node

        values = columns(node)
        if not values:
            rows.append(None)
            above = []
            continue

        row: List[Cell] = []

        for i, value in enumerate(values):
            width = len(value) + 1  # Including space
            if i < len(above) - 1:
                cell = above[i]
                if cell[0] < width:
                    cell[0] = width
            else:
                cell = [width]
            row.append(cell)

        rows.append(row)
        above = row if renders_on_one_line(node) else []

    return rows


def format_columns(w: Writer, values: Sequence[str], widths: Sequence[Cell]):
    for i, value in enumerate(values):
        if i > 0:
            w.pad(widths[i - 1][0] - len(values[i - 1]))
        w.write(value)


def indent_node(w: Writer, level: int, prev_line: int, node: Node):
    step = node.pos.line - prev_line

    if step == 0 and is_comment(node):
        w.write(" ")
    elif step <= 1:
        w.write("\n")
        w.indent(level)
    else:
        w.write("\n\n")
        w.indent(level)


def format_comment_alone(w: Writer, node):
    w.write(node.source.strip())


def format_comment(w: Writer, level: int, node, offsets: Dict[int, Cell]):
    """
    Write a trailing comment aligned with its neighbours; grows offsets.

    Offsets are keyed by output line: comments on adjacent output lines
    share a start column.
    """
    line = w.line_number()
    line_len = w.current_line_len()

    offset = offsets.get(line)
    if offset is not None:
        w.pad(offset[0] - line_len)
    else:
        offset = offsets.get(line - 1)
        if offset is None or offset[0] <= level:
            offset = [line_len]
        elif offset[0] < line_len:
            offset[0] = line_len
        offsets[line] = offset

    format_comment_alone(w, node)


def _block_columns(node) -> List[str]:
    if node.kind is NodeKind.VARIABLE_DECL:
        return [", ".join(node.names), ":"]
    if node.kind is NodeKind.VARIABLE_DEF:
        return [", ".join(node.names), ":="]
    return []


def _param_columns(node) -> List[str]:
    if node.kind is NodeKind.PARAMETER:
        return [node.name, str(node.type_spec.type)]
    return []


def _field_columns(node) -> List[str]:
    if node.kind is not NodeKind.FIELD:
        return []
    values = [node.name, str(node.type_spec.type)]
    if node.access != FieldAccess.HIDDEN:
        values.append(str(node.access))
    return values


class Formatter:
    """
    dp canonical formatter.

    Holds no state between calls; all widths, offsets and rendered
    nested constructs live for the duration of one format() call.
    """

    def __init__(self):
        self._rendered: Dict[tuple, tuple] = {}

    def format(self, nodes: Sequence[Node]) -> bytes:
        """
        Format file-level nodes.

        Returns:
            Canonical UTF-8 source (empty for no nodes)
        """
        if not nodes:
            return b""

        w = Writer()
        self._rendered = {}

        groups = split_commented_nodes(nodes, True)
        imports_index, imports = merge_imports(groups)

        printed = False
        prev = None

        for i, group in enumerate(groups):
            node = group.node
            is_import = node is not None and node.kind in (NodeKind.IMPORT, NodeKind.IMPORTS)

            if is_import and i != imports_index:
                continue

            if printed and self._needs_gap(prev, node):
                w.write("\n")
            printed = True
            prev = node

            head = group.head

            if i == imports_index:
                self._format_import_block(w, imports)
                if is_import:
                    head = []   # Printed in front of the block
                else:
                    w.write("\n")

            for comment in head:
                format_comment_alone(w, comment)
                w.write("\n")

            if node is not None and not is_import:
                self._format_file_child(w, node, group.tail)

        self._rendered = {}
        output = w.getvalue().encode("utf-8")
        logger.debug("formatted %d nodes into %d bytes", len(nodes), len(output))
        return output

    @staticmethod
    def _needs_gap(prev, curr) -> bool:
        # Tight runs of constants with the same visibility stay tight.
        if prev is not None and curr is not None:
            if prev.kind is NodeKind.CONSTANT_DEF and curr.kind is NodeKind.CONSTANT_DEF:
                if curr.pos.line - prev.end_pos.line <= 1 and curr.public == prev.public:
                    return False
        return True

    # ========================================================================
    # File level
    # ========================================================================

    def _format_file_child(self, w: Writer, node, tail):
        visit_file_child(node,
            comment=lambda n: None,
            constant_def=lambda n: self._format_constant_def(w, n, tail),
            function_def=lambda n: self._format_function_def(w, n),
            import_=lambda n: None,
            imports=lambda n: None,
            type_def=lambda n: self._format_type_def(w, n),
        )

    def _format_import_block(self, w: Writer, imports: ImportBlock):
        for comment in imports.head:
            format_comment_alone(w, comment)
            w.write("\n")

        w.write("import {\n")

        for i, entry in enumerate(imports.entries):
            if entry.path is None or (
                i > 0 and import_path_group(imports.entries[i - 1].path) != import_path_group(entry.path)
            ):
                w.write("\n")

            for comment in entry.head:
                w.write("\t")
                format_comment_alone(w, comment)
                w.write("\n")

            if entry.path is not None:
                w.write("\t")
                w.write(entry.path)
                self._format_import_names(w, entry)

                if entry.tail is not None:
                    w.write(" ")
                    format_comment_alone(w, entry.tail)
                w.write("\n")

        w.write("}\n")

    def _format_import_names(self, w: Writer, entry: ImportEntry):
        if not entry.names:
            return

        if entry.path:
            w.write(" ")

        if all(name.name and not name.head and not name.tail for name in entry.names):
            w.write("(")
            w.write(", ".join(name.name for name in entry.names))
            w.write(")")
            return

        w.write("(")

        for name in entry.names:
            for comment in name.head:
                w.write("\n\t\t")
                format_comment_alone(w, comment)

            if name.name:
                w.write("\n\t\t")
                w.write(name.name)
                w.write(",")

                for i, comment in enumerate(name.tail):
                    w.write(" " if i == 0 else "\n\t\t")
                    format_comment_alone(w, comment)

        w.write("\n\t)")

    def _format_constant_def(self, w: Writer, node, tail):
        if node.public:
            w.write("pub ")
        w.write(node.name)
        w.write(" = ")
        self._format_expr(w, 1, node.value)
        if tail:
            w.write(" ")
            format_comment_alone(w, tail[0])
        w.write("\n")

    def _format_function_def(self, w: Writer, node):
        if node.public:
            w.write("pub ")
        if node.receiver_type is not None:
            w.write("(")
            if node.receiver_name:
                w.write(node.receiver_name)
                w.write(" ")
            w.write(str(node.receiver_type.type))
            w.write(") ")
        w.write(node.name)

        self._format_function_params(w, node)
        self._format_function_results(w, node)

        body = trim_function_body(node)
        if not body:
            w.write("{}")
        else:
            self._format_block(w, 1, node.body_pos.line, body)

        w.write("\n")

    def _format_function_params(self, w: Writer, node):
        comments = any(is_comment(n) for n in node.params)
        params = [n for n in node.params if not is_comment(n)]

        w.write("(")

        if not comments and (not params or params[0].pos.line == node.pos.line):
            for i, param in enumerate(params):
                if i > 0:
                    w.write(", ")
                w.write(param.name)
                if i == len(params) - 1 or param.type_spec.type != params[i + 1].type_spec.type:
                    w.write(" ")
                    w.write(str(param.type_spec.type))
        else:
            widths = get_column_widths(node.params, _param_columns)
            offsets: Dict[int, Cell] = {}

            self._format_params_multi_line(w.fork(), node, widths, offsets)
            self._format_params_multi_line(w, node, widths, offsets)

            w.write("\n")

        w.write(") ")

    def _format_params_multi_line(self, w: Writer, node, widths, offsets: Dict[int, Cell]):
        prev_line = node.pos.line

        for param, row in zip(node.params, widths):
            indent_node(w, 1, prev_line, param)

            def format_parameter(n, row=row):
                format_columns(w, _param_columns(n), row)
                w.write(",")

            visit_param_list_child(param,
                comment=lambda n: format_comment(w, 1, n, offsets),
                parameter=format_parameter,
            )

            prev_line = param.end_pos.line

    def _format_function_results(self, w: Writer, node):
        comments = any(is_comment(n) for n in node.results)
        specs = [n for n in node.results if not is_comment(n)]

        if not comments and not specs:
            w.write("() ")
        elif not comments and len(specs) == 1:
            w.write(str(specs[0].type))
            w.write(" ")
        elif not comments and specs[0].pos.line == node.params_end.line:
            w.write("(")
            w.write(", ".join(str(spec.type) for spec in specs))
            w.write(") ")
        else:
            w.write("(")

            offsets: Dict[int, Cell] = {}
            self._format_results_multi_line(w.fork(), node, offsets)
            self._format_results_multi_line(w, node, offsets)

            w.write("\n) ")

    def _format_results_multi_line(self, w: Writer, node, offsets: Dict[int, Cell]):
        prev_line = node.params_end.line

        def format_type_spec(n):
            w.write(str(n.type))
            w.write(",")

        for result in node.results:
            indent_node(w, 1, prev_line, result)
            visit_type_list_child(result,
                comment=lambda n: format_comment(w, 1, n, offsets),
                type_spec=format_type_spec,
            )
            prev_line = result.end_pos.line

    def _format_type_def(self, w: Writer, node):
        fields = without_imports(node.fields)

        if node.public:
            w.write("pub ")
        w.write(node.name)
        w.write(" {")

        if fields:
            widths = get_column_widths(fields, _field_columns)
            offsets: Dict[int, Cell] = {}

            self._format_fields(w.fork(), node, fields, widths, offsets)
            self._format_fields(w, node, fields, widths, offsets)

            w.write("\n")

        w.write("}")
        w.write("\n")

    def _format_fields(self, w: Writer, node, fields, widths, offsets: Dict[int, Cell]):
        prev_line = node.pos.line

        for child, row in zip(fields, widths):
            indent_node(w, 1, prev_line, child)
            visit_field_list_child(child,
                comment=lambda n: format_comment(w, 1, n, offsets),
                field=lambda n, row=row: format_columns(w, _field_columns(n), row),
                import_=lambda n: None,
            )
            prev_line = child.end_pos.line

    # ========================================================================
    # Blocks
    # ========================================================================

    def _format_once(self, w: Writer, nodes: Sequence[Node], level: int, start_line: int,
                     render: Callable[[Writer], None]):
        """
        Write a nested block or value list.

        Both passes of every enclosing construct meet the same nested
        nodes at the same place, so each one is rendered once per format()
        call and its text reused.
        """
        key = (id(nodes), level, start_line)
        cached = self._rendered.get(key)
        if cached is None:
            sub = w.fork()
            render(sub)
            # Keep nodes alive so that its id is not reused
            cached = self._rendered[key] = (nodes, sub.getvalue())
        w.write(cached[1])

    def _format_block(self, w: Writer, level: int, start_line: int, nodes: Sequence[Node]):
        if not without_imports(nodes):
            w.write("{}")
            return

        self._format_once(w, nodes, level, start_line,
                          lambda sub: self._format_block_body(sub, level, start_line, nodes))

    def _format_block_body(self, w: Writer, level: int, start_line: int, nodes: Sequence[Node]):
        nodes = without_imports(nodes)

        w.write("{")

        widths = get_column_widths(nodes, _block_columns)
        offsets: Dict[int, Cell] = {}

        self._format_statements(w.fork(), level, start_line, nodes, widths, offsets)
        self._format_statements(w, level, start_line, nodes, widths, offsets)

        w.write("\n")
        w.indent(level - 1)
        w.write("}")

    def _format_statements(self, w: Writer, level: int, start_line: int, nodes: Sequence[Node],
                           widths, offsets: Dict[int, Cell]):
        prev_line = start_line

        for node, row in zip(nodes, widths):
            indent_node(w, level, prev_line, node)
            first_line = w.line_number()

            visit_block_child(node,
                assign=lambda n: self._format_assign(w, level, n),
                block=lambda n: self._format_block(w, level + 1, n.pos.line, n.body),
                break_=lambda n: w.write("break"),
                comment=lambda n: format_comment(w, level, n, offsets),
                continue_=lambda n: w.write("continue"),
                expression=lambda n: self._format_guarded_expr(w, level + 1, n.expr),
                for_=lambda n: self._format_for(w, level, n),
                if_=lambda n: self._format_if(w, level, n),
                import_=lambda n: None,
                return_=lambda n: self._format_return(w, level, n),
                variable_decl=lambda n: self._format_variable_decl(w, n, row),
                variable_def=lambda n: self._format_variable_def(w, level, n, row),
            )

            if w.line_number() != first_line:
                # Discontinue comment alignment after a multi-line statement.
                offsets[w.line_number()] = [0]

            prev_line = node.end_pos.line

    def _format_assign(self, w: Writer, level: int, node):
        for i, target in enumerate(node.objects):
            if i > 0:
                w.write(", ")
            self._format_assign_list_child(w, level + 1, target)
        w.write(" = ")
        self._format_expr_list(w, level + 1, node.pos.line, node.subjects,
                               force_parens=False, guard_parens="({")

    def _format_assign_list_child(self, w: Writer, level: int, node):
        def format_call(n):
            w.write(str(n.name))
            self._format_expr_list(w, level, n.pos.line, n.args, force_parens=True)

        def format_index(n):
            w.write(str(n.name))
            w.write("[")
            self._format_expr(w, 0, n.index, 0, tight=True)
            w.write("]")

        visit_assign_list_child(node,
            assigner_dereference=lambda n: self._format_assigner_dereference(w, n),
            call=format_call,
            index=format_index,
            selector=lambda n: w.write(str(n)),
        )

    def _format_for(self, w: Writer, level: int, node):
        w.write("for ")
        if node.test is not None:
            self._format_guarded_expr(w, level + 1, node.test)
            w.write(" ")
        self._format_block(w, level + 1, node.body_pos.line, node.body)

    def _format_if(self, w: Writer, level: int, node):
        w.write("if ")
        self._format_guarded_expr(w, level + 1, node.test)
        w.write(" ")
        self._format_block(w, level + 1, node.then_pos.line, node.then_body)
        if without_imports(node.else_body):
            w.write(" else ")
            self._format_block(w, level + 1, node.then_end.line, node.else_body)

    def _format_return(self, w: Writer, level: int, node):
        w.write("return")
        if node.values:
            w.write(" ")
        self._format_expr_list(w, level + 1, node.pos.line, node.values, force_parens=False,
                               guard_parens="{")

    def _format_variable_decl(self, w: Writer, node, row):
        format_columns(w, _block_columns(node), row)
        w.write(" ")
        if node.type_spec is None:
            w.write("auto")
        else:
            w.write(str(node.type_spec.type))

    def _format_variable_def(self, w: Writer, level: int, node, row):
        format_columns(w, _block_columns(node), row)
        w.write(" ")
        self._format_expr_list(w, level + 1, node.pos.line, node.values,
                               force_parens=False, guard_parens="({")

    # ========================================================================
    # Value lists
    # ========================================================================

    def _format_expr_list(self, w: Writer, level: int, start_line: int, nodes: Sequence[Node],
                          force_parens: bool, guard_parens: str = ""):
        """
        Write a value list on one line, or delimited over several lines.

        guard_parens lists the characters a one-line list must not start
        with: a leading paren opens a delimited list and a leading brace
        ends a naked one. Such a list is parenthesized.
        """
        if use_multiple_lines(start_line, nodes):
            self._format_once(w, nodes, level, start_line,
                              lambda sub: self._format_delimited_list(sub, level, start_line, nodes))
            return

        if guard_parens and not force_parens:
            probe = w.fork()
            self._format_expr_list_one_line(probe, nodes)
            text = probe.getvalue()
            force_parens = bool(text) and text[0] in guard_parens

        if force_parens:
            w.write("(")
        self._format_expr_list_one_line(w, nodes)
        if force_parens:
            w.write(")")

    def _format_delimited_list(self, w: Writer, level: int, start_line: int,
                               nodes: Sequence[Node]):
        w.write("(")

        offsets: Dict[int, Cell] = {}
        self._format_expr_list_multi_line(w.fork(), level, start_line, nodes, offsets)
        self._format_expr_list_multi_line(w, level, start_line, nodes, offsets)

        w.write("\n")
        w.indent(level - 1)
        w.write(")")

    def _format_expr_list_one_line(self, w: Writer, nodes: Sequence[Node]):
        first = True

        for node in nodes:
            if is_comment(node):
                continue
            if not first:
                w.write(", ")
            first = False

            visit_expr_list_child(node,
                assigner_dereference=lambda n: self._format_assigner_dereference(w, n),
                comment=lambda n: None,
                expression=lambda n: self._format_expr(w, 0, n.expr),
            )

    def _format_expr_list_multi_line(self, w: Writer, level: int, start_line: int,
                                     nodes: Sequence[Node], offsets: Dict[int, Cell]):
        first = True
        prev_line = start_line

        def format_assigner_dereference(n):
            self._format_assigner_dereference(w, n)
            w.write(",")

        def format_expression(n):
            self._format_expr(w, level + 1, n.expr)
            w.write(",")

        for node in nodes:
            indent_node(w, level, prev_line, node)

            visit_expr_list_child(node,
                assigner_dereference=format_assigner_dereference,
                comment=lambda n, first=first: (
                    format_comment_alone(w, n) if first else format_comment(w, 1, n, offsets)
                ),
                expression=format_expression,
            )

            first = False
            prev_line = node.end_pos.line

    @staticmethod
    def _format_assigner_dereference(w: Writer, node):
        w.write("(")
        w.write(node.name)
        w.write(")")

    # ========================================================================
    # Expressions
    # ========================================================================

    def _format_guarded_expr(self, w: Writer, level: int, node):
        """Write an expression, parenthesized if it would start with a brace."""
        probe = w.fork()
        self._format_expr(probe, level, node)
        text = probe.getvalue()

        if text.startswith("{"):  # Would open a block
            w.write("(")
            w.write(text)
            w.write(")")
        else:
            w.write(text)

    def _format_expr(self, w: Writer, level: int, node, parent_prec: int = 0,
                     tight: bool = False, right: bool = False):
        """
        Write an expression.

        parent_prec is the precedence of the enclosing operator (0 at the
        top); right tells that node is the right operand of that operator.
        In tight mode binary operators are written without spaces.
        """

        def format_address(n):
            if w.last_char() == "&":  # Prevent &&
                w.write(" ")
            w.write("&")
            self._format_expr(w, level, n.expr, ULTIMATE_PRECEDENCE, tight)

        def format_binary(n):
            nonlocal tight

            prec = n.op.precedence
            tightened = parent_prec > 0 and prec > parent_prec and prec == MAX_BINARY_PRECEDENCE
            if tightened:
                tight = True

            parens = parent_prec > 0 and (
                (prec != parent_prec and not tightened) or (right and prec == parent_prec)
            )

            if parens:
                w.write("(")

            self._format_expr(w, level, n.left, prec, tight)

            if not tight:
                w.write(" ")
            w.write(str(n.op))
            if not tight:
                w.write(" ")

            self._format_expr(w, level, n.right, prec, tight, right=True)

            if parens:
                w.write(")")

        def format_call(n):
            w.write(str(n.name))
            self._format_expr_list(w, level, n.pos.line, n.args, force_parens=True)

        def format_clone(n):
            w.write("clone ")
            self._format_expr(w, level, n.expr, ULTIMATE_PRECEDENCE, tight)

        def format_index(n):
            w.write(str(n.name))
            w.write("[")
            self._format_expr(w, level, n.index)
            w.write("]")

        def format_pointer_dereference(n):
            w.write("*")
            self._format_expr(w, level, n.expr, ULTIMATE_PRECEDENCE, tight)

        def format_unary(n):
            if n.op is UnaryOp.IDENTITY:
                self._format_expr(w, level, n.expr, parent_prec, tight, right)
                return

            if n.op is UnaryOp.COMPLEMENT and w.last_char() == "&":  # Prevent &^
                w.write(" ")
            w.write(str(n.op))
            self._format_expr(w, level, n.expr, ULTIMATE_PRECEDENCE, tight)

        visit_expr(node,
            address=format_address,
            binary=format_binary,
            boolean=lambda n: w.write("true" if n.value else "false"),
            call=format_call,
            character=lambda n: w.write(n.source),
            clone=format_clone,
            index=format_index,
            integer=lambda n: w.write(n.source),
            nil=lambda n: w.write("nil"),
            pointer_dereference=format_pointer_dereference,
            selector=lambda n: w.write(str(n)),
            string=lambda n: w.write(n.source),
            unary=format_unary,
            zero=lambda n: w.write("{}"),
        )


def format_file(nodes: Sequence[Node]) -> bytes:
    """Format file-level nodes as canonical source."""
    return Formatter().format(nodes)

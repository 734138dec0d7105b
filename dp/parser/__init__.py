"""
dp Parser Package

Implements the recursive-descent parser and the AST for dp.

Key Features:
- Ordered alternatives with backtracking and aggregated errors
- Naked (single-line) and delimited (multi-line) list grammars
- Tiered binary operator precedence
- Comments kept as first-class list members
- Immutable dataclass nodes with category dispatch

Author: xwest
"""

from .ast_nodes import *
from .visit import (
    visit_assign_list_child, visit_block_child, visit_expr, visit_expr_list_child,
    visit_field_list_child, visit_file_child, visit_ident_list_child,
    visit_param_list_child, visit_type_list_child,
)
from .parser import Parser, Scan, parse
from .errors import ParseError

__all__ = [
    "Parser",
    "Scan",
    "parse",
    "ParseError",

    # AST nodes
    "Node", "NodeKind", "is_comment",
    "AssignListChild", "BlockChild", "ExprChild", "ExprListChild", "FieldListChild",
    "FileChild", "IdentListChild", "ImportListChild", "ParamListChild", "TypeListChild",
    "Address", "AssignerDereference", "Binary", "Boolean", "Call", "Character", "Clone",
    "Index", "Integer", "Nil", "PointerDereference", "Selector", "String", "Unary", "Zero",
    "Expression", "Assign", "Block", "Break", "Continue", "For", "If", "Return",
    "VariableDecl", "VariableDef",
    "Comment", "ConstantDef", "FunctionDef", "Field", "Identifier", "Import", "Imports",
    "Parameter", "TypeDef", "TypeSpec",
    "Type", "QualifiedName", "FieldAccess", "BinaryOp", "UnaryOp",
    "MIN_BINARY_PRECEDENCE", "MAX_BINARY_PRECEDENCE", "ULTIMATE_PRECEDENCE",

    # Dispatch
    "visit_assign_list_child",
    "visit_block_child",
    "visit_expr",
    "visit_expr_list_child",
    "visit_field_list_child",
    "visit_file_child",
    "visit_ident_list_child",
    "visit_param_list_child",
    "visit_type_list_child",
]

"""
Category dispatch for dp AST nodes.

Each visit function takes a node and one handler per concrete node kind
of that category, calls the matching handler and returns its result.
A node of any other kind means a broken invariant and raises
InternalConsistencyError.

Author: xwest
"""

from typing import Any, Callable, Dict

from ..lexer.errors import InternalConsistencyError
from .ast_nodes import Node, NodeKind

Handler = Callable[[Any], Any]


def _dispatch(category: str, node: Node, handlers: Dict[NodeKind, Handler]) -> Any:
    handler = handlers.get(getattr(node, "kind", None))
    if handler is None:
        raise InternalConsistencyError(f"unknown {category} node: {type(node).__name__}")
    return handler(node)


def visit_assign_list_child(node, *, assigner_dereference: Handler, call: Handler,
                            index: Handler, selector: Handler) -> Any:
    return _dispatch("assignment list", node, {
        NodeKind.ASSIGNER_DEREFERENCE: assigner_dereference,
        NodeKind.CALL: call,
        NodeKind.INDEX: index,
        NodeKind.SELECTOR: selector,
    })


def visit_block_child(node, *, assign: Handler, block: Handler, break_: Handler,
                      comment: Handler, continue_: Handler, expression: Handler,
                      for_: Handler, if_: Handler, import_: Handler, return_: Handler,
                      variable_decl: Handler, variable_def: Handler) -> Any:
    return _dispatch("block", node, {
        NodeKind.ASSIGN: assign,
        NodeKind.BLOCK: block,
        NodeKind.BREAK: break_,
        NodeKind.COMMENT: comment,
        NodeKind.CONTINUE: continue_,
        NodeKind.EXPRESSION: expression,
        NodeKind.FOR: for_,
        NodeKind.IF: if_,
        NodeKind.IMPORT: import_,
        NodeKind.RETURN: return_,
        NodeKind.VARIABLE_DECL: variable_decl,
        NodeKind.VARIABLE_DEF: variable_def,
    })


def visit_expr(node, *, address: Handler, binary: Handler, boolean: Handler, call: Handler,
               character: Handler, clone: Handler, index: Handler, integer: Handler,
               nil: Handler, pointer_dereference: Handler, selector: Handler,
               string: Handler, unary: Handler, zero: Handler) -> Any:
    return _dispatch("expression", node, {
        NodeKind.ADDRESS: address,
        NodeKind.BINARY: binary,
        NodeKind.BOOLEAN: boolean,
        NodeKind.CALL: call,
        NodeKind.CHARACTER: character,
        NodeKind.CLONE: clone,
        NodeKind.INDEX: index,
        NodeKind.INTEGER: integer,
        NodeKind.NIL: nil,
        NodeKind.POINTER_DEREFERENCE: pointer_dereference,
        NodeKind.SELECTOR: selector,
        NodeKind.STRING: string,
        NodeKind.UNARY: unary,
        NodeKind.ZERO: zero,
    })


def visit_expr_list_child(node, *, assigner_dereference: Handler, comment: Handler,
                          expression: Handler) -> Any:
    return _dispatch("expression list", node, {
        NodeKind.ASSIGNER_DEREFERENCE: assigner_dereference,
        NodeKind.COMMENT: comment,
        NodeKind.EXPRESSION: expression,
    })


def visit_field_list_child(node, *, comment: Handler, field: Handler, import_: Handler) -> Any:
    return _dispatch("field list", node, {
        NodeKind.COMMENT: comment,
        NodeKind.FIELD: field,
        NodeKind.IMPORT: import_,
    })


def visit_file_child(node, *, comment: Handler, constant_def: Handler, function_def: Handler,
                     import_: Handler, imports: Handler, type_def: Handler) -> Any:
    return _dispatch("file", node, {
        NodeKind.COMMENT: comment,
        NodeKind.CONSTANT_DEF: constant_def,
        NodeKind.FUNCTION_DEF: function_def,
        NodeKind.IMPORT: import_,
        NodeKind.IMPORTS: imports,
        NodeKind.TYPE_DEF: type_def,
    })


def visit_ident_list_child(node, *, comment: Handler, identifier: Handler) -> Any:
    return _dispatch("identifier list", node, {
        NodeKind.COMMENT: comment,
        NodeKind.IDENTIFIER: identifier,
    })


def visit_param_list_child(node, *, comment: Handler, parameter: Handler) -> Any:
    return _dispatch("parameter list", node, {
        NodeKind.COMMENT: comment,
        NodeKind.PARAMETER: parameter,
    })


def visit_type_list_child(node, *, comment: Handler, type_spec: Handler) -> Any:
    return _dispatch("type list", node, {
        NodeKind.COMMENT: comment,
        NodeKind.TYPE_SPEC: type_spec,
    })

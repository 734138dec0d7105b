"""
dp Recursive-Descent Parser

Every grammar point is an ordered list of alternatives. The dispatcher
tries each alternative on a fork of the scan state and commits the first
one that succeeds. When all of them fail it raises a "syntax error" that
carries every individual failure; a lone failure propagates as is.

Lists come in two shapes:
- naked lists run on one logical line and end at a context stop token
- delimited lists sit between ( ) or { } and may contain comments and
  newlines as members

Binary expressions: operators of the highest tier (* / % << >> & &^)
bind their atomic operands first. Any other chain must stay within a
single precedence tier; mixing tiers needs parentheses.

Author: xwest
"""

import dataclasses
import logging
from typing import Callable, List, Optional, Sequence

from ..lexer.tokens import Token, TokenKind, Position
from ..lexer.errors import PositionError
from .ast_nodes import (
    Address, Assign, AssignerDereference, Binary, BinaryOp, Block, Boolean, Break,
    Call, Character, Clone, Comment, ConstantDef, Continue, Expression, Field,
    FieldAccess, For, FunctionDef, Identifier, If, Import, Imports, Index, Integer,
    Nil, NodeKind, Parameter, PointerDereference, QualifiedName, Return, Selector,
    String, Type, TypeDef, TypeSpec, Unary, UnaryOp, VariableDecl, VariableDef, Zero,
    MAX_BINARY_PRECEDENCE,
)
from .errors import (
    create_syntax_error, create_unexpected_token_error, create_precedence_error,
    create_missing_parameter_type_error, create_field_access_error,
    create_empty_list_error, create_import_error,
)

logger = logging.getLogger(__name__)

# Tokens which end a naked list
_NAKED_LIST_STOPS = frozenset({
    TokenKind.BRACE_LEFT,
    TokenKind.BRACE_RIGHT,
    TokenKind.COLON,
    TokenKind.COMMENT,
    TokenKind.DEFINE,
    TokenKind.NEWLINE,
    TokenKind.SEMICOLON,
})

# Tokens which may follow an expression in a value list
_EXPRESSION_LIST_ENDS = frozenset({
    TokenKind.BRACE_RIGHT,
    TokenKind.COMMENT,
    TokenKind.NEWLINE,
    TokenKind.PAREN_RIGHT,
    TokenKind.SEMICOLON,
})

# Tokens which may follow an expression statement
_STATEMENT_ENDS = frozenset({
    TokenKind.COMMENT,
    TokenKind.NEWLINE,
    TokenKind.SEMICOLON,
})

# Tokens which may follow a delimited value list (None is the end of input)
_VALUE_LIST_ENDS = _STATEMENT_ENDS | {TokenKind.BRACE_RIGHT, None}

_BINARY_OPERATORS = {op.value: op for op in BinaryOp}
_UNARY_OPERATORS = {op.value: op for op in UnaryOp}

_FIELD_ACCESS_KEYWORDS = {
    "visible": FieldAccess.VISIBLE,
    "mutable": FieldAccess.MUTABLE,
    "assignable": FieldAccess.ASSIGNABLE,
}


class Scan:
    """
    Cursor over the token sequence.

    Space tokens are skipped transparently. ``last`` is the end position of
    the most recently consumed construct: the position of the next
    non-space token, or the end of the consumed token at the end of input.
    """

    def __init__(self, tokens: Sequence[Token], index: int = 0,
                 last: Position = Position()):
        self.tokens = tokens
        self.index = index
        self.last = last

    def fork(self) -> 'Scan':
        return Scan(self.tokens, self.index, self.last)

    def commit(self, other: 'Scan'):
        self.index = other.index
        self.last = other.last

    def peek(self) -> Optional[Token]:
        """Next non-space token, None at end of input."""
        while self.index < len(self.tokens):
            token = self.tokens[self.index]
            if token.kind is not TokenKind.SPACE:
                return token
            self.index += 1
        return None

    def peek_kind(self) -> Optional[TokenKind]:
        token = self.peek()
        return token.kind if token is not None else None

    def at_eof(self) -> bool:
        return self.peek() is None

    def pos(self) -> Position:
        """Position of the next token, or the end of input."""
        token = self.peek()
        if token is not None:
            return token.position
        if self.tokens:
            return self.tokens[-1].end_position
        return Position()

    def skim(self, wanted: TokenKind) -> Optional[Token]:
        """Consume and return the next token if it is of the wanted kind."""
        token = self.peek()
        if token is None or token.kind is not wanted:
            return None

        self.index += 1

        following = self.peek()
        if following is not None:
            self.last = following.position
        else:
            self.last = token.end_position

        return token

    def skip(self, wanted: TokenKind) -> bool:
        return self.skim(wanted) is not None

    def take(self, wanted: TokenKind, message: str) -> Token:
        token = self.skim(wanted)
        if token is None:
            raise create_unexpected_token_error(message, self.pos())
        return token


ScanParser = Callable[[Scan], object]


class Parser:
    """
    dp recursive-descent parser.

    Turns a token sequence into the list of top-level nodes. Parsing is
    all-or-nothing: the first unrecoverable failure raises ParseError.
    """

    def __init__(self, tokens: Sequence[Token]):
        """
        Initialize parser with a list of tokens.

        Args:
            tokens: Tokens from the lexer, including space, newline and
                comment tokens
        """
        self.tokens = tuple(tokens)

    def parse(self) -> List:
        """
        Parse the whole token sequence.

        Returns:
            List of file-level nodes (empty for empty input)

        Raises:
            ParseError: if the tokens do not form a valid file
        """
        s = Scan(self.tokens)

        nodes = self._parse_list_until(s, Scan.at_eof, [
            self._parse_comment,
            self._parse_constant_def,
            self._parse_function_def,
            self._parse_imports,
            self._parse_newline,
            self._parse_semicolon,
            self._parse_type_def,
        ])

        logger.debug("parsed %d file-level nodes from %d tokens", len(nodes), len(self.tokens))
        return nodes

    # ========================================================================
    # Dispatch and list grammars
    # ========================================================================

    def _alternatives(self, s: Scan, parsers: Sequence[ScanParser]):
        """Commit the first alternative that succeeds."""
        errors: List[PositionError] = []

        for parser in parsers:
            attempt = s.fork()
            try:
                result = parser(attempt)
            except PositionError as e:
                errors.append(e)
                continue

            s.commit(attempt)
            return result

        if len(errors) == 1:
            raise errors[0]

        raise create_syntax_error(s.pos(), errors)

    def _parse_naked_list(self, s: Scan, parsers: Sequence[ScanParser],
                          stop_at_assign: bool = False) -> list:
        results = []

        while True:
            kind = s.peek_kind()
            if kind is None or kind in _NAKED_LIST_STOPS:
                return results
            if stop_at_assign and kind is TokenKind.ASSIGN:
                return results

            result = self._alternatives(s, parsers)
            if result is not None:
                results.append(result)

    def _parse_list_until(self, s: Scan, stop: Callable[[Scan], bool],
                          parsers: Sequence[ScanParser]) -> list:
        results = []

        while not stop(s):
            result = self._alternatives(s, parsers)
            if result is not None:
                results.append(result)

        return results

    @staticmethod
    def _closer(kind: TokenKind) -> Callable[[Scan], bool]:
        return lambda s: s.skip(kind)

    # ========================================================================
    # Separators
    # ========================================================================

    def _parse_comma(self, s: Scan) -> None:
        s.take(TokenKind.COMMA, "comma expected")

    def _parse_comment(self, s: Scan) -> Comment:
        token = s.take(TokenKind.COMMENT, "comment expected")
        return Comment(token.position, token.text)

    def _parse_newline(self, s: Scan) -> None:
        s.take(TokenKind.NEWLINE, "end of line expected")

    def _parse_semicolon(self, s: Scan) -> None:
        s.take(TokenKind.SEMICOLON, "semicolon expected")

    # ========================================================================
    # File level
    # ========================================================================

    def _parse_constant_def(self, s: Scan) -> ConstantDef:
        public = False
        token = s.take(TokenKind.WORD, "constant definition: pub keyword or name expected")
        name = token
        if token.text == "pub":
            public = True
            name = s.take(TokenKind.WORD, "constant definition: name expected")

        s.take(TokenKind.ASSIGN, "constant definition: assignment operator expected")
        value = self._parse_any_expr(s, multiline=False)

        return ConstantDef(token.position, public, name.text, value, s.last)

    def _parse_function_def(self, s: Scan) -> FunctionDef:
        pos = s.pos()

        public = False
        receiver_name = ""
        receiver_type = None
        name = ""

        token = s.peek()
        if token is not None and token.kind is TokenKind.WORD and token.text == "pub":
            s.skip(TokenKind.WORD)
            public = True

        if s.skip(TokenKind.PAREN_LEFT):
            receiver_name = s.take(TokenKind.WORD, "function definition: receiver name expected").text
            receiver_type = self._parse_type_spec(s)
            s.take(TokenKind.PAREN_RIGHT, "function definition: receiver: closing paren expected")

            token = s.skim(TokenKind.WORD)
            if token is not None:
                name = token.text
        else:
            name = s.take(TokenKind.WORD, "function definition: name expected").text

        s.take(TokenKind.PAREN_LEFT, "function definition: parameter list expected")
        params = self._parse_list_until(s, self._closer(TokenKind.PAREN_RIGHT), [
            self._parse_comma,
            self._parse_comment,
            self._parse_newline,
            self._parse_parameter,
        ])
        params_end = s.last

        params = self._fill_in_parameter_types(params)

        results = self._alternatives(s, [
            self._parse_naked_results,
            self._parse_delimited_results,
        ])

        body_pos = s.take(TokenKind.BRACE_LEFT, "function definition: opening brace expected").position
        body = self._parse_statements(s)

        return FunctionDef(pos, public, receiver_name, receiver_type, name, tuple(params),
                           params_end, tuple(results), body_pos, tuple(body), s.last)

    def _parse_naked_results(self, s: Scan) -> list:
        return self._parse_naked_list(s, [
            self._parse_comma,
            self._parse_type_spec,
        ])

    def _parse_delimited_results(self, s: Scan) -> list:
        s.take(TokenKind.PAREN_LEFT, "function definition: return type list expected")
        return self._parse_list_until(s, self._closer(TokenKind.PAREN_RIGHT), [
            self._parse_comma,
            self._parse_comment,
            self._parse_newline,
            self._parse_type_spec,
        ])

    def _fill_in_parameter_types(self, nodes: list) -> list:
        """Give untyped parameters the type of the next typed one to the right."""
        latest: Optional[TypeSpec] = None
        filled = list(nodes)

        for i in reversed(range(len(filled))):
            node = filled[i]
            if node.kind is not NodeKind.PARAMETER:
                continue

            if node.type_spec is not None:
                latest = node.type_spec
            elif latest is None:
                raise create_missing_parameter_type_error(node.end_pos)
            else:
                filled[i] = dataclasses.replace(node, type_spec=latest)

        return filled

    def _parse_parameter(self, s: Scan) -> Parameter:
        name = s.take(TokenKind.WORD, "parameter name expected")

        # Missing type is filled in by _fill_in_parameter_types().
        type_spec = None
        if not s.skip(TokenKind.COMMA):
            type_spec = self._parse_type_spec(s)
            s.skim(TokenKind.COMMA)

        return Parameter(name.position, name.text, type_spec, s.last)

    def _parse_type_def(self, s: Scan) -> TypeDef:
        public = False
        token = s.take(TokenKind.WORD, "type definition: pub keyword or name expected")
        name = token
        if token.text == "pub":
            public = True
            name = s.take(TokenKind.WORD, "type definition: name expected")

        access = self._parse_field_access(s)

        s.take(TokenKind.BRACE_LEFT, "type definition: opening brace expected")
        body = self._parse_list_until(s, self._closer(TokenKind.BRACE_RIGHT), [
            self._parse_comma,
            self._parse_comment,
            self._parse_field,
            self._parse_import_with_keyword,
            self._parse_newline,
            self._parse_semicolon,
        ])

        if access != FieldAccess.HIDDEN:
            body = [
                dataclasses.replace(node, access=access)
                if node.kind is NodeKind.FIELD and node.access == FieldAccess.HIDDEN else node
                for node in body
            ]

        return TypeDef(token.position, public, name.text, tuple(body), s.last)

    def _parse_field_access(self, s: Scan) -> FieldAccess:
        token = s.skim(TokenKind.WORD)
        if token is None:
            return FieldAccess.HIDDEN

        access = _FIELD_ACCESS_KEYWORDS.get(token.text)
        if access is None:
            raise create_field_access_error(token.position)
        return access

    def _parse_field(self, s: Scan) -> Field:
        name = s.take(TokenKind.WORD, "field name expected")
        type_spec = self._parse_type_spec(s)
        access = self._parse_field_access(s)
        return Field(name.position, name.text, type_spec, access, s.last)

    # ========================================================================
    # Imports
    # ========================================================================

    def _parse_import(self, s: Scan, require_keyword: bool) -> Import:
        pos = s.pos()

        if not s.skip(TokenKind.IMPORT) and require_keyword:
            raise create_unexpected_token_error("import keyword expected", pos)

        path = ""
        token = s.skim(TokenKind.STRING)
        if token is not None:
            path = token.text
            if not path.startswith('"'):
                raise create_import_error("import path: opening quote expected", token.position)

        if s.skip(TokenKind.PAREN_LEFT):
            names = self._parse_list_until(s, self._closer(TokenKind.PAREN_RIGHT), [
                self._parse_comma,
                self._parse_comment,
                self._parse_identifier,
                self._parse_newline,
            ])
        else:
            names = self._parse_naked_list(s, [
                self._parse_comma,
                self._parse_identifier,
            ])

        if not require_keyword and not path and not names:
            raise create_import_error("import: path or identifier list expected", s.pos())

        return Import(pos, path, tuple(names), s.last)

    def _parse_import_with_keyword(self, s: Scan) -> Import:
        return self._parse_import(s, require_keyword=True)

    def _parse_import_entry(self, s: Scan) -> Import:
        return self._parse_import(s, require_keyword=False)

    def _parse_import_path(self, s: Scan) -> Import:
        token = s.take(TokenKind.STRING, "import path expected")
        if not token.text.startswith('"'):
            raise create_import_error("import path: opening quote expected", token.position)
        return Import(token.position, token.text, (), s.last)

    def _parse_imports(self, s: Scan) -> Imports:
        keyword = s.take(TokenKind.IMPORT, "import keyword expected")

        if s.peek_kind() is TokenKind.STRING:
            imports = self._parse_naked_list(s, [
                self._parse_comma,
                self._parse_import_path,
            ])
        elif s.skip(TokenKind.PAREN_LEFT):
            imports = self._parse_list_until(s, self._closer(TokenKind.PAREN_RIGHT), [
                self._parse_comma,
                self._parse_comment,
                self._parse_import_path,
                self._parse_newline,
            ])
        else:
            s.take(TokenKind.BRACE_LEFT, "import: opening brace expected")
            imports = self._parse_list_until(s, self._closer(TokenKind.BRACE_RIGHT), [
                self._parse_comma,
                self._parse_comment,
                self._parse_import_entry,
                self._parse_newline,
                self._parse_semicolon,
            ])

        return Imports(keyword.position, tuple(imports), s.last)

    # ========================================================================
    # Names and types
    # ========================================================================

    def _parse_qualified_name(self, s: Scan) -> QualifiedName:
        parts = []

        if s.skip(TokenKind.COLONS):
            parts.append("")

        while True:
            parts.append(s.take(TokenKind.WORD, "name expected").text)
            if not s.skip(TokenKind.COLONS):
                return QualifiedName(parts)

    def _parse_identifier(self, s: Scan) -> Identifier:
        pos = s.pos()
        name = self._parse_qualified_name(s)
        return Identifier(pos, name, s.last)

    def _parse_type(self, s: Scan) -> Type:
        assigner = s.skip(TokenKind.ASSIGN)
        pointer = s.skip(TokenKind.ASTERISK)
        reference = s.skip(TokenKind.AMPERSAND)
        shared = s.skip(TokenKind.HASH)

        if s.skip(TokenKind.BRACKET_LEFT):
            item = self._parse_type(s)
            s.take(TokenKind.BRACKET_RIGHT, "type: array closing bracket expected")
            return Type(assigner, pointer, reference, shared, item=item)

        return Type(assigner, pointer, reference, shared, name=self._parse_qualified_name(s))

    def _parse_type_spec(self, s: Scan) -> TypeSpec:
        pos = s.pos()
        type_ = self._parse_type(s)
        return TypeSpec(pos, type_, s.last)

    # ========================================================================
    # Statements
    # ========================================================================

    def _parse_statements(self, s: Scan) -> list:
        return self._parse_list_until(s, self._closer(TokenKind.BRACE_RIGHT), [
            self._parse_assign,
            self._parse_block,
            self._parse_break,
            self._parse_comment,
            self._parse_continue,
            self._parse_expression_statement,
            self._parse_for,
            self._parse_if,
            self._parse_import_with_keyword,
            self._parse_newline,
            self._parse_return,
            self._parse_semicolon,
            self._parse_variable_decl,
            self._parse_variable_def,
        ])

    def _parse_assign(self, s: Scan) -> Assign:
        objects = self._parse_naked_list(s, [
            self._parse_assigner_dereference_in_assign_list,
            self._parse_call_in_assign_list,
            self._parse_comma,
            self._parse_index,
            self._parse_selector,
        ], stop_at_assign=True)
        if not objects:
            raise create_empty_list_error("assign", s.pos())

        s.take(TokenKind.ASSIGN, "assign: operator expected")

        values = self._parse_expr_list(s)
        if not values:
            raise create_empty_list_error("assign", s.pos())

        return Assign(objects[0].pos, tuple(objects), tuple(values), s.last)

    def _parse_block(self, s: Scan) -> Block:
        token = s.take(TokenKind.BRACE_LEFT, "block: opening brace expected")
        body = self._parse_statements(s)
        return Block(token.position, tuple(body), s.last)

    def _parse_break(self, s: Scan) -> Break:
        token = s.take(TokenKind.BREAK, "break keyword expected")
        return Break(token.position, s.last)

    def _parse_continue(self, s: Scan) -> Continue:
        token = s.take(TokenKind.CONTINUE, "continue keyword expected")
        return Continue(token.position, s.last)

    def _parse_expression_statement(self, s: Scan) -> Expression:
        expr = self._parse_any_expr(s, multiline=False)

        if s.peek_kind() not in _STATEMENT_ENDS:
            raise create_unexpected_token_error("expression: end of statement expected", s.pos())

        return Expression(expr)

    def _parse_for(self, s: Scan) -> For:
        keyword = s.take(TokenKind.FOR, "for keyword expected")

        test = None
        opening = s.skim(TokenKind.BRACE_LEFT)
        if opening is None:
            test = self._parse_any_expr(s, multiline=False)
            opening = s.take(TokenKind.BRACE_LEFT, "for: opening brace expected")

        body = self._parse_statements(s)
        return For(keyword.position, test, opening.position, tuple(body), s.last)

    def _parse_if(self, s: Scan) -> If:
        keyword = s.take(TokenKind.IF, "if keyword expected")
        test = self._parse_any_expr(s, multiline=False)

        then_pos = s.take(TokenKind.BRACE_LEFT, "if: opening brace expected").position
        then_body = self._parse_statements(s)
        then_end = s.last

        else_body = []
        if s.skip(TokenKind.ELSE):
            s.take(TokenKind.BRACE_LEFT, "else: opening brace expected")
            else_body = self._parse_statements(s)

        return If(keyword.position, test, then_pos, tuple(then_body), then_end,
                  tuple(else_body), s.last)

    def _parse_return(self, s: Scan) -> Return:
        keyword = s.take(TokenKind.RETURN, "return keyword expected")

        values = self._alternatives(s, [
            self._parse_naked_values,
            self._parse_delimited_values,
        ])

        return Return(keyword.position, tuple(values), s.last)

    def _parse_variable_names(self, s: Scan) -> List[str]:
        return self._parse_naked_list(s, [
            self._parse_comma,
            self._parse_variable_name,
        ])

    def _parse_variable_name(self, s: Scan) -> str:
        return s.take(TokenKind.WORD, "variable name expected").text

    def _parse_variable_decl(self, s: Scan) -> VariableDecl:
        pos = s.pos()
        names = self._parse_variable_names(s)

        s.take(TokenKind.COLON, "variable declaration: colon expected")

        if s.skip(TokenKind.AUTO):
            return VariableDecl(pos, tuple(names), None, s.last)

        type_spec = self._parse_type_spec(s)
        return VariableDecl(pos, tuple(names), type_spec, s.last)

    def _parse_variable_def(self, s: Scan) -> VariableDef:
        pos = s.pos()
        names = self._parse_variable_names(s)

        s.take(TokenKind.DEFINE, "variable definition: operator expected")

        values = self._parse_expr_list(s)
        return VariableDef(pos, tuple(names), tuple(values), s.last)

    # ========================================================================
    # Value lists
    # ========================================================================

    def _parse_expr_list(self, s: Scan) -> list:
        if s.skip(TokenKind.PAREN_LEFT):
            return self._parse_delimited_value_items(s)
        return self._parse_naked_values(s)

    def _parse_naked_values(self, s: Scan) -> list:
        return self._parse_naked_list(s, [
            self._parse_comma,
            self._parse_expression_in_list,
        ])

    def _parse_delimited_values(self, s: Scan) -> list:
        s.take(TokenKind.PAREN_LEFT, "return value list expected")
        return self._parse_delimited_value_items(s)

    def _parse_delimited_value_items(self, s: Scan) -> list:
        values = self._parse_list_until(s, self._closer(TokenKind.PAREN_RIGHT), [
            self._parse_comma,
            self._parse_comment,
            self._parse_expression_in_list,
            self._parse_newline,
        ])

        if s.peek_kind() not in _VALUE_LIST_ENDS:
            raise create_unexpected_token_error("value list: end of statement expected", s.pos())

        return values

    def _parse_expression_in_list(self, s: Scan):
        node = self._parse_assigner_dereference(s)
        if node is not None:
            return node

        expr = self._parse_any_expr(s, multiline=False)

        if not s.skip(TokenKind.COMMA):
            if s.peek_kind() not in _EXPRESSION_LIST_ENDS:
                raise create_unexpected_token_error("end of expression expected", s.pos())

        return Expression(expr)

    def _parse_assigner_dereference(self, s: Scan) -> Optional[AssignerDereference]:
        """Parse (name), leaving the scan untouched if it is not there."""
        attempt = s.fork()

        if not attempt.skip(TokenKind.PAREN_LEFT):
            return None

        name = attempt.skim(TokenKind.WORD)
        if name is None:
            return None

        if not attempt.skip(TokenKind.PAREN_RIGHT):
            return None

        node = AssignerDereference(s.pos(), name.text, attempt.last)
        s.commit(attempt)
        return node

    def _parse_assigner_dereference_in_assign_list(self, s: Scan) -> AssignerDereference:
        node = self._parse_assigner_dereference(s)
        if node is None:
            raise create_unexpected_token_error("assigner dereference expected", s.pos())
        return node

    # ========================================================================
    # Expressions
    # ========================================================================

    def _skip_newlines(self, s: Scan):
        while s.skip(TokenKind.NEWLINE):
            pass

    def _parse_infix_operator(self, s: Scan) -> Optional[BinaryOp]:
        kind = s.peek_kind()
        op = _BINARY_OPERATORS.get(kind)
        if op is not None:
            s.skip(kind)
        return op

    def _parse_any_expr(self, s: Scan, multiline: bool):
        """Parse a chain of operands joined by operators of one tier."""
        left = None
        operator: Optional[BinaryOp] = None

        while True:
            if multiline:
                self._skip_newlines(s)

            operand = self._parse_operand(s, multiline)

            if left is None:
                left = operand
            else:
                left = Binary(left, operator, operand, s.last)

            if multiline:
                self._skip_newlines(s)

            op = self._parse_infix_operator(s)
            if op is None:
                return left

            if operator is not None and op.precedence != operator.precedence:
                raise create_precedence_error(s.pos())
            operator = op

    def _parse_operand(self, s: Scan, multiline: bool):
        """Parse an atomic expression and any highest-tier operations on it."""
        operand = self._parse_atomic_expr(s)

        while True:
            attempt = s.fork()
            if multiline:
                self._skip_newlines(attempt)

            op = self._parse_infix_operator(attempt)
            if op is None or op.precedence != MAX_BINARY_PRECEDENCE:
                return operand

            s.commit(attempt)
            if multiline:
                self._skip_newlines(s)

            right = self._parse_atomic_expr(s)
            operand = Binary(operand, op, right, s.last)

    def _parse_atomic_expr(self, s: Scan):
        return self._alternatives(s, [
            self._parse_address,
            self._parse_call_in_expr,
            self._parse_character,
            self._parse_clone,
            self._parse_false,
            self._parse_index,
            self._parse_integer,
            self._parse_nil,
            self._parse_parenthesized,
            self._parse_pointer_dereference,
            self._parse_selector,
            self._parse_string,
            self._parse_true,
            self._parse_unary,
            self._parse_zero,
        ])

    def _parse_address(self, s: Scan) -> Address:
        token = s.take(TokenKind.AMPERSAND, "address operator expected")
        expr = self._parse_atomic_expr(s)
        return Address(token.position, expr, s.last)

    def _parse_call(self, s: Scan, parsers: Sequence[ScanParser]) -> Call:
        name = self._parse_selector_only(s)
        s.take(TokenKind.PAREN_LEFT, "call: opening paren expected")
        args = self._parse_list_until(s, self._closer(TokenKind.PAREN_RIGHT), parsers)
        return Call(name, tuple(args), s.last)

    def _parse_call_in_expr(self, s: Scan) -> Call:
        return self._parse_call(s, [
            self._parse_comma,
            self._parse_comment,
            self._parse_expression_in_list,
            self._parse_newline,
        ])

    def _parse_call_in_assign_list(self, s: Scan) -> Call:
        return self._parse_call(s, [
            self._parse_comma,
            self._parse_expression_in_list,
            self._parse_newline,
        ])

    def _parse_character(self, s: Scan) -> Character:
        token = s.take(TokenKind.CHARACTER, "character literal expected")
        return Character(token.position, token.text, s.last)

    def _parse_clone(self, s: Scan) -> Clone:
        token = s.take(TokenKind.CLONE, "clone keyword expected")
        expr = self._parse_atomic_expr(s)
        return Clone(token.position, expr, s.last)

    def _parse_false(self, s: Scan) -> Boolean:
        token = s.take(TokenKind.FALSE, "literal false expected")
        return Boolean(token.position, False, s.last)

    def _parse_true(self, s: Scan) -> Boolean:
        token = s.take(TokenKind.TRUE, "literal true expected")
        return Boolean(token.position, True, s.last)

    def _parse_index(self, s: Scan) -> Index:
        name = self._parse_selector_only(s)
        s.take(TokenKind.BRACKET_LEFT, "index: opening bracket expected")
        index = self._parse_any_expr(s, multiline=True)
        s.take(TokenKind.BRACKET_RIGHT, "index: closing bracket expected")
        return Index(name, index, s.last)

    def _parse_integer(self, s: Scan) -> Integer:
        token = s.take(TokenKind.INTEGER, "integer literal expected")
        return Integer(token.position, token.text, s.last)

    def _parse_nil(self, s: Scan) -> Nil:
        token = s.take(TokenKind.NIL, "literal nil expected")
        return Nil(token.position, s.last)

    def _parse_parenthesized(self, s: Scan):
        s.take(TokenKind.PAREN_LEFT, "expression: opening paren expected")
        expr = self._parse_any_expr(s, multiline=True)
        s.take(TokenKind.PAREN_RIGHT, "expression: closing paren expected")
        return expr

    def _parse_pointer_dereference(self, s: Scan) -> PointerDereference:
        token = s.take(TokenKind.ASTERISK, "pointer dereference operator expected")
        expr = self._parse_atomic_expr(s)
        return PointerDereference(token.position, expr, s.last)

    def _parse_selector_only(self, s: Scan) -> Selector:
        pos = s.pos()
        names = [s.take(TokenKind.WORD, "selector: variable name expected").text]

        while s.skip(TokenKind.PERIOD):
            names.append(s.take(TokenKind.WORD, "selector: field name expected").text)

        return Selector(pos, tuple(names), s.last)

    def _parse_selector(self, s: Scan) -> Selector:
        name = self._parse_selector_only(s)

        kind = s.peek_kind()
        if kind is TokenKind.COLONS:
            raise create_unexpected_token_error("selector: looks like namespace", s.pos())
        if kind is TokenKind.PAREN_LEFT:
            raise create_unexpected_token_error("selector used in function call", s.pos())
        if kind is TokenKind.BRACKET_LEFT:
            raise create_unexpected_token_error("selector: looks like index expression", s.pos())

        return name

    def _parse_string(self, s: Scan) -> String:
        token = s.take(TokenKind.STRING, "string literal expected")
        return String(token.position, token.text, s.last)

    def _parse_unary(self, s: Scan) -> Unary:
        pos = s.pos()

        op = _UNARY_OPERATORS.get(s.peek_kind())
        if op is None:
            raise create_unexpected_token_error("prefix operator expected", pos)
        s.skip(op.value)

        expr = self._parse_atomic_expr(s)
        return Unary(pos, op, expr, s.last)

    def _parse_zero(self, s: Scan) -> Zero:
        token = s.take(TokenKind.BRACE_LEFT, "zero: opening brace expected")
        s.take(TokenKind.BRACE_RIGHT, "zero: closing brace expected")
        return Zero(token.position, s.last)


def parse(tokens: Sequence[Token]) -> List:
    """
    Parse tokens into file-level nodes.

    Raises:
        ParseError: on the first syntax error
    """
    return Parser(tokens).parse()

"""
Abstract Syntax Tree node definitions for dp.

Nodes are immutable dataclasses. Every node knows its start position and
its end position (the position of the next token after it). Comments are
ordinary list members; the formatter decides what they belong to.

A node can be a member of several categories (a Comment may appear in a
block, in a parameter list, in an import list...). Categories are marker
base classes; dispatch over them lives in visit.py.

Author: xwest
"""

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import ClassVar, Optional, Tuple

from ..lexer.tokens import Position, TokenKind


class NodeKind(Enum):
    """All concrete node kinds. The value is the human readable name."""

    # Expressions
    ADDRESS = "address operation"
    ASSIGNER_DEREFERENCE = "assigner dereference"
    BINARY = "binary operation"
    BOOLEAN = "boolean literal"
    CALL = "function call"
    CHARACTER = "character literal"
    CLONE = "clone operation"
    INDEX = "index operation"
    INTEGER = "integer literal"
    NIL = "nil literal"
    POINTER_DEREFERENCE = "pointer dereference"
    SELECTOR = "selector operation"
    STRING = "string literal"
    UNARY = "unary operation"
    ZERO = "zero literal"

    # Statements
    EXPRESSION = "expression"
    ASSIGN = "assignment"
    BLOCK = "block"
    BREAK = "break"
    CONTINUE = "continue"
    FOR = "for statement"
    IF = "if statement"
    RETURN = "return statement"
    VARIABLE_DECL = "variable declaration"
    VARIABLE_DEF = "variable definition"

    # File level and list members
    COMMENT = "comment"
    CONSTANT_DEF = "constant definition"
    FUNCTION_DEF = "function definition"
    FIELD = "field"
    IMPORT = "import"
    IMPORTS = "import list"
    PARAMETER = "parameter"
    TYPE_DEF = "type definition"
    IDENTIFIER = "identifier"
    TYPE_SPEC = "type specification"


# Special precedence levels
MIN_BINARY_PRECEDENCE = 1
MAX_BINARY_PRECEDENCE = 5
ULTIMATE_PRECEDENCE = 6


class BinaryOp(Enum):
    """Binary operators, keyed by their token kind."""
    ADD = TokenKind.PLUS
    SUBTRACT = TokenKind.MINUS
    MULTIPLY = TokenKind.ASTERISK
    DIVIDE = TokenKind.SLASH
    REMAINDER = TokenKind.PERCENT

    LOGICAL_AND = TokenKind.LOGICAL_AND
    LOGICAL_OR = TokenKind.LOGICAL_OR

    AND_NOT = TokenKind.AND_NOT
    AND = TokenKind.AMPERSAND
    OR = TokenKind.PIPE
    EXCLUSIVE_OR = TokenKind.CARET

    SHIFT_LEFT = TokenKind.SHIFT_LEFT
    SHIFT_RIGHT = TokenKind.SHIFT_RIGHT

    EQUAL = TokenKind.EQUAL
    NOT_EQUAL = TokenKind.NOT_EQUAL
    LESS_OR_EQUAL = TokenKind.LESS_OR_EQUAL
    GREATER_OR_EQUAL = TokenKind.GREATER_OR_EQUAL
    LESS = TokenKind.LESS
    GREATER = TokenKind.GREATER

    @property
    def precedence(self) -> int:
        return _BINARY_PRECEDENCE[self]

    def dump(self) -> str:
        return "BinaryOp{" + str(self) + "}"

    def __str__(self) -> str:
        return str(self.value)


_BINARY_PRECEDENCE = {
    BinaryOp.MULTIPLY: 5, BinaryOp.DIVIDE: 5, BinaryOp.REMAINDER: 5,
    BinaryOp.SHIFT_LEFT: 5, BinaryOp.SHIFT_RIGHT: 5,
    BinaryOp.AND: 5, BinaryOp.AND_NOT: 5,

    BinaryOp.ADD: 4, BinaryOp.SUBTRACT: 4, BinaryOp.OR: 4, BinaryOp.EXCLUSIVE_OR: 4,

    BinaryOp.EQUAL: 3, BinaryOp.NOT_EQUAL: 3,
    BinaryOp.LESS: 3, BinaryOp.LESS_OR_EQUAL: 3,
    BinaryOp.GREATER: 3, BinaryOp.GREATER_OR_EQUAL: 3,

    BinaryOp.LOGICAL_AND: 2,
    BinaryOp.LOGICAL_OR: 1,
}


class UnaryOp(Enum):
    """Prefix operators, keyed by their token kind."""
    IDENTITY = TokenKind.PLUS
    NEGATE = TokenKind.MINUS
    COMPLEMENT = TokenKind.CARET
    NOT = TokenKind.EXCLAMATION

    def dump(self) -> str:
        return "UnaryOp{" + str(self) + "}"

    def __str__(self) -> str:
        return str(self.value)


class FieldAccess(IntEnum):
    """Structure field access modes."""
    HIDDEN = 0
    VISIBLE = 1
    MUTABLE = 2
    ASSIGNABLE = 3

    def __str__(self) -> str:
        return self.name.lower()


class QualifiedName(tuple):
    """Name with optional namespace parts, written as a::b::c."""

    def namespace(self) -> str:
        return "::".join(self[:-1])

    def short(self) -> str:
        return self[-1]

    def __str__(self) -> str:
        return "::".join(self)

    def __repr__(self) -> str:
        return f"QualifiedName({str(self)!r})"


# ============================================================================
# Base classes and categories
# ============================================================================

class Node:
    """Base class for all AST nodes."""

    kind: ClassVar[NodeKind]

    @property
    def pos(self) -> Position:
        return self.position

    @property
    def end_pos(self) -> Position:
        return self.end

    def describe(self) -> str:
        return self.kind.value

    def dump(self) -> str:
        raise NotImplementedError


class AssignListChild(Node):
    """Member of an assignment target list."""


class BlockChild(Node):
    """Member of a statement block."""


class ExprChild(Node):
    """Expression."""


class ExprListChild(Node):
    """Member of a value list."""


class FieldListChild(Node):
    """Member of a type definition body."""


class FileChild(Node):
    """Top-level node."""


class IdentListChild(Node):
    """Member of an import name list."""


class ImportListChild(Node):
    """Member of an import list."""


class ParamListChild(Node):
    """Member of a function parameter list."""


class TypeListChild(Node):
    """Member of a function result list."""


def is_comment(node: Node) -> bool:
    return node.kind is NodeKind.COMMENT


def _dump_values(nodes) -> str:
    return ", ".join(node.dump() for node in nodes if not is_comment(node))


def _dump_statements(nodes) -> str:
    return "Block{" + "; ".join(node.dump() for node in nodes if not is_comment(node)) + "}"


# ============================================================================
# Types
# ============================================================================

@dataclass(frozen=True)
class Type:
    """
    Type reference: flags followed by an array item type or a name.

    Equality is structural and ignores positions.
    """
    assigner: bool = False
    pointer: bool = False
    reference: bool = False
    shared: bool = False
    item: Optional['Type'] = None           # Set if array
    name: QualifiedName = QualifiedName()   # Empty if array

    def __str__(self) -> str:
        if self.item is not None:
            text = "[" + str(self.item) + "]"
        else:
            text = str(self.name)
        if self.shared:
            text = "#" + text
        if self.reference:
            text = "&" + text
        if self.pointer:
            text = "*" + text
        if self.assigner:
            text = "=" + text
        return text


@dataclass(frozen=True)
class TypeSpec(TypeListChild):
    position: Position
    type: Type
    end: Position

    kind: ClassVar[NodeKind] = NodeKind.TYPE_SPEC

    def dump(self) -> str:
        return str(self.type)

    def __str__(self) -> str:
        return str(self.type)


# ============================================================================
# Expressions
# ============================================================================

@dataclass(frozen=True)
class Address(ExprChild):
    position: Position
    expr: ExprChild
    end: Position

    kind: ClassVar[NodeKind] = NodeKind.ADDRESS

    def dump(self) -> str:
        return "Address{" + self.expr.dump() + "}"


@dataclass(frozen=True)
class AssignerDereference(AssignListChild, ExprListChild):
    """Parenthesized name standing for the value staged for reassignment."""
    position: Position
    name: str
    end: Position

    kind: ClassVar[NodeKind] = NodeKind.ASSIGNER_DEREFERENCE

    def dump(self) -> str:
        return "AssignerDereference{" + self.name + "}"


@dataclass(frozen=True)
class Binary(ExprChild):
    left: ExprChild
    op: BinaryOp
    right: ExprChild
    end: Position

    kind: ClassVar[NodeKind] = NodeKind.BINARY

    @property
    def pos(self) -> Position:
        return self.left.pos

    def dump(self) -> str:
        return "Binary{" + self.left.dump() + " " + self.op.dump() + " " + self.right.dump() + "}"


@dataclass(frozen=True)
class Boolean(ExprChild):
    position: Position
    value: bool
    end: Position

    kind: ClassVar[NodeKind] = NodeKind.BOOLEAN

    def dump(self) -> str:
        return "Boolean{true}" if self.value else "Boolean{false}"


@dataclass(frozen=True)
class Selector(AssignListChild, ExprChild):
    position: Position
    names: Tuple[str, ...]
    end: Position

    kind: ClassVar[NodeKind] = NodeKind.SELECTOR

    def dump(self) -> str:
        return "Selector{" + str(self) + "}"

    def __str__(self) -> str:
        return ".".join(self.names)


@dataclass(frozen=True)
class Call(AssignListChild, ExprChild):
    name: Selector
    args: Tuple[ExprListChild, ...]
    end: Position

    kind: ClassVar[NodeKind] = NodeKind.CALL

    @property
    def pos(self) -> Position:
        return self.name.pos

    def dump(self) -> str:
        return "Call{" + self.name.dump() + " (" + _dump_values(self.args) + ")}"


@dataclass(frozen=True)
class Character(ExprChild):
    position: Position
    source: str
    end: Position

    kind: ClassVar[NodeKind] = NodeKind.CHARACTER

    def dump(self) -> str:
        return "Character{" + self.source + "}"


@dataclass(frozen=True)
class Clone(ExprChild):
    position: Position
    expr: ExprChild
    end: Position

    kind: ClassVar[NodeKind] = NodeKind.CLONE

    def dump(self) -> str:
        return "Clone{" + self.expr.dump() + "}"


@dataclass(frozen=True)
class Index(AssignListChild, ExprChild):
    name: Selector
    index: ExprChild
    end: Position

    kind: ClassVar[NodeKind] = NodeKind.INDEX

    @property
    def pos(self) -> Position:
        return self.name.pos

    def dump(self) -> str:
        return "Index{" + self.name.dump() + " [" + self.index.dump() + "]}"


@dataclass(frozen=True)
class Integer(ExprChild):
    position: Position
    source: str
    end: Position

    kind: ClassVar[NodeKind] = NodeKind.INTEGER

    def dump(self) -> str:
        return "Integer{" + self.source + "}"


@dataclass(frozen=True)
class Nil(ExprChild):
    position: Position
    end: Position

    kind: ClassVar[NodeKind] = NodeKind.NIL

    def dump(self) -> str:
        return "Nil"


@dataclass(frozen=True)
class PointerDereference(ExprChild):
    position: Position
    expr: ExprChild
    end: Position

    kind: ClassVar[NodeKind] = NodeKind.POINTER_DEREFERENCE

    def dump(self) -> str:
        return "PointerDereference{" + self.expr.dump() + "}"


@dataclass(frozen=True)
class String(ExprChild):
    position: Position
    source: str
    end: Position

    kind: ClassVar[NodeKind] = NodeKind.STRING

    def dump(self) -> str:
        return "String{" + self.source + "}"


@dataclass(frozen=True)
class Unary(ExprChild):
    position: Position
    op: UnaryOp
    expr: ExprChild
    end: Position

    kind: ClassVar[NodeKind] = NodeKind.UNARY

    def dump(self) -> str:
        return "Unary{" + self.op.dump() + " " + self.expr.dump() + "}"


@dataclass(frozen=True)
class Zero(ExprChild):
    position: Position
    end: Position

    kind: ClassVar[NodeKind] = NodeKind.ZERO

    def dump(self) -> str:
        return "Zero"


# ============================================================================
# Statements
# ============================================================================

@dataclass(frozen=True)
class Expression(BlockChild, ExprListChild):
    """Expression used as a statement or as a value list member."""
    expr: ExprChild

    kind: ClassVar[NodeKind] = NodeKind.EXPRESSION

    @property
    def pos(self) -> Position:
        return self.expr.pos

    @property
    def end_pos(self) -> Position:
        return self.expr.end_pos

    def dump(self) -> str:
        return "Expression{" + self.expr.dump() + "}"


@dataclass(frozen=True)
class Assign(BlockChild):
    position: Position
    objects: Tuple[AssignListChild, ...]
    subjects: Tuple[ExprListChild, ...]
    end: Position

    kind: ClassVar[NodeKind] = NodeKind.ASSIGN

    def dump(self) -> str:
        return ("Assign{" + ", ".join(node.dump() for node in self.objects)
                + " = " + _dump_values(self.subjects) + "}")


@dataclass(frozen=True)
class Block(BlockChild):
    position: Position
    body: Tuple[BlockChild, ...]
    end: Position

    kind: ClassVar[NodeKind] = NodeKind.BLOCK

    def dump(self) -> str:
        return _dump_statements(self.body)


@dataclass(frozen=True)
class Break(BlockChild):
    position: Position
    end: Position

    kind: ClassVar[NodeKind] = NodeKind.BREAK

    def dump(self) -> str:
        return "Break"


@dataclass(frozen=True)
class Continue(BlockChild):
    position: Position
    end: Position

    kind: ClassVar[NodeKind] = NodeKind.CONTINUE

    def dump(self) -> str:
        return "Continue"


@dataclass(frozen=True)
class For(BlockChild):
    position: Position
    test: Optional[ExprChild]   # None if infinite loop
    body_pos: Position
    body: Tuple[BlockChild, ...]
    end: Position

    kind: ClassVar[NodeKind] = NodeKind.FOR

    def dump(self) -> str:
        text = "For{"
        if self.test is not None:
            text += self.test.dump() + " "
        return text + _dump_statements(self.body) + "}"


@dataclass(frozen=True)
class If(BlockChild):
    position: Position
    test: ExprChild
    then_pos: Position
    then_body: Tuple[BlockChild, ...]
    then_end: Position
    else_body: Tuple[BlockChild, ...]
    end: Position

    kind: ClassVar[NodeKind] = NodeKind.IF

    def dump(self) -> str:
        text = "If{" + self.test.dump() + " " + _dump_statements(self.then_body)
        if self.else_body:
            text += " else " + _dump_statements(self.else_body)
        return text + "}"


@dataclass(frozen=True)
class Return(BlockChild):
    position: Position
    values: Tuple[ExprListChild, ...]
    end: Position

    kind: ClassVar[NodeKind] = NodeKind.RETURN

    def dump(self) -> str:
        values = _dump_values(self.values)
        return "Return{" + (" " + values if values else "") + "}"


@dataclass(frozen=True)
class VariableDecl(BlockChild):
    position: Position
    names: Tuple[str, ...]
    type_spec: Optional[TypeSpec]   # None if auto
    end: Position

    kind: ClassVar[NodeKind] = NodeKind.VARIABLE_DECL

    def dump(self) -> str:
        type_name = "auto" if self.type_spec is None else self.type_spec.dump()
        return "VariableDecl{" + ", ".join(self.names) + " : " + type_name + "}"


@dataclass(frozen=True)
class VariableDef(BlockChild):
    position: Position
    names: Tuple[str, ...]
    values: Tuple[ExprListChild, ...]
    end: Position

    kind: ClassVar[NodeKind] = NodeKind.VARIABLE_DEF

    def dump(self) -> str:
        return "VariableDef{" + ", ".join(self.names) + " := " + _dump_values(self.values) + "}"


# ============================================================================
# File level and list members
# ============================================================================

@dataclass(frozen=True)
class Comment(BlockChild, ExprListChild, FieldListChild, FileChild,
              IdentListChild, ImportListChild, ParamListChild, TypeListChild):
    position: Position
    source: str

    kind: ClassVar[NodeKind] = NodeKind.COMMENT

    @property
    def end_pos(self) -> Position:
        return self.position.after(self.source)

    def dump(self) -> str:
        return "Comment{" + self.source + "}"


@dataclass(frozen=True)
class ConstantDef(FileChild):
    position: Position
    public: bool
    name: str
    value: ExprChild
    end: Position

    kind: ClassVar[NodeKind] = NodeKind.CONSTANT_DEF

    def dump(self) -> str:
        text = self.name + " = " + self.value.dump()
        if self.public:
            text = "pub " + text
        return "ConstantDef{" + text + "}"


@dataclass(frozen=True)
class Parameter(ParamListChild):
    position: Position
    name: str
    type_spec: Optional[TypeSpec]   # None until filled in from the right
    end: Position

    kind: ClassVar[NodeKind] = NodeKind.PARAMETER

    def dump(self) -> str:
        type_name = "" if self.type_spec is None else self.type_spec.dump()
        return "Parameter{" + self.name + " " + type_name + "}"


@dataclass(frozen=True)
class FunctionDef(FileChild):
    position: Position
    public: bool
    receiver_name: str
    receiver_type: Optional[TypeSpec]
    name: str
    params: Tuple[ParamListChild, ...]
    params_end: Position
    results: Tuple[TypeListChild, ...]
    body_pos: Position
    body: Tuple[BlockChild, ...]
    end: Position

    kind: ClassVar[NodeKind] = NodeKind.FUNCTION_DEF

    def dump(self) -> str:
        text = self.name + "("
        if self.public:
            text = "pub " + text
        text += _dump_values(self.params)

        results = [node for node in self.results if not is_comment(node)]
        if not results:
            text += ") "
        elif len(results) == 1:
            text += ") " + results[0].dump() + " "
        else:
            text += ") (" + _dump_values(results) + ") "

        return "FunctionDef{" + text + _dump_statements(self.body) + "}"


@dataclass(frozen=True)
class Field(FieldListChild):
    position: Position
    name: str
    type_spec: TypeSpec
    access: FieldAccess
    end: Position

    kind: ClassVar[NodeKind] = NodeKind.FIELD

    def dump(self) -> str:
        row = [self.name, self.type_spec.dump()]
        if self.access != FieldAccess.HIDDEN:
            row.append(str(self.access))
        return "Field{" + " ".join(row) + "}"


@dataclass(frozen=True)
class Identifier(IdentListChild):
    position: Position
    name: QualifiedName
    end: Position

    kind: ClassVar[NodeKind] = NodeKind.IDENTIFIER

    def dump(self) -> str:
        return "Identifier{" + str(self.name) + "}"


@dataclass(frozen=True)
class Import(BlockChild, FieldListChild, FileChild, ImportListChild):
    position: Position
    path: str                   # Quoted, or empty
    names: Tuple[IdentListChild, ...]
    end: Position

    kind: ClassVar[NodeKind] = NodeKind.IMPORT

    def string_in_list(self) -> str:
        names = [str(node.name) for node in self.names if not is_comment(node)]
        if not names:
            return self.path
        return self.path + " (" + ", ".join(names) + ")"

    def dump(self) -> str:
        return "Import{" + self.string_in_list() + "}"


@dataclass(frozen=True)
class Imports(FileChild):
    position: Position
    imports: Tuple[ImportListChild, ...]
    end: Position

    kind: ClassVar[NodeKind] = NodeKind.IMPORTS

    def dump(self) -> str:
        entries = [node.string_in_list() for node in self.imports if not is_comment(node)]
        return "Imports{" + "; ".join(entries) + "}"


@dataclass(frozen=True)
class TypeDef(FileChild):
    position: Position
    public: bool
    name: str
    fields: Tuple[FieldListChild, ...]
    end: Position

    kind: ClassVar[NodeKind] = NodeKind.TYPE_DEF

    def dump(self) -> str:
        text = self.name + " {"
        if self.public:
            text = "pub " + text
        fields = [node.dump() for node in self.fields if node.kind is NodeKind.FIELD]
        return "TypeDef{" + text + "; ".join(fields) + "}}"

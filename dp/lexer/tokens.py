"""
Token definitions for the dp lexer.

This module defines the token kinds recognized by the dp lexer:
- Whitespace, newlines and comments (kept as real tokens for the formatter)
- Keywords
- Words, integer, character and string literals
- Operators and delimiters

Author: xwest
"""

from enum import Enum, auto
from dataclasses import dataclass


class TokenKind(Enum):
    """
    Enumeration of all token kinds in dp.

    The order of operator members follows the lexer's matching order, so
    longer symbols are tried before their prefixes.
    """

    # ========================================================================
    # Layout
    # ========================================================================
    SPACE = auto()                  # Excluding newline
    NEWLINE = auto()
    COMMENT = auto()                # // until end of line

    # ========================================================================
    # Keywords
    # ========================================================================
    AUTO = auto()
    BREAK = auto()
    CLONE = auto()
    CONTINUE = auto()
    ELSE = auto()
    FALSE = auto()
    FOR = auto()
    IF = auto()
    IMPORT = auto()
    NIL = auto()
    RETURN = auto()
    TRUE = auto()

    # Identifier, or keyword at file level or in type definition
    WORD = auto()

    # ========================================================================
    # Literals
    # ========================================================================
    INTEGER = auto()                # 12345
    CHARACTER = auto()              # 'a'
    STRING = auto()                 # "abc" or `abc`

    # ========================================================================
    # Operators and delimiters
    # ========================================================================
    PLUS = auto()
    MINUS = auto()
    ASTERISK = auto()
    SLASH = auto()
    PERCENT = auto()

    LOGICAL_AND = auto()
    LOGICAL_OR = auto()

    AND_NOT = auto()
    AMPERSAND = auto()
    PIPE = auto()
    CARET = auto()

    SHIFT_LEFT = auto()
    SHIFT_RIGHT = auto()

    EQUAL = auto()
    NOT_EQUAL = auto()
    LESS_OR_EQUAL = auto()
    GREATER_OR_EQUAL = auto()
    LESS = auto()
    GREATER = auto()

    EXCLAMATION = auto()

    ASSIGN = auto()
    DEFINE = auto()

    COMMA = auto()
    PERIOD = auto()
    SEMICOLON = auto()
    COLONS = auto()
    COLON = auto()
    HASH = auto()

    PAREN_LEFT = auto()
    BRACKET_LEFT = auto()
    BRACE_LEFT = auto()

    PAREN_RIGHT = auto()
    BRACKET_RIGHT = auto()
    BRACE_RIGHT = auto()

    def __str__(self) -> str:
        return TOKEN_STRINGS[self]


# Keyword spellings, in matching order
KEYWORDS = {
    "auto": TokenKind.AUTO,
    "break": TokenKind.BREAK,
    "clone": TokenKind.CLONE,
    "continue": TokenKind.CONTINUE,
    "else": TokenKind.ELSE,
    "false": TokenKind.FALSE,
    "for": TokenKind.FOR,
    "if": TokenKind.IF,
    "import": TokenKind.IMPORT,
    "nil": TokenKind.NIL,
    "return": TokenKind.RETURN,
    "true": TokenKind.TRUE,
}

# Operator spellings, in matching order (&& before &^ before &, <= before <)
OPERATORS = {
    "+": TokenKind.PLUS,
    "-": TokenKind.MINUS,
    "*": TokenKind.ASTERISK,
    "/": TokenKind.SLASH,
    "%": TokenKind.PERCENT,

    "&&": TokenKind.LOGICAL_AND,
    "||": TokenKind.LOGICAL_OR,

    "&^": TokenKind.AND_NOT,
    "&": TokenKind.AMPERSAND,
    "|": TokenKind.PIPE,
    "^": TokenKind.CARET,

    "<<": TokenKind.SHIFT_LEFT,
    ">>": TokenKind.SHIFT_RIGHT,

    "==": TokenKind.EQUAL,
    "!=": TokenKind.NOT_EQUAL,
    "<=": TokenKind.LESS_OR_EQUAL,
    ">=": TokenKind.GREATER_OR_EQUAL,
    "<": TokenKind.LESS,
    ">": TokenKind.GREATER,

    "!": TokenKind.EXCLAMATION,

    "=": TokenKind.ASSIGN,
    ":=": TokenKind.DEFINE,

    ",": TokenKind.COMMA,
    ".": TokenKind.PERIOD,
    ";": TokenKind.SEMICOLON,
    "::": TokenKind.COLONS,
    ":": TokenKind.COLON,
    "#": TokenKind.HASH,

    "(": TokenKind.PAREN_LEFT,
    "[": TokenKind.BRACKET_LEFT,
    "{": TokenKind.BRACE_LEFT,

    ")": TokenKind.PAREN_RIGHT,
    "]": TokenKind.BRACKET_RIGHT,
    "}": TokenKind.BRACE_RIGHT,
}

TOKEN_STRINGS = {
    TokenKind.SPACE: "Space",
    TokenKind.NEWLINE: "Newline",
    TokenKind.COMMENT: "Comment",
    TokenKind.WORD: "Word",
    TokenKind.INTEGER: "Integer",
    TokenKind.CHARACTER: "Character",
    TokenKind.STRING: "String",
}
TOKEN_STRINGS.update({kind: text for text, kind in KEYWORDS.items()})
TOKEN_STRINGS.update({kind: text for text, kind in OPERATORS.items()})


@dataclass(frozen=True)
class Position:
    """
    Represents a location in the source code.

    Line and column are 1-based and count code points; the byte offset is
    0-based and counts UTF-8 bytes. The zero value (line 0) means unknown.
    """
    path: str = ""
    line: int = 0
    column: int = 0
    byte_offset: int = 0

    @classmethod
    def location(cls, path: str) -> 'Position':
        """Position of the first character of a file."""
        return cls(path, 1, 1, 0)

    def after(self, text: str) -> 'Position':
        """Return the position immediately after text starting here."""
        line = self.line
        column = self.column
        offset = self.byte_offset

        for char in text:
            if char == "\n":
                line += 1
                column = 1
            else:
                column += 1
            offset += len(char.encode("utf-8"))

        return Position(self.path, line, column, offset)

    def __str__(self) -> str:
        return f"{self.path}:{self.line}:{self.column}"

    def __repr__(self) -> str:
        return f"Position({self.path!r}, {self.line}, {self.column}, {self.byte_offset})"


@dataclass(frozen=True)
class Token:
    """
    Represents a lexical token.

    The text is the exact source slice; it is never empty.
    """
    position: Position
    kind: TokenKind
    text: str

    @property
    def end_position(self) -> Position:
        """Position immediately after the token."""
        return self.position.after(self.text)

    def __str__(self) -> str:
        return str(self.kind)

    def __repr__(self) -> str:
        return f"Token({self.kind.name}, {self.text!r}, {self.position!r})"

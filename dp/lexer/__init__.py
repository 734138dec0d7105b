"""
dp Lexer Package

Implements the lexical analyzer for the dp language.

Key Features:
- Ordered token rules, first match wins
- Whitespace, newlines and comments preserved as tokens
- Keywords guarded against identifier prefixes
- Positions tracked in code points (line/column) and bytes (offset)
- Fatal, position-tagged errors

Author: xwest
"""

from .tokens import Token, TokenKind, Position
from .lexer import Lexer, tokenize, tokenize_string, tokenize_file
from .errors import (
    PositionError, LexerError, InternalConsistencyError, error_with_position_prefix,
)

__all__ = [
    "Lexer",
    "Token",
    "TokenKind",
    "Position",
    "tokenize",
    "tokenize_string",
    "tokenize_file",
    "PositionError",
    "LexerError",
    "InternalConsistencyError",
    "error_with_position_prefix",
]

"""
dp Language Front End

Lexer, parser and canonical formatter for the dp programming language.

Architecture:
    dp/
    ├── lexer/           # Tokenization
    ├── parser/          # Syntax analysis and AST
    ├── formatter/       # Canonical source rendering
    ├── fileio.py        # File replacement and diff helpers
    └── cli.py           # dpfmt command

Author: xwest
License: MIT
"""

__version__ = "0.1.0"
__author__ = "xwest"
__license__ = "MIT"

from typing import Union

from .lexer import Lexer, Position, tokenize
from .parser import Parser, parse
from .formatter import Formatter, format_file

__all__ = [
    # Core classes
    "Lexer",
    "Parser",
    "Formatter",

    # Entry points
    "tokenize",
    "parse",
    "format_file",
    "format_source",

    # Version info
    "__version__",
]


def format_source(text: Union[str, bytes], path: str = "") -> bytes:
    """
    Tokenize, parse and format source text.

    Raises:
        LexerError: on invalid UTF-8 or an illegal token
        ParseError: on a syntax error
    """
    tokens = tokenize(Position.location(path), text)
    return format_file(parse(tokens))

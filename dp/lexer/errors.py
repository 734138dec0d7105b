"""
Error handling for the dp front end.

Provides the position-tagged error type shared by the lexer and the
parser. Errors nest: a syntax error carries the failures of every
alternative the parser tried at that point as sub-errors.

Author: xwest
"""

from typing import Optional, Sequence

from .tokens import Position


class PositionError(Exception):
    """
    Exception tagged with a source position.

    Rendering convention: ``path:LLLL:CCC: message`` followed, when there are
    sub-errors, by a colon and one indented line per sub-error.
    """

    def __init__(
        self,
        message: str,
        position: Position,
        sub_errors: Sequence[BaseException] = (),
        code: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.position = position
        self.sub_errors = tuple(sub_errors)
        self.code = code

    def indent_error(self, indent: str = "") -> str:
        result = ""
        if self.position.path:
            result += self.position.path + ":"
        if self.position.line > 0:
            result += f"{self.position.line:04d}:{self.position.column:03d}: "
        result += indent + self.message

        if self.sub_errors:
            result += ":"
            indent = "  " + indent
            for error in self.sub_errors:
                result += "\n" + indent_error(indent, error)

        return result

    def __str__(self) -> str:
        return self.indent_error("")

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, {self.position!r})"


class LexerError(PositionError):
    """Exception raised when the lexer encounters a fatal error."""


class InternalConsistencyError(AssertionError):
    """A node reached a dispatch point without a matching handler."""


def indent_error(indent: str, error: BaseException) -> str:
    """Render an error at the given indentation."""
    if isinstance(error, PositionError):
        return error.indent_error(indent)
    return indent + str(error)


def error_with_position_prefix(error: BaseException, fallback: str = "") -> str:
    """
    Describe an error for the command line.

    Position-aware errors render with their position prefix. Other errors
    become "fallback: message" when a fallback is given.
    """
    if isinstance(error, PositionError):
        return error.indent_error("")
    if fallback:
        return f"{fallback}: {error}"
    return str(error)


# Common error codes for categorization
ERROR_CODES = {
    "L001": "Illegal token",
    "L002": "Invalid UTF-8 encoding",
}


def create_illegal_token_error(position: Position) -> LexerError:
    """Create an error for input no token rule matches."""
    return LexerError("illegal token", position, code="L001")


def create_decode_error(position: Position) -> LexerError:
    """Create an error for an invalid UTF-8 byte sequence."""
    return LexerError("invalid UTF-8 encoding", position, code="L002")

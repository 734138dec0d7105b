"""
Parser error handling for dp.

All parse failures are recoverable only through the backtracking of the
alternative dispatcher: a failed alternative raises ParseError, and when
every alternative at a point fails the dispatcher raises a "syntax error"
whose sub-errors are the individual failures.

Author: xwest
"""

from typing import Sequence

from ..lexer.tokens import Position
from ..lexer.errors import PositionError


class ParseError(PositionError):
    """
    Exception raised when the parser encounters a syntax error.

    The message is the bare diagnostic; the rendered form carries the
    position prefix and any nested sub-errors.
    """


# Common error codes for categorization
ERROR_CODES = {
    "P001": "Syntax error",
    "P002": "Unexpected token",
    "P003": "Mixed operator precedence",
    "P004": "Missing parameter type",
    "P005": "Invalid field access keyword",
    "P006": "Empty list",
    "P007": "Malformed import",
}


def create_syntax_error(position: Position, sub_errors: Sequence[BaseException]) -> ParseError:
    """Create the aggregate error for a point where no alternative matched."""
    return ParseError("syntax error", position, sub_errors, code="P001")


def create_unexpected_token_error(message: str, position: Position) -> ParseError:
    """Create an error for a token that does not fit the grammar here."""
    return ParseError(message, position, code="P002")


def create_precedence_error(position: Position) -> ParseError:
    return ParseError("operators have different precedence", position, code="P003")


def create_missing_parameter_type_error(position: Position) -> ParseError:
    return ParseError("function parameter type expected", position, code="P004")


def create_field_access_error(position: Position) -> ParseError:
    return ParseError("visible, mutable or assignable keyword expected", position, code="P005")


def create_empty_list_error(context: str, position: Position) -> ParseError:
    return ParseError(f"{context}: empty list", position, code="P006")


def create_import_error(message: str, position: Position) -> ParseError:
    """Create an error for a malformed import path or import entry."""
    return ParseError(message, position, code="P007")

"""
dp Lexer - turns source text into tokens

Every character of the input ends up in some token: whitespace, newlines
and comments are tokens too, because the formatter needs them to
reconstruct vertical layout and comment placement.

At each position an ordered list of rules is tried and the first one that
produces a non-empty token wins. Keywords are guarded so that "format"
is a word and not "for" followed by "mat".

xwest
"""

import logging
import unicodedata
from typing import Callable, List, Optional, Union

from .tokens import Token, TokenKind, Position, KEYWORDS, OPERATORS
from .errors import create_illegal_token_error, create_decode_error

logger = logging.getLogger(__name__)

# Returned by _peek for a NUL code point so that it never looks like EOF.
_ERROR_RUNE = "\ufffd"

_LATIN1_SPACE = "\t\n\v\f\r \x85\xa0"


def is_space(char: str) -> bool:
    if not char:
        return False
    if char in _LATIN1_SPACE:
        return True
    if ord(char) <= 0xff:
        return False
    return char.isspace()


def is_word_start(char: str) -> bool:
    return char == "_" or (char != "" and unicodedata.category(char).startswith("L"))


def is_word_char(char: str) -> bool:
    return is_word_start(char) or (char != "" and unicodedata.category(char) == "Nd")


class Lexer:
    """
    dp lexical analyzer.

    Converts source text into a list of tokens. The first error is fatal:
    there is no recovery and no partial result.
    """

    def __init__(self, source: Union[str, bytes], path: str = "",
                 position: Optional[Position] = None):
        """
        Initialize the lexer with source code.

        Args:
            source: Source text, or UTF-8 encoded bytes
            path: Name of the source file for error reporting
            position: Position of the first character (defaults to the
                start of the file named by path)
        """
        self.start = position if position is not None else Position.location(path)
        self.source = source
        self.text = ""
        self.index = 0
        self.position = self.start

        self._rules: List[Callable[[], Optional[Token]]] = [
            self._tokenize_space,
            self._tokenizer(TokenKind.NEWLINE, "\n"),
            self._tokenize_comment,
        ]
        self._rules.extend(
            self._tokenizer(kind, keyword, guard_word=True)
            for keyword, kind in KEYWORDS.items()
        )
        self._rules.extend([
            self._tokenize_word,
            self._tokenize_integer,
            self._quote_tokenizer(TokenKind.CHARACTER, "'"),
            self._quote_tokenizer(TokenKind.STRING, '"'),
            self._quote_tokenizer(TokenKind.STRING, "`"),
        ])
        self._rules.extend(
            self._tokenizer(kind, symbol)
            for symbol, kind in OPERATORS.items()
        )

    def tokenize(self) -> List[Token]:
        """
        Tokenize the entire source text.

        Returns:
            List of tokens (empty for empty input)

        Raises:
            LexerError: on invalid UTF-8 or when no rule matches
        """
        self.text = self._decode()
        self.index = 0
        self.position = self.start

        tokens: List[Token] = []

        while self._peek():
            for rule in self._rules:
                start_index, start_position = self.index, self.position
                token = rule()
                if token is not None:
                    tokens.append(token)
                    break
                self.index, self.position = start_index, start_position
            else:
                raise create_illegal_token_error(self.position)

        logger.debug("%s: %d tokens", self.start.path or "<input>", len(tokens))
        return tokens

    def _decode(self) -> str:
        if isinstance(self.source, str):
            # Lone surrogates have no UTF-8 encoding
            try:
                self.source.encode("utf-8")
            except UnicodeEncodeError as e:
                raise create_decode_error(self.start.after(self.source[:e.start])) from e
            return self.source

        try:
            return self.source.decode("utf-8")
        except UnicodeDecodeError as e:
            valid = self.source[:e.start].decode("utf-8")
            raise create_decode_error(self.start.after(valid)) from e

    # ========================================================================
    # Cursor
    # ========================================================================

    def _peek(self) -> str:
        """Next character, "" at EOF. NUL is returned as U+FFFD."""
        if self.index >= len(self.text):
            return ""
        char = self.text[self.index]
        if char == "\0":
            return _ERROR_RUNE
        return char

    def _advance(self):
        char = self.text[self.index]
        self.index += 1

        p = self.position
        if char == "\n":
            self.position = Position(p.path, p.line + 1, 1, p.byte_offset + 1)
        else:
            self.position = Position(p.path, p.line, p.column + 1,
                                     p.byte_offset + len(char.encode("utf-8")))

    def _make_token(self, kind: TokenKind, start_index: int, start: Position) -> Optional[Token]:
        text = self.text[start_index:self.index]
        if not text:
            return None
        return Token(start, kind, text)

    # ========================================================================
    # Rules
    # ========================================================================

    def _tokenize_space(self) -> Optional[Token]:
        start_index, start = self.index, self.position

        while True:
            char = self._peek()
            if char == "" or char == "\n" or not is_space(char):
                return self._make_token(TokenKind.SPACE, start_index, start)
            self._advance()

    def _tokenize_comment(self) -> Optional[Token]:
        start_index, start = self.index, self.position

        for _ in range(2):
            if self._peek() != "/":
                return None
            self._advance()

        while self._peek() not in ("\n", ""):
            self._advance()

        return self._make_token(TokenKind.COMMENT, start_index, start)

    def _tokenize_word(self) -> Optional[Token]:
        start_index, start = self.index, self.position

        if not is_word_start(self._peek()):
            return None

        self._advance()
        while is_word_char(self._peek()):
            self._advance()

        return self._make_token(TokenKind.WORD, start_index, start)

    def _tokenize_integer(self) -> Optional[Token]:
        start_index, start = self.index, self.position

        while True:
            char = self._peek()
            if char == "" or unicodedata.category(char) != "Nd":
                return self._make_token(TokenKind.INTEGER, start_index, start)
            self._advance()

    def _quote_tokenizer(self, kind: TokenKind, quote: str) -> Callable[[], Optional[Token]]:
        def tokenize_quoted() -> Optional[Token]:
            start_index, start = self.index, self.position

            if self._peek() != quote:
                return None
            self._advance()

            while True:
                char = self._peek()
                if char == "":
                    return None
                self._advance()

                if char == "\\":
                    if self._peek() == "":
                        return None
                    self._advance()
                elif char == quote:
                    return self._make_token(kind, start_index, start)

        return tokenize_quoted

    def _tokenizer(self, kind: TokenKind, literal: str,
                   guard_word: bool = False) -> Callable[[], Optional[Token]]:
        def tokenize_literal() -> Optional[Token]:
            start_index, start = self.index, self.position

            if not self.text.startswith(literal, self.index):
                return None
            for _ in literal:
                self._advance()

            if guard_word and is_word_char(self._peek()):
                return None

            return self._make_token(kind, start_index, start)

        return tokenize_literal


def tokenize(position: Position, text: Union[str, bytes]) -> List[Token]:
    """
    Tokenize source text starting at the given position.

    Raises:
        LexerError: on invalid UTF-8 or an illegal token
    """
    return Lexer(text, position.path, position).tokenize()


def tokenize_string(source: Union[str, bytes], path: str = "<string>") -> List[Token]:
    """Convenience function to tokenize a string."""
    return tokenize(Position.location(path), source)


def tokenize_file(path: str) -> List[Token]:
    """Convenience function to tokenize a file."""
    with open(path, "rb") as f:
        source = f.read()
    return tokenize(Position.location(path), source)

"""
Test suite for the dp lexer.

Tests cover:
- Rule order and keyword guarding
- Operators and longest-match symbols
- Layout tokens (space, newline, comment)
- Position tracking in code points and bytes
- Fatal errors for illegal input and invalid UTF-8

Author: xwest
"""

import unittest
import sys
import os
import tempfile

# Add the project root to the Python path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, project_root)

from dp.lexer import Lexer, LexerError, Position, TokenKind, tokenize, tokenize_string, tokenize_file


class TestLexer(unittest.TestCase):
    """Test cases for the lexer."""

    def _kinds(self, source):
        return [token.kind for token in tokenize_string(source)]

    def _texts(self, source):
        return [token.text for token in tokenize_string(source)]

    def test_empty_input(self):
        """Empty input produces no tokens."""
        self.assertEqual(tokenize_string(""), [])
        self.assertEqual(tokenize_string(b""), [])

    def test_simple_definition(self):
        self.assertEqual(self._kinds("a := 1"), [
            TokenKind.WORD, TokenKind.SPACE, TokenKind.DEFINE, TokenKind.SPACE, TokenKind.INTEGER,
        ])

    def test_every_character_is_covered(self):
        """Concatenated token texts reproduce the input."""
        source = "pub f(a int) {\n\t// note\n\tx := \"s\" + 'c'\n}\n"
        self.assertEqual("".join(self._texts(source)), source)

    def test_keywords(self):
        self.assertEqual(self._kinds("for"), [TokenKind.FOR])
        self.assertEqual(self._kinds("clone"), [TokenKind.CLONE])
        self.assertEqual(self._kinds("auto"), [TokenKind.AUTO])

    def test_keyword_prefix_is_a_word(self):
        """A keyword followed by word characters is a single word."""
        self.assertEqual(self._kinds("format"), [TokenKind.WORD])
        self.assertEqual(self._kinds("if2"), [TokenKind.WORD])
        self.assertEqual(self._kinds("nil_"), [TokenKind.WORD])

    def test_keyword_followed_by_symbol(self):
        self.assertEqual(self._kinds("if("), [TokenKind.IF, TokenKind.PAREN_LEFT])

    def test_pub_is_a_word(self):
        self.assertEqual(self._kinds("pub"), [TokenKind.WORD])

    def test_operators_longest_first(self):
        self.assertEqual(self._kinds("&&"), [TokenKind.LOGICAL_AND])
        self.assertEqual(self._kinds("&^"), [TokenKind.AND_NOT])
        self.assertEqual(self._kinds("&"), [TokenKind.AMPERSAND])
        self.assertEqual(self._kinds("<="), [TokenKind.LESS_OR_EQUAL])
        self.assertEqual(self._kinds("<<"), [TokenKind.SHIFT_LEFT])
        self.assertEqual(self._kinds("::"), [TokenKind.COLONS])
        self.assertEqual(self._kinds(":="), [TokenKind.DEFINE])
        self.assertEqual(self._kinds(":"), [TokenKind.COLON])

    def test_adjacent_operators(self):
        self.assertEqual(self._kinds("&&&"), [TokenKind.LOGICAL_AND, TokenKind.AMPERSAND])
        self.assertEqual(self._kinds("!="), [TokenKind.NOT_EQUAL])
        self.assertEqual(self._kinds("!x"), [TokenKind.EXCLAMATION, TokenKind.WORD])

    def test_comment_runs_to_end_of_line(self):
        tokens = tokenize_string("x // hello\ny")
        self.assertEqual([t.kind for t in tokens], [
            TokenKind.WORD, TokenKind.SPACE, TokenKind.COMMENT, TokenKind.NEWLINE, TokenKind.WORD,
        ])
        self.assertEqual(tokens[2].text, "// hello")

    def test_single_slash_is_division(self):
        self.assertEqual(self._kinds("a/b"), [TokenKind.WORD, TokenKind.SLASH, TokenKind.WORD])

    def test_space_excludes_newline(self):
        self.assertEqual(self._texts(" \t\n "), [" \t", "\n", " "])

    def test_strings(self):
        tokens = tokenize_string('"a\\"b" `raw`')
        self.assertEqual(tokens[0].kind, TokenKind.STRING)
        self.assertEqual(tokens[0].text, '"a\\"b"')
        self.assertEqual(tokens[2].kind, TokenKind.STRING)
        self.assertEqual(tokens[2].text, "`raw`")

    def test_character(self):
        tokens = tokenize_string("'\\n'")
        self.assertEqual(len(tokens), 1)
        self.assertEqual(tokens[0].kind, TokenKind.CHARACTER)

    def test_integer_then_word(self):
        self.assertEqual(self._texts("123abc"), ["123", "abc"])
        self.assertEqual(self._kinds("123abc"), [TokenKind.INTEGER, TokenKind.WORD])

    def test_word_with_digits_and_underscore(self):
        self.assertEqual(self._kinds("_x1"), [TokenKind.WORD])

    def test_unicode_word(self):
        self.assertEqual(self._kinds("äö"), [TokenKind.WORD])

    def test_positions(self):
        tokens = tokenize(Position.location("t.dp"), "a\nbc")
        self.assertEqual(tokens[0].position, Position("t.dp", 1, 1, 0))
        self.assertEqual(tokens[1].position, Position("t.dp", 1, 2, 1))
        self.assertEqual(tokens[2].position, Position("t.dp", 2, 1, 2))
        self.assertEqual(tokens[2].end_position, Position("t.dp", 2, 3, 4))

    def test_positions_count_code_points_and_bytes(self):
        tokens = tokenize_string("ä x")
        self.assertEqual(tokens[1].position.column, 2)
        self.assertEqual(tokens[1].position.byte_offset, 2)
        self.assertEqual(tokens[2].position.column, 3)
        self.assertEqual(tokens[2].position.byte_offset, 3)

    def test_bytes_input(self):
        self.assertEqual(self._texts(b"x = 1"), ["x", " ", "=", " ", "1"])

    def test_lexer_class(self):
        tokens = Lexer("a b", "file.dp").tokenize()
        self.assertEqual(len(tokens), 3)
        self.assertEqual(tokens[0].position.path, "file.dp")

    def test_tokenize_file(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "a.dp")
            with open(path, "wb") as f:
                f.write(b"if x")
            tokens = tokenize_file(path)

        self.assertEqual(tokens[0].kind, TokenKind.IF)
        self.assertEqual(tokens[2].position.path, path)


class TestLexerErrors(unittest.TestCase):
    """Test cases for lexer failures."""

    def test_illegal_token(self):
        with self.assertRaises(LexerError) as cm:
            tokenize(Position.location("t.dp"), "x @")

        err = cm.exception
        self.assertEqual(err.code, "L001")
        self.assertEqual(err.message, "illegal token")
        self.assertEqual(err.position.line, 1)
        self.assertEqual(err.position.column, 3)
        self.assertEqual(str(err), "t.dp:0001:003: illegal token")

    def test_unterminated_string(self):
        with self.assertRaises(LexerError) as cm:
            tokenize_string('x = "abc')
        self.assertEqual(cm.exception.position.column, 5)

    def test_nul_is_illegal(self):
        with self.assertRaises(LexerError):
            tokenize_string("a\0")

    def test_invalid_utf8(self):
        with self.assertRaises(LexerError) as cm:
            tokenize(Position.location("t.dp"), b"ab\xff")

        err = cm.exception
        self.assertEqual(err.code, "L002")
        self.assertEqual(err.message, "invalid UTF-8 encoding")
        self.assertEqual(err.position.column, 3)
        self.assertEqual(err.position.byte_offset, 2)

    def test_invalid_utf8_on_later_line(self):
        with self.assertRaises(LexerError) as cm:
            tokenize_string(b"a\n\xc3(")
        self.assertEqual(cm.exception.position.line, 2)
        self.assertEqual(cm.exception.position.column, 1)

    def test_lone_surrogate_in_text(self):
        """Text that has no UTF-8 encoding is a decode error."""
        with self.assertRaises(LexerError) as cm:
            tokenize_string("x // \ud800")

        err = cm.exception
        self.assertEqual(err.code, "L002")
        self.assertEqual(err.position.column, 6)
        self.assertEqual(err.position.byte_offset, 5)


if __name__ == '__main__':
    unittest.main()

"""
Test suite for the CPL lexer.

Tests cover:
- Punctuation, operators, keywords and literals
- Line and column tracking
- Lexical diagnostics and recovery

Author: xwest
"""

import unittest
import sys
import os

# Add the project root to the Python path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, project_root)

from cpl.lexer import Lexer, Token, TokenType, SourceLocation, tokenize_string
from cpl.lexer.errors import ERROR_CODES


def types_of(tokens):
    return [token.type for token in tokens]


class TestLexer(unittest.TestCase):
    """Test cases for the lexer."""

    def _scan(self, code: str):
        lexer = Lexer(code, "test.cpl")
        tokens = lexer.tokenize()
        return tokens, lexer.errors

    def test_single_character_tokens(self):
        tokens, errors = self._scan("(){},.-+;*:/")

        self.assertEqual(errors, [])
        self.assertEqual(types_of(tokens), [
            TokenType.LEFT_PAREN, TokenType.RIGHT_PAREN,
            TokenType.LEFT_BRACE, TokenType.RIGHT_BRACE,
            TokenType.COMMA, TokenType.DOT, TokenType.MINUS, TokenType.PLUS,
            TokenType.SEMICOLON, TokenType.STAR, TokenType.COLON, TokenType.SLASH,
            TokenType.EOF,
        ])

    def test_equal_suffixed_operators(self):
        tokens, _ = self._scan("! != = == < <= > >=")

        self.assertEqual(types_of(tokens)[:-1], [
            TokenType.BANG, TokenType.BANG_EQUAL,
            TokenType.EQUAL, TokenType.EQUAL_EQUAL,
            TokenType.LESS, TokenType.LESS_EQUAL,
            TokenType.GREATER, TokenType.GREATER_EQUAL,
        ])
        self.assertEqual(tokens[1].lexeme, "!=")

    def test_keywords_and_identifiers(self):
        tokens, _ = self._scan("let letter fn fn1 _private while whileTrue nil")

        self.assertEqual(types_of(tokens)[:-1], [
            TokenType.LET, TokenType.IDENTIFIER, TokenType.FN, TokenType.IDENTIFIER,
            TokenType.IDENTIFIER, TokenType.WHILE, TokenType.IDENTIFIER, TokenType.NIL,
        ])
        self.assertTrue(tokens[0].is_keyword)
        self.assertFalse(tokens[1].is_keyword)

    def test_all_keywords(self):
        source = ("and class else false fn for if nil or print return super "
                  "this true let while break continue")
        tokens, _ = self._scan(source)

        self.assertNotIn(TokenType.IDENTIFIER, types_of(tokens))
        self.assertEqual(len(tokens), 19)

    def test_number_literals(self):
        tokens, _ = self._scan("42 3.14 7.")

        self.assertEqual([t.literal for t in tokens[:-1]], [42.0, 3.14, 7.0])
        self.assertTrue(all(isinstance(t.literal, float) for t in tokens[:-1]))
        self.assertEqual(tokens[1].lexeme, "3.14")
        self.assertTrue(tokens[0].is_literal)

    def test_number_with_two_decimal_points(self):
        tokens, errors = self._scan("1.2.3")

        self.assertEqual(errors, [])
        self.assertEqual(types_of(tokens), [
            TokenType.NUMBER, TokenType.DOT, TokenType.NUMBER, TokenType.EOF,
        ])
        self.assertEqual(tokens[0].literal, 1.2)
        self.assertEqual(tokens[2].literal, 3.0)

    def test_string_literal(self):
        tokens, _ = self._scan('print "hello world";')

        string = tokens[1]
        self.assertEqual(string.type, TokenType.STRING)
        self.assertEqual(string.lexeme, '"hello world"')
        self.assertEqual(string.literal, "hello world")

    def test_string_has_no_escapes(self):
        tokens, _ = self._scan(r'"a\n"')

        self.assertEqual(tokens[0].literal, "a\\n")

    def test_multiline_string_tracks_lines(self):
        source = 'let s = "a\nb";\nprint s;'
        tokens, errors = self._scan(source)

        self.assertEqual(errors, [])
        string, semicolon, print_kw = tokens[3], tokens[4], tokens[5]
        self.assertEqual(string.literal, "a\nb")
        self.assertEqual((string.line, string.column), (1, 9))
        self.assertEqual((semicolon.line, semicolon.column), (2, 3))
        self.assertEqual((print_kw.line, print_kw.column), (3, 1))

    def test_column_tracking(self):
        tokens, _ = self._scan("let x = 10;\n  print x;")

        positions = [(t.line, t.column) for t in tokens]
        self.assertEqual(positions, [
            (1, 1), (1, 5), (1, 7), (1, 9), (1, 11),
            (2, 3), (2, 9), (2, 10),
            (2, 11),
        ])

    def test_tabs_and_carriage_returns_advance_columns(self):
        tokens, _ = self._scan("\t\r a")

        self.assertEqual((tokens[0].line, tokens[0].column), (1, 4))

    def test_lexemes_reconstruct_source(self):
        source = 'fn add(a, b) {\n  return a + b;\n}\nprint add(1.5, "x y");\n'
        tokens, _ = self._scan(source)

        for token in tokens[:-1]:
            start = token.location.offset
            self.assertEqual(source[start:start + len(token.lexeme)], token.lexeme)

        # Between tokens there is only whitespace
        pos = 0
        for token in tokens[:-1]:
            self.assertEqual(source[pos:token.location.offset].strip(), "")
            pos = token.location.offset + len(token.lexeme)
        self.assertEqual(source[pos:].strip(), "")

    def test_line_comments(self):
        tokens, _ = self._scan("// comment\nprint 1; // trailing\n// last")

        self.assertEqual(types_of(tokens), [
            TokenType.PRINT, TokenType.NUMBER, TokenType.SEMICOLON, TokenType.EOF,
        ])
        self.assertEqual(tokens[0].line, 2)

    def test_eof_token_position(self):
        tokens, _ = self._scan("a\nbc")

        eof = tokens[-1]
        self.assertEqual(eof.type, TokenType.EOF)
        self.assertEqual(eof.lexeme, "")
        self.assertEqual((eof.line, eof.column), (2, 3))

    def test_empty_source(self):
        tokens, errors = self._scan("")

        self.assertEqual(types_of(tokens), [TokenType.EOF])
        self.assertEqual(errors, [])


class TestLexerErrors(unittest.TestCase):
    """Lexical diagnostics never stop the scan."""

    def test_unexpected_character_is_skipped(self):
        lexer = Lexer("let @ x;")
        tokens = lexer.tokenize()

        self.assertTrue(lexer.has_errors())
        self.assertEqual(len(lexer.errors), 1)
        self.assertEqual(lexer.errors[0].code, "L001")
        self.assertIn("'@'", lexer.errors[0].message)
        self.assertEqual(str(lexer.errors[0]), "[line 1:column 5]: Unexpected character '@'.")

        self.assertEqual(types_of(tokens), [
            TokenType.LET, TokenType.IDENTIFIER, TokenType.SEMICOLON, TokenType.EOF,
        ])
        # The skipped character still occupies a column
        self.assertEqual(tokens[1].column, 7)

    def test_several_unexpected_characters(self):
        lexer = Lexer("#\n$ ok")
        tokens = lexer.tokenize()

        self.assertEqual([e.line for e in lexer.errors], [1, 2])
        self.assertEqual(tokens[0].lexeme, "ok")

    def test_unterminated_string(self):
        lexer = Lexer('print "abc\nde')
        tokens = lexer.tokenize()

        self.assertEqual(len(lexer.errors), 1)
        error = lexer.errors[0]
        self.assertEqual(error.code, "L002")
        self.assertEqual((error.line, error.column), (1, 7))
        self.assertEqual(types_of(tokens), [TokenType.PRINT, TokenType.EOF])
        self.assertEqual(tokens[-1].line, 2)

    def test_number_out_of_range(self):
        lexer = Lexer("print " + "9" * 400 + ";")
        tokens = lexer.tokenize()

        self.assertEqual(len(lexer.errors), 1)
        error = lexer.errors[0]
        self.assertEqual(error.code, "L003")
        self.assertEqual((error.line, error.column), (1, 7))
        self.assertEqual(str(error), "[line 1:column 7]: Number literal '99999999999999999999...' is too large.")
        self.assertEqual(types_of(tokens), [TokenType.PRINT, TokenType.SEMICOLON, TokenType.EOF])

    def test_largest_numbers_are_accepted(self):
        lexer = Lexer("1" + "0" * 308)
        tokens = lexer.tokenize()

        self.assertEqual(lexer.errors, [])
        self.assertEqual(tokens[0].literal, 1e308)

    def test_error_codes_are_catalogued(self):
        lexer = Lexer('@ ' + "9" * 400 + ' "open')
        lexer.tokenize()

        codes = [error.code for error in lexer.errors]
        self.assertEqual(codes, ["L001", "L003", "L002"])
        self.assertEqual(set(codes), set(ERROR_CODES))

    def test_tokenize_again_resets_state(self):
        lexer = Lexer("@")
        lexer.tokenize()
        lexer.tokenize()

        self.assertEqual(len(lexer.errors), 1)


class TestTokens(unittest.TestCase):

    def test_equality_ignores_location(self):
        a = Token(TokenType.IDENTIFIER, "x", None, SourceLocation("a", 1, 1, 0))
        b = Token(TokenType.IDENTIFIER, "x", None, SourceLocation("b", 9, 4, 30))

        self.assertEqual(a, b)
        self.assertEqual(hash(a), hash(b))

    def test_tokenize_string_helper(self):
        tokens = tokenize_string("x", "file.cpl")

        self.assertEqual(tokens[0].location.filename, "file.cpl")
        self.assertEqual(str(tokens[0].location), "file.cpl:1:1")


if __name__ == '__main__':
    unittest.main()

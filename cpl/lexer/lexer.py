"""
CPL Lexer - turns source text into tokens

Single left-to-right pass with one character of lookahead. The lexer never
gives up: characters it does not understand are reported and skipped, and
the token list always ends with an EOF token.

xwest
"""

import logging
import math
from typing import List

from .tokens import (
    Token, TokenType, SourceLocation, KEYWORDS, SINGLE_CHAR_TOKENS,
    EQUAL_SUFFIXED_TOKENS
)
from .errors import (
    Diagnostic, LexerError, create_unexpected_character_error,
    create_unterminated_string_error, create_number_out_of_range_error
)

logger = logging.getLogger(__name__)


class Lexer:
    """
    CPL lexical analyzer.

    Converts source code text into a list of tokens, tracking line and
    column for every token and collecting lexical diagnostics.
    """

    def __init__(self, source: str, filename: str = "<string>"):
        """
        Initialize the lexer with source code.

        Args:
            source: Source code string
            filename: Name of source file for error reporting
        """
        self.source = source
        self.filename = filename
        self.pos = 0
        self.line = 1
        self.column = 1
        self.tokens: List[Token] = []
        self.errors: List[Diagnostic] = []

    def tokenize(self) -> List[Token]:
        """
        Tokenize the entire source code.

        Returns:
            List of tokens including EOF token
        """
        self.pos = 0
        self.line = 1
        self.column = 1
        self.tokens = []
        self.errors = []

        while True:
            self._skip_whitespace_and_comments()

            if self._is_at_end():
                break

            try:
                self.tokens.append(self._next_token())
            except LexerError as e:
                # The offending text has already been consumed
                self.errors.append(e.diagnostic)

        self.tokens.append(Token(TokenType.EOF, "", None, self._location()))

        logger.debug("%s: scanned %d tokens, %d lexical errors",
                     self.filename, len(self.tokens), len(self.errors))
        return self.tokens

    def _next_token(self) -> Token:
        """Scan one token starting at the current position."""
        start_location = self._location()
        current_char = self._advance()

        if current_char in SINGLE_CHAR_TOKENS:
            return self._make_token(SINGLE_CHAR_TOKENS[current_char], start_location)

        if current_char in EQUAL_SUFFIXED_TOKENS:
            bare, suffixed = EQUAL_SUFFIXED_TOKENS[current_char]
            token_type = suffixed if self._match('=') else bare
            return self._make_token(token_type, start_location)

        if current_char == '/':
            return self._make_token(TokenType.SLASH, start_location)

        if current_char == '"':
            return self._tokenize_string(start_location)

        if self._is_digit(current_char):
            return self._tokenize_number(start_location)

        if self._is_identifier_start(current_char):
            return self._tokenize_identifier_or_keyword(start_location)

        raise create_unexpected_character_error(current_char, start_location)

    def _tokenize_string(self, start: SourceLocation) -> Token:
        """Tokenize a string literal; the opening quote is already consumed."""
        while not self._is_at_end() and self._peek() != '"':
            self._advance()

        if self._is_at_end():
            raise create_unterminated_string_error(start)

        self._advance()  # Skip closing quote

        lexeme = self.source[start.offset:self.pos]
        return Token(TokenType.STRING, lexeme, lexeme[1:-1], start)

    def _tokenize_number(self, start: SourceLocation) -> Token:
        """Tokenize a number: digits with at most one decimal point."""
        decimal_found = False

        while not self._is_at_end():
            char = self._peek()
            if self._is_digit(char):
                self._advance()
            elif char == '.' and not decimal_found:
                decimal_found = True
                self._advance()
            else:
                break

        lexeme = self.source[start.offset:self.pos]
        value = float(lexeme)
        if not math.isfinite(value):
            raise create_number_out_of_range_error(lexeme, start)
        return Token(TokenType.NUMBER, lexeme, value, start)

    def _tokenize_identifier_or_keyword(self, start: SourceLocation) -> Token:
        """Tokenize an identifier or keyword."""
        while not self._is_at_end() and self._is_identifier_continue(self._peek()):
            self._advance()

        lexeme = self.source[start.offset:self.pos]
        token_type = KEYWORDS.get(lexeme, TokenType.IDENTIFIER)
        return Token(token_type, lexeme, None, start)

    def _skip_whitespace_and_comments(self):
        """Skip whitespace, newlines and // line comments."""
        while not self._is_at_end():
            char = self._peek()

            if char in ' \t\r\n':
                self._advance()
                continue

            if char == '/' and self._peek(1) == '/':
                while not self._is_at_end() and self._peek() != '\n':
                    self._advance()
                continue

            break

    def _make_token(self, token_type: TokenType, start: SourceLocation) -> Token:
        lexeme = self.source[start.offset:self.pos]
        return Token(token_type, lexeme, None, start)

    def _location(self) -> SourceLocation:
        return SourceLocation(self.filename, self.line, self.column, self.pos)

    def _advance(self) -> str:
        """Consume one character, updating line/column. Every character is one column."""
        char = self.source[self.pos]
        self.pos += 1
        if char == '\n':
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        return char

    def _match(self, expected: str) -> bool:
        """Consume the next character if it is the expected one."""
        if self._is_at_end() or self.source[self.pos] != expected:
            return False
        self._advance()
        return True

    def _peek(self, offset: int = 0) -> str:
        """Peek at character ahead without advancing."""
        peek_pos = self.pos + offset
        if peek_pos < len(self.source):
            return self.source[peek_pos]
        return '\0'

    def _is_at_end(self) -> bool:
        return self.pos >= len(self.source)

    @staticmethod
    def _is_digit(char: str) -> bool:
        return '0' <= char <= '9'

    @staticmethod
    def _is_identifier_start(char: str) -> bool:
        return char.isalpha() or char == '_'

    @staticmethod
    def _is_identifier_continue(char: str) -> bool:
        return char.isalnum() or char == '_'

    def has_errors(self) -> bool:
        """Check if lexer encountered any errors."""
        return len(self.errors) > 0


def tokenize_string(source: str, filename: str = "<string>") -> List[Token]:
    """
    Convenience function to tokenize a source string.

    Lexical diagnostics are dropped; use a Lexer instance to inspect them.
    """
    return Lexer(source, filename).tokenize()

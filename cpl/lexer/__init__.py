"""
CPL Lexer Package

Implements the lexical analyzer (tokenizer) for the CPL language.

Key Features:
- Single pass, one character of lookahead
- Line and column tracking for every token
- Non-fatal lexical diagnostics (the scan always completes)

Author: xwest
"""

from .tokens import Token, TokenType, SourceLocation, KEYWORDS
from .lexer import Lexer, tokenize_string
from .errors import Diagnostic, LexerError

__all__ = [
    "Lexer",
    "tokenize_string",
    "Token",
    "TokenType",
    "SourceLocation",
    "KEYWORDS",
    "Diagnostic",
    "LexerError",
]

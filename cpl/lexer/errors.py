"""
Error handling for the CPL lexer.

Provides the Diagnostic record shared by every stage of the front end,
plus the lexer-specific error type and helpers for the common lexical
problems.

Author: xwest
"""

from typing import Optional, Tuple
from dataclasses import dataclass

from .tokens import SourceLocation, TokenType


@dataclass(frozen=True)
class Diagnostic:
    """A problem found in the source (errors, warnings)."""
    message: str
    location: SourceLocation
    severity: str = "error"  # "error", "warning"
    code: Optional[str] = None
    help_text: Optional[str] = None
    expected: Tuple[TokenType, ...] = ()

    @property
    def line(self) -> int:
        return self.location.line

    @property
    def column(self) -> int:
        return self.location.column

    def __str__(self) -> str:
        return f"[line {self.line}:column {self.column}]: {self.message}"

    def render(self) -> str:
        """Long form with code, file location and help text."""
        code = f"[{self.code}] " if self.code else ""
        result = f"{self.severity.upper()}: {code}{self.message}\n"
        result += f"  --> {self.location}\n"

        if self.help_text:
            result += f"  help: {self.help_text}\n"

        return result


class LexerError(Exception):
    """
    Raised inside the lexer when a token cannot be produced.

    The lexer catches it, records the diagnostic and keeps scanning.
    """

    def __init__(
        self,
        message: str,
        location: SourceLocation,
        code: Optional[str] = None,
        help_text: Optional[str] = None,
    ):
        super().__init__(message)
        self.diagnostic = Diagnostic(
            message=message,
            location=location,
            severity="error",
            code=code,
            help_text=help_text,
        )

    def __str__(self) -> str:
        return str(self.diagnostic)


# Common error codes for categorization
ERROR_CODES = {
    "L001": "Unexpected character",
    "L002": "Unterminated string literal",
    "L003": "Number literal out of range",
}


def create_unexpected_character_error(char: str, location: SourceLocation) -> LexerError:
    """Create an error for a character that starts no token."""
    if char.isprintable():
        help_text = f"The character '{char}' is not valid in CPL source code."
    else:
        help_text = f"Non-printable character (Unicode: U+{ord(char):04X}) is not allowed."

    return LexerError(
        message=f"Unexpected character '{char}'.",
        location=location,
        code="L001",
        help_text=help_text,
    )


def create_unterminated_string_error(location: SourceLocation) -> LexerError:
    """Create an error for an unterminated string literal."""
    return LexerError(
        message="Unterminated string.",
        location=location,
        code="L002",
        help_text='String literals must be closed with a matching " quote.',
    )


def create_number_out_of_range_error(lexeme: str, location: SourceLocation) -> LexerError:
    """Create an error for a number literal too large to represent."""
    shown = lexeme if len(lexeme) <= 20 else lexeme[:20] + "..."
    return LexerError(
        message=f"Number literal '{shown}' is too large.",
        location=location,
        code="L003",
        help_text="Number literals must fit in a 64-bit floating point value.",
    )

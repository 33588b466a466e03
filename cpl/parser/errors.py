"""
Error handling for the CPL parser.

ParseError unwinds the recursive descent; the parser turns it into a
Diagnostic at the declaration boundary. Helpers below build the common
syntax errors with consistent codes and wording.

Author: xwest
"""

from typing import Iterable, List, Optional, Sequence

from ..lexer.tokens import Token, TokenType
from ..lexer.errors import Diagnostic


class ParseError(Exception):
    """
    Exception raised when the parser cannot continue the current declaration.

    Contains the diagnostic to report and the offending token.
    """

    def __init__(
        self,
        message: str,
        token: Token,
        code: Optional[str] = None,
        help_text: Optional[str] = None,
        expected: Sequence[TokenType] = (),
    ):
        super().__init__(message)
        self.diagnostic = Diagnostic(
            message=message,
            location=token.location,
            severity="error",
            code=code,
            help_text=help_text,
            expected=tuple(expected),
        )
        self.token = token

    def __str__(self) -> str:
        return str(self.diagnostic)


class SyntaxErrorRecovery:
    """
    Utilities for error recovery in the parser.

    Used only when the parser runs with ``recover=True``.
    """

    # Token types that begin a new statement
    STATEMENT_STARTS = {
        TokenType.FN,
        TokenType.LET,
        TokenType.FOR,
        TokenType.IF,
        TokenType.WHILE,
        TokenType.PRINT,
        TokenType.RETURN,
        TokenType.BREAK,
        TokenType.CONTINUE,
        TokenType.CLASS,
    }

    @staticmethod
    def synchronize_to_statement_boundary(
        tokens: List[Token], current_pos: int, inside_block: bool = False
    ) -> int:
        """
        Skip tokens until just after a ';' or just before a statement keyword.

        Inside a block a '}' is also a boundary: parsing resumes on it so the
        enclosing block can close, even when it is the offending token.

        Returns the position to resume parsing from.
        """
        if inside_block and tokens[current_pos].type == TokenType.RIGHT_BRACE:
            return current_pos

        # Otherwise always make progress past the offending token
        if current_pos < len(tokens) - 1:
            current_pos += 1

        while current_pos < len(tokens):
            token = tokens[current_pos]
            if token.type == TokenType.EOF:
                return current_pos
            if tokens[current_pos - 1].type == TokenType.SEMICOLON:
                return current_pos
            if token.type in SyntaxErrorRecovery.STATEMENT_STARTS:
                return current_pos
            if inside_block and token.type == TokenType.RIGHT_BRACE:
                return current_pos
            current_pos += 1

        return current_pos


# Common parser error codes for categorization
PARSER_ERROR_CODES = {
    "P001": "Unexpected token",
    "P010": "Unexpected end of input",
    "P013": "Too many arguments",
    "P014": "Too many parameters",
    "P015": "Invalid assignment target",
    "P020": "Nesting too deep",
}


def _describe(types: Iterable[TokenType]) -> str:
    names = [t.name for t in types]
    if len(names) == 1:
        return names[0]
    return "one of " + ", ".join(names)


def create_unexpected_token_error(
    message: str, expected: Sequence[TokenType], found: Token
) -> ParseError:
    """
    Create an error for a token that does not fit the grammar.

    ``message`` is the grammar-level explanation ("Expect ';' after value.").
    An EOF token produces the distinct unexpected-end-of-input error.
    """
    if found.type == TokenType.EOF:
        return create_unexpected_eof_error(message, expected, found)

    return ParseError(
        message=f"{message} Expected {_describe(expected)}, found {found.type.name} '{found.lexeme}'.",
        token=found,
        code="P001",
        help_text=f"The parser expected to see {_describe(expected)} at this position.",
        expected=expected,
    )


def create_unexpected_eof_error(
    message: str, expected: Sequence[TokenType], found: Token
) -> ParseError:
    """Create an error for running out of tokens."""
    return ParseError(
        message=f"{message} Unexpected end of input, expected {_describe(expected)}.",
        token=found,
        code="P010",
        help_text="The parser reached the end of the input in the middle of a statement.",
        expected=expected,
    )


def create_too_many_arguments_error(token: Token, limit: int) -> ParseError:
    return ParseError(
        message=f"Cannot have more than {limit} arguments.",
        token=token,
        code="P013",
    )


def create_too_many_parameters_error(token: Token, limit: int) -> ParseError:
    return ParseError(
        message=f"Cannot have more than {limit} parameters.",
        token=token,
        code="P014",
    )


def create_invalid_assignment_error(equals: Token) -> ParseError:
    return ParseError(
        message="Invalid assignment target.",
        token=equals,
        code="P015",
        help_text="Only a variable name can appear on the left of '='.",
        expected=(TokenType.IDENTIFIER,),
    )


def create_nesting_too_deep_error(token: Token, limit: Optional[int] = None) -> ParseError:
    """Create an error for code nested deeper than the parser will follow."""
    help_text = "Split the nested code into smaller pieces or intermediate variables."
    if limit is not None:
        help_text = f"At most {limit} levels are allowed. " + help_text
    return ParseError(
        message="Expression or statement nested too deeply.",
        token=token,
        code="P020",
        help_text=help_text,
    )

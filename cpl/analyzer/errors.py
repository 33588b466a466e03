"""
Semantic analysis error handling for CPL.

Covers name resolution (undefined, uninitialized and redeclared variables)
and statement context (break, continue and return outside their construct).

Author: xwest
"""

from typing import Optional

from ..lexer.tokens import SourceLocation
from ..lexer.errors import Diagnostic
from ..parser.ast_nodes import ASTNode


class SemanticError(Exception):
    """
    Exception raised when semantic analysis finds a problem.

    Contains the diagnostic to report and, when known, the offending node.
    """

    def __init__(
        self,
        message: str,
        location: SourceLocation,
        node: Optional[ASTNode] = None,
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
        self.node = node

    def __str__(self) -> str:
        return str(self.diagnostic)


# Semantic error codes for categorization
SEMANTIC_ERROR_CODES = {
    # Symbol resolution errors
    "S010": "Undefined variable",
    "S011": "Variable redeclaration",
    "S015": "Uninitialized variable",

    # Control flow errors
    "S062": "Invalid break/continue",
    "S064": "Return outside function",

    # Resource limits
    "S070": "Program nested too deeply",
}


def create_undefined_variable_error(
    name: str,
    location: SourceLocation,
    node: Optional[ASTNode] = None,
) -> SemanticError:
    """Create an undefined variable error."""
    return SemanticError(
        message=f"Undefined variable '{name}'.",
        location=location,
        node=node,
        code="S010",
        help_text=f"Declare '{name}' with 'let' before using or assigning it.",
    )


def create_redeclaration_error(
    name: str,
    location: SourceLocation,
    node: Optional[ASTNode] = None,
) -> SemanticError:
    return SemanticError(
        message=f"Variable '{name}' already declared in this scope.",
        location=location,
        node=node,
        code="S011",
        help_text="Shadowing is only allowed in a nested block.",
    )


def create_uninitialized_variable_error(
    name: str,
    location: SourceLocation,
    node: Optional[ASTNode] = None,
) -> SemanticError:
    return SemanticError(
        message=f"Variable '{name}' is used before being initialized.",
        location=location,
        node=node,
        code="S015",
        help_text=f"Assign a value to '{name}' before reading it.",
    )


def create_invalid_loop_control_error(
    keyword: str,
    location: SourceLocation,
    node: Optional[ASTNode] = None,
) -> SemanticError:
    return SemanticError(
        message=f"Cannot use '{keyword}' outside of a loop.",
        location=location,
        node=node,
        code="S062",
    )


def create_return_outside_function_error(
    location: SourceLocation,
    node: Optional[ASTNode] = None,
) -> SemanticError:
    return SemanticError(
        message="Cannot return from top-level code.",
        location=location,
        node=node,
        code="S064",
    )


def create_nesting_too_deep_error(
    location: SourceLocation,
    node: Optional[ASTNode] = None,
) -> SemanticError:
    return SemanticError(
        message="Program nested too deeply to analyze.",
        location=location,
        node=node,
        code="S070",
        help_text="Split the nested code into smaller pieces or intermediate variables.",
    )

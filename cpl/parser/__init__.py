"""
CPL Parser Package

Implements a recursive descent parser for the CPL language. Produces an
immutable Abstract Syntax Tree whose tokens keep their source locations.

Key Features:
- One method per precedence level, left-associative binary chains
- ``for`` loops desugared into blocks and while loops
- Selectable error policy: stop at the first error or synchronize and go on
- Printers for an s-expression view and for canonical source

Author: xwest
"""

from .ast_nodes import *
from .parser import Parser, ParseResult
from .printer import AstPrinter, SourcePrinter, print_ast, to_source
from .errors import ParseError

__all__ = [
    # Core parser
    "Parser", "ParseResult",

    # AST nodes
    "ASTNode", "ASTVisitor", "Statement", "Expression",
    "BinaryOp", "LogicalOp", "Grouping", "Literal", "LiteralType", "UnaryOp",
    "Identifier", "Assignment", "FunctionCall",
    "ExpressionStatement", "PrintStatement", "VariableDecl", "BlockStatement",
    "IfStatement", "WhileLoop", "FunctionDef", "Parameter",
    "ReturnStatement", "BreakStatement", "ContinueStatement",

    # Printers
    "AstPrinter", "SourcePrinter", "print_ast", "to_source",

    # Error handling
    "ParseError",
]

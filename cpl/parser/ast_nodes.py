"""
Abstract Syntax Tree node definitions for CPL.

Expressions and statements are closed sets of immutable dataclasses. A
parent owns its children outright (children live in tuples, there are no
parent pointers), so two trees compare equal exactly when they have the
same shape and the same tokens.

Every node implements ``accept`` and dispatches to the matching method of
an ASTVisitor. The visitor declares one abstract method per node type, so
a visitor that forgets a node kind cannot be instantiated.

Author: xwest
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional, Tuple, Union

from ..lexer.tokens import Token


class LiteralType(Enum):
    """Tag of a literal value."""
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    NIL = "nil"


LiteralValue = Union[str, float, bool, None]


class ASTVisitor(ABC):
    """Abstract visitor interface for traversing AST nodes."""

    # Expressions

    @abstractmethod
    def visit_binary_op(self, node: 'BinaryOp') -> Any: ...

    @abstractmethod
    def visit_logical_op(self, node: 'LogicalOp') -> Any: ...

    @abstractmethod
    def visit_grouping(self, node: 'Grouping') -> Any: ...

    @abstractmethod
    def visit_literal(self, node: 'Literal') -> Any: ...

    @abstractmethod
    def visit_unary_op(self, node: 'UnaryOp') -> Any: ...

    @abstractmethod
    def visit_identifier(self, node: 'Identifier') -> Any: ...

    @abstractmethod
    def visit_assignment(self, node: 'Assignment') -> Any: ...

    @abstractmethod
    def visit_function_call(self, node: 'FunctionCall') -> Any: ...

    # Statements

    @abstractmethod
    def visit_expression_statement(self, node: 'ExpressionStatement') -> Any: ...

    @abstractmethod
    def visit_print_statement(self, node: 'PrintStatement') -> Any: ...

    @abstractmethod
    def visit_variable_decl(self, node: 'VariableDecl') -> Any: ...

    @abstractmethod
    def visit_block_statement(self, node: 'BlockStatement') -> Any: ...

    @abstractmethod
    def visit_if_statement(self, node: 'IfStatement') -> Any: ...

    @abstractmethod
    def visit_while_loop(self, node: 'WhileLoop') -> Any: ...

    @abstractmethod
    def visit_function_def(self, node: 'FunctionDef') -> Any: ...

    @abstractmethod
    def visit_return_statement(self, node: 'ReturnStatement') -> Any: ...

    @abstractmethod
    def visit_break_statement(self, node: 'BreakStatement') -> Any: ...

    @abstractmethod
    def visit_continue_statement(self, node: 'ContinueStatement') -> Any: ...


class ASTNode(ABC):
    """Base class for all AST nodes."""

    @abstractmethod
    def accept(self, visitor: ASTVisitor) -> Any:
        """Accept a visitor (visitor pattern)."""

    @abstractmethod
    def children(self) -> List['ASTNode']:
        """Get all child nodes."""


# ============================================================================
# Expressions
# ============================================================================

class Expression(ASTNode):
    """Base class for expressions."""


@dataclass(frozen=True)
class BinaryOp(Expression):
    """Arithmetic, comparison or equality operation."""
    left: Expression
    operator: Token
    right: Expression

    def accept(self, visitor: ASTVisitor) -> Any:
        return visitor.visit_binary_op(self)

    def children(self) -> List[ASTNode]:
        return [self.left, self.right]


@dataclass(frozen=True)
class LogicalOp(Expression):
    """
    Short-circuiting ``and`` / ``or``.

    Kept apart from BinaryOp so a later evaluator can skip the right side.
    """
    left: Expression
    operator: Token
    right: Expression

    def accept(self, visitor: ASTVisitor) -> Any:
        return visitor.visit_logical_op(self)

    def children(self) -> List[ASTNode]:
        return [self.left, self.right]


@dataclass(frozen=True)
class Grouping(Expression):
    """Parenthesized expression."""
    expression: Expression

    def accept(self, visitor: ASTVisitor) -> Any:
        return visitor.visit_grouping(self)

    def children(self) -> List[ASTNode]:
        return [self.expression]


@dataclass(frozen=True)
class Literal(Expression):
    """Literal value expression."""
    value: LiteralValue
    literal_type: LiteralType

    def accept(self, visitor: ASTVisitor) -> Any:
        return visitor.visit_literal(self)

    def children(self) -> List[ASTNode]:
        return []

    @classmethod
    def number(cls, value: float) -> 'Literal':
        return cls(float(value), LiteralType.NUMBER)

    @classmethod
    def string(cls, value: str) -> 'Literal':
        return cls(value, LiteralType.STRING)

    @classmethod
    def boolean(cls, value: bool) -> 'Literal':
        return cls(value, LiteralType.BOOLEAN)

    @classmethod
    def nil(cls) -> 'Literal':
        return cls(None, LiteralType.NIL)


@dataclass(frozen=True)
class UnaryOp(Expression):
    """Prefix ``!`` or ``-``."""
    operator: Token
    right: Expression

    def accept(self, visitor: ASTVisitor) -> Any:
        return visitor.visit_unary_op(self)

    def children(self) -> List[ASTNode]:
        return [self.right]


@dataclass(frozen=True)
class Identifier(Expression):
    """Variable reference."""
    name: Token

    def accept(self, visitor: ASTVisitor) -> Any:
        return visitor.visit_identifier(self)

    def children(self) -> List[ASTNode]:
        return []


@dataclass(frozen=True)
class Assignment(Expression):
    """Assignment to a named variable."""
    name: Token
    value: Expression

    def accept(self, visitor: ASTVisitor) -> Any:
        return visitor.visit_assignment(self)

    def children(self) -> List[ASTNode]:
        return [self.value]


@dataclass(frozen=True)
class FunctionCall(Expression):
    """Call expression; ``paren`` is the closing parenthesis, used for error positions."""
    callee: Expression
    paren: Token
    arguments: Tuple[Expression, ...]

    def accept(self, visitor: ASTVisitor) -> Any:
        return visitor.visit_function_call(self)

    def children(self) -> List[ASTNode]:
        return [self.callee, *self.arguments]


# ============================================================================
# Statements
# ============================================================================

class Statement(ASTNode):
    """Base class for statements."""


@dataclass(frozen=True)
class ExpressionStatement(Statement):
    expression: Expression

    def accept(self, visitor: ASTVisitor) -> Any:
        return visitor.visit_expression_statement(self)

    def children(self) -> List[ASTNode]:
        return [self.expression]


@dataclass(frozen=True)
class PrintStatement(Statement):
    expression: Expression

    def accept(self, visitor: ASTVisitor) -> Any:
        return visitor.visit_print_statement(self)

    def children(self) -> List[ASTNode]:
        return [self.expression]


@dataclass(frozen=True)
class VariableDecl(Statement):
    """``let`` declaration with optional initializer."""
    name: Token
    initializer: Optional[Expression] = None

    def accept(self, visitor: ASTVisitor) -> Any:
        return visitor.visit_variable_decl(self)

    def children(self) -> List[ASTNode]:
        return [self.initializer] if self.initializer else []


@dataclass(frozen=True)
class BlockStatement(Statement):
    """Block statement containing multiple statements."""
    statements: Tuple[Statement, ...]

    def accept(self, visitor: ASTVisitor) -> Any:
        return visitor.visit_block_statement(self)

    def children(self) -> List[ASTNode]:
        return list(self.statements)


@dataclass(frozen=True)
class IfStatement(Statement):
    """If statement with optional else clause."""
    condition: Expression
    then_branch: Statement
    else_branch: Optional[Statement] = None

    def accept(self, visitor: ASTVisitor) -> Any:
        return visitor.visit_if_statement(self)

    def children(self) -> List[ASTNode]:
        children = [self.condition, self.then_branch]
        if self.else_branch:
            children.append(self.else_branch)
        return children


@dataclass(frozen=True)
class WhileLoop(Statement):
    """While loop statement. ``for`` loops are desugared into this."""
    condition: Expression
    body: Statement

    def accept(self, visitor: ASTVisitor) -> Any:
        return visitor.visit_while_loop(self)

    def children(self) -> List[ASTNode]:
        return [self.condition, self.body]


@dataclass(frozen=True)
class Parameter:
    """Function parameter with an optional type annotation."""
    name: Token
    type_annotation: Optional[Token] = None


@dataclass(frozen=True)
class FunctionDef(Statement):
    """Function definition."""
    name: Token
    params: Tuple[Parameter, ...]
    body: BlockStatement

    def accept(self, visitor: ASTVisitor) -> Any:
        return visitor.visit_function_def(self)

    def children(self) -> List[ASTNode]:
        return [self.body]


@dataclass(frozen=True)
class ReturnStatement(Statement):
    keyword: Token
    value: Optional[Expression] = None

    def accept(self, visitor: ASTVisitor) -> Any:
        return visitor.visit_return_statement(self)

    def children(self) -> List[ASTNode]:
        return [self.value] if self.value else []


@dataclass(frozen=True)
class BreakStatement(Statement):
    keyword: Token

    def accept(self, visitor: ASTVisitor) -> Any:
        return visitor.visit_break_statement(self)

    def children(self) -> List[ASTNode]:
        return []


@dataclass(frozen=True)
class ContinueStatement(Statement):
    keyword: Token

    def accept(self, visitor: ASTVisitor) -> Any:
        return visitor.visit_continue_statement(self)

    def children(self) -> List[ASTNode]:
        return []


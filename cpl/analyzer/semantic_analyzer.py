"""
Main semantic analyzer for CPL.

A single visitor pass over the AST that checks:
- every variable read or assigned is declared in an enclosing scope
- no variable is read before it has been given a value
- no name is declared twice in the same scope
- break/continue appear inside a loop and return inside a function

Author: xwest
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from ..config import CompilerOptions
from ..lexer.errors import Diagnostic
from ..lexer.tokens import SourceLocation, Token
from ..parser.ast_nodes import (
    ASTVisitor, Statement, Expression, BinaryOp, LogicalOp, Grouping, Literal,
    UnaryOp, Identifier, Assignment, FunctionCall, ExpressionStatement,
    PrintStatement, VariableDecl, BlockStatement, IfStatement, WhileLoop,
    FunctionDef, ReturnStatement, BreakStatement, ContinueStatement,
)
from .symbol_table import SymbolTable, ScopeKind
from .errors import (
    SemanticError, create_undefined_variable_error,
    create_uninitialized_variable_error, create_invalid_loop_control_error,
    create_return_outside_function_error, create_nesting_too_deep_error,
)

logger = logging.getLogger(__name__)


@dataclass
class AnalysisResult:
    """Results of semantic analysis."""
    statements: List[Statement]
    symbol_table: SymbolTable
    errors: List[Diagnostic] = field(default_factory=list)

    def has_errors(self) -> bool:
        """Check if analysis found any errors."""
        return len(self.errors) > 0

    @property
    def ok(self) -> bool:
        return not self.errors


class SemanticAnalyzer(ASTVisitor):
    """
    Scope-aware checker for CPL programs.

    Declarations bind names in the innermost scope; blocks and function
    bodies push a scope and pop it on exit. Statements are checked in
    source order, so a name must be declared before the code that uses it.
    """

    def __init__(self, options: Optional[CompilerOptions] = None):
        """Initialize the semantic analyzer."""
        self.options = options or CompilerOptions()
        self.symbol_table = SymbolTable()
        self.errors: List[Diagnostic] = []

        # Analysis state
        self.loop_depth = 0
        self.function_depth = 0
        self.last_location = SourceLocation(self.options.filename, 1, 1, 0)

    def analyze(self, statements: Sequence[Statement]) -> AnalysisResult:
        """
        Check a parsed program.

        Args:
            statements: Top-level statements produced by the parser

        Returns:
            AnalysisResult with the symbol table and any diagnostics
        """
        self.symbol_table = SymbolTable()
        self.errors = []
        self.loop_depth = 0
        self.function_depth = 0
        self.last_location = SourceLocation(self.options.filename, 1, 1, 0)

        for stmt in statements:
            try:
                self._analyze_statement(stmt)
            except SemanticError as e:
                # Only reached when recovery is off
                self.errors.append(e.diagnostic)
                break
            except RecursionError:
                self.errors.append(create_nesting_too_deep_error(self.last_location, stmt).diagnostic)
                # Back at the top level
                self.symbol_table.current_scope = self.symbol_table.global_scope
                self.loop_depth = 0
                self.function_depth = 0
                if not self.options.recover:
                    break

        logger.debug("%s: analyzed %d statements, %d semantic errors",
                     self.options.filename, len(statements), len(self.errors))
        return AnalysisResult(list(statements), self.symbol_table, list(self.errors))

    def _analyze_statement(self, stmt: Statement):
        """Check one statement; in recovery mode record its error and carry on."""
        try:
            stmt.accept(self)
        except SemanticError as e:
            if not self.options.recover:
                raise
            self.errors.append(e.diagnostic)

    def _analyze_expression(self, expr: Expression):
        expr.accept(self)

    def _mark(self, token: Token):
        """Remember the latest source position reached, for errors without a node token."""
        self.last_location = token.location

    def _analyze_in_scope(self, kind: ScopeKind, name: str, statements: Sequence[Statement]):
        self.symbol_table.enter_scope(kind, name)
        try:
            for stmt in statements:
                self._analyze_statement(stmt)
        finally:
            self.symbol_table.exit_scope()

    # Expressions

    def visit_binary_op(self, node: BinaryOp):
        self._mark(node.operator)
        self._analyze_expression(node.left)
        self._analyze_expression(node.right)

    def visit_logical_op(self, node: LogicalOp):
        self._mark(node.operator)
        self._analyze_expression(node.left)
        self._analyze_expression(node.right)

    def visit_grouping(self, node: Grouping):
        self._analyze_expression(node.expression)

    def visit_literal(self, node: Literal):
        pass

    def visit_unary_op(self, node: UnaryOp):
        self._mark(node.operator)
        self._analyze_expression(node.right)

    def visit_identifier(self, node: Identifier):
        self._mark(node.name)
        name = node.name.lexeme
        symbol = self.symbol_table.lookup_symbol(name)

        if symbol is None:
            raise create_undefined_variable_error(name, node.name.location, node)
        if not symbol.is_initialized:
            raise create_uninitialized_variable_error(name, node.name.location, node)

    def visit_assignment(self, node: Assignment):
        self._mark(node.name)
        self._analyze_expression(node.value)

        name = node.name.lexeme
        symbol = self.symbol_table.lookup_symbol(name)
        if symbol is None:
            raise create_undefined_variable_error(name, node.name.location, node)

        symbol.is_initialized = True

    def visit_function_call(self, node: FunctionCall):
        self._mark(node.paren)
        # Callee kind and arity are left to the runtime
        self._analyze_expression(node.callee)
        for argument in node.arguments:
            self._analyze_expression(argument)

    # Statements

    def visit_expression_statement(self, node: ExpressionStatement):
        self._analyze_expression(node.expression)

    def visit_print_statement(self, node: PrintStatement):
        self._analyze_expression(node.expression)

    def visit_variable_decl(self, node: VariableDecl):
        self._mark(node.name)

        # The initializer sees the scope as it was before the declaration
        if node.initializer is not None:
            try:
                self._analyze_expression(node.initializer)
            except SemanticError:
                # Bind anyway so later uses of the name do not repeat the error
                name = node.name.lexeme
                if self.symbol_table.current_scope.lookup_symbol_local(name) is None:
                    self.symbol_table.define_variable(name, node.name.location, True)
                raise

        self.symbol_table.define_variable(
            node.name.lexeme, node.name.location, node.initializer is not None
        )

    def visit_block_statement(self, node: BlockStatement):
        self._analyze_in_scope(ScopeKind.BLOCK, "block", node.statements)

    def visit_if_statement(self, node: IfStatement):
        self._analyze_expression(node.condition)
        self._analyze_statement(node.then_branch)
        if node.else_branch is not None:
            self._analyze_statement(node.else_branch)

    def visit_while_loop(self, node: WhileLoop):
        self._analyze_expression(node.condition)

        self.loop_depth += 1
        try:
            self._analyze_statement(node.body)
        finally:
            self.loop_depth -= 1

    def visit_function_def(self, node: FunctionDef):
        # Bound before the body is checked so the function can call itself
        self.symbol_table.define_function(node.name.lexeme, node.name.location)

        saved_loop_depth = self.loop_depth
        self.loop_depth = 0
        self.function_depth += 1
        self.symbol_table.enter_scope(ScopeKind.FUNCTION, node.name.lexeme)
        try:
            for param in node.params:
                self.symbol_table.define_parameter(param.name.lexeme, param.name.location)
            for stmt in node.body.statements:
                self._analyze_statement(stmt)
        finally:
            self.symbol_table.exit_scope()
            self.function_depth -= 1
            self.loop_depth = saved_loop_depth

    def visit_return_statement(self, node: ReturnStatement):
        if self.function_depth == 0:
            raise create_return_outside_function_error(node.keyword.location, node)
        if node.value is not None:
            self._analyze_expression(node.value)

    def visit_break_statement(self, node: BreakStatement):
        if self.loop_depth == 0:
            raise create_invalid_loop_control_error("break", node.keyword.location, node)

    def visit_continue_statement(self, node: ContinueStatement):
        if self.loop_depth == 0:
            raise create_invalid_loop_control_error("continue", node.keyword.location, node)


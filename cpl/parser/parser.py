"""
CPL Recursive Descent Parser

One method per grammar rule, lowest precedence first:

    expression -> assignment -> logic_or -> logic_and -> equality
               -> comparison -> term -> factor -> unary -> call -> primary

Binary levels loop to build left-associative chains; assignment and unary
recurse into themselves and are right-associative. ``for`` loops are
rewritten into blocks and while loops while parsing.

Author: xwest
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import List, Optional

from ..config import CompilerOptions
from ..lexer.errors import Diagnostic
from ..lexer.tokens import Token, TokenType, SourceLocation
from .ast_nodes import (
    Expression, Statement, BinaryOp, LogicalOp, Grouping, Literal, UnaryOp,
    Identifier, Assignment, FunctionCall, ExpressionStatement, PrintStatement,
    VariableDecl, BlockStatement, IfStatement, WhileLoop, Parameter,
    FunctionDef, ReturnStatement, BreakStatement, ContinueStatement,
)
from .errors import (
    ParseError, SyntaxErrorRecovery, create_unexpected_token_error,
    create_too_many_arguments_error, create_too_many_parameters_error,
    create_invalid_assignment_error, create_nesting_too_deep_error,
)

logger = logging.getLogger(__name__)

# Token types that can start a primary expression, cited when none is found
PRIMARY_START_TYPES = (
    TokenType.FALSE,
    TokenType.TRUE,
    TokenType.NIL,
    TokenType.NUMBER,
    TokenType.STRING,
    TokenType.IDENTIFIER,
    TokenType.LEFT_PAREN,
)

EQUALITY_OPERATORS = (TokenType.BANG_EQUAL, TokenType.EQUAL_EQUAL)
COMPARISON_OPERATORS = (
    TokenType.GREATER, TokenType.GREATER_EQUAL, TokenType.LESS, TokenType.LESS_EQUAL,
)
TERM_OPERATORS = (TokenType.MINUS, TokenType.PLUS)
FACTOR_OPERATORS = (TokenType.SLASH, TokenType.STAR)
UNARY_OPERATORS = (TokenType.BANG, TokenType.MINUS)


@dataclass
class ParseResult:
    """Statements parsed, or the diagnostics explaining why parsing failed."""
    statements: List[Statement] = field(default_factory=list)
    errors: List[Diagnostic] = field(default_factory=list)

    def has_errors(self) -> bool:
        return len(self.errors) > 0

    @property
    def ok(self) -> bool:
        return not self.errors


class Parser:
    """
    CPL recursive descent parser.

    With the default options the parser stops after the first declaration
    that produced a diagnostic. With ``recover=True`` it skips to the next
    statement boundary and keeps going, collecting every diagnostic.
    """

    def __init__(self, tokens: List[Token], options: Optional[CompilerOptions] = None):
        """
        Initialize parser with a list of tokens.

        Args:
            tokens: List of tokens from the lexer, normally ending in EOF
            options: Error policy and limits
        """
        self.options = options or CompilerOptions()
        self.tokens = list(tokens)
        if not self.tokens or self.tokens[-1].type != TokenType.EOF:
            end = self.tokens[-1].location if self.tokens else SourceLocation(
                self.options.filename, 1, 1, 0)
            self.tokens.append(Token(TokenType.EOF, "", None, end))
        self.current = 0
        self.errors: List[Diagnostic] = []

        # Nesting state
        self.depth = 0
        self.block_depth = 0

    def parse(self) -> ParseResult:
        """
        Parse the token stream into a list of top-level statements.

        Returns:
            ParseResult holding the statements, or the diagnostics on failure
        """
        self.current = 0
        self.errors = []
        self.depth = 0
        self.block_depth = 0
        statements: List[Statement] = []

        while not self._is_at_end():
            if self.errors and not self.options.recover:
                break
            try:
                stmt = self._declaration()
            except ParseError as e:
                # Only reached when recovery is off
                self.errors.append(e.diagnostic)
                break
            except RecursionError:
                # The interpreter stack ran out before max_nesting_depth
                self._report(create_nesting_too_deep_error(self._peek()))
                break
            if stmt is not None:
                statements.append(stmt)

        logger.debug("%s: parsed %d statements, %d syntax errors",
                     self.options.filename, len(statements), len(self.errors))
        if self.errors:
            return ParseResult([], list(self.errors))
        return ParseResult(statements, [])

    # ------------------------------------------------------------------
    # Declarations and statements
    # ------------------------------------------------------------------

    def _declaration(self) -> Optional[Statement]:
        """Parse a declaration, recovering at the statement boundary if enabled."""
        try:
            if self._match(TokenType.FN):
                return self._function_declaration()
            if self._match(TokenType.LET):
                return self._variable_declaration()
            return self._statement()
        except ParseError as e:
            if not self.options.recover:
                raise
            self.errors.append(e.diagnostic)
            self.current = SyntaxErrorRecovery.synchronize_to_statement_boundary(
                self.tokens, self.current, inside_block=self.block_depth > 0
            )
            return None

    def _function_declaration(self) -> FunctionDef:
        """fn IDENT ( params? ) block"""
        name = self._consume(TokenType.IDENTIFIER, "Expect function name.")
        self._consume(TokenType.LEFT_PAREN, "Expect '(' after function name.")

        params: List[Parameter] = []
        limit = self.options.max_arguments
        if not self._check(TokenType.RIGHT_PAREN):
            while True:
                if len(params) == limit:
                    self._report(create_too_many_parameters_error(self._peek(), limit))
                params.append(self._parameter())
                if not self._match(TokenType.COMMA):
                    break

        self._consume(TokenType.RIGHT_PAREN, "Expect ')' after parameters.")
        self._consume(TokenType.LEFT_BRACE, "Expect '{' before function body.")
        body = BlockStatement(tuple(self._block()))

        return FunctionDef(name, tuple(params), body)

    def _parameter(self) -> Parameter:
        """IDENT ( ':' IDENT )?"""
        name = self._consume(TokenType.IDENTIFIER, "Expect parameter name.")
        type_annotation = None
        if self._match(TokenType.COLON):
            type_annotation = self._consume(TokenType.IDENTIFIER, "Expect parameter type after ':'.")
        return Parameter(name, type_annotation)

    def _variable_declaration(self) -> VariableDecl:
        """let IDENT ( = expression )? ;"""
        name = self._consume(TokenType.IDENTIFIER, "Expect variable name.")

        initializer = None
        if self._match(TokenType.EQUAL):
            initializer = self._expression()

        self._consume(TokenType.SEMICOLON, "Expect ';' after variable declaration.")
        return VariableDecl(name, initializer)

    def _statement(self) -> Statement:
        if self._match(TokenType.PRINT):
            return self._print_statement()
        if self._match(TokenType.LEFT_BRACE):
            return BlockStatement(tuple(self._block()))
        if self._match(TokenType.IF):
            return self._if_statement()
        if self._match(TokenType.WHILE):
            return self._while_statement()
        if self._match(TokenType.FOR):
            return self._for_statement()
        if self._match(TokenType.RETURN):
            return self._return_statement()
        if self._match(TokenType.BREAK):
            keyword = self._previous()
            self._consume(TokenType.SEMICOLON, "Expect ';' after 'break'.")
            return BreakStatement(keyword)
        if self._match(TokenType.CONTINUE):
            keyword = self._previous()
            self._consume(TokenType.SEMICOLON, "Expect ';' after 'continue'.")
            return ContinueStatement(keyword)
        return self._expression_statement()

    def _block(self) -> List[Statement]:
        """Statements up to the closing brace; the opening brace is already consumed."""
        statements: List[Statement] = []

        with self._nesting():
            self.block_depth += 1
            try:
                while not self._check(TokenType.RIGHT_BRACE) and not self._is_at_end():
                    stmt = self._declaration()
                    if stmt is not None:
                        statements.append(stmt)
            finally:
                self.block_depth -= 1

        self._consume(TokenType.RIGHT_BRACE, "Expect '}' after block.")
        return statements

    def _print_statement(self) -> PrintStatement:
        value = self._expression()
        self._consume(TokenType.SEMICOLON, "Expect ';' after value.")
        return PrintStatement(value)

    def _expression_statement(self) -> ExpressionStatement:
        value = self._expression()
        self._consume(TokenType.SEMICOLON, "Expect ';' after expression.")
        return ExpressionStatement(value)

    def _if_statement(self) -> IfStatement:
        self._consume(TokenType.LEFT_PAREN, "Expect '(' after 'if'.")
        condition = self._expression()
        self._consume(TokenType.RIGHT_PAREN, "Expect ')' after if condition.")

        then_branch = self._nested_statement()
        else_branch = None
        if self._match(TokenType.ELSE):
            else_branch = self._nested_statement()

        return IfStatement(condition, then_branch, else_branch)

    def _while_statement(self) -> WhileLoop:
        self._consume(TokenType.LEFT_PAREN, "Expect '(' after 'while'.")
        condition = self._expression()
        self._consume(TokenType.RIGHT_PAREN, "Expect ')' after condition.")

        return WhileLoop(condition, self._nested_statement())

    def _for_statement(self) -> Statement:
        """
        Desugar ``for (init; cond; incr) body`` into

            { init; while (cond) { body; incr; } }

        The outer block is dropped without an initializer and the inner one
        without an increment; a missing condition becomes ``true``.
        """
        self._consume(TokenType.LEFT_PAREN, "Expect '(' after 'for'.")

        initializer: Optional[Statement]
        if self._match(TokenType.SEMICOLON):
            initializer = None
        elif self._match(TokenType.LET):
            initializer = self._variable_declaration()
        else:
            initializer = self._expression_statement()

        condition = None
        if not self._check(TokenType.SEMICOLON):
            condition = self._expression()
        self._consume(TokenType.SEMICOLON, "Expect ';' after loop condition.")

        increment = None
        if not self._check(TokenType.RIGHT_PAREN):
            increment = self._expression()
        self._consume(TokenType.RIGHT_PAREN, "Expect ')' after for clauses.")

        body = self._nested_statement()

        if increment is not None:
            body = BlockStatement((body, ExpressionStatement(increment)))

        if condition is None:
            condition = Literal.boolean(True)
        loop: Statement = WhileLoop(condition, body)

        if initializer is not None:
            loop = BlockStatement((initializer, loop))

        return loop

    def _return_statement(self) -> ReturnStatement:
        keyword = self._previous()
        value = None
        if not self._check(TokenType.SEMICOLON):
            value = self._expression()

        self._consume(TokenType.SEMICOLON, "Expect ';' after return value.")
        return ReturnStatement(keyword, value)

    # ------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------

    def _expression(self) -> Expression:
        with self._nesting():
            return self._assignment()

    def _assignment(self) -> Expression:
        expr = self._logic_or()

        if self._match(TokenType.EQUAL):
            equals = self._previous()
            with self._nesting():
                value = self._assignment()

            if isinstance(expr, Identifier):
                return Assignment(expr.name, value)

            # Reported, not raised: the parser is not confused about where it is
            self._report(create_invalid_assignment_error(equals))

        return expr

    def _logic_or(self) -> Expression:
        expr = self._logic_and()

        while self._match(TokenType.OR):
            operator = self._previous()
            expr = LogicalOp(expr, operator, self._logic_and())

        return expr

    def _logic_and(self) -> Expression:
        expr = self._equality()

        while self._match(TokenType.AND):
            operator = self._previous()
            expr = LogicalOp(expr, operator, self._equality())

        return expr

    def _equality(self) -> Expression:
        expr = self._comparison()

        while self._match(*EQUALITY_OPERATORS):
            operator = self._previous()
            expr = BinaryOp(expr, operator, self._comparison())

        return expr

    def _comparison(self) -> Expression:
        expr = self._term()

        while self._match(*COMPARISON_OPERATORS):
            operator = self._previous()
            expr = BinaryOp(expr, operator, self._term())

        return expr

    def _term(self) -> Expression:
        expr = self._factor()

        while self._match(*TERM_OPERATORS):
            operator = self._previous()
            expr = BinaryOp(expr, operator, self._factor())

        return expr

    def _factor(self) -> Expression:
        expr = self._unary()

        while self._match(*FACTOR_OPERATORS):
            operator = self._previous()
            expr = BinaryOp(expr, operator, self._unary())

        return expr

    def _unary(self) -> Expression:
        if self._match(*UNARY_OPERATORS):
            operator = self._previous()
            with self._nesting():
                return UnaryOp(operator, self._unary())

        return self._call()

    def _call(self) -> Expression:
        expr = self._primary()

        while self._match(TokenType.LEFT_PAREN):
            expr = self._finish_call(expr)

        return expr

    def _finish_call(self, callee: Expression) -> FunctionCall:
        arguments: List[Expression] = []
        limit = self.options.max_arguments

        if not self._check(TokenType.RIGHT_PAREN):
            while True:
                if len(arguments) == limit:
                    self._report(create_too_many_arguments_error(self._peek(), limit))
                arguments.append(self._expression())
                if not self._match(TokenType.COMMA):
                    break

        paren = self._consume(TokenType.RIGHT_PAREN, "Expect ')' after arguments.")
        return FunctionCall(callee, paren, tuple(arguments))

    def _primary(self) -> Expression:
        if self._match(TokenType.FALSE):
            return Literal.boolean(False)
        if self._match(TokenType.TRUE):
            return Literal.boolean(True)
        if self._match(TokenType.NIL):
            return Literal.nil()
        if self._match(TokenType.NUMBER):
            return Literal.number(self._previous().literal)
        if self._match(TokenType.STRING):
            return Literal.string(self._previous().literal)
        if self._match(TokenType.IDENTIFIER):
            return Identifier(self._previous())

        if self._match(TokenType.LEFT_PAREN):
            expr = self._expression()
            self._consume(TokenType.RIGHT_PAREN, "Expect ')' after expression.")
            return Grouping(expr)

        raise create_unexpected_token_error("Expect expression.", PRIMARY_START_TYPES, self._peek())

    # ------------------------------------------------------------------
    # Utility methods
    # ------------------------------------------------------------------

    def _report(self, error: ParseError):
        """Record a diagnostic without unwinding."""
        self.errors.append(error.diagnostic)

    @contextmanager
    def _nesting(self):
        """Count one level of recursion, raising P020 past max_nesting_depth."""
        limit = self.options.max_nesting_depth
        if self.depth >= limit:
            raise create_nesting_too_deep_error(self._peek(), limit)
        self.depth += 1
        try:
            yield
        finally:
            self.depth -= 1

    def _nested_statement(self) -> Statement:
        """The body of an if, while or for statement."""
        with self._nesting():
            return self._statement()

    def _match(self, *token_types: TokenType) -> bool:
        """Consume the current token if it has one of the given types."""
        for token_type in token_types:
            if self._check(token_type):
                self._advance()
                return True
        return False

    def _check(self, token_type: TokenType) -> bool:
        """Check if current token matches type without consuming."""
        if self._is_at_end():
            return False
        return self._peek().type == token_type

    def _advance(self) -> Token:
        """Consume and return current token."""
        if not self._is_at_end():
            self.current += 1
        return self._previous()

    def _is_at_end(self) -> bool:
        return self._peek().type == TokenType.EOF

    def _peek(self) -> Token:
        return self.tokens[self.current]

    def _previous(self) -> Token:
        return self.tokens[self.current - 1]

    def _consume(self, token_type: TokenType, message: str) -> Token:
        """Consume token of expected type or raise error."""
        if self._check(token_type):
            return self._advance()
        raise create_unexpected_token_error(message, (token_type,), self._peek())


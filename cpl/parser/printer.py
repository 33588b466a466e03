"""
Textual renderings of the CPL AST.

AstPrinter shows the tree as indented s-expressions for inspection.
SourcePrinter writes canonical CPL source; parsing its output yields a tree
equal to the one printed.

Author: xwest
"""

import math
from decimal import Decimal
from typing import List, Sequence

from .ast_nodes import (
    ASTVisitor, Statement, Expression, BinaryOp, LogicalOp, Grouping, Literal,
    LiteralType, UnaryOp, Identifier, Assignment, FunctionCall,
    ExpressionStatement, PrintStatement, VariableDecl, BlockStatement,
    IfStatement, WhileLoop, FunctionDef, Parameter, ReturnStatement,
    BreakStatement, ContinueStatement,
)


def format_number(value: float) -> str:
    """
    Render a number the way it could be written in CPL source.

    CPL has no exponent syntax, so large and tiny values are expanded.
    """
    if not math.isfinite(value):
        raise ValueError(f"cannot render non-finite number {value!r}")
    text = repr(value)
    if 'e' in text or 'E' in text:
        text = format(Decimal(text), 'f')
    if text.endswith('.0'):
        text = text[:-2]
    return text


def format_literal(node: Literal) -> str:
    if node.literal_type == LiteralType.NUMBER:
        return format_number(node.value)
    if node.literal_type == LiteralType.STRING:
        return f'"{node.value}"'
    if node.literal_type == LiteralType.BOOLEAN:
        return "true" if node.value else "false"
    return "nil"


def format_parameter(param: Parameter) -> str:
    if param.type_annotation is not None:
        return f"{param.name.lexeme}: {param.type_annotation.lexeme}"
    return param.name.lexeme


class AstPrinter(ASTVisitor):
    """Render statements as an indented s-expression tree."""

    def __init__(self, indent: str = "  "):
        self.indent = indent
        self._depth = 0

    def print(self, statements: Sequence[Statement]) -> str:
        return "\n".join(self._line(stmt) for stmt in statements)

    def print_expression(self, expr: Expression) -> str:
        return expr.accept(self)

    def _line(self, stmt: Statement) -> str:
        return self.indent * self._depth + stmt.accept(self)

    def _nested(self, head: str, statements: Sequence[Statement]) -> str:
        self._depth += 1
        try:
            lines = [self._line(stmt) for stmt in statements]
        finally:
            self._depth -= 1
        if not lines:
            return f"({head})"
        return f"({head}\n" + "\n".join(lines) + ")"

    def _parenthesize(self, name: str, *exprs: Expression) -> str:
        parts = [name] + [expr.accept(self) for expr in exprs]
        return "(" + " ".join(parts) + ")"

    # Expressions

    def visit_binary_op(self, node: BinaryOp) -> str:
        return self._parenthesize(node.operator.lexeme, node.left, node.right)

    def visit_logical_op(self, node: LogicalOp) -> str:
        return self._parenthesize(node.operator.lexeme, node.left, node.right)

    def visit_grouping(self, node: Grouping) -> str:
        return self._parenthesize("group", node.expression)

    def visit_literal(self, node: Literal) -> str:
        return format_literal(node)

    def visit_unary_op(self, node: UnaryOp) -> str:
        return self._parenthesize(node.operator.lexeme, node.right)

    def visit_identifier(self, node: Identifier) -> str:
        return node.name.lexeme

    def visit_assignment(self, node: Assignment) -> str:
        return self._parenthesize(f"= {node.name.lexeme}", node.value)

    def visit_function_call(self, node: FunctionCall) -> str:
        return self._parenthesize("call", node.callee, *node.arguments)

    # Statements

    def visit_expression_statement(self, node: ExpressionStatement) -> str:
        return self._parenthesize(";", node.expression)

    def visit_print_statement(self, node: PrintStatement) -> str:
        return self._parenthesize("print", node.expression)

    def visit_variable_decl(self, node: VariableDecl) -> str:
        if node.initializer is None:
            return f"(let {node.name.lexeme})"
        return self._parenthesize(f"let {node.name.lexeme}", node.initializer)

    def visit_block_statement(self, node: BlockStatement) -> str:
        return self._nested("block", node.statements)

    def visit_if_statement(self, node: IfStatement) -> str:
        branches = [node.then_branch]
        if node.else_branch is not None:
            branches.append(node.else_branch)
        head = "if " + node.condition.accept(self)
        return self._nested(head, branches)

    def visit_while_loop(self, node: WhileLoop) -> str:
        return self._nested("while " + node.condition.accept(self), [node.body])

    def visit_function_def(self, node: FunctionDef) -> str:
        params = " ".join(format_parameter(p) for p in node.params)
        return self._nested(f"fn {node.name.lexeme} ({params})", node.body.statements)

    def visit_return_statement(self, node: ReturnStatement) -> str:
        if node.value is None:
            return "(return)"
        return self._parenthesize("return", node.value)

    def visit_break_statement(self, node: BreakStatement) -> str:
        return "(break)"

    def visit_continue_statement(self, node: ContinueStatement) -> str:
        return "(continue)"


class SourcePrinter(ASTVisitor):
    """
    Render statements back into CPL source.

    Only Grouping nodes produce parentheses. Parsed trees already follow the
    operator precedence, so no other parentheses are needed to re-parse
    the output to the same tree.
    """

    INDENT = "    "

    def __init__(self):
        self._depth = 0

    def print(self, statements: Sequence[Statement]) -> str:
        lines = [self._line(stmt) for stmt in statements]
        return "\n".join(lines) + "\n" if lines else ""

    def print_expression(self, expr: Expression) -> str:
        return expr.accept(self)

    def _line(self, stmt: Statement) -> str:
        return self.INDENT * self._depth + stmt.accept(self)

    def _block(self, statements: Sequence[Statement]) -> str:
        if not statements:
            return "{}"
        self._depth += 1
        try:
            lines: List[str] = [self._line(stmt) for stmt in statements]
        finally:
            self._depth -= 1
        return "{\n" + "\n".join(lines) + "\n" + self.INDENT * self._depth + "}"

    # Expressions

    def visit_binary_op(self, node: BinaryOp) -> str:
        return f"{node.left.accept(self)} {node.operator.lexeme} {node.right.accept(self)}"

    def visit_logical_op(self, node: LogicalOp) -> str:
        return f"{node.left.accept(self)} {node.operator.lexeme} {node.right.accept(self)}"

    def visit_grouping(self, node: Grouping) -> str:
        return f"({node.expression.accept(self)})"

    def visit_literal(self, node: Literal) -> str:
        return format_literal(node)

    def visit_unary_op(self, node: UnaryOp) -> str:
        return f"{node.operator.lexeme}{node.right.accept(self)}"

    def visit_identifier(self, node: Identifier) -> str:
        return node.name.lexeme

    def visit_assignment(self, node: Assignment) -> str:
        return f"{node.name.lexeme} = {node.value.accept(self)}"

    def visit_function_call(self, node: FunctionCall) -> str:
        args = ", ".join(arg.accept(self) for arg in node.arguments)
        return f"{node.callee.accept(self)}({args})"

    # Statements

    def visit_expression_statement(self, node: ExpressionStatement) -> str:
        return f"{node.expression.accept(self)};"

    def visit_print_statement(self, node: PrintStatement) -> str:
        return f"print {node.expression.accept(self)};"

    def visit_variable_decl(self, node: VariableDecl) -> str:
        if node.initializer is None:
            return f"let {node.name.lexeme};"
        return f"let {node.name.lexeme} = {node.initializer.accept(self)};"

    def visit_block_statement(self, node: BlockStatement) -> str:
        return self._block(node.statements)

    def visit_if_statement(self, node: IfStatement) -> str:
        text = f"if ({node.condition.accept(self)}) {node.then_branch.accept(self)}"
        if node.else_branch is not None:
            text += f" else {node.else_branch.accept(self)}"
        return text

    def visit_while_loop(self, node: WhileLoop) -> str:
        return f"while ({node.condition.accept(self)}) {node.body.accept(self)}"

    def visit_function_def(self, node: FunctionDef) -> str:
        params = ", ".join(format_parameter(p) for p in node.params)
        return f"fn {node.name.lexeme}({params}) {self._block(node.body.statements)}"

    def visit_return_statement(self, node: ReturnStatement) -> str:
        if node.value is None:
            return "return;"
        return f"return {node.value.accept(self)};"

    def visit_break_statement(self, node: BreakStatement) -> str:
        return "break;"

    def visit_continue_statement(self, node: ContinueStatement) -> str:
        return "continue;"


def print_ast(statements: Sequence[Statement]) -> str:
    return AstPrinter().print(statements)


def to_source(statements: Sequence[Statement]) -> str:
    return SourcePrinter().print(statements)

"""
Interactive read-eval-print loop for CPL.

Each line is scanned, parsed and checked, and the tokens, the AST and any
diagnostics are printed. Declarations from lines that checked cleanly stay
visible to later lines. Typing ``exit`` leaves the loop.

Author: xwest
"""

import logging
from typing import Iterable, List, Optional

from rich.console import Console

from .config import CompilerOptions
from .lexer import Lexer
from .parser import Parser, Statement, AstPrinter
from .analyzer import SemanticAnalyzer

logger = logging.getLogger(__name__)

PROMPT = "> "
EXIT_COMMAND = "exit"


class Repl:
    """Line-oriented front end session."""

    def __init__(self, console: Optional[Console] = None,
                 options: Optional[CompilerOptions] = None,
                 show_tokens: bool = True):
        self.console = console or Console()
        self.options = (options or CompilerOptions.from_env()).with_filename("<repl>")
        self.show_tokens = show_tokens
        self.history: List[Statement] = []

    def run(self, lines: Optional[Iterable[str]] = None):
        """
        Run until ``exit`` or end of input.

        Args:
            lines: Input lines to process instead of reading the console
        """
        source = iter(lines) if lines is not None else None

        while True:
            try:
                if source is None:
                    line = self.console.input(PROMPT)
                else:
                    line = next(source)
            except (EOFError, StopIteration, KeyboardInterrupt):
                break

            if line.strip().lower() == EXIT_COMMAND:
                break

            self.evaluate(line)

        self.console.print("Exiting REPL...")

    def evaluate(self, line: str) -> bool:
        """Process one line; returns True when it produced no diagnostics."""
        lexer = Lexer(line, self.options.filename)
        tokens = lexer.tokenize()

        if self.show_tokens:
            self.console.print("[bold]Tokens:[/bold]")
            for token in tokens:
                self.console.print(f"  {token}", markup=False, highlight=False)

        parsed = Parser(tokens, self.options).parse()
        diagnostics = list(lexer.errors) + list(parsed.errors)

        if parsed.ok and parsed.statements:
            self.console.print("[bold]AST:[/bold]")
            self.console.print(AstPrinter().print(parsed.statements), markup=False, highlight=False)

            # Re-check everything accepted so far so earlier declarations stay in scope
            analysis = SemanticAnalyzer(self.options).analyze(self.history + parsed.statements)
            diagnostics.extend(analysis.errors)
            if analysis.ok and not lexer.errors:
                self.history.extend(parsed.statements)

        for diagnostic in diagnostics:
            self.console.print(str(diagnostic), style="red", markup=False, highlight=False)

        logger.debug("repl line produced %d diagnostics", len(diagnostics))
        return not diagnostics


def main():
    Repl().run()

"""
CPL compilation pipeline.

Chains the lexer, parser and semantic analyzer over a source string. Each
stage runs to completion before the next one starts. Lexical diagnostics do
not stop parsing; syntax errors stop the program from being analyzed.

Author: xwest
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .config import CompilerOptions
from .lexer import Lexer, Token, Diagnostic
from .parser import Parser, ParseResult, Statement
from .analyzer import SemanticAnalyzer

logger = logging.getLogger(__name__)


@dataclass
class CompilationResult:
    """Everything the front end produced for one source string."""
    tokens: List[Token] = field(default_factory=list)
    statements: List[Statement] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)

    def has_errors(self) -> bool:
        return len(self.diagnostics) > 0

    @property
    def ok(self) -> bool:
        return not self.diagnostics


def tokenize(source: str, options: Optional[CompilerOptions] = None) -> CompilationResult:
    """Run the lexer only."""
    options = options or CompilerOptions()
    lexer = Lexer(source, options.filename)
    tokens = lexer.tokenize()
    return CompilationResult(tokens=tokens, diagnostics=list(lexer.errors))


def parse(source: str, options: Optional[CompilerOptions] = None) -> CompilationResult:
    """Run the lexer and the parser."""
    result, _ = _parse(source, options or CompilerOptions())
    return result


def analyze(source: str, options: Optional[CompilerOptions] = None) -> CompilationResult:
    """Run every stage; the analyzer is skipped when parsing failed."""
    options = options or CompilerOptions()
    result, parsed = _parse(source, options)

    if parsed.ok:
        analysis = SemanticAnalyzer(options).analyze(result.statements)
        result.diagnostics.extend(analysis.errors)
    else:
        logger.debug("%s: skipping semantic analysis after syntax errors", options.filename)

    return result


def _parse(source: str, options: CompilerOptions) -> Tuple[CompilationResult, ParseResult]:
    result = tokenize(source, options)
    parsed = Parser(result.tokens, options).parse()
    result.statements = parsed.statements
    result.diagnostics.extend(parsed.errors)
    return result, parsed

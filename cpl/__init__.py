"""
CPL Compiler Front End

Scanner, parser and semantic checker for the CPL scripting language.

Architecture:
    cpl/
    ├── lexer/           # Tokenization and lexical analysis
    ├── parser/          # Syntax analysis, AST and printers
    ├── analyzer/        # Scope checking
    ├── util/            # Source file checks and timing
    ├── pipeline.py      # The stages chained over a source string
    ├── repl.py          # Interactive loop
    └── cli.py           # Command line entry point

Author: xwest
License: MIT
"""

__version__ = "0.1.0"
__author__ = "xwest"
__license__ = "MIT"

from .config import CompilerOptions
from .lexer import Lexer
from .parser import Parser
from .analyzer import SemanticAnalyzer
from .pipeline import CompilationResult, tokenize, parse, analyze

__all__ = [
    # Core classes
    "Lexer",
    "Parser",
    "SemanticAnalyzer",
    "CompilerOptions",

    # Pipeline
    "CompilationResult",
    "tokenize",
    "parse",
    "analyze",

    # Version info
    "__version__",
    "__author__",
    "__license__",
]

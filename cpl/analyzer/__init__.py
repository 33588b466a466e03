"""
CPL Semantic Analyzer Package

Implements scope-aware checking of parsed CPL programs:
- Lexical scoping with shadowing across nested blocks
- Undefined and uninitialized variable detection
- Duplicate declarations within one scope
- break/continue/return placement

Author: xwest
"""

from .semantic_analyzer import SemanticAnalyzer, AnalysisResult
from .symbol_table import SymbolTable, Symbol, SymbolKind, Scope, ScopeKind
from .errors import SemanticError

__all__ = [
    # Main analyzer
    "SemanticAnalyzer", "AnalysisResult",

    # Symbol management
    "SymbolTable", "Symbol", "SymbolKind", "Scope", "ScopeKind",

    # Error handling
    "SemanticError",
]

"""
Symbol table and scope management for CPL semantic analysis.

A stack of lexical frames: the global frame at the bottom, one frame per
block or function pushed above it. Lookups walk from the innermost frame
outwards and the first match wins, which is what makes shadowing work.

Author: xwest
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from ..lexer.tokens import SourceLocation
from .errors import create_redeclaration_error


class SymbolKind(Enum):
    """Types of symbols in the symbol table."""
    VARIABLE = "variable"
    FUNCTION = "function"
    PARAMETER = "parameter"


class ScopeKind(Enum):
    """Types of scopes."""
    GLOBAL = "global"
    FUNCTION = "function"
    BLOCK = "block"


@dataclass
class Symbol:
    """A name bound in a scope."""
    name: str
    kind: SymbolKind
    is_initialized: bool
    location: SourceLocation

    def __str__(self) -> str:
        state = "" if self.is_initialized else " (uninitialized)"
        return f"{self.kind.value} {self.name}{state}"


@dataclass
class Scope:
    """Represents a lexical scope."""
    kind: ScopeKind
    name: str
    symbols: Dict[str, Symbol] = field(default_factory=dict)
    parent: Optional['Scope'] = None

    def define_symbol(self, symbol: Symbol) -> None:
        """Define a symbol in this scope."""
        if symbol.name in self.symbols:
            raise create_redeclaration_error(symbol.name, symbol.location)
        self.symbols[symbol.name] = symbol

    def lookup_symbol(self, name: str) -> Optional[Symbol]:
        """Look up a symbol in this scope and parent scopes."""
        if name in self.symbols:
            return self.symbols[name]

        if self.parent:
            return self.parent.lookup_symbol(name)

        return None

    def lookup_symbol_local(self, name: str) -> Optional[Symbol]:
        """Look up a symbol only in this scope (no parent traversal)."""
        return self.symbols.get(name)

    def __str__(self) -> str:
        return f"Scope({self.kind.value}, {self.name}, {len(self.symbols)} symbols)"


class SymbolTable:
    """
    Manages the stack of scopes during analysis.

    The global scope is never popped; ``exit_scope`` at global level is a
    no-op returning None.
    """

    def __init__(self):
        """Initialize the symbol table with a global scope."""
        self.global_scope = Scope(ScopeKind.GLOBAL, "global")
        self.current_scope = self.global_scope

    @property
    def depth(self) -> int:
        """Number of scopes currently on the stack, the global one included."""
        depth = 0
        scope: Optional[Scope] = self.current_scope
        while scope is not None:
            depth += 1
            scope = scope.parent
        return depth

    def enter_scope(self, kind: ScopeKind, name: str) -> Scope:
        """Enter a new scope."""
        new_scope = Scope(kind, name, parent=self.current_scope)
        self.current_scope = new_scope
        return new_scope

    def exit_scope(self) -> Optional[Scope]:
        """Exit the current scope and return to parent."""
        if self.current_scope.parent:
            old_scope = self.current_scope
            self.current_scope = self.current_scope.parent
            return old_scope
        return None

    def define_symbol(self, symbol: Symbol) -> None:
        """Define a symbol in the current scope."""
        self.current_scope.define_symbol(symbol)

    def define_variable(self, name: str, location: SourceLocation,
                        is_initialized: bool) -> Symbol:
        symbol = Symbol(name, SymbolKind.VARIABLE, is_initialized, location)
        self.define_symbol(symbol)
        return symbol

    def define_function(self, name: str, location: SourceLocation) -> Symbol:
        symbol = Symbol(name, SymbolKind.FUNCTION, True, location)
        self.define_symbol(symbol)
        return symbol

    def define_parameter(self, name: str, location: SourceLocation) -> Symbol:
        symbol = Symbol(name, SymbolKind.PARAMETER, True, location)
        self.define_symbol(symbol)
        return symbol

    def lookup_symbol(self, name: str) -> Optional[Symbol]:
        """Resolve a name innermost scope first; None when it is not bound."""
        return self.current_scope.lookup_symbol(name)

    def visible_symbols(self) -> List[Symbol]:
        """Symbols visible from the current scope, outer shadowed ones excluded."""
        visible: Dict[str, Symbol] = {}
        scope: Optional[Scope] = self.current_scope
        while scope is not None:
            for name, symbol in scope.symbols.items():
                visible.setdefault(name, symbol)
            scope = scope.parent
        return list(visible.values())

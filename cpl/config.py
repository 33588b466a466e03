"""
Compiler configuration for the CPL front end.

Options are plain frozen dataclasses passed down to each stage; nothing is
read from global state while a compilation runs.

Author: xwest
"""

import os
from dataclasses import dataclass, replace

# The maximum number of parameters a function can have.
MAX_PARAMETERS = 255
# The maximum number of arguments a call can pass.
MAX_ARGUMENTS = 255
# The deepest nesting of expressions and statements the parser accepts.
MAX_NESTING_DEPTH = 64
# The file extension for CPL source files.
FILE_EXTENSION = "cpl"

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class CompilerOptions:
    """
    Settings shared by the parser and the semantic analyzer.

    Attributes:
        filename: Name used in source locations and diagnostics
        recover: When False (the default) the parser and analyzer stop at
            the first diagnostic. When True they synchronize to the next
            statement and keep collecting diagnostics.
        max_arguments: Cap on call arguments and function parameters
        max_nesting_depth: Deepest nesting of groupings, unary operators,
            assignments, blocks and statement bodies before the parser
            reports P020 instead of recursing further
    """
    filename: str = "<string>"
    recover: bool = False
    max_arguments: int = MAX_ARGUMENTS
    max_nesting_depth: int = MAX_NESTING_DEPTH

    @classmethod
    def from_env(cls, **overrides) -> "CompilerOptions":
        """Build options from CPL_* environment variables, then apply overrides."""
        options = cls(recover=os.environ.get("CPL_RECOVER", "").strip().lower() in _TRUTHY)
        return replace(options, **overrides) if overrides else options

    def with_filename(self, filename: str) -> "CompilerOptions":
        return replace(self, filename=filename)

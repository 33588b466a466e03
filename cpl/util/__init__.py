"""
Helpers used around the compiler core: source file checks and timing.

Author: xwest
"""

from .files import SourceFileError, validate_source_file, read_source_file
from .timer import Timer, format_time

__all__ = [
    "SourceFileError", "validate_source_file", "read_source_file",
    "Timer", "format_time",
]

"""
Source file validation.

Author: xwest
"""

import logging
from pathlib import Path
from typing import Union

from ..config import FILE_EXTENSION

logger = logging.getLogger(__name__)


class SourceFileError(Exception):
    """Raised when a path cannot be used as a CPL source file."""

    def __init__(self, message: str, path: Union[str, Path]):
        super().__init__(message)
        self.path = str(path)


def validate_source_file(path: Union[str, Path]) -> Path:
    """
    Check that ``path`` names an existing regular file with the CPL extension.

    Returns:
        The path as a Path object

    Raises:
        SourceFileError: describing the first check that failed
    """
    file_path = Path(path)

    if not file_path.exists():
        raise SourceFileError(f"File '{path}' does not exist!", path)

    if not file_path.is_file():
        raise SourceFileError(f"'{path}' is not a file!", path)

    if file_path.suffix != f".{FILE_EXTENSION}":
        raise SourceFileError(f"File '{path}' must have '.{FILE_EXTENSION}' extension!", path)

    return file_path


def read_source_file(path: Union[str, Path]) -> str:
    """Validate ``path`` and return its contents."""
    file_path = validate_source_file(path)
    source = file_path.read_text(encoding="utf-8")
    logger.debug("read %d characters from %s", len(source), file_path)
    return source

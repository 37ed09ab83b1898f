"""
Error types raised by the CSS module checker.
"""

from pathlib import Path
from typing import Optional, Union


class CSSModuleLintError(Exception):
    """Base class for all checker errors."""


class ConfigurationError(CSSModuleLintError):
    """Invalid lint options. Fails the whole run."""


class StylesheetParseError(CSSModuleLintError):
    def __init__(self, message: str, line: Optional[int] = None, column: Optional[int] = None,
                 path: Union[str, Path, None] = None):
        self.message = message
        self.line = line
        self.column = column
        self.path = path
        super().__init__(str(self))

    def with_path(self, path: Union[str, Path]) -> 'StylesheetParseError':
        return StylesheetParseError(self.message, self.line, self.column, path)

    def __str__(self):
        where = str(self.path) if self.path else '<stylesheet>'
        if self.line is not None:
            where += f":{self.line}:{self.column}"
        return f"{where}: {self.message}"


class UnresolvedImportError(CSSModuleLintError):
    """The imported stylesheet does not exist on disk."""

    def __init__(self, specifier: str, resolved_path: Union[str, Path, None] = None):
        self.specifier = specifier
        self.resolved_path = resolved_path
        super().__init__(f"Cannot resolve stylesheet import '{specifier}'"
                         + (f" (looked at {resolved_path})" if resolved_path else ''))

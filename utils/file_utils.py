"""
File Utilities Module
File reading, source discovery and stylesheet import resolution.
"""

import os
import re
from pathlib import Path
from typing import Dict, List, Optional, Set

from core.errors import UnresolvedImportError

# File extension categories
EXTENSION_GROUPS: Dict[str, Set[str]] = {
    'source': {'.js', '.jsx', '.mjs', '.cjs', '.ts', '.tsx'},
    'style': {'.css', '.scss', '.less'},
}

STYLE_IMPORT_RE = re.compile(r'\.(s?css|less)$', re.IGNORECASE)


def normalize_path(path: str | Path) -> Path:
    """Convert string path to normalized Path object."""
    return Path(path).resolve()


def is_hidden(path: Path) -> bool:
    """Check if a file or directory is hidden."""
    # Check for hidden files/directories in Unix-like systems
    if path.name.startswith('.'):
        return True

    # Check for hidden files/directories in Windows
    try:
        import ctypes
        attrs = ctypes.windll.kernel32.GetFileAttributesW(str(path))
        return attrs & 2 != 0
    except (AttributeError, ImportError):
        return False


def get_all_files_by_extension(path: str | Path, extensions: List[str] | Set[str]) -> List[Path]:
    """
    Recursively collect all files with specified extensions.

    Args:
        path: Base directory path (a single file is returned as-is if it matches)
        extensions: File extensions to collect (e.g., ['.jsx', '.tsx'])

    Returns:
        Sorted list of Path objects for matching files
    """
    base_path = normalize_path(path)
    extensions = [ext.lower() for ext in extensions]

    if base_path.is_file():
        return [base_path] if base_path.suffix.lower() in extensions else []

    matching_files = []
    for root, dirs, files in os.walk(base_path):
        # Skip hidden directories and installed packages
        dirs[:] = [d for d in dirs if d != 'node_modules' and not is_hidden(Path(root) / d)]

        for file in files:
            file_path = Path(root) / file
            if is_hidden(file_path):
                continue
            if any(file.lower().endswith(ext) for ext in extensions):
                matching_files.append(file_path)

    return sorted(matching_files)


def is_style_import(specifier: str) -> bool:
    """True for import specifiers that point at a CSS module."""
    return bool(specifier) and STYLE_IMPORT_RE.search(specifier) is not None


def resolve_style_import(importer_path: str | Path, specifier: str,
                         base_path: Optional[str | Path] = None) -> Path:
    """
    Resolve a stylesheet import to an absolute file path.

    Relative specifiers ('./a.scss', '../a.scss') resolve against the
    importing file's directory; anything else resolves against `base_path`
    (the current working directory when not given).

    Raises:
        UnresolvedImportError: If the resolved file doesn't exist
    """
    if specifier.startswith('.'):
        candidate = Path(importer_path).parent / specifier
    else:
        candidate = Path(base_path or os.getcwd()) / specifier
    candidate = normalize_path(candidate)
    if not candidate.is_file():
        raise UnresolvedImportError(specifier, candidate)
    return candidate


def read_file_content(file_path: Path) -> str:
    """
    Safely read file content with proper encoding.

    Args:
        file_path: Path to the file to read

    Returns:
        File contents as string

    Raises:
        FileNotFoundError: If file doesn't exist
        IOError: If file can't be read
    """
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            return f.read()
    except UnicodeDecodeError:
        # Fallback to system default encoding if UTF-8 fails
        with open(file_path, 'r') as f:
            return f.read()

"""
CSS Module Analyzer
Coordinates stylesheet extraction, usage collection and the defined/used diff
for JS/JSX/TS source files.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Union

from comparator.class_matcher import (
    Finding,
    UndefinedClassFinding,
    find_undefined_classes,
    find_unused_classes,
)
from utils.file_utils import normalize_path, read_file_content, resolve_style_import

from .css_class_extractor import StylesheetExports, extract_classes_from_file
from .errors import UnresolvedImportError
from .jsx_treesitter_parser import parse_source
from .lint_options import LintOptions, parse_options
from .usage_collector import collect_accesses, find_style_imports, usages_from_accesses

logger = logging.getLogger(__name__)


@dataclass
class AnalysisResult:
    source_path: str
    unused: List[Finding] = field(default_factory=list)
    undefined: List[UndefinedClassFinding] = field(default_factory=list)

    def findings(self) -> List[Union[Finding, UndefinedClassFinding]]:
        """All findings ordered by source position."""
        return sorted(self.unused + self.undefined, key=lambda f: (f.line or 0, f.column or 0))

    def to_dict(self) -> Dict[str, Any]:
        return {
            'unused': [f.to_dict() for f in self.unused],
            'undefined': [f.to_dict() for f in self.undefined],
        }


class CSSModuleAnalyzer:
    """
    One analyzer per run. Stylesheet exports are cached by resolved path so
    files importing the same stylesheet parse it once.
    """

    def __init__(self, options: Union[LintOptions, Mapping[str, Any], None] = None,
                 check_undefined: bool = True):
        self.options = parse_options(options)
        self.check_undefined = check_undefined
        self._stylesheet_cache: Dict[Path, StylesheetExports] = {}

    def load_stylesheet(self, stylesheet_path: Union[str, Path]) -> StylesheetExports:
        path = normalize_path(stylesheet_path)
        exports = self._stylesheet_cache.get(path)
        if exports is not None:
            logger.debug(f"Stylesheet cache hit: {path}")
            return exports
        exports = extract_classes_from_file(path)
        self._stylesheet_cache[path] = exports
        return exports

    def analyze_source(self, code: str, source_path: Union[str, Path]) -> AnalysisResult:
        """Check every stylesheet import of one source file.

        Raises StylesheetParseError when an imported stylesheet can't be parsed.
        Imports that don't resolve to a file are skipped.
        """
        policy = self.options.camel_case
        tree = parse_source(code, source_path)
        result = AnalysisResult(str(source_path))

        for binding in find_style_imports(tree):
            try:
                stylesheet_path = resolve_style_import(source_path, binding.specifier, self.options.base_path)
            except UnresolvedImportError as e:
                logger.debug(f"{e}; skipping")
                continue

            exports = self.load_stylesheet(stylesheet_path)
            accesses = collect_accesses(tree, binding)
            usages = usages_from_accesses(accesses)
            logger.debug(f"{source_path}: {binding.local_name} -> {stylesheet_path} "
                         f"({len(exports)} classes, {len(usages)} literal accesses)")

            finding = find_unused_classes(exports, usages, policy, binding.specifier,
                                          self.options.mark_as_used, binding.line, binding.column)
            if finding is not None:
                result.unused.append(finding)
            if self.check_undefined:
                result.undefined.extend(find_undefined_classes(exports, accesses, policy, binding.specifier))
        return result

    def analyze_file(self, source_path: Union[str, Path]) -> AnalysisResult:
        logger.debug(f"Analyzing file: {source_path}")
        return self.analyze_source(read_file_content(Path(source_path)), source_path)

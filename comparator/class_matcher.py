"""
Class Matcher Module
Compares the classes a stylesheet defines with the tokens the importing
source actually reads.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from core.css_class_extractor import StylesheetExports
from core.lint_options import TransformPolicy
from core.name_transform import accepted_tokens, build_token_map

from .report_builder import format_undefined_message, format_unused_message

# CSS-module loaders expose helpers such as `_getCss()` on the style object
HELPER_PREFIX = '_'


@dataclass(frozen=True)
class Finding:
    stylesheet_path: str
    unused_class_names: Tuple[str, ...]
    line: Optional[int] = None
    column: Optional[int] = None

    @property
    def message(self) -> str:
        return format_unused_message(self.stylesheet_path, self.unused_class_names)

    def to_dict(self) -> Dict:
        return {
            'stylesheet': self.stylesheet_path,
            'unused_classes': list(self.unused_class_names),
            'line': self.line,
            'column': self.column,
            'message': self.message,
        }


@dataclass(frozen=True)
class UndefinedClassFinding:
    stylesheet_path: str
    class_name: str
    line: Optional[int] = None
    column: Optional[int] = None

    @property
    def message(self) -> str:
        return format_undefined_message(self.class_name)

    def to_dict(self) -> Dict:
        return {
            'stylesheet': self.stylesheet_path,
            'class_name': self.class_name,
            'line': self.line,
            'column': self.column,
            'message': self.message,
        }


def _tokens(used: Iterable) -> set:
    # plain strings or UsageRecord-like objects
    return {getattr(u, 'token', u) for u in used}


def find_unused_classes(exports: StylesheetExports,
                        used: Iterable,
                        policy: TransformPolicy = TransformPolicy.OFF,
                        stylesheet_path: str = '',
                        mark_as_used: Iterable[str] = (),
                        line: Optional[int] = None,
                        column: Optional[int] = None) -> Optional[Finding]:
    """Defined-minus-used, in declaration order; None when everything is used.

    Suppressed declarations (pure composition/extend targets, :export names,
    nesting-only parents) and names in `mark_as_used` are never reported.
    """
    used_tokens = _tokens(used)
    always_used = set(mark_as_used)
    unused = [
        declaration.name
        for declaration in exports
        if not declaration.suppressed
        and declaration.name not in always_used
        and not (accepted_tokens(declaration.name, policy) & used_tokens)
    ]
    if not unused:
        return None
    return Finding(stylesheet_path, tuple(unused), line, column)


def find_undefined_classes(exports: StylesheetExports,
                           accesses: Iterable,
                           policy: TransformPolicy = TransformPolicy.OFF,
                           stylesheet_path: str = '') -> List[UndefinedClassFinding]:
    """One finding per literal access whose token maps to no exported name."""
    token_map = build_token_map(exports.names(), policy)
    findings = []
    for access in accesses:
        token = getattr(access, 'token', None)
        if not token or token.startswith(HELPER_PREFIX) or token in token_map:
            continue
        findings.append(UndefinedClassFinding(stylesheet_path, token,
                                              getattr(access, 'line', None),
                                              getattr(access, 'column', None)))
    return findings

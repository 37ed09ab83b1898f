"""
CSS Class Extractor Module
Resolves the class names a CSS module (CSS, SCSS or LESS) exports.

The stylesheet is tokenized with tinycss2; rules, nested rules, at-rules and
statements are grouped on top of the component values so that SCSS/LESS
syntax (nesting, `&`, `@extend`, mixins, interpolation) survives.
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, FrozenSet, Iterator, List, Optional, Sequence, Union

import tinycss2
from tinycss2.ast import AtRule, QualifiedRule

from utils.file_utils import read_file_content

from .errors import StylesheetParseError
from .stylesheet_dialects import (
    StylesheetDialect,
    dialect_for_path,
    dotted_names,
    get_dialect,
    is_literal,
    significant,
)

logger = logging.getLogger(__name__)

# at-rules whose block holds rules for the enclosing selector
GROUPING_AT_RULES = {
    'media', 'supports', 'layer', 'container', 'document', '-moz-document', 'scope',
    'include', 'if', 'else', 'each', 'for', 'while',
}
COMPOSES_PROPERTIES = ('composes', 'compose-with')
_BARE_PARENT_REF_RE = re.compile(r'&(?![\w-])')


@dataclass(frozen=True)
class ClassDeclaration:
    name: str
    position: int
    suppressed: bool = False


class StylesheetExports:
    """Ordered, duplicate-free set of the class names a stylesheet exports."""

    def __init__(self, declarations: Sequence[ClassDeclaration] = ()):
        self._declarations = tuple(sorted(declarations, key=lambda d: d.position))
        self._by_name = {d.name: d for d in self._declarations}
        if len(self._by_name) != len(self._declarations):
            raise ValueError("Duplicate class names in stylesheet exports")

    def __iter__(self) -> Iterator[ClassDeclaration]:
        return iter(self._declarations)

    def __len__(self):
        return len(self._declarations)

    def __contains__(self, name):
        return name in self._by_name

    def __eq__(self, other):
        return isinstance(other, StylesheetExports) and self._declarations == other._declarations

    def __repr__(self):
        return f"StylesheetExports({[d.name for d in self._declarations]!r})"

    def get(self, name: str) -> Optional[ClassDeclaration]:
        return self._by_name.get(name)

    def names(self) -> List[str]:
        return [d.name for d in self._declarations]

    def unsuppressed(self) -> List[ClassDeclaration]:
        return [d for d in self._declarations if not d.suppressed]

    def to_dict(self) -> Dict[str, Dict]:
        return {d.name: {'position': d.position, 'suppressed': d.suppressed} for d in self._declarations}


class _Statement:
    """A `;`-terminated item: declaration, variable, mixin call, ..."""
    type = 'statement'

    def __init__(self, tokens: List):
        self.tokens = tokens


@dataclass
class _ClassState:
    position: int
    has_body: bool = False
    target: bool = False
    exported: bool = False
    nesting_parent: bool = False

    @property
    def suppressed(self) -> bool:
        return not self.has_body and (self.target or self.exported or self.nesting_parent)


class _ClassRegistry:
    def __init__(self):
        self._states: Dict[str, _ClassState] = {}
        self.mixin_definitions = set()

    def declare(self, name: str) -> _ClassState:
        state = self._states.get(name)
        if state is None:
            state = self._states[name] = _ClassState(position=len(self._states))
        return state

    def exports(self) -> StylesheetExports:
        return StylesheetExports([
            ClassDeclaration(name, state.position, state.suppressed)
            for name, state in self._states.items()
            if name not in self.mixin_definitions or state.has_body or state.exported
        ])


def _raise_on_parse_errors(tokens: Sequence):
    for token in tokens:
        if token.type == 'error':
            raise StylesheetParseError(token.message, token.source_line, token.source_column)
        if token.type == 'function':
            _raise_on_parse_errors(token.arguments)
        elif token.type in ('{} block', '() block', '[] block'):
            _raise_on_parse_errors(token.content)


def _is_interpolation_start(pending: List) -> bool:
    # SCSS #{...} and LESS @{...}: the block belongs to the prelude
    return bool(pending) and (is_literal(pending[-1], '#') or is_literal(pending[-1], '@'))


def _looks_like_declaration(tokens: Sequence) -> bool:
    sig = significant(tokens)
    if sig and is_literal(sig[0], '$'):
        sig = sig[1:]
    return len(sig) >= 2 and sig[0].type in ('ident', 'at-keyword') and is_literal(sig[1], ':')


def _consume_at_rule(at_keyword, tokens: Iterator) -> AtRule:
    prelude, content = [], None
    for token in tokens:
        if token.type == '{} block' and not _is_interpolation_start(prelude):
            content = token.content
            break
        if is_literal(token, ';'):
            break
        prelude.append(token)
    return AtRule(at_keyword.source_line, at_keyword.source_column, at_keyword.value,
                  at_keyword.lower_value, prelude, content)


def split_block_items(tokens: Sequence, top_level: bool = False) -> List:
    """Group component values into rules, at-rules and statements."""
    items, pending = [], []
    tokens = iter(tokens)
    for token in tokens:
        if not pending and token.type in ('whitespace', 'comment'):
            continue
        if not pending and token.type == 'at-keyword':
            items.append(_consume_at_rule(token, tokens))
        elif is_literal(token, ';'):
            if significant(pending):
                items.append(_Statement(pending))
            pending = []
        elif token.type == '{} block' and not _is_interpolation_start(pending):
            first = pending[0] if pending else token
            items.append(QualifiedRule(first.source_line, first.source_column, pending, token.content))
            pending = []
        else:
            pending.append(token)
    if significant(pending):
        if top_level and not _looks_like_declaration(pending):
            first = significant(pending)[0]
            raise StylesheetParseError("Expected a '{' block after selector",
                                       first.source_line, first.source_column)
        items.append(_Statement(pending))
    return items


def _split_selector_list(prelude: Sequence) -> List[str]:
    selectors, current = [], []
    for token in prelude:
        if is_literal(token, ','):
            selectors.append(current)
            current = []
        else:
            current.append(token)
    selectors.append(current)
    return [s for s in (tinycss2.serialize(sel).strip() for sel in selectors) if s]


def _resolve_nesting(parents: Optional[List[str]], selectors: List[str]) -> List[str]:
    if not parents:
        return list(selectors)
    resolved = []
    for parent in parents:
        for selector in selectors:
            if '&' in selector:
                resolved.append(selector.replace('&', parent))
            else:
                resolved.append(f"{parent} {selector}")
    return resolved


def _selector_classes(tokens: Sequence, global_mode: bool = False) -> List[str]:
    """Module-local class names in one selector (`:global` parts excluded)."""
    names = []
    tokens = list(tokens)
    i = 0
    while i < len(tokens):
        token = tokens[i]
        nxt = tokens[i + 1] if i + 1 < len(tokens) else None
        if is_literal(token, ':') and nxt is not None:
            if nxt.type == 'function' and nxt.lower_name in ('global', 'local'):
                if nxt.lower_name == 'local':
                    names.extend(_selector_classes(nxt.arguments))
                i += 2
                continue
            if nxt.type == 'ident' and nxt.lower_value in ('global', 'local'):
                global_mode = nxt.lower_value == 'global'
                i += 2
                continue
        if is_literal(token, '.') and nxt is not None and nxt.type == 'ident':
            after = tokens[i + 2] if i + 2 < len(tokens) else None
            interpolated = after is not None and (is_literal(after, '#') or is_literal(after, '@'))
            if not global_mode and not interpolated:
                names.append(nxt.value)
            i += 2
            continue
        if token.type == 'function':
            names.extend(_selector_classes(token.arguments, global_mode))
        i += 1
    return names


def _local_classes(selectors: List[str]) -> List[str]:
    seen = {}
    for selector in selectors:
        for name in _selector_classes(tinycss2.parse_component_value_list(selector, skip_comments=True)):
            seen.setdefault(name, None)
    return list(seen)


def _composition_targets(tokens: Sequence) -> List[str]:
    sig = significant(tokens)
    if len(sig) < 2 or sig[0].type != 'ident' or sig[0].lower_value not in COMPOSES_PROPERTIES:
        return []
    if not is_literal(sig[1], ':'):
        return []
    names = []
    for token in sig[2:]:
        if token.type == 'ident':
            if token.lower_value == 'from':
                # composed from another file or from global scope
                return []
            names.append(token.value)
    return names


def _declaration_name(tokens: Sequence) -> Optional[str]:
    sig = significant(tokens)
    if len(sig) >= 2 and sig[0].type == 'ident' and is_literal(sig[1], ':'):
        return sig[0].value
    return None


def _prelude_is(prelude: Sequence, pseudo: str) -> bool:
    sig = significant(prelude)
    if len(sig) < 2 or not is_literal(sig[0], ':'):
        return False
    head = sig[1]
    if head.type == 'ident':
        return len(sig) == 2 and head.lower_value == pseudo
    return head.type == 'function' and head.lower_name == pseudo


def _has_own_body(items: List) -> bool:
    for item in items:
        if item.type == 'statement':
            return True
        if item.type == 'at-rule':
            if item.content is None:
                return True
            if item.lower_at_keyword in GROUPING_AT_RULES and _has_own_body(split_block_items(item.content)):
                return True
    return False


def _has_nested_rules(items: List) -> bool:
    for item in items:
        if item.type == 'qualified-rule':
            return True
        if (item.type == 'at-rule' and item.content is not None
                and item.lower_at_keyword in GROUPING_AT_RULES
                and _has_nested_rules(split_block_items(item.content))):
            return True
    return False


class CSSClassExtractor:
    def __init__(self, dialect: Union[str, StylesheetDialect] = 'css'):
        self.dialect = get_dialect(dialect) if isinstance(dialect, str) else dialect

    def extract(self, css_content: str) -> StylesheetExports:
        """Parse stylesheet text into its exported class names.

        Raises StylesheetParseError when the text cannot be tokenized into
        rules (unmatched brackets, unterminated strings, dangling selectors).
        """
        text = self.dialect.preprocess(css_content)
        tokens = tinycss2.parse_component_value_list(text, skip_comments=True)
        _raise_on_parse_errors(tokens)
        registry = _ClassRegistry()
        self._walk(split_block_items(tokens, top_level=True), registry, None, frozenset())
        exports = registry.exports()
        logger.debug(f"Extracted {len(exports)} classes ({self.dialect.name}): {exports.names()}")
        return exports

    def _walk(self, items: List, registry: _ClassRegistry,
              parents: Optional[List[str]], parent_classes: FrozenSet[str]):
        for item in items:
            if item.type == 'qualified-rule':
                self._visit_rule(item, registry, parents, parent_classes)
            elif item.type == 'at-rule':
                self._visit_at_rule(item, registry, parents, parent_classes)
            elif parents is not None:
                for name in _composition_targets(item.tokens) + self.dialect.statement_targets(item.tokens):
                    registry.declare(name).target = True

    def _visit_rule(self, rule: QualifiedRule, registry: _ClassRegistry,
                    parents: Optional[List[str]], parent_classes: FrozenSet[str]):
        if parents is None and _prelude_is(rule.prelude, 'export'):
            for item in split_block_items(rule.content):
                name = _declaration_name(item.tokens) if item.type == 'statement' else None
                if name:
                    registry.declare(name).exported = True
            return
        if _prelude_is(rule.prelude, 'import'):
            return
        if self.dialect.is_mixin_definition(rule.prelude):
            registry.mixin_definitions.update(dotted_names(rule.prelude)[:1])
            return

        prelude, targets = self.dialect.selector_targets(rule.prelude)
        selectors = _split_selector_list(prelude)
        resolved = _resolve_nesting(parents, selectors)
        classes = _local_classes(resolved)
        bare_parent_ref = any(_BARE_PARENT_REF_RE.search(s) for s in selectors)
        own = [c for c in classes if bare_parent_ref or c not in parent_classes]

        items = split_block_items(rule.content)
        has_body = _has_own_body(items)
        has_nested = _has_nested_rules(items)
        for name in classes:
            registry.declare(name)
        for name in own:
            state = registry.declare(name)
            state.has_body = state.has_body or has_body
            state.nesting_parent = state.nesting_parent or has_nested
        for name in targets:
            registry.declare(name).target = True

        self._walk(items, registry, resolved, frozenset(classes))

    def _visit_at_rule(self, at_rule: AtRule, registry: _ClassRegistry,
                       parents: Optional[List[str]], parent_classes: FrozenSet[str]):
        for name in self.dialect.at_rule_targets(at_rule):
            registry.declare(name).target = True
        if at_rule.content is None:
            return
        keyword = at_rule.lower_at_keyword
        if keyword == 'at-root':
            if significant(at_rule.prelude):
                rule = QualifiedRule(at_rule.source_line, at_rule.source_column,
                                     at_rule.prelude, at_rule.content)
                self._visit_rule(rule, registry, None, frozenset())
            else:
                self._walk(split_block_items(at_rule.content), registry, None, frozenset())
        elif keyword in GROUPING_AT_RULES:
            self._walk(split_block_items(at_rule.content), registry, parents, parent_classes)
        else:
            logger.debug(f"Skipping @{keyword} block at line {at_rule.source_line}")


def extract_classes(css_content: str, dialect: Union[str, StylesheetDialect] = 'css') -> StylesheetExports:
    return CSSClassExtractor(dialect).extract(css_content)


def extract_classes_from_file(file_path: Union[str, Path]) -> StylesheetExports:
    """Read a .css/.scss/.less file and extract its exports; the dialect follows the extension."""
    path = Path(file_path)
    extractor = CSSClassExtractor(dialect_for_path(path))
    logger.debug(f"Parsing stylesheet: {path}")
    try:
        text = read_file_content(path)
    except (UnicodeDecodeError, OSError) as e:
        raise StylesheetParseError(f"Cannot read stylesheet: {e}", path=path) from e
    try:
        return extractor.extract(text)
    except StylesheetParseError as e:
        raise e.with_path(path) from e

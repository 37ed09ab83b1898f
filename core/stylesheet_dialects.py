"""
Stylesheet Dialects Module
Per-dialect hooks (CSS, SCSS, LESS) used by the class extractor.

Every dialect emits the same model: class names plus the names that
inheritance-style directives point at. Composition (`composes:`) is plain
CSS-modules syntax and is handled by the extractor for all dialects.
"""

import re
from pathlib import Path
from typing import Dict, List, Sequence, Tuple, Union

# strings, block comments and url(...) are kept; `// ...` up to end of line is dropped
_LINE_COMMENT_RE = re.compile(
    r'''("(?:\\.|[^"\\\n])*"|'(?:\\.|[^'\\\n])*'|/\*.*?\*/|\burl\([^)]*\))|//[^\n]*''',
    re.DOTALL)


def significant(tokens: Sequence) -> List:
    """Drop whitespace and comment tokens."""
    return [t for t in tokens if t.type not in ('whitespace', 'comment')]


def is_literal(token, value: str) -> bool:
    return token is not None and token.type == 'literal' and token.value == value


def dotted_names(tokens: Sequence) -> List[str]:
    """Names written as `.name` or `.name(...)` anywhere in `tokens`."""
    names = []
    tokens = list(tokens)
    for i, token in enumerate(tokens):
        if is_literal(token, '.') and i + 1 < len(tokens):
            nxt = tokens[i + 1]
            if nxt.type == 'ident':
                names.append(nxt.value)
            elif nxt.type == 'function':
                names.append(nxt.name)
        elif token.type == 'function':
            names.extend(dotted_names(token.arguments))
        elif token.type in ('() block', '[] block'):
            names.extend(dotted_names(token.content))
    return names


class StylesheetDialect:
    """Plain CSS modules."""

    name = 'css'
    extensions: Tuple[str, ...] = ('.css',)
    line_comments = False

    def preprocess(self, text: str) -> str:
        if self.line_comments:
            return _LINE_COMMENT_RE.sub(lambda m: m.group(1) or '', text)
        return text

    def is_mixin_definition(self, prelude: Sequence) -> bool:
        return False

    def selector_targets(self, prelude: Sequence) -> Tuple[List, List[str]]:
        """Split inheritance targets out of a selector prelude.

        Returns the prelude with the directive removed and the target names.
        """
        return list(prelude), []

    def statement_targets(self, tokens: Sequence) -> List[str]:
        return []

    def at_rule_targets(self, at_rule) -> List[str]:
        return []

    def __repr__(self):
        return f"<{type(self).__name__} {self.name}>"


class SCSSDialect(StylesheetDialect):
    name = 'scss'
    extensions = ('.scss',)
    line_comments = True

    def at_rule_targets(self, at_rule) -> List[str]:
        # @extend .foo, .bar !optional;  placeholders (%foo) are not classes
        if at_rule.lower_at_keyword == 'extend':
            return dotted_names(at_rule.prelude)
        return []


class LESSDialect(StylesheetDialect):
    name = 'less'
    extensions = ('.less',)
    line_comments = True

    def is_mixin_definition(self, prelude: Sequence) -> bool:
        # .mixin() { }  /  .mixin(@a) when (@a > 0) { }
        sig = significant(prelude)
        return len(sig) >= 2 and is_literal(sig[0], '.') and sig[1].type == 'function'

    def selector_targets(self, prelude: Sequence) -> Tuple[List, List[str]]:
        kept, targets = [], []
        for token in prelude:
            if token.type == 'function' and token.lower_name == 'extend' and kept and is_literal(kept[-1], ':'):
                kept.pop()
                targets.extend(dotted_names(token.arguments))
                continue
            kept.append(token)
        return kept, targets

    def statement_targets(self, tokens: Sequence) -> List[str]:
        sig = significant(tokens)
        if not sig:
            return []
        # &:extend(.foo all);
        extends = [t for t in sig if t.type == 'function' and t.lower_name == 'extend']
        if extends:
            return [name for t in extends for name in dotted_names(t.arguments)]
        # mixin call: .foo;  .foo();  #ns > .foo();
        if is_literal(sig[0], '.') or sig[0].type == 'hash':
            return dotted_names(sig)
        return []


DIALECTS: Dict[str, StylesheetDialect] = {
    d.name: d for d in (StylesheetDialect(), SCSSDialect(), LESSDialect())
}


def get_dialect(name: str) -> StylesheetDialect:
    try:
        return DIALECTS[name.lower()]
    except KeyError:
        raise ValueError(f"Unknown stylesheet dialect '{name}'") from None


def dialect_for_path(path: Union[str, Path]) -> StylesheetDialect:
    suffix = Path(path).suffix.lower()
    for dialect in DIALECTS.values():
        if suffix in dialect.extensions:
            return dialect
    raise ValueError(f"No stylesheet dialect for '{path}'")

"""
Usage Collector Module
Finds stylesheet imports in a JS/TS syntax tree and the class tokens read
through each imported style object.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, Iterator, List, Optional, Tuple, Union

from tree_sitter import Node, Tree

from utils.file_utils import is_style_import

from .jsx_treesitter_parser import node_text

logger = logging.getLogger(__name__)

_ESCAPE_RE = re.compile(r'\\(.)', re.DOTALL)


class AccessKind(Enum):
    LITERAL = 'literal'
    DYNAMIC = 'dynamic'
    NOT_APPLICABLE = 'not-applicable'


@dataclass(frozen=True)
class ImportBinding:
    local_name: str
    specifier: str
    line: int
    column: int


@dataclass(frozen=True)
class PropertyAccess:
    kind: AccessKind
    token: Optional[str] = None
    line: int = 0
    column: int = 0


@dataclass(frozen=True)
class UsageRecord:
    token: str
    line: int
    column: int


NOT_APPLICABLE = PropertyAccess(AccessKind.NOT_APPLICABLE)


def _position(node: Node) -> Tuple[int, int]:
    row, column = node.start_point[0], node.start_point[1]
    return row + 1, column + 1


def _walk(node: Node) -> Iterator[Node]:
    """Pre-order traversal in source order."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def string_value(node: Optional[Node]) -> Optional[str]:
    """Value of a string literal or substitution-free template; None otherwise."""
    if node is None:
        return None
    if node.type == 'string':
        return _ESCAPE_RE.sub(r'\1', node_text(node)[1:-1])
    if node.type == 'template_string':
        if any(child.type == 'template_substitution' for child in node.children):
            return None
        return _ESCAPE_RE.sub(r'\1', node_text(node)[1:-1])
    if node.type == 'number':
        return node_text(node)
    return None


def _binding_from_clause(clause: Node) -> Optional[str]:
    default_name = namespace_name = None
    for child in clause.named_children:
        if child.type == 'identifier':
            default_name = node_text(child)
        elif child.type == 'namespace_import':
            for sub in child.named_children:
                if sub.type == 'identifier':
                    namespace_name = node_text(sub)
    return default_name or namespace_name


def find_style_imports(tree: Tree) -> List[ImportBinding]:
    """Default / namespace imports of .css, .scss and .less files."""
    bindings = []
    for node in tree.root_node.named_children:
        if node.type != 'import_statement':
            continue
        specifier = string_value(node.child_by_field_name('source'))
        if not specifier or not is_style_import(specifier):
            continue
        clause = next((c for c in node.named_children if c.type == 'import_clause'), None)
        local_name = _binding_from_clause(clause) if clause is not None else None
        if not local_name:
            logger.debug(f"Import of {specifier} binds no style object; skipped")
            continue
        line, column = _position(node)
        bindings.append(ImportBinding(local_name, specifier, line, column))
    return bindings


def classify_access(node: Node, binding: Union[ImportBinding, str]) -> PropertyAccess:
    """Classify one node as a literal, dynamic or unrelated access on `binding`."""
    name = binding.local_name if isinstance(binding, ImportBinding) else binding
    if node.type not in ('member_expression', 'subscript_expression'):
        return NOT_APPLICABLE
    obj = node.child_by_field_name('object')
    if obj is None or obj.type != 'identifier' or node_text(obj) != name:
        return NOT_APPLICABLE

    line, column = _position(node)
    if node.type == 'member_expression':
        prop = node.child_by_field_name('property')
        if prop is None or prop.type != 'property_identifier':
            return NOT_APPLICABLE
        return PropertyAccess(AccessKind.LITERAL, node_text(prop), line, column)

    token = string_value(node.child_by_field_name('index'))
    if token is None:
        return PropertyAccess(AccessKind.DYNAMIC, None, line, column)
    return PropertyAccess(AccessKind.LITERAL, token, line, column)


def collect_accesses(tree: Tree, binding: Union[ImportBinding, str]) -> List[PropertyAccess]:
    """Every literal and dynamic access on the binding, in source order."""
    accesses = []
    for node in _walk(tree.root_node):
        access = classify_access(node, binding)
        if access.kind is not AccessKind.NOT_APPLICABLE:
            accesses.append(access)
    return accesses


def usages_from_accesses(accesses: Iterable[PropertyAccess]) -> List[UsageRecord]:
    """Distinct literal tokens, first occurrence kept; dynamic keys are ignored."""
    seen: Dict[str, UsageRecord] = {}
    for access in accesses:
        if access.kind is AccessKind.LITERAL and access.token not in seen:
            seen[access.token] = UsageRecord(access.token, access.line, access.column)
    return list(seen.values())


def collect_usages(tree: Tree, binding: Union[ImportBinding, str]) -> List[UsageRecord]:
    return usages_from_accesses(collect_accesses(tree, binding))

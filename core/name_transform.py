"""
Name Transform Module
Maps raw stylesheet class names to the property tokens accepted for them.
"""

import re
from typing import Dict, FrozenSet, Iterable

from .lint_options import TransformPolicy

_CAMEL_RE = re.compile(r'(?<=[A-Za-z0-9])[-_]+([A-Za-z])')
_DASHES_RE = re.compile(r'-+([A-Za-z])')


def camel_case(name: str) -> str:
    # foo-bar, foo_bar, foo--bar -> fooBar; separators before digits and at the edges stay
    return _CAMEL_RE.sub(lambda m: m.group(1).upper(), name)


def dashes_camel_case(name: str) -> str:
    return _DASHES_RE.sub(lambda m: m.group(1).upper(), name)


def accepted_tokens(raw: str, policy: TransformPolicy) -> FrozenSet[str]:
    """Property tokens that count as a reference to class `raw`."""
    if policy is TransformPolicy.CAMEL_CASE:
        return frozenset((raw, camel_case(raw)))
    if policy is TransformPolicy.DASHES:
        return frozenset((raw, dashes_camel_case(raw)))
    if policy is TransformPolicy.ONLY:
        return frozenset((camel_case(raw),))
    if policy is TransformPolicy.DASHES_ONLY:
        return frozenset((dashes_camel_case(raw),))
    return frozenset((raw,))


def build_token_map(names: Iterable[str], policy: TransformPolicy) -> Dict[str, str]:
    """Reverse lookup: accepted token -> raw class name (first declaration wins)."""
    token_map: Dict[str, str] = {}
    for name in names:
        for token in accepted_tokens(name, policy):
            token_map.setdefault(token, name)
    return token_map

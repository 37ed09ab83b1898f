"""
Lint Options Module
Validates the option mapping handed to the checker.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from .errors import ConfigurationError


class TransformPolicy(Enum):
    OFF = False
    CAMEL_CASE = True
    DASHES = 'dashes'
    ONLY = 'only'
    DASHES_ONLY = 'dashes-only'

    @classmethod
    def from_option(cls, value: Any) -> 'TransformPolicy':
        """Map a raw `camelCase` option value to a policy.

        Only real booleans and the three known strings are accepted; `1`,
        `"true"` and friends are configuration errors.
        """
        if isinstance(value, TransformPolicy):
            return value
        if value is False:
            return cls.OFF
        if value is True:
            return cls.CAMEL_CASE
        if isinstance(value, str):
            for policy in cls:
                if policy.value == value:
                    return policy
        raise ConfigurationError(
            f"Invalid camelCase option {value!r}; expected false, true, "
            f"'dashes', 'only' or 'dashes-only'")


# option key -> attribute name
_KEY_ALIASES = {
    'camelCase': 'camel_case',
    'camel_case': 'camel_case',
    'markAsUsed': 'mark_as_used',
    'mark_as_used': 'mark_as_used',
    'basePath': 'base_path',
    'base_path': 'base_path',
}


@dataclass(frozen=True)
class LintOptions:
    camel_case: TransformPolicy = TransformPolicy.OFF
    mark_as_used: Tuple[str, ...] = field(default_factory=tuple)
    base_path: Optional[Path] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'camelCase': self.camel_case.value,
            'markAsUsed': list(self.mark_as_used),
            'basePath': str(self.base_path) if self.base_path else None,
        }


def parse_options(options: Union[LintOptions, Mapping[str, Any], None] = None) -> LintOptions:
    """Build LintOptions from a mapping such as `{"camelCase": "dashes"}`."""
    if options is None:
        return LintOptions()
    if isinstance(options, LintOptions):
        return options
    if not isinstance(options, Mapping):
        raise ConfigurationError(f"Options must be a mapping, got {type(options).__name__}")

    values: Dict[str, Any] = {}
    for key, value in options.items():
        attr = _KEY_ALIASES.get(key)
        if attr is None:
            raise ConfigurationError(f"Unknown option '{key}'")
        values[attr] = value

    camel_case = TransformPolicy.OFF
    if 'camel_case' in values:
        camel_case = TransformPolicy.from_option(values['camel_case'])

    mark_as_used = values.get('mark_as_used') or ()
    if isinstance(mark_as_used, str) or not all(isinstance(n, str) for n in mark_as_used):
        raise ConfigurationError("markAsUsed must be a list of class names")

    base_path = values.get('base_path')
    if base_path is not None and not isinstance(base_path, (str, Path)):
        raise ConfigurationError("basePath must be a path string")

    return LintOptions(
        camel_case=camel_case,
        mark_as_used=tuple(mark_as_used),
        base_path=Path(base_path) if base_path else None,
    )

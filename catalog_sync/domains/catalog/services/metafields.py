"""
Typed reads from a flattened metafield mapping.

Each helper returns None when the value is missing or unparseable, so an
absent metafield never turns into ``0`` or ``False`` on the destination.
"""

import math
import re
from typing import Mapping, Optional

_TRUE_TOKENS = frozenset({"true", "yes", "1"})
_FALSE_TOKENS = frozenset({"false", "no", "0"})

# Leading decimal number, so "12.5 cm" reads as 12.5
_NUMBER_PREFIX = re.compile(r"^\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def get_float_from_metafield(metafields: Mapping[str, str], key: str) -> Optional[float]:
    value = metafields.get(key)
    if value is None:
        return None
    match = _NUMBER_PREFIX.match(str(value))
    if not match:
        return None
    parsed = float(match.group(0))
    return None if math.isnan(parsed) else parsed


def get_boolean_from_metafield(metafields: Mapping[str, str], key: str) -> Optional[bool]:
    value = metafields.get(key)
    if value is None:
        return None
    normalized = str(value).strip().lower()
    if normalized in _TRUE_TOKENS:
        return True
    if normalized in _FALSE_TOKENS:
        return False
    return None


def get_string_from_metafield(metafields: Mapping[str, str], key: str) -> Optional[str]:
    value = metafields.get(key)
    if not value:
        return None
    return str(value).strip() or None

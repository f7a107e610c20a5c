"""Structural matching of partial criteria against user records."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any


def match_object(criteria: Mapping[str, Any], candidate: Any) -> bool:
    """Return True if every field in ``criteria`` is present and equal in ``candidate``.

    Nested mappings are compared with the same subset rule, so
    ``{"meta": {"role": "admin"}}`` matches a record whose ``meta`` holds
    more keys than ``role``. Empty criteria match any mapping.
    """
    if not isinstance(candidate, Mapping):
        return False

    for key, expected in criteria.items():
        if key not in candidate:
            return False
        actual = candidate[key]
        if isinstance(expected, Mapping):
            if not match_object(expected, actual):
                return False
        elif actual != expected:
            return False

    return True

"""Rewrite a constraint for a new version while keeping its style.

``^1.0`` bumped to ``1.5.0`` stays a caret constraint (``^1.5.0``), ``2.*``
stays a major wildcard (``3.*``) and ``1.0 - 1.4`` keeps its lower bound
(``1.0 - 1.5.0``). Branch constraints are never rewritten, and comparison
ranges collapse to a caret on the new version.
"""

from __future__ import annotations

import re

from phpkeeper.core.constraint_parser import parse_constraint
from phpkeeper.models.constraint import ConstraintKind
from phpkeeper.utils.version_utils import coerce_version

_MAJOR_WILDCARD_RE = re.compile(r"^\d+\.\*$")
_LEADING_V_RE = re.compile(r"^v", re.IGNORECASE)


def format_new_version(original: str, new_version: str) -> str:
    """Build the constraint that replaces *original* for *new_version*.

    Args:
        original: The constraint currently in the manifest.
        new_version: The selected release, with or without a ``v`` prefix.

    Returns:
        The new constraint string.

    Examples:
        >>> format_new_version("^1.0", "v1.5.0")
        '^1.5.0'
        >>> format_new_version("1.2.*", "1.4.2")
        '1.4.*'
        >>> format_new_version(">=1.0 <2.0", "1.5.0")
        '^1.5.0'
        >>> format_new_version("dev-main", "2.0.0")
        'dev-main'
    """
    constraint = parse_constraint(original)
    cleaned = _LEADING_V_RE.sub("", new_version)

    if constraint.kind is ConstraintKind.DEV:
        return original

    if constraint.kind is ConstraintKind.WILDCARD:
        coerced = coerce_version(cleaned)
        if coerced is None:
            return original
        if _MAJOR_WILDCARD_RE.match(original):
            return f"{coerced.major}.*"
        return f"{coerced.major}.{coerced.minor}.*"

    if constraint.kind is ConstraintKind.HYPHEN:
        left = original.split(" - ", 1)[0].strip()
        return f"{left} - {cleaned}"

    if constraint.kind is ConstraintKind.RANGE:
        return f"^{cleaned}"

    return f"{constraint.prefix}{cleaned}"

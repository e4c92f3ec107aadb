"""
Constraint data model for phpkeeper.

This module defines the structured form of a single Composer version
constraint (``^1.2``, ``~2.0``, ``>=1.0 <2.0``, ``dev-main`` ...) as produced
by :func:`phpkeeper.core.constraint_parser.parse_constraint`.
"""

from __future__ import annotations

from enum import Enum
from dataclasses import dataclass


class ConstraintKind(Enum):
    """Syntactic family a constraint belongs to."""

    EXACT = "exact"
    RANGE = "range"
    HYPHEN = "hyphen"
    WILDCARD = "wildcard"
    TILDE = "tilde"
    CARET = "caret"
    DEV = "dev"


@dataclass(frozen=True)
class Constraint:
    """A parsed Composer version constraint.

    Attributes:
        kind: Detected constraint family.
        prefix: Operator token (``^``, ``~``, ``>=``, ``dev-``) or empty.
        base_version: Normalized version the constraint is anchored on. For
            branch constraints this is the opaque branch name; for ``-dev``
            suffixed constraints it is the full original string.
        original: The verbatim (trimmed) input. Never rewritten; the
            reformatter derives new constraints from it.
        is_development: Whether the input carries a development or
            pre-release marker.
    """

    kind: ConstraintKind
    prefix: str
    base_version: str
    original: str
    is_development: bool = False

    @property
    def is_alias(self) -> bool:
        """Return True for inline aliases such as ``dev-main as 1.0.0``."""
        return self.kind is ConstraintKind.DEV and " as " in self.original

    @property
    def is_comparable(self) -> bool:
        """Return True if ``base_version`` may be coerced to a release.

        Branch and ``-dev`` constraints name moving targets and cannot be
        compared numerically; inline aliases can, through the aliased
        version.
        """
        return self.kind is not ConstraintKind.DEV or self.is_alias

    def __str__(self) -> str:
        return self.original

"""Update severity classification.

Compares the version a manifest currently declares against a candidate
release and reports whether moving to the candidate is a ``major``,
``minor`` or ``patch`` change. Both sides go through the constraint parser
first, so ``^1.0`` and ``v1.0.0`` compare the same way; anything that
cannot be coerced to a numeric version yields ``None`` instead of an error.
"""

from __future__ import annotations

from typing import Optional

from packaging.version import Version

from phpkeeper.core.constraint_parser import parse_constraint
from phpkeeper.models.constraint import Constraint
from phpkeeper.utils.version_utils import coerce_version, release_parts

#: Recognised diff types, most severe first.
DIFF_TYPES = ("major", "minor", "patch")


def normalize_version(constraint: Constraint) -> Optional[Version]:
    """Return the comparable bare version behind *constraint*.

    Branch constraints (``dev-main``, ``1.x-dev``) have no comparable
    version unless they carry an inline alias (``dev-main as 1.2.0``).
    """
    if not constraint.is_comparable:
        return None
    return coerce_version(constraint.base_version)


def get_diff_type(current: str, candidate: str) -> Optional[str]:
    """Classify the change from *current* to *candidate*.

    ``minor`` requires an equal major and ``patch`` an equal major and minor,
    so a candidate from an older major (``^2.5`` to ``1.9.0``) is reported as
    no update rather than a minor one, however its minor compares.

    Args:
        current: The currently declared constraint (``^1.0``, ``1.2.*``).
        candidate: The candidate release (``2.0.0``, ``v1.5.0``).

    Returns:
        ``"major"``, ``"minor"``, ``"patch"``, or ``None`` when there is no
        upgrade or either side is not comparable.

    Examples:
        >>> get_diff_type("^1.0", "2.0.0")
        'major'
        >>> get_diff_type("^1.0.0", "1.0.5")
        'patch'
        >>> get_diff_type("^1.0.0", "1.0.0") is None
        True
    """
    current_version = normalize_version(parse_constraint(current))
    candidate_version = normalize_version(parse_constraint(candidate))
    if current_version is None or candidate_version is None:
        return None

    cur_major, cur_minor, cur_patch = release_parts(current_version)
    new_major, new_minor, new_patch = release_parts(candidate_version)

    if new_major > cur_major:
        return "major"
    if new_major == cur_major and new_minor > cur_minor:
        return "minor"
    if new_major == cur_major and new_minor == cur_minor and new_patch > cur_patch:
        return "patch"
    return None

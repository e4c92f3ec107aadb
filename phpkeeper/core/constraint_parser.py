"""Composer version constraint parser.

Turns a raw constraint string from ``composer.json`` into a
:class:`~phpkeeper.models.constraint.Constraint`. The parser is total: every
input yields a constraint, and anything that matches no specific syntax
degrades to an ``exact`` constraint with a best-effort base version.

Syntaxes overlap (``1.x-dev`` contains neither ``^`` nor ``*`` but
``2.*@dev`` does, ``dev-main as 1.0`` starts like a branch), so detection runs
through an explicit, ordered rule table, and the first rule that matches
wins:

======  ==================  =================================================
Order   Kind                Trigger
======  ==================  =================================================
1       ``dev`` (alias)     contains ``" as "``
2       ``dev`` (branch)    starts with ``dev-``
3       ``dev`` (suffix)    ends with ``-dev`` (includes ``.x-dev``)
4       ``caret``           starts with ``^``
5       ``tilde``           starts with ``~``
6       ``wildcard``        contains ``*``
7       ``hyphen``          contains ``" - "``
8       ``range``           starts with ``>``, ``<``, ``!`` or ``=``
9       ``exact``           anything else
======  ==================  =================================================

Typical usage::

    >>> from phpkeeper.core.constraint_parser import parse_constraint
    >>> c = parse_constraint("^1.2.3")
    >>> c.kind, c.prefix, c.base_version
    (<ConstraintKind.CARET: 'caret'>, '^', '1.2.3')
"""

from __future__ import annotations

import re
from typing import Callable, Optional, Sequence, Tuple

from phpkeeper.models.constraint import Constraint, ConstraintKind

_LEADING_V_RE = re.compile(r"^v", re.IGNORECASE)
_STABILITY_FLAG_RE = re.compile(r"@(dev|alpha|beta|rc|stable)$", re.IGNORECASE)
_OPERATOR_RUN_RE = re.compile(r"^([><!=]+)")
_OPERATOR_VERSION_RE = re.compile(r"([><!=]+)\s*(\d+(?:\.\d+)*(?:-[\w.]+)?)")

#: Lower-cased fragments that mark a constraint as development / pre-release.
UNSTABLE_MARKERS: Tuple[str, ...] = (
    "-dev",
    "alpha",
    "beta",
    "-rc",
    "@dev",
    "@alpha",
    "@beta",
    "@rc",
)


# ---------------------------------------------------------------------------
# Normalization helpers
# ---------------------------------------------------------------------------


def normalize_version_string(version: str) -> str:
    """Strip a leading ``v`` and a trailing ``@stability`` flag.

    Example::

        >>> normalize_version_string(" v1.2.0@beta ")
        '1.2.0'
    """
    stripped = _LEADING_V_RE.sub("", version.strip())
    return _STABILITY_FLAG_RE.sub("", stripped)


def has_unstable_marker(text: str) -> bool:
    """Return True if *text* carries a dev or pre-release marker."""
    lower = text.lower()
    return any(marker in lower for marker in UNSTABLE_MARKERS)


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------


def _match_inline_alias(original: str) -> Optional[Constraint]:
    if " as " not in original:
        return None
    aliased = original.split(" as ")[1].strip()
    return Constraint(
        kind=ConstraintKind.DEV,
        prefix="",
        base_version=normalize_version_string(aliased),
        original=original,
        is_development=True,
    )


def _match_branch(original: str) -> Optional[Constraint]:
    if not original.startswith("dev-"):
        return None
    return Constraint(
        kind=ConstraintKind.DEV,
        prefix="dev-",
        base_version=original[len("dev-"):],
        original=original,
        is_development=True,
    )


def _match_dev_suffix(original: str) -> Optional[Constraint]:
    if not original.endswith("-dev"):
        return None
    return Constraint(
        kind=ConstraintKind.DEV,
        prefix="",
        base_version=original,
        original=original,
        is_development=True,
    )


def _prefixed(symbol: str, kind: ConstraintKind) -> Callable[[str], Optional[Constraint]]:
    def rule(original: str) -> Optional[Constraint]:
        if not original.startswith(symbol):
            return None
        remainder = original[len(symbol):]
        return Constraint(
            kind=kind,
            prefix=symbol,
            base_version=normalize_version_string(remainder),
            original=original,
            is_development=has_unstable_marker(original),
        )

    rule.__name__ = f"_match_{kind.value}"
    return rule


def _match_wildcard(original: str) -> Optional[Constraint]:
    if "*" not in original:
        return None
    head = original.split("*", 1)[0]
    if head.endswith("."):
        head = head[:-1]
    return Constraint(
        kind=ConstraintKind.WILDCARD,
        prefix="",
        base_version=normalize_version_string(head),
        original=original,
        is_development=has_unstable_marker(original),
    )


def _match_hyphen(original: str) -> Optional[Constraint]:
    if " - " not in original:
        return None
    left = original.split(" - ", 1)[0].strip()
    return Constraint(
        kind=ConstraintKind.HYPHEN,
        prefix="",
        base_version=normalize_version_string(left),
        original=original,
        is_development=has_unstable_marker(original),
    )


def _match_range(original: str) -> Optional[Constraint]:
    operator = _OPERATOR_RUN_RE.match(original)
    if not operator:
        return None

    versioned = _OPERATOR_VERSION_RE.search(original)
    if versioned:
        version = versioned.group(2)
    else:
        version = re.sub(r"[><!=]+", "", original)

    return Constraint(
        kind=ConstraintKind.RANGE,
        prefix=operator.group(1),
        base_version=normalize_version_string(version),
        original=original,
        is_development=has_unstable_marker(original),
    )


#: Detection order. Earlier rules shadow later ones.
RULES: Sequence[Callable[[str], Optional[Constraint]]] = (
    _match_inline_alias,
    _match_branch,
    _match_dev_suffix,
    _prefixed("^", ConstraintKind.CARET),
    _prefixed("~", ConstraintKind.TILDE),
    _match_wildcard,
    _match_hyphen,
    _match_range,
)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def parse_constraint(raw: str) -> Constraint:
    """Parse a Composer version constraint.

    Never raises: input that matches no rule becomes an ``exact`` constraint
    whose base version is the normalized input, even if that is not a
    number at all.

    Args:
        raw: Constraint text as written in ``composer.json``.

    Returns:
        The parsed :class:`Constraint`.

    Examples:
        >>> parse_constraint("dev-main as 1.0.0").base_version
        '1.0.0'
        >>> parse_constraint("8.1.*").base_version
        '8.1'
        >>> parse_constraint(">=1.0 <2.0").prefix
        '>='
        >>> parse_constraint("not a version").kind
        <ConstraintKind.EXACT: 'exact'>
    """
    original = (raw or "").strip()

    for rule in RULES:
        constraint = rule(original)
        if constraint is not None:
            return constraint

    return Constraint(
        kind=ConstraintKind.EXACT,
        prefix="",
        base_version=normalize_version_string(original),
        original=original,
        is_development=has_unstable_marker(original),
    )

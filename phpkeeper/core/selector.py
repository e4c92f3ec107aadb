"""Version selection for a single package.

:func:`select_version` picks the release a dependency should move to from the
list Packagist publishes for it. The list is trusted to be ordered newest
first; the selector never re-sorts it. Selection runs as a fixed pipeline:

1. **Stability filter**: drop releases below ``minimum_stability``. When
   nothing survives, the first published entry is returned bare.
2. **Stable preference**: with ``prefer_stable`` the newest stable release
   wins; otherwise the newest filtered release.
3. **PHP gate**: if the working release cannot run on the consumer's PHP,
   record it as skipped and fall back to the newest compatible release.
4. **Major gate**: note a newer major; when majors are not allowed, fall
   back to the newest release on the current major.
5. **Deprecation**: copy the final release's abandonment marker.

Gates 3 and 4 re-search the same *candidate pool* (stable releases under
``prefer_stable``, else every filtered release) instead of restarting the
pipeline, so a later gate may replace what an earlier one picked.

Typical usage::

    from phpkeeper.core.selector import select_version
    from phpkeeper.models.registry import RegistryVersion, SelectionPolicy

    result = select_version(
        [RegistryVersion("2.0.0"), RegistryVersion("1.5.0")],
        SelectionPolicy(allow_major=False, current_version="^1.0"),
    )
    result.version           # "1.5.0"
    result.major_available   # "2.0.0"
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

from phpkeeper.core.constraint_parser import parse_constraint
from phpkeeper.core.diff import normalize_version
from phpkeeper.core.php_compat import check_php_compatibility
from phpkeeper.core.stability import Stability, classify_stability
from phpkeeper.models.registry import RegistryVersion, SelectionPolicy, SelectionResult
from phpkeeper.utils.logger import get_logger

logger = get_logger("selector")


@dataclass
class _Working:
    """Mutable scratch state threaded through the pipeline stages."""

    release: RegistryVersion
    pool: List[RegistryVersion]
    major_available: Optional[str] = None
    php_incompatible: bool = False
    skipped_version: Optional[str] = None


def _is_php_compatible(release: RegistryVersion, php_constraint: str) -> bool:
    if not release.php_requirement:
        return True
    return check_php_compatibility(php_constraint, release.php_requirement).satisfied


def _major_of(version: str) -> Optional[int]:
    normalized = normalize_version(parse_constraint(version))
    return normalized.major if normalized is not None else None


# ---------------------------------------------------------------------------
# Stages
# ---------------------------------------------------------------------------


def _apply_php_gate(state: _Working, policy: SelectionPolicy) -> None:
    php_constraint = policy.php_constraint
    if not php_constraint or not state.release.php_requirement:
        return

    result = check_php_compatibility(php_constraint, state.release.php_requirement)
    if result.satisfied:
        return

    logger.debug(
        "Skipping %s: %s (consumer php %s)",
        state.release.version,
        result.reason,
        php_constraint,
    )
    state.php_incompatible = True
    state.skipped_version = state.release.version

    for candidate in state.pool:
        if _is_php_compatible(candidate, php_constraint):
            logger.debug("PHP gate selected %s", candidate.version)
            state.release = candidate
            return

    logger.debug("No PHP-compatible release in pool, keeping %s", state.release.version)


def _apply_major_gate(state: _Working, policy: SelectionPolicy) -> None:
    if not policy.current_version:
        return

    current_major = _major_of(policy.current_version)
    working_major = _major_of(state.release.version)
    if current_major is None or working_major is None:
        return
    if working_major <= current_major:
        return

    state.major_available = state.release.version
    if policy.allow_major:
        return

    for candidate in state.pool:
        if _major_of(candidate.version) == current_major:
            logger.debug(
                "Major gate: %s available, staying on %s",
                state.major_available,
                candidate.version,
            )
            state.release = candidate
            return

    logger.debug("No release on major %d in pool, keeping %s", current_major, state.release.version)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def select_version(
    versions: Sequence[RegistryVersion],
    policy: Optional[SelectionPolicy] = None,
) -> Optional[SelectionResult]:
    """Select the target release from a newest-first release list.

    Args:
        versions: Releases as published, newest first.
        policy: Selection knobs; defaults to :class:`SelectionPolicy()`.

    Returns:
        A fresh :class:`SelectionResult`, or ``None`` iff *versions* is empty.

    Example::

        >>> select_version(
        ...     [RegistryVersion("2.0.0-beta"), RegistryVersion("1.5.0")],
        ...     SelectionPolicy(minimum_stability=Stability.BETA),
        ... ).version
        '1.5.0'
    """
    if not versions:
        return None
    policy = policy or SelectionPolicy()

    # Stage 1
    filtered = [
        release
        for release in versions
        if classify_stability(release.version) >= policy.minimum_stability
    ]
    if not filtered:
        first = versions[0]
        logger.debug(
            "No release meets minimum stability %s, falling back to %s",
            policy.minimum_stability,
            first.version,
        )
        return SelectionResult(version=first.version, release_time=first.release_time)

    # Stage 2
    stable = [r for r in filtered if classify_stability(r.version) is Stability.STABLE]
    if policy.prefer_stable:
        pool = stable
        working = stable[0] if stable else filtered[0]
    else:
        pool = filtered
        working = filtered[0]
    logger.debug("Initial selection %s from %d candidates", working.version, len(filtered))

    state = _Working(release=working, pool=pool)

    # Stages 3 and 4
    _apply_php_gate(state, policy)
    _apply_major_gate(state, policy)

    # Stage 5
    abandoned = state.release.abandoned
    deprecated = abandoned is True or isinstance(abandoned, str)
    replacement = abandoned if isinstance(abandoned, str) else None

    return SelectionResult(
        version=state.release.version,
        release_time=state.release.release_time,
        php_requirement=state.release.php_requirement,
        major_available=state.major_available,
        deprecated=deprecated,
        replacement=replacement,
        php_incompatible=state.php_incompatible,
        skipped_version=state.skipped_version,
    )

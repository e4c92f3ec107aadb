"""PHP runtime compatibility checks.

A consumer project pins the PHP versions it runs on (``"php": "^8.1"`` in
``require``), and every Packagist release declares the PHP versions it
supports. :func:`check_php_compatibility` answers whether the lowest PHP
version the consumer allows can run a given release.

Composer constraint syntax is irregular (bare majors, partial versions,
``|`` and ``||`` alternatives, comma and space conjunctions), so the check is
layered. Each OR alternative is first tested against its implied upper bound,
then translated into a :class:`packaging.specifiers.SpecifierSet` for a real
containment test. When containment fails or the alternative cannot be
translated, same-major and lower-bound heuristics get the final say. The
heuristics are permissive: an ambiguous shape is reported as satisfied
rather than rejected.

Typical usage::

    from phpkeeper.core.php_compat import check_php_compatibility

    result = check_php_compatibility("^8.0", "^8.1")
    if not result.satisfied:
        print(result.reason)   # "requires php ^8.1"
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from packaging.specifiers import InvalidSpecifier, SpecifierSet
from packaging.version import Version

from phpkeeper.utils.logger import get_logger
from phpkeeper.utils.version_utils import coerce_version

logger = get_logger("php_compat")

WILDCARD = "*"

_OR_SPLIT_RE = re.compile(r"\s*\|\|\s*")
_STABILITY_FLAG_RE = re.compile(r"@(dev|alpha|beta|rc|stable)", re.IGNORECASE)
_UPPER_BOUND_RE = re.compile(r"<(=?)\s*(\d+(?:\.\d+)*)")
_CARET_MAJOR_RE = re.compile(r"\^(\d+)")
_OPERATOR_GAP_RE = re.compile(r"([<>=!]+)\s+")

_VERSION = r"v?(\d+)(?:\.(\d+))?(?:\.(\d+))?"
_CARET_RE = re.compile(rf"^\^{_VERSION}$")
_TILDE_RE = re.compile(rf"^~{_VERSION}$")
_COMPARISON_RE = re.compile(rf"^(>=|<=|>|<|!=|==|=){_VERSION}$")
_BARE_RE = re.compile(rf"^{_VERSION}$")
_WILDCARD_RE = re.compile(r"^v?(\d+)(?:\.(\d+))?\.[*xX]$")


@dataclass(frozen=True)
class CompatibilityResult:
    """Outcome of a PHP compatibility check.

    Attributes:
        satisfied: Whether the consumer's PHP range can run the release.
        reason: Human-readable explanation when not satisfied.
    """

    satisfied: bool
    reason: Optional[str] = None


# ---------------------------------------------------------------------------
# Constraint helpers
# ---------------------------------------------------------------------------


def normalize_composer_constraint(constraint: Optional[str]) -> str:
    """Bring a Composer constraint into a canonical textual form.

    ``|`` and ``||`` become ``" || "``, commas become spaces (AND), and
    ``@stability`` flags are dropped. Empty input, ``*`` and extension
    requirements (``ext-...``) normalize to ``"*"``.

    Example::

        >>> normalize_composer_constraint("^7.0|^8.0")
        '^7.0 || ^8.0'
        >>> normalize_composer_constraint(">=7.2.5, <8.0")
        '>=7.2.5 <8.0'
    """
    if not constraint:
        return WILDCARD

    normalized = constraint.strip()
    normalized = normalized.replace("||", "|").replace("|", " || ")
    normalized = _OR_SPLIT_RE.sub(" || ", normalized)
    normalized = re.sub(r",\s*", " ", normalized)
    normalized = _STABILITY_FLAG_RE.sub("", normalized)

    if normalized == WILDCARD or normalized.startswith("ext-"):
        return WILDCARD
    return normalized


def _alternatives(normalized: str) -> List[str]:
    return [part.strip() for part in _OR_SPLIT_RE.split(normalized) if part.strip()]


def _is_upper_bound_only(alternative: str) -> bool:
    tokens = _OPERATOR_GAP_RE.sub(r"\1", alternative).split()
    return bool(tokens) and all(token.startswith("<") for token in tokens)


def extract_min_version(constraint: Optional[str]) -> Optional[Version]:
    """Return the lowest version any alternative of *constraint* allows.

    Alternatives made only of upper bounds (``<8.0``) have no lower bound
    and are ignored.

    Example::

        >>> extract_min_version("^7.2.5 || ^8.0")
        <Version('7.2.5')>
        >>> extract_min_version("*") is None
        True
    """
    normalized = normalize_composer_constraint(constraint)
    if normalized == WILDCARD:
        return None

    minimum: Optional[Version] = None
    for alternative in _alternatives(normalized):
        if _is_upper_bound_only(alternative):
            continue
        coerced = coerce_version(alternative)
        if coerced is not None and (minimum is None or coerced < minimum):
            minimum = coerced
    return minimum


def extract_max_version(constraint: Optional[str]) -> Optional[Version]:
    """Return the exclusive ceiling implied by *constraint*, if any.

    An explicit ``<``/``<=`` bound wins; otherwise a caret constraint is
    capped at the next major. Anything else is unbounded.

    Example::

        >>> extract_max_version(">=7.2.5 <8.0")
        <Version('8.0.0')>
        >>> extract_max_version("^7.2")
        <Version('8.0.0')>
        >>> extract_max_version(">=8.0") is None
        True
    """
    normalized = normalize_composer_constraint(constraint)
    if normalized == WILDCARD:
        return None

    upper = _UPPER_BOUND_RE.search(normalized)
    if upper:
        return coerce_version(upper.group(2))

    caret = _CARET_MAJOR_RE.search(normalized)
    if caret:
        return Version(f"{int(caret.group(1)) + 1}.0.0")

    return None


# ---------------------------------------------------------------------------
# Range translation
# ---------------------------------------------------------------------------


def _parts(match: "re.Match[str]", offset: int = 1) -> Tuple[int, Optional[int], Optional[int]]:
    major = int(match.group(offset))
    minor = match.group(offset + 1)
    patch = match.group(offset + 2)
    return (
        major,
        int(minor) if minor is not None else None,
        int(patch) if patch is not None else None,
    )


def _floor(major: int, minor: Optional[int], patch: Optional[int]) -> str:
    return f"{major}.{minor or 0}.{patch or 0}"


def _x_range_ceiling(major: int, minor: Optional[int]) -> str:
    """Exclusive ceiling of a partial version used as an X-range."""
    if minor is None:
        return f"{major + 1}.0.0"
    return f"{major}.{minor + 1}.0"


def _caret(major: int, minor: Optional[int], patch: Optional[int]) -> List[str]:
    floor = _floor(major, minor, patch)
    if major > 0 or minor is None:
        ceiling = f"{major + 1}.0.0"
    elif minor > 0 or patch is None:
        ceiling = f"0.{minor + 1}.0"
    else:
        ceiling = f"0.0.{patch + 1}"
    return [f">={floor}", f"<{ceiling}"]


def _tilde(major: int, minor: Optional[int], patch: Optional[int]) -> List[str]:
    floor = _floor(major, minor, patch)
    if patch is None:
        ceiling = f"{major + 1}.0.0"
    else:
        ceiling = f"{major}.{minor + 1}.0"
    return [f">={floor}", f"<{ceiling}"]


def _bare(major: int, minor: Optional[int], patch: Optional[int]) -> List[str]:
    if patch is not None:
        return [f"=={major}.{minor}.{patch}"]
    return [f">={_floor(major, minor, None)}", f"<{_x_range_ceiling(major, minor)}"]


def _comparison(
    operator: str, major: int, minor: Optional[int], patch: Optional[int]
) -> List[str]:
    partial = patch is None
    floor = _floor(major, minor, patch)

    if operator in ("=", "=="):
        return _bare(major, minor, patch)
    if operator == "!=":
        if not partial:
            return [f"!={floor}"]
        if minor is None:
            return [f"!={major}.*"]
        return [f"!={major}.{minor}.*"]
    if operator == ">=":
        return [f">={floor}"]
    if operator == "<":
        return [f"<{floor}"]
    if operator == ">":
        return [f">={_x_range_ceiling(major, minor)}"] if partial else [f">{floor}"]
    # "<="
    return [f"<{_x_range_ceiling(major, minor)}"] if partial else [f"<={floor}"]


def _token_specifiers(token: str) -> Optional[List[str]]:
    if token in ("*", "x", "X"):
        return []

    for pattern, build in ((_CARET_RE, _caret), (_TILDE_RE, _tilde), (_BARE_RE, _bare)):
        match = pattern.match(token)
        if match:
            return build(*_parts(match))

    match = _COMPARISON_RE.match(token)
    if match:
        return _comparison(match.group(1), *_parts(match, offset=2))

    match = _WILDCARD_RE.match(token)
    if match:
        major = int(match.group(1))
        minor = int(match.group(2)) if match.group(2) is not None else None
        return [f">={_floor(major, minor, None)}", f"<{_x_range_ceiling(major, minor)}"]

    return None


def _hyphen_specifiers(alternative: str) -> Optional[List[str]]:
    left, right = (side.strip() for side in alternative.split(" - ", 1))
    low = _BARE_RE.match(left)
    high = _BARE_RE.match(right)
    if not low or not high:
        return None

    specifiers = [f">={_floor(*_parts(low))}"]
    major, minor, patch = _parts(high)
    if patch is None:
        specifiers.append(f"<{_x_range_ceiling(major, minor)}")
    else:
        specifiers.append(f"<={major}.{minor}.{patch}")
    return specifiers


def to_specifier_set(alternative: str) -> Optional[SpecifierSet]:
    """Translate one Composer alternative (no ``||``) into a SpecifierSet.

    Space-separated tokens are ANDed. Caret ranges follow the usual
    ``^0.x`` rules, tilde ranges follow Composer (``~1.2`` means
    ``>=1.2,<2.0``), wildcards and partial bare versions are X-ranges.

    Returns:
        The equivalent :class:`SpecifierSet`, or ``None`` if any token has a
        shape that cannot be translated.
    """
    alternative = alternative.strip()
    if not alternative:
        return None

    if " - " in alternative:
        specifiers = _hyphen_specifiers(alternative)
    else:
        specifiers = []
        for token in _OPERATOR_GAP_RE.sub(r"\1", alternative).split():
            translated = _token_specifiers(token)
            if translated is None:
                specifiers = None
                break
            specifiers.extend(translated)

    if specifiers is None:
        return None

    try:
        return SpecifierSet(",".join(specifiers))
    except InvalidSpecifier:
        logger.debug("Could not build specifier set for %r", alternative)
        return None


# ---------------------------------------------------------------------------
# Public checks
# ---------------------------------------------------------------------------


def check_php_compatibility(
    consumer: Optional[str], requirement: Optional[str]
) -> CompatibilityResult:
    """Check whether the consumer's PHP range can run a release.

    Args:
        consumer: The project's PHP constraint (``^8.1``) or a concrete
            version (``8.0.0``).
        requirement: The release's declared ``require.php`` constraint.

    Returns:
        :class:`CompatibilityResult`; ``reason`` names the requirement when
        unsatisfied.

    Examples:
        >>> check_php_compatibility("^8.3", "^7.2.5 || ^8.0").satisfied
        True
        >>> check_php_compatibility("^8.5", ">=7.4 <8.4").reason
        'requires php >=7.4 <8.4'
    """
    if not requirement or requirement == WILDCARD:
        return CompatibilityResult(satisfied=True)
    if not consumer:
        return CompatibilityResult(satisfied=True)

    consumer_min = extract_min_version(consumer)
    if consumer_min is None:
        return CompatibilityResult(satisfied=True)

    for alternative in _alternatives(normalize_composer_constraint(requirement)):
        ceiling = extract_max_version(alternative)
        if ceiling is not None and consumer_min >= ceiling:
            continue

        specifier_set = to_specifier_set(alternative)
        if specifier_set is not None and specifier_set.contains(
            consumer_min, prereleases=True
        ):
            return CompatibilityResult(satisfied=True)

        floor = extract_min_version(alternative)
        if floor is None:
            continue
        if alternative.startswith("^"):
            if consumer_min.major == floor.major and consumer_min >= floor:
                return CompatibilityResult(satisfied=True)
        elif ceiling is None and consumer_min >= floor:
            return CompatibilityResult(satisfied=True)

    return CompatibilityResult(satisfied=False, reason=f"requires php {requirement}")


def is_constraint_satisfied(version: Optional[str], constraint: Optional[str]) -> bool:
    """Return True if the concrete *version* satisfies *constraint*.

    A version that cannot be coerced is treated as satisfying anything.

    Examples:
        >>> is_constraint_satisfied("7.3.0", "^7.4 || ^8.0")
        False
        >>> is_constraint_satisfied("invalid-version", "^8.0")
        True
    """
    if not constraint or constraint == WILDCARD:
        return True

    coerced = coerce_version(version)
    if coerced is None:
        return True

    for alternative in _alternatives(normalize_composer_constraint(constraint)):
        specifier_set = to_specifier_set(alternative)
        if specifier_set is not None:
            if specifier_set.contains(coerced, prereleases=True):
                return True
            continue

        floor = coerce_version(alternative)
        if floor is not None and alternative.startswith("^") and floor.major == coerced.major:
            return True

    return False

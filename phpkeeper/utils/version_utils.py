"""
Version coercion utilities for phpkeeper.

Composer constraints and Packagist version strings are free-form (``v1.2``,
``8.1.*``, ``2.0.0-beta3``, ``>=7.4 <8.4``). Numeric reasoning in phpkeeper
first *coerces* such text into a plain ``MAJOR.MINOR.PATCH``
:class:`packaging.version.Version`: the first run of up to three
dot-separated integers is taken and missing parts are filled with zero.
"""

from __future__ import annotations

import re
from typing import Optional, Tuple

from packaging.version import InvalidVersion, Version

# First numeric "x", "x.y" or "x.y.z" not glued to surrounding digits
_COERCE_RE = re.compile(
    r"(?:^|[^\d])(\d{1,16})(?:\.(\d{1,16}))?(?:\.(\d{1,16}))?(?:$|[^\d])"
)


def coerce_version(text: Optional[str]) -> Optional[Version]:
    """Coerce arbitrary text into a three-part release version.

    Args:
        text: Any string that may contain a version number.

    Returns:
        A :class:`Version` with exactly three release components, or
        ``None`` when *text* contains no number at all.

    Examples:
        >>> coerce_version("v1.2")
        <Version('1.2.0')>
        >>> coerce_version(">=7.4 <8.4")
        <Version('7.4.0')>
        >>> coerce_version("dev-main") is None
        True
    """
    if not text:
        return None

    match = _COERCE_RE.search(text)
    if not match:
        return None

    major, minor, patch = match.groups()
    try:
        return Version(f"{int(major)}.{int(minor or 0)}.{int(patch or 0)}")
    except InvalidVersion:
        return None


def release_parts(version: Version) -> Tuple[int, int, int]:
    """Return ``(major, minor, patch)`` of *version*, padding with zeros."""
    release = version.release
    major = release[0] if len(release) > 0 else 0
    minor = release[1] if len(release) > 1 else 0
    patch = release[2] if len(release) > 2 else 0
    return major, minor, patch


def next_major(version: Version) -> Version:
    """Return the first release of the following major line."""
    return Version(f"{version.major + 1}.0.0")

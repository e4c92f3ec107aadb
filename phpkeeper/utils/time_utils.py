"""
Release-age helpers for phpkeeper.

Packagist reports release times as ISO 8601 strings. These helpers turn them
into the short relative ages shown in the update table (``3 mo``, ``2 y``)
and into whole months for age-based highlighting.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional, Sequence, Tuple

_MINUTE = 60
_HOUR = 60 * _MINUTE
_DAY = 24 * _HOUR
_MONTH = 30 * _DAY

#: (seconds per unit, short label), largest first.
AGE_UNITS: Sequence[Tuple[int, str]] = (
    (365 * _DAY, "y"),
    (_MONTH, "mo"),
    (7 * _DAY, "w"),
    (_DAY, "d"),
    (_HOUR, "h"),
    (_MINUTE, "m"),
)


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO 8601 timestamp into an aware UTC datetime.

    Naive timestamps are assumed to be UTC. Returns ``None`` for empty or
    malformed input.
    """
    if not value:
        return None

    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"

    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _elapsed_seconds(value: Optional[str], now: Optional[datetime]) -> Optional[float]:
    released = parse_timestamp(value)
    if released is None:
        return None
    reference = now or datetime.now(timezone.utc)
    return (reference - released).total_seconds()


def format_age(value: Optional[str], *, now: Optional[datetime] = None) -> str:
    """Render the time since *value* in its largest whole unit.

    Examples:
        >>> ref = datetime(2024, 4, 15, tzinfo=timezone.utc)
        >>> format_age("2024-01-15T00:00:00+00:00", now=ref)
        '3 mo'
        >>> format_age("2024-04-14T22:00:00Z", now=ref)
        '2 h'
        >>> format_age("2024-04-15T00:00:00Z", now=ref)
        'now'

    Returns:
        ``"<n> <unit>"``, ``"now"`` for anything under a minute (including
        future dates), or ``""`` if *value* cannot be parsed.
    """
    elapsed = _elapsed_seconds(value, now)
    if elapsed is None:
        return ""

    for seconds, label in AGE_UNITS:
        count = int(elapsed // seconds)
        if count >= 1:
            return f"{count} {label}"
    return "now"


def get_age_months(value: Optional[str], *, now: Optional[datetime] = None) -> int:
    """Whole 30-day months since *value*; ``0`` when unknown or in the future."""
    elapsed = _elapsed_seconds(value, now)
    if elapsed is None or elapsed < 0:
        return 0
    return int(elapsed // _MONTH)

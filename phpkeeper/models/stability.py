"""
Stability tiers for phpkeeper.

Composer orders release maturity as ``dev < alpha < beta < RC < stable``.
:class:`Stability` is an :class:`~enum.IntEnum` so tiers compare with the
ordinary operators, both for ``minimum-stability`` filtering and for
``prefer-stable`` tie-breaking.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Optional


class Stability(IntEnum):
    """Ordered release stability tier."""

    DEV = 0
    ALPHA = 1
    BETA = 2
    RC = 3
    STABLE = 4

    @property
    def label(self) -> str:
        """Composer spelling of the tier (``dev``, ``alpha``, ``beta``, ``RC``, ``stable``)."""
        return "RC" if self is Stability.RC else self.name.lower()

    @classmethod
    def parse(
        cls,
        value: Optional[str],
        default: Optional["Stability"] = None,
    ) -> "Stability":
        """Map a ``minimum-stability`` word to a tier.

        Matching is case-insensitive. Unknown or missing values yield
        *default* (``STABLE`` when not given).

        Example::

            >>> Stability.parse("rc")
            <Stability.RC: 3>
            >>> Stability.parse("nightly")
            <Stability.STABLE: 4>
        """
        fallback = cls.STABLE if default is None else default
        if not isinstance(value, str):
            return fallback
        try:
            return cls[value.strip().upper()]
        except KeyError:
            return fallback

    def __str__(self) -> str:
        return self.label

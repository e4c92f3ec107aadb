"""Stability classification of raw Composer version strings.

Packagist does not report a release's stability as a field; it is implied by
the version text itself (``2.0.0-beta3``, ``dev-main``, ``1.x-dev``,
``3.1.0-RC1``). :func:`classify_stability` recovers the tier with
case-insensitive substring tests applied in strict priority order, so a
string carrying several markers resolves to the least stable one checked
first.
"""

from __future__ import annotations

from phpkeeper.models.stability import Stability

__all__ = ["Stability", "classify_stability", "meets_minimum_stability"]


def classify_stability(version: str) -> Stability:
    """Derive the stability tier of a raw version string.

    Priority order: ``dev`` (``dev-`` prefix, ``-dev`` suffix or ``@dev``),
    then ``alpha``, ``beta``, ``RC`` (``-rc`` or ``@rc``), else ``stable``.

    Example::

        >>> classify_stability("v2.0.0-BETA1")
        <Stability.BETA: 2>
        >>> classify_stability("1.x-dev")
        <Stability.DEV: 0>
        >>> classify_stability("3.1.0")
        <Stability.STABLE: 4>
    """
    lower = version.lower()

    if lower.startswith("dev-") or lower.endswith("-dev") or "@dev" in lower:
        return Stability.DEV
    if "alpha" in lower:
        return Stability.ALPHA
    if "beta" in lower:
        return Stability.BETA
    if "-rc" in lower or "@rc" in lower:
        return Stability.RC
    return Stability.STABLE


def meets_minimum_stability(version: str, minimum: Stability) -> bool:
    """Return True if *version* is at least as stable as *minimum*."""
    return classify_stability(version) >= minimum

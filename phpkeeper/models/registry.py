"""
Registry and selection data models for phpkeeper.

These value objects flow through the version selector:

- :class:`RegistryVersion`: one published release as reported by Packagist.
- :class:`SelectionPolicy`: the knobs that steer selection.
- :class:`SelectionResult`: the chosen release plus auxiliary facts.

All three are immutable; a fresh :class:`SelectionResult` is built for every
package on every run.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Union

from phpkeeper.models.stability import Stability

#: ``None`` (maintained), ``True`` (abandoned) or the replacement package name.
AbandonedMarker = Union[None, bool, str]


@dataclass(frozen=True)
class RegistryVersion:
    """A single release entry from the registry.

    Attributes:
        version: Raw version string as published (``v1.2.3``, ``dev-main``).
        release_time: ISO 8601 release timestamp, or ``""`` if unknown.
        php_requirement: The release's ``require.php`` constraint, if any.
        abandoned: Abandonment marker (see :data:`AbandonedMarker`).
    """

    version: str
    release_time: str = ""
    php_requirement: Optional[str] = None
    abandoned: AbandonedMarker = None

    @classmethod
    def from_metadata(cls, entry: Mapping[str, Any]) -> "RegistryVersion":
        """Build a release from one (expanded) Packagist metadata entry.

        Example::

            >>> RegistryVersion.from_metadata(
            ...     {"version": "1.5.0", "time": "2024-01-01T00:00:00+00:00",
            ...      "require": {"php": "^8.0"}}
            ... ).php_requirement
            '^8.0'
        """
        require = entry.get("require")
        php_requirement = None
        if isinstance(require, Mapping):
            value = require.get("php")
            php_requirement = value if isinstance(value, str) else None

        raw_abandoned = entry.get("abandoned")
        abandoned: AbandonedMarker = None
        if isinstance(raw_abandoned, str) and raw_abandoned:
            abandoned = raw_abandoned
        elif raw_abandoned is True:
            abandoned = True

        return cls(
            version=str(entry.get("version", "")),
            release_time=str(entry.get("time") or ""),
            php_requirement=php_requirement,
            abandoned=abandoned,
        )


@dataclass(frozen=True)
class SelectionPolicy:
    """Parameters steering :func:`~phpkeeper.core.selector.select_version`.

    Attributes:
        minimum_stability: Lowest stability tier a candidate may have.
        prefer_stable: Pick stable releases over newer pre-releases.
        allow_major: Allow the selection to cross the current major.
        current_version: The constraint currently declared in the manifest.
        php_constraint: The consumer's PHP constraint (e.g. ``^8.1``).
    """

    minimum_stability: Stability = Stability.STABLE
    prefer_stable: bool = True
    allow_major: bool = True
    current_version: Optional[str] = None
    php_constraint: Optional[str] = None


@dataclass(frozen=True)
class SelectionResult:
    """The version chosen for one package.

    Attributes:
        version: The selected release's version string.
        release_time: The selected release's timestamp.
        php_requirement: PHP requirement declared by the selected release.
        major_available: Newer-major version seen while a major gate applied.
        deprecated: Whether the selected release is marked abandoned.
        replacement: Suggested replacement package, if any.
        php_incompatible: Whether the preferred candidate was skipped because
            the consumer's PHP constraint could not satisfy it.
        skipped_version: The candidate skipped by the PHP gate.
    """

    version: str
    release_time: str = ""
    php_requirement: Optional[str] = None
    major_available: Optional[str] = None
    deprecated: bool = False
    replacement: Optional[str] = None
    php_incompatible: bool = False
    skipped_version: Optional[str] = None

    def to_json(self) -> Dict[str, Any]:
        """Return a JSON-serializable representation without empty facts."""
        entry: Dict[str, Any] = {"version": self.version}
        if self.release_time:
            entry["release_time"] = self.release_time
        if self.php_requirement:
            entry["php_requirement"] = self.php_requirement
        if self.major_available:
            entry["major_available"] = self.major_available
        if self.deprecated:
            entry["deprecated"] = True
        if self.replacement:
            entry["replacement"] = self.replacement
        if self.php_incompatible:
            entry["php_incompatible"] = True
            entry["skipped_version"] = self.skipped_version
        return entry

"""
Update report models for phpkeeper.

:class:`PackageUpdate` is one row of the update report: a dependency whose
declared constraint lags behind the release the selector picked.
:class:`DeprecatedPackage` lists abandoned dependencies, which are reported
in their own warning block whether or not an update is shown for them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

#: Sort weight of each diff type; most severe first.
DIFF_ORDER: Dict[str, int] = {"major": 0, "minor": 1, "patch": 2}


@dataclass
class PackageUpdate:
    """
    An available update for one dependency.

    Attributes:
        name: Package name (``vendor/package``).
        current_version: Constraint currently declared in ``composer.json``.
        latest_version: Release the dependency should move to.
        diff_type: ``major``, ``minor`` or ``patch``.
        release_time: ISO timestamp of the selected release.
        age: Short relative age (``3 mo``).
        age_months: Whole months since release.
        major_available: Newer-major release held back by policy.
        php_requirement: PHP constraint of the selected release.
        deprecated: Whether the package is abandoned.
        replacement: Suggested replacement package.
        php_incompatible: A newer release was skipped for PHP reasons.
        skipped_version: The release that was skipped.
        dev: Whether the dependency lives in ``require-dev``.
    """

    name: str
    current_version: str
    latest_version: str
    diff_type: str
    release_time: str = ""
    age: str = ""
    age_months: int = 0
    major_available: Optional[str] = None
    php_requirement: Optional[str] = None
    deprecated: bool = False
    replacement: Optional[str] = None
    php_incompatible: bool = False
    skipped_version: Optional[str] = None
    dev: bool = False

    @property
    def sort_key(self) -> int:
        return DIFF_ORDER.get(self.diff_type, len(DIFF_ORDER))

    def to_json(self) -> Dict[str, Any]:
        """
        Serialize the update to a JSON-compatible dictionary.

        Optional facts are omitted when unset.
        """
        entry: Dict[str, Any] = {
            "name": self.name,
            "current": self.current_version,
            "latest": self.latest_version,
            "diff_type": self.diff_type,
        }
        if self.release_time:
            entry["release_time"] = self.release_time
            entry["age"] = self.age
            entry["age_months"] = self.age_months
        if self.major_available:
            entry["major_available"] = self.major_available
        if self.php_requirement:
            entry["php_requirement"] = self.php_requirement
        if self.php_incompatible:
            entry["php_incompatible"] = True
            entry["skipped_version"] = self.skipped_version
        if self.deprecated:
            entry["deprecated"] = True
            if self.replacement:
                entry["replacement"] = self.replacement
        if self.dev:
            entry["dev"] = True
        return entry

    def __str__(self) -> str:
        return f"{self.name} {self.current_version} -> {self.latest_version} ({self.diff_type})"


@dataclass(frozen=True)
class DeprecatedPackage:
    """An abandoned dependency and its suggested replacement, if any."""

    name: str
    current_version: str
    replacement: Optional[str] = None

    def to_json(self) -> Dict[str, Any]:
        entry: Dict[str, Any] = {"name": self.name, "current": self.current_version}
        if self.replacement:
            entry["replacement"] = self.replacement
        return entry

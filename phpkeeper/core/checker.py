"""Update checking for a whole ``composer.json``.

This module ties the pieces together: release lists come from
:class:`~phpkeeper.core.data_store.PackagistDataStore`, each package's target
release is chosen by :func:`~phpkeeper.core.selector.select_version`, and the
change is classified with :func:`~phpkeeper.core.diff.get_diff_type`.

Report rules:

1. **Diff filter**: only ``major`` / ``minor`` / ``patch`` changes enabled
   by the policy are reported; no change means no row.
2. **Held-back majors**: ``major_available`` is shown only while major
   updates are excluded.
3. **Ordering**: rows are sorted major, then minor, then patch.
4. **Deprecation**: abandoned packages are collected separately, whether or
   not an update row is shown for them.

A failed lookup for one package never aborts the others; it is logged and
the package is listed under :attr:`CheckReport.failed`.

Typical usage::

    from phpkeeper.utils.http import HTTPClient
    from phpkeeper.core.data_store import PackagistDataStore
    from phpkeeper.core.checker import UpdateChecker, UpdatePolicy
    from phpkeeper.core.manifest import ComposerManifest

    async with HTTPClient() as http:
        checker = UpdateChecker(PackagistDataStore(http), UpdatePolicy(include_major=True))
        report = await checker.check(ComposerManifest.load("composer.json"))

        for update in report.updates:
            print(f"{update.name}: {update.current_version} -> {update.latest_version}")
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple

from phpkeeper.constants import (
    DEFAULT_INCLUDE_MAJOR,
    DEFAULT_INCLUDE_MINOR,
    DEFAULT_INCLUDE_PATCH,
)
from phpkeeper.core.data_store import PackagistDataStore
from phpkeeper.core.diff import get_diff_type
from phpkeeper.core.manifest import ComposerManifest
from phpkeeper.core.selector import select_version
from phpkeeper.core.stability import Stability
from phpkeeper.models.registry import SelectionPolicy, SelectionResult
from phpkeeper.models.update import DeprecatedPackage, PackageUpdate
from phpkeeper.utils.logger import get_logger
from phpkeeper.utils.time_utils import format_age, get_age_months

logger = get_logger("checker")


@dataclass(frozen=True)
class UpdatePolicy:
    """Which updates to report and how to select them.

    Attributes:
        include_major: Report (and select across) major updates.
        include_minor: Report minor updates.
        include_patch: Report patch updates.
        exclude: Package names to skip.
        php_constraint: Override for the project's ``require.php``.
    """

    include_major: bool = DEFAULT_INCLUDE_MAJOR
    include_minor: bool = DEFAULT_INCLUDE_MINOR
    include_patch: bool = DEFAULT_INCLUDE_PATCH
    exclude: Sequence[str] = ()
    php_constraint: Optional[str] = None

    def allows(self, diff_type: str) -> bool:
        return {
            "major": self.include_major,
            "minor": self.include_minor,
            "patch": self.include_patch,
        }.get(diff_type, False)


@dataclass
class CheckReport:
    """Outcome of checking one manifest.

    Attributes:
        updates: Reportable updates, most severe first.
        deprecated: Abandoned dependencies.
        failed: Packages whose lookup raised.
        checked: Number of packages looked up.
        minimum_stability: Stability floor used for selection.
        prefer_stable: Whether stable releases were preferred.
    """

    updates: List[PackageUpdate] = field(default_factory=list)
    deprecated: List[DeprecatedPackage] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    checked: int = 0
    minimum_stability: Stability = Stability.STABLE
    prefer_stable: bool = True

    @property
    def has_updates(self) -> bool:
        return bool(self.updates)

    def to_json(self) -> Dict[str, Any]:
        return {
            "checked": self.checked,
            "minimum_stability": self.minimum_stability.label,
            "prefer_stable": self.prefer_stable,
            "updates": [update.to_json() for update in self.updates],
            "deprecated": [package.to_json() for package in self.deprecated],
            "failed": list(self.failed),
        }


class UpdateChecker:
    """Checks every dependency of a manifest against Packagist.

    Args:
        data_store: Shared release store.
        policy: Reporting and selection policy.
    """

    def __init__(
        self,
        data_store: PackagistDataStore,
        policy: Optional[UpdatePolicy] = None,
    ) -> None:
        if data_store is None:
            raise TypeError("data_store must not be None; pass a PackagistDataStore")

        self.data_store = data_store
        self.policy = policy or UpdatePolicy()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def selection_policy(self, manifest: ComposerManifest, constraint: str) -> SelectionPolicy:
        """Build the per-package selection policy."""
        return SelectionPolicy(
            minimum_stability=manifest.minimum_stability,
            prefer_stable=manifest.prefer_stable,
            allow_major=self.policy.include_major,
            current_version=constraint,
            php_constraint=self.policy.php_constraint or manifest.php_constraint,
        )

    async def select(
        self,
        name: str,
        policy: SelectionPolicy,
    ) -> Optional[SelectionResult]:
        """Fetch *name*'s releases and select its target release."""
        versions = await self.data_store.get_versions(name)
        if not versions:
            logger.info("No releases found for %s", name)
            return None
        return select_version(versions, policy)

    async def check(self, manifest: ComposerManifest) -> CheckReport:
        """Check every registry dependency of *manifest*.

        Returns:
            A :class:`CheckReport`; lookups run concurrently and a failure
            in one package only lands that package in ``failed``.
        """
        dependencies = manifest.dependencies(exclude=self.policy.exclude)
        report = CheckReport(
            checked=len(dependencies),
            minimum_stability=manifest.minimum_stability,
            prefer_stable=manifest.prefer_stable,
        )

        items: List[Tuple[str, str]] = list(dependencies.items())
        await self.data_store.prefetch([name for name, _ in items])
        results = await asyncio.gather(
            *(
                self.select(name, self.selection_policy(manifest, constraint))
                for name, constraint in items
            ),
            return_exceptions=True,
        )

        now = datetime.now().astimezone()
        for (name, constraint), result in zip(items, results):
            if isinstance(result, Exception):
                logger.error("Failed to check %s: %s", name, result)
                report.failed.append(name)
                continue
            if result is None:
                continue

            if result.deprecated:
                report.deprecated.append(
                    DeprecatedPackage(
                        name=name,
                        current_version=constraint,
                        replacement=result.replacement,
                    )
                )

            update = self.build_update(
                name,
                constraint,
                result,
                dev=manifest.is_dev_dependency(name),
                now=now,
            )
            if update is not None:
                report.updates.append(update)

        report.updates.sort(key=lambda update: update.sort_key)
        return report

    def build_update(
        self,
        name: str,
        constraint: str,
        result: SelectionResult,
        *,
        dev: bool = False,
        now: Optional[datetime] = None,
    ) -> Optional[PackageUpdate]:
        """Turn a selection into a report row, or ``None`` if filtered out."""
        diff_type = get_diff_type(constraint, result.version)
        if diff_type is None or not self.policy.allows(diff_type):
            return None

        major_available = None if self.policy.include_major else result.major_available

        return PackageUpdate(
            name=name,
            current_version=constraint,
            latest_version=result.version,
            diff_type=diff_type,
            release_time=result.release_time,
            age=format_age(result.release_time, now=now),
            age_months=get_age_months(result.release_time, now=now),
            major_available=major_available,
            php_requirement=result.php_requirement,
            deprecated=result.deprecated,
            replacement=result.replacement,
            php_incompatible=result.php_incompatible,
            skipped_version=result.skipped_version,
            dev=dev,
        )

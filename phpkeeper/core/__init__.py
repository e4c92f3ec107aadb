"""
Core functionality exports for phpkeeper.

This module provides convenient access to the core subsystems of phpkeeper.
Importing from here keeps user-facing imports clean and stable:

    from phpkeeper.core import UpdateChecker, select_version
"""

from __future__ import annotations

from phpkeeper.core.checker import CheckReport, UpdateChecker, UpdatePolicy
from phpkeeper.core.constraint_parser import parse_constraint
from phpkeeper.core.data_store import PackagistDataStore
from phpkeeper.core.diff import get_diff_type
from phpkeeper.core.installer import run_composer_update
from phpkeeper.core.manifest import ComposerManifest
from phpkeeper.core.php_compat import CompatibilityResult, check_php_compatibility
from phpkeeper.core.reformatter import format_new_version
from phpkeeper.core.selector import select_version
from phpkeeper.core.stability import classify_stability, meets_minimum_stability

__all__ = [
    "CheckReport",
    "UpdateChecker",
    "UpdatePolicy",
    "parse_constraint",
    "PackagistDataStore",
    "get_diff_type",
    "run_composer_update",
    "ComposerManifest",
    "CompatibilityResult",
    "check_php_compatibility",
    "format_new_version",
    "select_version",
    "classify_stability",
    "meets_minimum_stability",
]

"""
Unified data model exports for phpkeeper.

This module re-exports all core data models to provide a stable and
convenient public API. Users can import models directly from
``phpkeeper.models`` instead of individual submodules.

Example:
    >>> from phpkeeper.models import Constraint, RegistryVersion, PackageUpdate
"""

from __future__ import annotations

from phpkeeper.models.stability import Stability
from phpkeeper.models.constraint import Constraint, ConstraintKind
from phpkeeper.models.registry import RegistryVersion, SelectionPolicy, SelectionResult
from phpkeeper.models.update import DeprecatedPackage, PackageUpdate

__all__ = [
    "Stability",
    "Constraint",
    "ConstraintKind",
    "RegistryVersion",
    "SelectionPolicy",
    "SelectionResult",
    "DeprecatedPackage",
    "PackageUpdate",
]

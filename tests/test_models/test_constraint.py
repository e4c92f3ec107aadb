"""Unit tests for phpkeeper.models.constraint module.

Test Coverage:
- ConstraintKind values
- Alias and comparability properties
- String representation and immutability
"""

from __future__ import annotations

import dataclasses

import pytest

from phpkeeper.models.constraint import Constraint, ConstraintKind


class TestConstraintKind:
    """Tests for the ConstraintKind enumeration."""

    def test_values(self) -> None:
        assert {kind.value for kind in ConstraintKind} == {
            "exact",
            "range",
            "hyphen",
            "wildcard",
            "tilde",
            "caret",
            "dev",
        }


class TestConstraint:
    """Tests for Constraint properties."""

    def test_defaults(self) -> None:
        c = Constraint(ConstraintKind.CARET, "^", "1.2", "^1.2")
        assert c.is_development is False

    def test_alias(self) -> None:
        c = Constraint(ConstraintKind.DEV, "dev-", "1.0.0", "dev-main as 1.0.0", True)
        assert c.is_alias is True
        assert c.is_comparable is True

    def test_branch_is_not_comparable(self) -> None:
        c = Constraint(ConstraintKind.DEV, "dev-", "main", "dev-main", True)
        assert c.is_alias is False
        assert c.is_comparable is False

    def test_alias_requires_dev_kind(self) -> None:
        # " as " outside a dev constraint is just text
        c = Constraint(ConstraintKind.EXACT, "", "foo as bar", "foo as bar")
        assert c.is_alias is False
        assert c.is_comparable is True

    def test_str_is_original(self) -> None:
        assert str(Constraint(ConstraintKind.RANGE, ">=", "1.0", ">=1.0 <2.0")) == ">=1.0 <2.0"

    def test_frozen(self) -> None:
        c = Constraint(ConstraintKind.TILDE, "~", "2.0", "~2.0")
        with pytest.raises(dataclasses.FrozenInstanceError):
            c.prefix = "^"  # type: ignore[misc]

"""Unit tests for phpkeeper.core.php_compat.

Test Coverage:
- Constraint normalization (``|``, commas, stability flags, extensions)
- Lower / upper bound extraction
- Composer to SpecifierSet translation (caret, tilde, wildcards, hyphens)
- Consumer compatibility checks, including the permissive fallback
- Concrete version satisfaction
"""

from __future__ import annotations

import pytest
from packaging.version import Version

from phpkeeper.core.php_compat import (
    CompatibilityResult,
    check_php_compatibility,
    extract_max_version,
    extract_min_version,
    is_constraint_satisfied,
    normalize_composer_constraint,
    to_specifier_set,
)


# ============================================================================
# Test: normalization and bounds
# ============================================================================


@pytest.mark.unit
class TestNormalizeComposerConstraint:
    """Tests for normalize_composer_constraint."""

    def test_single_pipe(self) -> None:
        assert normalize_composer_constraint("^7.0|^8.0") == "^7.0 || ^8.0"

    def test_double_pipe_spacing(self) -> None:
        assert normalize_composer_constraint("^7.0||^8.0") == "^7.0 || ^8.0"
        assert normalize_composer_constraint("^7.0  ||  ^8.0") == "^7.0 || ^8.0"

    def test_commas_become_spaces(self) -> None:
        assert normalize_composer_constraint(">=7.2.5, <8.0") == ">=7.2.5 <8.0"

    def test_stability_flags_dropped(self) -> None:
        assert normalize_composer_constraint("^8.0@dev") == "^8.0"

    @pytest.mark.parametrize("value", [None, "", "*", "ext-json"])
    def test_wildcards(self, value: object) -> None:
        assert normalize_composer_constraint(value) == "*"  # type: ignore[arg-type]


@pytest.mark.unit
class TestExtractBounds:
    """Tests for extract_min_version and extract_max_version."""

    def test_min_of_alternatives(self) -> None:
        assert extract_min_version("^7.2.5 || ^8.0") == Version("7.2.5")

    def test_min_of_wildcard_is_none(self) -> None:
        assert extract_min_version("*") is None

    def test_upper_bound_only_alternative_ignored(self) -> None:
        assert extract_min_version("<8.0") is None
        assert extract_min_version("<8.0 || >=8.2") == Version("8.2.0")

    def test_min_of_concrete_version(self) -> None:
        assert extract_min_version("8.0.0") == Version("8.0.0")

    def test_max_from_explicit_bound(self) -> None:
        assert extract_max_version(">=7.2.5 <8.0") == Version("8.0.0")

    def test_max_from_caret(self) -> None:
        assert extract_max_version("^7.2") == Version("8.0.0")

    def test_unbounded(self) -> None:
        assert extract_max_version(">=8.0") is None
        assert extract_max_version("*") is None


# ============================================================================
# Test: range translation
# ============================================================================


@pytest.mark.unit
class TestToSpecifierSet:
    """Tests for to_specifier_set."""

    @pytest.mark.parametrize(
        "alternative, inside, outside",
        [
            ("^1.2", "1.9.9", "2.0.0"),
            ("^0.3", "0.3.9", "0.4.0"),
            ("^0.0.3", "0.0.3", "0.0.4"),
            ("~1.2", "1.9.0", "2.0.0"),
            ("~1.2.3", "1.2.9", "1.3.0"),
            ("1.2.*", "1.2.7", "1.3.0"),
            ("2.x", "2.8.0", "3.0.0"),
            ("1.2", "1.2.5", "1.3.0"),
            ("1.2.3", "1.2.3", "1.2.4"),
            (">1.2", "1.3.0", "1.2.9"),
            ("<=1.2", "1.2.9", "1.3.0"),
            ("!=1.5", "1.6.0", "1.5.3"),
            (">=7.4 <8.4", "8.3.0", "8.4.0"),
            (">= 7.4", "7.4.0", "7.3.9"),
            ("1.0 - 2.0", "2.0.9", "2.1.0"),
            ("1.0 - 2.0.0", "2.0.0", "2.0.1"),
        ],
    )
    def test_translation(self, alternative: str, inside: str, outside: str) -> None:
        specifier_set = to_specifier_set(alternative)
        assert specifier_set is not None
        assert specifier_set.contains(inside, prereleases=True)
        assert not specifier_set.contains(outside, prereleases=True)

    def test_star_matches_everything(self) -> None:
        specifier_set = to_specifier_set("*")
        assert specifier_set is not None
        assert specifier_set.contains("99.0.0")

    @pytest.mark.parametrize("alternative", ["", "foo", ">=7.4.0.1", "^8.0-foo"])
    def test_untranslatable(self, alternative: str) -> None:
        assert to_specifier_set(alternative) is None


# ============================================================================
# Test: check_php_compatibility
# ============================================================================


@pytest.mark.unit
class TestCheckPhpCompatibility:
    """Tests for check_php_compatibility."""

    def test_satisfied_by_second_alternative(self) -> None:
        assert check_php_compatibility("^8.3", "^7.2.5 || ^8.0").satisfied is True

    def test_consumer_above_ceiling(self) -> None:
        result = check_php_compatibility("^8.5", ">=7.4 <8.4")
        assert result == CompatibilityResult(
            satisfied=False, reason="requires php >=7.4 <8.4"
        )

    def test_consumer_below_floor(self) -> None:
        result = check_php_compatibility("8.0.0", "^8.1")
        assert result.satisfied is False
        assert result.reason == "requires php ^8.1"

    def test_caret_same_major(self) -> None:
        assert check_php_compatibility("8.0.0", "^8.0").satisfied is True

    def test_caret_previous_major(self) -> None:
        assert check_php_compatibility("8.0.0", "^7.4").satisfied is False

    def test_tilde_requirement(self) -> None:
        assert check_php_compatibility(">=7.4", "~7.4").satisfied is True

    def test_wildcard_requirement(self) -> None:
        assert check_php_compatibility("^8.1", "8.1.*").satisfied is True

    @pytest.mark.parametrize(
        "consumer, requirement",
        [
            ("8.0.0", "~7.4"),
            ("8.1", "8.0"),
            ("8.2.0", ">=7.1 !=8.2.0"),
            ("^8.2", "8.1.*"),
        ],
    )
    def test_out_of_range_falls_back_to_lower_bound(self, consumer: str, requirement: str) -> None:
        assert check_php_compatibility(consumer, requirement).satisfied is True

    def test_caret_out_of_range_is_not_rescued(self) -> None:
        assert check_php_compatibility("8.0.0", "^8.1 || ^9.0").satisfied is False

    def test_hyphen_requirement(self) -> None:
        assert check_php_compatibility("^8.0", "7.4 - 8.1").satisfied is True

    @pytest.mark.parametrize(
        "consumer, requirement",
        [(None, "^8.1"), ("", "^8.1"), ("^8.0", None), ("^8.0", ""), ("^8.0", "*"), ("*", "^8.1")],
    )
    def test_missing_sides_are_satisfied(self, consumer: object, requirement: object) -> None:
        assert check_php_compatibility(consumer, requirement).satisfied is True  # type: ignore[arg-type]

    def test_untranslatable_requirement_uses_lower_bound(self) -> None:
        assert check_php_compatibility("^8.0", ">=7.4.0.1").satisfied is True

    def test_satisfied_result_has_no_reason(self) -> None:
        assert check_php_compatibility("^8.0", "^8.0").reason is None


@pytest.mark.unit
class TestIsConstraintSatisfied:
    """Tests for is_constraint_satisfied."""

    def test_outside_every_alternative(self) -> None:
        assert is_constraint_satisfied("7.3.0", "^7.4 || ^8.0") is False

    def test_inside_an_alternative(self) -> None:
        assert is_constraint_satisfied("8.2.1", "^7.4 || ^8.0") is True

    def test_uncoercible_version(self) -> None:
        assert is_constraint_satisfied("invalid-version", "^8.0") is True

    def test_empty_constraint(self) -> None:
        assert is_constraint_satisfied("7.0.0", None) is True
        assert is_constraint_satisfied("7.0.0", "*") is True

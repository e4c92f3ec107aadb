"""Unit tests for phpkeeper.models.update module."""

from __future__ import annotations

from phpkeeper.models.update import DIFF_ORDER, DeprecatedPackage, PackageUpdate


class TestPackageUpdate:
    """Tests for PackageUpdate."""

    def test_sort_key_orders_by_severity(self) -> None:
        updates = [
            PackageUpdate("a/patch", "^1.0", "1.0.1", "patch"),
            PackageUpdate("a/major", "^1.0", "2.0.0", "major"),
            PackageUpdate("a/minor", "^1.0", "1.1.0", "minor"),
        ]

        ordered = sorted(updates, key=lambda u: u.sort_key)

        assert [u.diff_type for u in ordered] == ["major", "minor", "patch"]

    def test_unknown_diff_type_sorts_last(self) -> None:
        assert PackageUpdate("a/b", "1", "2", "other").sort_key == len(DIFF_ORDER)

    def test_str(self) -> None:
        update = PackageUpdate("monolog/monolog", "^2.9", "2.9.3", "patch")
        assert str(update) == "monolog/monolog ^2.9 -> 2.9.3 (patch)"

    def test_to_json_minimal(self) -> None:
        update = PackageUpdate("monolog/monolog", "^2.9", "2.9.3", "patch")
        assert update.to_json() == {
            "name": "monolog/monolog",
            "current": "^2.9",
            "latest": "2.9.3",
            "diff_type": "patch",
        }

    def test_to_json_full(self) -> None:
        update = PackageUpdate(
            "acme/lib",
            "^1.0",
            "1.4.0",
            "minor",
            release_time="2024-03-01T00:00:00+00:00",
            age="3 mo",
            age_months=3,
            major_available="2.0.0",
            php_requirement="^8.1",
            deprecated=True,
            replacement="acme/new",
            php_incompatible=True,
            skipped_version="1.5.0",
            dev=True,
        )

        data = update.to_json()

        assert data["release_time"] == "2024-03-01T00:00:00+00:00"
        assert data["age"] == "3 mo"
        assert data["age_months"] == 3
        assert data["major_available"] == "2.0.0"
        assert data["php_requirement"] == "^8.1"
        assert data["php_incompatible"] is True
        assert data["skipped_version"] == "1.5.0"
        assert data["deprecated"] is True
        assert data["replacement"] == "acme/new"
        assert data["dev"] is True

    def test_to_json_deprecated_without_replacement(self) -> None:
        data = PackageUpdate("a/b", "^1.0", "1.0.1", "patch", deprecated=True).to_json()
        assert data["deprecated"] is True
        assert "replacement" not in data


class TestDeprecatedPackage:
    def test_to_json(self) -> None:
        assert DeprecatedPackage("swiftmailer/swiftmailer", "^6.3", "symfony/mailer").to_json() == {
            "name": "swiftmailer/swiftmailer",
            "current": "^6.3",
            "replacement": "symfony/mailer",
        }

    def test_to_json_without_replacement(self) -> None:
        assert DeprecatedPackage("a/b", "^1.0").to_json() == {"name": "a/b", "current": "^1.0"}

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from phpkeeper.config import (
    PhpKeeperConfig,
    _parse_section,
    _read_toml,
    discover_config_file,
    load_config,
)
from phpkeeper.exceptions import ConfigError


@pytest.fixture
def in_tmp(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run the test from an empty working directory."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.mark.unit
class TestPhpKeeperConfig:
    """Tests for PhpKeeperConfig dataclass."""

    def test_default_initialization(self) -> None:
        config = PhpKeeperConfig()

        assert config.include_major is False
        assert config.include_minor is True
        assert config.include_patch is True
        assert config.exclude == []
        assert config.php is None
        assert config.concurrency == 5
        assert config.cache_ttl == 3600
        assert config.use_cache is True
        assert config.source_path is None

    def test_to_log_dict(self) -> None:
        config = PhpKeeperConfig(exclude=["a/b"], source_path=Path("phpkeeper.toml"))

        assert config.to_log_dict() == {
            "include_major": False,
            "include_minor": True,
            "include_patch": True,
            "exclude": ["a/b"],
            "php": None,
            "concurrency": 5,
            "cache_ttl": 3600,
            "use_cache": True,
        }


@pytest.mark.unit
class TestDiscoverConfigFile:
    """Tests for discover_config_file function."""

    def test_explicit_path_priority(self, in_tmp: Path) -> None:
        config_file = in_tmp / "custom.toml"
        config_file.write_text("[phpkeeper]\n", encoding="utf-8")
        (in_tmp / "phpkeeper.toml").write_text("[phpkeeper]\n", encoding="utf-8")

        assert discover_config_file(config_file) == config_file.resolve()

    def test_explicit_path_not_found_raises_error(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError) as exc_info:
            discover_config_file(tmp_path / "nonexistent.toml")

        assert "not found" in str(exc_info.value).lower()

    def test_discovers_phpkeeper_toml(self, tmp_path: Path) -> None:
        config_file = tmp_path / "phpkeeper.toml"
        config_file.write_text("[phpkeeper]\n", encoding="utf-8")

        with patch("phpkeeper.config.Path.cwd", return_value=tmp_path):
            assert discover_config_file() == config_file

    def test_discovers_hidden_file(self, tmp_path: Path) -> None:
        config_file = tmp_path / ".phpkeeper.toml"
        config_file.write_text("[phpkeeper]\n", encoding="utf-8")

        with patch("phpkeeper.config.Path.cwd", return_value=tmp_path):
            assert discover_config_file() == config_file

    def test_precedence_order(self, tmp_path: Path) -> None:
        (tmp_path / "phpkeeper.toml").write_text("[phpkeeper]\n", encoding="utf-8")
        (tmp_path / ".phpkeeper.toml").write_text("[phpkeeper]\n", encoding="utf-8")

        with patch("phpkeeper.config.Path.cwd", return_value=tmp_path):
            assert discover_config_file() == tmp_path / "phpkeeper.toml"

    def test_returns_none_when_no_config_found(self, tmp_path: Path) -> None:
        with patch("phpkeeper.config.Path.cwd", return_value=tmp_path):
            assert discover_config_file() is None


@pytest.mark.unit
class TestReadToml:
    """Tests for _read_toml helper."""

    def test_reads_valid_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "phpkeeper.toml"
        path.write_text('[phpkeeper]\nphp = "8.1"\n', encoding="utf-8")

        assert _read_toml(path) == {"phpkeeper": {"php": "8.1"}}

    def test_raises_error_on_invalid_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "phpkeeper.toml"
        path.write_text("[phpkeeper\n", encoding="utf-8")

        with pytest.raises(ConfigError) as exc_info:
            _read_toml(path)

        assert "Invalid TOML" in str(exc_info.value)

    def test_raises_error_when_file_not_found(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError) as exc_info:
            _read_toml(tmp_path / "missing.toml")

        assert "Cannot read" in str(exc_info.value)


@pytest.mark.unit
class TestParseSection:
    """Tests for _parse_section validation."""

    def test_parses_empty_section(self) -> None:
        assert _parse_section({}, config_path="phpkeeper.toml") == PhpKeeperConfig()

    def test_parses_all_options(self) -> None:
        exclude = ["phpunit/phpunit"]
        config = _parse_section(
            {
                "include_major": True,
                "include_minor": False,
                "include_patch": False,
                "exclude": exclude,
                "php": "8.1",
                "concurrency": 8,
                "cache_ttl": 0,
                "use_cache": False,
            },
            config_path="phpkeeper.toml",
        )

        assert config.include_major is True
        assert config.include_minor is False
        assert config.include_patch is False
        assert config.exclude == ["phpunit/phpunit"]
        assert config.exclude is not exclude
        assert config.php == "8.1"
        assert config.concurrency == 8
        assert config.cache_ttl == 0
        assert config.use_cache is False

    def test_raises_error_on_unknown_keys(self) -> None:
        with pytest.raises(ConfigError) as exc_info:
            _parse_section({"colour": True, "bogus": 1}, config_path="phpkeeper.toml")

        assert "Unknown configuration keys: bogus, colour" in str(exc_info.value)
        assert exc_info.value.config_path == "phpkeeper.toml"

    @pytest.mark.parametrize(
        "name, value, expected",
        [
            ("include_major", "yes", "a boolean"),
            ("exclude", "phpunit/phpunit", "a list of strings"),
            ("exclude", ["ok", 3], "a list of strings"),
            ("php", "  ", "a non-empty string"),
            ("concurrency", 0, "a positive integer"),
            ("concurrency", True, "a positive integer"),
            ("cache_ttl", -1, "a non-negative integer"),
            ("use_cache", 1, "a boolean"),
        ],
    )
    def test_raises_error_on_wrong_type(self, name: str, value: object, expected: str) -> None:
        with pytest.raises(ConfigError) as exc_info:
            _parse_section({name: value}, config_path="phpkeeper.toml")

        assert f"{name} must be {expected}" in str(exc_info.value)
        assert exc_info.value.option == name


@pytest.mark.unit
class TestLoadConfig:
    """Tests for load_config."""

    def test_returns_defaults_when_no_config_found(self, in_tmp: Path) -> None:
        config = load_config()

        assert config == PhpKeeperConfig()
        assert config.source_path is None

    def test_loads_phpkeeper_toml(self, in_tmp: Path) -> None:
        path = in_tmp / "phpkeeper.toml"
        path.write_text(
            '[phpkeeper]\ninclude_major = true\nexclude = ["phpunit/phpunit"]\n',
            encoding="utf-8",
        )

        config = load_config()

        assert config.include_major is True
        assert config.exclude == ["phpunit/phpunit"]
        assert config.source_path is not None
        assert config.source_path.resolve() == path.resolve()

    def test_loads_explicit_config_path(self, in_tmp: Path) -> None:
        path = in_tmp / "ci" / "phpkeeper.toml"
        path.parent.mkdir()
        path.write_text("[phpkeeper]\nconcurrency = 2\n", encoding="utf-8")

        config = load_config(path)

        assert config.concurrency == 2
        assert config.source_path == path.resolve()

    def test_handles_missing_section(self, in_tmp: Path) -> None:
        path = in_tmp / "phpkeeper.toml"
        path.write_text('[other]\nkey = "value"\n', encoding="utf-8")

        config = load_config()

        assert config.include_major is False
        assert config.source_path is not None
        assert config.source_path.resolve() == path.resolve()

    def test_raises_error_when_section_is_not_table(self, in_tmp: Path) -> None:
        (in_tmp / "phpkeeper.toml").write_text('phpkeeper = "yes"\n', encoding="utf-8")

        with pytest.raises(ConfigError) as exc_info:
            load_config()

        assert "must be a table" in str(exc_info.value)

    def test_raises_error_on_invalid_value(self, in_tmp: Path) -> None:
        (in_tmp / "phpkeeper.toml").write_text(
            '[phpkeeper]\ncache_ttl = "soon"\n', encoding="utf-8"
        )

        with pytest.raises(ConfigError) as exc_info:
            load_config()

        assert exc_info.value.option == "cache_ttl"

"""Unit tests for phpkeeper.utils.cache.

Test Coverage:
- Platform cache directory resolution
- Key to file name mapping
- Entry round trip, freshness and corrupt files
- Renewal after a ``304`` and clearing
"""

from __future__ import annotations

import json
import time
import pytest
from pathlib import Path
from unittest.mock import patch

from phpkeeper.utils.cache import CacheEntry, ResponseCache, default_cache_dir


@pytest.fixture
def cache(tmp_path: Path) -> ResponseCache:
    return ResponseCache(tmp_path / "cache", ttl=3600)


# ============================================================================
# Test: default_cache_dir
# ============================================================================


@pytest.mark.unit
class TestDefaultCacheDir:
    """Tests for default_cache_dir."""

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setenv("PHPKEEPER_CACHE_DIR", str(tmp_path / "custom"))
        assert default_cache_dir() == tmp_path / "custom"

    def test_blank_override_is_ignored(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setenv("PHPKEEPER_CACHE_DIR", "   ")
        monkeypatch.setattr("phpkeeper.utils.cache.sys.platform", "linux")
        monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path))
        assert default_cache_dir() == tmp_path / "phpkeeper"

    def test_xdg_cache_home(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.delenv("PHPKEEPER_CACHE_DIR", raising=False)
        monkeypatch.setattr("phpkeeper.utils.cache.sys.platform", "linux")
        monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "xdg"))
        assert default_cache_dir() == tmp_path / "xdg" / "phpkeeper"

    def test_linux_fallback(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.delenv("PHPKEEPER_CACHE_DIR", raising=False)
        monkeypatch.delenv("XDG_CACHE_HOME", raising=False)
        monkeypatch.setattr("phpkeeper.utils.cache.sys.platform", "linux")
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))
        assert default_cache_dir() == tmp_path / ".cache" / "phpkeeper"

    def test_macos(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.delenv("PHPKEEPER_CACHE_DIR", raising=False)
        monkeypatch.setattr("phpkeeper.utils.cache.sys.platform", "darwin")
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))
        assert default_cache_dir() == tmp_path / "Library" / "Caches" / "phpkeeper"

    def test_windows(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.delenv("PHPKEEPER_CACHE_DIR", raising=False)
        monkeypatch.setattr("phpkeeper.utils.cache.sys.platform", "win32")
        monkeypatch.setenv("LOCALAPPDATA", str(tmp_path / "Local"))
        assert default_cache_dir() == tmp_path / "Local" / "phpkeeper" / "Cache"


# ============================================================================
# Test: ResponseCache
# ============================================================================


@pytest.mark.unit
class TestPathFor:
    def test_slashes_become_tildes(self, cache: ResponseCache) -> None:
        path = cache.path_for("packagist/acme/lib")
        assert path.name == "packagist~acme~lib.json"
        assert path.parent == cache.directory

    def test_unsafe_characters_are_replaced(self, cache: ResponseCache) -> None:
        assert cache.path_for("a b:c").name == "a_b_c.json"


@pytest.mark.unit
class TestEntries:
    def test_missing_key(self, cache: ResponseCache) -> None:
        assert cache.get_entry("packagist/acme/lib") is None
        assert cache.get("packagist/acme/lib") is None

    def test_set_then_get(self, cache: ResponseCache) -> None:
        cache.set(
            "packagist/acme/lib",
            {"packages": {}},
            last_modified="Mon, 10 Jun 2024 08:00:00 GMT",
            etag='"abc"',
        )

        entry = cache.get_entry("packagist/acme/lib")
        assert entry is not None
        assert entry.value == {"packages": {}}
        assert entry.last_modified == "Mon, 10 Jun 2024 08:00:00 GMT"
        assert entry.etag == '"abc"'
        assert cache.get("packagist/acme/lib") == {"packages": {}}

    def test_set_creates_directory(self, cache: ResponseCache) -> None:
        assert not cache.directory.exists()
        cache.set("k", 1)
        assert cache.path_for("k").is_file()

    def test_file_layout(self, cache: ResponseCache) -> None:
        cache.set("k", [1, 2])
        data = json.loads(cache.path_for("k").read_text(encoding="utf-8"))
        assert set(data) == {"timestamp", "value", "last_modified", "etag"}
        assert data["value"] == [1, 2]

    def test_corrupt_file_is_a_miss(self, cache: ResponseCache) -> None:
        path = cache.path_for("k")
        path.parent.mkdir(parents=True)
        path.write_text("{not json", encoding="utf-8")

        assert cache.get_entry("k") is None

    def test_missing_fields_is_a_miss(self, cache: ResponseCache) -> None:
        path = cache.path_for("k")
        path.parent.mkdir(parents=True)
        path.write_text('{"value": 1}', encoding="utf-8")

        assert cache.get_entry("k") is None

    def test_unserializable_value_is_not_written(self, cache: ResponseCache) -> None:
        cache.set("k", object())
        assert cache.get_entry("k") is None


@pytest.mark.unit
class TestFreshness:
    def test_young_entry_is_fresh(self, cache: ResponseCache) -> None:
        assert cache.is_fresh(CacheEntry(timestamp=time.time() - 10, value=None))

    def test_old_entry_is_stale(self, cache: ResponseCache) -> None:
        assert not cache.is_fresh(CacheEntry(timestamp=time.time() - 7200, value=None))

    def test_zero_ttl_is_never_fresh(self, tmp_path: Path) -> None:
        cache = ResponseCache(tmp_path, ttl=0)
        assert not cache.is_fresh(CacheEntry(timestamp=time.time(), value=None))

    def test_ttl_override(self, cache: ResponseCache) -> None:
        entry = CacheEntry(timestamp=time.time() - 100, value=None)
        assert not cache.is_fresh(entry, ttl=50)

    def test_stale_entry_hidden_from_get(self, cache: ResponseCache) -> None:
        cache.set("k", "v")
        with patch("phpkeeper.utils.cache.time.time", return_value=time.time() + 7200):
            assert cache.get("k") is None
            assert cache.get_entry("k") is not None

    def test_entry_age(self) -> None:
        assert CacheEntry(timestamp=100.0, value=None).age(now=160.0) == 60.0


@pytest.mark.unit
class TestTouchAndClear:
    def test_touch_renews_timestamp(self, cache: ResponseCache) -> None:
        cache.set("k", {"a": 1}, last_modified="lm", etag="et")
        path = cache.path_for("k")
        data = json.loads(path.read_text(encoding="utf-8"))
        data["timestamp"] = 0
        path.write_text(json.dumps(data), encoding="utf-8")

        cache.touch("k")

        entry = cache.get_entry("k")
        assert entry is not None
        assert entry.timestamp > 0
        assert entry.value == {"a": 1}
        assert entry.last_modified == "lm"
        assert entry.etag == "et"

    def test_touch_missing_key_is_noop(self, cache: ResponseCache) -> None:
        cache.touch("k")
        assert cache.get_entry("k") is None

    def test_clear(self, cache: ResponseCache) -> None:
        cache.set("a", 1)
        cache.set("b", 2)

        assert cache.clear() == 2
        assert cache.get_entry("a") is None

    def test_clear_missing_directory(self, cache: ResponseCache) -> None:
        assert cache.clear() == 0

"""
On-disk response cache for phpkeeper.

Registry responses are stored one JSON document per key::

    {"timestamp": 1718000000.0, "value": {...},
     "last_modified": "Mon, 10 Jun 2024 08:00:00 GMT", "etag": null}

Entries younger than the TTL are served without touching the network;
older entries still provide ``last_modified`` / ``etag`` for a conditional
re-fetch, and :meth:`ResponseCache.touch` renews them after a ``304``.

The cache is best-effort: every I/O or decoding failure is logged at debug
level and treated as a miss, never raised.

Typical usage::

    cache = ResponseCache()
    entry = cache.get_entry("packagist/monolog/monolog")
    if entry is not None and cache.is_fresh(entry):
        data = entry.value
"""

from __future__ import annotations

import os
import re
import sys
import json
import time
from pathlib import Path
from dataclasses import dataclass
from typing import Any, Dict, Optional

from phpkeeper.utils.logger import get_logger
from phpkeeper.exceptions import FileOperationError
from phpkeeper.utils.filesystem import safe_write_file
from phpkeeper.constants import CACHE_APP_NAME, CACHE_DIR_ENV, DEFAULT_CACHE_TTL

logger = get_logger("cache")

_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9._~-]")


def default_cache_dir() -> Path:
    """Return the cache directory for this platform.

    ``$PHPKEEPER_CACHE_DIR`` wins when set. Otherwise Windows uses
    ``%LOCALAPPDATA%\\phpkeeper\\Cache``, macOS ``~/Library/Caches/phpkeeper``
    and everything else ``$XDG_CACHE_HOME/phpkeeper`` (``~/.cache/phpkeeper``).
    """
    override = os.environ.get(CACHE_DIR_ENV, "").strip()
    if override:
        return Path(override).expanduser()

    home = Path.home()
    if sys.platform == "win32":
        local = os.environ.get("LOCALAPPDATA") or str(home / "AppData" / "Local")
        return Path(local) / CACHE_APP_NAME / "Cache"
    if sys.platform == "darwin":
        return home / "Library" / "Caches" / CACHE_APP_NAME

    xdg = os.environ.get("XDG_CACHE_HOME") or str(home / ".cache")
    return Path(xdg) / CACHE_APP_NAME


@dataclass(frozen=True)
class CacheEntry:
    """A cached value with its validators.

    Attributes:
        timestamp: Seconds since the epoch when the entry was written.
        value: The cached JSON-compatible payload.
        last_modified: ``Last-Modified`` header of the cached response.
        etag: ``ETag`` header of the cached response.
    """

    timestamp: float
    value: Any
    last_modified: Optional[str] = None
    etag: Optional[str] = None

    def age(self, now: Optional[float] = None) -> float:
        """Seconds elapsed since the entry was written."""
        return (time.time() if now is None else now) - self.timestamp

    def to_json(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "value": self.value,
            "last_modified": self.last_modified,
            "etag": self.etag,
        }

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "CacheEntry":
        return cls(
            timestamp=float(data["timestamp"]),
            value=data["value"],
            last_modified=data.get("last_modified"),
            etag=data.get("etag"),
        )


class ResponseCache:
    """File-per-key JSON cache.

    Args:
        directory: Cache directory; defaults to :func:`default_cache_dir`.
        ttl: Seconds an entry counts as fresh.
    """

    def __init__(
        self,
        directory: Optional[Path] = None,
        *,
        ttl: int = DEFAULT_CACHE_TTL,
    ) -> None:
        self.directory = Path(directory) if directory is not None else default_cache_dir()
        self.ttl = ttl

    def path_for(self, key: str) -> Path:
        """Return the file backing *key*.

        ``/`` in package names becomes ``~`` so each key maps to one flat
        file name.
        """
        safe = _UNSAFE_KEY_CHARS.sub("_", key.replace("/", "~"))
        return self.directory / f"{safe}.json"

    def get_entry(self, key: str) -> Optional[CacheEntry]:
        """Return the stored entry for *key* regardless of age."""
        path = self.path_for(key)
        try:
            with path.open(encoding="utf-8") as fh:
                return CacheEntry.from_json(json.load(fh))
        except FileNotFoundError:
            return None
        except (OSError, ValueError, KeyError, TypeError) as exc:
            logger.debug("Ignoring unreadable cache entry %s: %s", path, exc)
            return None

    def is_fresh(self, entry: CacheEntry, ttl: Optional[int] = None) -> bool:
        """Return True if *entry* is younger than *ttl* (default: ``self.ttl``)."""
        limit = self.ttl if ttl is None else ttl
        return limit > 0 and entry.age() < limit

    def get(self, key: str) -> Optional[Any]:
        """Return the cached value for *key* only while it is fresh."""
        entry = self.get_entry(key)
        if entry is None or not self.is_fresh(entry):
            return None
        return entry.value

    def set(
        self,
        key: str,
        value: Any,
        *,
        last_modified: Optional[str] = None,
        etag: Optional[str] = None,
    ) -> None:
        """Store *value* under *key* with the current timestamp."""
        entry = CacheEntry(
            timestamp=time.time(),
            value=value,
            last_modified=last_modified,
            etag=etag,
        )
        path = self.path_for(key)
        try:
            safe_write_file(path, json.dumps(entry.to_json()))
        except (FileOperationError, TypeError, ValueError) as exc:
            logger.debug("Could not write cache entry %s: %s", path, exc)

    def touch(self, key: str) -> None:
        """Renew *key*'s timestamp, keeping its value and validators."""
        entry = self.get_entry(key)
        if entry is not None:
            self.set(
                key,
                entry.value,
                last_modified=entry.last_modified,
                etag=entry.etag,
            )

    def clear(self) -> int:
        """Delete every cache file; return how many were removed."""
        if not self.directory.is_dir():
            return 0

        removed = 0
        for path in self.directory.glob("*.json"):
            try:
                path.unlink()
                removed += 1
            except OSError as exc:
                logger.debug("Could not remove cache file %s: %s", path, exc)
        return removed

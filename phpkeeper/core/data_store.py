"""Centralized Packagist data store for phpkeeper.

Provides a unified, async-safe, per-process store for Packagist release
metadata so that each package is fetched at most once per run, however many
callers ask for it. Responses can additionally be persisted across runs by
injecting a :class:`~phpkeeper.utils.cache.ResponseCache`; stale entries are
revalidated with ``If-Modified-Since`` and a ``304`` reply reuses the cached
body.

Typical usage::

    from phpkeeper.utils.http import HTTPClient
    from phpkeeper.utils.cache import ResponseCache
    from phpkeeper.core.data_store import PackagistDataStore

    async with HTTPClient() as client:
        store = PackagistDataStore(client, cache=ResponseCache())
        versions = await store.get_versions("monolog/monolog")
        print(versions[0].version)          # e.g. "3.6.0", newest first
"""

from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Mapping, Optional, Sequence

from phpkeeper.exceptions import NetworkError, RegistryError
from phpkeeper.utils.http import HTTPClient
from phpkeeper.utils.cache import ResponseCache
from phpkeeper.utils.logger import get_logger
from phpkeeper.models.registry import RegistryVersion
from phpkeeper.constants import (
    DEFAULT_CONCURRENCY,
    MINIFIED_FORMAT,
    PACKAGIST_P2_API,
    UNSET_MARKER,
)

logger = get_logger("data_store")

# Public API
__all__ = ["PackagistDataStore", "expand_minified"]


# ---------------------------------------------------------------------------
# Composer 2 metadata helpers
# ---------------------------------------------------------------------------


def expand_minified(entries: Sequence[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    """Expand Composer 2 minified version entries.

    In minified metadata the first entry is complete and every following
    entry lists only the keys that differ from its predecessor; a value of
    ``"__unset"`` removes an inherited key.

    Example::

        >>> expand_minified([
        ...     {"version": "2.0.0", "require": {"php": "^8.1"}},
        ...     {"version": "1.0.0", "require": "__unset"},
        ... ])
        [{'version': '2.0.0', 'require': {'php': '^8.1'}}, {'version': '1.0.0'}]
    """
    expanded: List[Dict[str, Any]] = []
    previous: Optional[Dict[str, Any]] = None

    for entry in entries:
        if previous is None:
            current = dict(entry)
        else:
            current = {**previous, **entry}
            for key, value in entry.items():
                if value == UNSET_MARKER:
                    current.pop(key, None)
        expanded.append(current)
        previous = current

    return expanded


def _normalize(name: str) -> str:
    """Packagist names are case-insensitive; store them lower-cased."""
    return name.strip().lower()


def _cache_key(name: str) -> str:
    return f"packagist/{name}"


# ---------------------------------------------------------------------------
# Async data-store with double-checked locking
# ---------------------------------------------------------------------------


class PackagistDataStore:
    """Async-safe, per-process store for Packagist release lists.

    Each unique (lower-cased) package name triggers **at most one** lookup.
    A :class:`asyncio.Semaphore` bounds concurrent outbound fetches and a
    per-package :class:`asyncio.Lock` with a second check inside it stops
    several coroutines from fetching the same package at once.

    Args:
        http_client: A pre-configured :class:`HTTPClient`.
        cache: Optional on-disk cache shared across runs.
        concurrent_limit: Maximum number of lookups in flight.

    Example::

        async with HTTPClient() as client:
            store = PackagistDataStore(client, concurrent_limit=5)
            await store.prefetch(["symfony/console", "guzzlehttp/guzzle"])
            console = await store.get_versions("symfony/console")
    """

    def __init__(
        self,
        http_client: HTTPClient,
        *,
        cache: Optional[ResponseCache] = None,
        concurrent_limit: int = DEFAULT_CONCURRENCY,
    ) -> None:
        self.http_client = http_client
        self.cache = cache
        self._semaphore = asyncio.Semaphore(concurrent_limit)
        self._locks: Dict[str, asyncio.Lock] = {}

        # lower-cased name -> release list (None: unknown or empty)
        self._versions: Dict[str, Optional[List[RegistryVersion]]] = {}

    # ------------------------------------------------------------------
    # Public async accessors
    # ------------------------------------------------------------------

    async def get_versions(self, name: str) -> Optional[List[RegistryVersion]]:
        """Return *name*'s releases, newest first.

        Args:
            name: Package name in ``vendor/package`` form.

        Returns:
            The release list in registry order, or ``None`` when the package
            does not exist or has no releases.

        Raises:
            RegistryError: The lookup failed for any reason other than ``404``.
        """
        normalized = _normalize(name)

        # Fast path, no lock needed
        if normalized in self._versions:
            return self._versions[normalized]

        lock = self._locks.setdefault(normalized, asyncio.Lock())
        async with lock:
            if normalized in self._versions:
                return self._versions[normalized]

            try:
                async with self._semaphore:
                    payload = await self._fetch_metadata(normalized)
            except RegistryError as exc:
                if not exc.not_found:
                    raise
                logger.debug("Package %s not found: %s", normalized, exc)
                payload = {}

            versions = self._parse_versions(normalized, payload)
            self._versions[normalized] = versions or None
            return self._versions[normalized]

    async def prefetch(self, names: Sequence[str]) -> None:
        """Concurrently warm the store for *names*.

        Per-package failures are logged and do not affect the others.
        """
        results = await asyncio.gather(
            *(self.get_versions(name) for name in names),
            return_exceptions=True,
        )
        for name, result in zip(names, results):
            if isinstance(result, Exception):
                logger.debug("Prefetch failed for %s: %s", name, result)

    # ------------------------------------------------------------------
    # Network helpers (private)
    # ------------------------------------------------------------------

    async def _fetch_metadata(self, name: str) -> Dict[str, Any]:
        """Return the raw p2 payload for *name*, consulting the cache."""
        url = PACKAGIST_P2_API.format(package=name)
        key = _cache_key(name)

        entry = self.cache.get_entry(key) if self.cache is not None else None
        if entry is not None and self.cache is not None and self.cache.is_fresh(entry):
            logger.debug("Cache hit for %s", name)
            return entry.value if isinstance(entry.value, dict) else {}

        try:
            response = await self.http_client.get_json_conditional(
                url,
                last_modified=entry.last_modified if entry is not None else None,
                etag=entry.etag if entry is not None else None,
            )
        except NetworkError as exc:
            raise RegistryError(
                f"Packagist lookup failed for {name}: {exc.message}",
                package_name=name,
                url=exc.url,
                status_code=exc.status_code,
            ) from exc

        if response.not_modified:
            if entry is None or self.cache is None:
                return {}
            logger.debug("Registry copy of %s unchanged, renewing cache", name)
            self.cache.touch(key)
            return entry.value if isinstance(entry.value, dict) else {}

        if self.cache is not None:
            self.cache.set(
                key,
                response.data,
                last_modified=response.last_modified,
                etag=response.etag,
            )
        return response.data

    # ------------------------------------------------------------------
    # Parsing helpers (private, synchronous)
    # ------------------------------------------------------------------

    @staticmethod
    def _parse_versions(name: str, payload: Mapping[str, Any]) -> List[RegistryVersion]:
        """Map a p2 payload onto :class:`RegistryVersion` objects.

        Registry order is kept as-is; it is newest first.
        """
        packages = payload.get("packages")
        if not isinstance(packages, Mapping):
            return []

        entries = packages.get(name)
        if not isinstance(entries, list):
            return []

        raw_entries = [entry for entry in entries if isinstance(entry, Mapping)]
        if payload.get("minified") == MINIFIED_FORMAT:
            raw_entries = expand_minified(raw_entries)

        return [
            RegistryVersion.from_metadata(entry)
            for entry in raw_entries
            if entry.get("version")
        ]

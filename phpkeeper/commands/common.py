"""Options and orchestration shared by ``check`` and ``update``.

Both commands accept the same policy flags and run the same lookup: load the
manifest, build the HTTP client, cache and data store, then hand everything
to :class:`~phpkeeper.core.checker.UpdateChecker`. CLI flags win over the
configuration file, which wins over built-in defaults.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Iterable, List, Optional, Tuple

import click

from phpkeeper.config import PhpKeeperConfig
from phpkeeper.constants import COMPOSER_JSON
from phpkeeper.core.checker import CheckReport, UpdateChecker, UpdatePolicy
from phpkeeper.core.data_store import PackagistDataStore
from phpkeeper.core.manifest import ComposerManifest
from phpkeeper.exceptions import FileOperationError
from phpkeeper.utils.cache import ResponseCache
from phpkeeper.utils.filesystem import find_composer_json
from phpkeeper.utils.http import HTTPClient
from phpkeeper.utils.logger import get_logger

logger = get_logger("commands")


def policy_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Attach the manifest argument and the shared policy flags to a command."""
    decorators = [
        click.argument(
            "composer_json",
            required=False,
            type=click.Path(dir_okay=False, path_type=Path),
        ),
        click.option(
            "--major/--no-major",
            default=None,
            help="Include updates that cross a major version.",
        ),
        click.option(
            "--minor/--no-minor",
            default=None,
            help="Include minor updates (default: on).",
        ),
        click.option(
            "--patch/--no-patch",
            default=None,
            help="Include patch updates (default: on).",
        ),
        click.option(
            "--exclude",
            "-e",
            multiple=True,
            help="Packages to skip, comma-separated (can be repeated).",
        ),
        click.option(
            "--no-cache",
            is_flag=True,
            help="Always query Packagist, bypassing the response cache.",
        ),
        click.option(
            "--php",
            "php",
            metavar="VERSION",
            help="PHP version or constraint to check against instead of require.php.",
        ),
    ]
    for decorator in reversed(decorators):
        func = decorator(func)
    return func


def split_excludes(values: Iterable[str]) -> List[str]:
    """Flatten repeated, comma-separated ``--exclude`` values.

    Example::

        >>> split_excludes(["a/b, c/d", "e/f"])
        ['a/b', 'c/d', 'e/f']
    """
    names: List[str] = []
    for value in values:
        names.extend(part.strip() for part in value.split(",") if part.strip())
    return names


def build_policy(
    config: PhpKeeperConfig,
    *,
    major: Optional[bool],
    minor: Optional[bool],
    patch: Optional[bool],
    exclude: Tuple[str, ...],
    php: Optional[str],
) -> UpdatePolicy:
    """Merge CLI flags over the loaded configuration."""
    return UpdatePolicy(
        include_major=config.include_major if major is None else major,
        include_minor=config.include_minor if minor is None else minor,
        include_patch=config.include_patch if patch is None else patch,
        exclude=tuple(config.exclude) + tuple(split_excludes(exclude)),
        php_constraint=php or config.php,
    )


def resolve_manifest_path(composer_json: Optional[Path]) -> Path:
    """Return the manifest to work on, searching upwards when not given.

    Raises:
        FileOperationError: No ``composer.json`` could be found.
    """
    if composer_json is not None:
        if not composer_json.is_file():
            raise FileOperationError(
                f"File not found: {composer_json}",
                file_path=str(composer_json),
                operation="read",
            )
        return composer_json

    found = find_composer_json()
    if found is None:
        raise FileOperationError(
            f"No {COMPOSER_JSON} found in {Path.cwd()} or its parents",
            operation="read",
        )
    return found


async def run_check(
    manifest: ComposerManifest,
    policy: UpdatePolicy,
    config: PhpKeeperConfig,
    *,
    no_cache: bool = False,
) -> CheckReport:
    """Look up every dependency of *manifest* and build the report."""
    cache: Optional[ResponseCache] = None
    if config.use_cache and not no_cache:
        cache = ResponseCache(ttl=config.cache_ttl)
    else:
        logger.debug("Response cache disabled")

    async with HTTPClient(max_concurrency=config.concurrency) as http:
        data_store = PackagistDataStore(
            http,
            cache=cache,
            concurrent_limit=config.concurrency,
        )
        checker = UpdateChecker(data_store, policy)
        return await checker.check(manifest)

"""Configuration file loader for phpkeeper.

Handles discovery, loading, parsing, and validation of configuration files.
Settings live under a ``[phpkeeper]`` table in either ``phpkeeper.toml`` or
``.phpkeeper.toml``.

Discovery order:

1. Explicit path from ``--config`` or ``PHPKEEPER_CONFIG``
2. ``phpkeeper.toml`` in current directory
3. ``.phpkeeper.toml`` in current directory

Configuration precedence: defaults < config file < CLI args.

Typical usage::

    config = load_config()  # Auto-discover
    config = load_config(Path("custom.toml"))  # Explicit path

Example (``phpkeeper.toml``)::

    [phpkeeper]
    include_major = false
    exclude = ["phpunit/phpunit"]
    php = "8.1"
    concurrency = 8
    cache_ttl = 600
"""

from __future__ import annotations

import tomli as tomllib
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple
from dataclasses import dataclass, field

from phpkeeper.exceptions import ConfigError
from phpkeeper.utils.logger import get_logger
from phpkeeper.constants import (
    CONFIG_FILE_NAMES,
    CONFIG_SECTION,
    DEFAULT_CACHE_TTL,
    DEFAULT_CONCURRENCY,
    DEFAULT_INCLUDE_MAJOR,
    DEFAULT_INCLUDE_MINOR,
    DEFAULT_INCLUDE_PATCH,
)

logger = get_logger("config")


@dataclass
class PhpKeeperConfig:
    """Parsed and validated phpkeeper configuration.

    All fields have defaults, so empty config files are valid.

    Attributes:
        include_major: List and write major updates.
        include_minor: List and write minor updates.
        include_patch: List and write patch updates.
        exclude: Package names never checked.
        php: PHP constraint used instead of the manifest's ``require.php``.
        concurrency: Registry lookups allowed in flight at once.
        cache_ttl: Seconds a cached registry response is trusted.
        use_cache: Whether registry responses are cached on disk.
        source_path: Path to loaded config file, or ``None`` if using defaults.
    """

    include_major: bool = DEFAULT_INCLUDE_MAJOR
    include_minor: bool = DEFAULT_INCLUDE_MINOR
    include_patch: bool = DEFAULT_INCLUDE_PATCH
    exclude: List[str] = field(default_factory=list)
    php: Optional[str] = None
    concurrency: int = DEFAULT_CONCURRENCY
    cache_ttl: int = DEFAULT_CACHE_TTL
    use_cache: bool = True

    # Metadata (not a user-facing option)
    source_path: Optional[Path] = field(default=None, repr=False)

    def to_log_dict(self) -> Dict[str, Any]:
        """Return configuration as dictionary for debug logging.

        Excludes ``source_path`` metadata.
        """
        return {name: getattr(self, name) for name in _OPTIONS}


def discover_config_file(explicit_path: Optional[Path] = None) -> Optional[Path]:
    """Find the configuration file to load.

    Args:
        explicit_path: Explicit config path. If provided, must exist.

    Returns:
        Resolved path to config file, or ``None`` if not found.

    Raises:
        ConfigError: Explicit path provided but does not exist.
    """
    if explicit_path is not None:
        resolved = explicit_path.resolve()
        if not resolved.is_file():
            raise ConfigError(
                f"Configuration file not found: {explicit_path}",
                config_path=str(explicit_path),
            )
        logger.debug("Using explicit config: %s", resolved)
        return resolved

    cwd = Path.cwd()
    for name in CONFIG_FILE_NAMES:
        candidate = cwd / name
        if candidate.is_file():
            logger.debug("Found %s: %s", name, candidate)
            return candidate

    logger.debug("No configuration file found")
    return None


def load_config(config_path: Optional[Path] = None) -> PhpKeeperConfig:
    """Load and validate phpkeeper configuration.

    Args:
        config_path: Explicit path to config file. If ``None``, uses
            auto-discovery (see :func:`discover_config_file`).

    Returns:
        Validated :class:`PhpKeeperConfig` with values from file or defaults.

    Raises:
        ConfigError: File cannot be parsed, has unknown keys, or invalid values.
    """
    resolved = discover_config_file(config_path)

    if resolved is None:
        logger.debug("No config file found, using defaults")
        return PhpKeeperConfig()

    logger.info("Loading configuration from %s", resolved)
    raw = _read_toml(resolved)

    section = raw.get(CONFIG_SECTION, {})
    if not isinstance(section, dict):
        raise ConfigError(
            f"[{CONFIG_SECTION}] must be a table",
            config_path=str(resolved),
        )

    if not section:
        logger.debug("Config file found but [%s] is empty, using defaults", CONFIG_SECTION)
        return PhpKeeperConfig(source_path=resolved)

    config = _parse_section(section, config_path=str(resolved))
    config.source_path = resolved

    logger.debug("Loaded configuration: %s", config.to_log_dict())
    return config


def _read_toml(path: Path) -> Dict[str, Any]:
    """Read and parse a TOML file.

    Raises:
        ConfigError: File cannot be read or is not valid TOML.
    """
    try:
        with open(path, "rb") as fh:
            return tomllib.load(fh)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(
            f"Invalid TOML in {path.name}: {exc}",
            config_path=str(path),
        ) from exc
    except OSError as exc:
        raise ConfigError(
            f"Cannot read configuration file {path}: {exc}",
            config_path=str(path),
        ) from exc


# ---------------------------------------------------------------------------
# Option validation
# ---------------------------------------------------------------------------


def _is_bool(value: Any) -> bool:
    return isinstance(value, bool)


def _is_str(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def _is_str_list(value: Any) -> bool:
    return isinstance(value, list) and all(isinstance(item, str) for item in value)


def _is_positive_int(value: Any) -> bool:
    # bool is a subclass of int
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def _is_non_negative_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


#: Option name -> (validator, expected-type description).
_OPTIONS: Dict[str, Tuple[Callable[[Any], bool], str]] = {
    "include_major": (_is_bool, "a boolean"),
    "include_minor": (_is_bool, "a boolean"),
    "include_patch": (_is_bool, "a boolean"),
    "exclude": (_is_str_list, "a list of strings"),
    "php": (_is_str, "a non-empty string"),
    "concurrency": (_is_positive_int, "a positive integer"),
    "cache_ttl": (_is_non_negative_int, "a non-negative integer"),
    "use_cache": (_is_bool, "a boolean"),
}


def _parse_section(
    section: Dict[str, Any],
    *,
    config_path: str,
) -> PhpKeeperConfig:
    """Parse and validate the ``[phpkeeper]`` table.

    Rejects unknown keys and type mismatches.

    Args:
        section: Raw config dictionary from TOML file.
        config_path: Path string for error messages.

    Returns:
        Validated :class:`PhpKeeperConfig` with values from section and defaults.

    Raises:
        ConfigError: Unknown keys or incorrect types (e.g., string for boolean).
    """
    config = PhpKeeperConfig()

    unknown = set(section.keys()) - set(_OPTIONS)
    if unknown:
        raise ConfigError(
            f"Unknown configuration keys: {', '.join(sorted(unknown))}",
            config_path=config_path,
        )

    for name, value in section.items():
        validator, expected = _OPTIONS[name]
        if not validator(value):
            raise ConfigError(
                f"{name} must be {expected}, got {type(value).__name__}",
                config_path=config_path,
                option=name,
            )
        setattr(config, name, list(value) if name == "exclude" else value)

    return config

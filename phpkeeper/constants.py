"""
Centralized constants for phpkeeper.

This module defines immutable configuration values used across phpkeeper,
including registry endpoints, network settings, cache locations, policy
defaults, and logging formats. All values are intended to be treated as
read-only.
"""

from typing import Final, Sequence

# ---------------------------------------------------------------------------
# Project metadata
# ---------------------------------------------------------------------------

#: HTTP User-Agent template used for outbound requests.
USER_AGENT_TEMPLATE: Final[str] = (
    "phpkeeper/{version} (https://github.com/phpkeeper/phpkeeper)"
)

# ---------------------------------------------------------------------------
# Packagist endpoints
# ---------------------------------------------------------------------------

#: Composer 2 metadata endpoint for tagged releases.
PACKAGIST_P2_API: Final[str] = "https://repo.packagist.org/p2/{package}.json"

#: Value of the ``minified`` key in Composer 2 metadata responses.
MINIFIED_FORMAT: Final[str] = "composer/2.0"

#: Marker used by minified metadata to drop an inherited key.
UNSET_MARKER: Final[str] = "__unset"

# ---------------------------------------------------------------------------
# HTTP configuration
# ---------------------------------------------------------------------------

#: Default network timeout in seconds.
DEFAULT_TIMEOUT: Final[int] = 30

#: Maximum number of retries for failed HTTP requests.
DEFAULT_MAX_RETRIES: Final[int] = 3

#: Number of registry lookups allowed in flight at once.
DEFAULT_CONCURRENCY: Final[int] = 5

# ---------------------------------------------------------------------------
# Response cache
# ---------------------------------------------------------------------------

#: Environment variable overriding the cache directory.
CACHE_DIR_ENV: Final[str] = "PHPKEEPER_CACHE_DIR"

#: Directory name used below the platform cache root.
CACHE_APP_NAME: Final[str] = "phpkeeper"

#: Seconds a cached registry response is served without revalidation.
DEFAULT_CACHE_TTL: Final[int] = 60 * 60

# ---------------------------------------------------------------------------
# Composer manifest
# ---------------------------------------------------------------------------

#: Default manifest file name.
COMPOSER_JSON: Final[str] = "composer.json"

#: Indentation used when none can be detected.
DEFAULT_INDENT: Final[str] = "    "

#: Platform package names that never resolve against the registry.
PLATFORM_PACKAGES: Final[Sequence[str]] = ("php", "php-64bit", "hhvm", "composer")

#: Name prefixes of platform packages (extensions, libraries, plugin APIs).
PLATFORM_PREFIXES: Final[Sequence[str]] = ("ext-", "lib-", "composer-")

#: Executable invoked after writing the manifest.
COMPOSER_EXECUTABLE: Final[str] = "composer"

# ---------------------------------------------------------------------------
# Policy defaults
# ---------------------------------------------------------------------------

#: Whether major updates are listed (and written) by default.
DEFAULT_INCLUDE_MAJOR: Final[bool] = False

#: Whether minor updates are listed by default.
DEFAULT_INCLUDE_MINOR: Final[bool] = True

#: Whether patch updates are listed by default.
DEFAULT_INCLUDE_PATCH: Final[bool] = True

#: Composer's default for ``prefer-stable`` as interpreted by phpkeeper.
DEFAULT_PREFER_STABLE: Final[bool] = True

# ---------------------------------------------------------------------------
# Security constraints
# ---------------------------------------------------------------------------

#: Maximum allowed file size (in bytes) when reading manifest files.
MAX_FILE_SIZE: Final[int] = 10 * 1024 * 1024  # 10 MB

# ---------------------------------------------------------------------------
# Logging configuration
# ---------------------------------------------------------------------------

#: Timestamp format for verbose logging.
LOG_DATE_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"

#: Default log format (non-verbose).
LOG_DEFAULT_FORMAT: Final[str] = "%(levelname)s: %(message)s"

#: Verbose log format including timestamp and logger name.
LOG_VERBOSE_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# ---------------------------------------------------------------------------
# Configuration files
# ---------------------------------------------------------------------------

#: Environment variable naming an explicit configuration file.
CONFIG_ENV: Final[str] = "PHPKEEPER_CONFIG"

#: Configuration file names searched in the working directory, in order.
CONFIG_FILE_NAMES: Final[Sequence[str]] = ("phpkeeper.toml", ".phpkeeper.toml")

#: Table holding phpkeeper settings inside a configuration file.
CONFIG_SECTION: Final[str] = "phpkeeper"

"""
Utility helpers for phpkeeper.

This package provides reusable utilities used across phpkeeper, including:

- Console output helpers (Rich-based)
- Logging configuration and retrieval
- Filesystem safety helpers
- Async HTTP client and on-disk response cache
- Version and timestamp helpers

Only symbols listed in ``__all__`` are considered part of the public API.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Filesystem utilities
# ---------------------------------------------------------------------------

from phpkeeper.utils.filesystem import (
    create_backup,
    find_composer_json,
    restore_backup,
    safe_read_file,
    safe_write_file,
)

# ---------------------------------------------------------------------------
# Logging utilities
# ---------------------------------------------------------------------------

from phpkeeper.utils.logger import (
    disable_logging,
    get_logger,
    is_logging_configured,
    setup_logging,
)

# ---------------------------------------------------------------------------
# Console utilities
# ---------------------------------------------------------------------------

from phpkeeper.utils.console import (
    colorize_age,
    colorize_diff_type,
    confirm,
    get_raw_console,
    print_error,
    print_success,
    print_table,
    print_warning,
    reconfigure_console,
)

# ---------------------------------------------------------------------------
# HTTP and cache utilities
# ---------------------------------------------------------------------------

from phpkeeper.utils.http import HTTPClient, JSONResponse
from phpkeeper.utils.cache import ResponseCache

# ---------------------------------------------------------------------------
# Version and time utilities
# ---------------------------------------------------------------------------

from phpkeeper.utils.version_utils import coerce_version
from phpkeeper.utils.time_utils import format_age, get_age_months

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

__all__ = [
    # Console
    "confirm",
    "print_error",
    "print_table",
    "print_success",
    "print_warning",
    "get_raw_console",
    "reconfigure_console",
    "colorize_diff_type",
    "colorize_age",
    # Logging
    "get_logger",
    "setup_logging",
    "disable_logging",
    "is_logging_configured",
    # Filesystem
    "safe_read_file",
    "safe_write_file",
    "create_backup",
    "restore_backup",
    "find_composer_json",
    # HTTP
    "HTTPClient",
    "JSONResponse",
    "ResponseCache",
    # Version and time
    "coerce_version",
    "format_age",
    "get_age_months",
]

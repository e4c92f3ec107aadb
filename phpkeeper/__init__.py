"""
phpkeeper: dependency update checker for Composer projects

phpkeeper reads a project's ``composer.json``, looks up every dependency on
Packagist and reports (or writes) the newest release each constraint can
move to, honouring the project's ``minimum-stability``, ``prefer-stable``
and PHP version.

Features include:
    • Caret, tilde, wildcard, hyphen and comparison constraints
    • Stability-aware release selection with a major-version gate
    • PHP compatibility filtering against ``require.php``
    • Style-preserving rewrites of ``composer.json``
    • Cached, conditional Packagist lookups
"""

from __future__ import annotations

from phpkeeper.__version__ import __version__

# ---------------------------------------------------------------------------
# Package Metadata
# ---------------------------------------------------------------------------

__author__ = "phpkeeper Contributors"
__license__ = "Apache-2.0"
__url__ = "https://github.com/phpkeeper/phpkeeper"
__description__ = "Dependency update checker for Composer's composer.json."

__all__ = [
    "__version__",
]

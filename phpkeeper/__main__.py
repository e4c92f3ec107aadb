"""
Executable module for phpkeeper.

Running:
    python -m phpkeeper

is equivalent to:
    phpkeeper

This module simply forwards execution to the CLI entrypoint defined in
`phpkeeper.cli`.
"""

from __future__ import annotations

import sys


def _print_startup_error(exc: ImportError) -> None:
    """Report a CLI import failure on stderr."""
    sys.stderr.write("phpkeeper CLI could not be loaded.\n")
    sys.stderr.write(f"Python version : {sys.version}\n")
    try:
        from phpkeeper.__version__ import __version__

        sys.stderr.write(f"phpkeeper version: {__version__}\n")
    except ImportError:
        sys.stderr.write("phpkeeper version: <unknown>\n")
    sys.stderr.write(f"ImportError: {exc}\n")


def main() -> int:
    """
    Main entrypoint when executing `python -m phpkeeper`.

    Returns:
        Exit code returned by the CLI.
    """
    try:
        # Import lazily so dependencies are only loaded during CLI use
        from phpkeeper.cli import main as cli_main
    except ImportError as exc:
        _print_startup_error(exc)
        return 1

    return cli_main()


if __name__ == "__main__":
    sys.exit(main())

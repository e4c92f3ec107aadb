"""
Command-line interface for phpkeeper.

This module provides the main CLI entry point and handles global options,
configuration loading, and command registration.
"""

from __future__ import annotations

import os
import sys
import logging
from pathlib import Path
from typing import Optional

import click

from phpkeeper.config import load_config
from phpkeeper.__version__ import __version__
from phpkeeper.constants import CONFIG_ENV
from phpkeeper.context import PhpKeeperContext
from phpkeeper.exceptions import ConfigError, PhpKeeperError
from phpkeeper.utils.logger import get_logger, level_for_verbosity, setup_logging
from phpkeeper.utils.console import print_error, print_warning, reconfigure_console
from phpkeeper.commands.check import check
from phpkeeper.commands.update import update

logger = get_logger("cli")


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to configuration file.",
    envvar=CONFIG_ENV,
)
@click.option(
    "--verbose",
    "-v",
    count=True,
    help="Increase verbosity (can be repeated: -v, -vv).",
)
@click.option(
    "--color/--no-color",
    default=True,
    help="Enable or disable colored output.",
    envvar="PHPKEEPER_COLOR",
)
@click.version_option(
    version=__version__,
    prog_name="phpkeeper",
    message="%(prog)s %(version)s",
)
@click.pass_context
def cli(
    ctx: click.Context,
    config: Optional[Path],
    verbose: int,
    color: bool,
) -> None:
    """phpkeeper: keep composer.json dependencies up to date.

    \b
    Available commands:
      phpkeeper check              Check for available updates
      phpkeeper update             Rewrite constraints to newer releases

    \b
    Examples:
      phpkeeper check
      phpkeeper check --major --format json
      phpkeeper update --dry-run
      phpkeeper -v update -I --install

    Use ``phpkeeper COMMAND --help`` for command-specific options.
    """
    _configure_logging(verbose)

    try:
        loaded_config = load_config(config)
    except ConfigError as exc:
        print_error(str(exc))
        raise SystemExit(1) from exc

    phpkeeper_ctx = PhpKeeperContext()
    phpkeeper_ctx.config_path = config or loaded_config.source_path
    phpkeeper_ctx.color = color
    phpkeeper_ctx.verbose = verbose
    phpkeeper_ctx.config = loaded_config
    ctx.obj = phpkeeper_ctx

    # Respect NO_COLOR for downstream libraries
    if color:
        os.environ.pop("NO_COLOR", None)
    else:
        os.environ["NO_COLOR"] = "1"
    reconfigure_console()

    logger.debug("phpkeeper v%s", __version__)
    logger.debug("Config path: %s", phpkeeper_ctx.config_path)
    logger.debug("Verbosity: %s | Color: %s", verbose, color)


def _configure_logging(verbose: int) -> None:
    """Configure logging level based on verbosity flags."""
    level = level_for_verbosity(verbose)
    setup_logging(level=level, verbose=verbose >= 2)
    logger.debug("Logging initialized at %s level", logging.getLevelName(level))


cli.add_command(check)
cli.add_command(update)


def main() -> int:
    """Main entry point for the phpkeeper CLI.

    Returns:
        Exit code:
            0   Success
            1   Updates available (``check``), or an application error
            2   Usage error (Click)
            130 Interrupted by user (Ctrl+C)
    """
    try:
        cli(standalone_mode=False)
        return 0

    except click.ClickException as exc:
        exc.show()
        return exc.exit_code

    except click.exceptions.Exit as exc:
        return exc.exit_code

    except click.exceptions.Abort:
        print_warning("\nOperation cancelled by user")
        return 130

    except SystemExit as exc:
        if exc.code is None:
            return 0
        return exc.code if isinstance(exc.code, int) else 1

    except PhpKeeperError as exc:
        print_error(str(exc))
        logger.debug(
            "PhpKeeperError details: %s",
            exc.details or "<none>",
            exc_info=True,
        )
        return 1

    except KeyboardInterrupt:
        print_warning("\nOperation cancelled by user")
        return 130

    except Exception as exc:
        print_error(f"Unexpected error: {exc}")
        logger.exception("Unhandled exception in CLI")
        return 1


if __name__ == "__main__":
    sys.exit(main())

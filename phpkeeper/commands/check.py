"""Check command implementation for phpkeeper.

Reads a ``composer.json``, looks up every dependency on Packagist and reports
which declared constraints lag behind the release the selector picks.

The command orchestrates three core components:

1. **ComposerManifest**: reads ``require``/``require-dev`` together with
   ``minimum-stability``, ``prefer-stable`` and ``require.php``.
2. **PackagistDataStore**: fetches release metadata concurrently, at most
   once per package, through the on-disk response cache.
3. **UpdateChecker**: selects a release per package and classifies the
   change as major, minor or patch.

Typical usage::

    # Table of available minor and patch updates
    $ phpkeeper check

    # Include updates across major versions
    $ phpkeeper check --major

    # Machine-readable JSON output
    $ phpkeeper check --format json > report.json
"""

from __future__ import annotations

import sys
import json
import click
import asyncio
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from phpkeeper.core.checker import CheckReport
from phpkeeper.core.manifest import ComposerManifest
from phpkeeper.exceptions import PhpKeeperError
from phpkeeper.context import pass_context, PhpKeeperContext
from phpkeeper.commands.common import (
    build_policy,
    policy_options,
    resolve_manifest_path,
    run_check,
)
from phpkeeper.models.update import PackageUpdate
from phpkeeper.utils.logger import get_logger
from phpkeeper.utils.console import (
    colorize_age,
    colorize_diff_type,
    colorize_version,
    get_raw_console,
    print_error,
    print_success,
    print_table,
    print_warning,
)

logger = get_logger("commands.check")


@click.command()
@policy_options
@click.option(
    "--format",
    "-f",
    type=click.Choice(["table", "simple", "json"], case_sensitive=False),
    default="table",
    help="Output format.",
)
@pass_context
def check(
    ctx: PhpKeeperContext,
    composer_json: Optional[Path],
    major: Optional[bool],
    minor: Optional[bool],
    patch: Optional[bool],
    exclude: Tuple[str, ...],
    no_cache: bool,
    php: Optional[str],
    format: str,
) -> None:
    """Check composer.json for available updates.

    When COMPOSER_JSON is omitted, the nearest ``composer.json`` in the
    current directory or its parents is used.

    Major updates are only listed with ``--major``; otherwise a package
    whose next major is out shows it in the notes column.

    Exits:
        0 if every dependency is up to date, 1 if updates are available or
        an error occurred.

    Example::

        $ phpkeeper check --major --exclude phpunit/phpunit
        $ phpkeeper check path/to/composer.json --format simple
    """
    try:
        policy = build_policy(
            ctx.config,
            major=major,
            minor=minor,
            patch=patch,
            exclude=exclude,
            php=php,
        )
        manifest = ComposerManifest.load(resolve_manifest_path(composer_json))
        logger.info("Checking %s for updates...", manifest.path)

        report = asyncio.run(run_check(manifest, policy, ctx.config, no_cache=no_cache))
        _render(report, format.lower())
        sys.exit(1 if report.has_updates else 0)

    except PhpKeeperError as e:
        print_error(f"{e}")
        sys.exit(1)
    except Exception as e:
        print_error(f"Unexpected error: {e}")
        logger.exception("Error in check command")
        sys.exit(1)


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def _render(report: CheckReport, fmt: str) -> None:
    if fmt == "json":
        _display_json(report)
        return

    if not report.checked:
        print_warning("No registry packages found in composer.json")
        return

    if report.updates:
        if fmt == "simple":
            _display_simple(report.updates)
        else:
            _display_table(report.updates)
    else:
        print_success("All packages are up to date!")

    _display_deprecated(report)

    if report.failed:
        print_warning(f"Could not check: {', '.join(report.failed)}")


def _notes(update: PackageUpdate) -> str:
    """Secondary facts about an update, as Rich markup."""
    notes: List[str] = []
    if update.major_available:
        notes.append(f"[magenta]{update.major_available} available[/magenta]")
    if update.php_incompatible and update.skipped_version:
        notes.append(f"[yellow]{update.skipped_version} needs newer PHP[/yellow]")
    if update.php_requirement:
        notes.append(f"[dim]php {update.php_requirement}[/dim]")
    if update.dev:
        notes.append("[dim]dev[/dim]")
    return ", ".join(notes)


def _create_table_row(update: PackageUpdate) -> Dict[str, str]:
    return {
        "Package": update.name,
        "Current": update.current_version,
        "Latest": colorize_version(update.latest_version, update.diff_type),
        "Type": colorize_diff_type(update.diff_type),
        "Age": colorize_age(update.age, update.age_months),
        "Notes": _notes(update),
    }


def _display_table(updates: List[PackageUpdate]) -> None:
    """Render updates as a Rich table.

    Example output::

        ┏━━━━━━━━━━━━━━━━━━┳━━━━━━━━━┳━━━━━━━━┳━━━━━━━━━┳━━━━━━━┳━━━━━━━━━━━━━━━━┓
        ┃ Package          ┃ Current ┃ Latest ┃ Type    ┃ Age   ┃ Notes          ┃
        ┡━━━━━━━━━━━━━━━━━━╇━━━━━━━━━╇━━━━━━━━╇━━━━━━━━━╇━━━━━━━╇━━━━━━━━━━━━━━━━┩
        │ monolog/monolog  │ ^2.9    │ 2.10.0 │ ~ minor │ 4 mo  │ 3.8.1 available│
        └──────────────────┴─────────┴────────┴─────────┴───────┴────────────────┘
    """
    column_styles = {
        "Package": {"style": "bold cyan", "no_wrap": True},
        "Current": {"justify": "center", "style": "dim"},
        "Latest": {"justify": "center"},
        "Type": {"justify": "center", "no_wrap": True},
        "Age": {"justify": "right"},
        "Notes": {"justify": "left"},
    }

    print_table(
        [_create_table_row(update) for update in updates],
        title="Available Updates",
        column_styles=column_styles,
    )


def _display_simple(updates: List[PackageUpdate]) -> None:
    """Render one plain line per update.

    Example::

        [MAJOR] symfony/console          ^5.4       -> 7.1.0
        [MINOR] monolog/monolog          ^2.9       -> 2.10.0  (3.8.1 available)
    """
    console = get_raw_console()

    for update in updates:
        line = (
            f"[{update.diff_type.upper()}] {update.name:24} "
            f"{update.current_version:10} -> {update.latest_version}"
        )
        if update.major_available:
            line += f"  ({update.major_available} available)"
        console.print(line, markup=False)


def _display_deprecated(report: CheckReport) -> None:
    if not report.deprecated:
        return

    print_warning(f"{len(report.deprecated)} abandoned package(s):")
    console = get_raw_console()
    for package in report.deprecated:
        replacement = f"use {package.replacement}" if package.replacement else "no replacement"
        console.print(f"  {package.name} ({replacement})", markup=False)


def _display_json(report: CheckReport) -> None:
    """Print the whole report as JSON for machine consumption."""
    print(json.dumps(report.to_json(), indent=2))

"""Update command implementation for phpkeeper.

Rewrites the constraints in ``composer.json`` to the releases the checker
selects, keeping each constraint's style (``^``, ``~``, ``>=``, wildcards
and hyphen ranges), and optionally runs ``composer update`` afterwards.

The command uses the same core components as the check command:

1. **ComposerManifest**: reads and atomically rewrites the manifest
2. **PackagistDataStore**: one fetch per package, shared cache
3. **UpdateChecker**: selects releases and filters by diff type

Major updates are only written with ``--major``.

Typical usage::

    # Preview changes without applying
    $ phpkeeper update --dry-run

    # Pick packages one by one, then install
    $ phpkeeper update -I --install

    # Create backup and skip confirmation
    $ phpkeeper update --backup -y
"""

from __future__ import annotations

import sys
import asyncio
from pathlib import Path
from typing import List, Optional, Tuple

import click

from phpkeeper.core.installer import run_composer_update
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
    colorize_diff_type,
    confirm,
    format_package_choice,
    get_raw_console,
    print_error,
    print_success,
    print_table,
    print_warning,
)

logger = get_logger("commands.update")


@click.command()
@policy_options
@click.option(
    "--dry-run",
    is_flag=True,
    help="Preview changes without applying them.",
)
@click.option(
    "--install",
    is_flag=True,
    help="Run 'composer update' after writing composer.json.",
)
@click.option(
    "--interactive",
    "-I",
    is_flag=True,
    help="Choose which packages to update, one at a time.",
)
@click.option(
    "--yes",
    "-y",
    is_flag=True,
    help="Skip confirmation prompt.",
)
@click.option(
    "--backup",
    is_flag=True,
    help="Create backup file before updating.",
)
@pass_context
def update(
    ctx: PhpKeeperContext,
    composer_json: Optional[Path],
    major: Optional[bool],
    minor: Optional[bool],
    patch: Optional[bool],
    exclude: Tuple[str, ...],
    no_cache: bool,
    php: Optional[str],
    dry_run: bool,
    install: bool,
    interactive: bool,
    yes: bool,
    backup: bool,
) -> None:
    """Update constraints in composer.json to newer releases.

    Each rewritten constraint keeps its operator: ``^2.1`` becomes
    ``^2.3.0``, ``2.*`` becomes ``3.*`` and ``1.0 - 2.0`` keeps its lower
    bound. Development constraints such as ``dev-main`` are left alone.

    Exits:
        0 if updates were applied or none were needed, 1 if an error
        occurred or ``composer update`` failed.

    Example::

        $ phpkeeper update --dry-run
        $ phpkeeper update --major --backup -y --install
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
        ok = _apply(
            manifest,
            report.updates,
            dry_run=dry_run,
            interactive=interactive,
            skip_confirm=yes,
            backup=backup,
            install=install,
        )
        sys.exit(0 if ok else 1)

    except PhpKeeperError as e:
        print_error(f"{e}")
        sys.exit(1)
    except Exception as e:
        print_error(f"Unexpected error: {e}")
        logger.exception("Error in update command")
        sys.exit(1)


# ---------------------------------------------------------------------------
# Orchestration
# ---------------------------------------------------------------------------


def _apply(
    manifest: ComposerManifest,
    updates: List[PackageUpdate],
    *,
    dry_run: bool,
    interactive: bool,
    skip_confirm: bool,
    backup: bool,
    install: bool,
) -> bool:
    """Select, write and optionally install *updates*.

    Returns:
        ``False`` only when ``composer update`` was requested and failed.
    """
    if not updates:
        print_success("All packages are up to date!")
        return True

    if interactive and not dry_run:
        updates = _choose_updates(updates)
        if not updates:
            print_warning("No packages selected")
            return True

    _display_update_plan(updates, dry_run)

    if dry_run:
        print_warning("\nDry run mode - no changes applied")
        return True

    if not (interactive or skip_confirm) and not _confirm_update(len(updates)):
        logger.info("Update cancelled by user")
        return True

    changes = manifest.apply_updates(updates)
    if not changes:
        print_warning("No constraints needed rewriting")
        return True

    backup_path = manifest.save(backup=backup)
    if backup_path is not None:
        logger.info("Created backup: %s", backup_path)
    print_success(f"Updated {len(changes)} constraint(s) in {manifest.path.name}")

    for name, old, new in changes:
        logger.debug("  %s: %s -> %s", name, old, new)

    if install:
        if not run_composer_update(manifest.path.parent):
            print_error("composer update failed")
            return False
        print_success("composer update finished")

    return True


def _choose_updates(updates: List[PackageUpdate]) -> List[PackageUpdate]:
    """Ask about each update; non-major ones default to yes."""
    console = get_raw_console()
    chosen: List[PackageUpdate] = []

    for update in updates:
        console.print(format_package_choice(update))
        if confirm("  Apply?", default=update.diff_type != "major"):
            chosen.append(update)

    return chosen


def _display_update_plan(updates: List[PackageUpdate], dry_run: bool) -> None:
    """Display planned constraint changes as a Rich table."""
    title = "Update Plan (Dry Run)" if dry_run else "Update Plan"

    data = [
        {
            "Package": update.name,
            "Current": update.current_version,
            "New Version": f"[bold green]{update.latest_version}[/bold green]",
            "Change": colorize_diff_type(update.diff_type),
            "PHP Requires": update.php_requirement or "-",
        }
        for update in updates
    ]

    column_styles = {
        "Package": {"style": "bold cyan", "no_wrap": True},
        "Current": {"justify": "center", "style": "dim"},
        "New Version": {"justify": "center"},
        "Change": {"justify": "center"},
        "PHP Requires": {"justify": "left"},
    }

    print_table(data, title=title, column_styles=column_styles)


def _confirm_update(count: int) -> bool:
    """Prompt user to confirm the update; defaults to yes."""
    plural = "package" if count == 1 else "packages"
    return confirm(f"\nUpdate {count} {plural}?", default=True)

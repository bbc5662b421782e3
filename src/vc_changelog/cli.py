"""
Command line interface for the vc_changelog tool.

This module defines the ``main`` function which is used as the entry
point when executing the ``autochangelog`` command. It orchestrates
repository detection, configuration loading, commit collection, the
changelog pipeline and the final file updates. Exit codes are listed
below and documented in the project README.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

import click

from vc_changelog import __version__
from vc_changelog.changelog.generator import (
    ChangelogGenerator,
    ChangelogIOError,
    ShortHashCollisionError,
    prepend_changelog,
)
from vc_changelog.changelog.markdown_renderer import render_heading
from vc_changelog.changelog.override_list import read_override_document, write_override_document
from vc_changelog.config.loader import ConfigError, load_config
from vc_changelog.vcs.git_client import GitClient, GitError

logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------
EXIT_SUCCESS = 0
EXIT_GENERIC_ERROR = 1
EXIT_INVALID_USAGE = 2
EXIT_NO_REPO = 3
EXIT_CONFIG_ERROR = 4
EXIT_VCS_FAILURE = 5
EXIT_IO_FAILURE = 6
EXIT_HASH_COLLISION = 7

TIMESTAMP_FIELDS = 6


# ---------------------------------------------------------------------------
# Status display utilities
# ---------------------------------------------------------------------------

def print_step(step_num: int, total_steps: int, message: str):
    """Print a step indicator."""
    click.echo(f"\n{'='*60}")
    click.echo(f"Step {step_num}/{total_steps}: {message}")
    click.echo(f"{'='*60}")


def print_info(message: str, indent: int = 0):
    """Print an info message."""
    prefix = "  " * indent
    click.echo(f"{prefix}ℹ {message}")


def print_success(message: str, indent: int = 0):
    """Print a success message."""
    prefix = "  " * indent
    click.echo(f"{prefix}✓ {message}")


def print_warning(message: str, indent: int = 0):
    """Print a warning message."""
    prefix = "  " * indent
    click.echo(f"{prefix}⚠ {message}")


def print_error(message: str, indent: int = 0):
    """Print an error message."""
    prefix = "  " * indent
    click.echo(f"{prefix}✗ {message}", err=True)


# ---------------------------------------------------------------------------
# Argument handling
# ---------------------------------------------------------------------------

def parse_timestamp(value: str) -> datetime:
    """Parse a ``year-month-day-hour-minute-second`` timestamp.

    Raises
    ------
    ValueError
        If the value does not have six integer fields or is not a valid
        date and time.
    OverflowError
        If a field is too large for a date.
    """
    fields = value.split("-")
    if len(fields) != TIMESTAMP_FIELDS:
        raise ValueError(
            f"expected {TIMESTAMP_FIELDS} fields (year-month-day-hour-minute-second), got {len(fields)}"
        )
    numbers = [int(field) for field in fields]
    return datetime(*numbers)


def _timestamp_callback(ctx: click.Context, param: click.Parameter, value: Optional[str]) -> Optional[datetime]:
    if value is None:
        return None
    try:
        return parse_timestamp(value)
    except (ValueError, OverflowError) as exc:
        raise click.BadParameter(f"{value!r}: {exc}", ctx=ctx, param=param)


@click.command()
@click.argument("repo_path", type=click.Path(file_okay=False, path_type=Path))
@click.argument("since", callback=_timestamp_callback)
@click.argument("until", required=False, callback=_timestamp_callback)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="JSON configuration file (default: <repo>/.changelog_config.json).",
)
@click.option("--dry-run", is_flag=True, help="Print the changelog instead of writing any file.")
@click.option("--verbose", is_flag=True, help="Enable verbose (debug) output.")
@click.version_option(version=__version__, prog_name="autochangelog")
def main(
    repo_path: Path,
    since: datetime,
    until: Optional[datetime],
    config_path: Optional[Path],
    dry_run: bool,
    verbose: bool,
) -> None:
    """Generate a changelog from the conventional commits of a Git repository.

    Commits authored between SINCE and UNTIL (default: now) are collected.
    Timestamps use the format year-month-day-hour-minute-second, for
    example 2024-5-29-8-15-0.
    """
    # Configure logging. Use force=True to ensure handlers are reconfigured
    # on subsequent invocations (important for tests).
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
        force=True,
    )

    ctx = click.get_current_context(silent=True)

    if until is None:
        until = datetime.now()
    if since > until:
        raise click.UsageError("SINCE must not be later than UNTIL")

    total_steps = 4 if dry_run else 5
    current_step = 0

    try:
        # Step 1: Open repository
        current_step += 1
        print_step(current_step, total_steps, "Opening Repository")

        repo_root = repo_path.resolve()
        if not GitClient.is_repo(repo_root):
            print_error(f"Not a Git repository: {repo_root}")
            raise click.exceptions.Exit(EXIT_NO_REPO)
        client = GitClient(repo_root)
        print_success(f"Found Git repository at: {repo_root}")

        # Step 2: Load configuration
        current_step += 1
        print_step(current_step, total_steps, "Loading Configuration")

        try:
            config = load_config(repo_root, config_path)
        except ConfigError as exc:
            print_error(f"Configuration error: {exc}")
            raise click.exceptions.Exit(EXIT_CONFIG_ERROR)
        print_success("Configuration loaded successfully")
        print_info(f"Types: {', '.join(config.types)}", indent=1)
        print_info(f"Changelog: {config.changelog_path}", indent=1)

        # Step 3: Collect commits
        current_step += 1
        print_step(current_step, total_steps, "Collecting Commits")

        try:
            raw_commits = client.get_commits(since, until)
        except GitError as exc:
            print_error(f"Git error: {exc}")
            raise click.exceptions.Exit(EXIT_VCS_FAILURE)
        print_success(
            f"Found {len(raw_commits)} commit{'s' if len(raw_commits) != 1 else ''} "
            f"between {since:%Y-%m-%d %H:%M:%S} and {until:%Y-%m-%d %H:%M:%S}"
        )

        # Step 4: Generate changelog
        current_step += 1
        print_step(current_step, total_steps, "Generating Changelog")

        modify_list_path = repo_root / config.modify_list_path
        try:
            overrides, original_modify_text, consumed_text = read_override_document(modify_list_path)
        except OSError as exc:
            print_error(f"Cannot read override list {modify_list_path}: {exc}")
            raise click.exceptions.Exit(EXIT_IO_FAILURE)
        if overrides:
            print_info(f"Loaded {len(overrides)} override{'s' if len(overrides) != 1 else ''}", indent=1)

        generator = ChangelogGenerator(config)
        try:
            text = generator.generate(raw_commits, overrides)
        except ShortHashCollisionError as exc:
            print_error(str(exc))
            raise click.exceptions.Exit(EXIT_HASH_COLLISION)
        print_success("Changelog generated")

        if dry_run:
            click.echo("")
            click.echo(render_heading(until) + text, nl=False)
            raise click.exceptions.Exit(EXIT_SUCCESS)

        # Step 5: Write files
        current_step += 1
        print_step(current_step, total_steps, "Writing Files")

        changelog_path = repo_root / config.changelog_path
        try:
            prepend_changelog(changelog_path, text, until)
        except ChangelogIOError as exc:
            print_error(str(exc))
            raise click.exceptions.Exit(EXIT_IO_FAILURE)
        print_success(f"Updated {changelog_path}")

        try:
            if write_override_document(modify_list_path, original_modify_text, consumed_text):
                print_success(f"Consumed override list in {modify_list_path}")
        except OSError as exc:
            print_error(f"Cannot rewrite override list {modify_list_path}: {exc}")
            raise click.exceptions.Exit(EXIT_IO_FAILURE)

        raise click.exceptions.Exit(EXIT_SUCCESS)

    except click.exceptions.Exit:
        # Click uses its own Exit exception; re-raise to let Click handle it
        raise
    except Exception as exc:
        # Catch any other unhandled errors
        logging.exception("Unhandled error: %s", exc)
        print_error(f"Unexpected error: {exc}")
        ctx.exit(EXIT_GENERIC_ERROR)

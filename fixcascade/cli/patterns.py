"""CLI commands for failure pattern tracking."""

from __future__ import annotations

import json
from datetime import timedelta

import click

from ..exceptions import PatternStoreError
from ..patterns.advisor import Advisor
from ..patterns.models import FailurePattern
from ..patterns.seeds import seed_patterns
from ..patterns.store import FilePatternStore
from ..patterns.tracking import run_pattern_tracking
from .main import CLIContext, main

# Maximum number of patterns shown by `patterns stats`
_TOP_PATTERNS_LIMIT = 5
# Maximum number of learned patterns shown by `patterns debug`
_TOP_LEARNED_LIMIT = 10
_SESSION_ID_TRUNCATE_AT = 16


def _load_store(obj: CLIContext) -> FilePatternStore:
    store = FilePatternStore(obj.config, obj.project_dir)
    store.load()
    return store


def _sort_by_count(patterns: list[FailurePattern]) -> list[FailurePattern]:
    return sorted(patterns, key=lambda p: (-p.count, p.source_code, p.target_code))


def filter_patterns(
    patterns: list[FailurePattern], error_code: str | None, min_count: int
) -> list[FailurePattern]:
    """Keep patterns with count >= min_count that touch error_code (either end)."""
    code = error_code.upper() if error_code else None
    return [
        p
        for p in patterns
        if p.count >= min_count
        and (code is None or p.source_code.upper() == code or p.target_code.upper() == code)
    ]


@main.group()
def patterns() -> None:
    """Manage failure pattern tracking data.

    View, filter and maintain the database of validation errors that
    commonly follow each other.
    """


@patterns.command("list")
@click.option("--min-count", type=int, default=0, help="Only patterns seen at least N times.")
@click.option("--error-code", default=None, help="Only patterns with this source or target code.")
@click.option("--json", "as_json", is_flag=True, default=False, help="Output as JSON.")
@click.pass_obj
def list_patterns(obj: CLIContext, min_count: int, error_code: str | None, as_json: bool) -> None:
    """List known failure patterns, most frequent first.

    \b
    Examples:
        fixcascade patterns list
        fixcascade patterns list --min-count 5
        fixcascade patterns list --error-code GIT013 --json
    """
    store = _load_store(obj)
    found = _sort_by_count(filter_patterns(store.get_all_patterns(), error_code, min_count))

    if as_json:
        click.echo(json.dumps([p.to_dict() for p in found], indent=2))
        return

    if not found:
        click.echo("No patterns found.")
        return

    click.echo(f"Found {len(found)} patterns:\n")
    for p in found:
        seed_tag = " [seed]" if p.seed else ""
        click.echo(
            f"{p.source_code} -> {p.target_code}  "
            f"(count: {p.count}, last: {p.last_seen:%Y-%m-%d}){seed_tag}"
        )


@patterns.command()
@click.pass_obj
def stats(obj: CLIContext) -> None:
    """Show totals, top cascades and data file locations."""
    store = _load_store(obj)
    found = _sort_by_count(store.get_all_patterns())

    click.echo("Failure Pattern Statistics")
    click.echo("==========================\n")
    click.echo(f"Total patterns: {len(found)}")
    click.echo(f"Project data file: {store.project_path}")
    click.echo(f"Global data file: {store.global_path}")

    if not found:
        return

    click.echo("\nTop patterns:")
    for p in found[:_TOP_PATTERNS_LIMIT]:
        seed_tag = " [seed]" if p.seed else ""
        click.echo(f"  {p.source_code} -> {p.target_code}  (count: {p.count}){seed_tag}")

    seeds = sum(1 for p in found if p.seed)
    click.echo(f"\nSeed patterns: {seeds}")
    click.echo(f"Learned patterns: {len(found) - seeds}")


@patterns.command()
@click.pass_obj
def reset(obj: CLIContext) -> None:
    """Clear learned patterns, keeping (and restoring) seed data."""
    store = _load_store(obj)
    before = len(store.get_all_patterns())

    removed = store.cleanup(timedelta(0))
    try:
        store.save()
        if obj.config.use_seed_data:
            store.set_project_data(seed_patterns())
            store.save_project()
    except PatternStoreError as e:
        raise click.ClickException(str(e)) from e

    after = len(store.get_all_patterns())
    click.echo("Patterns reset complete")
    click.echo(f"  Before: {before}")
    click.echo(f"  Removed (learned): {removed}")
    click.echo(f"  After (seeds): {after}")


@patterns.command()
@click.option(
    "--verbose", "show_all", is_flag=True, default=False, help="Show all patterns and sessions."
)
@click.pass_obj
def debug(obj: CLIContext, show_all: bool) -> None:
    """Show pattern learning status and configuration."""
    cfg = obj.config
    store = _load_store(obj)
    found = _sort_by_count(store.get_all_patterns())
    seeds = [p for p in found if p.seed]
    learned = [p for p in found if not p.seed]

    click.echo("Pattern Learning")
    click.echo("================\n")
    click.echo(f"Status: {'enabled' if cfg.enabled else 'disabled'}")
    click.echo(f"Min Count: {cfg.min_count}")
    click.echo(f"Max Age: {cfg.max_age}")
    click.echo(f"Session Max Age: {cfg.session_max_age}\n")
    click.echo(f"Seed Patterns: {len(seeds)}")
    click.echo(f"Learned Patterns: {len(learned)}")
    click.echo(f"Active Sessions: {store.get_active_sessions()}\n")

    if not show_all:
        if learned:
            click.echo("Top Learned Patterns:")
            for p in learned[:_TOP_LEARNED_LIMIT]:
                click.echo(
                    f"  {p.source_code} -> {p.target_code}  "
                    f"(count: {p.count}, last: {p.last_seen:%Y-%m-%d})"
                )
            if len(learned) > _TOP_LEARNED_LIMIT:
                click.echo(
                    f"  ... and {len(learned) - _TOP_LEARNED_LIMIT} more (use --verbose to see all)"
                )
        return

    if seeds:
        click.echo("Seed Patterns:")
        for p in seeds:
            click.echo(f"  {p.source_code} -> {p.target_code}  (count: {p.count})")
        click.echo("")
    if learned:
        click.echo("Learned Patterns:")
        for p in learned:
            click.echo(
                f"  {p.source_code} -> {p.target_code}  (count: {p.count}, "
                f"first: {p.first_seen:%Y-%m-%d}, last: {p.last_seen:%Y-%m-%d})"
            )
        click.echo("")

    sessions = store.get_sessions()
    if not sessions:
        click.echo("No active sessions.")
        return
    click.echo("Active Sessions:")
    for session_id in sorted(sessions):
        entry = sessions[session_id]
        shown = session_id
        if len(shown) > _SESSION_ID_TRUNCATE_AT:
            shown = shown[:_SESSION_ID_TRUNCATE_AT] + "..."
        click.echo(
            f"  {shown}  codes: [{', '.join(entry.codes)}]  "
            f"last: {entry.last_seen:%Y-%m-%d %H:%M:%S}"
        )


@patterns.command()
@click.argument("session_id")
@click.argument("codes", nargs=-1)
@click.pass_obj
def observe(obj: CLIContext, session_id: str, codes: tuple[str, ...]) -> None:
    """Record one validation round for SESSION_ID and print any hints.

    Pass no CODES to mark the round as passing, which clears the session.
    """
    for warning in run_pattern_tracking(obj.config, list(codes), session_id, obj.project_dir):
        click.echo(warning)


@patterns.command()
@click.argument("codes", nargs=-1, required=True)
@click.pass_obj
def advise(obj: CLIContext, codes: tuple[str, ...]) -> None:
    """Print hints for blocking CODES without recording anything."""
    store = _load_store(obj)
    if obj.config.use_seed_data and not store.has_project_data():
        store.set_project_data(seed_patterns())

    for warning in Advisor.from_config(store, obj.config).advise(list(codes)):
        click.echo(warning)

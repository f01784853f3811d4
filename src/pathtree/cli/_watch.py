"""The watch command."""

from __future__ import annotations

import datetime

import click

from ..exceptions import InvalidPatternError
from ..location import Directory
from ..watch import DEFAULT_DEBOUNCE_MS
from ._helpers import main, _invalid_pattern, _status


def _format_event(event) -> str:
    now = datetime.datetime.now().strftime("%H:%M:%S")
    return f"[{now}] {event.kind} {event.location}"


@main.command()
@click.argument("path", type=click.Path(exists=True, file_okay=False), default=".")
@click.option("--glob", "-g", "patterns", multiple=True,
              help="Glob pattern (repeatable; '!dir/**' silences a subtree).")
@click.option("--debounce", type=int, default=DEFAULT_DEBOUNCE_MS, show_default=True,
              envvar="PATHTREE_DEBOUNCE",
              help="Debounce window in milliseconds (or set PATHTREE_DEBOUNCE).")
@click.option("--poll", is_flag=True, default=False,
              help="Poll for changes instead of using OS notifications.")
@click.option("--count", type=click.IntRange(min=1), default=None,
              help="Exit after this many events.")
@click.pass_context
def watch(ctx, path, patterns, debounce, poll, count):
    """Print changes under PATH until interrupted.

    \b
    Each line reads:
        [HH:MM:SS] created|modified|deleted PATH
    """
    try:
        observation = Directory(path).observe(
            *patterns, debounce_ms=debounce, force_polling=poll,
        )
    except InvalidPatternError as exc:
        raise _invalid_pattern(exc)

    click.echo(f"Watching {path} (debounce {debounce}ms)")
    seen = 0
    try:
        with observation:
            for event in observation:
                click.echo(_format_event(event))
                seen += 1
                if count is not None and seen >= count:
                    break
    except KeyboardInterrupt:
        click.echo("\nStopped watching.")
    _status(ctx, f"{seen} event(s)")

"""Shared helpers, option decorators, and the main CLI group."""

from __future__ import annotations

import logging

import click

from ..exceptions import InvalidPatternError
from ..options import Option


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _status(ctx, msg):
    """Emit a status message to stderr when verbose mode (-v) is on."""
    if ctx.obj.get("verbose"):
        click.echo(msg, err=True)


def _filter_options(f):
    """Shared pattern, depth and ignore-file options for tree commands."""
    f = click.option("--gitignore", is_flag=True, default=False,
                     help="Honour .gitignore files found while walking.")(f)
    f = click.option("--exclude-from", "exclude_from", type=click.Path(exists=True),
                     multiple=True,
                     help="Read gitignore-syntax exclude patterns from file (repeatable).")(f)
    f = click.option("--depth", type=click.IntRange(min=0), default=None,
                     help="Descend at most this many levels below the root.")(f)
    f = click.option("--strip", is_flag=True, default=False,
                     help="Operate on the content of the root, not the root itself.")(f)
    f = click.option("--glob", "-g", "patterns", multiple=True,
                     help="Glob pattern (repeatable; '!' excludes, '!dir/**' prunes).")(f)
    return f


def _build_option(patterns=(), strip=False, depth=None, exclude_from=(),
                  gitignore=False) -> Option:
    """Translate the shared filter options into an :class:`Option`."""
    option = Option().glob(*patterns)
    if strip:
        option.strip()
    if depth is not None:
        option.depth(depth)
    for path in exclude_from:
        option.exclude_from(path)
    if gitignore:
        option.gitignore()
    return option


def _format_summary(report) -> str:
    """One-line +N -N =N !N summary from a WalkReport."""
    parts = []
    if report.transferred:
        parts.append(f"+{len(report.transferred)}")
    if report.removed:
        parts.append(f"-{len(report.removed)}")
    if report.skipped:
        parts.append(f"={len(report.skipped)}")
    if report.errors:
        parts.append(f"!{len(report.errors)}")
    summary = " ".join(parts) if parts else "no changes"
    if report.cancelled:
        summary += " (cancelled)"
    return summary


def _echo_report(ctx, report) -> None:
    """Print the summary, then each per-file error on stderr."""
    click.echo(f"{report.mode}: {_format_summary(report)}")
    for path in report.skipped:
        _status(ctx, f"skipped {path}")
    for e in report.errors:
        click.echo(f"ERROR: {e.path}: {e.error}", err=True)


def _invalid_pattern(exc: InvalidPatternError) -> click.ClickException:
    return click.ClickException(str(exc))


# ---------------------------------------------------------------------------
# Main group
# ---------------------------------------------------------------------------

@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Verbose output on stderr.")
@click.pass_context
def main(ctx, verbose):
    """pathtree: copy, move, delete, list and watch directory trees.

    \b
    Quick start:
      pathtree cp src backup                  # backup/src/...
      pathtree cp --strip src backup          # backup/...
      pathtree mv -g '**/*.log' logs archive
      pathtree rm -g '**/*.pyc' project
      pathtree ls -g '!build/**' project
      pathtree watch project

    \b
    Patterns are matched against paths relative to the source's parent,
    or relative to the source itself with --strip.
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    if verbose:
        logging.basicConfig(level=logging.DEBUG,
                            format="%(levelname)s %(name)s: %(message)s")

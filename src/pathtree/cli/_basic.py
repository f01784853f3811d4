"""The ls command."""

from __future__ import annotations

import os

import click

from ..exceptions import InvalidPatternError
from ..walk import walk_directories, walk_files
from ._helpers import main, _build_option, _filter_options, _invalid_pattern


@main.command()
@click.argument("path", type=click.Path(exists=True), default=".")
@click.option("--dirs", is_flag=True, default=False,
              help="List directories instead of files.")
@click.option("--absolute", is_flag=True, default=False,
              help="Print full paths instead of paths relative to PATH.")
@_filter_options
@click.pass_context
def ls(ctx, path, dirs, absolute, patterns, strip, depth, exclude_from, gitignore):
    """List the files (or directories) under PATH, depth first.

    Patterns are matched against paths relative to PATH.  With --dirs,
    PATH itself is listed as "." unless --strip is given.
    """
    option = _build_option(patterns, strip, depth, exclude_from, gitignore)
    walk = walk_directories if dirs else walk_files
    try:
        for location in walk(path, option):
            shown = str(location) if absolute else os.path.relpath(location, path)
            click.echo(shown.replace(os.sep, "/"))
    except InvalidPatternError as exc:
        raise _invalid_pattern(exc)

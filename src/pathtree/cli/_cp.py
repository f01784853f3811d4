"""The cp, mv and rm commands."""

from __future__ import annotations

import click

from ..exceptions import AlreadyExistsError, InvalidPatternError
from ..walk import copy_tree, delete_tree, move_tree
from ._helpers import (
    main,
    _build_option,
    _echo_report,
    _filter_options,
    _invalid_pattern,
    _status,
)


def _existing_options(f):
    """Shared --skip-existing / --stop-existing / --into options."""
    f = click.option("--into", default=None,
                     help="Place the output under this sub-path of DEST.")(f)
    f = click.option("--stop-existing", is_flag=True, default=False,
                     help="Abort when a destination file already exists.")(f)
    f = click.option("--skip-existing", is_flag=True, default=False,
                     help="Leave existing destination files untouched.")(f)
    return f


def _transfer(ctx, operation, src, dest, patterns, strip, depth, exclude_from,
              gitignore, skip_existing, stop_existing, into):
    if skip_existing and stop_existing:
        raise click.ClickException("--skip-existing and --stop-existing are exclusive")
    option = _build_option(patterns, strip, depth, exclude_from, gitignore)
    if skip_existing:
        option.skip_existing()
    elif stop_existing:
        option.stop_existing()
    option.allocate_in(into)
    _status(ctx, f"{src} -> {dest} ({option!r})")
    try:
        report = operation(src, dest, option)
    except InvalidPatternError as exc:
        raise _invalid_pattern(exc)
    except AlreadyExistsError as exc:
        raise click.ClickException(f"Destination exists: {exc.filename or exc}")
    _echo_report(ctx, report)
    if report.errors:
        ctx.exit(1)


@main.command()
@click.argument("src", type=click.Path(exists=True))
@click.argument("dest", type=click.Path())
@_filter_options
@_existing_options
@click.pass_context
def cp(ctx, src, dest, patterns, strip, depth, exclude_from, gitignore,
       skip_existing, stop_existing, into):
    """Copy SRC (file or directory) into DEST.

    A directory lands at DEST/<name> unless --strip is given; a file copied
    onto an existing directory lands inside it.

    \b
    Examples:
        pathtree cp docs out                    # out/docs/...
        pathtree cp --strip -g '**/*.md' docs out
        pathtree cp --into v1 --skip-existing docs out
    """
    _transfer(ctx, copy_tree, src, dest, patterns, strip, depth, exclude_from,
              gitignore, skip_existing, stop_existing, into)


@main.command()
@click.argument("src", type=click.Path(exists=True))
@click.argument("dest", type=click.Path())
@_filter_options
@_existing_options
@click.pass_context
def mv(ctx, src, dest, patterns, strip, depth, exclude_from, gitignore,
       skip_existing, stop_existing, into):
    """Move SRC into DEST, removing source directories left empty.

    Source directories still holding filtered-out files are kept.
    """
    _transfer(ctx, move_tree, src, dest, patterns, strip, depth, exclude_from,
              gitignore, skip_existing, stop_existing, into)


@main.command()
@click.argument("path", type=click.Path(exists=True))
@_filter_options
@click.pass_context
def rm(ctx, path, patterns, strip, depth, exclude_from, gitignore):
    """Delete PATH, or only the files matching --glob beneath it.

    Directories emptied by the deletion are removed too.
    """
    option = _build_option(patterns, strip, depth, exclude_from, gitignore)
    try:
        report = delete_tree(path, option)
    except InvalidPatternError as exc:
        raise _invalid_pattern(exc)
    _echo_report(ctx, report)
    if report.errors:
        ctx.exit(1)

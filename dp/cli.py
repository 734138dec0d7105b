"""
dpfmt - canonical formatter for dp source files.

Usage:
    dpfmt FILE          print the formatted file
    dpfmt -d FILE       show a unified diff against the file
    dpfmt -w FILE       rewrite the file in place

Author: xwest
"""

import logging
import sys

import click

from . import __version__, format_source
from .fileio import read_source, replace_file, run_diff
from .lexer.errors import PositionError, error_with_position_prefix

logger = logging.getLogger(__name__)


class DiffToolError(Exception):
    """The external diff tool failed to run to completion."""


def format_path(filename: str, show_diff: bool, write: bool, diff_command: str):
    """Format one file and deliver the result the way the flags ask."""
    data = read_source(filename)
    output = format_source(data, filename)
    logger.debug("formatted %s: %d -> %d bytes", filename, len(data), len(output))

    if show_diff:
        status = run_diff(filename, output, diff_command,
                          stdout=click.get_binary_stream("stdout"),
                          stderr=click.get_binary_stream("stderr"))
        # Status 1 only means that there are differences.
        if status > 1:
            raise DiffToolError(f"{diff_command} exited with status {status}")
    elif not write:
        stdout = click.get_binary_stream("stdout")
        stdout.write(output)
        stdout.flush()
        return

    if write:
        replace_file(filename, output)


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("-d", "--diff", "show_diff", is_flag=True,
              help="Display a diff instead of printing the result.")
@click.option("-w", "--write", is_flag=True,
              help="Write the result to the source file instead of stdout.")
@click.option("--diff-command", envvar="DPFMT_DIFF", default="diff", show_default=True,
              help="Diff tool used by --diff.")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.version_option(__version__, prog_name="dpfmt")
@click.argument("filename", type=click.Path(dir_okay=False))
def main(show_diff, write, diff_command, verbose, filename):
    """Format a dp source FILE."""
    logging.basicConfig(
        stream=sys.stderr,
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(name)s: %(message)s",
    )

    try:
        format_path(filename, show_diff, write, diff_command)
    except (PositionError, DiffToolError, OSError) as e:
        click.echo(error_with_position_prefix(e, filename), err=True)
        sys.exit(1)


if __name__ == "__main__":
    main()

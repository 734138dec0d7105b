"""
File helpers for the dpfmt command.

xwest
"""

import logging
import os
import shutil
import subprocess
import sys
import tempfile
from typing import BinaryIO, Optional

logger = logging.getLogger(__name__)


def read_source(path: str) -> bytes:
    with open(path, "rb") as f:
        return f.read()


def replace_file(path: str, data: bytes):
    """
    Atomically replace the contents of a file.

    The data is written to a hidden temporary file in the same directory
    which is then renamed over the target. The temporary file is removed
    if anything fails.
    """
    directory = os.path.dirname(path) or "."
    fd, temp_path = tempfile.mkstemp(prefix=".", suffix=".dpfmt", dir=directory)
    renamed = False

    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)

        if os.path.exists(path):
            shutil.copymode(path, temp_path)

        os.replace(temp_path, path)
        renamed = True
        logger.debug("replaced %s (%d bytes)", path, len(data))
    finally:
        if not renamed:
            os.remove(temp_path)


def run_diff(path: str, data: bytes, command: str = "diff",
             stdout: Optional[BinaryIO] = None, stderr: Optional[BinaryIO] = None) -> int:
    """
    Compare a file with new contents using an external diff tool.

    Runs ``command -u path /dev/stdin`` with data on standard input and
    copies the tool's output to the given streams.

    Returns:
        The tool's exit status: 0 for no differences, 1 for differences,
        anything else for trouble
    """
    args = [command, "-u", path, "/dev/stdin"]
    logger.debug("running %s", " ".join(args))

    result = subprocess.run(args, input=data, capture_output=True, check=False)

    (stdout or sys.stdout.buffer).write(result.stdout)
    (stderr or sys.stderr.buffer).write(result.stderr)

    return result.returncode

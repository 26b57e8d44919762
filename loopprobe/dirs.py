"""Creating and recursively deleting directories."""

from __future__ import annotations

import os
from contextlib import suppress

from loopprobe.logs import error

DIR_MODE = 0o754
"""Permissions given to new directories (before the umask)."""


def create_dir(path: str | os.PathLike[str]) -> bool:
    """Create ``path``; on failure log an error and return False."""
    try:
        os.mkdir(path, DIR_MODE)
    except OSError as exc:
        error(f"create {os.fspath(path)} failed: {exc.strerror}.\n")
        return False
    return True


def delete_dir(path: str | os.PathLike[str]) -> bool:
    """Remove ``path`` and everything under it.

    Returns False, after logging an error, only when ``path`` cannot be
    listed; failures to remove single entries are ignored.
    """
    try:
        with os.scandir(path) as it:
            entries = list(it)
    except OSError as exc:
        error(f"open {os.fspath(path)} failed: {exc.strerror}.\n")
        return False

    for entry in entries:
        if entry.is_dir(follow_symlinks=False):
            delete_dir(entry.path)
        else:
            with suppress(OSError):
                os.unlink(entry.path)

    with suppress(OSError):
        os.rmdir(path)
    return True
"""Line-oriented file reading and simple text writing."""

from __future__ import annotations

import os
from collections.abc import Iterator

LINE_CHAR_MAX_NUM = 1024
"""Longest line handed out by :func:`read_lines`; longer lines come in pieces."""

_ENCODING = "utf-8"
_ERRORS = "surrogateescape"


def read_lines(path: str | os.PathLike[str]) -> Iterator[str]:
    """Yield the lines of ``path`` without their newline characters.

    Empty lines inside the file are yielded; a newline at the very end does
    not produce an extra empty line.  Lines longer than
    :data:`LINE_CHAR_MAX_NUM` are yielded in pieces of at most that length.
    """
    with open(path, encoding=_ENCODING, errors=_ERRORS, newline="") as handle:
        for raw in handle:
            line = raw[:-1] if raw.endswith("\n") else raw
            if not line:
                yield line
                continue
            for start in range(0, len(line), LINE_CHAR_MAX_NUM):
                yield line[start:start + LINE_CHAR_MAX_NUM]


def append_text(path: str | os.PathLike[str], data: str) -> int:
    """Append ``data`` to ``path``, creating it if needed; return characters written."""
    with open(path, "a", encoding=_ENCODING, errors=_ERRORS, newline="") as handle:
        return handle.write(data)


def write_text(path: str | os.PathLike[str], data: str) -> int:
    """Replace the contents of ``path`` with ``data``; return characters written."""
    with open(path, "w", encoding=_ENCODING, errors=_ERRORS, newline="") as handle:
        return handle.write(data)
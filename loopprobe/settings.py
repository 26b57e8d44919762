"""Shared limits and reading of ``key=value`` settings files."""

from __future__ import annotations

import os

from loopprobe.fileio import read_lines
from loopprobe.logs import error
from loopprobe.strops import count_char, cut_by_label, strip_leading_blanks

INPUT_PATH = "../input.conf"
"""Settings file read by the command-line tools."""

SRC_PATH_KEY = "srcPath"
"""Key naming the source tree to instrument."""

JSON_PATH_KEY = "JsonPath"
"""Key naming the compilation database to pre-compile from."""

DIRPATH_MAX = 256
MAX_PATH_LENGTH = 1024
MAX_PROGRAMNAME_NUM = 128
MAX_FUNCNAME_LENGTH = 128
MAX_COMMAND_LENGTH = 1024
MAX_FILENAME_LENGTH = 64

MAX_CONVERT_SRC_PTHREAD_NUM = 10
"""Workers converting sources to XML at once."""

MAX_CONVERT_XML_PTHREAD_NUM = 10
"""Workers converting XML back to sources at once."""

MAX_INSERT_XML_PTHREAD_NUM = 10
"""Workers instrumenting XML documents at once."""

MAX_EXECPRECOMPILE_PTHREAD_NUM = 10
"""Workers running pre-compile scripts at once."""

_COMMENT = "#"
_SEPARATOR = "="


def read_setting(path: str | os.PathLike[str], key: str) -> str | None:
    """Return the value of the first ``key=value`` line of ``path``.

    Leading blanks are ignored, lines starting with ``#`` are comments and
    lines holding more or fewer than one ``=`` are skipped.  Keys compare
    without regard to case.  Returns None when no line sets ``key``.
    An unreadable file is logged as an error and the ``OSError`` raised.
    """
    try:
        lines = list(read_lines(path))
    except OSError as exc:
        error(f"open file({os.fspath(path)}) failed: {exc.strerror}.\n")
        raise

    wanted = key.lower()
    for raw in lines:
        line = strip_leading_blanks(raw)
        if line.startswith(_COMMENT) or count_char(line, _SEPARATOR) != 1:
            continue
        pieces = cut_by_label(line, _SEPARATOR, 2)
        name = pieces[0]
        value = pieces[1] if len(pieces) > 1 else ""
        if name.lower() == wanted:
            return value
    return None
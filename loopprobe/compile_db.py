"""Reading pre-compile commands out of a compilation database.

The database is read line by line, the way the usual one-value-per-line
layout of ``compile_commands.json`` writes it.  Each ``"arguments"`` list
starts a new entry.  Its ``"directory"`` and ``"file"`` lines must follow it.
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from dataclasses import dataclass

from loopprobe.fileio import read_lines
from loopprobe.logs import error
from loopprobe.strops import cut_by_label

PRECOMPILE_FLAGS = " -E -P"
"""Flags that take the place of ``-c`` so the compiler only pre-processes."""

_JSON_NOISE = str.maketrans("", "", ' ",')
_ARGUMENTS = '"arguments"'
_DIRECTORY = '"directory"'
_FILE = '"file"'
_OUTPUT_FLAG = '"-o"'
_COMPILE_FLAG = '"-c"'
_LIST_END = "]"


@dataclass
class PreCompileInfo:
    """Where to run a pre-compile command, the command, and the file it handles."""

    dir_path: str = ""
    command: str = ""
    file_name: str = ""


def _strip_json(text: str) -> str:
    return text.translate(_JSON_NOISE)


def _value(line: str) -> str:
    pieces = cut_by_label(line, ":", 2)
    return _strip_json(pieces[1]) if len(pieces) > 1 else ""


def _collect_arguments(lines: Iterator[str]) -> str:
    command = ""
    for line in lines:
        if _LIST_END in line:
            break
        if _OUTPUT_FLAG in line:
            # The output file is replaced by the pre-processed one.
            next(lines, None)
        elif _COMPILE_FLAG in line:
            command += PRECOMPILE_FLAGS
        else:
            command += f" {_strip_json(line)}"
    return command


def _current(infos: list[PreCompileInfo], key: str) -> PreCompileInfo:
    if not infos:
        raise ValueError(f'"{key}" found before any "arguments" list')
    return infos[-1]


def _output_name(file_name: str) -> str:
    dot = file_name.rfind(".")
    if dot == -1:
        return f"{file_name}.E"
    return f"{file_name[:dot]}.E{file_name[dot:]}"


def parse_compile_commands(path: str | os.PathLike[str]) -> list[PreCompileInfo]:
    """Read the pre-compile commands from the compilation database at ``path``.

    In each command ``-c`` becomes ``-E -P``, the ``-o`` output is dropped
    and ``-o <stem>.E<ext>`` is added for the entry's file.  An unreadable
    file is logged and its ``OSError`` raised.  A ``"directory"`` or
    ``"file"`` line before any ``"arguments"`` raises ``ValueError``.
    """
    try:
        lines = iter(list(read_lines(path)))
    except OSError as exc:
        error(f"open file({os.fspath(path)}) failed: {exc.strerror}.\n")
        raise

    infos: list[PreCompileInfo] = []
    for line in lines:
        if _ARGUMENTS in line:
            infos.append(PreCompileInfo(command=_collect_arguments(lines)))
        elif _DIRECTORY in line:
            _current(infos, "directory").dir_path += _value(line)
        elif _FILE in line:
            info = _current(infos, "file")
            info.file_name = _value(line)
            info.command += f" -o {_output_name(info.file_name)}"
    return infos
"""Running the pre-compile commands of a compilation database in parallel."""

from __future__ import annotations

import os
import subprocess
import sys
from collections.abc import Iterable, Sequence
from concurrent.futures import Future, ThreadPoolExecutor

from loopprobe.compile_db import PreCompileInfo, parse_compile_commands
from loopprobe.fileio import write_text
from loopprobe.logs import error
from loopprobe.settings import (
    INPUT_PATH,
    JSON_PATH_KEY,
    MAX_EXECPRECOMPILE_PTHREAD_NUM,
    read_setting,
)

SHELL = "sh"
"""Shell that runs the generated scripts."""

SCRIPT_NAME = "build_PreCompile{}.sh"
"""Name of the script written for each worker slot, in the working directory."""

_FAILURE = "pthread_join precompile failure!\n"


def exec_command(shell_path: str | os.PathLike[str]) -> bool:
    """Run the script at ``shell_path`` with the shell.

    Returns True once the shell has run, whatever its exit status, and
    False, after logging an error, when it could not be started.
    """
    try:
        subprocess.run([SHELL, os.fspath(shell_path)], check=False)
    except OSError as exc:
        error(f"execute shell({os.fspath(shell_path)}) failed: {exc.strerror}.\n")
        return False
    return True


def _script(info: PreCompileInfo) -> str:
    return f"#!/bin/bash\ncd {info.dir_path}\n{info.command}"


def _finished(pending: Future[bool] | None) -> bool:
    if pending is not None and not pending.result():
        error(_FAILURE)
        return False
    return True


def exec_precompile(infos: Iterable[PreCompileInfo]) -> bool:
    """Run every pre-compile command, a fixed number at a time.

    Each command is written to the script of a free worker slot and run
    there.  Stops at the first job that fails and returns False.
    """
    infos = list(infos)
    total = len(infos)
    scripts = [SCRIPT_NAME.format(slot) for slot in range(MAX_EXECPRECOMPILE_PTHREAD_NUM)]
    running: list[Future[bool] | None] = [None] * len(scripts)

    with ThreadPoolExecutor(max_workers=len(scripts)) as executor:
        for done, info in enumerate(infos, start=1):
            slot = (done - 1) % len(scripts)
            if not _finished(running[slot]):
                return False
            running[slot] = None
            print(f"PreCompile file: {info.dir_path}/{info.file_name}...({done}/{total})")
            write_text(scripts[slot], _script(info))
            running[slot] = executor.submit(exec_command, scripts[slot])

        return all(_finished(pending) for pending in running)


def main(argv: Sequence[str] | None = None) -> int:
    """Pre-compile every file of the database named by ``JsonPath``.

    An optional first argument names the settings file to read instead of
    the default one.
    """
    args = sys.argv[1:] if argv is None else list(argv)
    config = args[0] if args else INPUT_PATH
    try:
        json_path = read_setting(config, JSON_PATH_KEY)
    except OSError:
        return 1
    if not json_path:
        error(f"{JSON_PATH_KEY} is not set in {config}\n")
        return 1
    try:
        infos = parse_compile_commands(json_path)
    except OSError:
        return 1
    except ValueError as exc:
        error(f"{exc}\n")
        return 1
    return 0 if exec_precompile(infos) else 1
"""Recognising source files, naming the program and converting files."""

from __future__ import annotations

import os
import shutil
import stat
import subprocess

from loopprobe.logs import error
from loopprobe.settings import MAX_PROGRAMNAME_NUM

SRCML = "srcml"
"""Converter between source files and srcML documents."""

_CPP_SUFFIXES = (".cpp", ".cxx", ".c++")
_CPP_XML_SUFFIXES = (".cpp.xml", ".cxx.xml", ".c++.xml")


def program_name(source_path: str) -> str:
    """Return the last path component of ``source_path`` as the program name.

    Raises ``ValueError``, after logging an error, when the name is longer
    than the preset limit.
    """
    index = source_path.rfind("/")
    too_long = (
        len(source_path) - index > MAX_PROGRAMNAME_NUM
        if index != -1
        else len(source_path) > MAX_PROGRAMNAME_NUM
    )
    if too_long:
        error("program name greater than preset values\n")
        raise ValueError("program name greater than preset values")
    return source_path[index + 1:]


def is_c_source(path: str) -> bool:
    """Whether ``path`` names a C source file (``.c``)."""
    return len(path) > 2 and path.endswith(".c")


def is_c_xml(path: str) -> bool:
    """Whether ``path`` names the srcML document of a C source (``.c.xml``)."""
    return len(path) > 6 and path.endswith(".c.xml")


def is_cpp_source(path: str) -> bool:
    """Whether ``path`` names a C++ source file (``.cc``, ``.cpp``, ``.cxx``, ``.c++``)."""
    if len(path) <= 3:
        return False
    lowered = path.lower()
    if lowered.endswith(".cc"):
        return True
    if len(path) <= 4:
        return False
    return lowered.endswith(_CPP_SUFFIXES)


def is_cpp_xml(path: str) -> bool:
    """Whether ``path`` names the srcML document of a C++ source."""
    if len(path) <= 7:
        return False
    lowered = path.lower()
    if lowered.endswith(".cc.xml"):
        return True
    if len(path) <= 8:
        return False
    return lowered.endswith(_CPP_XML_SUFFIXES)


def run_srcml(src_path: str, dest_path: str) -> bool:
    """Convert ``src_path`` to ``dest_path`` with srcML, either direction.

    Returns True when the converter exits successfully.
    """
    try:
        completed = subprocess.run([SRCML, src_path, "-o", dest_path], check=False)
    except OSError as exc:
        error(f"convert {src_path} to XML failed: {exc.strerror}.\n")
        return False
    return completed.returncode == 0


def copy_file(src_path: str, dest_path: str) -> bool:
    """Copy ``src_path`` to ``dest_path`` with its permission bits."""
    try:
        shutil.copy(src_path, dest_path)
    except OSError as exc:
        error(f"copy {src_path} to {dest_path} failed: {exc.strerror}.\n")
        return False
    return True


def count_convertible(dir_path: str) -> int:
    """Count the C and C++ source files below ``dir_path``.

    Hidden entries are skipped and symbolic links are not followed.  A
    directory that cannot be listed counts as empty; an entry that cannot
    be examined makes its whole directory count as zero.  Both are logged.
    """
    try:
        names = os.listdir(dir_path)
    except OSError as exc:
        error(f"open directory {dir_path} to failed: {exc.strerror}.\n")
        return 0

    total = 0
    for name in names:
        if name.startswith("."):
            continue
        child = f"{dir_path}/{name}"
        try:
            mode = os.lstat(child).st_mode
        except OSError as exc:
            error(f"lstat {child} to failed: {exc.strerror}.\n")
            return 0
        if stat.S_ISDIR(mode):
            total += count_convertible(child)
        elif stat.S_ISREG(mode) and (is_c_source(child) or is_cpp_source(child)):
            total += 1
    return total
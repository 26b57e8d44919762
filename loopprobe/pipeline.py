"""The loop instrumentation pipeline: sources to srcML, counters in, back to sources.

The instrumented copy of a program named ``<name>`` is written to
``./<name>`` in the working directory. The srcML documents live in
``./temp_<name>`` while the pipeline runs.
"""

from __future__ import annotations

import os
import stat
import sys
from collections.abc import Callable, Sequence
from concurrent.futures import Future, ThreadPoolExecutor

from loopprobe.dirs import create_dir, delete_dir
from loopprobe.instrument import insert_code
from loopprobe.logs import error
from loopprobe.settings import (
    INPUT_PATH,
    MAX_CONVERT_SRC_PTHREAD_NUM,
    MAX_CONVERT_XML_PTHREAD_NUM,
    MAX_INSERT_XML_PTHREAD_NUM,
    SRC_PATH_KEY,
    read_setting,
)
from loopprobe.sources import (
    copy_file,
    count_convertible,
    is_c_source,
    is_c_xml,
    is_cpp_source,
    is_cpp_xml,
    program_name,
    run_srcml,
)

TEMP_PREFIX = "temp_"
"""Prefix of the directory that holds the srcML documents."""

_XML_SUFFIX = ".xml"
_SRC_FAILURE = "convert src failure!\n"
_XML_FAILURE = "convert xml failure!\n"
_INSERT_FAILURE = "insert xml failure!\n"


class _WorkerRing:
    """A fixed ring of worker slots; a slot is reused once its last job ends."""

    def __init__(self, size: int, failure_message: str) -> None:
        self._executor = ThreadPoolExecutor(max_workers=size)
        self._slots: list[Future[bool] | None] = [None] * size
        self._next = 0
        self._failure = failure_message

    def __enter__(self) -> _WorkerRing:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self._executor.shutdown(wait=True)

    def free_slot(self) -> bool:
        """Wait for the job in the next slot; False if that job failed."""
        pending = self._slots[self._next]
        if pending is None:
            return True
        self._slots[self._next] = None
        if not pending.result():
            error(self._failure)
            return False
        return True

    def submit(self, job: Callable[..., bool], *args: str) -> None:
        """Start ``job`` in the next slot and move on to the following one."""
        self._slots[self._next] = self._executor.submit(job, *args)
        self._next = (self._next + 1) % len(self._slots)

    def drain(self) -> bool:
        """Wait for every running job; True when all of them succeeded."""
        all_ok = True
        for index, pending in enumerate(self._slots):
            if pending is None:
                continue
            self._slots[index] = None
            if not pending.result():
                error(self._failure)
                all_ok = False
        return all_ok


def _list_dir(dir_path: str) -> list[str] | None:
    try:
        names = os.listdir(dir_path)
    except OSError as exc:
        error(f"open directory {dir_path} to failed: {exc.strerror}.\n")
        return None
    return sorted(name for name in names if not name.startswith("."))


def _lstat_mode(path: str) -> int | None:
    try:
        return os.lstat(path).st_mode
    except OSError as exc:
        error(f"lstat {path} to failed: {exc.strerror}.\n")
        return None


def _instrument_document(path: str) -> bool:
    try:
        return insert_code(path)
    except (ValueError, OSError) as exc:
        error(f"instrument {path} failed: {exc}.\n")
        return False


class Instrumenter:
    """Runs the stages of loop instrumentation for one program tree."""

    def __init__(self, src_path: str) -> None:
        self.src_path = src_path
        self.program_name = program_name(src_path)
        self.total_files = 0
        self.processed = 0

    @property
    def temp_root(self) -> str:
        """Directory holding the srcML documents of the program."""
        return f"{TEMP_PREFIX}{self.program_name}"

    def _mirror(self, dir_path: str) -> str:
        index = dir_path.find(self.program_name)
        if index == -1:
            raise ValueError(f"{dir_path} does not lie inside program {self.program_name}")
        return dir_path[index:]

    def _progress(self, action: str, path: str) -> None:
        self.processed += 1
        print(f"{action} {path}({self.processed}/{self.total_files})")

    def src_to_xml(self, dir_path: str) -> bool:
        """Convert the sources below ``dir_path`` to srcML and copy the other files."""
        with _WorkerRing(MAX_CONVERT_SRC_PTHREAD_NUM, _SRC_FAILURE) as ring:
            walked = self._src_to_xml(dir_path, ring)
            drained = ring.drain()
        return walked and drained

    def _src_to_xml(self, dir_path: str, ring: _WorkerRing) -> bool:
        copy_dir = self._mirror(dir_path)
        xml_dir = f"{TEMP_PREFIX}{copy_dir}"
        create_dir(xml_dir)
        create_dir(copy_dir)

        names = _list_dir(dir_path)
        if names is None:
            return False
        for name in names:
            child = f"{dir_path}/{name}"
            mode = _lstat_mode(child)
            if mode is None:
                return False
            if stat.S_ISDIR(mode):
                if not self._src_to_xml(child, ring):
                    return False
            elif stat.S_ISREG(mode):
                if is_c_source(child) or is_cpp_source(child):
                    if not ring.free_slot():
                        return False
                    self._progress("convert src file", child)
                    ring.submit(run_srcml, child, f"{xml_dir}/{name}{_XML_SUFFIX}")
                else:
                    copy_file(child, f"{copy_dir}/{name}")
        return True

    def xml_to_src(self, dir_path: str) -> bool:
        """Convert the srcML documents below ``dir_path`` back to sources."""
        with _WorkerRing(MAX_CONVERT_XML_PTHREAD_NUM, _XML_FAILURE) as ring:
            walked = self._xml_to_src(dir_path, ring)
            drained = ring.drain()
        return walked and drained

    def _xml_to_src(self, dir_path: str, ring: _WorkerRing) -> bool:
        src_dir = self._mirror(dir_path)
        names = _list_dir(dir_path)
        if names is None:
            return False
        for name in names:
            child = f"{dir_path}/{name}"
            mode = _lstat_mode(child)
            if mode is None:
                return False
            if stat.S_ISDIR(mode):
                if not self._xml_to_src(child, ring):
                    return False
            elif stat.S_ISREG(mode) and (is_c_xml(child) or is_cpp_xml(child)):
                if not ring.free_slot():
                    return False
                self._progress("convert xml file", child)
                dest = f"{src_dir}/{name}"[: -len(_XML_SUFFIX)]
                ring.submit(run_srcml, child, dest)
        return True

    def insert_xml(self, dir_path: str) -> bool:
        """Add loop counters to every srcML document below ``dir_path``."""
        with _WorkerRing(MAX_INSERT_XML_PTHREAD_NUM, _INSERT_FAILURE) as ring:
            walked = self._insert_xml(dir_path, ring)
            drained = ring.drain()
        return walked and drained

    def _insert_xml(self, dir_path: str, ring: _WorkerRing) -> bool:
        names = _list_dir(dir_path)
        if names is None:
            return False
        for name in names:
            child = f"{dir_path}/{name}"
            mode = _lstat_mode(child)
            if mode is None:
                return False
            if stat.S_ISDIR(mode):
                if not self._insert_xml(child, ring):
                    return False
            elif stat.S_ISREG(mode) and (is_c_xml(child) or is_cpp_xml(child)):
                if not ring.free_slot():
                    return False
                self._progress("insert xml file", child)
                ring.submit(_instrument_document, child)
        return True

    def build_src_to_xml(self) -> bool:
        """Count the sources of the program and convert them all to srcML."""
        self.total_files = count_convertible(self.src_path)
        self.processed = 0
        return self.src_to_xml(self.src_path)

    def build_insert_xml(self) -> bool:
        """Instrument every srcML document of the program."""
        self.processed = 0
        return self.insert_xml(self.temp_root)

    def build_xml_to_src(self) -> bool:
        """Turn every instrumented document back into a source file."""
        self.processed = 0
        return self.xml_to_src(self.temp_root)

    def clear_tmp(self) -> bool:
        """Remove the directory of srcML documents."""
        return delete_dir(self.temp_root)


def main(argv: Sequence[str] | None = None) -> int:
    """Instrument the program named by ``srcPath`` in the settings file.

    An optional first argument names the settings file to read instead of
    the default one.
    """
    args = sys.argv[1:] if argv is None else list(argv)
    config = args[0] if args else INPUT_PATH
    try:
        src_path = read_setting(config, SRC_PATH_KEY)
    except OSError:
        return 1
    if not src_path:
        error(f"{SRC_PATH_KEY} is not set in {config}\n")
        return 1
    try:
        instrumenter = Instrumenter(src_path)
    except ValueError:
        return 1

    instrumenter.build_src_to_xml()
    instrumenter.build_insert_xml()
    instrumenter.build_xml_to_src()
    instrumenter.clear_tmp()
    return 0
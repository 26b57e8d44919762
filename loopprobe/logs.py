"""Timestamped log records echoed to the terminal and appended to log files."""

from __future__ import annotations

import inspect
import os
import time
from enum import IntEnum

from loopprobe.fileio import append_text

ERROR_LOG = "errorInfo.log"
WARNING_LOG = "warningInfo.log"
RESULT_LOG = "resultInfo.log"

_RED = "\033[31m"
_GREEN = "\033[32m"
_RESET = "\033[0m"


class TimeFormat(IntEnum):
    """Layouts accepted by :func:`local_time`."""

    DATETIME = 0
    DATE = 1
    TIME = 2


class Rank(IntEnum):
    """Severity of a log record; decides the terminal colour."""

    ERROR = 0
    WARNING = 1
    RESULT = 2


_PATTERNS = {
    TimeFormat.DATETIME: "%Y-%m-%d %H:%M:%S",
    TimeFormat.DATE: "%Y-%m-%d",
    TimeFormat.TIME: "%H:%M:%S",
}


def local_time(fmt: int = TimeFormat.DATETIME) -> str:
    """Return the current local time in the layout chosen by ``fmt`` (0, 1 or 2)."""
    try:
        layout = _PATTERNS[TimeFormat(fmt)]
    except ValueError:
        raise ValueError(f"unknown time format: {fmt!r}") from None
    return time.strftime(layout, time.localtime())


def create_log_info(log_info: str, file: str, function: str, line: int) -> str:
    """Build the record written to a log file for ``log_info``."""
    return (
        f"[{local_time(TimeFormat.DATETIME)}]  "
        f"[文件:{file:>15}] "
        f" [函数:{function:>20}] "
        f"[行数:{line:4d}] "
        f"  操作：{log_info}"
    )


def write_log(
    rank: int, log_name: str | os.PathLike[str], log_info: str, file: str, function: str, line: int
) -> bool:
    """Echo ``log_info`` to the terminal and append a record to ``log_name``.

    Errors print in red, warnings in green, anything else plainly.  Returns
    whether the record reached the log file.
    """
    if rank == Rank.ERROR:
        print(f"{_RED}{log_info}{_RESET}", end="")
    elif rank == Rank.WARNING:
        print(f"{_GREEN}{log_info}{_RESET}", end="")
    else:
        print(log_info, end="")

    try:
        append_text(log_name, create_log_info(log_info, file, function, line))
    except OSError:
        return False
    return True


def _log_from_caller(rank: Rank, log_name: str, log_info: str) -> bool:
    frame = inspect.currentframe()
    caller = frame.f_back.f_back if frame and frame.f_back else None
    try:
        if caller is None:
            file, function, line = "", "", 0
        else:
            code = caller.f_code
            file = os.path.basename(code.co_filename)
            function = code.co_name
            line = caller.f_lineno
    finally:
        del frame, caller
    return write_log(rank, log_name, log_info, file, function, line)


def error(log_info: str) -> bool:
    """Record an error in :data:`ERROR_LOG`, naming the calling function."""
    return _log_from_caller(Rank.ERROR, ERROR_LOG, log_info)


def warning(log_info: str) -> bool:
    """Record a warning in :data:`WARNING_LOG`, naming the calling function."""
    return _log_from_caller(Rank.WARNING, WARNING_LOG, log_info)


def result(log_info: str) -> bool:
    """Record a result in :data:`RESULT_LOG`, naming the calling function."""
    return _log_from_caller(Rank.RESULT, RESULT_LOG, log_info)
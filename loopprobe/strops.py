"""Small string helpers used when reading configuration and building paths."""

from __future__ import annotations

MAX_SUBSTR = 512
"""Longest piece :func:`cut_by_label` keeps before truncating."""

_BLANKS = " \t"


def _check_char(ch: str) -> None:
    if len(ch) != 1:
        raise ValueError(f"expected a single character, got {ch!r}")


def _clip(piece: str) -> str:
    return piece[: MAX_SUBSTR - 1] if len(piece) > MAX_SUBSTR else piece


def remove_char(text: str, ch: str) -> str:
    """Return ``text`` with every occurrence of ``ch`` removed."""
    _check_char(ch)
    return text.replace(ch, "")


def remove_digits(text: str) -> str:
    """Return ``text`` without the ASCII digits 0-9."""
    return "".join(c for c in text if not "0" <= c <= "9")


def strip_leading_blanks(text: str) -> str:
    """Drop the spaces and tabs at the start of ``text``."""
    return text.lstrip(_BLANKS)


def count_char(text: str, ch: str) -> int:
    """Count how often ``ch`` occurs in ``text``."""
    _check_char(ch)
    return text.count(ch)


def cut_by_label(text: str, ch: str, limit: int) -> list[str]:
    """Split ``text`` on ``ch`` into at most ``limit`` pieces.

    Runs of separators and leading separators yield no empty pieces.  Once
    ``limit - 1`` pieces are taken, everything after the next separator is
    kept whole as the last piece.  The final piece is always present, even
    when it is empty.  Pieces longer than :data:`MAX_SUBSTR` are truncated.
    """
    _check_char(ch)
    if limit < 1:
        raise ValueError("limit must be at least 1")
    if limit == 1:
        return [_clip(text)]

    pieces: list[str] = []
    start = 0
    for pos, c in enumerate(text):
        if c != ch:
            continue
        if pos != start:
            pieces.append(_clip(text[start:pos]))
            if len(pieces) + 1 == limit:
                start = pos + 1
                break
        start = pos + 1

    pieces.append(_clip(text[start:]))
    return pieces


def int_to_str(num: int) -> str:
    """Render a non-negative integer in decimal."""
    if num < 0:
        raise ValueError("only non-negative integers are supported")
    return str(num)


def str_to_int(text: str) -> int:
    """Read the digits of ``text`` as one number, ignoring every other character."""
    value = 0
    for c in text:
        if "0" <= c <= "9":
            value = value * 10 + (ord(c) - ord("0"))
    return value


def last_index(text: str, ch: str) -> int:
    """Index of the last ``ch`` in ``text``, or -1 when it does not occur."""
    _check_char(ch)
    return text.rfind(ch)


def extract_string_from_literal(text: str) -> str:
    """Strip the surrounding quote characters from a string literal."""
    if len(text) < 2:
        raise ValueError(f"not a string literal: {text!r}")
    return text[1:-1]


def replace_char(text: str, old: str, new: str) -> tuple[str, int]:
    """Replace every ``old`` with ``new``; return the new text and the count."""
    _check_char(old)
    _check_char(new)
    return text.replace(old, new), text.count(old)
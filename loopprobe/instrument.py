"""Insertion of loop-counting statements into srcML documents.

Every loop body inside a function definition gets a counter that is
declared before the loop, incremented on each pass and reported through
``insert_count`` once the loop ends.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from xml.dom import Node, minidom
from xml.parsers.expat import ExpatError

from loopprobe.strops import last_index, remove_char

HEADER_INCLUDE = "\n#include <insertFile.h>"
"""Text added to the first element of every instrumented document."""

_LOOP_NAMES = frozenset({"for", "while", "do"})
_UNPARSABLE = "resolveip.c"
_TEXTUAL = (Node.TEXT_NODE, Node.CDATA_SECTION_NODE, Node.COMMENT_NODE)
_SPECIAL_NAMES = {
    Node.TEXT_NODE: "text",
    Node.COMMENT_NODE: "comment",
    Node.CDATA_SECTION_NODE: "cdata",
}


@dataclass
class FunctionBlock:
    """A function definition's name and the element holding its body."""

    name: str
    block: minidom.Element


def _node_name(node: Node) -> str:
    if node.nodeType == Node.ELEMENT_NODE:
        return node.localName or node.tagName
    return _SPECIAL_NAMES.get(node.nodeType, node.nodeName)


def _content(node: Node) -> str:
    if node.nodeType in _TEXTUAL:
        return node.data
    return "".join(
        _content(child)
        for child in node.childNodes
        if child.nodeType in (Node.TEXT_NODE, Node.CDATA_SECTION_NODE, Node.ELEMENT_NODE)
    )


def _set_content(node: Node, value: str) -> None:
    if node.nodeType in _TEXTUAL:
        node.data = value
        return
    while node.firstChild is not None:
        node.removeChild(node.firstChild)
    node.appendChild(node.ownerDocument.createTextNode(value))


def _append_keyword(parent: Node | None, text: str) -> None:
    if parent is None or parent.nodeType != Node.ELEMENT_NODE:
        return
    doc = parent.ownerDocument
    tag = f"{parent.prefix}:keyword" if parent.prefix else "keyword"
    keyword = doc.createElementNS(parent.namespaceURI, tag)
    keyword.appendChild(doc.createTextNode(text))
    parent.appendChild(keyword)


def _skip_text_back(node: Node | None) -> Node | None:
    while node is not None and _node_name(node) == "text":
        node = node.previousSibling
    return node


def _open_counter(loop: Node, count: int) -> None:
    opener = f"\n{{int count{count}=0;"
    before = loop.previousSibling
    if before is not None:
        _set_content(before, _content(before) + opener)
        return

    node = loop
    while node is not None and (
        node.previousSibling is None or _node_name(node.previousSibling) == "text"
    ):
        node = node.parentNode if node.previousSibling is None else node.previousSibling
    if node is None:
        return

    anchor = node.previousSibling
    then = anchor
    while then is not None and _node_name(then) in ("text", "comment"):
        then = then.previousSibling

    if then is not None and _node_name(then) == "then":
        # A loop that directly follows "else": open the counter inside it.
        following = node.nextSibling
        target = following.firstChild if following is not None else None
        if target is not None:
            _set_content(target, _content(target) + opener)
    else:
        _append_keyword(anchor, opener)


def _instrument_loop(block: Node, loop: Node, func_name: str, src_path: str, count: int) -> None:
    if block.getAttribute("type").lower() == "pseudo":
        # Body without braces: wrap it in a pair of its own.
        _append_keyword(block, f"\ncount{count}++;}}")
        if _node_name(loop) == "do":
            before = block.previousSibling
            if before is not None:
                _set_content(before, _content(before) + "\n{")
        else:
            _append_keyword(_skip_text_back(block.previousSibling), "\n{")
    else:
        last = block.lastChild
        anchor = _skip_text_back(last.previousSibling if last is not None else None)
        if anchor is None:
            return
        _append_keyword(anchor, f"\ncount{count}++;")

    _open_counter(loop, count)

    record = src_path[last_index(src_path, "/") + 1:] + ".txt"
    _append_keyword(
        loop,
        f'\ninsert_count((char *)"{record}", (char *)"{src_path}", '
        f'(char *)"{func_name}", {count}, count{count});}}',
    )


def add_header_file(root: Node) -> None:
    """Add the counting header include to the first non-text child of ``root``."""
    for child in root.childNodes:
        if _node_name(child) != "text":
            _append_keyword(child, HEADER_INCLUDE)
            break


def add_loop_count(block: Node, func_name: str, src_path: str, count: int = 0) -> int:
    """Instrument every loop below ``block``, numbering counters after ``count``.

    Inner loops are numbered before the loops that contain them.  Loops with
    an empty body are numbered but left unchanged.  Returns the last number
    used.
    """
    cur = block.firstChild
    while cur is not None:
        count = add_loop_count(cur, func_name, src_path, count)
        loop = cur.parentNode
        if _node_name(cur) == "block" and loop is not None and _node_name(loop) in _LOOP_NAMES:
            count += 1
            _instrument_loop(cur, loop, func_name, src_path, count)
        cur = cur.nextSibling
    return count


def find_functions(root: Node) -> list[FunctionBlock]:
    """List the function definitions directly below ``root``.

    Definitions wrapped in an ``extern`` block count too; those whose name
    is ``__attribute__`` are skipped.
    """
    found: list[FunctionBlock] = []
    for cur in root.childNodes:
        kind = _node_name(cur)
        if kind == "function":
            func = cur
        elif (
            kind == "extern"
            and cur.lastChild is not None
            and _node_name(cur.lastChild) == "function"
        ):
            func = cur.lastChild
        else:
            continue

        func_name = ""
        for child in func.childNodes:
            part = _node_name(child)
            if part == "name":
                text = _content(child)
                if text.lower() == "__attribute__":
                    break
                func_name = remove_char(text, "\n")
            elif part == "block":
                found.append(FunctionBlock(func_name, child))
                break
    return found


def insert_code(file_path: str | os.PathLike[str]) -> bool:
    """Instrument the srcML document at ``file_path`` in place.

    The path is expected to look like ``temp_<source>.xml``; the source path
    recorded by the counters is taken from it.  Documents of
    ``resolveip.c`` are left untouched.  Raises ``ValueError`` when the
    document cannot be parsed.
    """
    path = os.fspath(file_path)
    try:
        doc = minidom.parse(path)
    except ExpatError as exc:
        raise ValueError(f"document {path} not parsed successfully: {exc}") from exc

    try:
        src_path = path[5:-4]
        if _UNPARSABLE in src_path:
            return True

        root = doc.documentElement
        add_header_file(root)
        for function in find_functions(root):
            add_loop_count(function.block, function.name, src_path, 0)

        with open(path, "wb") as handle:
            handle.write(doc.toxml(encoding="UTF-8"))
    finally:
        doc.unlink()
    return True
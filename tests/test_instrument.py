from xml.dom import minidom

import pytest

from loopprobe.instrument import (
    HEADER_INCLUDE,
    FunctionBlock,
    add_header_file,
    add_loop_count,
    find_functions,
    insert_code,
)

NS = "urn:example:srcml"


def _text(node):
    if node.nodeType == node.TEXT_NODE:
        return node.data
    return "".join(_text(child) for child in node.childNodes)


def _wrap(body, name="main"):
    return (
        f'<unit xmlns="{NS}"><function><type><name>int</name></type> <name>{name}</name>'
        f"<parameter_list>()</parameter_list> <block>{body}</block></function>\n</unit>"
    )


def _function_block(xml):
    doc = minidom.parseString(xml)
    functions = find_functions(doc.documentElement)
    return doc, functions[0].block


def _balanced(text):
    return text.count("{") == text.count("}")


BRACED_FOR = (
    "{\n<for>for <control>(;;)</control> <block>{\n"
    "<expr_stmt><expr><name>x</name></expr>;</expr_stmt>\n}</block></for>\n}"
)


def test_add_header_file_targets_first_element():
    doc = minidom.parseString(
        f'<unit xmlns="{NS}">\n<comment>/* c */</comment>\n<function/></unit>'
    )
    add_header_file(doc.documentElement)
    comment = doc.getElementsByTagName("comment")[0]
    keyword = comment.lastChild
    assert keyword.tagName == "keyword"
    assert keyword.firstChild.data == HEADER_INCLUDE
    assert doc.getElementsByTagName("function")[0].firstChild is None


def test_find_functions_names_and_blocks():
    xml = (
        f'<unit xmlns="{NS}">'
        "<function><type><name>int</name></type> <name>alpha</name>"
        "<parameter_list>()</parameter_list> <block>{}</block></function>\n"
        '<extern>extern "C" <function><type><name>void</name></type> <name>be\nta</name>'
        "<parameter_list>()</parameter_list> <block>{ }</block></function></extern>\n"
        "<function><type><name>void</name></type> <name>__attribute__</name>"
        "<block>{}</block></function>\n"
        "<decl_stmt>int x;</decl_stmt></unit>"
    )
    doc = minidom.parseString(xml)
    found = find_functions(doc.documentElement)
    assert [f.name for f in found] == ["alpha", "beta"]
    assert all(isinstance(f, FunctionBlock) for f in found)
    assert [_text(f.block) for f in found] == ["{}", "{ }"]


def test_braced_for_loop_is_instrumented():
    doc, block = _function_block(_wrap(BRACED_FOR))
    assert add_loop_count(block, "main", "dir/a.c", 0) == 1

    text = _text(block)
    assert (
        '\ninsert_count((char *)"a.c.txt", (char *)"dir/a.c", (char *)"main", 1, count1);}'
        in text
    )
    assert (
        text.index("{int count1=0;")
        < text.index("for ")
        < text.index("count1++;")
        < text.index("insert_count(")
    )
    assert _balanced(text)

    stmt = doc.getElementsByTagName("expr_stmt")[0]
    assert stmt.lastChild.tagName == "keyword"
    assert stmt.lastChild.firstChild.data == "\ncount1++;"


def test_count_continues_from_given_value():
    _, block = _function_block(_wrap(BRACED_FOR))
    assert add_loop_count(block, "main", "a.c", 4) == 5
    assert "count5++;" in _text(block)


def test_pseudo_while_gets_braces():
    body = (
        "{\n<while>while <condition>(<expr><name>x</name></expr>)</condition> "
        '<block type="pseudo"><expr_stmt><expr><name>y</name></expr>;</expr_stmt></block>'
        "</while>\n}"
    )
    doc, block = _function_block(_wrap(body))
    assert add_loop_count(block, "main", "w.c", 0) == 1

    condition = doc.getElementsByTagName("condition")[0]
    assert condition.lastChild.firstChild.data == "\n{"
    pseudo = doc.getElementsByTagName("block")[1]
    assert pseudo.lastChild.firstChild.data == "\ncount1++;}"
    text = _text(block)
    assert _balanced(text)
    assert text.index("{int count1=0;") < text.index("while")


def test_pseudo_do_opens_brace_after_keyword():
    body = (
        '{\n<do>do <block type="pseudo"><expr_stmt><expr><name>y</name></expr>;</expr_stmt>'
        "</block> while <condition>(<expr><name>x</name></expr>)</condition>;</do>\n}"
    )
    doc, block = _function_block(_wrap(body))
    assert add_loop_count(block, "main", "d.c", 0) == 1

    pseudo = doc.getElementsByTagName("block")[1]
    assert pseudo.previousSibling.data == "do \n{"
    text = _text(block)
    assert _balanced(text)
    assert text.index("count1++;") < text.index("insert_count(")


def test_empty_loop_is_counted_but_untouched():
    body = "{\n<while>while <condition>(1)</condition> <block>{}</block></while>\n}"
    _, block = _function_block(_wrap(body))
    before = _text(block)
    assert add_loop_count(block, "main", "e.c", 0) == 1
    assert _text(block) == before


def test_nested_loops_number_inner_first():
    body = (
        "{\n<for>for <control>(;;)</control> <block>{\n"
        "<while>while <condition>(1)</condition> <block>{\n"
        "<expr_stmt><expr><name>x</name></expr>;</expr_stmt>\n}</block></while>\n"
        "}</block></for>\n}"
    )
    _, block = _function_block(_wrap(body))
    assert add_loop_count(block, "main", "n.c", 0) == 2

    text = _text(block)
    assert text.index("{int count2=0;") < text.index("for ")
    assert text.index("for ") < text.index("{int count1=0;") < text.index("while")
    assert "count1++;" in text and "count2++;" in text
    assert _balanced(text)


def test_loop_without_previous_sibling_climbs_to_ancestor():
    body = (
        "<for>for <control>(;;)</control> <block>{\n"
        "<expr_stmt><expr><name>x</name></expr>;</expr_stmt>\n}</block></for>"
    )
    doc, block = _function_block(_wrap(body))
    assert add_loop_count(block, "main", "p.c", 0) == 1

    params = doc.getElementsByTagName("parameter_list")[0]
    assert params.lastChild.firstChild.data == "\n{int count1=0;"


def test_loop_right_after_else_opens_inside_else():
    body = (
        "{\n<if>if <condition>(c)</condition><then><expr_stmt>a;</expr_stmt></then> "
        '<else>else<block type="pseudo"><for>for <control>(;;)</control> <block>{\n'
        "<expr_stmt><expr><name>x</name></expr>;</expr_stmt>\n}</block></for></block>"
        "</else></if>\n}"
    )
    doc, block = _function_block(_wrap(body))
    assert add_loop_count(block, "main", "i.c", 0) == 1

    else_node = doc.getElementsByTagName("else")[0]
    assert else_node.firstChild.data == "else\n{int count1=0;"
    assert _balanced(_text(block))


def test_insert_code_rewrites_document(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "temp_prog").mkdir()
    target = tmp_path / "temp_prog" / "a.c.xml"
    target.write_text(_wrap(BRACED_FOR), encoding="utf-8")

    assert insert_code("temp_prog/a.c.xml") is True

    rewritten = minidom.parse(str(target))
    text = _text(rewritten.documentElement)
    assert HEADER_INCLUDE in text
    assert '(char *)"a.c.txt", (char *)"prog/a.c", (char *)"main", 1, count1);}' in text
    assert _balanced(text.replace(HEADER_INCLUDE, ""))


def test_insert_code_skips_resolveip(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "temp_prog").mkdir()
    target = tmp_path / "temp_prog" / "resolveip.c.xml"
    original = _wrap(BRACED_FOR)
    target.write_text(original, encoding="utf-8")

    assert insert_code("temp_prog/resolveip.c.xml") is True
    assert target.read_text(encoding="utf-8") == original


def test_insert_code_rejects_malformed_xml(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "temp_prog").mkdir()
    (tmp_path / "temp_prog" / "bad.c.xml").write_text("<unit><function>", encoding="utf-8")
    with pytest.raises(ValueError):
        insert_code("temp_prog/bad.c.xml")
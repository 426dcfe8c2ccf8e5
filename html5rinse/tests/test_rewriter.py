# SPDX-FileCopyrightText: 2021 html5rinse contributors. See AUTHORS.rst
#
# SPDX-License-Identifier: MIT

import io

import pytest

from html5rinse.constants import AmbiguousParseError, SinkError
from html5rinse.rewriter import Rewriter


def rewrite(html, **handlers):
    output = []
    rewriter = Rewriter(output.append, **handlers)
    rewriter.tokenize(io.StringIO(html))
    rewriter.end_document()
    return "".join(output)


def test_no_handlers():
    html = "<b class=\"x\">a &amp; b</b><!--c--><br/>"
    assert rewrite(html) == "<b class=\"x\">a &amp; b</b><!--c--><br />"


def test_doctype_dropped():
    assert rewrite("<!doctype html>x") == "x"


def test_eof_inside_tag_drops_it():
    assert rewrite("hello <b") == "hello "


def test_remove_with_content():
    def element_handler(element):
        if element.name == "div":
            element.remove()

    assert rewrite("a<div><p>x<div>y</div>z</p></div>b",
                   element_handler=element_handler) == "ab"


def test_remove_and_keep_content():
    def element_handler(element):
        if element.name == "font":
            element.remove_and_keep_content()

    assert rewrite("<font><b>x</b></font>",
                   element_handler=element_handler) == "<b>x</b>"


def test_implicit_pop_skips_inner_handlers():
    closed = []

    def element_handler(element):
        if element.end_tag_handlers is not None:
            element.end_tag_handlers.append(lambda end: closed.append(end.name))

    assert rewrite("<b><i>x</b>y</i>", element_handler=element_handler) == "<b><i>x</b>y"
    assert closed == ["b"]


def test_implicit_pop_ends_removal():
    def element_handler(element):
        if element.name == "x-hidden":
            element.remove()

    assert rewrite("<p><x-hidden>secret</p>shown",
                   element_handler=element_handler) == "<p></p>shown"


def test_replace_tags():
    def element_handler(element):
        if element.name == "b":
            element.replace("<strong>")
            element.end_tag_handlers.append(lambda end: end.replace("</strong>"))

    assert rewrite("<b>x</b>", element_handler=element_handler) == "<strong>x</strong>"


def test_stray_end_tag_handler():
    def stray_end_tag_handler(end):
        end.replace("</%s>" % end.name, as_text=True)

    assert rewrite("</p>x", stray_end_tag_handler=stray_end_tag_handler) == (
        "&lt;&#47;p&gt;x")
    assert rewrite("</p>x") == "x"


def test_text_and_comment_handlers():
    def text_handler(chunk):
        chunk.replace(chunk.data.upper(), as_text=True)

    def comment_handler(comment):
        comment.replace("<!--%s-->" % comment.data.strip())

    assert rewrite("a<i>b</i><!-- c -->", text_handler=text_handler,
                   comment_handler=comment_handler) == "A<i>B</i><!--c-->"


def test_end_handler():
    def end_handler(document_end):
        document_end.append("</b>")
        document_end.append("<done>", as_text=True)

    assert rewrite("<b>x", end_handler=end_handler) == "<b>x</b>&lt;done&gt;"


def test_rcdata_and_rawtext():
    assert rewrite("<title><b>x</b></title>") == "<title>&lt;b&gt;x&lt;&#47;b&gt;</title>"
    assert rewrite("<xmp><i></i></xmp>") == "<xmp>&lt;i&gt;&lt;&#47;i&gt;</xmp>"


def test_removed_script_content_not_parsed():
    def element_handler(element):
        if element.name == "script":
            element.remove()

    assert rewrite("<script>a = '<b>';</script>c",
                   element_handler=element_handler) == "c"


def test_foreign_content_keeps_data_state():
    assert rewrite("<svg><style><b>x</b></style></svg>") == (
        "<svg><style><b>x</b></style></svg>")


def test_select_ambiguity():
    with pytest.raises(AmbiguousParseError):
        rewrite("<select><textarea>")
    with pytest.raises(AmbiguousParseError):
        rewrite("<select><b><style>")
    assert rewrite("<select></select><textarea><b></textarea>") == (
        "<select></select><textarea>&lt;b&gt;</textarea>")


def test_sink_error():
    def sink(data):
        raise IOError("closed")

    rewriter = Rewriter(sink)
    with pytest.raises(SinkError) as exc_info:
        rewriter.tokenize(io.StringIO("x"))
    assert isinstance(exc_info.value.__cause__, IOError)


def test_open_elements_tracked():
    rewriter = Rewriter(lambda data: None)
    rewriter.tokenize(io.StringIO("<div><p><br>"))
    assert [element.name for element in rewriter.open_elements] == ["div", "p"]


def test_attribute_mutation():
    def element_handler(element):
        if element.has_attribute("data-x"):
            element.remove_attribute("data-x")
            element.set_attribute("data-y", element.get_attribute("id") or "")

    assert rewrite("<p id=\"a\" data-x=\"1\">x</p><p data-x=\"2\">",
                   element_handler=element_handler) == (
        "<p id=\"a\" data-y=\"a\">x</p><p data-y=\"\">")

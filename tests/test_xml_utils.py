"""
Tests for XML loading, serialization and element helpers.

Run with: pytest tests/test_xml_utils.py -v
"""

import pytest
from lxml import etree

from conftest import wrap
from inspire_bpmn_fixer.errors import ParseError, WriteError
from inspire_bpmn_fixer.xml.utils import (
    UNDECLARED_NAMESPACE_BASE,
    attribute_qname,
    declared_namespaces,
    first_child_text,
    get_attribute,
    get_element_path,
    has_child_nodes,
    is_attached,
    iter_elements,
    load_document,
    load_file,
    qualified_name,
    remove_attribute,
    serialize_document,
    set_attribute,
    set_text_content,
    write_document,
)

BPMN2 = "{http://www.omg.org/spec/BPMN/20100524/MODEL}"


def first(body):
    """Parse wrapped markup and return the first child of the root."""
    return load_document(wrap(body)).getroot()[0]


class TestLoadDocument:
    """Document loader."""

    def test_returns_tree_with_single_root(self):
        tree = load_document(wrap("<bpmn2:process id='p'/>"))
        assert qualified_name(tree.getroot()) == "bpmn2:definitions"

    @pytest.mark.parametrize("data", [b"", b"<a>", b"<a></b>", b"not xml"])
    def test_malformed_bytes_raise_parse_error(self, data):
        with pytest.raises(ParseError):
            load_document(data, "broken.bpmn")

    def test_error_names_source(self):
        with pytest.raises(ParseError, match="broken.bpmn"):
            load_document(b"<a>", "broken.bpmn")

    def test_cdata_is_kept(self):
        tree = load_document(b"<a><![CDATA[x < y]]></a>")
        assert b"<![CDATA[x < y]]>" in serialize_document(tree)

    def test_load_file_missing(self, tmp_path):
        with pytest.raises(ParseError) as exc_info:
            load_file(tmp_path / "missing.bpmn")
        assert exc_info.value.path == tmp_path / "missing.bpmn"

    def test_load_file_malformed_sets_path(self, tmp_path):
        path = tmp_path / "bad.bpmn"
        path.write_bytes(b"<a>")
        with pytest.raises(ParseError) as exc_info:
            load_file(path)
        assert exc_info.value.path == path

    def test_undeclared_prefixes_are_declared(self):
        tree = load_document(
            b'<bpmn2:conditionExpression xsi:type="inspire:Rule" id="1" expression="${x&gt;0}"/>'
        )
        root = tree.getroot()
        assert qualified_name(root) == "bpmn2:conditionExpression"
        assert root.tag == f"{BPMN2}conditionExpression"
        assert get_attribute(root, "xsi:type") == "inspire:Rule"
        assert get_attribute(root, "expression") == "${x>0}"
        assert root.nsmap["xsi"] == "http://www.w3.org/2001/XMLSchema-instance"

    def test_unknown_undeclared_prefix_gets_placeholder(self):
        root = load_document(b'<custom:task id="1"/>').getroot()
        assert root.nsmap["custom"] == UNDECLARED_NAMESPACE_BASE + "custom"
        assert qualified_name(root) == "custom:task"

    def test_declared_prefixes_are_kept_when_others_are_missing(self):
        data = (
            b'<bpmn2:definitions xmlns:bpmn2="http://www.omg.org/spec/BPMN/20100524/MODEL">'
            b'<bpmn2:timeDuration xsi:type="inspire:StringExpression"/></bpmn2:definitions>'
        )
        root = load_document(data).getroot()
        child = root[0]
        assert qualified_name(child) == "bpmn2:timeDuration"
        assert get_attribute(child, "xsi:type") == "inspire:StringExpression"

    def test_comments_around_recovered_root_are_kept(self):
        tree = load_document(b'<!--head--><bpmn2:process id="p"/><!--tail-->')
        output = serialize_document(tree)
        assert b"<!--head-->" in output
        assert b"<!--tail-->" in output
        assert b'xmlns:bpmn2="http://www.omg.org/spec/BPMN/20100524/MODEL"' in output

    def test_undeclared_prefix_with_syntax_error_still_fails(self):
        with pytest.raises(ParseError):
            load_document(b"<bpmn2:process><bpmn2:task></bpmn2:process>")

    def test_external_entities_are_not_resolved(self, tmp_path):
        secret = tmp_path / "secret.txt"
        secret.write_text("top-secret")
        data = f'<!DOCTYPE a [<!ENTITY e SYSTEM "{secret.as_uri()}">]><a>&e;</a>'.encode()

        output = serialize_document(load_document(data))
        assert b"top-secret" not in output
        assert b"&e;" in output


class TestSerializeDocument:
    """Serializer output options."""

    def test_declaration_and_no_indentation(self):
        tree = load_document(b"<a><b>1</b><c/></a>")
        assert serialize_document(tree) == b"<?xml version='1.0' encoding='UTF-8'?>\n<a><b>1</b><c/></a>"

    def test_standalone_is_preserved(self):
        tree = load_document(b'<?xml version="1.0" encoding="UTF-8" standalone="no"?><a/>')
        assert b"standalone='no'" in serialize_document(tree)

    def test_write_document_overwrites(self, tmp_path):
        path = tmp_path / "out.bpmn"
        path.write_bytes(b"old")
        write_document(load_document(b"<a/>"), path)
        assert path.read_bytes().endswith(b"<a/>")

    def test_write_document_failure(self, tmp_path):
        with pytest.raises(WriteError):
            write_document(load_document(b"<a/>"), tmp_path / "missing" / "out.bpmn")


class TestQualifiedNames:
    """Tag and attribute names as written in the document."""

    def test_prefixed_tag(self):
        assert qualified_name(first("<bpmn2:incoming>x</bpmn2:incoming>")) == "bpmn2:incoming"

    def test_unprefixed_tag(self):
        root = load_document(b'<definitions xmlns="http://www.omg.org/spec/BPMN/20100524/MODEL"/>').getroot()
        assert qualified_name(root) == "definitions"

    def test_attribute_qname(self):
        element = first('<bpmn2:task id="t" xsi:type="x"/>')
        names = {attribute_qname(element, key) for key in element.attrib}
        assert names == {"id", "xsi:type"}

    def test_get_attribute_absent_vs_empty(self):
        element = first('<bpmn2:task id="" xsi:type="x"/>')
        assert get_attribute(element, "id") == ""
        assert get_attribute(element, "name") is None
        assert get_attribute(element, "xsi:type") == "x"
        assert get_attribute(element, "undeclared:type") is None

    def test_set_and_remove_attribute(self):
        element = first('<bpmn2:task id="t" xsi:type="x"/>')
        set_attribute(element, "xsi:type", "y")
        assert element.get("{http://www.w3.org/2001/XMLSchema-instance}type") == "y"
        assert remove_attribute(element, "id") is True
        assert remove_attribute(element, "id") is False
        with pytest.raises(KeyError):
            set_attribute(element, "undeclared:type", "z")

    def test_declared_namespaces(self):
        root = load_document(wrap(
            '<bpmn2:task xmlns:camunda="http://camunda.org/schema/1.0/bpmn"/>'
            '<bpmn2:incoming>1</bpmn2:incoming>'
        )).getroot()
        assert declared_namespaces(root[0]) == {"camunda": "http://camunda.org/schema/1.0/bpmn"}
        assert declared_namespaces(root[1]) == {}
        assert "bpmn2" in declared_namespaces(root)


class TestTextContent:
    """Child node inspection and replacement."""

    def test_has_child_nodes(self):
        assert has_child_nodes(first("<bpmn2:a>x</bpmn2:a>"))
        assert has_child_nodes(first("<bpmn2:a><bpmn2:b/></bpmn2:a>"))
        assert has_child_nodes(first("<bpmn2:a><!-- c --></bpmn2:a>"))
        assert not has_child_nodes(first("<bpmn2:a/>"))

    def test_first_child_text(self):
        assert first_child_text(first("<bpmn2:a>x<bpmn2:b>y</bpmn2:b></bpmn2:a>")) == "x"
        assert first_child_text(first("<bpmn2:a><bpmn2:b>y<bpmn2:c>z</bpmn2:c></bpmn2:b>w</bpmn2:a>")) == "yz"
        assert first_child_text(first("<bpmn2:a><!--c--><bpmn2:b>y</bpmn2:b></bpmn2:a>")) == "c"
        assert first_child_text(first("<bpmn2:a/>")) == ""

    def test_set_text_content_replaces_children(self):
        element = first("<bpmn2:a>x<bpmn2:b>y</bpmn2:b>tail</bpmn2:a>")
        set_text_content(element, "new")
        assert etree.tostring(element, with_tail=False).endswith(b">new</bpmn2:a>")
        assert len(element) == 0


class TestTreeWalk:
    """Element iteration helpers."""

    def test_iter_elements_skips_comments(self):
        root = load_document(b"<a><!-- c --><b/><?pi x?><c/></a>").getroot()
        assert [e.tag for e in iter_elements(root)] == ["a", "b", "c"]

    def test_is_attached(self):
        root = load_document(b"<a><b><c/></b></a>").getroot()
        b = root[0]
        c = b[0]
        assert is_attached(c, root)
        root.remove(b)
        assert not is_attached(c, root)

    def test_get_element_path(self):
        root = load_document(b"<a><b/><b><c/></b></a>").getroot()
        assert get_element_path(root[1][0]) == "/a/b[2]/c[1]"

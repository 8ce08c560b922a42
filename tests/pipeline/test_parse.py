"""Tests for the lxml parse stage."""

import pytest

from xmlrules.config import ParseSettings
from xmlrules.models.node import NodeKind, XmlNode
from xmlrules.pipeline.parse import LxmlNode, LxmlText, parse_bytes, parse_file, parse_string

from tests.conftest import build_xml, namespaced_xml


def _element_children(node: XmlNode) -> list[XmlNode]:
    return [child for child in node.children if child.kind is not NodeKind.TEXT]


class TestLxmlNode:
    """Tests for the lxml adapter."""

    def test_root_element(self):
        root = parse_file(build_xml)

        assert isinstance(root, XmlNode)
        assert root.kind is NodeKind.ELEMENT
        assert root.name == "project"
        assert dict(root.attributes) == {"name": "demo", "default": "dist", "basedir": "."}

    def test_children_kinds_in_document_order(self):
        root = parse_file(build_xml)

        kinds = [(child.kind, child.name) for child in _element_children(root)]
        assert kinds == [
            (NodeKind.ELEMENT, "description"),
            (NodeKind.COMMENT, "#comment"),
            (NodeKind.ELEMENT, "property"),
            (NodeKind.COMMENT, "#comment"),
            (NodeKind.ELEMENT, "property"),
            (NodeKind.COMMENT, "#comment"),
            (NodeKind.ELEMENT, "property"),
            (NodeKind.ELEMENT, "target"),
        ]

    def test_comment_text_is_unmodified(self):
        root = parse_string("<a><!-- note --></a>")
        comment = root.children[0]

        assert comment.kind is NodeKind.COMMENT
        assert comment.text_content == " note "
        assert comment.attributes == {}
        assert comment.children == ()

    def test_text_runs_become_text_children(self):
        root = parse_string("<p>Hello <b>bold</b> world</p>")

        assert [(child.kind, child.text_content) for child in root.children] == [
            (NodeKind.TEXT, "Hello "),
            (NodeKind.ELEMENT, "bold"),
            (NodeKind.TEXT, " world"),
        ]
        assert isinstance(root.children[0], LxmlText)
        assert root.children[0].name == "#text"

    def test_text_content_skips_comments_and_instructions(self):
        root = parse_string("<p>a<!--x-->b<?pi y?>c<i>d<!--z--></i>e</p>")
        assert root.text_content == "abcde"

    def test_empty_element(self):
        root = parse_string("<empty/>")
        assert root.text_content == ""
        assert root.children == []
        assert root.attributes == {}

    def test_namespace_prefixes_are_kept(self):
        root = parse_file(namespaced_xml)

        assert root.name == "ant:project"
        assert dict(root.attributes) == {
            "xmlns:ant": "urn:example:ant",
            "xmlns": "urn:example:default",
            "ant:name": "ns-demo",
            "xml:lang": "en",
        }

        target, instruction, plain = _element_children(root)
        assert target.name == "ant:target"
        assert target.attributes == {"name": "compile"}
        assert target.text_content == "Compile all sources"
        assert plain.name == "plain"

    def test_prefix_follows_the_source(self):
        root = parse_string('<r xmlns="urn:x" xmlns:p="urn:x"><c/><p:c/></r>')

        assert root.attributes == {"xmlns": "urn:x", "xmlns:p": "urn:x"}
        assert [child.name for child in root.children] == ["c", "p:c"]

    def test_namespace_declarations_belong_to_declaring_element(self):
        root = parse_string('<a xmlns:p="urn:1"><b xmlns:p="urn:2"/><c/></a>')
        b, c = root.children

        assert b.attributes == {"xmlns:p": "urn:2"}
        assert c.attributes == {}

    def test_text_content_of_deep_document(self):
        depth = 1500
        source = b"<a>" * depth + b"x" + b"</a>" * depth
        root = parse_bytes(source, ParseSettings(huge_tree=True))

        assert root.text_content == "x"

    def test_processing_instruction_is_other(self):
        root = parse_file(namespaced_xml)
        instruction = _element_children(root)[1]

        assert instruction.kind is NodeKind.OTHER
        assert instruction.name == "build-hint"
        assert instruction.text_content == "fast"

    def test_wrapped_element_is_available(self):
        root = parse_string("<a><!--doc--><b/></a>")
        comment = root.children[0]

        assert isinstance(comment, LxmlNode)
        assert comment.element.getnext().tag == "b"

    def test_repr(self):
        root = parse_string("<a>x</a>")
        assert repr(root) == "LxmlNode(element 'a')"
        assert repr(root.children[0]) == "LxmlText('x')"


class TestParseFunctions:
    """Tests for document loading."""

    def test_parse_bytes_honours_declared_encoding(self):
        root = parse_bytes('<?xml version="1.0" encoding="ISO-8859-1"?><a>caf\xe9</a>'.encode("latin-1"))
        assert root.text_content == "caf\xe9"

    def test_parse_string_with_utf8_declaration(self):
        root = parse_string('<?xml version="1.0" encoding="UTF-8"?><a>été</a>')
        assert root.text_content == "été"

    def test_remove_blank_text(self):
        source = "<a>\n  <b/>\n</a>"

        assert len(parse_string(source).children) == 3
        assert len(parse_string(source, ParseSettings(remove_blank_text=True)).children) == 1

    def test_entities_are_not_resolved(self, tmp_path):
        secret = tmp_path / "secret.txt"
        secret.write_text("top secret")
        source = (
            f'<!DOCTYPE a [<!ENTITY leak SYSTEM "file://{secret}">]>'
            "<a>&leak;</a>"
        )

        root = parse_string(source)

        assert "top secret" not in root.text_content

    def test_malformed_document(self):
        with pytest.raises(RuntimeError, match="Failed to parse <string>"):
            parse_string("<a><b></a>")

    def test_malformed_file(self, tmp_path):
        broken = tmp_path / "broken.xml"
        broken.write_text("<a>")

        with pytest.raises(RuntimeError, match="broken.xml"):
            parse_file(broken)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ValueError, match="Failed to read file"):
            parse_file(tmp_path / "missing.xml")

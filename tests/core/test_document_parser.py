# tests/core/test_document_parser.py
import pytest

from descriptor.services.document_parse_service import DocumentParseService

MODULE_XML = b"""<?xml version="1.0"?>
<module name="foo" version="2">
    <GroupOwner>os</GroupOwner>
    <classification>Driver</classification>
    <description>first<br/>second</description>
    <contents>
        <component id="a"/>
        <component id="b"/>
    </contents>
</module>
"""


@pytest.fixture
def parser():
    return DocumentParseService()


def test_parse_builds_tree_in_document_order(parser):
    result = parser.parse_bytes(MODULE_XML, "module.tmpl")

    assert result.ok
    root = result.document.root
    assert root.name == "module"
    assert root.attributes == {"name": "foo", "version": "2"}
    assert [c.name for c in root.children] == ["GroupOwner", "classification", "description", "contents"]
    assert root.child("GroupOwner").text == "os"
    assert [c.attributes["id"] for c in root.child("contents").children] == ["a", "b"]


def test_first_text_run_wins(parser):
    """Text after a child element never replaces the text before it."""
    result = parser.parse_bytes(MODULE_XML)
    assert result.document.root.child("description").text == "first"


def test_text_after_child_used_when_leading_text_is_blank(parser):
    result = parser.parse_bytes(b"<a>   <b/>  tail text  </a>")
    assert result.document.root.text == "tail text"


def test_whitespace_only_element_has_no_text(parser):
    result = parser.parse_bytes(b"<a>\n    \n</a>")
    assert result.document.root.text is None


def test_namespaces_are_stripped(parser):
    xml = b'<m:module xmlns:m="urn:x" m:name="foo"><m:type>lib</m:type></m:module>'
    root = parser.parse_bytes(xml).document.root
    assert root.name == "module"
    assert root.attributes == {"name": "foo"}
    assert root.children[0].name == "type"


def test_root_tag_captures_first_matching_subtree():
    parser = DocumentParseService(root_tag="module")
    xml = b"<wrapper><other>x</other><module name='m1'><type>t</type></module><module name='m2'/></wrapper>"
    root = parser.parse_bytes(xml).document.root
    assert root.attributes["name"] == "m1"
    assert [c.name for c in root.children] == ["type"]


def test_no_matching_root_gives_empty_document():
    parser = DocumentParseService(root_tag="module")
    result = parser.parse_bytes(b"<package><name>x</name></package>")
    assert result.ok
    assert result.document.root is None


def test_malformed_input_is_a_syntax_error(parser):
    result = parser.parse_bytes(b"<module><type>lib</module>", "broken.tmpl")

    assert not result.ok
    assert result.document is None
    assert result.error.kind == "syntax"
    assert result.error.line == 1
    assert result.error.describe().startswith("broken.tmpl: ")


def test_truncated_input_is_a_syntax_error(parser):
    result = parser.parse_bytes(MODULE_XML[: len(MODULE_XML) // 2])
    assert result.error is not None
    assert result.error.kind == "syntax"


def test_empty_input_is_a_syntax_error(parser):
    result = parser.parse_bytes(b"")
    assert result.error is not None
    assert result.error.kind == "syntax"


def test_dtd_is_rejected_by_default(parser):
    xml = b'<?xml version="1.0"?><!DOCTYPE module [<!ELEMENT module ANY>]><module name="x"/>'
    result = parser.parse_bytes(xml)
    assert result.error is not None
    assert result.error.kind == "syntax"
    assert "Forbidden construct" in result.error.message


def test_dtd_allowed_when_configured():
    parser = DocumentParseService(forbid_dtd=False)
    xml = b'<?xml version="1.0"?><!DOCTYPE module [<!ELEMENT module ANY>]><module name="x"/>'
    result = parser.parse_bytes(xml)
    assert result.ok
    assert result.document.root.attributes["name"] == "x"


def test_missing_file_is_an_io_error(parser, tmp_path):
    result = parser.parse_file(tmp_path / "does_not_exist.tmpl")
    assert result.error is not None
    assert result.error.kind == "io"
    assert "Could not open file" in result.error.message


def test_parse_file_reads_from_disk(parser, tmp_path):
    path = tmp_path / "module.tmpl"
    path.write_bytes(MODULE_XML)
    result = parser.parse_file(path)
    assert result.ok
    assert result.document.source == str(path)
